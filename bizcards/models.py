from __future__ import annotations

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class ContactRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    surname: str = ""
    firstname: str = ""
    fathername: str = ""
    duty: str = ""
    address: str = ""
    phones: str = ""
    email: str = ""
    skype: str = ""
    website: str = ""


class CardLayout(BaseModel):
    model_config = ConfigDict(frozen=True)

    file_stem: str
    frames: Dict[str, str] = Field(default_factory=dict)
    right_aligned: List[str] = Field(default_factory=list)


class PDFExportOptions(BaseModel):
    """Fixed print-shop settings for the PDF half of the batch export."""

    model_config = ConfigDict(frozen=True)

    acrobat_layers: bool = True
    color_bars: bool = False
    compress_art: bool = True
    embed_icc_profile: bool = True
    enable_plain_text: bool = True
    generate_thumbnails: bool = True
    optimization: bool = True
    page_information: bool = False
    trim_marks: bool = True  # required by the print shop
    offset: int = 12  # trim mark offset, about 4mm


class WarningItem(BaseModel):
    kind: str
    offset: int
    context: str


class ParseSummary(BaseModel):
    records: int = 0
    columns: Optional[int] = Field(default=None, examples=[7])
    warnings: int = 0
    encoding: Optional[str] = None


class ParseResponse(BaseModel):
    summary: ParseSummary
    records: List[List[Any]] = Field(default_factory=list)
    warnings: List[WarningItem] = Field(default_factory=list)


class ContactsResponse(BaseModel):
    summary: ParseSummary
    contacts: List[ContactRecord] = Field(default_factory=list)
    warnings: List[WarningItem] = Field(default_factory=list)


class CardsResponse(BaseModel):
    summary: ParseSummary
    cards: List[CardLayout] = Field(default_factory=list)
    warnings: List[WarningItem] = Field(default_factory=list)


class HealthResponse(BaseModel):
    ok: bool = True
