import logging
from contextlib import asynccontextmanager
from dataclasses import replace

from fastapi import Depends, FastAPI, UploadFile, File, HTTPException

from .csvparse import UNDEFINED, CSVParser, ParseOptions, ParseResult
from .layout import build_card
from .logging import setup_logging
from .models import (
    CardsResponse,
    ContactsResponse,
    HealthResponse,
    ParseResponse,
    ParseSummary,
    WarningItem,
)
from .normalize import decode_text, normalize
from .settings import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    setup_logging()
    yield


settings = get_settings()
app = FastAPI(
    title=settings.app_name,
    description="Business card data from semicolon-delimited contact lists",
    version=settings.app_version,
    lifespan=lifespan,
)


async def _parse_upload(file: UploadFile, options: ParseOptions) -> tuple[ParseResult, str]:
    if not file.filename or not file.filename.lower().endswith(".csv"):
        raise HTTPException(status_code=422, detail="Only CSV files are supported")

    raw = await file.read()
    text, encoding = decode_text(raw)

    result = CSVParser(options, get_settings().csv_delimiter).parse(text)
    if not result.ok:
        raise HTTPException(status_code=422, detail=result.error.to_dict())
    return result, encoding


def _summary(result: ParseResult, encoding: str, records: int) -> ParseSummary:
    return ParseSummary(
        records=records,
        columns=len(result.records[0]) if result.records else None,
        warnings=len(result.warnings),
        encoding=encoding,
    )


def _warnings(result: ParseResult) -> list[WarningItem]:
    return [WarningItem(kind=w.kind.value, offset=w.offset, context=w.context) for w in result.warnings]


def _text_options(options: ParseOptions) -> ParseOptions:
    # contact fields are strings; type detection would turn phones into numbers
    return replace(options, detect_types=False)


@app.get("/health", response_model=HealthResponse)
def health():
    return {"ok": True}


@app.post("/parse", response_model=ParseResponse)
async def parse_csv(file: UploadFile = File(...), options: ParseOptions = Depends()):
    result, encoding = await _parse_upload(file, options)
    records = [[None if v is UNDEFINED else v for v in record] for record in result.records]
    return ParseResponse(
        summary=_summary(result, encoding, len(records)),
        records=records,
        warnings=_warnings(result),
    )


@app.post("/contacts", response_model=ContactsResponse)
async def contacts_csv(file: UploadFile = File(...), options: ParseOptions = Depends()):
    result, encoding = await _parse_upload(file, _text_options(options))
    contacts = normalize(result.records, get_settings().website_domain)
    logger.info("Normalized %d contacts", len(contacts))
    return ContactsResponse(
        summary=_summary(result, encoding, len(contacts)),
        contacts=contacts,
        warnings=_warnings(result),
    )


@app.post("/cards", response_model=CardsResponse)
async def cards_csv(file: UploadFile = File(...), options: ParseOptions = Depends()):
    result, encoding = await _parse_upload(file, _text_options(options))
    cards = [build_card(c) for c in normalize(result.records, get_settings().website_domain)]
    return CardsResponse(
        summary=_summary(result, encoding, len(cards)),
        cards=cards,
        warnings=_warnings(result),
    )
