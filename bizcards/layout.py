"""Card layout and export glue.

Turns a ContactRecord into the text of the template's named frames and
drives the host drawing application through two small protocols:

- ``CardRenderer``: the open card template. Frames are filled per contact
  and the result saved as ``{dest_dir}/{surname}.eps``.
- ``OpenDocument``: an already rendered card. The batch step saves it as
  PDF, converts its text to outlines and saves ``{stem} кривые.eps``.

The host object model itself stays outside this package.
"""
from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Literal, Protocol

from .models import CardLayout, ContactRecord, PDFExportOptions
from .rules import (
    FRAME_ADDRESS,
    FRAME_CONTACTS,
    FRAME_DUTY,
    FRAME_FULL_NAME,
    OUTLINED_SUFFIX,
    PARAGRAPH_BREAK,
)

logger = logging.getLogger(__name__)

_MANIFEST_COLUMNS = ["surname", "filename", "status", "error"]


# ---------------------------------------------------------------------------
# Host collaborators
# ---------------------------------------------------------------------------

class CardRenderer(Protocol):
    def fill(self, frames: dict[str, str]) -> None: ...

    def right_align(self, frame: str) -> None: ...

    def save_eps(self, path: Path) -> None: ...

    def reopen_template(self) -> None: ...


class OpenDocument(Protocol):
    path: Path

    def save_pdf(self, path: Path, options: PDFExportOptions) -> None: ...

    def outline_text(self) -> None: ...

    def save_eps(self, path: Path) -> None: ...

    def close(self) -> None: ...


# ---------------------------------------------------------------------------
# RenderManifestEntry
# ---------------------------------------------------------------------------

@dataclass
class RenderManifestEntry:
    """Record of a single card rendering attempt."""

    surname: str
    filename: str
    status: Literal["RENDERED", "FAILED", "SKIPPED"]
    error: str | None = None


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------

def build_card(contact: ContactRecord) -> CardLayout:
    full_name = contact.surname.upper() + PARAGRAPH_BREAK + f"{contact.firstname} {contact.fathername}"
    contacts = contact.website + PARAGRAPH_BREAK + contact.email
    if contact.skype:
        contacts += f"{PARAGRAPH_BREAK}Skype: {contact.skype}"

    return CardLayout(
        file_stem=contact.surname,
        frames={
            FRAME_FULL_NAME: full_name,
            FRAME_DUTY: contact.duty,
            FRAME_ADDRESS: contact.address + PARAGRAPH_BREAK + contact.phones,
            FRAME_CONTACTS: contacts,
        },
        right_aligned=[FRAME_CONTACTS],
    )


def _is_safe_stem(stem: str) -> bool:
    # surnames come from the CSV; the card must land directly in dest_dir
    return stem not in (".", "..") and "\\" not in stem and Path(stem).name == stem


def _unique_filename(stem: str, used: dict[str, int]) -> str:
    """Namesakes get ``Иванов (2).eps``, ``Иванов (3).eps`` and so on."""
    count = used.get(stem, 0) + 1
    used[stem] = count
    if count == 1:
        return f"{stem}.eps"
    return f"{stem} ({count}).eps"


def render_cards(
    contacts: Iterable[ContactRecord],
    renderer: CardRenderer,
    dest_dir: str | Path,
) -> list[RenderManifestEntry]:
    """Fill the template once per contact and save each card as EPS."""
    dest = Path(dest_dir)
    entries: list[RenderManifestEntry] = []
    used_stems: dict[str, int] = {}
    saved = 0

    for contact in contacts:
        if not contact.surname:
            logger.info("Contact without surname, skipping card")
            entries.append(RenderManifestEntry(surname="", filename="", status="SKIPPED"))
            continue

        card = build_card(contact)
        if not _is_safe_stem(card.file_stem):
            logger.warning("Card %d has a surname unusable as a file name, skipping", len(entries) + 1)
            entries.append(
                RenderManifestEntry(
                    surname=contact.surname,
                    filename="",
                    status="SKIPPED",
                    error="surname is not a plain file name",
                )
            )
            continue

        filename = _unique_filename(card.file_stem, used_stems)
        try:
            # "save as" leaves the saved copy open; start from the template again
            if saved:
                renderer.reopen_template()
            renderer.fill(card.frames)
            for frame in card.right_aligned:
                renderer.right_align(frame)
            renderer.save_eps(dest / filename)
            saved += 1
        except Exception as exc:
            logger.error("Failed to render card %d: %s", len(entries) + 1, exc)
            entries.append(
                RenderManifestEntry(
                    surname=contact.surname,
                    filename=filename,
                    status="FAILED",
                    error=str(exc),
                )
            )
            continue

        entries.append(
            RenderManifestEntry(surname=contact.surname, filename=filename, status="RENDERED")
        )

    logger.info("Rendered %d of %d cards", saved, len(entries))
    return entries


def write_manifest(entries: list[RenderManifestEntry], path: str | Path) -> Path:
    """Write manifest CSV and return its path."""
    manifest_path = Path(path)
    with open(manifest_path, "w", newline="", encoding="utf-8") as fh:
        writer = csv.DictWriter(fh, fieldnames=_MANIFEST_COLUMNS)
        writer.writeheader()
        for e in entries:
            writer.writerow({
                "surname": e.surname,
                "filename": e.filename,
                "status": e.status,
                "error": e.error or "",
            })
    return manifest_path


# ---------------------------------------------------------------------------
# Batch export
# ---------------------------------------------------------------------------

def export_outlined(
    documents: Iterable[OpenDocument],
    options: PDFExportOptions | None = None,
) -> list[Path]:
    """Save every open card as PDF, then as outlined EPS, and close it.

    The document's own extension is dropped before naming the outputs:
    ``Иванов.eps`` yields ``Иванов.pdf`` and ``Иванов кривые.eps``, not
    ``Иванов.eps.pdf``.
    """
    options = options or PDFExportOptions()
    written: list[Path] = []

    for doc in documents:
        stem = doc.path.with_suffix("")
        pdf_path = stem.with_name(stem.name + ".pdf")
        eps_path = stem.with_name(stem.name + OUTLINED_SUFFIX + ".eps")

        doc.save_pdf(pdf_path, options)
        doc.outline_text()
        doc.save_eps(eps_path)
        doc.close()

        written.extend([pdf_path, eps_path])

    logger.info("Exported %d documents", len(written) // 2)
    return written
