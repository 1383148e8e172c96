"""
Contact normalization: parsed CSV records -> ContactRecord.

Responsibilities:
- encoding detection of uploaded bytes
- record length enforcement (pad / truncate to RECORD_LENGTH)
- whitespace cleanup, name splitting, capitalization
- punctuation and phone number reformatting
- website derivation from the city table

Nothing in here raises on bad contact data; odd values pass through
with best-effort formatting.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, List, Optional, Sequence, Tuple

from charset_normalizer import from_bytes

from .csvparse import UNDEFINED, ParseOptions, Scalar, parse
from .models import ContactRecord
from .rules import CITY_CODES, DEFAULT_DELIMITER, RECORD_LENGTH, WEBSITE_DOMAIN

logger = logging.getLogger(__name__)

_UTF8_BOM = b"\xef\xbb\xbf"


def decode_text(raw: bytes) -> Tuple[str, str]:
    """
    Decode uploaded bytes to text.

    Rules:
    - Detect encoding best-effort via charset-normalizer.
    - A UTF-8 BOM is consumed, never returned as text.
    - If decoding with the guess fails, fall back to UTF-8 with
      replacement characters so the pipeline can continue.
    """
    match = from_bytes(raw).best()
    decode_used = match.encoding if match is not None else "utf-8"

    if raw.startswith(_UTF8_BOM) and decode_used.lower().replace("-", "_") in ("utf_8", "utf8"):
        decode_used = "utf-8-sig"

    try:
        text = raw.decode(decode_used)
    except (UnicodeDecodeError, LookupError):
        logger.warning("decode with %s failed, falling back to utf-8", decode_used)
        decode_used = "utf-8"
        text = raw.decode(decode_used, errors="replace")

    return text.lstrip("\ufeff"), decode_used


# ---------------------------------------------------------------------------
# Field cleanup
# ---------------------------------------------------------------------------

_WHITESPACE_RE = re.compile(r"\s+")
_PUNCTUATION_RE = re.compile(r"([а-яА-ЯёЁ0-9])\s*([,.;:])\s*")


def normalize_record_length(record: Sequence[Scalar]) -> List[Scalar]:
    fields = list(record[:RECORD_LENGTH])
    fields.extend([""] * (RECORD_LENGTH - len(fields)))
    return fields


def _as_text(value: Scalar) -> str:
    if value is None or value is UNDEFINED:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def trim_field(value: Scalar) -> str:
    """Strip, then fold line breaks and whitespace runs into single spaces."""
    return _WHITESPACE_RE.sub(" ", _as_text(value).strip())


def split_name(name: str) -> Tuple[str, str]:
    if not name:
        return "", ""
    firstname, _, fathername = name.partition(" ")
    return firstname, fathername


def capitalize_first(value: str) -> str:
    return value[:1].upper() + value[1:]


def correct_punctuation(value: str) -> str:
    return _PUNCTUATION_RE.sub(r"\1\2 ", value).rstrip()


# ---------------------------------------------------------------------------
# Phones
# ---------------------------------------------------------------------------

PHONE_CANDIDATE_RE = re.compile(r"[-+(]*[0-9][-+ ()0-9]*[0-9]")
_NOT_PHONE_CHAR_RE = re.compile(r"[^0-9\-+)( ]")
_MIN_PHONE_LENGTH = 10


def collapse_spaces(value: str) -> str:
    return re.sub(r" +", " ", value)


def correct_spaces_around_parentheses(value: str) -> str:
    value = re.sub(r"\s*\(\s*", " (", value)
    return re.sub(r"\s*\)\s*", ") ", value)


def strip_trunk_prefix(value: str) -> str:
    """Drop the domestic 8 / 7 or international +7 so only the national part is left."""
    if value.startswith("8") or value.startswith("79"):
        return value[1:]
    if value.startswith("+7"):
        return value[2:]
    return value


def group_digits(value: str) -> str:
    # 9161234567 -> (916) 123-45-67
    return re.sub(r"(\d\d\d)(\d\d\d)(\d\d)(\d+)$", r"(\1) \2-\3-\4", value, count=1)


def spaces_to_dashes(value: str) -> str:
    return re.sub(r" +", "-", value)


def wrap_zone_code(value: str) -> str:
    return re.sub(r"^[- ]*(\d+)[- ]+", r"(\1) ", value, count=1)


def wrap_parenthesized_group(value: str) -> str:
    return re.sub(r".*\((.*)\)[^0-9]+", r"8 (\1) ", value, count=1)


def prefer_mobile_country_code(value: str) -> str:
    # mobile zone codes start with 9 and are written with +7, not 8
    return re.sub(r"^8 \(9", "+7 (9", value)


def format_phone(raw: str) -> str:
    if len(raw) < _MIN_PHONE_LENGTH or _NOT_PHONE_CHAR_RE.search(raw):
        return raw

    base = correct_spaces_around_parentheses(collapse_spaces(raw)).strip()
    base = strip_trunk_prefix(base)
    base = group_digits(base)
    base = spaces_to_dashes(base)
    base = wrap_zone_code(base)
    base = wrap_parenthesized_group(base)
    return prefer_mobile_country_code(base)


def format_phones(value: str) -> str:
    return PHONE_CANDIDATE_RE.sub(lambda m: format_phone(m.group(0)), value)


# ---------------------------------------------------------------------------
# Website
# ---------------------------------------------------------------------------

def extract_city_code(value: str) -> str:
    haystack = value.lower()
    for city, code in CITY_CODES:
        if city.lower() in haystack:
            return code
    return ""


def make_website(address: str, duty: str, domain: str = WEBSITE_DOMAIN) -> str:
    code = extract_city_code(address) or extract_city_code(duty)
    website = f"www.{domain}"
    if code:
        website = f"{website}/{code}"
    return website


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------

def to_contact(record: Sequence[Scalar], domain: str = WEBSITE_DOMAIN) -> ContactRecord:
    surname, name, duty, address, phones, email, skype = (
        trim_field(value) for value in normalize_record_length(record)
    )
    firstname, fathername = split_name(name)
    duty = correct_punctuation(capitalize_first(duty))
    address = correct_punctuation(address)

    return ContactRecord(
        surname=surname,
        firstname=capitalize_first(firstname),
        fathername=capitalize_first(fathername),
        duty=duty,
        address=address,
        phones=format_phones(phones),
        email=email.lower(),
        skype=skype,
        website=make_website(address, duty, domain),
    )


def normalize(
    records: Iterable[Sequence[Scalar]],
    domain: str = WEBSITE_DOMAIN,
) -> List[ContactRecord]:
    records = list(records)

    # a trailing line break leaves one empty record behind
    if records and len(records[-1]) == 1 and records[-1][0] == "":
        records.pop()

    contacts = [to_contact(record, domain) for record in records]
    logger.debug("normalized %d contact records", len(contacts))
    return contacts


def convert(
    text: str,
    delimiter: str = DEFAULT_DELIMITER,
    options: Optional[ParseOptions] = None,
    domain: str = WEBSITE_DOMAIN,
) -> List[ContactRecord]:
    """Parse and normalize in one go; raises CSVParseError on malformed input."""
    if not text:
        return []
    records = parse(text, delimiter, options or ParseOptions(detect_types=False)).unwrap()
    return normalize(records, domain)
