"""
RFC 4180 style CSV tokenizer with adjustable strictness.

Options cover:
- optional carriage returns / bare line feeds for non-Microsoft sources
- type-casting of numeric, boolean, null and undefined tokens
- relaxed mode: skips blank lines, drops garbage after quoted tokens and
  does not enforce a consistent record length

Every parse() call runs on its own _ParseState, so a CSVParser holds
nothing but its configuration and can be reused after a failed parse.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import List, Optional, Union

from .rules import DEFAULT_DELIMITER, QUOTE

logger = logging.getLogger(__name__)

CR = "\r"
LF = "\n"
SPACE = " "
TAB = "\t"

# How much text preceding the failure offset goes into diagnostics.
CONTEXT_CHARS = 50


class State(IntEnum):
    PRE_TOKEN = 0
    MID_TOKEN = 1
    POST_TOKEN = 2
    POST_RECORD = 4


class ErrorKind(str, Enum):
    EOF = "UNEXPECTED_END_OF_FILE"
    CHAR = "UNEXPECTED_CHARACTER"
    EOL = "UNEXPECTED_END_OF_RECORD"
    SPACE = "UNEXPECTED_WHITESPACE"  # not in rfc4180, helps debugging


class _Undefined:
    """Value of a literal ``undefined`` token (distinct from ``None``)."""

    _instance: Optional["_Undefined"] = None

    def __new__(cls) -> "_Undefined":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False


UNDEFINED = _Undefined()

Scalar = Union[str, int, float, bool, None, _Undefined]
Record = List[Scalar]


class CSVParseError(Exception):
    """Fatal parse failure; the whole input is rejected."""

    def __init__(self, kind: ErrorKind, offset: int, context: str) -> None:
        self.kind = kind
        self.offset = offset
        self.context = context
        super().__init__(f"{kind.value} at char {offset}: {context}")

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "offset": self.offset,
            "context": self.context,
            "message": str(self),
        }


@dataclass(frozen=True)
class ParseWarning:
    kind: ErrorKind
    offset: int
    context: str

    @property
    def message(self) -> str:
        return f"{self.kind.value} at char {self.offset}: {self.context}"


@dataclass(frozen=True)
class ParseOptions:
    relaxed: bool = False
    ignore_record_length: bool = False
    ignore_quotes: bool = False
    allow_bare_lf: bool = True
    allow_bare_cr: bool = True
    detect_types: bool = True
    ignore_quote_whitespace: bool = True
    skip_blank_lines: bool = False

    @property
    def checks_record_length(self) -> bool:
        return not (self.relaxed or self.ignore_record_length)

    @property
    def skips_blank_lines(self) -> bool:
        return self.relaxed or self.skip_blank_lines


@dataclass
class ParseResult:
    """Either the parsed records or the error that stopped the parse."""

    records: List[Record] = field(default_factory=list)
    warnings: List[ParseWarning] = field(default_factory=list)
    error: Optional[CSVParseError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> List[Record]:
        if self.error is not None:
            raise self.error
        return self.records


_NUMBER_RE = re.compile(r"\d+(?:\.\d+)?", re.ASCII)
_BOOL_RE = re.compile(r"true|false", re.IGNORECASE)


def resolve_type(token: str) -> Scalar:
    """Cast a finished token to int/float, bool, None or UNDEFINED when it looks like one."""
    if _NUMBER_RE.fullmatch(token):
        return float(token) if "." in token else int(token)
    if _BOOL_RE.fullmatch(token):
        return token.lower() == "true"
    if token == "null":
        return None
    if token == "undefined":
        return UNDEFINED
    return token


@dataclass
class _ParseState:
    text: str
    offset: int = 0
    state: State = State.PRE_TOKEN
    token: List[str] = field(default_factory=list)
    escaped: bool = False
    record: Optional[Record] = None
    records: List[Record] = field(default_factory=list)
    warnings: List[ParseWarning] = field(default_factory=list)

    def peek(self) -> str:
        if self.offset < len(self.text):
            return self.text[self.offset]
        return ""

    def next_nonspace(self) -> str:
        i = self.offset
        while i < len(self.text):
            c = self.text[i]
            if c not in (SPACE, TAB):
                return c
            i += 1
        return ""

    def dump(self) -> str:
        snippet = self.text[max(0, self.offset - CONTEXT_CHARS):self.offset]
        return snippet.replace(CR, "\\r").replace(LF, "\\n").replace(TAB, "\\t")


class CSVParser:
    """Parse delimited text into a list of records.

    Example::

        result = CSVParser().parse("one;two\\nthree;four")
        result.records == [["one", "two"], ["three", "four"]]
    """

    def __init__(
        self,
        options: Optional[ParseOptions] = None,
        delimiter: str = DEFAULT_DELIMITER,
    ) -> None:
        if len(delimiter) != 1 or delimiter in (QUOTE, CR, LF):
            raise ValueError(f"Unsupported delimiter: {delimiter!r}")
        self.options = options or ParseOptions()
        self.delimiter = delimiter

    def parse(self, text: str) -> ParseResult:
        st = _ParseState(text=text)
        logger.debug("parse(): %d chars, delimiter=%r", len(text), self.delimiter)
        try:
            self._run(st)
        except CSVParseError as exc:
            logger.info("CSV parse aborted: %s at char %d", exc.kind.value, exc.offset)
            return ParseResult(records=[], warnings=st.warnings, error=exc)
        return ParseResult(records=st.records, warnings=st.warnings)

    # -- state machine -------------------------------------------------------

    def _run(self, st: _ParseState) -> None:
        opts = self.options
        text = st.text

        while True:
            if st.offset >= len(text):
                if st.escaped:
                    self._fail(st, ErrorKind.EOF)
                if st.record is not None:
                    self._token_end(st)
                    self._record_end(st)
                return

            c = text[st.offset]
            st.offset += 1

            if st.record is None:
                if opts.skips_blank_lines and c in (CR, LF):
                    if c == CR and st.peek() == LF:
                        st.offset += 1
                    continue
                self._record_begin(st)

            # pre-token: look for the start of a quoted field
            if st.state == State.PRE_TOKEN:
                if c in (SPACE, TAB) and st.next_nonspace() == QUOTE:
                    if opts.relaxed or opts.ignore_quote_whitespace:
                        continue
                    self._warn(st, ErrorKind.SPACE)

                if c == QUOTE and not opts.ignore_quotes:
                    st.escaped = True
                    st.state = State.MID_TOKEN
                    continue
                st.state = State.MID_TOKEN

            # inside quotes: doubled quote or closing quote
            if st.state == State.MID_TOKEN and st.escaped:
                if c == QUOTE:
                    if st.peek() == QUOTE:
                        st.token.append(QUOTE)
                        st.offset += 1
                    else:
                        st.escaped = False
                        st.state = State.POST_TOKEN
                else:
                    st.token.append(c)
                continue

            # mid-token or post-token, not quoted
            if c == CR:
                if st.peek() == LF:
                    st.offset += 1
                elif not (opts.allow_bare_cr or opts.relaxed):
                    self._fail(st, ErrorKind.CHAR)
                self._token_end(st)
                self._record_end(st)
            elif c == LF:
                if not (opts.allow_bare_lf or opts.relaxed):
                    self._fail(st, ErrorKind.CHAR)
                self._token_end(st)
                self._record_end(st)
            elif c == self.delimiter:
                self._token_end(st)
            elif st.state == State.MID_TOKEN:
                st.token.append(c)
            elif c in (SPACE, TAB):
                if not opts.ignore_quote_whitespace:
                    self._fail(st, ErrorKind.SPACE)
            elif not opts.relaxed:
                self._fail(st, ErrorKind.CHAR)

    def _record_begin(self, st: _ParseState) -> None:
        st.escaped = False
        st.record = []
        self._token_begin(st)

    def _record_end(self, st: _ParseState) -> None:
        st.state = State.POST_RECORD
        if (
            self.options.checks_record_length
            and st.records
            and len(st.record) != len(st.records[0])
        ):
            self._fail(st, ErrorKind.EOL)
        st.records.append(st.record)
        logger.debug("record end: %d fields", len(st.record))
        st.record = None

    def _token_begin(self, st: _ParseState) -> None:
        st.state = State.PRE_TOKEN
        st.token = []

    def _token_end(self, st: _ParseState) -> None:
        value: Scalar = "".join(st.token)
        if self.options.detect_types:
            value = resolve_type(value)
        st.record.append(value)
        self._token_begin(st)

    def _fail(self, st: _ParseState, kind: ErrorKind) -> None:
        raise CSVParseError(kind, st.offset, st.dump())

    def _warn(self, st: _ParseState, kind: ErrorKind) -> None:
        warning = ParseWarning(kind, st.offset, st.dump())
        st.warnings.append(warning)
        logger.warning("%s", warning.message)


def parse(
    text: str,
    delimiter: str = DEFAULT_DELIMITER,
    options: Optional[ParseOptions] = None,
) -> ParseResult:
    return CSVParser(options, delimiter).parse(text)
