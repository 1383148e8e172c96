"""Tests for bizcards/csvparse.py."""
from __future__ import annotations

import logging

import pytest

from bizcards.csvparse import (
    UNDEFINED,
    CSVParseError,
    CSVParser,
    ErrorKind,
    ParseOptions,
    parse,
    resolve_type,
)


TEXT_ONLY = ParseOptions(detect_types=False)


# ---------------------------------------------------------------------------
# Basic tokenizing
# ---------------------------------------------------------------------------

def test_simple_records():
    result = parse("one;two\nthree;four")
    assert result.ok
    assert result.records == [["one", "two"], ["three", "four"]]


def test_trailing_line_break_does_not_add_record():
    assert parse("a;b\n").records == [["a", "b"]]


def test_crlf_is_one_line_break():
    assert parse("a;b\r\nc;d\r\n").records == [["a", "b"], ["c", "d"]]


def test_bare_cr_ends_record():
    assert parse("a\rb").records == [["a"], ["b"]]


def test_empty_input_has_no_records():
    result = parse("")
    assert result.ok
    assert result.records == []


def test_empty_fields_are_kept():
    assert parse("a;;\n").records == [["a", "", ""]]


def test_custom_delimiter():
    assert parse("a,b;c", delimiter=",").records == [["a", "b;c"]]


@pytest.mark.parametrize("delimiter", ['"', "\n", "\r", "", ";;"])
def test_unsupported_delimiter_is_rejected(delimiter):
    with pytest.raises(ValueError):
        CSVParser(delimiter=delimiter)


# ---------------------------------------------------------------------------
# Quoting
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "value",
    [
        "a;b",
        "line\nbreak",
        "crlf\r\ninside",
        'say "hi"',
        '"',
        ';\n"',
    ],
)
def test_quoted_field_protects_value(value):
    text = '"' + value.replace('"', '""') + '"'
    assert parse(text, options=TEXT_ONLY).records == [[value]]


def test_quoted_and_plain_fields_mix():
    assert parse('"a;1";b\n"c";"d"\n').records == [["a;1", "b"], ["c", "d"]]


def test_whitespace_before_quote_is_skipped_by_default():
    assert parse('a; "b"').records == [["a", "b"]]


def test_whitespace_after_closing_quote_is_ignored_by_default():
    assert parse('"a"  ;b').records == [["a", "b"]]


def test_whitespace_before_quote_warns_when_not_ignored(caplog):
    options = ParseOptions(ignore_quote_whitespace=False)
    with caplog.at_level(logging.WARNING, logger="bizcards.csvparse"):
        result = parse('a; "b"', options=options)

    assert result.ok
    assert result.records == [["a", ' "b"']]
    assert [w.kind for w in result.warnings] == [ErrorKind.SPACE]
    assert "UNEXPECTED_WHITESPACE" in caplog.text


def test_whitespace_after_quote_fails_when_not_ignored():
    result = parse('"a" ;b', options=ParseOptions(ignore_quote_whitespace=False))
    assert result.error.kind is ErrorKind.SPACE


def test_garbage_after_quoted_token_is_an_error():
    result = parse('"a"x;b')
    assert not result.ok
    assert result.error.kind is ErrorKind.CHAR
    assert result.records == []


def test_garbage_after_quoted_token_dropped_in_relaxed_mode():
    assert parse('"a"x;b', options=ParseOptions(relaxed=True)).records == [["a", "b"]]


def test_ignore_quotes_treats_quote_as_text():
    result = parse('"a;b"', options=ParseOptions(ignore_quotes=True))
    assert result.records == [['"a', 'b"']]


def test_unterminated_quote_is_fatal():
    result = parse('x;"abc')
    assert result.error.kind is ErrorKind.EOF
    assert result.error.offset == 6
    assert result.error.context == 'x;"abc'
    with pytest.raises(CSVParseError):
        result.unwrap()


# ---------------------------------------------------------------------------
# Line endings
# ---------------------------------------------------------------------------

def test_bare_cr_rejected_when_disallowed():
    result = parse("a\rb", options=ParseOptions(allow_bare_cr=False))
    assert result.error.kind is ErrorKind.CHAR


def test_crlf_accepted_when_bare_cr_disallowed():
    result = parse("a\r\nb", options=ParseOptions(allow_bare_cr=False))
    assert result.records == [["a"], ["b"]]


def test_bare_lf_rejected_when_disallowed():
    result = parse("a\nb", options=ParseOptions(allow_bare_lf=False))
    assert result.error.kind is ErrorKind.CHAR


def test_relaxed_mode_accepts_bare_line_endings():
    options = ParseOptions(relaxed=True, allow_bare_lf=False, allow_bare_cr=False)
    assert parse("a\nb\rc", options=options).records == [["a"], ["b"], ["c"]]


# ---------------------------------------------------------------------------
# Record length and blank lines
# ---------------------------------------------------------------------------

def test_record_length_mismatch_is_fatal():
    result = parse("a;b\nc\n")
    assert result.error.kind is ErrorKind.EOL
    assert result.records == []
    with pytest.raises(CSVParseError, match="UNEXPECTED_END_OF_RECORD"):
        result.unwrap()


def test_relaxed_mode_keeps_ragged_rows():
    assert parse("a;b\nc\n", options=ParseOptions(relaxed=True)).records == [["a", "b"], ["c"]]


def test_ignore_record_length_keeps_ragged_rows():
    options = ParseOptions(ignore_record_length=True)
    assert parse("a;b\nc;d;e", options=options).records == [["a", "b"], ["c", "d", "e"]]


def test_relaxed_mode_skips_blank_line():
    options = ParseOptions(relaxed=True)
    assert parse("a;b\n\nc;d\n", options=options).records == [["a", "b"], ["c", "d"]]
    assert parse("a;b\r\n\r\nc;d\r\n", options=options).records == [["a", "b"], ["c", "d"]]


def test_blank_line_is_a_record_when_not_skipped():
    options = ParseOptions(ignore_record_length=True)
    assert parse("a;b\n\nc;d", options=options).records == [["a", "b"], [""], ["c", "d"]]


def test_blank_line_breaks_record_length_in_strict_mode():
    assert parse("a;b\n\nc;d").error.kind is ErrorKind.EOL


def test_skip_blank_lines_uses_first_non_blank_record_as_baseline():
    options = ParseOptions(skip_blank_lines=True)
    assert parse("\n\na;b\n\nc;d\n", options=options).records == [["a", "b"], ["c", "d"]]
    assert parse("\na;b\nc\n", options=options).error.kind is ErrorKind.EOL


# ---------------------------------------------------------------------------
# Diagnostics
# ---------------------------------------------------------------------------

def test_error_context_escapes_control_characters():
    error = parse("a;b\nc\n").error
    assert error.offset == 6
    assert error.context == "a;b\\nc\\n"
    assert str(error) == "UNEXPECTED_END_OF_RECORD at char 6: a;b\\nc\\n"
    assert error.to_dict()["kind"] == "UNEXPECTED_END_OF_RECORD"


def test_error_context_is_limited_to_fifty_chars():
    error = parse('"' + "x" * 100).error
    assert error.offset == 101
    assert error.context == "x" * 50


def test_parser_is_reusable_after_failure():
    parser = CSVParser()
    assert not parser.parse('"open').ok

    result = parser.parse("a;b")
    assert result.ok
    assert result.records == [["a", "b"]]
    assert result.warnings == []


# ---------------------------------------------------------------------------
# Type detection
# ---------------------------------------------------------------------------

def test_numbers_are_detected():
    assert parse("42;3.5;007").records == [[42, 3.5, 7]]


def test_numbers_stay_text_without_detection():
    assert parse("42", options=TEXT_ONLY).records == [["42"]]


def test_booleans_null_and_undefined_are_detected():
    records = parse("TRUE;false;null;undefined").records
    assert records == [[True, False, None, UNDEFINED]]
    assert records[0][3] is UNDEFINED


@pytest.mark.parametrize("token", ["42a", "-1", "1.", ".5", "trueish", "NULL", "", "1 2"])
def test_other_tokens_stay_text(token):
    assert resolve_type(token) == token


def test_detection_applies_to_quoted_tokens():
    assert parse('"12"').records == [[12]]
