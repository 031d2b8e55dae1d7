from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

import pytest

from paramexp.lexer_rd import (
    Lexer,
    accept_casing_func,
    accept_default_func,
    accept_hash_func,
    accept_ident,
    accept_not_closing,
    accept_not_slash,
    accept_one_colon,
    accept_one_equal,
    accept_percent_func,
    accept_replace_func,
    accept_rune,
    tokenize,
)
from paramexp.parser_rd import CLOSE, NAME, TEXT
from paramexp.token_types import TT, AcceptFunc, Mode, ScanConfig

ARG = Mode.IDENT | Mode.ESCAPE | Mode.BACKSLASH


@dataclass(frozen=True)
class Case:
    """Single scan() case: first token type and text under a config."""

    name: str
    source: str
    config: ScanConfig
    expected: TT
    text: Optional[str] = None


SCAN_CASES: List[Case] = [
    Case("text-run", "hello", TEXT, TT.IDENT, "hello"),
    Case("text-stops-at-lbrack", "hello ${x}", TEXT, TT.IDENT, "hello "),
    Case("text-lbrack", "${x}", TEXT, TT.LBRACK, "${"),
    Case("text-lone-dollar", "$x", TEXT, TT.IDENT, "$x"),
    Case("text-trailing-dollar", "a$", TEXT, TT.IDENT, "a$"),
    Case("text-dollar-escape", "$$x", TEXT, TT.IDENT, "$x"),
    Case("text-dollar-escape-brace", "$${x}", TEXT, TT.IDENT, "${x}"),
    Case("text-escape-then-lbrack", "$$${x}", TEXT, TT.IDENT, "$"),
    Case("text-rbrack-is-text", "}text", TEXT, TT.IDENT, "}text"),
    Case("text-double-slash", "http://github.com", TEXT, TT.IDENT, "http://github.com"),
    Case("text-keeps-backslash", "a\\/b", TEXT, TT.IDENT, "a\\/b"),
    Case("text-eof", "", TEXT, TT.EOF, ""),
    Case("name", "abc_1}", NAME, TT.IDENT, "abc_1"),
    Case("name-illegal", "$}", NAME, TT.ILLEGAL),
    Case("close", "}", CLOSE, TT.RBRACK, "}"),
    Case("close-missing", "x}", CLOSE, TT.ILLEGAL),
    Case("close-eof", "", CLOSE, TT.EOF),
    Case(
        "arg-escaped-slash",
        "\\/a\\\\b/c",
        ScanConfig(ARG, accept_not_slash),
        TT.IDENT,
        "/a\\b",
    ),
    Case(
        "arg-lone-backslash",
        "a\\b}",
        ScanConfig(ARG, accept_not_closing),
        TT.IDENT,
        "a\\b",
    ),
    Case(
        "arg-without-lbrack-mode",
        "a${b}",
        ScanConfig(Mode.IDENT, accept_not_closing),
        TT.IDENT,
        "a${b",
    ),
]


@pytest.mark.parametrize("case", SCAN_CASES, ids=lambda case: case.name)
def test_scan(case: Case) -> None:
    lexer = Lexer(case.source)
    assert lexer.scan(case.config) == case.expected
    if case.text is not None:
        assert lexer.string() == case.text


OPERATOR_CASES: List[Tuple[str, AcceptFunc, str, Optional[str]]] = [
    ("replace-first", accept_replace_func, "/a", "/"),
    ("replace-all", accept_replace_func, "//a", "//"),
    ("replace-prefix", accept_replace_func, "/#a", "/#"),
    ("replace-suffix", accept_replace_func, "/%a", "/%"),
    ("replace-max-two", accept_replace_func, "///", "//"),
    ("default-dash", accept_default_func, ":-a", ":-"),
    ("default-assign", accept_default_func, ":=a", ":="),
    ("default-error", accept_default_func, ":?a", ":?"),
    ("default-alt", accept_default_func, ":+a", ":+"),
    ("default-bare-equal", accept_one_equal, "=a", "="),
    ("default-equal-once", accept_one_equal, "==a", "="),
    ("substr-colon", accept_one_colon, ":1", ":"),
    ("substr-not-colon", accept_one_colon, "x", None),
    ("hash-short", accept_hash_func, "#a", "#"),
    ("hash-long", accept_hash_func, "###", "##"),
    ("percent-short", accept_percent_func, "%a", "%"),
    ("percent-long", accept_percent_func, "%%a", "%%"),
    ("casing-lower", accept_casing_func, ",}", ","),
    ("casing-lower-all", accept_casing_func, ",,}", ",,"),
    ("casing-upper-all", accept_casing_func, "^^^", "^^"),
]


@pytest.mark.parametrize(
    "accept,source,expected",
    [case[1:] for case in OPERATOR_CASES],
    ids=[case[0] for case in OPERATOR_CASES],
)
def test_operator_predicates(accept: AcceptFunc, source: str, expected: Optional[str]) -> None:
    lexer = Lexer(source)
    tok = lexer.scan(ScanConfig(Mode.IDENT, accept))

    if expected is None:
        assert tok == TT.ILLEGAL
    else:
        assert tok == TT.IDENT
        assert lexer.string() == expected


def test_ident_predicate_rejects_punctuation() -> None:
    assert accept_ident("a", 1)
    assert accept_ident("_", 3)
    assert accept_ident("9", 1)
    assert accept_ident("\u0663", 1)
    assert not accept_ident("\u00b2", 2)
    assert not accept_ident("\u2167", 2)
    assert not accept_ident("$", 1)
    assert not accept_ident("-", 2)
    assert accept_rune("}", 1)


def test_rejected_character_is_left_for_next_scan() -> None:
    lexer = Lexer("ab:cd")
    assert lexer.scan(NAME) == TT.IDENT
    assert lexer.string() == "ab"
    assert lexer.peek() == ":"
    assert lexer.pos == 2


def test_peek_has_no_side_effects() -> None:
    lexer = Lexer("a\nb")
    assert lexer.read() == "a"

    assert lexer.peek() == "\n"
    assert lexer.peek(1) == "b"
    assert lexer.peek(2) == ""
    assert lexer.line == 1
    assert lexer.pos == 1


def test_unread_restores_line() -> None:
    lexer = Lexer("a\n\nb")
    lexer.read()
    lexer.read()
    lexer.read()
    assert lexer.line == 3

    lexer.unread()
    assert lexer.line == 2
    assert lexer.peek() == "\n"


def test_line_counts_every_newline_in_a_run() -> None:
    lexer = Lexer("a\n\n\nb${x}")
    assert lexer.scan(TEXT) == TT.IDENT
    assert lexer.string() == "a\n\n\nb"
    assert lexer.line == 4

    assert lexer.scan(TEXT) == TT.LBRACK
    assert lexer.line == 4


def test_unread_at_eof_is_noop() -> None:
    lexer = Lexer("a")
    lexer.read()
    assert lexer.read() == ""
    lexer.unread()
    assert lexer.pos == 1


def test_lbrack_inside_run_is_not_consumed() -> None:
    lexer = Lexer("ab${x}")
    assert lexer.scan(TEXT) == TT.IDENT
    assert lexer.pos == 2
    assert lexer.scan(TEXT) == TT.LBRACK
    assert lexer.pos == 4


def test_context_window() -> None:
    source = "a" * 15 + ":" + "b" * 15
    lexer = Lexer(source)
    lexer.pos = 15

    assert lexer.scan(ScanConfig(Mode.IDENT, accept_one_colon)) == TT.IDENT
    assert lexer.context() == "a" * 10 + ":" + "b" * 10


def test_context_window_clamps_to_buffer() -> None:
    lexer = Lexer("${x")
    lexer.scan(TEXT)
    assert lexer.context() == "${x"


def test_source_is_never_mutated() -> None:
    source = "$$a\\/b"
    lexer = Lexer(source)
    lexer.scan(ScanConfig(ARG, accept_rune))
    assert lexer.string() == "$a/b"
    assert lexer.source == source


def test_tokenize_tracks_brace_depth() -> None:
    tokens = tokenize("a ${x:-}}b}")

    assert [(tok.type, tok.value) for tok in tokens] == [
        (TT.IDENT, "a "),
        (TT.LBRACK, "${"),
        (TT.IDENT, "x:-"),
        (TT.RBRACK, "}"),
        (TT.IDENT, "}b}"),
        (TT.EOF, ""),
    ]


def test_tokenize_nested() -> None:
    tokens = tokenize("${a:-${b}c}")
    assert [tok.type for tok in tokens] == [
        TT.LBRACK,
        TT.IDENT,
        TT.LBRACK,
        TT.IDENT,
        TT.RBRACK,
        TT.IDENT,
        TT.RBRACK,
        TT.EOF,
    ]


def test_tokenize_positions() -> None:
    tokens = tokenize("ab\n  ${x}")

    assert (tokens[0].line, tokens[0].column) == (1, 1)
    lbrack = tokens[1]
    assert lbrack.type == TT.LBRACK
    assert (lbrack.line, lbrack.column) == (2, 3)


def test_tokenize_keeps_raw_text() -> None:
    tokens = tokenize("$$x")
    assert tokens[0].value == "$$x"
