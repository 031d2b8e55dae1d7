"""prompt_toolkit lexer for live highlighting of ${...} constructs in the REPL."""

from __future__ import annotations

from typing import Callable, List

from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import StyleAndTextTuples
from prompt_toolkit.lexers import Lexer

from .lexer_rd import accept_ident, tokenize
from .token_types import TT, Tok

# Map highlight groups → prompt_toolkit style strings.
GROUP_STYLE = {
    "text": "",
    "punctuation": "bold ansiyellow",
    "identifier": "ansicyan",
    "operator": "ansimagenta",
    "argument": "ansigreen",
}

_DELIMS = {TT.LBRACK: "punctuation", TT.RBRACK: "punctuation"}


def _split_body(text: str) -> StyleAndTextTuples:
    """Split the inside of ${...} into name, operator and argument spans."""
    spans: StyleAndTextTuples = []
    pos = 0
    n = len(text)

    # ${#name}
    if text.startswith('#'):
        spans.append((GROUP_STYLE["operator"], '#'))
        pos = 1

    start = pos
    while pos < n and accept_ident(text[pos], pos - start + 1):
        pos += 1
    if pos > start:
        spans.append((GROUP_STYLE["identifier"], text[start:pos]))

    # Operator: up to two characters of the operator alphabet.
    start = pos
    while pos < n and pos - start < 2 and text[pos] in ":=-?+,^/#%":
        pos += 1
    if pos > start:
        spans.append((GROUP_STYLE["operator"], text[start:pos]))

    if pos < n:
        spans.append((GROUP_STYLE["argument"], text[pos:]))

    return spans


def _highlight_line(text: str) -> StyleAndTextTuples:
    """Tokenize a single line and return styled fragments."""
    if not text:
        return [("", "")]

    tokens: List[Tok] = tokenize(text)
    result: StyleAndTextTuples = []
    depth = 0
    prev: TT = TT.EOF

    for tok in tokens:
        if tok.type == TT.EOF:
            break

        if tok.type in _DELIMS:
            depth += 1 if tok.type == TT.LBRACK else -1
            result.append((GROUP_STYLE[_DELIMS[tok.type]], tok.value))
        elif depth and prev == TT.LBRACK:
            result.extend(_split_body(tok.value))
        elif depth:
            result.append((GROUP_STYLE["argument"], tok.value))
        else:
            result.append((GROUP_STYLE["text"], tok.value))
        prev = tok.type

    # Unclosed construct
    if depth > 0 and result:
        style, frag = result[-1]
        result[-1] = (f"{style} underline".strip(), frag)

    return result if result else [("", text)]


class ParamExpLexer(Lexer):
    """prompt_toolkit Lexer that highlights parameter expansions using the RD lexer."""

    def lex_document(self, document: Document) -> Callable[[int], StyleAndTextTuples]:
        lines = document.lines

        # Pre-compute highlights for all lines.
        cache: dict[int, StyleAndTextTuples] = {}

        def get_line(lineno: int) -> StyleAndTextTuples:
            if lineno not in cache:
                if lineno < len(lines):
                    cache[lineno] = _highlight_line(lines[lineno])
                else:
                    cache[lineno] = [("", "")]

            return cache[lineno]

        return get_line
