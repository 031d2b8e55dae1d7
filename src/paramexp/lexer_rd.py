"""
Lexer for parameter expansion strings - Recursive Descent Parser

Produces one token at a time from a string buffer. The caller decides at
each grammar position which token shapes are legal (the Mode bits) and
which characters may extend an identifier-like run (the acceptance
predicate), both passed in a ScanConfig for every scan() call.

Features:
- On-demand scanning, no token list is materialized
- Escape collapsing ($$, \\/, \\\\) by copy-on-accept
- Position tracking (line) with side-effect free lookahead
- Context windows around the last token for diagnostics
"""

from typing import List

from .token_types import TT, Mode, ScanConfig, Tok

EOF = ''

CONTEXT_LEN = 10

# ============================================================================
# Lexer Implementation
# ============================================================================

class Lexer:
    """
    Single-use cursor over a string buffer.

    The lexer is owned by exactly one parse and keeps the only copy of
    "where parsing currently is": the read position, the start of the
    current token, the width of the last character read (for unread) and
    the current line.
    """

    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.start = 0
        self.width = 0
        self.line = 1
        self.text = ''

    # ========================================================================
    # Character Navigation
    # ========================================================================

    def read(self) -> str:
        """Consume the next character, or return EOF at the end of the buffer"""
        if self.pos >= len(self.source):
            self.width = 0
            return EOF

        ch = self.source[self.pos]
        self.width = 1
        self.pos += 1
        if ch == '\n':
            self.line += 1
        return ch

    def unread(self):
        """Step back over the last character read"""
        if self.width == 0:
            return

        self.pos -= self.width
        if self.source[self.pos] == '\n':
            self.line -= 1

    def peek(self, offset: int = 0) -> str:
        """Look ahead at character"""
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return EOF

    # ========================================================================
    # Token Access
    # ========================================================================

    def string(self) -> str:
        """Text of the most recently scanned token, escapes collapsed"""
        return self.text

    def context(self) -> str:
        """Up to CONTEXT_LEN characters either side of the last token"""
        st = max(self.start - CONTEXT_LEN, 0)
        end = min(self.pos + CONTEXT_LEN, len(self.source))
        return self.source[st:end]

    def column(self) -> int:
        """1-based column of the start of the last token"""
        return self.start - (self.source.rfind('\n', 0, self.start) + 1) + 1

    def token(self, token_type: TT) -> Tok:
        """Wrap the last scan as a Tok carrying the raw source span"""
        line = self.line - self.source.count('\n', self.start, self.pos)
        return Tok(
            type=token_type,
            value=self.source[self.start:self.pos],
            line=line,
            column=self.column(),
        )

    # ========================================================================
    # Token Scanners
    # ========================================================================

    def scan(self, config: ScanConfig) -> TT:
        """Scan the next token under config. Returns TT.EOF at the end of input."""
        self.start = self.pos
        self.text = ''

        ch = self.read()
        if ch == EOF:
            return TT.EOF
        if self.scan_lbrack(ch, config.mode):
            self.text = '${'
            return TT.LBRACK
        if self.scan_rbrack(ch, config.mode):
            self.text = '}'
            return TT.RBRACK
        if self.scan_ident(ch, config):
            return TT.IDENT

        return TT.ILLEGAL

    def scan_ident(self, ch: str, config: ScanConfig) -> bool:
        """Scan a run of accepted characters starting with ch"""
        if Mode.IDENT not in config.mode:
            return False

        run: List[str] = []

        escaped = self.scan_escaped(ch, config.mode)
        if escaped:
            run.append(escaped)
        elif config.accept(ch, 1):
            run.append(ch)
        else:
            return False

        while True:
            ch = self.read()
            if ch == EOF:
                break

            # Stop in front of a nested ${
            if self.scan_lbrack(ch, config.mode):
                self.unread()
                self.unread()
                break

            escaped = self.scan_escaped(ch, config.mode)
            if escaped:
                run.append(escaped)
                continue

            if not config.accept(ch, len(run) + 1):
                self.unread()
                break

            run.append(ch)

        self.text = ''.join(run)
        return True

    def scan_lbrack(self, ch: str, mode: Mode) -> bool:
        """Consume ${ when ch is a $ immediately followed by {"""
        if Mode.LBRACK not in mode:
            return False

        if ch == '$' and self.peek() == '{':
            self.read()
            return True
        return False

    def scan_rbrack(self, ch: str, mode: Mode) -> bool:
        if Mode.RBRACK not in mode:
            return False
        return ch == '}'

    def scan_escaped(self, ch: str, mode: Mode) -> str:
        """
        Consume an escape sequence starting with ch and return the
        character it stands for, or '' when ch does not start one.
        """
        if Mode.ESCAPE in mode and ch == '$' and self.peek() == '$':
            return self.read()

        if Mode.BACKSLASH in mode and ch == '\\' and self.peek() in ('/', '\\'):
            return self.read()

        return ''

# ============================================================================
# Acceptance predicates
# ============================================================================

def accept_rune(ch: str, i: int) -> bool:
    return True


def accept_ident(ch: str, i: int) -> bool:
    return ch.isalpha() or ch.isdecimal() or ch == '_'


def accept_colon(ch: str, i: int) -> bool:
    return ch == ':'


def accept_one_hash(ch: str, i: int) -> bool:
    return ch == '#' and i == 1


def accept_none(ch: str, i: int) -> bool:
    return False


def accept_not_closing(ch: str, i: int) -> bool:
    return ch != '}'


def accept_hash_func(ch: str, i: int) -> bool:
    return ch == '#' and i < 3


def accept_percent_func(ch: str, i: int) -> bool:
    return ch == '%' and i < 3


def accept_default_func(ch: str, i: int) -> bool:
    """Accepts :=, :-, :? and :+"""
    if i == 1:
        return ch == ':'
    if i == 2:
        return ch in ('=', '-', '?', '+')
    return False


def accept_replace_func(ch: str, i: int) -> bool:
    """Accepts /, //, /# and /%"""
    if i == 1:
        return ch == '/'
    if i == 2:
        return ch in ('/', '#', '%')
    return False


def accept_one_equal(ch: str, i: int) -> bool:
    return i == 1 and ch == '='


def accept_one_colon(ch: str, i: int) -> bool:
    return i == 1 and ch == ':'


def reject_colon_close(ch: str, i: int) -> bool:
    return ch != ':' and ch != '}'


def accept_slash(ch: str, i: int) -> bool:
    return ch == '/'


def accept_not_slash(ch: str, i: int) -> bool:
    return ch != '/'


def accept_casing_func(ch: str, i: int) -> bool:
    return ch in (',', '^') and i < 3

# ============================================================================
# Tokenizing
# ============================================================================

_OUTSIDE = ScanConfig(Mode.IDENT | Mode.LBRACK | Mode.ESCAPE, accept_rune)
_INSIDE = ScanConfig(Mode.IDENT | Mode.LBRACK | Mode.RBRACK, accept_not_closing)


def tokenize(source: str) -> List[Tok]:
    """
    Convenience function producing a coarse token stream for source.

    Tracks brace depth so that } is only a closing token inside an open
    ${...}; everything else comes back as IDENT runs. Used for highlighting,
    the parser itself scans on demand.
    """
    lexer = Lexer(source)
    tokens: List[Tok] = []
    depth = 0

    while True:
        tt = lexer.scan(_INSIDE if depth else _OUTSIDE)
        if tt == TT.EOF:
            tokens.append(Tok(TT.EOF, '', lexer.line, lexer.column()))
            return tokens

        if tt == TT.LBRACK:
            depth += 1
        elif tt == TT.RBRACK:
            depth -= 1

        tokens.append(lexer.token(tt))
