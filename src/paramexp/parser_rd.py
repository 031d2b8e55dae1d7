"""
Recursive Descent Parser for parameter expansion strings

Structure:
- Lexer: scans one token on demand under a per-call ScanConfig
- Parser: recursive descent, one sub-parser per operator family
- AST: TextNode / FuncNode / ListNode (see tree.py)

Grammar (informal):

    any    := (TEXT | func)*
    func   := '${' ( '#' NAME | NAME operator? ) '}'
    param  := TEXT | func

Each operator family scans its operator token with its own acceptance
predicate, so the same identifier scanner serves every delimiter syntax.
"""

import logging
from typing import Callable, Dict, List, Optional, Tuple

from .lexer_rd import (
    Lexer,
    accept_casing_func,
    accept_colon,
    accept_default_func,
    accept_hash_func,
    accept_ident,
    accept_none,
    accept_not_closing,
    accept_not_slash,
    accept_one_colon,
    accept_one_equal,
    accept_one_hash,
    accept_percent_func,
    accept_replace_func,
    accept_rune,
    accept_slash,
    reject_colon_close,
)
from .token_types import TT, AcceptFunc, Mode, ScanConfig
from .tree import FuncNode, Node, TextNode, Tree, chain
from .utils import max_depth_from_env

logger = logging.getLogger(__name__)

# ============================================================================
# Errors
# ============================================================================

class ParseError(Exception):
    """Parse error with line and context info"""
    def __init__(self, message: str, line: int = 0, context: str = '', err: Optional[Exception] = None):
        self.message = message
        self.line = line
        self.context = context
        self.err = err
        super().__init__(message)

    def __str__(self) -> str:
        where = f"{self.message} on line {self.line}" if self.line > 0 else self.message
        if self.context:
            return f'{where}\n\tLook for: "...{self.context}..."'
        return where


class BadSubstitution(ParseError):
    """Malformed token sequence with no more specific diagnosis"""
    def __init__(self, line: int = 0, context: str = ''):
        super().__init__("bad substitution", line, context)


class NestingTooDeep(ParseError):
    """${...} constructs nested deeper than the parser allows"""
    def __init__(self, limit: int, line: int = 0, context: str = ''):
        self.limit = limit
        super().__init__("nesting too deep", line, context)

# ============================================================================
# Scan configurations
# ============================================================================

TEXT = ScanConfig(Mode.IDENT | Mode.LBRACK | Mode.ESCAPE, accept_rune)
NAME = ScanConfig(Mode.IDENT, accept_ident)
CLOSE = ScanConfig(Mode.RBRACK, accept_none)

ARG_ESCAPES = Mode.IDENT | Mode.ESCAPE | Mode.BACKSLASH

# Lookahead after the parameter name -> (handler, operator acceptance).
OPERATORS: Dict[str, Tuple[str, AcceptFunc]] = {
    ':': ('parse_default_or_substr', accept_default_func),
    '=': ('parse_default_func', accept_one_equal),
    ',': ('parse_casing_func', accept_casing_func),
    '^': ('parse_casing_func', accept_casing_func),
    '/': ('parse_replace_func', accept_replace_func),
    '#': ('parse_remove_func', accept_hash_func),
    '%': ('parse_remove_func', accept_percent_func),
}

# Second character after ':' selecting the default family over substring.
DEFAULT_OPERATORS = frozenset(('=', '-', '?', '+'))

# ============================================================================
# Parser
# ============================================================================

class Parser:
    """
    Recursive descent parser over a single Lexer.

    Recursion depth equals the nesting depth of ${...} constructs and is
    bounded by max_depth. The flat text/function sequence is collected in
    a loop and folded into ListNodes afterwards.
    """

    def __init__(self, source: str, max_depth: Optional[int] = None):
        self.lexer = Lexer(source)
        self.max_depth = max_depth if max_depth is not None else max_depth_from_env()
        self.depth = 0

    # ========================================================================
    # Helpers
    # ========================================================================

    def scan(self, config: ScanConfig) -> TT:
        return self.lexer.scan(config)

    def error(self, message: str, err: Optional[Exception] = None) -> ParseError:
        return ParseError(message, self.lexer.line, self.lexer.context(), err)

    def bad_substitution(self, what: str) -> BadSubstitution:
        logger.debug("bad substitution: %s near %r", what, self.lexer.context())
        return BadSubstitution(self.lexer.line, self.lexer.context())

    def scan_operator(self, param: str, accept: AcceptFunc) -> str:
        """Scan an operator token with the family's acceptance predicate"""
        if self.scan(ScanConfig(Mode.IDENT, accept)) != TT.IDENT:
            raise self.bad_substitution(f"unable to parse operator for {param!r}")
        return self.lexer.string()

    def consume_rbrack(self):
        """Consume a closing bracket or raise BadSubstitution"""
        if self.scan(CLOSE) != TT.RBRACK:
            raise self.bad_substitution("expected closing brace")

    # ========================================================================
    # Top-Level Parsing
    # ========================================================================

    def parse(self) -> Tree:
        """Parse the whole buffer"""
        root = self.parse_any()
        return Tree(root, self.lexer.source)

    def parse_any(self) -> Node:
        """Parse a sequence of text runs and ${...} constructs until EOF"""
        pieces: List[Node] = []

        while True:
            tok = self.scan(TEXT)
            if tok == TT.IDENT:
                pieces.append(TextNode(self.lexer.string()))
            elif tok == TT.LBRACK:
                pieces.append(self.parse_func())
            elif tok == TT.EOF:
                return chain(pieces)
            else:
                raise self.bad_substitution(f"unexpected {tok.name}")

    def parse_func(self) -> FuncNode:
        """Parse a ${...} construct; the ${ is already consumed"""
        if self.depth >= self.max_depth:
            raise NestingTooDeep(self.max_depth, self.lexer.line, self.lexer.context())

        self.depth += 1
        try:
            return self._parse_func()
        finally:
            self.depth -= 1

    def _parse_func(self) -> FuncNode:
        if self.lexer.peek() == '#':
            return self.parse_len_func()

        if self.scan(NAME) != TT.IDENT:
            raise self.error("unable to parse variable name")
        param = self.lexer.string()

        entry = OPERATORS.get(self.lexer.peek())
        if entry is not None:
            handler, accept = entry
            method: Callable[[str, AcceptFunc], FuncNode] = getattr(self, handler)
            return method(param, accept)

        if self.scan(CLOSE) != TT.RBRACK:
            raise self.error("missing closing brace")
        return FuncNode(param)

    def parse_param(self, accept: AcceptFunc, mode: Mode) -> Node:
        """Parse a single operator argument: a text run or a nested ${...}"""
        tok = self.scan(ScanConfig(mode | Mode.LBRACK, accept))
        if tok == TT.LBRACK:
            return self.parse_func()
        if tok == TT.IDENT:
            return TextNode(self.lexer.string())

        raise ParseError("unable to parse substitution")

    # ========================================================================
    # Operator families
    # ========================================================================

    def parse_default_or_substr(self, param: str, accept: AcceptFunc) -> FuncNode:
        """Pick ${param:-word} style defaults over ${param:offset}"""
        if self.lexer.peek(1) in DEFAULT_OPERATORS:
            return self.parse_default_func(param, accept)
        return self.parse_substr_func(param, accept_one_colon)

    def parse_substr_func(self, param: str, accept: AcceptFunc) -> FuncNode:
        """
        Parse substring expansion:
        ${param:offset}
        ${param:offset:length}
        """
        name = self.scan_operator(param, accept)
        args = [self.parse_param(reject_colon_close, ARG_ESCAPES)]

        # Delimiter or close
        tok = self.scan(ScanConfig(Mode.IDENT | Mode.RBRACK, accept_colon))
        if tok == TT.RBRACK:
            return FuncNode(param, name, tuple(args))
        if tok != TT.IDENT:
            raise self.bad_substitution("expected ':' or '}' in substring")

        args.append(self.parse_param(accept_not_closing, ARG_ESCAPES))
        self.consume_rbrack()
        return FuncNode(param, name, tuple(args))

    def parse_remove_func(self, param: str, accept: AcceptFunc) -> FuncNode:
        """
        Parse prefix/suffix removal:
        ${param#word} ${param##word} ${param%word} ${param%%word}
        """
        name = self.scan_operator(param, accept)
        arg = self.parse_param(accept_not_closing, Mode.IDENT)
        self.consume_rbrack()
        return FuncNode(param, name, (arg,))

    def parse_replace_func(self, param: str, accept: AcceptFunc) -> FuncNode:
        """
        Parse pattern replacement:
        ${param/pattern/string} ${param//pattern/string}
        ${param/#pattern/string} ${param/%pattern/string}
        """
        name = self.scan_operator(param, accept)
        args = [self.parse_param(accept_not_slash, ARG_ESCAPES)]

        if self.scan(ScanConfig(Mode.IDENT, accept_slash)) != TT.IDENT:
            raise self.bad_substitution("expected '/' in replacement")

        # Empty replacement string
        if self.lexer.peek() == '}':
            self.consume_rbrack()
            return FuncNode(param, name, tuple(args))

        args.append(self.parse_param(accept_not_closing, ARG_ESCAPES))
        self.consume_rbrack()
        return FuncNode(param, name, tuple(args))

    def parse_default_func(self, param: str, accept: AcceptFunc) -> FuncNode:
        """
        Parse default value expansion:
        ${param=word} ${param:=word} ${param:-word} ${param:?word} ${param:+word}

        The word may mix text and nested ${...}; each piece is one argument.
        """
        name = self.scan_operator(param, accept)
        args: List[Node] = []

        while self.lexer.peek() != '}':
            try:
                args.append(self.parse_param(accept_not_closing, Mode.IDENT))
            except NestingTooDeep:
                raise
            except ParseError as exc:
                raise self.error(exc.message, exc) from exc

        self.consume_rbrack()
        return FuncNode(param, name, tuple(args))

    def parse_casing_func(self, param: str, accept: AcceptFunc) -> FuncNode:
        """
        Parse case modification:
        ${param,} ${param,,} ${param^} ${param^^}
        """
        name = self.scan_operator(param, accept)
        self.consume_rbrack()
        return FuncNode(param, name)

    def parse_len_func(self) -> FuncNode:
        """Parse ${#param}"""
        name = self.scan_operator('', accept_one_hash)

        if self.scan(NAME) != TT.IDENT:
            raise self.bad_substitution("expected variable name after '#'")
        param = self.lexer.string()

        self.consume_rbrack()
        return FuncNode(param, name)


def parse_source(source: str, max_depth: Optional[int] = None) -> Tree:
    """
    Parse a string containing parameter expansions to a Tree.

    Args:
        source: Text to parse
        max_depth: Maximum ${...} nesting depth (default from PARAMEXP_MAX_DEPTH, else 64)
    """
    parser = Parser(source, max_depth=max_depth)
    return parser.parse()


parse = parse_source
