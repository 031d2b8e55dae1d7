"""Parser for shell-style parameter expansions embedded in free text."""

from .lexer_rd import Lexer, tokenize
from .parser_rd import (
    BadSubstitution,
    NestingTooDeep,
    ParseError,
    Parser,
    parse,
    parse_source,
)
from .token_types import TT, Mode, ScanConfig, Tok
from .tree import (
    EMPTY,
    EmptyNode,
    FuncNode,
    ListNode,
    Node,
    TextNode,
    Tree,
    chain,
    flatten,
    func_nodes,
    render,
    to_lark,
)

__all__ = [
    # Lexer
    "Lexer",
    "tokenize",
    "TT",
    "Mode",
    "ScanConfig",
    "Tok",
    # Parser
    "Parser",
    "parse",
    "parse_source",
    "ParseError",
    "BadSubstitution",
    "NestingTooDeep",
    # AST
    "Tree",
    "Node",
    "TextNode",
    "FuncNode",
    "ListNode",
    "EmptyNode",
    "EMPTY",
    "chain",
    "flatten",
    "func_nodes",
    "render",
    "to_lark",
]
