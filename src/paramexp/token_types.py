"""
Token Types for the parameter expansion scanner

Shared between lexer and parser to avoid circular dependencies.
"""

from typing import Callable
from dataclasses import dataclass
from enum import Enum, Flag, auto

# Returns True if the character extends the current token. The index is the
# 1-based position of the character inside the token being scanned.
AcceptFunc = Callable[[str, int], bool]


class TT(Enum):
    """Token Types"""

    # Special
    ILLEGAL = auto()
    EOF = auto()

    # Identifiers and literal runs
    IDENT = auto()

    # Delimiters
    LBRACK = auto()  # ${
    RBRACK = auto()  # }


class Mode(Flag):
    """Mode bits controlling which token shapes are recognized"""

    NONE = 0
    IDENT = auto()
    LBRACK = auto()
    RBRACK = auto()
    ESCAPE = auto()  # $$
    BACKSLASH = auto()  # \/ and \\


@dataclass(frozen=True)
class ScanConfig:
    """Scanner configuration for a single scan() call"""

    mode: Mode
    accept: AcceptFunc


@dataclass
class Tok:
    """Token with position info"""

    type: TT
    value: str
    line: int = 0
    column: int = 0

    def __repr__(self):
        return f"Tok({self.type.name}, {self.value!r}, {self.line}:{self.column})"
