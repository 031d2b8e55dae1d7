from __future__ import annotations

import logging
import sys
import traceback
from pathlib import Path
from typing import List, Optional

from .parser_rd import ParseError, parse_source
from .tree import Tree, render, to_lark
from .utils import debug_py_trace_enabled


def show(tree: Tree, as_source: bool = False) -> str:
    """Printable form of a parsed tree: lark's pretty() dump or canonical source."""
    if as_source:
        return render(tree.root)

    node = to_lark(tree.root)
    pretty = getattr(node, 'pretty', None)
    if pretty is not None:
        return pretty().rstrip('\n')

    # A lone text run converts to a Token
    return f'{node.type}\t{node.value!r}'

def report_error(exc: ParseError) -> None:
    print(f"Error: {exc}", file=sys.stderr)
    if debug_py_trace_enabled() and exc.__traceback__ is not None:
        print("\nPython traceback:", file=sys.stderr)
        print("".join(traceback.format_tb(exc.__traceback__)), file=sys.stderr, end="")

def _load_source(arg: Optional[str]) -> str:
    """
    Resolve CLI input into source text.
    - None or "-" => read stdin.
    - Existing file => read file contents.
    - Otherwise (including names the OS rejects) treat the argument as literal source.
    """

    if arg is None or arg == "-":
        data = sys.stdin.read()
        if not data:
            raise SystemExit("No input provided on stdin")
        return data

    candidate = Path(arg)
    try:
        is_file = bool(arg) and candidate.is_file()
    except OSError:
        is_file = False

    if is_file:
        return candidate.read_text(encoding="utf-8")

    return arg

def _parse_depth(value: str) -> int:
    try:
        depth = int(value)
    except ValueError:
        raise SystemExit(f"--max-depth expects an integer, got {value!r}") from None

    if depth <= 0:
        raise SystemExit("--max-depth must be positive")
    return depth

def main(argv: Optional[List[str]] = None) -> int:
    as_source = False
    verbose = False
    max_depth: Optional[int] = None
    arg = None
    it = iter(sys.argv[1:] if argv is None else argv)

    for token in it:
        if token == "--render":
            as_source = True
            continue

        if token in ("-v", "--verbose"):
            verbose = True
            continue

        if token.startswith("--max-depth="):
            max_depth = _parse_depth(token.split("=", 1)[1])
            continue

        if token == "--max-depth":
            try:
                max_depth = _parse_depth(next(it))
            except StopIteration:
                raise SystemExit("--max-depth flag requires a value") from None
            continue

        if arg is None:
            arg = token
        else:
            raise SystemExit(f"Unexpected argument: {token}")

    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    source = _load_source("-" if arg is None else arg)

    try:
        tree = parse_source(source, max_depth=max_depth)
    except ParseError as exc:
        report_error(exc)
        return 1

    print(show(tree, as_source=as_source))
    return 0

if __name__ == "__main__":
    sys.exit(main())
