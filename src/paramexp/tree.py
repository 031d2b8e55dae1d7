"""AST node classes produced by the parser, plus helpers shared by the
runner, the REPL and AST consumers.

The tree is immutable once built. Consumers that prefer lark's visitor
machinery can convert it with to_lark().
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Tuple, Union

from lark import Token, Tree as LarkTree
from typing_extensions import TypeAlias


@dataclass(frozen=True)
class TextNode:
    """A literal run of text."""

    value: str


@dataclass(frozen=True)
class FuncNode:
    """One ${...} construct.

    param is the variable name, name the operator token (":-", "//", "#",
    ...; empty for a bare ${param}) and args the operator arguments, each a
    TextNode or a nested FuncNode.
    """

    param: str
    name: str = ''
    args: Tuple[Node, ...] = ()


@dataclass(frozen=True)
class ListNode:
    """A node followed by everything after it."""

    nodes: Tuple[Node, Node]

    def __post_init__(self) -> None:
        if len(self.nodes) != 2:
            raise ValueError(f"ListNode takes exactly 2 nodes, got {len(self.nodes)}")


class EmptyNode:
    """Sentinel for "no remaining content"; use the EMPTY singleton."""
    __slots__ = ()

    def __repr__(self) -> str:
        return 'EMPTY'


EMPTY = EmptyNode()

Node: TypeAlias = Union[TextNode, FuncNode, ListNode, EmptyNode]


@dataclass(frozen=True)
class Tree:
    """Result of a successful parse."""

    root: Node
    context: str = field(default='', repr=False)


# Operator token -> delimiter placed between arguments when rendering.
_ARG_DELIMITERS = {
    ':': ':',
    '/': '/',
    '//': '/',
    '/#': '/',
    '/%': '/',
}

_REPLACE_OPS = frozenset(('/', '//', '/#', '/%'))
_SUBSTR_OPS = frozenset((':',))


def chain(nodes: Iterable[Node]) -> Node:
    """Fold a flat sequence into the right-nested two-child list shape."""
    items = list(nodes)
    if not items:
        return EMPTY

    result = items[-1]
    for node in reversed(items[:-1]):
        result = ListNode((node, result))
    return result


def flatten(node: Node) -> List[Node]:
    """Inverse of chain(): the ordered pieces of a list chain."""
    out: List[Node] = []
    while isinstance(node, ListNode):
        out.append(node.nodes[0])
        node = node.nodes[1]

    if node is not EMPTY:
        out.append(node)
    return out


def _escape_arg(value: str, op: str) -> str:
    if op in _REPLACE_OPS or op in _SUBSTR_OPS:
        return value.replace('\\', '\\\\').replace('/', '\\/').replace('$', '$$')
    return value


def render(node: Node, _op: str = '') -> str:
    """Reconstruct canonical source text for node.

    Parsing the result yields an equal tree for anything parse() produced.
    """
    if node is EMPTY:
        return ''

    if isinstance(node, ListNode):
        return ''.join(render(n, _op) for n in flatten(node))

    if isinstance(node, TextNode):
        if _op:
            return _escape_arg(node.value, _op)
        return node.value.replace('$', '$$')

    if isinstance(node, FuncNode):
        if node.name == '#' and not node.args:
            return f'${{#{node.param}}}'

        delim = _ARG_DELIMITERS.get(node.name, '')
        args = delim.join(render(arg, node.name) for arg in node.args)
        if node.name in _REPLACE_OPS and len(node.args) == 1:
            args += '/'
        return f'${{{node.param}{node.name}{args}}}'

    raise TypeError(f"not an AST node: {node!r}")


def to_lark(node: Node) -> Union[LarkTree, Token]:
    """Convert an AST into lark Tree/Token objects.

    TextNode -> Token('TEXT'), FuncNode -> Tree('func', [PARAM, OP, *args]),
    ListNode -> Tree('list', [first, rest]), EMPTY -> Tree('empty', []).
    """
    if node is EMPTY:
        return LarkTree('empty', [])
    if isinstance(node, TextNode):
        return Token('TEXT', node.value)
    if isinstance(node, FuncNode):
        children: List[Union[LarkTree, Token]] = [
            Token('PARAM', node.param),
            Token('OP', node.name),
        ]
        children.extend(to_lark(arg) for arg in node.args)
        return LarkTree('func', children)
    if isinstance(node, ListNode):
        return LarkTree('list', [to_lark(n) for n in node.nodes])

    raise TypeError(f"not an AST node: {node!r}")


def func_nodes(node: Node) -> List[FuncNode]:
    """All FuncNodes in node, outermost first, in source order."""
    found: List[FuncNode] = []
    stack: List[Node] = [node]

    while stack:
        cur = stack.pop()
        if isinstance(cur, ListNode):
            stack.extend(reversed(cur.nodes))
        elif isinstance(cur, FuncNode):
            found.append(cur)
            stack.extend(reversed(cur.args))

    return found
