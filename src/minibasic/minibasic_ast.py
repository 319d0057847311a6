"""
Defines the parse-tree node structure for the minibasic dialect.

Classes:
    ASTNode:
        A tagged, write-once tree node produced by the parser. The ``kind`` tag
        is drawn from ``NODE_KINDS`` and decides how the payload fields are read.

    ASTDict:
        TypedDict representation for serializing ASTNode instances to plain Python
        dictionaries, suitable for JSON output or debugging.

Each ASTNode tracks:
    kind (str): The construct tag (e.g. "def", "if", "add", "integer").
    value (str | ASTNode, optional): Name, operator, lexeme, or the condition of an if/while.
    children (tuple[ASTNode, ...]): Operands, arguments or body statements, in source order.
    params (tuple[str, ...]): Parameter names of a "def".
    line (int): Source line number of the node's lead token.
    col (int): Source column number of the node's lead token.

Payload layout per kind:

    ========== ================ ====================
    kind       value            children
    ========== ================ ====================
    program    -                statements
    def        name             body (params: names)
    end        -                -
    if, while  condition node   body
    print      -                expressions
    return     -                [expr]
    remark     text             -
    assign     name             [expr]
    call       name             arguments
    or, and    -                [left, right]
    not        -                [operand]
    compare    operator lexeme  [left, right]
    add, sub   "+" / "-"        [left, right]
    mult       "*"              [left, right]
    divide     "/"              [left, right]
    negate     -                [operand]
    id         name             -
    integer    lexeme           -
    real       lexeme           -
    string     content          -
    ========== ================ ====================

Example:
    node = ASTNode("assign", value="x", children=[ASTNode("integer", "5")])
"""

from collections.abc import Iterable
from typing import Any, TypedDict, Union

from minibasic.minibasic_constants import NODE_KINDS


class ASTDict(TypedDict, total=False):
    """
    TypedDict representation of an ASTNode used for serialization.

    Fields:
        kind (str): The node tag.
        value (Any): The node's value, which may be a string or a nested ASTDict.
        line (int): Line number in the source code where the node originates.
        col (int): Column number in the source code where the node originates.
        params (List[str]): Parameter names; only non-empty for "def".
        children (List[ASTDict]): Child nodes in source order.
    """

    kind: str
    value: Any
    line: int
    col: int
    params: list[str]
    children: list["ASTDict"]


class ASTNode:
    """
    A node in the minibasic parse tree.

    Nodes are created bottom-up by the parser and never change afterwards:
    ``children`` and ``params`` are stored as tuples and attribute assignment
    after construction raises AttributeError.

    Args:
        kind (str): Node tag from ``NODE_KINDS``.
        value (Union[str, ASTNode], optional): See the payload table in the module docstring.
        children (Iterable[ASTNode], optional): Child nodes in source order.
        line (int): Source line number (default is 0).
        col (int): Source column number (default is 0).
        params (Iterable[str], optional): Parameter names for "def" nodes.

    Raises:
        ValueError: If ``kind`` is not a known node kind.
    """

    __slots__ = ("kind", "value", "children", "params", "line", "col")

    def __init__(
        self,
        kind: str,
        value: Union[str, "ASTNode"] | None = None,
        children: Iterable["ASTNode"] | None = None,
        line: int = 0,
        col: int = 0,
        params: Iterable[str] | None = None,
    ):
        if kind not in NODE_KINDS:
            raise ValueError(f"Unknown node kind: {kind!r}")
        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "value", value)
        object.__setattr__(self, "children", tuple(children or ()))
        object.__setattr__(self, "params", tuple(params or ()))
        object.__setattr__(self, "line", line)
        object.__setattr__(self, "col", col)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"ASTNode is immutable; cannot set {name!r}")

    def __repr__(self) -> str:
        parts = [f"{self.kind}"]
        if self.value is not None:
            parts.append(f"value={repr(self.value)}")
        if self.params:
            parts.append(f"params={list(self.params)}")
        if self.children:
            preview = ", ".join(repr(c) for c in self.children[:3])
            if len(self.children) > 3:
                preview += ", ..."
            parts.append(f"children=[{preview}]")
        return f"ASTNode({', '.join(parts)})"

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, ASTNode):
            return False
        return (
            self.kind == other.kind
            and self.value == other.value
            and self.line == other.line
            and self.col == other.col
            and self.params == other.params
            and self.children == other.children
        )

    def __hash__(self) -> int:
        return hash((self.kind, self.value, self.children, self.params, self.line, self.col))

    def walk(self) -> Iterable["ASTNode"]:
        """Yields this node and every descendant in pre-order, conditions before bodies."""
        yield self
        if isinstance(self.value, ASTNode):
            yield from self.value.walk()
        for child in self.children:
            yield from child.walk()

    def to_dict(self) -> ASTDict:
        val: Any = self.value
        if isinstance(val, ASTNode):
            val = val.to_dict()

        return {
            "kind": self.kind,
            "value": val,
            "line": self.line,
            "col": self.col,
            "params": list(self.params),
            "children": [c.to_dict() for c in self.children],
        }
