"""
Defines the abstract syntax tree (AST) node types for the FCN language.

Every node is an `ASTNode` subclass with a short `kind` tag and a fixed tuple of
field names (`_fields`). The base class implements equality, `repr` and
dictionary conversion generically over those fields, so the variants below only
declare their data.

Classes:
    ASTNode: Base class. Tracks `line`/`col` for diagnostics.
    Literal, IntLiteral, StrLiteral, FloatLiteral: Leaf constants.
    Variable, TypeName: Identifiers in value and type position.
    Negate: Unary minus.
    BinaryOp, Add, Subtract, Multiply, Divide: Left/right arithmetic.
    Call: Callee plus argument tuple.
    Declaration: Typed binding `int x = ...;`.
    Return: `ret <expr>;`.
    FunctionDefinition: `fcn <type> <name>(<params>) { <body> }`.
    Program: Ordered function definitions.
    ASTDict: TypedDict describing the `to_dict()` output.

Nodes are built bottom-up by the parser and are not mutated afterwards.
Sequence fields are stored as tuples.

Example:
    node = Add(IntLiteral(1), Multiply(IntLiteral(2), IntLiteral(3)))
"""

from __future__ import annotations

from typing import Any, ClassVar, TypedDict


class ASTDict(TypedDict, total=False):
    """
    TypedDict representation of an ASTNode used for serialization.

    Fields:
        kind (str): The node tag (e.g. "func", "call", "add").
        line (int): Line number where the node originates.
        col (int): Column number where the node originates.

    Variant-specific fields (`value`, `name`, `left`, `args`, ...) are added with
    their names unchanged; nested nodes become nested ASTDicts.
    """

    kind: str
    line: int
    col: int


class ASTNode:
    """
    Base class for all FCN syntax tree nodes.

    Args:
        line (int): Source line number (default is 0 for hand-built nodes).
        col (int): Source column number (default is 0).

    Attributes:
        kind (str): Tag of the node variant.
        line (int): Line number in the source file.
        col (int): Column number in the source file.
        height (int): Levels in the subtree rooted here; a leaf is 1.

    Equality is structural and ignores `line`/`col`, so hand-built trees compare
    equal to parsed ones.
    """

    kind: ClassVar[str] = "node"
    _fields: ClassVar[tuple[str, ...]] = ()

    def __init__(self, line: int = 0, col: int = 0) -> None:
        # Subclasses set their fields first; children are complete at this point
        self.line = line
        self.col = col
        self.height: int = 1 + max((c.height for c in self.children()), default=0)

    def fields(self) -> list[tuple[str, Any]]:
        return [(name, getattr(self, name)) for name in self._fields]

    def children(self) -> list[ASTNode]:
        """Returns the direct child nodes in field order."""
        out: list[ASTNode] = []
        for _, val in self.fields():
            if isinstance(val, ASTNode):
                out.append(val)
            elif isinstance(val, tuple):
                out.extend(v for v in val if isinstance(v, ASTNode))
        return out

    def __repr__(self) -> str:
        parts = ", ".join(f"{name}={val!r}" for name, val in self.fields())
        return f"{type(self).__name__}({parts})"

    def __eq__(self, other: Any) -> bool:
        if type(other) is not type(self):
            return False
        return self.fields() == other.fields()

    def __hash__(self) -> int:
        return hash((type(self).__name__, *(v for _, v in self.fields())))

    def to_dict(self) -> ASTDict:
        out: dict[str, Any] = {"kind": self.kind, "line": self.line, "col": self.col}
        for name, val in self.fields():
            if isinstance(val, ASTNode):
                val = val.to_dict()
            elif isinstance(val, tuple):
                val = [v.to_dict() if isinstance(v, ASTNode) else v for v in val]
            out[name] = val
        return out  # type: ignore[return-value]


class Literal(ASTNode):
    _fields = ("value",)

    def __init__(self, value: Any, line: int = 0, col: int = 0) -> None:
        self.value = value
        super().__init__(line, col)


class IntLiteral(Literal):
    kind = "int"
    value: int


class StrLiteral(Literal):
    kind = "str"
    value: str


class FloatLiteral(Literal):
    kind = "float"
    value: float


class Variable(ASTNode):
    kind = "var"
    _fields = ("name",)

    def __init__(self, name: str, line: int = 0, col: int = 0) -> None:
        self.name = name
        super().__init__(line, col)


class TypeName(ASTNode):
    kind = "type"
    _fields = ("name",)

    def __init__(self, name: str, line: int = 0, col: int = 0) -> None:
        self.name = name
        super().__init__(line, col)


class Negate(ASTNode):
    kind = "neg"
    _fields = ("operand",)

    def __init__(self, operand: ASTNode, line: int = 0, col: int = 0) -> None:
        self.operand = operand
        super().__init__(line, col)


class BinaryOp(ASTNode):
    """Left-associative arithmetic node."""

    _fields = ("left", "right")

    def __init__(
        self, left: ASTNode, right: ASTNode, line: int = 0, col: int = 0
    ) -> None:
        self.left = left
        self.right = right
        super().__init__(line, col)


class Add(BinaryOp):
    kind = "add"


class Subtract(BinaryOp):
    kind = "sub"


class Multiply(BinaryOp):
    kind = "mul"


class Divide(BinaryOp):
    kind = "div"


class Call(ASTNode):
    kind = "call"
    _fields = ("callee", "args")

    def __init__(
        self,
        callee: Variable,
        args: tuple[ASTNode, ...] | list[ASTNode] = (),
        line: int = 0,
        col: int = 0,
    ) -> None:
        self.callee = callee
        self.args = tuple(args)
        super().__init__(line, col)


class Declaration(ASTNode):
    kind = "decl"
    _fields = ("name", "type_name", "rhs")

    def __init__(
        self,
        name: Variable,
        type_name: TypeName | None,
        rhs: ASTNode,
        line: int = 0,
        col: int = 0,
    ) -> None:
        self.name = name
        self.type_name = type_name
        self.rhs = rhs
        super().__init__(line, col)


class Return(ASTNode):
    kind = "return"
    _fields = ("value",)

    def __init__(self, value: ASTNode, line: int = 0, col: int = 0) -> None:
        self.value = value
        super().__init__(line, col)


class FunctionDefinition(ASTNode):
    """
    A top-level `fcn` definition.

    Attributes:
        name (Variable): Function name.
        return_type (TypeName | None): Declared return type.
        params (tuple[Variable, ...]): Parameter names, in order.
        body (tuple[ASTNode, ...]): Block statements, in order.
    """

    kind = "func"
    _fields = ("name", "return_type", "params", "body")

    def __init__(
        self,
        name: Variable,
        return_type: TypeName | None,
        params: tuple[Variable, ...] | list[Variable] = (),
        body: tuple[ASTNode, ...] | list[ASTNode] = (),
        line: int = 0,
        col: int = 0,
    ) -> None:
        self.name = name
        self.return_type = return_type
        self.params = tuple(params)
        self.body = tuple(body)
        super().__init__(line, col)


class Program(ASTNode):
    kind = "program"
    _fields = ("functions",)

    def __init__(
        self,
        functions: tuple[FunctionDefinition, ...] | list[FunctionDefinition] = (),
        line: int = 0,
        col: int = 0,
    ) -> None:
        self.functions = tuple(functions)
        super().__init__(line, col)


__all__ = [
    "ASTDict",
    "ASTNode",
    "Add",
    "BinaryOp",
    "Call",
    "Declaration",
    "Divide",
    "FloatLiteral",
    "FunctionDefinition",
    "IntLiteral",
    "Literal",
    "Multiply",
    "Negate",
    "Program",
    "Return",
    "StrLiteral",
    "Subtract",
    "TypeName",
    "Variable",
]
