"""
Renders FCN syntax trees as indented debug text.

This module defines the `DebugEmitter` class, which turns a `Program` (or any
subtree) into a nested, brace-and-bracket text dump used by the command-line
wrapper for stdout and the `.ast` sidecar file.

Format:
    - Leaves print inline: `Int(1)`, `Str("hi")`, `Float(1.5)`, `Var("x")`, `Type("int")`.
    - Operators print as tuples with one item per line: `Add(\\n    Int(1),\\n    Int(2),\\n)`.
    - Declarations, returns and functions print as `Name { field: value, ... }`.
    - Sequences print as `[ ... ]`, or `[]` when empty.
    - Every nested item ends with a trailing comma and is indented by four spaces.

The output is a diagnostic dump, not concrete syntax; it is deterministic, so the
same tree always renders to the same bytes.

Raises:
    - `NotImplementedError`: If a node kind has no `emit_*` method.
"""

import json

from fcn.fcn_ast import (
    ASTNode,
    BinaryOp,
    Call,
    Declaration,
    FunctionDefinition,
    Literal,
    Negate,
    Program,
    Return,
    TypeName,
    Variable,
)

binary_names = {"add": "Add", "sub": "Sub", "mul": "Mul", "div": "Div"}


class DebugEmitter:
    """Emits debug text from FCN AST nodes.

    Attributes:
        indent_width (int): Spaces per nesting level.
    """

    def __init__(self, indent_width: int = 4) -> None:
        self.indent_width = indent_width

    def indent(self, text: str) -> str:
        pad = " " * self.indent_width
        return "\n".join(pad + line for line in text.split("\n"))

    def group(self, opener: str, items: list[str], closer: str) -> str:
        if not items:
            return opener + closer
        body = "".join(self.indent(item) + ",\n" for item in items)
        return f"{opener}\n{body}{closer}"

    def struct(self, name: str, fields: list[tuple[str, str]]) -> str:
        return self.group(name + " {", [f"{k}: {v}" for k, v in fields], "}")

    def sequence(self, nodes: tuple[ASTNode, ...]) -> str:
        return self.group("[", [self.emit(n) for n in nodes], "]")

    def optional(self, node: ASTNode | None) -> str:
        return "None" if node is None else self.emit(node)

    def emit(self, node: ASTNode) -> str:
        """Dispatches to the `emit_<kind>` method for `node`."""
        method = getattr(self, f"emit_{node.kind}", None)
        if method is None:
            raise NotImplementedError(
                f"No emitter method for node kind '{node.kind}' "
                f"(line {node.line}, col {node.col})"
            )
        result: str = method(node)
        return result

    def emit_int(self, node: Literal) -> str:
        return f"Int({node.value})"

    def emit_float(self, node: Literal) -> str:
        return f"Float({node.value!r})"

    def emit_str(self, node: Literal) -> str:
        return f"Str({json.dumps(node.value, ensure_ascii=False)})"

    def emit_var(self, node: Variable) -> str:
        return f'Var("{node.name}")'

    def emit_type(self, node: TypeName) -> str:
        return f'Type("{node.name}")'

    def emit_neg(self, node: Negate) -> str:
        return self.group("Neg(", [self.emit(node.operand)], ")")

    def emit_binary(self, node: BinaryOp) -> str:
        name = binary_names[node.kind]
        return self.group(name + "(", [self.emit(node.left), self.emit(node.right)], ")")

    emit_add = emit_binary
    emit_sub = emit_binary
    emit_mul = emit_binary
    emit_div = emit_binary

    def emit_call(self, node: Call) -> str:
        return self.group(
            "Call(", [self.emit(node.callee), self.sequence(node.args)], ")"
        )

    def emit_decl(self, node: Declaration) -> str:
        return self.struct(
            "Declaration",
            [
                ("name", self.emit(node.name)),
                ("type_name", self.optional(node.type_name)),
                ("rhs", self.emit(node.rhs)),
            ],
        )

    def emit_return(self, node: Return) -> str:
        return self.struct("Return", [("value", self.emit(node.value))])

    def emit_func(self, node: FunctionDefinition) -> str:
        return self.struct(
            "Function",
            [
                ("name", self.emit(node.name)),
                ("return_type", self.optional(node.return_type)),
                ("params", self.sequence(node.params)),
                ("body", self.sequence(node.body)),
            ],
        )

    def emit_program(self, node: Program) -> str:
        return self.sequence(node.functions)

    def get_output(self, node: ASTNode) -> str:
        return self.emit(node)
