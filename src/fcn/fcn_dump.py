"""
Provides the `Dumper` class for rendering FCN syntax trees as text.

Classes and Features:
    - Emitter (Protocol): Interface for all dump emitters. Requires `get_output(node)`.
    - DebugEmitter: Indented debug text (default, also used for `.ast` sidecar files).
    - JsonEmitter: Indented JSON built from `ASTNode.to_dict()`.
    - Dumper: Selects an emitter by format name and renders a tree.

Example:
    >>> Dumper("debug").dump(parse("fcn int main() { }"))

Raises:
    ValueError: If the format is not supported.
    TypeError: If the object to dump is not an ASTNode.
"""

from typing import Protocol

from fcn.emitters.debug_emitter import DebugEmitter
from fcn.emitters.json_emitter import JsonEmitter
from fcn.fcn_ast import ASTNode


class Emitter(Protocol):  # pragma: no cover
    """Protocol for FCN dump emitters."""

    def get_output(self, node: ASTNode) -> str: ...  # pragma: no cover


EmitterType = type[Emitter]
"""Alias for a concrete Emitter class type."""

emitters: dict[str, EmitterType] = {
    "debug": DebugEmitter,
    "json": JsonEmitter,
}


class Dumper:
    """Renders FCN AST nodes with the emitter for a chosen format.

    Attributes:
        emitter (Emitter): The selected emitter instance.
    """

    def __init__(self, fmt: str = "debug") -> None:
        """Initializes the dumper.

        Args:
            fmt: Output format name ("debug" or "json").

        Raises:
            ValueError: If the format is not supported.
        """
        fmt = fmt.lower()
        if fmt not in emitters:
            raise ValueError(f"Unknown dump format: {fmt!r}")
        self.emitter: Emitter = emitters[fmt]()

    def dump(self, node: ASTNode) -> str:
        if not isinstance(node, ASTNode):
            raise TypeError(f"Expected an ASTNode, got {type(node).__name__}")
        return self.emitter.get_output(node)


def dump(node: ASTNode, fmt: str = "debug") -> str:
    return Dumper(fmt).dump(node)
