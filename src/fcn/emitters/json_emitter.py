"""Renders FCN syntax trees as indented JSON built from `ASTNode.to_dict()`."""

import json

from fcn.fcn_ast import ASTNode


class JsonEmitter:
    def __init__(self, indent_width: int = 2) -> None:
        self.indent_width = indent_width

    def get_output(self, node: ASTNode) -> str:
        return json.dumps(node.to_dict(), indent=self.indent_width, ensure_ascii=False)
