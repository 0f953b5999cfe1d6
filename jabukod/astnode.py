"""Nodes of the abstract syntax tree."""

from __future__ import annotations

from typing import Iterator, Optional

from .nodedata import (
    BodyData,
    ExpressionData,
    FunctionCallData,
    FunctionData,
    LiteralData,
    NodeData,
    VariableData,
)
from .nodekind import NodeKind
from .symbols import Type, Variable

_CONVERSION_RESULT = {
    NodeKind.INT2FLOAT: Type.FLOAT,
    NodeKind.BOOL2FLOAT: Type.FLOAT,
    NodeKind.BOOL2INT: Type.INT,
    NodeKind.FLOAT2INT: Type.INT,
    NodeKind.INT2BOOL: Type.BOOL,
    NodeKind.FLOAT2BOOL: Type.BOOL,
}


class ASTNode:
    """A node of the syntax tree with its children and optional data."""

    def __init__(self, kind: NodeKind, data: Optional[NodeData] = None) -> None:
        self.kind = kind
        self.data = data
        self.parent: Optional[ASTNode] = None
        self.children: list[ASTNode] = []

    def __repr__(self) -> str:
        return f"ASTNode({self.kind.name}, children={len(self.children)})"

    def preorder(self) -> Iterator[ASTNode]:
        """This node and its descendants, each before its children."""
        yield self
        for child in self.children:
            yield from child.preorder()

    def postorder(self) -> Iterator[ASTNode]:
        """This node and its descendants, each after its children."""
        for child in self.children:
            yield from child.postorder()
        yield self

    def child(self, index: int) -> Optional[ASTNode]:
        """The child at ``index``, or None if there is none."""
        if 0 <= index < len(self.children):
            return self.children[index]
        return None

    def operand_type(self, index: int) -> Type:
        """The data type of the child at ``index``; VOID if unknown."""
        child = self.child(index)
        if child is None:
            return Type.VOID
        data = child.data
        if isinstance(data, (ExpressionData, LiteralData, VariableData)):
            return data.type
        if isinstance(data, FunctionCallData):
            return data.return_type
        return _CONVERSION_RESULT.get(child.kind, Type.VOID)

    def append_child(self, child: ASTNode) -> ASTNode:
        """Add ``child`` as the last child and return it."""
        child.parent = self
        self.children.append(child)
        return child

    def insert_above_child(self, child: ASTNode, index: int) -> None:
        """Put ``child`` at ``index``, moving the node there below it."""
        displaced = self.children[index]
        self.children[index] = child
        child.parent = self
        child.append_child(displaced)

    def delete_child(self, index: int) -> None:
        """Remove the subtree at ``index``."""
        self.pluck(index)

    def pluck(self, index: int) -> ASTNode:
        """Detach the subtree at ``index`` and return its root."""
        subtree = self.children.pop(index)
        subtree.parent = None
        return subtree

    def plant(self, index: int, subtree: ASTNode) -> None:
        """Insert ``subtree`` at ``index``, moving later children right."""
        subtree.parent = self
        self.children.insert(index, subtree)

    def adjust_arguments(self) -> None:
        """Rotate the children so the first one becomes the last."""
        if self.children:
            self.children.append(self.children.pop(0))

    def _ancestry(self) -> Iterator[ASTNode]:
        node: Optional[ASTNode] = self
        while node is not None:
            yield node
            node = node.parent

    def function_name(self) -> str:
        """The name of the function this node lies in."""
        for node in self._ancestry():
            if isinstance(node.data, FunctionData):
                return node.data.name
        raise LookupError("node is not inside a function")

    def is_scope_having(self) -> bool:
        """True for nodes that own a scope: functions, bodies and loop headers."""
        return isinstance(self.data, BodyData)

    def last_child_chain(self) -> list[bool]:
        """For this node and each ancestor up to the root, whether it is a last child."""
        return [
            node.parent is None or node.parent.children[-1] is node
            for node in self._ancestry()
        ]

    def rename_variable(self, name: str) -> None:
        """Rename the variable this node refers to, if it refers to one."""
        if isinstance(self.data, VariableData):
            self.data.name = name

    def remove_static_from_scope(self) -> list[Variable]:
        """Drop static variables from this node's scope and return them."""
        if isinstance(self.data, BodyData):
            return self.data.scope.remove_static()
        return []

    def _describe(self) -> str:
        data = self.data
        if isinstance(data, VariableData):
            return f"{data.name} : {data.type}"
        if isinstance(data, LiteralData):
            return f"{data.value!r} : {data.type}"
        if isinstance(data, ExpressionData):
            return f": {data.type}"
        if isinstance(data, FunctionData):
            return f"{data.name}()"
        if isinstance(data, FunctionCallData):
            return data.name if data.function is not None else "<undefined>"
        if isinstance(data, BodyData) and len(data.scope):
            return "{ " + ", ".join(data.scope.declarations()) + " }"
        return ""

    def render(self) -> str:
        """One line of a tree drawing for this node."""
        chain = self.last_child_chain()
        prefix = ""
        if self.parent is not None:
            for is_last in reversed(chain[1:-1]):
                prefix += "   " if is_last else "│  "
            prefix += "└─ " if chain[0] else "├─ "
        description = self._describe()
        line = f"{prefix}{self.kind.name}"
        return f"{line} {description}" if description else line