"""Kinds of abstract syntax tree nodes."""

from __future__ import annotations

from enum import IntEnum, auto


class NodeKind(IntEnum):
    """Every kind of node the syntax tree can hold.

    The numeric order matters: code generation indexes tables by the
    distance of a comparison kind from ``LESS``.
    """

    PROGRAM = 0
    VARIABLE_DECLARATION = auto()
    VARIABLE_DEFINITION = auto()
    FUNCTION = auto()

    MULTIPLICATION = auto()
    DIVISION = auto()
    MODULO = auto()
    LEFT_SHIFT = auto()
    RIGHT_SHIFT = auto()
    BIT_OR = auto()
    ADDITION = auto()
    SUBTRACTION = auto()
    BIT_XOR = auto()
    OR = auto()
    AND = auto()
    BIT_AND = auto()
    LESS = auto()
    LESS_EQUAL = auto()
    GREATER = auto()
    GREATER_EQUAL = auto()
    EQUAL = auto()
    NOT_EQUAL = auto()
    UNARY_MINUS = auto()
    BIT_NOT = auto()
    NOT = auto()
    MINUS = auto()  # unary or binary minus, resolved from context

    VARIABLE = auto()
    LITERAL = auto()

    ASSIGNMENT = auto()
    FUNCTION_CALL = auto()
    IF = auto()
    WHILE = auto()
    FOR = auto()
    FOREACH = auto()
    FOR_HEADER1 = auto()
    FOR_HEADER2 = auto()
    FOR_HEADER3 = auto()
    BODY = auto()

    RETURN = auto()
    EXIT = auto()
    CONTINUE = auto()
    BREAK = auto()
    REDO = auto()
    RESTART = auto()

    WRITE = auto()

    INT2FLOAT = auto()
    BOOL2INT = auto()
    INT2BOOL = auto()
    FLOAT2INT = auto()
    BOOL2FLOAT = auto()
    FLOAT2BOOL = auto()

    LIST_ACCESS = auto()
    LIST = auto()

    INVALID = auto()

    def is_conversion(self) -> bool:
        """True for the implicit type conversion kinds."""
        return self in _CONVERSIONS

    def to_sign(self) -> str:
        """The operator sign of an expression kind."""
        try:
            return _SIGNS[self]
        except KeyError:
            raise ValueError(f"{self.name} has no operator sign") from None


_CONVERSIONS = frozenset(
    {
        NodeKind.INT2FLOAT,
        NodeKind.BOOL2INT,
        NodeKind.INT2BOOL,
        NodeKind.FLOAT2INT,
        NodeKind.BOOL2FLOAT,
        NodeKind.FLOAT2BOOL,
    }
)

_SIGNS = {
    NodeKind.MULTIPLICATION: "*",
    NodeKind.DIVISION: "/",
    NodeKind.MODULO: "%",
    NodeKind.LEFT_SHIFT: "<<",
    NodeKind.RIGHT_SHIFT: ">>",
    NodeKind.BIT_OR: "|",
    NodeKind.ADDITION: "+",
    NodeKind.SUBTRACTION: "-",
    NodeKind.BIT_XOR: "^",
    NodeKind.OR: "||",
    NodeKind.AND: "&&",
    NodeKind.BIT_AND: "&",
    NodeKind.LESS: "<",
    NodeKind.LESS_EQUAL: "<=",
    NodeKind.GREATER: ">",
    NodeKind.GREATER_EQUAL: ">=",
    NodeKind.EQUAL: "==",
    NodeKind.NOT_EQUAL: "!=",
    NodeKind.UNARY_MINUS: "-",
    NodeKind.BIT_NOT: "~",
    NodeKind.NOT: "!",
    NodeKind.MINUS: "-",
    NodeKind.ASSIGNMENT: "=",
}

# A bare minus is ambiguous; callers decide between binary and unary.
_FROM_SIGN = {
    sign: kind
    for kind, sign in _SIGNS.items()
    if kind not in (NodeKind.SUBTRACTION, NodeKind.UNARY_MINUS)
}


def node_kind_from_sign(sign: str) -> NodeKind:
    """Map an operator sign to its node kind; unknown signs give INVALID."""
    return _FROM_SIGN.get(sign, NodeKind.INVALID)