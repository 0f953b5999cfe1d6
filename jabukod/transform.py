"""Conversions from program entities to assembly operands and directives."""

from __future__ import annotations

from typing import Any

from .instruction import Instruction
from .nodedata import FunctionData, LiteralData
from .nodekind import NodeKind
from .opcodes import (
    CMOVAEQ,
    CMOVAQ,
    CMOVBEQ,
    CMOVBQ,
    CMOVEQ,
    CMOVGEQ,
    CMOVGQ,
    CMOVLEQ,
    CMOVLQ,
    CMOVNEQ,
    JA,
    JAE,
    JB,
    JBE,
    JE,
    JG,
    JGE,
    JL,
    JLE,
    JNE,
    RAX,
    RBP,
    RBX,
    RIP,
)
from .symbols import (
    DEFAULT_BOOL,
    DEFAULT_FLOAT,
    DEFAULT_INT,
    DEFAULT_STRING,
    BaseType,
    Type,
    Variable,
)

_DIRECTIVES = {
    BaseType.INT: ".quad",
    BaseType.BOOL: ".quad",
    BaseType.ARRAY_INT: ".quad",
    BaseType.ARRAY_BOOL: ".quad",
    BaseType.FLOAT: ".float",
    BaseType.ARRAY_FLOAT: ".float",
    BaseType.STRING: ".asciz",
}

_SCALAR_DEFAULTS = {
    BaseType.INT: DEFAULT_INT,
    BaseType.FLOAT: DEFAULT_FLOAT,
    BaseType.BOOL: DEFAULT_BOOL,
    BaseType.STRING: DEFAULT_STRING,
}

# Columns follow the comparison kinds from LESS: <, <=, >, >=, ==, !=.
# The jumps lead to the false branch, so each is the negated condition.
_JUMPS_UNSIGNED = (JAE, JA, JBE, JB, JNE, JE)  # used for SSE comparisons
_JUMPS_SIGNED = (JGE, JG, JLE, JL, JNE, JE)
_CMOVES_UNSIGNED = (CMOVBQ, CMOVBEQ, CMOVAQ, CMOVAEQ, CMOVEQ, CMOVNEQ)
_CMOVES_SIGNED = (CMOVLQ, CMOVLEQ, CMOVGQ, CMOVGEQ, CMOVEQ, CMOVNEQ)


def is_label(instruction: Instruction) -> bool:
    """True if the instruction is a label definition."""
    return instruction.opcode.endswith(":")


def identifier_to_label(name: str) -> str:
    """The label definition for an identifier."""
    return f"{name}:"


def type_to_directive(type: Type) -> str:
    """The data directive used to store a value of the given type."""
    try:
        return _DIRECTIVES[type.base]
    except KeyError:
        raise ValueError(f"no data directive for type {type}") from None


def _format_float(value: float) -> str:
    return f"{float(value):f}"


def _format_bool(value: Any) -> str:
    return "1" if value else "0"


def _format_int(value: Any) -> str:
    return str(int(value))


_ITEM_FORMATTERS = {
    BaseType.INT: _format_int,
    BaseType.FLOAT: _format_float,
    BaseType.BOOL: _format_bool,
}


def default_value_initializer(variable: Variable) -> str:
    """The initializer written after the data directive of a global variable."""
    type = variable.type
    value = variable.default_value

    if type.is_array():
        scalar = type.scalar_equivalent().base
        items = value
        if items is None:
            items = [_SCALAR_DEFAULTS[scalar]] * type.size
        return ", ".join(_ITEM_FORMATTERS[scalar](item) for item in items)

    if type.base not in _SCALAR_DEFAULTS:
        return ""
    if value is None:
        value = _SCALAR_DEFAULTS[type.base]
    if type.base is BaseType.STRING:
        return str(value)
    return _ITEM_FORMATTERS[type.base](value)


def is_register(memory: str) -> bool:
    """True if the operand names a register; only registers start with '%'."""
    return memory.startswith("%")


def global_to_address(name: str) -> str:
    """The %rip relative address of a global symbol."""
    return f"{name}({RIP})"


def register_to_address(register: str) -> str:
    """The memory operand addressed by a register."""
    return f"({register})"


def int_to_immediate(number: int) -> str:
    """The immediate operand of an integer."""
    return f"${int(number)}"


def literal_to_immediate(data: LiteralData) -> str:
    """The immediate operand of an int or bool literal."""
    if data.type == Type.INT:
        return int_to_immediate(int(data.value))
    if data.type == Type.BOOL:
        return int_to_immediate(1 if data.value else 0)
    raise ValueError(f"a {data.type} literal cannot be an immediate value")


def variable_to_location(data: Any, function: FunctionData) -> str:
    """Where a variable lives at run time: a global address or a stack slot."""
    if data.is_global:
        return global_to_address(data.name)

    if data.is_parameter:
        base = -(function.needed_stack_space + 8)
        offset = base - data.parameter_order * 8
        return f"{offset}({RBP})"

    return f"{data.stack_offset}({RBP})"


def list_access_to_location(array: Variable, index_register: str = RAX) -> str:
    """The indexed memory operand of an array item.

    Global arrays are expected to have their address loaded in %rbx.
    """
    if array.is_global:
        address = f"({RBX}"
    else:
        address = f"{array.stack_offset}({RBP}"

    scale = "4" if array.type.scalar_equivalent() == Type.FLOAT else "8"
    return f"{address}, {index_register}, {scale})"


def _comparison_column(condition: NodeKind) -> int:
    column = condition - NodeKind.LESS
    if not 0 <= column < len(_JUMPS_SIGNED):
        raise ValueError(f"{NodeKind(condition).name} is not a comparison")
    return column


def condition_to_jump(condition: NodeKind, comparison_type: Type) -> str:
    """The jump taken when the comparison does not hold."""
    column = _comparison_column(condition)
    table = _JUMPS_UNSIGNED if comparison_type == Type.FLOAT else _JUMPS_SIGNED
    return table[column]


def condition_to_cmove(condition: NodeKind, comparison_type: Type) -> str:
    """The conditional move that sets the result when the comparison holds."""
    column = _comparison_column(condition)
    table = _CMOVES_UNSIGNED if comparison_type == Type.FLOAT else _CMOVES_SIGNED
    return table[column]