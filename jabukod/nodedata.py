"""Data attached to the nodes of the syntax tree."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from .opcodes import RBP, float_parameter, normal_parameter
from .symbols import Scope, StorageSpecifier, Type, Variable

_REGISTER_PARAMETERS = 6
_FIRST_STACK_ARGUMENT = 16  # past the saved %rbp and the return address


class NodeData:
    """Base of all node data."""


class BodyData(NodeData):
    """A block of code with its own scope of variables."""

    def __init__(self) -> None:
        self.scope = Scope()


class ForData(BodyData):
    """The scope holding a for loop's control variable."""


class ForeachData(BodyData):
    """The scope holding a foreach loop's control variable."""


@dataclass
class ExpressionData(NodeData):
    """The data type of a subexpression."""

    type: Type


@dataclass
class LiteralData(NodeData):
    """An immediate int or bool value."""

    type: Type
    value: Any


class VariableData(NodeData):
    """A reference to a variable used by a node."""

    def __init__(self, variable: Variable) -> None:
        self.variable = variable

    @property
    def name(self) -> str:
        return self.variable.name

    @name.setter
    def name(self, name: str) -> None:
        self.variable.name = name

    @property
    def type(self) -> Type:
        return self.variable.type

    @property
    def specifier(self) -> StorageSpecifier:
        return self.variable.specifier

    @property
    def default_value(self) -> Any:
        return self.variable.default_value

    @property
    def stack_offset(self) -> int:
        return self.variable.stack_offset

    @property
    def parameter_order(self) -> Optional[int]:
        return self.variable.parameter_order

    @property
    def is_global(self) -> bool:
        return self.variable.is_global

    @property
    def is_parameter(self) -> bool:
        return self.variable.is_parameter

    @property
    def is_foreach_control_variable(self) -> bool:
        return self.variable.is_foreach_control_variable


@dataclass(eq=False)
class Function:
    """A function known to the program."""

    name: str
    return_type: Type = Type.VOID
    parameters: list[Variable] = field(default_factory=list)
    needed_stack_space: int = 0

    def _slots(self) -> list[str]:
        slots = []
        integers = floats = stacked = 0
        for parameter in self.parameters:
            if parameter.type == Type.FLOAT and floats < _REGISTER_PARAMETERS:
                slots.append(float_parameter(floats))
                floats += 1
            elif parameter.type != Type.FLOAT and integers < _REGISTER_PARAMETERS:
                slots.append(normal_parameter(integers))
                integers += 1
            else:
                slots.append(f"{_FIRST_STACK_ARGUMENT + 8 * stacked}({RBP})")
                stacked += 1
        return slots

    def parameter_slot(self, order: int) -> str:
        """The register or stack location where the order-th argument is passed."""
        return self._slots()[order]

    def parameter_type(self, order: int) -> Type:
        """The data type of the order-th parameter."""
        return self.parameters[order].type


class FunctionData(BodyData):
    """The definition of a function, with its top level scope."""

    def __init__(self, function: Function) -> None:
        super().__init__()
        self.function = function

    @property
    def name(self) -> str:
        return self.function.name

    @property
    def needed_stack_space(self) -> int:
        return self.function.needed_stack_space

    @property
    def parameter_count(self) -> int:
        return len(self.function.parameters)

    def parameter_slot(self, order: int) -> str:
        """Where the order-th parameter arrives."""
        return self.function.parameter_slot(order)

    def parameter_type(self, order: int) -> Type:
        """The data type of the order-th parameter."""
        return self.function.parameter_type(order)


class FunctionCallData(NodeData):
    """A call of a function; ``exists`` tells void functions from undefined ones."""

    def __init__(self, function: Optional[Function], exists: bool) -> None:
        self.function = function
        self.exists = exists

    def _called(self) -> Function:
        if self.function is None:
            raise LookupError("the called function is not defined")
        return self.function

    @property
    def name(self) -> str:
        return self._called().name

    @property
    def return_type(self) -> Type:
        if self.function is None:
            return Type.VOID
        return self.function.return_type

    def argument_type(self, order: int) -> Type:
        """The data type the order-th argument is passed as."""
        return self._called().parameter_type(order)

    def argument_slot(self, order: int) -> str:
        """The register or stack location for the order-th argument."""
        return self._called().parameter_slot(order)