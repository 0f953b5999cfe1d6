"""Data types, storage specifiers, variables and their scopes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator, Optional

DEFAULT_INT = 0
DEFAULT_FLOAT = 0.0
DEFAULT_BOOL = False
DEFAULT_STRING = '""'


class BaseType(Enum):
    """The basic data types of the language."""

    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    STRING = "string"
    VOID = "void"
    ARRAY_INT = "int[]"
    ARRAY_FLOAT = "float[]"
    ARRAY_BOOL = "bool[]"


_SCALAR_OF = {
    BaseType.ARRAY_INT: BaseType.INT,
    BaseType.ARRAY_FLOAT: BaseType.FLOAT,
    BaseType.ARRAY_BOOL: BaseType.BOOL,
}
_ARRAY_OF = {scalar: array for array, scalar in _SCALAR_OF.items()}


@dataclass(frozen=True)
class Type:
    """A data type; arrays also carry their item count."""

    base: BaseType
    size: int = 0

    @classmethod
    def array(cls, scalar: Type, size: int) -> Type:
        """An array type holding ``size`` items of ``scalar``."""
        if scalar.base not in _ARRAY_OF:
            raise ValueError(f"there are no arrays of {scalar}")
        if size < 1:
            raise ValueError(f"array size must be positive, not {size}")
        return cls(_ARRAY_OF[scalar.base], size)

    def is_array(self) -> bool:
        """True for array types."""
        return self.base in _SCALAR_OF

    def scalar_equivalent(self) -> Type:
        """The item type of an array; scalars are returned unchanged."""
        if self.is_array():
            return Type(_SCALAR_OF[self.base])
        return self

    def __str__(self) -> str:
        if self.is_array():
            return f"{_SCALAR_OF[self.base].value}[{self.size}]"
        return self.base.value


Type.INT = Type(BaseType.INT)
Type.FLOAT = Type(BaseType.FLOAT)
Type.BOOL = Type(BaseType.BOOL)
Type.STRING = Type(BaseType.STRING)
Type.VOID = Type(BaseType.VOID)


class StorageSpecifier(Enum):
    """How a variable is stored."""

    NONE = ""
    CONST = "const"
    STATIC = "static"

    @classmethod
    def from_text(cls, text: str) -> StorageSpecifier:
        """The specifier written as ``text`` in a program."""
        try:
            return cls(text)
        except ValueError:
            raise ValueError(f"unknown storage specifier {text!r}") from None


@dataclass(eq=False)
class Variable:
    """A variable, parameter, literal constant or enum item."""

    name: str
    type: Type
    specifier: StorageSpecifier = StorageSpecifier.NONE
    stack_offset: int = 0
    is_global: bool = False
    parameter_order: Optional[int] = None
    default_value: Any = None
    iterated_array: Optional[Variable] = None
    restructure: bool = False

    @property
    def is_parameter(self) -> bool:
        """True if the variable is a function parameter."""
        return self.parameter_order is not None

    @property
    def is_foreach_control_variable(self) -> bool:
        """True if the variable iterates over an array in a foreach loop."""
        return self.iterated_array is not None


class Scope:
    """An ordered collection of local variables."""

    def __init__(self) -> None:
        self._variables: list[Variable] = []

    def __iter__(self) -> Iterator[Variable]:
        return iter(self._variables)

    def __len__(self) -> int:
        return len(self._variables)

    def __contains__(self, name: object) -> bool:
        return any(variable.name == name for variable in self._variables)

    def add_variable(
        self,
        name: str,
        specifier: StorageSpecifier,
        type: Type,
        stack_offset: int,
    ) -> Variable:
        """Create a variable in this scope and return it."""
        variable = Variable(name, type, specifier, stack_offset)
        self._variables.append(variable)
        return variable

    def is_name_available(self, name: str) -> bool:
        """True if no variable of this name is in the scope."""
        return name not in self

    def get(self, name: str) -> Optional[Variable]:
        """The variable of this name, or None."""
        return next((v for v in self._variables if v.name == name), None)

    def remove_static(self) -> list[Variable]:
        """Remove the static variables and return them."""
        removed = [v for v in self._variables if v.specifier is StorageSpecifier.STATIC]
        self._variables = [
            v for v in self._variables if v.specifier is not StorageSpecifier.STATIC
        ]
        return removed

    def opaque_predicate_variable(self) -> Optional[Variable]:
        """Some scalar variable of the scope, or None if there is none."""
        return next((v for v in self._variables if not v.type.is_array()), None)

    def adjust_for_restructuring(self, stack_offset: int, adjustment: int) -> None:
        """Shift by ``adjustment`` every variable stored at or below ``stack_offset``."""
        for variable in self._variables:
            if variable.stack_offset <= stack_offset:
                variable.stack_offset += adjustment

    def declarations(self) -> Iterator[str]:
        """Each variable written as a declaration."""
        for variable in self._variables:
            parts = (variable.specifier.value, str(variable.type), variable.name)
            yield " ".join(part for part in parts if part)


class GlobalSymbols:
    """Global variables, literal constants and enum items."""

    def __init__(self) -> None:
        self.variables: list[Variable] = []
        self.enum_items: list[Variable] = []

    def add_variable(self, variable: Variable) -> Variable:
        """Register a global variable."""
        variable.is_global = True
        self.variables.append(variable)
        return variable

    def add_global_literal(self, name: str, type: Type, value: Any) -> Variable:
        """Add a constant global holding a literal value."""
        literal = Variable(
            name, type, StorageSpecifier.CONST, is_global=True, default_value=value
        )
        return self.add_variable(literal)

    def add_enum_item(self, variable: Variable) -> Variable:
        """Register an item of an enum."""
        variable.is_global = True
        self.enum_items.append(variable)
        return variable

    def get(self, name: str) -> Optional[Variable]:
        """The global variable or enum item of this name, or None."""
        for variable in (*self.variables, *self.enum_items):
            if variable.name == name:
                return variable
        return None