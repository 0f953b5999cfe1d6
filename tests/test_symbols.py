import pytest

from jabukod.symbols import (
    BaseType,
    GlobalSymbols,
    Scope,
    StorageSpecifier,
    Type,
    Variable,
)


def test_array_type_and_scalar_equivalent():
    array = Type.array(Type.FLOAT, 5)
    assert array.is_array()
    assert array.size == 5
    assert array.base is BaseType.ARRAY_FLOAT
    assert array.scalar_equivalent() == Type.FLOAT


def test_scalar_is_its_own_equivalent():
    assert not Type.INT.is_array()
    assert Type.INT.scalar_equivalent() == Type.INT


@pytest.mark.parametrize("scalar", [Type.STRING, Type.VOID])
def test_no_arrays_of_string_or_void(scalar):
    with pytest.raises(ValueError):
        Type.array(scalar, 3)


def test_array_size_must_be_positive():
    with pytest.raises(ValueError):
        Type.array(Type.INT, 0)


def test_array_text_names_scalar_and_size():
    text = str(Type.array(Type.BOOL, 3))
    assert str(Type.BOOL) in text
    assert "3" in text


def test_storage_specifier_from_text():
    assert StorageSpecifier.from_text("static") is StorageSpecifier.STATIC
    assert StorageSpecifier.from_text("const") is StorageSpecifier.CONST
    assert StorageSpecifier.from_text("") is StorageSpecifier.NONE
    with pytest.raises(ValueError):
        StorageSpecifier.from_text("volatile")


def test_scope_add_and_get():
    scope = Scope()
    x = scope.add_variable("x", StorageSpecifier.NONE, Type.INT, -8)
    assert x.name == "x"
    assert x.stack_offset == -8
    assert scope.get("x") is x
    assert scope.get("y") is None
    assert "x" in scope
    assert len(scope) == 1
    assert not scope.is_name_available("x")
    assert scope.is_name_available("y")


def test_remove_static_keeps_order_of_others():
    scope = Scope()
    a = scope.add_variable("a", StorageSpecifier.NONE, Type.INT, -8)
    s = scope.add_variable("s", StorageSpecifier.STATIC, Type.INT, -16)
    c = scope.add_variable("c", StorageSpecifier.CONST, Type.INT, -24)
    assert scope.remove_static() == [s]
    assert list(scope) == [a, c]


def test_opaque_predicate_variable():
    scope = Scope()
    assert scope.opaque_predicate_variable() is None
    scope.add_variable("arr", StorageSpecifier.NONE, Type.array(Type.INT, 2), -16)
    assert scope.opaque_predicate_variable() is None
    n = scope.add_variable("n", StorageSpecifier.NONE, Type.INT, -24)
    assert scope.opaque_predicate_variable() is n


def test_adjust_for_restructuring_moves_only_lower_variables():
    scope = Scope()
    above = scope.add_variable("above", StorageSpecifier.NONE, Type.INT, -8)
    array = scope.add_variable("arr", StorageSpecifier.NONE, Type.array(Type.INT, 2), -24)
    below = scope.add_variable("below", StorageSpecifier.NONE, Type.INT, -32)
    scope.adjust_for_restructuring(-24, -8)
    assert above.stack_offset == -8
    assert array.stack_offset == -24 - 8
    assert below.stack_offset == -32 - 8


def test_declarations_name_every_variable():
    scope = Scope()
    scope.add_variable("x", StorageSpecifier.CONST, Type.INT, -8)
    scope.add_variable("y", StorageSpecifier.NONE, Type.FLOAT, -16)
    lines = list(scope.declarations())
    assert len(lines) == 2
    assert lines[0].startswith("const")
    assert lines[0].endswith("x")
    assert str(Type.FLOAT) in lines[1]


def test_global_literal_is_const_and_global():
    symbols = GlobalSymbols()
    literal = symbols.add_global_literal("__lit", Type.FLOAT, 1.5)
    assert literal.is_global
    assert literal.specifier is StorageSpecifier.CONST
    assert literal.default_value == 1.5
    assert symbols.variables == [literal]
    assert symbols.get("__lit") is literal


def test_global_variable_and_enum_item():
    symbols = GlobalSymbols()
    variable = symbols.add_variable(Variable("g", Type.INT))
    item = symbols.add_enum_item(Variable("RED", Type.INT, StorageSpecifier.CONST))
    assert variable.is_global and item.is_global
    assert symbols.enum_items == [item]
    assert symbols.get("RED") is item
    assert symbols.get("missing") is None


def test_variable_flags():
    array = Variable("arr", Type.array(Type.INT, 3))
    control = Variable("i", Type.INT, parameter_order=None, iterated_array=array)
    param = Variable("p", Type.INT, parameter_order=0)
    assert control.is_foreach_control_variable
    assert not control.is_parameter
    assert param.is_parameter
    assert not param.is_foreach_control_variable