import pytest

from elang.ast import (
    FuncType,
    GenericParam,
    Identifier,
    IdentifierPattern,
    NamedType,
    OptionType,
    PrimType,
)
from elang.typesys import (
    deduce_from_type,
    deduce_from_value,
    deduced_type,
    monomorphize_name,
    resolve_type_name,
    substitute_type,
    type_name,
    type_to_string,
    type_to_string_inner,
    types_compatible,
    types_equal,
    value_type,
)
from elang.values import (
    NONE,
    BoolValue,
    CharValue,
    Environment,
    EvalError,
    FloatValue,
    FunctionValue,
    IntValue,
    NativeFunction,
    OptionalValue,
    StructInstance,
)

INT = PrimType.INT
BOOL = PrimType.BOOL
FLOAT = PrimType.FLOAT
CHAR = PrimType.CHAR
T = GenericParam("T")


def _function(param_types, return_type):
    params = [(IdentifierPattern(f"p{i}"), ty) for i, ty in enumerate(param_types)]
    return FunctionValue(None, params, return_type, Identifier("p0"), Environment())


SAMPLE_TYPES = [
    INT,
    FLOAT,
    T,
    NamedType("vec2", (FLOAT,)),
    NamedType("string"),
    FuncType((INT,), BOOL),
    OptionType(NamedType("box", (T,))),
]


def test_primitives_render_with_colon_at_top_level():
    assert type_to_string(INT) == ":int"
    assert type_name(INT) == "int"
    assert type_to_string_inner(FLOAT) == "float"


def test_function_type_rendering():
    assert type_name(FuncType((INT,), BOOL)) == "(fun-type (int) bool)"


@pytest.mark.parametrize("ty", SAMPLE_TYPES)
def test_inner_and_plain_rendering_agree(ty):
    assert type_to_string_inner(ty) == type_name(ty)
    if not isinstance(ty, PrimType):
        assert type_to_string(ty) == type_name(ty)
    else:
        assert type_to_string(ty) == ":" + type_name(ty)


@pytest.mark.parametrize("ty", SAMPLE_TYPES)
def test_types_equal_is_reflexive(ty):
    assert types_equal(ty, ty)


def test_types_equal_distinguishes():
    assert not types_equal(INT, FLOAT)
    assert not types_equal(NamedType("vec2", (FLOAT,)), NamedType("vec3", (FLOAT,)))
    assert not types_equal(FuncType((INT, FLOAT), BOOL), FuncType((INT,), BOOL))


def test_option_with_generic_inner_is_compatible_both_ways():
    assert types_compatible(OptionType(T), OptionType(INT))
    assert types_compatible(OptionType(INT), OptionType(T))
    assert not types_compatible(OptionType(INT), OptionType(BOOL))


def test_concrete_instantiation_matches_generic_named_type():
    assert types_compatible(NamedType("box-int"), NamedType("box", (INT,)))
    assert not types_compatible(NamedType("box-int"), NamedType("box", (BOOL,)))
    assert not types_compatible(NamedType("crate-int"), NamedType("box", (INT,)))


def test_function_compatibility():
    assert types_compatible(FuncType((INT,), INT), FuncType((INT,), INT))
    assert not types_compatible(FuncType((INT,), INT), FuncType((INT, INT), INT))
    assert not types_compatible(FuncType((INT,), INT), FuncType((INT,), BOOL))


def test_generic_params_are_not_compatible_with_each_other():
    assert not types_compatible(T, T)


def test_value_type_of_scalars_and_options():
    assert value_type(IntValue(1)) is INT
    assert value_type(FloatValue(1.5)) is FLOAT
    assert value_type(BoolValue(True)) is BOOL
    assert value_type(CharValue("a")) is CHAR
    assert value_type(NONE) == OptionType(T)
    assert value_type(OptionalValue(IntValue(3))) == OptionType(INT)


def test_value_type_of_structs():
    assert value_type(StructInstance("vec2-int", [("x", IntValue(1))])) == NamedType(
        "vec2", (INT,)
    )
    plain = StructInstance("point", [("x", IntValue(1)), ("y", BoolValue(False))])
    assert value_type(plain) == NamedType("point", (INT, BOOL))


def test_value_type_of_function():
    func = _function([INT, BOOL], FLOAT)
    assert value_type(func) == FuncType((INT, BOOL), FLOAT)


def test_value_type_of_native_function_fails():
    native = NativeFunction(lambda args: NONE, "noop")
    with pytest.raises(EvalError, match="Cannot determine type of value"):
        value_type(native)


def test_deduced_type_splits_every_dash():
    instance = StructInstance("pair-int-bool", [])
    assert deduced_type(instance) == NamedType("pair", (INT, BOOL))
    assert deduced_type(StructInstance("point", [])) == NamedType("point")


def test_deduced_type_of_function_fails():
    with pytest.raises(EvalError, match="Cannot determine type of value"):
        deduced_type(_function([INT], INT))


def test_deduce_generic_param_from_value():
    assert deduce_from_value(T, IntValue(10), {}) == {"T": INT}
    assert deduce_from_value(GenericParam(":T"), BoolValue(True), {}) == {"T": BOOL}


def test_deduce_conflicting_binding_fails():
    type_map = {"T": INT}
    with pytest.raises(EvalError, match="conflicting types"):
        deduce_from_value(T, BoolValue(True), type_map)
    assert type_map == {"T": INT}


def test_deduce_from_nested_struct():
    expected = NamedType("box", (T,))
    assert deduce_from_value(expected, StructInstance("box-int", []), {}) == {"T": INT}
    with pytest.raises(EvalError, match="Expected type"):
        deduce_from_value(expected, StructInstance("crate-int", []), {})
    with pytest.raises(EvalError, match="Expected named type"):
        deduce_from_value(expected, IntValue(1), {})


def test_deduce_option():
    assert deduce_from_value(OptionType(T), NONE, {}) == {}
    assert deduce_from_value(OptionType(T), OptionalValue(CharValue("z")), {}) == {"T": CHAR}
    with pytest.raises(EvalError, match="Expected Option type"):
        deduce_from_value(OptionType(T), IntValue(1), {})


def test_deduce_concrete_mismatch():
    assert deduce_from_value(INT, IntValue(1), {}) == {}
    with pytest.raises(EvalError, match="Expected type"):
        deduce_from_value(INT, BoolValue(False), {})


def test_deduce_from_type():
    expected = NamedType("box", (T,))
    assert deduce_from_type(expected, NamedType("box", (FLOAT,)), {}) == {"T": FLOAT}
    with pytest.raises(EvalError, match="Type mismatch"):
        deduce_from_type(expected, NamedType("box", (FLOAT, INT)), {})
    with pytest.raises(EvalError, match="Type mismatch"):
        deduce_from_type(INT, BOOL, {})


@pytest.mark.parametrize("ty", SAMPLE_TYPES)
def test_substitute_then_deduce_round_trip(ty):
    type_map = {"T": INT}
    concrete = substitute_type(ty, type_map)
    assert "T" not in type_name(concrete).split() or ty == NamedType("string")
    assert types_equal(substitute_type(concrete, {}), concrete)


def test_substitute_unresolved_parameter():
    with pytest.raises(EvalError, match="Unresolved generic parameter: U"):
        substitute_type(FuncType((GenericParam("U"),), INT), {"T": INT})


def test_resolve_type_name():
    assert resolve_type_name("int") is INT
    assert resolve_type_name("string") == NamedType("cons", (CHAR,))
    assert resolve_type_name("vec2") is None


def test_monomorphize_name_uses_bound_params_only():
    assert monomorphize_name("box", ["T"], {"T": INT}) == "box-" + type_to_string(INT)
    assert monomorphize_name("pair", ["A", "B"], {"B": BOOL}) == "pair-" + type_to_string(BOOL)