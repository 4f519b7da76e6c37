"""Type rendering, comparison, inference and generic deduction for Elang."""

from __future__ import annotations

from typing import Optional

from elang.ast import FuncType, GenericParam, NamedType, OptionType, PrimType
from elang.values import (
    BoolValue,
    CharValue,
    EvalError,
    FloatValue,
    FunctionValue,
    IntValue,
    OptionalValue,
    StructInstance,
)

_SCALAR_TYPES = {
    IntValue: PrimType.INT,
    FloatValue: PrimType.FLOAT,
    BoolValue: PrimType.BOOL,
    CharValue: PrimType.CHAR,
}

_SUFFIX_TYPES = {
    "int": PrimType.INT,
    "float": PrimType.FLOAT,
    "bool": PrimType.BOOL,
    "char": PrimType.CHAR,
}


# --- Rendering ---------------------------------------------------------------


def _render(ty) -> str:
    if isinstance(ty, PrimType):
        return ty.value
    if isinstance(ty, GenericParam):
        return ty.name
    if isinstance(ty, NamedType):
        if not ty.type_params:
            return ty.name
        params = " ".join(_render(param) for param in ty.type_params)
        return f"({ty.name} {params})"
    if isinstance(ty, FuncType):
        params = " ".join(_render(param) for param in ty.param_types)
        return f"(fun-type ({params}) {_render(ty.return_type)})"
    if isinstance(ty, OptionType):
        return f"(Option {_render(ty.inner)})"
    raise TypeError(f"not a type: {ty!r}")


def type_to_string(ty) -> str:
    """Render a type, writing a top-level primitive with a leading colon."""
    if isinstance(ty, PrimType):
        return f":{ty.value}"
    return _render(ty)


def type_to_string_inner(ty) -> str:
    """Render a type as it appears nested inside another type."""
    return _render(ty)


def type_name(ty) -> str:
    """Render a type in the plain form used in error messages and names."""
    return _render(ty)


# --- Comparison --------------------------------------------------------------


def types_equal(a, b) -> bool:
    """Return True if two types are structurally identical."""
    return a == b


def _suffix_type(part: str):
    return _SUFFIX_TYPES.get(part) or NamedType(part)


def types_compatible(actual, expected) -> bool:
    """Return True if a value of type ``actual`` may be used where ``expected`` is wanted."""
    if isinstance(actual, PrimType) and isinstance(expected, PrimType):
        return actual is expected
    if isinstance(actual, OptionType) and isinstance(expected, OptionType):
        if isinstance(actual.inner, GenericParam) or isinstance(expected.inner, GenericParam):
            return True
        return types_compatible(actual.inner, expected.inner)
    if isinstance(actual, FuncType) and isinstance(expected, FuncType):
        if len(actual.param_types) != len(expected.param_types):
            return False
        if not all(
            types_compatible(a, e) for a, e in zip(actual.param_types, expected.param_types)
        ):
            return False
        return types_compatible(actual.return_type, expected.return_type)
    if isinstance(actual, NamedType) and isinstance(expected, NamedType):
        if (
            actual.name == expected.name
            and len(actual.type_params) == len(expected.type_params)
            and all(
                types_compatible(a, e)
                for a, e in zip(actual.type_params, expected.type_params)
            )
        ):
            return True
        # A concrete instantiation such as "box-int" against "(box int)".
        if not actual.type_params and expected.type_params:
            base, dash, suffix = actual.name.rpartition("-")
            if dash and base == expected.name and len(expected.type_params) == 1:
                return types_compatible(_suffix_type(suffix), expected.type_params[0])
        return False
    return False


# --- Types of values ---------------------------------------------------------


def value_type(value):
    """Return the type the interpreter checks a runtime value against."""
    scalar = _SCALAR_TYPES.get(type(value))
    if scalar is not None:
        return scalar
    if isinstance(value, OptionalValue):
        if value.value is None:
            return OptionType(GenericParam("T"))
        return OptionType(value_type(value.value))
    if isinstance(value, StructInstance):
        base, dash, suffix = value.name.rpartition("-")
        if dash:
            return NamedType(base, (_suffix_type(suffix),))
        return NamedType(value.name, tuple(value_type(v) for _, v in value.fields))
    if isinstance(value, FunctionValue):
        return FuncType(tuple(ty for _, ty in value.params), value.return_type)
    raise EvalError("Cannot determine type of value")


def deduced_type(value):
    """Return the type used when deducing generic parameters from a value."""
    scalar = _SCALAR_TYPES.get(type(value))
    if scalar is not None:
        return scalar
    if isinstance(value, OptionalValue):
        if value.value is None:
            return OptionType(GenericParam("T"))
        return OptionType(deduced_type(value.value))
    if isinstance(value, StructInstance):
        base, *suffixes = value.name.split("-")
        if suffixes:
            return NamedType(base, tuple(_suffix_type(part) for part in suffixes))
        return NamedType(value.name)
    raise EvalError("Cannot determine type of value")


# --- Generic deduction -------------------------------------------------------


def _clean_param(name: str) -> str:
    return name[1:] if name.startswith(":") else name


def _bind(param_name: str, concrete, type_map: dict) -> None:
    clean = _clean_param(param_name)
    existing = type_map.get(clean)
    if existing is None:
        type_map[clean] = concrete
    elif not types_equal(existing, concrete):
        raise EvalError(
            f"Type parameter '{clean}' bound to conflicting types: "
            f"{type_name(existing)} and {type_name(concrete)}"
        )


def deduce_from_value(expected, value, type_map: dict) -> dict:
    """Bind the generic parameters of ``expected`` from a value.

    New bindings are added to ``type_map``, which is also returned.
    """
    if isinstance(expected, GenericParam):
        _bind(expected.name, deduced_type(value), type_map)
        return type_map
    if isinstance(expected, NamedType):
        actual = deduced_type(value)
        if not isinstance(actual, NamedType):
            raise EvalError(
                f"Expected named type {type_name(expected)} but got {type_name(actual)}"
            )
        if actual.name != expected.name or len(actual.type_params) != len(expected.type_params):
            raise EvalError(f"Expected type {type_name(expected)} but got {type_name(actual)}")
        for expected_param, actual_param in zip(expected.type_params, actual.type_params):
            deduce_from_type(expected_param, actual_param, type_map)
        return type_map
    if isinstance(expected, OptionType):
        if isinstance(value, OptionalValue):
            if value.value is not None:
                deduce_from_value(expected.inner, value.value, type_map)
            return type_map
        raise EvalError(f"Expected Option type but got {type_name(deduced_type(value))}")
    actual = deduced_type(value)
    if not types_equal(expected, actual):
        raise EvalError(f"Expected type {type_name(expected)} but got {type_name(actual)}")
    return type_map


def deduce_from_type(expected, actual, type_map: dict) -> dict:
    """Bind the generic parameters of ``expected`` by matching it against ``actual``.

    New bindings are added to ``type_map``, which is also returned.
    """
    if isinstance(expected, GenericParam):
        _bind(expected.name, actual, type_map)
        return type_map
    mismatch = EvalError(
        f"Type mismatch: expected {type_name(expected)} but got {type_name(actual)}"
    )
    if isinstance(expected, NamedType):
        if (
            not isinstance(actual, NamedType)
            or actual.name != expected.name
            or len(actual.type_params) != len(expected.type_params)
        ):
            raise mismatch
        for expected_param, actual_param in zip(expected.type_params, actual.type_params):
            deduce_from_type(expected_param, actual_param, type_map)
        return type_map
    if not types_equal(expected, actual):
        raise mismatch
    return type_map


def substitute_type(ty, type_map: dict):
    """Replace every generic parameter in ``ty`` by its binding in ``type_map``."""
    if isinstance(ty, GenericParam):
        try:
            return type_map[ty.name]
        except KeyError:
            raise EvalError(f"Unresolved generic parameter: {ty.name}") from None
    if isinstance(ty, NamedType):
        return NamedType(ty.name, tuple(substitute_type(p, type_map) for p in ty.type_params))
    if isinstance(ty, FuncType):
        return FuncType(
            tuple(substitute_type(p, type_map) for p in ty.param_types),
            substitute_type(ty.return_type, type_map),
        )
    if isinstance(ty, OptionType):
        return OptionType(substitute_type(ty.inner, type_map))
    return ty


def resolve_type_name(name: str) -> Optional[object]:
    """Return the built-in type a name stands for, or None if it names none."""
    if name == "string":
        return NamedType("cons", (PrimType.CHAR,))
    return _SUFFIX_TYPES.get(name)


def monomorphize_name(base_name: str, params, type_map: dict) -> str:
    """Build the name of a concrete struct from its generic name and bindings."""
    parts = [type_to_string(type_map[param]) for param in params if param in type_map]
    return f"{base_name}-{'-'.join(parts)}"