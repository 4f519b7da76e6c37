"""Constructors and field accessors for Elang struct definitions."""

from __future__ import annotations

from elang.ast import StructDef
from elang.typesys import deduce_from_value, monomorphize_name, substitute_type, type_name
from elang.values import (
    BoolValue,
    CharValue,
    EvalError,
    FloatValue,
    GenericStructDef,
    IntValue,
    NativeFunction,
    StructInstance,
)

_KIND_NAMES = {
    IntValue: "int",
    FloatValue: "float",
    BoolValue: "bool",
    CharValue: "char",
}


def _clean_param(name: str) -> str:
    return name[1:] if name.startswith(":") else name


def _constructor_name(struct_name: str) -> str:
    return f"make-{struct_name}"


def _check_arity(struct_name: str, expected: int, args: list) -> None:
    if len(args) != expected:
        raise EvalError(
            f"Constructor for {struct_name} expects {expected} arguments, got {len(args)}"
        )


def generic_constructor(definition: StructDef) -> NativeFunction:
    """Build the ``make-<name>`` function that deduces type parameters from its arguments.

    The instance is named after the struct and its deduced types, such as ``box-int``.
    """

    def construct(args: list):
        _check_arity(definition.name, len(definition.fields), args)
        type_map: dict = {}
        for index, ((field_name, field_type), arg) in enumerate(
            zip(definition.fields, args), start=1
        ):
            try:
                deduce_from_value(field_type, arg, type_map)
            except EvalError as error:
                raise EvalError(
                    f"Type error in struct instantiation: field '{field_name}' "
                    f"(argument {index}) - {error}"
                ) from None

        clean_params = [_clean_param(param) for param in definition.params]
        for param in clean_params:
            if param not in type_map:
                raise EvalError(
                    f"Could not deduce type for parameter '{param}' in struct instantiation"
                )

        if clean_params:
            parts = [definition.name, *(type_name(type_map[param]) for param in clean_params)]
            concrete_name = "-".join(parts)
        else:
            concrete_name = definition.name

        fields = [(name, value) for (name, _), value in zip(definition.fields, args)]
        return StructInstance(concrete_name, fields)

    return NativeFunction(construct, _constructor_name(definition.name), closure=True)


def _generic_accessor(struct_name: str, field_name: str) -> NativeFunction:
    accessor_name = f"{struct_name}-{field_name}"

    def access(args: list):
        if len(args) != 1:
            raise EvalError(f"Accessor {accessor_name} expects 1 argument")
        (target,) = args
        if not isinstance(target, StructInstance):
            kind = _KIND_NAMES.get(type(target), "unknown type")
            raise EvalError(
                f"Invalid argument for accessor {accessor_name}: expected struct, got {kind}"
            )
        if target.name != struct_name and not target.name.startswith(f"{struct_name}-"):
            raise EvalError(
                f"Invalid argument for accessor {accessor_name}: expected struct of type "
                f"'{struct_name}', got '{target.name}'"
            )
        return target.field(field_name)

    return NativeFunction(access, accessor_name, closure=True)


def generic_accessors(definition: StructDef) -> dict:
    """Return ``<name>-<field>`` accessors that accept any instantiation of the struct."""
    return {
        f"{definition.name}-{field_name}": _generic_accessor(definition.name, field_name)
        for field_name, _ in definition.fields
    }


def install_generic_struct(definition: StructDef, env) -> None:
    """Define a struct definition, its constructor and its accessors in ``env``.

    Nothing but the definition itself is defined if the constructor already exists;
    accessors already bound are left as they are.
    """
    env.define(definition.name, GenericStructDef(definition))
    constructor_name = _constructor_name(definition.name)
    if env.get(constructor_name) is not None:
        return
    env.define(constructor_name, generic_constructor(definition))
    for name, accessor in generic_accessors(definition).items():
        if env.get(name) is None:
            env.define(name, accessor)


def concrete_constructor(struct_name: str, fields) -> NativeFunction:
    """Build a constructor for a struct whose field types are already fixed."""
    field_names = [name for name, _ in fields]

    def construct(args: list):
        _check_arity(struct_name, len(field_names), args)
        return StructInstance(struct_name, list(zip(field_names, args)))

    return NativeFunction(construct, _constructor_name(struct_name), closure=True)


def _concrete_accessor(struct_name: str, field_name: str) -> NativeFunction:
    accessor_name = f"{struct_name}-{field_name}"

    def access(args: list):
        if len(args) != 1:
            raise EvalError(f"Accessor {accessor_name} expects 1 argument")
        (target,) = args
        if isinstance(target, StructInstance) and target.name == struct_name:
            return target.field(field_name)
        raise EvalError(f"Invalid argument for accessor {accessor_name}")

    return NativeFunction(access, accessor_name, closure=True)


def concrete_accessors(struct_name: str, fields) -> dict:
    """Return accessors that accept only instances named exactly ``struct_name``."""
    return {
        f"{struct_name}-{field_name}": _concrete_accessor(struct_name, field_name)
        for field_name, _ in fields
    }


def monomorphize_struct(definition: StructDef, type_map: dict, env) -> dict:
    """Return the constructor and accessors of a concrete instantiation of a struct.

    The bindings are returned, not defined: ``env`` is only consulted and left
    unchanged. An empty mapping is returned when the concrete constructor is
    already bound in ``env``.
    """
    concrete_name = monomorphize_name(definition.name, definition.params, type_map)
    constructor_name = _constructor_name(concrete_name)
    if env.get(constructor_name) is not None:
        return {}
    concrete_fields = [
        (field_name, substitute_type(field_type, type_map))
        for field_name, field_type in definition.fields
    ]
    bindings = {constructor_name: concrete_constructor(concrete_name, concrete_fields)}
    bindings.update(concrete_accessors(concrete_name, concrete_fields))
    return bindings