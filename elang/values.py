"""Runtime values and lexical environments of the Elang interpreter."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Callable, Optional, Union

from elang.ast import Expr, StructDef, Type


class EvalError(Exception):
    """Raised when evaluating an Elang program fails."""


def _format_float(number: float) -> str:
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "inf" if number > 0 else "-inf"
    text = repr(number)
    if "e" in text or "E" in text:
        text = format(Decimal(text), "f")
    if text.endswith(".0"):
        text = text[:-2]
    return text


@dataclass(frozen=True)
class IntValue:
    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class FloatValue:
    value: float

    def __str__(self) -> str:
        return _format_float(self.value)


@dataclass(frozen=True)
class BoolValue:
    value: bool

    def __str__(self) -> str:
        return "true" if self.value else "false"


@dataclass(frozen=True)
class CharValue:
    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or len(self.value) != 1:
            raise ValueError(f"a character must be a single code point, got {self.value!r}")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class SymbolValue:
    name: str

    def __str__(self) -> str:
        return f"'{self.name}"


@dataclass(frozen=True)
class OptionalValue:
    """An option: ``none`` when ``value`` is None, otherwise ``(some value)``."""

    value: Optional["Value"] = None

    @property
    def is_some(self) -> bool:
        return self.value is not None

    def __str__(self) -> str:
        return "none" if self.value is None else f"(some {self.value})"


NONE = OptionalValue()


@dataclass(frozen=True, eq=False)
class StructInstance:
    """An instance of a struct, with its fields in declaration order."""

    name: str
    fields: tuple = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", tuple(tuple(pair) for pair in self.fields))

    def field(self, name: str) -> "Value":
        """Return the named field's value, or ``none`` if there is no such field."""
        for field_name, value in self.fields:
            if field_name == name:
                return value
        return NONE

    def __str__(self) -> str:
        return f"<struct {self.name}>"


@dataclass(frozen=True, eq=False)
class FunctionValue:
    """A closure: a function together with the environment it was made in."""

    name: Optional[str]
    params: tuple
    return_type: Type
    body: Expr
    captured_env: "Environment" = field(repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "params", tuple(tuple(pair) for pair in self.params))

    def __str__(self) -> str:
        return "<function>"


@dataclass(frozen=True, eq=False)
class NativeFunction:
    """A built-in function implemented in Python.

    Calling it with a list of values returns a value or raises EvalError.
    """

    func: Callable[[list], "Value"]
    name: str = ""
    closure: bool = False

    def __call__(self, args) -> "Value":
        return self.func(list(args))

    def __str__(self) -> str:
        return "<native-closure>" if self.closure else "<native-function>"


@dataclass(frozen=True, eq=False)
class GenericStructDef:
    """A struct definition bound as a value, used to build concrete structs."""

    definition: StructDef

    @property
    def name(self) -> str:
        return self.definition.name

    def __str__(self) -> str:
        return f"<generic-struct-def {self.definition.name}>"


Value = Union[
    IntValue,
    FloatValue,
    BoolValue,
    CharValue,
    SymbolValue,
    OptionalValue,
    StructInstance,
    FunctionValue,
    NativeFunction,
    GenericStructDef,
]


@dataclass
class Environment:
    """A scope of bindings with an optional enclosing scope."""

    bindings: dict = field(default_factory=dict)
    parent: Optional["Environment"] = field(default=None, repr=False)

    def get(self, name: str) -> Optional[Value]:
        """Look a name up here and then in the enclosing scopes."""
        scope: Optional[Environment] = self
        while scope is not None:
            if name in scope.bindings:
                return scope.bindings[name]
            scope = scope.parent
        return None

    def define(self, name: str, value: Value) -> None:
        """Bind a name in this scope, replacing any earlier binding here."""
        self.bindings[name] = value

    def __contains__(self, name: str) -> bool:
        return self.get(name) is not None

    def __copy__(self) -> "Environment":
        return Environment(dict(self.bindings), self.parent)