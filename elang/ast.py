"""Syntax tree for Elang programs: types, patterns, expressions and modules.

Every node is an immutable dataclass. Sequences given to a node are stored
as tuples, so nodes compare by value and can be hashed.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Optional, Union


def _tuple(items) -> tuple:
    return tuple(items)


def _pairs(items) -> tuple:
    return tuple(tuple(pair) for pair in items)


def _set(obj, name: str, value) -> None:
    object.__setattr__(obj, name, value)


# --- Types -----------------------------------------------------------------


class PrimType(enum.Enum):
    """A built-in scalar type."""

    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    CHAR = "char"
    VOID = "void"


@dataclass(frozen=True)
class GenericParam:
    """A type parameter such as ``T`` in a generic struct."""

    name: str


@dataclass(frozen=True)
class NamedType:
    """A user-defined type, such as ``string`` or ``(vec3 float)``."""

    name: str
    type_params: tuple = ()

    def __post_init__(self) -> None:
        _set(self, "type_params", _tuple(self.type_params))


@dataclass(frozen=True)
class FuncType:
    """A function signature, as in ``(fun-type (int) bool)``."""

    param_types: tuple
    return_type: "Type"

    def __post_init__(self) -> None:
        _set(self, "param_types", _tuple(self.param_types))


@dataclass(frozen=True)
class OptionType:
    """The built-in ``(Option T)`` type."""

    inner: "Type"


Type = Union[PrimType, GenericParam, NamedType, FuncType, OptionType]


# --- Quoted data -------------------------------------------------------------


@dataclass(frozen=True)
class Char:
    """A character datum inside a quoted form."""

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or len(self.value) != 1:
            raise ValueError(f"a character must be a single code point, got {self.value!r}")


@dataclass(frozen=True)
class Symbol:
    """A symbol datum inside a quoted form."""

    name: str


@dataclass(frozen=True)
class DottedList:
    """An improper list: items followed by a non-list tail."""

    items: tuple
    tail: Any

    def __post_init__(self) -> None:
        _set(self, "items", tuple(_normalize_datum(item) for item in self.items))
        _set(self, "tail", _normalize_datum(self.tail))


def _normalize_datum(datum):
    if isinstance(datum, (list, tuple)):
        return tuple(_normalize_datum(item) for item in datum)
    return datum


# --- Literals and patterns ---------------------------------------------------


class LiteralKind(enum.Enum):
    """The kind of a literal written in source code."""

    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    CHAR = "char"
    NIL = "nil"


_LITERAL_CHECKS = {
    LiteralKind.INT: lambda v: isinstance(v, int) and not isinstance(v, bool),
    LiteralKind.FLOAT: lambda v: isinstance(v, float),
    LiteralKind.BOOL: lambda v: isinstance(v, bool),
    LiteralKind.CHAR: lambda v: isinstance(v, str) and len(v) == 1,
    LiteralKind.NIL: lambda v: v is None,
}


@dataclass(frozen=True)
class Literal:
    """A literal value in the source code."""

    kind: LiteralKind
    value: Any = None

    def __post_init__(self) -> None:
        if not _LITERAL_CHECKS[self.kind](self.value):
            raise TypeError(f"invalid value {self.value!r} for {self.kind.value} literal")


@dataclass(frozen=True)
class IdentifierPattern:
    """Binds the whole value to a name."""

    name: str


@dataclass(frozen=True)
class StructPattern:
    """Destructures a struct, binding its fields in order."""

    name: str
    fields: tuple = ()

    def __post_init__(self) -> None:
        _set(self, "fields", _tuple(self.fields))


@dataclass(frozen=True)
class ListPattern:
    """Destructures a list element by element."""

    patterns: tuple = ()

    def __post_init__(self) -> None:
        _set(self, "patterns", _tuple(self.patterns))


Pattern = Union[IdentifierPattern, StructPattern, ListPattern]


# --- Expressions -------------------------------------------------------------


@dataclass(frozen=True)
class Identifier:
    """A reference to a bound name."""

    name: str


@dataclass(frozen=True)
class Quote:
    """A quoted datum, evaluated to data rather than code."""

    datum: Any

    def __post_init__(self) -> None:
        _set(self, "datum", _normalize_datum(self.datum))


@dataclass(frozen=True)
class If:
    condition: "Expr"
    then_branch: "Expr"
    else_branch: "Expr"


@dataclass(frozen=True)
class IfLet:
    """Binds ``identifier`` to the contents of an option, if present."""

    identifier: str
    expr: "Expr"
    then_branch: "Expr"
    else_branch: "Expr"


@dataclass(frozen=True)
class Let:
    """Parallel bindings: each value sees only the enclosing scope."""

    bindings: tuple
    body: "Expr"

    def __post_init__(self) -> None:
        _set(self, "bindings", _pairs(self.bindings))


@dataclass(frozen=True)
class LetStar:
    """Sequential bindings: each value sees the ones before it."""

    bindings: tuple
    body: "Expr"

    def __post_init__(self) -> None:
        _set(self, "bindings", _pairs(self.bindings))


@dataclass(frozen=True)
class Call:
    function: "Expr"
    arguments: tuple = ()

    def __post_init__(self) -> None:
        _set(self, "arguments", _tuple(self.arguments))


@dataclass(frozen=True)
class Function:
    """A function expression (lambda) with typed parameters."""

    params: tuple
    return_type: Type
    body: "Expr"

    def __post_init__(self) -> None:
        _set(self, "params", _pairs(self.params))


Expr = Union[Literal, Identifier, Quote, If, IfLet, Let, LetStar, Call, Function]

_EXPR_TYPES = (Literal, Identifier, Quote, If, IfLet, Let, LetStar, Call, Function)


# --- Top-level items ---------------------------------------------------------


@dataclass(frozen=True)
class StructDef:
    name: str
    params: tuple = ()
    fields: tuple = ()

    def __post_init__(self) -> None:
        _set(self, "params", _tuple(self.params))
        _set(self, "fields", _pairs(self.fields))


@dataclass(frozen=True)
class VarDef:
    name: str
    expr: Expr


@dataclass(frozen=True)
class FunDef:
    name: str
    params: tuple
    return_type: Type
    body: Expr

    def __post_init__(self) -> None:
        _set(self, "params", _pairs(self.params))


@dataclass(frozen=True)
class Provides:
    names: tuple = ()

    def __post_init__(self) -> None:
        _set(self, "names", _tuple(self.names))


@dataclass(frozen=True)
class Require:
    path: str


TopLevel = Union[Expr, StructDef, VarDef, FunDef, Provides, Require]


@dataclass(frozen=True)
class Module:
    """A parsed source file: its exports, imports and items."""

    provides: tuple = field(default_factory=tuple)
    requires: tuple = field(default_factory=tuple)
    body: tuple = field(default_factory=tuple)

    def __post_init__(self) -> None:
        _set(self, "provides", _tuple(self.provides))
        _set(self, "requires", _tuple(self.requires))
        _set(self, "body", _tuple(self.body))


def as_expr(item) -> Optional[Expr]:
    """Return the item if it is an expression, otherwise None."""
    return item if isinstance(item, _EXPR_TYPES) else None