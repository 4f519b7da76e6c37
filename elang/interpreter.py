"""Evaluator for Elang syntax trees."""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Callable, Iterable, Optional

from elang.ast import (
    Call,
    Char,
    DottedList,
    FunDef,
    Function,
    Identifier,
    If,
    IdentifierPattern,
    IfLet,
    Let,
    LetStar,
    ListPattern,
    Literal,
    LiteralKind,
    Module,
    Provides,
    Quote,
    Require,
    StructDef,
    StructPattern,
    Symbol,
    VarDef,
    as_expr,
)
from elang.stdlib import populate_env
from elang.structs import install_generic_struct, monomorphize_struct
from elang.typesys import resolve_type_name, type_to_string, types_compatible, value_type
from elang.values import (
    NONE,
    BoolValue,
    CharValue,
    Environment,
    EvalError,
    FloatValue,
    FunctionValue,
    GenericStructDef,
    IntValue,
    NativeFunction,
    OptionalValue,
    StructInstance,
    SymbolValue,
)

Parser = Callable[[str], Module]


def _literal_value(literal: Literal):
    kind = literal.kind
    if kind is LiteralKind.INT:
        return IntValue(literal.value)
    if kind is LiteralKind.FLOAT:
        return FloatValue(literal.value)
    if kind is LiteralKind.BOOL:
        return BoolValue(literal.value)
    if kind is LiteralKind.CHAR:
        return CharValue(literal.value)
    return NONE


def quote_to_value(datum):
    """Convert a quoted datum to a runtime value.

    Proper lists become chains of ``cons`` structs ending in ``none``; data
    with no runtime counterpart, such as strings or the empty list, become
    ``none``. An improper list raises EvalError.
    """
    if isinstance(datum, bool):
        return BoolValue(datum)
    if isinstance(datum, int):
        return IntValue(datum)
    if isinstance(datum, float):
        return FloatValue(datum)
    if isinstance(datum, Char):
        return CharValue(datum.value)
    if isinstance(datum, Symbol):
        return SymbolValue(datum.name)
    if isinstance(datum, DottedList):
        if datum.tail != ():
            raise EvalError("Cannot convert improper list to value")
        datum = datum.items
    if isinstance(datum, (tuple, list)) and datum:
        result = NONE
        for item in reversed(datum):
            result = StructInstance("cons", (("car", quote_to_value(item)), ("cdr", result)))
        return result
    return NONE


def value_to_list(value) -> list:
    """Return the elements of a ``cons`` chain ending in ``none``."""
    items = []
    while True:
        if isinstance(value, OptionalValue) and value.value is None:
            return items
        if isinstance(value, StructInstance) and value.name == "cons":
            items.append(value.field("car"))
            value = value.field("cdr")
            continue
        raise EvalError("Value is not a proper list")


class Interpreter:
    """Evaluates Elang top-level items against a global environment.

    ``root_path``, when given, is the directory that required modules are
    resolved against; otherwise they are resolved relative to the requiring
    file. ``parser`` turns module source text into a Module and is needed
    only to load required modules.
    """

    def __init__(self, root_path=None, parser: Optional[Parser] = None) -> None:
        env = Environment()
        populate_env(env)
        self.global_env = env
        self.loaded_files: set = set()
        self.root_path: Optional[Path] = (
            Path(root_path) if root_path not in (None, "") else None
        )
        self.parser = parser

    # --- Top level -----------------------------------------------------------

    def eval(self, item):
        """Evaluate one top-level item and return its value."""
        expr = as_expr(item)
        if expr is not None:
            return self.eval_expr(expr, self.global_env)
        if isinstance(item, Require):
            env = copy.copy(self.global_env)
            if self.root_path is not None:
                path = self.root_path / item.path
            else:
                path = Path(item.path)
            self._load_module(path, env)
            self.global_env = env
            return NONE
        env = copy.copy(self.global_env)
        result = self._eval_def(item, env)
        self.global_env = env
        return result

    def eval_all(self, items: Iterable):
        """Evaluate items in order and return the last value, or ``none``."""
        result = NONE
        for item in items:
            result = self.eval(item)
        return result

    def _eval_def(self, item, env: Environment):
        if isinstance(item, StructDef):
            install_generic_struct(item, env)
        elif isinstance(item, VarDef):
            env.define(item.name, self.eval_expr(item.expr, copy.copy(env)))
        elif isinstance(item, FunDef):
            function = FunctionValue(
                item.name, item.params, item.return_type, item.body, copy.copy(env)
            )
            env.define(item.name, function)
        elif not isinstance(item, (Provides, Require)) and as_expr(item) is None:
            raise TypeError(f"not a top-level item: {item!r}")
        return NONE

    # --- Modules -------------------------------------------------------------

    def _load_module(self, path: Path, env: Environment) -> None:
        try:
            absolute = Path(path).resolve(strict=True)
        except OSError as error:
            raise EvalError(str(error)) from error
        if absolute in self.loaded_files:
            return
        self.loaded_files.add(absolute)

        try:
            source = absolute.read_text(encoding="utf-8")
        except OSError as error:
            raise EvalError(str(error)) from error
        if self.parser is None:
            raise EvalError(f"Cannot load module '{absolute}': no parser configured")
        module = self.parser(source)

        for required in module.requires:
            self._load_module(self._resolve_path(absolute, required), env)

        module_env = Environment(dict(env.bindings), self.global_env)
        for item in module.body:
            if isinstance(item, (StructDef, VarDef, FunDef)):
                self._eval_def(item, module_env)

        for name in module.provides:
            value = module_env.get(name)
            if value is None:
                raise EvalError(f"Module '{absolute}' does not provide binding '{name}'")
            env.define(name, value)

    def _resolve_path(self, current: Path, required: str) -> Path:
        if self.root_path is not None:
            return self.root_path / required
        return current.parent / required

    # --- Expressions ---------------------------------------------------------

    def eval_expr(self, expr, env: Optional[Environment] = None):
        """Evaluate an expression in ``env``, the global environment by default."""
        if env is None:
            env = self.global_env
        match expr:
            case Literal():
                return _literal_value(expr)
            case Identifier(name=name):
                return self._eval_identifier(name, env)
            case Quote(datum=datum):
                return quote_to_value(datum)
            case If():
                return self._eval_if(expr, env)
            case IfLet():
                value = self.eval_expr(expr.expr, env)
                if isinstance(value, OptionalValue) and value.value is not None:
                    scope = Environment(parent=env)
                    scope.define(expr.identifier, value.value)
                    return self.eval_expr(expr.then_branch, scope)
                return self.eval_expr(expr.else_branch, env)
            case Let(bindings=bindings, body=body):
                values = [(pattern, self.eval_expr(value, env)) for pattern, value in bindings]
                scope = Environment(parent=env)
                for pattern, value in values:
                    self._bind_pattern(scope, pattern, value)
                return self.eval_expr(body, scope)
            case LetStar(bindings=bindings, body=body):
                scope = Environment(parent=env)
                for pattern, value_expr in bindings:
                    value = self.eval_expr(value_expr, copy.copy(scope))
                    self._bind_pattern(scope, pattern, value)
                return self.eval_expr(body, scope)
            case Function(params=params, return_type=return_type, body=body):
                return FunctionValue(None, params, return_type, body, env)
            case Call(function=function, arguments=arguments):
                return self._eval_call(function, arguments, env)
        raise TypeError(f"not an expression: {expr!r}")

    def _eval_identifier(self, name: str, env: Environment):
        value = env.get(name)
        if value is not None:
            return value
        struct_name, dash, args_text = name.partition("-")
        if dash:
            found = env.get(struct_name)
            if isinstance(found, GenericStructDef):
                definition = found.definition
                type_args = args_text.split("-")
                if len(type_args) != len(definition.params):
                    raise EvalError(f"Mismatched number of type arguments for {name}")
                type_map = {}
                for param, arg in zip(definition.params, type_args):
                    resolved = resolve_type_name(arg)
                    if resolved is None:
                        raise EvalError(f"Cannot find type '{arg}'")
                    type_map[param] = resolved
                monomorphize_struct(definition, type_map, env)
                return NONE
        raise EvalError(f"Unbound variable: {name}")

    def _eval_if(self, expr: If, env: Environment):
        condition = self.eval_expr(expr.condition, env)
        if not isinstance(condition, BoolValue):
            raise EvalError("If condition must be a boolean")
        then_value = self.eval_expr(expr.then_branch, env)
        else_value = self.eval_expr(expr.else_branch, env)
        then_type = value_type(then_value)
        else_type = value_type(else_value)
        if not types_compatible(then_type, else_type) and not types_compatible(
            else_type, then_type
        ):
            raise EvalError(
                "If branches have incompatible types: then branch has type "
                f"{type_to_string(then_type)}, else branch has type {type_to_string(else_type)}"
            )
        return then_value if condition.value else else_value

    def _bind_pattern(self, env: Environment, pattern, value) -> None:
        match pattern:
            case IdentifierPattern(name=name):
                env.define(name, value)
            case StructPattern(name=pattern_name, fields=fields):
                if not isinstance(value, StructInstance):
                    raise EvalError("Pattern did not match struct value")
                if not value.name.startswith(pattern_name):
                    raise EvalError(
                        "Mismatched struct types in pattern matching: "
                        f"expected {pattern_name}, got {value.name}"
                    )
                if len(fields) != len(value.fields):
                    raise EvalError(
                        f"Mismatched number of fields in struct pattern for {pattern_name}: "
                        f"expected {len(fields)}, got {len(value.fields)}"
                    )
                for name, (_, field_value) in zip(fields, value.fields):
                    env.define(name, field_value)
            case ListPattern(patterns=patterns):
                values = value_to_list(value)
                if len(patterns) != len(values):
                    raise EvalError(
                        "Mismatched number of elements in list pattern: "
                        f"expected {len(patterns)}, got {len(values)}"
                    )
                for sub_pattern, element in zip(patterns, values):
                    self._bind_pattern(env, sub_pattern, element)
            case _:
                raise TypeError(f"not a pattern: {pattern!r}")

    def _eval_call(self, function_expr, argument_exprs, env: Environment):
        function = self.eval_expr(function_expr, env)
        args = [self.eval_expr(argument, env) for argument in argument_exprs]

        if isinstance(function, FunctionValue):
            if len(function.params) != len(args):
                raise EvalError(
                    f"Expected {len(function.params)} arguments, but got {len(args)}"
                )
            for (_, expected), arg in zip(function.params, args):
                actual = value_type(arg)
                if not types_compatible(actual, expected):
                    raise EvalError(
                        f"Type mismatch: expected {type_to_string(expected)}, "
                        f"got {type_to_string(actual)}. Got value {arg}"
                    )
            call_env = Environment(parent=function.captured_env)
            if function.name is not None:
                call_env.define(function.name, function)
            for (pattern, _), arg in zip(function.params, args):
                self._bind_pattern(call_env, pattern, arg)
            return self.eval_expr(function.body, call_env)

        if isinstance(function, NativeFunction):
            return function(args)

        raise EvalError("Expression is not a function and cannot be called")