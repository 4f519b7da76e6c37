"""Built-in functions available in every Elang program."""

from __future__ import annotations

import math

from elang.values import (
    NONE,
    BoolValue,
    CharValue,
    EvalError,
    FloatValue,
    IntValue,
    NativeFunction,
    OptionalValue,
    SymbolValue,
)

_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1


def _i64(number: int, operation: str) -> int:
    if not _I64_MIN <= number <= _I64_MAX:
        raise EvalError(f"attempt to {operation} with overflow")
    return number


def _trunc_div(a: int, b: int) -> int:
    quotient = abs(a) // abs(b)
    return quotient if (a < 0) == (b < 0) else -quotient


def _add(args):
    if not args:
        return IntValue(0)
    first = args[0]
    if isinstance(first, IntValue):
        total = 0
        for arg in args:
            if not isinstance(arg, IntValue):
                raise EvalError("All arguments must be integers for integer addition")
            total = _i64(total + arg.value, "add")
        return IntValue(total)
    if isinstance(first, FloatValue):
        total = 0.0
        for arg in args:
            if not isinstance(arg, FloatValue):
                raise EvalError("All arguments must be floats for float addition")
            total += arg.value
        return FloatValue(total)
    raise EvalError("Invalid argument type for '+'")


def _subtract(args):
    if not args:
        raise EvalError("'-' requires at least one argument")
    first, rest = args[0], args[1:]
    if isinstance(first, IntValue):
        if not rest:
            return IntValue(_i64(-first.value, "negate"))
        result = first.value
        for arg in rest:
            if not isinstance(arg, IntValue):
                raise EvalError("All arguments must be integers for integer subtraction")
            result = _i64(result - arg.value, "subtract")
        return IntValue(result)
    if isinstance(first, FloatValue):
        if not rest:
            return FloatValue(-first.value)
        result = first.value
        for arg in rest:
            if not isinstance(arg, FloatValue):
                raise EvalError("All arguments must be floats for float subtraction")
            result -= arg.value
        return FloatValue(result)
    raise EvalError("Invalid argument type for '-'")


def _multiply(args):
    if not args:
        return IntValue(1)
    first = args[0]
    if isinstance(first, IntValue):
        product = 1
        for arg in args:
            if not isinstance(arg, IntValue):
                raise EvalError("All arguments must be integers for integer multiplication")
            product = _i64(product * arg.value, "multiply")
        return IntValue(product)
    if isinstance(first, FloatValue):
        product = 1.0
        for arg in args:
            if not isinstance(arg, FloatValue):
                raise EvalError("All arguments must be floats for float multiplication")
            product *= arg.value
        return FloatValue(product)
    raise EvalError("Invalid argument type for '*'")


def _divide(args):
    if len(args) != 2:
        raise EvalError("'/' requires exactly two arguments")
    a, b = args
    if isinstance(a, IntValue) and isinstance(b, IntValue):
        if b.value == 0:
            raise EvalError("Division by zero")
        return IntValue(_i64(_trunc_div(a.value, b.value), "divide"))
    if isinstance(a, FloatValue) and isinstance(b, FloatValue):
        if b.value == 0.0:
            raise EvalError("Division by zero")
        return FloatValue(a.value / b.value)
    raise EvalError("Invalid argument types for '/'")


def _to_int(args):
    if len(args) != 1:
        raise EvalError("'to-int' requires exactly one argument")
    (arg,) = args
    if isinstance(arg, FloatValue):
        number = arg.value
        if math.isnan(number):
            return IntValue(0)
        if math.isinf(number):
            return IntValue(_I64_MAX if number > 0 else _I64_MIN)
        return IntValue(max(_I64_MIN, min(_I64_MAX, math.trunc(number))))
    if isinstance(arg, IntValue):
        return IntValue(arg.value)
    raise EvalError("Invalid argument type for 'to-int'")


def _to_float(args):
    if len(args) != 1:
        raise EvalError("'to-float' requires exactly one argument")
    (arg,) = args
    if isinstance(arg, IntValue):
        return FloatValue(float(arg.value))
    if isinstance(arg, FloatValue):
        return FloatValue(arg.value)
    raise EvalError("Invalid argument type for 'to-float'")


def _print(args):
    print(" ".join(str(arg) for arg in args))
    return NONE


def _mod(args):
    if len(args) != 2:
        raise EvalError("'mod' requires exactly two arguments")
    a, b = args
    if not (isinstance(a, IntValue) and isinstance(b, IntValue)):
        raise EvalError("Invalid argument type for 'mod'")
    if b.value == 0:
        raise EvalError("attempt to calculate the remainder with a divisor of zero")
    quotient = _trunc_div(a.value, b.value)
    _i64(quotient, "calculate the remainder")
    return IntValue(a.value - b.value * quotient)


def _div(args):
    if len(args) != 2:
        raise EvalError("'div' requires exactly two arguments")
    a, b = args
    if not (isinstance(a, IntValue) and isinstance(b, IntValue)):
        raise EvalError("Invalid argument type for 'div'")
    if b.value == 0:
        raise EvalError("Division by zero")
    return IntValue(_i64(_trunc_div(a.value, b.value), "divide"))


_SCALARS = (IntValue, FloatValue, BoolValue, CharValue, SymbolValue)


def _values_equal(a, b) -> bool:
    if isinstance(a, _SCALARS):
        return type(a) is type(b) and _scalar(a) == _scalar(b)
    if isinstance(a, OptionalValue) and isinstance(b, OptionalValue):
        if a.value is None or b.value is None:
            return a.value is None and b.value is None
        return _values_equal(a.value, b.value)
    return False


def _scalar(value):
    return value.name if isinstance(value, SymbolValue) else value.value


def _equals(args):
    if len(args) != 2:
        raise EvalError("'=' requires exactly two arguments")
    return BoolValue(_values_equal(args[0], args[1]))


def _some(args):
    if len(args) != 1:
        raise EvalError("'some' requires exactly one argument")
    return OptionalValue(args[0])


_NATIVES = {
    "+": _add,
    "-": _subtract,
    "*": _multiply,
    "/": _divide,
    "to-int": _to_int,
    "to-float": _to_float,
    "print": _print,
    "mod": _mod,
    "div": _div,
    "=": _equals,
    "some": _some,
}


def builtins() -> dict:
    """Return a fresh mapping of every built-in name to its value."""
    table = {name: NativeFunction(func, name) for name, func in _NATIVES.items()}
    table["none"] = NONE
    return table


def populate_env(env) -> None:
    """Define every built-in in the given environment."""
    for name, value in builtins().items():
        env.define(name, value)