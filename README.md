# elang

An interpreter for Elang, a small Lisp with type annotations. It evaluates
Elang syntax trees built from the classes in `elang.ast` and supports:

- integer, float, boolean and character literals, and nil
- quoted data (`Quote`), turned into symbols, characters, numbers, booleans
  and `cons` lists ending in `none`; an improper list is an error
- `if`, `if-let` over optional values, `let` (parallel) and `let*`
  (sequential) bindings
- destructuring of identifiers, structs and lists in bindings and function
  parameters
- first-class functions and closures whose parameter types are checked on
  every call
- generic structs such as `box` with a type parameter `T`: defining one
  binds a `make-box` constructor that deduces `T` from its arguments (the
  instance is named `box-int`, `box-bool`, ...) and `box-<field>` accessors
- modules that provide names and require other module files
- built-ins: `+`, `-`, `*`, `/`, `div`, `mod`, `=`, `to-int`, `to-float`,
  `print`, `some` and `none`

Integer arithmetic stays within 64-bit signed bounds; going past them raises
an error such as `attempt to add with overflow`. Integer division truncates
towards zero.

## Layout

| Module              | Contents                                                                 |
|---------------------|--------------------------------------------------------------------------|
| `elang.ast`         | Syntax tree: types, literals, quoted data, patterns, expressions, top-level items, `Module`, `as_expr` |
| `elang.values`      | Runtime values, `Environment` and `EvalError`                            |
| `elang.stdlib`      | Built-in functions: `builtins()` and `populate_env(env)`                 |
| `elang.typesys`     | Type rendering, compatibility, deduction and substitution                |
| `elang.structs`     | Constructors and accessors for generic and concrete structs              |
| `elang.interpreter` | `Interpreter`, `quote_to_value` and `value_to_list`                      |

## Usage

`Interpreter.eval` evaluates one top-level item and returns its value;
`Interpreter.eval_all` evaluates items in order and returns the last value
(`none` if there are none). Definitions (`StructDef`, `VarDef`, `FunDef`)
extend the interpreter's global environment, so later items can use them.
`Interpreter.eval_expr(expr, env)` evaluates a single expression, in the
global environment by default.

```python
from elang.ast import (
    Call, FunDef, GenericParam, Identifier, IdentifierPattern,
    Literal, LiteralKind, PrimType, StructDef,
)
from elang.interpreter import Interpreter

interp = Interpreter()

add = FunDef(
    "add",
    [(IdentifierPattern("a"), PrimType.INT), (IdentifierPattern("b"), PrimType.INT)],
    PrimType.INT,
    Call(Identifier("+"), [Identifier("a"), Identifier("b")]),
)
two, three = Literal(LiteralKind.INT, 2), Literal(LiteralKind.INT, 3)
print(interp.eval_all([add, Call(Identifier("add"), [two, three])]))   # 5

interp.eval(StructDef("box", ["T"], [("value", GenericParam("T"))]))
boxed = interp.eval(Call(Identifier("make-box"), [three]))
print(boxed)                                                           # <struct box-int>
print(interp.eval(Call(Identifier("box-value"), [Identifier("none")])))  # raises EvalError
```

Every failure, such as an unbound name, a non-boolean `if` condition, a call
with the wrong number or type of arguments, or `if` branches of
incompatible types, raises `elang.values.EvalError` with a message such as
`Unbound variable: x` or `If condition must be a boolean`.

## Modules

`Interpreter(root_path=..., parser=...)` takes a directory that required
files are resolved against and a `parser`: a callable that turns a file's
text into an `elang.ast.Module`. Evaluating a `Require` item loads that file
and its own requirements, evaluates only its definitions (never its
top-level expressions) and brings in just the names it provides; a provided
name the module does not define raises `EvalError`. Each file is loaded at
most once per interpreter. Without a `root_path`, nested requirements are
resolved relative to the requiring file.

## Values

Values print the way Elang shows them: integers and floats as numbers,
booleans as `true`/`false`, optional values as `(some 10)` or `none`,
symbols as `'name`, structs as `<struct vec2-int>` and functions as
`<function>`. The `print` built-in writes its arguments to standard output,
separated by spaces.

## What this package does not do

It contains no reader for Elang source text: programs must be given as
`elang.ast` syntax trees, and loading required module files works only when
a `parser` callable is supplied. There is no command-line program and no
interactive prompt.