"""Interpreter for the Elang language: syntax tree, values, types, structs and evaluation."""

__version__ = "0.1.0"

__all__ = ["ast", "values", "stdlib", "typesys", "structs", "interpreter"]