from decimal import Decimal
from typing import Callable, NamedTuple


class FunctionCall(NamedTuple):
    name: str
    arguments: "tuple[Expression, ...]"
    line_number: int = 0

    def __str__(self) -> str:
        # Avoid circular imports
        from minicel.functions import is_builtin

        kind = "builtin function" if is_builtin(self.name) else "function"
        arguments = ", ".join(str(arg) for arg in self.arguments)
        return f"{kind}: {self.name}({arguments})"


class Field(NamedTuple):
    column: str
    row: int
    value: str = ""

    def coords(self) -> str:
        return f"{self.column.upper()}{self.row}"

    def __str__(self) -> str:
        return self.value


class Number(NamedTuple):
    value: Decimal

    def __str__(self) -> str:
        # Plain notation, never `1E+3`
        return format(self.value, "f")


class String(NamedTuple):
    value: str

    def __str__(self) -> str:
        return self.value


class Boolean(NamedTuple):
    value: bool

    def __str__(self) -> str:
        return "true" if self.value else "false"


class Array(NamedTuple):
    elements: "tuple[Expression, ...]"

    def __str__(self) -> str:
        return "[" + ", ".join(str(element) for element in self.elements) + "]"


# Type alias for all possible expressions
Expression = FunctionCall | Field | Number | String | Boolean | Array

# Fully evaluated expressions, as handed to builtins
Value = Number | String | Boolean | Array


def leaves(expr: Expression) -> list[Expression]:
    """Return the leaves reachable from an expression.

    Function calls and arrays are never leaves themselves, their arguments
    and elements are walked instead.
    """
    if isinstance(expr, FunctionCall):
        return [leaf for arg in expr.arguments for leaf in leaves(arg)]
    if isinstance(expr, Array):
        return [leaf for element in expr.elements for leaf in leaves(element)]
    return [expr]


def map_leaves(
    expr: Expression, fn: Callable[[Expression], Expression]
) -> Expression:
    """Return a copy of the tree where every leaf is replaced by fn(leaf)."""
    if isinstance(expr, FunctionCall):
        return expr._replace(
            arguments=tuple(map_leaves(arg, fn) for arg in expr.arguments)
        )
    if isinstance(expr, Array):
        return Array(tuple(map_leaves(element, fn) for element in expr.elements))
    return fn(expr)


class Ast(NamedTuple):
    """A parsed formula: exactly one top-level function call."""

    function: FunctionCall

    def leaves(self) -> list[Expression]:
        return leaves(self.function)

    def map_leaves(self, fn: Callable[[Expression], Expression]) -> "Ast":
        function = map_leaves(self.function, fn)
        assert isinstance(function, FunctionCall)
        return Ast(function)
