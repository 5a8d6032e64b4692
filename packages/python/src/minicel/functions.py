import decimal
import logging
from contextlib import contextmanager
from decimal import Decimal, DivisionByZero, InvalidOperation
from typing import Any, Callable, Iterator, NamedTuple, Optional, Sequence

from rapidfuzz import fuzz, process

from minicel.ast import Number, Value
from minicel.errors import BuiltinError

BuiltinFn = Callable[[Sequence[Value]], str]

# Significant digits kept by `div` when the quotient does not terminate
DIVISION_PRECISION = 50


class Builtin(NamedTuple):
    name: str
    fn: BuiltinFn
    # None means variadic
    arity: Optional[int] = None

    def __call__(self, args: Sequence[Value]) -> str:
        if self.arity is not None and len(args) != self.arity:
            raise BuiltinError(f"Expected {self.arity} arguments, found {len(args)}")
        return self.fn(args)


BUILTINS: dict[str, Builtin] = {}


def builtin(
    fn: BuiltinFn | None = None,
    *,
    name: Optional[str] = None,
    arity: Optional[int] = None,
) -> Any:
    """Decorator to register a function as a builtin."""

    def decorator(fn: BuiltinFn) -> BuiltinFn:
        # Used on a staticmethod: register the underlying function but return
        # the descriptor to preserve method semantics.
        underlying = fn.__func__ if isinstance(fn, staticmethod) else fn
        reg_name = name or underlying.__name__
        BUILTINS[reg_name] = Builtin(reg_name, underlying, arity)
        return fn

    if fn:
        return decorator(fn)
    else:
        return decorator


def is_builtin(name: str) -> bool:
    return name in BUILTINS


def call_builtin(name: str, args: Sequence[Value]) -> Optional[str]:
    """Call a builtin by name; None when no such builtin exists."""
    logging.debug(f"Trying to call builtin function: {name} with args: {args}")
    function = BUILTINS.get(name)
    if function is None:
        logging.error(f"No builtin function found with name: {name}")
        return None
    return function(args)


def suggest_builtin(name: str, similarity: float = 0.6) -> Optional[str]:
    """Return the registered builtin whose name is closest to `name`."""
    matches = process.extract(name, list(BUILTINS), scorer=fuzz.ratio, limit=1)
    for match, score, _ in matches:
        if score >= similarity * 100:
            return match
    return None


def numeric_operands(args: Sequence[Value]) -> tuple[Decimal, Decimal]:
    left, right = args
    if not (isinstance(left, Number) and isinstance(right, Number)):
        raise BuiltinError(f"Expected numbers found `{left}` and `{right}`")
    return left.value, right.value


def format_decimal(value: Decimal) -> str:
    return str(Number(value))


def exact_precision(left: Decimal, right: Decimal) -> int:
    """Digits needed to add, subtract or multiply two finite decimals without
    rounding."""
    digits = len(left.as_tuple().digits) + len(right.as_tuple().digits)
    span = max(left.adjusted(), right.adjusted()) - min(
        left.as_tuple().exponent, right.as_tuple().exponent
    )
    return max(digits, span) + 2


@contextmanager
def arithmetic_context(precision: int) -> Iterator[decimal.Context]:
    with decimal.localcontext() as ctx:
        ctx.prec = precision
        ctx.Emax = decimal.MAX_EMAX
        ctx.Emin = decimal.MIN_EMIN
        yield ctx


class MinicelFunctions:
    """Collection of builtin function implementations.

    Every builtin receives already evaluated arguments and returns the
    textual value written back to the cell.
    """

    @builtin(name="print")
    @staticmethod
    def print_(args: Sequence[Value]) -> str:
        """Join the textual form of every argument with `, `."""
        return ", ".join(str(arg) for arg in args)

    @builtin(arity=2)
    @staticmethod
    def sum(args: Sequence[Value]) -> str:
        left, right = numeric_operands(args)
        with arithmetic_context(exact_precision(left, right)):
            return format_decimal(left + right)

    @builtin(arity=2)
    @staticmethod
    def sub(args: Sequence[Value]) -> str:
        left, right = numeric_operands(args)
        with arithmetic_context(exact_precision(left, right)):
            return format_decimal(left - right)

    @builtin(arity=2)
    @staticmethod
    def mul(args: Sequence[Value]) -> str:
        left, right = numeric_operands(args)
        with arithmetic_context(exact_precision(left, right)):
            return format_decimal(left * right)

    @builtin(arity=2)
    @staticmethod
    def div(args: Sequence[Value]) -> str:
        """Terminating quotients are exact, others keep `DIVISION_PRECISION`
        significant digits (more when the operands are longer)."""
        left, right = numeric_operands(args)
        precision = max(DIVISION_PRECISION, exact_precision(left, right))
        try:
            with arithmetic_context(precision):
                return format_decimal(left / right)
        except (DivisionByZero, InvalidOperation):
            raise BuiltinError("Division by zero")
