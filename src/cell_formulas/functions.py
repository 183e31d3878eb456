import math
import operator
from typing import TYPE_CHECKING, Callable, Sequence

from cell_formulas.ast import Argument, CellFunction
from cell_formulas.errors import InvalidArity, TypeMismatch
from cell_formulas.types import NAN, Value, is_number

if TYPE_CHECKING:
    from cell_formulas.evaluator import EvaluationContext

CellFn = Callable[[Sequence[Argument], "EvaluationContext"], Value]

CELL_FUNCTIONS: dict[str, CellFn] = {}


def cell_fn(fn: CellFn) -> CellFn:
    """Decorator to register a function implementation under its name."""
    CELL_FUNCTIONS[fn.__name__] = fn
    return fn


def _resolve_number(arg: Argument, ctx: "EvaluationContext") -> float:
    """Resolve an argument, giving NaN when it is not a number."""
    value = ctx.resolve(arg)
    return value if is_number(value) else NAN


@cell_fn
def SUM(args: Sequence[Argument], ctx: "EvaluationContext") -> Value:
    total = 0
    for arg in args:
        total += _resolve_number(arg, ctx)
    return total


@cell_fn
def SUBTRACT(args: Sequence[Argument], ctx: "EvaluationContext") -> Value:
    # The first argument is the minuend: SUBTRACT(a, b, c) == a - b - c
    result = 0
    for i, arg in enumerate(args):
        value = _resolve_number(arg, ctx)
        result = value - result if i == 0 else result - value
    return result


@cell_fn
def MULTIPLY(args: Sequence[Argument], ctx: "EvaluationContext") -> Value:
    product = 1
    for arg in args:
        product *= _resolve_number(arg, ctx)
    return product


@cell_fn
def DIVIDE(args: Sequence[Argument], ctx: "EvaluationContext") -> Value:
    result = 0
    for i, arg in enumerate(args):
        value = _resolve_number(arg, ctx)
        if i == 0:
            result = value
        elif value == 0:
            # x/0 is a signed infinity, 0/0 and NaN/0 are NaN
            if result == 0 or math.isnan(result):
                result = NAN
            else:
                result = math.copysign(math.inf, result) * math.copysign(1, value)
        else:
            result = result / value
    return result


@cell_fn
def AVG(args: Sequence[Argument], ctx: "EvaluationContext") -> Value:
    """Mean of the arguments that resolve to numbers, NaN if none do."""
    numbers = [value for value in map(ctx.resolve, args) if is_number(value)]
    if not numbers:
        return NAN
    return sum(numbers) / len(numbers)


def _extremum(
    args: Sequence[Argument],
    ctx: "EvaluationContext",
    pick: Callable[..., float],
    empty: float,
) -> Value:
    # Unresolved arguments are not skipped: their NaN wins over every number
    values = [_resolve_number(arg, ctx) for arg in args]
    if any(math.isnan(value) for value in values):
        return NAN
    return pick(values, default=empty)


@cell_fn
def MAX(args: Sequence[Argument], ctx: "EvaluationContext") -> Value:
    return _extremum(args, ctx, max, -math.inf)


@cell_fn
def MIN(args: Sequence[Argument], ctx: "EvaluationContext") -> Value:
    return _extremum(args, ctx, min, math.inf)


@cell_fn
def IF(args: Sequence[Argument], ctx: "EvaluationContext") -> Value:
    """IF(condition, then, else).

    The condition must resolve to a boolean, anything else gives NaN. Only the
    selected branch is evaluated.
    """
    if len(args) != 3:
        raise InvalidArity(f"IF function requires 3 arguments, received {len(args)}")

    condition, then_value, else_value = args
    if isinstance(condition, (CellFunction, str)):
        condition = ctx.resolve(condition)
    if not isinstance(condition, bool):
        return NAN
    return ctx.resolve(then_value if condition else else_value)


def _compare(
    name: str,
    args: Sequence[Argument],
    ctx: "EvaluationContext",
    predicate: Callable[[float, float], bool],
) -> bool:
    if len(args) != 2:
        raise InvalidArity(
            f"{name} function requires 2 arguments, received {len(args)}"
        )

    left, right = (ctx.resolve(arg) for arg in args)
    if not is_number(left) or not is_number(right):
        raise TypeMismatch(f"{name} can only compare numbers, got {left!r} and {right!r}")

    return predicate(left, right)


@cell_fn
def LESS_THAN(args: Sequence[Argument], ctx: "EvaluationContext") -> Value:
    return _compare("LESS_THAN", args, ctx, operator.lt)


@cell_fn
def GREATER_THAN(args: Sequence[Argument], ctx: "EvaluationContext") -> Value:
    return _compare("GREATER_THAN", args, ctx, operator.gt)


@cell_fn
def LESS_THAN_OR_EQUAL(args: Sequence[Argument], ctx: "EvaluationContext") -> Value:
    return _compare("LESS_THAN_OR_EQUAL", args, ctx, operator.le)


@cell_fn
def GREATER_THAN_OR_EQUAL(args: Sequence[Argument], ctx: "EvaluationContext") -> Value:
    return _compare("GREATER_THAN_OR_EQUAL", args, ctx, operator.ge)


@cell_fn
def EQUALS(args: Sequence[Argument], ctx: "EvaluationContext") -> Value:
    return _compare("EQUALS", args, ctx, operator.eq)


@cell_fn
def NOT_EQUAL(args: Sequence[Argument], ctx: "EvaluationContext") -> Value:
    return _compare("NOT_EQUAL", args, ctx, operator.ne)


@cell_fn
def LITERAL(args: Sequence[Argument], ctx: "EvaluationContext") -> Value:
    """Return the wrapped value. Nested nodes are not unwrapped and give NaN."""
    if not args or isinstance(args[0], CellFunction):
        return NAN
    value = args[0]
    if isinstance(value, str):
        return ctx.evaluate_literal(value)
    return value
