import logging
from typing import Any, NamedTuple, Sequence, Union

from cell_formulas.ast import Argument, CellFunction
from cell_formulas.errors import EvaluationFault, InvalidFunctionName
from cell_formulas.functions import CELL_FUNCTIONS
from cell_formulas.parser import parse
from cell_formulas.types import (
    NAN,
    Value,
    is_numeric,
    is_quoted,
    parse_number,
    unquote,
)
from cell_formulas.utils import CellAddress, extract_cell_address, is_cell_reference

# Nested evaluations deeper than this give NaN. This bounds circular references
# but is not an exact cycle detector.
MAX_DEPTH = 10

CellContent = Union[Value, CellFunction]
Grid = Sequence[Sequence[Any]]

# Faults a single node may raise; they become NaN at that node
EVALUATION_FAULTS = (
    EvaluationFault,
    InvalidFunctionName,
    ArithmeticError,
    TypeError,
    ValueError,
)


class EvaluationContext(NamedTuple):
    """Grid snapshot and depth of the node currently being evaluated."""

    grid: Grid
    depth: int = 0

    def resolve(self, arg: Argument) -> Value:
        """Resolve a node argument: evaluate nodes, classify raw string tokens."""
        if isinstance(arg, CellFunction):
            return evaluate(arg, self.grid, self.depth)
        if isinstance(arg, str):
            return evaluate_literal(arg, self.grid, self.depth)
        return arg

    def evaluate_literal(self, token: str) -> Value:
        return evaluate_literal(token, self.grid, self.depth)


def evaluate(
    formula_or_node: Union[str, CellFunction], grid: Grid, depth: int = 0
) -> Value:
    """Evaluate a node (or formula text) against a grid.

    Never raises for a node: runtime faults, failed coercions and exhausted
    depth all give NaN. Formula text is parsed first and parse errors do
    propagate.
    """
    if isinstance(formula_or_node, str):
        node = parse(formula_or_node, grid)
    else:
        node = formula_or_node

    if depth > MAX_DEPTH:
        logging.debug("Maximum evaluation depth exceeded at %s", node.name)
        return NAN

    try:
        fn = CELL_FUNCTIONS.get(node.name)
        if fn is None:
            raise InvalidFunctionName(f"Invalid function name: {node.name}")
        return fn(node.args, EvaluationContext(grid, depth + 1))
    except EVALUATION_FAULTS as e:
        logging.debug("%s evaluated to NaN: %s", node.name, e)
        return NAN


def evaluate_literal(token: str, grid: Grid, depth: int = 0) -> Value:
    """Resolve a raw token to a value. Never raises.

    Cell references give the referenced cell's content, evaluating it at the
    same depth when it holds a formula. Numbers, TRUE/FALSE and quoted strings
    are converted, any other token is returned unchanged.
    """
    if is_cell_reference(token):
        address = extract_cell_address(token)
        content = _cell_content(grid, address) if address else None
        if isinstance(content, CellFunction):
            return evaluate(content, grid, depth)
        return content

    if is_numeric(token):
        try:
            return parse_number(token)
        except ValueError:
            # Too many digits for int()
            return NAN
    if token in ("TRUE", "FALSE"):
        return token == "TRUE"
    if is_quoted(token):
        return unquote(token)

    return token


def _cell_content(grid: Grid, address: CellAddress) -> CellContent:
    """Read a cell, treating anything outside the grid as empty."""
    if address.row < 0:
        return None
    try:
        cell = grid[address.row][address.column]
    except IndexError:
        return None
    # Host cell records (e.g. openpyxl cells) expose their content as .value
    if not isinstance(cell, CellFunction) and hasattr(cell, "value"):
        return cell.value
    return cell
