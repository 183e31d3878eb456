from cell_formulas.ast import FUNCTION_NAMES, CellFunction
from cell_formulas.errors import (
    EvaluationFault,
    FormulaError,
    InvalidArity,
    InvalidExpression,
    InvalidFunctionName,
    ParseError,
    TokenizerError,
    TypeMismatch,
)
from cell_formulas.evaluator import MAX_DEPTH, evaluate, evaluate_literal
from cell_formulas.parser import parse
from cell_formulas.reader import grid_from_worksheet
from cell_formulas.types import NAN, string_to_value, value_to_string
from cell_formulas.utils import (
    column_to_index,
    increment_cell_references_in_string,
    index_to_column,
)

__all__ = [
    "FUNCTION_NAMES",
    "MAX_DEPTH",
    "NAN",
    "CellFunction",
    "EvaluationFault",
    "FormulaError",
    "InvalidArity",
    "InvalidExpression",
    "InvalidFunctionName",
    "ParseError",
    "TokenizerError",
    "TypeMismatch",
    "column_to_index",
    "evaluate",
    "evaluate_literal",
    "grid_from_worksheet",
    "increment_cell_references_in_string",
    "index_to_column",
    "parse",
    "string_to_value",
    "value_to_string",
]
