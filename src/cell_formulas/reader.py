from datetime import date, datetime
from decimal import Decimal

from openpyxl.cell.rich_text import CellRichText
from openpyxl.worksheet.formula import ArrayFormula
from openpyxl.worksheet.worksheet import Worksheet

from cell_formulas.evaluator import CellContent
from cell_formulas.parser import parse


def read_cell_content(value) -> CellContent:
    """Normalize a raw openpyxl cell value, parsing formulas into CellFunctions."""
    if isinstance(value, ArrayFormula):
        value = value.text
    if isinstance(value, Decimal):
        value = float(value)
    if isinstance(value, date) and not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    if isinstance(value, CellRichText):
        value = str(value)
    if isinstance(value, str) and value.startswith("="):
        return parse(value)
    return value


def grid_from_worksheet(ws: Worksheet) -> list[list[CellContent]]:
    """Build an evaluation grid from a worksheet, starting at A1.

    Workbooks must be loaded with formulas (data_only=False) for formula cells
    to be parsed. Parse errors propagate.
    """
    return [
        [read_cell_content(value) for value in row]
        for row in ws.iter_rows(
            min_row=1,
            min_col=1,
            max_row=ws.max_row,
            max_col=ws.max_column,
            values_only=True,
        )
    ]
