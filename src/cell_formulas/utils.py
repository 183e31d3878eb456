import logging
import re
from typing import NamedTuple

from openpyxl.utils import column_index_from_string, get_column_letter

# Constants
CELL_REF_REGEX = re.compile(r"^(\$?)([A-Z]+)(\$?)(\d+)$")

# Cell references embedded in formula text. String literals are matched first
# so references inside quotes are skipped.
EMBEDDED_REF_REGEX = re.compile(
    r"\"(?:[^\"]|\"\")*\"|'(?:[^']|'')*'"
    r"|(?<![A-Za-z0-9_$])(\$?)([A-Z]+)(\$?)(\d+)(?![A-Za-z0-9_(])"
)

INVALID_REFERENCE = "#REF!"


class CellAddress(NamedTuple):
    row: int  # 0-based
    column: int  # 0-based
    absolute_row: bool = False
    absolute_col: bool = False


def index_to_column(index: int) -> str:
    """Convert a 0-based column index to its letter label (0 -> A, 26 -> AA)."""
    if index < 0:
        raise ValueError(f"Invalid column index {index}")
    return get_column_letter(index + 1)


def column_to_index(label: str) -> int:
    """Convert a column label to its 0-based index (A -> 0, AA -> 26)."""
    return column_index_from_string(label) - 1


def is_cell_reference(token: str) -> bool:
    return CELL_REF_REGEX.match(token) is not None


def extract_cell_address(ref: str) -> CellAddress | None:
    """Parse a cell reference such as B3 or $B$3, returning None if invalid."""
    match = CELL_REF_REGEX.match(ref)
    if not match:
        return None
    col_anchor, col, row_anchor, row = match.groups()
    try:
        column = column_to_index(col)
        row_index = int(row) - 1
    except ValueError:
        return None
    return CellAddress(
        row=row_index,
        column=column,
        absolute_row=bool(row_anchor),
        absolute_col=bool(col_anchor),
    )


def _shift_reference(
    match: re.Match, row_increment: int, col_increment: int
) -> str:
    col_anchor, col, row_anchor, row = match.groups()
    if col is None:
        # String literal
        return match.group(0)

    try:
        new_row = int(row) if row_anchor else int(row) + row_increment
        new_col = column_to_index(col) + (0 if col_anchor else col_increment)
        if new_row < 1:
            raise ValueError(f"Invalid row {new_row}")
        new_label = index_to_column(new_col)
    except ValueError:
        logging.warning(
            "Reference %s shifted by (%d, %d) leaves the grid",
            match.group(0),
            row_increment,
            col_increment,
        )
        return INVALID_REFERENCE
    return f"{col_anchor}{new_label}{row_anchor}{new_row}"


def increment_cell_references_in_string(
    text: str, row_increment: int, col_increment: int
) -> str:
    """Shift every cell reference in a formula by the given row/column deltas.

    Used when a formula is copied or filled to another location. Each reference
    is rewritten exactly once, so "A1+B1" shifted by one column gives "B1+C1"
    and never "C1+C1". $-anchored components keep their position and text
    inside string literals is left alone. A reference pushed before row 1 or
    column A becomes #REF!.
    """
    return EMBEDDED_REF_REGEX.sub(
        lambda match: _shift_reference(match, row_increment, col_increment), text
    )
