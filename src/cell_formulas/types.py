import json
import math
import re
from datetime import date, datetime
from typing import Literal

from openpyxl.utils.datetime import from_ISO8601, to_ISO8601

from cell_formulas.ast import CellFunction

Value = None | int | float | str | bool | date | datetime

# Sentinel produced for every runtime fault, exhausted depth or failed coercion
NAN = float("nan")

NUMBER_REGEX = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")

ValueKind = Literal["string", "number", "boolean", "date", "fx"]


def parse_number(val: str):
    is_float = ("." in val) or ("e" in val) or ("E" in val)
    return float(val) if is_float else int(val)


def is_numeric(text: str) -> bool:
    """Return True if the whole string is a finite decimal number."""
    return NUMBER_REGEX.match(text) is not None


def is_number(value) -> bool:
    # bool is a subclass of int but never counts as a number here
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_nan(value) -> bool:
    return isinstance(value, float) and math.isnan(value)


def is_quoted(text: str) -> bool:
    return len(text) >= 2 and text[0] in "\"'" and text[-1] == text[0]


def unquote(text: str) -> str:
    """Strip the surrounding quotes of a string literal.

    Doubled quote characters inside the literal collapse to a single one,
    e.g. 'it''s' -> it's.
    """
    quote = text[0]
    return text[1:-1].replace(quote * 2, quote)


def value_to_string(value: "Value | CellFunction") -> str:
    """Render a cell value (or a formula node) as display/storage text."""
    if value is None:
        return ""
    if isinstance(value, CellFunction):
        return json.dumps(value.to_dict())
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
        return str(value)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, datetime):
        # It's common to use a space for readability
        return to_ISO8601(value).replace("T", " ")
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def string_to_value(text: str | None, kind: ValueKind) -> "Value | CellFunction":
    """Convert stored text back into a value of the given kind.

    Empty text and unconvertible numbers, booleans or dates give None.
    """
    if not text:
        return None
    match kind:
        case "string":
            return text
        case "number":
            stripped = text.strip()
            return parse_number(stripped) if is_numeric(stripped) else None
        case "boolean":
            lowered = text.lower()
            if lowered in ("true", "yes", "on", "1"):
                return True
            if lowered in ("false", "no", "0"):
                return False
            return None
        case "date":
            try:
                return from_ISO8601(text)
            except ValueError:
                return None
        case "fx":
            return CellFunction.from_dict(json.loads(text))
        case _:
            raise ValueError(f"Unknown value kind: {kind}")
