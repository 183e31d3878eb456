from typing import Any, NamedTuple

FUNCTION_NAMES = (
    "SUM",
    "SUBTRACT",
    "MULTIPLY",
    "DIVIDE",
    "AVG",
    "MAX",
    "MIN",
    "IF",
    "LESS_THAN",
    "GREATER_THAN",
    "LESS_THAN_OR_EQUAL",
    "GREATER_THAN_OR_EQUAL",
    "EQUALS",
    "NOT_EQUAL",
    "LITERAL",
)

COMPARISON_FUNCTIONS = {
    "<": "LESS_THAN",
    ">": "GREATER_THAN",
    "<=": "LESS_THAN_OR_EQUAL",
    ">=": "GREATER_THAN_OR_EQUAL",
    "=": "EQUALS",
    "<>": "NOT_EQUAL",
}

ARITHMETIC_FUNCTIONS = {
    "+": "SUM",
    "-": "SUBTRACT",
    "*": "MULTIPLY",
    "/": "DIVIDE",
}


class CellFunction(NamedTuple):
    name: str
    # Nested nodes, raw numbers, or raw string tokens resolved at evaluation
    args: "tuple[Argument, ...]" = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "args": [
                arg.to_dict() if isinstance(arg, CellFunction) else arg
                for arg in self.args
            ],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CellFunction":
        return cls(
            name=data["name"],
            args=tuple(
                cls.from_dict(arg) if isinstance(arg, dict) else arg
                for arg in data.get("args", ())
            ),
        )


def literal(value: "Argument") -> CellFunction:
    return CellFunction("LITERAL", (value,))


# Type alias for everything that can appear in CellFunction.args
Argument = CellFunction | int | float | str | bool | None
