from typing import Callable, List, Optional

from cell_formulas.ast import (
    ARITHMETIC_FUNCTIONS,
    COMPARISON_FUNCTIONS,
    FUNCTION_NAMES,
    Argument,
    CellFunction,
    literal,
)
from cell_formulas.errors import InvalidExpression, InvalidFunctionName
from cell_formulas.tokenizer import FormulaTokenizer, Token, TokenType
from cell_formulas.types import is_number, is_quoted, parse_number
from cell_formulas.utils import is_cell_reference


def parse(formula: str, grid=None) -> CellFunction:
    """Parse a formula string into a CellFunction tree.

    `grid` is accepted so grid hosts can pass their cells on formula entry, but
    it is not consulted: references are resolved lazily by the evaluator.
    """
    tokens = FormulaTokenizer(formula).tokenize()
    try:
        return FormulaParser(tokens).parse()
    except RecursionError as e:
        raise InvalidExpression("Formula is nested too deeply") from e


class FormulaParser:
    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.current = 0

    def parse(self) -> CellFunction:
        """Parse tokens into a CellFunction. Non-node results are wrapped in a LITERAL."""
        # Skip leading equals sign if present
        self.current = 0
        if (
            len(self.tokens) > 0
            and self.tokens[0].type == TokenType.OPERATOR
            and self.tokens[0].value == "="
        ):
            self.current = 1

        if self.peek() is None:
            raise InvalidExpression("Empty formula")

        node = self.as_operand(self.parse_comparison())

        if (token := self.peek()) is not None:
            raise InvalidExpression(
                f"Unexpected token: {token.value} at position {token.position}"
            )
        return node

    def peek(self) -> Optional[Token]:
        """Look at the current token without consuming it."""
        if self.current >= len(self.tokens):
            return None
        return self.tokens[self.current]

    def read(self) -> Token:
        """Consume and return the current token."""
        if self.current >= len(self.tokens):
            raise InvalidExpression("Unexpected end of formula")
        tok = self.tokens[self.current]
        self.current += 1
        return tok

    def read_if_match(self, *types: TokenType) -> Optional[Token]:
        """Consume and return current token if it matches any of the given types."""
        token = self.peek()
        if token is not None and token.type in types:
            self.current += 1
            return token
        return None

    def as_operand(self, value: Argument) -> CellFunction:
        """Wrap a parsed value into a node, validating bare tokens.

        Bare cell references and quoted strings stay deferred inside a
        LITERAL, boolean keywords become booleans. Any other bare identifier
        is not a valid expression.
        """
        if isinstance(value, CellFunction):
            return value
        if isinstance(value, str):
            if value in ("TRUE", "FALSE"):
                return literal(value == "TRUE")
            if not (is_cell_reference(value) or is_quoted(value)):
                raise InvalidExpression(f"Invalid expression: {value}")
        return literal(value)

    def parse_comparison(self) -> Argument:
        """Parse an expression (lowest precedence: a single comparison)."""
        left = self.parse_additive()

        token = self.peek()
        if (
            token is None
            or token.type != TokenType.OPERATOR
            or token.value not in COMPARISON_FUNCTIONS
        ):
            return left

        self.read()  # consume operator
        right = self.parse_additive()
        node = CellFunction(
            COMPARISON_FUNCTIONS[token.value],
            (self.as_operand(left), self.as_operand(right)),
        )

        if (
            (next_tok := self.peek()) is not None
            and next_tok.type == TokenType.OPERATOR
            and next_tok.value in COMPARISON_FUNCTIONS
        ):
            raise InvalidExpression(
                f"Chained comparison at position {next_tok.position}"
            )
        return node

    def _parse_binary_operation(
        self, parse_operand: Callable[[], Argument], valid_operators: set[str]
    ) -> Argument:
        """Parse a left-associative chain, building one node per operator."""
        left = parse_operand()

        while True:
            next_tok = self.peek()
            if (
                not next_tok
                or next_tok.type != TokenType.OPERATOR
                or next_tok.value not in valid_operators
            ):
                break

            self.read()  # consume operator
            right = parse_operand()
            left = CellFunction(ARITHMETIC_FUNCTIONS[next_tok.value], (left, right))

        return left

    def parse_additive(self) -> Argument:
        """Parse addition/subtraction (+, -)."""
        return self._parse_binary_operation(self.parse_multiplicative, {"+", "-"})

    def parse_multiplicative(self) -> Argument:
        """Parse multiplication/division (*, /)."""
        return self._parse_binary_operation(self.parse_unary, {"*", "/"})

    def parse_unary(self) -> Argument:
        """Parse a negation. Negated numbers fold, anything else is multiplied by -1."""
        token = self.peek()
        if token is not None and token.type == TokenType.OPERATOR and token.value == "-":
            self.read()
            operand = self.parse_unary()
            if is_number(operand):
                return -operand
            return CellFunction("MULTIPLY", (-1, operand))
        return self.parse_atom()

    def parse_atom(self) -> Argument:
        """Parse an atom (highest precedence: literals, references, calls, groups)."""
        token = self.peek()
        if token is None:
            raise InvalidExpression("Unexpected end of formula")

        if token.type == TokenType.NUMBER:
            self.read()
            try:
                return parse_number(token.value)
            except ValueError as e:
                raise InvalidExpression(
                    f"Invalid number at position {token.position}: {e}"
                ) from e

        elif token.type in (TokenType.STRING, TokenType.BOOLEAN):
            self.read()
            return token.value

        elif token.type == TokenType.IDENTIFIER:
            self.read()
            if self.read_if_match(TokenType.LPAREN):
                return self.parse_function_call(token)
            return token.value

        elif token.type == TokenType.LPAREN:
            self.read()  # consume '('
            value = self.parse_comparison()
            if not self.read_if_match(TokenType.RPAREN):
                raise InvalidExpression("Expected closing parenthesis ')'")
            return value

        raise InvalidExpression(
            f"Unexpected token: {token.value} at position {token.position}"
        )

    def parse_function_call(self, name_token: Token) -> CellFunction:
        """Parse the arguments of a call whose opening parenthesis was consumed.

        Commas only separate arguments at this call's own level, nested calls
        consume their own. Lone numbers stay numbers, lone identifiers, strings
        and booleans stay raw tokens, everything else becomes a nested node.
        """
        name = name_token.value.upper()
        if name not in FUNCTION_NAMES:
            raise InvalidFunctionName(f"Invalid function name: {name_token.value}")

        args: list[Argument] = []

        # Handle empty argument list
        if self.read_if_match(TokenType.RPAREN):
            return CellFunction(name, ())

        while True:
            args.append(self.parse_comparison())

            next_tok = self.peek()
            if not next_tok:
                raise InvalidExpression("Unexpected end of formula in function call")

            if next_tok.type == TokenType.RPAREN:
                self.read()  # consume ')'
                break

            if next_tok.type == TokenType.COMMA:
                self.read()  # consume ','
                continue

            raise InvalidExpression(
                f"Expected ',' or ')' in function call, got {next_tok.value}"
            )

        return CellFunction(name, tuple(args))
