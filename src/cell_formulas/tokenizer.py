from enum import Enum, auto
from typing import List, NamedTuple

from cell_formulas.errors import TokenizerError


class TokenType(Enum):
    IDENTIFIER = auto()
    NUMBER = auto()
    OPERATOR = auto()
    LPAREN = auto()
    RPAREN = auto()
    COMMA = auto()
    BOOLEAN = auto()
    STRING = auto()


class Token(NamedTuple):
    type: TokenType
    value: str
    position: int


class FormulaTokenizer:
    TWO_CHAR_OPERATORS = {"<": {"=", ">"}, ">": {"="}}
    SINGLE_CHAR_TOKENS = {
        "(": TokenType.LPAREN,
        ")": TokenType.RPAREN,
        ",": TokenType.COMMA,
    }

    def __init__(self, formula: str):
        self.formula = formula.strip()
        self.pos = 0
        self.length = len(self.formula)

    def tokenize(self) -> List[Token]:
        """Tokenize the formula and return list of tokens."""
        tokens = []
        while self.pos < self.length:
            char = self.formula[self.pos]

            if char.isspace():
                self.pos += 1
                continue
            elif char in "\"'":
                tokens.append(self._tokenize_string())
            elif char.isdigit() or char == ".":
                tokens.append(self._tokenize_number())
            elif char.isalpha() or char == "_" or char == "$":
                tokens.append(self._tokenize_identifier())
            elif char in "+-*/=<>":
                tokens.append(self._tokenize_operator())
            elif char in self.SINGLE_CHAR_TOKENS:
                tokens.append(Token(self.SINGLE_CHAR_TOKENS[char], char, self.pos))
                self.pos += 1
            else:
                raise TokenizerError(
                    f"Unexpected character: {char} at position {self.pos}"
                )

        return tokens

    def _tokenize_identifier(self) -> Token:
        """Tokenize an identifier (function name, cell reference, keyword)."""
        start = self.pos
        while self.pos < self.length and (
            self.formula[self.pos].isalnum() or self.formula[self.pos] in "_$"
        ):
            self.pos += 1

        value = self.formula[start : self.pos]
        if value.upper() in ["TRUE", "FALSE"]:
            return Token(TokenType.BOOLEAN, value.upper(), start)
        else:
            return Token(TokenType.IDENTIFIER, value, start)

    def _tokenize_number(self) -> Token:
        """Tokenize a number (integer, decimal or scientific notation)."""
        start = self.pos
        seen_decimal = False
        has_digits = False
        seen_exponent = False

        while self.pos < self.length:
            char = self.formula[self.pos]

            if char.isdigit():
                has_digits = True
                self.pos += 1
            elif char == "." and not seen_decimal and not seen_exponent:
                seen_decimal = True
                self.pos += 1
            elif char == ".":
                raise TokenizerError(
                    f"Invalid number format at position {start}: unexpected decimal point"
                )
            elif (char == "e" or char == "E") and not seen_exponent and has_digits:
                seen_exponent = True
                self.pos += 1
                if self.pos < self.length and (self.formula[self.pos] in "+-"):
                    self.pos += 1
                if self.pos >= self.length or not self.formula[self.pos].isdigit():
                    raise TokenizerError(
                        f"Invalid scientific notation at position {start}: missing exponent"
                    )
            else:
                break

        value = self.formula[start : self.pos]
        if not has_digits:
            raise TokenizerError(
                f"Invalid number format at position {start}: no digits"
            )

        return Token(TokenType.NUMBER, value, start)

    def _tokenize_operator(self) -> Token:
        """Tokenize an operator (+, -, *, /, =, <, >, <=, >=, <>)."""
        start = self.pos
        current_char = self.formula[self.pos]
        next_char = self.formula[self.pos + 1] if self.pos + 1 < self.length else None

        if (
            next_char
            and current_char in self.TWO_CHAR_OPERATORS
            and next_char in self.TWO_CHAR_OPERATORS[current_char]
        ):
            self.pos += 2
            value = self.formula[start : self.pos]
        else:
            self.pos += 1
            value = current_char

        return Token(TokenType.OPERATOR, value, start)

    def _tokenize_string(self) -> Token:
        """Tokenize a string literal delimited by double or single quotes.
        Rules:
        1. The closing quote must match the opening one
        2. A quote inside the string is escaped by doubling it
        3. The token value keeps the surrounding quotes, they are removed
           when the literal is evaluated
        """
        start = self.pos
        quote = self.formula[self.pos]
        self.pos += 1  # Skip opening quote
        while self.pos < self.length:
            char = self.formula[self.pos]
            self.pos += 1
            if char == quote:
                if self.pos < self.length and self.formula[self.pos] == quote:
                    # Quote escaped by doubling
                    self.pos += 1
                else:
                    break
        else:
            raise TokenizerError(
                f"Unterminated string literal at position {start}"
            )

        return Token(TokenType.STRING, self.formula[start : self.pos], start)
