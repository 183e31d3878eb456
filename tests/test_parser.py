import pytest

from cell_formulas.ast import CellFunction, literal
from cell_formulas.errors import (
    InvalidExpression,
    InvalidFunctionName,
    ParseError,
    TokenizerError,
)
from cell_formulas.parser import parse


class TestExpressionParser:
    def test_simple_arithmetic(self):
        """Binary operators build one node per application."""
        assert parse("1 + 2") == CellFunction("SUM", (1, 2))
        assert parse("5-3") == CellFunction("SUBTRACT", (5, 3))
        assert parse("2*3") == CellFunction("MULTIPLY", (2, 3))
        assert parse("6/3") == CellFunction("DIVIDE", (6, 3))

    def test_operator_precedence(self):
        node = parse("3+4*2")
        assert node == CellFunction("SUM", (3, CellFunction("MULTIPLY", (4, 2))))

        node = parse("(3+4)*2")
        assert node == CellFunction("MULTIPLY", (CellFunction("SUM", (3, 4)), 2))

    def test_left_associativity(self):
        node = parse("10-4-3")
        assert node == CellFunction(
            "SUBTRACT", (CellFunction("SUBTRACT", (10, 4)), 3)
        )

        node = parse("8/4*2")
        assert node == CellFunction("MULTIPLY", (CellFunction("DIVIDE", (8, 4)), 2))

    def test_cell_references_in_arithmetic(self):
        """References stay raw tokens inside arithmetic."""
        assert parse("A1+B2") == CellFunction("SUM", ("A1", "B2"))
        assert parse("A1*2.5") == CellFunction("MULTIPLY", ("A1", 2.5))

    def test_unary_minus(self):
        assert parse("-5") == literal(-5)
        assert parse("2--3") == CellFunction("SUBTRACT", (2, -3))
        assert parse("-A1") == CellFunction("MULTIPLY", (-1, "A1"))
        assert parse("-(1+2)") == CellFunction(
            "MULTIPLY", (-1, CellFunction("SUM", (1, 2)))
        )

    def test_bare_values(self):
        assert parse("A1") == literal("A1")
        assert parse("AB12") == literal("AB12")
        assert parse("42") == literal(42)
        assert parse("4.5") == literal(4.5)
        assert parse("TRUE") == literal(True)
        assert parse("false") == literal(False)
        assert parse('"hello"') == literal('"hello"')
        assert parse("'hello'") == literal("'hello'")

    def test_leading_equals_sign(self):
        assert parse("=1+2") == CellFunction("SUM", (1, 2))
        assert parse("=A1") == literal("A1")

    def test_comparisons(self):
        expected = {
            "<": "LESS_THAN",
            ">": "GREATER_THAN",
            "<=": "LESS_THAN_OR_EQUAL",
            ">=": "GREATER_THAN_OR_EQUAL",
            "=": "EQUALS",
            "<>": "NOT_EQUAL",
        }
        for op, name in expected.items():
            node = parse(f"A1{op}3")
            assert node == CellFunction(name, (literal("A1"), literal(3))), op

    def test_comparison_with_arithmetic_operands(self):
        node = parse("A1+1 >= 2*B1")
        assert node == CellFunction(
            "GREATER_THAN_OR_EQUAL",
            (
                CellFunction("SUM", ("A1", 1)),
                CellFunction("MULTIPLY", (2, "B1")),
            ),
        )

    def test_invalid_expressions(self):
        for formula in ["", "=", "hello", "1+", "(1+2", "1 2", "1<2<3", "A1<hello"]:
            with pytest.raises(InvalidExpression):
                parse(formula)

    def test_tokenizer_errors_are_parse_errors(self):
        with pytest.raises(TokenizerError):
            parse("A1:B2")
        with pytest.raises(ParseError):
            parse('"unterminated')

    def test_oversized_number(self):
        with pytest.raises(InvalidExpression):
            parse("1" * 5000)

    def test_deep_nesting(self):
        assert parse("(" * 50 + "1" + ")" * 50) == literal(1)
        with pytest.raises(InvalidExpression):
            parse("(" * 2000 + "1" + ")" * 2000)


class TestFunctionCallParser:
    def test_simple_call(self):
        assert parse("SUM(1,2,3)") == CellFunction("SUM", (1, 2, 3))
        assert parse("AVG( 2 , 4 )") == CellFunction("AVG", (2, 4))

    def test_empty_call(self):
        assert parse("SUM()") == CellFunction("SUM", ())

    def test_raw_arguments(self):
        """Lone references, strings and booleans are deferred to evaluation."""
        node = parse('IF(TRUE, A1, "no")')
        assert node == CellFunction("IF", ("TRUE", "A1", '"no"'))

    def test_negative_number_argument(self):
        assert parse("MAX(-3, 2)") == CellFunction("MAX", (-3, 2))

    def test_expression_arguments(self):
        node = parse('IF(1<2,"yes","no")')
        assert node == CellFunction(
            "IF",
            (
                CellFunction("LESS_THAN", (literal(1), literal(2))),
                '"yes"',
                '"no"',
            ),
        )

        node = parse("SUM(A1*2, 3)")
        assert node == CellFunction("SUM", (CellFunction("MULTIPLY", ("A1", 2)), 3))

    def test_nested_calls_keep_their_commas(self):
        node = parse("SUM(1, MAX(2, 3), AVG(4, MIN(5, 6)))")
        assert node == CellFunction(
            "SUM",
            (
                1,
                CellFunction("MAX", (2, 3)),
                CellFunction("AVG", (4, CellFunction("MIN", (5, 6)))),
            ),
        )

    def test_parenthesized_argument(self):
        assert parse("SUM((1+2), 3)") == CellFunction(
            "SUM", (CellFunction("SUM", (1, 2)), 3)
        )

    def test_calls_in_arithmetic(self):
        node = parse("SUM(1,2)*2+MAX(A1,B1)")
        assert node == CellFunction(
            "SUM",
            (
                CellFunction("MULTIPLY", (CellFunction("SUM", (1, 2)), 2)),
                CellFunction("MAX", ("A1", "B1")),
            ),
        )

    def test_function_names_are_case_insensitive(self):
        assert parse("sum(1)") == CellFunction("SUM", (1,))

    def test_explicit_comparison_functions(self):
        node = parse("NOT_EQUAL(A1, 3)")
        assert node == CellFunction("NOT_EQUAL", ("A1", 3))

    def test_invalid_function_name(self):
        with pytest.raises(InvalidFunctionName):
            parse("FOO(1)")
        with pytest.raises(InvalidFunctionName):
            parse("SUM(1, FOO(2))")
        # Still a parse error for callers catching the base class
        with pytest.raises(ParseError):
            parse("AVERAGE(1, 2)")

    def test_malformed_calls(self):
        for formula in ["SUM(1,2", "SUM(1 2)", "SUM(1,)", "SUM(,1)"]:
            with pytest.raises(InvalidExpression):
                parse(formula)

    def test_grid_is_not_consulted(self):
        assert parse("A1+1", [[None]]) == parse("A1+1")
