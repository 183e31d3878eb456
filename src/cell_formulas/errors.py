class FormulaError(Exception):
    """Base class for all formula errors."""


class ParseError(FormulaError):
    """A formula could not be parsed. Always propagated to the caller."""


class TokenizerError(ParseError):
    pass


class InvalidExpression(ParseError):
    pass


class InvalidFunctionName(ParseError):
    """Unknown function name, raised by the parser and by the evaluator."""


class EvaluationFault(FormulaError):
    """Raised while evaluating a node. Converted to NaN at the node boundary."""


class InvalidArity(EvaluationFault):
    pass


class TypeMismatch(EvaluationFault):
    pass
