"""Errors raised by the calculator pipeline.

Every stage raises a subclass of `CalcError`; `calculate` turns the first one
into an ``"Error: ..."`` string. The rendered message is what the user sees, so
numeric arguments are passed in already formatted.
"""


class CalcError(Exception):
    message = "calculation failed"

    def __str__(self):
        return self.message.format(*self.args)


class LexError(CalcError):
    pass


class ExprSyntaxError(CalcError):
    pass


class EvalError(CalcError):
    pass


class InvalidCharacter(LexError):
    message = "invalid character: {}"


class UnknownIdentifier(LexError):
    message = "unknown identifier or function: {}"


class InvalidNumberLiteral(LexError):
    message = "invalid number: {}"


class MisplacedComma(ExprSyntaxError):
    message = "misplaced comma outside function arguments"


class MismatchedParentheses(ExprSyntaxError):
    message = "mismatched parentheses"


class InsufficientOperands(EvalError):
    message = "not enough operands for {}"


class InsufficientArguments(EvalError):
    message = "not enough arguments for function {} (expected {}, got {})"


class DivisionByZero(EvalError):
    message = "division by zero"


class ModuloByZero(EvalError):
    message = "mod: division by zero ({} % {})"


class NegativeSqrtArgument(EvalError):
    message = "sqrt: cannot take square root of negative number ({})"


class MalformedExpression(EvalError):
    message = "invalid expression (final stack size {}, expected 1)"


class InvalidNumberInPostfix(EvalError):
    message = "invalid number in postfix: {}"


class NumericOverflow(EvalError):
    message = "numeric overflow in {}"
