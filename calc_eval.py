"""Stack evaluation of postfix token sequences.

The public entry point is `calculate`, which maps an expression string to the
text shown to the user:

>>> calculate("(2+3)*4")
'20'
>>> calculate("mod(5,0)")
'Error: mod: division by zero (5 % 0)'
>>> calculate("   ")
''
"""
import math
import logging

from calc_errors import (
    CalcError,
    InsufficientArguments,
    InsufficientOperands,
    InvalidNumberInPostfix,
    MalformedExpression,
    NumericOverflow,
)
from calc_parser import Kind, format_number, is_decimal, parse

logger = logging.getLogger(__name__)


def _number(text):
    if not is_decimal(text):
        raise InvalidNumberInPostfix(text)
    if not math.isfinite(num := float(text)):
        raise NumericOverflow(text)
    return num


def evaluate_postfix(postfix):
    stack = []
    for tok in postfix:
        if tok.kind is Kind.NUMBER:
            stack.append(_number(tok.text))
            continue
        if tok.kind is Kind.OPERATOR:
            if len(stack) < 2:
                raise InsufficientOperands(tok.text)
            n = 2
        elif tok.kind is Kind.FUNCTION:
            if len(stack) < tok.arity:
                raise InsufficientArguments(tok.text, tok.arity, len(stack))
            n = tok.arity
        else:
            raise ValueError(f"{tok.text!r} cannot appear in postfix order")
        split = len(stack) - n
        stack[split:] = [tok.op(*stack[split:])]
    if len(stack) != 1:
        raise MalformedExpression(len(stack))
    (ans,) = stack
    return ans


def evaluate(expression):
    """Evaluate `expression`, raising a `CalcError` subclass on failure."""
    return evaluate_postfix(parse(expression))


def calculate(expression):
    if not expression.strip():
        return ""
    try:
        ans = evaluate(expression)
    except CalcError as e:
        logger.debug("%r failed: %s", expression, e)
        return f"Error: {e}"
    logger.debug("%r = %r", expression, ans)
    return format_number(ans)
