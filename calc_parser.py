"""Glyph normalization, lexing and infix-to-postfix conversion.

    >>> " ".join(tok.text for tok in parse("√9 + 2*3²"))
    '9 sqrt 2 3 pow2 * +'
"""
import re
import math
import logging
import operator
import string
from enum import Enum
from types import MappingProxyType
from typing import Callable, NamedTuple, Optional

import numpy as np

from calc_errors import (
    DivisionByZero,
    InvalidCharacter,
    InvalidNumberLiteral,
    MismatchedParentheses,
    MisplacedComma,
    ModuloByZero,
    NegativeSqrtArgument,
    NumericOverflow,
    UnknownIdentifier,
)

logger = logging.getLogger(__name__)

DIGITS = frozenset(string.digits)
LETTERS = frozenset(string.ascii_letters)
DECIMAL_RE = re.compile(r"[0-9]*\.?[0-9]*")


def format_number(num):
    """Shortest positional decimal that reads back as `num`; never ``-0``."""
    return np.format_float_positional(num if num != 0 else 0.0, trim="-")


def is_decimal(word):
    # Plain decimals only: "1e5", "inf" and "nan" are not numbers here.
    return bool(DECIMAL_RE.fullmatch(word)) and not DIGITS.isdisjoint(word)


class Op(NamedTuple):
    name: str
    prec: int  # only meaningful for binary operators
    arity: int
    fun: Callable

    def __call__(self, *args):
        ans = self.fun(*args)
        if not math.isfinite(ans):
            raise NumericOverflow(self.name)
        return ans

    def __repr__(self):
        return f"op({self.name!r:})"

    def left_first(self, other):
        return self.prec >= other.prec


def _div(a, b):
    if b == 0:
        raise DivisionByZero()
    return a / b


def _sqrt(x):
    if x < 0:
        raise NegativeSqrtArgument(format_number(x))
    return math.sqrt(x)


def _mod(x, y):
    if y == 0:
        raise ModuloByZero(format_number(x), format_number(y))
    return math.fmod(x, y)


OP_GROUPS = """
add+ sub-
mul* truediv/
""".strip()
OPS = MappingProxyType(
    {
        o: Op(o, prec, 2, _div if fun == "truediv" else getattr(operator, fun))
        for prec, op_groups in enumerate(OP_GROUPS.split("\n"), 1)
        for [(fun, o)] in map(re.compile(r"^(\w+)(\W)$").findall, op_groups.split())
    }
)
FUNCTIONS = MappingProxyType(
    {
        "sqrt": Op("sqrt", 0, 1, _sqrt),
        "PI": Op("PI", 0, 0, lambda: math.pi),
        "pow2": Op("pow2", 0, 1, lambda x: x * x),
        "mod": Op("mod", 0, 2, _mod),
    }
)
NAME_LEN = max(map(len, FUNCTIONS))


class Kind(Enum):
    NUMBER = "number"
    OPERATOR = "operator"
    LPAREN = "("
    RPAREN = ")"
    FUNCTION = "function"
    COMMA = ","


PUNCTUATION = {"(": Kind.LPAREN, ")": Kind.RPAREN, ",": Kind.COMMA}
UNARY_CONTEXT = {Kind.OPERATOR, Kind.LPAREN, Kind.COMMA}


class Token(NamedTuple):
    kind: Kind
    text: str
    op: Optional[Op] = None

    @property
    def precedence(self):
        return self.op.prec if self.kind is Kind.OPERATOR else 0

    @property
    def arity(self):
        return self.op.arity if self.kind is Kind.FUNCTION else 0


def _literal_end(s, i):
    # Digits with at most one ".", and at least one digit.
    j, dots = i, 0
    while j < len(s) and (s[j] in DIGITS or s[j] == "." and not dots):
        dots += s[j] == "."
        j += 1
    return j if not DIGITS.isdisjoint(s[i:j]) else i


def _base_start(out, end):
    """Start of the operand that ``²`` squares, or `end` if there is none."""
    if end and out[end - 1] == ")":
        i = end - 1
        while i > 0 and out[i - 1] not in "()":
            i -= 1
        return i - 1 if i > 0 and out[i - 1] == "(" and i < end - 1 else end
    i, dots = end, 0
    while i > 0 and (out[i - 1] in DIGITS or out[i - 1] == "." and not dots):
        dots += out[i - 1] == "."
        i -= 1
    return i if not DIGITS.isdisjoint(out[i:end]) else end


def normalize(text):
    """Rewrite the ``π``, ``√`` and ``²`` glyphs as function calls.

    ``√(`` opens a root whose argument ends at the first ``)`` written after
    it; nested parentheses inside a root are not tracked, so ``√(1+(2)*3)``
    becomes ``sqrt((1+(2))*3)``. A root whose ``(`` is never closed is left
    as typed, as is any glyph without a usable operand.
    """
    out = []
    pending = []  # (position of "sqrt((" in out, spaces typed after the "√")

    def emit(chunk):
        out.extend(chunk)
        if ")" in chunk and pending:
            out.extend(")" * len(pending))
            pending.clear()

    i = 0
    while i < len(text):
        c = text[i]
        i += 1
        if c == "π":
            emit("PI()")
        elif c == "√":
            j = i
            while j < len(text) and text[j] == " ":
                j += 1
            if (k := _literal_end(text, j)) > j:
                emit(f"sqrt({text[j:k]})")
                i = k
            elif j < len(text) and text[j] == "(":
                pending.append((len(out), text[i:j]))
                emit("sqrt((")
                i = j + 1
            else:
                emit(c)
        elif c == "²":
            end = len(out)
            while end and out[end - 1] == " ":
                end -= 1
            if (start := _base_start(out, end)) < end:
                base = "".join(out[start:end])
                del out[start:]
                emit(f"pow2({base})")
            else:
                emit(c)
        else:
            emit(c)

    # Unclosed roots go back to how they were typed.
    pieces, prev = [], 0
    for at, spaces in pending:
        pieces += out[prev:at]
        pieces.append(f"√{spaces}(")
        prev = at + len("sqrt((")
    return "".join(pieces + out[prev:])


def _word_token(word):
    if word.count(".") > 1:
        raise InvalidNumberLiteral(word)
    if is_decimal(word):
        return Token(Kind.NUMBER, word)
    if DIGITS.union(".").issuperset(word):
        raise InvalidNumberLiteral(word)
    raise UnknownIdentifier(word)


def lex(text):
    tokens = []
    buf = []
    for c in text:
        if c in DIGITS or c in LETTERS or c == ".":
            buf.append(c)
            if len(buf) <= NAME_LEN and (word := "".join(buf)) in FUNCTIONS:
                tokens.append(Token(Kind.FUNCTION, word, FUNCTIONS[word]))
                buf.clear()
            continue
        if buf:
            tokens.append(_word_token("".join(buf)))
            buf.clear()
        if o := OPS.get(c):
            if c == "-" and (not tokens or tokens[-1].kind in UNARY_CONTEXT):
                tokens.append(Token(Kind.NUMBER, "0"))
            tokens.append(Token(Kind.OPERATOR, c, o))
        elif kind := PUNCTUATION.get(c):
            tokens.append(Token(kind, c))
        elif c != " ":
            raise InvalidCharacter(c)
    if buf:
        tokens.append(_word_token("".join(buf)))
    return tokens


def _pops_before(top, tok):
    return top.kind is Kind.FUNCTION or (
        top.kind is Kind.OPERATOR and top.op.left_first(tok.op)
    )


def to_postfix(tokens):
    output = []
    stack = []
    for tok in tokens:
        if tok.kind is Kind.NUMBER:
            output.append(tok)
        elif tok.kind in (Kind.FUNCTION, Kind.LPAREN):
            stack.append(tok)
        elif tok.kind is Kind.OPERATOR:
            while stack and _pops_before(stack[-1], tok):
                output.append(stack.pop())
            stack.append(tok)
        elif tok.kind is Kind.COMMA:
            while stack and stack[-1].kind is not Kind.LPAREN:
                output.append(stack.pop())
            if not stack:
                raise MisplacedComma()
        else:
            while stack and stack[-1].kind is not Kind.LPAREN:
                output.append(stack.pop())
            if not stack:
                raise MismatchedParentheses()
            stack.pop()
            if stack and stack[-1].kind is Kind.FUNCTION:
                output.append(stack.pop())
    while stack:
        if (tok := stack.pop()).kind in (Kind.LPAREN, Kind.COMMA):
            raise MismatchedParentheses()
        output.append(tok)
    return output


def parse(text):
    normalized = normalize(text)
    tokens = lex(normalized)
    logger.debug("normalized %r to %r: %s", text, normalized, tokens)
    postfix = to_postfix(tokens)
    logger.debug("postfix: %s", " ".join(tok.text for tok in postfix))
    return postfix
