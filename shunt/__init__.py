import dataclasses
import logging
import math
import operator as op
import re
from collections import deque
from collections.abc import Callable, Iterable, Mapping
from types import MappingProxyType

import numpy as np

__all__ = [
    "ExpressionError",
    "UnbalancedParentheses",
    "StackUnderflow",
    "LeftoverOperands",
    "EmptyExpression",
    "InvalidToken",
    "Operator",
    "OPERATORS",
    "tokenize",
    "to_postfix",
    "evaluate",
    "compute",
    "is_operator",
    "is_number",
    "format_number",
]

logger = logging.getLogger(__name__)

NUMBER = re.compile(
    r"""
    [0-9]+(\.[0-9]*)?  # integer or decimal  (12, 3.5, 7.)
    |\.[0-9]+          # leading dot         (.5)
    """,
    re.VERBOSE,
)
SEPARATORS = re.compile(r"([-+*/^()])")
LPAREN = "("
RPAREN = ")"


class ExpressionError(ValueError):
    pass


class UnbalancedParentheses(ExpressionError):
    pass


class StackUnderflow(ExpressionError):
    pass


class LeftoverOperands(ExpressionError):
    pass


class EmptyExpression(ExpressionError):
    pass


class InvalidToken(ExpressionError):
    def __init__(self, token: str, where: str = "") -> None:
        self.token = token
        msg = f"Invalid token ({token!r})"
        super().__init__(f"{msg} in {where}" if where else msg)


@dataclasses.dataclass(frozen=True)
class Operator:
    symbol: str
    precedence: int
    fn: Callable[[np.float64, np.float64], np.float64]

    def dispatch(self, stack: deque[np.float64]) -> None:
        if len(stack) < 2:
            raise StackUnderflow(
                f"Operator {self.symbol!r} needs 2 operands, "
                f"stack has {len(stack)}"
            )
        rhs = stack.pop()
        lhs = stack.pop()
        stack.append(self.fn(lhs, rhs))


# All operators are left-associative, ^ included: 2^3^2 == (2^3)^2
OPERATORS: Mapping[str, Operator] = MappingProxyType(
    {
        "+": Operator("+", 1, op.add),
        "-": Operator("-", 1, op.sub),
        "*": Operator("*", 2, op.mul),
        "/": Operator("/", 2, op.truediv),
        "^": Operator("^", 3, np.power),
    }
)


def is_operator(token: str, operators: Mapping[str, Operator] = OPERATORS) -> bool:
    return token in operators


def is_number(token: str) -> bool:
    return NUMBER.fullmatch(token) is not None


def tokenize(text: str) -> list[str]:
    """Split an infix expression into numbers, operators and parentheses.

    Nothing is validated here: ``tokenize("1 + x")`` gives ``["1", "+", "x"]``
    and the bad token is rejected later by :func:`to_postfix`.
    """
    return SEPARATORS.sub(r" \1 ", text).split()


def to_postfix(
    tokens: Iterable[str], operators: Mapping[str, Operator] = OPERATORS
) -> list[str]:
    """Reorder infix tokens into postfix order (Shunting Yard)."""
    stack: list[str] = []
    output: list[str] = []

    for token in tokens:
        if is_number(token):
            output.append(token)
        elif token == LPAREN:
            stack.append(token)
        elif token == RPAREN:
            while True:
                if not stack:
                    raise UnbalancedParentheses(f"Unmatched {RPAREN!r}")
                top = stack.pop()
                if top == LPAREN:
                    break
                output.append(top)
        elif token in operators:
            precedence = operators[token].precedence
            while (
                stack
                and stack[-1] != LPAREN
                and operators[stack[-1]].precedence >= precedence
            ):
                output.append(stack.pop())
            stack.append(token)
        else:
            raise InvalidToken(token, "infix expression")

    while stack:
        top = stack.pop()
        if top == LPAREN:
            raise UnbalancedParentheses(f"Unmatched {LPAREN!r}")
        output.append(top)

    logger.debug("postfix: %s", " ".join(output))
    return output


def evaluate(
    tokens: Iterable[str], operators: Mapping[str, Operator] = OPERATORS
) -> float:
    """Run a postfix token sequence on a stack machine.

    Arithmetic is IEEE 754 double precision: ``1 / 0`` is ``inf`` and
    ``0 / 0`` is ``nan`` rather than an error.
    """
    stack: deque[np.float64] = deque()

    with np.errstate(all="ignore"):
        for token in tokens:
            if is_number(token):
                stack.append(np.float64(token))
            elif token in operators:
                operators[token].dispatch(stack)
            else:
                raise InvalidToken(token, "postfix expression")

    if not stack:
        raise EmptyExpression("Nothing to evaluate")
    if len(stack) > 1:
        raise LeftoverOperands(
            f"{len(stack)} values left on the stack, expected 1"
        )

    result = float(stack.pop())
    logger.debug("result: %r", result)
    return result


def compute(expression: str) -> float:
    return evaluate(to_postfix(tokenize(expression)))


def format_number(num: float) -> str:
    if math.isnan(num):
        return "nan"
    if math.isinf(num):
        return "inf" if num > 0 else "-inf"
    if num.is_integer():
        return str(int(num))
    return repr(num)
