"""Integer semantics for tinylisp. Numbers are 32-bit signed integers, both as literals and as results of arithmetic:
anything that would leave that range is an error rather than silently wrapping or growing.

Division truncates toward zero and the remainder takes the sign of the dividend, so that (a / b) * b + (a % b) == a
holds for every pair of operands where both are defined. Note that this is not what Python's // and % do for negative
operands.
"""

from tinylisp.lang.error import MathError

BITS = 32
INT_MIN = -(2 ** (BITS - 1))
INT_MAX = 2 ** (BITS - 1) - 1


def in_range(num):
    """Returns whether num fits in a 32-bit signed integer."""
    return INT_MIN <= num <= INT_MAX


def checked(num, expr=""):
    """Returns num if it is in range, otherwise raises a MathError mentioning expr."""
    if not in_range(num):
        raise MathError("integer overflow in '{}'", expr or str(num))
    return num


def add(left, right):
    return checked(left + right, f"(+ {left} {right})")


def sub(left, right):
    return checked(left - right, f"(- {left} {right})")


def mul(left, right):
    return checked(left * right, f"(* {left} {right})")


def div(left, right):
    """Integer division truncating toward zero."""
    if right == 0:
        raise MathError("division by zero in '{}'", f"(/ {left} {right})")

    quotient = abs(left) // abs(right)
    if (left < 0) != (right < 0):
        quotient = -quotient
    return checked(quotient, f"(/ {left} {right})")


def mod(left, right):
    """Remainder of div, with the sign of left."""
    if right == 0:
        raise MathError("modulo by zero in '{}'", f"(% {left} {right})")

    if (left, right) == (INT_MIN, -1):
        raise MathError("integer overflow in '{}'", f"(% {left} {right})")  # as for div, the quotient doesn't fit

    remainder = abs(left) % abs(right)
    return -remainder if left < 0 else remainder
