"""Tree-walking evaluator for tinylisp.

Evaluation is strict and depth-first: every operand is evaluated (booleans don't short-circuit), left to right, before
its operator is applied. Function calls bind their parameters in the caller's Environment for the duration of the call,
which makes scoping dynamic. Recursion is bounded only by Python's recursion limit.
"""

import logging

from tinylisp.core.tree import BinaryBool, BinaryNum, BoolLiteral, CmpBool, Cond, Function, FunctionCall, NumLiteral, \
    UnaryBool, Variable
from tinylisp.core.value import Bool, Num
from tinylisp.lang.error import ArityError, InternalError, NoMatchingCaseError, TypeMismatchError

logger = logging.getLogger(__name__)


def evaluate(expr, env):
    """Returns the Value of Expr expr in Environment env."""
    if isinstance(expr, NumLiteral):
        return Num(expr.value)
    if isinstance(expr, BoolLiteral):
        return Bool(expr.value)

    if isinstance(expr, BinaryNum):
        left = evaluate_num(expr.left, env, expr)
        right = evaluate_num(expr.right, env, expr)
        return Num(expr.op.apply(left, right))

    if isinstance(expr, BinaryBool):
        left = evaluate_bool(expr.left, env, expr)
        right = evaluate_bool(expr.right, env, expr)
        return Bool(expr.op.apply(left, right))

    if isinstance(expr, UnaryBool):
        return Bool(expr.op.apply(evaluate_bool(expr.value, env, expr)))

    if isinstance(expr, CmpBool):
        left = evaluate_num(expr.left, env, expr)
        right = evaluate_num(expr.right, env, expr)
        return Bool(expr.op.apply(left, right))

    if isinstance(expr, Cond):
        return evaluate_cond(expr, env)

    if isinstance(expr, Variable):
        return env.lookup(expr.name)

    if isinstance(expr, FunctionCall):
        return evaluate_call(expr, env)

    if isinstance(expr, Function):
        raise InternalError("function definition '{}' reached the evaluator", expr.name)

    raise InternalError("cannot evaluate '{}'", repr(expr))


def evaluate_num(expr, env, parent):
    """Evaluates expr in a number position of parent, returning a python int."""
    value = evaluate(expr, env)
    if not isinstance(value, Num):
        raise TypeMismatchError("expected a number, got '{}' in '{}'", [value, parent])
    return value.value


def evaluate_bool(expr, env, parent):
    """Evaluates expr in a boolean position of parent, returning a python bool."""
    value = evaluate(expr, env)
    if not isinstance(value, Bool):
        raise TypeMismatchError("expected a boolean, got '{}' in '{}'", [value, parent])
    return value.value


def evaluate_cond(cond, env):
    """Returns the result of the first case of cond whose condition is true."""
    for case in cond.cases:
        if evaluate_bool(case.condition, env, case):
            return evaluate(case.result, env)
    raise NoMatchingCaseError("no case of '{}' matched", str(cond))


def evaluate_call(call, env):
    """Evaluates call's arguments in env, then its body with the parameters bound to them."""
    args = [evaluate(arg, env) for arg in call.args]

    info = env.function(call.name)
    if len(args) != len(info.params):
        raise ArityError("'{}' takes {} argument(s) but {} were given", [call.name, len(info.params), len(args)])

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("Calling %s(%s)", call.name, ", ".join(f"{param}={arg}" for param, arg in zip(info.params, args)))

    with env.bind(info.params, args):
        return evaluate(info.body, env)
