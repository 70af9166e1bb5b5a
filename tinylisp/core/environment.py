"""Evaluation environment: variable bindings plus the function table.

Scoping is dynamic. Each variable name maps to a stack of values; a call pushes one value per parameter and pops it on
the way out, so a name always resolves to the most recent binding still live at the time it is looked up, regardless of
where the function using it was defined.
"""

import logging
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import dataclass
from types import MappingProxyType
from typing import Tuple

from tinylisp.core.tree import Expr, Function
from tinylisp.lang.error import ParseError, UnboundNameError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FunctionInfo:
    params: Tuple[str, ...]
    body: Expr


class Environment:
    """Governs the variables and functions visible to an evaluation."""

    def __init__(self, functions=None):
        self.variables = defaultdict(list)  # name: stack of Values, top is the most recent binding
        self._functions = dict(functions or {})

    @property
    def functions(self):
        """Read-only view of the function table."""
        return MappingProxyType(self._functions)

    def define(self, function):
        """Registers Function node function in the function table. Functions cannot be redefined."""
        if not isinstance(function, Function):
            raise ParseError("expected a function definition, got '{}'", str(function))
        if function.name in self._functions:
            raise ParseError("function '{}' is already defined", function.name)

        self._functions[function.name] = FunctionInfo(function.params, function.body)
        logger.debug("Defined function %s%s", function.name, function.params)

    def function(self, name):
        """Returns the FunctionInfo registered as name."""
        try:
            return self._functions[name]
        except KeyError:
            raise UnboundNameError("undefined function '{}'", name) from None

    def lookup(self, name):
        """Returns the most recent binding of variable name."""
        stack = self.variables.get(name)
        if not stack:
            raise UnboundNameError("unbound variable '{}'", name)
        return stack[-1]

    def push(self, name, value):
        self.variables[name].append(value)

    def pop(self, name):
        stack = self.variables[name]
        value = stack.pop()
        if not stack:
            del self.variables[name]
        return value

    @contextmanager
    def bind(self, names, values):
        """Pushes values onto names for the duration of the with block. The bindings are popped (in reverse order) on
        every way out of the block, including errors.
        """
        pushed = []
        try:
            for name, value in zip(names, values):
                self.push(name, value)
                pushed.append(name)
            yield self
        finally:
            for name in reversed(pushed):
                self.pop(name)

    def depth(self, name):
        """Returns the number of live bindings of name."""
        return len(self.variables.get(name, ()))

    def __repr__(self):
        return f"Environment(variables={dict(self.variables)}, functions={list(self._functions)})"
