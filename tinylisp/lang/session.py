"""Session control for tinylisp. A Session owns a function table and drives programs through it, either from a file,
from a source string, or one line at a time from the shell.

Running a program takes two passes:
    1. Every top-level form is parsed and must be a function definition. Each one is registered in the function table.
    2. The literal program "(main)" is parsed and evaluated against that table. Its value is the program's result.

Comments (";" to the end of the line) are handled here: there is no comment token in the lexer.
"""

import logging

from tinylisp.core.environment import Environment
from tinylisp.core.evaluator import evaluate
from tinylisp.core.lexical import TokenCursor, TokenKind, tokenize
from tinylisp.core.parser import parse, parse_expr
from tinylisp.core.tree import Function, display
from tinylisp.lang.error import LispError, ParseError

logger = logging.getLogger(__name__)


class Session:
    """Governs a tinylisp session, with control over the functions defined in it."""
    SH_FILE = "<in>"      # command-line interpreter filename
    ENTRY = "main"        # name of the function a program starts at
    COMMENT = ";"

    def __init__(self, path=SH_FILE):
        self.path = path  # used for error messages
        self.env = Environment()

    @classmethod
    def from_file(cls, path):
        """Returns a Session with every function defined in the file at path loaded."""
        try:
            with open(path, "r") as file:
                source = file.read()
        except OSError:
            raise LispError("'{}' could not be opened", path) from None

        return cls(path).load(source)

    @staticmethod
    def preprocess(source):
        """Blanks out comments in source. Character offsets are preserved so that error positions stay correct."""
        lines = []
        for line in source.split("\n"):
            if Session.COMMENT in line:
                idx = line.index(Session.COMMENT)
                line = line[:idx] + " " * (len(line) - idx)
            lines.append(line)
        return "\n".join(lines)

    @staticmethod
    def preprocess_line(line):
        """Preprocesses a line from the shell. Returns the line and whether its delimiters are left open, in which case
        the next line should be appended to it before it is run.
        """
        line = Session.preprocess(line).rstrip()
        try:
            tokens = tokenize(line)
        except LispError:
            return line, False  # let the error surface when the line is run

        depth = 0
        for token in tokens:
            if token.kind is TokenKind.OPEN:
                depth += 1
            elif token.kind is TokenKind.CLOSE:
                depth -= 1
        return line, depth > 0

    def _cursor(self, source):
        cursor = TokenCursor(tokenize(source), source)
        logger.debug("Tokens: %s", cursor.tokens)
        return cursor

    def _define(self, function, source, start):
        try:
            self.env.define(function)
        except LispError as err:
            raise err.locate(source, start.pos)

    def load(self, source):
        """Registers every function defined in source. Every top-level form must be a function definition. Returns
        self so that calls can be chained.
        """
        source = Session.preprocess(source)
        cursor = self._cursor(source)

        while not cursor.at_end():
            start = cursor.peek()
            expr = parse_expr(cursor)
            if not isinstance(expr, Function):
                raise cursor.error("cannot parse functions, '{}' is not a function definition", str(expr), start)
            self._define(expr, source, start)

        return self

    def check_entry(self):
        """Raises ParseError unless a zero-argument main function is defined."""
        info = self.env.functions.get(Session.ENTRY)
        if info is None:
            raise ParseError("no '{}' function defined", Session.ENTRY)
        if info.params:
            raise ParseError("'{}' must take no arguments, but takes {}", [Session.ENTRY, len(info.params)])

    def run(self):
        """Runs the loaded program by evaluating (main). Returns its Value."""
        self.check_entry()
        return self.evaluate(f"({Session.ENTRY})")

    def evaluate(self, source):
        """Returns the Value of the single expression in source, evaluated against this session's functions."""
        expr = parse(source)
        logger.debug("AST:\n%s", display(expr))
        return evaluate(expr, self.env)

    def execute(self, source):
        """Runs every top-level form in source: function definitions are registered, other expressions are evaluated.
        Returns the list of Values produced, in order.
        """
        source = Session.preprocess(source)
        cursor = self._cursor(source)

        results = []
        while not cursor.at_end():
            start = cursor.peek()
            expr = parse_expr(cursor)
            if isinstance(expr, Function):
                self._define(expr, source, start)
            else:
                logger.debug("AST:\n%s", display(expr))
                results.append(evaluate(expr, self.env))
        return results


def run_program(source):
    """Loads every function in source and returns the Value of (main)."""
    return Session().load(source).run()


def run_snippet(source):
    """Returns the Value of the single free-standing expression in source, evaluated in an empty environment."""
    return evaluate(parse(source), Environment())
