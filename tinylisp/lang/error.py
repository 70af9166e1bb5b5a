"""Error handling for tinylisp. Every failure in the language is one of the LispError subclasses below: if another type
of error makes it all the way to ErrorHandler, it is assumed to be an internal issue.

All errors are fatal to the evaluation that raised them. There is no recovery or partial result, the first error simply
propagates to whoever called tokenize/parse/evaluate.
"""

import sys

from termcolor import colored


class LispError(Exception):
    """Templates an error message so that it can be rendered with the offending snippet highlighted. msg is a format
    string, exprs are the snippets (token text, names) substituted into it. If source/start/end are given, they locate
    the offending snippet within the source text for diagnosis.
    """
    kind = "error"

    def __init__(self, msg, exprs=None, source=None, start=None, end=None, internal=False):
        if exprs is None:
            exprs = []
        if not isinstance(exprs, (list, tuple)):
            exprs = [exprs]

        self.template = msg
        self.exprs = [str(expr) for expr in exprs]
        self.msg = msg.format(*self.exprs)
        self.expr = self.exprs[0] if self.exprs else ""  # exprs[0] should be the offending token/name

        self.source = source
        self.start = start
        self.end = end if end is not None or start is None else start + max(len(self.expr), 1)
        self.internal = internal

        super().__init__(self.msg)

    def locate(self, source, start, end=None):
        """Attaches a source location to this error if it doesn't already have one. Returns self."""
        if self.source is None and start is not None:
            self.source = source
            self.start = start
            self.end = end if end is not None else start + max(len(self.expr), 1)
        return self

    def render(self):
        """Returns msg with the offending snippets in bold."""
        return self.template.format(*(colored(expr, attrs=["bold"]) for expr in self.exprs))


class LexError(LispError):
    """Illegal character in source text."""
    kind = "lex error"


class ParseError(LispError):
    """Unexpected token, trailing tokens, empty cond body, unknown operator token, malformed program."""
    kind = "parse error"


class ArityError(LispError):
    """Function called with the wrong number of arguments."""
    kind = "arity error"


class UnboundNameError(LispError):
    """Unknown variable or function."""
    kind = "unbound name"


class MathError(LispError):
    """Division/modulo by zero, or a result outside of the 32-bit signed range."""
    kind = "arithmetic error"


class TypeMismatchError(LispError):
    """A number where a boolean was expected, or vice versa."""
    kind = "type error"


class NoMatchingCaseError(LispError):
    """A cond ran out of cases without any condition evaluating to true."""
    kind = "no matching case"


class InternalError(LispError):
    """Interpreter reached a state that a well-formed pipeline never produces (ex: evaluating a function definition)."""
    kind = "internal error"

    def __init__(self, *args, **kwargs):
        kwargs.setdefault("internal", True)
        super().__init__(*args, **kwargs)


class ErrorHandler:
    """Context manager that will catch errors raised while running tinylisp code and report them. In fatal mode, an
    error ends the process with exit status 1; otherwise it is reported and swallowed (used by the shell).
    """
    ERROR = "red"

    def __init__(self, fatal=True, path="<in>", stream=None):
        self.fatal = fatal
        self.path = path
        self.stream = stream

    @staticmethod
    def position(source, start):
        """Returns (line, line_num, col) of character offset start within source. line_num and col are 1-indexed."""
        line_start = source.rfind("\n", 0, start) + 1
        line_end = source.find("\n", start)
        if line_end == -1:
            line_end = len(source)
        return source[line_start:line_end], source.count("\n", 0, start) + 1, start - line_start + 1

    @staticmethod
    def diagnose(error):
        """Returns the source line containing error highlighted and underlined."""
        line, __, col = ErrorHandler.position(error.source, error.start)
        start = col - 1
        end = min(max(error.end - error.start, 1) + start, max(len(line), start + 1))

        diagnosis = "  " + line[:start]
        diagnosis += colored(line[start:end], ErrorHandler.ERROR, attrs=["bold"])
        diagnosis += line[end:] + "\n"

        diagnosis += "  " + " " * start
        diagnosis += colored("^" + "~" * (end - start - 1), ErrorHandler.ERROR, attrs=["bold"])

        return diagnosis

    def throw(self, error):
        """Reports error, which must be a LispError. Exits if this handler is fatal."""
        error_msg = ""
        located = error.source is not None and error.start is not None

        if located:
            __, line_num, col = ErrorHandler.position(error.source, error.start)
            error_msg += colored(f"{self.path}:{line_num}:{col}: ", attrs=["bold"])
        if error.internal:
            error_msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])

        error_msg += colored(f"{error.kind}: ", ErrorHandler.ERROR, attrs=["bold"]) + error.render()
        print(error_msg, file=self.stream or sys.stderr)

        if located and not error.internal:
            print(ErrorHandler.diagnose(error), file=self.stream or sys.stderr)

        if self.fatal:
            sys.exit(1)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(LispError("keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(LispError("maximum recursion depth exceeded"))
        elif exc_type is not None and issubclass(exc_type, LispError):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(LispError("unknown error: '{}'", f"{exc_type.__name__}: {exc_val}", internal=True))
            do_exit = True

        return not do_exit
