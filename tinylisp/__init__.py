from .core.evaluator import evaluate
from .core.environment import Environment
from .core.lexical import Token, TokenKind, tokenize
from .core.parser import parse, parse_expr
from .core.value import Bool, Num, Value
from .lang.error import (
    ArityError,
    InternalError,
    LexError,
    LispError,
    MathError,
    NoMatchingCaseError,
    ParseError,
    TypeMismatchError,
    UnboundNameError,
)
from .lang.session import Session, run_program, run_snippet

__all__ = [
    "evaluate", "Environment",
    "Token", "TokenKind", "tokenize",
    "parse", "parse_expr",
    "Bool", "Num", "Value",
    "LispError", "LexError", "ParseError", "ArityError", "UnboundNameError", "MathError", "TypeMismatchError",
    "NoMatchingCaseError", "InternalError",
    "Session", "run_program", "run_snippet",
]
