"""Lexical analysis for tinylisp: turns source text into a list of Tokens, and provides the TokenCursor the parser walks
over them with.

Tokens can be loosely defined as follows:

```
<number>     ::= [0-9]+                        ; sign is handled by the parser, not the lexer
<word>       ::= [a-zA-Z_] [a-zA-Z0-9_?!:-]*   ; "true"/"false" are booleans, keywords are their own kinds, otherwise
                                               ; an identifier
<delimiter>  ::= "(" | "[" | ")" | "]"         ; "(" and "[" are both OPEN, ")" and "]" are both CLOSE
<operator>   ::= "+" | "-" | "/" | "*" | "%" | "&" | "|" | "!" | "<" | "=" | ">"
```

Whitespace between tokens is skipped, and any other character is a LexError. Tokenization is eager: the parser needs to
look two tokens ahead, so the whole list is built up front.
"""

from dataclasses import dataclass, field
from enum import Enum

from tinylisp.lang.error import LexError, ParseError


class TokenKind(Enum):
    NUMBER = "number"
    BOOLEAN = "boolean"

    # keywords
    COND = "cond"
    DEFINE = "define"
    LIST = "list"
    CONS = "cons"
    EMPTY = "empty"
    CAR = "car"
    CDR = "cdr"
    EMPTY_HUH = "empty?"
    LIST_HUH = "list?"

    IDENTIFIER = "identifier"

    OPEN = "("
    CLOSE = ")"

    PLUS = "+"
    MINUS = "-"
    SLASH = "/"
    STAR = "*"
    PERCENT = "%"

    AMPERSAND = "&"
    PIPE = "|"
    BANG = "!"

    LESS_THAN = "<"
    EQUAL = "="
    GREATER_THAN = ">"


KEYWORDS = {
    "true": TokenKind.BOOLEAN,
    "false": TokenKind.BOOLEAN,
    "cond": TokenKind.COND,
    "define": TokenKind.DEFINE,
    "list": TokenKind.LIST,
    "cons": TokenKind.CONS,
    "empty": TokenKind.EMPTY,
    "car": TokenKind.CAR,
    "cdr": TokenKind.CDR,
    "empty?": TokenKind.EMPTY_HUH,
    "list?": TokenKind.LIST_HUH,
}

PUNCTUATION = {
    "(": TokenKind.OPEN,
    "[": TokenKind.OPEN,
    ")": TokenKind.CLOSE,
    "]": TokenKind.CLOSE,
    "+": TokenKind.PLUS,
    "-": TokenKind.MINUS,
    "/": TokenKind.SLASH,
    "*": TokenKind.STAR,
    "%": TokenKind.PERCENT,
    "&": TokenKind.AMPERSAND,
    "|": TokenKind.PIPE,
    "!": TokenKind.BANG,
    "<": TokenKind.LESS_THAN,
    "=": TokenKind.EQUAL,
    ">": TokenKind.GREATER_THAN,
}

WORD_CHARS = "?!-:_"


@dataclass(frozen=True)
class Token:
    """A classified lexical unit. pos is the character offset in the source, only used for error messages, so two
    tokens with the same kind and text are equal wherever they came from.
    """
    kind: TokenKind
    text: str
    pos: int = field(default=0, compare=False)

    def __str__(self):
        return self.text


def is_word_start(char):
    return char.isascii() and (char.isalpha() or char == "_")


def is_word_char(char):
    return char.isascii() and (char.isalnum() or char in WORD_CHARS)


def tokenize(source):
    """Returns the list of Tokens in source. Raises LexError on the first illegal character."""
    tokens = []
    idx = 0

    while idx < len(source):
        char = source[idx]

        if char.isspace():
            idx += 1

        elif char.isascii() and char.isdigit():
            start = idx
            while idx < len(source) and source[idx].isascii() and source[idx].isdigit():
                idx += 1
            tokens.append(Token(TokenKind.NUMBER, source[start:idx], start))

        elif is_word_start(char):
            start = idx
            while idx < len(source) and is_word_char(source[idx]):
                idx += 1
            word = source[start:idx]
            tokens.append(Token(KEYWORDS.get(word, TokenKind.IDENTIFIER), word, start))

        elif char in PUNCTUATION:
            tokens.append(Token(PUNCTUATION[char], char, idx))
            idx += 1

        else:
            raise LexError("illegal character '{}'", char, source=source, start=idx)

    return tokens


class TokenCursor:
    """Cursor over a materialized list of Tokens. Allows looking ahead without consuming, so that the parser can commit
    to a production before eating anything. Never moves backwards.
    """

    def __init__(self, tokens, source=None):
        self.tokens = tokens
        self.source = source  # used for error messages
        self.index = 0

    def peek(self, n=0):
        """Returns the token n positions ahead of the current one without consuming it, or None if there is none."""
        if self.index + n < len(self.tokens):
            return self.tokens[self.index + n]
        return None

    def peek_kind(self, n=0):
        """Like peek, but returns the token's kind (or None)."""
        token = self.peek(n)
        return token.kind if token is not None else None

    def next(self):
        """Consumes and returns the current token. Raises ParseError if there are no tokens left."""
        token = self.peek()
        if token is None:
            raise self.error("unexpected end of input")
        self.index += 1
        return token

    def expect(self, *kinds, what=None):
        """Consumes the current token, raising ParseError if its kind is not one of kinds."""
        token = self.peek()
        if token is None:
            raise self.error("unexpected end of input, expected {}", what or kinds[0].value)
        if token.kind not in kinds:
            raise self.error("unexpected token '{}', expected {}", [token.text, what or kinds[0].value], token)
        self.index += 1
        return token

    def at_end(self):
        return self.index >= len(self.tokens)

    def error(self, msg, exprs=None, token=None):
        """Returns a ParseError located at token, or at the end of the source if token is None."""
        if token is not None:
            return ParseError(msg, exprs, source=self.source, start=token.pos, end=token.pos + len(token.text))
        if self.source is not None:
            return ParseError(msg, exprs, source=self.source, start=len(self.source.rstrip()), end=len(self.source) + 1)
        return ParseError(msg, exprs)

    def __iter__(self):
        while not self.at_end():
            yield self.next()

    def __repr__(self):
        return f"TokenCursor(index={self.index}, tokens={self.tokens})"
