"""Recursive-descent parser for tinylisp. See tinylisp/core/tree.py for the grammar.

Every production is chosen by looking at most two tokens ahead (the token cursor never backtracks), and any malformed
input is a ParseError: there is no error recovery or partial parse.
"""

from tinylisp.core.lexical import TokenCursor, TokenKind, tokenize
from tinylisp.core.tree import (
    BinaryBool,
    BinaryNum,
    BoolLiteral,
    BoolOp,
    CmpBool,
    CmpOp,
    Cond,
    CondCase,
    Function,
    FunctionCall,
    NumLiteral,
    NumOp,
    UnaryBool,
    UnaryBoolOp,
    Variable,
)
from tinylisp.lang import numerical

NUM_OP_TOKENS = {
    TokenKind.PLUS: NumOp.ADD,
    TokenKind.MINUS: NumOp.SUB,
    TokenKind.STAR: NumOp.MUL,
    TokenKind.SLASH: NumOp.DIV,
    TokenKind.PERCENT: NumOp.MOD,
}

BOOL_OP_TOKENS = {
    TokenKind.AMPERSAND: BoolOp.AND,
    TokenKind.PIPE: BoolOp.OR,
}

UNARY_BOOL_OP_TOKENS = {
    TokenKind.BANG: UnaryBoolOp.NOT,
}

CMP_OP_TOKENS = {
    TokenKind.LESS_THAN: CmpOp.LT,
    TokenKind.EQUAL: CmpOp.EQ,
    TokenKind.GREATER_THAN: CmpOp.GT,
}

UNSUPPORTED = {TokenKind.LIST, TokenKind.CONS, TokenKind.EMPTY, TokenKind.CAR, TokenKind.CDR, TokenKind.EMPTY_HUH,
               TokenKind.LIST_HUH}


def parse(source):
    """Returns the Expr that source consists of. Raises ParseError if source isn't exactly one expression."""
    cursor = TokenCursor(tokenize(source), source)
    if cursor.at_end():
        raise cursor.error("empty program")

    expr = parse_expr(cursor)
    if not cursor.at_end():
        raise cursor.error("malformed program, unexpected token '{}' after end of expression", cursor.peek().text,
                           cursor.peek())
    return expr


def parse_expr(cursor):
    """Parses one expression of any kind from cursor."""
    token = cursor.peek()
    if token is None:
        raise cursor.error("unexpected end of input")

    if token.kind in (TokenKind.NUMBER, TokenKind.MINUS):
        return parse_num_expr(cursor)
    if token.kind is TokenKind.BOOLEAN:
        return parse_bool_literal(cursor)
    if token.kind is TokenKind.IDENTIFIER:
        return parse_variable(cursor)

    if token.kind is TokenKind.OPEN:
        after = cursor.peek_kind(1)
        if after is TokenKind.COND:
            return parse_cond(cursor)
        if after in NUM_OP_TOKENS:
            return parse_binary_num(cursor)
        if after in BOOL_OP_TOKENS or after in UNARY_BOOL_OP_TOKENS or after in CMP_OP_TOKENS:
            return parse_bool_expr(cursor)
        if after is TokenKind.DEFINE:
            return parse_function(cursor)
        if after is TokenKind.IDENTIFIER:
            return parse_call(cursor)
        return invalid_after_open(cursor)

    if token.kind in UNSUPPORTED:
        raise cursor.error("'{}' is not supported", token.text, token)
    raise cursor.error("unexpected token '{}' at start of expression", token.text, token)


def invalid_after_open(cursor):
    """Raises the ParseError for an open delimiter followed by something that can't start a form."""
    token = cursor.peek(1)
    if token is None:
        raise cursor.error("unexpected end of input")
    if token.kind in UNSUPPORTED:
        raise cursor.error("'{}' is not supported", token.text, token)
    raise cursor.error("invalid expression starting with '(' followed by '{}'", token.text, token)


def is_dynamic(cursor):
    """Returns whether the next expression's type can only be known at runtime (variable, function call or cond)."""
    kind = cursor.peek_kind()
    if kind is TokenKind.IDENTIFIER:
        return True
    return kind is TokenKind.OPEN and cursor.peek_kind(1) in (TokenKind.IDENTIFIER, TokenKind.COND)


def parse_dynamic(cursor):
    if cursor.peek_kind() is TokenKind.IDENTIFIER:
        return parse_variable(cursor)
    if cursor.peek_kind(1) is TokenKind.COND:
        return parse_cond(cursor)
    return parse_call(cursor)


# ------------------------------------------------------------------------------------------------------------------
# numbers
# ------------------------------------------------------------------------------------------------------------------

def parse_num_expr(cursor):
    """Parses an expression in number position: a literal, a negated literal or an arithmetic form."""
    kind = cursor.peek_kind()

    if kind is TokenKind.NUMBER:
        return parse_num_literal(cursor)

    if kind is TokenKind.MINUS:
        # a standalone "-" directly before a number is a negative literal, "(- a b)" is handled below
        minus = cursor.next()
        if cursor.peek_kind() is not TokenKind.NUMBER:
            raise cursor.error("expected number after '{}'", minus.text, cursor.peek() or minus)
        return parse_num_literal(cursor, negative=True, start=minus.pos)

    if is_dynamic(cursor):
        return parse_dynamic(cursor)

    if kind is TokenKind.OPEN and cursor.peek_kind(1) in NUM_OP_TOKENS:
        return parse_binary_num(cursor)

    token = cursor.peek()
    if token is None:
        raise cursor.error("unexpected end of input, expected a number")
    if kind is TokenKind.OPEN and cursor.peek(1) is not None:
        token = cursor.peek(1)
    raise cursor.error("expected a number, got '{}'", token.text, token)


def parse_num_literal(cursor, negative=False, start=None):
    token = cursor.expect(TokenKind.NUMBER, what="number")
    value = -int(token.text) if negative else int(token.text)

    if not numerical.in_range(value):
        literal = ("-" if negative else "") + token.text
        err = cursor.error("integer literal '{}' out of 32-bit range", literal, token)
        if start is not None:
            err.start = start
        raise err
    return NumLiteral(value)


def parse_binary_num(cursor):
    cursor.expect(TokenKind.OPEN)
    op = parse_operator(cursor, NUM_OP_TOKENS, "arithmetic operator")
    left = parse_num_expr(cursor)
    right = parse_num_expr(cursor)
    cursor.expect(TokenKind.CLOSE)
    return BinaryNum(op, left, right)


def parse_operator(cursor, table, what):
    """Consumes an operator token and maps it through table."""
    token = cursor.next()
    if token.kind not in table:
        raise cursor.error("unknown {} '{}'", [what, token.text], token)
    return table[token.kind]


# ------------------------------------------------------------------------------------------------------------------
# booleans
# ------------------------------------------------------------------------------------------------------------------

def parse_bool_expr(cursor):
    """Parses an expression in boolean position: a literal, or a boolean/comparison form."""
    kind = cursor.peek_kind()

    if kind is TokenKind.BOOLEAN:
        return parse_bool_literal(cursor)

    if is_dynamic(cursor):
        return parse_dynamic(cursor)

    if kind is TokenKind.OPEN:
        after = cursor.peek_kind(1)
        if after in BOOL_OP_TOKENS:
            return parse_binary_bool(cursor)
        if after in UNARY_BOOL_OP_TOKENS:
            return parse_unary_bool(cursor)
        if after in CMP_OP_TOKENS:
            return parse_cmp_bool(cursor)

    token = cursor.peek()
    if token is None:
        raise cursor.error("unexpected end of input, expected a boolean")
    if kind is TokenKind.OPEN and cursor.peek(1) is not None:
        token = cursor.peek(1)
    raise cursor.error("expected a boolean, got '{}'", token.text, token)


def parse_bool_literal(cursor):
    token = cursor.expect(TokenKind.BOOLEAN, what="boolean")
    return BoolLiteral(token.text == "true")


def parse_binary_bool(cursor):
    cursor.expect(TokenKind.OPEN)
    op = parse_operator(cursor, BOOL_OP_TOKENS, "boolean operator")
    left = parse_bool_expr(cursor)
    right = parse_bool_expr(cursor)
    cursor.expect(TokenKind.CLOSE)
    return BinaryBool(op, left, right)


def parse_unary_bool(cursor):
    cursor.expect(TokenKind.OPEN)
    op = parse_operator(cursor, UNARY_BOOL_OP_TOKENS, "unary boolean operator")
    value = parse_bool_expr(cursor)
    cursor.expect(TokenKind.CLOSE)
    return UnaryBool(op, value)


def parse_cmp_bool(cursor):
    cursor.expect(TokenKind.OPEN)
    op = parse_operator(cursor, CMP_OP_TOKENS, "comparison operator")
    left = parse_num_expr(cursor)
    right = parse_num_expr(cursor)
    cursor.expect(TokenKind.CLOSE)
    return CmpBool(op, left, right)


# ------------------------------------------------------------------------------------------------------------------
# conditionals
# ------------------------------------------------------------------------------------------------------------------

def parse_cond(cursor):
    cursor.expect(TokenKind.OPEN)
    keyword = cursor.expect(TokenKind.COND, what="cond")

    if cursor.peek_kind() is TokenKind.CLOSE:
        raise cursor.error("'{}' must have at least one case", keyword.text, keyword)

    cases = []
    while cursor.peek_kind() is not TokenKind.CLOSE:
        cases.append(parse_cond_case(cursor))
    cursor.expect(TokenKind.CLOSE)

    return Cond(tuple(cases))


def parse_cond_case(cursor):
    cursor.expect(TokenKind.OPEN, what="'(' to start a cond case")
    condition = parse_bool_expr(cursor)
    result = parse_expr(cursor)
    cursor.expect(TokenKind.CLOSE, what="')' to end a cond case")
    return CondCase(condition, result)


# ------------------------------------------------------------------------------------------------------------------
# variables and functions
# ------------------------------------------------------------------------------------------------------------------

def parse_variable(cursor):
    return Variable(cursor.expect(TokenKind.IDENTIFIER, what="identifier").text)


def parse_function(cursor):
    """Parses (define (name params...) body)."""
    cursor.expect(TokenKind.OPEN)
    cursor.expect(TokenKind.DEFINE, what="define")
    cursor.expect(TokenKind.OPEN, what="'(' before function name")
    name = cursor.expect(TokenKind.IDENTIFIER, what="function name").text

    params = []
    while cursor.peek_kind() is not TokenKind.CLOSE:
        token = cursor.expect(TokenKind.IDENTIFIER, what="parameter name")
        if token.text in params:
            raise cursor.error("duplicate parameter '{}' in function '{}'", [token.text, name], token)
        params.append(token.text)
    cursor.expect(TokenKind.CLOSE)

    body = parse_expr(cursor)
    cursor.expect(TokenKind.CLOSE, what="')' after function body")

    return Function(name, tuple(params), body)


def parse_call(cursor):
    """Parses (name args...)."""
    cursor.expect(TokenKind.OPEN)
    name = cursor.expect(TokenKind.IDENTIFIER, what="function name").text

    args = []
    while cursor.peek_kind() is not TokenKind.CLOSE:
        args.append(parse_expr(cursor))
    cursor.expect(TokenKind.CLOSE)

    return FunctionCall(name, tuple(args))
