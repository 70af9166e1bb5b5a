"""Abstract syntax tree for tinylisp, shared by the parser and the evaluator.

Every node is a frozen dataclass that exclusively owns its children, so trees are immutable once parsed and compare
structurally. str() of any node gives back its canonical source text, which parses to an equal tree.

```
<expr>       ::= <num> | <bool> | <cond> | <function> | <variable> | <call>

<num>        ::= <integer>                          ; NumLiteral, -?[0-9]+
               | "(" <num_op> <num> <num> ")"       ; BinaryNum
<bool>       ::= "true" | "false"                   ; BoolLiteral
               | "(" <bool_op> <bool> <bool> ")"    ; BinaryBool
               | "(" "!" <bool> ")"                 ; UnaryBool
               | "(" <cmp_op> <num> <num> ")"       ; CmpBool
<cond>       ::= "(" "cond" <case>+ ")"             ; Cond
<case>       ::= "(" <bool> <expr> ")"              ; CondCase
<function>   ::= "(" "define" "(" <identifier> <identifier>* ")" <expr> ")"
<variable>   ::= <identifier>
<call>       ::= "(" <identifier> <expr>* ")"       ; FunctionCall
```

In a <num> or <bool> position, a <variable>, <call> or <cond> is also accepted: their type is only known once they are
evaluated.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from tinylisp.lang import numerical


class NumOp(Enum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    MOD = "%"

    def apply(self, left, right):
        return NUM_OPS[self](left, right)


class BoolOp(Enum):
    AND = "&"
    OR = "|"

    def apply(self, left, right):
        return left and right if self is BoolOp.AND else left or right


class UnaryBoolOp(Enum):
    NOT = "!"

    def apply(self, value):
        return not value


class CmpOp(Enum):
    LT = "<"
    EQ = "="
    GT = ">"

    def apply(self, left, right):
        if self is CmpOp.LT:
            return left < right
        if self is CmpOp.EQ:
            return left == right
        return left > right


NUM_OPS = {
    NumOp.ADD: numerical.add,
    NumOp.SUB: numerical.sub,
    NumOp.MUL: numerical.mul,
    NumOp.DIV: numerical.div,
    NumOp.MOD: numerical.mod,
}


class Expr:
    """Superclass of every AST node."""


class NumExpr(Expr):
    """An expression that is a number by construction."""


class BoolExpr(Expr):
    """An expression that is a boolean by construction."""


@dataclass(frozen=True)
class NumLiteral(NumExpr):
    value: int

    def __str__(self):
        return str(self.value)


@dataclass(frozen=True)
class BinaryNum(NumExpr):
    op: NumOp
    left: Expr
    right: Expr

    def __str__(self):
        return f"({self.op.value} {self.left} {self.right})"


@dataclass(frozen=True)
class BoolLiteral(BoolExpr):
    value: bool

    def __str__(self):
        return "true" if self.value else "false"


@dataclass(frozen=True)
class BinaryBool(BoolExpr):
    op: BoolOp
    left: Expr
    right: Expr

    def __str__(self):
        return f"({self.op.value} {self.left} {self.right})"


@dataclass(frozen=True)
class UnaryBool(BoolExpr):
    op: UnaryBoolOp
    value: Expr

    def __str__(self):
        return f"({self.op.value} {self.value})"


@dataclass(frozen=True)
class CmpBool(BoolExpr):
    op: CmpOp
    left: Expr
    right: Expr

    def __str__(self):
        return f"({self.op.value} {self.left} {self.right})"


@dataclass(frozen=True)
class CondCase:
    condition: Expr
    result: Expr

    def __str__(self):
        return f"({self.condition} {self.result})"


@dataclass(frozen=True)
class Cond(Expr):
    cases: Tuple[CondCase, ...]

    def __str__(self):
        return f"(cond {' '.join(str(case) for case in self.cases)})"


@dataclass(frozen=True)
class Function(Expr):
    """Function definition. Only legal at the top level of a program."""
    name: str
    params: Tuple[str, ...]
    body: Expr

    def __str__(self):
        return f"(define ({' '.join((self.name,) + self.params)}) {self.body})"


@dataclass(frozen=True)
class Variable(Expr):
    name: str

    def __str__(self):
        return self.name


@dataclass(frozen=True)
class FunctionCall(Expr):
    name: str
    args: Tuple[Expr, ...]

    def __str__(self):
        return f"({' '.join([self.name] + [str(arg) for arg in self.args])})"


def display(expr, indents=0):
    """Recursively displays expr with readable format, one node per line.

    Format:
    <Node>(<field>=<value>, ...)          # <-- leaf
    <Node>(<field>=<value>, ..., [
        <Node>(...)
    ])
    """
    pad = "    " * indents
    name = type(expr).__name__

    if isinstance(expr, (NumLiteral, BoolLiteral)):
        return f"{pad}{name}({expr})"
    if isinstance(expr, Variable):
        return f"{pad}{name}({expr.name})"

    if isinstance(expr, (BinaryNum, BinaryBool, CmpBool)):
        header, children = f"op='{expr.op.value}'", [expr.left, expr.right]
    elif isinstance(expr, UnaryBool):
        header, children = f"op='{expr.op.value}'", [expr.value]
    elif isinstance(expr, Cond):
        header, children = "", [node for case in expr.cases for node in (case.condition, case.result)]
    elif isinstance(expr, Function):
        header, children = f"name='{expr.name}', params={list(expr.params)}", [expr.body]
    elif isinstance(expr, FunctionCall):
        header, children = f"name='{expr.name}'", list(expr.args)
    else:
        raise TypeError(f"cannot display {expr!r}")

    if not children:
        return f"{pad}{name}({header})"

    result = f"{pad}{name}({header + ', ' if header else ''}["
    for child in children:
        result += "\n" + display(child, indents + 1) + ","
    return result[:-1] + f"\n{pad}])"
