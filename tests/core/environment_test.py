import unittest

from tinylisp.core.environment import Environment, FunctionInfo
from tinylisp.core.parser import parse
from tinylisp.core.tree import NumLiteral
from tinylisp.core.value import Bool, Num
from tinylisp.lang.error import ParseError, UnboundNameError


class EnvironmentTestCase(unittest.TestCase):

    def test_stack(self):
        env = Environment()
        self.assertRaises(UnboundNameError, env.lookup, "x")

        env.push("x", Num(1))
        env.push("x", Bool(False))
        self.assertEqual(Bool(False), env.lookup("x"))
        self.assertEqual(2, env.depth("x"))

        self.assertEqual(Bool(False), env.pop("x"))
        self.assertEqual(Num(1), env.lookup("x"))
        env.pop("x")
        self.assertRaises(UnboundNameError, env.lookup, "x")
        self.assertEqual(0, env.depth("x"))

    def test_bind(self):
        env = Environment()
        env.push("a", Num(0))

        with env.bind(("a", "b"), (Num(1), Num(2))):
            self.assertEqual(Num(1), env.lookup("a"))
            self.assertEqual(Num(2), env.lookup("b"))
        self.assertEqual(Num(0), env.lookup("a"))
        self.assertRaises(UnboundNameError, env.lookup, "b")

        with self.assertRaises(ZeroDivisionError):
            with env.bind(("a",), (Num(5),)):
                1 / 0
        self.assertEqual(Num(0), env.lookup("a"))
        self.assertEqual(1, env.depth("a"))

    def test_define(self):
        env = Environment()
        env.define(parse("(define (f x) 1)"))
        self.assertEqual(FunctionInfo(("x",), NumLiteral(1)), env.function("f"))
        self.assertRaises(UnboundNameError, env.function, "g")

        should_raise = [parse("(define (f) 2)"), parse("(+ 1 2)")]
        for case in should_raise:
            self.assertRaises(ParseError, env.define, case)

    def test_functions_read_only(self):
        env = Environment()
        env.define(parse("(define (f) 1)"))
        self.assertIn("f", env.functions)
        with self.assertRaises(TypeError):
            env.functions["g"] = FunctionInfo((), NumLiteral(2))


if __name__ == '__main__':
    unittest.main()
