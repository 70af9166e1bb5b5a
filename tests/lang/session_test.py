import os
import tempfile
import unittest

from tinylisp.core.value import Bool, Num
from tinylisp.lang.error import ArityError, LexError, LispError, MathError, NoMatchingCaseError, ParseError, \
    UnboundNameError
from tinylisp.lang.session import Session, run_program, run_snippet

SQUARE = """
(define (square x) (* x x))
(define (main) (square 4))
"""

FIB = """
; naive fibonacci
(define (fib n)
  (cond [(< n 2) n]                       ; base case
        [true (+ (fib (- n 1)) (fib (- n 2)))]))

(define (main) (fib 15))
"""


class RunProgramTestCase(unittest.TestCase):

    def test_run_program(self):
        cases = {
            SQUARE: Num(16),
            FIB: Num(610),
            "(define (main) (< 1 2))": Bool(True),
            "(define (main) -5)": Num(-5),
            "(define (f x) (g (* x 2))) (define (g x) (+ x 1)) (define (main) (f 5))": Num(11),
            "(define (g) x) (define (f x) (+ (g) x)) (define (main) (f 3))": Num(6),
        }
        for case, expected in cases.items():
            self.assertEqual(expected, run_program(case), case)

    def test_parameters_restored(self):
        program = """
        (define (g x) (* x 100))
        (define (f x) (+ (g (+ x 1)) x))
        (define (main) (f 1))
        """
        self.assertEqual(Num(201), run_program(program))

    def test_malformed_program(self):
        should_raise = [
            "",
            "; nothing here",
            "(define (square x) (* x x))",                 # no main
            "(define (main x) x)",                         # main takes arguments
            "(define (main) 1) 5",                         # trailing tokens
            "(define (main) 1))",
            "(define (main) (/ 1 0)) (+ 1 2)",             # fails before evaluating anything
            "(+ 1 2)",
            "(define (main) 1) (define (main) 2)",
            "(define (main) 1",
        ]
        for case in should_raise:
            self.assertRaises(ParseError, run_program, case)

    def test_runtime_errors(self):
        cases = {
            "(define (square x) (* x x)) (define (main) (square 1 2))": ArityError,
            "(define (main) (cube 2))": UnboundNameError,
            "(define (main) y)": UnboundNameError,
            "(define (main) (/ 1 0))": MathError,
            "(define (main) (cond ((< 2 1) 1)))": NoMatchingCaseError,
            "(define (main) #t)": LexError,
        }
        for case, error in cases.items():
            self.assertRaises(error, run_program, case)


class RunSnippetTestCase(unittest.TestCase):

    def test_run_snippet(self):
        cases = {
            "(+ 2 3)": Num(5),
            "(- 0 7)": Num(-7),
            "(% 10 3)": Num(1),
            "(& true false)": Bool(False),
            "(! true)": Bool(False),
            "(< 3 5)": Bool(True),
            "(cond ((< 1 0) 1) ((> 2 1) 2) (true 3))": Num(2),
        }
        for case, expected in cases.items():
            self.assertEqual(expected, run_snippet(case), case)

        self.assertRaises(NoMatchingCaseError, run_snippet, "(cond (false 1))")
        self.assertRaises(MathError, run_snippet, "(/ 5 0)")
        self.assertRaises(UnboundNameError, run_snippet, "(main)")
        self.assertRaises(ParseError, run_snippet, "(+ 1 2) (+ 3 4)")


class SessionTestCase(unittest.TestCase):

    def test_preprocess(self):
        cases = {
            "(+ 1 2)": "(+ 1 2)",
            "(+ 1 2) ; three": "(+ 1 2)        ",
            "; a\n(f) ;; b\n": "   \n(f)     \n",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, Session.preprocess(case), case)
            self.assertEqual(len(case), len(Session.preprocess(case)), case)

    def test_preprocess_line(self):
        cases = {
            "(+ 1 2)": ("(+ 1 2)", False),
            "(define (f x)": ("(define (f x)", True),
            "[cond ((< 1 2) 1)": ("[cond ((< 1 2) 1)", True),
            "(+ 1 2) ; (": ("(+ 1 2)", False),
            "(+ 1 $": ("(+ 1 $", False),
        }
        for case, expected in cases.items():
            self.assertEqual(expected, Session.preprocess_line(case), case)

    def test_error_positions_survive_comments(self):
        source = "; header\n(define (main) (+ 1 true))"
        with self.assertRaises(ParseError) as ctx:
            Session().load(source)
        self.assertEqual(source.index("true"), ctx.exception.start)

    def test_load_and_run(self):
        sess = Session().load(SQUARE)
        self.assertEqual(["square", "main"], list(sess.env.functions))
        self.assertEqual(Num(16), sess.run())
        self.assertEqual(Num(81), sess.evaluate("(square 9)"))

    def test_redefinition_located(self):
        source = "(define (f) 1)\n(define (f) 2)"
        with self.assertRaises(ParseError) as ctx:
            Session().load(source)
        self.assertEqual(15, ctx.exception.start)
        self.assertEqual(source, ctx.exception.source)

    def test_execute(self):
        sess = Session()
        self.assertEqual([], sess.execute("(define (sq x) (* x x))"))
        self.assertEqual([Num(9), Num(16)], sess.execute("(sq 3) (sq 4) ; comment"))
        self.assertEqual([Bool(True)], sess.execute("(define (big? n) (> n 10)) (big? (sq 4))"))
        self.assertRaises(ParseError, sess.execute, "(define (sq y) y)")

    def test_from_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "square.lisp")
            with open(path, "w") as file:
                file.write(SQUARE)

            sess = Session.from_file(path)
            self.assertEqual(path, sess.path)
            self.assertEqual(Num(16), sess.run())

            self.assertRaises(LispError, Session.from_file, os.path.join(tmp, "missing.lisp"))


if __name__ == '__main__':
    unittest.main()
