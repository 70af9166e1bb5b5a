import io
import unittest

from tinylisp.lang.error import ErrorHandler
from tinylisp.lang.session import Session
from tinylisp.lang.shell import Shell


class ShellTestCase(unittest.TestCase):

    def setUp(self):
        self.stdout = io.StringIO()
        self.stderr = io.StringIO()
        self.shell = Shell(Session(), ErrorHandler(fatal=False, stream=self.stderr), stdout=self.stdout)

    def run_lines(self, *lines):
        for line in lines:
            self.shell.onecmd(line)
        return self.stdout.getvalue().splitlines()

    def test_evaluate(self):
        self.assertEqual(["5", "true"], self.run_lines("(+ 2 3)", "(< 3 5)"))

    def test_define(self):
        self.assertEqual(["16"], self.run_lines("(define (square x) (* x x))", "(square 4)"))
        self.assertIn("square", self.shell.sess.env.functions)

    def test_line_continuation(self):
        output = self.run_lines("(define (fact n)", "(cond ((< n 2) 1)", "(true (* n (fact (- n 1))))))")
        self.assertEqual([], output)
        self.assertEqual(self.shell._tmp_prompt, self.shell.prompt)

        self.shell.onecmd("(+ 1")
        self.assertEqual(self.shell.secondary_prompt, self.shell.prompt)
        self.assertEqual(["3", "120"], self.run_lines("2)", "(fact 5)"))
        self.assertEqual(self.shell._tmp_prompt, self.shell.prompt)

    def test_errors_do_not_exit(self):
        self.assertEqual(["2"], self.run_lines("(/ 1 0)", "(f)", "(+ 1 1)"))
        errors = self.stderr.getvalue()
        self.assertIn("arithmetic error", errors)
        self.assertIn("unbound name", errors)

    def test_unmatched_cond(self):
        self.assertEqual(["1"], self.run_lines("(cond (false 1))", "(cond ((< 2 1) 0) (true 1))"))
        self.assertIn("no matching case", self.stderr.getvalue())
        self.assertNotIn("[internal]", self.stderr.getvalue())

    def test_commands_inside_continuation(self):
        self.assertFalse(self.shell.onecmd("(define (f exit)"))
        self.assertFalse(self.shell.onecmd("exit"))  # the body, not the command
        self.assertFalse(self.shell.onecmd(""))
        self.assertEqual(["3"], self.run_lines(")", "(f 3)"))
        self.assertEqual("", self.stderr.getvalue())
        self.assertTrue(self.shell.onecmd("exit"))

    def test_exit(self):
        self.assertTrue(self.shell.onecmd("exit"))
        self.assertTrue(self.shell.onecmd("EOF"))
        self.assertFalse(self.shell.onecmd("exit now"))
        self.assertIn("unrecognized token", self.stderr.getvalue())


if __name__ == '__main__':
    unittest.main()
