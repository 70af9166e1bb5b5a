"""Handles interactive/command-line mode for the tinylisp interpreter. Uses cmd as backend."""

import cmd

from tinylisp.lang.error import ErrorHandler, LispError
from tinylisp.lang.session import Session


class Shell(cmd.Cmd):
    """tinylisp interpreter shell."""
    intro = "tinylisp interpreter :: Python backend\nType '?' or 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    def __init__(self, sess=None, error_handler=None, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess if sess is not None else Session()
        self.error_handler = error_handler if error_handler is not None else ErrorHandler(fatal=False)
        self.error_handler.fatal = False  # errors should never end the shell

        self._tmp_line = ""

    def onecmd(self, line):
        """Continuation lines always belong to the pending form, even if they spell a command. EOF still exits."""
        if self._tmp_line and line != "EOF":
            return self.default(line)
        return super().onecmd(line)

    def default(self, line):
        """Executes arbitrary tinylisp forms."""
        with self.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            line, add_to_prev = Session.preprocess_line(self._tmp_line + "\n" + line if self._tmp_line else line)

            if add_to_prev:
                self._tmp_line = line
                self.prompt = self.secondary_prompt
                return

            self._tmp_line = ""
            self.prompt = self._tmp_prompt

            if line.strip():
                for value in self.sess.execute(line):
                    print(value, file=self.stdout)

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the tinylisp interpreter!\n\n"
              "Expressions are written in prefix notation and evaluate to a number or a boolean:\n"
              "try typing '(+ 1 (* 2 3))' or '(cond ((< 1 0) 1) (true 2))'.\n\n"
              "Functions are defined with '(define (square x) (* x x))' and can be called from\n"
              "any later line, for example '(square 4)'. Type 'exit' or press Ctrl-D to leave.",
              file=self.stdout)

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print(file=self.stdout)
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        if arg:
            self.error_handler.throw(LispError("unrecognized token '{}'", arg))
            return False
        return True
