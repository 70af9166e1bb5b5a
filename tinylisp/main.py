"""Runs the tinylisp interpreter on a program file, a single expression, or in command-line mode. Uses the error
handling context manager to report errors. Called from the tinylisp console script.
"""

import argparse
import logging
import os
import sys

from tinylisp.lang.error import ErrorHandler
from tinylisp.lang.session import Session, run_snippet
from tinylisp.lang.shell import Shell

RECURSION_LIMIT = 10000


def get_log_level(debug=False):
    """Returns the log level: DEBUG if debug is set, otherwise the LOGLEVEL environment variable (default WARNING)."""
    if debug:
        return logging.DEBUG

    loglevel_env = os.getenv("LOGLEVEL", "").upper()
    if loglevel_env:
        level = getattr(logging, loglevel_env, None)
        if isinstance(level, int):
            return level
    return logging.WARNING


def build_parser():
    parser = argparse.ArgumentParser(prog="tinylisp", description="Run tinylisp programs.")
    parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
    parser.add_argument("-e", "--expr", help="evaluate a single expression and print its value")
    parser.add_argument("--debug", action="store_true", help="log tokens, trees and function calls")
    parser.add_argument("--recursion-limit", type=int, default=RECURSION_LIMIT,
                        help=f"python recursion limit, bounds how deep programs can recurse (default {RECURSION_LIMIT})")
    return parser


def main(argv=None):
    """Runs tinylisp interpreter. Called from tinylisp executable script."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(level=get_log_level(args.debug), format="%(name)s: %(message)s", stream=sys.stderr)
    sys.setrecursionlimit(args.recursion_limit)

    if args.expr is not None:
        path = "<expr>"
    elif args.file is not None:
        path = args.file
    else:
        path = Session.SH_FILE

    with ErrorHandler(path=path):
        if args.expr is not None:
            print(run_snippet(args.expr))

        elif args.file is not None:
            print(Session.from_file(args.file).run())

        else:
            Shell(Session(path), ErrorHandler(fatal=False, path=path)).cmdloop()


if __name__ == "__main__":
    main()
