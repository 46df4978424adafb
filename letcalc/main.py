"""Evaluates letcalc expressions from a file, from the command line or in an interactive shell. Also uses error
handling context manager. Called from the letcalc executable script.

Python version must be >=3.8: termcolor requires it, and error handling requires that dicts are insertion-ordered.
"""

import argparse
import sys

from letcalc.lang.error import ErrorHandler
from letcalc.lang.numerical import WORD_BITS, check_bits
from letcalc.lang.session import Session
from letcalc.lang.shell import Shell
from letcalc.pure.evaluator import Evaluator

DEMO = [
    "(let x 2 y 3 x (mult x y) (add x y))",
    "(let x 2 y 3 (add x (let x 4 (add x y))))",
    "(add (mult 2 3) (let a 5 (add a 1)))",
    "(let x 3 (let x 2 x))",
    "(let x 3 x)",
    "(add 10 20)",
    "42",
    "(let x 10 y (add x 5) (mult x y))",
    "(add x 5)",
    "()",
    "(mult 1 2 3)",
    "(let x 10 y)",
    "(+ 1 2)",
]


def main(argv=None):
    """Runs letcalc interpreter. Called from letcalc executable script."""
    assert sys.version_info >= (3, 8), "letcalc cannot be run with python < 3.8"

    with ErrorHandler() as error_handler:
        parser = argparse.ArgumentParser(prog="letcalc")
        parser.add_argument("file", help="file of expressions to evaluate, one per line (if empty and no -e/--demo, "
                                         "goes to command-line mode)", nargs="?")
        parser.add_argument("-e", "--expr", help="expression to evaluate (repeatable)", action="append", default=[])
        parser.add_argument("--demo", help="evaluate the built-in demonstration expressions", action="store_true")
        parser.add_argument("--bits", help=f"integer width in bits (default {WORD_BITS})", type=int,
                            default=WORD_BITS)
        parser.add_argument("--max-depth", help=f"maximum expression nesting (default {Evaluator.MAX_DEPTH})",
                            type=int, default=Evaluator.MAX_DEPTH)
        parser.add_argument("--echo", help="print each expression before its result", action="store_true")
        args = parser.parse_args(argv)

        check_bits(args.bits)
        if args.max_depth < 1:
            parser.error("--max-depth must be positive")

        options = {"bits": args.bits, "max_depth": args.max_depth, "echo": args.echo}

        if args.demo:
            sess = Session(error_handler, Session.DEMO_FILE, **{**options, "echo": True})
            for line_num, expr in enumerate(DEMO, 1):
                sess.add(expr, line_num)

        elif args.expr:
            sess = Session(error_handler, Session.ARGS_FILE, **options)
            for line_num, expr in enumerate(args.expr, 1):
                sess.add(expr, line_num)

        elif args.file is not None:
            sess = Session(error_handler, args.file, **options)

        else:
            Shell(Session(error_handler, Session.SH_FILE, cmd_line=True, **options)).cmdloop()
            return

        sess.run()

        if sess.failures and not args.demo:
            sys.exit(1)


if __name__ == "__main__":
    main()
