"""Integer expression interpreter.

For reference:
- "letcalc": a tiny parenthesized-prefix language with `add`, `mult` and a sequential `let`, e.g.
  `(let x 2 y (add x 1) (mult x y))` evaluates to 6

Basic program flow:
    1. Lexer: produces tokens on demand, spaces included (see letcalc/pure/lexical.py)
    2. Evaluator: recursive descent that evaluates each expression as soon as it is parsed, opening a new scope for
       every `let` (see letcalc/pure/evaluator.py and letcalc/pure/environment.py)
    3. Session: feeds expressions from files, the command line or the shell to evaluate and reports results/errors
       through ErrorHandler (see letcalc/lang/)

Every call to evaluate is independent: nothing survives from one expression to the next.
"""

from letcalc.lang.numerical import WORD_BITS
from letcalc.pure.evaluator import Evaluator


def evaluate(expr, bits=WORD_BITS, max_depth=Evaluator.MAX_DEPTH, warn=None):
    """Returns the int value of expr. Raises LetSyntaxError, EvaluationError or ResourceError on the first problem
    found.
    """
    return Evaluator(expr, bits, max_depth, warn).run()
