"""Session control for letcalc. Collects expressions from a file, the command line or the interactive shell and
evaluates them one by one, either in command line mode or file interpretation mode.
"""

from letcalc.interpreter import evaluate
from letcalc.lang.error import GenericException
from letcalc.lang.numerical import WORD_BITS
from letcalc.pure.evaluator import Evaluator


class Session:
    """Governs a letcalc session. Expressions never share state: each one is evaluated in a fresh root scope."""
    SH_FILE = "<in>"      # command-line interpreter filename
    ARGS_FILE = "<args>"  # expressions passed with -e
    DEMO_FILE = "<demo>"  # built-in demonstration expressions
    RESERVED = (SH_FILE, ARGS_FILE, DEMO_FILE)

    def __init__(self, error_handler, path, cmd_line=False, bits=WORD_BITS, max_depth=Evaluator.MAX_DEPTH,
                 echo=False):
        self.error_handler = error_handler
        self.error_handler.register_file(path)

        self.path = path            # used for error messages
        self.cmd_line = cmd_line    # whether or not in command-line mode
        self.bits = bits
        self.max_depth = max_depth
        self.echo = echo            # print each expression before its result

        self.to_eval = {}   # dict of line num: expr to evaluate
        self.results = []   # list of (line num, expr, value) for expressions that evaluated
        self.failures = []  # list of (line num, expr, GenericException) for expressions that did not

        if self.cmd_line:
            self.error_handler.fatal = False

        if path not in Session.RESERVED:
            try:
                with open(path, "r") as file:
                    lines = file.readlines()
            except OSError:
                raise GenericException("'{}' could not be opened", path, diagnosis=False)

            prev, first_line = "", None
            for line_num, line in enumerate(lines, 1):
                line, add_to_prev = self.preprocess_line(line, prev)
                if first_line is None:
                    first_line = line_num
                if add_to_prev:
                    prev = line
                    continue
                if line:
                    self.add(line, first_line)
                prev, first_line = "", None

            if prev:
                self.add(prev, first_line)  # unbalanced parentheses: evaluate reports the missing ")"

    @staticmethod
    def preprocess_line(line, prev=""):
        """Strips comments and trailing whitespace from line and joins it onto prev (a continued line) with a single
        space. Returns updated value of line and whether it continues onto the next line.
        """
        if ";;" in line:
            line = line[:line.index(";;")]  # get rid of comments

        if prev:
            line = f"{prev} {line.strip()}".rstrip()
        else:
            line = line.rstrip()

        return line, line.count("(") > line.count(")")

    def add(self, expr, line_num):
        """Queues expr for evaluation. Evaluation is delayed until run is called."""
        self.to_eval[line_num] = expr

    def run(self):
        """Evaluates queued expressions in order, printing each result. An error is reported and ends only the
        expression that raised it.
        """
        for line_num, expr in list(self.to_eval.items()):
            self.error_handler.register_line(self.path, expr, line_num)  # in case error is raised

            if self.echo:
                print(expr)

            try:
                value = evaluate(expr, self.bits, self.max_depth, warn=self.error_handler.warn)
            except GenericException as error:
                self.failures.append((line_num, expr, error))
                self.error_handler.throw(error, fatal=False)
            else:
                self.results.append((line_num, expr, value))
                print(value)
            finally:
                del self.to_eval[line_num]

            self.error_handler.remove_line(self.path)

