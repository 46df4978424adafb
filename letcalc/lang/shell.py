"""Handles interactive/command-line mode for letcalc interpreter. Uses cmd as backend."""

import cmd


class Shell(cmd.Cmd):
    """letcalc interpreter shell."""
    intro = "letcalc integer interpreter :: Python backend\nType '?' or 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # shown while parentheses are still open
    _tmp_prompt = "> "       # restored once the expression is complete

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess

        self._tmp_line = ""  # unfinished expression carried to the next line
        self.line_num = 0

    def default(self, line):
        """Evaluates arbitrary letcalc expression."""
        with self.sess.error_handler:  # keeps an internal error from ending cmdloop
            self.line_num += 1
            line, add_to_prev = self.sess.preprocess_line(line, self._tmp_line)

            if add_to_prev:
                self._tmp_line = line
                self.prompt = self.secondary_prompt
            else:
                self._tmp_line = ""
                self.prompt = self._tmp_prompt

                if line:
                    self.sess.add(line, self.line_num)
                    self.sess.run()

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the letcalc interpreter!\n\n"
              "Every line is one expression and evaluates to an integer. There are three forms: \n"
              "'(add A B)', '(mult A B)' and '(let NAME VALUE ... BODY)'. Tokens are separated \n"
              "by exactly one space, and integers wrap around like machine words.\n\n"
              "Try it out by typing '(let x 2 y (add x 1) (mult x y))'. This binds 'x' to 2, \n"
              "then 'y' to 3, giving 6 as the result.")

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print()
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
