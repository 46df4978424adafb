import io
import os
import tempfile
import unittest
from contextlib import redirect_stdout

from letcalc.lang.error import ErrorHandler, EvaluationError, GenericException, LetSyntaxError, ResourceError
from letcalc.lang.session import Session
from letcalc.lang.shell import Shell


class PreprocessTestCase(unittest.TestCase):

    def test_preprocess_line(self):
        cases = {
            "(add 1 2)\n": ("(add 1 2)", False),
            "(add 1 2)  ;; three\n": ("(add 1 2)", False),
            ";; just a comment\n": ("", False),
            "   \n": ("", False),
            " 42\n": (" 42", False),
            "(let x 2\n": ("(let x 2", True),
        }
        for case, expected in cases.items():
            self.assertEqual(expected, Session.preprocess_line(case), case)

    def test_continuation(self):
        self.assertEqual(("(let x 2 x)", False), Session.preprocess_line("   x)\n", "(let x 2"))
        self.assertEqual(("(let x 2", True), Session.preprocess_line("\n", "(let x 2"))


class SessionTestCase(unittest.TestCase):

    def setUp(self):
        self.error_handler = ErrorHandler()

    def write(self, text):
        fd, path = tempfile.mkstemp(suffix=".lc")
        with os.fdopen(fd, "w") as file:
            file.write(text)
        self.addCleanup(os.remove, path)
        return path

    def test_run(self):
        sess = Session(self.error_handler, Session.ARGS_FILE)
        sess.add("(add 10 20)", 1)
        sess.add("(let x 3 (let x 2 x))", 2)

        out = io.StringIO()
        with redirect_stdout(out):
            sess.run()

        self.assertEqual("30\n2\n", out.getvalue())
        self.assertEqual([(1, "(add 10 20)", 30), (2, "(let x 3 (let x 2 x))", 2)], sess.results)
        self.assertEqual({}, sess.to_eval)

    def test_errors_do_not_stop_session(self):
        sess = Session(self.error_handler, Session.ARGS_FILE)
        sess.add("(add x 5)", 1)
        sess.add("(mult 1 2 3)", 2)
        sess.add("42", 3)

        out = io.StringIO()
        with redirect_stdout(out):
            sess.run()

        self.assertEqual([(3, "42", 42)], sess.results)
        self.assertEqual([1, 2], [line_num for line_num, __, __ in sess.failures])
        self.assertIsInstance(sess.failures[0][-1], EvaluationError)
        self.assertIsInstance(sess.failures[1][-1], LetSyntaxError)
        self.assertIn("undefined variable", out.getvalue())
        self.assertTrue(out.getvalue().endswith("42\n"))

    def test_echo_and_options(self):
        sess = Session(self.error_handler, Session.ARGS_FILE, bits=8, echo=True)
        sess.add("(add 127 1)", 1)

        out = io.StringIO()
        with redirect_stdout(out):
            sess.run()

        self.assertEqual(-128, sess.results[0][-1])
        self.assertTrue(out.getvalue().startswith("(add 127 1)\n"))
        self.assertIn("warning: ", out.getvalue())
        self.assertTrue(out.getvalue().endswith("-128\n"))

    def test_file(self):
        path = self.write(";; sample\n"
                          "(add 10 20)\n"
                          "\n"
                          "(let x 2\n"
                          "     y (add x 1)\n"
                          "     (mult x y))  ;; six\n"
                          "42\n")
        sess = Session(self.error_handler, path)
        self.assertEqual({2: "(add 10 20)", 4: "(let x 2 y (add x 1) (mult x y))", 7: "42"}, sess.to_eval)

        with redirect_stdout(io.StringIO()):
            sess.run()
        self.assertEqual([30, 6, 42], [value for __, __, value in sess.results])

    def test_warning_location_in_continued_expression(self):
        path = self.write(";; wraps\n"
                          "(let x 2147483647\n"
                          "     (add x 1))\n")
        sess = Session(self.error_handler, path)

        out = io.StringIO()
        with redirect_stdout(out):
            sess.run()

        # column 19 of the joined "(let x 2147483647 (add x 1))", reported on its first line
        self.assertIn(f"{path}:2:19: ", out.getvalue())
        self.assertEqual([(2, "(let x 2147483647 (add x 1))", -2147483648)], sess.results)

    def test_deep_nesting_ends_only_its_expression(self):
        path = self.write("(add 1 " * 5000 + "0" + ")" * 5000 + "\n42\n")
        sess = Session(self.error_handler, path, max_depth=100000)

        with redirect_stdout(io.StringIO()):
            sess.run()

        self.assertEqual([1], [line_num for line_num, __, __ in sess.failures])
        self.assertIsInstance(sess.failures[0][-1], ResourceError)
        self.assertEqual([(2, "42", 42)], sess.results)

    def test_file_unbalanced(self):
        path = self.write("(add 1\n2\n")
        sess = Session(self.error_handler, path)
        self.assertEqual({1: "(add 1 2"}, sess.to_eval)

        with redirect_stdout(io.StringIO()):
            sess.run()
        self.assertIsInstance(sess.failures[0][-1], LetSyntaxError)

    def test_missing_file(self):
        with self.assertRaises(GenericException):
            Session(self.error_handler, os.path.join(tempfile.gettempdir(), "does-not-exist.lc"))


class ShellTestCase(unittest.TestCase):

    def setUp(self):
        self.sess = Session(ErrorHandler(), Session.SH_FILE, cmd_line=True)
        self.shell = Shell(self.sess)

    def test_default(self):
        out = io.StringIO()
        with redirect_stdout(out):
            self.shell.onecmd("(let x 2 y 3 (mult x y))")
            self.shell.onecmd("42")
        self.assertEqual("6\n42\n", out.getvalue())

    def test_error_is_not_fatal(self):
        out = io.StringIO()
        with redirect_stdout(out):
            self.shell.onecmd("(foo 1 2)")
            self.shell.onecmd("(add 1 2)")
        self.assertIn("unknown operator or keyword", out.getvalue())
        self.assertTrue(out.getvalue().endswith("3\n"))
        self.assertFalse(self.sess.error_handler.fatal)

    def test_continuation(self):
        out = io.StringIO()
        with redirect_stdout(out):
            self.shell.onecmd("(add 1")
            self.assertEqual(Shell.secondary_prompt, self.shell.prompt)
            self.shell.onecmd("2)")
        self.assertEqual(Shell.prompt, self.shell.prompt)
        self.assertEqual("3\n", out.getvalue())

    def test_exit(self):
        self.assertTrue(self.shell.onecmd("exit"))
        with redirect_stdout(io.StringIO()):
            self.assertTrue(self.shell.onecmd("EOF"))
        self.assertFalse(self.shell.onecmd(""))


if __name__ == '__main__':
    unittest.main()
