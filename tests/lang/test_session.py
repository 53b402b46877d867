import contextlib
import io
import os
import tempfile
import unittest

from lckernel import main
from lckernel.lang.error import ErrorHandler, GenericException
from lckernel.lang.reader import TermSyntaxError
from lckernel.lang.session import Session
from lckernel.lang.shell import Shell
from lckernel.numerical import SUCC, cnumber
from lckernel.pure.kernel import CONSTANT, OMEGA
from lckernel.pure.lexical import app, lam, var

SOURCE = """\
;; identity applied to a free variable
(λx.0 5)
λx.λx.1 ;; K
((λx.λx.1
  0) 1)
"""


class SessionTestCase(unittest.TestCase):

    def setUp(self):
        self.stream = io.StringIO()
        self.error_handler = ErrorHandler(fatal=False, stream=self.stream)
        self.tmpdir = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.tmpdir.cleanup()

    def write(self, text, name="terms.lc"):
        path = os.path.join(self.tmpdir.name, name)
        with open(path, "w", encoding="utf-8") as file:
            file.write(text)
        return path

    def run_file(self, text, **kwargs):
        sess = Session(self.error_handler, self.write(text), **kwargs)
        sess.run()
        return sess.results

    def test_modes(self):
        cases = {
            "normalize": ["5", "λx.λx.1", "0"],
            "reduce": ["5", "λx.λx.1", "(λx.1 1)"],
            "eval": ["5", "λx.λx.1", "0"],
        }
        for mode, expected in cases.items():
            self.assertEqual(expected, self.run_file(SOURCE, mode=mode), mode)

    def test_eval_closure(self):
        self.assertEqual(["λx.1", "(0 1)"], self.run_file("(λx.λx.1 0)\n(0 1)\n", mode="eval"))

    def test_line_numbers(self):
        sess = Session(self.error_handler, self.write(SOURCE))
        self.assertEqual([2, 3, 4], list(sess.to_exec))
        self.assertEqual("((λx.λx.1 0) 1)", sess.to_exec[4][0])

    def test_numerals(self):
        source = f"({SUCC} {cnumber(2)})\n{cnumber(0)}\nλx.0\n"
        self.assertEqual(["3", "0", "λx.0"], self.run_file(source, numerals=True))
        self.assertEqual([str(cnumber(3)), str(cnumber(0)), "λx.0"], self.run_file(source))

    def test_prove(self):
        results = self.run_file("(λx.0 5)\n", prove=True)
        self.assertEqual(["5\n  normalization: (λx.0 5) →* 5 (1 steps)"], results)

        results = self.run_file("(λx.0 5)\n", mode="eval", prove=True)
        self.assertEqual(["5\n  evaluation: (λx.0 5) ⇒ 5"], results)
        self.assertNotIn("failed to verify", self.stream.getvalue())

    def test_execute(self):
        term = app(app(CONSTANT, var(0)), var(1))
        sess = Session(self.error_handler, Session.SH_FILE, cmd_line=True)
        self.assertEqual((var(0), None), sess.execute(term))
        self.assertEqual((OMEGA, None), sess.execute(OMEGA))

        sess.prove = True
        result, proof = sess.execute(term)
        self.assertEqual(var(0), result)
        self.assertEqual((app(lam(var(1)), var(1)), var(0)), proof.steps)

    def test_trace(self):
        self.error_handler.verbose = True
        self.run_file("((λx.λx.1 0) 1)\n")
        trace = self.stream.getvalue()
        self.assertIn("(λx.1 1)", trace)
        self.assertEqual(2, trace.count("β"))

    def test_errors(self):
        self.assertRaises(TermSyntaxError, Session, self.error_handler, self.write("(0 1\n\n"))
        self.assertRaises(GenericException, Session, self.error_handler, os.path.join(self.tmpdir.name, "missing.lc"))
        self.assertRaises(GenericException, Session, self.error_handler, Session.SH_FILE)
        self.assertRaises(GenericException, Session, self.error_handler, self.write("0\n"), mode="simplify")

    def test_command_line(self):
        sess = Session(self.error_handler, Session.SH_FILE, cmd_line=True)
        self.assertFalse(self.error_handler.fatal)

        sess.add("(λx.0 3)", 1)
        sess.run()
        self.assertEqual({}, sess.to_exec)
        self.assertEqual("3", sess.pop())
        self.assertEqual([], sess.results)

    def test_preprocess_line(self):
        cases = [
            (("(0 1) ;; comment", 1, False), ("(0 1)", False)),
            (("  ((0 ", 1, False), ("((0", True)),
            ((";; only a comment", 1, False), ("", False)),
        ]
        for args, expected in cases:
            self.assertEqual(expected, Session.preprocess_line(*args))

        exprs = []
        __, add_to_prev = Session.preprocess_line("(0", 1, False, exprs)
        Session.preprocess_line("1)", 2, add_to_prev, exprs)
        self.assertEqual([("(0 1)", 1)], exprs)


class ShellTestCase(unittest.TestCase):

    def setUp(self):
        self.stdout = io.StringIO()
        self.stream = io.StringIO()
        error_handler = ErrorHandler(stream=self.stream)
        self.shell = Shell(Session(error_handler, Session.SH_FILE, cmd_line=True), stdout=self.stdout)

    def test_commands(self):
        self.shell.onecmd("(λx.0 5)")
        self.shell.onecmd("reduce ((λx.λx.1 0) 1)")
        self.shell.onecmd("eval (λx.λx.1 0)")
        self.shell.onecmd("normalize ((λx.λx.1 0) 1)")
        self.assertEqual(["5", "(λx.1 1)", "λx.1", "0"], self.stdout.getvalue().splitlines())

    def test_prove(self):
        self.shell.onecmd("prove (λx.0 5)")
        self.assertEqual("5\n  normalization: (λx.0 5) →* 5 (1 steps)\n", self.stdout.getvalue())
        self.assertFalse(self.shell.sess.prove)

    def test_encode(self):
        self.shell.onecmd("encode λx.0")
        self.assertEqual("02 01 00 00 00 00 00 00 00 00\n", self.stdout.getvalue())

    def test_continuation(self):
        self.shell.onecmd("(λx.0")
        self.assertEqual(self.shell.secondary_prompt, self.shell.prompt)
        self.shell.onecmd("7)")
        self.assertEqual("> ", self.shell.prompt)
        self.assertEqual("7\n", self.stdout.getvalue())

    def test_errors_are_not_fatal(self):
        self.shell.onecmd("0 1)")
        self.shell.onecmd("λx 0")
        self.shell.onecmd("encode λx")
        self.assertEqual("", self.stdout.getvalue())
        self.assertEqual(3, self.stream.getvalue().count("error: "))

        self.shell.onecmd("0")
        self.assertEqual("0\n", self.stdout.getvalue())

    def test_exit(self):
        self.assertTrue(self.shell.onecmd("exit"))
        self.assertTrue(self.shell.onecmd("EOF"))


class MainTestCase(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmpdir.name, "terms.lc")
        with open(self.path, "w", encoding="utf-8") as file:
            file.write(SOURCE)

    def tearDown(self):
        self.tmpdir.cleanup()

    def run_main(self, *argv):
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            main.main([self.path, *argv])
        return out.getvalue()

    def test_file(self):
        self.assertEqual("5\nλx.λx.1\n0\n", self.run_main())
        self.assertEqual("5\nλx.λx.1\n(λx.1 1)\n", self.run_main("--mode", "reduce"))

    def test_prove(self):
        self.assertIn("normalization: ((λx.λx.1 0) 1) →* 0 (2 steps)", self.run_main("--prove"))

    def test_fatal_error(self):
        with open(self.path, "w", encoding="utf-8") as file:
            file.write("(0 1\n")
        with contextlib.redirect_stdout(io.StringIO()) as out, self.assertRaises(SystemExit) as context:
            main.main([self.path])
        self.assertEqual(1, context.exception.code)
        self.assertIn("mismatched parentheses", out.getvalue())


if __name__ == '__main__':
    unittest.main()
