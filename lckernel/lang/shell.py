"""Handles interactive/command-line mode for the kernel. Uses cmd as backend."""

import cmd

from lckernel.lang.reader import read
from lckernel.pure.codec import encode


class Shell(cmd.Cmd):
    """De Bruijn λ-calculus kernel shell."""
    intro = "λ-calculus kernel :: De Bruijn indices\nType '?' or 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess

        self._tmp_line = ""
        self.line_num = 0

    def _run(self, line, mode=None, prove=None):
        """Runs line through the session, temporarily overriding its mode/prove settings."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            self.line_num += 1
            line, add_to_prev = self.sess.preprocess_line(self._tmp_line + " " + line, self.line_num, False)

            if add_to_prev:
                self._tmp_line = line
                self.prompt = self.secondary_prompt
                return

            self._tmp_line = ""
            self.prompt = self._tmp_prompt
            if not line:
                return

            saved = self.sess.mode, self.sess.prove
            self.sess.mode = mode or self.sess.mode
            self.sess.prove = self.sess.prove if prove is None else prove
            try:
                self.sess.add(line, self.line_num)
                self.sess.run()
            finally:
                self.sess.mode, self.sess.prove = saved

            while self.sess.results:
                print(self.sess.pop(), file=self.stdout)

    def default(self, line):
        """Runs a term in the session's mode."""
        self._run(line)

    def do_normalize(self, arg):
        """normalize <term>: reduce to normal form."""
        self._run(arg, mode="normalize")

    def do_reduce(self, arg):
        """reduce <term>: perform one normal-order β-reduction step."""
        self._run(arg, mode="reduce")

    def do_eval(self, arg):
        """eval <term>: evaluate call-by-value in the empty environment."""
        self._run(arg, mode="eval")

    def do_prove(self, arg):
        """prove <term>: run in the session's mode, then attach, verify and print a proof of the result."""
        self._run(arg, prove=True)

    def do_encode(self, arg):
        """encode <term>: print the binary encoding of a term as hex."""
        with self.sess.error_handler:
            print(encode(read(arg)).hex(" "), file=self.stdout)

    def do_help(self, arg):
        """Doesnt return docs for plain input, but rather a short intro."""
        if arg:
            return super().do_help(arg)
        print("Welcome to the λ-calculus kernel!\n\n"
              "Terms use De Bruijn indices: a variable is the number of binders between it \n"
              "and the λ that binds it. Try '(λx.0 5)': the identity applied to the free \n"
              "variable 5, which normalizes to '5'. Try 'λx.λx.1' for the constant function.\n\n"
              "Commands: normalize, reduce, eval, prove, encode, exit. Plain input runs in \n"
              "the mode the kernel was started with.", file=self.stdout)

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits kernel shell."""
        print(file=self.stdout)
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits kernel shell."""
        return True
