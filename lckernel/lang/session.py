"""Session control for the kernel front ends. Reads statements (terms in display notation) from a file or the shell,
runs each through the kernel in the selected mode, and optionally proves and verifies the result.
"""

import itertools

from lckernel.lang.error import GenericException
from lckernel.lang.reader import read
from lckernel.numerical import numberify
from lckernel.proof.checker import attach_proof, prove_beta_reduction, prove_evaluation, prove_normalization
from lckernel.pure.evaluator import reify
from lckernel.pure.kernel import reductions


class Session:
    """Governs a kernel session: parsed statements waiting to run, and the printable results of those that ran."""
    SH_FILE = "<in>"  # command-line interpreter filename
    COMMENT = ";;"
    MODES = ("normalize", "reduce", "eval")

    def __init__(self, error_handler, path, mode="normalize", prove=False, numerals=False, cmd_line=False):
        if mode not in Session.MODES:
            raise GenericException("unknown mode '{}'", mode, diagnosis=False)

        self.error_handler = error_handler
        self.error_handler.register_file(path)

        self.path = path          # used for error messages
        self.mode = mode          # what to do with each statement
        self.prove = prove        # whether to attach and verify a proof of each result
        self.numerals = numerals  # whether to print Church numerals as numbers
        self.cmd_line = cmd_line  # whether or not in command-line mode

        self.to_exec = {}  # dict of line num: (expr, term) to execute
        self.results = []  # printable results, oldest first

        if self.cmd_line:
            self.error_handler.fatal = False

        if path != Session.SH_FILE:
            exprs = []
            add_to_prev = False

            try:
                with open(path, "r", encoding="utf-8") as file:
                    for line_num, line in enumerate(file):
                        __, add_to_prev = self.preprocess_line(line, line_num + 1, add_to_prev, exprs)
            except OSError:
                raise GenericException("'{}' could not be opened", path, diagnosis=False)

            for expr, line_num in exprs:
                self.add(expr, line_num)

        elif not cmd_line:
            raise GenericException("'<in>' is a reserved filename", diagnosis=False)

    @staticmethod
    def preprocess_line(line, line_num, add_to_prev, exprs=None):
        """Preprocesses a line from a file or command-line. In command-line mode, exprs can be ignored (used to keep
        track of file's exprs), but add_to_prev will indicate whether a line continuation is necessary. Returns
        updated value of line and add_to_prev. Must be called before calling add.
        """
        if Session.COMMENT in line:
            line = line[:line.index(Session.COMMENT)]  # get rid of comments

        line = line.strip()
        if exprs is not None:
            if add_to_prev and exprs:
                prev, prev_num = exprs.pop()
                line = f"{prev} {line}".strip()
                exprs.append((line, prev_num))
            elif line:
                exprs.append((line, line_num))

        return line, line.count("(") > line.count(")")

    def add(self, expr, line_num):
        """Parses expr and queues it to run. Evaluation is lazy and is delayed until run is called."""
        self.error_handler.register_line(self.path, expr, line_num)  # in case error is raised
        self.to_exec[line_num] = (expr, read(expr))
        self.error_handler.remove_line(self.path)  # error was not raised

    def display(self, term):
        return numberify(term) if self.numerals else str(term)

    def execute(self, term):
        """Runs term through the kernel in self.mode, reporting steps to the error handler. Returns (result, proof)
        where result is a term and proof proves it. Unless self.prove is set, normalize mode keeps no intermediate
        reducts and returns None for proof.
        """
        if self.mode == "normalize":
            if not self.prove:
                result = term
                for result in itertools.islice(reductions(term), 1, None):
                    self.error_handler.register_step("β", result)
                return result, None

            proof = prove_normalization(term, trace=True)
            for step in proof.steps:
                self.error_handler.register_step("β", step)
            return proof.result, proof

        elif self.mode == "reduce":
            proof = prove_beta_reduction(term)
            if proof.reduced != term:
                self.error_handler.register_step("β", proof.reduced)
            return proof.reduced, proof

        proof = prove_evaluation(term)
        self.error_handler.register_step("⇒", proof.result)
        return reify(proof.result), proof

    def run(self):
        """Runs this session's queued statements in order, appending what each one prints to self.results. Will raise
        any errors that are encountered.
        """
        for line_num, (expr, term) in list(self.to_exec.items()):
            self.error_handler.register_line(self.path, expr, line_num)

            try:
                result, proof = self.execute(term)

                output = self.display(result)
                if self.prove:
                    proven = attach_proof(term, proof)
                    if not proven.verify():
                        self.error_handler.warn("proof for '{}' failed to verify", expr)
                    output += f"\n  {proof}"
                self.results.append(output)
            finally:
                if self.cmd_line:
                    del self.to_exec[line_num]

            self.error_handler.remove_line(self.path)

    def pop(self):
        """Removes and returns the oldest unprinted result."""
        return self.results.pop(0)
