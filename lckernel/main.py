"""Runs the λ-calculus kernel over a file of terms, or in command-line mode. Also uses the error handling context
manager. Called from the lckernel console script.

Basic program flow:
    1. Reader: parses each statement's display notation into a term (lang/reader.py)
    2. Kernel: normalizes, reduces one step or evaluates it (pure/)
    3. Proof checker: optionally proves and re-verifies the result (proof/checker.py)

Python version must be >=3.6, because error handling requires that dicts are insertion-ordered.
"""

import argparse
import sys

from lckernel.lang.error import ErrorHandler
from lckernel.lang.session import Session
from lckernel.lang.shell import Shell


def build_parser():
    parser = argparse.ArgumentParser(prog="lckernel", description="De Bruijn λ-calculus kernel")
    parser.add_argument("file", help="file of terms to run (if empty, goes to command-line mode)", nargs="?")
    parser.add_argument("--mode", choices=Session.MODES, default="normalize",
                        help="what to do with each term (default: normalize)")
    parser.add_argument("--trace", action="store_true", help="print every reduction step")
    parser.add_argument("--prove", action="store_true", help="attach, verify and print a proof of every result")
    parser.add_argument("--numerals", action="store_true", help="print Church numerals as numbers")
    return parser


def main(argv=None):
    """Runs the kernel. Called from the lckernel console script."""
    assert sys.version_info >= (3, 6), "lckernel cannot be run with python < 3.6"

    with ErrorHandler() as error_handler:
        args = build_parser().parse_args(argv)
        error_handler.verbose = args.trace
        options = dict(mode=args.mode, prove=args.prove, numerals=args.numerals)

        if args.file is not None:
            sess = Session(error_handler, args.file, cmd_line=False, **options)
            sess.run()

            for result in sess.results:
                print(result)

        else:
            Shell(Session(error_handler, Session.SH_FILE, cmd_line=True, **options)).cmdloop()


if __name__ == "__main__":
    main()
