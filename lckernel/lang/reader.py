"""Reads terms written in the kernel's display notation back into LambdaTerms, for the CLI and shell. This is not a
surface language: there are no names, definitions or numerals, only what str(term) prints, plus a few conveniences.

```
<term>     ::= <index>                  ; decimal De Bruijn index
             | <binder> "." <term>      ; abstraction; the body is a single <term>, so "(λx.0 1)" applies λx.0 to 1
             | "(" <term>+ ")"          ; grouping/application, associating by left: (a b c) = ((a b) c)
<binder>   ::= ("λ" | "\") <letter>*   ; the name is decoration only: λx, λy and λ all bind index 0
```

A whole input may also be a bare sequence of terms, read like a parenthesized one.
"""

import re

from lckernel.lang.error import GenericException
from lckernel.pure.lexical import Abstraction, Application, Variable


class TermSyntaxError(GenericException):
    """Raised when an expr isn't valid display notation. start/end point at the offending characters."""


class Reader:
    """Tokenizes and parses a single expr."""
    TOKENS = re.compile(r"(?P<space>\s+)|(?P<open>\()|(?P<close>\))|(?P<binder>[λ\\][A-Za-z_]*)|(?P<dot>\.)"
                        r"|(?P<index>\d+)")

    def __init__(self, expr):
        self.expr = expr
        self.tokens = list(self.tokenize(expr))
        self.pos = 0

    @staticmethod
    def tokenize(expr):
        """Yields (kind, text, start) for every non-whitespace token in expr."""
        idx = 0
        while idx < len(expr):
            match = Reader.TOKENS.match(expr, idx)
            if match is None:
                raise TermSyntaxError("'{}' contains unexpected character '{}'", (expr, expr[idx]), start=idx,
                                      end=idx + 1)
            if match.lastgroup != "space":
                yield match.lastgroup, match.group(), idx
            idx = match.end()

    def _next(self):
        token = self.tokens[self.pos] if self.pos < len(self.tokens) else None
        self.pos += 1
        return token

    def _error(self, msg, token):
        if token is None:
            raise TermSyntaxError(msg, self.expr, start=max(len(self.expr) - 1, 0))
        __, text, start = token
        raise TermSyntaxError(msg, (self.expr, text), start=start, end=start + len(text))

    def read(self):
        """Parses the whole expr, raising TermSyntaxError if anything is left over or missing.

        Works on an explicit stack of open groups and pending binders: a binder waits for the next complete term to
        become its body, a group folds each complete term into its application.
        """
        if not self.tokens:
            raise TermSyntaxError("λ-term cannot be empty", self.expr, diagnosis=False)

        frames = [_Group(None)]  # the whole input is an implicit group
        while self.pos < len(self.tokens):
            token = self._next()
            kind, text, __ = token

            if kind == "index":
                term = Variable(int(text))

            elif kind == "binder":
                dot = self._next()
                if dot is None or dot[0] != "dot":
                    self._error("'{}' has a bind without a declarator", token)
                frames.append(token)
                continue

            elif kind == "open":
                frames.append(_Group(token))
                continue

            elif kind == "close":
                group = frames[-1]
                if not isinstance(group, _Group) or group.open is None or group.term is None:
                    self._error("'{}' has mismatched parentheses", token)
                frames.pop()
                term = group.term

            else:
                self._error("'{}' has declarator before bind", token)

            while not isinstance(frames[-1], _Group):
                frames.pop()
                term = Abstraction(term)
            frames[-1].add(term)

        if not isinstance(frames[-1], _Group):
            self._error("'{}' ends where a λ-term was expected", None)
        if len(frames) > 1:
            self._error("'{}' has mismatched parentheses", frames[-1].open)
        return frames[0].term


class _Group:
    """An open parenthesis (or the whole input, when open is None) and the application read inside it so far."""
    __slots__ = ("open", "term")

    def __init__(self, open_token):
        self.open = open_token
        self.term = None

    def add(self, term):
        """Applies what has been read so far to term, associating by left."""
        self.term = term if self.term is None else Application(self.term, term)


def read(expr):
    """Returns the LambdaTerm written in expr."""
    return Reader(expr).read()
