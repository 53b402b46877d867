"""Natural numbers encoded as Church numerals, in De Bruijn form: n is λf.λx.f (f (... (f x))), i.e. λλ(1 (1 (... 0))).
Arithmetic is done by the combinators below, so normalizing `(PLUS 2 3)` really exercises the kernel.

Source: https://en.wikipedia.org/wiki/Church_encoding#Calculation_with_Church_numerals
"""

from lckernel.pure.lexical import Abstraction, Application, Variable, app, lam, var


SUCC = lam(lam(lam(app(var(1), app(app(var(2), var(1)), var(0))))))              # λn.λf.λx.f (n f x)
PLUS = lam(lam(lam(lam(app(app(var(3), var(1)), app(app(var(2), var(1)), var(0)))))))  # λm.λn.λf.λx.m f (n f x)
MULT = lam(lam(lam(app(var(2), app(var(1), var(0))))))                           # λm.λn.λf.m (n f)


def cnumber(num):
    """Returns the Church numeral for natural number num (cnum = Church numeral)."""
    if isinstance(num, bool) or not isinstance(num, int) or num < 0:
        raise ValueError(f"expected natural number, got {num!r}")

    body = var(0)
    for __ in range(num):
        body = app(var(1), body)
    return lam(lam(body))


def number(cnum):
    """Returns the int encoded by Church numeral cnum. If cnum isn't a Church numeral, returns None."""
    if not isinstance(cnum, Abstraction) or not isinstance(cnum.body, Abstraction):
        return None

    num = 0
    nth_body = cnum.body.body
    while isinstance(nth_body, Application):
        if nth_body.function != Variable(1):
            return None
        nth_body = nth_body.argument
        num += 1

    return num if nth_body == Variable(0) else None


def numberify(term):
    """Returns str(term), or the number term encodes if it is a Church numeral."""
    num = number(term)
    return str(term) if num is None else str(num)
