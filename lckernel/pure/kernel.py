"""Normal-order β-reduction over De Bruijn terms.

beta_reduce contracts exactly one redex: the leftmost outermost one, found by trying the whole term first, then an
Abstraction's body, then an Application's function, then its argument. normalize iterates beta_reduce to a fixpoint.
Neither carries a step bound: a host that needs one should pull from reductions() with its own limit, e.g.
`itertools.islice(reductions(term), fuel)`.
"""

from lckernel.pure.lexical import Abstraction, Application, LambdaTerm, app, free_indices, lam, shift, subst, var


def contract(redex):
    """Contracts the redex App(Lam(body), arg) to [arg/0]body. Raises ValueError if redex isn't one."""
    if not isinstance(redex, LambdaTerm) or not redex.is_redex:
        raise ValueError(f"'{redex}' is not a β-redex")
    return subst(redex.function.body, 0, redex.argument)


def find_redex(term):
    """Returns (redex, trail) for the leftmost outermost redex in term, or (None, None) if term is in normal form.
    trail is a linked list of (parent, position, parent's trail) leading back up to term, used by _plug.
    """
    stack = [(term, None)]
    while stack:
        node, trail = stack.pop()
        if node.is_redex:
            return node, trail
        if isinstance(node, Abstraction):
            stack.append((node.body, (node, "body", trail)))
        elif isinstance(node, Application):
            stack.append((node.argument, (node, "argument", trail)))
            stack.append((node.function, (node, "function", trail)))
    return None, None


def _plug(node, trail):
    """Rebuilds the path described by trail around node, returning the new root."""
    while trail is not None:
        parent, position, trail = trail
        if position == "body":
            node = Abstraction(node)
        elif position == "function":
            node = Application(node, parent.argument)
        else:
            node = Application(parent.function, node)
    return node


def has_redex(term):
    """Whether term contains a β-redex anywhere."""
    return find_redex(term)[0] is not None


def beta_reduce(term):
    """Performs one normal-order β-reduction step. Terms without a redex are returned unchanged."""
    redex, trail = find_redex(term)
    if redex is None:
        return term
    return _plug(contract(redex), trail)


def reductions(term):
    """Yields term and then each successive beta_reduce step, stopping after the first fixpoint. Infinite for terms that
    keep reducing to something new.
    """
    current = term
    while True:
        yield current
        reduced = beta_reduce(current)
        if reduced == current:
            return
        current = reduced


def normalize(term):
    """Reduces term until beta_reduce stops changing it. Does not terminate for terms without a normal form, except those
    that reduce straight back to themselves (e.g. Ω), which are their own fixpoint.
    """
    current = term
    while True:
        reduced = beta_reduce(current)
        if reduced == current:
            return current
        current = reduced


IDENTITY = lam(var(0))
CONSTANT = lam(lam(var(1)))
OMEGA = app(lam(app(var(0), var(0))), lam(app(var(0), var(0))))


def prove_kernel_consistency():
    """Runs a fixed battery of sanity checks on the kernel and returns whether all of them hold. Recomputed on every
    call; nothing is cached.
    """
    normalizing = [
        app(IDENTITY, var(1)),
        app(app(CONSTANT, var(0)), var(1)),
        app(lam(app(var(0), IDENTITY)), IDENTITY),
        lam(app(IDENTITY, app(var(1), var(0)))),
        app(app(CONSTANT, IDENTITY), OMEGA),
    ]
    single_steps = {
        app(IDENTITY, app(var(1), var(2))): app(var(1), var(2)),          # identity
        app(CONSTANT, var(0)): lam(var(1)),                               # no capture of the free 0
        app(lam(var(1)), var(5)): var(0),                                 # free index drops past the removed binder
        app(lam(lam(app(var(1), var(0)))), var(0)): lam(app(var(1), var(0))),
        app(app(CONSTANT, var(0)), var(1)): app(lam(var(1)), var(1)),     # outermost-leftmost first
    }
    non_redexes = [var(0), var(7), IDENTITY, app(var(0), var(1)), lam(app(var(2), lam(var(0))))]

    checks = [
        all(normalize(normalize(term)) == normalize(term) for term in normalizing),
        normalize(app(app(CONSTANT, var(0)), var(1))) == var(0),
        normalize(app(app(CONSTANT, IDENTITY), OMEGA)) == IDENTITY,
        all(beta_reduce(redex) == reduct for redex, reduct in single_steps.items()),
        all(beta_reduce(term) == term and normalize(term) == term for term in non_redexes),
        all(subst(shift(term, 0, 1), 0, var(9)) == term for term in normalizing + non_redexes),
        all(free_indices(beta_reduce(term)) <= free_indices(term) for term in normalizing + list(single_steps)),
        lam(var(0)) == lam(var(0)) and lam(var(0)) != lam(var(1)),
        beta_reduce(app(IDENTITY, var(0))) == beta_reduce(app(IDENTITY, var(0))),
    ]
    return all(checks)
