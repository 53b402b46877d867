"""Call-by-value evaluation of De Bruijn terms into values or closures.

An Environment maps indices to the terms bound to them. Evaluating an Abstraction captures the current Environment in
a Closure; applying a Closure binds the argument at index 0 of the captured Environment (everything else moves up one)
and evaluates the body there. Unbound variables and applications of non-functions are stuck, not errors: they come back
as Values.

Evaluation runs on an explicit continuation stack, so deeply nested applications don't hit the recursion limit.
"""

from collections.abc import Mapping
from dataclasses import dataclass

from lckernel.pure.kernel import has_redex
from lckernel.pure.lexical import Abstraction, Application, LambdaTerm, Variable, map_variables, shift


class Environment(Mapping):
    """Immutable mapping of De Bruijn index to bound term. insert and extend return new Environments, so capturing one
    in a Closure is already a snapshot.
    """
    __slots__ = ("_bindings",)

    def __init__(self, bindings=None):
        bindings = dict(bindings or {})
        for index, term in bindings.items():
            if isinstance(index, bool) or not isinstance(index, int) or index < 0:
                raise ValueError(f"environment keys must be non-negative ints, got {index!r}")
            if not isinstance(term, LambdaTerm):
                raise TypeError(f"environment values must be λ-terms, got {term!r}")
        self._bindings = bindings

    def __getitem__(self, index):
        return self._bindings[index]

    def __iter__(self):
        return iter(self._bindings)

    def __len__(self):
        return len(self._bindings)

    def __hash__(self):
        return hash(frozenset(self._bindings.items()))

    def __repr__(self):
        return f"Environment({self._bindings!r})"

    def lookup(self, index):
        """Returns the term bound to index, or None if index is unbound."""
        return self._bindings.get(index)

    def insert(self, index, term):
        """Returns a copy of this Environment with index bound to term."""
        return Environment({**self._bindings, index: term})

    def extend(self, term):
        """Returns a copy of this Environment with term bound at the fresh index 0 and every existing binding moved up
        by one, i.e. the Environment seen from one binder further in.
        """
        extended = {index + 1: bound for index, bound in self._bindings.items()}
        extended[0] = term
        return Environment(extended)

    def is_empty(self):
        return not self._bindings


class EvalResult:
    """Superclass of the two outcomes of evaluation."""
    __slots__ = ()


@dataclass(frozen=True)
class Value(EvalResult):
    """A plain term: a variable, a stuck application, or something looked up in the environment."""
    term: LambdaTerm

    def __str__(self):
        return str(self.term)


@dataclass(frozen=True)
class Closure(EvalResult):
    """An Abstraction's body paired with the Environment it was evaluated in."""
    captured_environment: Environment
    body: LambdaTerm

    def __str__(self):
        return str(reify(self))


def reify(result):
    """Returns the term an EvalResult stands for. For a Closure that is its Abstraction with the captured bindings
    substituted for the body's free indices; indices the environment doesn't bind are left as they are.
    """
    if isinstance(result, Value):
        return result.term

    environment = result.captured_environment
    if environment.is_empty():
        return Abstraction(result.body)

    def replace(variable, depth):
        bound = environment.lookup(variable.index - depth) if variable.index >= depth else None
        if bound is None:
            return variable
        return shift(bound, 0, depth)

    return map_variables(Abstraction(result.body), replace)


def as_closure(result):
    """Returns result as a Closure if it can be applied, else None. A Value holding an Abstraction is a function too:
    terms in an environment are closed over nothing, so it becomes a Closure over the empty Environment.
    """
    if isinstance(result, Closure):
        return result
    if isinstance(result.term, Abstraction):
        return Closure(Environment(), result.term.body)
    return None


class _Argument:
    """Continuation: the function position has been evaluated, evaluate the argument next."""
    __slots__ = ("argument", "environment")

    def __init__(self, argument, environment):
        self.argument = argument
        self.environment = environment


class _Apply:
    """Continuation: the argument has been evaluated, apply function_result to it."""
    __slots__ = ("function_result",)

    def __init__(self, function_result):
        self.function_result = function_result


def evaluate(environment, term):
    """Evaluates term under environment (call-by-value) and returns a Value or Closure. Never fails; see module
    docstring.
    """
    continuations = []
    while True:
        if isinstance(term, Variable):
            bound = environment.lookup(term.index)
            result = Value(term if bound is None else bound)
        elif isinstance(term, Abstraction):
            result = Closure(environment, term.body)
        else:
            continuations.append(_Argument(term.argument, environment))
            term = term.function
            continue

        while continuations:
            frame = continuations.pop()
            if isinstance(frame, _Argument):
                continuations.append(_Apply(result))
                environment, term = frame.environment, frame.argument
                break

            closure = as_closure(frame.function_result)
            if closure is not None:
                environment = closure.captured_environment.extend(reify(result))
                term = closure.body
                break
            result = Value(Application(reify(frame.function_result), reify(result)))
        else:
            return result


def eval_empty(term):
    """Evaluates term under the empty Environment."""
    return evaluate(Environment(), term)


def is_normal_form(result):
    """Whether result is fully evaluated: any Closure, or a Value whose term contains no β-redex."""
    if isinstance(result, Closure):
        return True
    return not has_redex(result.term)
