"""Pure lambda calculus terms with De Bruijn indices, plus the index shifting and substitution used by reduction.

The `pure` directory contains the kernel proper: terms, reduction, evaluation and the wire codec. Nothing in it prints,
and nothing in it fails on a well-formed term.

Formally, a term is

```
<λ-term> ::= <index>                    ; "variable": a natural number counting binders between it and its λ
           | "λx." <λ-term>             ; "abstraction": binds index 0 in its body
           | "(" <λ-term> " " <λ-term> ")"  ; "application": function then argument
```

Because variables are binder distances rather than names, alpha-equivalent terms are the same tree, so structural
equality (__eq__) is alpha-equivalence. Free variables are just indices that point past the outermost binder, which
means open terms are perfectly valid.

Terms can be nested far deeper than the interpreter's recursion limit (a Church numeral for 5000 is 5000 Applications
deep), so every traversal here walks an explicit stack instead of recursing.

Sources: https://en.wikipedia.org/wiki/De_Bruijn_index,
         Pierce, Types and Programming Languages, ch. 6 (shifting and substitution)
"""

from abc import ABC, abstractmethod


BINDER = "λx"  # display literal for every Abstraction, at every depth


class LambdaTerm(ABC):
    """Superclass for the three kinds of λ-term. Instances are immutable and compare/hash structurally."""
    __slots__ = ("_hash",)

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name):
        raise AttributeError(f"{type(self).__name__} is immutable")

    @property
    @abstractmethod
    def nodes(self):
        """Tuple of direct sub-terms, in display order."""

    @abstractmethod
    def rebuild(self, nodes):
        """Returns a term of the same kind as self with nodes replaced by the given sub-terms."""

    @property
    def is_redex(self):
        """Whether this term is itself a β-redex, i.e. App(Lam(_), _). Only Applications can be."""
        return False

    def walk(self):
        """Yields (term, depth) for self and every sub-term in pre-order, depth being the number of enclosing binders
        between self and the sub-term.
        """
        stack = [(self, 0)]
        while stack:
            term, depth = stack.pop()
            yield term, depth
            inner = depth + 1 if isinstance(term, Abstraction) else depth
            stack.extend((node, inner) for node in reversed(term.nodes))

    def __eq__(self, other):
        if not isinstance(other, LambdaTerm):
            return NotImplemented

        pending = [(self, other)]
        while pending:
            left, right = pending.pop()
            if left is right:
                continue
            if type(left) is not type(right):
                return False
            if isinstance(left, Variable):
                if left.index != right.index:
                    return False
            else:
                pending.extend(zip(left.nodes, right.nodes))
        return True

    def __hash__(self):
        try:
            return self._hash
        except AttributeError:
            pass

        hashes = []
        for term in _postorder(self):
            if isinstance(term, Variable):
                value = hash((Variable, term.index))
            elif isinstance(term, Abstraction):
                value = hash((Abstraction, hashes.pop()))
            else:
                argument = hashes.pop()
                value = hash((Application, hashes.pop(), argument))
            object.__setattr__(term, "_hash", value)
            hashes.append(value)
        return self._hash

    def __str__(self):
        """Display notation: see the module docstring."""
        parts = []
        stack = [self]
        while stack:
            term = stack.pop()
            if isinstance(term, str):
                parts.append(term)
            elif isinstance(term, Variable):
                parts.append(str(term.index))
            elif isinstance(term, Abstraction):
                parts.append(BINDER + ".")
                stack.append(term.body)
            else:
                parts.append("(")
                stack.extend([")", term.argument, " ", term.function])
        return "".join(parts)

    def __format__(self, format_spec):
        return format(str(self), format_spec)

    def __repr__(self):
        parts = []
        stack = [self]
        while stack:
            term = stack.pop()
            if isinstance(term, str):
                parts.append(term)
            elif isinstance(term, Variable):
                parts.append(f"Var({term.index})")
            elif isinstance(term, Abstraction):
                parts.append("Lam(")
                stack.extend([")", term.body])
            else:
                parts.append("App(")
                stack.extend([")", term.argument, ", ", term.function])
        return "".join(parts)


class Variable(LambdaTerm):
    """Variable: a De Bruijn index. Index i refers to the i-th enclosing binder (0 = innermost)."""
    __slots__ = ("index",)

    def __init__(self, index):
        if isinstance(index, bool) or not isinstance(index, int):
            raise ValueError(f"De Bruijn index must be an int, got {index!r}")
        if index < 0:
            raise ValueError(f"De Bruijn index must be non-negative, got {index}")
        object.__setattr__(self, "index", index)

    def __reduce__(self):
        return Variable, (self.index,)

    @property
    def nodes(self):
        return ()

    def rebuild(self, nodes):
        return self


class Abstraction(LambdaTerm):
    """Abstraction: a single-argument binder. Its argument is index 0 inside body."""
    __slots__ = ("body",)

    def __init__(self, body):
        if not isinstance(body, LambdaTerm):
            raise TypeError(f"abstraction body must be a λ-term, got {body!r}")
        object.__setattr__(self, "body", body)

    def __reduce__(self):
        return Abstraction, (self.body,)

    @property
    def nodes(self):
        return (self.body,)

    def rebuild(self, nodes):
        body, = nodes
        return self if body is self.body else Abstraction(body)


class Application(LambdaTerm):
    """Application of function to argument."""
    __slots__ = ("function", "argument")

    def __init__(self, function, argument):
        for node in (function, argument):
            if not isinstance(node, LambdaTerm):
                raise TypeError(f"application children must be λ-terms, got {node!r}")
        object.__setattr__(self, "function", function)
        object.__setattr__(self, "argument", argument)

    def __reduce__(self):
        return Application, (self.function, self.argument)

    @property
    def nodes(self):
        return (self.function, self.argument)

    def rebuild(self, nodes):
        function, argument = nodes
        if function is self.function and argument is self.argument:
            return self
        return Application(function, argument)

    @property
    def is_redex(self):
        return isinstance(self.function, Abstraction)


# short names, matching how terms are written in the literature and in error messages
Var = Variable
Lam = Abstraction
App = Application


def var(index):
    return Variable(index)


def lam(body):
    return Abstraction(body)


def app(function, argument):
    return Application(function, argument)


def _postorder(term):
    """Yields every sub-term of term children-first (left to right), ending with term itself."""
    stack = [(term, False)]
    while stack:
        node, expanded = stack.pop()
        if expanded or not node.nodes:
            yield node
        else:
            stack.append((node, True))
            stack.extend((child, False) for child in reversed(node.nodes))


def map_variables(term, replace):
    """Rebuilds term bottom-up with every Variable v swapped for replace(v, depth), where depth is the number of binders
    enclosing v inside term. Unchanged sub-trees are shared rather than copied, which is safe since terms are immutable.
    """
    stack = [(term, 0, False)]
    results = []
    while stack:
        node, depth, expanded = stack.pop()
        if isinstance(node, Variable):
            results.append(replace(node, depth))
        elif not expanded:
            stack.append((node, depth, True))
            inner = depth + 1 if isinstance(node, Abstraction) else depth
            stack.extend((child, inner, False) for child in reversed(node.nodes))
        else:
            count = len(node.nodes)
            children = results[-count:]
            del results[-count:]
            results.append(node.rebuild(children))
    return results.pop()


def shift(term, cutoff, amount):
    """Adds amount to every Variable with index >= cutoff (cutoff growing by one under each binder), i.e. to every
    variable that is free at cutoff. This is what has to happen to a term whenever it is moved across binders.
    Raises ValueError if a negative amount would push an index below zero.
    """
    if amount == 0:
        return term

    def replace(variable, depth):
        if variable.index >= cutoff + depth:
            return Variable(variable.index + amount)
        return variable

    return map_variables(term, replace)


def subst(body, target_index, replacement):
    """Capture-avoiding substitution [replacement/target_index]body for the binder owning target_index being removed:

    - Var(target_index) becomes replacement (shifted up by the number of binders crossed to get there),
    - Var(i) with i > target_index becomes Var(i - 1), since one binder level disappears,
    - Var(i) with i < target_index is untouched.

    Under each Abstraction the target and the replacement's free indices both move up by one.
    """
    shifted = {0: replacement}  # depth: replacement shifted by depth, computed once per depth

    def replace(variable, depth):
        target = target_index + depth
        if variable.index == target:
            if depth not in shifted:
                shifted[depth] = shift(replacement, 0, depth)
            return shifted[depth]
        elif variable.index > target:
            return Variable(variable.index - 1)
        return variable

    return map_variables(body, replace)


def free_indices(term):
    """Returns the set of free indices of term, measured from term's top level."""
    return {
        node.index - depth for node, depth in term.walk() if isinstance(node, Variable) and node.index >= depth
    }


def size(term):
    """Number of nodes in term."""
    return sum(1 for __ in term.walk())
