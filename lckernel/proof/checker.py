"""Proofs about kernel terms and the checker that verifies them.

A Proof is a witness: the inputs of a claim and the outcome it claims. Verifying a proof never trusts the outcome, it
re-derives it from the expression being checked and compares structurally, so a proof costs as much to check as it did
to produce. The one exception is Normalization with recorded steps, where every intermediate reduct is checked as well.

verify_proof returns False for anything that doesn't hold (stale, mismatched or forged witnesses, or things that
aren't proofs at all). The only generator that can refuse is prove_alpha_equivalence, which raises NotAlphaEquivalent.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Tuple

from lckernel.lang.error import GenericException
from lckernel.pure.evaluator import EvalResult, eval_empty
from lckernel.pure.kernel import beta_reduce, normalize, prove_kernel_consistency, reductions
from lckernel.pure.lexical import LambdaTerm


class NotAlphaEquivalent(GenericException):
    """Raised by prove_alpha_equivalence when the two terms differ."""

    def __init__(self, expr1, expr2):
        super().__init__("'{}' and '{}' are not α-equivalent", [expr1, expr2], diagnosis=False)
        self.expr1 = expr1
        self.expr2 = expr2


class Proof(ABC):
    """Superclass of all proof witnesses."""

    @abstractmethod
    def check(self, expr):
        """Whether this proof holds for expr. Assumes expr is a LambdaTerm; see verify_proof."""


@dataclass(frozen=True)
class AlphaEquivalence(Proof):
    """expr1 ≡ expr2. Independent of the expression it is checked against."""
    expr1: LambdaTerm
    expr2: LambdaTerm

    def check(self, expr):
        return isinstance(self.expr1, LambdaTerm) and self.expr1 == self.expr2

    def __str__(self):
        return f"α-equivalence: {self.expr1} ≡ {self.expr2}"


@dataclass(frozen=True)
class BetaReduction(Proof):
    """original → reduced in one normal-order step."""
    original: LambdaTerm
    reduced: LambdaTerm

    def check(self, expr):
        return beta_reduce(expr) == self.reduced

    def __str__(self):
        return f"β-reduction: {self.original} → {self.reduced}"


@dataclass(frozen=True)
class Evaluation(Proof):
    """expr ⇒ result under the empty environment."""
    expr: LambdaTerm
    result: EvalResult

    def check(self, expr):
        return eval_empty(expr) == self.result

    def __str__(self):
        return f"evaluation: {self.expr} ⇒ {self.result}"


@dataclass(frozen=True)
class Normalization(Proof):
    """expr →* result. steps, when recorded, are the intermediate reducts after expr, ending with result."""
    expr: LambdaTerm
    result: LambdaTerm
    steps: Tuple[LambdaTerm, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "steps", tuple(self.steps))

    def check(self, expr):
        if normalize(expr) != self.result:
            return False
        if not self.steps:
            return True

        current = expr
        for step in self.steps:
            if beta_reduce(current) != step:
                return False
            current = step
        return current == self.result

    def __str__(self):
        return f"normalization: {self.expr} →* {self.result} ({len(self.steps)} steps)"


@dataclass(frozen=True)
class Consistency(Proof):
    """The kernel's self-check battery passes. Independent of the expression it is checked against."""

    def check(self, expr):
        return prove_kernel_consistency()

    def __str__(self):
        return "consistency: kernel properties verified"


@dataclass(frozen=True)
class Composite(Proof):
    """All of proofs hold for the same expression. conclusion is a label only."""
    proofs: Tuple[Proof, ...] = field(default=())
    conclusion: str = ""

    def __post_init__(self):
        object.__setattr__(self, "proofs", tuple(self.proofs))

    def check(self, expr):
        return verify_proof(self, expr)

    def __str__(self):
        return f"composite proof ({len(self.proofs)} subproofs): {self.conclusion}"


@dataclass(frozen=True)
class ProvenExpr:
    """A term bundled with a proof about it."""
    expr: LambdaTerm
    proof: Proof

    def verify(self):
        return verify_proof(self.proof, self.expr)

    def __str__(self):
        return f"{self.expr} [{self.proof}]"


def prove_alpha_equivalence(expr1, expr2):
    """Returns AlphaEquivalence(expr1, expr2), raising NotAlphaEquivalent if expr1 != expr2."""
    if expr1 != expr2:
        raise NotAlphaEquivalent(expr1, expr2)
    return AlphaEquivalence(expr1, expr2)


def prove_beta_reduction(expr):
    return BetaReduction(expr, beta_reduce(expr))


def prove_evaluation(expr):
    return Evaluation(expr, eval_empty(expr))


def prove_normalization(expr, trace=False):
    """Returns Normalization(expr, normalize(expr)). With trace, every intermediate reduct is recorded in steps."""
    if not trace:
        return Normalization(expr, normalize(expr))

    steps = tuple(reductions(expr))[1:]
    return Normalization(expr, steps[-1] if steps else expr, steps)


def prove_consistency():
    """Returns Consistency(). The battery runs when the proof is verified, not here."""
    return Consistency()


def verify_proof(proof, expr):
    """Re-derives proof's claim for expr and returns whether it matches. Never raises on bad proofs. Composites are
    flattened with an explicit stack, so nesting depth is unbounded.
    """
    if not isinstance(expr, LambdaTerm):
        return False

    pending = [proof]
    while pending:
        proof = pending.pop()
        if not isinstance(proof, Proof):
            return False
        if isinstance(proof, Composite):
            pending.extend(reversed(proof.proofs))
        elif not proof.check(expr):
            return False
    return True


def attach_proof(expr, proof):
    return ProvenExpr(expr, proof)
