"""
RandomSource: the single supplier of randomness for a simulation session.

Every bit, basis and probability draw made by the engine goes through one
of these, so a seeded source reproduces a run exactly.  Not suitable for
cryptographic use.
"""
import random
from typing import Optional

from .qubit import BASES, Basis


class RandomSource:
    """Uniform bits, uniform bases and Bernoulli trials over a ``random.Random``."""

    def __init__(self, seed: Optional[int] = None, rng: Optional[random.Random] = None):
        self._rng = rng if rng is not None else random.Random(seed)

    def bit(self) -> int:
        return self._rng.randint(0, 1)

    def basis(self) -> Basis:
        return self._rng.choice(BASES)

    def chance(self, probability: float) -> bool:
        """True with the given probability.  Always consumes exactly one draw."""
        return self._rng.random() < probability

    def __repr__(self) -> str:
        return f"RandomSource(rng={self._rng!r})"
