# disc_world/rng.py

"""
================================================================================
DETERMINISTIC GENERATOR
================================================================================
A linear congruential generator used by every procedural step that needs
randomness. It is passed explicitly to each builder so that the order in which
draws are consumed is part of the builder's contract.

Data Contract:
---------------
- Inputs (on initialization):
    - seed (int): A 32-bit unsigned starting state.
- Public Methods:
    - next(): Advances the state and returns a float in [0, 1).
    - range(a, b): Returns a float in [a, b) built from next().
- Public Properties:
    - state (int): The current raw 32-bit state.
    - draws (int): The number of values drawn so far.
- Side Effects: None beyond its own state.
- Invariants: Two instances with the same seed produce bit-identical
  sequences for the same call sequence.
================================================================================
"""

from . import config as DEFAULTS


class SeededRandom:
    """A process-independent LCG: seed = (seed * a + c) mod 2^32."""

    def __init__(self, seed: int = DEFAULTS.DEFAULT_SEED):
        if isinstance(seed, bool) or not isinstance(seed, int):
            raise ValueError(f"Seed must be an integer, got {seed!r}")
        if not 0 <= seed < DEFAULTS.LCG_MODULUS:
            raise ValueError(f"Seed must be a 32-bit unsigned integer, got {seed}")
        self._state = seed
        self._draws = 0

    @property
    def state(self) -> int:
        return self._state

    @property
    def draws(self) -> int:
        return self._draws

    def next(self) -> float:
        """Advances the recurrence and returns the new state scaled to [0, 1)."""
        self._state = (self._state * DEFAULTS.LCG_MULTIPLIER + DEFAULTS.LCG_INCREMENT) % DEFAULTS.LCG_MODULUS
        self._draws += 1
        return self._state / DEFAULTS.LCG_MODULUS

    def range(self, a: float, b: float) -> float:
        return a + self.next() * (b - a)

    def __repr__(self) -> str:
        return f"SeededRandom(state={self._state}, draws={self._draws})"
