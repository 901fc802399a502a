"""
Random number source for the simulation.

Every stochastic draw in the engine goes through a RandomSource so tests can
pin the exact sequence with a seed.
"""

import math
import random
from typing import Optional


class RandomSource:
    """Uniform draws plus a Box-Muller standard normal variate."""

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._rng = random.Random(seed)

    def uniform(self) -> float:
        """Uniform draw in [0, 1)."""
        return self._rng.random()

    def uniform_range(self, low: float, high: float) -> float:
        return low + (high - low) * self.uniform()

    def choice_index(self, n: int) -> int:
        """Uniformly pick an index in [0, n)."""
        return int(math.floor(self.uniform() * n))

    def normal(self) -> float:
        """Standard normal variate via the Box-Muller transform."""
        u = 0.0
        v = 0.0
        while u == 0.0:
            u = self.uniform()
        while v == 0.0:
            v = self.uniform()
        return math.sqrt(-2.0 * math.log(u)) * math.cos(2.0 * math.pi * v)
