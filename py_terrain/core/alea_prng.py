"""
Alea pseudo-random number generator.

Based on Johannes Baagøe's Alea algorithm. Every stochastic step of the
terrain pipeline draws from one of these generators, so a seed string
reproduces the same terrain on every run.
"""

from typing import Mapping, Sequence, TypeVar

T = TypeVar("T")


def _uint32(n):
    """Convert to unsigned 32-bit integer."""
    return int(n) & 0xFFFFFFFF


class AleaPRNG:
    """
    Seedable Alea generator with a few sampling helpers.

    Accepts a seed string, a number, or an iterable of either.
    """

    def __init__(self, seed):
        """Initialize with seed string or number."""
        self.seed = seed
        self.call_count = 0

        if hasattr(seed, "__iter__") and not isinstance(seed, str):
            args = list(seed)
        else:
            args = [seed]

        mash_n = 0xEFC8249D

        def mash(data):
            nonlocal mash_n
            data = str(data)
            for char in data:
                mash_n = mash_n + ord(char)
                h = 0.02519603282416938 * mash_n
                mash_n = _uint32(h)
                h -= mash_n
                h *= mash_n
                mash_n = _uint32(h)
                h -= mash_n
                mash_n += h * 0x100000000  # 2^32
            return _uint32(mash_n) * 2.3283064365386963e-10  # 2^-32

        self.s0 = mash(" ")
        self.s1 = mash(" ")
        self.s2 = mash(" ")
        self.c = 1

        for arg in args:
            self.s0 -= mash(arg)
            if self.s0 < 0:
                self.s0 += 1
            self.s1 -= mash(arg)
            if self.s1 < 0:
                self.s1 += 1
            self.s2 -= mash(arg)
            if self.s2 < 0:
                self.s2 += 1

    def random(self) -> float:
        """Generate next random number in [0, 1)."""
        self.call_count += 1
        t = 2091639 * self.s0 + self.c * 2.3283064365386963e-10  # 2^-32
        self.s0 = self.s1
        self.s1 = self.s2
        self.c = int(t)
        self.s2 = t - self.c
        return self.s2

    def uniform(self, low: float, high: float) -> float:
        """Random float in [low, high)."""
        return low + self.random() * (high - low)

    def randint(self, low: int, high: int) -> int:
        """Random integer in [low, high], both ends inclusive."""
        return low + int(self.random() * (high - low + 1))

    def chance(self, probability: float) -> bool:
        """Return True with the given probability."""
        if probability >= 1:
            return True
        if probability <= 0:
            return False
        return self.random() < probability

    def choice(self, seq: Sequence[T]) -> T:
        """Choose a random element from a non-empty sequence."""
        if not seq:
            raise IndexError("Cannot choose from an empty sequence")
        return seq[int(self.random() * len(seq))]

    def weighted_choice(self, weights: Mapping[T, float]) -> T:
        """
        Choose a key from a mapping of non-negative weights.

        Keys are walked in insertion order, so the draw is reproducible for
        a given seed and mapping.

        Args:
            weights: Mapping of option to relative weight

        Returns:
            The chosen key
        """
        total = sum(max(0.0, w) for w in weights.values())
        if total <= 0:
            raise ValueError("Weights must contain at least one positive value")

        roll = self.random() * total
        cumulative = 0.0
        last = None
        for key, weight in weights.items():
            weight = max(0.0, weight)
            if weight == 0:
                continue
            cumulative += weight
            last = key
            if roll < cumulative:
                return key
        return last
