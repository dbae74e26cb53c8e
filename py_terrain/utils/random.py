"""
Random number generation utilities.

Terrain code never touches Python's random module or NumPy's global
random state. Generators are created here and passed explicitly into
each pipeline stage.
"""

from typing import Optional, Union

from ..core.alea_prng import AleaPRNG

SeedLike = Union[str, int, float]

# opensimplex seeds are plain integers
_NOISE_SEED_RANGE = 2**31 - 1


def create_prng(
    seed: Optional[Union[SeedLike, AleaPRNG]] = None, default: SeedLike = "default"
) -> AleaPRNG:
    """
    Resolve a seed or an existing generator into an AleaPRNG.

    Args:
        seed: Seed value, an AleaPRNG to reuse as-is, or None
        default: Seed used when ``seed`` is None

    Returns:
        AleaPRNG instance
    """
    if isinstance(seed, AleaPRNG):
        return seed
    if seed is None or seed == "":
        seed = default
    return AleaPRNG(seed)


def derive_seed(prng: AleaPRNG) -> int:
    """
    Draw an integer seed for libraries that need one.

    Args:
        prng: Generator to draw from

    Returns:
        Non-negative integer seed
    """
    return int(prng.random() * _NOISE_SEED_RANGE)
