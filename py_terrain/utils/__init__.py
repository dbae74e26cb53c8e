"""
Shared utilities.
"""

from .random import create_prng, derive_seed

__all__ = ["create_prng", "derive_seed"]
