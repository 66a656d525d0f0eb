"""
Injected randomness.

The engine only ever asks for "a random index in [0, n)". A fixed seed makes
the traversal order, and therefore the whole partition, reproducible.
"""
import math
from typing import Callable, Protocol

import numpy as np


class RandomIndex(Protocol):
    def __call__(self, n: int) -> int:
        """Return an integer in ``[0, n)``."""


def create_random_index(rng=None) -> RandomIndex:
    """
    Build a random index function from a random source.

    Parameters
    ----------
    rng : None, int, np.random.Generator, np.random.RandomState or callable
        - None: fresh non-deterministic generator
        - int: seed of a new ``np.random.default_rng``
        - numpy generator or RandomState: used as is
        - callable returning floats in [0, 1), e.g. ``random.Random(42).random``

    Returns
    -------
    random_index : callable
        Function mapping ``n`` to an integer in ``[0, n)``
    """
    if rng is None or (isinstance(rng, (int, np.integer)) and not isinstance(rng, bool)):
        generator = np.random.default_rng(rng)
        return lambda n: int(generator.integers(n))

    if isinstance(rng, np.random.Generator):
        return lambda n: int(rng.integers(n))

    if isinstance(rng, np.random.RandomState):
        return lambda n: int(rng.randint(n))

    if callable(rng):
        return _from_float_source(rng)

    raise TypeError(f"Unsupported random source: {type(rng).__name__}")


def _from_float_source(rng: Callable[[], float]) -> RandomIndex:
    def random_index(n):
        # guards against sources returning exactly 1.0
        return min(int(math.floor(rng() * n)), n - 1)

    return random_index
