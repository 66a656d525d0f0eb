"""
Configuration constants and run options for Louvain community detection.

Options are an immutable value built once per call and threaded through
every component of a run.
"""
from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Callable, Optional, Union

import numpy as np

__all__ = [
    "COMMUNITY_ATTRIBUTE",
    "WEIGHT_ATTRIBUTE",
    "RESOLUTION",
    "WEIGHTED",
    "FAST_LOCAL_MOVES",
    "RANDOM_WALK",
    "TIE_EPSILON",
    "DELTA_COMPUTATION",
    "DeltaComputation",
    "RandomSource",
    "LouvainOptions",
    "make_options",
]

# =============================================================================
# ATTRIBUTE NAMES
# =============================================================================

# Node attribute written by the assign mode
COMMUNITY_ATTRIBUTE = "community"

# Edge attribute read as weight when running weighted
WEIGHT_ATTRIBUTE = "weight"

# =============================================================================
# ALGORITHM DEFAULTS
# =============================================================================

RESOLUTION = 1.0
WEIGHTED = False
FAST_LOCAL_MOVES = True
RANDOM_WALK = True

# Two deltas closer than this are considered equal by the tie-break rule
TIE_EPSILON = 1e-10


class DeltaComputation(str, Enum):
    """Formula used to score moving a node into a candidate community."""

    ORIGINAL = "original"
    FAST = "fast"
    TRUE = "true"


DELTA_COMPUTATION = DeltaComputation.ORIGINAL

# Anything accepted as a random source: a seed, a numpy generator or a
# callable returning floats in [0, 1)
RandomSource = Union[None, int, np.random.Generator, np.random.RandomState, Callable[[], float]]


@dataclass(frozen=True)
class LouvainOptions:
    """Options for a single Louvain run."""

    community_attribute: str = COMMUNITY_ATTRIBUTE
    weight_attribute: str = WEIGHT_ATTRIBUTE
    weighted: bool = WEIGHTED
    resolution: float = RESOLUTION
    delta_computation: DeltaComputation = DELTA_COMPUTATION
    fast_local_moves: bool = FAST_LOCAL_MOVES
    random_walk: bool = RANDOM_WALK
    rng: Any = None

    def __post_init__(self):
        try:
            computation = DeltaComputation(self.delta_computation)
        except ValueError:
            raise ValueError(
                f"Unknown delta computation: {self.delta_computation}. "
                f"Use one of {[c.value for c in DeltaComputation]}"
            )
        # frozen: go through object.__setattr__ to normalize the enum
        object.__setattr__(self, "delta_computation", computation)

        resolution = float(self.resolution)
        if not resolution >= 0:
            raise ValueError(f"resolution must be >= 0, got {self.resolution}")
        object.__setattr__(self, "resolution", resolution)

    def with_overrides(self, **overrides) -> "LouvainOptions":
        """Return a copy with the given options replaced."""
        unknown = set(overrides) - {f.name for f in fields(self)}
        if unknown:
            raise TypeError(f"Unknown Louvain options: {sorted(unknown)}")
        return replace(self, **overrides)


def make_options(options: Optional[LouvainOptions] = None, **overrides) -> LouvainOptions:
    """
    Build the options of a run.

    Parameters
    ----------
    options : LouvainOptions, optional
        Base options. Defaults to ``LouvainOptions()``.
    **overrides
        Individual options replacing the base ones.

    Returns
    -------
    options : LouvainOptions
        Immutable options for the run
    """
    if options is None:
        options = LouvainOptions()
    if overrides:
        options = options.with_overrides(**overrides)
    return options
