"""
Modularity gain of moving a node into a candidate community.

Notation, for a node ``i`` of strength ``s`` (weighted degree, self-loops
included) and a community ``c``:

- ``m``: total edge weight of the graph
- ``k_c``: weight of the edges between ``i`` and the members of ``c``
- ``sigma_c``: aggregate degree of ``c``
- ``gamma``: resolution

The ``original`` and ``fast`` formulas score every community relative to
``i`` sitting alone; the node's own community gets a dedicated formula used
as the baseline. ``fast`` is ``original`` scaled by ``m``, hence cheaper and
identically ranked. ``true`` scores the actual change of modularity when
``i`` leaves its community for ``c``, so staying has a gain of exactly 0.
"""
import logging

from ..config import TIE_EPSILON, DeltaComputation

logger = logging.getLogger(__name__)


# =============================================================================
# UNDIRECTED FORMULAS
# =============================================================================

def original_delta(m, resolution, strength, community_weight, community_total):
    return community_weight / m - resolution * community_total * strength / (2.0 * m * m)


def original_delta_with_own_community(m, resolution, strength, own_weight, own_total):
    return own_weight / m - resolution * (own_total - strength) * strength / (2.0 * m * m)


def fast_delta(m, resolution, strength, community_weight, community_total):
    return community_weight - resolution * strength * community_total / (2.0 * m)


def fast_delta_with_own_community(m, resolution, strength, own_weight, own_total):
    return own_weight - resolution * strength * (own_total - strength) / (2.0 * m)


def true_delta(m, resolution, strength, own_weight, own_total, community_weight, community_total):
    return (
        (community_weight - own_weight) / m
        - resolution * strength * (community_total - own_total + strength) / (2.0 * m * m)
    )


# =============================================================================
# DIRECTED FORMULAS
# =============================================================================

def directed_delta(m, resolution, out_strength, in_strength, community_weight, community_total_out, community_total_in):
    return (
        community_weight / m
        - resolution * (out_strength * community_total_in + in_strength * community_total_out) / (m * m)
    )


def directed_delta_with_own_community(m, resolution, out_strength, in_strength, own_weight, own_total_out, own_total_in):
    return (
        own_weight / m
        - resolution * (
            out_strength * (own_total_in - in_strength)
            + in_strength * (own_total_out - out_strength)
        ) / (m * m)
    )


# =============================================================================
# STRATEGIES
# =============================================================================

class OriginalDelta:
    """
    Formula bound to an index.

    ``degree`` is what the index's ``scan`` returned for the node;
    ``own_weight`` its weight towards its current community.
    ``tolerance`` is the tie tolerance expressed in the units of the
    formula.
    """

    computation = DeltaComputation.ORIGINAL

    def __init__(self, index):
        self.index = index

    @property
    def tolerance(self):
        return TIE_EPSILON

    def _strength(self, i, degree):
        return degree + self.index.loops[i]

    def own(self, i, degree, own_weight, community):
        index = self.index
        return original_delta_with_own_community(
            index.M, index.resolution, self._strength(i, degree),
            own_weight, index.total_weights[community]
        )

    def gain(self, i, degree, own_weight, community_weight, community):
        index = self.index
        return original_delta(
            index.M, index.resolution, self._strength(i, degree),
            community_weight, index.total_weights[community]
        )

    def isolation(self, i, degree, own_weight, current):
        """Gain of leaving every community for a fresh singleton."""
        return 0.0


class FastDelta(OriginalDelta):
    computation = DeltaComputation.FAST

    @property
    def tolerance(self):
        # fast deltas are original deltas scaled by m
        return TIE_EPSILON * self.index.M

    def own(self, i, degree, own_weight, community):
        index = self.index
        return fast_delta_with_own_community(
            index.M, index.resolution, self._strength(i, degree),
            own_weight, index.total_weights[community]
        )

    def gain(self, i, degree, own_weight, community_weight, community):
        index = self.index
        return fast_delta(
            index.M, index.resolution, self._strength(i, degree),
            community_weight, index.total_weights[community]
        )


class TrueDelta(OriginalDelta):
    computation = DeltaComputation.TRUE

    def own(self, i, degree, own_weight, community):
        return 0.0

    def gain(self, i, degree, own_weight, community_weight, community):
        index = self.index
        current = index.belongings[i]
        return true_delta(
            index.M, index.resolution, self._strength(i, degree),
            own_weight, index.total_weights[current],
            community_weight, index.total_weights[community]
        )

    def isolation(self, i, degree, own_weight, current):
        index = self.index
        return -original_delta_with_own_community(
            index.M, index.resolution, self._strength(i, degree),
            own_weight, index.total_weights[current]
        )


class DirectedOriginalDelta(OriginalDelta):
    """Original formula for directed graphs; ``degree`` is ``(out, in)``."""

    def own(self, i, degree, own_weight, community):
        index = self.index
        out_degree, in_degree = degree
        loops = index.loops[i]
        return directed_delta_with_own_community(
            index.M, index.resolution, out_degree + loops, in_degree + loops,
            own_weight, index.total_out_weights[community], index.total_in_weights[community]
        )

    def gain(self, i, degree, own_weight, community_weight, community):
        index = self.index
        out_degree, in_degree = degree
        loops = index.loops[i]
        return directed_delta(
            index.M, index.resolution, out_degree + loops, in_degree + loops,
            community_weight, index.total_out_weights[community], index.total_in_weights[community]
        )


UNDIRECTED_STRATEGIES = {
    DeltaComputation.ORIGINAL: OriginalDelta,
    DeltaComputation.FAST: FastDelta,
    DeltaComputation.TRUE: TrueDelta,
}


def make_delta_strategy(index, computation=DeltaComputation.ORIGINAL):
    """
    Bind the requested formula to an index, once per run.

    Directed indices only support the original formula: other requests fall
    back to it with a warning.
    """
    computation = DeltaComputation(computation)

    if index.directed:
        if computation != DeltaComputation.ORIGINAL:
            logger.warning(
                "delta computation %r is not available for directed graphs, using 'original'",
                computation.value
            )
        return DirectedOriginalDelta(index)

    return UNDIRECTED_STRATEGIES[computation](index)
