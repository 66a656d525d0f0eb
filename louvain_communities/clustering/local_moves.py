"""
Phase 1 of the Louvain algorithm: local moving.

Nodes are visited one at a time and moved to the neighboring community with
the best modularity gain until no move improves modularity. Two traversal
strategies are available:

- sweeps: visit every node in turn, repeat until a sweep makes no move
- fast local moves: drain a work queue seeded with every node, re-enqueuing
  the neighbors of moved nodes that sit in another community
"""
import logging
from enum import Enum
from typing import List

from ..config import TIE_EPSILON, LouvainOptions
from .delta import make_delta_strategy
from .rng import RandomIndex
from .sparse import SparseMap, SparseQueueSet

logger = logging.getLogger(__name__)


class MoverState(str, Enum):
    SWEEPING = "sweeping"
    CONVERGED = "converged"


def is_better(best_community, current_community, community, delta, best_delta, tolerance=TIE_EPSILON):
    """
    Tie-break rule between candidate communities.

    Deltas closer than ``tolerance`` are equal: the larger community id
    wins the tie, unless the best candidate so far is the node's own
    community, which keeps it.
    """
    if abs(delta - best_delta) < tolerance:
        if best_community == current_community:
            return False
        return community > best_community

    return delta > best_delta


class LocalMover:
    """
    Runs the local-moving phase on the current level of an index.

    Parameters
    ----------
    index : LouvainIndex
        Index whose level is optimized in place
    options : LouvainOptions
        Run options
    random_index : callable
        Random source used for randomized traversal orders
    """

    def __init__(self, index, options: LouvainOptions, random_index: RandomIndex):
        self.index = index
        self.options = options
        self.random_index = random_index
        self.delta = make_delta_strategy(index, options.delta_computation)

        # sized for level 0, levels only shrink
        self.communities = SparseMap(index.C)
        self.queue = SparseQueueSet(index.C) if options.fast_local_moves else None

        self.state = MoverState.CONVERGED
        self.delta_computations = 0
        self.nodes_visited = 0

    def _traversal_start(self, n: int) -> int:
        return self.random_index(n) if self.options.random_walk else 0

    def visit(self, i: int):
        """
        Evaluate node ``i`` and apply its best move.

        Returns
        -------
        community : int or None
            The node's new community, None if it stayed
        """
        index = self.index
        delta = self.delta
        communities = self.communities
        tolerance = delta.tolerance

        self.nodes_visited += 1

        current = int(index.belongings[i])
        degree = index.scan(i, communities)
        own_weight = communities.get(current)

        best_delta = delta.own(i, degree, own_weight, current)
        best_community = current

        for community, weight in communities.items():
            if community == current:
                continue

            self.delta_computations += 1
            gain = delta.gain(i, degree, own_weight, weight, community)

            if is_better(best_community, current, community, gain, best_delta, tolerance):
                best_delta = gain
                best_community = community

        isolation = delta.isolation(i, degree, own_weight, current)

        if isolation > best_delta and abs(isolation - best_delta) >= tolerance:
            # already alone: nothing to do
            best_community = index.isolate(i, degree)
            return None if best_community == current else best_community

        if best_community == current:
            return None

        index.move(i, degree, best_community)
        return best_community

    def sweep(self) -> int:
        """Visit every node once, returns the number of moves."""
        n = self.index.C
        start = self._traversal_start(n)
        moves = 0

        for step in range(n):
            if self.visit((start + step) % n) is not None:
                moves += 1

        return moves

    def drain(self) -> int:
        """Visit nodes from the work queue until it is empty, returns the number of moves."""
        index = self.index
        queue = self.queue
        n = index.C
        start = self._traversal_start(n)

        for step in range(n):
            queue.enqueue((start + step) % n)

        moves = 0

        while len(queue):
            i = queue.dequeue()
            community = self.visit(i)

            if community is None:
                continue

            moves += 1

            neighbors = index.neighbors(i)
            for j in neighbors[index.belongings[neighbors] != community].tolist():
                queue.enqueue(j)

        return moves

    def run(self) -> List[int]:
        """
        Optimize the current level until no move is left.

        Returns
        -------
        moves : list of int
            Number of moves of every pass (sweep or queue drain); the last
            pass made none.
        """
        step = self.drain if self.queue is not None else self.sweep
        moves = []

        self.state = MoverState.SWEEPING
        while self.state is MoverState.SWEEPING:
            pass_moves = step()
            moves.append(pass_moves)

            if pass_moves == 0:
                self.state = MoverState.CONVERGED

        logger.debug(
            "level %d converged: %d nodes, %d moves in %d passes",
            self.index.level, self.index.C, sum(moves), len(moves)
        )
        return moves
