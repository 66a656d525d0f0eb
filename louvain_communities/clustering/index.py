"""
Neighborhood indices for the Louvain algorithm.

Each index stores the graph of the current level in CSR form: the neighbors
of node ``i`` are ``neighborhood[starts[i]:starts[i + 1]]`` with parallel
``weights``. Self-loops are kept out of the neighbor ranges and accumulated
in ``loops``. The directed index also stores ``offsets[i]`` splitting the
range of ``i`` into outgoing ``[starts[i], offsets[i])`` and incoming
``[offsets[i], starts[i + 1])`` sub-ranges.

Besides the arrays, an index carries the mutable state of a level: the
community of every node (``belongings``), the aggregate degree of every
community, member counts and a stack of community ids left empty by moves.
"""
import logging
from typing import Dict, Hashable, List, Optional, Tuple

import numpy as np
import scipy.sparse as sp

from ..config import WEIGHT_ATTRIBUTE, RESOLUTION
from ..data.graphs import LouvainGraph, to_edge_arrays
from .sparse import SparseMap

logger = logging.getLogger(__name__)


def _owners(starts: np.ndarray) -> np.ndarray:
    """Node owning each neighbor slot."""
    return np.repeat(np.arange(len(starts) - 1, dtype=np.int64), np.diff(starts))


def _first_appearance_labels(belongings: np.ndarray) -> Tuple[np.ndarray, int]:
    """
    Renumber community ids densely in order of first appearance.

    Returns
    -------
    labels : np.ndarray
        New community id of every node
    n_communities : int
        Number of distinct communities
    """
    _, first, inverse = np.unique(belongings, return_index=True, return_inverse=True)
    order = np.argsort(first, kind="stable")
    rank = np.empty(len(order), dtype=np.int64)
    rank[order] = np.arange(len(order), dtype=np.int64)
    return rank[inverse.ravel()], len(order)


def _csr(rows: np.ndarray, cols: np.ndarray, vals: np.ndarray, n: int) -> sp.csr_matrix:
    """Square CSR matrix from triplets, duplicates summed, indices sorted."""
    matrix = sp.csr_matrix((vals, (rows, cols)), shape=(n, n), dtype=np.float64)
    matrix.sum_duplicates()
    matrix.sort_indices()
    return matrix


class LouvainIndex:
    """State shared by the undirected and directed indices."""

    directed = False

    def __init__(
        self,
        graph: LouvainGraph,
        weight_attribute: str = WEIGHT_ATTRIBUTE,
        weighted: bool = False,
        resolution: float = RESOLUTION,
        keep_dendrogram: bool = False
    ):
        self.graph = graph
        self.resolution = float(resolution)
        self.keep_dendrogram = keep_dendrogram

        self.nodes = list(graph.nodes())
        node_index = {node: i for i, node in enumerate(self.nodes)}

        sources, targets, weights = to_edge_arrays(graph, node_index, weight_attribute, weighted)

        self.N = len(self.nodes)
        self.M = float(weights.sum())
        self.level = 0

        self.dendrogram: List[np.ndarray] = []
        self.mapping: Optional[np.ndarray] = None if keep_dendrogram else np.arange(self.N, dtype=np.int64)

        self._build(sources, targets, weights, self.N)
        self._reset_level(self.N)

    # -------------------------------------------------------------------------
    # Level lifecycle
    # -------------------------------------------------------------------------

    def _reset_level(self, n: int):
        self.C = n
        self.belongings = np.arange(n, dtype=np.int64)
        self.counts = np.ones(n, dtype=np.int64)
        self.unused = np.zeros(n, dtype=np.int64)
        self.U = 0
        self._init_totals()

    def _record_level(self, labels: np.ndarray):
        """Append the level's renumbered belongings to the dendrogram."""
        if self.keep_dendrogram:
            self.dendrogram.append(labels.copy())
        else:
            self.mapping = labels[self.mapping]

    def zoom_out(self) -> np.ndarray:
        """
        Contract every community into a node of the induced graph.

        Returns
        -------
        labels : np.ndarray
            Community id, at the new level, of every node of the old level
        """
        labels, n_communities = _first_appearance_labels(self.belongings)

        old_c = self.C
        self._contract(labels, n_communities)
        self._record_level(labels)
        self._reset_level(n_communities)
        self.level += 1

        logger.debug("zoomed out: %d nodes -> %d nodes (level %d)", old_c, n_communities, self.level)
        return labels

    # -------------------------------------------------------------------------
    # Moves
    # -------------------------------------------------------------------------

    def neighbors(self, i: int) -> np.ndarray:
        return self.neighborhood[self.starts[i]:self.starts[i + 1]]

    def isolate(self, i: int, degree) -> int:
        """
        Move node ``i`` into an empty community.

        Returns the node's community afterwards, which is its current one if
        it was already alone.
        """
        current = int(self.belongings[i])

        if self.counts[current] == 1:
            return current

        # a community with two or more members guarantees an unused id
        self.U -= 1
        target = int(self.unused[self.U])
        self.move(i, degree, target)
        return target

    def _update_belonging(self, i: int, current: int, target: int):
        self.belongings[i] = target
        self.counts[current] -= 1
        self.counts[target] += 1

        if self.counts[current] == 0:
            self.unused[self.U] = current
            self.U += 1

    # -------------------------------------------------------------------------
    # Output
    # -------------------------------------------------------------------------

    def community_count(self) -> int:
        return int(np.count_nonzero(self.counts))

    def expand(self, level: Optional[int] = None) -> np.ndarray:
        """
        Community id of every original node after ``level`` zoom-outs.

        Parameters
        ----------
        level : int, optional
            Defaults to the current level. Intermediate levels need the
            dendrogram.
        """
        if level is None:
            level = self.level

        if not 0 <= level <= self.level:
            raise ValueError(f"level must be in [0, {self.level}], got {level}")

        if not self.keep_dendrogram:
            if level != self.level:
                raise ValueError("intermediate levels are only available when the dendrogram is kept")
            mapping = self.mapping
        else:
            mapping = np.arange(self.N, dtype=np.int64)
            for labels in self.dendrogram[:level]:
                mapping = labels[mapping]

        # communities moved at the current level are not part of any zoom-out yet
        if level == self.level and self.C > 0:
            mapping = self.belongings[mapping]

        return mapping

    def collect(self, level: Optional[int] = None) -> Dict[Hashable, int]:
        """Mapping from original node to community id."""
        mapping = self.expand(level)
        return {node: int(community) for node, community in zip(self.nodes, mapping)}

    def assign(self, attribute: str, level: Optional[int] = None) -> None:
        """Write community ids onto the external graph's node attributes."""
        mapping = self.expand(level)
        for node, community in zip(self.nodes, mapping):
            self.graph.set_node_attribute(node, attribute, int(community))


class UndirectedLouvainIndex(LouvainIndex):
    """
    Index over an undirected graph.

    Every edge occupies one slot in the range of each endpoint. A self-loop
    of weight ``w`` adds ``2w`` to the node's ``loops``, so that community
    aggregate degrees always sum to ``2M``.
    """

    def _build(self, sources, targets, weights, n):
        is_loop = sources == targets

        self.loops = np.bincount(sources[is_loop], weights=2 * weights[is_loop], minlength=n).astype(np.float64)

        s, t, w = sources[~is_loop], targets[~is_loop], weights[~is_loop]
        self._set_adjacency(np.concatenate([s, t]), np.concatenate([t, s]), np.concatenate([w, w]), n)

    def _set_adjacency(self, rows, cols, vals, n):
        matrix = _csr(rows, cols, vals, n)
        self.starts = matrix.indptr.astype(np.int64)
        self.neighborhood = matrix.indices.astype(np.int64)
        self.weights = matrix.data.astype(np.float64)

    def _init_totals(self):
        self.total_weights = self.strengths()

    def strengths(self) -> np.ndarray:
        """Weighted degree of every node, self-loops included."""
        return np.bincount(_owners(self.starts), weights=self.weights, minlength=self.C) + self.loops

    def scan(self, i: int, communities: SparseMap) -> float:
        """
        Accumulate the weight from node ``i`` to each neighboring community.

        Returns the node's degree, self-loops excluded.
        """
        start, end = self.starts[i], self.starts[i + 1]
        weights = self.weights[start:end]
        targets = self.belongings[self.neighborhood[start:end]]

        communities.clear()
        for community, weight in zip(targets.tolist(), weights.tolist()):
            communities.add(community, weight)

        return float(weights.sum())

    def move(self, i: int, degree: float, target: int):
        current = int(self.belongings[i])
        strength = degree + self.loops[i]

        self.total_weights[current] -= strength
        self.total_weights[target] += strength
        self._update_belonging(i, current, target)

    def _contract(self, labels, n_communities):
        owners = _owners(self.starts)
        source_communities = labels[owners]
        target_communities = labels[self.neighborhood]
        intra = source_communities == target_communities

        # both slots of an intra edge land here: twice its weight
        loops = (
            np.bincount(labels, weights=self.loops, minlength=n_communities)
            + np.bincount(source_communities[intra], weights=self.weights[intra], minlength=n_communities)
        )

        self._set_adjacency(
            source_communities[~intra],
            target_communities[~intra],
            self.weights[~intra],
            n_communities
        )
        self.loops = loops

    def modularity(self) -> float:
        """Modularity of the current partition, computed from scratch."""
        M2 = 2 * self.M
        owners = _owners(self.starts)
        source_communities = self.belongings[owners]
        intra = source_communities == self.belongings[self.neighborhood]

        internal = (
            np.bincount(self.belongings, weights=self.loops, minlength=self.C)
            + np.bincount(source_communities[intra], weights=self.weights[intra], minlength=self.C)
        )
        totals = np.bincount(self.belongings, weights=self.strengths(), minlength=self.C)

        return float(np.sum(internal / M2 - self.resolution * (totals / M2) ** 2))


class DirectedLouvainIndex(LouvainIndex):
    """
    Index over a directed graph.

    The range of each node lists its successors first, then its
    predecessors. A self-loop of weight ``w`` adds ``w`` to ``loops`` and
    counts once in both the in- and out-degree of the node.
    """

    directed = True

    def _build(self, sources, targets, weights, n):
        is_loop = sources == targets

        self.loops = np.bincount(sources[is_loop], weights=weights[is_loop], minlength=n).astype(np.float64)
        self._set_adjacency(sources[~is_loop], targets[~is_loop], weights[~is_loop], n)

    def _set_adjacency(self, sources, targets, weights, n):
        out_matrix = _csr(sources, targets, weights, n)
        in_matrix = _csr(targets, sources, weights, n)

        out_counts = np.diff(out_matrix.indptr)
        in_counts = np.diff(in_matrix.indptr)

        starts = np.zeros(n + 1, dtype=np.int64)
        starts[1:] = np.cumsum(out_counts + in_counts)
        offsets = starts[:-1] + out_counts

        neighborhood = np.empty(starts[-1], dtype=np.int64)
        slot_weights = np.empty(starts[-1], dtype=np.float64)

        out_owners = _owners(out_matrix.indptr)
        out_slots = starts[:-1][out_owners] + np.arange(out_matrix.nnz) - out_matrix.indptr[:-1][out_owners]
        neighborhood[out_slots] = out_matrix.indices
        slot_weights[out_slots] = out_matrix.data

        in_owners = _owners(in_matrix.indptr)
        in_slots = offsets[in_owners] + np.arange(in_matrix.nnz) - in_matrix.indptr[:-1][in_owners]
        neighborhood[in_slots] = in_matrix.indices
        slot_weights[in_slots] = in_matrix.data

        self.starts = starts
        self.offsets = offsets
        self.neighborhood = neighborhood
        self.weights = slot_weights

    def _outgoing_mask(self, owners: np.ndarray) -> np.ndarray:
        return np.arange(len(owners)) < self.offsets[owners]

    def _init_totals(self):
        self.total_out_weights, self.total_in_weights = self.strengths()

    def strengths(self) -> Tuple[np.ndarray, np.ndarray]:
        """Out- and in-strength of every node, self-loops included."""
        owners = _owners(self.starts)
        outgoing = self._outgoing_mask(owners)

        out_strengths = np.bincount(owners[outgoing], weights=self.weights[outgoing], minlength=self.C) + self.loops
        in_strengths = np.bincount(owners[~outgoing], weights=self.weights[~outgoing], minlength=self.C) + self.loops

        return out_strengths, in_strengths

    def scan(self, i: int, communities: SparseMap) -> Tuple[float, float]:
        """
        Accumulate the weight between node ``i`` and each neighboring
        community, in both directions.

        Returns the node's out- and in-degree, self-loops excluded.
        """
        start, offset, end = self.starts[i], self.offsets[i], self.starts[i + 1]
        weights = self.weights[start:end]
        targets = self.belongings[self.neighborhood[start:end]]

        communities.clear()
        for community, weight in zip(targets.tolist(), weights.tolist()):
            communities.add(community, weight)

        return float(weights[:offset - start].sum()), float(weights[offset - start:].sum())

    def move(self, i: int, degree: Tuple[float, float], target: int):
        current = int(self.belongings[i])
        out_degree, in_degree = degree
        loops = self.loops[i]

        self.total_out_weights[current] -= out_degree + loops
        self.total_in_weights[current] -= in_degree + loops
        self.total_out_weights[target] += out_degree + loops
        self.total_in_weights[target] += in_degree + loops
        self._update_belonging(i, current, target)

    def _contract(self, labels, n_communities):
        owners = _owners(self.starts)
        outgoing = self._outgoing_mask(owners)

        source_communities = labels[owners[outgoing]]
        target_communities = labels[self.neighborhood[outgoing]]
        weights = self.weights[outgoing]
        intra = source_communities == target_communities

        loops = (
            np.bincount(labels, weights=self.loops, minlength=n_communities)
            + np.bincount(source_communities[intra], weights=weights[intra], minlength=n_communities)
        )

        self._set_adjacency(
            source_communities[~intra],
            target_communities[~intra],
            weights[~intra],
            n_communities
        )
        self.loops = loops

    def modularity(self) -> float:
        """Directed modularity of the current partition, computed from scratch."""
        M = self.M
        owners = _owners(self.starts)
        outgoing = self._outgoing_mask(owners)

        source_communities = self.belongings[owners[outgoing]]
        weights = self.weights[outgoing]
        intra = source_communities == self.belongings[self.neighborhood[outgoing]]

        internal = (
            np.bincount(self.belongings, weights=self.loops, minlength=self.C)
            + np.bincount(source_communities[intra], weights=weights[intra], minlength=self.C)
        )

        out_strengths, in_strengths = self.strengths()
        total_out = np.bincount(self.belongings, weights=out_strengths, minlength=self.C)
        total_in = np.bincount(self.belongings, weights=in_strengths, minlength=self.C)

        return float(np.sum(internal / M - self.resolution * total_out * total_in / (M * M)))
