"""
Tests for the neighborhood indices: array layout, self-loops, moves and
zoom-out.

Run with:
    pytest tests/test_index.py -v
"""

import pytest
import numpy as np
import networkx as nx

from louvain_communities.data import NetworkXGraph
from louvain_communities.clustering.index import (
    UndirectedLouvainIndex, DirectedLouvainIndex, _first_appearance_labels
)
from louvain_communities.clustering.local_moves import LocalMover
from louvain_communities.clustering.rng import create_random_index
from louvain_communities.clustering.sparse import SparseMap
from louvain_communities.config import LouvainOptions


def undirected_index(G, **kwargs):
    return UndirectedLouvainIndex(NetworkXGraph(G), **kwargs)


def directed_index(G, **kwargs):
    return DirectedLouvainIndex(NetworkXGraph(G), **kwargs)


def optimize_level(index, **options):
    mover = LocalMover(index, LouvainOptions(**options), create_random_index(0))
    return mover.run()


# -----------------------------------------------------------------------------
# Test Class 1: Undirected layout
# -----------------------------------------------------------------------------

class TestUndirectedLayout:
    """CSR arrays of the undirected index"""

    def test_arrays(self, path_with_loop):
        index = undirected_index(path_with_loop)

        assert index.N == 3
        assert index.M == 3.0
        np.testing.assert_array_equal(index.starts, [0, 1, 3, 4])
        np.testing.assert_array_equal(index.neighborhood, [1, 0, 2, 1])
        np.testing.assert_array_equal(index.weights, [1, 1, 1, 1])

    def test_self_loop_counted_twice(self, path_with_loop):
        """A self-loop is kept out of the ranges and adds 2w to loops"""
        index = undirected_index(path_with_loop)

        np.testing.assert_array_equal(index.loops, [2, 0, 0])
        assert 0 not in index.neighbors(0)
        np.testing.assert_array_equal(index.strengths(), [3, 2, 1])

    def test_totals_sum_to_twice_m(self, karate_graph):
        index = undirected_index(karate_graph)
        assert np.isclose(index.total_weights.sum(), 2 * index.M)

    def test_weighted_edges(self):
        G = nx.Graph()
        G.add_edge("a", "b", weight=2.5)
        G.add_edge("b", "c", weight=0.5)
        G.add_edge("c", "c", weight=1.0)

        index = undirected_index(G, weighted=True)

        assert index.nodes == ["a", "b", "c"]
        assert index.M == 4.0
        np.testing.assert_array_equal(index.loops, [0, 0, 2])
        np.testing.assert_array_equal(index.strengths(), [2.5, 3.0, 2.5])

    def test_unweighted_ignores_weights(self):
        G = nx.Graph()
        G.add_edge(0, 1, weight=7.0)

        index = undirected_index(G, weighted=False)
        assert index.M == 1.0

    def test_initial_state(self, karate_graph):
        index = undirected_index(karate_graph)

        assert index.level == 0
        assert index.C == index.N
        np.testing.assert_array_equal(index.belongings, np.arange(index.N))
        assert index.community_count() == index.N
        assert index.U == 0


# -----------------------------------------------------------------------------
# Test Class 2: Directed layout
# -----------------------------------------------------------------------------

class TestDirectedLayout:
    """Out/in sub-ranges of the directed index"""

    def test_arrays(self, directed_cycle_with_loop):
        index = directed_index(directed_cycle_with_loop)

        assert index.M == 4.0
        np.testing.assert_array_equal(index.starts, [0, 2, 4, 6])
        np.testing.assert_array_equal(index.offsets, [1, 3, 5])
        np.testing.assert_array_equal(index.neighborhood, [1, 2, 2, 0, 0, 1])

    def test_self_loop_counted_once(self, directed_cycle_with_loop):
        index = directed_index(directed_cycle_with_loop)

        np.testing.assert_array_equal(index.loops, [1, 0, 0])
        out_strengths, in_strengths = index.strengths()
        np.testing.assert_array_equal(out_strengths, [2, 1, 1])
        np.testing.assert_array_equal(in_strengths, [2, 1, 1])

    def test_totals_sum_to_m(self, directed_triangles):
        index = directed_index(directed_triangles)

        assert np.isclose(index.total_out_weights.sum(), index.M)
        assert np.isclose(index.total_in_weights.sum(), index.M)

    def test_scan_splits_degrees(self, directed_triangles):
        index = directed_index(directed_triangles)
        communities = SparseMap(index.C)

        out_degree, in_degree = index.scan(2, communities)

        assert (out_degree, in_degree) == (2.0, 1.0)
        assert dict(communities.items()) == {0: 1.0, 3: 1.0, 1: 1.0}


# -----------------------------------------------------------------------------
# Test Class 3: Moves and isolation
# -----------------------------------------------------------------------------

class TestMoves:
    """Bookkeeping of move and isolate"""

    def test_move_updates_totals(self, two_edges):
        index = undirected_index(two_edges)
        degree = index.scan(1, SparseMap(index.C))

        index.move(1, degree, 0)

        np.testing.assert_array_equal(index.belongings, [0, 0, 2, 3])
        np.testing.assert_array_equal(index.total_weights, [2, 0, 1, 1])
        np.testing.assert_array_equal(index.counts, [2, 0, 1, 1])
        assert index.community_count() == 3

    def test_emptied_community_is_reused(self, two_edges):
        index = undirected_index(two_edges)
        degree = index.scan(1, SparseMap(index.C))
        index.move(1, degree, 0)

        assert index.U == 1
        assert index.unused[0] == 1

        assert index.isolate(1, degree) == 1
        assert index.U == 0
        np.testing.assert_array_equal(index.belongings, [0, 1, 2, 3])
        np.testing.assert_array_equal(index.total_weights, [1, 1, 1, 1])

    def test_isolate_singleton_is_noop(self, two_edges):
        index = undirected_index(two_edges)
        degree = index.scan(0, SparseMap(index.C))

        assert index.isolate(0, degree) == 0
        np.testing.assert_array_equal(index.belongings, [0, 1, 2, 3])

    def test_directed_move(self, directed_triangles):
        index = directed_index(directed_triangles)
        degree = index.scan(2, SparseMap(index.C))

        index.move(2, degree, 0)

        assert index.total_out_weights[0] == 3.0
        assert index.total_in_weights[0] == 2.0
        assert np.isclose(index.total_out_weights.sum(), index.M)
        assert np.isclose(index.total_in_weights.sum(), index.M)


# -----------------------------------------------------------------------------
# Test Class 4: Zoom-out
# -----------------------------------------------------------------------------

class TestZoomOut:
    """Contraction of communities into the induced graph"""

    def test_first_appearance_labels(self):
        labels, n = _first_appearance_labels(np.array([5, 5, 2, 7, 2]))
        np.testing.assert_array_equal(labels, [0, 0, 1, 2, 1])
        assert n == 3

    def test_contracted_arrays(self, two_edges):
        index = undirected_index(two_edges)
        degree = index.scan(1, SparseMap(index.C))
        index.move(1, degree, 0)

        labels = index.zoom_out()

        np.testing.assert_array_equal(labels, [0, 0, 1, 2])
        assert index.level == 1
        assert index.C == 3
        np.testing.assert_array_equal(index.loops, [2, 0, 0])
        np.testing.assert_array_equal(index.starts, [0, 0, 1, 2])
        np.testing.assert_array_equal(index.neighborhood, [2, 1])
        np.testing.assert_array_equal(index.belongings, np.arange(3))

    def test_parallel_edges_are_summed(self, barbell_graph):
        """Edges between two communities become one weighted edge"""
        index = undirected_index(barbell_graph)
        optimize_level(index, random_walk=False)
        index.zoom_out()

        assert index.C < index.N
        for i in range(index.C):
            neighbors = index.neighbors(i)
            assert len(neighbors) == len(set(neighbors.tolist()))

    @pytest.mark.parametrize("fast_local_moves", [True, False])
    def test_modularity_preserved(self, karate_graph, fast_local_moves):
        """Contracting a partition does not change its modularity"""
        index = undirected_index(karate_graph)
        optimize_level(index, fast_local_moves=fast_local_moves)

        before = index.modularity()
        index.zoom_out()

        assert index.modularity() == pytest.approx(before, abs=1e-12)

    def test_degree_invariant_after_zoom_out(self, karate_graph):
        index = undirected_index(karate_graph)
        optimize_level(index)
        n_communities = index.community_count()

        index.zoom_out()

        assert index.C == n_communities
        assert np.isclose(index.strengths().sum(), 2 * index.M)
        assert np.isclose(index.total_weights.sum(), 2 * index.M)

    def test_directed_modularity_preserved(self, directed_triangles):
        index = directed_index(directed_triangles)
        optimize_level(index)

        before = index.modularity()
        index.zoom_out()

        assert index.modularity() == pytest.approx(before, abs=1e-12)
        assert np.isclose(index.total_out_weights.sum(), index.M)
        assert np.isclose(index.total_in_weights.sum(), index.M)


# -----------------------------------------------------------------------------
# Test Class 5: Expansion and output
# -----------------------------------------------------------------------------

class TestExpand:
    """Mapping communities back onto the original nodes"""

    def test_dendrogram_levels(self, karate_graph):
        index = undirected_index(karate_graph, keep_dendrogram=True)
        optimize_level(index)
        first = index.zoom_out()

        assert len(index.dendrogram) == 1
        np.testing.assert_array_equal(index.dendrogram[0], first)
        np.testing.assert_array_equal(index.expand(0), np.arange(index.N))
        np.testing.assert_array_equal(index.expand(), first)

    def test_mapping_matches_dendrogram(self, karate_graph):
        kept = undirected_index(karate_graph, keep_dendrogram=True)
        composed = undirected_index(karate_graph, keep_dendrogram=False)

        for index in (kept, composed):
            optimize_level(index, random_walk=False)
            index.zoom_out()
            optimize_level(index, random_walk=False)

        np.testing.assert_array_equal(kept.expand(), composed.expand())

    def test_intermediate_level_needs_dendrogram(self, karate_graph):
        index = undirected_index(karate_graph)
        optimize_level(index)
        index.zoom_out()

        with pytest.raises(ValueError):
            index.expand(0)

    def test_level_out_of_range(self, karate_graph):
        index = undirected_index(karate_graph, keep_dendrogram=True)
        with pytest.raises(ValueError):
            index.collect(1)

    def test_collect_and_assign(self, two_edges):
        index = undirected_index(two_edges)
        optimize_level(index, random_walk=False)

        assert index.collect() == {0: 1, 1: 1, 2: 3, 3: 3}

        index.assign("cluster")
        assert nx.get_node_attributes(two_edges, "cluster") == {0: 1, 1: 1, 2: 3, 3: 3}
