"""
Shared fixtures for the Louvain test suite.

Graphs are built with networkx; the mixed-edge graph is a small test double
implementing the LouvainGraph protocol, since networkx cannot hold both
directed and undirected edges.
"""

import pytest
import networkx as nx


# =============================================================================
# FIXTURES: Undirected graphs
# =============================================================================

@pytest.fixture
def karate_graph():
    """Zachary's Karate Club - standard test graph"""
    return nx.karate_club_graph()


@pytest.fixture
def ring_of_cliques():
    """Three 4-cliques joined in a ring by one edge each (21 edges)"""
    return nx.ring_of_cliques(3, 4)


@pytest.fixture
def disjoint_cliques():
    """Three 4-cliques without any edge between them"""
    return nx.disjoint_union_all([nx.complete_graph(4) for _ in range(3)])


@pytest.fixture
def barbell_graph():
    """Two cliques connected by a bridge"""
    return nx.barbell_graph(5, 1)


@pytest.fixture
def two_edges():
    """Two disjoint edges: 0-1 and 2-3"""
    G = nx.Graph()
    G.add_edges_from([(0, 1), (2, 3)])
    return G


@pytest.fixture
def path_with_loop():
    """Path 0-1-2 with a self-loop on node 0"""
    G = nx.Graph()
    G.add_edges_from([(0, 1), (1, 2), (0, 0)])
    return G


@pytest.fixture
def edgeless_graph():
    """Five nodes, no edges"""
    return nx.empty_graph(5)


# =============================================================================
# FIXTURES: Directed graphs
# =============================================================================

@pytest.fixture
def directed_cycle_with_loop():
    """Directed 3-cycle 0->1->2->0 with a self-loop on node 0"""
    G = nx.DiGraph()
    G.add_edges_from([(0, 1), (1, 2), (2, 0), (0, 0)])
    return G


@pytest.fixture
def directed_triangles():
    """Two directed 3-cycles joined by the arc 2->3"""
    G = nx.DiGraph()
    G.add_edges_from([(0, 1), (1, 2), (2, 0), (3, 4), (4, 5), (5, 3), (2, 3)])
    return G


# =============================================================================
# FIXTURES: Rejected graphs
# =============================================================================

class MixedEdgeGraph:
    """Graph holding one directed and one undirected edge."""

    kind = "mixed"
    multi = False
    order = 3
    size = 2

    def nodes(self):
        return ["a", "b", "c"]

    def edges(self):
        raise AssertionError("edges must not be read from a rejected graph")

    def set_node_attribute(self, node, name, value):
        raise AssertionError("a rejected graph must not be written to")


@pytest.fixture
def mixed_graph():
    return MixedEdgeGraph()


@pytest.fixture
def multi_graph():
    """Triangle with a doubled edge"""
    G = nx.MultiGraph()
    G.add_edges_from([(0, 1), (0, 1), (1, 2), (2, 0)])
    return G


# =============================================================================
# HELPERS
# =============================================================================

def as_partition(communities):
    """Communities mapping as a list of node sets, for networkx modularity."""
    groups = {}
    for node, community in communities.items():
        groups.setdefault(community, set()).add(node)
    return list(groups.values())


def clique_members(n_cliques=3, size=4):
    return [list(range(k * size, (k + 1) * size)) for k in range(n_cliques)]
