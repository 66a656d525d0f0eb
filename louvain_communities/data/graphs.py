"""
Graph boundary of the Louvain engine.

The engine never stores or mutates graphs itself. It reads node lists and
edges through the ``LouvainGraph`` protocol and writes community ids back
through the node attribute setter. Adapters cover networkx and igraph
graphs; any other object implementing the protocol is accepted as is.
"""
import numbers
from typing import Any, Dict, Hashable, Iterable, List, Optional, Protocol, Tuple, runtime_checkable

import igraph as ig
import networkx as nx
import numpy as np

from ..exceptions import InvalidGraphError, MixedGraphUnsupportedError, MultiGraphUnsupportedError

UNDIRECTED = "undirected"
DIRECTED = "directed"
MIXED = "mixed"

GRAPH_KINDS = (UNDIRECTED, DIRECTED, MIXED)


@runtime_checkable
class LouvainGraph(Protocol):
    """What the engine needs from an external graph."""

    @property
    def kind(self) -> str:
        """One of ``undirected``, ``directed`` or ``mixed``."""

    @property
    def multi(self) -> bool:
        """Whether the graph may hold parallel edges."""

    @property
    def order(self) -> int:
        """Number of nodes."""

    @property
    def size(self) -> int:
        """Number of edges."""

    def nodes(self) -> List[Hashable]:
        """Node identifiers, in a stable order."""

    def edges(self) -> Iterable[Tuple[Hashable, Hashable, Optional[Dict[str, Any]]]]:
        """Edges as ``(source, target, attributes)``, each edge once."""

    def set_node_attribute(self, node: Hashable, name: str, value: Any) -> None:
        """Write a node attribute."""


class NetworkXGraph:
    """``LouvainGraph`` view over a networkx graph."""

    def __init__(self, graph: nx.Graph):
        self.graph = graph

    @property
    def kind(self) -> str:
        return DIRECTED if self.graph.is_directed() else UNDIRECTED

    @property
    def multi(self) -> bool:
        return self.graph.is_multigraph()

    @property
    def order(self) -> int:
        return self.graph.number_of_nodes()

    @property
    def size(self) -> int:
        return self.graph.number_of_edges()

    def nodes(self) -> List[Hashable]:
        return list(self.graph.nodes())

    def edges(self):
        return self.graph.edges(data=True)

    def set_node_attribute(self, node, name, value):
        self.graph.nodes[node][name] = value


class IGraphGraph:
    """
    ``LouvainGraph`` view over an igraph graph.

    Nodes are identified by the ``name`` vertex attribute when the graph has
    one, by vertex index otherwise.
    """

    def __init__(self, graph: ig.Graph):
        self.graph = graph
        self._node_ids = None
        self._vertex_index = None

    @property
    def kind(self) -> str:
        return DIRECTED if self.graph.is_directed() else UNDIRECTED

    @property
    def multi(self) -> bool:
        return bool(self.graph.has_multiple())

    @property
    def order(self) -> int:
        return self.graph.vcount()

    @property
    def size(self) -> int:
        return self.graph.ecount()

    def nodes(self) -> List[Hashable]:
        if self._node_ids is None:
            if "name" in self.graph.vs.attributes():
                names = list(self.graph.vs["name"])
                if len(set(names)) != len(names):
                    raise InvalidGraphError("vertex names must be unique to identify nodes.")
                self._node_ids = names
            else:
                self._node_ids = list(range(self.graph.vcount()))
        return self._node_ids

    def edges(self):
        node_ids = self.nodes()
        for edge in self.graph.es:
            yield node_ids[edge.source], node_ids[edge.target], edge.attributes()

    def set_node_attribute(self, node, name, value):
        if self._vertex_index is None:
            self._vertex_index = {node_id: i for i, node_id in enumerate(self.nodes())}
        self.graph.vs[self._vertex_index[node]][name] = value


def as_louvain_graph(graph: Any) -> LouvainGraph:
    """
    Wrap a graph into the ``LouvainGraph`` protocol.

    Parameters
    ----------
    graph : nx.Graph, ig.Graph or LouvainGraph
        Input graph

    Returns
    -------
    graph : LouvainGraph

    Raises
    ------
    InvalidGraphError
        If the object is not a supported graph.
    """
    if isinstance(graph, nx.Graph):
        return NetworkXGraph(graph)
    if isinstance(graph, ig.Graph):
        return IGraphGraph(graph)
    if graph is not None and isinstance(graph, LouvainGraph):
        return graph
    raise InvalidGraphError(
        f"the given graph is not a valid graph instance (got {type(graph).__name__})."
    )


def validate_graph(graph: LouvainGraph) -> None:
    """
    Check the preconditions of the Louvain engine.

    Raises
    ------
    MultiGraphUnsupportedError
        If the graph may hold parallel edges.
    MixedGraphUnsupportedError
        If the graph holds both directed and undirected edges.
    InvalidGraphError
        If the graph reports an unknown kind.
    """
    if graph.multi:
        raise MultiGraphUnsupportedError(
            "cannot run the algorithm on a multi graph. Cast it to a simple one before."
        )

    kind = graph.kind
    if kind == MIXED:
        raise MixedGraphUnsupportedError("cannot run the algorithm on a true mixed graph.")
    if kind not in GRAPH_KINDS:
        raise InvalidGraphError(f"unknown graph kind: {kind!r}")


def get_edge_weight(attributes: Optional[Dict[str, Any]], weight_attribute: str, weighted: bool) -> float:
    """Weight of an edge: 1 when unweighted, missing or non-numeric."""
    if not weighted or not attributes:
        return 1.0

    weight = attributes.get(weight_attribute)

    if isinstance(weight, bool) or not isinstance(weight, numbers.Real):
        return 1.0

    return float(weight)


def to_edge_arrays(
    graph: LouvainGraph,
    node_index: Dict[Hashable, int],
    weight_attribute: str,
    weighted: bool
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Read the edges of a graph as numpy arrays.

    Parameters
    ----------
    graph : LouvainGraph
        Input graph
    node_index : dict
        Mapping from node id to its dense index
    weight_attribute : str
        Edge attribute holding weights
    weighted : bool
        Whether to read weights at all

    Returns
    -------
    sources : np.ndarray
        Source node index of each edge
    targets : np.ndarray
        Target node index of each edge
    weights : np.ndarray
        Weight of each edge
    """
    sources = []
    targets = []
    weights = []

    for source, target, attributes in graph.edges():
        sources.append(node_index[source])
        targets.append(node_index[target])
        weights.append(get_edge_weight(attributes, weight_attribute, weighted))

    return (
        np.array(sources, dtype=np.int64),
        np.array(targets, dtype=np.int64),
        np.array(weights, dtype=np.float64),
    )
