"""Graph adapters and input validation."""
from .graphs import (
    DIRECTED, MIXED, UNDIRECTED, GRAPH_KINDS,
    LouvainGraph, NetworkXGraph, IGraphGraph,
    as_louvain_graph, validate_graph, get_edge_weight, to_edge_arrays
)
