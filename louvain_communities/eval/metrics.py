"""
Metrics for evaluating community detection results.
Uses numpy for vectorized computation over edge arrays.
"""
import math
from typing import Any, Dict, Hashable, Tuple

import numpy as np
from sklearn.metrics import adjusted_rand_score, normalized_mutual_info_score

from ..config import RESOLUTION, WEIGHT_ATTRIBUTE
from ..data.graphs import DIRECTED, as_louvain_graph, to_edge_arrays


def compute_modularity(
    graph: Any,
    communities: Dict[Hashable, int],
    resolution: float = RESOLUTION,
    weighted: bool = False,
    weight_attribute: str = WEIGHT_ATTRIBUTE
) -> float:
    """
    Compute the modularity of a fixed partition directly from the graph.

    Parameters
    ----------
    graph : nx.Graph, nx.DiGraph, ig.Graph or LouvainGraph
        Input graph
    communities : dict
        Community id of every node
    resolution : float
        Resolution parameter
    weighted : bool
        Whether to read edge weights
    weight_attribute : str
        Edge attribute holding weights

    Returns
    -------
    modularity : float
        Modularity, NaN when the graph has no edge weight
    """
    graph = as_louvain_graph(graph)
    nodes = list(graph.nodes())
    node_index = {node: i for i, node in enumerate(nodes)}

    sources, targets, weights = to_edge_arrays(graph, node_index, weight_attribute, weighted)
    m = weights.sum()

    if m <= 0:
        return math.nan

    _, membership = np.unique([communities[node] for node in nodes], return_inverse=True)
    membership = membership.ravel()
    n_communities = membership.max() + 1 if len(membership) else 0

    source_communities = membership[sources]
    target_communities = membership[targets]
    intra = source_communities == target_communities
    internal = np.bincount(source_communities[intra], weights=weights[intra], minlength=n_communities)

    out_totals = np.bincount(source_communities, weights=weights, minlength=n_communities)
    in_totals = np.bincount(target_communities, weights=weights, minlength=n_communities)

    if graph.kind == DIRECTED:
        return float(np.sum(internal / m - resolution * out_totals * in_totals / m ** 2))

    # each undirected edge adds its weight to both endpoints' communities
    totals = out_totals + in_totals
    return float(np.sum(internal / m - resolution * (totals / (2 * m)) ** 2))


def compute_nmi_ari(
    communities_a: Dict[Hashable, int],
    communities_b: Dict[Hashable, int]
) -> Tuple[float, float]:
    """
    Compute NMI and ARI between two partitions of the same nodes.

    Returns
    -------
    nmi : float
        Normalized Mutual Information
    ari : float
        Adjusted Rand Index
    """
    nodes = list(communities_a)
    labels_a = [communities_a[node] for node in nodes]
    labels_b = [communities_b[node] for node in nodes]

    nmi = normalized_mutual_info_score(labels_a, labels_b)
    ari = adjusted_rand_score(labels_a, labels_b)
    return nmi, ari


def community_sizes(communities: Dict[Hashable, int]) -> Dict[int, int]:
    """Number of members of every community."""
    labels, counts = np.unique(list(communities.values()), return_counts=True)
    return {int(label): int(count) for label, count in zip(labels, counts)}
