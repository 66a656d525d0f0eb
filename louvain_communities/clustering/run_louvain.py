"""
Louvain community detection.

Alternates local moving (phase 1) and aggregation (phase 2) until a level
makes no move, then maps the communities of the last level back onto the
original nodes.

[References]
Blondel, V. D., Guillaume, J.-L., Lambiotte, R., Lefebvre, E. Fast unfolding
of communities in large networks. J. Stat. Mech. (2008) P10008.

Dugué, N., Perez, A. Directed Louvain: maximizing modularity in directed
networks. Université d'Orléans (2015). hal-01231784.
"""
import logging
import math
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, List, Optional, Tuple

import numpy as np

from ..config import LouvainOptions, make_options
from ..config.env import describe_options
from ..data.graphs import DIRECTED, LouvainGraph, as_louvain_graph, validate_graph
from .index import DirectedLouvainIndex, LouvainIndex, UndirectedLouvainIndex
from .local_moves import LocalMover
from .rng import create_random_index

logger = logging.getLogger(__name__)


@dataclass
class LouvainResult:
    """Detailed output of a Louvain run."""

    communities: Optional[Dict[Hashable, int]]
    count: int
    level: int
    modularity: float
    resolution: float
    delta_computations: int = 0
    nodes_visited: int = 0
    # moves[level][pass]
    moves: List[List[int]] = field(default_factory=list)
    dendrogram: List[np.ndarray] = field(default_factory=list)


def _prepare(graph: Any) -> LouvainGraph:
    louvain_graph = as_louvain_graph(graph)
    validate_graph(louvain_graph)
    return louvain_graph


def _build_index(graph: LouvainGraph, options: LouvainOptions, keep_dendrogram: bool) -> LouvainIndex:
    index_class = DirectedLouvainIndex if graph.kind == DIRECTED else UndirectedLouvainIndex
    return index_class(
        graph,
        weight_attribute=options.weight_attribute,
        weighted=options.weighted,
        resolution=options.resolution,
        keep_dendrogram=keep_dendrogram
    )


def optimize(index: LouvainIndex, options: LouvainOptions) -> Tuple[LocalMover, List[List[int]]]:
    """
    Run phase 1 and phase 2 on an index until a level makes no move.

    Parameters
    ----------
    index : LouvainIndex
        Level-0 index, optimized in place
    options : LouvainOptions
        Run options

    Returns
    -------
    mover : LocalMover
        Mover holding the run's counters
    moves : list of list of int
        Move counts of every pass of every level
    """
    mover = LocalMover(index, options, create_random_index(options.rng))
    moves = []

    while True:
        level_moves = mover.run()
        moves.append(level_moves)

        if not any(level_moves):
            break

        index.zoom_out()

    return mover, moves


def _trivial_result(graph: LouvainGraph, options: LouvainOptions) -> LouvainResult:
    """Every node alone: the outcome for graphs without edges."""
    nodes = list(graph.nodes())

    return LouvainResult(
        communities={node: i for i, node in enumerate(nodes)},
        count=len(nodes),
        level=0,
        modularity=math.nan,
        resolution=options.resolution,
    )


def _louvain(graph: Any, options: LouvainOptions, detailed: bool, assign: bool) -> LouvainResult:
    louvain_graph = _prepare(graph)

    logger.debug(
        "running Louvain on %s graph (%d nodes, %d edges): %s",
        louvain_graph.kind, louvain_graph.order, louvain_graph.size, describe_options(options)
    )

    index = None
    if louvain_graph.size > 0:
        index = _build_index(louvain_graph, options, keep_dendrogram=detailed)

    if index is None or index.M <= 0:
        logger.debug("graph has no edge weight, returning singletons")
        result = _trivial_result(louvain_graph, options)
        if assign:
            for node, community in result.communities.items():
                louvain_graph.set_node_attribute(node, options.community_attribute, community)
            result.communities = None
        return result

    mover, moves = optimize(index, options)

    result = LouvainResult(
        communities=None,
        count=index.community_count(),
        level=index.level,
        modularity=index.modularity(),
        resolution=options.resolution,
        delta_computations=mover.delta_computations,
        nodes_visited=mover.nodes_visited,
        moves=moves,
        dendrogram=list(index.dendrogram),
    )

    if assign:
        index.assign(options.community_attribute)
    else:
        result.communities = index.collect()

    logger.debug(
        "Louvain done: %d communities over %d levels, modularity %.4f",
        result.count, result.level, result.modularity
    )
    return result


def run_louvain(graph: Any, options: Optional[LouvainOptions] = None, **overrides) -> Dict[Hashable, int]:
    """
    Detect communities with the Louvain algorithm.

    Parameters
    ----------
    graph : nx.Graph, nx.DiGraph, ig.Graph or LouvainGraph
        Input graph, undirected or directed, without parallel edges
    options : LouvainOptions, optional
        Run options
    **overrides
        Individual options, e.g. ``resolution=0.5`` or ``rng=42``

    Returns
    -------
    communities : dict
        Community id of every node

    Raises
    ------
    InvalidGraphError, MultiGraphUnsupportedError, MixedGraphUnsupportedError
        If the graph does not meet the preconditions.
    """
    options = make_options(options, **overrides)
    return _louvain(graph, options, detailed=False, assign=False).communities


def run_louvain_detailed(graph: Any, options: Optional[LouvainOptions] = None, **overrides) -> LouvainResult:
    """
    Detect communities and report how the run went.

    Parameters
    ----------
    graph : nx.Graph, nx.DiGraph, ig.Graph or LouvainGraph
        Input graph
    options : LouvainOptions, optional
        Run options
    **overrides
        Individual options

    Returns
    -------
    result : LouvainResult
        Communities, community count, modularity, number of levels, delta
        computations, nodes visited, move counts and dendrogram. Modularity
        is NaN for graphs without edges.
    """
    options = make_options(options, **overrides)
    return _louvain(graph, options, detailed=True, assign=False)


def run_louvain_assign(
    graph: Any,
    detailed: bool = False,
    options: Optional[LouvainOptions] = None,
    **overrides
) -> Optional[LouvainResult]:
    """
    Detect communities and write them onto the graph's node attributes.

    The attribute name is the ``community_attribute`` option.

    Returns
    -------
    result : LouvainResult or None
        When ``detailed``, the run report without the communities mapping
    """
    options = make_options(options, **overrides)
    result = _louvain(graph, options, detailed=detailed, assign=True)
    return result if detailed else None


def run_louvain_timed(
    graph: Any,
    options: Optional[LouvainOptions] = None,
    **overrides
) -> Tuple[Dict[Hashable, int], float]:
    """
    Detect communities with timing.

    Returns
    -------
    communities : dict
        Community id of every node
    elapsed : float
        Time in seconds
    """
    start = time.perf_counter()
    communities = run_louvain(graph, options, **overrides)
    elapsed = time.perf_counter() - start
    return communities, elapsed
