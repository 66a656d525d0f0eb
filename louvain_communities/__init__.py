"""
Louvain community detection

Multi-level modularity optimization for undirected and directed graphs,
reading networkx and igraph graphs and writing community ids back onto them.
"""

from .config import (
    COMMUNITY_ATTRIBUTE,
    WEIGHT_ATTRIBUTE,
    RESOLUTION,
    TIE_EPSILON,
    DeltaComputation,
    LouvainOptions,
    make_options,
    options_from_env,
)
from .exceptions import (
    LouvainError,
    InvalidGraphError,
    MultiGraphUnsupportedError,
    MixedGraphUnsupportedError,
)
from .data import LouvainGraph, NetworkXGraph, IGraphGraph, as_louvain_graph
from .clustering import (
    LouvainResult,
    run_louvain,
    run_louvain_detailed,
    run_louvain_assign,
    run_louvain_timed,
)
from .eval.metrics import compute_modularity, compute_nmi_ari, community_sizes

__version__ = '0.1.0'

__all__ = [
    # Config
    'COMMUNITY_ATTRIBUTE',
    'WEIGHT_ATTRIBUTE',
    'RESOLUTION',
    'TIE_EPSILON',
    'DeltaComputation',
    'LouvainOptions',
    'make_options',
    'options_from_env',
    # Errors
    'LouvainError',
    'InvalidGraphError',
    'MultiGraphUnsupportedError',
    'MixedGraphUnsupportedError',
    # Graphs
    'LouvainGraph',
    'NetworkXGraph',
    'IGraphGraph',
    'as_louvain_graph',
    # Louvain
    'LouvainResult',
    'run_louvain',
    'run_louvain_detailed',
    'run_louvain_assign',
    'run_louvain_timed',
    # Metrics
    'compute_modularity',
    'compute_nmi_ari',
    'community_sizes',
]
