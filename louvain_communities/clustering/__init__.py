"""Community detection algorithms."""
from .run_louvain import (
    LouvainResult, optimize,
    run_louvain, run_louvain_detailed, run_louvain_assign, run_louvain_timed
)
from .index import LouvainIndex, UndirectedLouvainIndex, DirectedLouvainIndex
from .local_moves import LocalMover, MoverState, is_better
from .delta import make_delta_strategy
from .rng import create_random_index
