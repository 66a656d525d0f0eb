"""Partition quality metrics."""
from .metrics import compute_modularity, compute_nmi_ari, community_sizes
