"""
Errors raised when a graph cannot be handed to the Louvain engine.

Each error carries a stable ``reason`` string so callers can branch on the
kind of rejection without parsing messages.
"""


class LouvainError(ValueError):
    """Base class for input graphs rejected by the Louvain engine."""

    reason = "louvain-error"

    def __init__(self, message: str = None):
        super().__init__(message or self.reason)


class InvalidGraphError(LouvainError):
    """The given object is not a graph the engine knows how to read."""

    reason = "invalid-graph"


class MultiGraphUnsupportedError(LouvainError):
    """The graph may hold parallel edges."""

    reason = "multi-graph-unsupported"


class MixedGraphUnsupportedError(LouvainError):
    """The graph holds both directed and undirected edges."""

    reason = "mixed-graph-unsupported"
