"""
Exception types raised by the reconciliation engine.

The engine favors total functions: malformed templates and partial
contract data degrade to empty results instead of raising. The types
below cover programming errors only (e.g. driving an editing surface
through an illegal state transition).
"""


class ReconcilerError(RuntimeError):
    """Base class for all reconciler exceptions."""


class SurfaceStateError(ReconcilerError):
    """Raised on an illegal surface state transition or use while detached."""
