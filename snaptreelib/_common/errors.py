"""Exception hierarchy for SnapTreeLib.

All traversal failures are fatal for the traversal instance that raised
them. Nothing here is retried or suppressed by the library; an absent node
at the traversal revision is a normal outcome and has no exception.
"""


class TraversalError(Exception):
    """Base class for every error raised by SnapTreeLib."""
    pass


class DocumentStoreError(TraversalError):
    """Raised when the document store cannot serve a query."""
    pass


class StoreUnavailableError(DocumentStoreError):
    """Raised when the document store cannot be reached or a scan fails mid-way."""
    pass


class CursorClosedError(DocumentStoreError):
    """Raised when a closed document cursor is iterated."""
    pass


class SnapshotResolutionError(TraversalError):
    """Raised when a node cannot be resolved at the traversal revision.

    Attributes:
        path: Path of the node being resolved
        revision: The revision vector used for resolution
    """

    def __init__(self, path: str, revision, message: str = None):
        self.path = path
        self.revision = revision
        super().__init__(message or f"Cannot resolve {path} at {revision}")


class ResourceReleaseError(TraversalError):
    """Raised when one or more scoped resources failed to close.

    Every registered resource is attempted before this is raised.

    Attributes:
        errors: The exceptions raised by the individual close calls
    """

    def __init__(self, errors):
        self.errors = list(errors)
        summary = '; '.join(f"{type(e).__name__}: {e}" for e in self.errors)
        super().__init__(f"Failed to release {len(self.errors)} resource(s): {summary}")


class TraversalStateError(TraversalError):
    """Raised when a traverser is reconfigured after iteration began."""
    pass
