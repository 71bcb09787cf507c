"""Store abstractions for SnapTreeLib.

Two collaborators make up a store, mirroring how a document-oriented node
store is layered:

- ``DocumentStore`` reads raw documents (the query primitive)
- ``NodeStore`` resolves node states at a revision vector (the snapshot
  resolver)

Traversal code only talks to these abstractions, so any backend that can
stream documents in id order can be traversed.
"""

from abc import ABC, abstractmethod
from typing import Callable, Iterator, Optional

from ..._common.errors import CursorClosedError
from ..._common.range import LastModifiedRange
from ..._common.revision import RevisionVector
from .document import NodeDocument
from .node import DocumentNodeState


class DocumentCursor:
    """Closeable, single-pass iterable over documents of one store query.

    The cursor owns a store-side resource. It must be closed, either with
    ``close()`` or by using it as a context manager; closing is idempotent
    and does not depend on how far iteration progressed.
    """

    def __init__(self,
                 documents: Iterator[NodeDocument],
                 on_close: Optional[Callable[[], None]] = None,
                 description: str = ''):
        """Initialize the cursor.

        Args:
            documents: Iterator producing the query results on demand
            on_close: Called exactly once when the cursor is closed
            description: Human readable description of the query
        """
        self._documents = documents
        self._on_close = on_close
        self.description = description
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def __iter__(self) -> 'DocumentCursor':
        if self._closed:
            raise CursorClosedError(f"Cursor is closed: {self.description}")
        return self

    def __next__(self) -> NodeDocument:
        if self._closed:
            raise CursorClosedError(f"Cursor is closed: {self.description}")
        return next(self._documents)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        close = getattr(self._documents, 'close', None)
        try:
            if close is not None:
                close()
        finally:
            if self._on_close is not None:
                self._on_close()

    def __enter__(self) -> 'DocumentCursor':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return None

    def __repr__(self) -> str:
        state = 'closed' if self._closed else 'open'
        return f"DocumentCursor({self.description!r}, {state})"


class DocumentStore(ABC):
    """Abstract access to the node document collection."""

    @abstractmethod
    def get_all_documents(self,
                          modified_range: LastModifiedRange,
                          id_filter: Callable[[str], bool]) -> DocumentCursor:
        """Stream every document modified inside ``modified_range``.

        A range that covers all documents also returns documents without a
        modification time; any narrower range only returns documents whose
        ``modified`` lies inside it.

        Documents are produced lazily in id order. ``id_filter`` is called
        once for every id the query visits, before the document is converted;
        documents whose id is rejected are skipped.

        Args:
            modified_range: Half-open range of modification times
            id_filter: ``id -> bool`` predicate

        Returns:
            An open DocumentCursor the caller must close

        Raises:
            StoreUnavailableError: If the query cannot be executed
        """
        pass

    @abstractmethod
    def find(self, doc_id: str) -> Optional[NodeDocument]:
        """Read a single document by id.

        Returns:
            The document or None if it does not exist
        """
        pass

    def estimated_size(self, modified_range: LastModifiedRange) -> Optional[int]:
        """Estimate the number of documents in ``modified_range``.

        Used for progress reporting. Return None if estimation is not possible.
        """
        return None


class NodeStore(ABC):
    """Abstract resolver of node states at a revision vector."""

    @abstractmethod
    def get_head_revision(self) -> RevisionVector:
        """Return the revision vector of the current head state."""
        pass

    @abstractmethod
    def get_node(self, path: str, revision: RevisionVector) -> Optional[DocumentNodeState]:
        """Resolve the node at ``path`` as seen at ``revision``.

        Returns:
            The node state, or None if no node exists at ``path`` at that
            revision.

        Raises:
            SnapshotResolutionError: If the state cannot be read consistently
        """
        pass
