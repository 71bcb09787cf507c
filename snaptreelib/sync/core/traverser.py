"""Consistent traversal of all node states in a document store.

The ``NodeStateEntryTraverser`` reads every document of the node collection
inside a modification range and resolves each one at a single revision
vector. Concurrent writes to the store do not affect the result: every node
is read as of the same snapshot.
"""

from typing import Callable, Iterable, Iterator, Optional

from ..._common.config import ignore_progress, include_all
from ..._common.entry import NodeStateEntry
from ..._common.errors import ResourceReleaseError, TraversalStateError
from ..._common.log import get_logger
from ..._common.paths import DEFAULT_HIDDEN_ROOTS
from ..._common.range import LastModifiedRange
from ..._common.revision import RevisionVector
from .closer import Closer
from .filter import PathFilter
from .materializer import NodeMaterializer
from .store import DocumentStore, NodeStore

logger = get_logger(__name__)


class NodeStateEntryTraverser:
    """Lazy, single-pass iterable of ``NodeStateEntry`` objects.

    Every call to ``iter()`` starts a fresh scan of the document store. The
    store cursors opened by those scans are released by ``close()``, which
    must be called whether iteration completed, was abandoned or failed.

    Example:
        with NodeStateEntryTraverser("full", node_store, doc_store) as traverser:
            for entry in traverser.with_path_predicate(lambda p: p.startswith("/content")):
                index(entry)
    """

    def __init__(self,
                 label: str,
                 node_store: NodeStore,
                 document_store: DocumentStore,
                 revision: Optional[RevisionVector] = None,
                 modified_range: Optional[LastModifiedRange] = None):
        """Initialize the traverser.

        Args:
            label: Identifier of this traversal, used in logs and by callers
                that track partitions
            node_store: Resolves node states at ``revision``
            document_store: Source of the raw documents
            revision: Snapshot to read (default: current head revision)
            modified_range: Only documents modified inside this range are
                traversed (default: all documents)
        """
        self.label = label
        self.node_store = node_store
        self.document_store = document_store
        self.revision = revision if revision is not None else node_store.get_head_revision()
        self.modified_range = modified_range if modified_range is not None else LastModifiedRange()

        self._closer = Closer()
        self._progress_callback: Callable[[str], None] = ignore_progress
        self._path_predicate: Callable[[str], bool] = include_all
        self._hidden_roots = DEFAULT_HIDDEN_ROOTS
        self._started = False
        self.path_filter: Optional[PathFilter] = None

    def get_id(self) -> str:
        return self.label

    def get_document_modification_range(self) -> LastModifiedRange:
        """Return the modification range of the documents this traverser reads."""
        return self.modified_range

    # Configuration - only allowed before iteration starts

    def with_progress_callback(self, progress_callback: Callable[[str], None]) -> 'NodeStateEntryTraverser':
        """Call ``progress_callback(id)`` for every document id the scan visits."""
        self._check_not_started()
        self._progress_callback = progress_callback
        return self

    def with_path_predicate(self, path_predicate: Callable[[str], bool]) -> 'NodeStateEntryTraverser':
        """Only traverse paths for which ``path_predicate(path)`` is True."""
        self._check_not_started()
        self._path_predicate = path_predicate
        return self

    def with_hidden_roots(self, hidden_roots: Iterable[str]) -> 'NodeStateEntryTraverser':
        """Replace the subtrees that are always excluded."""
        self._check_not_started()
        self._hidden_roots = tuple(hidden_roots)
        return self

    def _check_not_started(self) -> None:
        if self._started:
            raise TraversalStateError(
                f"Traverser {self.label!r} cannot be reconfigured after iteration started"
            )

    # Iteration

    def __iter__(self) -> Iterator[NodeStateEntry]:
        self._started = True
        return self._included_entries()

    def _included_entries(self) -> Iterator[NodeStateEntry]:
        path_filter = PathFilter(self._path_predicate, self._progress_callback, self._hidden_roots)
        self.path_filter = path_filter
        materializer = NodeMaterializer(self.node_store, self.revision)

        cursor = self._closer.register(
            self.document_store.get_all_documents(self.modified_range, path_filter.include_id)
        )
        logger.debug("scan_started", label=self.label, range=str(self.modified_range),
                     revision=str(self.revision))

        produced = 0
        for doc in cursor:
            if not path_filter.include_document(doc):
                continue
            for entry in materializer.entries(doc):
                produced += 1
                yield entry

        logger.info("scan_completed", label=self.label, entries=produced,
                    ids_seen=path_filter.ids_seen, ids_rejected=path_filter.ids_rejected,
                    documents_rejected=path_filter.documents_rejected)

    # Resource management

    def close(self) -> None:
        """Release every store cursor opened by this traverser.

        Raises:
            ResourceReleaseError: If a cursor failed to close
        """
        pending = self._closer.pending
        self._closer.close()
        if pending:
            logger.debug("traverser_closed", label=self.label, released=pending)

    def __enter__(self) -> 'NodeStateEntryTraverser':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.close()
            return None
        # Keep the in-flight exception
        try:
            self.close()
        except ResourceReleaseError as e:
            logger.warning("release_failed_during_error", label=self.label,
                           errors=[str(err) for err in e.errors])
        return None

    def __repr__(self) -> str:
        return (f"NodeStateEntryTraverser(label={self.label!r}, "
                f"range={self.modified_range}, revision={self.revision})")
