"""In-memory document and node store.

A complete, thread-safe reference implementation of ``DocumentStore`` and
``NodeStore``. Writes go through ``MemoryNodeStore``, which keeps a
revision clock and an MVCC history per document, so readers holding an
older revision vector keep seeing the old tree while writes continue.
"""

import threading
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional

from ..._common.config import CacheConfig
from ..._common.errors import SnapshotResolutionError, StoreUnavailableError
from ..._common.log import get_logger
from ..._common.paths import get_id_from_path, get_previous_id_from_path
from ..._common.range import LastModifiedRange
from ..._common.revision import Revision, RevisionVector
from ..core.document import Commit, NodeDocument, SplitDocType
from ..core.node import DocumentNodeState
from ..core.store import DocumentCursor, DocumentStore, NodeStore
from ._document_cache import _DocumentCache

logger = get_logger(__name__)


class MemoryDocumentStore(DocumentStore):
    """Node document collection held in a dict.

    Queries take a snapshot of the matching documents when the cursor is
    opened and stream them in id order. The store counts open cursors so
    callers can verify that every cursor was released.

    Attributes:
        open_cursors: Number of cursors not yet closed
        queries: Number of queries executed
        cache: Document cache filled by scans (None when disabled)
    """

    def __init__(self, cache_config: Optional[CacheConfig] = None):
        cache_config = cache_config or CacheConfig()
        errors = cache_config.validate()
        if errors:
            raise ValueError(f"Invalid cache configuration: {'; '.join(errors)}")

        self._lock = threading.RLock()
        self._documents: Dict[str, NodeDocument] = {}
        self._available = True
        self.open_cursors = 0
        self.queries = 0
        self.cache: Optional[_DocumentCache] = None
        if cache_config.enabled:
            self.cache = _DocumentCache(cache_config.enable_protection, cache_config.max_entries)

    # Availability - lets callers simulate a lost connection

    def set_available(self, available: bool) -> None:
        """Make the store (un)reachable. Open cursors fail on their next fetch."""
        with self._lock:
            self._available = available

    def _check_available(self) -> None:
        if not self._available:
            raise StoreUnavailableError("Document store is not available")

    # DocumentStore

    def get_all_documents(self,
                          modified_range: LastModifiedRange,
                          id_filter: Callable[[str], bool]) -> DocumentCursor:
        with self._lock:
            self._check_available()
            matching = [
                self._documents[doc_id]
                for doc_id in sorted(self._documents)
                if self._in_range(modified_range, self._documents[doc_id])
            ]
            self.open_cursors += 1
            self.queries += 1

        logger.debug("query_opened", range=str(modified_range), matching=len(matching))
        return DocumentCursor(
            self._stream(matching, id_filter),
            on_close=self._cursor_closed,
            description=f"nodes {modified_range}",
        )

    @staticmethod
    def _in_range(modified_range: LastModifiedRange, doc: NodeDocument) -> bool:
        # The full range also returns documents without a modification time
        return modified_range.covers_all_documents() or modified_range.contains(doc.modified)

    def _stream(self, documents: List[NodeDocument],
                id_filter: Callable[[str], bool]) -> Iterator[NodeDocument]:
        for doc in documents:
            with self._lock:
                self._check_available()
            if not id_filter(doc.id):
                continue
            self._cache_if_current(doc)
            yield doc

    def _cursor_closed(self) -> None:
        with self._lock:
            self.open_cursors -= 1

    def _cache_if_current(self, doc: NodeDocument) -> None:
        if self.cache is None:
            return
        with self._lock:
            # A newer version may have been written since the query opened
            if self._documents.get(doc.id) is doc:
                self.cache.put(doc)

    def find(self, doc_id: str) -> Optional[NodeDocument]:
        with self._lock:
            self._check_available()
            if self.cache is not None:
                cached = self.cache.get(doc_id)
                if cached is not None:
                    return cached
            doc = self._documents.get(doc_id)
            if doc is not None and self.cache is not None:
                self.cache.put(doc)
            return doc

    def estimated_size(self, modified_range: LastModifiedRange) -> Optional[int]:
        with self._lock:
            return sum(1 for doc in self._documents.values()
                       if self._in_range(modified_range, doc))

    # Writes

    def write(self, doc: NodeDocument) -> None:
        """Create or replace a document."""
        with self._lock:
            self._check_available()
            self._documents[doc.id] = doc
            if self.cache is not None:
                self.cache.invalidate(doc.id)

    def delete(self, doc_id: str) -> bool:
        """Physically remove a document. Returns False if it did not exist."""
        with self._lock:
            self._check_available()
            if self.cache is not None:
                self.cache.invalidate(doc_id)
            return self._documents.pop(doc_id, None) is not None

    def update(self, doc_id: str, updater: Callable[[Optional[NodeDocument]], NodeDocument]) -> NodeDocument:
        """Atomically replace a document with ``updater(current)``."""
        with self._lock:
            doc = updater(self._documents.get(doc_id))
            self.write(doc)
            return doc

    def ids(self) -> List[str]:
        with self._lock:
            return sorted(self._documents)

    def __len__(self) -> int:
        with self._lock:
            return len(self._documents)


class MemoryNodeStore(NodeStore):
    """Node store on top of a ``MemoryDocumentStore``.

    Every write gets a new revision from the store's clock and advances the
    head revision vector. ``get_node`` resolves against the current
    documents, so a node read at a fixed vector is the same however many
    writes happen in between.
    """

    def __init__(self, document_store: Optional[MemoryDocumentStore] = None, cluster_id: int = 1):
        self.document_store = document_store if document_store is not None else MemoryDocumentStore()
        self.cluster_id = cluster_id
        self._lock = threading.RLock()
        self._clock = 0
        self._head = RevisionVector()

    def get_head_revision(self) -> RevisionVector:
        with self._lock:
            return self._head

    def _new_revision(self) -> Revision:
        self._clock += 1
        return Revision(self._clock, 0, self.cluster_id)

    def commit(self,
               path: str,
               properties: Mapping[str, Any],
               bundled: Optional[Mapping[str, Mapping[str, Any]]] = None,
               modified: Optional[int] = None) -> Revision:
        """Write the node at ``path`` with ``properties`` and bundled descendants.

        Args:
            path: Node path
            properties: Complete property map of the node
            bundled: Bundled descendants keyed by relative path
            modified: Document modification time (default: revision timestamp)

        Returns:
            Revision of the commit
        """
        return self._apply(path, dict(properties), dict(bundled or {}), modified)

    def remove(self, path: str, modified: Optional[int] = None) -> Revision:
        """Remove the node at ``path``. Its document stays in the collection."""
        return self._apply(path, None, {}, modified)

    def _apply(self, path, properties, bundled, modified) -> Revision:
        with self._lock:
            revision = self._new_revision()
            commit = Commit(revision, properties, bundled)
            doc_modified = modified if modified is not None else revision.timestamp

            def updater(current: Optional[NodeDocument]) -> NodeDocument:
                if current is None:
                    current = NodeDocument.for_path(path)
                return current.with_commit(commit, doc_modified)

            self.document_store.update(get_id_from_path(path), updater)
            self._head = self._head.update(revision)
            logger.debug("commit_applied", path=path, revision=str(revision),
                         deletion=properties is None)
            return revision

    def add_previous_document(self,
                              path: str,
                              height: int = 0,
                              modified: Optional[int] = None,
                              split_type: SplitDocType = SplitDocType.DEFAULT) -> NodeDocument:
        """Split the current history of ``path`` into a previous document."""
        with self._lock:
            main = self.document_store.find(get_id_from_path(path))
            commits = main.commits if main is not None else ()
            revision = self._head.get_revision(self.cluster_id) or Revision(0, 0, self.cluster_id)
            doc = NodeDocument(
                id=get_previous_id_from_path(path, revision, height),
                path=path,
                modified=modified,
                split_type=split_type,
                commits=commits,
            )
            self.document_store.write(doc)
            return doc

    def get_node(self, path: str, revision: RevisionVector) -> Optional[DocumentNodeState]:
        doc = self.document_store.find(get_id_from_path(path))
        if doc is None:
            return None
        if doc.path != path:
            raise SnapshotResolutionError(path, revision, f"Document {doc.id} belongs to {doc.path}")
        commit = doc.get_node_at_revision(revision)
        if commit is None:
            return None
        return DocumentNodeState(path, revision, commit.revision, commit.properties, commit.bundled)
