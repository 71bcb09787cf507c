"""Async consistent traversal of all node states in a document store.

Async twin of ``snaptreelib.sync.core.traverser``: the same filter stages
and the same expansion of bundled nodes, with awaitable store I/O.
"""

import asyncio
from itertools import chain
from typing import AsyncIterator, Callable, Iterable, List, Optional

from ..._common.config import ignore_progress, include_all
from ..._common.entry import NodeStateEntry, NodeStateEntryBuilder
from ..._common.errors import ResourceReleaseError, TraversalStateError
from ..._common.log import get_logger
from ..._common.paths import DEFAULT_HIDDEN_ROOTS
from ..._common.range import LastModifiedRange
from ..._common.revision import RevisionVector
from ...sync.core.document import NodeDocument
from ...sync.core.filter import PathFilter
from .store import AsyncDocumentCursor, AsyncDocumentStore, AsyncNodeStore

logger = get_logger(__name__)


class AsyncNodeMaterializer:
    """Async version of ``NodeMaterializer``."""

    def __init__(self, node_store: AsyncNodeStore, revision: RevisionVector):
        self.node_store = node_store
        self.revision = revision

    async def entries(self, doc: NodeDocument) -> List[NodeStateEntry]:
        """Entries for the document's node and its bundled nodes (empty if absent)."""
        node_state = await self.node_store.get_node(doc.path, self.revision)
        if node_state is None or not node_state.exists():
            return []

        entries = []
        for state in chain((node_state,), node_state.get_all_bundled_node_states()):
            builder = NodeStateEntryBuilder(state, state.path)
            if doc.modified is not None:
                builder.with_last_modified(doc.modified)
            entries.append(builder.build())
        return entries


class AsyncNodeStateEntryTraverser:
    """Async iterable of ``NodeStateEntry`` objects.

    Use ``AsyncNodeStateEntryTraverser.create`` to pin the current head
    revision at construction; when constructed directly without a revision
    the head is read once, when iteration first starts.
    """

    def __init__(self,
                 label: str,
                 node_store: AsyncNodeStore,
                 document_store: AsyncDocumentStore,
                 revision: Optional[RevisionVector] = None,
                 modified_range: Optional[LastModifiedRange] = None):
        self.label = label
        self.node_store = node_store
        self.document_store = document_store
        self.revision = revision
        self.modified_range = modified_range if modified_range is not None else LastModifiedRange()

        self._cursors: List[AsyncDocumentCursor] = []
        self._progress_callback: Callable[[str], None] = ignore_progress
        self._path_predicate: Callable[[str], bool] = include_all
        self._hidden_roots = DEFAULT_HIDDEN_ROOTS
        self._started = False
        self._revision_lock: Optional[asyncio.Lock] = None
        self.path_filter: Optional[PathFilter] = None

    @classmethod
    async def create(cls,
                     label: str,
                     node_store: AsyncNodeStore,
                     document_store: AsyncDocumentStore,
                     revision: Optional[RevisionVector] = None,
                     modified_range: Optional[LastModifiedRange] = None
                     ) -> 'AsyncNodeStateEntryTraverser':
        if revision is None:
            revision = await node_store.get_head_revision()
        return cls(label, node_store, document_store, revision, modified_range)

    def get_id(self) -> str:
        return self.label

    def get_document_modification_range(self) -> LastModifiedRange:
        return self.modified_range

    def with_progress_callback(self, progress_callback: Callable[[str], None]) -> 'AsyncNodeStateEntryTraverser':
        self._check_not_started()
        self._progress_callback = progress_callback
        return self

    def with_path_predicate(self, path_predicate: Callable[[str], bool]) -> 'AsyncNodeStateEntryTraverser':
        self._check_not_started()
        self._path_predicate = path_predicate
        return self

    def with_hidden_roots(self, hidden_roots: Iterable[str]) -> 'AsyncNodeStateEntryTraverser':
        self._check_not_started()
        self._hidden_roots = tuple(hidden_roots)
        return self

    def _check_not_started(self) -> None:
        if self._started:
            raise TraversalStateError(
                f"Traverser {self.label!r} cannot be reconfigured after iteration started"
            )

    async def _resolve_revision(self) -> RevisionVector:
        """Read the head revision once, shared by concurrent iterations."""
        if self.revision is not None:
            return self.revision
        if self._revision_lock is None:
            self._revision_lock = asyncio.Lock()
        async with self._revision_lock:
            if self.revision is None:
                self.revision = await self.node_store.get_head_revision()
        return self.revision

    def __aiter__(self) -> AsyncIterator[NodeStateEntry]:
        self._started = True
        return self._included_entries()

    async def _included_entries(self) -> AsyncIterator[NodeStateEntry]:
        revision = await self._resolve_revision()

        path_filter = PathFilter(self._path_predicate, self._progress_callback, self._hidden_roots)
        self.path_filter = path_filter
        materializer = AsyncNodeMaterializer(self.node_store, revision)

        cursor = await self.document_store.get_all_documents(self.modified_range, path_filter.include_id)
        self._cursors.append(cursor)
        logger.debug("scan_started", label=self.label, range=str(self.modified_range),
                     revision=str(revision))

        produced = 0
        async for doc in cursor:
            if not path_filter.include_document(doc):
                continue
            for entry in await materializer.entries(doc):
                produced += 1
                yield entry

        logger.info("scan_completed", label=self.label, entries=produced,
                    ids_seen=path_filter.ids_seen, ids_rejected=path_filter.ids_rejected,
                    documents_rejected=path_filter.documents_rejected)

    async def aclose(self) -> None:
        """Release every store cursor opened by this traverser.

        Raises:
            ResourceReleaseError: If a cursor failed to close
        """
        errors = []
        while self._cursors:
            cursor = self._cursors.pop()
            try:
                await cursor.aclose()
            except Exception as e:
                logger.warning("resource_close_failed", resource=repr(cursor), error=str(e))
                errors.append(e)
        if errors:
            raise ResourceReleaseError(errors)

    async def __aenter__(self) -> 'AsyncNodeStateEntryTraverser':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            await self.aclose()
            return None
        # Keep the in-flight exception
        try:
            await self.aclose()
        except ResourceReleaseError as e:
            logger.warning("release_failed_during_error", label=self.label,
                           errors=[str(err) for err in e.errors])
        return None
