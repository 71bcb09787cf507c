"""Async wrappers around the in-memory reference stores.

The wrapped sync stores never block for long, so each call runs inline and
the scan yields to the event loop between documents.
"""

import asyncio
from typing import AsyncIterator, Callable, Optional

from ..._common.range import LastModifiedRange
from ..._common.revision import RevisionVector
from ...sync.adapters.memory import MemoryDocumentStore, MemoryNodeStore
from ...sync.core.document import NodeDocument
from ...sync.core.node import DocumentNodeState
from ..core.store import AsyncDocumentCursor, AsyncDocumentStore, AsyncNodeStore


class AsyncMemoryDocumentStore(AsyncDocumentStore):
    """Async view of a ``MemoryDocumentStore``."""

    def __init__(self, store: Optional[MemoryDocumentStore] = None):
        self.store = store if store is not None else MemoryDocumentStore()

    @property
    def open_cursors(self) -> int:
        return self.store.open_cursors

    async def get_all_documents(self,
                                modified_range: LastModifiedRange,
                                id_filter: Callable[[str], bool]) -> AsyncDocumentCursor:
        cursor = self.store.get_all_documents(modified_range, id_filter)

        async def documents() -> AsyncIterator[NodeDocument]:
            for doc in cursor:
                yield doc
                await asyncio.sleep(0)

        async def on_close() -> None:
            cursor.close()

        return AsyncDocumentCursor(documents(), on_close=on_close, description=cursor.description)

    async def find(self, doc_id: str) -> Optional[NodeDocument]:
        return self.store.find(doc_id)


class AsyncMemoryNodeStore(AsyncNodeStore):
    """Async view of a ``MemoryNodeStore``."""

    def __init__(self, node_store: MemoryNodeStore):
        self.node_store = node_store

    async def get_head_revision(self) -> RevisionVector:
        return self.node_store.get_head_revision()

    async def get_node(self, path: str, revision: RevisionVector) -> Optional[DocumentNodeState]:
        return self.node_store.get_node(path, revision)
