"""Async store abstractions.

Same contracts as ``snaptreelib.sync.core.store`` with awaitable I/O.
Callbacks passed into the store (the id filter) stay synchronous.
"""

from abc import ABC, abstractmethod
from typing import AsyncIterator, Awaitable, Callable, Optional

from ..._common.errors import CursorClosedError
from ..._common.range import LastModifiedRange
from ..._common.revision import RevisionVector
from ...sync.core.document import NodeDocument
from ...sync.core.node import DocumentNodeState


class AsyncDocumentCursor:
    """Closeable async iterator over documents of one store query.

    Close with ``await cursor.aclose()`` or ``async with cursor``. Closing
    is idempotent.
    """

    def __init__(self,
                 documents: AsyncIterator[NodeDocument],
                 on_close: Optional[Callable[[], Awaitable[None]]] = None,
                 description: str = ''):
        self._documents = documents
        self._on_close = on_close
        self.description = description
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def __aiter__(self) -> 'AsyncDocumentCursor':
        if self._closed:
            raise CursorClosedError(f"Cursor is closed: {self.description}")
        return self

    async def __anext__(self) -> NodeDocument:
        if self._closed:
            raise CursorClosedError(f"Cursor is closed: {self.description}")
        return await self._documents.__anext__()

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        aclose = getattr(self._documents, 'aclose', None)
        try:
            if aclose is not None:
                await aclose()
        finally:
            if self._on_close is not None:
                await self._on_close()

    async def __aenter__(self) -> 'AsyncDocumentCursor':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
        return None


class AsyncDocumentStore(ABC):
    """Abstract async access to the node document collection."""

    @abstractmethod
    async def get_all_documents(self,
                                modified_range: LastModifiedRange,
                                id_filter: Callable[[str], bool]) -> AsyncDocumentCursor:
        """Open a cursor over documents modified inside ``modified_range``, in id order."""
        pass

    @abstractmethod
    async def find(self, doc_id: str) -> Optional[NodeDocument]:
        pass


class AsyncNodeStore(ABC):
    """Abstract async resolver of node states at a revision vector."""

    @abstractmethod
    async def get_head_revision(self) -> RevisionVector:
        pass

    @abstractmethod
    async def get_node(self, path: str, revision: RevisionVector) -> Optional[DocumentNodeState]:
        pass
