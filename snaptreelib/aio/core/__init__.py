"""Core abstractions for async traversal."""

from .store import AsyncDocumentCursor, AsyncDocumentStore, AsyncNodeStore
from .traverser import AsyncNodeMaterializer, AsyncNodeStateEntryTraverser

__all__ = [
    'AsyncDocumentCursor',
    'AsyncDocumentStore',
    'AsyncNodeStore',
    'AsyncNodeMaterializer',
    'AsyncNodeStateEntryTraverser',
]
