"""Store implementations for synchronous traversal."""

from .memory import MemoryDocumentStore, MemoryNodeStore

__all__ = ['MemoryDocumentStore', 'MemoryNodeStore']
