"""Async store implementations."""

from .memory import AsyncMemoryDocumentStore, AsyncMemoryNodeStore

__all__ = ['AsyncMemoryDocumentStore', 'AsyncMemoryNodeStore']
