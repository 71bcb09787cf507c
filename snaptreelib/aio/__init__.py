"""Asynchronous implementation of SnapTreeLib.

Native async/await traversal over async document and node stores. Filters
and progress callbacks remain plain synchronous callables.
"""

# Core abstractions
from .core import (
    AsyncDocumentCursor,
    AsyncDocumentStore,
    AsyncNodeStore,
    AsyncNodeMaterializer,
    AsyncNodeStateEntryTraverser,
)

# Adapters
from .adapters import AsyncMemoryDocumentStore, AsyncMemoryNodeStore

# High-level API
from .api import (
    traverser_from_config_async,
    traverse_entries_async,
    collect_paths_async,
    parallel_traverse_async,
)

__all__ = [
    'AsyncDocumentCursor',
    'AsyncDocumentStore',
    'AsyncNodeStore',
    'AsyncNodeMaterializer',
    'AsyncNodeStateEntryTraverser',
    'AsyncMemoryDocumentStore',
    'AsyncMemoryNodeStore',
    'traverser_from_config_async',
    'traverse_entries_async',
    'collect_paths_async',
    'parallel_traverse_async',
]
