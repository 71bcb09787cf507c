"""Common components shared between sync and aio implementations.

This internal package contains non-I/O code that is identical between
both implementations. It should NOT be imported directly by users.

Components here include:
- Configuration classes (TraversalConfig, CacheConfig)
- Value types (Revision, RevisionVector, LastModifiedRange, NodeStateEntry)
- Path and id utilities (pure computation, no I/O)
- The exception hierarchy

Important: This package must NEVER import from sync or aio to avoid
circular dependencies.
"""

from .config import CacheConfig, TraversalConfig, include_all, ignore_progress
from .entry import NodeStateEntry, NodeStateEntryBuilder
from .errors import (
    TraversalError,
    DocumentStoreError,
    StoreUnavailableError,
    CursorClosedError,
    SnapshotResolutionError,
    ResourceReleaseError,
    TraversalStateError,
)
from .range import LastModifiedRange, MAX_MODIFIED
from .revision import Revision, RevisionVector

__all__ = [
    'CacheConfig',
    'TraversalConfig',
    'include_all',
    'ignore_progress',
    'NodeStateEntry',
    'NodeStateEntryBuilder',
    'TraversalError',
    'DocumentStoreError',
    'StoreUnavailableError',
    'CursorClosedError',
    'SnapshotResolutionError',
    'ResourceReleaseError',
    'TraversalStateError',
    'LastModifiedRange',
    'MAX_MODIFIED',
    'Revision',
    'RevisionVector',
]
