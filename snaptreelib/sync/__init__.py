"""Synchronous implementation of SnapTreeLib.

All components here operate in a blocking, pull-based manner: entries are
produced one at a time as the caller iterates.
"""

# Core components
from .core.closer import Closer
from .core.document import Commit, NodeDocument, SplitDocType
from .core.filter import PathFilter
from .core.materializer import NodeMaterializer
from .core.node import DocumentNodeState
from .core.store import DocumentCursor, DocumentStore, NodeStore
from .core.traverser import NodeStateEntryTraverser

# Adapters
from .adapters.memory import MemoryDocumentStore, MemoryNodeStore

# Partitioning
from .partition import (
    partition_range,
    partition_by_boundaries,
    check_partitions,
    create_partitioned_traversers,
    parallel_traverse,
)

# Configuration and shared types
from .config import (
    TraversalConfig,
    CacheConfig,
    LastModifiedRange,
    Revision,
    RevisionVector,
    NodeStateEntry,
)

# High-level API
from .api import (
    traverser_from_config,
    traverse_entries,
    collect_paths,
    count_entries,
    traverse_partitioned,
)

__all__ = [
    # Core
    'Closer',
    'Commit',
    'NodeDocument',
    'SplitDocType',
    'PathFilter',
    'NodeMaterializer',
    'DocumentNodeState',
    'DocumentCursor',
    'DocumentStore',
    'NodeStore',
    'NodeStateEntryTraverser',
    # Adapters
    'MemoryDocumentStore',
    'MemoryNodeStore',
    # Partitioning
    'partition_range',
    'partition_by_boundaries',
    'check_partitions',
    'create_partitioned_traversers',
    'parallel_traverse',
    # Config
    'TraversalConfig',
    'CacheConfig',
    'LastModifiedRange',
    'Revision',
    'RevisionVector',
    'NodeStateEntry',
    # API
    'traverser_from_config',
    'traverse_entries',
    'collect_paths',
    'count_entries',
    'traverse_partitioned',
]
