"""SnapTreeLib - Consistent Node State Traversal.

SnapTreeLib walks every node stored in a document-oriented store as of one
fixed revision, so index data can be built out of band while the store
keeps changing. Scans can be bounded or partitioned by last modification
time and run in parallel.

Choose your implementation:
━━━━━━━━━━━━━━━━━━━━━━━━━━
Synchronous:
    from snaptreelib.sync import NodeStateEntryTraverser

Asynchronous:
    from snaptreelib.aio import AsyncNodeStateEntryTraverser
━━━━━━━━━━━━━━━━━━━━━━━━━━
"""

__version__ = "0.1.0"

from . import sync
from . import aio
from ._common.log import configure_logging

__all__ = [
    "__version__",
    "sync",
    "aio",
    "configure_logging",
]
