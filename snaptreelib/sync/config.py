"""Configuration re-export for the sync package.

Re-exports configuration and value types from the _common package so sync
users need a single import location.
"""

from .._common.config import CacheConfig, TraversalConfig
from .._common.entry import NodeStateEntry
from .._common.range import LastModifiedRange, MAX_MODIFIED
from .._common.revision import Revision, RevisionVector

__all__ = [
    'CacheConfig',
    'TraversalConfig',
    'NodeStateEntry',
    'LastModifiedRange',
    'MAX_MODIFIED',
    'Revision',
    'RevisionVector',
]
