"""
Private document cache with LRU eviction.

Store scans put every document they return into this cache, including
previous documents, so that node resolution right after a scan does not go
back to the collection.

Supports two modes:
- Safe mode (enable_protection=True): bounded, evicts least recently used
- Fast mode (enable_protection=False): unbounded for maximum performance
"""

from collections import OrderedDict
from typing import Any, Dict, Optional

from ..core.document import NodeDocument


class _DocumentCache:
    """
    Private cache of node documents keyed by document id.

    Attributes:
        hits: Number of successful lookups
        misses: Number of lookups that found nothing
    """

    def __init__(self, enable_protection: bool = True, max_entries: int = 10000):
        """
        Initialize cache storage with optional protection limits.

        Args:
            enable_protection: Enable the entry limit and LRU eviction
            max_entries: Maximum number of cached documents
        """
        self.enable_protection = enable_protection

        if enable_protection:
            # Safe mode: OrderedDict keeps LRU order
            self.cache = OrderedDict()
            self.max_entries = max_entries
        else:
            self.cache = {}
            self.max_entries = float('inf')

        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def get(self, doc_id: str) -> Optional[NodeDocument]:
        """
        Get a cached document, updating LRU order if needed.

        Returns:
            Cached document or None if not found
        """
        doc = self.cache.get(doc_id)
        if doc is None:
            self.misses += 1
            return None

        self.hits += 1
        if self.enable_protection:
            self.cache.move_to_end(doc_id)
        return doc

    def put(self, doc: NodeDocument) -> None:
        """Store a document, evicting the least recently used if full."""
        self.cache[doc.id] = doc
        if self.enable_protection:
            self.cache.move_to_end(doc.id)
            while len(self.cache) > self.max_entries:
                self._evict_oldest()

    def invalidate(self, doc_id: Optional[str] = None) -> int:
        """
        Invalidate one document, or all documents if ``doc_id`` is None.

        Returns:
            Number of entries invalidated
        """
        if doc_id is None:
            count = len(self.cache)
            self.clear()
            return count

        if self.cache.pop(doc_id, None) is None:
            return 0
        return 1

    def clear(self):
        self.cache.clear()

    def __contains__(self, doc_id: str) -> bool:
        return doc_id in self.cache

    def __len__(self) -> int:
        return len(self.cache)

    def get_stats(self) -> Dict[str, Any]:
        """
        Get cache statistics.

        Returns:
            Dictionary with cache metrics
        """
        stats = {
            'entries': len(self.cache),
            'hits': self.hits,
            'misses': self.misses,
            'evictions': self.evictions,
        }

        total_attempts = self.hits + self.misses
        if total_attempts > 0:
            stats['hit_rate'] = self.hits / total_attempts

        return stats

    def _evict_oldest(self):
        """Evict the least recently used document."""
        if len(self.cache) == 0:
            return
        oldest_key = next(iter(self.cache))
        del self.cache[oldest_key]
        self.evictions += 1
