"""Configuration system for SnapTreeLib.

This module defines how users describe a traversal: which part of the
modification timeline to scan, which paths to keep, and how to observe
progress. The same configuration drives the sync and aio traversers.
"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from .paths import DEFAULT_HIDDEN_ROOTS, is_absolute
from .range import LastModifiedRange


def include_all(path: str) -> bool:
    """Default path predicate."""
    return True


def ignore_progress(doc_id: str) -> None:
    """Default progress callback."""
    return None


@dataclass
class CacheConfig:
    """Configuration of the document cache filled by store scans."""

    enabled: bool = True
    enable_protection: bool = True   # Bound the cache and evict LRU entries
    max_entries: int = 10000

    def validate(self) -> List[str]:
        errors = []
        if self.enable_protection and self.max_entries <= 0:
            errors.append("max_entries must be positive")
        return errors


@dataclass
class TraversalConfig:
    """Complete configuration for a node state traversal.

    Attributes:
        label: Identifier used in logs and partition bookkeeping
        modified_range: Only documents modified inside this range are read
        hidden_roots: Subtrees that are never part of the traversal
        path_predicate: ``path -> bool``; False excludes the path
        progress_callback: ``id -> None``; called for every raw id scanned
        partitions: Number of modification range partitions for parallel runs
        max_workers: Threads used by parallel traversal (None = one per partition)
    """

    label: str = "traversal"
    modified_range: LastModifiedRange = field(default_factory=LastModifiedRange)
    hidden_roots: Tuple[str, ...] = DEFAULT_HIDDEN_ROOTS
    path_predicate: Callable[[str], bool] = include_all
    progress_callback: Callable[[str], None] = ignore_progress
    partitions: int = 1
    max_workers: Optional[int] = None

    @classmethod
    def incremental(cls, label: str, since: int, until: Optional[int] = None) -> 'TraversalConfig':
        """Config for re-scanning only documents modified since ``since``.

        Args:
            label: Traversal label
            since: Inclusive lower modification bound
            until: Exclusive upper bound (None = no upper bound)
        """
        if until is None:
            modified_range = LastModifiedRange(since)
        else:
            modified_range = LastModifiedRange(since, until)
        return cls(label=label, modified_range=modified_range)

    @classmethod
    def partitioned(cls, label: str, partitions: int,
                    max_workers: Optional[int] = None) -> 'TraversalConfig':
        """Config for a full scan split into ``partitions`` parallel ranges."""
        return cls(label=label, partitions=partitions, max_workers=max_workers)

    def validate(self) -> List[str]:
        """Validate configuration for consistency.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if not self.label:
            errors.append("label cannot be empty")

        for root in self.hidden_roots:
            if not is_absolute(root):
                errors.append(f"hidden root must be an absolute path: {root!r}")

        if not callable(self.path_predicate):
            errors.append("path_predicate must be callable")

        if not callable(self.progress_callback):
            errors.append("progress_callback must be callable")

        if self.partitions <= 0:
            errors.append("partitions must be positive")

        if self.max_workers is not None and self.max_workers <= 0:
            errors.append("max_workers must be positive")

        return errors
