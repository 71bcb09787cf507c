"""Partitioned and parallel traversal.

Large trees are traversed faster by splitting the modification timeline
into disjoint ranges and running one traverser per range. All traversers of
one run share a single revision vector, so together they see one
consistent tree.
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Dict, Iterable, List, Optional

from .._common.entry import NodeStateEntry
from .._common.log import get_logger
from .._common.range import LastModifiedRange
from .._common.revision import RevisionVector
from .core.store import DocumentStore, NodeStore
from .core.traverser import NodeStateEntryTraverser

logger = get_logger(__name__)


def partition_range(modified_range: LastModifiedRange, parts: int) -> List[LastModifiedRange]:
    """Split ``modified_range`` into ``parts`` disjoint, adjacent ranges."""
    return modified_range.split(parts)


def partition_by_boundaries(modified_range: LastModifiedRange,
                            boundaries: Iterable[int]) -> List[LastModifiedRange]:
    """Split ``modified_range`` at sorted ``boundaries``."""
    return modified_range.split_at_boundaries(boundaries)


def check_partitions(ranges: List[LastModifiedRange],
                     modified_range: Optional[LastModifiedRange] = None) -> List[str]:
    """Check that ``ranges`` are disjoint and, sorted, cover ``modified_range``.

    Returns:
        List of problems (empty if the partitioning is sound)
    """
    problems = []
    ordered = sorted(ranges, key=lambda r: (r.lower, r.upper))
    for previous, current in zip(ordered, ordered[1:]):
        if previous.check_overlap(current):
            problems.append(f"{previous} overlaps {current}")
        elif previous.upper != current.lower:
            problems.append(f"gap between {previous} and {current}")
    if modified_range is not None and ordered:
        if ordered[0].lower != modified_range.lower or ordered[-1].upper != modified_range.upper:
            problems.append(f"partitions do not cover {modified_range}")
    return problems


def create_partitioned_traversers(label: str,
                                  node_store: NodeStore,
                                  document_store: DocumentStore,
                                  parts: int,
                                  revision: Optional[RevisionVector] = None,
                                  modified_range: Optional[LastModifiedRange] = None
                                  ) -> List[NodeStateEntryTraverser]:
    """Create one traverser per partition of ``modified_range``.

    Args:
        label: Base label; traversers are labelled ``<label>-<index>``
        node_store: Node store shared by all traversers
        document_store: Document store shared by all traversers
        parts: Number of partitions
        revision: Snapshot for every traverser (default: current head)
        modified_range: Range to partition (default: all documents)

    Returns:
        Traversers ordered by their range
    """
    if revision is None:
        revision = node_store.get_head_revision()
    if modified_range is None:
        modified_range = LastModifiedRange()

    return [
        NodeStateEntryTraverser(f"{label}-{i}", node_store, document_store, revision, part)
        for i, part in enumerate(partition_range(modified_range, parts))
    ]


def parallel_traverse(traversers: List[NodeStateEntryTraverser],
                      consumer: Callable[[NodeStateEntry], None],
                      max_workers: Optional[int] = None) -> Dict[str, int]:
    """Run traversers on a thread pool, feeding every entry to ``consumer``.

    ``consumer`` is called from worker threads and must be thread-safe.
    Every traverser is closed whether it completed or failed.

    Args:
        traversers: Traversers over disjoint ranges
        consumer: Called with each entry
        max_workers: Thread count (default: one per traverser)

    Returns:
        Number of entries produced per traverser label

    Raises:
        The first error raised by any traverser
    """
    if not traversers:
        return {}

    def run(traverser: NodeStateEntryTraverser) -> int:
        count = 0
        try:
            for entry in traverser:
                consumer(entry)
                count += 1
        finally:
            traverser.close()
        return count

    counts: Dict[str, int] = {}
    with ThreadPoolExecutor(max_workers=max_workers or len(traversers)) as executor:
        futures = {executor.submit(run, t): t for t in traversers}
        for future in as_completed(futures):
            traverser = futures[future]
            counts[traverser.get_id()] = future.result()
            logger.debug("partition_completed", label=traverser.get_id(),
                         range=str(traverser.get_document_modification_range()),
                         entries=counts[traverser.get_id()])
    return counts
