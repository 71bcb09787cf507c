"""High-level API for SnapTreeLib.

This module provides simple, functional interfaces for common traversal
tasks. These functions wrap ``NodeStateEntryTraverser`` and take care of
releasing its resources.
"""

from typing import Callable, Dict, Iterator, List, Optional

from .._common.config import TraversalConfig
from .._common.entry import NodeStateEntry
from .._common.revision import RevisionVector
from .core.store import DocumentStore, NodeStore
from .core.traverser import NodeStateEntryTraverser
from .partition import create_partitioned_traversers, parallel_traverse


def traverser_from_config(config: TraversalConfig,
                          node_store: NodeStore,
                          document_store: DocumentStore,
                          revision: Optional[RevisionVector] = None) -> NodeStateEntryTraverser:
    """Build a configured traverser.

    Raises:
        ValueError: If the configuration is invalid
    """
    _validate(config)
    return (NodeStateEntryTraverser(config.label, node_store, document_store,
                                    revision, config.modified_range)
            .with_hidden_roots(config.hidden_roots)
            .with_path_predicate(config.path_predicate)
            .with_progress_callback(config.progress_callback))


def traverse_entries(node_store: NodeStore,
                     document_store: DocumentStore,
                     config: Optional[TraversalConfig] = None,
                     revision: Optional[RevisionVector] = None) -> Iterator[NodeStateEntry]:
    """Iterate over all entries, closing the traverser when done.

    The traverser is closed when the iterator is exhausted, fails, or is
    closed by the caller (``close()`` on the returned generator).

    Example:
        >>> for entry in traverse_entries(node_store, doc_store):
        ...     print(entry.path, entry.last_modified)
    """
    traverser = traverser_from_config(config or TraversalConfig(), node_store,
                                      document_store, revision)
    try:
        yield from traverser
    finally:
        traverser.close()


def collect_paths(node_store: NodeStore,
                  document_store: DocumentStore,
                  config: Optional[TraversalConfig] = None,
                  revision: Optional[RevisionVector] = None) -> List[str]:
    """Collect the paths of all entries in traversal order."""
    return [entry.path for entry in traverse_entries(node_store, document_store, config, revision)]


def count_entries(node_store: NodeStore,
                  document_store: DocumentStore,
                  config: Optional[TraversalConfig] = None,
                  revision: Optional[RevisionVector] = None) -> int:
    """Count all entries a traversal produces."""
    return sum(1 for _ in traverse_entries(node_store, document_store, config, revision))


def traverse_partitioned(node_store: NodeStore,
                         document_store: DocumentStore,
                         consumer: Callable[[NodeStateEntry], None],
                         config: Optional[TraversalConfig] = None,
                         revision: Optional[RevisionVector] = None) -> Dict[str, int]:
    """Traverse ``config.partitions`` ranges in parallel at one revision.

    Returns:
        Number of entries produced per partition label
    """
    config = config or TraversalConfig()
    _validate(config)
    traversers = create_partitioned_traversers(
        config.label, node_store, document_store, config.partitions,
        revision, config.modified_range,
    )
    for traverser in traversers:
        (traverser.with_hidden_roots(config.hidden_roots)
                  .with_path_predicate(config.path_predicate)
                  .with_progress_callback(config.progress_callback))
    return parallel_traverse(traversers, consumer, config.max_workers)


def _validate(config: TraversalConfig) -> None:
    errors = config.validate()
    if errors:
        raise ValueError(f"Invalid configuration: {'; '.join(errors)}")
