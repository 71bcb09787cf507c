"""High-level async API for SnapTreeLib."""

import asyncio
from typing import AsyncIterator, List, Optional

from .._common.config import TraversalConfig
from .._common.entry import NodeStateEntry
from .._common.revision import RevisionVector
from .core.store import AsyncDocumentStore, AsyncNodeStore
from .core.traverser import AsyncNodeStateEntryTraverser


async def traverser_from_config_async(config: TraversalConfig,
                                      node_store: AsyncNodeStore,
                                      document_store: AsyncDocumentStore,
                                      revision: Optional[RevisionVector] = None
                                      ) -> AsyncNodeStateEntryTraverser:
    """Build a configured async traverser pinned to ``revision`` (default: head).

    Raises:
        ValueError: If the configuration is invalid
    """
    errors = config.validate()
    if errors:
        raise ValueError(f"Invalid configuration: {'; '.join(errors)}")
    traverser = await AsyncNodeStateEntryTraverser.create(
        config.label, node_store, document_store, revision, config.modified_range,
    )
    return (traverser.with_hidden_roots(config.hidden_roots)
                     .with_path_predicate(config.path_predicate)
                     .with_progress_callback(config.progress_callback))


async def traverse_entries_async(node_store: AsyncNodeStore,
                                 document_store: AsyncDocumentStore,
                                 config: Optional[TraversalConfig] = None,
                                 revision: Optional[RevisionVector] = None
                                 ) -> AsyncIterator[NodeStateEntry]:
    """Iterate over all entries, closing the traverser when done.

    Example:
        >>> async for entry in traverse_entries_async(node_store, doc_store):
        ...     print(entry.path)
    """
    traverser = await traverser_from_config_async(config or TraversalConfig(), node_store,
                                                  document_store, revision)
    try:
        async for entry in traverser:
            yield entry
    finally:
        await traverser.aclose()


async def collect_paths_async(node_store: AsyncNodeStore,
                              document_store: AsyncDocumentStore,
                              config: Optional[TraversalConfig] = None,
                              revision: Optional[RevisionVector] = None) -> List[str]:
    """Collect the paths of all entries in traversal order."""
    return [entry.path async for entry in
            traverse_entries_async(node_store, document_store, config, revision)]


async def parallel_traverse_async(traversers: List[AsyncNodeStateEntryTraverser]) -> List[List[NodeStateEntry]]:
    """Run traversers concurrently and collect their entries.

    Every traverser is closed. The first failure is re-raised after all
    traversers finished.

    Returns:
        Entries of each traverser, in the order of ``traversers``
    """
    async def run(traverser: AsyncNodeStateEntryTraverser) -> List[NodeStateEntry]:
        try:
            return [entry async for entry in traverser]
        finally:
            await traverser.aclose()

    results = await asyncio.gather(*(run(t) for t in traversers), return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return list(results)
