"""Test fixtures for SnapTreeLib consumers.

These helpers build populated in-memory stores so that projects feeding
traversal output into an index can test against a known tree.
"""

from typing import Any, Dict, Mapping, Optional, Tuple

from .._common.config import CacheConfig
from .._common.range import LastModifiedRange
from .._common.revision import Revision, RevisionVector
from ..sync.adapters.memory import MemoryDocumentStore, MemoryNodeStore
from ..sync.core.document import NodeDocument, SplitDocType
from ..sync.core.traverser import NodeStateEntryTraverser


class TreeFixtureBuilder:
    """Fluent builder for an in-memory tree.

    Example:
        builder = (TreeFixtureBuilder()
                   .node("/a", modified=5, bundled={"b": {}})
                   .node("/jcr:system/x", modified=6)
                   .previous("/a/c", modified=7))
        with builder.traverser(modified_range=LastModifiedRange(0, 10)) as t:
            paths = [e.path for e in t]
    """

    def __init__(self, cache_config: Optional[CacheConfig] = None, cluster_id: int = 1):
        self.document_store = MemoryDocumentStore(cache_config)
        self.node_store = MemoryNodeStore(self.document_store, cluster_id)
        self.revisions: Dict[str, Revision] = {}

    def node(self,
             path: str,
             modified: Optional[int] = None,
             bundled: Optional[Mapping[str, Mapping[str, Any]]] = None,
             **properties) -> 'TreeFixtureBuilder':
        """Commit a node with ``properties`` and optional bundled descendants."""
        self.revisions[path] = self.node_store.commit(path, properties, bundled, modified)
        return self

    def removed(self, path: str, modified: Optional[int] = None) -> 'TreeFixtureBuilder':
        """Remove a node; its document stays in the store."""
        self.revisions[path] = self.node_store.remove(path, modified)
        return self

    def previous(self, path: str, modified: Optional[int] = None, height: int = 0,
                 split_type: SplitDocType = SplitDocType.DEFAULT) -> 'TreeFixtureBuilder':
        """Add a previous (split) document for ``path``."""
        self.node_store.add_previous_document(path, height, modified, split_type)
        return self

    def document(self, doc: NodeDocument) -> 'TreeFixtureBuilder':
        """Write a raw document as is."""
        self.document_store.write(doc)
        return self

    @property
    def head(self) -> RevisionVector:
        return self.node_store.get_head_revision()

    def build(self) -> Tuple[MemoryNodeStore, MemoryDocumentStore]:
        return self.node_store, self.document_store

    def traverser(self,
                  label: str = "fixture",
                  revision: Optional[RevisionVector] = None,
                  modified_range: Optional[LastModifiedRange] = None) -> NodeStateEntryTraverser:
        """Create a traverser over the built tree."""
        return NodeStateEntryTraverser(label, self.node_store, self.document_store,
                                       revision, modified_range)
