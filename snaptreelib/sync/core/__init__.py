"""Core synchronous components: documents, stores, filter and traverser."""

from .closer import Closer
from .document import Commit, NodeDocument, SplitDocType
from .filter import PathFilter
from .materializer import NodeMaterializer
from .node import DocumentNodeState
from .store import DocumentCursor, DocumentStore, NodeStore
from .traverser import NodeStateEntryTraverser

__all__ = [
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
]
