"""Expansion of documents into node state entries."""

from itertools import chain
from typing import Iterator

from ..._common.entry import NodeStateEntry, NodeStateEntryBuilder
from ..._common.revision import RevisionVector
from .document import NodeDocument
from .store import NodeStore


class NodeMaterializer:
    """Turns a document into the entries of the nodes it holds at a revision.

    The result depends only on the document and the revision; the store is
    read, never written.
    """

    def __init__(self, node_store: NodeStore, revision: RevisionVector):
        self.node_store = node_store
        self.revision = revision

    def entries(self, doc: NodeDocument) -> Iterator[NodeStateEntry]:
        """Yield the entry of the document's node followed by its bundled nodes.

        Nothing is yielded if the node does not exist at the revision.
        """
        node_state = self.node_store.get_node(doc.path, self.revision)

        # A document can outlive its node, e.g. after a concurrent removal
        if node_state is None or not node_state.exists():
            return

        for state in chain((node_state,), node_state.get_all_bundled_node_states()):
            builder = NodeStateEntryBuilder(state, state.path)
            if doc.modified is not None:
                builder.with_last_modified(doc.modified)
            yield builder.build()
