"""Node states resolved at a revision.

A ``DocumentNodeState`` is the logical view of one node at a given revision
vector. It is kept simple - a data container. Resolving it against the
document store is the job of the ``NodeStore``.
"""

from typing import Any, Dict, Iterator, List, Mapping, Optional

from ..._common.errors import SnapshotResolutionError
from ..._common.paths import concat, elements
from ..._common.revision import Revision, RevisionVector


class DocumentNodeState:
    """A node at a fixed read revision.

    Bundled descendants are nodes whose content is stored inline in this
    node's document. They are exposed as node states of their own, in the
    order the document declares them.
    """

    def __init__(self,
                 path: str,
                 read_revision: RevisionVector,
                 last_revision: Optional[Revision],
                 properties: Mapping[str, Any],
                 bundled: Optional[Mapping[str, Mapping[str, Any]]] = None,
                 exists: bool = True):
        """Initialize a node state.

        Args:
            path: Path of the node
            read_revision: Revision vector the state was resolved at
            last_revision: Revision of the commit that produced this state
            properties: Node properties
            bundled: Properties of bundled descendants keyed by relative path
            exists: False for states representing a missing node
        """
        self.path = path
        self.read_revision = read_revision
        self.last_revision = last_revision
        self._properties = dict(properties)
        self._bundled = dict(bundled or {})
        self._exists = exists

    def exists(self) -> bool:
        return self._exists

    @property
    def properties(self) -> Dict[str, Any]:
        return dict(self._properties)

    def get_property(self, name: str, default: Any = None) -> Any:
        return self._properties.get(name, default)

    def get_bundled_children(self) -> List['DocumentNodeState']:
        """Immediate bundled children of this node.

        Raises:
            SnapshotResolutionError: If a bundled descendant has no bundled
                parent, so it cannot be placed in the tree
        """
        direct = {elements(rel)[0] for rel in self._bundled if len(elements(rel)) == 1}
        for rel in self._bundled:
            parts = elements(rel)
            if not parts or parts[0] not in direct:
                raise SnapshotResolutionError(
                    concat(self.path, rel), self.read_revision,
                    f"Bundled node {rel!r} of {self.path} has no bundled parent",
                )

        children = []
        for rel, props in self._bundled.items():
            parts = elements(rel)
            if len(parts) != 1:
                continue
            prefix = parts[0] + '/'
            nested = {
                sub[len(prefix):]: sub_props
                for sub, sub_props in self._bundled.items()
                if sub.startswith(prefix)
            }
            children.append(DocumentNodeState(
                concat(self.path, parts[0]),
                self.read_revision,
                self.last_revision,
                props,
                bundled=nested,
                exists=self._exists,
            ))
        return children

    def get_all_bundled_node_states(self) -> Iterator['DocumentNodeState']:
        """All bundled descendants, depth-first pre-order, excluding this node."""
        for child in self.get_bundled_children():
            yield child
            yield from child.get_all_bundled_node_states()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DocumentNodeState):
            return NotImplemented
        return (self.path == other.path
                and self.last_revision == other.last_revision
                and self._exists == other._exists
                and self._properties == other._properties
                and self._bundled == other._bundled)

    def __hash__(self) -> int:
        return hash((self.path, self.last_revision))

    def __repr__(self) -> str:
        return f"DocumentNodeState(path={self.path!r}, rev={self.last_revision})"
