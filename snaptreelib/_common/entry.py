"""The unit produced by a traversal."""

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class NodeStateEntry:
    """A node state at the traversal revision together with its path.

    ``last_modified`` is copied from the document the node was read from;
    bundled nodes share their parent document's value.
    """

    path: str
    node_state: Any
    last_modified: Optional[int] = None

    def __str__(self) -> str:
        return self.path


class NodeStateEntryBuilder:
    """Builder for ``NodeStateEntry`` instances."""

    def __init__(self, node_state: Any, path: str):
        self._node_state = node_state
        self._path = path
        self._last_modified = None

    def with_last_modified(self, last_modified: int) -> 'NodeStateEntryBuilder':
        self._last_modified = last_modified
        return self

    def build(self) -> NodeStateEntry:
        return NodeStateEntry(self._path, self._node_state, self._last_modified)
