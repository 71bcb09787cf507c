"""Raw documents as returned by the document store.

A ``NodeDocument`` is one stored record. It holds the commit history of a
node (MVCC), and may hold the state of descendant nodes bundled inline.
Documents are immutable: the store replaces a document on every write, so
a document obtained from a scan is a stable snapshot of the stored record.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Mapping, Optional, Tuple

from ..._common.paths import get_id_from_path, is_previous_doc_id
from ..._common.revision import Revision, RevisionVector


class SplitDocType(Enum):
    """Kind of split document. ``NONE`` marks a regular, live document."""
    NONE = -1
    DEFAULT = 1              # Previous document holding old revisions
    INTERMEDIATE = 4         # Previous document pointing to other previous docs
    DEFAULT_LEAF = 5         # Previous document of a node without children
    COMMIT_ROOT_ONLY = 6     # Previous document holding commit root info only
    DEFAULT_NO_BRANCH = 7    # Previous document without branch commits


@dataclass(frozen=True)
class Commit:
    """The state of a document written at one revision.

    Attributes:
        revision: Revision the change was committed at
        properties: Node properties, or None if the node was removed
        bundled: Bundled descendant properties keyed by path relative to the
            document's node, e.g. ``{"jcr:content": {...}}``
    """

    revision: Revision
    properties: Optional[Mapping[str, Any]]
    bundled: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)

    @property
    def is_deletion(self) -> bool:
        return self.properties is None


@dataclass(frozen=True)
class NodeDocument:
    """One stored record of the node collection.

    Attributes:
        id: Document id (see ``snaptreelib._common.paths``)
        path: Path of the node the document belongs to
        modified: Last modification time in seconds, if known
        split_type: ``SplitDocType.NONE`` for live documents
        commits: MVCC history ordered by revision
    """

    id: str
    path: str
    modified: Optional[int] = None
    split_type: SplitDocType = SplitDocType.NONE
    commits: Tuple[Commit, ...] = ()

    @classmethod
    def for_path(cls, path: str, modified: Optional[int] = None, **kwargs) -> 'NodeDocument':
        return cls(id=get_id_from_path(path), path=path, modified=modified, **kwargs)

    def is_split_document(self) -> bool:
        return self.split_type is not SplitDocType.NONE

    def is_previous_document(self) -> bool:
        return is_previous_doc_id(self.id)

    def with_commit(self, commit: Commit, modified: Optional[int] = None) -> 'NodeDocument':
        """Return a copy of this document with ``commit`` appended."""
        commits = tuple(sorted(self.commits + (commit,), key=lambda c: c.revision))
        if modified is None:
            modified = self.modified
        return replace(self, commits=commits, modified=modified)

    def get_node_at_revision(self, read_revision: RevisionVector) -> Optional[Commit]:
        """Resolve the commit visible at ``read_revision``.

        Returns:
            The newest visible commit, or None if no commit is visible or the
            newest visible commit removed the node.
        """
        visible = None
        for commit in self.commits:
            if read_revision.is_visible(commit.revision):
                if visible is None or commit.revision > visible.revision:
                    visible = commit
        if visible is None or visible.is_deletion:
            return None
        return visible

    def __repr__(self) -> str:
        return f"NodeDocument(id={self.id!r}, modified={self.modified!r})"
