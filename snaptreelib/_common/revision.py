"""Revisions and revision vectors.

A ``RevisionVector`` is the snapshot token of a traversal: it fixes the
state of the whole tree as seen by every cluster node, independent of which
replica answers a read.
"""

import re
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, Mapping, Optional


_REVISION_PATTERN = re.compile(r'^r([0-9a-f]+)-([0-9a-f]+)-([0-9a-f]+)$')


@dataclass(frozen=True, order=True)
class Revision:
    """A single commit revision written by one cluster node.

    Ordering is by timestamp, then counter, then cluster id.
    """

    timestamp: int
    counter: int = 0
    cluster_id: int = 1

    def __post_init__(self):
        if self.timestamp < 0 or self.counter < 0 or self.cluster_id < 0:
            raise ValueError(f"Revision fields must be non-negative: {self!r}")

    def __str__(self) -> str:
        return f"r{self.timestamp:x}-{self.counter:x}-{self.cluster_id:x}"

    @classmethod
    def from_string(cls, value: str) -> 'Revision':
        """Parse the ``r<ts>-<counter>-<cluster>`` form produced by ``str()``."""
        match = _REVISION_PATTERN.match(value)
        if match is None:
            raise ValueError(f"Not a revision: {value!r}")
        ts, counter, cluster = (int(part, 16) for part in match.groups())
        return cls(ts, counter, cluster)


class RevisionVector(Mapping[int, Revision]):
    """Immutable vector holding at most one revision per cluster node.

    A revision is visible at this vector when the vector holds a revision
    for the same cluster that is equal or newer.
    """

    __slots__ = ('_revisions',)

    def __init__(self, revisions: Iterable[Revision] = ()):
        by_cluster: Dict[int, Revision] = {}
        for rev in revisions:
            current = by_cluster.get(rev.cluster_id)
            if current is None or rev > current:
                by_cluster[rev.cluster_id] = rev
        self._revisions = dict(sorted(by_cluster.items()))

    def __getitem__(self, cluster_id: int) -> Revision:
        return self._revisions[cluster_id]

    def __iter__(self) -> Iterator[int]:
        return iter(self._revisions)

    def __len__(self) -> int:
        return len(self._revisions)

    def __contains__(self, item) -> bool:
        if isinstance(item, Revision):
            return self._revisions.get(item.cluster_id) == item
        return item in self._revisions

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RevisionVector):
            return NotImplemented
        return self._revisions == other._revisions

    def __hash__(self) -> int:
        return hash(tuple(self._revisions.values()))

    def __str__(self) -> str:
        return ','.join(str(r) for r in self._revisions.values())

    def __repr__(self) -> str:
        return f"RevisionVector({str(self)!r})"

    @property
    def dimensions(self) -> int:
        """Number of cluster nodes represented in this vector."""
        return len(self._revisions)

    def get_revision(self, cluster_id: int) -> Optional[Revision]:
        return self._revisions.get(cluster_id)

    def update(self, revision: Revision) -> 'RevisionVector':
        """Return a new vector with ``revision`` replacing its cluster's entry."""
        revisions = dict(self._revisions)
        revisions[revision.cluster_id] = revision
        return RevisionVector(revisions.values())

    def is_visible(self, revision: Revision) -> bool:
        """Check whether a commit made at ``revision`` is part of this snapshot."""
        own = self._revisions.get(revision.cluster_id)
        return own is not None and revision <= own

    def is_revision_newer(self, other: 'RevisionVector') -> bool:
        """True if this vector holds a newer revision than ``other`` for some cluster."""
        for cluster_id, rev in self._revisions.items():
            theirs = other.get_revision(cluster_id)
            if theirs is None or rev > theirs:
                return True
        return False

    @classmethod
    def from_string(cls, value: str) -> 'RevisionVector':
        """Parse the comma-separated form produced by ``str()``."""
        if not value:
            return cls()
        return cls(Revision.from_string(part) for part in value.split(','))
