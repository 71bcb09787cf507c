"""Path and document id utilities.

Documents are keyed by ids derived from the node path:

- ``"<depth>:<path>"`` for ordinary paths, e.g. ``"2:/a/b"``
- ``"<depth>:h<sha256(parent)>/<name>"`` for paths longer than ``PATH_LONG``.
  The path cannot be recovered from such an id without reading the document.
- ``"<depth>:p<path>/<revision>/<height>"`` for previous documents holding
  historical revisions split off a node's main document.

All functions here are pure.
"""

import hashlib
from typing import Iterable, List

ROOT_PATH = '/'

# Paths longer than this are stored under a hashed id
PATH_LONG = 165

DEFAULT_HIDDEN_ROOTS = ('/jcr:system',)


def is_absolute(path: str) -> bool:
    return path.startswith('/')


def elements(path: str) -> List[str]:
    """Return the names making up ``path`` (empty for the root)."""
    return [name for name in path.split('/') if name]


def get_depth(path: str) -> int:
    """Depth of ``path``; the root has depth 0."""
    return len(elements(path))


def name_of(path: str) -> str:
    parts = elements(path)
    return parts[-1] if parts else ''


def parent_path(path: str) -> str:
    """Parent of ``path``. The root is its own parent."""
    if path == ROOT_PATH:
        return ROOT_PATH
    idx = path.rstrip('/').rfind('/')
    return ROOT_PATH if idx <= 0 else path[:idx]


def concat(parent: str, relative: str) -> str:
    """Join a parent path with a relative path."""
    if not relative:
        return parent
    if parent.endswith('/'):
        return parent + relative
    return parent + '/' + relative


def is_ancestor(ancestor: str, path: str) -> bool:
    """True if ``ancestor`` is a strict ancestor of ``path``."""
    if ancestor == path:
        return False
    if ancestor == ROOT_PATH:
        return path.startswith('/')
    return path.startswith(ancestor + '/')


def is_hidden_path(path: str, hidden_roots: Iterable[str] = DEFAULT_HIDDEN_ROOTS) -> bool:
    """Check whether ``path`` lies in an internal part of the tree.

    A path is hidden when one of its names starts with ``:`` or when it is,
    or lies under, one of ``hidden_roots``.
    """
    if '/:' in path:
        return True
    for root in hidden_roots:
        if path == root or is_ancestor(root, path):
            return True
    return False


def is_long_path(path: str) -> bool:
    return len(path) > PATH_LONG


def get_id_from_path(path: str) -> str:
    """Compute the document id for ``path``."""
    depth = get_depth(path)
    if is_long_path(path):
        digest = hashlib.sha256(parent_path(path).encode('utf-8')).hexdigest()
        return f"{depth}:h{digest}/{name_of(path)}"
    return f"{depth}:{path}"


def get_previous_id_from_path(path: str, revision, height: int) -> str:
    """Compute the id of a previous document of ``path``."""
    prev_path = f"p{path.rstrip('/')}/{revision}/{height}"
    return f"{get_depth(path) + 2}:{prev_path}"


def _marker(doc_id: str) -> str:
    idx = doc_id.find(':')
    if idx == -1 or idx >= len(doc_id) - 1:
        return ''
    return doc_id[idx + 1]


def is_id_from_long_path(doc_id: str) -> bool:
    return _marker(doc_id) == 'h'


def is_previous_doc_id(doc_id: str) -> bool:
    return doc_id.find(':') > 0 and _marker(doc_id) == 'p'


def get_path_from_id(doc_id: str) -> str:
    """Decode the path from an ordinary document id.

    Raises:
        ValueError: If the id is hashed or malformed
    """
    if is_id_from_long_path(doc_id):
        raise ValueError(f"Id is hashed: {doc_id}")
    idx = doc_id.find(':')
    if idx == -1:
        raise ValueError(f"Not a document id: {doc_id}")
    return doc_id[idx + 1:]
