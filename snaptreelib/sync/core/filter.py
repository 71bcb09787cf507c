"""Two-stage path filter applied during a document scan.

The id stage runs inside the store scan and rejects documents from their id
alone, before they are converted. The document stage runs on converted
documents and catches what the id stage could not decide.
"""

from typing import Callable, Iterable

from ..._common.config import ignore_progress, include_all
from ..._common.paths import (
    DEFAULT_HIDDEN_ROOTS,
    get_path_from_id,
    is_hidden_path,
    is_id_from_long_path,
    is_previous_doc_id,
)
from .document import NodeDocument


class PathFilter:
    """Decides which documents take part in a traversal.

    Attributes:
        path_predicate: ``path -> bool`` supplied by the caller
        progress_callback: ``id -> None`` called for every id scanned
        hidden_roots: Subtrees excluded regardless of the predicate
        ids_seen: Number of ids offered to the id stage
        ids_rejected: Number of ids rejected by the id stage
        documents_rejected: Number of documents rejected by the document stage
    """

    def __init__(self,
                 path_predicate: Callable[[str], bool] = include_all,
                 progress_callback: Callable[[str], None] = ignore_progress,
                 hidden_roots: Iterable[str] = DEFAULT_HIDDEN_ROOTS):
        self.path_predicate = path_predicate
        self.progress_callback = progress_callback
        self.hidden_roots = tuple(hidden_roots)
        self.ids_seen = 0
        self.ids_rejected = 0
        self.documents_rejected = 0

    def include_id(self, doc_id: str) -> bool:
        """Id stage. Reports progress, then accepts or rejects ``doc_id``."""
        self.ids_seen += 1
        self.progress_callback(doc_id)

        # Long path ids are hashed; the document stage checks the real path
        if is_id_from_long_path(doc_id):
            return True

        # Previous documents are rare and their path is not easily derived,
        # so keep all of them for caches built on the scan
        if is_previous_doc_id(doc_id):
            return True

        path = get_path_from_id(doc_id)
        if is_hidden_path(path, self.hidden_roots):
            self.ids_rejected += 1
            return False

        if not self.path_predicate(path):
            self.ids_rejected += 1
            return False
        return True

    def include_document(self, doc: NodeDocument) -> bool:
        """Document stage. Rejects split documents and excluded paths."""
        include = (not doc.is_split_document()
                   and not is_hidden_path(doc.path, self.hidden_roots)
                   and self.path_predicate(doc.path))
        if not include:
            self.documents_rejected += 1
        return include

    def reset_counters(self) -> None:
        self.ids_seen = 0
        self.ids_rejected = 0
        self.documents_rejected = 0
