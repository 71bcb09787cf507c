"""Tests for the two-stage path filter."""

from unittest.mock import Mock

from snaptreelib._common.paths import get_id_from_path, get_previous_id_from_path
from snaptreelib.sync import NodeDocument, PathFilter, Revision, SplitDocType


LONG_PATH = '/content/' + 'x' * 200
HIDDEN_LONG_PATH = '/jcr:system/' + 'x' * 200


class TestIdStage:
    """Test filtering on document ids alone."""

    def test_progress_reported_for_every_id(self):
        progress = Mock()
        path_filter = PathFilter(progress_callback=progress)

        path_filter.include_id('1:/a')
        path_filter.include_id('2:/jcr:system/x')

        assert [c.args[0] for c in progress.call_args_list] == ['1:/a', '2:/jcr:system/x']
        assert path_filter.ids_seen == 2

    def test_progress_reported_before_rejection(self):
        progress = Mock()
        path_filter = PathFilter(path_predicate=lambda p: False, progress_callback=progress)

        assert path_filter.include_id('1:/a') is False
        progress.assert_called_once_with('1:/a')

    def test_long_path_ids_always_accepted(self):
        predicate = Mock(return_value=False)
        path_filter = PathFilter(path_predicate=predicate)

        assert path_filter.include_id(get_id_from_path(HIDDEN_LONG_PATH)) is True
        predicate.assert_not_called()

    def test_previous_document_ids_always_accepted(self):
        predicate = Mock(return_value=False)
        path_filter = PathFilter(path_predicate=predicate)
        doc_id = get_previous_id_from_path('/jcr:system/a', Revision(1), 0)

        assert path_filter.include_id(doc_id) is True
        predicate.assert_not_called()

    def test_hidden_ids_rejected_before_predicate(self):
        predicate = Mock(return_value=True)
        path_filter = PathFilter(path_predicate=predicate)

        assert path_filter.include_id('1:/:index') is False
        assert path_filter.include_id('2:/jcr:system/x') is False
        predicate.assert_not_called()
        assert path_filter.ids_rejected == 2

    def test_predicate_decides_ordinary_ids(self):
        path_filter = PathFilter(path_predicate=lambda p: p.startswith('/content'))

        assert path_filter.include_id('2:/content/a') is True
        assert path_filter.include_id('1:/etc') is False

    def test_custom_hidden_roots(self):
        path_filter = PathFilter(hidden_roots=('/oak:index',))

        assert path_filter.include_id('2:/oak:index/uuid') is False
        assert path_filter.include_id('2:/jcr:system/x') is True


class TestDocumentStage:
    """Test filtering on fetched documents."""

    def test_live_document_accepted(self):
        path_filter = PathFilter()
        assert path_filter.include_document(NodeDocument.for_path('/a', modified=1))

    def test_split_document_rejected(self):
        path_filter = PathFilter()
        doc = NodeDocument.for_path('/a/c', modified=7, split_type=SplitDocType.DEFAULT_LEAF)

        assert not path_filter.include_document(doc)
        assert path_filter.documents_rejected == 1

    def test_hidden_long_path_rejected_once_fetched(self):
        path_filter = PathFilter()
        doc = NodeDocument.for_path(HIDDEN_LONG_PATH, modified=1)

        assert path_filter.include_id(doc.id)
        assert not path_filter.include_document(doc)

    def test_predicate_applied_to_long_path(self):
        path_filter = PathFilter(path_predicate=lambda p: p.startswith('/other'))
        doc = NodeDocument.for_path(LONG_PATH, modified=1)

        assert path_filter.include_id(doc.id)
        assert not path_filter.include_document(doc)

    def test_reset_counters(self):
        path_filter = PathFilter(path_predicate=lambda p: False)
        path_filter.include_id('1:/a')
        path_filter.include_document(NodeDocument.for_path('/a'))

        path_filter.reset_counters()

        assert (path_filter.ids_seen, path_filter.ids_rejected, path_filter.documents_rejected) == (0, 0, 0)
