"""Tests for NodeStateEntryTraverser.

Covers the end-to-end filtering and expansion behavior, snapshot
consistency under concurrent writes, and resource release on every exit
path.
"""

from unittest.mock import Mock

import pytest

from snaptreelib._common.errors import (
    ResourceReleaseError,
    SnapshotResolutionError,
    StoreUnavailableError,
    TraversalStateError,
)
from snaptreelib.sync import (
    Commit,
    DocumentCursor,
    LastModifiedRange,
    NodeDocument,
    NodeStateEntryTraverser,
    Revision,
    RevisionVector,
    SplitDocType,
)
from snaptreelib.testing import TreeFixtureBuilder


def build_example_tree() -> TreeFixtureBuilder:
    """Tree with a bundling document, a hidden node and a split document.

    /a              modified 5, bundles /a/b
    /jcr:system/x   modified 6, hidden
    /a/c            modified 7, previous (split) document only
    """
    return (TreeFixtureBuilder()
            .node('/a', modified=5, bundled={'b': {}})
            .node('/jcr:system/x', modified=6)
            .previous('/a/c', modified=7))


def paths_and_times(entries):
    return [(e.path, e.last_modified) for e in entries]


class TestEndToEnd:
    """Test the documented end-to-end example."""

    def test_example_tree(self):
        builder = build_example_tree()

        with builder.traverser(modified_range=LastModifiedRange(0, 10)) as traverser:
            entries = list(traverser)

        assert paths_and_times(entries) == [('/a', 5), ('/a/b', 5)]

    def test_documents_without_modified_in_full_range(self):
        rev = Revision(1, 0, 1)
        builder = TreeFixtureBuilder().document(NodeDocument.for_path(
            '/n', commits=(Commit(rev, {'p': 1}, {'child': {}}),)
        ))
        snapshot = RevisionVector([rev])

        with builder.traverser(revision=snapshot) as traverser:
            assert paths_and_times(traverser) == [('/n', None), ('/n/child', None)]
        with builder.traverser(revision=snapshot, modified_range=LastModifiedRange(0, 10)) as traverser:
            assert list(traverser) == []

    def test_bundled_descendants_are_all_produced(self):
        builder = TreeFixtureBuilder().node('/a', modified=5, bundled={
            'x': {}, 'x/y': {'q': 1}, 'x/y/z': {}, 'w': {},
        })

        with builder.traverser() as traverser:
            paths = [e.path for e in traverser]

        # k bundled descendants yield k + 1 entries
        assert paths == ['/a', '/a/x', '/a/x/y', '/a/x/y/z', '/a/w']

    def test_bundled_descendant_without_parent_fails(self):
        builder = TreeFixtureBuilder().node('/a', modified=5, bundled={'x/y': {'q': 1}})

        with builder.traverser() as traverser:
            with pytest.raises(SnapshotResolutionError) as exc_info:
                list(traverser)

        assert exc_info.value.path == '/a/x/y'
        assert builder.document_store.open_cursors == 0

    def test_split_document_at_node_id(self):
        builder = (TreeFixtureBuilder()
                   .node('/a', modified=5, bundled={'b': {}})
                   .document(NodeDocument.for_path('/a/c', modified=7,
                                                   split_type=SplitDocType.DEFAULT_LEAF)))

        with builder.traverser(modified_range=LastModifiedRange(0, 10)) as traverser:
            assert paths_and_times(traverser) == [('/a', 5), ('/a/b', 5)]

    def test_hidden_paths_ignore_predicate(self):
        builder = build_example_tree().node('/:index', modified=1).node('/b/:x', modified=1)

        with builder.traverser() as traverser:
            traverser.with_path_predicate(lambda p: True)
            paths = [e.path for e in traverser]

        assert not any(':system' in p or '/:' in p for p in paths)

    def test_path_predicate(self):
        builder = (TreeFixtureBuilder()
                   .node('/content', modified=1)
                   .node('/content/a', modified=1)
                   .node('/etc', modified=1))

        with builder.traverser() as traverser:
            traverser.with_path_predicate(lambda p: p.startswith('/content'))
            assert [e.path for e in traverser] == ['/content', '/content/a']

    def test_removed_nodes_are_skipped(self):
        builder = TreeFixtureBuilder().node('/a', modified=1).node('/b', modified=1).removed('/b')

        with builder.traverser() as traverser:
            assert [e.path for e in traverser] == ['/a']

    def test_long_paths_are_traversed(self):
        long_path = '/content/' + 'x' * 200
        builder = TreeFixtureBuilder().node(long_path, modified=1)

        with builder.traverser() as traverser:
            assert [e.path for e in traverser] == [long_path]

    def test_entries_follow_id_order(self):
        builder = (TreeFixtureBuilder()
                   .node('/b/x', modified=1)
                   .node('/b', modified=1)
                   .node('/a', modified=1, bundled={'z': {}}))

        with builder.traverser() as traverser:
            # Ids sort by depth first: 1:/a, 1:/b, 2:/b/x
            assert [e.path for e in traverser] == ['/a', '/a/z', '/b', '/b/x']

    def test_range_bounds_the_scan(self):
        builder = (TreeFixtureBuilder()
                   .node('/a', modified=1)
                   .node('/b', modified=5)
                   .node('/c', modified=10))

        with builder.traverser(modified_range=LastModifiedRange(5, 10)) as traverser:
            assert [e.path for e in traverser] == ['/b']
            assert traverser.get_document_modification_range() == LastModifiedRange(5, 10)


class TestProgress:
    """Test the progress callback."""

    def test_progress_sees_raw_ids_in_range(self):
        builder = build_example_tree().node('/z', modified=20)
        progress = Mock()

        with builder.traverser(modified_range=LastModifiedRange(0, 10)) as traverser:
            list(traverser.with_progress_callback(progress))

        reported = [c.args[0] for c in progress.call_args_list]
        # Hidden and split documents are reported, out-of-range ones are not
        assert '1:/a' in reported
        assert '2:/jcr:system/x' in reported
        assert any(doc_id.startswith('4:p/a/c/') for doc_id in reported)
        assert '1:/z' not in reported
        assert len(reported) == 3

    def test_fluent_configuration(self):
        traverser = build_example_tree().traverser()
        assert traverser.with_progress_callback(Mock()) is traverser
        assert traverser.with_path_predicate(lambda p: True) is traverser
        traverser.close()

    def test_reconfiguring_after_start_fails(self):
        traverser = build_example_tree().traverser()
        iter(traverser)

        with pytest.raises(TraversalStateError):
            traverser.with_path_predicate(lambda p: False)
        with pytest.raises(TraversalStateError):
            traverser.with_progress_callback(Mock())
        traverser.close()


class TestSnapshotConsistency:
    """Test that concurrent writes do not change what a traversal sees."""

    def test_writes_during_iteration_are_invisible(self):
        builder = (TreeFixtureBuilder()
                   .node('/a', modified=1, v=1)
                   .node('/b', modified=2, v=1)
                   .node('/c', modified=3, v=1))
        node_store, doc_store = builder.build()
        snapshot = node_store.get_head_revision()

        traverser = NodeStateEntryTraverser('snap', node_store, doc_store, snapshot)
        iterator = iter(traverser)
        first = next(iterator)

        node_store.commit('/b', {'v': 2})
        node_store.remove('/c')
        node_store.commit('/d', {'v': 1})

        entries = [first] + list(iterator)
        traverser.close()

        assert [e.path for e in entries] == ['/a', '/b', '/c']
        assert [e.node_state.get_property('v') for e in entries] == [1, 1, 1]

    def test_new_scan_at_same_snapshot_sees_same_tree(self):
        builder = TreeFixtureBuilder().node('/a', modified=1, v=1).node('/b', modified=2, v=1)
        node_store, doc_store = builder.build()
        snapshot = node_store.get_head_revision()
        traverser = NodeStateEntryTraverser('snap', node_store, doc_store, snapshot)

        before = [(e.path, e.node_state.get_property('v')) for e in traverser]
        node_store.commit('/a', {'v': 2})
        node_store.remove('/b')
        node_store.commit('/c', {'v': 1})
        after = [(e.path, e.node_state.get_property('v')) for e in traverser]
        traverser.close()

        assert before == after == [('/a', 1), ('/b', 1)]

    def test_repeated_resolution_is_stable(self):
        builder = TreeFixtureBuilder().node('/a', modified=1, v=1)
        node_store, _ = builder.build()
        snapshot = node_store.get_head_revision()

        first = node_store.get_node('/a', snapshot)
        node_store.commit('/a', {'v': 2})
        second = node_store.get_node('/a', snapshot)

        assert first == second
        assert node_store.get_node('/a', node_store.get_head_revision()).get_property('v') == 2

    def test_default_revision_is_head_at_construction(self):
        builder = TreeFixtureBuilder().node('/a', modified=1)
        head_before = builder.head
        traverser = builder.traverser()
        builder.node('/b', modified=2)

        assert traverser.revision == head_before
        assert traverser.revision != builder.head
        assert [e.path for e in traverser] == ['/a']
        traverser.close()


class TestResourceCleanup:
    """Test that store cursors are released on every exit path."""

    def test_cursor_open_until_close(self):
        builder = build_example_tree()
        traverser = builder.traverser()

        list(traverser)
        assert builder.document_store.open_cursors == 1

        traverser.close()
        assert builder.document_store.open_cursors == 0

    def test_abandoned_iteration(self):
        builder = build_example_tree().node('/b', modified=1)
        traverser = builder.traverser()

        iterator = iter(traverser)
        next(iterator)
        traverser.close()

        assert builder.document_store.open_cursors == 0

    def test_close_is_idempotent(self):
        builder = build_example_tree()
        traverser = builder.traverser()
        list(traverser)

        traverser.close()
        traverser.close()

        assert builder.document_store.open_cursors == 0

    def test_close_without_iteration(self):
        builder = build_example_tree()
        builder.traverser().close()
        assert builder.document_store.queries == 0

    def test_every_iteration_is_a_fresh_scan(self):
        builder = build_example_tree()
        traverser = builder.traverser()

        first = [e.path for e in traverser]
        second = [e.path for e in traverser]
        assert builder.document_store.open_cursors == 2

        traverser.close()

        assert first == second
        assert builder.document_store.queries == 2
        assert builder.document_store.open_cursors == 0

    def test_store_failure_mid_scan(self):
        builder = (TreeFixtureBuilder()
                   .node('/a', modified=1)
                   .node('/b', modified=1)
                   .node('/c', modified=1))
        store = builder.document_store
        seen = []

        def lose_connection(doc_id):
            seen.append(doc_id)
            if len(seen) == 2:
                store.set_available(False)

        traverser = builder.traverser().with_progress_callback(lose_connection)
        consumed = []
        with pytest.raises(StoreUnavailableError):
            for entry in traverser:
                consumed.append(entry.path)
        traverser.close()

        # Entries produced before the failure stay valid
        assert consumed == ['/a']
        assert seen == ['1:/a', '1:/b']
        assert store.open_cursors == 0

    def test_store_failure_on_open(self):
        builder = build_example_tree()
        builder.document_store.set_available(False)
        traverser = builder.traverser()

        with pytest.raises(StoreUnavailableError):
            list(traverser)
        traverser.close()
        assert builder.document_store.open_cursors == 0

    def test_resolution_failure_propagates(self):
        builder = build_example_tree()
        node_store = Mock(wraps=builder.node_store)
        node_store.get_node.side_effect = SnapshotResolutionError('/a', builder.head)

        with NodeStateEntryTraverser('fail', node_store, builder.document_store, builder.head) as traverser:
            with pytest.raises(SnapshotResolutionError):
                list(traverser)
        assert builder.document_store.open_cursors == 0

    def test_close_failure_is_reported(self):
        def failing_close():
            raise RuntimeError("cursor gone")

        document_store = Mock()
        document_store.get_all_documents.return_value = DocumentCursor(
            iter([]), on_close=failing_close, description='broken')
        node_store = Mock()

        traverser = NodeStateEntryTraverser('broken', node_store, document_store)
        assert list(traverser) == []

        with pytest.raises(ResourceReleaseError) as exc_info:
            traverser.close()
        assert isinstance(exc_info.value.errors[0], RuntimeError)
        # Already released
        traverser.close()

    def test_close_failure_does_not_hide_body_error(self):
        def failing_close():
            raise RuntimeError("cursor gone")

        document_store = Mock()
        document_store.get_all_documents.return_value = DocumentCursor(
            iter([]), on_close=failing_close, description='broken')

        with pytest.raises(ValueError, match="consumer failed"):
            with NodeStateEntryTraverser('broken', Mock(), document_store) as traverser:
                list(traverser)
                raise ValueError("consumer failed")

    def test_close_failure_raised_from_clean_exit(self):
        def failing_close():
            raise RuntimeError("cursor gone")

        document_store = Mock()
        document_store.get_all_documents.return_value = DocumentCursor(
            iter([]), on_close=failing_close, description='broken')

        with pytest.raises(ResourceReleaseError):
            with NodeStateEntryTraverser('broken', Mock(), document_store) as traverser:
                list(traverser)
