"""Tests for the per-chapter undo/redo history."""

from mojowriter.core.history import ContentHistory, ContentHistoryStore


def make_store(text="start"):
    store = ContentHistoryStore()
    store.hydrate("c", text)
    return store


def test_get_current_without_entry_is_empty():
    store = ContentHistoryStore()
    assert store.get_current("missing") == ""
    assert not store.has_entry("missing")


def test_hydrate_does_not_overwrite():
    store = make_store("first")
    store.hydrate("c", "second")
    assert store.get_current("c") == "first"


def test_hydrate_with_empty_text_creates_entry():
    store = ContentHistoryStore()
    store.hydrate("c", "")
    assert store.has_entry("c")
    assert store.get_history("c") == ContentHistory(present="", past=(), future=())


def test_undo_walks_back_one_step_at_a_time():
    store = make_store("v0")
    edits = ["v1", "v2", "v3", "v4"]
    for text in edits:
        store.commit_edit("c", text)

    expected = ["v3", "v2", "v1", "v0"]
    for value in expected:
        store.undo("c")
        assert store.get_current("c") == value

    # Nothing left to undo
    store.undo("c")
    assert store.get_current("c") == "v0"
    assert store.get_history("c").future == ("v1", "v2", "v3", "v4")


def test_undo_then_redo_is_identity():
    store = make_store("a")
    store.commit_edit("c", "b")
    store.commit_edit("c", "c")
    store.undo("c")
    before = store.get_history("c")

    store.undo("c")
    store.redo("c")
    assert store.get_history("c") == before


def test_redo_restores_exactly_the_undone_value():
    store = make_store("a")
    store.commit_edit("c", "b")
    store.undo("c")
    store.redo("c")
    history = store.get_history("c")
    assert history.present == "b"
    assert history.past == ("a",)
    assert history.future == ()


def test_new_edit_clears_future():
    store = make_store("a")
    store.commit_edit("c", "b")
    store.commit_edit("c", "c")
    store.undo("c")
    store.undo("c")
    assert store.can_redo("c")

    store.commit_edit("c", "x")
    history = store.get_history("c")
    assert history.future == ()
    assert history.past == ("a",)
    assert history.present == "x"


def test_noop_commit_leaves_history_unchanged():
    store = make_store("a")
    store.commit_edit("c", "b")
    store.undo("c")
    before = store.get_history("c")

    store.commit_edit("c", "a")
    assert store.get_history("c") is before


def test_revert_resets_lineage():
    store = make_store("a")
    for text in ["b", "c", "d"]:
        store.commit_edit("c", text)
    store.undo("c")

    store.revert("c", "saved")
    history = store.get_history("c")
    assert history == ContentHistory(present="saved", past=(), future=())


def test_operations_on_unknown_chapter_are_noops():
    store = ContentHistoryStore()
    store.commit_edit("nope", "text")
    store.undo("nope")
    store.redo("nope")
    assert not store.has_entry("nope")
    assert store.get_current("nope") == ""


def test_snapshot_is_not_affected_by_later_mutations():
    store = make_store("a")
    snapshot = store.snapshot()
    store.commit_edit("c", "b")
    store.hydrate("d", "other")

    assert snapshot["c"].present == "a"
    assert "d" not in snapshot
    assert store.snapshot()["c"].present == "b"


def test_history_limit_drops_oldest_snapshots():
    store = ContentHistoryStore(history_limit=2)
    store.hydrate("c", "v0")
    for text in ["v1", "v2", "v3"]:
        store.commit_edit("c", text)
    assert store.get_history("c").past == ("v1", "v2")


def test_remove_and_clear():
    store = make_store("a")
    store.hydrate("d", "b")
    store.remove("c")
    assert not store.has_entry("c")
    assert store.has_entry("d")
    store.clear()
    assert not store.has_entry("d")


def test_pairs_round_trip_keeps_history():
    store = make_store("a")
    store.commit_edit("c", "b")
    store.undo("c")

    pairs = store.to_pairs()
    assert pairs == [["c", {"past": [], "present": "a", "future": ["b"]}]]

    restored = ContentHistoryStore.from_pairs(pairs)
    assert restored.get_history("c") == store.get_history("c")
