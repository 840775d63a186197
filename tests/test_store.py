import io
import os

import pytest

from stash.errors import InvalidIdentifier, NotFound, StashIOError
from stash.identifier import StashId
from stash.store import StashStore


def _filenames(store):
    return sorted(p.name for p in store.root.iterdir())


def test_open_creates_the_directory(tmp_path):
    root = tmp_path / "some" / "nested" / "dir"
    store = StashStore.open(root)
    assert root.is_dir()
    assert store.list() == []


def test_push_assigns_increasing_indices_per_name(store):
    assert store.push_bytes("a", b"1") == 0
    assert store.push_bytes("a", b"2") == 1
    assert store.push_bytes("b", b"3") == 0
    assert store.push_bytes("a", b"4") == 2
    assert store.push_bytes("", b"5") == 0
    assert _filenames(store) == ["_0", "a_0", "a_1", "a_2", "b_0"]


def test_push_continues_after_the_highest_index(store):
    store.push_bytes("x", b"0")
    store.push_bytes("x", b"1")
    store.push_bytes("x", b"2")
    store.delete("x", 1)
    assert store.push_bytes("x", b"3") == 3


def test_push_streams_from_file_objects(store):
    data = b"x" * (256 * 1024 + 7)
    index = store.push("big", io.BytesIO(data))
    assert store.get("big", index) == data


def test_scenario_push_get_newest_pop(store):
    assert store.push_bytes("x", b"hello") == 0
    assert store.push_bytes("x", b"world") == 1
    assert store.get_newest("x") == b"world"
    assert store.pop("x") == b"world"
    assert [(e.name, e.index) for e in store.list()] == [("x", 0)]
    assert store.get("x", 0) == b"hello"


def test_pop_until_empty(store):
    store.push_bytes("y", b"only")
    assert store.pop("y") == b"only"
    with pytest.raises(NotFound):
        store.pop("y")


def test_get_is_idempotent(store):
    store.push_bytes("z", b"same")
    assert store.get("z", 0) == store.get("z", 0) == b"same"
    store.delete("z", 0)
    with pytest.raises(NotFound, match="z:0"):
        store.get("z", 0)


def test_get_newest_of_unknown_name(store):
    store.push_bytes("known", b"")
    with pytest.raises(NotFound, match="unknown"):
        store.get_newest("unknown")


def test_names_dont_leak_into_each_other(store):
    store.push_bytes("a_b", b"a_b")
    store.push_bytes("a", b"a")
    assert store.get_newest("a") == b"a"
    assert store.get_newest("a_b") == b"a_b"
    assert [e.index for e in store.entries("a")] == [0]


def test_list_is_newest_first(store):
    for i in range(3):
        store.push_bytes("n", str(i).encode())
    entries = store.list()
    assert [e.id for e in entries] == ["n:2", "n:1", "n:0"]
    assert entries[0].created >= entries[-1].created


def test_list_ignores_foreign_files(store):
    store.push_bytes("real", b"")
    (store.root / "README").write_text("not a stash")
    (store.root / "subdir").mkdir()
    assert [e.id for e in store.list()] == ["real:0"]


def test_clear_removes_everything(store):
    store.push_bytes("a", b"")
    store.push_bytes("", b"")
    (store.root / "README").write_text("not a stash")
    assert store.clear() == 3
    assert store.list() == []
    assert _filenames(store) == []


def test_clear_on_empty_store(store):
    assert store.clear() == 0


def test_delete(store):
    store.push_bytes("d", b"0")
    store.push_bytes("d", b"1")
    deleted = store.delete("d")
    assert deleted.id == "d:1"
    store.delete("d", 0)
    assert store.list() == []
    with pytest.raises(NotFound):
        store.delete("d", 0)


def test_entries_are_highest_index_first(store):
    for _ in range(3):
        store.push_bytes("e", b"")
    assert [e.index for e in store.entries("e")] == [2, 1, 0]
    assert store.entries("nope") == []


def test_resolve(store):
    store.push_bytes("r", b"")
    store.push_bytes("r", b"")
    assert store.resolve(StashId("r", None)).index == 1
    assert store.resolve(StashId("r", 0)).path == store.root / "r_0"
    with pytest.raises(NotFound):
        store.resolve(StashId("r", 5))


def test_open_entry(store):
    store.push_bytes("o", b"streamed")
    with store.open_entry("o") as fp:
        assert fp.read() == b"streamed"


def test_append_to_newest(store):
    store.push_bytes("log", b"first")
    store.push_bytes("log", b"second")
    assert store.append("log", io.BytesIO(b"+more")) == 1
    assert store.get("log", 1) == b"second+more"
    assert store.get("log", 0) == b"first"


def test_append_to_given_index(store):
    store.push_bytes("log", b"first")
    store.push_bytes("log", b"second")
    assert store.append("log", io.BytesIO(b"!"), index=0) == 0
    assert store.get("log", 0) == b"first!"


def test_append_without_entries_pushes(store):
    assert store.append("fresh", io.BytesIO(b"new")) == 0
    assert store.get("fresh", 0) == b"new"


def test_append_to_missing_index(store):
    store.push_bytes("log", b"")
    with pytest.raises(NotFound, match="log:4"):
        store.append("log", io.BytesIO(b""), index=4)


@pytest.mark.parametrize("name", ["a/b", "a:b", "..", "with.dot"])
def test_push_rejects_bad_names(store, name):
    with pytest.raises(InvalidIdentifier):
        store.push_bytes(name, b"")
    assert _filenames(store) == []


def test_custom_separators_allow_dots_in_names(tmp_path):
    store = StashStore.open(tmp_path, separators=":")
    assert store.push_bytes("v1.2", b"") == 0
    assert store.get_newest("v1.2") == b""


def test_bare_numeric_files_are_the_anonymous_stack(store):
    (store.root / "3").write_bytes(b"old")
    assert store.get("", 3) == b"old"
    assert store.get_newest("") == b"old"
    assert store.push_bytes("", b"new") == 4
    assert store.pop("") == b"new"
    assert store.pop("") == b"old"
    assert _filenames(store) == []


def test_push_never_overwrites(store, monkeypatch):
    store.push_bytes("race", b"mine")
    # pretend the scan missed race_0, as if another process created it right after we looked
    monkeypatch.setattr(store, "_indices", lambda name: {})
    assert store.push_bytes("race", b"theirs") == 1
    monkeypatch.undo()
    assert store.get("race", 0) == b"mine"
    assert store.get("race", 1) == b"theirs"


def test_unreadable_root_is_an_io_error(tmp_path):
    not_a_dir = tmp_path / "file"
    not_a_dir.write_text("")
    store = StashStore(not_a_dir)
    with pytest.raises(StashIOError, match="read directory"):
        store.list()
    with pytest.raises(StashIOError):
        store.clear()


def test_open_on_a_file_is_an_io_error(tmp_path):
    not_a_dir = tmp_path / "file"
    not_a_dir.write_text("")
    with pytest.raises(StashIOError, match="create directory"):
        StashStore.open(not_a_dir)


def test_non_utf8_filenames_are_an_io_error(store):
    with open(os.fsencode(store.root) + b"/bad\xff_0", "wb"):
        pass
    with pytest.raises(StashIOError):
        store.list()
    with pytest.raises(StashIOError):
        store.get_newest("bad")


def test_list_shows_a_legacy_duplicate_once(store):
    (store.root / "3").write_bytes(b"old")
    (store.root / "_3").write_bytes(b"new")
    assert [e.id for e in store.list()] == [":3"]
    assert store.list()[0].path == store.root / "_3"
    assert store.get("", 3) == b"new"
