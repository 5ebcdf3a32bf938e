import json
import threading

import pytest

from forum_api.app.core.errors import StorageError
from forum_api.app.core.journal import CascadeJournal
from forum_api.app.core.storage import IdentifierAllocator, PersistentMap
from forum_api.app.schemas.post import Post


def _post(post_id, author="alice", title="t"):
    return Post(id=post_id, title=title, author_username=author, content="c", created_at=1)


@pytest.fixture
def store(tmp_path):
    return PersistentMap(tmp_path / "posts.json", Post, int)


def test_snapshot_created_empty_on_first_use(store):
    assert store.all_values() == []
    assert json.loads(store.path.read_text()) == {}


def test_put_get_remove(store):
    store.put(1, _post(1))
    assert store.get(1).title == "t"
    assert len(store) == 1

    assert store.remove(1) is True
    assert store.remove(1) is False
    assert store.get(1) is None


def test_put_if_absent_keeps_existing(store):
    assert store.put_if_absent(1, _post(1, title="first"))
    assert not store.put_if_absent(1, _post(1, title="second"))
    assert store.get(1).title == "first"


def test_remove_where_returns_removed(store):
    for i, author in enumerate(["alice", "bob", "alice"], start=1):
        store.put(i, _post(i, author=author))

    removed = store.remove_where(lambda post: post.author_username == "alice")

    assert sorted(p.id for p in removed) == [1, 3]
    assert [p.id for p in store.all_values()] == [2]
    assert store.remove_where(lambda post: False) == []


def test_snapshot_uses_wire_names_and_survives_restart(tmp_path, store):
    store.put(5, _post(5))

    raw = json.loads(store.path.read_text())
    assert raw["5"]["userName"] == "alice"
    assert raw["5"]["isEdited"] is False

    reopened = PersistentMap(tmp_path / "posts.json", Post, int)
    assert reopened.get(5) == _post(5)
    assert not (tmp_path / "posts.json.tmp").exists()


def test_corrupt_snapshot_raises_storage_error(tmp_path):
    path = tmp_path / "posts.json"
    path.write_text("{not json")
    with pytest.raises(StorageError):
        PersistentMap(path, Post, int).all_values()

    path.write_text("[]")
    with pytest.raises(StorageError):
        PersistentMap(path, Post, int).all_values()

    path.write_text(json.dumps({"1": {"id": 1}}))
    with pytest.raises(StorageError):
        PersistentMap(path, Post, int).all_values()


def test_concurrent_put_if_absent_succeeds_once(store):
    results = []
    barrier = threading.Barrier(8)

    def worker(n):
        barrier.wait()
        results.append(store.put_if_absent(1, _post(1, title=str(n))))

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count(True) == 1
    assert len(store) == 1


def test_allocator_starts_above_existing_max(store):
    assert IdentifierAllocator([]).next() == 1

    store.put(3, _post(3))
    store.put(9, _post(9))
    ids = IdentifierAllocator.from_store(store, lambda post: post.id)
    assert [ids.next(), ids.next()] == [10, 11]


def test_allocator_is_thread_safe():
    ids = IdentifierAllocator([])
    seen = []
    lock = threading.Lock()

    def worker():
        for _ in range(100):
            value = ids.next()
            with lock:
                seen.append(value)

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(seen) == list(range(1, 401))


def test_journal_begin_complete(tmp_path):
    journal = CascadeJournal(tmp_path / "cascade_journal.json")
    assert journal.pending() == []

    journal.begin(4)
    journal.begin(4)
    journal.begin(7)
    assert journal.pending() == [4, 7]
    assert CascadeJournal(tmp_path / "cascade_journal.json").pending() == [4, 7]

    journal.complete(4)
    journal.complete(99)
    assert journal.pending() == [7]
