import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from todo_api.db import SQLiteLabelRepository, SQLiteTodoRepository
from todo_api.errors import NotFoundError, UnexpectedError
from todo_api.repositories import InMemoryTodoRepository, ReadWriteLock
from todo_api.schemas import LabelCreate, TodoCreate, TodoUpdate


class TestTodoRepositoryContract:
    """Runs once per backend through the parametrized `repositories` fixture."""

    def test_create_assigns_fresh_ids(self, todo_repo):
        first = todo_repo.create(TodoCreate(text="one"))
        second = todo_repo.create(TodoCreate(text="two"))
        assert first == {"id": 1, "text": "one", "completed": False}
        assert second["id"] == 2
        assert second["completed"] is False

    def test_find(self, todo_repo):
        created = todo_repo.create(TodoCreate(text="find me"))
        assert todo_repo.find(created["id"]) == created
        assert todo_repo.find(42) is None

    def test_all_covers_every_issued_id(self, todo_repo):
        ids = [todo_repo.create(TodoCreate(text=f"t{i}"))["id"] for i in range(5)]
        items = todo_repo.all()
        assert len(items) == 5
        assert sorted(t["id"] for t in items) == sorted(ids)

    def test_update_text_leaves_completed(self, todo_repo):
        tid = todo_repo.create(TodoCreate(text="before"))["id"]
        todo_repo.update(tid, TodoUpdate(completed=True))

        updated = todo_repo.update(tid, TodoUpdate(text="after"))
        assert updated == {"id": tid, "text": "after", "completed": True}
        assert todo_repo.find(tid) == updated

    def test_update_completed_back_to_false(self, todo_repo):
        tid = todo_repo.create(TodoCreate(text="toggle"))["id"]
        todo_repo.update(tid, TodoUpdate(completed=True))

        updated = todo_repo.update(tid, TodoUpdate(completed=False))
        assert updated["completed"] is False
        assert updated["text"] == "toggle"

    def test_update_missing(self, todo_repo):
        with pytest.raises(NotFoundError) as excinfo:
            todo_repo.update(7, TodoUpdate(text="x"))
        assert excinfo.value.entity_id == 7
        assert str(excinfo.value) == "NotFound, id is 7"

    def test_delete(self, todo_repo):
        tid = todo_repo.create(TodoCreate(text="gone"))["id"]
        assert todo_repo.delete(tid) is None
        assert todo_repo.find(tid) is None
        assert todo_repo.all() == []

    def test_delete_missing(self, todo_repo):
        with pytest.raises(NotFoundError):
            todo_repo.delete(1)

    def test_returned_entities_are_copies(self, todo_repo):
        created = todo_repo.create(TodoCreate(text="original"))
        created["text"] = "mutated"
        fetched = todo_repo.find(created["id"])
        fetched["completed"] = True

        assert todo_repo.find(created["id"]) == {
            "id": created["id"],
            "text": "original",
            "completed": False,
        }


class TestLabelRepositoryContract:
    def test_create_and_all(self, label_repo):
        work = label_repo.create(LabelCreate(name="work"))
        home = label_repo.create(LabelCreate(name="home"))
        assert work == {"id": 1, "name": "work"}
        assert label_repo.all() == [work, home]

    def test_delete(self, label_repo):
        lid = label_repo.create(LabelCreate(name="temp"))["id"]
        label_repo.delete(lid)
        assert label_repo.all() == []

        with pytest.raises(NotFoundError):
            label_repo.delete(lid)


class TestInMemoryConcurrency:
    def test_concurrent_creates_get_unique_ids(self):
        repo = InMemoryTodoRepository()
        with ThreadPoolExecutor(max_workers=16) as pool:
            created = list(pool.map(lambda i: repo.create(TodoCreate(text=f"t{i}")), range(500)))

        ids = [t["id"] for t in created]
        assert len(set(ids)) == 500
        assert sorted(ids) == list(range(1, 501))
        assert len(repo.all()) == 500

    def test_all_preserves_insertion_order(self):
        repo = InMemoryTodoRepository()
        for text in ["c", "a", "b"]:
            repo.create(TodoCreate(text=text))
        assert [t["text"] for t in repo.all()] == ["c", "a", "b"]


class TestReadWriteLock:
    def test_readers_share(self):
        lock = ReadWriteLock()
        inside = threading.Barrier(2, timeout=2)

        def reader():
            with lock.read():
                # Both readers must be inside at once to pass the barrier
                inside.wait()

        threads = [threading.Thread(target=reader) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=5)
        assert not any(t.is_alive() for t in threads)
        assert not inside.broken

    def test_writer_excludes_readers(self):
        lock = ReadWriteLock()
        events = []
        writer_in = threading.Event()

        def writer():
            with lock.write():
                writer_in.set()
                events.append("write-start")
                time.sleep(0.05)
                events.append("write-end")

        def reader():
            writer_in.wait()
            with lock.read():
                events.append("read")

        w = threading.Thread(target=writer)
        r = threading.Thread(target=reader)
        w.start()
        r.start()
        w.join(timeout=5)
        r.join(timeout=5)
        assert events == ["write-start", "write-end", "read"]


class TestSQLiteBackend:
    def test_data_survives_new_repository(self, tmp_path):
        db_path = str(tmp_path / "nested" / "todos.db")
        SQLiteTodoRepository(db_path).create(TodoCreate(text="durable"))

        reopened = SQLiteTodoRepository(db_path)
        assert reopened.all() == [{"id": 1, "text": "durable", "completed": False}]

    def test_ids_not_reused_after_delete(self, tmp_path):
        repo = SQLiteTodoRepository(str(tmp_path / "todos.db"))
        first = repo.create(TodoCreate(text="a"))
        repo.delete(first["id"])
        assert repo.create(TodoCreate(text="b"))["id"] == first["id"] + 1

    def test_sqlite_failure_is_unexpected_error(self, tmp_path):
        db_path = tmp_path / "todos.db"
        repo = SQLiteTodoRepository(str(db_path))
        # Replace the database file with garbage so every statement fails
        db_path.write_bytes(b"this is not a sqlite database" * 100)

        with pytest.raises(UnexpectedError):
            repo.all()

    @pytest.mark.parametrize("entity_id", [2**63, -(2**63) - 1, 10**20])
    def test_ids_outside_sqlite_integer_range_are_absent(self, tmp_path, entity_id):
        db_path = str(tmp_path / "todos.db")
        todos = SQLiteTodoRepository(db_path)
        labels = SQLiteLabelRepository(db_path)

        assert todos.find(entity_id) is None
        with pytest.raises(NotFoundError):
            todos.update(entity_id, TodoUpdate(text="x"))
        with pytest.raises(NotFoundError):
            todos.delete(entity_id)
        with pytest.raises(NotFoundError):
            labels.delete(entity_id)

    def test_largest_sqlite_id_is_queried(self, tmp_path):
        repo = SQLiteTodoRepository(str(tmp_path / "todos.db"))
        assert repo.find(2**63 - 1) is None

    def test_base_requires_table_bootstrap(self, tmp_path):
        from todo_api.db import _SQLiteBase

        with pytest.raises(TypeError):
            _SQLiteBase(str(tmp_path / "todos.db"))
