import json

import mongomock
import pytest

from todo_board.db_store import SqlStore
from todo_board.mongo_store import MongoStore
from todo_board.storage import JsonStore, ValidationError, to_iso


def make_json_store(tmp_path, backups=10):
    store = JsonStore(
        data_file=str(tmp_path / "todos.json"),
        backups=backups,
        wal_file=str(tmp_path / "todos.wal"),
    )
    store.load_or_recover()
    return store


def test_backups_and_wal_recovery(tmp_path):
    data_file = tmp_path / "todos.json"
    s = make_json_store(tmp_path)
    todo = s.create_todo({"text": "Persist", "email": "a@b.com"})

    # Corrupt the data file
    with open(data_file, "w", encoding="utf-8") as f:
        f.write("{ broken json")

    # Reopen to trigger recovery
    s2 = make_json_store(tmp_path)
    assert [t["id"] for t in s2.list_todos()] == [todo["id"]]
    # Recovered state is written back
    with open(data_file, encoding="utf-8") as f:
        assert json.load(f)["todos"][0]["text"] == "Persist"


def test_wal_replay_without_backups(tmp_path):
    s = make_json_store(tmp_path, backups=0)
    keep = s.create_todo({"text": "keep", "email": "a@b.com"})
    gone = s.create_todo({"text": "gone", "email": "a@b.com"})
    s.update_todo(keep["id"], {"text": "kept"})
    s.delete_todo(gone["id"])
    (tmp_path / "todos.json").write_text("[]", encoding="utf-8")

    s2 = make_json_store(tmp_path, backups=0)
    todos = s2.list_todos()
    assert [t["text"] for t in todos] == ["kept"]
    assert not list(tmp_path.glob("todos.json.bak.*"))


def test_backup_rotation_is_bounded(tmp_path):
    s = make_json_store(tmp_path, backups=3)
    for i in range(6):
        s.create_todo({"text": f"t{i}", "email": "a@b.com"})
    backups = sorted(p.name for p in tmp_path.glob("todos.json.bak.*"))
    assert backups == ["todos.json.bak.1", "todos.json.bak.2", "todos.json.bak.3"]


def test_json_store_survives_reopen(tmp_path):
    s = make_json_store(tmp_path)
    todo = s.create_todo({"text": "t", "email": "e"})
    assert make_json_store(tmp_path).list_todos() == [todo]


def test_returned_records_are_copies(tmp_path):
    s = make_json_store(tmp_path)
    todo = s.create_todo({"text": "t", "email": "e"})
    todo["text"] = "changed"
    assert s.list_todos()[0]["text"] == "t"


@pytest.fixture(params=["json", "sql", "mongo"])
def store(request, tmp_path):
    if request.param == "json":
        return make_json_store(tmp_path)
    if request.param == "sql":
        s = SqlStore("sqlite://")
    else:
        s = MongoStore(client=mongomock.MongoClient())
    s.init_db()
    return s


def test_create_validation(store):
    with pytest.raises(ValidationError):
        store.create_todo({"text": "", "email": "a@b.com"})
    with pytest.raises(ValidationError):
        store.create_todo({"text": "t", "email": None})
    assert store.list_todos() == []


def test_update_refreshes_updated_at_only(store):
    todo = store.create_todo({"text": "t", "email": "e"})
    updated = store.update_todo(todo["id"], {"email": "f"})
    assert updated["text"] == "t"
    assert updated["email"] == "f"
    assert updated["createdAt"] == todo["createdAt"]
    assert updated["updatedAt"] >= todo["updatedAt"]


def test_update_and_delete_unknown(store):
    assert store.update_todo("000000000000000000000000", {"text": "x"}) is None
    assert store.delete_todo("000000000000000000000000") is False


def test_wal_skips_entries_with_missing_fields(tmp_path):
    good = {"id": "1", "text": "t", "email": "e", "createdAt": "2030-01-01T00:00:00.000Z"}
    lines = [
        {"type": "todo_create"},
        {"type": "todo_update", "data": good},
        {"type": "todo_delete"},
        {"type": "todo_create", "data": None},
        {"type": "todo_create", "data": {"text": "no id"}},
        ["not", "an", "entry"],
        {"type": "todo_create", "data": good},
    ]
    (tmp_path / "todos.wal").write_text("".join(json.dumps(x) + "\n" for x in lines), encoding="utf-8")

    s = make_json_store(tmp_path)
    assert s.list_todos() == [good]


def test_wal_compacts_into_snapshot(tmp_path):
    s = JsonStore(
        data_file=str(tmp_path / "todos.json"),
        wal_file=str(tmp_path / "todos.wal"),
        wal_limit=5,
    )
    s.load_or_recover()
    ids = [s.create_todo({"text": f"t{i}", "email": "e"})["id"] for i in range(4)]
    s.delete_todo(ids[0])
    s.update_todo(ids[1], {"text": "changed"})

    wal_lines = (tmp_path / "todos.wal").read_text(encoding="utf-8").splitlines()
    assert len(wal_lines) == 2
    assert json.loads(wal_lines[0])["type"] == "todo_snapshot"

    # recovery from the compacted log matches the live state
    (tmp_path / "todos.json").write_text("{ broken json", encoding="utf-8")
    for bak in tmp_path.glob("todos.json.bak.*"):
        bak.unlink()
    s2 = make_json_store(tmp_path)
    assert s2.list_todos() == s.list_todos()
    assert {t["text"] for t in s2.list_todos()} == {"changed", "t2", "t3"}


def test_to_iso_formats():
    from datetime import datetime, timezone

    assert to_iso(datetime(2030, 1, 2, 3, 4, 5, 678901, tzinfo=timezone.utc)) == "2030-01-02T03:04:05.678Z"
    # naive values are taken as UTC
    assert to_iso(datetime(2030, 1, 2, 3, 4, 5)) == "2030-01-02T03:04:05.000Z"
