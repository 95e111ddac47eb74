import mongomock
import pytest
from todo_board import create_app
from todo_board.mongo_store import MongoStore

BACKENDS = ["json", "sql", "mongo"]


def make_config(backend, tmp_path, **extra):
    config = {
        "STORAGE_BACKEND": backend,
        "DATA_FILE": str(tmp_path / "todos.json"),
        "WAL_FILE": str(tmp_path / "todos.wal"),
        "DATABASE_URL": "sqlite://",
        "SERVE_FRONTEND": False,
        "DEBUG": False,
        "TESTING": True,
    }
    config.update(extra)
    return config


def build_app(backend, tmp_path, store=None, **extra):
    if store is None and backend == "mongo":
        store = MongoStore(client=mongomock.MongoClient())
        store.init_db()
    return create_app(make_config(backend, tmp_path, **extra), store=store)


@pytest.fixture(params=BACKENDS)
def app(request, tmp_path):
    return build_app(request.param, tmp_path)


@pytest.fixture()
def client(app):
    with app.test_client() as c:
        yield c


@pytest.fixture()
def make_app(tmp_path):
    def _make(backend="json", store=None, **extra):
        return build_app(backend, tmp_path, store=store, **extra)
    return _make
