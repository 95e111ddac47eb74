import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def env(key: str, default: str) -> str:
    return os.getenv(key, default)


def default_backend() -> str:
    if os.getenv("MONGO_URI"):
        return "mongo"
    if os.getenv("DATABASE_URL"):
        return "sql"
    return "json"


@dataclass
class Config:
    # Storage backend: "mongo" (document store), "sql" (any SQLAlchemy URL) or "json" (dev file)
    STORAGE_BACKEND: str = env("STORAGE_BACKEND", default_backend())

    # MongoDB (STORAGE_BACKEND=mongo)
    MONGO_URI: str = env("MONGO_URI", "")
    MONGO_DB: str = env("MONGO_DB", "todo_board")
    MONGO_COLLECTION: str = env("MONGO_COLLECTION", "todos")

    # SQL (STORAGE_BACKEND=sql)
    DATABASE_URL: str = env("DATABASE_URL", "")

    # JSON file storage (STORAGE_BACKEND=json)
    DATA_FILE: str = env("DATA_FILE", os.path.abspath("data/todos.json"))
    WAL_FILE: str = env("WAL_FILE", os.path.abspath("data/todos.wal"))
    BACKUP_COUNT: int = int(env("BACKUP_COUNT", "10"))
    # WAL entries kept before the log is collapsed into a snapshot
    WAL_LIMIT: int = int(env("WAL_LIMIT", "1000"))

    # CORS origin for the browser frontend
    FRONTEND_URL: str = env("FRONTEND_URL", "*")

    # Built frontend bundle, served with an index.html fallback in production
    APP_ENV: str = env("APP_ENV", "development")
    SERVE_FRONTEND: bool = env("SERVE_FRONTEND", "1" if env("APP_ENV", "development") == "production" else "0") == "1"
    FRONTEND_DIR: str = env("FRONTEND_DIR", os.path.abspath("client/build"))

    PORT: int = int(env("PORT", "5000"))
    DEBUG: bool = env("DEBUG", "0") == "1"
    LOG_LEVEL: str = env("LOG_LEVEL", "INFO")

    # Terminal view
    TODO_API_URL: str = env("TODO_API_URL", "http://localhost:5000")
