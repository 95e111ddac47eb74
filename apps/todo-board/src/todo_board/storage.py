from __future__ import annotations
import json
import logging
import os
import shutil
import tempfile
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("text", "email")


class ValidationError(Exception):
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(dt: datetime) -> str:
    """Serialise a timestamp as ISO-8601 UTC with millisecond precision."""
    if dt.tzinfo is None:
        # SQLite and Mongo hand back naive datetimes that are already UTC
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def now_iso() -> str:
    return to_iso(utcnow())


def validate_todo(data: Dict[str, Any]):
    text = data.get("text")
    email = data.get("email")
    if not text or not email:
        raise ValidationError("text and email required")
    if not isinstance(text, str) or not isinstance(email, str):
        raise ValidationError("text and email must be strings")


def editable_changes(data: Dict[str, Any]) -> Dict[str, str]:
    """Pick the fields an update may change.

    Absent or null fields are left alone; everything else is written as given
    (no non-empty check, unlike create).
    """
    return {k: str(data[k]) for k in EDITABLE_FIELDS if data.get(k) is not None}


class JsonStore:
    """File-backed todo store for local development.

    Every write goes through an atomic replace of ``data_file`` after rotating
    up to ``backups`` copies, and is also appended to ``wal_file`` so a corrupt
    data file can be rebuilt on the next start.
    """

    def __init__(self, data_file: str, backups: int = 10, wal_file: str | None = None, wal_limit: int = 1000):
        self.data_file = data_file
        self.backups = int(backups)
        self.wal_file = wal_file
        self.wal_limit = int(wal_limit)
        self._wal_lines = 0
        self.state: Dict[str, List[Dict[str, Any]]] = {"todos": []}
        self._lock = threading.RLock()
        os.makedirs(os.path.dirname(self.data_file), exist_ok=True)

    # ---------- Persistence ----------
    def _atomic_write(self, path: str, content: str):
        d = os.path.dirname(path)
        os.makedirs(d, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=d, prefix=".tmp_", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            self._rotate_backups()
            os.replace(tmp, path)
        finally:
            if os.path.exists(tmp):
                os.remove(tmp)

    def _rotate_backups(self):
        # data_file.bak.1 is the newest copy, .bak.N the oldest
        for i in range(self.backups, 0, -1):
            src = f"{self.data_file}.bak.{i}"
            dst = f"{self.data_file}.bak.{i+1}"
            if os.path.exists(src):
                if i == self.backups:
                    os.remove(src)
                else:
                    os.replace(src, dst)
        if self.backups and os.path.exists(self.data_file):
            shutil.copy2(self.data_file, f"{self.data_file}.bak.1")

    def _append_wal(self, entry: Dict[str, Any]):
        if not self.wal_file:
            return
        os.makedirs(os.path.dirname(self.wal_file), exist_ok=True)
        with open(self.wal_file, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry, ensure_ascii=False) + "\n")
        self._wal_lines += 1

    def _flush(self):
        content = json.dumps(self.state, ensure_ascii=False, indent=2)
        self._atomic_write(self.data_file, content)
        self._compact_wal()

    def _compact_wal(self):
        """Collapse a long log into one snapshot of the state just flushed."""
        if not self.wal_file or self._wal_lines < self.wal_limit:
            return
        entry = {"type": "todo_snapshot", "todos": self.state["todos"]}
        fd, tmp = tempfile.mkstemp(dir=os.path.dirname(self.wal_file), prefix=".tmp_", suffix=".wal")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(json.dumps(entry, ensure_ascii=False) + "\n")
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, self.wal_file)
        finally:
            if os.path.exists(tmp):
                os.remove(tmp)
        logger.info("Compacted %d WAL entries into a snapshot", self._wal_lines)
        self._wal_lines = 1

    def _count_wal_lines(self) -> int:
        if not self.wal_file or not os.path.exists(self.wal_file):
            return 0
        with open(self.wal_file, "r", encoding="utf-8") as f:
            return sum(1 for _ in f)

    @staticmethod
    def _valid_state(state: Any) -> bool:
        return isinstance(state, dict) and isinstance(state.get("todos"), list)

    def _read(self, path: str) -> Optional[Dict[str, Any]]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                state = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Could not read %s: %s", path, e)
            return None
        return state if self._valid_state(state) else None

    def load_or_recover(self):
        with self._lock:
            self._wal_lines = self._count_wal_lines()
            if os.path.exists(self.data_file):
                state = self._read(self.data_file)
                if state is not None:
                    self.state = state
                    return
                logger.warning("Data file %s is unreadable, trying backups", self.data_file)
            elif not self.wal_file or not os.path.exists(self.wal_file):
                # Fresh install
                self._flush()
                return

            for i in range(1, self.backups + 1):
                bak = f"{self.data_file}.bak.{i}"
                if not os.path.exists(bak):
                    continue
                state = self._read(bak)
                if state is not None:
                    logger.info("Restored todos from backup %s", bak)
                    self.state = state
                    self._replay_wal()
                    self._flush()
                    return

            logger.info("No usable backup, rebuilding todos from the write-ahead log")
            self.state = {"todos": []}
            self._replay_wal()
            self._flush()

    def _replay_wal(self):
        if not self.wal_file or not os.path.exists(self.wal_file):
            return
        with open(self.wal_file, "r", encoding="utf-8") as f:
            for lineno, line in enumerate(f, 1):
                try:
                    entry = json.loads(line)
                except ValueError:
                    logger.warning("Skipping malformed WAL line %d", lineno)
                    continue
                try:
                    self._apply_wal_entry(entry)
                except (AttributeError, KeyError, TypeError) as e:
                    logger.warning("Skipping invalid WAL entry on line %d: %r", lineno, e)

    @staticmethod
    def _record(e: Dict[str, Any]) -> Dict[str, Any]:
        data = e["data"]
        if not isinstance(data, dict) or "id" not in data:
            raise TypeError("WAL record data must be a todo")
        return data

    def _apply_wal_entry(self, e: Dict[str, Any]):
        t = e.get("type")
        todos = self.state["todos"]
        if t == "todo_create":
            data = self._record(e)
            # a backup may already hold the record
            if not any(it["id"] == data["id"] for it in todos):
                todos.append(data)
        elif t == "todo_update":
            tid, data = e["id"], self._record(e)
            for i, it in enumerate(todos):
                if it["id"] == tid:
                    todos[i] = data
        elif t == "todo_delete":
            tid = e["id"]
            self.state["todos"] = [it for it in todos if it["id"] != tid]
        elif t == "todo_snapshot":
            snapshot = e["todos"]
            if not isinstance(snapshot, list):
                raise TypeError("WAL snapshot must be a list")
            self.state["todos"] = [self._record({"data": it}) for it in snapshot]

    # ---------- Todos ----------
    def _new_id(self) -> str:
        return str(uuid.uuid4())

    def _index(self, tid: str) -> Optional[int]:
        return next((i for i, t in enumerate(self.state["todos"]) if t["id"] == tid), None)

    def list_todos(self) -> List[Dict[str, Any]]:
        with self._lock:
            # newest insertion first among equal timestamps
            todos = list(reversed(self.state["todos"]))
        return sorted(todos, key=lambda t: t["createdAt"], reverse=True)

    def create_todo(self, data: Dict[str, Any]) -> Dict[str, Any]:
        validate_todo(data)
        now = now_iso()
        item = {
            "id": self._new_id(),
            "text": data["text"],
            "email": data["email"],
            "createdAt": now,
            "updatedAt": now,
        }
        with self._lock:
            self.state["todos"].append(item)
            self._append_wal({"type": "todo_create", "data": item})
            self._flush()
        return dict(item)

    def update_todo(self, tid: str, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        with self._lock:
            idx = self._index(tid)
            if idx is None:
                return None
            merged = {
                **self.state["todos"][idx],
                **editable_changes(data),
                "updatedAt": now_iso(),
            }
            self.state["todos"][idx] = merged
            self._append_wal({"type": "todo_update", "id": tid, "data": merged})
            self._flush()
        return dict(merged)

    def delete_todo(self, tid: str) -> bool:
        with self._lock:
            if self._index(tid) is None:
                return False
            self.state["todos"] = [t for t in self.state["todos"] if t["id"] != tid]
            self._append_wal({"type": "todo_delete", "id": tid})
            self._flush()
        return True
