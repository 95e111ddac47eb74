"""MongoDB storage backend."""
from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import DESCENDING, MongoClient, ReturnDocument

from .storage import editable_changes, to_iso, utcnow, validate_todo

logger = logging.getLogger(__name__)


def _object_id(tid: str) -> Optional[ObjectId]:
    try:
        return ObjectId(tid)
    except (InvalidId, TypeError):
        return None


def to_dict(doc: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": str(doc["_id"]),
        "text": doc.get("text"),
        "email": doc.get("email"),
        "createdAt": to_iso(doc["createdAt"]) if doc.get("createdAt") else None,
        "updatedAt": to_iso(doc["updatedAt"]) if doc.get("updatedAt") else None,
    }


class MongoStore:
    """Document store holding one document per todo.

    Identifiers are ObjectIds rendered as hex strings; a string that is not a
    valid ObjectId never matches a document.
    """

    def __init__(self, uri: str = "", db_name: str = "todo_board", collection: str = "todos",
                 client: MongoClient | None = None):
        self.client = client if client is not None else MongoClient(uri, tz_aware=True)
        self.collection = self.client[db_name][collection]

    def init_db(self):
        self.collection.create_index([("createdAt", DESCENDING)])
        logger.info("Using MongoDB collection %s.%s", self.collection.database.name, self.collection.name)

    # ---------- Todos ----------
    def list_todos(self) -> List[Dict[str, Any]]:
        cursor = self.collection.find().sort([("createdAt", DESCENDING), ("_id", DESCENDING)])
        return [to_dict(doc) for doc in cursor]

    def create_todo(self, data: Dict[str, Any]) -> Dict[str, Any]:
        validate_todo(data)
        # Mongo keeps millisecond precision
        now = utcnow()
        now = now.replace(microsecond=now.microsecond // 1000 * 1000)
        doc = {"text": data["text"], "email": data["email"], "createdAt": now, "updatedAt": now}
        result = self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return to_dict(doc)

    def update_todo(self, tid: str, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        oid = _object_id(tid)
        if oid is None:
            return None
        doc = self.collection.find_one_and_update(
            {"_id": oid},
            {"$set": {**editable_changes(data), "updatedAt": utcnow()}},
            return_document=ReturnDocument.AFTER,
        )
        return to_dict(doc) if doc else None

    def delete_todo(self, tid: str) -> bool:
        oid = _object_id(tid)
        if oid is None:
            return False
        return self.collection.find_one_and_delete({"_id": oid}) is not None
