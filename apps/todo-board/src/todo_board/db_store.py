"""SQL storage backend for any SQLAlchemy database URL."""
from __future__ import annotations
from typing import Any, Dict, List, Optional

from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .models import Base, Todo
from .storage import editable_changes, utcnow, validate_todo


class SqlStore:
    """Relational todo storage."""

    def __init__(self, database_url: str):
        kwargs: Dict[str, Any] = {"echo": False, "pool_pre_ping": True}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            # one shared connection, otherwise every session sees a fresh empty database
            kwargs.update(connect_args={"check_same_thread": False}, poolclass=StaticPool)
        self.engine = create_engine(database_url, **kwargs)
        self.SessionLocal = sessionmaker(bind=self.engine, expire_on_commit=False)

    def init_db(self):
        """Create the todos table if it doesn't exist."""
        Base.metadata.create_all(self.engine)

    def get_session(self) -> Session:
        return self.SessionLocal()

    # ---------- Todos ----------
    def list_todos(self) -> List[Dict[str, Any]]:
        with self.get_session() as session:
            query = select(Todo).order_by(Todo.created_at.desc())
            return [t.to_dict() for t in session.execute(query).scalars().all()]

    def create_todo(self, data: Dict[str, Any]) -> Dict[str, Any]:
        validate_todo(data)
        with self.get_session() as session:
            todo = Todo(text=data["text"], email=data["email"])
            session.add(todo)
            session.commit()
            session.refresh(todo)
            return todo.to_dict()

    def update_todo(self, tid: str, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        with self.get_session() as session:
            todo = session.get(Todo, tid)
            if not todo:
                return None
            for field, value in editable_changes(data).items():
                setattr(todo, field, value)
            todo.updated_at = utcnow()
            session.commit()
            session.refresh(todo)
            return todo.to_dict()

    def delete_todo(self, tid: str) -> bool:
        with self.get_session() as session:
            todo = session.get(Todo, tid)
            if not todo:
                return False
            session.delete(todo)
            session.commit()
            return True
