"""HTTP client for the todo REST API."""

from __future__ import annotations

import httpx


class TodoClient:
    """Thin synchronous wrapper over the ``/api/todos`` endpoints.

    Methods return the raw :class:`httpx.Response`; callers decide what a
    non-success status means for them.
    """

    def __init__(self, base_url: str | None = None, http: httpx.Client | None = None) -> None:
        if http is None:
            from .config import Config

            http = httpx.Client(base_url=base_url or Config.TODO_API_URL)
        self._http = http

    def list(self) -> httpx.Response:
        return self._http.get("/api/todos")

    def create(self, text: str, email: str) -> httpx.Response:
        return self._http.post("/api/todos", json={"text": text, "email": email})

    def update(self, todo_id: str, text: str, email: str) -> httpx.Response:
        return self._http.put(f"/api/todos/{todo_id}", json={"text": text, "email": email})

    def delete(self, todo_id: str) -> httpx.Response:
        return self._http.delete(f"/api/todos/{todo_id}")

    def close(self) -> None:
        self._http.close()
