"""View state for the todo board.

``TodoView`` mirrors server state locally: every mutation goes to the API
first and the local list is only touched once the call succeeds.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import httpx

from .client import TodoClient

logger = logging.getLogger(__name__)


class TodoView:
    def __init__(
        self,
        client: TodoClient,
        confirm: Callable[[str], bool],
        alert: Callable[[str], None],
    ) -> None:
        self.client = client
        self.confirm = confirm
        self.alert = alert

        self.todos: list[dict[str, Any]] = []
        self.text = ""
        self.email = ""
        self.edit_id: str | None = None
        self.loading = False
        self.dark_mode = False

    @property
    def editing(self) -> bool:
        return self.edit_id is not None

    def mount(self) -> None:
        """Load the list from the server."""
        self.loading = True
        try:
            data = self.client.list().json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Could not load todos: %s", e)
            data = None
        self.todos = data if isinstance(data, list) else []
        self.loading = False

    def submit(self) -> None:
        if self.editing:
            self._update()
        else:
            self._add()

    def _call(self, action: str, request: Callable[[], httpx.Response]) -> dict[str, Any] | None:
        try:
            res = request()
        except httpx.HTTPError as e:
            logger.warning("%s: %s", action, e)
            res = None
        body = None
        if res is not None and res.is_success:
            try:
                body = res.json()
            except ValueError:
                logger.warning("%s: response is not JSON", action)
        if not isinstance(body, dict):
            self.alert(action)
            return None
        return body

    def _add(self) -> None:
        if not self.text or not self.email:
            return
        created = self._call("Add failed", lambda: self.client.create(self.text, self.email))
        if created is None:
            return
        self.todos = [created, *self.todos]
        self._clear_form()

    def _update(self) -> None:
        edit_id = self.edit_id
        updated = self._call("Update failed", lambda: self.client.update(edit_id, self.text, self.email))
        if updated is None:
            return
        self.todos = [updated if t["id"] == edit_id else t for t in self.todos]
        self.cancel_edit()

    def start_edit(self, todo: dict[str, Any]) -> None:
        self.edit_id = todo["id"]
        self.text = todo["text"]
        self.email = todo["email"]

    def cancel_edit(self) -> None:
        self.edit_id = None
        self._clear_form()

    def delete(self, todo_id: str) -> None:
        if not self.confirm("Delete this todo?"):
            return
        if self._call("Delete failed", lambda: self.client.delete(todo_id)) is None:
            return
        self.todos = [t for t in self.todos if t["id"] != todo_id]

    def toggle_theme(self) -> None:
        self.dark_mode = not self.dark_mode

    def _clear_form(self) -> None:
        self.text = ""
        self.email = ""
