"""Interactive terminal front end using prompt_toolkit and rich."""

from __future__ import annotations

from prompt_toolkit import PromptSession
from prompt_toolkit.shortcuts import confirm
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .client import TodoClient
from .view import TodoView

console = Console()

THEMES = {
    False: {"title": "bold black on grey93", "text": "bold", "email": "grey42", "accent": "dodger_blue2"},
    True: {"title": "bold white on grey11", "text": "bold white", "email": "grey62", "accent": "medium_purple1"},
}

HELP = (
    "Commands: [bold]add[/bold], [bold]edit N[/bold], [bold]cancel[/bold], [bold]delete N[/bold], "
    "[bold]theme[/bold], [bold]reload[/bold], [bold]quit[/bold]"
)


def alert(message: str) -> None:
    console.print(f"[bold red]{message}[/bold red]")
    console.input("[dim]Press Enter to continue[/dim]")


def render(view: TodoView) -> None:
    theme = THEMES[view.dark_mode]
    if view.loading:
        console.print("Loading todos...")
        return

    table = Table(title="Todo App", title_style=theme["title"], style=theme["accent"], expand=True)
    table.add_column("#", justify="right", width=3)
    table.add_column("Task", style=theme["text"], overflow="fold")
    table.add_column("Email", style=theme["email"], overflow="fold")
    for n, todo in enumerate(view.todos, 1):
        marker = " *" if todo["id"] == view.edit_id else ""
        table.add_row(f"{n}{marker}", escape(todo["text"]), escape(todo["email"]))
    console.print(table)
    if view.editing:
        console.print(f"[{theme['accent']}]Editing #{_position(view)} - submit with 'edit' again or 'cancel'[/]")


def _position(view: TodoView) -> int:
    return next((i for i, t in enumerate(view.todos, 1) if t["id"] == view.edit_id), 0)


def _pick(view: TodoView, arg: str) -> dict | None:
    try:
        n = int(arg)
        if n < 1:
            raise IndexError(n)
        return view.todos[n - 1]
    except (ValueError, IndexError):
        console.print(f"[red]No todo numbered {arg!r}[/red]")
        return None


def _fill_form(session: PromptSession, view: TodoView) -> None:
    view.text = session.prompt("Task: ", default=view.text).strip()
    view.email = session.prompt("Email: ", default=view.email).strip()


def run_ui(api_url: str | None = None) -> None:
    """Run the interactive todo loop until the user quits."""
    client = TodoClient(base_url=api_url)
    session: PromptSession = PromptSession()
    view = TodoView(client, confirm=confirm, alert=alert)

    console.print(HELP)
    view.mount()
    try:
        while True:
            render(view)
            try:
                line = session.prompt("> ").strip()
            except (EOFError, KeyboardInterrupt):
                break
            if not line:
                continue
            cmd, _, arg = line.partition(" ")
            cmd = cmd.lower()

            if cmd in ("quit", "exit", "q"):
                break
            elif cmd == "add":
                view.cancel_edit()
                _fill_form(session, view)
                view.submit()
            elif cmd == "edit":
                if arg:
                    todo = _pick(view, arg)
                    if todo is None:
                        continue
                    view.start_edit(todo)
                elif not view.editing:
                    console.print("[red]Usage: edit N[/red]")
                    continue
                _fill_form(session, view)
                view.submit()
            elif cmd == "cancel":
                view.cancel_edit()
            elif cmd in ("delete", "del", "rm"):
                todo = _pick(view, arg)
                if todo is not None:
                    view.delete(todo["id"])
            elif cmd == "theme":
                view.toggle_theme()
            elif cmd == "reload":
                view.mount()
            else:
                console.print(HELP)
    finally:
        client.close()
        console.print("[dim]Goodbye![/dim]")
