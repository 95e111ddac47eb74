"""Entry point for todo-board."""

from __future__ import annotations

import argparse


def main() -> None:
    parser = argparse.ArgumentParser(description="Todo Board - email-tagged todo list")
    sub = parser.add_subparsers(dest="command", help="Command")

    serve_cmd = sub.add_parser("serve", help="Run the REST API server")
    serve_cmd.add_argument("--host", default="0.0.0.0", help="Interface to bind")
    serve_cmd.add_argument("--port", type=int, help="Port (defaults to PORT)")

    ui_cmd = sub.add_parser("ui", help="Interactive terminal todo list")
    ui_cmd.add_argument("--api", help="API base URL (defaults to TODO_API_URL)")

    args = parser.parse_args()

    if args.command == "serve":
        from . import create_app

        app = create_app()
        app.run(host=args.host, port=args.port or app.config["PORT"], debug=app.config["DEBUG"])
    elif args.command == "ui":
        from .ui import run_ui

        run_ui(api_url=args.api)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
