"""Hosting for the built browser frontend.

Serves files from FRONTEND_DIR and falls back to its index.html for any other
non-API path so that client-side routes survive a reload.
"""
from __future__ import annotations
import os

from flask import Blueprint, abort, current_app, jsonify, send_from_directory

web_bp = Blueprint("web", __name__)


def frontend_dir() -> str:
    return current_app.config["FRONTEND_DIR"]


@web_bp.get("/", defaults={"path": ""})
@web_bp.get("/<path:path>")
def frontend(path: str):
    if path == "api" or path.startswith("api/"):
        return jsonify({"error": "Not Found"}), 404
    root = frontend_dir()
    if path and os.path.isfile(os.path.join(root, path)):
        return send_from_directory(root, path)
    if not os.path.isfile(os.path.join(root, "index.html")):
        abort(404)
    return send_from_directory(root, "index.html")
