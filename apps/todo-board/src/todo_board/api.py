import logging

from flask import Blueprint, current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from .storage import ValidationError

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__)


def store():
    return current_app.extensions["store"]


def json_body() -> dict:
    data = request.get_json(force=True, silent=True)
    return data if isinstance(data, dict) else {}


def not_found():
    return jsonify({"error": "Todo not found"}), 404


@api_bp.errorhandler(Exception)
def handle_error(e):
    if isinstance(e, HTTPException):
        return jsonify({"error": e.name}), e.code
    # Store failures are logged but never echoed to the client
    logger.exception("Unhandled error on %s %s", request.method, request.path)
    return jsonify({"error": "Server error"}), 500


@api_bp.get("/todos")
def api_list_todos():
    return jsonify(store().list_todos())


@api_bp.post("/todos")
def api_create_todo():
    try:
        item = store().create_todo(json_body())
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify(item), 201


@api_bp.put("/todos/<tid>")
def api_update_todo(tid):
    item = store().update_todo(tid, json_body())
    if not item:
        return not_found()
    return jsonify(item)


@api_bp.delete("/todos/<tid>")
def api_delete_todo(tid):
    if not store().delete_todo(tid):
        return not_found()
    return jsonify({"message": "Deleted", "deletedId": tid})
