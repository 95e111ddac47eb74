import logging
import os

from flask import Flask
from flask_cors import CORS

from .config import Config
from .storage import now_iso

logger = logging.getLogger(__name__)


def create_store(config):
    """Build the store selected by STORAGE_BACKEND."""
    backend = config.get("STORAGE_BACKEND", "json")

    if backend == "mongo":
        from .mongo_store import MongoStore
        uri = config["MONGO_URI"]
        if not uri:
            raise ValueError("MONGO_URI is required when STORAGE_BACKEND=mongo")
        store = MongoStore(uri, config["MONGO_DB"], config["MONGO_COLLECTION"])
        store.init_db()
    elif backend == "sql":
        from .db_store import SqlStore
        database_url = config["DATABASE_URL"]
        if not database_url:
            raise ValueError("DATABASE_URL is required when STORAGE_BACKEND=sql")
        store = SqlStore(database_url)
        store.init_db()
    elif backend == "json":
        from .storage import JsonStore
        os.makedirs(os.path.dirname(config["DATA_FILE"]), exist_ok=True)
        store = JsonStore(
            data_file=config["DATA_FILE"],
            backups=config["BACKUP_COUNT"],
            wal_file=config["WAL_FILE"],
            wal_limit=config["WAL_LIMIT"],
        )
        store.load_or_recover()
    else:
        raise ValueError(f"Unknown STORAGE_BACKEND: {backend}")

    logger.info("Storage backend: %s", backend)
    return store


def create_app(test_config: dict | None = None, store=None) -> Flask:
    # FRONTEND_DIR owns /static/, not the package
    app = Flask(__name__, static_folder=None)
    app.config.from_object(Config)

    if test_config:
        app.config.update(test_config)

    log_level = getattr(logging, app.config.get("LOG_LEVEL", "INFO").upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )

    if store is None:
        store = create_store(app.config)
    app.extensions["store"] = store

    CORS(app, resources={r"/api/*": {"origins": app.config["FRONTEND_URL"]}})

    from .api import api_bp
    from .web import web_bp

    app.register_blueprint(api_bp, url_prefix="/api")

    @app.route("/health")
    def health():
        return {"status": "ok", "time": now_iso()}

    # Static frontend bundle with an index.html fallback for client-side routes
    if app.config.get("SERVE_FRONTEND"):
        app.register_blueprint(web_bp)

    return app
