from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from .absences.controller import register as register_absences
from .api.errors import register as register_error_handlers
from .config import get_settings_module
from .container import Container, build_container
from .database.bootstrap import apply_schema, ensure_demo_users, list_tables
from .qa.controller import register as register_qa

logger = logging.getLogger("study_room")

SCHEMA_PATH = Path(__file__).resolve().parents[2] / "database" / "schema.sql"


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(*, settings_module: Optional[str] = None, container: Optional[Container] = None) -> Flask:
    """Build the Flask app.

    ``container`` lets callers (tests, scripts) supply their own repositories;
    otherwise MySQL-backed ones are built from the settings module.
    """
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["JWT_SECRET"] = getattr(settings, "JWT_SECRET")
    app.config["JWT_ALGORITHM"] = getattr(settings, "JWT_ALGORITHM", "HS256")
    app.config["QA_STRICT_ANSWER"] = bool(getattr(settings, "QA_STRICT_ANSWER", False))
    _configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"), db_config.get("host"), db_config.get("port", 3306), db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            ensure_demo_users(db_config)
            logger.info("demo users ready")

        container = build_container(db_config=db_config, strict_answer=app.config["QA_STRICT_ANSWER"])

    app.extensions["study_room.container"] = container

    @app.route("/health", methods=["GET"], endpoint="health")
    def health():
        return jsonify({"status": "ok", "message": "Study Room API is running"})

    register_error_handlers(app)
    register_absences(app, container)
    register_qa(app, container)

    return app
