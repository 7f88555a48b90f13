"""
Application Factory
===================
Builds the Flask application that hosts the case file record store.

Exactly one RecordStore exists per application; request handlers reach
it through ``get_record_store()`` rather than constructing their own.
Record CRUD routes are registered by the HTTP layer on top of this app.
"""

import logging
from typing import Optional

from flask import Flask, current_app

from config import Settings, get_settings
from routes.health import health_bp
from services.document_store import JsonDocumentStore
from services.record_store import RecordStore
from services.structured_logging import init_logging

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> Flask:
    settings = settings or get_settings()

    app = Flask(__name__)
    app.config["APP_ENV"] = settings.app_env
    app.config["DATABASE_PATH"] = str(settings.database_path)

    init_logging(app, level=settings.log_level, app_env=settings.app_env)

    app.extensions["record_store"] = RecordStore(JsonDocumentStore(settings.database_path))
    app.register_blueprint(health_bp)

    logger.info("Record store bound to %s", settings.database_path)
    return app


def get_record_store() -> RecordStore:
    """The application's RecordStore (requires an app context)."""
    return current_app.extensions["record_store"]
