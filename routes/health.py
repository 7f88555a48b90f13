"""
Health-Check Endpoints
======================
Unauthenticated endpoints for load-balancer probes and monitoring.

  /health/live   Liveness: process is running and can serve HTTP.
  /health/ready  Readiness: the record document can be loaded and saved.
  /health/info   Build metadata (version, environment).
"""

import os
import time
from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify

from models.records import COLLECTIONS
from services.errors import RecordStoreError

health_bp = Blueprint("health", __name__, url_prefix="/health")

_BOOT_TIME = time.monotonic()


def _read_version() -> str:
    """Read VERSION file from project root, falling back to 'unknown'."""
    try:
        version_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)), "VERSION"
        )
        with open(version_path, "r", encoding="utf-8") as fh:
            return fh.read().strip()
    except OSError:
        return "unknown"


@health_bp.route("/live", methods=["GET"])
def liveness():
    return jsonify({"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}), 200


@health_bp.route("/ready", methods=["GET"])
def readiness():
    """Readiness probe: the backing document is loadable (and writable on first use)."""
    store = current_app.extensions["record_store"]

    try:
        document = store.snapshot()
        store_ok = True
        store_error = None
    except (RecordStoreError, OSError) as exc:
        store_ok = False
        store_error = str(exc)

    payload = {
        "status": "ok" if store_ok else "degraded",
        "checks": {
            "record_store": {
                "status": "ok" if store_ok else "fail",
            },
        },
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if store_ok:
        payload["checks"]["record_store"]["collections"] = {
            name: len(document.records(name)) for name in COLLECTIONS
        }
    else:
        payload["checks"]["record_store"]["error"] = store_error

    return jsonify(payload), 200 if store_ok else 503


@health_bp.route("/info", methods=["GET"])
def info():
    uptime_seconds = round(time.monotonic() - _BOOT_TIME, 1)
    return jsonify({
        "version": _read_version(),
        "environment": current_app.config.get("APP_ENV", "development"),
        "uptime_seconds": uptime_seconds,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }), 200
