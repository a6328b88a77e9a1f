"""
project: Labyrinth
module: __init__.py
License: MIT

Flask application and Socket.IO wiring.

The generation core lives in ``labyrinth.dungeon`` and has no web
dependencies of its own; this module exposes it over HTTP (JSON routes) and
Socket.IO (progress streaming). Configuration comes from environment
variables, optionally loaded from a ``.env`` file, with development defaults.
"""

import logging
import os
import uuid

from dotenv import load_dotenv
from flask import Flask, jsonify
from flask_socketio import SocketIO

from labyrinth.dungeon import ConfigurationError

# Load .env if present so SECRET_KEY / DUNGEON_* can be supplied without exporting
load_dotenv()

app = Flask(__name__, instance_relative_config=True)

try:
    os.makedirs(app.instance_path, exist_ok=True)
except OSError:
    # Read-only installs still serve requests; only file logging needs the folder
    pass

app.config.update(
    SECRET_KEY=os.getenv("SECRET_KEY", "dev-secret-change-me"),
    # Generation defaults, built from DUNGEON_* on first use (routes.dungeon_api.dungeon_defaults)
    DUNGEON_DEFAULTS=None,
    DUNGEON_CACHE_MAX=os.getenv("DUNGEON_CACHE_MAX", "8"),
)

socketio = SocketIO(
    app,
    async_mode=os.getenv("SOCKETIO_ASYNC_MODE") or None,
    cors_allowed_origins=os.getenv("CORS_ALLOWED_ORIGINS", "*"),
    ping_interval=20,
    ping_timeout=10,
)

# Register HTTP blueprints after app/socketio exist
from labyrinth.routes.dungeon_api import bp_dungeon  # noqa: E402

app.register_blueprint(bp_dungeon)

# Import websocket handlers so their event decorators register with Socket.IO (side-effect)
from labyrinth.websockets import generation as _ws_generation  # noqa: F401,E402


def create_app():
    """Return the Flask app instance (module singleton)."""
    return app


@app.errorhandler(ConfigurationError)
def configuration_error(e):
    return jsonify({"error": e.message, "field": e.field}), 400


@app.errorhandler(500)
def internal_error(e):
    error_id = uuid.uuid4().hex[:8]
    logging.exception("Unhandled exception (id=%s)", error_id)
    return jsonify({"error": "internal server error", "error_id": error_id}), 500
