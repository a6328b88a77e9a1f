"""
project: Labyrinth
module: dungeon_api.py
License: MIT

Dungeon generation API routes.

Every request resolves to a fully seeded ``GenerationConfig`` (request body
merged over the app defaults) and the result is served from a small
in-process cache, so repeated reads of the same dungeon (metrics, layers)
never regenerate it. The session remembers the last requested config so
``regenerate``, ``metrics`` and ``layer`` can work without a body.
"""

import hashlib
import os
import random
import threading

from flask import Blueprint, current_app, jsonify, request, session

from labyrinth.dungeon import ConfigurationError, GenerationConfig, GenerationDriver
from labyrinth.logging_utils import get_logger

log = get_logger("labyrinth.api")

SEED_MAX = 9223372036854775807

# (config incl. seed) -> GenerationResult. Guarded by a lock because Flask-SocketIO
# may interleave greenlets.
_result_cache = {}
_result_cache_lock = threading.Lock()


def _coerce_seed(payload_seed):
    """Convert a provided seed (int or str) into a bounded 64-bit int."""
    if payload_seed is None:
        return random.randint(1, 1_000_000)
    if isinstance(payload_seed, bool):
        raise ConfigurationError("seed must be an integer or string", "seed")
    if isinstance(payload_seed, int):
        return payload_seed % SEED_MAX
    if isinstance(payload_seed, str):
        s = payload_seed.strip()
        if not s:
            return random.randint(1, 1_000_000)
        if s.isdigit():
            return int(s) % SEED_MAX
        h = hashlib.sha256(s.encode("utf-8")).digest()
        return int.from_bytes(h[:8], "big") % SEED_MAX
    raise ConfigurationError("seed must be an integer or string", "seed")


def _cache_max() -> int:
    try:
        return int(current_app.config.get("DUNGEON_CACHE_MAX", 8))
    except (TypeError, ValueError):
        return 8


def dungeon_defaults() -> GenerationConfig:
    """App-wide generation defaults, read from DUNGEON_* the first time they are needed.

    A bad variable raises ConfigurationError here (a 400 for the request)
    rather than at import.
    """
    defaults = current_app.config.get("DUNGEON_DEFAULTS")
    if defaults is None:
        defaults = GenerationConfig.from_env()
        current_app.config["DUNGEON_DEFAULTS"] = defaults
    return defaults


def get_cached_result(config: GenerationConfig):
    """Return the result for a seeded ``config``, generating it on a miss."""
    if config.seed is None:
        raise ValueError("cached generation requires a seeded config")
    if os.environ.get("DUNGEON_DISABLE_CACHE") == "1":
        return GenerationDriver(config).generate()
    with _result_cache_lock:
        result = _result_cache.get(config)
        if result is not None:
            return result
    result = GenerationDriver(config).generate()
    with _result_cache_lock:
        _result_cache[config] = result
        if len(_result_cache) > _cache_max():
            first_key = next(iter(_result_cache.keys()))
            if first_key != config:
                _result_cache.pop(first_key, None)
    return result


def clear_cache():
    with _result_cache_lock:
        _result_cache.clear()


def resolve_config(data):
    """Merge a request payload over the app defaults and pin the seed.

    Returns ``(config, requested_seed)`` where ``requested_seed`` is None when
    the caller asked for a random dungeon.
    """
    data = dict(data or {})
    defaults = dungeon_defaults()
    if "seed" in data:
        requested = data.pop("seed")
    else:
        requested = defaults.seed
    if requested is not None and not (isinstance(requested, str) and not requested.strip()):
        requested = _coerce_seed(requested)
    else:
        requested = None
    config = GenerationConfig.from_mapping(data, base=defaults)
    seed = requested if requested is not None else _coerce_seed(None)
    return config.with_seed(seed), requested


def _remember(config, requested):
    session["dungeon_config"] = config.to_dict()
    session["dungeon_requested_seed"] = requested


def _session_config():
    stored = session.get("dungeon_config")
    if not stored:
        return None
    return GenerationConfig.from_mapping(stored)


bp_dungeon = Blueprint("dungeon", __name__)


@bp_dungeon.route("/api/dungeon/generate", methods=["POST"])
def generate_dungeon():
    """Generate a dungeon from the JSON body.

    Body (all optional): grid_size, room_attempts, max_room_size, seed,
    loop_chance, stair_cost, mode, include_cells (default true).
    Response: the result dict (seed, config, rooms, paths, metrics, cells).
    """
    data = request.get_json(silent=True)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        return jsonify({"error": "body must be a JSON object", "field": None}), 400
    include_cells = data.pop("include_cells", True)
    config, requested = resolve_config(data)
    result = get_cached_result(config)
    _remember(config, requested)
    log.info(event="api_generate", seed=result.seed, rooms=len(result.rooms), complete=result.complete)
    return jsonify(result.to_dict(include_cells=bool(include_cells)))


@bp_dungeon.route("/api/dungeon/regenerate", methods=["POST"])
def regenerate_dungeon():
    """Re-run the session's config; a config without a requested seed gets a new one."""
    config = _session_config()
    if config is None:
        return jsonify({"error": "no dungeon in session"}), 404
    requested = session.get("dungeon_requested_seed")
    if requested is None:
        config = config.with_seed(_coerce_seed(None))
    result = get_cached_result(config)
    _remember(config, requested)
    data = request.get_json(silent=True)
    include_cells = data.get("include_cells", True) if isinstance(data, dict) else True
    log.info(event="api_regenerate", seed=result.seed, complete=result.complete)
    return jsonify(result.to_dict(include_cells=bool(include_cells)))


@bp_dungeon.route("/api/dungeon/metrics", methods=["GET"])
def dungeon_metrics():
    """Response: { seed: int, size: [x, y, z], complete: bool, metrics: {...} }"""
    config = _session_config()
    if config is None:
        return jsonify({"error": "no dungeon in session"}), 404
    result = get_cached_result(config)
    return jsonify(
        {
            "seed": result.seed,
            "size": list(result.grid.size),
            "complete": result.complete,
            "metrics": result.metrics,
        }
    )


@bp_dungeon.route("/api/dungeon/layer/<int:y>", methods=["GET"])
def dungeon_layer(y):
    config = _session_config()
    if config is None:
        return jsonify({"error": "no dungeon in session"}), 404
    result = get_cached_result(config)
    if not 0 <= y < result.grid.size[1]:
        return jsonify({"error": "layer out of range", "levels": result.grid.size[1]}), 404
    return jsonify({"seed": result.seed, "y": y, "rows": result.layer(y)})
