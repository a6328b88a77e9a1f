"""Socket.IO dungeon generation handlers.

Events:
    - generate_dungeon: Generate a dungeon; payload = the HTTP generate body

Emits:
    - generation_progress: One per pipeline event { stage, ... }
    - generation_done: Result summary, with cells unless include_cells is false
    - error: Invalid payload or configuration { message, field, code }
"""

from flask_socketio import emit

from labyrinth import socketio
from labyrinth.dungeon import ConfigurationError, GenerationDriver, GenerationState
from labyrinth.logging_utils import get_logger
from labyrinth.routes.dungeon_api import resolve_config

from .validation import GENERATE_DUNGEON, validate

_log = get_logger("labyrinth.ws")


def progress_payload(stage, payload):
    """Reduce a pipeline event to JSON-safe data."""
    out = {"stage": stage.value}
    if stage is GenerationState.PLACING_ROOMS:
        out["index"] = payload["index"]
        out["room"] = payload["room"].to_dict()
    elif stage is GenerationState.TRIANGULATING:
        out["edges"] = len(payload["edges"])
    elif stage is GenerationState.BUILDING_TREE:
        out["selected_edges"] = [list(e.key()) for e in payload["selected_edges"]]
    elif stage is GenerationState.PATHFINDING:
        out["edge"] = list(payload["edge"].key())
        out["path"] = [list(p) for p in payload["path"]]
        out["stairs"] = len(payload["stairs"])
    elif stage is GenerationState.DONE:
        out["seed"] = payload["result"].seed
    return out


@socketio.on("generate_dungeon")
def handle_generate_dungeon(data):
    ok, result = validate(data or {}, GENERATE_DUNGEON)
    if not ok:
        emit(
            "error",
            {"message": f"Invalid generate_dungeon: {result['error']}", "field": result["field"], "code": result["code"]},
        )
        return
    include_cells = result.pop("include_cells", None) is not False
    try:
        config, _requested = resolve_config(result)
    except ConfigurationError as e:
        emit("error", {"message": f"Invalid generate_dungeon: {e.message}", "field": e.field, "code": "config"})
        return

    def forward(stage, payload):
        emit("generation_progress", progress_payload(stage, payload))

    dungeon = GenerationDriver(config, progress=forward).generate()
    _log.info(event="ws_generate", seed=dungeon.seed, rooms=len(dungeon.rooms), complete=dungeon.complete)
    done = dungeon.summary()
    if include_cells:
        done["cells"] = [[x, y, z, cell.value] for (x, y, z), cell in dungeon.cells()]
    emit("generation_done", done)
