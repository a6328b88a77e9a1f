import pytest

from labyrinth.routes import dungeon_api
from labyrinth.routes.dungeon_api import _coerce_seed

BODY = {"grid_size": [12, 3, 12], "room_attempts": 6, "max_room_size": [4, 2, 4]}


def _generate(client, **extra):
    payload = dict(BODY)
    payload.update(extra)
    return client.post("/api/dungeon/generate", json=payload)


def test_generate_returns_result(client):
    r = _generate(client, seed=11)
    assert r.status_code == 200
    data = r.get_json()
    assert data["seed"] == 11
    assert data["config"]["grid_size"] == [12, 3, 12]
    assert data["config"]["room_attempts"] == 6
    assert isinstance(data["cells"], list)
    assert set(data["metrics"]) >= {"rooms_placed", "paths_carved", "runtime_ms"}


def test_generate_without_cells(client):
    data = _generate(client, seed=11, include_cells=False).get_json()
    assert "cells" not in data
    assert "rooms" in data


def test_generate_is_deterministic_per_seed(client):
    a = _generate(client, seed=123).get_json()
    dungeon_api.clear_cache()
    b = _generate(client, seed=123).get_json()
    assert a["cells"] == b["cells"]
    assert a["paths"] == b["paths"]


def test_string_seed_is_hashed(client):
    data = _generate(client, seed="crypt", include_cells=False).get_json()
    assert data["seed"] == _coerce_seed("crypt")
    assert _generate(client, seed="42", include_cells=False).get_json()["seed"] == 42


def test_missing_seed_is_random(client):
    data = client.post("/api/dungeon/generate", json={"grid_size": [8, 2, 8], "include_cells": False}).get_json()
    assert isinstance(data["seed"], int)


@pytest.mark.parametrize(
    "payload,field",
    [
        ({"grid_size": [0, 3, 3]}, "grid_size"),
        ({"loop_chance": 3}, "loop_chance"),
        ({"mode": "4d"}, "mode"),
        ({"max_room_size": "big"}, "max_room_size"),
    ],
)
def test_invalid_config_is_400(client, payload, field):
    r = client.post("/api/dungeon/generate", json=payload)
    assert r.status_code == 400
    data = r.get_json()
    assert data["field"] == field
    assert data["error"]


def test_non_object_body_is_400(client):
    r = client.post("/api/dungeon/generate", json=[1, 2, 3])
    assert r.status_code == 400


def test_session_routes_need_a_dungeon(client):
    assert client.post("/api/dungeon/regenerate").status_code == 404
    assert client.get("/api/dungeon/metrics").status_code == 404
    assert client.get("/api/dungeon/layer/0").status_code == 404


def test_metrics_for_session_dungeon(client):
    _generate(client, seed=8)
    r = client.get("/api/dungeon/metrics")
    assert r.status_code == 200
    data = r.get_json()
    assert data["seed"] == 8
    assert data["size"] == [12, 3, 12]
    assert "tiles_room" in data["metrics"]


def test_layer_rows(client):
    _generate(client, seed=8)
    r = client.get("/api/dungeon/layer/1")
    assert r.status_code == 200
    rows = r.get_json()["rows"]
    assert len(rows) == 12
    assert all(len(row) == 12 and set(row) <= set(".RHS") for row in rows)
    assert client.get("/api/dungeon/layer/3").status_code == 404


def test_regenerate_keeps_requested_seed(client):
    first = _generate(client, seed=19).get_json()
    r = client.post("/api/dungeon/regenerate", json={"include_cells": False})
    assert r.status_code == 200
    again = r.get_json()
    assert again["seed"] == 19
    assert again["rooms"] == first["rooms"]


def test_regenerate_draws_new_seed_when_unseeded(client, monkeypatch):
    seeds = iter([500, 600])
    monkeypatch.setattr(dungeon_api.random, "randint", lambda a, b: next(seeds))
    assert _generate(client, include_cells=False).get_json()["seed"] == 500
    assert client.post("/api/dungeon/regenerate").get_json()["seed"] == 600


def test_cache_reuses_results(test_app):
    from labyrinth.dungeon import GenerationConfig

    cfg = GenerationConfig(grid_size=(8, 2, 8), room_attempts=3, seed=1)
    with test_app.app_context():
        assert dungeon_api.get_cached_result(cfg) is dungeon_api.get_cached_result(cfg)


def test_cache_is_bounded(test_app):
    from labyrinth.dungeon import GenerationConfig

    with test_app.app_context():
        for seed in range(dungeon_api._cache_max() + 3):
            dungeon_api.get_cached_result(GenerationConfig(grid_size=(6, 2, 6), room_attempts=2, seed=seed))
        assert len(dungeon_api._result_cache) <= dungeon_api._cache_max()


def test_cache_needs_a_seed(test_app):
    from labyrinth.dungeon import GenerationConfig

    with test_app.app_context():
        with pytest.raises(ValueError):
            dungeon_api.get_cached_result(GenerationConfig())


def test_coerce_seed_forms():
    assert _coerce_seed(7) == 7
    assert _coerce_seed(" 15 ") == 15
    assert _coerce_seed("abc") == _coerce_seed("abc")
    assert 1 <= _coerce_seed(None) <= 1_000_000


def test_defaults_are_read_from_env_on_first_use(test_app, client, monkeypatch):
    monkeypatch.setitem(test_app.config, "DUNGEON_DEFAULTS", None)
    monkeypatch.setenv("DUNGEON_ROOM_ATTEMPTS", "4")
    data = client.post("/api/dungeon/generate", json={"grid_size": [8, 2, 8], "seed": 1}).get_json()
    assert data["config"]["room_attempts"] == 4
    assert test_app.config["DUNGEON_DEFAULTS"].room_attempts == 4


def test_bad_dungeon_env_is_a_400(test_app, client, monkeypatch):
    monkeypatch.setitem(test_app.config, "DUNGEON_DEFAULTS", None)
    monkeypatch.setenv("DUNGEON_MODE", "bogus")
    r = client.post("/api/dungeon/generate", json={"seed": 1})
    assert r.status_code == 400
    assert r.get_json()["field"] == "mode"
    assert test_app.config["DUNGEON_DEFAULTS"] is None
