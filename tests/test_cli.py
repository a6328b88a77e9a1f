import importlib
import json
import sys
import types

import pytest

# Import run.py as a module and exercise parse_args + main with a patched
# start_server so we do not actually start networking.


@pytest.fixture()
def run_module():
    # Clean import each time (run.py reads VERSION once)
    if "run" in sys.modules:
        del sys.modules["run"]
    return importlib.import_module("run")


def test_version_flag_outputs_version(run_module, capsys):
    with pytest.raises(SystemExit) as exc:
        run_module.parse_args(["--version"])
    assert exc.value.code == 0
    out = capsys.readouterr().out
    assert run_module.__version__ in out
    assert "Labyrinth" in out


def test_default_command_is_server(run_module):
    assert run_module.parse_args([]).command == "server"


def test_generate_prints_summary_and_layers(run_module, capsys):
    code = run_module.main(["generate", "--seed", "3", "--size", "12", "3", "12", "--attempts", "6", "--layers"])
    assert code == 0
    out = capsys.readouterr().out
    assert "Seed:" in out
    assert "y=0" in out and "y=2" in out


def test_generate_json(run_module, capsys):
    code = run_module.main(["generate", "--seed", "3", "--size", "10", "2", "10", "--attempts", "4", "--json"])
    assert code == 0
    # structured log lines precede the JSON document
    data = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert data["seed"] == 3
    assert data["config"]["grid_size"] == [10, 2, 10]


def test_generate_flat_mode(run_module, capsys):
    code = run_module.main(["generate", "--seed", "5", "--mode", "2d", "--size", "16", "4", "16", "--json"])
    assert code == 0
    data = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert data["config"]["mode"] == "2d"
    assert data["size"] == [16, 1, 16]
    assert all(cell[3] != "stairs" for cell in data["cells"])


def test_invalid_config_exits_with_error(run_module, capsys):
    assert run_module.main(["generate", "--size", "0", "1", "1"]) == 2
    assert "grid_size" in capsys.readouterr().err


def test_loop_counts_incomplete_runs(run_module, capsys):
    code = run_module.main(["loop", "--iterations", "3", "--size", "10", "3", "10", "--attempts", "4"])
    assert code == 0
    out = capsys.readouterr().out
    assert "Runs:" in out and "Incomplete:" in out


def test_loop_iterations_are_capped(run_module, monkeypatch, capsys):
    from labyrinth.dungeon import GenerationDriver

    calls = []

    def fake_regenerate(self):
        calls.append(1)
        return types.SimpleNamespace(complete=len(calls) % 2 == 0)

    monkeypatch.setattr(GenerationDriver, "regenerate", fake_regenerate)
    run_module.main(["loop", "--iterations", "5000"])
    assert len(calls) == run_module.MAX_LOOP_ITERATIONS
    assert "500" in capsys.readouterr().out


def test_build_config_uses_env_defaults(run_module, monkeypatch):
    monkeypatch.setenv("DUNGEON_ROOM_ATTEMPTS", "9")
    args = run_module.parse_args(["generate", "--loop-chance", "0.5", "--max-room", "3", "1", "3"])
    cfg = run_module.build_config(args)
    assert cfg.room_attempts == 9
    assert cfg.loop_chance == 0.5
    assert cfg.max_room_size == (3, 1, 3)
    assert cfg.seed is None


def test_server_main_invokes_start_server(monkeypatch, run_module):
    calls = {}

    def fake_start_server(host, port, debug):
        calls.update(host=host, port=port, debug=debug)

    monkeypatch.setenv("PORT", "5555")
    monkeypatch.setenv("HOST", "127.0.0.1")
    import labyrinth.server as server_mod

    monkeypatch.setattr(server_mod, "start_server", fake_start_server)
    assert run_module.main(["server"]) == 0
    assert calls == {"host": "127.0.0.1", "port": 5555, "debug": False}


def test_server_flags_override_env(monkeypatch, run_module):
    calls = {}
    import labyrinth.server as server_mod

    monkeypatch.setattr(server_mod, "start_server", lambda host, port, debug: calls.update(port=port, debug=debug))
    run_module.main(["server", "--port", "7001", "--debug"])
    assert calls == {"port": 7001, "debug": True}


def test_env_file_argument(monkeypatch, tmp_path, run_module, capsys):
    env_file = tmp_path / ".env"
    env_file.write_text("DUNGEON_SEED=77\n")
    monkeypatch.delenv("DUNGEON_SEED", raising=False)
    run_module.main(["--env-file", str(env_file), "generate", "--size", "8", "2", "8", "--attempts", "2", "--json"])
    monkeypatch.delenv("DUNGEON_SEED", raising=False)
    data = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert data["seed"] == 77


def test_bad_dungeon_env_exits_with_error(monkeypatch, run_module, capsys):
    monkeypatch.setenv("DUNGEON_MODE", "bogus")
    assert run_module.main(["generate", "--seed", "1"]) == 2
    err = capsys.readouterr().err
    assert "[ERROR]" in err and "mode must be one of" in err


def test_server_config_error_exits_with_error(monkeypatch, run_module, capsys):
    from labyrinth.dungeon import ConfigurationError
    import labyrinth.server as server_mod

    def failing_start_server(host, port, debug):
        raise ConfigurationError("grid_size must be positive", "grid_size")

    monkeypatch.setattr(server_mod, "start_server", failing_start_server)
    assert run_module.main(["server"]) == 2
    assert "grid_size must be positive" in capsys.readouterr().err
