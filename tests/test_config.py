import pytest

from labyrinth.dungeon import ConfigurationError, GenerationConfig
from labyrinth.dungeon.cells import as_triple


def test_defaults():
    cfg = GenerationConfig()
    assert cfg.grid_size == (30, 5, 30)
    assert cfg.room_attempts == 30
    assert cfg.max_room_size == (6, 2, 6)
    assert cfg.seed is None
    assert cfg.loop_chance == 0.125
    assert cfg.stair_cost == 100.0
    assert cfg.mode == "3d" and not cfg.flat


@pytest.mark.parametrize(
    "kwargs,field",
    [
        ({"grid_size": (0, 5, 5)}, "grid_size"),
        ({"grid_size": (5, 5)}, "grid_size"),
        ({"max_room_size": (1, 0, 1)}, "max_room_size"),
        ({"room_attempts": -1}, "room_attempts"),
        ({"loop_chance": 1.5}, "loop_chance"),
        ({"stair_cost": -3}, "stair_cost"),
        ({"mode": "4d"}, "mode"),
        ({"seed": "abc"}, "seed"),
        ({"seed": True}, "seed"),
    ],
)
def test_invalid_values_name_the_field(kwargs, field):
    with pytest.raises(ConfigurationError) as exc:
        GenerationConfig(**kwargs)
    assert exc.value.field == field


def test_configuration_error_is_value_error():
    with pytest.raises(ValueError):
        GenerationConfig(grid_size=(1, 1, -1))


def test_flat_mode_forces_single_level():
    cfg = GenerationConfig(mode="2D", grid_size=(40, 6, 40), max_room_size=(5, 3, 5))
    assert cfg.mode == "2d" and cfg.flat
    assert cfg.grid_size == (40, 1, 40)
    assert cfg.max_room_size == (5, 1, 5)


def test_from_mapping_merges_over_base():
    base = GenerationConfig(room_attempts=12, seed=5)
    cfg = GenerationConfig.from_mapping({"grid_size": [10, 3, 10], "mode": "", "unknown": 1}, base=base)
    assert cfg.grid_size == (10, 3, 10)
    assert cfg.room_attempts == 12
    assert cfg.mode == "3d"
    assert cfg.seed == 5
    assert GenerationConfig.from_mapping({"seed": None}, base=base).seed is None


def test_from_env_reads_dungeon_variables():
    env = {
        "DUNGEON_GRID_SIZE": "10,3,10",
        "DUNGEON_ROOM_ATTEMPTS": "7",
        "DUNGEON_MAX_ROOM_SIZE": "3x1x3",
        "DUNGEON_SEED": "9",
        "DUNGEON_LOOP_CHANCE": "0.5",
        "DUNGEON_STAIR_COST": "20",
        "DUNGEON_MODE": "3d",
        "UNRELATED": "x",
    }
    cfg = GenerationConfig.from_env(env)
    assert cfg.grid_size == (10, 3, 10)
    assert cfg.room_attempts == 7
    assert cfg.max_room_size == (3, 1, 3)
    assert cfg.seed == 9
    assert cfg.loop_chance == 0.5
    assert cfg.stair_cost == 20.0


def test_from_env_overrides_win():
    cfg = GenerationConfig.from_env({"DUNGEON_ROOM_ATTEMPTS": "7"}, room_attempts=3)
    assert cfg.room_attempts == 3


def test_from_env_uses_process_environment(monkeypatch):
    monkeypatch.setenv("DUNGEON_MODE", "2d")
    assert GenerationConfig.from_env().flat


def test_with_seed_and_to_dict():
    cfg = GenerationConfig(grid_size=(8, 2, 8)).with_seed("12")
    assert cfg.seed == 12
    d = cfg.to_dict()
    assert d["grid_size"] == [8, 2, 8]
    assert d["seed"] == 12
    assert GenerationConfig.from_mapping(d) == cfg


def test_config_is_hashable():
    assert len({GenerationConfig(seed=1), GenerationConfig(seed=1), GenerationConfig(seed=2)}) == 2


@pytest.mark.parametrize("value", ["1,2,3", "1x2x3", (1, 2, 3), [1.0, 2, 3]])
def test_as_triple_accepts_common_forms(value):
    assert as_triple(value) == (1, 2, 3)


@pytest.mark.parametrize("value", ["1,2", 5, [1, 2.5, 3], [True, 1, 1]])
def test_as_triple_rejects_malformed(value):
    with pytest.raises(ValueError):
        as_triple(value)
