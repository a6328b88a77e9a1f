import os
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Mapping, Optional

from .cells import Size3D, as_triple
from .errors import ConfigurationError

MODES = ("3d", "2d")

# Environment variable -> config field. Values are parsed by from_mapping.
ENV_MAP = {
    "DUNGEON_GRID_SIZE": "grid_size",
    "DUNGEON_ROOM_ATTEMPTS": "room_attempts",
    "DUNGEON_MAX_ROOM_SIZE": "max_room_size",
    "DUNGEON_SEED": "seed",
    "DUNGEON_LOOP_CHANCE": "loop_chance",
    "DUNGEON_STAIR_COST": "stair_cost",
    "DUNGEON_MODE": "mode",
}


@dataclass(frozen=True)
class GenerationConfig:
    grid_size: Size3D = (30, 5, 30)
    room_attempts: int = 30
    max_room_size: Size3D = (6, 2, 6)
    seed: Optional[int] = None
    loop_chance: float = 0.125
    stair_cost: float = 100.0
    mode: str = "3d"

    def __post_init__(self):
        grid_size = self._triple(self.grid_size, "grid_size")
        max_room_size = self._triple(self.max_room_size, "max_room_size")
        if any(s < 1 for s in grid_size):
            raise ConfigurationError(f"grid_size must be positive, got {grid_size}", "grid_size")
        if any(s < 1 for s in max_room_size):
            raise ConfigurationError(f"max_room_size must be at least 1, got {max_room_size}", "max_room_size")
        mode = str(self.mode).lower()
        if mode not in MODES:
            raise ConfigurationError(f"mode must be one of {MODES}, got {self.mode!r}", "mode")
        if mode == "2d":
            # Flat layouts live on a single level
            grid_size = (grid_size[0], 1, grid_size[2])
            max_room_size = (max_room_size[0], 1, max_room_size[2])
        try:
            attempts = int(self.room_attempts)
            loop_chance = float(self.loop_chance)
            stair_cost = float(self.stair_cost)
        except (TypeError, ValueError):
            raise ConfigurationError("room_attempts, loop_chance and stair_cost must be numeric") from None
        if attempts < 0:
            raise ConfigurationError("room_attempts must not be negative", "room_attempts")
        if not 0.0 <= loop_chance <= 1.0:
            raise ConfigurationError("loop_chance must be within [0, 1]", "loop_chance")
        if stair_cost < 0:
            raise ConfigurationError("stair_cost must not be negative", "stair_cost")
        seed = self.seed
        if seed is not None:
            if isinstance(seed, bool):
                raise ConfigurationError("seed must be an integer", "seed")
            try:
                seed = int(seed)
            except (TypeError, ValueError):
                raise ConfigurationError("seed must be an integer", "seed") from None
        # frozen dataclass: normalised values go through object.__setattr__
        object.__setattr__(self, "grid_size", grid_size)
        object.__setattr__(self, "max_room_size", max_room_size)
        object.__setattr__(self, "mode", mode)
        object.__setattr__(self, "room_attempts", attempts)
        object.__setattr__(self, "loop_chance", loop_chance)
        object.__setattr__(self, "stair_cost", stair_cost)
        object.__setattr__(self, "seed", seed)

    @staticmethod
    def _triple(value, name: str) -> Size3D:
        try:
            return as_triple(value, name)
        except ValueError as e:
            raise ConfigurationError(str(e), name) from None

    @property
    def flat(self) -> bool:
        return self.mode == "2d"

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], base: Optional["GenerationConfig"] = None) -> "GenerationConfig":
        """Build a config from a loose mapping (JSON body, env values), over ``base``.

        Unknown keys are ignored. Empty strings and None leave the base value,
        except for ``seed`` where None explicitly means "random".
        """
        base = base or cls()
        known = {f.name for f in fields(cls)}
        changes = {}
        for key, value in (data or {}).items():
            if key not in known:
                continue
            if key == "seed":
                changes[key] = None if value in (None, "") else value
                continue
            if value is None or value == "":
                continue
            changes[key] = value
        return replace(base, **changes)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "GenerationConfig":
        env = os.environ if environ is None else environ
        data = {attr: env[key] for key, attr in ENV_MAP.items() if key in env}
        data.update(overrides)
        return cls.from_mapping(data)

    def with_seed(self, seed: Optional[int]) -> "GenerationConfig":
        return replace(self, seed=seed)

    def to_dict(self) -> dict:
        d = asdict(self)
        d["grid_size"] = list(self.grid_size)
        d["max_room_size"] = list(self.max_room_size)
        return d


__all__ = ["GenerationConfig", "ENV_MAP", "MODES"]
