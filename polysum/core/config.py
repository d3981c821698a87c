from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from polysum.core.layout import GridJitterLayout, PlacementStrategy
from polysum.core.shapes import MIN_SIDES

logger = logging.getLogger(__name__)

CONFIG_ENV = "POLYSUM_CONFIG"


class ConfigError(ValueError):
    """Raised when the game configuration can never produce a playable round."""


@dataclass(frozen=True)
class GameConfig:
    min_value: int = 3
    max_value: int = 8
    min_goal: int = 6
    max_goal: int = 14
    shape_count: int = 8
    max_goal_retries: int = 200
    evaluate_delay_ms: int = 300
    match_delay_ms: int = 1000
    mismatch_delay_ms: int = 800
    hint_delay_ms: int = 2000
    arena_width: int = 800
    arena_height: int = 400
    shape_size: int = 35
    motion_enabled: bool = True
    base_speed: float = 48.0
    layout_columns: int = 4
    layout_jitter: float = 0.5

    @property
    def value_range(self) -> Tuple[int, int]:
        return (self.min_value, self.max_value)

    @property
    def reachable_sums(self) -> Tuple[int, int]:
        """Smallest and largest sum two in-range values can make."""
        return (2 * self.min_value, 2 * self.max_value)

    def validate(self) -> "GameConfig":
        """Check the configuration and return it unchanged; raise ConfigError otherwise."""
        if self.shape_count < 2:
            raise ConfigError(f"shape_count must be at least 2, got {self.shape_count}")
        if self.min_value < MIN_SIDES:
            raise ConfigError(f"values.min must be at least {MIN_SIDES} (a polygon side count), got {self.min_value}")
        if self.min_value > self.max_value:
            raise ConfigError(f"values.min ({self.min_value}) is greater than values.max ({self.max_value})")
        if self.min_goal > self.max_goal:
            raise ConfigError(f"goals.min ({self.min_goal}) is greater than goals.max ({self.max_goal})")
        low, high = self.reachable_sums
        if high < self.min_goal or low > self.max_goal:
            raise ConfigError(
                f"no goal in [{self.min_goal}, {self.max_goal}] can be made from two values "
                f"in [{self.min_value}, {self.max_value}] (reachable sums are [{low}, {high}])"
            )
        if self.max_goal_retries < 1:
            raise ConfigError(f"max_goal_retries must be at least 1, got {self.max_goal_retries}")
        for name in ("evaluate_delay_ms", "match_delay_ms", "mismatch_delay_ms", "hint_delay_ms"):
            if getattr(self, name) < 0:
                raise ConfigError(f"{name} must not be negative")
        if self.shape_size <= 0:
            raise ConfigError(f"shapes.size must be positive, got {self.shape_size}")
        if self.base_speed < 0:
            raise ConfigError(f"motion.base_speed must not be negative, got {self.base_speed}")
        if self.layout_columns < 1:
            raise ConfigError(f"layout.columns must be at least 1, got {self.layout_columns}")
        if not 0.0 <= self.layout_jitter <= 1.0:
            raise ConfigError(f"layout.jitter must be within [0, 1], got {self.layout_jitter}")
        min_w, min_h = self.make_layout().minimum_arena(self.shape_count)
        if self.arena_width < min_w or self.arena_height < min_h:
            raise ConfigError(
                f"arena {self.arena_width}x{self.arena_height} is too small for "
                f"{self.shape_count} shapes; need at least {min_w}x{min_h}"
            )
        return self

    def make_layout(self) -> PlacementStrategy:
        return GridJitterLayout(
            columns=self.layout_columns,
            shape_size=self.shape_size,
            jitter=self.layout_jitter,
        )

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "GameConfig":
        """Build a config from the nested YAML structure; missing keys keep their defaults."""
        if not isinstance(raw, dict):
            raise ConfigError("expected a mapping at the top level of the config")
        defaults = cls()
        values = _section(raw, "values")
        goals = _section(raw, "goals")
        delays = _section(raw, "delays_ms")
        arena = _section(raw, "arena")
        shapes = _section(raw, "shapes")
        motion = _section(raw, "motion")
        layout = _section(raw, "layout")
        try:
            return cls(
                min_value=int(values.get("min", defaults.min_value)),
                max_value=int(values.get("max", defaults.max_value)),
                min_goal=int(goals.get("min", defaults.min_goal)),
                max_goal=int(goals.get("max", defaults.max_goal)),
                shape_count=int(raw.get("shape_count", defaults.shape_count)),
                max_goal_retries=int(raw.get("max_goal_retries", defaults.max_goal_retries)),
                evaluate_delay_ms=int(delays.get("evaluate", defaults.evaluate_delay_ms)),
                match_delay_ms=int(delays.get("match", defaults.match_delay_ms)),
                mismatch_delay_ms=int(delays.get("mismatch", defaults.mismatch_delay_ms)),
                hint_delay_ms=int(delays.get("hint", defaults.hint_delay_ms)),
                arena_width=int(arena.get("width", defaults.arena_width)),
                arena_height=int(arena.get("height", defaults.arena_height)),
                shape_size=int(shapes.get("size", defaults.shape_size)),
                motion_enabled=bool(motion.get("enabled", defaults.motion_enabled)),
                base_speed=float(motion.get("base_speed", defaults.base_speed)),
                layout_columns=int(layout.get("columns", defaults.layout_columns)),
                layout_jitter=float(layout.get("jitter", defaults.layout_jitter)),
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"invalid config value: {e}") from e


def _section(raw: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = raw.get(key) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{key}' must be a mapping")
    return value


def default_config_path() -> Path:
    return Path(__file__).resolve().parent.parent / "data" / "config.yaml"


def load_config(path: Optional[Path] = None) -> GameConfig:
    """Load and validate the game configuration.

    Resolution order: explicit *path*, then ``$POLYSUM_CONFIG``, then the
    bundled ``data/config.yaml``.
    """
    if path is None:
        env_path = os.environ.get(CONFIG_ENV)
        path = Path(env_path) if env_path else default_config_path()
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"{path.name}: could not parse YAML: {e}") from e
    config = GameConfig.from_dict(raw or {}).validate()
    logger.info("Loaded config from %s", path)
    return config
