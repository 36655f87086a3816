from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .errors import ConfigError

ENV_PREFIX = "SEATMAP_"


@dataclass(frozen=True)
class EditorDefaults:
    """Defaults applied to sections created by draw, shape and import actions."""

    rows: int = 10
    seats_per_row: int = 15
    price: float = 0.0
    section_name: str = "New Section"
    shape_size: float = 50.0
    viewport_width: float = 1000.0
    viewport_height: float = 600.0
    log_level: str = "WARNING"

    def __post_init__(self):
        if self.rows <= 0 or self.seats_per_row <= 0:
            raise ConfigError(f"rows and seats_per_row must be positive (got {self.rows}x{self.seats_per_row})")
        if self.price < 0:
            raise ConfigError(f"price must be >= 0, got {self.price}")
        if self.shape_size <= 0:
            raise ConfigError(f"shape_size must be positive, got {self.shape_size}")
        if self.viewport_width <= 0 or self.viewport_height <= 0:
            raise ConfigError("viewport dimensions must be positive")


def _read(env: Mapping[str, str], key: str, cast, default):
    raw = env.get(ENV_PREFIX + key)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except ValueError as e:
        raise ConfigError(f"invalid {ENV_PREFIX}{key}={raw!r}: {e}") from e


def load_defaults(env: Optional[Mapping[str, str]] = None) -> EditorDefaults:
    env = os.environ if env is None else env
    base = EditorDefaults()
    return EditorDefaults(
        rows=_read(env, "DEFAULT_ROWS", int, base.rows),
        seats_per_row=_read(env, "DEFAULT_SEATS_PER_ROW", int, base.seats_per_row),
        price=_read(env, "DEFAULT_PRICE", float, base.price),
        section_name=_read(env, "SECTION_NAME", str, base.section_name),
        shape_size=_read(env, "SHAPE_SIZE", float, base.shape_size),
        viewport_width=_read(env, "VIEWPORT_WIDTH", float, base.viewport_width),
        viewport_height=_read(env, "VIEWPORT_HEIGHT", float, base.viewport_height),
        log_level=_read(env, "LOG_LEVEL", str, base.log_level).upper(),
    )
