"""Engine configuration.

Every value is validated on construction and immutable afterwards. Loose
option mappings go through ``EngineConfig.from_options`` which only falls
back to a default when a key is absent, so an explicit ``0`` is kept (and
validated) rather than replaced.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Tuple

from mergegrid.constants import (
    GRID_ROWS,
    GRID_COLS,
    VALUE_MIN,
    VALUE_MAX,
    INCREMENT_POWER,
    HIT_BOX_SCALE,
    HISTORY_DEPTH,
)
from mergegrid.errors import ConfigurationError


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True, slots=True)
class GridSize:
    rows: int = GRID_ROWS
    cols: int = GRID_COLS

    def __post_init__(self) -> None:
        if not _is_int(self.rows) or self.rows <= 0:
            raise ConfigurationError(f"rows must be a positive integer, got {self.rows!r}")
        if not _is_int(self.cols) or self.cols <= 0:
            raise ConfigurationError(f"cols must be a positive integer, got {self.cols!r}")


@dataclass(frozen=True, slots=True)
class ValueRange:
    min: int = VALUE_MIN
    max: int = VALUE_MAX
    increment_power: int = INCREMENT_POWER

    def __post_init__(self) -> None:
        if not _is_int(self.min) or self.min <= 0:
            raise ConfigurationError(f"min must be a positive integer, got {self.min!r}")
        if not _is_int(self.max):
            raise ConfigurationError(f"max must be an integer, got {self.max!r}")
        if self.min > self.max:
            raise ConfigurationError(f"min ({self.min}) is greater than max ({self.max})")
        if not _is_int(self.increment_power) or self.increment_power <= 0:
            raise ConfigurationError(
                f"increment_power must be a positive integer, got {self.increment_power!r}"
            )

    def legal_values(self) -> list[int]:
        """Return ``min * p**k`` for every k that keeps the value within ``max``."""
        if self.increment_power == 1:
            return [self.min]
        values: list[int] = []
        value = self.min
        while value <= self.max:
            values.append(value)
            value *= self.increment_power
        return values


@dataclass(frozen=True, slots=True)
class EngineConfig:
    grid_size: GridSize = field(default_factory=GridSize)
    value_range: ValueRange = field(default_factory=ValueRange)
    hit_box_scale: float = HIT_BOX_SCALE
    history_depth: int = HISTORY_DEPTH
    selection_rules: Tuple[Any, ...] = ()
    merge_rules: Tuple[Any, ...] = ()

    def __post_init__(self) -> None:
        if isinstance(self.hit_box_scale, bool) or not isinstance(self.hit_box_scale, (int, float)):
            raise ConfigurationError(f"hit_box_scale must be a number, got {self.hit_box_scale!r}")
        if self.hit_box_scale < 0:
            raise ConfigurationError(f"hit_box_scale must not be negative, got {self.hit_box_scale}")
        if not _is_int(self.history_depth) or self.history_depth < 0:
            raise ConfigurationError(
                f"history_depth must be a non-negative integer, got {self.history_depth!r}"
            )
        # Accept any iterable of rules but store them as tuples.
        object.__setattr__(self, "selection_rules", tuple(self.selection_rules))
        object.__setattr__(self, "merge_rules", tuple(self.merge_rules))

    @classmethod
    def from_options(cls, options: Mapping[str, Any] | None = None) -> "EngineConfig":
        """Build a config from a loose options mapping.

        Recognised keys: ``grid_size`` (mapping or GridSize) or ``rows``/``cols``,
        ``value_range``/``range`` (mapping or ValueRange), ``hit_box_scale``,
        ``history_depth``, ``selection_rules``, ``merge_rules``.
        """
        options = dict(options or {})
        grid = options.get("grid_size")
        if isinstance(grid, GridSize):
            grid_size = grid
        else:
            grid_opts = dict(grid or {})
            for key in ("rows", "cols"):
                if key in options:
                    grid_opts[key] = options[key]
            grid_size = GridSize(
                rows=grid_opts["rows"] if "rows" in grid_opts else GRID_ROWS,
                cols=grid_opts["cols"] if "cols" in grid_opts else GRID_COLS,
            )
        value_opts = options.get("value_range", options.get("range"))
        if isinstance(value_opts, ValueRange):
            value_range = value_opts
        else:
            value_opts = dict(value_opts or {})
            value_range = ValueRange(
                min=value_opts["min"] if "min" in value_opts else VALUE_MIN,
                max=value_opts["max"] if "max" in value_opts else VALUE_MAX,
                increment_power=(
                    value_opts["increment_power"] if "increment_power" in value_opts else INCREMENT_POWER
                ),
            )
        return cls(
            grid_size=grid_size,
            value_range=value_range,
            hit_box_scale=options["hit_box_scale"] if "hit_box_scale" in options else HIT_BOX_SCALE,
            history_depth=options["history_depth"] if "history_depth" in options else HISTORY_DEPTH,
            selection_rules=tuple(options.get("selection_rules") or ()),
            merge_rules=tuple(options.get("merge_rules") or ()),
        )
