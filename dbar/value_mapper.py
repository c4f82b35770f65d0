"""Pixel-to-value mapping for the slider bar."""
from __future__ import annotations

import math
from typing import Callable, Dict, Optional, Union

from dbar.slider_config import SliderConfig

Number = Union[int, float]


def round_half_away(value: float) -> int:
    """Round to the nearest integer, ties away from zero (2.5 -> 3, -2.5 -> -3)."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def clamp_fill(position: int, width: int) -> int:
    return max(0, min(int(position), width - 1))


def interpolate(x: int, *, start: float, end: float, width: int, floating: bool = False) -> Number:
    """Map pixel ``x`` in ``[0, width - 1]`` onto ``[start, end]``.

    Pixel 0 is a valid position, so the last pixel is ``width - 1``.
    """
    if width <= 1:
        raise ValueError("width must be greater than 1")
    span = abs(end - start)
    value = start + span * (x / (width - 1))
    if floating:
        return float(value)
    return round_half_away(value)


def format_value(value: Number) -> str:
    if isinstance(value, float):
        return repr(value)
    return str(value)


class ValueCache:
    """Memoises mapped values per fill position for one slider configuration."""

    def __init__(
        self,
        config: SliderConfig,
        *,
        compute: Optional[Callable[[int], Number]] = None,
    ) -> None:
        self._config = config
        self._compute = compute or self._interpolate
        self._values: Dict[int, Number] = {}
        self.stats: Dict[str, int] = {"calls": 0, "cache_hit": 0, "cache_miss": 0}

    def value_for(self, position: int) -> Number:
        self.stats["calls"] += 1
        cached = self._values.get(position)
        if cached is not None:
            self.stats["cache_hit"] += 1
            return cached
        self.stats["cache_miss"] += 1
        value = self._compute(position)
        self._values[position] = value
        return value

    def __contains__(self, position: object) -> bool:
        return position in self._values

    def __len__(self) -> int:
        return len(self._values)

    def _interpolate(self, position: int) -> Number:
        config = self._config
        return interpolate(
            position,
            start=config.start,
            end=config.end,
            width=config.width,
            floating=config.floating,
        )
