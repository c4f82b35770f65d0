"""Slider configuration: defaults, validation and settings-file loading."""

from __future__ import annotations

import json
import logging
import math
import os
import re
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from dbar.logging_utils import LOGGER_NAME

DEFAULT_START = 0.0
DEFAULT_END = 100.0
DEFAULT_WIDTH = 600
DEFAULT_HEIGHT = 50
DEFAULT_INITIAL_PERCENT = 0.5
DEFAULT_REFRESH_MS = 10
DEFAULT_BG_COLOR = "#333355"
DEFAULT_FG_COLOR = "#aaaaff"
DEFAULT_TITLE = "dbar"
VALUE_PLACEHOLDER = "%v"

_HEX_COLOR_RE = re.compile(r"^#[0-9a-fA-F]{6}$")
_LOGGER = logging.getLogger(LOGGER_NAME)


class ConfigError(ValueError):
    """Raised when slider options cannot produce a usable window."""


def parse_bool(name: str, value: Any) -> bool:
    """Accept real booleans or the usual on/off tokens; settings files may hold either."""

    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        token = value.strip().lower()
        if token in {"1", "true", "yes", "on"}:
            return True
        if token in {"0", "false", "no", "off"}:
            return False
    raise ConfigError(f"{name} must be true or false (got {value!r}).")


def parse_hex_color(value: str) -> Tuple[int, int, int]:
    """Parse ``#rrggbb`` into an RGB tuple."""

    if not isinstance(value, str) or not _HEX_COLOR_RE.match(value):
        raise ConfigError(f"Invalid colour '{value}'. Expected #rrggbb hex format.")
    return int(value[1:3], 16), int(value[3:5], 16), int(value[5:7], 16)


@dataclass(frozen=True)
class SliderConfig:
    start: float = DEFAULT_START
    end: float = DEFAULT_END
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    floating: bool = False
    initial_percent: float = DEFAULT_INITIAL_PERCENT
    capture_mouse: bool = True
    command: Optional[str] = None
    command_on_click: Optional[str] = None
    refresh_ms: int = DEFAULT_REFRESH_MS
    bg_color: str = DEFAULT_BG_COLOR
    fg_color: str = DEFAULT_FG_COLOR
    title: str = DEFAULT_TITLE
    show_value: bool = False
    continuous: bool = False

    @property
    def tracks_value(self) -> bool:
        """True when value changes have a visible effect beyond the bar itself."""
        return bool(self.command) or self.show_value or self.continuous

    @property
    def bg_rgb(self) -> Tuple[int, int, int]:
        return parse_hex_color(self.bg_color)

    @property
    def fg_rgb(self) -> Tuple[int, int, int]:
        return parse_hex_color(self.fg_color)

    def validate(self) -> "SliderConfig":
        if not (math.isfinite(self.start) and math.isfinite(self.end) and math.isfinite(self.end - self.start)):
            raise ConfigError(f"start ({self.start:g}) and end ({self.end:g}) must be finite with a finite span.")
        if not self.start < self.end:
            raise ConfigError(f"start ({self.start:g}) must be smaller than end ({self.end:g}).")
        if self.width <= 1:
            raise ConfigError(f"width must be greater than 1 (got {self.width}).")
        if self.height <= 0:
            raise ConfigError(f"height must be a positive integer (got {self.height}).")
        if not 0.0 <= self.initial_percent <= 1.0:
            raise ConfigError(f"initial percent must be within [0.0, 1.0] (got {self.initial_percent:g}).")
        if self.refresh_ms <= 0:
            raise ConfigError(f"refresh rate must be a positive number of milliseconds (got {self.refresh_ms}).")
        parse_hex_color(self.bg_color)
        parse_hex_color(self.fg_color)
        return self


CONFIG_FIELDS = tuple(item.name for item in fields(SliderConfig))


def default_settings_path() -> Path:
    env_override = os.environ.get("DBAR_SETTINGS")
    if env_override:
        return Path(env_override).expanduser()
    config_home = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return config_home / "dbar" / "settings.json"


def load_settings(path: Path) -> Dict[str, Any]:
    """Read user defaults from a JSON file, returning {} on any read/parse problem.

    Only keys naming a ``SliderConfig`` field are kept.
    """
    try:
        raw_text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except OSError as exc:
        _LOGGER.debug("Settings file %s unreadable: %s", path, exc)
        return {}
    try:
        data = json.loads(raw_text)
    except json.JSONDecodeError as exc:
        _LOGGER.debug("Settings file %s is not valid JSON: %s", path, exc)
        return {}
    if not isinstance(data, dict):
        _LOGGER.debug("Settings file %s ignored: expected an object, got %s", path, type(data).__name__)
        return {}
    return {key: value for key, value in data.items() if key in CONFIG_FIELDS}
