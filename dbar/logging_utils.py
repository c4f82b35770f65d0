from __future__ import annotations

import logging
import os
import tempfile
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Tuple

LOGGER_NAME = "DBar.Slider"
LOG_FILE_NAME = "dbar.log"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
MAX_LOG_BYTES = 512 * 1024
LOG_RETENTION_MIN = 1
LOG_RETENTION_MAX = 20
_TRUTHY = {"1", "true", "yes", "on"}


def resolve_logs_dir(log_dir_name: str = "dbar") -> Path:
    """
    Resolve the directory to store slider logs.

    Strategy:
    - Use DBAR_LOG_DIR if set.
    - Fall back to XDG state/cache locations, then `cwd/logs/<log_dir_name>`.
    - Final fallback: tempdir/<log_dir_name>.
    """
    candidates = []

    env_override = os.environ.get("DBAR_LOG_DIR")
    if env_override:
        candidates.append(Path(env_override).expanduser())

    state_home = Path(os.environ.get("XDG_STATE_HOME", Path.home() / ".local" / "state"))
    cache_home = Path(os.environ.get("XDG_CACHE_HOME", Path.home() / ".cache"))
    candidates.append(state_home / log_dir_name / "logs")
    candidates.append(cache_home / log_dir_name / "logs")
    candidates.append(Path.cwd() / "logs" / log_dir_name)

    for target in candidates:
        try:
            target.mkdir(parents=True, exist_ok=True)
            return target
        except OSError:
            continue

    temp_fallback = Path(tempfile.gettempdir()) / log_dir_name
    temp_fallback.mkdir(parents=True, exist_ok=True)
    return temp_fallback


def build_rotating_file_handler(
    log_dir: Path,
    filename: str,
    *,
    retention: int = 3,
    max_bytes: int = MAX_LOG_BYTES,
    formatter: Optional[logging.Formatter] = None,
) -> logging.Handler:
    """Construct a rotating file handler with sane defaults."""
    retention = max(LOG_RETENTION_MIN, min(retention, LOG_RETENTION_MAX))
    backup_count = max(0, retention - 1)
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_dir / filename,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    if formatter is not None:
        handler.setFormatter(formatter)
    return handler


def resolve_log_level(debug_enabled: bool) -> int:
    return logging.DEBUG if debug_enabled else logging.INFO


def resolve_log_level_hint() -> Tuple[Optional[int], Optional[str]]:
    """Read DBAR_LOG_LEVEL as either a numeric level or a level name."""

    raw = os.environ.get("DBAR_LOG_LEVEL")
    if raw is None or not raw.strip():
        return None, None
    token = raw.strip()
    try:
        value = int(token)
    except ValueError:
        resolved = logging.getLevelName(token.upper())
        if isinstance(resolved, int):
            return resolved, token.upper()
        return None, None
    return value, logging.getLevelName(value)


def propagation_requested() -> bool:
    return os.environ.get("DBAR_PROPAGATE_LOGS", "").strip().lower() in _TRUTHY


def configure_logging(
    logger: logging.Logger,
    *,
    debug_enabled: bool,
    retention: int = 3,
    log_dir: Optional[Path] = None,
) -> logging.Handler:
    """Attach the slider's file handler to ``logger`` and set its level.

    Falls back to a stderr stream handler when the log file cannot be opened;
    stdout is left alone because selected values are written there.
    """
    level = resolve_log_level(debug_enabled)
    hint_value, hint_name = resolve_log_level_hint()
    if hint_value is not None:
        level = hint_value
    logger.setLevel(level)
    logger.propagate = propagation_requested()

    formatter = logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT)
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
        existing.close()
    try:
        target_dir = log_dir if log_dir is not None else resolve_logs_dir()
        handler = build_rotating_file_handler(target_dir, LOG_FILE_NAME, retention=retention, formatter=formatter)
    except OSError as exc:
        handler = logging.StreamHandler()
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.warning("Failed to initialise file logging: %s", exc)
        return handler

    logger.addHandler(handler)
    logger.debug(
        "Logging initialised: path=%s level=%s retention=%d%s",
        getattr(handler, "baseFilename", "?"),
        logging.getLevelName(level),
        retention,
        f" (DBAR_LOG_LEVEL={hint_name})" if hint_name else "",
    )
    return handler
