"""Version metadata and dev-mode detection for dbar."""
from __future__ import annotations

import os
from typing import Optional

__version__ = "0.4.0"
DEV_MODE_ENV_VAR = "DBAR_DEV_MODE"


def is_dev_build(version: Optional[str] = None) -> bool:
    """Return True for -dev versions or when DBAR_DEV_MODE is switched on."""

    value = os.getenv(DEV_MODE_ENV_VAR)
    if value is not None:
        token = value.strip().lower()
        if token in {"1", "true", "yes", "on"}:
            return True
        if token in {"0", "false", "no", "off"}:
            return False
    candidate = version if version is not None else __version__
    return "dev" in candidate.lower()
