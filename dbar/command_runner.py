"""Fire-and-forget shell command dispatch for slider values."""
from __future__ import annotations

import logging
import subprocess
import sys
from typing import Callable, List, Optional

from dbar.logging_utils import LOGGER_NAME
from dbar.slider_config import VALUE_PLACEHOLDER
from dbar.value_mapper import Number, format_value

_LOGGER = logging.getLogger(LOGGER_NAME)

PopenFn = Callable[..., "subprocess.Popen[bytes]"]


def substitute_value(template: str, value: Number) -> str:
    return template.replace(VALUE_PLACEHOLDER, format_value(value))


def build_shell_command(command: str, *, platform: Optional[str] = None) -> List[str]:
    target = platform if platform is not None else sys.platform
    if target.startswith("win"):
        return ["cmd", "/C", command]
    return ["sh", "-c", command]


class CommandRunner:
    """Substitutes the value into a template and spawns it without waiting.

    Spawn failures are logged and swallowed so the slider stays interactive.
    """

    def __init__(self, *, popen: Optional[PopenFn] = None, platform: Optional[str] = None) -> None:
        self._popen = popen or subprocess.Popen
        self._platform = platform
        self.spawned = 0
        self.failures = 0

    def run(self, template: str, value: Number) -> Optional["subprocess.Popen[bytes]"]:
        command = substitute_value(template, value)
        argv = build_shell_command(command, platform=self._platform)
        _LOGGER.debug("Running command: %s", command)
        try:
            proc = self._popen(
                argv,
                stdin=subprocess.DEVNULL,
                creationflags=getattr(subprocess, "CREATE_NO_WINDOW", 0),
            )
        except OSError as exc:
            self.failures += 1
            _LOGGER.warning("Failed to run command %r: %s", command, exc)
            return None
        self.spawned += 1
        _LOGGER.debug("Command started (pid=%s)", getattr(proc, "pid", "?"))
        return proc
