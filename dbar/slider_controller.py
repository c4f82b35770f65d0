"""Per-frame slider logic.

This module stays free of Qt types; the window injects an input source and a
renderer, and calls ``tick()`` once per refresh interval.
"""
from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from dbar.command_runner import CommandRunner
from dbar.input_events import InputEvent, InputEventKind, InputSource, SliderRenderer
from dbar.logging_utils import LOGGER_NAME
from dbar.slider_config import SliderConfig
from dbar.value_mapper import Number, ValueCache, clamp_fill, format_value

_LOGGER = logging.getLogger(LOGGER_NAME)

OutputFn = Callable[[str], None]


def _write_stdout(text: str) -> None:
    sys.stdout.write(text + "\n")
    sys.stdout.flush()


class SliderStatus(str, Enum):
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class SliderResult:
    status: SliderStatus
    value: Optional[Number] = None

    @property
    def confirmed(self) -> bool:
        return self.status is SliderStatus.CONFIRMED


class SliderController:
    """Turns queued input into fill updates, redraws and value side effects."""

    def __init__(
        self,
        config: SliderConfig,
        *,
        input_source: InputSource,
        renderer: SliderRenderer,
        command_runner: Optional[CommandRunner] = None,
        output_fn: Optional[OutputFn] = None,
        value_cache: Optional[ValueCache] = None,
    ) -> None:
        self._config = config
        self._input = input_source
        self._renderer = renderer
        self._runner = command_runner or CommandRunner()
        self._output = output_fn or _write_stdout
        self._cache = value_cache or ValueCache(config)
        self._fill = self._initial_fill()
        self._first_frame = True
        self._pending_delta = 0
        self._pending_position = 0
        self._last_emitted: Optional[Number] = None
        self._result: Optional[SliderResult] = None
        self.frames = 0
        self.redraws = 0

    @property
    def fill_position(self) -> int:
        return self._fill

    @property
    def current_value(self) -> Number:
        return self._cache.value_for(self._fill)

    @property
    def last_emitted(self) -> Optional[Number]:
        return self._last_emitted

    @property
    def result(self) -> Optional[SliderResult]:
        return self._result

    @property
    def finished(self) -> bool:
        return self._result is not None

    @property
    def cache(self) -> ValueCache:
        return self._cache

    def tick(self) -> Optional[SliderResult]:
        if self._result is not None:
            return self._result
        self.frames += 1
        for event in self._input.poll_events():
            self._handle_event(event)
            if self._result is not None:
                return self._result

        if self._needs_redraw():
            self._redraw()
        return None

    def cancel(self, reason: str = "cancel") -> SliderResult:
        if self._result is None:
            _LOGGER.debug("Slider cancelled (%s)", reason)
            self._result = SliderResult(SliderStatus.CANCELLED)
        return self._result

    def confirm(self, reason: str = "confirm") -> SliderResult:
        if self._result is None:
            value = self.current_value
            self._output(format_value(value))
            _LOGGER.info("Value confirmed via %s: %s", reason, format_value(value))
            self._result = SliderResult(SliderStatus.CONFIRMED, value)
        return self._result

    # Frame helpers -------------------------------------------------------

    def _handle_event(self, event: InputEvent) -> None:
        kind = event.kind
        if kind in (InputEventKind.QUIT, InputEventKind.ESCAPE):
            self.cancel(kind.value)
            return
        if kind is InputEventKind.LEFT_PRESS:
            click_command = self._config.command_on_click
            if click_command:
                self._runner.run(click_command, self.current_value)
                return
            self.confirm("click")
            return
        if kind is InputEventKind.RETURN:
            self.confirm("return")

    def _needs_redraw(self) -> bool:
        if self._first_frame:
            return True
        if self._config.capture_mouse:
            self._pending_delta = self._input.pointer_delta()
            return self._pending_delta != 0
        self._pending_position = self._input.pointer_position()
        return clamp_fill(self._pending_position, self._config.width) != self._fill

    def _redraw(self) -> None:
        config = self._config
        if self._first_frame:
            self._first_frame = False
            if config.capture_mouse:
                target = self._initial_fill()
            else:
                target = self._input.pointer_position()
        elif config.capture_mouse:
            target = self._fill + self._pending_delta
        else:
            target = self._pending_position
        self._fill = clamp_fill(target, config.width)
        value = self._cache.value_for(self._fill)
        self._renderer.draw(self._fill)
        self.redraws += 1

        if config.tracks_value and value != self._last_emitted:
            self._emit_value(value)

    def _emit_value(self, value: Number) -> None:
        config = self._config
        self._last_emitted = value
        text = format_value(value)
        if config.show_value:
            self._renderer.set_title(f"{config.title} - {text}")
        if config.continuous:
            self._output(text)
        if config.command:
            self._runner.run(config.command, value)

    def _initial_fill(self) -> int:
        config = self._config
        return clamp_fill(round(config.initial_percent * (config.width - 1)), config.width)
