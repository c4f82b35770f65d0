"""PyQt6 window hosting the slider bar."""
from __future__ import annotations

import logging
from collections import deque
from typing import Callable, Deque, List, Optional

from PyQt6.QtCore import QPoint, Qt, QTimer
from PyQt6.QtGui import QColor, QCursor, QGuiApplication, QPainter
from PyQt6.QtWidgets import QWidget

from dbar.command_runner import CommandRunner
from dbar.input_events import InputEvent, InputEventKind
from dbar.logging_utils import LOGGER_NAME
from dbar.slider_config import SliderConfig
from dbar.slider_controller import OutputFn, SliderController

_LOGGER = logging.getLogger(LOGGER_NAME)

CursorPosFn = Callable[[], QPoint]
SetCursorPosFn = Callable[[QPoint], None]

# key() returns a plain int
_ESCAPE_KEYS = frozenset({Qt.Key.Key_Escape.value})
_CONFIRM_KEYS = frozenset({Qt.Key.Key_Return.value, Qt.Key.Key_Enter.value})


class QtInputSource:
    """Queues widget input and samples the global cursor once per frame.

    In captured mode the cursor is warped back to an anchor point after each
    sample so deltas keep arriving at the screen edges.
    """

    def __init__(
        self,
        widget: Optional[QWidget] = None,
        *,
        cursor_pos_fn: Optional[CursorPosFn] = None,
        set_cursor_pos_fn: Optional[SetCursorPosFn] = None,
    ) -> None:
        self._widget = widget
        self._cursor_pos = cursor_pos_fn or QCursor.pos
        self._set_cursor_pos = set_cursor_pos_fn or QCursor.setPos
        self._events: Deque[InputEvent] = deque()
        self._anchor: Optional[QPoint] = None

    def bind_widget(self, widget: QWidget) -> None:
        self._widget = widget

    def push(self, event: InputEvent) -> None:
        self._events.append(event)

    def poll_events(self) -> List[InputEvent]:
        drained = list(self._events)
        self._events.clear()
        return drained

    def set_anchor(self, point: Optional[QPoint]) -> None:
        self._anchor = point
        if point is not None:
            self._set_cursor_pos(point)

    def pointer_delta(self) -> int:
        anchor = self._anchor
        pos = self._cursor_pos()
        if anchor is None:
            self._anchor = pos
            return 0
        delta = pos.x() - anchor.x()
        if delta:
            self._set_cursor_pos(anchor)
            if self._cursor_pos() != anchor:
                # Warping is unavailable (e.g. Wayland); track from where the cursor is.
                self._anchor = pos
        return delta

    def pointer_position(self) -> int:
        pos = self._cursor_pos()
        if self._widget is None:
            return pos.x()
        return self._widget.mapFromGlobal(pos).x()


class SliderWindow(QWidget):
    """Paints the bar and drives the controller from a refresh timer."""

    def __init__(
        self,
        config: SliderConfig,
        *,
        command_runner: Optional[CommandRunner] = None,
        output_fn: Optional[OutputFn] = None,
        input_source: Optional[QtInputSource] = None,
    ) -> None:
        super().__init__()
        self._config = config
        self._bg_color = QColor(*config.bg_rgb)
        self._fg_color = QColor(*config.fg_rgb)
        self._fill = 0
        self._captured = False
        self.setWindowTitle(config.title)
        self.setFixedSize(config.width, config.height)
        self.setMouseTracking(True)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setAttribute(Qt.WidgetAttribute.WA_OpaquePaintEvent, True)

        if input_source is None:
            input_source = QtInputSource()
        input_source.bind_widget(self)
        self._input = input_source
        self._controller = SliderController(
            config,
            input_source=self._input,
            renderer=self,
            command_runner=command_runner,
            output_fn=output_fn,
        )
        self._frame_timer = QTimer(self)
        self._frame_timer.setInterval(config.refresh_ms)
        self._frame_timer.timeout.connect(self._run_frame)

    @property
    def controller(self) -> SliderController:
        return self._controller

    @property
    def input_source(self) -> QtInputSource:
        return self._input

    @property
    def fill_position(self) -> int:
        return self._fill

    # SliderRenderer ------------------------------------------------------

    def draw(self, fill_position: int) -> None:
        self._fill = fill_position
        self.update()

    def set_title(self, title: str) -> None:
        self.setWindowTitle(title)

    # Lifecycle -----------------------------------------------------------

    def present(self) -> None:
        """Centre on the primary screen, show, and start the frame timer."""
        screen = QGuiApplication.primaryScreen()
        if screen is not None:
            available = screen.availableGeometry()
            frame = self.frameGeometry()
            frame.moveCenter(available.center())
            self.move(frame.topLeft())
        self.show()
        self.raise_()
        self.activateWindow()
        if self._config.capture_mouse:
            QTimer.singleShot(0, self._capture_pointer)
        self._frame_timer.start()
        _LOGGER.debug(
            "Slider window shown: size=%dx%d capture=%s refresh=%dms",
            self._config.width,
            self._config.height,
            self._config.capture_mouse,
            self._config.refresh_ms,
        )

    def _run_frame(self) -> None:
        if self._controller.tick() is not None:
            self._finish()

    def _finish(self) -> None:
        self._frame_timer.stop()
        self._release_pointer()
        self.close()

    def _capture_pointer(self) -> None:
        if self._captured or self._controller.finished:
            return
        self.grabMouse()
        self.grabKeyboard()
        self.setCursor(Qt.CursorShape.BlankCursor)
        self._input.set_anchor(self.mapToGlobal(self.rect().center()))
        self._captured = True

    def _release_pointer(self) -> None:
        if not self._captured:
            return
        self.releaseKeyboard()
        self.releaseMouse()
        self.unsetCursor()
        self._input.set_anchor(None)
        self._captured = False

    # Qt events -----------------------------------------------------------

    def paintEvent(self, event) -> None:  # type: ignore[override]
        painter = QPainter(self)
        painter.fillRect(self.rect(), self._bg_color)
        # The bar covers the pixel under the pointer.
        painter.fillRect(0, 0, self._fill + 1, self.height(), self._fg_color)
        painter.end()

    def mousePressEvent(self, event) -> None:  # type: ignore[override]
        if event.button() == Qt.MouseButton.LeftButton:
            self._input.push(InputEvent(InputEventKind.LEFT_PRESS))
            event.accept()
            return
        super().mousePressEvent(event)

    def keyPressEvent(self, event) -> None:  # type: ignore[override]
        key = event.key()
        if key in _ESCAPE_KEYS:
            self._input.push(InputEvent(InputEventKind.ESCAPE))
            event.accept()
            return
        if key in _CONFIRM_KEYS:
            self._input.push(InputEvent(InputEventKind.RETURN))
            event.accept()
            return
        super().keyPressEvent(event)

    def closeEvent(self, event) -> None:  # type: ignore[override]
        if not self._controller.finished:
            self._input.push(InputEvent(InputEventKind.QUIT))
            self._controller.tick()
        self._frame_timer.stop()
        self._release_pointer()
        super().closeEvent(event)
