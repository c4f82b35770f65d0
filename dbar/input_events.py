"""Input and rendering seams between the slider controller and the window toolkit."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol, Sequence


class InputEventKind(str, Enum):
    QUIT = "quit"
    ESCAPE = "escape"
    RETURN = "return"
    LEFT_PRESS = "left_press"


@dataclass(frozen=True)
class InputEvent:
    kind: InputEventKind


class InputSource(Protocol):
    """Queued input plus the pointer state sampled once per frame."""

    def poll_events(self) -> Sequence[InputEvent]:
        ...

    def pointer_delta(self) -> int:
        """Horizontal movement since the previous call (captured mode)."""
        ...

    def pointer_position(self) -> int:
        """Pointer x relative to the slider's left edge (uncaptured mode)."""
        ...


class SliderRenderer(Protocol):
    def draw(self, fill_position: int) -> None:
        ...

    def set_title(self, title: str) -> None:
        ...
