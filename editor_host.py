"""
editor_host.py

Defines the narrow interface the C++ workflow uses to talk to an editor.
The scaffolder, runner and setup code only ever call the methods below, so
the Tkinter editor (``tk_host.TkHost``) and the fake host used by the tests
are interchangeable.
"""
from __future__ import annotations

import enum
import math
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple


class LogLevel(enum.IntEnum):
    """Notification severities (mirrors the stdlib logging numbers)."""

    DEBUG = 10
    INFO = 20
    WARN = 30
    ERROR = 40


@dataclass(frozen=True)
class FloatGeometry:
    """Position and size of a floating surface, in host units."""

    row: int
    col: int
    width: int
    height: int


def centered_float(lines: int, columns: int, ratio: float = 0.8) -> FloatGeometry:
    """Return a geometry covering *ratio* of the display, centred.

    With the default ratio this yields a 10% margin on every side.
    """
    if not 0 < ratio <= 1:
        raise ValueError(f"ratio must be in (0, 1], got {ratio!r}")
    margin = round((1 - ratio) / 2, 6)
    return FloatGeometry(
        row=math.floor(lines * margin),
        col=math.floor(columns * margin),
        width=math.floor(columns * ratio),
        height=math.floor(lines * ratio),
    )


class EditorHost:
    """Capability set the workflow depends on.

    Subclasses MUST override every method; the base implementation raises
    ``NotImplementedError`` so a missing capability fails loudly.
    """

    # ── Buffers / windows ────────────────────────────────────────────
    def edit(self, path: str) -> bool:
        """Open *path* in the current pane.

        Returns ``False`` when the user chose to keep the current buffer.
        """
        raise NotImplementedError

    def vsplit(self, path: str) -> None:
        """Open *path* in a new pane to the right and focus it."""
        raise NotImplementedError

    def split(self, path: str) -> None:
        """Open *path* in a new pane below the current one and focus it."""
        raise NotImplementedError

    def focus_left(self) -> None:
        """Move focus to the pane on the left."""
        raise NotImplementedError

    def current_file(self) -> Optional[str]:
        """Absolute path of the focused buffer, ``None`` if unnamed."""
        raise NotImplementedError

    def save_current(self) -> None:
        """Write the focused buffer to disk."""
        raise NotImplementedError

    # ── User interaction ─────────────────────────────────────────────
    def notify(self, message: str, level: LogLevel = LogLevel.INFO) -> None:
        raise NotImplementedError

    def prompt(self, question: str) -> Optional[str]:
        """Ask for a single line of input; ``None`` when cancelled."""
        raise NotImplementedError

    def set_keymap(self, lhs: str, callback: Callable[[], Any], desc: str = "") -> None:
        raise NotImplementedError

    # ── Terminal ─────────────────────────────────────────────────────
    def screen_size(self) -> Tuple[int, int]:
        """Return ``(lines, columns)`` of the current display."""
        raise NotImplementedError

    def open_float_terminal(
        self,
        command: str,
        geometry: FloatGeometry,
        title: str = "",
        cwd: Optional[str] = None,
    ) -> Any:
        """Run *command* in a fresh floating terminal and return its handle.

        The surface is dismissed by the host once the process has exited.
        """
        raise NotImplementedError
