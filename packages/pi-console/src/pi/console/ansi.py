"""Translate label drawing instructions into ANSI escape sequences.

Labels never emit escape codes themselves.  They describe what to draw as a
short list of instructions and hand it to an :class:`AnsiExecutor`, which
moves the physical cursor to the label's position, applies the instructions
and keeps track of where the cursor ended up.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Iterable, Union

from pi.console.cursor import Cursor
from pi.console.style import PLAIN, Style
from pi.console.utils import visible_width

if TYPE_CHECKING:
    from pi.console.terminal import Terminal

logger = logging.getLogger(__name__)

__all__ = [
    "AnsiExecutor",
    "EraseForward",
    "EraseLine",
    "Instruction",
    "ScrollListener",
    "WriteText",
]

# ---------------------------------------------------------------------------
# ANSI escape constants
# ---------------------------------------------------------------------------

_ERASE_FORWARD = "\x1b[0K"
_ERASE_LINE = "\x1b[2K"
_CURSOR_UP_FMT = "\x1b[{}A"
_CURSOR_DOWN_FMT = "\x1b[{}B"
_CURSOR_RIGHT_FMT = "\x1b[{}C"
_CURSOR_LEFT_FMT = "\x1b[{}D"

# ---------------------------------------------------------------------------
# Instructions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class WriteText:
    """Write *text* in *style* at the cursor, advancing the column."""

    text: str
    style: Style = PLAIN


@dataclass(frozen=True)
class EraseForward:
    """Erase from the cursor to the end of the line."""


@dataclass(frozen=True)
class EraseLine:
    """Erase the whole line the cursor is on."""


Instruction = Union[WriteText, EraseForward, EraseLine]

ScrollListener = Callable[[int], None]


# ---------------------------------------------------------------------------
# AnsiExecutor
# ---------------------------------------------------------------------------


class AnsiExecutor:
    """Applies instruction lists to a :class:`Terminal`.

    The executor assumes the physical cursor sits at row 0, column 0 of the
    viewport when it is created (or after :meth:`reset`) and from then on
    tracks every movement it causes.  Rows are counted from the top of the
    viewport; writing below the bottom row scrolls the terminal and informs
    the registered scroll listeners how many rows the content moved up.

    Parameters
    ----------
    terminal:
        Output back-end.
    styled:
        Whether to emit SGR style sequences.  Defaults to ``True`` unless
        the ``NO_COLOR`` environment variable is set.
    height:
        Viewport height in rows.  Defaults to ``terminal.rows``, re-read on
        every write.
    """

    def __init__(
        self,
        terminal: Terminal,
        *,
        styled: bool | None = None,
        height: int | None = None,
    ) -> None:
        self.terminal: Terminal = terminal
        self._styled: bool = (
            styled if styled is not None else "NO_COLOR" not in os.environ
        )
        self._height = height
        self._cursor = Cursor()
        self._scroll_listeners: list[ScrollListener] = []

    # -- properties ---------------------------------------------------------

    @property
    def height(self) -> int:
        return self._height if self._height is not None else self.terminal.rows

    @property
    def cursor(self) -> Cursor:
        """A copy of the tracked physical cursor position."""
        return Cursor.from_cursor(self._cursor)

    @property
    def styled(self) -> bool:
        return self._styled

    # -- listeners ----------------------------------------------------------

    def add_scroll_listener(self, listener: ScrollListener) -> None:
        self._scroll_listeners.append(listener)

    def remove_scroll_listener(self, listener: ScrollListener) -> None:
        try:
            self._scroll_listeners.remove(listener)
        except ValueError:
            pass

    # -- writing ------------------------------------------------------------

    def reset(self) -> None:
        """Forget the tracked cursor; the caller has homed the terminal."""
        self._cursor = Cursor()

    def write_at(self, position: Cursor, instructions: Iterable[Instruction]) -> None:
        """Move to *position* and apply *instructions* in order.

        ``position.col`` is advanced by the width of every written span so
        that it reflects the column state after the write.  All output for
        the call reaches the terminal in a single ``write``.  If that write
        raises, the tracked cursor, ``position`` and the scroll listeners
        are left untouched.
        """
        batch = list(instructions)
        out: list[str] = []
        cursor, overflow = self._position_cursor_at(position, batch, out)

        width = 0
        for instruction in batch:
            if isinstance(instruction, WriteText):
                self._append_text(instruction, out)
                width += visible_width(instruction.text)
            elif isinstance(instruction, EraseForward):
                out.append(_ERASE_FORWARD)
            elif isinstance(instruction, EraseLine):
                out.append(_ERASE_LINE)
            else:
                raise TypeError(f"Unknown instruction: {instruction!r}")

        if out:
            self.terminal.write("".join(out))

        cursor.col += width
        self._cursor = cursor
        position.col += width

        if overflow:
            logger.debug("Scrolled terminal by %d rows", overflow)
            for listener in list(self._scroll_listeners):
                listener(overflow)

    # -- private ------------------------------------------------------------

    def _append_text(self, instruction: WriteText, out: list[str]) -> None:
        if self._styled and not instruction.style.is_plain:
            out.append(instruction.style.sgr())
            out.append(instruction.text)
            out.append(instruction.style.reset())
        else:
            out.append(instruction.text)

    def _position_cursor_at(
        self,
        position: Cursor,
        batch: list[Instruction],
        out: list[str],
    ) -> tuple[Cursor, int]:
        """Append the moves reaching *position*; return the new cursor and overflow."""
        cursor = Cursor.from_cursor(self._cursor)
        bottom = self.height - 1
        overflow = max(position.row - bottom, 0)
        if overflow:
            cursor = self._move_to(cursor, bottom, 0, out)
            out.append("\n" * overflow)

        # Whole-line erases work from any column.
        if batch and all(isinstance(instruction, EraseLine) for instruction in batch):
            col = cursor.col
        else:
            col = position.col

        return self._move_to(cursor, min(position.row, bottom), col, out), overflow

    @staticmethod
    def _move_to(current: Cursor, row: int, col: int, out: list[str]) -> Cursor:
        if current.row == row:
            if current.col < col:
                out.append(_CURSOR_RIGHT_FMT.format(col - current.col))
            elif current.col > col:
                if col == 0:
                    out.append("\r")
                else:
                    out.append(_CURSOR_LEFT_FMT.format(current.col - col))
        elif current.col == col:
            if row > current.row:
                out.append(_CURSOR_DOWN_FMT.format(row - current.row))
            else:
                out.append(_CURSOR_UP_FMT.format(current.row - row))
        else:
            if current.col > 0:
                out.append("\r")
            if row > current.row:
                out.append(_CURSOR_DOWN_FMT.format(row - current.row))
            else:
                out.append(_CURSOR_UP_FMT.format(current.row - row))
            if col > 0:
                out.append(_CURSOR_RIGHT_FMT.format(col))

        return Cursor.at(row, col)
