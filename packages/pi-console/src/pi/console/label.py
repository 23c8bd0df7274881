"""Single-line labels that redraw themselves with minimal terminal output.

A label keeps two row counters.  ``write_position.row`` is relative to the
visible viewport and is shared with the layout that places the label; it
goes negative once the label has scrolled off the top.  The absolute row
only moves when the viewport scrolls and is never reset, so comparing it
with the absolute row of the last write tells whether the physical line
under the label is still the one that was drawn on.

Nothing here reads the screen back.  ``redraw`` decides what to emit purely
from the desired state and the snapshot of the last write.

Labels are not thread-safe: one render loop is expected to mutate and
redraw them.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol, Sequence, Union

from pi.console.ansi import EraseForward, EraseLine, Instruction, WriteText
from pi.console.style import Span
from pi.console.utils import visible_width

if TYPE_CHECKING:
    from pi.console.ansi import AnsiExecutor
    from pi.console.cursor import Cursor

logger = logging.getLogger(__name__)

__all__ = ["LabelText", "RedrawableLabel", "TerminalLabel"]

LabelText = Union[str, Span, Sequence[Span]]


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------


class RedrawableLabel(Protocol):
    """A single line of styled text that can be redrawn in place."""

    def set_text(self, text: LabelText) -> None: ...

    def set_content(self, spans: Sequence[Span]) -> None: ...

    def set_visible(self, visible: bool) -> None: ...

    def redraw(self) -> None: ...


# ---------------------------------------------------------------------------
# TerminalLabel
# ---------------------------------------------------------------------------


class TerminalLabel:
    """Label drawn through an :class:`~pi.console.ansi.AnsiExecutor`.

    Parameters
    ----------
    executor:
        Applies the instruction lists produced by :meth:`redraw`.
    write_position:
        Viewport-relative position of the label.  The object is shared, not
        copied: the owner may move it between frames and ``redraw`` always
        reads its current value.
    """

    def __init__(self, executor: AnsiExecutor, write_position: Cursor) -> None:
        self._executor = executor
        self._write_pos = write_position

        self._spans: tuple[Span, ...] = ()
        self._written_spans: tuple[Span, ...] = ()

        self._absolute_row: int = 0
        self._previous_write_row: int = self._absolute_row

        self._is_visible: bool = True
        self._was_visible: bool = self._is_visible

    # -- properties ---------------------------------------------------------

    @property
    def write_position(self) -> Cursor:
        return self._write_pos

    @property
    def spans(self) -> tuple[Span, ...]:
        """The desired content."""
        return self._spans

    @property
    def absolute_row(self) -> int:
        return self._absolute_row

    @property
    def is_visible(self) -> bool:
        return self._is_visible

    @property
    def is_dirty(self) -> bool:
        """``True`` if the next :meth:`redraw` would write something."""
        if self._write_pos.row < 0:
            return False
        unchanged_row = self._previous_write_row == self._absolute_row
        if not self._is_visible:
            return self._was_visible and not (unchanged_row and not self._written_spans)
        return not (unchanged_row and self._written_spans == self._spans)

    # -- content ------------------------------------------------------------

    def set_content(self, spans: Sequence[Span]) -> None:
        """Replace the desired content.  An empty sequence clears the label."""
        self._spans = tuple(spans)

    def set_text(self, text: LabelText) -> None:
        """Set the content from a plain string, a span or a sequence of spans."""
        if isinstance(text, str):
            self.set_content((Span(text),))
        elif isinstance(text, Span):
            self.set_content((text,))
        else:
            self.set_content(text)

    def set_visible(self, visible: bool) -> None:
        self._is_visible = visible

    def is_overlapping(self, cursor: Cursor) -> bool:
        """Return ``True`` if this label's text extends past *cursor* on its row."""
        return cursor.row == self._write_pos.row and self._write_pos.col > cursor.col

    # -- rendering ----------------------------------------------------------

    def redraw(self) -> None:
        """Bring the terminal line in sync with the desired state.

        Does nothing while the label is above the viewport.  Otherwise at
        most one instruction list is handed to the executor: an erase of the
        whole line when the label has just been hidden, or a rewrite of the
        content when it is visible and its content or line changed.
        """
        if self._write_pos.row < 0:
            return

        unchanged_row = self._previous_write_row == self._absolute_row

        if not self._is_visible and self._was_visible:
            if unchanged_row and not self._written_spans:
                logger.debug("Label at %s hidden before it was drawn", self._write_pos)
            else:
                self._executor.write_at(self._write_pos, [EraseLine()])
                self._written_spans = ()

        if self._is_visible and not (unchanged_row and self._written_spans == self._spans):
            self._rewrite(unchanged_row)

        self._was_visible = self._is_visible

    def _rewrite(self, unchanged_row: bool) -> None:
        written_length = self._write_pos.col
        self._write_pos.col = 0

        instructions: list[Instruction] = []
        text_length = 0
        for span in self._spans:
            instructions.append(WriteText(span.text, span.style))
            text_length += visible_width(span.text)

        # Stale characters remain past the new text on a line we drew on
        # before, or anything at all on a line we have never drawn on.
        if not unchanged_row or text_length < written_length:
            instructions.append(EraseForward())

        logger.debug(
            "Redrawing label at %s (%d -> %d columns)",
            self._write_pos,
            written_length,
            text_length,
        )
        try:
            self._executor.write_at(self._write_pos, instructions)
        except Exception:
            # The line still holds the previous text.
            self._write_pos.col = written_length
            raise

        self._written_spans = self._spans
        self._previous_write_row = self._absolute_row

    # -- positioning --------------------------------------------------------

    def new_line_adjustment(self) -> None:
        """A line was inserted above the label without scrolling the viewport."""
        self._write_pos.row += 1

    def scroll_by(self, rows: int) -> None:
        """The viewport moved up by *rows* (down when negative)."""
        self._write_pos.row -= rows
        self._absolute_row += rows

    def scroll_up_by(self, rows: int) -> None:
        self.scroll_by(-rows)

    def scroll_down_by(self, rows: int) -> None:
        self.scroll_by(rows)

    def __repr__(self) -> str:
        text = "".join(span.text for span in self._spans)
        return (
            f"TerminalLabel(text={text!r}, row={self._write_pos.row}, "
            f"absolute_row={self._absolute_row}, visible={self._is_visible})"
        )
