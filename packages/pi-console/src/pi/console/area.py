"""A block of labels rendered together.

``LabelArea`` owns an :class:`~pi.console.ansi.AnsiExecutor` and the labels
drawn through it.  It forwards viewport movements to every label and runs
one redraw pass over all of them per frame.  When a write lands below the
bottom of the viewport the executor scrolls the terminal and the area shifts
every label accordingly.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pi.console.ansi import AnsiExecutor
from pi.console.cursor import Cursor
from pi.console.label import LabelText, TerminalLabel

if TYPE_CHECKING:
    from pi.console.terminal import Terminal

logger = logging.getLogger(__name__)

__all__ = ["LabelArea"]


class LabelArea:
    """Drives a set of :class:`TerminalLabel` instances on one terminal.

    Labels are created through :meth:`add_label`; by default each new label
    is placed on the row below the previous one.
    """

    def __init__(
        self,
        terminal: Terminal,
        executor: AnsiExecutor | None = None,
    ) -> None:
        self.terminal: Terminal = terminal
        self.executor: AnsiExecutor = executor or AnsiExecutor(terminal)
        self.executor.add_scroll_listener(self.scroll_by)

        self._labels: list[TerminalLabel] = []
        self._started: bool = False

    # -- lifecycle ----------------------------------------------------------

    def start(self) -> None:
        """Clear the screen and hide the cursor before the first frame."""
        self.terminal.clear_screen()
        self.terminal.hide_cursor()
        self.executor.reset()
        self._started = True

    def stop(self) -> None:
        """Restore the cursor below the last label row."""
        if not self._started:
            return
        rows = [label.write_position.row for label in self._labels]
        if rows:
            self.executor.write_at(Cursor.at(max(max(rows) + 1, 0)), [])
        self.terminal.show_cursor()
        self._started = False

    # -- labels -------------------------------------------------------------

    @property
    def labels(self) -> list[TerminalLabel]:
        return list(self._labels)

    def add_label(
        self,
        row: int | None = None,
        text: LabelText | None = None,
    ) -> TerminalLabel:
        """Create a label at *row* (default: below the last label)."""
        if row is None:
            row = self._labels[-1].write_position.row + 1 if self._labels else 0
        label = TerminalLabel(self.executor, Cursor.at(row))
        if text is not None:
            label.set_text(text)
        self._labels.append(label)
        return label

    def remove_label(self, label: TerminalLabel) -> None:
        """Stop managing *label* (no-op if absent).  Its line is left as is."""
        try:
            self._labels.remove(label)
        except ValueError:
            pass

    def find_overlapping(self, cursor: Cursor) -> list[TerminalLabel]:
        """Return the labels whose text extends past *cursor*."""
        return [label for label in self._labels if label.is_overlapping(cursor)]

    def set_visible(self, visible: bool) -> None:
        for label in self._labels:
            label.set_visible(visible)

    # -- rendering ----------------------------------------------------------

    def redraw(self) -> None:
        """Run one redraw pass over every label, top to bottom."""
        for label in sorted(self._labels, key=lambda lbl: lbl.write_position.row):
            label.redraw()

    # -- positioning --------------------------------------------------------

    def new_line_adjustment(self) -> None:
        for label in self._labels:
            label.new_line_adjustment()

    def scroll_by(self, rows: int) -> None:
        logger.debug("Scrolling %d labels by %d rows", len(self._labels), rows)
        for label in self._labels:
            label.scroll_by(rows)

    def scroll_up_by(self, rows: int) -> None:
        self.scroll_by(-rows)

    def scroll_down_by(self, rows: int) -> None:
        self.scroll_by(rows)
