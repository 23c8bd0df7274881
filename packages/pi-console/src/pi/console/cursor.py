"""Mutable row/column position shared between labels and their layout."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Cursor:
    """A viewport-relative position.

    Rows are counted from the top of the viewport and go negative once the
    position has scrolled above it.  ``col`` is the column just past the
    last character written at this position.

    Instances are handed around by reference: the layout that owns a label
    and the label itself both observe and update the same object.
    """

    row: int = 0
    col: int = 0

    @classmethod
    def at(cls, row: int, col: int = 0) -> Cursor:
        return cls(row=row, col=col)

    @classmethod
    def from_cursor(cls, other: Cursor) -> Cursor:
        """Return an independent copy of *other*."""
        return cls(row=other.row, col=other.col)

    def copy_from(self, other: Cursor) -> None:
        self.row = other.row
        self.col = other.col
