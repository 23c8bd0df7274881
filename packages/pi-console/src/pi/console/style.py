"""Styled text values: colours, styles and spans."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

_SGR_RESET = "\x1b[0m"


class Color(Enum):
    """Foreground colours, valued by their SGR parameter."""

    DEFAULT = 39
    BLACK = 30
    RED = 31
    GREEN = 32
    YELLOW = 33
    BLUE = 34
    MAGENTA = 35
    CYAN = 36
    WHITE = 37
    GREY = 90


@dataclass(frozen=True)
class Style:
    """Text attributes applied to a span."""

    color: Color = Color.DEFAULT
    bold: bool = False
    italic: bool = False
    dim: bool = False
    underline: bool = False

    @property
    def is_plain(self) -> bool:
        return self == PLAIN

    def sgr(self) -> str:
        """Return the SGR sequence selecting this style ("" when plain)."""
        params: list[str] = []
        if self.bold:
            params.append("1")
        if self.dim:
            params.append("2")
        if self.italic:
            params.append("3")
        if self.underline:
            params.append("4")
        if self.color is not Color.DEFAULT:
            params.append(str(self.color.value))
        if not params:
            return ""
        return f"\x1b[{';'.join(params)}m"

    def reset(self) -> str:
        """Return the sequence that undoes :meth:`sgr`."""
        return "" if self.is_plain else _SGR_RESET


PLAIN = Style()


@dataclass(frozen=True)
class Span:
    """An immutable run of text drawn in a single style."""

    text: str
    style: Style = PLAIN
