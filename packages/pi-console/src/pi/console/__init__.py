"""pi-console: single-line terminal labels with minimal redraws."""

# Drawing instructions and their executor
from pi.console.ansi import (
    AnsiExecutor,
    EraseForward,
    EraseLine,
    Instruction,
    WriteText,
)

# Label block driver
from pi.console.area import LabelArea

# Shared positions
from pi.console.cursor import Cursor

# Labels
from pi.console.label import LabelText, RedrawableLabel, TerminalLabel

# Styled text
from pi.console.style import PLAIN, Color, Span, Style

# Terminal interface and implementations
from pi.console.terminal import ProcessTerminal, Terminal

# Utilities
from pi.console.utils import strip_ansi, visible_width

__all__ = [
    # ANSI
    "AnsiExecutor",
    "EraseForward",
    "EraseLine",
    "Instruction",
    "WriteText",
    # Area
    "LabelArea",
    # Cursor
    "Cursor",
    # Labels
    "LabelText",
    "RedrawableLabel",
    "TerminalLabel",
    # Style
    "PLAIN",
    "Color",
    "Span",
    "Style",
    # Terminal
    "ProcessTerminal",
    "Terminal",
    # Utilities
    "strip_ansi",
    "visible_width",
]
