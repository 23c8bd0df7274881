"""Tests for pi.console.ansi -- instruction execution against a terminal.

Uses the VirtualTerminal to capture the escape sequences produced by the
AnsiExecutor.
"""

from __future__ import annotations

import pytest

from pi.console.ansi import AnsiExecutor, EraseForward, EraseLine, WriteText
from pi.console.cursor import Cursor
from pi.console.style import Color, Style

from .virtual_terminal import VirtualTerminal


def _executor(rows: int = 10, styled: bool = True) -> tuple[AnsiExecutor, VirtualTerminal]:
    terminal = VirtualTerminal(rows=rows)
    return AnsiExecutor(terminal, styled=styled), terminal


# ---------------------------------------------------------------------------
# Cursor movement
# ---------------------------------------------------------------------------


class TestCursorMovement:
    """The executor moves relative to the tracked physical cursor."""

    def test_no_movement_when_already_in_place(self) -> None:
        executor, terminal = _executor()
        executor.write_at(Cursor.at(0, 0), [WriteText("hi")])
        assert terminal.writes == ["hi"]
        assert executor.cursor == Cursor.at(0, 2)

    def test_move_down_to_another_row(self) -> None:
        executor, terminal = _executor()
        executor.write_at(Cursor.at(0, 0), [WriteText("hi")])
        terminal.clear_buffer()
        executor.write_at(Cursor.at(2, 0), [WriteText("x")])
        assert terminal.output == "\r\x1b[2Bx"

    def test_move_up_and_right(self) -> None:
        executor, terminal = _executor()
        executor.write_at(Cursor.at(2, 0), [WriteText("x")])
        terminal.clear_buffer()
        executor.write_at(Cursor.at(0, 3), [WriteText("y")])
        assert terminal.output == "\r\x1b[2A\x1b[3Cy"
        assert executor.cursor == Cursor.at(0, 4)

    def test_move_right_on_same_row(self) -> None:
        executor, terminal = _executor()
        executor.write_at(Cursor.at(0, 5), [EraseForward()])
        assert terminal.output == "\x1b[5C\x1b[0K"

    def test_move_left_on_same_row(self) -> None:
        executor, terminal = _executor()
        executor.write_at(Cursor.at(0, 5), [])
        terminal.clear_buffer()
        executor.write_at(Cursor.at(0, 2), [EraseForward()])
        assert terminal.output == "\x1b[3D\x1b[0K"

    def test_carriage_return_for_column_zero(self) -> None:
        executor, terminal = _executor()
        executor.write_at(Cursor.at(0, 0), [WriteText("abc")])
        terminal.clear_buffer()
        executor.write_at(Cursor.at(0, 0), [WriteText("d")])
        assert terminal.output == "\rd"

    def test_nothing_written_without_movement_or_instructions(self) -> None:
        executor, terminal = _executor()
        executor.write_at(Cursor.at(0, 0), [])
        assert terminal.write_count == 0

    def test_reset_forgets_tracked_cursor(self) -> None:
        executor, _ = _executor()
        executor.write_at(Cursor.at(3, 0), [WriteText("abc")])
        executor.reset()
        assert executor.cursor == Cursor()


# ---------------------------------------------------------------------------
# Instructions
# ---------------------------------------------------------------------------


class TestInstructions:
    """Each instruction maps to a fixed output."""

    def test_write_advances_position_column(self) -> None:
        executor, _ = _executor()
        position = Cursor.at(0, 0)
        executor.write_at(position, [WriteText("foo"), WriteText("ba")])
        assert position.col == 5

    def test_wide_text_advances_by_display_width(self) -> None:
        executor, _ = _executor()
        position = Cursor.at(0, 0)
        executor.write_at(position, [WriteText("世界")])
        assert position.col == 4

    def test_styled_text_is_wrapped_in_sgr(self) -> None:
        executor, terminal = _executor()
        executor.write_at(Cursor.at(0, 0), [WriteText("err", Style(color=Color.RED))])
        assert terminal.output == "\x1b[31merr\x1b[0m"

    def test_plain_text_has_no_sgr(self) -> None:
        executor, terminal = _executor()
        executor.write_at(Cursor.at(0, 0), [WriteText("ok")])
        assert terminal.output == "ok"

    def test_unstyled_executor_drops_sgr(self) -> None:
        executor, terminal = _executor(styled=False)
        executor.write_at(Cursor.at(0, 0), [WriteText("err", Style(bold=True))])
        assert terminal.output == "err"

    def test_erase_line(self) -> None:
        executor, terminal = _executor()
        executor.write_at(Cursor.at(0, 0), [EraseLine()])
        assert terminal.output == "\x1b[2K"

    def test_single_write_per_call(self) -> None:
        executor, terminal = _executor()
        executor.write_at(
            Cursor.at(1, 0),
            [WriteText("a"), WriteText("b", Style(bold=True)), EraseForward()],
        )
        assert terminal.write_count == 1

    def test_unknown_instruction_rejected(self) -> None:
        executor, _ = _executor()
        with pytest.raises(TypeError):
            executor.write_at(Cursor.at(0, 0), ["text"])  # type: ignore[list-item]

    def test_terminal_failure_propagates(self) -> None:
        executor, terminal = _executor()
        terminal.fail_with = OSError("broken pipe")
        with pytest.raises(OSError, match="broken pipe"):
            executor.write_at(Cursor.at(0, 0), [WriteText("x")])


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class TestConfiguration:
    def test_no_color_disables_styles_by_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("NO_COLOR", "1")
        assert AnsiExecutor(VirtualTerminal()).styled is False

    def test_styles_enabled_without_no_color(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("NO_COLOR", raising=False)
        assert AnsiExecutor(VirtualTerminal()).styled is True

    def test_explicit_styled_overrides_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("NO_COLOR", "1")
        assert AnsiExecutor(VirtualTerminal(), styled=True).styled is True

    def test_height_follows_terminal_rows(self) -> None:
        terminal = VirtualTerminal(rows=5)
        executor = AnsiExecutor(terminal)
        assert executor.height == 5
        terminal.rows = 7
        assert executor.height == 7

    def test_explicit_height(self) -> None:
        assert AnsiExecutor(VirtualTerminal(rows=5), height=3).height == 3


# ---------------------------------------------------------------------------
# Scrolling
# ---------------------------------------------------------------------------


class TestScrolling:
    """Writing below the viewport scrolls the terminal."""

    def test_overflow_emits_newlines_and_notifies(self) -> None:
        executor, terminal = _executor(rows=3)
        scrolled: list[int] = []
        executor.add_scroll_listener(scrolled.append)

        executor.write_at(Cursor.at(4, 0), [WriteText("z")])

        assert terminal.output == "\x1b[2B\n\nz"
        assert scrolled == [2]
        assert executor.cursor == Cursor.at(2, 1)

    def test_listener_can_shift_the_position(self) -> None:
        executor, _ = _executor(rows=3)
        position = Cursor.at(3, 0)

        def on_scroll(rows: int) -> None:
            position.row -= rows

        executor.add_scroll_listener(on_scroll)
        executor.write_at(position, [WriteText("z")])
        assert position == Cursor.at(2, 1)

    def test_no_notification_inside_viewport(self) -> None:
        executor, _ = _executor(rows=3)
        scrolled: list[int] = []
        executor.add_scroll_listener(scrolled.append)
        executor.write_at(Cursor.at(2, 0), [WriteText("z")])
        assert scrolled == []

    def test_removed_listener_not_notified(self) -> None:
        executor, _ = _executor(rows=1)
        scrolled: list[int] = []
        executor.add_scroll_listener(scrolled.append)
        executor.remove_scroll_listener(scrolled.append)
        executor.remove_scroll_listener(scrolled.append)  # absent: no-op
        executor.write_at(Cursor.at(1, 0), [WriteText("z")])
        assert scrolled == []


# ---------------------------------------------------------------------------
# Whole-line erases
# ---------------------------------------------------------------------------


class TestEraseLineMovement:
    """Erasing a whole line needs no horizontal movement."""

    def test_same_row_erase_does_not_move(self) -> None:
        executor, terminal = _executor()
        executor.write_at(Cursor.at(2, 0), [WriteText("abcd")])
        terminal.clear_buffer()
        executor.write_at(Cursor.at(2, 9), [EraseLine()])
        assert terminal.output == "\x1b[2K"
        assert executor.cursor == Cursor.at(2, 4)

    def test_other_row_erase_moves_vertically_only(self) -> None:
        executor, terminal = _executor()
        executor.write_at(Cursor.at(2, 0), [WriteText("abcd")])
        terminal.clear_buffer()
        executor.write_at(Cursor.at(0, 7), [EraseLine()])
        assert terminal.output == "\x1b[2A\x1b[2K"
        assert executor.cursor == Cursor.at(0, 4)

    def test_erase_line_leaves_position_column(self) -> None:
        executor, _ = _executor()
        position = Cursor.at(1, 6)
        executor.write_at(position, [EraseLine()])
        assert position == Cursor.at(1, 6)

    def test_erase_followed_by_text_moves_to_column(self) -> None:
        executor, terminal = _executor()
        executor.write_at(Cursor.at(0, 3), [EraseLine(), WriteText("x")])
        assert terminal.output == "\x1b[3C\x1b[2Kx"


# ---------------------------------------------------------------------------
# Failed writes
# ---------------------------------------------------------------------------


class TestFailedWrite:
    """A terminal error leaves the executor and the position untouched."""

    def test_cursor_and_position_unchanged(self) -> None:
        executor, terminal = _executor()
        executor.write_at(Cursor.at(1, 0), [WriteText("ab")])
        position = Cursor.at(3, 0)
        terminal.fail_with = OSError("closed")

        with pytest.raises(OSError):
            executor.write_at(position, [WriteText("hello")])

        assert executor.cursor == Cursor.at(1, 2)
        assert position == Cursor.at(3, 0)

    def test_listeners_not_notified(self) -> None:
        executor, terminal = _executor(rows=2)
        scrolled: list[int] = []
        executor.add_scroll_listener(scrolled.append)
        terminal.fail_with = OSError("closed")

        with pytest.raises(OSError):
            executor.write_at(Cursor.at(4, 0), [WriteText("z")])

        assert scrolled == []
        assert executor.cursor == Cursor()

    def test_retry_repeats_the_scroll(self) -> None:
        executor, terminal = _executor(rows=2)
        scrolled: list[int] = []
        executor.add_scroll_listener(scrolled.append)
        terminal.fail_with = OSError("closed")
        with pytest.raises(OSError):
            executor.write_at(Cursor.at(2, 0), [WriteText("z")])

        terminal.fail_with = None
        executor.write_at(Cursor.at(2, 0), [WriteText("z")])

        assert terminal.writes == ["\x1b[1B\nz"]
        assert scrolled == [1]
