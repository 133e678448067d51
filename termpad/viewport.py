"""Vertical scroll window over a text buffer."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .buffer import TextBuffer


class ViewPort:
    """Tracks which slice of a buffer's lines fits on the screen.

    ``height`` counts text rows only; status and action-bar rows are
    subtracted by the caller before it gets here.
    """

    def __init__(self, width: int = 80, height: int = 24, first_visible_line: int = 0):
        self.width = max(1, width)
        self.height = max(1, height)
        self.first_visible_line = max(0, first_visible_line)

    def __repr__(self):
        return (f"ViewPort(width={self.width}, height={self.height}, "
                f"first_visible_line={self.first_visible_line})")

    def scroll_for_cursor(self, cursor_line: int) -> bool:
        """Scroll the minimum distance that keeps ``cursor_line`` visible.

        Returns:
            True if first_visible_line changed.
        """
        first = self.first_visible_line
        if cursor_line >= first + self.height:
            first = cursor_line - self.height + 1
        elif cursor_line < first:
            first = cursor_line
        if first == self.first_visible_line:
            return False
        self.first_visible_line = first
        return True

    def visible_line_range(self) -> tuple[int, int]:
        return (self.first_visible_line, self.first_visible_line + self.height)

    def resize(self, width: int, height: int, cursor_line: int) -> None:
        self.width = max(1, width)
        self.height = max(1, height)
        self.scroll_for_cursor(cursor_line)

    def follow(self, buffer: "TextBuffer") -> bool:
        """Bring the window back onto ``buffer`` after an edit or a buffer switch."""
        last_line = buffer.line_count() - 1
        clamped = self.first_visible_line > last_line
        if clamped:
            self.first_visible_line = last_line
        return self.scroll_for_cursor(buffer.cursor_line) or clamped

    def cursor_screen_position(self, buffer: "TextBuffer") -> tuple[int, int]:
        """Cursor (row, col) relative to the top-left of the window."""
        line, col = buffer.cursor_line_col
        return (line - self.first_visible_line, col)
