"""Text buffer with a single cursor addressed by absolute offset."""

import os
from dataclasses import dataclass
from typing import Optional

from . import storage
from .constants import EditorConstants


@dataclass
class Mark:
    """A named position in a buffer's content."""
    name: str
    position: int = 0


class TextBuffer:
    """One document's content and its cursor ("point").

    The content is stored as a single string; lines are derived by
    splitting on newlines. The point is an offset into the content and
    may equal its length, meaning "after the last character".
    """

    content: str
    point: Mark
    marks: dict[str, Mark]
    file_path: Optional[str]

    def __init__(self, content: str = "", file_path: Optional[str] = None):
        self.content = content
        self.point = Mark(EditorConstants.POINT_MARK_NAME, 0)
        self.marks = {self.point.name: self.point}
        self.file_path = file_path
        self.modified = False

    @classmethod
    def from_file(cls, file_path: str) -> "TextBuffer":
        """Load a buffer from disk. OSError propagates to the caller."""
        lines = storage.read_lines(file_path)
        return cls('\n'.join(lines), file_path=file_path)

    def save(self, file_path: Optional[str] = None) -> str:
        """Write the buffer to its file (or ``file_path``) and return the path used.

        Writing to another path does not re-associate the buffer; see
        BufferCollection.rename_or_associate.
        """
        target = file_path or self.file_path
        if not target:
            raise ValueError("buffer has no file path")
        storage.write_lines(target, self.lines())
        self.modified = False
        return target

    @property
    def display_name(self) -> str:
        if self.file_path is None:
            return EditorConstants.UNNAMED_BUFFER_NAME
        return os.path.basename(self.file_path) or self.file_path

    def __repr__(self):
        return f"TextBuffer({self.display_name!r}, point={self.point.position})"

    # --- Line/column addressing ---

    def lines(self) -> list[str]:
        return self.content.split('\n')

    def line_count(self) -> int:
        return self.content.count('\n') + 1

    def offset_of(self, line: int, col: int) -> Optional[int]:
        """Absolute offset of (line, col), clamping col into the line.

        Returns None when ``line`` does not exist.
        """
        if line < 0:
            return None
        position = 0
        for i, text in enumerate(self.lines()):
            if i == line:
                return position + max(0, min(col, len(text)))
            position += len(text) + 1
        return None

    def line_col_of(self, offset: int) -> tuple[int, int]:
        offset = max(0, min(offset, len(self.content)))
        position = 0
        lines = self.lines()
        for i, text in enumerate(lines):
            if offset <= position + len(text):
                return (i, offset - position)
            position += len(text) + 1
        # Unreachable: the last line always ends at len(content)
        return (len(lines) - 1, len(lines[-1]))

    def last_column_of(self, line: int) -> int:
        lines = self.lines()
        if 0 <= line < len(lines):
            return len(lines[line])
        return 0

    @property
    def cursor_line_col(self) -> tuple[int, int]:
        return self.line_col_of(self.point.position)

    @property
    def cursor_line(self) -> int:
        return self.cursor_line_col[0]

    # --- Editing ---

    def insert_char(self, c: str):
        position = self.point.position
        self.content = self.content[:position] + c + self.content[position:]
        self.point.position = position + len(c)
        self.modified = True

    def insert_text(self, text: str):
        for c in text:
            self.insert_char(c)

    def delete_char_before_point(self) -> bool:
        """Classic backspace. At column 0 this joins the line to the previous one."""
        position = self.point.position
        if position == 0:
            return False
        self.content = self.content[:position - 1] + self.content[position:]
        self.point.position = position - 1
        self.modified = True
        return True

    # --- Movement ---

    def move_point_to(self, line: int, col: int) -> bool:
        offset = self.offset_of(line, col)
        if offset is None:
            return False
        self.point.position = offset
        return True

    def move_left(self) -> bool:
        line, col = self.cursor_line_col
        if col > 0:
            return self.move_point_to(line, col - 1)
        if line > 0:
            return self.move_point_to(line - 1, self.last_column_of(line - 1))
        return False

    def move_right(self) -> bool:
        line, col = self.cursor_line_col
        if col < self.last_column_of(line):
            return self.move_point_to(line, col + 1)
        if line + 1 < self.line_count():
            return self.move_point_to(line + 1, 0)
        return False

    def move_up(self) -> bool:
        line, col = self.cursor_line_col
        if line == 0:
            return False
        return self.move_point_to(line - 1, min(col, self.last_column_of(line - 1)))

    def move_down(self) -> bool:
        line, col = self.cursor_line_col
        if line + 1 >= self.line_count():
            return False
        return self.move_point_to(line + 1, min(col, self.last_column_of(line + 1)))

    def move_line_start(self) -> bool:
        line, col = self.cursor_line_col
        return col != 0 and self.move_point_to(line, 0)

    def move_line_end(self) -> bool:
        line, col = self.cursor_line_col
        end = self.last_column_of(line)
        return col != end and self.move_point_to(line, end)

    # --- Rendering window ---

    def visible_lines(self, from_line: int, to_line: int) -> list[str]:
        if from_line >= self.line_count():
            return []
        return self.lines()[max(0, from_line):to_line]

    def slice_lines(self, from_line: int, to_line: int) -> str:
        return '\n'.join(self.visible_lines(from_line, to_line))
