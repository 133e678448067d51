"""Terminal interface using Blessed for display and Curtsies for input."""

import logging
from collections import deque
from typing import Optional, Sequence

import blessed
from curtsies.events import PasteEvent

logger = logging.getLogger(__name__)


class TerminalInterface:
    """Handles terminal I/O using Blessed.

    Use as a context manager: fullscreen and raw input are acquired on
    entry and released on every way out, errors included.
    """

    def __init__(self, terminal: Optional[blessed.Terminal] = None):
        self.term = terminal or blessed.Terminal()
        self.is_fullscreen = False
        self._curtsies_input: Optional[object] = None
        self._pending_keys: deque[str] = deque()

    def __enter__(self) -> "TerminalInterface":
        self.setup()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup()

    def setup(self):
        """Enter fullscreen mode and raw keyboard input."""
        print(self.term.enter_fullscreen, end='')
        print(self.term.clear, end='', flush=True)
        self.is_fullscreen = True
        if self._curtsies_input is None:
            from curtsies import Input
            self._curtsies_input = Input(keynames='curtsies')
            self._curtsies_input.__enter__()

    def cleanup(self):
        """Leave raw input and fullscreen mode."""
        if self._curtsies_input is not None:
            try:
                self._curtsies_input.__exit__(None, None, None)
            except Exception:
                # Teardown must still restore the screen below
                logger.exception("Could not leave raw input mode")
            finally:
                self._curtsies_input = None
        if self.is_fullscreen:
            print(self.term.exit_fullscreen, end='')
            print(self.term.normal_cursor, end='', flush=True)
            self.is_fullscreen = False

    @property
    def width(self) -> int:
        """Terminal width in columns."""
        return self.term.width

    @property
    def height(self) -> int:
        """Terminal height in rows."""
        return self.term.height

    def get_key(self, timeout=None):
        """Get a single key token from the user.

        Args:
            timeout: Timeout in seconds (None for blocking, 0 for non-blocking)

        Returns:
            The curtsies key name, or None if nothing arrived in time.
            A paste is handed out one key per call.
        """
        if self._pending_keys:
            return self._pending_keys.popleft()
        if self._curtsies_input is None:
            return None
        # curtsies checks bytes it already read before waiting on stdin
        event = self._curtsies_input.send(timeout)
        if event is None:
            return None
        if isinstance(event, PasteEvent):
            logger.debug("Paste of %d key(s)", len(event.events))
            self._pending_keys.extend(str(key) for key in event.events)
            return self._pending_keys.popleft() if self._pending_keys else None
        return str(event)

    # --- Text cells ---

    def render_line(self, text: str, tab_size: int) -> str:
        """Turn buffer text into the characters to put on screen.

        Tabs expand to the next multiple of ``tab_size``. C0 controls and
        DEL are shown in caret notation (``^[`` for ESC) and C1 controls as
        ``?``, so nothing in a file reaches the terminal as a sequence.
        """
        cells = []
        column = 0
        for c in text:
            o = ord(c)
            if c == '\t':
                pad = tab_size - column % tab_size
                cells.append(' ' * pad)
                column += pad
            elif o < 32 or o == 127:
                cells.append('^' + chr(o ^ 0x40))
                column += 2
            elif 0x80 <= o < 0xa0:
                cells.append('?')
                column += 1
            else:
                cells.append(c)
                column += self.term.length(c)
        return ''.join(cells)

    def cell_width(self, text: str, tab_size: int) -> int:
        """Number of terminal cells ``text`` takes once rendered."""
        return self.term.length(self.render_line(text, tab_size))

    def fit(self, text: str, width: int) -> str:
        """Cut rendered text to ``width`` cells and pad it to exactly that width."""
        kept = []
        used = 0
        for c in text:
            w = self.term.length(c)
            if used + w > width:
                break
            kept.append(c)
            used += w
        return ''.join(kept) + ' ' * (width - used)

    # --- Editor screen ---

    def clear_screen(self):
        print(self.term.home + self.term.clear, end='')

    def draw_lines(self, lines: Sequence[str], top: int = 0, left: int = 0, width: Optional[int] = None):
        """Draw text lines starting at row ``top``, truncated to ``width``."""
        width = self.width - left if width is None else width
        for y, line in enumerate(lines):
            print(self.term.move(top + y, left) + self.fit(line, width), end='')

    def draw_status(self, left_text: str, right_text: str = ""):
        """Draw the status line on the bottom row in reverse video."""
        width = self.width
        right_text = right_text[:width]
        left_width = max(0, width - len(right_text))
        text = left_text[:left_width].ljust(left_width) + right_text
        print(self.term.move(self.height - 1, 0) + self.term.reverse + text + self.term.normal, end='')

    def draw_action_bar(self, text: str):
        """Draw the action bar just above the status line."""
        row = self.height - 2
        print(self.term.move(row, 0) + self.term.bold + text.center(self.width)[:self.width] + self.term.normal, end='')

    def place_cursor(self, y: int, x: int):
        print(self.term.move(y, x) + self.term.normal_cursor, end='', flush=True)

    def hide_cursor(self):
        print(self.term.hide_cursor, end='', flush=True)

    # --- Boxes for overlays ---

    def box_origin(self, width: int, height: int) -> tuple[int, int]:
        """Top-left corner of a box of the given size centered on screen."""
        top = max(0, (self.height - height) // 2)
        left = max(0, (self.width - width) // 2)
        return (top, left)

    def draw_box(self, top: int, left: int, width: int, height: int, title: str = ""):
        """Draw an empty bordered box with an optional title in its top edge."""
        inner = max(0, width - 2)
        heading = f" {title} " if title else ""
        heading = heading[:inner]
        print(self.term.move(top, left) + "╔" + heading + "═" * (inner - len(heading)) + "╗", end='')
        for row in range(1, height - 1):
            print(self.term.move(top + row, left) + "║" + " " * inner + "║", end='')
        print(self.term.move(top + height - 1, left) + "╚" + "═" * inner + "╝", end='')

    def draw_input_box(self, title: str, text: str, cursor: int, width: int = 50):
        """Draw a titled one-line input and put the cursor in it."""
        width = min(width, self.width)
        inner = max(1, width - 4)
        top, left = self.box_origin(width, 3)
        self.draw_box(top, left, width, 3, title)
        # Keep the cursor in view when the text is wider than the box
        offset = max(0, cursor - inner + 1)
        print(self.term.move(top + 1, left + 2) + text[offset:offset + inner], end='')
        self.place_cursor(top + 1, left + 2 + cursor - offset)

    def draw_list_box(self, title: str, labels: Sequence[str], selected: Optional[int],
                      width: int = 70, height: int = 20):
        """Draw a titled list with the selected row highlighted."""
        width = min(width, self.width)
        height = max(3, min(height, self.height, len(labels) + 2))
        visible = height - 2
        inner = max(1, width - 4)
        top, left = self.box_origin(width, height)
        self.draw_box(top, left, width, height, title)

        offset = 0
        if selected is not None and selected >= visible:
            offset = selected - visible + 1
        for row, label in enumerate(labels[offset:offset + visible]):
            index = offset + row
            marker = ">> " if index == selected else "   "
            line = (marker + label)[:inner].ljust(inner)
            if index == selected:
                line = self.term.reverse + line + self.term.normal
            print(self.term.move(top + 1 + row, left + 2) + line, end='')
        self.hide_cursor()

    def draw_message_box(self, message: str, width: int = 50):
        """Draw a centered bordered message in place of an overlay."""
        width = min(max(width, len(message) + 4), self.width)
        top, left = self.box_origin(width, 3)
        self.draw_box(top, left, width, 3)
        inner = max(0, width - 4)
        print(self.term.move(top + 1, left + 2) + self.term.bold + message[:inner].center(inner) + self.term.normal, end='')
        self.hide_cursor()

    # --- Home screen ---

    def draw_home(self, title_lines: Sequence[str], entries: Sequence[str]):
        """Draw the start screen: a title banner and the available actions."""
        self.clear_screen()
        block = list(title_lines) + [""] + list(entries)
        top = max(0, (self.height - len(block)) // 2)
        for row, line in enumerate(title_lines):
            print(self.term.move(top + row, max(0, (self.width - len(line)) // 2))
                  + self.term.blue + line + self.term.normal, end='')
        for row, line in enumerate(entries, start=len(title_lines) + 1):
            print(self.term.move(top + row, max(0, (self.width - len(line)) // 2))
                  + self.term.bold + line + self.term.normal, end='')
        self.hide_cursor()
