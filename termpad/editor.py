"""Main editor controller: owns the buffers and runs the key loop."""

import errno
import logging
import os
import select
import signal
from enum import Enum
from typing import Optional

from .actions import ActionController, Mode
from .collection import BufferCollection
from .commands import CommandRegistry
from .constants import EditorConstants
from .keyboard import KeyboardHandler, KeyEvent, KeyType
from .line_input import LineInput
from .settings import Settings, get_settings
from .terminal import TerminalInterface
from .viewport import ViewPort

logger = logging.getLogger(__name__)


class Screen(Enum):
    HOME = "home"
    EDITOR = "editor"


HELP_LINES = [
    "",
    "FILES                         BUFFERS",
    "  Ctrl-N    New file            Ctrl-B    Switch buffer",
    "  Ctrl-O    Open file           Ctrl-W    Close buffer",
    "  Ctrl-S    Save                Ctrl-A    Action bar",
    "  Ctrl-Q    Quit",
    "",
    "EDITING",
    "  Arrows    Move cursor         Home/End  Line start/end",
    "  Bksp      Delete char         Tab       Insert spaces",
    "  Esc       Cancel action       F1        Help",
]


class Editor:
    """Application shell.

    The editor is the single owner of the buffer collection, the view and
    the action controller. Every key is fully processed, then the screen
    is redrawn once.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.terminal = TerminalInterface()
        self.keyboard = KeyboardHandler(self.terminal)
        self.settings = settings or get_settings()
        self.collection = BufferCollection()
        self.controller = ActionController()
        self.controller.action_bar_visible = self.settings.show_action_bar
        self.command_registry = CommandRegistry()
        self.view = ViewPort(self.terminal.width, self._text_height())
        self.running = False
        self.status_message: Optional[str] = None
        self.prompt_mode: Optional[str] = None  # None, 'save_filename' or 'quit_confirm'
        self.prompt_input = LineInput()
        self.help_visible = False
        self._resize_pipe_r: Optional[int] = None
        self._resize_pipe_w: Optional[int] = None
        self._interrupted = False

    @property
    def screen(self) -> Screen:
        return Screen.EDITOR if len(self.collection) else Screen.HOME

    @property
    def tab_size(self) -> int:
        return self.settings.tab_size

    def _text_height(self) -> int:
        chrome = EditorConstants.STATUS_LINES
        if self.controller.action_bar_visible:
            chrome += 1
        return max(1, self.terminal.height - chrome)

    def follow_cursor(self):
        """Scroll the view so the current buffer's cursor is on screen."""
        buffer = self.collection.current_buffer
        if buffer is not None:
            self.view.follow(buffer)

    def _sync_view_size(self):
        width, height = self.terminal.width, self._text_height()
        if (width, height) != (self.view.width, self.view.height):
            buffer = self.collection.current_buffer
            self.view.resize(width, height, buffer.cursor_line if buffer else 0)

    # --- Files ---

    def load_file(self, filename: str) -> bool:
        """Open a file given on the command line.

        A missing file opens as an empty buffer that is written on first save.
        """
        try:
            self.collection.open(filename)
        except OSError as e:
            logger.error("Could not open %s: %s", filename, e)
            self.status_message = f"Error: Cannot open {filename}"
            return False
        self.view.first_visible_line = 0
        self.follow_cursor()
        return True

    def save_buffer(self, filename: Optional[str] = None) -> bool:
        """Save the current buffer, optionally under a new name.

        Returns:
            True if save succeeded, False otherwise
        """
        buffer = self.collection.current_buffer
        if buffer is None:
            return False
        target = filename or buffer.file_path
        other = self.collection.find_index(target) if target else None
        if other is not None and other != self.collection.current:
            logger.info("Refusing to save over %s, open in buffer %d", target, other + 1)
            self.status_message = f"Error: {target} is open in another buffer"
            return False
        try:
            buffer.save(target)
        except PermissionError:
            logger.warning("Permission denied saving %s", target)
            self.status_message = f"Error: Permission denied saving {target}"
            return False
        except OSError as e:
            logger.warning("Could not save %s: %s", target, e)
            if e.errno == errno.ENOSPC:
                self.status_message = "Error: No space left on device"
            else:
                self.status_message = f"Error: Cannot save to {target}"
            return False
        if buffer.file_path != target:
            self.collection.rename_or_associate(self.collection.current, target)
        self.status_message = f"Saved to {target}"
        return True

    def handle_save(self):
        """Save the current buffer, asking for a name if it has none."""
        buffer = self.collection.current_buffer
        if buffer is None:
            return
        if buffer.file_path:
            self.save_buffer()
        else:
            self.prompt_mode = 'save_filename'
            self.prompt_input.clear()

    def request_quit(self):
        if self.collection.modified_buffers():
            self.prompt_mode = 'quit_confirm'
        else:
            self.running = False

    # --- Help ---

    def show_help(self):
        self.help_visible = True

    def hide_help(self):
        self.help_visible = False

    # --- Input ---

    def _handle_key_event(self, key_event: KeyEvent):
        """Route one key event.

        Args:
            key_event: KeyEvent object with parsed key information
        """
        if self.help_visible:
            self.hide_help()
            return

        if self.status_message and not self.prompt_mode:
            self.status_message = None

        if self._handle_prompt_mode(key_event):
            return

        if key_event.is_ctrl_key(EditorConstants.QUIT_KEY):
            self.request_quit()
            return

        if self.controller.is_active:
            try:
                self.controller.handle_key(key_event, self.collection)
            except OSError as e:
                logger.error("%s failed: %s", self.controller.active_flow.title, e)
                self.status_message = f"Error: {e.strerror or e}"
            self.follow_cursor()
            return

        mode = self.controller.mode_for_key(key_event)
        if mode is not None:
            if self.screen is Screen.EDITOR or mode in (Mode.NEW_FILE, Mode.OPEN_FILE):
                self.controller.enter(mode, self.collection)
            return

        if key_event.is_escape:
            self.controller.action_bar_visible = False
            return

        if self.screen is Screen.HOME:
            self._handle_home_key(key_event)
            return

        self.command_registry.execute(self, key_event)

    def _handle_home_key(self, key_event: KeyEvent):
        if key_event.is_ctrl_key(EditorConstants.SCRATCH_BUFFER_KEY):
            self.collection.open()
            self.view.first_visible_line = 0
        elif key_event.is_special('f1'):
            self.show_help()
        elif key_event.is_ctrl_key(EditorConstants.ACTION_BAR_KEY):
            self.controller.toggle_action_bar()

    def _handle_prompt_mode(self, key_event: KeyEvent) -> bool:
        """Handle input in prompt mode.

        Returns:
            True if in prompt mode and event was handled
        """
        if self.prompt_mode == 'save_filename':
            self._handle_filename_prompt(key_event)
            return True
        elif self.prompt_mode == 'quit_confirm':
            self._handle_quit_confirm(key_event)
            return True
        return False

    def _handle_filename_prompt(self, key_event: KeyEvent):
        if key_event.is_escape or key_event.is_ctrl_key('g'):
            self.prompt_mode = None
            self.prompt_input.clear()
        elif key_event.is_enter:
            filename = os.path.expanduser(self.prompt_input.text.strip())
            if filename:
                self.prompt_mode = None
                self.prompt_input.clear()
                self.save_buffer(filename)
        else:
            self.prompt_input.consume_key(key_event)

    def _handle_quit_confirm(self, key_event: KeyEvent):
        if key_event.key_type == KeyType.REGULAR and key_event.value.lower() == 'y':
            self.running = False
        self.prompt_mode = None

    # --- Drawing ---

    def _draw(self):
        if self.help_visible:
            self._draw_help()
        elif self.screen is Screen.HOME:
            self.terminal.draw_home(EditorConstants.HOME_TITLE, EditorConstants.HOME_ENTRIES)
            self.terminal.draw_status(f" {self.status_message}" if self.status_message else "",
                                      EditorConstants.HELP_HINT + " ")
            self._draw_chrome()
        else:
            self._draw_editor()
        print('', end='', flush=True)

    def _draw_editor(self):
        buffer = self.collection.current_buffer
        self._sync_view_size()
        self.view.follow(buffer)
        first, last = self.view.visible_line_range()
        lines = [self.terminal.render_line(text, self.tab_size) for text in buffer.visible_lines(first, last)]
        lines += [""] * (self.view.height - len(lines))

        self.terminal.clear_screen()
        self.terminal.draw_lines(lines, width=self.view.width)

        line, col = buffer.cursor_line_col
        name = buffer.file_path or buffer.display_name
        flag = " [+]" if buffer.modified else ""
        position = f"{self.collection.current + 1}/{len(self.collection)}"
        left = f" {self.status_message}" if self.status_message else f" {name}{flag}  ({position})"
        self.terminal.draw_status(left, f"Ln {line + 1}, Col {col + 1} ")

        row, col = self.view.cursor_screen_position(buffer)
        # Screen column in cells, not characters
        x = self.terminal.cell_width(buffer.visible_lines(line, line + 1)[0][:col], self.tab_size)
        self.terminal.place_cursor(row, min(x, self.view.width - 1))
        self._draw_chrome()

    def _draw_chrome(self):
        """Action bar, prompts and overlays, drawn over the current screen."""
        if self.controller.action_bar_visible:
            self.terminal.draw_action_bar(EditorConstants.ACTION_BAR_TEXT)
        if self.prompt_mode == 'save_filename':
            prompt = " " + EditorConstants.SAVE_PROMPT_MESSAGE
            self.terminal.draw_status(prompt + self.prompt_input.text)
            self.terminal.place_cursor(self.terminal.height - 1, len(prompt) + self.prompt_input.cursor)
        elif self.prompt_mode == 'quit_confirm':
            prompt = " " + EditorConstants.QUIT_CONFIRM_MESSAGE
            self.terminal.draw_status(prompt)
            self.terminal.place_cursor(self.terminal.height - 1, len(prompt))
        self.controller.render(self.terminal)

    def _draw_help(self):
        term = self.terminal.term
        self.terminal.clear_screen()

        title = "TERMPAD HELP"
        width = self.terminal.width
        print(f"{term.move(1, (width - len(title)) // 2)}{term.bold}{title}{term.normal}", end='')

        content_start_y = max(3, (self.terminal.height - len(HELP_LINES)) // 2)
        left_margin = max(0, (width - max(len(line) for line in HELP_LINES)) // 2)
        for i, line in enumerate(HELP_LINES):
            print(f"{term.move(content_start_y + i, left_margin)}{line}", end='')

        self.terminal.draw_status(" Press any key to continue")
        self.terminal.hide_cursor()

    # --- Main loop ---

    def _handle_resize(self, signum, frame):
        del signum, frame  # Unused
        os.write(self._resize_pipe_w, EditorConstants.RESIZE_PIPE_MARKER)

    def _handle_sigint(self, signum, frame):
        """Treat Ctrl-C like Ctrl-Q instead of killing the session."""
        del signum, frame  # Unused
        self._interrupted = True
        os.write(self._resize_pipe_w, EditorConstants.INTERRUPT_PIPE_MARKER)

    def _process_pending_keys(self):
        """Handle every key already read or pasted before waiting again.

        One read from stdin can carry several keys; select would not wake
        up for the ones curtsies keeps buffered.
        """
        key_event = self.keyboard.get_key_event(timeout=0)
        while key_event is not None and self.running:
            self._handle_key_event(key_event)
            key_event = self.keyboard.get_key_event(timeout=0)

    def run(self):
        """Run the main editor loop until the user quits."""
        self._resize_pipe_r, self._resize_pipe_w = os.pipe()
        original_winch_handler = signal.signal(signal.SIGWINCH, self._handle_resize)
        original_int_handler = signal.signal(signal.SIGINT, self._handle_sigint)
        self.running = True
        try:
            with self.terminal:
                self._draw()
                while self.running:
                    ready, _, _ = select.select([0, self._resize_pipe_r], [], [])
                    if self._resize_pipe_r in ready:
                        os.read(self._resize_pipe_r, 1024)
                        if self._interrupted:
                            self._interrupted = False
                            self.request_quit()
                        else:
                            logger.debug("Terminal resized to %dx%d", self.terminal.width, self.terminal.height)
                    elif 0 in ready:
                        self._process_pending_keys()
                    if self.running:
                        self._draw()
        finally:
            signal.signal(signal.SIGWINCH, original_winch_handler)
            signal.signal(signal.SIGINT, original_int_handler)
            os.close(self._resize_pipe_r)
            os.close(self._resize_pipe_w)
            self._resize_pipe_r = self._resize_pipe_w = None
