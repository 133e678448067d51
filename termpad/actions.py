"""Modal action flows and the controller that routes keys to them.

While a flow is active it owns the keyboard: the editor hands every key
to :class:`ActionController` until the flow completes or the user
presses Escape. The set of flows is closed; :class:`Mode` names them and
the controller keeps one instance of each, reused across activations.
"""

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

from .constants import EditorConstants
from .errors import FlowError
from .keyboard import KeyEvent, KeyType
from .line_input import LineInput

if TYPE_CHECKING:
    from .collection import BufferCollection
    from .terminal import TerminalInterface

logger = logging.getLogger(__name__)


class Mode(Enum):
    """Which action flow, if any, currently owns input."""
    NONE = "none"
    NEW_FILE = "new_file"
    OPEN_FILE = "open_file"
    SELECT_BUFFER = "select_buffer"
    CLOSE_BUFFER = "close_buffer"


class ActionFlow(ABC):
    """Base class for an interactive overlay flow."""

    title: str = ""

    def __init__(self):
        self.error: Optional[FlowError] = None

    def init(self, collection: 'BufferCollection') -> None:
        """Called once each time the flow's mode is entered."""

    @abstractmethod
    def consume_key(self, key: KeyEvent) -> None:
        """Update transient input state with a key."""

    @abstractmethod
    def attempt_complete(self, collection: 'BufferCollection') -> bool:
        """Try to commit the flow.

        Returns:
            True if the flow finished and the overlay should close.
        """

    def has_error(self) -> bool:
        return self.error is not None

    def dismiss_error(self) -> None:
        self.error = None

    def reset(self) -> None:
        self.error = None

    def render(self, terminal: 'TerminalInterface') -> None:
        if self.error is not None:
            terminal.draw_message_box(self.error.message, width=EditorConstants.INPUT_BOX_WIDTH)
        else:
            self._render_content(terminal)

    @abstractmethod
    def _render_content(self, terminal: 'TerminalInterface') -> None:
        pass


class TextInputFlow(ActionFlow):
    """A flow that asks for a filename on a single input line."""

    def __init__(self):
        super().__init__()
        self.input = LineInput()

    @property
    def filename(self) -> str:
        return os.path.expanduser(self.input.text.strip())

    def consume_key(self, key: KeyEvent) -> None:
        self.input.consume_key(key)

    def reset(self) -> None:
        super().reset()
        self.input.clear()

    def _render_content(self, terminal):
        terminal.draw_input_box(self.title, self.input.text, self.input.cursor,
                                width=EditorConstants.INPUT_BOX_WIDTH)


class NewFileFlow(TextInputFlow):
    """Create a file that does not exist yet and open it."""

    title = EditorConstants.NEW_FILE_TITLE

    def attempt_complete(self, collection):
        path = self.filename
        if not path:
            return False
        if os.path.isfile(path):
            self.error = FlowError.FILE_EXISTS
            return False
        collection.create(path)
        return True


class OpenFileFlow(TextInputFlow):
    """Open an existing file, or switch to it if it is already open."""

    title = EditorConstants.OPEN_FILE_TITLE

    def attempt_complete(self, collection):
        path = self.filename
        if not path:
            return False
        if not os.path.isfile(path):
            self.error = FlowError.FILE_NOT_FOUND
            return False
        index = collection.find_index(path)
        if index is not None:
            collection.select(index)
        else:
            collection.open(path)
        return True


@dataclass
class BufferItem:
    """One row of a buffer list: the buffer's index, label and mnemonic."""
    index: int
    label: str
    letter: str

    def __str__(self):
        return f"{self.letter} {self.label}"


class BufferListFlow(ActionFlow):
    """A flow that picks one buffer from a lettered list.

    The list is a snapshot taken when the mode is entered.
    """

    def __init__(self):
        super().__init__()
        self.items: list[BufferItem] = []
        self.selected: Optional[int] = None

    def init(self, collection):
        self.refresh_list(collection)

    def refresh_list(self, collection: 'BufferCollection') -> None:
        self.items = []
        letters = iter(EditorConstants.MNEMONIC_ALPHABET)
        for i, buffer in enumerate(collection):
            label = buffer.file_path or buffer.display_name
            letter = next(letters, EditorConstants.MNEMONIC_EXHAUSTED)
            self.items.append(BufferItem(i, label, letter))

    @property
    def selected_item(self) -> Optional[BufferItem]:
        if self.selected is None or not 0 <= self.selected < len(self.items):
            return None
        return self.items[self.selected]

    def select_none(self):
        self.selected = None

    def select_next(self):
        if not self.items:
            return
        if self.selected is None:
            self.selected = 0
        else:
            self.selected = min(self.selected + 1, len(self.items) - 1)

    def select_previous(self):
        if not self.items:
            return
        if self.selected is None:
            self.selected = 0
        else:
            self.selected = max(self.selected - 1, 0)

    def select_first(self):
        if self.items:
            self.selected = 0

    def select_last(self):
        if self.items:
            self.selected = len(self.items) - 1

    def select_by_letter(self, letter: str):
        letter = letter.lower()
        for i, item in enumerate(self.items):
            if item.letter == letter:
                self.selected = i
                return

    def consume_key(self, key):
        if key.key_type == KeyType.SPECIAL:
            if key.value in ('up', 'left'):
                self.select_previous()
            elif key.value in ('down', 'right'):
                self.select_next()
            elif key.value == 'home':
                self.select_first()
            elif key.value == 'end':
                self.select_last()
        elif key.key_type == KeyType.REGULAR and len(key.value) == 1 and key.value.isalpha():
            self.select_by_letter(key.value)

    def reset(self):
        super().reset()
        self.select_none()

    def _render_content(self, terminal):
        terminal.draw_list_box(self.title, [str(item) for item in self.items], self.selected,
                               width=EditorConstants.LIST_BOX_WIDTH,
                               height=EditorConstants.LIST_BOX_HEIGHT)


class SelectBufferFlow(BufferListFlow):
    """Switch the active buffer."""

    title = EditorConstants.SELECT_BUFFER_TITLE

    def attempt_complete(self, collection):
        item = self.selected_item
        if item is not None and item.index < len(collection):
            collection.select(item.index)
        return True


class CloseBufferFlow(BufferListFlow):
    """Close one buffer. The last remaining buffer cannot be closed."""

    title = EditorConstants.CLOSE_BUFFER_TITLE

    def attempt_complete(self, collection):
        item = self.selected_item
        if item is None:
            return False
        if len(collection) <= 1:
            self.error = FlowError.CANNOT_CLOSE_LAST
            return False
        return collection.close(item.index)


class ActionController:
    """Modal dispatcher for the action flows.

    ``mode`` is NONE between flows. Entering a mode runs that flow's
    ``init`` hook; leaving any mode resets every flow so nothing carries
    over into the next activation.
    """

    SHORTCUTS = {
        EditorConstants.NEW_FILE_KEY: Mode.NEW_FILE,
        EditorConstants.OPEN_FILE_KEY: Mode.OPEN_FILE,
        EditorConstants.SELECT_BUFFER_KEY: Mode.SELECT_BUFFER,
        EditorConstants.CLOSE_BUFFER_KEY: Mode.CLOSE_BUFFER,
    }

    # Flows that only make sense with at least one open buffer
    NEEDS_BUFFERS = frozenset({Mode.SELECT_BUFFER, Mode.CLOSE_BUFFER})

    def __init__(self):
        self.mode = Mode.NONE
        self.action_bar_visible = False
        self.flows: dict[Mode, ActionFlow] = {
            Mode.NEW_FILE: NewFileFlow(),
            Mode.OPEN_FILE: OpenFileFlow(),
            Mode.SELECT_BUFFER: SelectBufferFlow(),
            Mode.CLOSE_BUFFER: CloseBufferFlow(),
        }

    @property
    def is_active(self) -> bool:
        return self.mode is not Mode.NONE

    @property
    def active_flow(self) -> Optional[ActionFlow]:
        return self.flows.get(self.mode)

    def toggle_action_bar(self) -> None:
        self.action_bar_visible = not self.action_bar_visible

    def mode_for_key(self, key: KeyEvent) -> Optional[Mode]:
        """Map a mode-entry shortcut to its mode.

        Ctrl-letter shortcuts always work; the bare letter only works
        while the action bar is shown.
        """
        if key.key_type == KeyType.CTRL:
            return self.SHORTCUTS.get(key.value)
        if self.action_bar_visible and key.key_type == KeyType.REGULAR:
            return self.SHORTCUTS.get(key.value.lower())
        return None

    def enter(self, mode: Mode, collection: 'BufferCollection') -> bool:
        if self.is_active or mode is Mode.NONE:
            return False
        if mode in self.NEEDS_BUFFERS and len(collection) == 0:
            return False
        self.mode = mode
        self.action_bar_visible = False
        self.flows[mode].init(collection)
        logger.debug("Entered %s", mode.value)
        return True

    def exit(self) -> None:
        logger.debug("Left %s", self.mode.value)
        self.mode = Mode.NONE
        for flow in self.flows.values():
            flow.reset()

    def handle_key(self, key: KeyEvent, collection: 'BufferCollection') -> None:
        """Route a key to the active flow.

        OSError from completing a flow propagates; the flow stays open so
        the user can retry or escape.
        """
        flow = self.active_flow
        if flow is None:
            return
        if key.is_escape:
            self.exit()
            return
        if flow.has_error():
            if key.is_enter or (key.key_type == KeyType.REGULAR and key.value == ' '):
                flow.dismiss_error()
            return
        if key.is_enter:
            if flow.attempt_complete(collection):
                self.exit()
            elif flow.has_error():
                logger.info("%s: %s", flow.title, flow.error.message)
            return
        flow.consume_key(key)

    def render(self, terminal: 'TerminalInterface') -> None:
        flow = self.active_flow
        if flow is not None:
            flow.render(terminal)
