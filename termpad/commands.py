"""Command pattern implementation for editor actions."""

from abc import ABC, abstractmethod
from typing import Dict, Tuple, Optional, TYPE_CHECKING

from .constants import EditorConstants
from .keyboard import KeyType

if TYPE_CHECKING:
    from .editor import Editor
    from .keyboard import KeyEvent


class EditorCommand(ABC):
    """Base class for editor commands."""

    @abstractmethod
    def execute(self, editor: 'Editor', key_event: 'KeyEvent') -> bool:
        """Execute the command.

        Args:
            editor: Editor instance
            key_event: The key event that triggered this command

        Returns:
            True if the command modified the buffer
        """


class MovementCommand(EditorCommand):
    """Base class for cursor movement commands."""

    def execute(self, editor: 'Editor', key_event: 'KeyEvent') -> bool:
        buffer = editor.collection.current_buffer
        if buffer is not None and self._move(buffer):
            editor.follow_cursor()
        return False

    @abstractmethod
    def _move(self, buffer) -> bool:
        """Move the buffer's point. Returns True if it moved."""


class LeftCharCommand(MovementCommand):
    def _move(self, buffer):
        return buffer.move_left()


class RightCharCommand(MovementCommand):
    def _move(self, buffer):
        return buffer.move_right()


class UpLineCommand(MovementCommand):
    def _move(self, buffer):
        return buffer.move_up()


class DownLineCommand(MovementCommand):
    def _move(self, buffer):
        return buffer.move_down()


class BeginningOfLineCommand(MovementCommand):
    def _move(self, buffer):
        return buffer.move_line_start()


class EndOfLineCommand(MovementCommand):
    def _move(self, buffer):
        return buffer.move_line_end()


class EditCommand(EditorCommand):
    """Base class for editing commands."""

    def execute(self, editor: 'Editor', key_event: 'KeyEvent') -> bool:
        buffer = editor.collection.current_buffer
        if buffer is None:
            return False
        changed = self._edit(editor, buffer, key_event)
        editor.follow_cursor()
        return changed

    @abstractmethod
    def _edit(self, editor: 'Editor', buffer, key_event: 'KeyEvent') -> bool:
        """Perform the edit. Returns True if the buffer changed."""


class BackspaceCommand(EditCommand):
    def _edit(self, editor, buffer, key_event):
        return buffer.delete_char_before_point()


class InsertNewlineCommand(EditCommand):
    def _edit(self, editor, buffer, key_event):
        buffer.insert_char('\n')
        return True


class InsertTabCommand(EditCommand):
    def _edit(self, editor, buffer, key_event):
        buffer.insert_text(' ' * editor.tab_size)
        return True


class InsertTextCommand(EditCommand):
    def _edit(self, editor, buffer, key_event):
        if not key_event.is_printable:
            return False
        buffer.insert_text(key_event.value)
        return True


class SystemCommand(EditorCommand):
    """Base class for commands that act on the editor, not the text."""

    def execute(self, editor: 'Editor', key_event: 'KeyEvent') -> bool:
        self._execute_system(editor, key_event)
        return False

    @abstractmethod
    def _execute_system(self, editor: 'Editor', key_event: 'KeyEvent'):
        """Perform the system action."""


class SaveCommand(SystemCommand):
    def _execute_system(self, editor, key_event):
        editor.handle_save()


class ToggleActionBarCommand(SystemCommand):
    def _execute_system(self, editor, key_event):
        editor.controller.toggle_action_bar()


class HelpCommand(SystemCommand):
    def _execute_system(self, editor, key_event):
        editor.show_help()


class CommandRegistry:
    """Registry for mapping key combinations to commands."""

    def __init__(self):
        self._commands: Dict[Tuple[KeyType, str], EditorCommand] = {}
        self._setup_default_commands()

    def _setup_default_commands(self):
        # Movement
        self.register((KeyType.SPECIAL, 'left'), LeftCharCommand())
        self.register((KeyType.SPECIAL, 'right'), RightCharCommand())
        self.register((KeyType.SPECIAL, 'up'), UpLineCommand())
        self.register((KeyType.SPECIAL, 'down'), DownLineCommand())
        self.register((KeyType.SPECIAL, 'home'), BeginningOfLineCommand())
        self.register((KeyType.SPECIAL, 'end'), EndOfLineCommand())

        # Editing
        self.register((KeyType.SPECIAL, 'backspace'), BackspaceCommand())
        self.register((KeyType.SPECIAL, 'enter'), InsertNewlineCommand())
        self.register((KeyType.REGULAR, '\t'), InsertTabCommand())

        # System
        self.register((KeyType.CTRL, EditorConstants.SAVE_KEY), SaveCommand())
        self.register((KeyType.CTRL, EditorConstants.ACTION_BAR_KEY), ToggleActionBarCommand())
        self.register((KeyType.SPECIAL, 'f1'), HelpCommand())

    def register(self, key: Tuple[KeyType, str], command: EditorCommand):
        self._commands[key] = command

    def get_command(self, key_type: KeyType, value: str) -> Optional[EditorCommand]:
        return self._commands.get((key_type, value))

    def execute(self, editor: 'Editor', key_event: 'KeyEvent') -> bool:
        """Execute the command for the given key event.

        Returns:
            True if the buffer was modified
        """
        command = self.get_command(key_event.key_type, key_event.value)
        if command:
            return command.execute(editor, key_event)

        if key_event.key_type == KeyType.REGULAR:
            return InsertTextCommand().execute(editor, key_event)

        return False
