"""Constants and configuration for the termpad editor."""

class EditorConstants:
    """Central configuration constants for the editor."""

    # Editing
    TAB_SIZE = 4  # Spaces inserted by the Tab key unless overridden in settings
    MIN_TAB_SIZE = 1
    MAX_TAB_SIZE = 16

    # Buffers
    POINT_MARK_NAME = "Point"
    UNNAMED_BUFFER_NAME = "[No Name]"

    # Action flows
    MNEMONIC_ALPHABET = "abcdefghijklmnopqrstuvwxyz"
    MNEMONIC_EXHAUSTED = "-"  # Mnemonic used once the alphabet runs out
    NEW_FILE_TITLE = "New File"
    OPEN_FILE_TITLE = "Open File"
    SELECT_BUFFER_TITLE = "Buffer List"
    CLOSE_BUFFER_TITLE = "Close Buffer"
    INPUT_BOX_WIDTH = 50
    LIST_BOX_WIDTH = 70
    LIST_BOX_HEIGHT = 20

    # Shortcut letters, used with Ctrl or alone while the action bar is shown
    NEW_FILE_KEY = "n"
    OPEN_FILE_KEY = "o"
    SELECT_BUFFER_KEY = "b"
    CLOSE_BUFFER_KEY = "w"
    ACTION_BAR_KEY = "a"  # Ctrl-A toggles the action bar
    SCRATCH_BUFFER_KEY = "t"  # Ctrl-T on the home screen
    SAVE_KEY = "s"
    QUIT_KEY = "q"

    # File operations
    ATOMIC_SAVE_PREFIX = "."  # Prefix for temporary save files
    ATOMIC_SAVE_SUFFIX = ".tmp"  # Suffix for temporary save files

    # Resize handling
    RESIZE_PIPE_MARKER = b'R'  # Byte written to pipe to signal resize
    INTERRUPT_PIPE_MARKER = b'C'  # Byte written to pipe on SIGINT

    # Screen chrome
    STATUS_LINES = 1  # Status line at the bottom of the editor screen
    ACTION_BAR_TEXT = "n: New File | o: Open File | b: Buffers | w: Close Buffer"
    HOME_ENTRIES = (
        "+ New File        Ctrl-N",
        "- Open File       Ctrl-O",
        "* Scratch Buffer  Ctrl-T",
    )
    HOME_TITLE = (
        "▀█▀ █▀▀ █▀█ █▀▄▀█ █▀█ ▄▀█ █▀▄",
        " █  ██▄ █▀▄ █ ▀ █ █▀▀ █▀█ █▄▀",
    )

    # Status messages
    QUIT_CONFIRM_MESSAGE = "Unsaved changes. Quit anyway? (y, n) "
    SAVE_PROMPT_MESSAGE = "File to save in: "
    HELP_HINT = "Ctrl-A for actions"
