"""Single-line text input used by the filename prompts."""

from .keyboard import KeyEvent, KeyType


class LineInput:
    """Editable one-line string with its own cursor."""

    def __init__(self, text: str = ""):
        self.text = text
        self.cursor = len(text)

    def __repr__(self):
        return f"LineInput({self.text!r}, cursor={self.cursor})"

    def clear(self):
        self.text = ""
        self.cursor = 0

    def set_text(self, text: str):
        self.text = text
        self.cursor = len(text)

    def consume_key(self, key: KeyEvent) -> bool:
        """Apply a key to the input. Returns True if the key was used."""
        if key.key_type == KeyType.REGULAR:
            if key.value == '\t' or not key.is_printable:
                return False
            self.text = self.text[:self.cursor] + key.value + self.text[self.cursor:]
            self.cursor += len(key.value)
            return True
        if key.key_type != KeyType.SPECIAL:
            return False
        if key.value == 'backspace':
            if self.cursor > 0:
                self.text = self.text[:self.cursor - 1] + self.text[self.cursor:]
                self.cursor -= 1
        elif key.value == 'delete':
            self.text = self.text[:self.cursor] + self.text[self.cursor + 1:]
        elif key.value == 'left':
            self.cursor = max(0, self.cursor - 1)
        elif key.value == 'right':
            self.cursor = min(len(self.text), self.cursor + 1)
        elif key.value == 'home':
            self.cursor = 0
        elif key.value == 'end':
            self.cursor = len(self.text)
        else:
            return False
        return True
