"""Keyboard input handling using curtsies-style key tokens."""

from typing import Optional
from dataclasses import dataclass
from enum import Enum


class KeyType(Enum):
    """Types of key events."""
    REGULAR = "regular"
    ALT = "alt"
    CTRL = "ctrl"
    SPECIAL = "special"
    SHIFT_SPECIAL = "shift_special"  # Shift + arrow keys, etc.


class Modifier(Enum):
    CONTROL = "ctrl"
    SHIFT = "shift"
    ALT = "alt"
    SUPER = "super"


# Logical key names for non-character keys
SPECIAL_KEYS = frozenset({
    'left', 'right', 'up', 'down', 'home', 'end', 'enter', 'backspace',
    'delete', 'page_up', 'page_down', 'insert', 'tab',
    'f1', 'f2', 'f3', 'f4', 'f5', 'f6', 'f7', 'f8', 'f9', 'f10', 'f11', 'f12',
})

# Token spellings that curtsies and terminals disagree on
_ALIASES = {
    'pageup': 'page_up',
    'pagedown': 'page_down',
    'esc': 'escape',
    'return': 'enter',
    'bksp': 'backspace',
    'del': 'delete',
    'meta': 'alt',
    'control': 'ctrl',
    'cmd': 'super',
    'win': 'super',
}


@dataclass
class KeyEvent:
    """A logical key plus its modifier set.

    ``value`` is either a single character (for REGULAR, CTRL and ALT
    letters) or a logical key name such as ``'left'`` or ``'enter'``.
    """
    key_type: KeyType
    value: str
    raw: str = ""
    is_alt: bool = False
    is_ctrl: bool = False
    is_shift: bool = False
    is_super: bool = False
    is_sequence: bool = False
    code: Optional[int] = None

    @property
    def modifiers(self) -> frozenset[Modifier]:
        mods = set()
        if self.is_ctrl:
            mods.add(Modifier.CONTROL)
        if self.is_shift:
            mods.add(Modifier.SHIFT)
        if self.is_alt:
            mods.add(Modifier.ALT)
        if self.is_super:
            mods.add(Modifier.SUPER)
        return frozenset(mods)

    def is_special(self, name: str) -> bool:
        return self.key_type == KeyType.SPECIAL and self.value == name

    def is_ctrl_key(self, letter: str) -> bool:
        return self.key_type == KeyType.CTRL and self.value == letter

    @property
    def is_escape(self) -> bool:
        return self.is_special('escape')

    @property
    def is_enter(self) -> bool:
        return self.is_special('enter')

    @property
    def is_printable(self) -> bool:
        """A single character that belongs in the text."""
        return (self.key_type == KeyType.REGULAR and len(self.value) == 1
                and (self.value == '\t' or ord(self.value) >= 32))


def special(name: str, **flags) -> KeyEvent:
    """Build a SPECIAL key event, mostly for tests and synthetic input."""
    return KeyEvent(key_type=KeyType.SPECIAL, value=name, raw=f"<{name.upper()}>", is_sequence=True, **flags)


def char(c: str) -> KeyEvent:
    return KeyEvent(key_type=KeyType.REGULAR, value=c, raw=c)


def ctrl(letter: str) -> KeyEvent:
    return KeyEvent(key_type=KeyType.CTRL, value=letter, raw=f"<Ctrl-{letter}>", is_ctrl=True)


class KeyboardHandler:
    """Turns terminal key tokens into KeyEvents."""

    def __init__(self, terminal_interface):
        self.terminal = terminal_interface

    def get_key_event(self, timeout: Optional[float] = None) -> Optional[KeyEvent]:
        key = self.terminal.get_key(timeout)
        if not key:
            return None
        return self.parse_key(key)

    def parse_key(self, key) -> KeyEvent:
        """Parse a curtsies key token (or a raw character) into a KeyEvent.

        Args:
            key: A string, or anything whose ``str()`` is a key token

        Returns:
            Parsed KeyEvent
        """
        key_str = str(key)
        if len(key_str) > 2 and key_str.startswith('<') and key_str.endswith('>'):
            return self._parse_token(key_str)
        return self._parse_raw(key_str)

    def _parse_token(self, key_str: str) -> KeyEvent:
        # '<Ctrl-x>', '<Esc+u>', '<Shift-LEFT>', '<PAGEUP>'
        name = key_str[1:-1].replace('+', '-')
        parts = name.split('-') if len(name) > 1 else [name]
        base = parts[-1]
        if len(base) != 1:
            base = base.lower()
        base = _ALIASES.get(base, base)
        mods = {_ALIASES.get(m.lower(), m.lower()) for m in parts[:-1]}
        # A leading Esc before another key is how terminals send Alt
        if 'escape' in mods:
            mods.discard('escape')
            mods.add('alt')

        flags = dict(
            is_ctrl='ctrl' in mods,
            is_alt='alt' in mods,
            is_shift='shift' in mods,
            is_super='super' in mods,
        )

        if base in ('space', 'spacebar', 'spc') and not mods:
            return KeyEvent(key_type=KeyType.REGULAR, value=' ', raw=' ')
        if base == 'tab' and not mods:
            return KeyEvent(key_type=KeyType.REGULAR, value='\t', raw='\t')
        if base == 'escape' and not mods:
            return KeyEvent(key_type=KeyType.SPECIAL, value='escape', raw='\x1b')

        if flags['is_ctrl'] and len(base) == 1:
            letter = base.lower()
            # Terminals send Ctrl-J / Ctrl-M for Enter
            if letter in ('j', 'm'):
                return KeyEvent(key_type=KeyType.SPECIAL, value='enter', raw=key_str, is_sequence=True)
            return KeyEvent(key_type=KeyType.CTRL, value=letter, raw=key_str, **flags)
        if flags['is_alt'] and (base in SPECIAL_KEYS or len(base) == 1):
            return KeyEvent(key_type=KeyType.ALT, value=base, raw=key_str, is_sequence=True, **flags)
        if flags['is_shift'] and base in SPECIAL_KEYS:
            return KeyEvent(key_type=KeyType.SHIFT_SPECIAL, value=base, raw=key_str, is_sequence=True, **flags)
        if len(base) == 1 and not mods:
            return KeyEvent(key_type=KeyType.REGULAR, value=base, raw=base)
        # Unknown tokens still reach the editor as named keys
        return KeyEvent(key_type=KeyType.SPECIAL, value=base, raw=key_str, is_sequence=True, **flags)

    def _parse_raw(self, key_str: str) -> KeyEvent:
        if len(key_str) == 1:
            o = ord(key_str)
            if o == 27:
                return KeyEvent(key_type=KeyType.SPECIAL, value='escape', raw=key_str)
            if o in (8, 127):
                return KeyEvent(key_type=KeyType.SPECIAL, value='backspace', raw=key_str)
            if key_str in ('\n', '\r'):
                return KeyEvent(key_type=KeyType.SPECIAL, value='enter', raw=key_str)
            if key_str == '\t':
                return KeyEvent(key_type=KeyType.REGULAR, value='\t', raw=key_str)
            if 1 <= o <= 26:  # Ctrl-A .. Ctrl-Z
                return KeyEvent(key_type=KeyType.CTRL, value=chr(ord('a') + o - 1), raw=key_str, is_ctrl=True)
        return KeyEvent(key_type=KeyType.REGULAR, value=key_str, raw=key_str)
