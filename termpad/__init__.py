"""termpad - a small modal terminal text editor."""

from .buffer import TextBuffer, Mark
from .viewport import ViewPort
from .collection import BufferCollection
from .actions import ActionController, Mode

__all__ = [
    'TextBuffer',
    'Mark',
    'ViewPort',
    'BufferCollection',
    'ActionController',
    'Mode',
]
