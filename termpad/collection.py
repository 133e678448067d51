"""Ordered set of open buffers with one active buffer."""

import logging
import os
from typing import Iterator, Optional

from . import storage
from .buffer import TextBuffer
from .errors import InvalidIndexError

logger = logging.getLogger(__name__)


class BufferCollection:
    """The open buffers, in open order, plus the index of the active one.

    ``current`` is None only while the collection is empty.
    """

    buffers: list[TextBuffer]
    current: Optional[int]

    def __init__(self):
        self.buffers = []
        self.current = None

    def __len__(self) -> int:
        return len(self.buffers)

    def __iter__(self) -> Iterator[TextBuffer]:
        return iter(self.buffers)

    @property
    def current_buffer(self) -> Optional[TextBuffer]:
        if self.current is None:
            return None
        return self.buffers[self.current]

    def add(self, buffer: TextBuffer) -> TextBuffer:
        self.buffers.append(buffer)
        self.current = len(self.buffers) - 1
        return buffer

    def open(self, file_path: Optional[str] = None) -> TextBuffer:
        """Open a buffer and make it current.

        An existing file is loaded; a missing one gives an empty buffer
        that will be written there on first save. Read errors propagate
        and leave the collection unchanged.
        """
        if file_path is not None and os.path.exists(file_path):
            buffer = TextBuffer.from_file(file_path)
        else:
            buffer = TextBuffer(file_path=file_path)
        logger.info("Opened buffer %s", buffer.display_name)
        return self.add(buffer)

    def create(self, file_path: str) -> TextBuffer:
        """Create an empty file on disk and open it."""
        storage.create_empty(file_path)
        return self.add(TextBuffer(file_path=file_path))

    def select(self, index: int) -> None:
        if not 0 <= index < len(self.buffers):
            raise InvalidIndexError(index, len(self.buffers))
        self.current = index

    def close(self, index: int) -> bool:
        """Remove a buffer, keeping ``current`` pointing at a live buffer.

        Returns:
            False if nothing was removed (last buffer, or bad index).
        """
        if len(self.buffers) <= 1 or not 0 <= index < len(self.buffers):
            return False
        removed = self.buffers.pop(index)
        if self.current == index:
            self.current = max(index - 1, 0)
        elif self.current is not None and self.current > index:
            self.current -= 1
        logger.info("Closed buffer %s", removed.display_name)
        return True

    def rename_or_associate(self, index: int, file_path: str) -> None:
        if not 0 <= index < len(self.buffers):
            raise InvalidIndexError(index, len(self.buffers))
        self.buffers[index].file_path = file_path

    def find_index(self, file_path: str) -> Optional[int]:
        target = os.path.abspath(file_path)
        for i, buffer in enumerate(self.buffers):
            if buffer.file_path is not None and os.path.abspath(buffer.file_path) == target:
                return i
        return None

    def modified_buffers(self) -> list[TextBuffer]:
        return [buffer for buffer in self.buffers if buffer.modified]
