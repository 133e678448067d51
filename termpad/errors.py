"""Error types shared by the buffer collection and the action flows."""

from enum import Enum


class FlowError(Enum):
    """Validation errors an action flow can raise on completion.

    These never leave the flow: they are shown in place of the overlay
    until the user dismisses them with Enter or Space.
    """
    FILE_NOT_FOUND = "File not found"
    FILE_EXISTS = "File already exists"
    CANNOT_CLOSE_LAST = "Cannot close last buffer"

    @property
    def message(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value


class InvalidIndexError(IndexError):
    """Raised when a buffer index is outside the collection."""

    def __init__(self, index: int, size: int):
        super().__init__(f"buffer index {index} out of range for {size} buffer(s)")
        self.index = index
        self.size = size
