"""
Error taxonomy for the stage map editor.

Index bookkeeping failures are programming errors and are raised loudly.
Failed form validation is not an error: it is reported through
ValidationResult (see stagemap.validation) and never mutates state.
"""

from typing import Optional


class StageMapError(Exception):
    """Base class for all stage map errors."""


class InvalidIndex(StageMapError, IndexError):
    """An index outside 0..count-1 was used to reference a stage."""

    def __init__(self, index, count: int):
        self.index = index
        self.count = count
        super().__init__(f"Stage index {index!r} out of range (stage count: {count})")


class AlreadyEditing(StageMapError):
    """A second edit session was requested while one is still open."""

    def __init__(self, editing_index: int, requested_index: Optional[int] = None):
        self.editing_index = editing_index
        self.requested_index = requested_index
        super().__init__(
            f"Cannot edit stage {requested_index}: stage {editing_index} is already being edited"
        )


class NotEditing(StageMapError):
    """The edit session addressed is not the one that is open."""

    def __init__(self, index: int, editing_index: Optional[int]):
        self.index = index
        self.editing_index = editing_index
        if editing_index is None:
            message = f"Stage {index} is not being edited (no edit session open)"
        else:
            message = f"Stage {index} is not being edited (stage {editing_index} is)"
        super().__init__(message)
