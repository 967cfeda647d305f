"""Exceptions raised by dixedit."""

from typing import Optional


class DixError(Exception):
    """Base class for dixedit errors."""
    pass


class BoundedSearchError(DixError):
    """Raised when a walk runs past its distance bound without a match."""

    def __init__(self, message: str, start: Optional[int] = None, max_distance: Optional[int] = None):
        super().__init__(message)
        self.start = start
        self.max_distance = max_distance


class BarrierError(DixError):
    """Raised when an upward walk reaches the barrier element before the target."""

    def __init__(self, message: str, barrier: Optional[str] = None, offset: Optional[int] = None):
        super().__init__(message)
        self.barrier = barrier
        self.offset = offset


class MalformedTokenError(DixError):
    """Raised when the scanner hits markup that is not well-formed."""

    def __init__(self, message: str, offset: Optional[int] = None):
        super().__init__(message)
        self.offset = offset
