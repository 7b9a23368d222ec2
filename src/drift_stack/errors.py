"""
Errors
======

Exception hierarchy for frame stack processing.

Every failure is terminal for the current invocation: nothing retries,
and the CLI reports the error and exits without writing output.
"""


class DriftStackError(Exception):
    """Base class for all frame stack processing failures."""
    pass


class FrameIOError(DriftStackError):
    """Raised when a file is missing, unreadable or shorter than expected."""
    pass


class FrameIndexError(DriftStackError, IndexError):
    """Raised when a frame index is outside the stack."""
    pass


class EmptyAccumulationError(DriftStackError):
    """Raised when an accumulation pass finished without a single frame."""
    pass


class GeometryMismatchError(DriftStackError):
    """Raised when frame dimensions disagree with the data or the request."""
    pass


class DriftRecordError(DriftStackError):
    """Raised when drift records cannot be stored or are out of order."""
    pass
