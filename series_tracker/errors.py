from __future__ import annotations


class TrackerError(Exception):
    """Base class for every recoverable failure in the tracker."""


class InputValidationError(TrackerError, ValueError):
    pass


class IndexOutOfRange(TrackerError, IndexError):
    pass


class PersistenceLoadError(TrackerError):
    pass


class PersistenceSaveError(TrackerError):
    pass
