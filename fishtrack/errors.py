"""Exception types raised by the fishtrack pipeline and dashboard."""


class FishtrackError(Exception):
    """Base class for all fishtrack errors."""


class FetchError(FishtrackError):
    """The Fishtest API could not be reached or returned a non-2xx status."""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class DataLoadError(FishtrackError):
    """The dashboard could not load the snapshot or history file."""
