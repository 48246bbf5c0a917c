"""Exception hierarchy shared by the store, the tracker and the API layer."""


class TrackerError(Exception):
    """Base class for all time tracker errors.

    Attributes:
        status_code: HTTP status the API layer reports for this error
    """

    status_code = 500


class InvalidInputError(TrackerError, ValueError):
    """A required field is missing or malformed."""

    status_code = 400


class ConflictError(TrackerError):
    """A unique constraint (project name) would be violated."""

    status_code = 400


class NotFoundError(TrackerError, LookupError):
    """The referenced project or entry does not exist."""

    status_code = 404


class NoActiveTimerError(TrackerError):
    """Stop was requested while no entry is running."""

    status_code = 400


class StorageError(TrackerError):
    """Reading or writing the backing files failed."""

    status_code = 500
