"""Domain errors raised by the service layer.

Routers translate these into HTTP responses; see ``status_code`` on each class.
"""


class TimesheetError(Exception):
    """Base class for all domain errors."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(TimesheetError):
    """Missing or malformed input."""

    status_code = 422


class NotFoundError(TimesheetError):
    """Referenced invoice or time entry doesn't exist."""

    status_code = 404


class Unauthorized(TimesheetError):
    """Caller is not the owner or lacks the required role."""

    status_code = 403


class InvalidTransition(TimesheetError):
    """Lifecycle guard violated."""

    status_code = 409


class NoEntriesFound(TimesheetError):
    """Aggregation found nothing to invoice."""

    status_code = 400


class StorageError(TimesheetError):
    """Storage layer failure (connectivity, constraint violation)."""

    status_code = 500
