"""Errors raised by the parking services.

Every error carries a user-facing message; the HTTP layer renders it in the
response envelope and picks the status code from ``status_code``.
"""


class ParkingError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ParkingError):
    """Missing or malformed identifiers, rejected before any write."""
    status_code = 400


class NotFoundError(ParkingError):
    status_code = 404


class NoAvailabilityError(ParkingError):
    status_code = 409


class NotActiveError(ParkingError):
    status_code = 409


class ConflictError(ParkingError):
    status_code = 409


class PermissionDeniedError(ParkingError):
    status_code = 403


class StorageError(ParkingError):
    """The database rejected a transaction. Nothing from it was kept."""
    status_code = 500
