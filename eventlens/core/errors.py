"""Error kinds raised by the service layer.

Every failure that reaches a caller is one of these. Routes never build
HTTP errors from backend exceptions directly; the handler registered in
``eventlens.main`` maps ``AppError.status_code`` onto the response.
"""


class AppError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class Unauthorized(AppError):
    """Actor lacks the required relationship to the resource."""

    status_code = 401


class NotFound(AppError):
    """Referenced entity is absent."""

    status_code = 404


class InvalidInput(AppError):
    """Malformed or semantically invalid request."""

    status_code = 400


class PersistenceError(AppError):
    """Durable store write failed."""

    status_code = 500


class ExternalServiceError(AppError):
    """Face registry or delivery channel failed."""

    status_code = 502
