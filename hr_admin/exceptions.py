"""Error taxonomy shared by the stores, the auth layer and the HTTP layer."""

from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    AUTHENTICATION = "authentication"


class HRAdminError(Exception):
    """Base class for every error raised by the data and auth layers."""

    kind: ErrorKind

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(HRAdminError):
    """Input is missing a field or carries a value the rules reject."""

    kind = ErrorKind.VALIDATION


class NotFoundError(HRAdminError):
    """No entity exists under the requested id."""

    kind = ErrorKind.NOT_FOUND


class ConflictError(HRAdminError):
    """A unique key is already taken."""

    kind = ErrorKind.CONFLICT


class AuthenticationError(HRAdminError):
    """Bad credentials, or a token that is malformed, forged or expired."""

    kind = ErrorKind.AUTHENTICATION
