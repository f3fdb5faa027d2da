"""
Error taxonomy for the identity core.

All errors are recoverable and raised to the immediate caller; the
transport layer decides how they are logged and rendered.
"""


class IdentityError(Exception):
    """Base class for identity core failures."""

    code = "identity_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(IdentityError):
    """Malformed input supplied by the caller."""

    code = "validation_error"


class ConflictError(IdentityError):
    """A uniqueness constraint would be violated."""

    code = "conflict"


class AuthError(IdentityError):
    """Bad credentials. Deliberately silent about which part was wrong."""

    code = "auth_error"


class NotFoundError(IdentityError):
    """Unknown user id or service name."""

    code = "not_found"
