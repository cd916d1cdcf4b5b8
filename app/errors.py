"""Error taxonomy shared by the stores and the HTTP layer."""

from typing import Optional


class JokesAPIError(Exception):
    """Base class for every error surfaced to API callers."""

    status_code = 500
    default_message = "Internal server error."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthorized(JokesAPIError):
    """The presented API key is missing, malformed or unknown."""

    status_code = 403
    default_message = "Invalid or missing API key."


class ValidationError(JokesAPIError):
    status_code = 400
    default_message = "Missing or empty required field."


class NotFound(JokesAPIError):
    status_code = 404
    default_message = "Not found."


class EmptyCollection(JokesAPIError):
    """A random pick was requested from an empty collection."""

    status_code = 404
    default_message = "No jokes available. Add some first!"


class InternalFault(JokesAPIError):
    pass
