"""Asana client error classes.

Every failure the client can raise derives from :class:`AsanaError`. The
``str()`` of each error is its standalone message. :meth:`AsanaError.with_context`
gives the operation-prefixed form shown to tool callers.
"""

from typing import Optional

MISSING_TOKEN_MESSAGE = "ASANA_TOKEN environment variable is not set"
INVALID_TOKEN_MESSAGE = "invalid token format"


class AsanaError(Exception):
    """Base exception for Asana client errors.

    Attributes:
        message: Bare error detail without the kind prefix
        kind: Short machine-readable error kind
        context: Operation that failed, attached at the tool boundary
    """

    kind = "asana"
    display_template = "{message}"
    context_template = "{context}: {message}"

    def __init__(self, message: str):
        self.message = message
        self.context: Optional[str] = None
        super().__init__(self.display_template.format(message=message))

    def describe(self) -> str:
        """Return the context-prefixed message when a context was attached."""
        if self.context:
            return self.with_context(self.context)
        return str(self)

    def with_context(self, context: str) -> str:
        """Return the message prefixed by the failing operation's context."""
        return self.context_template.format(context=context, message=self.message)


class ConfigurationError(AsanaError):
    """Raised when the API token is missing or unusable.

    This error is fatal at startup and never retryable.
    """

    kind = "configuration"

    def __init__(self, message: str = MISSING_TOKEN_MESSAGE):
        super().__init__(message)

    @classmethod
    def missing_token(cls) -> "ConfigurationError":
        return cls(MISSING_TOKEN_MESSAGE)

    @classmethod
    def invalid_token(cls) -> "ConfigurationError":
        return cls(INVALID_TOKEN_MESSAGE)

    def with_context(self, context: str) -> str:
        if self.message == MISSING_TOKEN_MESSAGE:
            return f"{context}: ASANA_TOKEN environment variable not set"
        return f"{context}: {self.message}"


class NotFoundError(AsanaError):
    """Raised when the API answers 404."""

    kind = "not_found"
    display_template = "resource not found: {message}"
    context_template = "{context}: resource not found - {message}"


class RemoteApiError(AsanaError):
    """Raised for any non-2xx answer other than 404.

    Attributes:
        status_code: HTTP status returned by the API, when known
    """

    kind = "remote_api"
    display_template = "API error: {message}"
    context_template = "{context}: API error - {message}"

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class TransportError(AsanaError):
    """Raised when the request never produced an HTTP response."""

    kind = "transport"
    display_template = "HTTP error: {message}"
    context_template = "{context}: HTTP error - {message}"

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.original_error = original_error
        super().__init__(message)


class ParseError(AsanaError):
    """Raised when a 2xx body does not match the expected envelope."""

    kind = "parse"
    display_template = "failed to parse response: {message}"
    context_template = "{context}: failed to parse response - {message}"
