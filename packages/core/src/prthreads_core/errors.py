"""Error taxonomy shared by every layer above the GitHub gateway.

PyGithub and subprocess failures are translated into these classes at the
boundary, so the CLI only has to know about PRThreadsError.
"""

from __future__ import annotations


class PRThreadsError(Exception):
    """Base class. ``hint`` holds suggested manual commands for the user."""

    def __init__(self, message: str, hint: str | None = None):
        super().__init__(message)
        self.message = message
        self.hint = hint


class LookupFailure(PRThreadsError):
    """No pull request (or review thread) could be found."""


class TransportFailure(PRThreadsError):
    """A REST or GraphQL call returned a non-success result."""

    def __init__(self, message: str, status: int | None = None, data=None, hint: str | None = None):
        super().__init__(message, hint=hint)
        self.status = status
        self.data = data


class PermissionFailure(TransportFailure):
    """The call was rejected for lack of access (usually repo write access)."""


class ParseFailure(PRThreadsError):
    """A response was not valid JSON or did not have the expected shape."""


class PreconditionFailure(PRThreadsError):
    """The requested action is not possible for this comment."""
