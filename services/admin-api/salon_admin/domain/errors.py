"""Failure types raised by the admin workflows."""

from __future__ import annotations


class UpstreamError(Exception):
    """An identity or table call to the platform failed.

    The message is the platform's own error text and is surfaced to callers
    verbatim.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ProfileNotFoundError(LookupError):
    """No profile row exists for the requested account id."""
