"""
Error kinds shared across the console.

Only a handful of kinds exist on purpose:
- TransportError: anything that went wrong talking to the catalog
- ValidationGap: an edit the workflow refuses (e.g. removing the default language)
- StaleSession: a persisted token past its expiry
- NotAuthenticated: a catalog call attempted without a token
- WorkflowError: a review transition requested from the wrong state
"""

from __future__ import annotations

from typing import Optional


class EventReviewError(Exception):
    """Base class for all errors raised by eventreview."""


class TransportError(EventReviewError):
    """
    Network failure or non-2xx response from the catalog.

    The status code is None when no response was received at all.
    4xx and 5xx are deliberately not told apart.
    """

    def __init__(self, status_code: Optional[int], message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.status_code is None:
            return f"API Error: {self.message}"
        return f"API Error: {self.status_code} {self.message}"


class ValidationGap(EventReviewError):
    """An edit that must be stopped before it ever reaches the catalog."""


class StaleSession(EventReviewError):
    """The stored token expired while the console was not running."""


class NotAuthenticated(EventReviewError):
    """No bearer token is available for a catalog call."""


class WorkflowError(EventReviewError):
    """A review workflow operation was invoked in a state that does not allow it."""
