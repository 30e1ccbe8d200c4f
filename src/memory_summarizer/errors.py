"""Exception types used inside the summarizer.

None of these cross the public ``SummaryEngine`` API: they are raised where a
problem is detected and caught at the engine's task boundary or during
initialization, where they are logged.
"""

from __future__ import annotations


class SummarizerError(Exception):
    """Base class for summarizer failures."""


class ConfigurationError(SummarizerError):
    """The active provider configuration is missing or invalid."""


class AuthenticationError(SummarizerError):
    """The provider rejected the credentials (HTTP 401/403). Never retried."""

    def __init__(self, status: int, detail: str = "") -> None:
        super().__init__(f"HTTP {status}: {detail}" if detail else f"HTTP {status}")
        self.status = status
        self.detail = detail


class TransientNetworkError(SummarizerError):
    """A failure that may succeed on retry (overload, rate limit, connection)."""

    def __init__(self, detail: str, status: int | None = None) -> None:
        super().__init__(f"HTTP {status}: {detail}" if status is not None else detail)
        self.status = status
        self.detail = detail


class MalformedResponseError(SummarizerError):
    """The response body did not contain the expected text field."""
