"""Exception types raised by contrib-stats."""

from __future__ import annotations


class ContribStatsError(Exception):
    """Base class for all contrib-stats errors."""


class RetrievalError(ContribStatsError):
    """A GET failed: transport error or an unexpected status code."""

    def __init__(self, endpoint: str) -> None:
        super().__init__(f"Failed to retrieve data from {endpoint}")
        self.endpoint = endpoint


class PostError(ContribStatsError):
    """A POST failed: transport error or a status other than 201."""

    def __init__(self, endpoint: str, status_code: int | None = None) -> None:
        detail = f" (HTTP {status_code})" if status_code is not None else ""
        super().__init__(f"Failed to post data to {endpoint}{detail}")
        self.endpoint = endpoint
        self.status_code = status_code
