"""GitHub REST API access."""

from .client import GitHubClient
from .retry import ProcessingRetryPolicy

__all__ = ["GitHubClient", "ProcessingRetryPolicy"]
