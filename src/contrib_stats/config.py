"""Process configuration: API host, default organization and token."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, replace

from dotenv import dotenv_values

logger = logging.getLogger(__name__)

DEFAULT_API_PREFIX = "/api/v3"
DEFAULT_RETRY_INTERVAL = 1.0


@dataclass(frozen=True)
class Config:
    """Immutable settings handed to every client at construction time.

    Required values that are missing are kept as ``None``; requests made
    against them fail later with a ``RetrievalError``.
    """

    host: str | None
    default_org: str | None
    token: str | None
    api_prefix: str = DEFAULT_API_PREFIX
    processing_retry_interval: float = DEFAULT_RETRY_INTERVAL

    @property
    def api_base_url(self) -> str | None:
        if not self.host:
            return None
        return f"{self.host.rstrip('/')}{self.api_prefix.rstrip('/')}"

    @classmethod
    def from_env(
        cls,
        env_file: str | os.PathLike[str] | None = ".env",
        environ: Mapping[str, str] | None = None,
    ) -> Config:
        """Build a Config from a ``.env`` file overlaid by the real environment."""
        values: dict[str, str | None] = {}
        if env_file is not None and os.path.isfile(env_file):
            values.update(dotenv_values(env_file))
        values.update(os.environ if environ is None else environ)

        def _get(*keys: str) -> str | None:
            for key in keys:
                value = values.get(key)
                if value:
                    return value
            return None

        host = _get("GITHUB_HOST")
        default_org = _get("DEFAULT_ORG")
        token = _get("API_KEY", "GITHUB_TOKEN")
        for name, value in (("GITHUB_HOST", host), ("DEFAULT_ORG", default_org), ("API_KEY", token)):
            if value is None:
                logger.warning('Config key "%s" was not set', name)

        api_prefix = values.get("GITHUB_API_PREFIX")
        interval = _get("PROCESSING_RETRY_INTERVAL")
        return cls(
            host=host,
            default_org=default_org,
            token=token,
            api_prefix=DEFAULT_API_PREFIX if api_prefix is None else api_prefix,
            processing_retry_interval=float(interval) if interval else DEFAULT_RETRY_INTERVAL,
        )

    def with_overrides(self, **overrides: object) -> Config:
        """Return a copy with every non-None override applied."""
        fields = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **fields)
