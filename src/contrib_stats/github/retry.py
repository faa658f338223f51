"""Polling policy for endpoints the platform computes asynchronously."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

import httpx

from ..errors import RetrievalError

logger = logging.getLogger(__name__)

PROCESSING = 202


class ProcessingRetryPolicy:
    """Reissue a request while the server answers 202 Accepted.

    GitHub returns 202 when statistics exist but are still being computed.
    The request is repeated after ``interval`` seconds until any other status
    comes back. With ``max_attempts=None`` the loop never gives up; a bound
    turns exhaustion into a ``RetrievalError``.
    """

    def __init__(
        self,
        interval: float = 1.0,
        max_attempts: int | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if max_attempts is not None and max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.interval = interval
        self.max_attempts = max_attempts
        self._sleep = sleep

    async def run(self, send: Callable[[], Awaitable[httpx.Response]], endpoint: str) -> httpx.Response:
        attempts = 0
        while True:
            response = await send()
            attempts += 1
            if response.status_code != PROCESSING:
                return response
            if self.max_attempts is not None and attempts >= self.max_attempts:
                logger.warning("%s still processing after %d attempts", endpoint, attempts)
                raise RetrievalError(endpoint)
            logger.debug("%s is processing, retrying in %.1fs", endpoint, self.interval)
            await self._sleep(self.interval)
