"""
Resilient HTTP transport.
Optional rate limiting and retry with backoff, applied below the HTTP client
so that callers only ever see the final response or the final network error.
"""

import asyncio
import logging
import random
from http import HTTPStatus
from typing import Optional

import httpx
from aiolimiter import AsyncLimiter

RETRYABLE_NETWORK_ERRORS = (
    httpx.TimeoutException,
    httpx.ConnectError,
    httpx.ReadError,
    httpx.RemoteProtocolError,
)


class ResilientHTTPTransport(httpx.AsyncHTTPTransport):
    """
    HTTP transport with optional rate limiting and retry logic.

    - The rate limiter is acquired once per logical request, not per attempt
    - Retries on 429, 5xx and network errors
    - Honours a numeric Retry-After header (Asana sends seconds on 429)
    - Otherwise backs off exponentially with full jitter
    """

    def __init__(
        self,
        rate_limiter: Optional[AsyncLimiter] = None,
        max_retries: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 32.0,
        logger: Optional[logging.Logger] = None,
        **kwargs
    ) -> None:
        if not isinstance(max_retries, int) or max_retries < 0:
            raise ValueError(f"max_retries must be a non-negative integer, got: {max_retries}")
        if base_delay < 0 or max_delay < 0:
            raise ValueError(f"delays must be non-negative, got base={base_delay} max={max_delay}")
        if max_delay < base_delay:
            raise ValueError(f"max_delay ({max_delay}) must be >= base_delay ({base_delay})")

        super().__init__(**kwargs)
        self.rate_limiter = rate_limiter
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.logger = logger or logging.getLogger(__name__)

    @staticmethod
    def is_retryable_status(status_code: int) -> bool:
        return (
            status_code == HTTPStatus.TOO_MANY_REQUESTS or
            HTTPStatus.INTERNAL_SERVER_ERROR <= status_code <= HTTPStatus.NETWORK_AUTHENTICATION_REQUIRED
        )

    def calculate_delay(self, response: Optional[httpx.Response], attempt: int) -> float:
        """Retry-After wins when it is a number of seconds, else jittered backoff."""
        if response is not None:
            retry_after = response.headers.get("Retry-After")
            if retry_after:
                try:
                    return float(retry_after)
                except ValueError:
                    # HTTP-date form, fall back to backoff
                    pass

        exponential = min(self.max_delay, self.base_delay * (2 ** attempt))
        return random.uniform(0, exponential)

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        if self.rate_limiter:
            await self.rate_limiter.acquire()

        last_exception: Optional[Exception] = None
        for attempt in range(self.max_retries + 1):
            try:
                response = await super().handle_async_request(request)
            except RETRYABLE_NETWORK_ERRORS as e:
                last_exception = e
                if attempt >= self.max_retries:
                    break
                delay = self.calculate_delay(None, attempt)
                self.logger.warning(
                    "Network error %s on %s (attempt %d/%d), retrying in %.2fs",
                    type(e).__name__, request.url.path, attempt + 1, self.max_retries + 1, delay,
                )
                await asyncio.sleep(delay)
                continue

            if attempt >= self.max_retries or not self.is_retryable_status(response.status_code):
                return response

            delay = self.calculate_delay(response, attempt)
            self.logger.warning(
                "HTTP %d on %s (attempt %d/%d), retrying in %.2fs",
                response.status_code, request.url.path, attempt + 1, self.max_retries + 1, delay,
            )
            await response.aclose()
            await asyncio.sleep(delay)

        self.logger.error("Request to %s failed after %d attempts", request.url.path, self.max_retries + 1)
        raise last_exception
