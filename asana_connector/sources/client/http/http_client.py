import logging
import time
from typing import Optional
from urllib.parse import quote

import httpx  # type: ignore
from aiolimiter import AsyncLimiter

from asana_connector.sources.client.http.http_request import HTTPRequest
from asana_connector.sources.client.http.http_response import HTTPResponse
from asana_connector.sources.client.http.resilient_transport import ResilientHTTPTransport
from asana_connector.sources.client.iclient import IClient


def quote_path_param(value: object) -> str:
    """Percent-encode a value substituted into a URL path.

    Path params are opaque ids: a "/" or a dot segment inside one must not
    change which endpoint is called.
    """
    return quote(str(value), safe="").replace(".", "%2E")


class HTTPClient(IClient):
    """
    HTTP client with authentication and optional resilience features.

    Features:
    - Automatic Authorization header injection
    - Structured debug logging of every request (method, url, status, elapsed)
    - Optional retry logic with exponential backoff
    - Optional rate limiting

    Retries are disabled by default: a failed request surfaces to the caller
    as-is and any backoff policy is configured explicitly.

    Args:
        token: Authentication token
        token_type: Token type for Authorization header (default: "Bearer")
        timeout: Request timeout in seconds (default: 30.0)
        follow_redirects: Whether to follow HTTP redirects (default: True)
        rate_limiter: Optional AsyncLimiter applied once per logical request
        max_retries: Number of retry attempts (default: 0 = disabled)
        base_delay: Initial delay for exponential backoff in seconds (default: 1.0)
        max_delay: Maximum delay cap in seconds (default: 32.0)
        transport: Optional transport override, used instead of the built-in one
        logger: Optional logger instance
    """
    def __init__(
        self,
        token: str,
        token_type: str = "Bearer",
        timeout: float = 30.0,
        follow_redirects: bool = True,
        rate_limiter: Optional[AsyncLimiter] = None,
        max_retries: int = 0,
        base_delay: float = 1.0,
        max_delay: float = 32.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: Optional[logging.Logger] = None
    ) -> None:
        self.headers = {
            "Authorization": f"{token_type} {token}",
        }
        self.timeout = timeout
        self.follow_redirects = follow_redirects
        self.rate_limiter = rate_limiter
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.transport = transport
        self.logger = logger or logging.getLogger(__name__)
        self.client: Optional[httpx.AsyncClient] = None

    def get_client(self) -> "HTTPClient":
        """Get the client"""
        return self

    def _build_transport(self) -> Optional[httpx.AsyncBaseTransport]:
        if self.transport is not None:
            return self.transport
        if self.rate_limiter is not None or self.max_retries > 0:
            return ResilientHTTPTransport(
                rate_limiter=self.rate_limiter,
                max_retries=self.max_retries,
                base_delay=self.base_delay,
                max_delay=self.max_delay,
                logger=self.logger
            )
        return None

    async def _ensure_client(self) -> httpx.AsyncClient:
        """Ensure client is created and available."""
        if self.client is None:
            self.client = httpx.AsyncClient(
                transport=self._build_transport(),
                timeout=self.timeout,
                follow_redirects=self.follow_redirects
            )
        return self.client

    async def execute(self, request: HTTPRequest, **kwargs) -> HTTPResponse:
        """Execute an HTTP request
        Args:
            request: The HTTP request to execute
            kwargs: Additional keyword arguments to pass to the request
        Returns:
            A HTTPResponse object containing the response from the server
        Raises:
            httpx.TransportError: if the request could not be sent
        """
        url = request.url.format(**{k: quote_path_param(v) for k, v in request.path_params.items()})
        client = await self._ensure_client()

        # Request headers take precedence over client headers
        merged_headers = {**self.headers, **request.headers}
        request_kwargs = {
            "params": request.query_params,
            "headers": merged_headers,
            **kwargs
        }

        if isinstance(request.body, dict):
            request_kwargs["json"] = request.body
        elif isinstance(request.body, bytes):
            request_kwargs["content"] = request.body

        started = time.monotonic()
        response = await client.request(request.method, url, **request_kwargs)
        elapsed_ms = (time.monotonic() - started) * 1000
        self.logger.debug(
            "%s %s -> %d in %.1fms",
            request.method,
            response.request.url,
            response.status_code,
            elapsed_ms,
            extra={
                "http_method": request.method,
                "http_url": str(response.request.url),
                "http_status": response.status_code,
                "elapsed_ms": round(elapsed_ms, 1),
            },
        )
        return HTTPResponse(response)

    async def close(self) -> None:
        """Close the client"""
        if self.client:
            await self.client.aclose()
            self.client = None

    async def __aenter__(self) -> "HTTPClient":
        """Async context manager entry"""
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit"""
        await self.close()
