from typing import Any

import httpx  # type: ignore


class HTTPResponse:
    """Thin wrapper over an httpx response, kept for diagnostics by callers."""

    def __init__(self, response: httpx.Response) -> None:
        self.response = response

    @property
    def status(self) -> int:
        return self.response.status_code

    @property
    def url(self) -> str:
        return str(self.response.url)

    @property
    def headers(self) -> httpx.Headers:
        """Case-insensitive response headers"""
        return self.response.headers

    def text(self) -> str:
        return self.response.text

    def json(self) -> Any:
        """Decode the body as JSON. Raises ValueError on malformed content."""
        return self.response.json()

    def __repr__(self) -> str:
        return f"HTTPResponse(status={self.status}, url={self.url!r})"
