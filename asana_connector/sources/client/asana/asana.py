import logging
from typing import Optional

import httpx  # type: ignore
from aiolimiter import AsyncLimiter
from pydantic import BaseModel, ConfigDict, Field  # type: ignore

from asana_connector.config.connector_config import DEFAULT_BASE_URL, AsanaConnectorConfig
from asana_connector.sources.client.http.http_client import HTTPClient
from asana_connector.sources.client.iclient import IClient


class AsanaRESTClientViaToken(HTTPClient):
    """Asana REST client via Personal Access Token (PAT) or OAuth access token

    Sends `Authorization: Bearer <token>` and `Accept: application/json`
    on every request.

    Args:
        token: Asana access token
        base_url: Asana REST API root
    """

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        rate_limiter: Optional[AsyncLimiter] = None,
        max_retries: int = 0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        super().__init__(
            token,
            "Bearer",
            timeout=timeout,
            rate_limiter=rate_limiter,
            max_retries=max_retries,
            transport=transport,
            logger=logger,
        )
        self.base_url = base_url.rstrip("/")
        self.headers.update({
            "Accept": "application/json",
        })

    def get_base_url(self) -> str:
        """Get the base URL"""
        return self.base_url


class AsanaTokenConfig(BaseModel):
    """Configuration for Asana REST client via token

    Args:
        access_token: Personal access token from the Asana developer console
        base_url: Asana REST API root
        timeout: Request timeout in seconds
        max_retries: Transport-level retries, 0 disables retrying
        rate_limit_per_second: Optional client-side rate cap
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    access_token: str
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 30.0
    max_retries: int = 0
    rate_limit_per_second: Optional[float] = None
    transport: Optional[httpx.AsyncBaseTransport] = Field(default=None, exclude=True)

    def create_client(self, logger: Optional[logging.Logger] = None) -> AsanaRESTClientViaToken:
        """Create an Asana REST client"""
        rate_limiter = None
        if self.rate_limit_per_second:
            rate_limiter = AsyncLimiter(self.rate_limit_per_second, time_period=1)
        return AsanaRESTClientViaToken(
            self.access_token,
            self.base_url,
            timeout=self.timeout,
            rate_limiter=rate_limiter,
            max_retries=self.max_retries,
            transport=self.transport,
            logger=logger,
        )


class AsanaClient(IClient):
    """Builder class for Asana clients"""

    def __init__(self, client: AsanaRESTClientViaToken) -> None:
        """Initialize with an Asana REST client object"""
        self.client = client

    def get_client(self) -> AsanaRESTClientViaToken:
        """Return the Asana REST client object"""
        return self.client

    def get_base_url(self) -> str:
        """Get the base URL"""
        return self.client.get_base_url()

    async def close(self) -> None:
        await self.client.close()

    @classmethod
    def build_with_config(
        cls,
        config: AsanaTokenConfig,
        logger: Optional[logging.Logger] = None,
    ) -> "AsanaClient":
        """Build AsanaClient with configuration
        Args:
            config: AsanaTokenConfig instance
            logger: Optional logger passed down to the HTTP layer
        Returns:
            AsanaClient instance
        """
        return cls(config.create_client(logger))

    @classmethod
    def build_from_connector_config(
        cls,
        config: AsanaConnectorConfig,
        logger: Optional[logging.Logger] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "AsanaClient":
        """Build AsanaClient from the connector's runtime configuration"""
        token_config = AsanaTokenConfig(
            access_token=config.token,
            base_url=config.base_url,
            timeout=config.timeout,
            max_retries=config.max_retries,
            rate_limit_per_second=config.rate_limit_per_second,
            transport=transport,
        )
        return cls.build_with_config(token_config, logger)
