import os
from typing import Optional

import dotenv
from pydantic import BaseModel, Field, field_validator  # type: ignore

DEFAULT_BASE_URL = "https://app.asana.com/api/1.0"
DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100


class AsanaConnectorConfig(BaseModel):
    """Runtime configuration of the Asana connector.

    Args:
        token: Asana personal access token or OAuth access token (required)
        base_url: Asana REST API root
        page_size: Page size sent as `limit` on every list call (Asana caps it at 100)
        timeout: Per-request timeout in seconds
        max_retries: Transport-level retries on 429/5xx/network errors, 0 disables retrying
        rate_limit_per_second: Optional client-side request rate cap
    """

    token: str = Field(..., description="Asana API token")
    base_url: str = Field(default=DEFAULT_BASE_URL, description="Asana REST API base URL")
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)
    timeout: float = Field(default=30.0, gt=0)
    max_retries: int = Field(default=0, ge=0)
    rate_limit_per_second: Optional[float] = Field(default=None, gt=0)

    @field_validator("token")
    @classmethod
    def validate_token(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("token is required")
        return v.strip()

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        return v.rstrip("/")

    @classmethod
    def from_env(cls, env_file: Optional[str] = None, **overrides) -> "AsanaConnectorConfig":
        """Build the configuration from ASANA_* environment variables.

        A `.env` file is loaded first when present; explicit keyword overrides
        win over the environment.
        """
        dotenv.load_dotenv(env_file)

        values = {
            "token": os.getenv("ASANA_TOKEN", ""),
            "base_url": os.getenv("ASANA_BASE_URL"),
            "page_size": os.getenv("ASANA_PAGE_SIZE"),
            "timeout": os.getenv("ASANA_TIMEOUT"),
            "max_retries": os.getenv("ASANA_MAX_RETRIES"),
            "rate_limit_per_second": os.getenv("ASANA_RATE_LIMIT"),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**{k: v for k, v in values.items() if v is not None})
