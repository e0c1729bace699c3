import asyncio
import logging
from typing import FrozenSet, List, Optional

import httpx  # type: ignore

from asana_connector.config.connector_config import DEFAULT_PAGE_SIZE, AsanaConnectorConfig
from asana_connector.connectors.core.interfaces.resource_syncer.iresource_syncer import (
    IResourceSyncer,
)
from asana_connector.connectors.sources.asana.team import TeamSyncer
from asana_connector.connectors.sources.asana.user import UserSyncer
from asana_connector.connectors.sources.asana.workspace import WorkspaceSyncer
from asana_connector.exceptions.connector_exceptions import (
    AsanaConnectorError,
    AuthenticationError,
    ResponseDecodeError,
)
from asana_connector.models.resource import ConnectorMetadata
from asana_connector.sources.client.asana.asana import AsanaClient
from asana_connector.sources.external.asana.asana import AsanaDataSource


class AsanaConnector:
    """
    Access connector for Asana.
    Exposes workspaces, teams and users as a resource graph, with workspace
    and team memberships as grants.

    `validate()` must run before workspaces can be listed: it discovers the
    workspaces the token is a full (non-guest) member of. That set is
    published once and handed read-only to the workspace syncer.
    """

    def __init__(
        self,
        data_source: AsanaDataSource,
        logger: Optional[logging.Logger] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        self.data_source = data_source
        self.logger = logger or logging.getLogger(__name__)
        self.page_size = page_size
        self._allowed_workspaces: Optional[FrozenSet[str]] = None
        self._validate_lock = asyncio.Lock()

    @classmethod
    def build_from_config(
        cls,
        config: AsanaConnectorConfig,
        logger: Optional[logging.Logger] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "AsanaConnector":
        logger = logger or logging.getLogger(__name__)
        client = AsanaClient.build_from_connector_config(config, logger, transport)
        return cls(AsanaDataSource(client, logger), logger, config.page_size)

    @property
    def allowed_workspaces(self) -> FrozenSet[str]:
        """Workspace gids discovered by validate(), empty before it ran"""
        return self._allowed_workspaces or frozenset()

    def metadata(self) -> ConnectorMetadata:
        return ConnectorMetadata(
            display_name="Asana",
            description="Asana workspaces, teams and users with their memberships",
        )

    async def validate(self) -> FrozenSet[str]:
        """Check the token and discover the workspaces it may manage.

        Raises:
            AuthenticationError: if the membership lookup fails
            ResponseDecodeError: if a membership carries no workspace gid
        """
        async with self._validate_lock:
            try:
                memberships = await self.data_source.auth_check()
            except (AsanaConnectorError, httpx.HTTPError) as e:
                self.logger.error(f"Asana authentication check failed: {e}")
                raise AuthenticationError(
                    f"asana-connector: failed to authenticate. Error: {e}"
                ) from e

            for membership in memberships:
                if not membership.workspace.gid:
                    raise ResponseDecodeError(
                        "Asana workspace membership is missing the workspace gid",
                        {"membership": membership.model_dump(exclude_none=True)},
                    )

            if self._allowed_workspaces is None:
                allowed = frozenset(
                    membership.workspace.gid
                    for membership in memberships
                    if not membership.is_guest
                )
                self._allowed_workspaces = allowed
                self.logger.info(
                    f"Asana token validated, {len(allowed)} of {len(memberships)} workspaces allowed"
                )
            return self._allowed_workspaces

    def resource_syncers(self) -> List[IResourceSyncer]:
        return [
            UserSyncer(self.data_source, self.logger, self.page_size),
            WorkspaceSyncer(self.data_source, self.allowed_workspaces, self.logger, self.page_size),
            TeamSyncer(self.data_source, self.logger, self.page_size),
        ]

    async def close(self) -> None:
        await self.data_source.close()

    async def __aenter__(self) -> "AsanaConnector":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
