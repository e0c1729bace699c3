import logging
from typing import List, Optional, Tuple

from asana_connector.config.connector_config import DEFAULT_PAGE_SIZE
from asana_connector.connectors.core.base.pagination.page_token import (
    PaginationToken,
    parse_page_token,
)
from asana_connector.connectors.sources.asana.base import AsanaResourceSyncer
from asana_connector.connectors.sources.asana.resources import (
    RESOURCE_TYPE_USER,
    new_resource_id,
    user_resource,
)
from asana_connector.models.resource import Entitlement, Grant, Resource, ResourceId
from asana_connector.sources.external.asana.asana import AsanaDataSource


class UserSyncer(AsanaResourceSyncer):
    """Users of a workspace. Users carry no entitlements of their own."""

    def __init__(
        self,
        data_source: AsanaDataSource,
        logger: Optional[logging.Logger] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        super().__init__(RESOURCE_TYPE_USER, data_source, logger, page_size)

    async def list(
        self, parent_resource_id: Optional[ResourceId], token: PaginationToken
    ) -> Tuple[List[Resource], str]:
        if parent_resource_id is None:
            return [], ""

        bag = parse_page_token(token.token, new_resource_id(RESOURCE_TYPE_USER, ""))
        page = await self.data_source.get_users(
            parent_resource_id.resource, self.pagination(bag, token)
        )
        next_token = bag.advance(page.next_offset)

        resources = [user_resource(user, parent_resource_id) for user in page.data]
        return resources, next_token

    async def entitlements(
        self, resource: Resource, token: PaginationToken
    ) -> Tuple[List[Entitlement], str]:
        return [], ""

    async def grants(
        self, resource: Resource, token: PaginationToken
    ) -> Tuple[List[Grant], str]:
        return [], ""
