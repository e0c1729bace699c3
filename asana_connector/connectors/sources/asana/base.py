import logging
from typing import Optional

from asana_connector.config.connector_config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from asana_connector.connectors.core.base.pagination.page_token import (
    PageTokenBag,
    PaginationToken,
)
from asana_connector.connectors.core.interfaces.resource_syncer.iresource_syncer import (
    IResourceSyncer,
)
from asana_connector.connectors.sources.asana.resources import RESOURCE_TYPE_USER
from asana_connector.exceptions.connector_exceptions import NotImplementedForResourceTypeError
from asana_connector.models.resource import ResourceId, ResourceType
from asana_connector.sources.external.asana.asana import AsanaDataSource
from asana_connector.sources.external.asana.models import PaginationParams


class AsanaResourceSyncer(IResourceSyncer):
    """Shared wiring of the Asana syncers: data source, logger, page size."""

    def __init__(
        self,
        resource_type: ResourceType,
        data_source: AsanaDataSource,
        logger: Optional[logging.Logger] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        self._resource_type = resource_type
        self.data_source = data_source
        self.logger = logger or logging.getLogger(__name__)
        self.page_size = page_size

    def resource_type(self) -> ResourceType:
        return self._resource_type

    def pagination(self, bag: PageTokenBag, token: PaginationToken) -> PaginationParams:
        limit = token.size if token.size > 0 else self.page_size
        return PaginationParams(limit=min(limit, MAX_PAGE_SIZE), offset=bag.current())

    @staticmethod
    def require_user_principal(principal_id: ResourceId, operation: str) -> None:
        if principal_id.resource_type != RESOURCE_TYPE_USER.id:
            raise NotImplementedForResourceTypeError(operation, principal_id.resource_type)
