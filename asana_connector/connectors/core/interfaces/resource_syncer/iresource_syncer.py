from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from asana_connector.connectors.core.base.pagination.page_token import PaginationToken
from asana_connector.models.resource import (
    Entitlement,
    Grant,
    Resource,
    ResourceId,
    ResourceType,
)


class IResourceSyncer(ABC):
    """Read side of one resource type, as driven by the sync runtime.

    Every listing call returns a page of results and the continuation token
    to pass back on the next call; an empty token means the listing is done.
    """

    @abstractmethod
    def resource_type(self) -> ResourceType:
        """The resource type this syncer produces"""

    @abstractmethod
    async def list(
        self, parent_resource_id: Optional[ResourceId], token: PaginationToken
    ) -> Tuple[List[Resource], str]:
        """List resources of this type, optionally scoped to a parent"""

    @abstractmethod
    async def entitlements(
        self, resource: Resource, token: PaginationToken
    ) -> Tuple[List[Entitlement], str]:
        """List the entitlements a resource offers"""

    @abstractmethod
    async def grants(
        self, resource: Resource, token: PaginationToken
    ) -> Tuple[List[Grant], str]:
        """List the grants of the entitlements a resource offers"""


class IResourceProvisioner(ABC):
    """Write side of a resource type that supports membership changes"""

    @abstractmethod
    async def grant(self, principal: Resource, entitlement: Entitlement) -> List[Grant]:
        """Assign an entitlement to a principal and return the resulting grants"""

    @abstractmethod
    async def revoke(self, grant: Grant) -> None:
        """Remove an existing grant"""
