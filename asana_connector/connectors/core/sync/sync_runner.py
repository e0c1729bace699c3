"""
Sync runner
Walks every resource syncer of a connector the way the sync runtime does:
root resources first, then child resource types under each parent, then
entitlements and grants of every resource, following continuation tokens
until each listing reports it is done.
"""

import logging
from typing import Awaitable, Callable, Dict, List, Optional, Tuple, TypeVar

from pydantic import BaseModel, Field

from asana_connector.connectors.core.base.pagination.page_token import PaginationToken
from asana_connector.connectors.core.interfaces.resource_syncer.iresource_syncer import (
    IResourceProvisioner,
    IResourceSyncer,
)
from asana_connector.exceptions.connector_exceptions import (
    NotImplementedForResourceTypeError,
    PaginationLimitError,
)
from asana_connector.models.resource import Entitlement, Grant, Resource

T = TypeVar("T")

# Guards against an upstream that never stops returning a next page
MAX_PAGES_PER_LISTING = 10_000


class SyncSnapshot(BaseModel):
    resources: List[Resource] = Field(default_factory=list)
    entitlements: List[Entitlement] = Field(default_factory=list)
    grants: List[Grant] = Field(default_factory=list)


class SyncRunner:
    def __init__(self, syncers: List[IResourceSyncer], logger: Optional[logging.Logger] = None) -> None:
        self.syncers: Dict[str, IResourceSyncer] = {s.resource_type().id: s for s in syncers}
        self.logger = logger or logging.getLogger(__name__)

    def provisioner(self, resource_type: str, operation: str) -> IResourceProvisioner:
        syncer = self.syncers.get(resource_type)
        if not isinstance(syncer, IResourceProvisioner):
            raise NotImplementedForResourceTypeError(operation, resource_type)
        return syncer

    async def drain(
        self,
        fetch: Callable[[PaginationToken], Awaitable[Tuple[List[T], str]]],
        label: str,
    ) -> List[T]:
        """Call `fetch` until it returns an empty continuation token."""
        items: List[T] = []
        token = ""
        for page_number in range(1, MAX_PAGES_PER_LISTING + 1):
            page, token = await fetch(PaginationToken(token=token))
            items.extend(page)
            self.logger.debug(f"{label}: page {page_number} returned {len(page)} items")
            if not token:
                return items
        raise PaginationLimitError(label, MAX_PAGES_PER_LISTING)

    async def list_resources(self) -> List[Resource]:
        resources: List[Resource] = []
        pending: List[Resource] = []

        for resource_type, syncer in self.syncers.items():
            roots = await self.drain(lambda t, s=syncer: s.list(None, t), f"list {resource_type}")
            pending.extend(roots)

        while pending:
            parent = pending.pop(0)
            resources.append(parent)
            for child_type in parent.child_resource_types:
                child_syncer = self.syncers.get(child_type)
                if child_syncer is None:
                    continue
                children = await self.drain(
                    lambda t, s=child_syncer, p=parent: s.list(p.id, t),
                    f"list {child_type} under {parent.id}",
                )
                pending.extend(children)

        return resources

    async def run(self) -> SyncSnapshot:
        snapshot = SyncSnapshot()
        self.logger.info("Starting resource sync")

        resources = await self.list_resources()
        # A user listed under several workspaces is one resource
        seen = set()
        for resource in resources:
            key = str(resource.id)
            if key in seen:
                continue
            seen.add(key)
            snapshot.resources.append(resource)

        for resource in snapshot.resources:
            syncer = self.syncers[resource.id.resource_type]
            snapshot.entitlements.extend(
                await self.drain(lambda t, s=syncer, r=resource: s.entitlements(r, t), f"entitlements {resource.id}")
            )
            snapshot.grants.extend(
                await self.drain(lambda t, s=syncer, r=resource: s.grants(r, t), f"grants {resource.id}")
            )

        self.logger.info(
            f"Resource sync finished: {len(snapshot.resources)} resources, "
            f"{len(snapshot.entitlements)} entitlements, {len(snapshot.grants)} grants"
        )
        return snapshot
