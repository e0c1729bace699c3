import logging
from typing import AbstractSet, List, Optional, Tuple

from asana_connector.config.connector_config import DEFAULT_PAGE_SIZE
from asana_connector.connectors.core.base.pagination.page_token import (
    PaginationToken,
    parse_page_token,
)
from asana_connector.connectors.core.interfaces.resource_syncer.iresource_syncer import (
    IResourceProvisioner,
)
from asana_connector.connectors.sources.asana.base import AsanaResourceSyncer
from asana_connector.connectors.sources.asana.resources import (
    RESOURCE_TYPE_USER,
    RESOURCE_TYPE_WORKSPACE,
    user_resource,
    workspace_resource,
)
from asana_connector.connectors.sources.asana.roles import WORKSPACE_ROLES, workspace_role
from asana_connector.exceptions.connector_exceptions import PermissionDeniedError
from asana_connector.models.resource import (
    Entitlement,
    Grant,
    Resource,
    ResourceId,
    new_grant,
    new_permission_entitlement,
    parse_entitlement_slug,
)
from asana_connector.sources.external.asana.asana import AsanaDataSource

REINVITE_HINT = (
    "user does not have permission to add user to workspace "
    "or the user was previously removed from the workspace"
)


class WorkspaceSyncer(AsanaResourceSyncer, IResourceProvisioner):
    """Workspaces the token may administer, and their memberships.

    `allowed_workspaces` is the frozen result of connector validation; the
    syncer only reads it.
    """

    def __init__(
        self,
        data_source: AsanaDataSource,
        allowed_workspaces: AbstractSet[str],
        logger: Optional[logging.Logger] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        super().__init__(RESOURCE_TYPE_WORKSPACE, data_source, logger, page_size)
        self.allowed_workspaces = frozenset(allowed_workspaces)

    async def list(
        self, parent_resource_id: Optional[ResourceId], token: PaginationToken
    ) -> Tuple[List[Resource], str]:
        if not self.allowed_workspaces:
            return [], ""

        resources = []
        for workspace_id in sorted(self.allowed_workspaces):
            workspace = await self.data_source.get_workspace(workspace_id)
            resources.append(workspace_resource(workspace))
        return resources, ""

    async def entitlements(
        self, resource: Resource, token: PaginationToken
    ) -> Tuple[List[Entitlement], str]:
        entitlements = [
            new_permission_entitlement(
                resource,
                role,
                display_name=f"{resource.display_name} Workspace {role}",
                description=f"Role in {resource.display_name} Asana workspace",
                grantable_to=[RESOURCE_TYPE_USER],
            )
            for role in WORKSPACE_ROLES
        ]
        return entitlements, ""

    async def grants(
        self, resource: Resource, token: PaginationToken
    ) -> Tuple[List[Grant], str]:
        bag = parse_page_token(token.token, resource.id)
        workspace_id = resource.get_profile_string_value("workspace_id")

        page = await self.data_source.get_workspace_memberships(
            workspace_id, self.pagination(bag, token)
        )
        next_token = bag.advance(page.next_offset)

        grants = []
        for membership in page.data:
            role = workspace_role(membership)
            if role is None:
                self.logger.debug(
                    f"Workspace membership {membership.gid} in {workspace_id} has no role flag set, skipping"
                )
                continue
            principal = user_resource(membership.user, resource.id)
            grants.append(new_grant(resource, role, principal.id))

        return grants, next_token

    async def grant(self, principal: Resource, entitlement: Entitlement) -> List[Grant]:
        self.require_user_principal(principal.id, "grant")
        role = parse_entitlement_slug(entitlement.id)
        workspace_id = entitlement.resource.id.resource
        user_id = principal.id.resource

        try:
            await self.data_source.add_user_to_workspace(workspace_id, user_id)
        except PermissionDeniedError as e:
            raise PermissionDeniedError(
                f"{e.message}: {REINVITE_HINT}",
                e.status_code,
                e.url,
                e.details,
            ) from e

        self.logger.info(f"Added user {user_id} to workspace {workspace_id} ({role})")
        return [new_grant(entitlement.resource, role, principal.id, entitlement=entitlement)]

    async def revoke(self, grant: Grant) -> None:
        self.require_user_principal(grant.principal, "revoke")
        workspace_id = grant.entitlement.resource.id.resource
        user_id = grant.principal.resource

        await self.data_source.remove_user_from_workspace(workspace_id, user_id)
        self.logger.info(f"Removed user {user_id} from workspace {workspace_id}")
