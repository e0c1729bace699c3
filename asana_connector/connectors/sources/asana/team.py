import logging
from typing import List, Optional, Tuple

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
    RESOURCE_TYPE_TEAM,
    RESOURCE_TYPE_USER,
    new_resource_id,
    team_resource,
    user_resource,
)
from asana_connector.connectors.sources.asana.roles import (
    TEAM_MEMBER,
    TEAM_ROLES,
    is_team_role_immutable,
    team_role,
)
from asana_connector.exceptions.connector_exceptions import UnsupportedRoleError
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


class TeamSyncer(AsanaResourceSyncer, IResourceProvisioner):
    """Teams of a workspace and their memberships."""

    def __init__(
        self,
        data_source: AsanaDataSource,
        logger: Optional[logging.Logger] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        super().__init__(RESOURCE_TYPE_TEAM, data_source, logger, page_size)

    async def list(
        self, parent_resource_id: Optional[ResourceId], token: PaginationToken
    ) -> Tuple[List[Resource], str]:
        if parent_resource_id is None:
            return [], ""

        bag = parse_page_token(token.token, new_resource_id(RESOURCE_TYPE_TEAM, ""))
        page = await self.data_source.get_teams(
            parent_resource_id.resource, self.pagination(bag, token)
        )
        next_token = bag.advance(page.next_offset)

        resources = [team_resource(team, parent_resource_id) for team in page.data]
        return resources, next_token

    async def entitlements(
        self, resource: Resource, token: PaginationToken
    ) -> Tuple[List[Entitlement], str]:
        entitlements = [
            new_permission_entitlement(
                resource,
                role,
                display_name=f"{resource.display_name} Team {role}",
                description=f"Role in {resource.display_name} Asana team",
                grantable_to=[RESOURCE_TYPE_USER],
            )
            for role in TEAM_ROLES
        ]
        return entitlements, ""

    async def grants(
        self, resource: Resource, token: PaginationToken
    ) -> Tuple[List[Grant], str]:
        bag = parse_page_token(token.token, resource.id)
        team_id = resource.get_profile_string_value("team_id")

        page = await self.data_source.get_team_memberships(
            team_id, self.pagination(bag, token)
        )
        next_token = bag.advance(page.next_offset)

        grants = []
        for membership in page.data:
            role = team_role(membership)
            principal = user_resource(membership.user, resource.id)
            grants.append(
                new_grant(resource, role, principal.id, immutable=is_team_role_immutable(role))
            )

        return grants, next_token

    async def grant(self, principal: Resource, entitlement: Entitlement) -> List[Grant]:
        self.require_user_principal(principal.id, "grant")
        role = parse_entitlement_slug(entitlement.id)
        if role != TEAM_MEMBER:
            raise UnsupportedRoleError(
                f"asana-connector: only the {TEAM_MEMBER} role can be granted, got {role}",
                role,
            )

        team_id = entitlement.resource.id.resource
        user_id = principal.id.resource
        await self.data_source.add_user_to_team(team_id, user_id)

        self.logger.info(f"Added user {user_id} to team {team_id}")
        return [new_grant(entitlement.resource, role, principal.id, entitlement=entitlement)]

    async def revoke(self, grant: Grant) -> None:
        # Removal does not depend on the granted role
        self.require_user_principal(grant.principal, "revoke")
        team_id = grant.entitlement.resource.id.resource
        user_id = grant.principal.resource

        await self.data_source.remove_user_from_team(team_id, user_id)
        self.logger.info(f"Removed user {user_id} from team {team_id}")
