from typing import Optional

from asana_connector.exceptions.connector_exceptions import ResourceValidationError
from asana_connector.models.resource import (
    Resource,
    ResourceId,
    ResourceTrait,
    ResourceType,
    UserStatus,
)
from asana_connector.sources.external.asana.models import (
    AsanaObject,
    AsanaTeam,
    AsanaUser,
    AsanaWorkspace,
)

RESOURCE_TYPE_USER = ResourceType(id="user", display_name="User", traits=[ResourceTrait.USER])
RESOURCE_TYPE_WORKSPACE = ResourceType(id="workspace", display_name="Workspace", traits=[ResourceTrait.GROUP])
RESOURCE_TYPE_TEAM = ResourceType(id="team", display_name="Team", traits=[ResourceTrait.GROUP])


def _require(record: AsanaObject, kind: str) -> None:
    for field in ("gid", "name"):
        if not getattr(record, field):
            raise ResourceValidationError(
                f"asana {kind} record is missing required field '{field}'",
                {"record": record.model_dump(exclude_none=True)},
            )


def new_resource_id(resource_type: ResourceType, object_id: str) -> ResourceId:
    return ResourceId(resource_type=resource_type.id, resource=object_id)


def workspace_resource(workspace: AsanaWorkspace) -> Resource:
    """Create a connector resource for an Asana workspace."""
    _require(workspace, "workspace")
    return Resource(
        id=new_resource_id(RESOURCE_TYPE_WORKSPACE, workspace.gid),
        display_name=workspace.name,
        trait=ResourceTrait.GROUP,
        profile={
            "workspace_id": workspace.gid,
            "workspace_name": workspace.name,
            "is_organization": workspace.is_organization,
        },
        child_resource_types=[RESOURCE_TYPE_USER.id, RESOURCE_TYPE_TEAM.id],
    )


def team_resource(team: AsanaTeam, parent_resource_id: Optional[ResourceId]) -> Resource:
    """Create a connector resource for an Asana team."""
    _require(team, "team")
    return Resource(
        id=new_resource_id(RESOURCE_TYPE_TEAM, team.gid),
        display_name=team.name,
        trait=ResourceTrait.GROUP,
        profile={
            "team_id": team.gid,
            "team_name": team.name,
        },
        parent_resource_id=parent_resource_id,
    )


def team_from_resource(resource: Resource) -> AsanaTeam:
    """Read the Asana team back from a team resource's profile."""
    return AsanaTeam(
        gid=resource.get_profile_string_value("team_id"),
        name=resource.get_profile_string_value("team_name"),
    )


def user_resource(user: AsanaUser, parent_resource_id: Optional[ResourceId]) -> Resource:
    """Create a connector resource for an Asana user."""
    _require(user, "user")
    profile = {
        "user_id": user.gid,
        "user_name": user.name,
    }
    if user.email:
        profile["email"] = user.email

    return Resource(
        id=new_resource_id(RESOURCE_TYPE_USER, user.gid),
        display_name=user.name,
        trait=ResourceTrait.USER,
        profile=profile,
        parent_resource_id=parent_resource_id,
        emails=[user.email] if user.email else [],
        user_status=UserStatus.ENABLED,
    )
