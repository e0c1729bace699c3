"""
Tests for mapping Asana records onto connector resources.
"""
import pytest

from asana_connector.connectors.sources.asana.resources import (
    RESOURCE_TYPE_TEAM,
    RESOURCE_TYPE_USER,
    RESOURCE_TYPE_WORKSPACE,
    new_resource_id,
    team_from_resource,
    team_resource,
    user_resource,
    workspace_resource,
)
from asana_connector.exceptions.connector_exceptions import ResourceValidationError
from asana_connector.models.resource import (
    ResourceTrait,
    UserStatus,
    new_grant,
    new_permission_entitlement,
    parse_entitlement_slug,
)
from asana_connector.sources.external.asana.models import AsanaTeam, AsanaUser, AsanaWorkspace

WORKSPACE_ID = new_resource_id(RESOURCE_TYPE_WORKSPACE, "ws-1")


@pytest.mark.unit
class TestWorkspaceResource:
    def test_maps_profile_and_children(self):
        resource = workspace_resource(AsanaWorkspace(gid="ws-1", name="Acme", is_organization=True))

        assert str(resource.id) == "workspace:ws-1"
        assert resource.display_name == "Acme"
        assert resource.trait == ResourceTrait.GROUP
        assert resource.profile == {"workspace_id": "ws-1", "workspace_name": "Acme", "is_organization": True}
        assert resource.child_resource_types == ["user", "team"]
        assert resource.parent_resource_id is None

    def test_missing_gid_is_rejected(self):
        with pytest.raises(ResourceValidationError):
            workspace_resource(AsanaWorkspace(name="Acme"))


@pytest.mark.unit
class TestTeamResource:
    def test_round_trip_through_profile(self):
        resource = team_resource(AsanaTeam(gid="123", name="Eng"), WORKSPACE_ID)

        assert resource.parent_resource_id == WORKSPACE_ID
        team = team_from_resource(resource)
        assert team.gid == "123"
        assert team.name == "Eng"

    def test_missing_name_is_rejected(self):
        with pytest.raises(ResourceValidationError):
            team_resource(AsanaTeam(gid="123"), WORKSPACE_ID)

    def test_profile_without_team_id_fails(self):
        resource = team_resource(AsanaTeam(gid="123", name="Eng"), WORKSPACE_ID)
        resource.profile.pop("team_id")

        with pytest.raises(ResourceValidationError):
            team_from_resource(resource)


@pytest.mark.unit
class TestUserResource:
    def test_user_with_email(self, faker_instance):
        email = faker_instance.email()
        resource = user_resource(AsanaUser(gid="u1", name="Ada", email=email), WORKSPACE_ID)

        assert resource.id.resource_type == RESOURCE_TYPE_USER.id
        assert resource.trait == ResourceTrait.USER
        assert resource.emails == [email]
        assert resource.profile["email"] == email
        assert resource.user_status == UserStatus.ENABLED
        assert resource.parent_resource_id == WORKSPACE_ID

    def test_user_without_email(self):
        resource = user_resource(AsanaUser(gid="u1", name="Ada"), None)

        assert resource.emails == []
        assert "email" not in resource.profile


@pytest.mark.unit
class TestEntitlementIds:
    def test_entitlement_and_grant_ids(self):
        team = team_resource(AsanaTeam(gid="123", name="Eng"), WORKSPACE_ID)
        entitlement = new_permission_entitlement(team, "Admin", "Eng Team Admin", grantable_to=[RESOURCE_TYPE_USER])
        grant = new_grant(team, "Admin", new_resource_id(RESOURCE_TYPE_USER, "u1"), immutable=True)

        assert entitlement.id == "team:123:Admin"
        assert entitlement.grantable_to == ["user"]
        assert grant.id == "team:123:Admin:user:u1"
        assert grant.immutable is True
        assert new_resource_id(RESOURCE_TYPE_TEAM, "123") == team.id

    def test_parse_slug(self):
        assert parse_entitlement_slug("team:123:Team Member") == "Team Member"

    @pytest.mark.parametrize("value", ["team:123", "a:b:c:d", ""])
    def test_parse_slug_rejects_other_shapes(self, value):
        with pytest.raises(ResourceValidationError):
            parse_entitlement_slug(value)
