"""
Tests for TeamSyncer.
"""
import pytest

from asana_connector.connectors.core.base.pagination.page_token import PaginationToken
from asana_connector.connectors.sources.asana.resources import (
    RESOURCE_TYPE_USER,
    RESOURCE_TYPE_WORKSPACE,
    new_resource_id,
    team_resource,
)
from asana_connector.connectors.sources.asana.team import TeamSyncer
from asana_connector.exceptions.connector_exceptions import (
    NotImplementedForResourceTypeError,
    NotFoundError,
    UnsupportedRoleError,
)
from asana_connector.models.resource import Resource, ResourceTrait, new_grant, new_permission_entitlement
from asana_connector.sources.external.asana.models import AsanaTeam
from tests.fixtures.asana_fixtures import page, single, team_membership

WORKSPACE_ID = new_resource_id(RESOURCE_TYPE_WORKSPACE, "ws-1")
TEAM = team_resource(AsanaTeam(gid="t1", name="Eng"), WORKSPACE_ID)
USER = Resource(id=new_resource_id(RESOURCE_TYPE_USER, "u1"), display_name="Ada", trait=ResourceTrait.USER)


@pytest.mark.unit
class TestList:
    @pytest.mark.asyncio
    async def test_requires_parent(self, fake_asana, data_source):
        resources, token = await TeamSyncer(data_source).list(None, PaginationToken())

        assert resources == []
        assert token == ""
        assert fake_asana.requests == []

    @pytest.mark.asyncio
    async def test_pages_through_teams(self, fake_asana, data_source):
        fake_asana.add(
            "GET",
            "/workspaces/ws-1/teams",
            page([{"gid": "t1", "name": "Eng"}, {"gid": "t2", "name": "Ops"}], "next"),
            page([{"gid": "t3", "name": "Sales"}]),
        )
        syncer = TeamSyncer(data_source, page_size=2)

        first, token = await syncer.list(WORKSPACE_ID, PaginationToken())
        second, final = await syncer.list(WORKSPACE_ID, PaginationToken(token=token))

        assert [r.display_name for r in first + second] == ["Eng", "Ops", "Sales"]
        assert all(r.parent_resource_id == WORKSPACE_ID for r in first + second)
        assert token != ""
        assert final == ""
        requests = fake_asana.calls("GET", "/workspaces/ws-1/teams")
        assert requests[0].url.params["limit"] == "2"
        assert requests[1].url.params["offset"] == "next"


@pytest.mark.unit
class TestGrants:
    @pytest.mark.asyncio
    async def test_roles_and_immutability(self, fake_asana, data_source):
        fake_asana.add("GET", "/teams/t1/team_memberships", page([
            team_membership("u1", "t1"),
            team_membership("u2", "t1", is_admin=True),
            team_membership("u3", "t1", is_limited_access=True, is_guest=True),
            team_membership("u4", "t1", is_guest=True),
        ]))

        grants, token = await TeamSyncer(data_source).grants(TEAM, PaginationToken())

        assert [(g.entitlement.slug, g.immutable) for g in grants] == [
            ("Team Member", False),
            ("Admin", True),
            ("Limited Access", True),
            ("Guest", True),
        ]
        assert grants[0].id == "team:t1:Team Member:user:u1"
        assert token == ""

    @pytest.mark.asyncio
    async def test_entitlements_cover_every_role(self, data_source):
        entitlements, _ = await TeamSyncer(data_source).entitlements(TEAM, PaginationToken())

        assert [e.slug for e in entitlements] == ["Guest", "Admin", "Limited Access", "Team Member"]
        assert entitlements[3].display_name == "Eng Team Team Member"
        assert entitlements[3].description == "Role in Eng Asana team"


@pytest.mark.unit
class TestProvisioning:
    @pytest.mark.asyncio
    async def test_grant_team_member(self, fake_asana, data_source):
        fake_asana.add("POST", "/teams/t1/addUser", single({}))
        entitlement = new_permission_entitlement(TEAM, "Team Member", "Eng Team Team Member")

        grants = await TeamSyncer(data_source).grant(USER, entitlement)

        assert [g.id for g in grants] == ["team:t1:Team Member:user:u1"]
        assert fake_asana.json_body(fake_asana.calls("POST", "/teams/t1/addUser")[0]) == {"data": {"user": "u1"}}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("role", ["Admin", "Guest", "Limited Access"])
    async def test_other_roles_cannot_be_granted(self, fake_asana, data_source, role):
        entitlement = new_permission_entitlement(TEAM, role, f"Eng Team {role}")

        with pytest.raises(UnsupportedRoleError) as exc_info:
            await TeamSyncer(data_source).grant(USER, entitlement)

        assert exc_info.value.role == role
        assert fake_asana.requests == []

    @pytest.mark.asyncio
    async def test_grant_to_non_user_fails(self, data_source):
        other = Resource(id=new_resource_id(RESOURCE_TYPE_WORKSPACE, "ws-2"), display_name="x", trait=ResourceTrait.GROUP)
        entitlement = new_permission_entitlement(TEAM, "Team Member", "Eng Team Team Member")

        with pytest.raises(NotImplementedForResourceTypeError):
            await TeamSyncer(data_source).grant(other, entitlement)

    @pytest.mark.asyncio
    async def test_revoke_ignores_role(self, fake_asana, data_source):
        fake_asana.add("POST", "/teams/t1/removeUser", single({}))

        await TeamSyncer(data_source).revoke(new_grant(TEAM, "Admin", USER.id, immutable=True))

        assert len(fake_asana.calls("POST", "/teams/t1/removeUser")) == 1

    @pytest.mark.asyncio
    async def test_grant_with_crafted_team_id_stays_on_team_endpoint(self, fake_asana, data_source):
        crafted = team_resource(AsanaTeam(gid="123/../../workspaces/9", name="Eng"), WORKSPACE_ID)
        entitlement = new_permission_entitlement(crafted, "Team Member", "Eng Team Team Member")

        with pytest.raises(NotFoundError):
            await TeamSyncer(data_source).grant(USER, entitlement)

        assert fake_asana.calls("POST", "/workspaces/9/addUser") == []
        assert fake_asana.requests[0].url.raw_path.startswith(b"/api/1.0/teams/123%2F")
