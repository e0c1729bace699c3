"""
Tests for AsanaConnector validation and wiring.
"""
import asyncio

import httpx  # type: ignore
import pytest

from asana_connector.config.connector_config import AsanaConnectorConfig
from asana_connector.connectors.core.base.pagination.page_token import PaginationToken
from asana_connector.connectors.sources.asana.connector import AsanaConnector
from asana_connector.connectors.sources.asana.team import TeamSyncer
from asana_connector.connectors.sources.asana.user import UserSyncer
from asana_connector.connectors.sources.asana.workspace import WorkspaceSyncer
from asana_connector.exceptions.connector_exceptions import AuthenticationError, ResponseDecodeError
from tests.fixtures.asana_fixtures import error, page, single

AUTH_PATH = "/users/me/workspace_memberships"


def auth_memberships(*workspaces):
    return page([
        {"workspace": {"gid": gid, "name": f"Workspace {gid}"}, "is_guest": is_guest, "is_active": True}
        for gid, is_guest in workspaces
    ])


@pytest.mark.unit
class TestValidate:
    @pytest.mark.asyncio
    async def test_guest_workspaces_are_excluded(self, fake_asana, connector):
        fake_asana.add("GET", AUTH_PATH, auth_memberships(("ws1", False), ("ws2", True)))

        allowed = await connector.validate()

        assert allowed == frozenset({"ws1"})
        assert connector.allowed_workspaces == frozenset({"ws1"})

    @pytest.mark.asyncio
    async def test_auth_failure_raises_authentication_error(self, fake_asana, connector):
        fake_asana.add("GET", AUTH_PATH, error(401, "Not Authorized"))

        with pytest.raises(AuthenticationError) as exc_info:
            await connector.validate()

        assert str(exc_info.value).startswith("asana-connector: failed to authenticate. Error:")
        assert connector.allowed_workspaces == frozenset()

    @pytest.mark.asyncio
    async def test_network_failure_raises_authentication_error(self):
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        connector = AsanaConnector.build_from_config(
            AsanaConnectorConfig(token="t"), transport=httpx.MockTransport(refuse)
        )

        with pytest.raises(AuthenticationError):
            await connector.validate()

    @pytest.mark.asyncio
    async def test_allowed_set_is_published_once(self, fake_asana, connector):
        fake_asana.add(
            "GET",
            AUTH_PATH,
            auth_memberships(("ws1", False)),
            auth_memberships(("ws1", False), ("ws9", False)),
        )

        first = await connector.validate()
        second = await connector.validate()

        assert first == second == frozenset({"ws1"})
        assert len(fake_asana.calls("GET", AUTH_PATH)) == 2

    @pytest.mark.asyncio
    async def test_concurrent_validation_agrees(self, fake_asana, connector):
        fake_asana.add("GET", AUTH_PATH, auth_memberships(("ws1", False), ("ws2", False)))

        results = await asyncio.gather(connector.validate(), connector.validate(), connector.validate())

        assert all(r == frozenset({"ws1", "ws2"}) for r in results)

    @pytest.mark.asyncio
    async def test_membership_without_workspace_gid_fails(self, fake_asana, connector):
        fake_asana.add("GET", AUTH_PATH, page([
            {"workspace": {"gid": "ws1", "name": "Acme"}, "is_guest": False},
            {"workspace": {"name": "No id"}, "is_guest": False},
        ]))

        with pytest.raises(ResponseDecodeError):
            await connector.validate()

        assert connector.allowed_workspaces == frozenset()


@pytest.mark.unit
class TestSyncers:
    def test_metadata(self, connector):
        assert connector.metadata().display_name == "Asana"

    def test_syncer_order(self, connector):
        syncers = connector.resource_syncers()

        assert [type(s) for s in syncers] == [UserSyncer, WorkspaceSyncer, TeamSyncer]
        assert [s.resource_type().id for s in syncers] == ["user", "workspace", "team"]
        assert all(s.page_size == 2 for s in syncers)

    @pytest.mark.asyncio
    async def test_workspaces_empty_before_validate(self, fake_asana, connector):
        workspace_syncer = connector.resource_syncers()[1]

        resources, token = await workspace_syncer.list(None, PaginationToken())

        assert (resources, token) == ([], "")
        assert fake_asana.requests == []

    @pytest.mark.asyncio
    async def test_workspaces_listed_after_validate(self, fake_asana, connector):
        fake_asana.add("GET", AUTH_PATH, auth_memberships(("ws1", False), ("ws2", True)))
        fake_asana.add("GET", "/workspaces/ws1", single({"gid": "ws1", "name": "Acme"}))
        await connector.validate()

        resources, _ = await connector.resource_syncers()[1].list(None, PaginationToken())

        assert [str(r.id) for r in resources] == ["workspace:ws1"]

    @pytest.mark.asyncio
    async def test_context_manager_closes_client(self, fake_asana, data_source):
        async with AsanaConnector(data_source) as connector:
            assert connector.data_source is data_source

        assert data_source.http_client.client is None
