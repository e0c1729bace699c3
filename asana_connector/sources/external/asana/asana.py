"""
Asana API DataSource

Typed access to the slice of the Asana REST API the access connector needs:
users, workspaces, teams, their memberships, and membership mutations.
Every list call returns one decoded page plus the offset of the next one.
"""

import logging
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel  # type: ignore

from asana_connector.config.constants.http_status_code import (
    SUCCESS_CODE_IS_LESS_THAN,
    HttpStatusCode,
)
from asana_connector.exceptions.connector_exceptions import (
    AsanaAPIError,
    AuthorizationError,
    NotFoundError,
    PermissionDeniedError,
    RateLimitError,
    ResponseDecodeError,
)
from asana_connector.sources.client.asana.asana import AsanaClient
from asana_connector.sources.client.http.http_request import HTTPRequest
from asana_connector.sources.client.http.http_response import HTTPResponse
from asana_connector.sources.external.asana.models import (
    AsanaPage,
    AsanaTeam,
    AsanaUser,
    AsanaWorkspace,
    ListEnvelope,
    ObjectEnvelope,
    PaginationParams,
    TeamMembership,
    WorkspaceMembership,
)

T = TypeVar("T", bound=BaseModel)

USER_FIELDS = "email,name"
WORKSPACE_FIELDS = "is_organization,name,email_domains"
WORKSPACE_MEMBERSHIP_FIELDS = "name,is_active,is_admin,is_guest,workspace.name,user.name,user.email"
TEAM_FIELDS = "name,organization.name,organization.id,user.name,user.email"
TEAM_MEMBERSHIP_FIELDS = "team.name,is_limited_access,is_admin,is_guest,user.name,user.email"
AUTH_CHECK_FIELDS = "workspace.name,workspace.gid,is_active,is_admin,is_guest"

_STATUS_ERRORS = {
    HttpStatusCode.UNAUTHORIZED.value: AuthorizationError,
    HttpStatusCode.FORBIDDEN.value: PermissionDeniedError,
    HttpStatusCode.NOT_FOUND.value: NotFoundError,
}


def pagination_query(query: Dict[str, str], pagination: PaginationParams) -> Dict[str, str]:
    """Add `limit` always and `offset` only when continuing a listing."""
    query["limit"] = str(pagination.limit)
    if pagination.offset:
        query["offset"] = pagination.offset
    return query


class AsanaDataSource:
    """Asana REST API wrapper used by the access connector.

    Errors are raised, never folded into the return value:
    transport failures propagate as `httpx.TransportError`, non-2xx answers
    as `AsanaAPIError` subclasses, and bodies that are not the expected JSON
    envelope as `ResponseDecodeError`.
    """

    def __init__(self, asana_client: AsanaClient, logger: Optional[logging.Logger] = None) -> None:
        """Initialize with AsanaClient."""
        self.http_client = asana_client.get_client()
        self._asana_client = asana_client
        self.base_url = asana_client.get_base_url().rstrip('/')
        self.logger = logger or logging.getLogger(__name__)

    async def close(self) -> None:
        await self._asana_client.close()

    # ------------------------------------------------------------------ #
    # Plumbing
    # ------------------------------------------------------------------ #

    async def _send(
        self,
        method: str,
        path: str,
        query: Optional[Dict[str, str]] = None,
        body: Optional[Dict[str, Any]] = None,
        path_params: Optional[Dict[str, str]] = None,
    ) -> HTTPResponse:
        request = HTTPRequest(
            url=self.base_url + path,
            method=method,
            path_params=path_params or {},
            query_params=query or {},
            body=body,
        )
        response = await self.http_client.execute(request)
        if response.status >= SUCCESS_CODE_IS_LESS_THAN:
            raise self._error_for(response)
        return response

    def _error_for(self, response: HTTPResponse) -> AsanaAPIError:
        message = f"Asana API request failed with HTTP {response.status}"
        details: Dict[str, Any] = {}
        try:
            payload = response.json()
            errors = payload.get("errors") if isinstance(payload, dict) else None
            if errors:
                details["errors"] = errors
                first = errors[0] if isinstance(errors[0], dict) else {}
                if first.get("message"):
                    message = f"{message}: {first['message']}"
        except ValueError:
            details["body"] = response.text()[:500]

        if response.status == HttpStatusCode.TOO_MANY_REQUESTS.value:
            retry_after = response.headers.get("retry-after")
            return RateLimitError(
                message,
                response.status,
                response.url,
                details,
                retry_after=float(retry_after) if retry_after and retry_after.isdigit() else None,
            )
        error_class = _STATUS_ERRORS.get(response.status, AsanaAPIError)
        return error_class(message, response.status, response.url, details)

    @staticmethod
    def _decode(response: HTTPResponse, model: Type[BaseModel]) -> BaseModel:
        try:
            return model.model_validate(response.json())
        except ValueError as e:
            # json.JSONDecodeError and pydantic.ValidationError are both ValueErrors
            raise ResponseDecodeError(
                f"Failed to decode Asana response from {response.url}: {e}",
                {"status": response.status},
            ) from e

    async def _list(
        self,
        path: str,
        item_model: Type[T],
        pagination: PaginationParams,
        query: Optional[Dict[str, str]] = None,
        path_params: Optional[Dict[str, str]] = None,
    ) -> AsanaPage[T]:
        response = await self._send(
            "GET",
            path,
            query=pagination_query(dict(query or {}), pagination),
            path_params=path_params,
        )
        envelope = self._decode(response, ListEnvelope[item_model])
        self.logger.debug(
            f"Fetched {len(envelope.data)} {item_model.__name__} records from {path} "
            f"(offset={pagination.offset!r}, next={envelope.next_offset()!r})"
        )
        return AsanaPage[item_model](
            data=envelope.data,
            next_offset=envelope.next_offset(),
            response=response,
        )

    async def _mutate_membership(self, path: str, object_id: str, user_id: str) -> None:
        await self._send(
            "POST",
            path,
            body={"data": {"user": user_id}},
            path_params={"id": object_id},
        )

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #

    async def get_users(self, workspace_id: str, pagination: PaginationParams) -> AsanaPage[AsanaUser]:
        """List users of a single workspace

        Args:
            workspace_id: Workspace GID
            pagination: limit and offset of the page to fetch

        Returns:
            AsanaPage[AsanaUser]
        """
        return await self._list(
            "/users",
            AsanaUser,
            pagination,
            query={"workspace": workspace_id, "opt_fields": USER_FIELDS},
        )

    async def get_workspace(self, workspace_id: str) -> AsanaWorkspace:
        """Get details of a single workspace

        Args:
            workspace_id: Workspace GID

        Returns:
            AsanaWorkspace
        """
        response = await self._send(
            "GET",
            "/workspaces/{id}",
            query={"opt_fields": WORKSPACE_FIELDS},
            path_params={"id": workspace_id},
        )
        return self._decode(response, ObjectEnvelope[AsanaWorkspace]).data

    async def get_workspace_memberships(
        self, workspace_id: str, pagination: PaginationParams
    ) -> AsanaPage[WorkspaceMembership]:
        """List workspace memberships of a single workspace"""
        return await self._list(
            "/workspaces/{id}/workspace_memberships",
            WorkspaceMembership,
            pagination,
            query={"opt_fields": WORKSPACE_MEMBERSHIP_FIELDS},
            path_params={"id": workspace_id},
        )

    async def get_teams(self, workspace_id: str, pagination: PaginationParams) -> AsanaPage[AsanaTeam]:
        """List teams of a single workspace"""
        return await self._list(
            "/workspaces/{id}/teams",
            AsanaTeam,
            pagination,
            query={"opt_fields": TEAM_FIELDS},
            path_params={"id": workspace_id},
        )

    async def get_team_memberships(
        self, team_id: str, pagination: PaginationParams
    ) -> AsanaPage[TeamMembership]:
        """List team memberships of a single team"""
        return await self._list(
            "/teams/{id}/team_memberships",
            TeamMembership,
            pagination,
            query={"opt_fields": TEAM_MEMBERSHIP_FIELDS},
            path_params={"id": team_id},
        )

    async def auth_check(self) -> List[WorkspaceMembership]:
        """Workspace memberships of the authenticated user, unpaginated"""
        response = await self._send(
            "GET",
            "/users/me/workspace_memberships",
            query={"opt_fields": AUTH_CHECK_FIELDS},
        )
        return self._decode(response, ListEnvelope[WorkspaceMembership]).data

    # ------------------------------------------------------------------ #
    # Mutations
    # ------------------------------------------------------------------ #

    async def add_user_to_workspace(self, workspace_id: str, user_id: str) -> None:
        await self._mutate_membership("/workspaces/{id}/addUser", workspace_id, user_id)

    async def remove_user_from_workspace(self, workspace_id: str, user_id: str) -> None:
        await self._mutate_membership("/workspaces/{id}/removeUser", workspace_id, user_id)

    async def add_user_to_team(self, team_id: str, user_id: str) -> None:
        await self._mutate_membership("/teams/{id}/addUser", team_id, user_id)

    async def remove_user_from_team(self, team_id: str, user_id: str) -> None:
        await self._mutate_membership("/teams/{id}/removeUser", team_id, user_id)
