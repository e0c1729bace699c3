from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field  # type: ignore

from asana_connector.sources.client.http.http_response import HTTPResponse


class AsanaObject(BaseModel):
    """Fields shared by every compact Asana object"""

    model_config = ConfigDict(extra="ignore")

    gid: Optional[str] = Field(default=None, description="Globally unique identifier")
    name: Optional[str] = Field(default=None, description="Display name")
    resource_type: Optional[str] = Field(default=None, description="Asana resource type tag")


class AsanaUser(AsanaObject):
    """Pydantic model for an Asana user"""

    email: Optional[str] = Field(default=None, description="Primary email")


class AsanaTeam(AsanaObject):
    """Pydantic model for an Asana team"""

    organization: Optional[AsanaObject] = Field(default=None, description="Owning workspace")


class AsanaWorkspace(AsanaObject):
    """Pydantic model for an Asana workspace or organization"""

    is_organization: bool = Field(default=False)
    email_domains: List[str] = Field(default_factory=list)


class WorkspaceMembership(BaseModel):
    """Link between a user and a workspace"""

    model_config = ConfigDict(extra="ignore")

    gid: Optional[str] = None
    resource_type: Optional[str] = None
    user: AsanaUser = Field(default_factory=AsanaUser)
    workspace: AsanaWorkspace = Field(default_factory=AsanaWorkspace)
    is_active: bool = False
    is_admin: bool = False
    is_guest: bool = False


class TeamMembership(BaseModel):
    """Link between a user and a team"""

    model_config = ConfigDict(extra="ignore")

    gid: Optional[str] = None
    resource_type: Optional[str] = None
    user: AsanaUser = Field(default_factory=AsanaUser)
    team: AsanaTeam = Field(default_factory=AsanaTeam)
    is_admin: bool = False
    is_guest: bool = False
    is_limited_access: bool = False


class NextPage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    offset: Optional[str] = None
    path: Optional[str] = None
    uri: Optional[str] = None


T = TypeVar("T")


class ListEnvelope(BaseModel, Generic[T]):
    """`{"data": [...], "next_page": {"offset": ...}}`"""

    model_config = ConfigDict(extra="ignore")

    data: List[T]
    next_page: Optional[NextPage] = None

    def next_offset(self) -> str:
        if self.next_page is None or not self.next_page.offset:
            return ""
        return self.next_page.offset


class ObjectEnvelope(BaseModel, Generic[T]):
    """`{"data": {...}}`"""

    model_config = ConfigDict(extra="ignore")

    data: T


class PaginationParams(BaseModel):
    """Single pagination parameter set shared by every list call"""

    limit: int = Field(ge=1, le=100)
    offset: str = ""


class AsanaPage(BaseModel, Generic[T]):
    """One decoded page of a list call"""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    data: List[T]
    next_offset: str = ""
    response: Optional[HTTPResponse] = None

    def has_more(self) -> bool:
        return self.next_offset != ""
