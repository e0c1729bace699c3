from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from asana_connector.exceptions.connector_exceptions import ResourceValidationError

ENTITLEMENT_ID_SEPARATOR = ":"


class ResourceTrait(str, Enum):
    USER = "USER"
    GROUP = "GROUP"


class EntitlementPurpose(str, Enum):
    PERMISSION = "PERMISSION"


class UserStatus(str, Enum):
    ENABLED = "ENABLED"


class ResourceType(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    display_name: str
    traits: List[ResourceTrait] = Field(default_factory=list)


class ResourceId(BaseModel):
    model_config = ConfigDict(frozen=True)

    resource_type: str
    resource: str

    def __str__(self) -> str:
        return f"{self.resource_type}{ENTITLEMENT_ID_SEPARATOR}{self.resource}"


class Resource(BaseModel):
    """A node of the resource graph: a user, a group, a role..."""

    id: ResourceId
    display_name: str
    trait: ResourceTrait
    profile: Dict[str, Any] = Field(default_factory=dict)
    parent_resource_id: Optional[ResourceId] = None
    child_resource_types: List[str] = Field(default_factory=list)
    emails: List[str] = Field(default_factory=list)
    user_status: Optional[UserStatus] = None

    def get_profile_string_value(self, key: str) -> str:
        """Return a non-empty string stored in the profile, or raise."""
        value = self.profile.get(key)
        if not isinstance(value, str) or value == "":
            raise ResourceValidationError(
                f"error fetching {key} from {self.id.resource_type} profile",
                {"resource": str(self.id), "key": key},
            )
        return value


class Entitlement(BaseModel):
    """A grantable permission: a (resource, slug) pair"""

    id: str
    resource: Resource
    slug: str
    display_name: str
    description: str = ""
    purpose: EntitlementPurpose = EntitlementPurpose.PERMISSION
    grantable_to: List[str] = Field(default_factory=list)


class Grant(BaseModel):
    """An entitlement assigned to a principal"""

    id: str
    entitlement: Entitlement
    principal: ResourceId
    immutable: bool = False


class ConnectorMetadata(BaseModel):
    display_name: str
    description: str = ""


def entitlement_id(resource: Resource, slug: str) -> str:
    return ENTITLEMENT_ID_SEPARATOR.join([resource.id.resource_type, resource.id.resource, slug])


def parse_entitlement_slug(entitlement_id_value: str) -> str:
    """Return the slug of a `resourceType:resourceId:slug` identifier."""
    parts = entitlement_id_value.split(ENTITLEMENT_ID_SEPARATOR)
    if len(parts) != 3:
        raise ResourceValidationError(
            f"invalid entitlement id: {entitlement_id_value}",
            {"entitlement_id": entitlement_id_value},
        )
    return parts[2]


def new_permission_entitlement(
    resource: Resource,
    slug: str,
    display_name: str,
    description: str = "",
    grantable_to: Optional[List[ResourceType]] = None,
) -> Entitlement:
    return Entitlement(
        id=entitlement_id(resource, slug),
        resource=resource,
        slug=slug,
        display_name=display_name,
        description=description,
        purpose=EntitlementPurpose.PERMISSION,
        grantable_to=[rt.id for rt in grantable_to or []],
    )


def new_grant(
    resource: Resource,
    slug: str,
    principal: ResourceId,
    immutable: bool = False,
    entitlement: Optional[Entitlement] = None,
) -> Grant:
    """Grant `slug` on `resource` to `principal`.

    A bare entitlement is minted when the caller does not pass the full one.
    """
    if entitlement is None:
        entitlement = Entitlement(
            id=entitlement_id(resource, slug),
            resource=resource,
            slug=slug,
            display_name=slug,
        )
    grant_id = ENTITLEMENT_ID_SEPARATOR.join([entitlement.id, principal.resource_type, principal.resource])
    return Grant(id=grant_id, entitlement=entitlement, principal=principal, immutable=immutable)
