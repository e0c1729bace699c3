"""
Role precedence policies.

Asana exposes membership roles as independent boolean flags. A membership
maps to exactly one role by walking an ordered list of rules and taking the
first one whose flag is set. The order is the policy: changing it changes
which role is reported.
"""

from dataclasses import dataclass
from typing import Callable, Generic, List, Optional, TypeVar

from asana_connector.sources.external.asana.models import TeamMembership, WorkspaceMembership

M = TypeVar("M")

# Workspace roles
WORKSPACE_ADMIN = "Admin"
WORKSPACE_MEMBER = "Member"
WORKSPACE_GUEST = "Guest"

WORKSPACE_ROLES = [WORKSPACE_ADMIN, WORKSPACE_MEMBER, WORKSPACE_GUEST]

# Team roles
TEAM_GUEST = "Guest"
TEAM_ADMIN = "Admin"
TEAM_LIMITED_ACCESS = "Limited Access"
TEAM_MEMBER = "Team Member"

TEAM_ROLES = [TEAM_GUEST, TEAM_ADMIN, TEAM_LIMITED_ACCESS, TEAM_MEMBER]


@dataclass(frozen=True)
class RoleRule(Generic[M]):
    name: str
    applies: Callable[[M], bool]
    role: str


@dataclass(frozen=True)
class RolePolicy(Generic[M]):
    """First matching rule wins; `default` applies when none match."""

    rules: List[RoleRule[M]]
    default: Optional[str] = None

    def derive(self, membership: M) -> Optional[str]:
        for rule in self.rules:
            if rule.applies(membership):
                return rule.role
        return self.default


# An active admin is reported as Member: is_active is checked first.
# Keep this order unless product signs off on reporting Admin instead.
WORKSPACE_ROLE_POLICY: RolePolicy[WorkspaceMembership] = RolePolicy(
    rules=[
        RoleRule("active", lambda m: m.is_active, WORKSPACE_MEMBER),
        RoleRule("admin", lambda m: m.is_admin, WORKSPACE_ADMIN),
        RoleRule("guest", lambda m: m.is_guest, WORKSPACE_GUEST),
    ],
)

TEAM_ROLE_POLICY: RolePolicy[TeamMembership] = RolePolicy(
    rules=[
        RoleRule("admin", lambda m: m.is_admin, TEAM_ADMIN),
        RoleRule("limited_access", lambda m: m.is_limited_access, TEAM_LIMITED_ACCESS),
        RoleRule("guest", lambda m: m.is_guest, TEAM_GUEST),
    ],
    default=TEAM_MEMBER,
)


def workspace_role(membership: WorkspaceMembership) -> Optional[str]:
    return WORKSPACE_ROLE_POLICY.derive(membership)


def team_role(membership: TeamMembership) -> str:
    return TEAM_ROLE_POLICY.derive(membership)


def is_team_role_immutable(role: str) -> bool:
    """Only Team Member can be changed through the API.

    Asana has no endpoint for the other team roles; its web UI sets them over
    a websocket channel, so grants of those roles are reported as immutable.
    """
    return role != TEAM_MEMBER
