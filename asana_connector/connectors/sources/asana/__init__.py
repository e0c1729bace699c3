"""
Asana connector module.

Exposes Asana workspaces, teams and users, with workspace and team
memberships as grants that can be added and removed.
"""

from asana_connector.connectors.sources.asana.connector import AsanaConnector
from asana_connector.connectors.sources.asana.team import TeamSyncer
from asana_connector.connectors.sources.asana.user import UserSyncer
from asana_connector.connectors.sources.asana.workspace import WorkspaceSyncer

__all__ = ['AsanaConnector', 'UserSyncer', 'WorkspaceSyncer', 'TeamSyncer']
