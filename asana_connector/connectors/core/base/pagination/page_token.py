"""
Continuation tokens for the sync runtime.

The runtime hands back whatever opaque string the connector returned on the
previous call. The connector keeps one cursor per resource type in that
string so that it never has to hold pagination state itself.
"""

import json
from collections import OrderedDict
from typing import Dict, Optional

from pydantic import BaseModel, Field

from asana_connector.exceptions.connector_exceptions import PageTokenDecodeError
from asana_connector.models.resource import ResourceId


class PaginationToken(BaseModel):
    """What the sync runtime passes into every list/entitlements/grants call"""

    token: str = ""
    size: int = Field(default=0, ge=0)


class PageTokenBag:
    """Ordered mapping of resource-type tag to upstream cursor."""

    def __init__(self, resource_type: str, cursors: Optional[Dict[str, str]] = None) -> None:
        self.resource_type = resource_type
        self._cursors: "OrderedDict[str, str]" = OrderedDict(cursors or {})

    def current(self) -> str:
        """Cursor to send upstream, empty on the first page"""
        return self._cursors.get(self.resource_type, "")

    def advance(self, next_offset: str) -> str:
        """Record the next cursor and return the token for the caller.

        An empty `next_offset` drops this resource type's cursor, and once no
        cursor is left the returned token is empty: the listing is complete.
        """
        if next_offset:
            self._cursors[self.resource_type] = next_offset
        else:
            self._cursors.pop(self.resource_type, None)

        if not self._cursors:
            return ""
        return self.marshal()

    def marshal(self) -> str:
        return json.dumps(
            {"cursors": [{"resource_type": k, "cursor": v} for k, v in self._cursors.items()]},
            separators=(",", ":"),
        )

    def __len__(self) -> int:
        return len(self._cursors)


def parse_page_token(token: str, seed_resource_id: ResourceId) -> PageTokenBag:
    """Decode a continuation token, scoping it to the seed resource's type.

    Raises:
        PageTokenDecodeError: if the token is not one this connector produced
    """
    if not token:
        return PageTokenBag(seed_resource_id.resource_type)

    try:
        payload = json.loads(token)
        cursors = OrderedDict(
            (str(entry["resource_type"]), str(entry["cursor"]))
            for entry in payload["cursors"]
        )
    except (ValueError, KeyError, TypeError) as e:
        raise PageTokenDecodeError(
            f"invalid page token for {seed_resource_id.resource_type}: {e}",
            {"token": token[:200]},
        ) from e

    return PageTokenBag(seed_resource_id.resource_type, cursors)
