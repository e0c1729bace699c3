import json
from typing import Any, Dict, Union

from pydantic import BaseModel, ConfigDict, Field  # type: ignore


class HTTPRequest(BaseModel):
    """HTTP request
    Args:
        url: The URL of the request, may contain `{name}` placeholders
        method: The HTTP method to use
        headers: The headers to send with the request
        body: The JSON body of the request
        path_params: Values substituted into the URL placeholders
        query_params: The query parameters to use, in insertion order
    """
    model_config = ConfigDict(populate_by_name=True)

    url: str = Field(alias="uri")
    method: str = Field(default="GET")
    headers: Dict[str, str] = Field(default_factory=dict)
    body: Union[Dict[str, Any], bytes, None] = None
    path_params: Dict[str, str] = Field(default_factory=dict, alias="path")
    query_params: Dict[str, str] = Field(default_factory=dict, alias="query")

    def to_json(self) -> str:
        """
        Convert request to a JSON string.
        Bytes are decoded as UTF-8 and the Authorization header is masked.
        """
        data = self.model_dump()

        if isinstance(self.body, bytes):
            data["body"] = self.body.decode("utf-8", errors="replace")
        if "Authorization" in data["headers"]:
            data["headers"]["Authorization"] = "***"

        return json.dumps(data, indent=2)
