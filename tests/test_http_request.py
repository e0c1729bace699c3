"""
Tests for the HTTPRequest model.
"""
import json

import pytest

from asana_connector.sources.client.http.http_request import HTTPRequest


@pytest.mark.unit
class TestHTTPRequest:
    def test_aliases_populate_fields(self):
        request = HTTPRequest(uri="https://example.com/teams/{id}", path={"id": "t1"}, query={"limit": "5"})

        assert request.url == "https://example.com/teams/{id}"
        assert request.path_params == {"id": "t1"}
        assert request.query_params == {"limit": "5"}
        assert request.method == "GET"

    def test_to_json_masks_authorization(self):
        request = HTTPRequest(
            url="https://example.com",
            method="POST",
            headers={"Authorization": "Bearer secret"},
            body=b'{"data": {}}',
        )

        dumped = json.loads(request.to_json())

        assert dumped["headers"]["Authorization"] == "***"
        assert dumped["body"] == '{"data": {}}'
        assert request.headers["Authorization"] == "Bearer secret"
