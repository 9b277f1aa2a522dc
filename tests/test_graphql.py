"""Tests for the AEC Data Model GraphQL client.

No network access: ``urllib.request.urlopen`` is patched with a fake that
records requests and replays canned responses.
"""

from __future__ import annotations

import asyncio
import json
import urllib.error
from typing import Any

import pytest

from aecdm.client.graphql import (
    AECDMClient,
    GraphQLError,
    category_filter,
    flatten_element,
    select,
)
from aecdm.server.tools import AECDMTools


class _FakeResponse:
    def __init__(self, body: Any) -> None:
        self._raw = json.dumps(body).encode("utf-8")
        self.status = 200

    def read(self) -> bytes:
        return self._raw

    def __enter__(self) -> _FakeResponse:
        return self

    def __exit__(self, *exc: object) -> None:
        return None


class _FakeUrlopen:
    def __init__(self, *bodies: Any) -> None:
        self.bodies = list(bodies)
        self.requests: list[Any] = []

    def __call__(self, req, timeout=None):
        self.requests.append(req)
        return _FakeResponse(self.bodies.pop(0))

    def payload(self, index: int = 0) -> dict[str, Any]:
        return json.loads(self.requests[index].data.decode("utf-8"))


@pytest.fixture
def client() -> AECDMClient:
    return AECDMClient("token-123", base_url="https://example.test/graphql")


class TestQuery:

    def test_sends_auth_and_payload(self, monkeypatch, client):
        fake = _FakeUrlopen({"data": {"hubs": {"results": []}}})
        monkeypatch.setattr("urllib.request.urlopen", fake)

        client.query("query { hubs { results { id } } }", {"a": 1})

        req = fake.requests[0]
        assert req.full_url == "https://example.test/graphql"
        assert req.get_method() == "POST"
        assert req.get_header("Authorization") == "Bearer token-123"
        assert req.get_header("Region") is None
        assert fake.payload()["variables"] == {"a": 1}

    def test_region_header(self, monkeypatch):
        fake = _FakeUrlopen({"data": {}})
        monkeypatch.setattr("urllib.request.urlopen", fake)
        AECDMClient("t", region="EMEA").query("query { x }")
        assert fake.requests[0].get_header("Region") == "EMEA"

    def test_errors_raise(self, monkeypatch, client):
        fake = _FakeUrlopen({"data": None, "errors": [{"message": "Not authorized"}]})
        monkeypatch.setattr("urllib.request.urlopen", fake)
        with pytest.raises(GraphQLError, match="Not authorized"):
            client.query("query { hubs { results { id } } }")

    def test_network_failure_raises(self, monkeypatch, client):
        def down(req, timeout=None):
            raise urllib.error.URLError("unreachable")

        monkeypatch.setattr("urllib.request.urlopen", down)
        with pytest.raises(GraphQLError, match="request failed"):
            client.query("query { x }")

    @pytest.mark.parametrize("body, message", [
        ([{"data": {}}], "Unexpected GraphQL response: list"),
        ({"errors": ["Token expired"]}, "Token expired"),
        ({"errors": [{"code": 401}]}, "401"),
        ({"data": "oops"}, "Unexpected GraphQL data: str"),
        ({}, "empty response"),
    ])
    def test_malformed_responses_raise(self, monkeypatch, client, body, message):
        monkeypatch.setattr("urllib.request.urlopen", _FakeUrlopen(body))
        with pytest.raises(GraphQLError, match=message):
            client.query("query { x }")

    def test_malformed_response_becomes_tool_error(self, monkeypatch, client):
        monkeypatch.setattr("urllib.request.urlopen", _FakeUrlopen({"errors": "denied"}))
        text = asyncio.run(AECDMTools(client).get_hubs())
        assert text == "Error: empty response"

    def test_missing_token(self):
        with pytest.raises(GraphQLError, match="APS_ACCESS_TOKEN"):
            AECDMClient("").query("query { x }")


class TestListing:

    def test_get_hubs(self, monkeypatch, client):
        hubs = [{"id": "h1", "name": "Hub One"}]
        monkeypatch.setattr(
            "urllib.request.urlopen", _FakeUrlopen({"data": {"hubs": {"results": hubs}}})
        )
        assert client.get_hubs() == hubs

    def test_get_projects(self, monkeypatch, client):
        fake = _FakeUrlopen({"data": {"projects": {"results": [{"id": "p1", "name": "P"}]}}})
        monkeypatch.setattr("urllib.request.urlopen", fake)
        assert client.get_projects("h1") == [{"id": "p1", "name": "P"}]
        assert fake.payload()["variables"] == {"hubId": "h1"}

    def test_get_element_groups(self, monkeypatch, client):
        groups = [{"id": "g1", "name": "Model.rvt", "alternativeIdentifiers": {"fileVersionUrn": "urn:1"}}]
        fake = _FakeUrlopen({"data": {"elementGroupsByProject": {"results": groups}}})
        monkeypatch.setattr("urllib.request.urlopen", fake)
        assert client.get_element_groups_by_project("p1") == groups

    def test_empty_selection(self, monkeypatch, client):
        monkeypatch.setattr("urllib.request.urlopen", _FakeUrlopen({"data": {"hubs": None}}))
        assert client.get_hubs() == []

    def test_elements_by_category_follows_pages(self, monkeypatch, client):
        page1 = {"data": {"elementsByElementGroup": {
            "pagination": {"cursor": "next"},
            "results": [{"id": "e1", "name": "Wall 1", "properties": {"results": [
                {"name": "Category", "value": "Walls"},
                {"name": "Length", "value": 5.0},
            ]}}],
        }}}
        page2 = {"data": {"elementsByElementGroup": {
            "pagination": {"cursor": None},
            "results": [{"id": "e2", "name": "Wall 2", "properties": {"results": []}}],
        }}}
        fake = _FakeUrlopen(page1, page2)
        monkeypatch.setattr("urllib.request.urlopen", fake)

        elements = client.get_elements_by_category("g1", "Walls")

        assert [e["id"] for e in elements] == ["e1", "e2"]
        assert elements[0]["category"] == "Walls"
        assert elements[0]["properties"]["Length"] == 5.0
        first, second = fake.payload(0)["variables"], fake.payload(1)["variables"]
        assert first["cursor"] is None
        assert second["cursor"] == "next"
        assert first["propertyFilter"] == (
            "'property.name.category'=='Walls' and 'property.name.Element Context'=='Instance'"
        )
        assert second["propertyFilter"] == first["propertyFilter"]

    def test_elements_by_category_without_context(self, monkeypatch, client):
        fake = _FakeUrlopen({"data": {"elementsByElementGroup": {"results": []}}})
        monkeypatch.setattr("urllib.request.urlopen", fake)
        assert client.get_elements_by_category("g1", "Rooms", context=None) == []
        assert fake.payload()["variables"]["propertyFilter"] == "'property.name.category'=='Rooms'"

    def test_elements_by_category_malformed_page(self, monkeypatch, client):
        fake = _FakeUrlopen({"data": {"elementsByElementGroup": ["e1"]}})
        monkeypatch.setattr("urllib.request.urlopen", fake)
        with pytest.raises(GraphQLError, match="Malformed"):
            client.get_elements_by_category("g1", "Walls")


class TestHelpers:

    def test_select(self):
        data = {"a": {"b": {"c": 1}}}
        assert select(data, "a.b.c") == 1
        assert select(data, "a.x.c") is None
        assert select({"a": [1]}, "a.b") is None

    def test_flatten_element_without_properties(self):
        flat = flatten_element({"id": "e1", "name": "Thing"})
        assert flat == {"id": "e1", "name": "Thing", "category": None, "properties": {}}

    def test_category_filter_escapes_quotes(self):
        assert category_filter("Mark's Walls", None) == r"'property.name.category'=='Mark\'s Walls'"
        assert category_filter("Doors", "Type").endswith("'property.name.Element Context'=='Type'")

    def test_flatten_element_skips_malformed_properties(self):
        raw = {"id": "e1", "properties": {"results": ["junk", {"name": "Category", "value": "Doors"}]}}
        assert flatten_element(raw)["category"] == "Doors"
