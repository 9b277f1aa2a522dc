"""AEC Data Model GraphQL client.

Thin urllib wrapper that posts queries to the AECDM endpoint and reshapes
nested responses into flat records.
"""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.request
from typing import Any

from aecdm.config import DEFAULT_GRAPHQL_URL, DEFAULT_PAGE_SIZE, DEFAULT_TIMEOUT_S
from aecdm.errors import AecdmError

logger = logging.getLogger(__name__)

HUBS_QUERY = """
query {
    hubs {
        pagination { cursor }
        results { id name }
    }
}
"""

PROJECTS_QUERY = """
query GetProjects($hubId: ID!) {
    projects(hubId: $hubId) {
        pagination { cursor }
        results { id name }
    }
}
"""

ELEMENT_GROUPS_QUERY = """
query GetElementGroupsByProject($projectId: ID!) {
    elementGroupsByProject(projectId: $projectId) {
        results {
            id
            name
            alternativeIdentifiers { fileVersionUrn }
        }
    }
}
"""

ELEMENTS_BY_CATEGORY_QUERY = """
query GetElementsByCategory($elementGroupId: ID!, $propertyFilter: String!, $cursor: String, $limit: Int) {
    elementsByElementGroup(
        elementGroupId: $elementGroupId
        filter: { query: $propertyFilter }
        pagination: { cursor: $cursor, limit: $limit }
    ) {
        pagination { cursor }
        results {
            id
            name
            properties {
                results {
                    name
                    value
                }
            }
        }
    }
}
"""


class GraphQLError(AecdmError):
    """Raised when the endpoint is unreachable or returns errors."""


def select(data: Any, path: str) -> Any:
    """Walk a dotted *path* through nested dicts, returning *None* on a miss."""
    current = data
    for key in path.split("."):
        if not isinstance(current, dict) or key not in current:
            return None
        current = current[key]
    return current


def _quoted(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def category_filter(category: str, context: str | None = "Instance") -> str:
    """Build the property filter selecting *category* elements.

    *context* restricts the ``Element Context`` property; the default
    ``Instance`` leaves out type elements, which carry no geometry.
    """
    clauses = [f"'property.name.category'=={_quoted(category)}"]
    if context:
        clauses.append(f"'property.name.Element Context'=={_quoted(context)}")
    return " and ".join(clauses)


def flatten_element(raw: dict[str, Any]) -> dict[str, Any]:
    """Reshape an element node into ``{id, name, category, properties}``.

    ``properties.results`` is a list of ``{name, value}`` pairs in the API
    response; it becomes a plain name -> value dict here.
    """
    props: dict[str, Any] = {}
    for prop in select(raw, "properties.results") or []:
        if not isinstance(prop, dict):
            continue
        name = prop.get("name")
        if name:
            props[name] = prop.get("value")
    return {
        "id": raw.get("id"),
        "name": raw.get("name"),
        "category": props.get("Category") or props.get("category"),
        "properties": props,
    }


class AECDMClient:
    """Client for the AEC Data Model GraphQL API.

    Parameters
    ----------
    access_token:
        APS bearer token.
    base_url:
        GraphQL endpoint URL.
    region:
        Optional ``region`` header value for non-US hubs.
    timeout:
        Per-request timeout in seconds.
    """

    def __init__(
        self,
        access_token: str,
        *,
        base_url: str = DEFAULT_GRAPHQL_URL,
        region: str | None = None,
        timeout: float = DEFAULT_TIMEOUT_S,
    ) -> None:
        self.access_token = access_token
        self.base_url = base_url
        self.region = region or None
        self.timeout = timeout

    def _headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.access_token}",
        }
        if self.region:
            headers["region"] = self.region
        return headers

    def query(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """Execute *query* and return its ``data`` payload.

        Raises
        ------
        GraphQLError
            If the request fails or the response carries no data.
        """
        if not self.access_token:
            raise GraphQLError("No access token configured; set APS_ACCESS_TOKEN")

        payload = json.dumps({"query": query, "variables": variables or {}}).encode("utf-8")
        req = urllib.request.Request(
            self.base_url,
            data=payload,
            headers=self._headers(),
            method="POST",
        )

        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                body = json.loads(resp.read().decode("utf-8"))
        except (urllib.error.URLError, OSError, TimeoutError, json.JSONDecodeError) as exc:
            logger.debug("GraphQL call failed: %s", exc)
            raise GraphQLError(f"GraphQL request failed: {exc}") from exc

        if not isinstance(body, dict):
            raise GraphQLError(f"Unexpected GraphQL response: {type(body).__name__}")

        data = body.get("data")
        if isinstance(data, dict):
            return data

        errors = body.get("errors")
        if isinstance(errors, list) and errors:
            first = errors[0]
            message = first.get("message") if isinstance(first, dict) else None
            raise GraphQLError(str(message or first))
        if data is None:
            raise GraphQLError("empty response")
        raise GraphQLError(f"Unexpected GraphQL data: {type(data).__name__}")

    def get_hubs(self) -> list[dict[str, Any]]:
        return select(self.query(HUBS_QUERY), "hubs.results") or []

    def get_projects(self, hub_id: str) -> list[dict[str, Any]]:
        data = self.query(PROJECTS_QUERY, {"hubId": hub_id})
        return select(data, "projects.results") or []

    def get_element_groups_by_project(self, project_id: str) -> list[dict[str, Any]]:
        data = self.query(ELEMENT_GROUPS_QUERY, {"projectId": project_id})
        return select(data, "elementGroupsByProject.results") or []

    def get_elements_by_category(
        self,
        element_group_id: str,
        category: str,
        *,
        context: str | None = "Instance",
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> list[dict[str, Any]]:
        """Return flattened elements of *category*, following every page.

        See :func:`category_filter` for *context*.
        """
        property_filter = category_filter(category, context)
        elements: list[dict[str, Any]] = []
        cursor: str | None = None
        while True:
            data = self.query(
                ELEMENTS_BY_CATEGORY_QUERY,
                {
                    "elementGroupId": element_group_id,
                    "propertyFilter": property_filter,
                    "cursor": cursor,
                    "limit": page_size,
                },
            )
            page = select(data, "elementsByElementGroup")
            if page is None:
                break
            if not isinstance(page, dict):
                raise GraphQLError("Malformed elementsByElementGroup page")
            elements.extend(
                flatten_element(e) for e in page.get("results") or [] if isinstance(e, dict)
            )
            cursor = select(page, "pagination.cursor")
            if not cursor:
                break

        logger.info(
            "Found %d %s elements in %s", len(elements), category, element_group_id
        )
        return elements
