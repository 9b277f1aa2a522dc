"""AECDMTools — the operations exposed as MCP tool calls.

Every tool returns text.  Request-level failures come back as an
``Error: ...`` string rather than an exception crossing the wire.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from aecdm.client.graphql import AECDMClient
from aecdm.client.sources import GeometrySource, fetch_elements
from aecdm.config import DEFAULT_CLASH_THRESHOLD
from aecdm.errors import AecdmError, MissingContainer
from aecdm.models.element import ElementGeometry
from aecdm.validation.analysis import compute_clashes, compute_containment, ensure_unique_ids
from aecdm.validation.report import ContainmentMode

logger = logging.getLogger(__name__)


def _error(exc: Exception) -> str:
    return f"Error: {exc}"


class AECDMTools:
    """Tool implementations bound to a data client and a geometry source.

    Parameters
    ----------
    client:
        GraphQL client used for hub/project/element listing.
    geometry:
        Source resolving element ids to mesh geometry.
    default_threshold:
        Clash volume threshold used when the caller gives none.
    """

    def __init__(
        self,
        client: AECDMClient | None = None,
        geometry: GeometrySource | None = None,
        *,
        default_threshold: float = DEFAULT_CLASH_THRESHOLD,
    ) -> None:
        self.client = client
        self.geometry = geometry
        self.default_threshold = default_threshold

    def _require_client(self) -> AECDMClient:
        if self.client is None:
            raise AecdmError("No AEC Data Model client configured")
        return self.client

    def _require_geometry(self) -> GeometrySource:
        if self.geometry is None:
            raise AecdmError(
                "No geometry source configured; set AECDM_GEOMETRY_DIR or AECDM_IFC_PATH"
            )
        return self.geometry

    async def _listing(self, method: str, *args: Any) -> str:
        try:
            client = self._require_client()
            results = await asyncio.to_thread(getattr(client, method), *args)
        except AecdmError as exc:
            logger.warning("%s failed: %s", method, exc)
            return _error(exc)
        return json.dumps(results, indent=2)

    # -- Data model listing ---------------------------------------------------

    async def get_hubs(self) -> str:
        return await self._listing("get_hubs")

    async def get_projects(self, hub_id: str) -> str:
        return await self._listing("get_projects", hub_id)

    async def get_element_groups_by_project(self, project_id: str) -> str:
        return await self._listing("get_element_groups_by_project", project_id)

    async def get_elements_by_category(self, element_group_id: str, category: str) -> str:
        return await self._listing("get_elements_by_category", element_group_id, category)

    # -- Spatial analysis -----------------------------------------------------

    async def clash_detection(
        self,
        element_ids: list[str],
        threshold_volume: float | None = None,
    ) -> str:
        """Fetch the elements and report every clashing pair."""
        threshold = self.default_threshold if threshold_volume is None else threshold_volume
        try:
            if len(element_ids) < 2:
                raise AecdmError("Clash detection needs at least two element ids")
            ensure_unique_ids(element_ids)
            source = self._require_geometry()
            elements, missing = await fetch_elements(source, element_ids)
            report = compute_clashes(elements, threshold, missing=missing)
        except (AecdmError, ValueError) as exc:
            return _error(exc)
        return report.to_text()

    async def find_elements_in_container(
        self,
        container_id: str,
        element_group_id: str,
        category: str,
    ) -> str:
        """Search one category of an element group for elements inside a container."""
        try:
            client = self._require_client()
            source = self._require_geometry()
            listed = await asyncio.to_thread(
                client.get_elements_by_category, element_group_id, category
            )
            names = {e["id"]: e.get("name") for e in listed if e.get("id")}
            candidate_ids = [eid for eid in names if eid != container_id]

            container = await self._fetch_container(source, container_id)
            elements, missing = await fetch_elements(source, candidate_ids)
            elements = [_with_name(e, names.get(e.id)) for e in elements]
            report = compute_containment(
                container, elements, ContainmentMode.CATEGORY_SEARCH, missing=missing
            )
        except (AecdmError, ValueError) as exc:
            return _error(exc)
        return report.to_text()

    async def check_elements_in_container(
        self,
        container_id: str,
        element_ids: list[str],
    ) -> str:
        """Classify an explicit list of elements against a container."""
        try:
            ensure_unique_ids(element_ids)
            source = self._require_geometry()
            container = await self._fetch_container(source, container_id)
            elements, missing = await fetch_elements(source, element_ids)
            report = compute_containment(
                container, elements, ContainmentMode.EXPLICIT_LIST, missing=missing
            )
        except (AecdmError, ValueError) as exc:
            return _error(exc)
        return report.to_text()

    async def _fetch_container(
        self, source: GeometrySource, container_id: str
    ) -> ElementGeometry:
        found, _ = await fetch_elements(source, [container_id])
        if not found:
            raise MissingContainer(container_id)
        return found[0]


def _with_name(element: ElementGeometry, name: str | None) -> ElementGeometry:
    if element.name or not name:
        return element
    return element.model_copy(update={"name": name})
