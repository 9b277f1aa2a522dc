"""MCP server entry point — registers AECDMTools on a FastMCP instance.

Transport: stdio.  Logging goes to stderr so it never mixes with protocol
messages on stdout.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from mcp.server.fastmcp import FastMCP

from aecdm.client.graphql import AECDMClient
from aecdm.client.sources import FolderGeometrySource, GeometrySource
from aecdm.config_manager import ConfigManager
from aecdm.server.tools import AECDMTools

logger = logging.getLogger(__name__)


def build_geometry_source(config: dict[str, str]) -> GeometrySource | None:
    """Pick a geometry source from configuration, IFC first."""
    ifc_path = config.get("AECDM_IFC_PATH")
    if ifc_path:
        from aecdm.extraction.ifc import IfcGeometrySource

        return IfcGeometrySource(Path(ifc_path))
    geometry_dir = config.get("AECDM_GEOMETRY_DIR")
    if geometry_dir:
        return FolderGeometrySource(geometry_dir)
    return None


def build_tools(config: dict[str, str]) -> AECDMTools:
    client = AECDMClient(
        config.get("APS_ACCESS_TOKEN", ""),
        base_url=config["AECDM_GRAPHQL_URL"],
        region=config.get("AECDM_REGION"),
        timeout=float(config["AECDM_TIMEOUT"]),
    )
    return AECDMTools(
        client,
        build_geometry_source(config),
        default_threshold=float(config["AECDM_CLASH_THRESHOLD"]),
    )


def build_server(tools: AECDMTools) -> FastMCP:
    """Create the FastMCP server and register every tool."""
    mcp = FastMCP("aecdm")

    @mcp.tool(name="get_hubs", description="Get the ACC hubs available to the user")
    async def get_hubs() -> str:
        return await tools.get_hubs()

    @mcp.tool(name="get_projects", description="Get the ACC projects from one hub")
    async def get_projects(hub_id: str) -> str:
        return await tools.get_projects(hub_id)

    @mcp.tool(
        name="get_element_groups_by_project",
        description="Get the element groups (designs) of one ACC project",
    )
    async def get_element_groups_by_project(project_id: str) -> str:
        return await tools.get_element_groups_by_project(project_id)

    @mcp.tool(
        name="get_elements_by_category",
        description="List the elements of one category (e.g. Walls) in an element group",
    )
    async def get_elements_by_category(element_group_id: str, category: str) -> str:
        return await tools.get_elements_by_category(element_group_id, category)

    @mcp.tool(
        name="clash_detection",
        description=(
            "Detect bounding box clashes between every pair of the given elements. "
            "threshold_volume is the minimum overlap volume in cubic model units."
        ),
    )
    async def clash_detection(
        element_ids: list[str], threshold_volume: float | None = None
    ) -> str:
        return await tools.clash_detection(element_ids, threshold_volume)

    @mcp.tool(
        name="find_elements_in_container",
        description=(
            "Find elements of a category that are fully or partially inside a "
            "container element such as a room"
        ),
    )
    async def find_elements_in_container(
        container_id: str, element_group_id: str, category: str
    ) -> str:
        return await tools.find_elements_in_container(container_id, element_group_id, category)

    @mcp.tool(
        name="check_elements_in_container",
        description=(
            "Classify each listed element as fully contained, partially contained, "
            "or outside a container element"
        ),
    )
    async def check_elements_in_container(container_id: str, element_ids: list[str]) -> str:
        return await tools.check_elements_in_container(container_id, element_ids)

    return mcp


def main() -> None:
    """Console entry point: ``aecdm-mcp``."""
    manager = ConfigManager()
    config = manager.load_config(Path.cwd())

    logging.basicConfig(
        level=config.get("AECDM_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    logger.info("Starting AECDM MCP server with %s", manager.redacted(config))

    build_server(build_tools(config)).run()


if __name__ == "__main__":
    main()
