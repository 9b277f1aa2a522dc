"""MCP tool server."""

from aecdm.server.tools import AECDMTools

__all__ = ["AECDMTools"]
