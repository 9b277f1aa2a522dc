"""Collaborators that resolve elements and their geometry."""

from aecdm.client.graphql import AECDMClient, GraphQLError
from aecdm.client.sources import (
    FolderGeometrySource,
    GeometrySource,
    InMemoryGeometrySource,
    fetch_elements,
)

__all__ = [
    "AECDMClient",
    "FolderGeometrySource",
    "GeometrySource",
    "GraphQLError",
    "InMemoryGeometrySource",
    "fetch_elements",
]
