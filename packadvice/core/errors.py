from __future__ import annotations


class PackAdviserError(Exception):
    """
    Fatal analysis failure. `phase` names the orchestrator step that failed:
    path, metadata, catalog, graph or cancelled.
    """

    phase = "analysis"

    def __init__(self, message: str, path: str = ""):
        super().__init__(message)
        self.path = path


class MetadataError(PackAdviserError):
    phase = "metadata"


class CatalogError(PackAdviserError):
    phase = "catalog"


class PathNotFoundError(CatalogError):
    phase = "path"


class GraphError(PackAdviserError):
    phase = "graph"


class AnalysisCancelledError(PackAdviserError):
    phase = "cancelled"
