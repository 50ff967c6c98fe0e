"""Read-only views of documents produced by other tools."""

from readgate.collaborators.error_db import ErrorPatternDB, load_error_db
from readgate.collaborators.graph import DependencyGraph, DependencyNode, load_graph

__all__ = [
    "DependencyGraph",
    "DependencyNode",
    "ErrorPatternDB",
    "load_error_db",
    "load_graph",
]
