"""
MCP Tools for citation graph operations.

Provides tools for:
- Building a pruned citation graph from seed papers
- Checking how seed identifiers resolve
"""

from .build_graph import build_graph_tool, handle_build_graph
from .resolve_ids import resolve_ids_tool, handle_resolve_ids

__all__ = [
    "build_graph_tool",
    "handle_build_graph",
    "resolve_ids_tool",
    "handle_resolve_ids",
]
