"""
Citation Graph
==============

Turns a seed set of papers into a pruned citation graph using the
Semantic Scholar batch API.

This package provides:
- core: Pure Python crawl, pruning and export (no MCP dependencies)
- proxy: Rate-limiting proxy that shares one Semantic Scholar API key
- tools: MCP tools for building citation graphs
- cli: The citation-graph command
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
