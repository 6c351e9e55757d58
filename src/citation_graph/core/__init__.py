"""
Core citation graph module.

This module contains the pure Python crawl logic with NO MCP dependencies.
It can be used directly by the CLI or other Python code.

Example usage:
    from citation_graph.core import CitationGraphService

    service = CitationGraphService()
    graph, stats = await service.build_graph(["10.1016/j.jterra.2024.100989"])
"""

from .models import (
    IdentifierKind,
    PaperIdentifier,
    PaperStub,
    PaperRecord,
    Edge,
    CitationGraph,
    RoundStats,
    CrawlStats,
)
from .exceptions import (
    DataSourceError,
    TransportError,
    ResponseParseError,
    UpstreamError,
    RateLimitError,
)
from .identifiers import resolve_identifier, resolve_identifiers
from .bibliography import BibliographyImport, identifiers_from_bibtex, load_bibliography
from .client import SemanticScholarClient
from .frontier import Expansion, FrontierEntry, FrontierStore, expansion_threshold
from .crawler import CitationCrawler
from .pruning import prune, prune_pass, prune_until_stable
from .export import escape, render_dot
from .service import CitationGraphService

__all__ = [
    # Models
    "IdentifierKind",
    "PaperIdentifier",
    "PaperStub",
    "PaperRecord",
    "Edge",
    "CitationGraph",
    "RoundStats",
    "CrawlStats",
    # Errors
    "DataSourceError",
    "TransportError",
    "ResponseParseError",
    "UpstreamError",
    "RateLimitError",
    # Seed identifiers
    "resolve_identifier",
    "resolve_identifiers",
    "BibliographyImport",
    "identifiers_from_bibtex",
    "load_bibliography",
    # Crawl
    "SemanticScholarClient",
    "Expansion",
    "FrontierEntry",
    "FrontierStore",
    "expansion_threshold",
    "CitationCrawler",
    "prune",
    "prune_pass",
    "prune_until_stable",
    "escape",
    "render_dot",
    # Service
    "CitationGraphService",
]
