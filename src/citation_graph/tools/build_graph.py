"""
MCP Tool: build_citation_graph

Crawls a citation network from seed papers and returns it as DOT.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import mcp.types as types

from ..config import Settings
from ..core import CitationGraph, CitationGraphService, load_bibliography

logger = logging.getLogger("citation-graph")

# Lazy initialization
_service: CitationGraphService | None = None


def _get_service() -> CitationGraphService:
    """Get or create the citation graph service."""
    global _service
    if _service is None:
        _service = CitationGraphService(settings=Settings())
    return _service


def _most_cited(graph: CitationGraph, limit: int = 5) -> list[dict[str, Any]]:
    """Papers with the most incoming citations inside the graph."""
    titles = {node.id: node.title for node in graph.nodes if node.id}
    citation_counts = {
        paper_id: len(graph.get_citing_papers(paper_id)) for paper_id in titles
    }
    top_cited = sorted(citation_counts.items(), key=lambda x: (-x[1], x[0]))[:limit]

    return [
        {
            "paper_id": paper_id,
            "title": titles[paper_id],
            "citations_in_graph": count,
            "references_in_graph": len(graph.get_referenced_papers(paper_id)),
        }
        for paper_id, count in top_cited
    ]


# Tool definition
build_graph_tool = types.Tool(
    name="build_citation_graph",
    description="""Build a pruned citation graph from seed papers.

Starting from the seed papers, repeatedly fetches the references of
papers that are cited often enough by papers already discovered. The
bar grows geometrically with depth (connectivity ** depth), so only
well-connected papers keep being explored.

Afterwards, papers with at most one incoming and one outgoing citation
are pruned away, leaving the dense core of the literature.

Seeds can be given as identifiers (DOIs, Semantic Scholar URLs or ids)
and/or as the path to a BibTeX bibliography.

Returns statistics and the graph in Graphviz DOT format.""",
    inputSchema={
        "type": "object",
        "properties": {
            "identifiers": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Seed papers: DOIs, Semantic Scholar URLs or 40-char ids",
            },
            "bibliography_path": {
                "type": "string",
                "description": "Path to a BibTeX/BibLaTeX file whose entries seed the crawl",
            },
            "max_depth": {
                "type": "integer",
                "description": "Expansion rounds after the seed fetch (default: 4)",
                "minimum": 0,
                "maximum": 8,
            },
            "connectivity": {
                "type": "number",
                "description": "Citation density of the network; tune so only some dozens of papers are expanded in the last round (default: 3.25)",
                "minimum": 1,
            },
            "prune_passes": {
                "type": "integer",
                "description": "Pruning passes over the graph (default: 10)",
                "minimum": 0,
            },
            "prune_to_fixed_point": {
                "type": "boolean",
                "description": "Prune until nothing changes instead of a fixed number of passes",
            },
            "commit_expanded_papers": {
                "type": "boolean",
                "description": "Also add every expanded paper as a node",
            },
        },
    },
)


async def handle_build_graph(arguments: dict[str, Any]) -> list[types.TextContent]:
    """Handle the build_citation_graph tool call."""
    try:
        service = _get_service()

        raw_ids = list(arguments.get("identifiers") or [])
        missing_keys: list[str] = []
        bibliography_path = arguments.get("bibliography_path")
        if bibliography_path:
            imported = load_bibliography(bibliography_path)
            raw_ids.extend(imported.ids)
            missing_keys = imported.missing_keys

        if not raw_ids:
            return [
                types.TextContent(
                    type="text",
                    text=json.dumps({
                        "error": "Provide identifiers or a bibliography_path with DOIs or URLs.",
                    }, indent=2),
                )
            ]

        logger.info(f"Building citation graph from {len(raw_ids)} seeds")

        graph, stats = await service.build_graph(
            raw_ids,
            max_depth=arguments.get("max_depth"),
            connectivity=arguments.get("connectivity"),
            prune_passes=arguments.get("prune_passes"),
            prune_to_fixed_point=arguments.get("prune_to_fixed_point"),
            commit_expanded_papers=arguments.get("commit_expanded_papers"),
        )

        result = {
            "seeds": {
                "given": len(raw_ids),
                "resolved": stats.seed_resolved,
                "bibliography_keys_without_id": missing_keys,
            },
            "rounds": [round_stats.model_dump() for round_stats in stats.rounds],
            "statistics": {
                "nodes_before_pruning": stats.nodes_before_pruning,
                "edges_before_pruning": stats.edges_before_pruning,
                "prune_passes": stats.prune_passes,
                "total_papers": stats.nodes,
                "total_edges": stats.edges,
            },
            "most_cited_in_graph": _most_cited(graph),
            "dot": service.render(graph),
        }

        return [types.TextContent(type="text", text=json.dumps(result, indent=2))]

    except Exception as e:
        logger.error(f"Error building graph: {e}")
        return [
            types.TextContent(
                type="text",
                text=json.dumps({"error": str(e)}, indent=2),
            )
        ]
