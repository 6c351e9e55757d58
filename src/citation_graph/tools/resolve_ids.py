"""
MCP Tool: resolve_identifiers

Shows how raw strings resolve to batch-endpoint identifiers.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import mcp.types as types

from ..core import resolve_identifier

logger = logging.getLogger("citation-graph")

# Tool definition
resolve_ids_tool = types.Tool(
    name="resolve_identifiers",
    description="""Check which seed identifiers are recognized.

Accepts DOIs (bare, 'doi:'-prefixed or doi.org links), Semantic Scholar
paper URLs and 40-character Semantic Scholar ids. Unrecognized strings
would be skipped by build_citation_graph.""",
    inputSchema={
        "type": "object",
        "properties": {
            "identifiers": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Raw identifiers to resolve",
            },
        },
        "required": ["identifiers"],
    },
)


async def handle_resolve_ids(arguments: dict[str, Any]) -> list[types.TextContent]:
    """Handle the resolve_identifiers tool call."""
    resolved = []
    unrecognized = []
    for raw in arguments.get("identifiers") or []:
        identifier = resolve_identifier(raw)
        if identifier is None:
            unrecognized.append(raw)
        else:
            resolved.append({
                "input": raw,
                "kind": identifier.kind.value,
                "wire_id": identifier.to_wire(),
            })

    logger.debug(f"Resolved {len(resolved)} identifiers, {len(unrecognized)} unrecognized")
    return [
        types.TextContent(
            type="text",
            text=json.dumps(
                {"resolved": resolved, "unrecognized": unrecognized},
                indent=2,
            ),
        )
    ]
