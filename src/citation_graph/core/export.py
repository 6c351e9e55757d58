"""
Graphviz DOT export of a citation graph.

One line per node and one line per edge inside a ``digraph`` block.
Lines are sorted so the same graph always renders the same text.
"""

from __future__ import annotations

from .models import CitationGraph, PaperStub


def escape(s: str) -> str:
    """Escape ``\\`` as ``\\\\`` and ``"`` as ``\\"``; nothing else."""
    return s.replace("\\", "\\\\").replace('"', '\\"')


def _node_line(node: PaperStub) -> str:
    return (
        f'    "{escape(node.id or "")}" '
        f'[label="{escape(node.title)}",URL="{escape(node.url or "")}"];'
    )


def render_dot(graph: CitationGraph) -> str:
    """Render the graph as a DOT digraph, ending with a newline."""
    nodes = sorted(graph.nodes, key=lambda node: (node.id or "", node.title, node.url or ""))
    edges = sorted(graph.edges, key=lambda edge: (edge.from_id, edge.to_id))

    lines = ["digraph {"]
    lines.extend(_node_line(node) for node in nodes)
    lines.extend(
        f'    "{escape(edge.from_id)}" -> "{escape(edge.to_id)}";' for edge in edges
    )
    lines.append("}")
    return "\n".join(lines) + "\n"
