"""
Low-connectivity pruning of the committed citation graph.

Each pass drops every node with an id that has at most one incoming and
at most one outgoing edge, then drops every edge whose endpoints are no
longer both present. Passes only ever shrink the graph, so repeating
them converges; a fixed number of passes is a bound, not a guarantee of
reaching the fixed point.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Optional

from .models import CitationGraph

logger = logging.getLogger("citation-graph")

DEFAULT_PRUNE_PASSES = 10


def prune_pass(graph: CitationGraph) -> bool:
    """
    Run one pruning pass over the graph in place.

    Nodes without an id are never removed here: degrees are counted by
    id, so they have no edges to be judged on.

    Returns:
        True if any node or edge was removed.
    """
    incoming = Counter(edge.to_id for edge in graph.edges)
    outgoing = Counter(edge.from_id for edge in graph.edges)

    kept_nodes = {
        node
        for node in graph.nodes
        if not node.id or incoming[node.id] > 1 or outgoing[node.id] > 1
    }
    surviving_ids = {node.id for node in kept_nodes if node.id}
    kept_edges = {
        edge
        for edge in graph.edges
        if edge.from_id in surviving_ids and edge.to_id in surviving_ids
    }

    changed = len(kept_nodes) != len(graph.nodes) or len(kept_edges) != len(graph.edges)
    graph.nodes = kept_nodes
    graph.edges = kept_edges
    return changed


def prune(graph: CitationGraph, passes: int = DEFAULT_PRUNE_PASSES) -> int:
    """
    Run a fixed number of pruning passes.

    Stops early once a pass changes nothing, since every further pass
    would be a no-op.

    Returns:
        Number of passes that were run.
    """
    if passes < 0:
        raise ValueError(f"passes must not be negative, got {passes}")

    before = (graph.node_count, graph.edge_count)
    run = 0
    for _ in range(passes):
        run += 1
        if not prune_pass(graph):
            break

    logger.info(
        f"Pruned graph in {run} passes: {before[0]} -> {graph.node_count} nodes, "
        f"{before[1]} -> {graph.edge_count} edges"
    )
    return run


def prune_until_stable(graph: CitationGraph, max_passes: Optional[int] = None) -> int:
    """
    Prune until a pass removes nothing.

    Args:
        graph: Graph to prune in place.
        max_passes: Optional safety bound; None means no bound. The
            graph is finite and every changing pass removes something,
            so the loop always terminates.

    Returns:
        Number of passes that were run, including the final no-op pass.
    """
    run = 0
    while max_passes is None or run < max_passes:
        run += 1
        if not prune_pass(graph):
            break

    logger.info(
        f"Pruned graph to a fixed point in {run} passes: "
        f"{graph.node_count} nodes, {graph.edge_count} edges"
    )
    return run
