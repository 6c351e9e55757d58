"""
Citation graph service - main business logic.

This is the core service used by both the CLI and the MCP tools.
It has NO MCP dependencies.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from ..config import Settings
from .client import SemanticScholarClient
from .crawler import CitationCrawler
from .export import render_dot
from .identifiers import resolve_identifiers
from .models import CitationGraph, CrawlStats
from .pruning import prune, prune_until_stable

logger = logging.getLogger("citation-graph")


class CitationGraphService:
    """
    Resolves seed identifiers, crawls, prunes and renders.

    Example usage:
        service = CitationGraphService()
        graph, stats = await service.build_graph(["10.1016/j.jterra.2024.100989"])
        print(service.render(graph))
        await service.close()
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[SemanticScholarClient] = None,
    ):
        """
        Initialize the service.

        Args:
            settings: Defaults for the crawl and the data source.
            client: Data source to use instead of one built from settings.
        """
        self.settings = settings or Settings()
        self.client = client or SemanticScholarClient(
            base_url=self.settings.S2_BASE_URL,
            api_key=self.settings.S2_API_KEY,
            timeout=self.settings.REQUEST_TIMEOUT,
            max_batch_size=self.settings.MAX_BATCH_SIZE,
            max_attempts=self.settings.MAX_ATTEMPTS,
            retry_delay=self.settings.RETRY_DELAY,
        )

    async def build_graph(
        self,
        raw_ids: Iterable[str],
        max_depth: Optional[int] = None,
        connectivity: Optional[float] = None,
        prune_passes: Optional[int] = None,
        prune_to_fixed_point: Optional[bool] = None,
        commit_expanded_papers: Optional[bool] = None,
    ) -> tuple[CitationGraph, CrawlStats]:
        """
        Build a pruned citation graph from raw seed identifiers.

        Unrecognized identifiers are dropped; an empty seed set produces
        an empty graph. Any argument left as None falls back to settings.

        Returns:
            The pruned graph and statistics about the run.

        Raises:
            DataSourceError: If fetching fails at any point.
        """
        s = self.settings
        seed_ids = resolve_identifiers(raw_ids)
        logger.info(f"Resolved {len(seed_ids)} seed identifiers")

        crawler = CitationCrawler(
            self.client,
            max_depth=s.MAX_DEPTH if max_depth is None else max_depth,
            connectivity=s.CONNECTIVITY if connectivity is None else connectivity,
            commit_expanded_papers=(
                s.COMMIT_EXPANDED_PAPERS
                if commit_expanded_papers is None
                else commit_expanded_papers
            ),
        )
        stats = CrawlStats()
        graph = await crawler.crawl(seed_ids, stats=stats)

        stats.nodes_before_pruning = graph.node_count
        stats.edges_before_pruning = graph.edge_count
        passes = s.PRUNE_PASSES if prune_passes is None else prune_passes
        to_fixed_point = (
            s.PRUNE_TO_FIXED_POINT if prune_to_fixed_point is None else prune_to_fixed_point
        )
        if to_fixed_point:
            stats.prune_passes = prune_until_stable(graph)
        else:
            stats.prune_passes = prune(graph, passes=passes)

        stats.nodes = graph.node_count
        stats.edges = graph.edge_count
        return graph, stats

    def render(self, graph: CitationGraph) -> str:
        """Render a graph as DOT text."""
        return render_dot(graph)

    async def close(self) -> None:
        """Clean up resources."""
        await self.client.close()
