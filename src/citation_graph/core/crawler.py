"""
Citation crawl: iterative frontier expansion.

Starts from one unconditional fetch of the seed papers, then runs up to
``max_depth`` rounds of select -> fetch -> accumulate -> commit.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from .client import SemanticScholarClient
from .frontier import Expansion, FrontierStore, expansion_threshold
from .models import (
    CitationGraph,
    CrawlStats,
    Edge,
    PaperIdentifier,
    PaperRecord,
    PaperStub,
    RoundStats,
)

logger = logging.getLogger("citation-graph")


def _resolved(records: Iterable[Optional[PaperRecord]]) -> list[PaperRecord]:
    return [record for record in records if record is not None]


class CitationCrawler:
    """
    Builds a citation graph by expanding only well-cited papers.

    Rounds run strictly one after another: each round's selection depends
    on every signal increment of the round before it. Within a round the
    data source may fetch sub-batches concurrently, but its results are
    complete before the frontier or graph is touched. If a fetch fails the
    error propagates and nothing from that round is committed.
    """

    def __init__(
        self,
        client: SemanticScholarClient,
        max_depth: int = 4,
        connectivity: float = 3.25,
        commit_expanded_papers: bool = False,
    ):
        """
        Initialize the crawler.

        Args:
            client: Data source used for every batch fetch.
            max_depth: Expansion rounds after the seed fetch.
            connectivity: Growth factor of the expansion threshold. Tune it
                so only some dozens of papers are expanded in the last round.
            commit_expanded_papers: Also commit every expanded paper as a
                graph node. By default only the seed papers and the
                references of expanded papers become nodes.
        """
        if max_depth < 0:
            raise ValueError(f"max_depth must not be negative, got {max_depth}")
        # Validates connectivity
        expansion_threshold(0, connectivity)

        self.client = client
        self.max_depth = max_depth
        self.connectivity = connectivity
        self.commit_expanded_papers = commit_expanded_papers

    async def crawl(
        self,
        seed_ids: Sequence[PaperIdentifier],
        stats: Optional[CrawlStats] = None,
    ) -> CitationGraph:
        """
        Crawl outward from the seed papers.

        Args:
            seed_ids: Resolved seed identifiers. May be empty, which
                yields an empty graph.
            stats: Optional stats object to fill in while crawling.

        Returns:
            The committed (unpruned) citation graph.

        Raises:
            DataSourceError: If any fetch fails; the crawl is aborted.
        """
        stats = stats if stats is not None else CrawlStats()
        frontier = FrontierStore()
        graph = CitationGraph()

        # One request before the loop so the rounds have no special case
        seed_records = _resolved(await self.client.fetch_batch(list(seed_ids)))
        stats.seed_requested = len(seed_ids)
        stats.seed_resolved = len(seed_records)
        frontier.seed(seed_records)
        graph.commit({entry.record.to_stub() for entry in frontier}, set())

        for round_index in range(self.max_depth):
            logger.info(f"depth={round_index}")
            round_stats = await self._run_round(round_index, frontier, graph)
            stats.rounds.append(round_stats)

            if round_stats.expanded == 0:
                # Nothing was fetched, so no signal can grow past the next threshold
                logger.info(f"No more papers to expand at depth {round_index}")
                break

        stats.nodes = graph.node_count
        stats.edges = graph.edge_count
        logger.info(f"Crawl complete: {graph.node_count} nodes, {graph.edge_count} edges")
        return graph

    async def _run_round(
        self,
        round_index: int,
        frontier: FrontierStore,
        graph: CitationGraph,
    ) -> RoundStats:
        """Run one select -> fetch -> accumulate -> commit round."""
        round_stats = RoundStats(
            round=round_index,
            threshold=expansion_threshold(round_index, self.connectivity),
            staged=len(frontier),
        )

        expansions = frontier.select_for_expansion(round_index, self.connectivity)
        nodes, edges = self._round_commit(expansions)
        fetch_ids = self._fetch_ids(expansions)

        records = _resolved(
            await self.client.fetch_batch(
                [PaperIdentifier.native(paper_id) for paper_id in fetch_ids]
            )
        )
        frontier.accumulate(records)
        graph.commit(nodes, edges)

        round_stats.expanded = len(expansions)
        round_stats.requested = len(fetch_ids)
        round_stats.resolved = len(records)
        return round_stats

    def _round_commit(
        self,
        expansions: list[Expansion],
    ) -> tuple[set[PaperStub], set[Edge]]:
        """Nodes and edges contributed by a round's expanded papers."""
        nodes: set[PaperStub] = set()
        edges: set[Edge] = set()
        for expansion in expansions:
            if self.commit_expanded_papers:
                nodes.add(expansion.record.to_stub())
            for reference in expansion.references:
                if not reference.id:
                    continue
                nodes.add(reference)
                edges.add(Edge(from_id=expansion.paper_id, to_id=reference.id))
        return nodes, edges

    def _fetch_ids(self, expansions: list[Expansion]) -> list[str]:
        """Referenced ids to fetch next, de-duplicated in first-seen order."""
        seen: dict[str, None] = {}
        for expansion in expansions:
            for ref_id in expansion.reference_ids:
                seen.setdefault(ref_id, None)
        return list(seen)
