"""
Shared test fixtures for citation-graph tests.
"""

from typing import Callable, Iterable, Optional, Sequence
from unittest.mock import AsyncMock

import pytest

from citation_graph.config import Settings
from citation_graph.core.models import (
    CitationGraph,
    Edge,
    PaperIdentifier,
    PaperRecord,
    PaperStub,
)


def _url(paper_id: str) -> str:
    return f"https://www.semanticscholar.org/paper/{paper_id}"


@pytest.fixture
def make_stub() -> Callable[..., PaperStub]:
    """Factory for reference stubs that match the records from make_record."""

    def _make(paper_id: Optional[str], title: Optional[str] = None) -> PaperStub:
        if paper_id is None:
            return PaperStub(id=None, title=title or "Unresolved reference", url=None)
        return PaperStub(id=paper_id, title=title or f"Paper {paper_id}", url=_url(paper_id))

    return _make


@pytest.fixture
def make_record(make_stub) -> Callable[..., PaperRecord]:
    """Factory for paper records whose references are given by id."""

    def _make(paper_id: str, refs: Iterable[Optional[str]] = ()) -> PaperRecord:
        return PaperRecord(
            id=paper_id,
            title=f"Paper {paper_id}",
            url=_url(paper_id),
            references=tuple(make_stub(ref) for ref in refs),
        )

    return _make


@pytest.fixture
def corpus_client() -> Callable[[dict[str, PaperRecord]], AsyncMock]:
    """
    Factory for a fake data source backed by an in-memory corpus.

    Identifiers are looked up by value; unknown ids resolve to None.
    Every call's identifiers are recorded in ``client.requests``.
    """

    def _make(corpus: dict[str, PaperRecord]) -> AsyncMock:
        client = AsyncMock()
        client.requests = []

        async def fetch_batch(ids: Sequence[PaperIdentifier]):
            client.requests.append([pid.value for pid in ids])
            return [corpus.get(pid.value) for pid in ids]

        client.fetch_batch.side_effect = fetch_batch
        return client

    return _make


@pytest.fixture
def sample_corpus(make_record) -> dict[str, PaperRecord]:
    """
    A small network where one reference starves.

    S1 and S2 are the seeds. B is cited by A within the same round and
    gets expanded in round 1. A reaches signal 2 only after round 1,
    below the round 2 threshold of 4 (connectivity 2), so it starves.
    """
    records = [
        make_record("S1", ["A", "B"]),
        make_record("S2", ["A", "B"]),
        make_record("A", ["B", "C"]),
        make_record("B", ["C"]),
        make_record("C", ["A"]),
    ]
    return {record.id: record for record in records}


@pytest.fixture
def chain_graph(make_stub) -> CitationGraph:
    """30 papers citing their neighbours in both directions."""
    ids = [f"v{i:02d}" for i in range(30)]
    graph = CitationGraph()
    graph.commit(
        {make_stub(pid) for pid in ids},
        {Edge(from_id=a, to_id=b) for a, b in zip(ids, ids[1:])}
        | {Edge(from_id=b, to_id=a) for a, b in zip(ids, ids[1:])},
    )
    return graph


@pytest.fixture
def settings() -> Settings:
    """Settings that never touch the network on their own."""
    return Settings(
        S2_BASE_URL="https://s2.test/graph/v1",
        RETRY_DELAY=0,
        MAX_DEPTH=4,
        CONNECTIVITY=2.0,
    )
