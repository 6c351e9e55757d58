"""
Frontier store for the citation crawl.

Holds every discovered-but-not-yet-expanded paper together with an
approximate citation signal: how many fetched papers referenced it while
it was staged. Each round only papers whose signal reaches a threshold
that grows geometrically with depth are expanded, which keeps the crawl
bounded on dense citation networks.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Iterable, Iterator

from .models import PaperRecord, PaperStub

logger = logging.getLogger("citation-graph")


def expansion_threshold(round_index: int, connectivity: float) -> int:
    """
    Minimum citation signal needed to be expanded in a round.

    Round 0 always has threshold 1, so every staged paper qualifies.

    Args:
        round_index: Zero-based round number.
        connectivity: Growth factor of the threshold, at least 1.
    """
    if connectivity < 1:
        raise ValueError(f"connectivity must be at least 1, got {connectivity}")
    if round_index < 0:
        raise ValueError(f"round_index must not be negative, got {round_index}")
    return math.floor(connectivity**round_index)


@dataclass
class FrontierEntry:
    """A staged paper and the citation signal it has gathered so far."""

    record: PaperRecord
    citation_signal: int = 1


@dataclass
class Expansion:
    """
    A paper taken out of the frontier for expansion.

    Attributes:
        paper_id: Id of the expanded paper
        record: The expanded paper itself
        references: Its full reference list, for the graph
        reference_ids: Ids to fetch in the next round
    """

    paper_id: str
    record: PaperRecord
    references: list[PaperStub] = field(default_factory=list)
    reference_ids: list[str] = field(default_factory=list)


class FrontierStore:
    """
    Staging area mapping paper id -> FrontierEntry.

    A paper id has at most one live entry. Selecting an entry for
    expansion removes it for good: the id is remembered and never staged
    again, even if a later round fetches it a second time.
    """

    def __init__(self):
        self._entries: dict[str, FrontierEntry] = {}
        self._expanded: set[str] = set()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, paper_id: object) -> bool:
        return paper_id in self._entries

    def __iter__(self) -> Iterator[FrontierEntry]:
        return iter(self._entries.values())

    def signal(self, paper_id: str) -> int:
        """Current citation signal of a staged paper, 0 if not staged."""
        entry = self._entries.get(paper_id)
        return entry.citation_signal if entry else 0

    @property
    def expanded_ids(self) -> frozenset[str]:
        return frozenset(self._expanded)

    def _stage(self, record: PaperRecord) -> bool:
        """Stage a record with signal 1 without lowering an existing signal."""
        if record.id in self._expanded:
            return False
        existing = self._entries.get(record.id)
        signal = max(existing.citation_signal, 1) if existing else 1
        self._entries[record.id] = FrontierEntry(record=record, citation_signal=signal)
        return existing is None

    def seed(self, records: Iterable[PaperRecord]) -> None:
        """Stage the initial batch of papers, each with signal 1."""
        added = sum(1 for record in records if self._stage(record))
        logger.info(f"Seeded frontier with {added} papers")

    def accumulate(self, records: Iterable[PaperRecord]) -> None:
        """
        Fold one round's freshly fetched papers into the frontier.

        New papers are staged with signal 1. Then every reference id in
        any of the records bumps the signal of the matching staged entry
        by one, once per occurrence.
        """
        records = list(records)
        added = 0
        for record in records:
            if record.id not in self._entries and self._stage(record):
                added += 1

        increments = 0
        for record in records:
            for ref_id in record.reference_ids():
                entry = self._entries.get(ref_id)
                if entry is not None:
                    entry.citation_signal += 1
                    increments += 1

        logger.debug(
            f"Accumulated {len(records)} papers: {added} newly staged, "
            f"{increments} signal increments"
        )

    def select_for_expansion(self, round_index: int, connectivity: float) -> list[Expansion]:
        """
        Take every entry whose signal reaches this round's threshold.

        Selected entries are removed from the store. Entries below the
        threshold stay staged for a later round.
        """
        threshold = expansion_threshold(round_index, connectivity)
        selected = [
            paper_id
            for paper_id, entry in self._entries.items()
            if entry.citation_signal >= threshold
        ]

        expansions = []
        for paper_id in selected:
            entry = self._entries.pop(paper_id)
            self._expanded.add(paper_id)
            expansions.append(
                Expansion(
                    paper_id=paper_id,
                    record=entry.record,
                    references=list(entry.record.references),
                    reference_ids=entry.record.reference_ids(),
                )
            )

        logger.info(
            f"Round {round_index}: threshold {threshold}, expanding "
            f"{len(expansions)} papers, {len(self._entries)} left staged"
        )
        return expansions
