"""
Data models for citation graph construction.

These models are pure Pydantic with no MCP dependencies,
making them usable by the CLI, the MCP tools and other Python code.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class IdentifierKind(str, Enum):
    """
    Kinds of paper identifier the batch endpoint accepts.

    - DOI: Digital Object Identifier, sent as 'DOI:<value>'
    - NATIVE: Semantic Scholar paper id, sent as-is
    """

    DOI = "doi"
    NATIVE = "native"


class PaperIdentifier(BaseModel):
    """A typed paper identifier produced by the identifier resolver."""

    model_config = ConfigDict(frozen=True)

    kind: IdentifierKind = Field(..., description="Identifier namespace")
    value: str = Field(..., description="Identifier without any namespace prefix")

    @classmethod
    def doi(cls, value: str) -> PaperIdentifier:
        return cls(kind=IdentifierKind.DOI, value=value)

    @classmethod
    def native(cls, value: str) -> PaperIdentifier:
        return cls(kind=IdentifierKind.NATIVE, value=value)

    def to_wire(self) -> str:
        """Format the identifier the way the batch endpoint expects it."""
        if self.kind == IdentifierKind.DOI:
            return f"DOI:{self.value}"
        return self.value

    def __str__(self) -> str:
        return self.to_wire()


class PaperStub(BaseModel):
    """
    A paper known only by reference.

    Stubs are compared and hashed on all fields, so two stubs with the
    same id but different titles are distinct graph nodes. The id may be
    missing when the upstream never resolved the reference.
    """

    model_config = ConfigDict(frozen=True)

    id: Optional[str] = Field(default=None, description="Semantic Scholar paper id")
    title: str = Field(..., description="Paper title")
    url: Optional[str] = Field(default=None, description="Canonical paper URL")


class PaperRecord(BaseModel):
    """A resolved paper together with its outbound references."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Semantic Scholar paper id")
    title: str = Field(..., description="Paper title")
    url: str = Field(default="", description="Canonical paper URL")
    references: tuple[PaperStub, ...] = Field(
        default=(), description="Papers this one references, in upstream order"
    )

    def to_stub(self) -> PaperStub:
        return PaperStub(id=self.id, title=self.title, url=self.url)

    def reference_ids(self) -> list[str]:
        """Ids of the references that have one, in order."""
        return [ref.id for ref in self.references if ref.id]


class Edge(BaseModel):
    """A citation edge: ``from_id`` references ``to_id``."""

    model_config = ConfigDict(frozen=True)

    from_id: str = Field(..., description="Referencing paper id")
    to_id: str = Field(..., description="Referenced paper id")


class CitationGraph(BaseModel):
    """
    The committed citation graph.

    Nodes and edges only grow while crawling (via ``commit``) and only
    shrink while pruning. Both are plain sets, so duplicates collapse on
    full value equality.
    """

    nodes: set[PaperStub] = Field(default_factory=set)
    edges: set[Edge] = Field(default_factory=set)

    def commit(self, nodes: set[PaperStub], edges: set[Edge]) -> None:
        """Union a round's nodes and edges into the graph."""
        self.nodes |= nodes
        self.edges |= edges

    @property
    def node_count(self) -> int:
        """Number of papers in the graph."""
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        """Number of citation relationships in the graph."""
        return len(self.edges)

    def node_ids(self) -> set[str]:
        return {node.id for node in self.nodes if node.id}

    def get_citing_papers(self, paper_id: str) -> list[str]:
        """Get all papers that cite the given paper."""
        return sorted(edge.from_id for edge in self.edges if edge.to_id == paper_id)

    def get_referenced_papers(self, paper_id: str) -> list[str]:
        """Get all papers that the given paper cites."""
        return sorted(edge.to_id for edge in self.edges if edge.from_id == paper_id)


class RoundStats(BaseModel):
    """What happened in one expansion round."""

    round: int
    threshold: int
    staged: int = Field(default=0, description="Frontier size before selection")
    expanded: int = Field(default=0, description="Entries selected and expanded")
    requested: int = Field(default=0, description="Reference ids sent to the data source")
    resolved: int = Field(default=0, description="Records the data source returned")


class CrawlStats(BaseModel):
    """Summary of a crawl and the pruning that followed it."""

    seed_requested: int = 0
    seed_resolved: int = 0
    rounds: list[RoundStats] = Field(default_factory=list)
    nodes_before_pruning: int = 0
    edges_before_pruning: int = 0
    prune_passes: int = 0
    nodes: int = 0
    edges: int = 0
