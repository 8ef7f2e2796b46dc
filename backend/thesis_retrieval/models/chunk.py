"""Chunk data models."""
from dataclasses import dataclass, field
from typing import Optional, List, Tuple


@dataclass(frozen=True)
class ChunkMetadata:
    """Lightweight structural metadata captured at ingestion time."""
    heading: Optional[str] = None
    page_range: Optional[Tuple[int, int]] = None


@dataclass(frozen=True)
class Chunk:
    """An immutable fragment of ingested source text used as evidence."""
    id: str  # Format: "{source_id}_{order}"
    source_id: str
    project_id: str
    order: int
    text: str
    token_count: int = 0
    embedding: Optional[List[float]] = None
    metadata: Optional[ChunkMetadata] = None

    def __post_init__(self):
        if not self.text:
            raise ValueError("Chunk text cannot be empty")

    @property
    def citation(self) -> str:
        """Label used when the chunk is cited in a draft."""
        if self.metadata and self.metadata.heading:
            return self.metadata.heading
        return "Section"


@dataclass
class ScoredChunk:
    """Chunk with its final retrieval score."""
    chunk: Chunk
    score: Optional[float]  # None when a retrieval path supplies no score
    citation: Optional[str] = None
