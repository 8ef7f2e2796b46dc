"""Data models for the Thesis Copilot retrieval service."""
from .chunk import Chunk, ChunkMetadata, ScoredChunk
from .retrieval import (
    ChunkScore,
    QueryIntent,
    RankingWeights,
    RetrievalContext,
    RetrievalFilters,
    RetrievalResponse,
    SectionContext,
    SubScores,
)

__all__ = [
    "Chunk",
    "ChunkMetadata",
    "ScoredChunk",
    "ChunkScore",
    "QueryIntent",
    "RankingWeights",
    "RetrievalContext",
    "RetrievalFilters",
    "RetrievalResponse",
    "SectionContext",
    "SubScores",
]
