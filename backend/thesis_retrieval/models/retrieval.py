"""Retrieval request, scoring and response data models."""
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Tuple

from .chunk import ScoredChunk

# Drafting context tags
SECTION_DRAFTING = "section_drafting"
PARAGRAPH_REWRITE = "paragraph_rewrite"
RESEARCH_QUERY = "research_query"
CONTEXT_TYPES = (SECTION_DRAFTING, PARAGRAPH_REWRITE, RESEARCH_QUERY)

# Evidentiary roles
PRIMARY = "primary"
SUPPORTING = "supporting"
CONTRASTING = "contrasting"


@dataclass(frozen=True)
class RankingWeights:
    """
    Weight vector applied to the five sub-scores.

    Weights are not renormalized; callers overriding them are responsible
    for a coherent total.
    """
    semantic_similarity: float = 0.40
    recency: float = 0.15
    source_reliability: float = 0.20
    contextual_relevance: float = 0.20
    diversity_bonus: float = 0.05


@dataclass(frozen=True)
class SectionContext:
    """Thesis section the evidence is being gathered for."""
    title: str
    objective: str
    preceding_content: Optional[str] = None
    following_outline: Optional[str] = None


@dataclass(frozen=True)
class RetrievalFilters:
    """Optional filters accepted by the retrieval contract."""
    source_types: Optional[List[str]] = None
    date_range: Optional[Tuple[date, date]] = None
    author_filters: Optional[List[str]] = None
    exclude_chunk_ids: Optional[List[str]] = None


@dataclass(frozen=True)
class RetrievalContext:
    """Input envelope for an enhanced retrieval call."""
    query: str
    project_id: str
    context_type: Optional[str] = None
    section_context: Optional[SectionContext] = None
    filters: Optional[RetrievalFilters] = None
    ranking_weights: Optional[RankingWeights] = None


@dataclass
class SubScores:
    """The five independent sub-scores of a chunk."""
    semantic_similarity: float
    recency: float
    source_reliability: float
    contextual_relevance: float
    diversity_bonus: float = 0.0


@dataclass
class ChunkScore:
    """Per-request scoring record for one chunk; never persisted."""
    chunk_id: str
    total_score: float
    scores: SubScores
    role: str
    explanation: str


@dataclass
class QueryIntent:
    """Advisory classification of what a query is asking for."""
    intent: str  # factual | analytical | comparative | definitional
    confidence: float
    suggested_strategy: str  # broad | focused | diverse


@dataclass
class RetrievalResponse:
    """Selected evidence plus the score records that produced it."""
    query: str
    chunks: List[ScoredChunk] = field(default_factory=list)
    total_retrieved: int = 0
    enhanced_scores: List[ChunkScore] = field(default_factory=list)
    intent: Optional[QueryIntent] = None

    @classmethod
    def empty(cls, query: str) -> "RetrievalResponse":
        return cls(query=query)
