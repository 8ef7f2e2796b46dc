"""API request and response schemas."""
from datetime import date
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..config import BASIC_RETRIEVAL_LIMIT, DEFAULT_MAX_CHUNKS, MAX_CHUNKS_LIMIT
from .chunk import ScoredChunk
from .retrieval import (
    ChunkScore,
    QueryIntent,
    RankingWeights,
    RetrievalContext,
    RetrievalFilters,
    RetrievalResponse,
    SectionContext,
)


class CamelModel(BaseModel):
    """Base schema exchanging camelCase JSON with the web client."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ChunkMetadataSchema(CamelModel):
    heading: Optional[str] = None
    page_range: Optional[Tuple[int, int]] = None


class ScoredChunkSchema(CamelModel):
    """A source chunk annotated with its final score."""
    id: str
    source_id: str
    project_id: str
    order: int
    text: str
    token_count: int
    metadata: Optional[ChunkMetadataSchema] = None
    score: float
    citation: Optional[str] = None

    @classmethod
    def from_scored_chunk(cls, scored: ScoredChunk) -> "ScoredChunkSchema":
        chunk = scored.chunk
        metadata = None
        if chunk.metadata is not None:
            metadata = ChunkMetadataSchema(
                heading=chunk.metadata.heading,
                page_range=chunk.metadata.page_range,
            )
        return cls(
            id=chunk.id,
            source_id=chunk.source_id,
            project_id=chunk.project_id,
            order=chunk.order,
            text=chunk.text,
            token_count=chunk.token_count,
            metadata=metadata,
            score=scored.score,
            citation=scored.citation,
        )


class BasicRetrievalRequest(CamelModel):
    """Request body for the semantic-only retrieval endpoint."""
    project_id: str = Field(min_length=1)
    section_id: str = Field(min_length=1)
    query: str = Field(min_length=1)
    limit: int = Field(default=BASIC_RETRIEVAL_LIMIT, gt=0, le=15)


class BasicRetrievalResponse(CamelModel):
    query: BasicRetrievalRequest
    chunks: List[ScoredChunkSchema]


class RankingWeightsSchema(CamelModel):
    semantic_similarity: float
    recency: float
    source_reliability: float
    contextual_relevance: float
    diversity_bonus: float


class SectionContextSchema(CamelModel):
    title: str
    objective: str
    preceding_content: Optional[str] = None
    following_outline: Optional[str] = None


class RetrievalFiltersSchema(CamelModel):
    source_types: Optional[List[str]] = None
    date_range: Optional[Tuple[date, date]] = None
    author_filters: Optional[List[str]] = None
    exclude_chunk_ids: Optional[List[str]] = None


class EnhancedRetrievalRequest(CamelModel):
    """Request body for the multi-factor retrieval endpoint."""
    query: str
    project_id: str
    context_type: Optional[str] = None
    section_context: Optional[SectionContextSchema] = None
    filters: Optional[RetrievalFiltersSchema] = None
    ranking_weights: Optional[RankingWeightsSchema] = None
    max_chunks: int = Field(default=DEFAULT_MAX_CHUNKS, gt=0, le=MAX_CHUNKS_LIMIT)

    def to_context(self) -> RetrievalContext:
        section_context = None
        if self.section_context is not None:
            section_context = SectionContext(**self.section_context.model_dump())
        filters = None
        if self.filters is not None:
            filters = RetrievalFilters(**self.filters.model_dump())
        weights = None
        if self.ranking_weights is not None:
            weights = RankingWeights(**self.ranking_weights.model_dump())
        return RetrievalContext(
            query=self.query,
            project_id=self.project_id,
            context_type=self.context_type,
            section_context=section_context,
            filters=filters,
            ranking_weights=weights,
        )


class SubScoresSchema(CamelModel):
    semantic_similarity: float
    recency: float
    source_reliability: float
    contextual_relevance: float
    diversity_bonus: float


class ChunkScoreSchema(CamelModel):
    chunk_id: str
    total_score: float
    scores: SubScoresSchema
    context_type: str
    explanation: str

    @classmethod
    def from_chunk_score(cls, score: ChunkScore) -> "ChunkScoreSchema":
        return cls(
            chunk_id=score.chunk_id,
            total_score=score.total_score,
            scores=SubScoresSchema(
                semantic_similarity=score.scores.semantic_similarity,
                recency=score.scores.recency,
                source_reliability=score.scores.source_reliability,
                contextual_relevance=score.scores.contextual_relevance,
                diversity_bonus=score.scores.diversity_bonus,
            ),
            context_type=score.role,
            explanation=score.explanation,
        )


class QueryIntentSchema(CamelModel):
    intent: str
    confidence: float
    suggested_strategy: str

    @classmethod
    def from_intent(cls, intent: QueryIntent) -> "QueryIntentSchema":
        return cls(
            intent=intent.intent,
            confidence=intent.confidence,
            suggested_strategy=intent.suggested_strategy,
        )


class IntentRequest(CamelModel):
    query: str = Field(min_length=1)


class EnhancedRetrievalResponse(CamelModel):
    query: str
    chunks: List[ScoredChunkSchema]
    total_retrieved: int
    enhanced_scores: List[ChunkScoreSchema]
    intent: Optional[QueryIntentSchema] = None

    @classmethod
    def from_response(
        cls,
        response: RetrievalResponse,
        intent: Optional[QueryIntent] = None
    ) -> "EnhancedRetrievalResponse":
        intent = intent or response.intent
        return cls(
            query=response.query,
            chunks=[ScoredChunkSchema.from_scored_chunk(c) for c in response.chunks],
            total_retrieved=response.total_retrieved,
            enhanced_scores=[
                ChunkScoreSchema.from_chunk_score(s) for s in response.enhanced_scores
            ],
            intent=QueryIntentSchema.from_intent(intent) if intent else None,
        )
