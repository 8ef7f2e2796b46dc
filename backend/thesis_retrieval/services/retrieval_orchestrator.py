"""
Enhanced retrieval orchestration.

Sequences chunk loading, query embedding, multi-factor scoring and
diversity-aware selection. Any failure along the way drops to the
semantic-only retrieval path, and a failing fallback degrades to an empty
response: retrieval never stops a drafting request from completing.
"""

import logging
import time
from dataclasses import asdict, replace
from typing import List, Optional, Set

from ..errors import (
    EMBEDDING_GENERATION_FAILED,
    RetrievalEmbeddingError,
    RetrievalError,
)
from ..models.chunk import Chunk, ScoredChunk
from ..models.retrieval import (
    CONTEXT_TYPES,
    SUPPORTING,
    ChunkScore,
    QueryIntent,
    RetrievalContext,
    RetrievalResponse,
    SubScores,
)
from .chunk_store import ChunkStore
from .embedding_provider import EmbeddingProvider
from .query_intent import QueryIntentClassifier
from .retrieval_engine import RetrievalEngine
from .retrieval_logger import DEGRADED, EMPTY, ENHANCED, FALLBACK, RetrievalLogger
from .scoring_engine import DEFAULT_WEIGHTS, ScoringEngine
from .selection_strategy import SelectionStrategy

logger = logging.getLogger(__name__)


class RetrievalOrchestrator:
    """Produce grounding evidence for drafting and rewrite requests."""

    DEFAULT_MAX_CHUNKS = 10
    NEUTRAL_SCORE = 0.5
    FALLBACK_EXPLANATION = "basic similarity match (fallback)"

    def __init__(
        self,
        chunk_store: ChunkStore,
        embedding_provider: EmbeddingProvider,
        scoring_engine: Optional[ScoringEngine] = None,
        selection_strategy: Optional[SelectionStrategy] = None,
        basic_engine: Optional[RetrievalEngine] = None,
        intent_classifier: Optional[QueryIntentClassifier] = None,
        retrieval_logger: Optional[RetrievalLogger] = None
    ):
        """
        Initialize the orchestrator with its collaborators.

        Args:
            chunk_store: Source of each project's candidate chunks
            embedding_provider: Produces the query embedding
            scoring_engine: Multi-factor scorer (default: ScoringEngine())
            selection_strategy: Diversity-aware selector (default: SelectionStrategy())
            basic_engine: Semantic-only path used as fallback
                (default: built from chunk_store and embedding_provider)
            intent_classifier: Advisory query intent classifier
            retrieval_logger: Optional JSON Lines record of each retrieval
        """
        self.chunk_store = chunk_store
        self.embedding_provider = embedding_provider
        self.scoring_engine = scoring_engine or ScoringEngine()
        self.selection_strategy = selection_strategy or SelectionStrategy()
        self.basic_engine = basic_engine or RetrievalEngine(chunk_store, embedding_provider)
        self.intent_classifier = intent_classifier or QueryIntentClassifier()
        self.retrieval_logger = retrieval_logger
        logger.info("Initialized RetrievalOrchestrator")

    def perform_enhanced_retrieval(
        self,
        context: RetrievalContext,
        max_chunks: int = DEFAULT_MAX_CHUNKS
    ) -> RetrievalResponse:
        """
        Select the chunks to hand to the language model as evidence.

        Args:
            context: Query, project and optional drafting context
            max_chunks: Upper bound on selected chunks

        Returns:
            RetrievalResponse with chunks ordered by final score. An empty
            project yields an empty response; failures yield the fallback
            response or, if that fails too, an empty one.

        Raises:
            ValueError: If the context or max_chunks violate the contract
        """
        self._validate(context, max_chunks)
        start_time = time.time()
        intent = self.analyze_query_intent(context.query)

        try:
            response = self._enhanced_retrieval(context, max_chunks)
        except Exception as e:
            logger.error(
                f"Enhanced retrieval failed for project {context.project_id}: {e}",
                exc_info=True
            )
            return self._fallback_to_basic_retrieval(
                context, max_chunks, intent, start_time, error=str(e)
            )

        response.intent = intent
        mode = ENHANCED if response.total_retrieved else EMPTY
        self._record(context, mode, response, intent, start_time)
        return response

    def analyze_query_intent(self, query: str) -> QueryIntent:
        """Advisory intent classification; never alters scoring."""
        return self.intent_classifier.classify(query)

    def _enhanced_retrieval(self, context: RetrievalContext, max_chunks: int) -> RetrievalResponse:
        all_chunks = self._candidate_pool(context)
        if not all_chunks:
            logger.info(f"No chunks available for project {context.project_id}")
            return RetrievalResponse.empty(context.query)

        query_embedding = self._generate_query_embedding(context.query)

        weights = context.ranking_weights or DEFAULT_WEIGHTS
        scored = self.scoring_engine.score_chunks(all_chunks, query_embedding, context, weights)
        selected = self.selection_strategy.select(scored, max_chunks)

        chunks_by_id = {chunk.id: chunk for chunk in all_chunks}
        chunks = [
            ScoredChunk(
                chunk=chunks_by_id[score.chunk_id],
                score=score.total_score,
                citation=chunks_by_id[score.chunk_id].citation
            )
            for score in selected
        ]

        logger.info(
            f"Enhanced retrieval selected {len(chunks)} of {len(all_chunks)} chunks "
            f"for project {context.project_id}"
        )
        return RetrievalResponse(
            query=context.query,
            chunks=chunks,
            total_retrieved=len(chunks),
            enhanced_scores=selected,
        )

    def _candidate_pool(self, context: RetrievalContext) -> List[Chunk]:
        chunks = self.chunk_store.get_chunks_for_project(context.project_id)

        # Only exclusion is applied; the other filters have no chunk metadata to act on
        excluded = self._excluded_ids(context)
        if excluded:
            chunks = [chunk for chunk in chunks if chunk.id not in excluded]
        return chunks

    @staticmethod
    def _excluded_ids(context: RetrievalContext) -> Set[str]:
        if context.filters is None:
            return set()
        return set(context.filters.exclude_chunk_ids or [])

    def _generate_query_embedding(self, query: str) -> List[float]:
        try:
            embeddings = self.embedding_provider.embed([query])
        except Exception as e:
            logger.error(f"Failed to generate query embedding: {e}")
            raise RetrievalEmbeddingError(RetrievalError(
                code=EMBEDDING_GENERATION_FAILED,
                message=f"Embedding generation failed: {e}",
                retryable=True,
            )) from e

        if not embeddings or not embeddings[0]:
            raise RetrievalEmbeddingError(RetrievalError(
                code=EMBEDDING_GENERATION_FAILED,
                message="Embedding provider returned no query vector",
            ))
        return embeddings[0]

    def _fallback_to_basic_retrieval(
        self,
        context: RetrievalContext,
        max_chunks: int,
        intent: QueryIntent,
        start_time: float,
        error: str
    ) -> RetrievalResponse:
        logger.warning("Falling back to basic retrieval")

        excluded = self._excluded_ids(context)
        try:
            results = self.basic_engine.retrieve(
                context.query, context.project_id, limit=max_chunks + len(excluded)
            )
        except Exception as e:
            logger.error(f"Fallback retrieval also failed: {e}", exc_info=True)
            response = RetrievalResponse.empty(context.query)
            response.intent = intent
            self._record(context, DEGRADED, response, intent, start_time, error=f"{error}; {e}")
            return response

        results = [r for r in results if r.chunk.id not in excluded][:max_chunks]

        chunks = []
        enhanced_scores = []
        for index, result in enumerate(results):
            rank_estimate = max(0.1, 1 - index * 0.1)
            similarity = result.score if result.score is not None else rank_estimate
            chunks.append(replace(result, score=similarity))
            enhanced_scores.append(ChunkScore(
                chunk_id=result.chunk.id,
                total_score=similarity,
                scores=SubScores(
                    semantic_similarity=similarity,
                    recency=self.NEUTRAL_SCORE,
                    source_reliability=self.NEUTRAL_SCORE,
                    contextual_relevance=self.NEUTRAL_SCORE,
                    diversity_bonus=self.NEUTRAL_SCORE,
                ),
                role=SUPPORTING,
                explanation=self.FALLBACK_EXPLANATION,
            ))

        response = RetrievalResponse(
            query=context.query,
            chunks=chunks,
            total_retrieved=len(chunks),
            enhanced_scores=enhanced_scores,
            intent=intent,
        )
        logger.warning(
            f"Basic retrieval returned {len(chunks)} chunks for project {context.project_id}"
        )
        self._record(context, FALLBACK, response, intent, start_time, error=error)
        return response

    @staticmethod
    def _validate(context: RetrievalContext, max_chunks: int) -> None:
        if context is None:
            raise ValueError("Retrieval context is required")
        if not context.project_id or not context.project_id.strip():
            raise ValueError("project_id is required")
        if not context.query or not context.query.strip():
            raise ValueError("query cannot be empty")
        if context.context_type is not None and context.context_type not in CONTEXT_TYPES:
            raise ValueError(f"Unknown context_type: {context.context_type}")
        if max_chunks <= 0:
            raise ValueError("max_chunks must be positive")

    def _record(
        self,
        context: RetrievalContext,
        mode: str,
        response: RetrievalResponse,
        intent: QueryIntent,
        start_time: float,
        error: Optional[str] = None
    ) -> None:
        if self.retrieval_logger is None:
            return
        try:
            self.retrieval_logger.log_retrieval(
                query=context.query,
                project_id=context.project_id,
                mode=mode,
                chunks_retrieved=response.total_retrieved,
                latency_ms=int((time.time() - start_time) * 1000),
                intent=asdict(intent),
                error=error,
            )
        except Exception as e:
            logger.error(f"Failed to record retrieval outcome: {e}", exc_info=True)
