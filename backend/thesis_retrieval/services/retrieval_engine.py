"""Single-factor semantic retrieval over a project's chunks."""
import logging
from typing import List

from ..config import BASIC_RETRIEVAL_LIMIT
from ..models.chunk import ScoredChunk
from .chunk_store import ChunkStore
from .embedding_provider import EmbeddingProvider
from .scoring_engine import cosine_similarity

logger = logging.getLogger(__name__)


class RetrievalEngine:
    """Rank chunks purely by cosine similarity to the query embedding."""

    def __init__(self, chunk_store: ChunkStore, embedding_provider: EmbeddingProvider):
        """
        Initialize the retrieval engine.

        Args:
            chunk_store: ChunkStore supplying the candidate pool
            embedding_provider: EmbeddingProvider for query embedding
        """
        self.chunk_store = chunk_store
        self.embedding_provider = embedding_provider
        logger.info("Initialized RetrievalEngine")

    def retrieve(self, query: str, project_id: str, limit: int = BASIC_RETRIEVAL_LIMIT) -> List[ScoredChunk]:
        """
        Retrieve the chunks most similar to the query.

        Strategy:
        1. Load the project's chunks and keep those carrying an embedding
        2. If none carry one, return the first `limit` chunks in store order
           with rank-decreasing scores (1.0, 0.9, ... floored at 0.1); the
           embedding provider is not called
        3. Otherwise embed the query, score by cosine similarity, sort
           descending and keep the top `limit`

        Args:
            query: Search text
            project_id: Project whose chunks are searched
            limit: Maximum number of chunks to return

        Returns:
            Scored chunks, each with a citation label

        Raises:
            ValueError: If limit is not positive
            EmbeddingServiceError: If the query embedding fails
            ChunkStoreError: If the chunk pool cannot be loaded
        """
        if limit <= 0:
            raise ValueError("limit must be positive")

        all_chunks = self.chunk_store.get_chunks_for_project(project_id)
        with_embeddings = [chunk for chunk in all_chunks if chunk.embedding]

        if not with_embeddings:
            logger.info(
                f"No embedded chunks for project {project_id}, "
                f"returning {min(limit, len(all_chunks))} chunks in store order"
            )
            return [
                ScoredChunk(
                    chunk=chunk,
                    score=max(0.1, 1 - index * 0.1),
                    citation=chunk.citation
                )
                for index, chunk in enumerate(all_chunks[:limit])
            ]

        logger.debug(f"Embedding query: {query[:100]}...")
        query_embedding = self.embedding_provider.embed([query])[0]

        scored = [
            ScoredChunk(
                chunk=chunk,
                score=cosine_similarity(query_embedding, chunk.embedding),
                citation=chunk.citation
            )
            for chunk in with_embeddings
        ]
        scored.sort(key=lambda s: s.score, reverse=True)

        logger.info(
            f"Retrieved {min(limit, len(scored))} of {len(scored)} embedded chunks "
            f"(top score: {scored[0].score:.3f})"
        )
        return scored[:limit]
