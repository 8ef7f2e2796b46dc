"""Services for the Thesis Copilot retrieval engine."""
from .embedding_provider import EmbeddingProvider
from .chunk_store import ChunkStore
from .scoring_engine import ScoringEngine, cosine_similarity, DEFAULT_WEIGHTS
from .selection_strategy import SelectionStrategy
from .query_intent import QueryIntentClassifier
from .retrieval_engine import RetrievalEngine
from .retrieval_logger import RetrievalLogger
from .retrieval_orchestrator import RetrievalOrchestrator

__all__ = ['EmbeddingProvider', 'ChunkStore', 'ScoringEngine', 'cosine_similarity', 'DEFAULT_WEIGHTS', 'SelectionStrategy', 'QueryIntentClassifier', 'RetrievalEngine', 'RetrievalLogger', 'RetrievalOrchestrator']
