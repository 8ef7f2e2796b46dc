"""Structured error types shared by the retrieval collaborators and engine."""
from dataclasses import dataclass, field
from typing import Any, Dict

# Error codes
AI_SERVICE_ERROR = "AI_SERVICE_ERROR"
AI_QUOTA_EXCEEDED = "AI_QUOTA_EXCEEDED"
EMBEDDING_GENERATION_FAILED = "EMBEDDING_GENERATION_FAILED"
EXTERNAL_SERVICE_UNAVAILABLE = "EXTERNAL_SERVICE_UNAVAILABLE"
DATABASE_ERROR = "DATABASE_ERROR"
RETRIEVAL_FAILED = "RETRIEVAL_FAILED"


@dataclass
class RetrievalError:
    """Structured error information carried by retrieval exceptions."""
    code: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    retryable: bool = False


class RetrievalServiceError(Exception):
    """Base exception for retrieval failures with structured error information."""

    def __init__(self, error: RetrievalError):
        self.error = error
        super().__init__(error.message)


class EmbeddingServiceError(RetrievalServiceError):
    """The embedding provider was unavailable or returned a malformed response."""


class RetrievalEmbeddingError(RetrievalServiceError):
    """The query embedding could not be produced during enhanced retrieval."""


class ChunkStoreError(RetrievalServiceError):
    """The chunk store could not load the candidate pool."""
