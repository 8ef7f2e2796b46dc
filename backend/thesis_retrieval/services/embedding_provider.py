"""Embedding provider backed by the OpenRouter embeddings API."""
import time
import logging
from typing import List, Optional
import httpx

from ..config import (
    OPENROUTER_API_KEY,
    OPENROUTER_BASE_URL,
    EMBEDDING_MODEL,
    EMBEDDING_MAX_RETRIES,
    EMBEDDING_TIMEOUT,
)
from ..errors import (
    AI_QUOTA_EXCEEDED,
    AI_SERVICE_ERROR,
    EMBEDDING_GENERATION_FAILED,
    EXTERNAL_SERVICE_UNAVAILABLE,
    EmbeddingServiceError,
    RetrievalError,
)

logger = logging.getLogger(__name__)


class EmbeddingProvider:
    """Convert text into fixed-length vectors via OpenRouter."""

    def __init__(
        self,
        api_key: Optional[str] = OPENROUTER_API_KEY,
        model_name: str = EMBEDDING_MODEL,
        base_url: str = OPENROUTER_BASE_URL,
        max_retries: int = EMBEDDING_MAX_RETRIES,
        initial_delay: float = 1.0,
        timeout: float = EMBEDDING_TIMEOUT
    ):
        """
        Initialize the embedding provider.

        Args:
            api_key: OpenRouter API key
            model_name: Embedding model identifier (default: text-embedding-3-small)
            base_url: OpenRouter API base URL
            max_retries: Maximum attempts for 5xx, timeout and network errors
            initial_delay: Initial delay in seconds for exponential backoff
            timeout: Request timeout in seconds
        """
        if not api_key:
            raise ValueError("OPENROUTER_API_KEY environment variable is required")

        self.api_key = api_key
        self.model_name = model_name
        self.max_retries = max_retries
        self.initial_delay = initial_delay
        self.timeout = timeout
        self.api_url = f"{base_url.rstrip('/')}/embeddings"

        logger.info(f"Initialized EmbeddingProvider with model: {model_name}")

    def embed_text(self, text: str) -> List[float]:
        """
        Generate embedding for a single text string.

        Raises:
            ValueError: If text is empty
            EmbeddingServiceError: If the API request fails
        """
        if not text or not text.strip():
            raise ValueError("Text cannot be empty")

        return self.embed([text])[0]

    def embed(self, texts: List[str]) -> List[List[float]]:
        """
        Generate embeddings for multiple texts in a single API call.

        Args:
            texts: List of texts to embed

        Returns:
            One embedding vector per input text, in input order

        Raises:
            ValueError: If texts list is empty
            EmbeddingServiceError: If the API request fails after all retries
                or the response cannot be parsed
        """
        if not texts:
            raise ValueError("Texts list cannot be empty")

        return self._embed_with_retry(texts)

    def _embed_with_retry(self, texts: List[str]) -> List[List[float]]:
        """Call the embeddings endpoint with exponential backoff on transient errors."""
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": "https://thesis-copilot.local",
            "X-Title": "Thesis Copilot"
        }

        payload = {
            "model": self.model_name,
            "input": texts
        }

        delay = self.initial_delay
        last_error = None

        for attempt in range(self.max_retries):
            try:
                start_time = time.time()

                with httpx.Client(timeout=self.timeout) as client:
                    response = client.post(
                        self.api_url,
                        headers=headers,
                        json=payload
                    )

                elapsed = time.time() - start_time

                if response.status_code == 429:
                    logger.error("Rate limit exceeded for OpenRouter embeddings API")
                    raise EmbeddingServiceError(RetrievalError(
                        code=AI_QUOTA_EXCEEDED,
                        message="Embedding generation rate limit exceeded",
                        details={"status_code": 429},
                    ))

                if response.status_code == 401:
                    logger.error("Authentication failed for OpenRouter embeddings API")
                    raise EmbeddingServiceError(RetrievalError(
                        code=AI_SERVICE_ERROR,
                        message="OpenRouter authentication failed",
                        details={"status_code": 401},
                    ))

                if response.status_code >= 500:
                    last_error = f"OpenRouter service unavailable: {response.status_code}"
                    logger.warning(
                        f"{last_error} on attempt {attempt + 1}/{self.max_retries}"
                    )
                    if attempt < self.max_retries - 1:
                        time.sleep(delay)
                        delay = min(delay * 2, 30.0)
                    continue

                if response.status_code != 200:
                    error_msg = (
                        f"Embedding generation failed: {response.status_code} - "
                        f"{response.text[:500]}"
                    )
                    logger.error(error_msg)
                    raise EmbeddingServiceError(RetrievalError(
                        code=EMBEDDING_GENERATION_FAILED,
                        message=error_msg,
                        details={"status_code": response.status_code},
                    ))

                embeddings = self._parse_embeddings(response.json(), len(texts))
                logger.debug(f"Generated embeddings for {len(texts)} texts in {elapsed:.2f}s")
                return embeddings

            except httpx.TimeoutException:
                last_error = f"Request timeout after {self.timeout}s"
                logger.error(f"{last_error} on attempt {attempt + 1}/{self.max_retries}")

                if attempt < self.max_retries - 1:
                    time.sleep(delay)
                    delay = min(delay * 2, 30.0)

            except httpx.RequestError as e:
                last_error = f"Network error: {str(e)}"
                logger.error(f"{last_error} on attempt {attempt + 1}/{self.max_retries}")

                if attempt < self.max_retries - 1:
                    time.sleep(delay)
                    delay = min(delay * 2, 30.0)

        # All retries exhausted
        error_msg = (
            f"Failed to generate embeddings after {self.max_retries} attempts. "
            f"Last error: {last_error}"
        )
        logger.error(error_msg)
        raise EmbeddingServiceError(RetrievalError(
            code=EXTERNAL_SERVICE_UNAVAILABLE,
            message=error_msg,
            details={"attempts": self.max_retries},
            retryable=True,
        ))

    @staticmethod
    def _parse_embeddings(body, expected: int) -> List[List[float]]:
        """Extract `data[*].embedding` from an OpenAI-compatible response body."""
        try:
            embeddings = [item["embedding"] for item in body["data"]]
        except (KeyError, TypeError) as e:
            raise EmbeddingServiceError(RetrievalError(
                code=EMBEDDING_GENERATION_FAILED,
                message=f"Malformed embeddings response: {e}",
            ))

        if len(embeddings) != expected:
            raise EmbeddingServiceError(RetrievalError(
                code=EMBEDDING_GENERATION_FAILED,
                message=f"Expected {expected} embeddings, received {len(embeddings)}",
            ))

        return embeddings
