"""
Query intent classification for retrieval.

Pattern counts over the query decide whether it asks for a fact, an analysis,
a comparison or a definition. The result is advisory: it is reported alongside
retrieval results and does not change how chunks are scored.
"""

import logging
import re

from ..models.retrieval import QueryIntent

logger = logging.getLogger(__name__)


class QueryIntentClassifier:
    """Deterministic regex-based intent classifier."""

    FACTUAL = "factual"
    ANALYTICAL = "analytical"
    COMPARATIVE = "comparative"
    DEFINITIONAL = "definitional"

    DEFAULT_INTENT = ANALYTICAL

    INTENT_PATTERNS = {
        FACTUAL: [r"what is", r"how many", r"when did", r"where"],
        ANALYTICAL: [r"why", r"analyze", r"examine", r"discuss", r"evaluate"],
        COMPARATIVE: [r"compare", r"contrast", r"versus", r"different", r"similar"],
        DEFINITIONAL: [r"define", r"definition", r"concept of", r"meaning"],
    }

    STRATEGIES = {
        COMPARATIVE: "diverse",
        DEFINITIONAL: "focused",
    }
    DEFAULT_STRATEGY = "broad"

    def __init__(self):
        self._compiled = {
            intent: [re.compile(p, re.IGNORECASE) for p in patterns]
            for intent, patterns in self.INTENT_PATTERNS.items()
        }

    def classify(self, query: str) -> QueryIntent:
        """
        Classify a query's intent.

        The intent with the most matching patterns wins. No match, or a tie
        for the top count, falls back to "analytical". Confidence is
        min(1, matches / 2).
        """
        counts = {
            intent: sum(1 for pattern in patterns if pattern.search(query or ""))
            for intent, patterns in self._compiled.items()
        }

        max_count = max(counts.values())
        leaders = [intent for intent, count in counts.items() if count == max_count]

        if max_count == 0 or len(leaders) > 1:
            intent = self.DEFAULT_INTENT
        else:
            intent = leaders[0]

        result = QueryIntent(
            intent=intent,
            confidence=min(1.0, max_count / 2),
            suggested_strategy=self.STRATEGIES.get(intent, self.DEFAULT_STRATEGY),
        )
        logger.debug(f"Query intent: {result.intent} ({result.confidence:.2f}) - {(query or '')[:50]}")
        return result
