"""
Multi-factor scoring of candidate evidence chunks.

Each chunk receives five independent sub-scores (semantic similarity, recency,
source reliability, contextual relevance and diversity bonus) which are
combined linearly under a weight vector into a single comparable total.
"""

import logging
import re
from typing import List, Optional, Sequence

import numpy as np

from ..models.chunk import Chunk
from ..models.retrieval import (
    CONTRASTING,
    PARAGRAPH_REWRITE,
    PRIMARY,
    SECTION_DRAFTING,
    SUPPORTING,
    ChunkScore,
    RankingWeights,
    RetrievalContext,
    SubScores,
)

logger = logging.getLogger(__name__)

DEFAULT_WEIGHTS = RankingWeights()

STOPWORDS = frozenset({
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by"
})
MAX_KEYWORDS = 10


def cosine_similarity(vector_a: Sequence[float], vector_b: Sequence[float]) -> float:
    """
    Cosine similarity of two vectors.

    Returns 0.0 when the vectors differ in length or either has zero magnitude.
    """
    if len(vector_a) != len(vector_b):
        return 0.0

    a = np.asarray(vector_a, dtype=float)
    b = np.asarray(vector_b, dtype=float)
    norm_a = np.linalg.norm(a)
    norm_b = np.linalg.norm(b)
    if norm_a == 0 or norm_b == 0:
        return 0.0

    return float(np.clip(np.dot(a, b) / (norm_a * norm_b), -1.0, 1.0))


def extract_keywords(text: str) -> List[str]:
    """Distinct lower-cased terms longer than 3 characters, first 10 kept."""
    keywords: List[str] = []
    for word in re.split(r"\W+", text.lower()):
        if len(word) > 3 and word not in STOPWORDS and word not in keywords:
            keywords.append(word)
            if len(keywords) == MAX_KEYWORDS:
                break
    return keywords


def keyword_overlap(keywords_a: List[str], keywords_b: List[str]) -> float:
    """Shared terms divided by the size of the larger keyword set."""
    if not keywords_a or not keywords_b:
        return 0.0

    shared = set(keywords_a) & set(keywords_b)
    return len(shared) / max(len(keywords_a), len(keywords_b))


class ScoringEngine:
    """
    Stateless scorer turning a candidate pool into ranked ChunkScore records.

    Scoring is pure: the same chunk, query vector, context and weights always
    produce the same ChunkScore.
    """

    # Baselines
    NO_EMBEDDING_SIMILARITY = 0.1
    NEUTRAL_SCORE = 0.5

    # Role thresholds
    PRIMARY_SIMILARITY = 0.7
    PRIMARY_CONTEXTUAL = 0.6
    CONTRASTING_RELIABILITY = 0.8
    CONTRASTING_SIMILARITY = 0.5

    NUMBERED_HEADING = re.compile(r"^\d+\.")

    ARGUMENTATIVE_PATTERNS = [
        re.compile(p, re.IGNORECASE) for p in (
            r"therefore", r"however", r"moreover", r"furthermore",
            r"in contrast", r"on the other hand", r"evidence suggests",
            r"research shows", r"studies indicate",
        )
    ]

    PRECISION_PATTERNS = [
        re.compile(r"[A-Z][a-z]+(?:\s+[A-Z][a-z]+)+"),  # multi-word proper nouns
        re.compile(r"\b\d{4}\b"),  # years
        re.compile(r"\bp\s*<\s*0\.0\d+"),  # statistical significance
        re.compile(r"\b(?:coefficient|correlation|significant|hypothesis)\b", re.IGNORECASE),
    ]

    def score_chunks(
        self,
        chunks: List[Chunk],
        query_embedding: Sequence[float],
        context: RetrievalContext,
        weights: Optional[RankingWeights] = None
    ) -> List[ChunkScore]:
        """
        Score every candidate and return them sorted by total score, descending.

        Equal totals keep the candidate pool's order.
        """
        weights = weights or context.ranking_weights or DEFAULT_WEIGHTS
        scores = [
            self.score_chunk(chunk, query_embedding, context, weights)
            for chunk in chunks
        ]
        logger.debug(f"Scored {len(scores)} chunks")
        return sorted(scores, key=lambda s: s.total_score, reverse=True)

    def score_chunk(
        self,
        chunk: Chunk,
        query_embedding: Sequence[float],
        context: RetrievalContext,
        weights: RankingWeights = DEFAULT_WEIGHTS
    ) -> ChunkScore:
        """Compute the five sub-scores, total, role and explanation for one chunk."""
        if chunk.embedding:
            semantic_similarity = cosine_similarity(query_embedding, chunk.embedding)
        else:
            semantic_similarity = self.NO_EMBEDDING_SIMILARITY

        sub_scores = SubScores(
            semantic_similarity=semantic_similarity,
            recency=self.recency_score(chunk),
            source_reliability=self.reliability_score(chunk),
            contextual_relevance=self.contextual_relevance(chunk, context),
            # Assigned during selection; diversity is a property of the selected set
            diversity_bonus=0.0,
        )

        role = self.classify_role(sub_scores)
        return ChunkScore(
            chunk_id=chunk.id,
            total_score=self.weighted_total(sub_scores, weights),
            scores=sub_scores,
            role=role,
            explanation=self.explain(sub_scores, role),
        )

    @staticmethod
    def weighted_total(scores: SubScores, weights: RankingWeights) -> float:
        return (
            scores.semantic_similarity * weights.semantic_similarity
            + scores.recency * weights.recency
            + scores.source_reliability * weights.source_reliability
            + scores.contextual_relevance * weights.contextual_relevance
            + scores.diversity_bonus * weights.diversity_bonus
        )

    def recency_score(self, chunk: Chunk) -> float:
        """
        Neutral baseline for every chunk.

        Chunks carry no publication date yet; this slot is where date-based
        decay plugs in once ingestion records one.
        """
        return self.NEUTRAL_SCORE

    def reliability_score(self, chunk: Chunk) -> float:
        """Infer reliability from structural metadata: headings and page ranges."""
        score = self.NEUTRAL_SCORE

        metadata = chunk.metadata
        if metadata is None:
            return score

        if metadata.heading:
            score += 0.1
            # Academic-style numbered sections ("1.", "2.3")
            if self.NUMBERED_HEADING.match(metadata.heading):
                score += 0.1

        if metadata.page_range:
            score += 0.1

        return min(1.0, score)

    def contextual_relevance(self, chunk: Chunk, context: RetrievalContext) -> float:
        """Keyword overlap with the section being drafted, plus task-specific bonuses."""
        relevance = self.NEUTRAL_SCORE

        section = context.section_context
        if section is None:
            return relevance

        chunk_keywords = extract_keywords(chunk.text)
        relevance += keyword_overlap(extract_keywords(section.objective), chunk_keywords) * 0.3
        relevance += keyword_overlap(extract_keywords(section.title), chunk_keywords) * 0.2

        if context.context_type == SECTION_DRAFTING:
            if self.has_argumentative_structure(chunk.text):
                relevance += 0.1
        elif context.context_type == PARAGRAPH_REWRITE:
            if self.has_precise_terminology(chunk.text):
                relevance += 0.1

        return min(1.0, relevance)

    def has_argumentative_structure(self, text: str) -> bool:
        return any(p.search(text) for p in self.ARGUMENTATIVE_PATTERNS)

    def has_precise_terminology(self, text: str) -> bool:
        return any(p.search(text) for p in self.PRECISION_PATTERNS)

    def classify_role(self, scores: SubScores) -> str:
        """Evidentiary role from the score profile."""
        if (scores.semantic_similarity > self.PRIMARY_SIMILARITY
                and scores.contextual_relevance > self.PRIMARY_CONTEXTUAL):
            return PRIMARY

        # Reliable but off-topic sources may argue the other side
        if (scores.source_reliability > self.CONTRASTING_RELIABILITY
                and scores.semantic_similarity < self.CONTRASTING_SIMILARITY):
            return CONTRASTING

        return SUPPORTING

    @staticmethod
    def explain(scores: SubScores, role: str) -> str:
        """Human-readable summary of the score profile."""
        components = []

        if scores.semantic_similarity > 0.7:
            components.append("high semantic match")
        elif scores.semantic_similarity > 0.4:
            components.append("moderate semantic match")
        else:
            components.append("low semantic match")

        if scores.recency > 0.7:
            components.append("recent source")
        elif scores.recency < 0.3:
            components.append("older source")

        if scores.source_reliability > 0.8:
            components.append("high reliability")
        elif scores.source_reliability < 0.4:
            components.append("lower reliability")

        if scores.contextual_relevance > 0.7:
            components.append("highly contextual")

        return f"{role} evidence: {', '.join(components)}"
