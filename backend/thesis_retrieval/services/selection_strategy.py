"""Diversity-aware selection of scored chunks."""
import logging
from dataclasses import replace
from typing import Dict, List

from ..models.retrieval import ChunkScore

logger = logging.getLogger(__name__)

UNKNOWN_SOURCE = "unknown"


def source_key(chunk_id: str) -> str:
    """
    Source identifier encoded in a chunk id ("{source}_{order}").

    Ids without an underscore-delimited prefix share the "unknown" bucket.
    """
    prefix, separator, _ = chunk_id.partition("_")
    if not separator or not prefix:
        return UNKNOWN_SOURCE
    return prefix


class SelectionStrategy:
    """
    Pick at most N chunks from a rank-ordered list while discouraging
    over-reliance on a single source.

    Admission follows the incoming rank order. A source's 3rd and later chunks
    are still admitted, but their total is penalized at the moment of
    admission rather than making room for lower-ranked chunks from other
    sources. Sources represented exactly once in the final set get a flat
    bonus afterwards.
    """

    DEFAULT_MAX_CHUNKS = 10
    SATURATION_THRESHOLD = 2  # chunks per source admitted without penalty
    SATURATION_PENALTY = 0.8
    UNIQUE_SOURCE_BONUS = 0.05

    def select(self, scored_chunks: List[ChunkScore], max_chunks: int = DEFAULT_MAX_CHUNKS) -> List[ChunkScore]:
        """
        Select up to max_chunks scores and return them sorted by adjusted total.

        Input records are left untouched; adjusted copies are returned.
        """
        selected: List[ChunkScore] = []
        source_counts: Dict[str, int] = {}

        for score in scored_chunks:
            if len(selected) >= max_chunks:
                break

            source_id = source_key(score.chunk_id)
            count = source_counts.get(source_id, 0)

            adjusted = replace(score, scores=replace(score.scores))
            if count >= self.SATURATION_THRESHOLD:
                adjusted.total_score *= self.SATURATION_PENALTY

            selected.append(adjusted)
            source_counts[source_id] = count + 1

        for score in selected:
            if source_counts[source_key(score.chunk_id)] == 1:
                score.scores.diversity_bonus += self.UNIQUE_SOURCE_BONUS
                score.total_score += self.UNIQUE_SOURCE_BONUS

        logger.debug(
            f"Selected {len(selected)} of {len(scored_chunks)} chunks "
            f"from {len(source_counts)} sources"
        )
        return sorted(selected, key=lambda s: s.total_score, reverse=True)
