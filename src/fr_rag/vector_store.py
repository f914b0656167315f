from __future__ import annotations

import logging

import numpy as np

from .embeddings import EmbedFn, cosine_similarity
from .schema import IndexedVector, Match, Segment

logger = logging.getLogger(__name__)


class PassageIndexError(RuntimeError):
    """Raised on misuse of the write-once passage index."""


class PassageIndex:
    """In-memory (segment, vector) store for one document.

    Written once by `index`, then read any number of times by `retrieve`.
    Ranking is exact cosine similarity; ties keep insertion order.
    """

    def __init__(self) -> None:
        self._segments: list[Segment] = []
        self._matrix: np.ndarray | None = None

    @property
    def is_built(self) -> bool:
        return self._matrix is not None

    def __len__(self) -> int:
        return len(self._segments)

    @property
    def segments(self) -> tuple[Segment, ...]:
        return tuple(self._segments)

    def vectors(self) -> list[IndexedVector]:
        if self._matrix is None:
            return []
        return [
            IndexedVector(segment_id=segment.segment_id, vector=self._matrix[row])
            for row, segment in enumerate(self._segments)
        ]

    def index(self, segments: list[Segment], embed_fn: EmbedFn) -> None:
        """Embed every segment and freeze the index.

        Args:
            segments: Segments to store, in document order.
            embed_fn: Embedding function; must be the one used later for queries.
        """
        if self._matrix is not None:
            raise PassageIndexError("passage index is write-once and already built")

        if segments:
            matrix = np.asarray(embed_fn([segment.text for segment in segments]), dtype=np.float32)
        else:
            matrix = np.zeros((0, 0), dtype=np.float32)
        if matrix.ndim != 2 or matrix.shape[0] != len(segments):
            raise PassageIndexError(
                f"embedding function returned {matrix.shape[0] if matrix.ndim else 0} vectors "
                f"for {len(segments)} segments"
            )

        matrix.setflags(write=False)
        self._segments = list(segments)
        self._matrix = matrix
        logger.info("Indexed %d segments", len(segments))

    def search_vector(self, query_vector: np.ndarray, max_results: int, min_score: float) -> list[Match]:
        """Rank stored segments against an already-embedded query."""
        if self._matrix is None:
            raise PassageIndexError("passage index has not been built")
        if max_results <= 0 or not self._segments:
            return []

        scores = cosine_similarity(np.asarray(query_vector, dtype=np.float32), self._matrix)
        order = np.argsort(-scores, kind="stable")
        matches: list[Match] = []
        for row in order:
            score = float(scores[row])
            if score < min_score:
                break
            matches.append(Match(segment=self._segments[row], score=score))
            if len(matches) == max_results:
                break
        return matches

    def retrieve(self, query: str, embed_fn: EmbedFn, max_results: int, min_score: float) -> list[Match]:
        """Embed `query` and return the best matches at or above `min_score`.

        Returns:
            At most `max_results` matches sorted by descending score.
        """
        query_vector = np.asarray(embed_fn([query]), dtype=np.float32)[0]
        return self.search_vector(query_vector, max_results=max_results, min_score=min_score)
