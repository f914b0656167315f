from __future__ import annotations

import logging

from .embeddings import EmbedFn
from .schema import Match, QuestionType
from .settings import PipelineConfig
from .vector_store import PassageIndex

logger = logging.getLogger(__name__)


class Retriever:
    """Type-aware front end to a built `PassageIndex`.

    Args:
        index: Index built with `embed_fn`.
        embed_fn: Same embedding function used at index time.
        config: Supplies the score floor and the per-type result cap.
    """

    def __init__(self, index: PassageIndex, embed_fn: EmbedFn, config: PipelineConfig) -> None:
        self.index = index
        self.embed_fn = embed_fn
        self.config = config

    def retrieve(self, query: str, question_type: QuestionType | None = None) -> list[Match]:
        max_results = self.config.max_results_for(question_type)
        matches = self.index.retrieve(
            query,
            self.embed_fn,
            max_results=max_results,
            min_score=self.config.min_score,
        )
        top_score = matches[0].score if matches else 0.0
        logger.info(
            "Retrieved %d/%d passages (top score=%.3f)", len(matches), max_results, top_score
        )
        return matches
