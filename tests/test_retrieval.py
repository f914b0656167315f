"""Tests for retrieval.py: per-type result caps and the score floor."""
from __future__ import annotations

import pytest

from fr_rag.retrieval import Retriever
from fr_rag.schema import QuestionType
from fr_rag.settings import PipelineConfig
from fr_rag.vector_store import PassageIndex


def _many_segments_index(embed_fn, count: int = 12) -> PassageIndex:
    from fr_rag.schema import Segment

    segments = [
        Segment(
            segment_id=f"D-SEG-{i:04d}",
            text=f"conselho administração membro {i}",
            approx_tokens=8,
            start=i * 40,
            end=i * 40 + 30,
        )
        for i in range(count)
    ]
    index = PassageIndex()
    index.index(segments, embed_fn)
    return index


class TestRetriever:
    def test_uses_per_type_cap(self, embed_fn):
        config = PipelineConfig(
            min_score=0.0,
            default_max_results=5,
            max_results_by_type={QuestionType.MONETARY: 2, QuestionType.COUNTING: 7},
        )
        retriever = Retriever(_many_segments_index(embed_fn), embed_fn, config)
        assert len(retriever.retrieve("conselho", QuestionType.MONETARY)) == 2
        assert len(retriever.retrieve("conselho", QuestionType.COUNTING)) == 7

    def test_untyped_query_uses_default_cap(self, embed_fn):
        config = PipelineConfig(min_score=0.0, default_max_results=4)
        retriever = Retriever(_many_segments_index(embed_fn), embed_fn, config)
        assert len(retriever.retrieve("conselho")) == 4

    def test_high_floor_returns_nothing(self, embed_fn):
        config = PipelineConfig(min_score=0.99)
        retriever = Retriever(_many_segments_index(embed_fn), embed_fn, config)
        assert retriever.retrieve("receita líquida", QuestionType.MONETARY) == []

    def test_deterministic_between_calls(self, embed_fn):
        retriever = Retriever(_many_segments_index(embed_fn), embed_fn, PipelineConfig(min_score=0.0))
        first = retriever.retrieve("membro 3 conselho", QuestionType.YES_NO)
        second = retriever.retrieve("membro 3 conselho", QuestionType.YES_NO)
        assert first == second
        best = next(m for m in first if m.segment.segment_id == "D-SEG-0003")
        assert best.score == pytest.approx(first[0].score)

    @pytest.mark.parametrize("floor", [0.0, 0.3, 0.6])
    def test_results_respect_floor(self, embed_fn, floor):
        retriever = Retriever(_many_segments_index(embed_fn), embed_fn, PipelineConfig(min_score=floor))
        assert all(m.score >= floor for m in retriever.retrieve("conselho membro"))
