"""Tests for dispatch.py: one registry entry per question type."""
from __future__ import annotations

import pytest

from fr_rag import dispatch, normalization, prompts
from fr_rag.schema import Question, QuestionType


class TestHandlers:
    def test_every_type_is_registered(self):
        assert set(dispatch.HANDLERS) == set(QuestionType)

    def test_registry_is_read_only(self):
        with pytest.raises(TypeError):
            dispatch.HANDLERS[QuestionType.MONETARY] = dispatch.GENERIC_HANDLER  # type: ignore[index]

    def test_none_falls_back_to_generic(self):
        assert dispatch.handler_for(None) is dispatch.GENERIC_HANDLER

    @pytest.mark.parametrize(
        "question_type, builder, normalizer",
        [
            (QuestionType.MONETARY, prompts.monetary_prompt, normalization.normalize_monetary),
            (QuestionType.YES_NO, prompts.yes_no_prompt, normalization.normalize_yes_no),
            (QuestionType.COUNTING, prompts.counting_prompt, normalization.normalize_counting),
            (QuestionType.SPECIFIC_TEXT, prompts.specific_text_prompt, normalization.normalize_specific_text),
            (QuestionType.MULTIPLE_CHOICE, prompts.multiple_choice_prompt, normalization.normalize_multiple_choice),
        ],
    )
    def test_binds_matching_functions(self, question_type, builder, normalizer):
        handler = dispatch.handler_for(question_type)
        assert handler.build_prompt is builder
        assert handler.normalize is normalizer


class TestEnrich:
    def test_monetary_query_gets_type_vocabulary(self, monetary_question):
        assert "valores monetários" in dispatch.enrich(monetary_question)

    def test_same_question_other_type_changes_vocabulary(self):
        base = dict(number=1, difficulty="", text="A companhia possui comitê?")
        yes_no = dispatch.enrich(Question(**base, question_type=QuestionType.YES_NO))
        counting = dispatch.enrich(Question(**base, question_type=QuestionType.COUNTING))
        assert "possui tem divulga" in yes_no
        assert "comitê auditoria sustentabilidade" in counting
        assert yes_no != counting


class TestBuildPromptAndNormalize:
    def test_build_prompt_dispatches_on_type(self, yes_no_question):
        assert dispatch.build_prompt(yes_no_question, "ctx") == prompts.yes_no_prompt(yes_no_question, "ctx")

    def test_normalize_dispatches_on_type(self, monetary_question, yes_no_question):
        assert dispatch.normalize("4.872.707 (em R$ mil)", monetary_question) == "R$ 4.872.707.000"
        assert dispatch.normalize("sim.", yes_no_question) == "SIM"
