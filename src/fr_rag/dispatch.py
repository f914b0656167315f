"""Single registry binding each question type to its enrichment, prompt and normalizer.

Call sites go through `enrich`, `build_prompt` and `normalize`; adding a type
means adding one entry to `HANDLERS`.
"""
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Mapping

from . import enrichment, normalization, prompts
from .schema import Question, QuestionType


@dataclass(frozen=True, slots=True)
class TypeHandler:
    type_terms: Callable[[Question], list[str]]
    build_prompt: Callable[[Question, str], str]
    normalize: Callable[[str, Question], str]


def _terms(vocabulary: enrichment.TypeVocabulary) -> Callable[[Question], list[str]]:
    def type_terms(question: Question) -> list[str]:
        return enrichment.vocabulary_terms(question, vocabulary)

    return type_terms


HANDLERS: Mapping[QuestionType, TypeHandler] = MappingProxyType(
    {
        QuestionType.MONETARY: TypeHandler(
            _terms(enrichment.MONETARY_VOCABULARY),
            prompts.monetary_prompt,
            normalization.normalize_monetary,
        ),
        QuestionType.YES_NO: TypeHandler(
            _terms(enrichment.YES_NO_VOCABULARY),
            prompts.yes_no_prompt,
            normalization.normalize_yes_no,
        ),
        QuestionType.COUNTING: TypeHandler(
            _terms(enrichment.COUNTING_VOCABULARY),
            prompts.counting_prompt,
            normalization.normalize_counting,
        ),
        QuestionType.SPECIFIC_TEXT: TypeHandler(
            _terms(enrichment.SPECIFIC_TEXT_VOCABULARY),
            prompts.specific_text_prompt,
            normalization.normalize_specific_text,
        ),
        QuestionType.MULTIPLE_CHOICE: TypeHandler(
            _terms(enrichment.MULTIPLE_CHOICE_VOCABULARY),
            prompts.multiple_choice_prompt,
            normalization.normalize_multiple_choice,
        ),
    }
)

GENERIC_HANDLER = TypeHandler(
    _terms(enrichment.GENERIC_VOCABULARY),
    prompts.generic_prompt,
    normalization.normalize_generic,
)


def handler_for(question_type: QuestionType | None) -> TypeHandler:
    if question_type is None:
        return GENERIC_HANDLER
    return HANDLERS.get(question_type, GENERIC_HANDLER)


def enrich(question: Question) -> str:
    """Enriched retrieval query for `question`."""
    handler = handler_for(question.question_type)
    return enrichment.compose_query(question, handler.type_terms(question))


def build_prompt(question: Question, context: str) -> str:
    return handler_for(question.question_type).build_prompt(question, context)


def normalize(raw_answer: str, question: Question) -> str:
    return handler_for(question.question_type).normalize(raw_answer, question)
