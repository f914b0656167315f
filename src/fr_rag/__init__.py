"""Retrieval-augmented extraction of answers from Formulário de Referência filings."""

from .schema import (
    Answer,
    AnswerError,
    AnswerOk,
    EntityAnswers,
    Match,
    NotFound,
    Question,
    QuestionType,
    Segment,
)

__all__ = [
    "Answer",
    "AnswerError",
    "AnswerOk",
    "EntityAnswers",
    "Match",
    "NotFound",
    "Question",
    "QuestionType",
    "Segment",
]
