from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

import numpy as np

NOT_FOUND_ANSWER = "INFORMAÇÃO NÃO ENCONTRADA"
MISSING_ENTITY_NAME = "N/A"
ERROR_PREFIX = "ERRO: "


class QuestionType(str, Enum):
    """Closed set of answer shapes; drives enrichment, prompting and normalization."""

    MONETARY = "MONETARIA"
    YES_NO = "SIM_NAO"
    COUNTING = "CONTAGEM"
    SPECIFIC_TEXT = "TEXTO_ESPECIFICO"
    MULTIPLE_CHOICE = "MULTIPLA_ESCOLHA"


@dataclass(frozen=True, slots=True)
class Segment:
    """Bounded span of document text stored and indexed as one retrieval unit."""

    segment_id: str
    text: str
    approx_tokens: int
    start: int
    end: int
    strategy: str = "semantic"


@dataclass(frozen=True, slots=True)
class IndexedVector:
    """Embedding produced once per segment at index time."""

    segment_id: str
    vector: np.ndarray


@dataclass(frozen=True, slots=True)
class Question:
    """One row of the question catalog."""

    number: int
    difficulty: str
    text: str
    location_hint: str = ""
    filling_instructions: str = ""
    observations: str = ""
    question_type: QuestionType = QuestionType.SPECIFIC_TEXT
    rag_keywords: str = ""


@dataclass(frozen=True, slots=True)
class Match:
    """Retrieved segment with its cosine similarity to the query."""

    segment: Segment
    score: float


@dataclass(frozen=True, slots=True)
class Answer:
    question_number: int
    raw_text: str
    normalized_text: str


@dataclass(frozen=True, slots=True)
class AnswerOk:
    answer: Answer


@dataclass(frozen=True, slots=True)
class NotFound:
    question_number: int
    reason: str = ""


@dataclass(frozen=True, slots=True)
class AnswerError:
    question_number: int
    message: str


QuestionOutcome = AnswerOk | NotFound | AnswerError


@dataclass(slots=True)
class EntityAnswers:
    """Answers accumulated for one entity (one document), keyed by question number."""

    entity_name: str | None
    answers: dict[int, str] = field(default_factory=dict)
