"""Shared pytest fixtures for fr_rag unit tests."""
from __future__ import annotations

import re
import zlib

import numpy as np
import pytest

from fr_rag.schema import Match, Question, QuestionType, Segment
from fr_rag.settings import PipelineConfig

EMBED_DIM = 64
_WORD = re.compile(r"\w+")


def hashing_embed(texts: list[str]) -> np.ndarray:
    """Deterministic bag-of-words embedder: each lowercase word bumps one hashed dimension."""
    matrix = np.zeros((len(texts), EMBED_DIM), dtype=np.float32)
    for row, text in enumerate(texts):
        for word in _WORD.findall(text.lower()):
            matrix[row, zlib.crc32(word.encode("utf-8")) % EMBED_DIM] += 1.0
    return matrix


@pytest.fixture()
def embed_fn():
    return hashing_embed


@pytest.fixture()
def fast_config() -> PipelineConfig:
    """Small segments, permissive score floor, no delay between questions."""
    return PipelineConfig(
        max_segment_tokens=60,
        segment_overlap_tokens=10,
        min_score=0.05,
        default_max_results=3,
        max_results_by_type={question_type: 3 for question_type in QuestionType},
        request_delay_seconds=0.0,
        checkpoint_interval=2,
    )


@pytest.fixture()
def sample_segments() -> list[Segment]:
    texts = [
        "Receita líquida operacional 4.872.707 em R$ mil na demonstração do resultado.",
        "Conselho de Administração composto por cinco membros efetivos.",
        "A companhia possui política de transações com partes relacionadas.",
    ]
    segments = []
    cursor = 0
    for index, text in enumerate(texts):
        segments.append(
            Segment(
                segment_id=f"DOC-SEG-{index:04d}",
                text=text,
                approx_tokens=len(text) // 4,
                start=cursor,
                end=cursor + len(text),
            )
        )
        cursor += len(text) + 2
    return segments


@pytest.fixture()
def sample_match(sample_segments) -> Match:
    return Match(segment=sample_segments[0], score=0.91)


@pytest.fixture()
def monetary_question() -> Question:
    return Question(
        number=1,
        difficulty="Fácil",
        text="Qual a receita líquida do último exercício?",
        location_hint="2.1.h",
        filling_instructions='Informar a "Receita Líquida" em R$',
        observations="",
        question_type=QuestionType.MONETARY,
    )


@pytest.fixture()
def yes_no_question() -> Question:
    return Question(
        number=2,
        difficulty="Média",
        text="A companhia possui política de transações com partes relacionadas?",
        location_hint="FR 11.1",
        question_type=QuestionType.YES_NO,
    )


@pytest.fixture()
def counting_question() -> Question:
    return Question(
        number=3,
        difficulty="Difícil",
        text="Quantos conselheiros independentes compõem o conselho?",
        location_hint="7.3",
        question_type=QuestionType.COUNTING,
    )


@pytest.fixture()
def do_question() -> Question:
    return Question(
        number=4,
        difficulty="Média",
        text="A companhia oferece cobertura aos administradores?",
        location_hint="7.9",
        filling_instructions="Seguro D&O; Outra forma de reembolso; Não; Não Divulgado",
        question_type=QuestionType.MULTIPLE_CHOICE,
    )
