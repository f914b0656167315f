from __future__ import annotations

import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from dotenv import load_dotenv

from .schema import QuestionType

DEFAULT_MAX_RESULTS_BY_TYPE: Mapping[QuestionType, int] = MappingProxyType(
    {
        QuestionType.MONETARY: 10,
        QuestionType.SPECIFIC_TEXT: 10,
        QuestionType.YES_NO: 20,
        QuestionType.COUNTING: 20,
        QuestionType.MULTIPLE_CHOICE: 15,
    }
)

_MAX_RESULTS_ENV = {
    QuestionType.MONETARY: "MAX_RESULTS_MONETARY",
    QuestionType.SPECIFIC_TEXT: "MAX_RESULTS_SPECIFIC_TEXT",
    QuestionType.YES_NO: "MAX_RESULTS_YES_NO",
    QuestionType.COUNTING: "MAX_RESULTS_COUNTING",
    QuestionType.MULTIPLE_CHOICE: "MAX_RESULTS_MULTIPLE_CHOICE",
}


@dataclass(slots=True)
class OpenAISettings:
    """Runtime model configuration for embedding and generation calls."""

    embedding_model: str = "text-embedding-3-small"
    chat_model: str = "gpt-4.1-mini"
    embedding_backend: str = "openai"
    local_embedding_model: str = "sentence-transformers/all-MiniLM-L6-v2"


@dataclass(frozen=True, slots=True)
class PipelineConfig:
    """Immutable knobs for segmentation, retrieval and the question loop.

    Monetary and specific-text questions retrieve fewer passages than yes/no
    and counting questions, whose facts are scattered across the document.
    """

    max_segment_tokens: int = 1200
    segment_overlap_tokens: int = 200
    min_score: float = 0.60
    default_max_results: int = 15
    max_results_by_type: Mapping[QuestionType, int] = field(
        default_factory=lambda: DEFAULT_MAX_RESULTS_BY_TYPE
    )
    request_delay_seconds: float = 6.0
    checkpoint_interval: int = 5

    def __post_init__(self) -> None:
        if self.max_segment_tokens <= 0:
            raise ValueError("max_segment_tokens must be positive")
        if not 0 <= self.segment_overlap_tokens < self.max_segment_tokens:
            raise ValueError("segment_overlap_tokens must be in [0, max_segment_tokens)")
        if self.default_max_results <= 0 or any(k <= 0 for k in self.max_results_by_type.values()):
            raise ValueError("max results must be positive")
        if self.request_delay_seconds < 0:
            raise ValueError("request_delay_seconds must not be negative")
        if self.checkpoint_interval < 1:
            raise ValueError("checkpoint_interval must be at least 1")
        object.__setattr__(self, "max_results_by_type", MappingProxyType(dict(self.max_results_by_type)))

    def max_results_for(self, question_type: QuestionType | None) -> int:
        if question_type is None:
            return self.default_max_results
        return self.max_results_by_type.get(question_type, self.default_max_results)


@dataclass(slots=True)
class Paths:
    """Common project paths used by the extraction script."""

    data_dir: str = "data"
    output_dir: str = "output"
    catalog_file: str = "Guia de Coleta.csv"
    answers_file: str = "respostas.csv"


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


def load_pipeline_config() -> PipelineConfig:
    """Build a `PipelineConfig` from environment variables, falling back to defaults."""
    max_results = {
        question_type: _env_int(env_name, DEFAULT_MAX_RESULTS_BY_TYPE[question_type])
        for question_type, env_name in _MAX_RESULTS_ENV.items()
    }
    return PipelineConfig(
        max_segment_tokens=_env_int("MAX_SEGMENT_SIZE_IN_TOKENS", 1200),
        segment_overlap_tokens=_env_int("SEGMENT_OVERLAP_IN_TOKENS", 200),
        min_score=float(os.getenv("MIN_SCORE_FOR_RETRIEVAL", "0.60")),
        default_max_results=_env_int("MAX_RESULTS_FOR_RETRIEVAL", 15),
        max_results_by_type=max_results,
        request_delay_seconds=_env_int("REQUEST_DELAY_MS", 6000) / 1000.0,
        checkpoint_interval=_env_int("CHECKPOINT_INTERVAL", 5),
    )


def load_settings() -> tuple[OpenAISettings, PipelineConfig, Paths]:
    """Load environment-backed settings and return typed config objects.

    Returns:
        Tuple containing OpenAI model settings, pipeline configuration and
        common path settings.
    """
    load_dotenv()
    return (
        OpenAISettings(
            embedding_model=os.getenv("OPENAI_EMBEDDING_MODEL", "text-embedding-3-small"),
            chat_model=os.getenv("OPENAI_CHAT_MODEL", "gpt-4.1-mini"),
            embedding_backend=os.getenv("EMBEDDING_BACKEND", "openai"),
            local_embedding_model=os.getenv(
                "LOCAL_EMBEDDING_MODEL", "sentence-transformers/all-MiniLM-L6-v2"
            ),
        ),
        load_pipeline_config(),
        Paths(),
    )
