"""Tests for tracing.py: configure_tracing, get_tracer, traced_retrieval, traced_generation.

OTel spans are collected with InMemorySpanExporter so tests run fully offline.
"""
from __future__ import annotations

import pytest
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry.trace import StatusCode

from fr_rag.schema import Match, QuestionType
from fr_rag.tracing import (
    ATTR_INPUT_VALUE,
    ATTR_LLM_MODEL_NAME,
    ATTR_OUTPUT_VALUE,
    ATTR_PROMPT_LENGTH,
    ATTR_QUESTION_TYPE,
    ATTR_RETRIEVAL_DOCUMENTS,
    ATTR_RETRIEVAL_TOP_SCORE,
    configure_tracing,
    get_tracer,
    traced_generation,
    traced_retrieval,
)


@pytest.fixture()
def mem_exporter() -> InMemorySpanExporter:
    """Fresh InMemorySpanExporter and a configured TracerProvider."""
    exporter = InMemorySpanExporter()
    configure_tracing(exporter=exporter, service_name="test-service")
    return exporter


def _span(exporter: InMemorySpanExporter, name: str):
    return next(s for s in exporter.get_finished_spans() if s.name == name)


# ---------------------------------------------------------------------------
# configure_tracing / get_tracer
# ---------------------------------------------------------------------------


class TestConfigureTracing:
    def test_returns_provider(self):
        from opentelemetry.sdk.trace import TracerProvider

        provider = configure_tracing(exporter=InMemorySpanExporter(), service_name="svc")
        assert isinstance(provider, TracerProvider)

    def test_missing_otlp_package_raises_import_error(self, monkeypatch):
        import builtins

        real_import = builtins.__import__

        def mock_import(name, *args, **kwargs):
            if "otlp" in name:
                raise ImportError("mocked missing package")
            return real_import(name, *args, **kwargs)

        monkeypatch.setattr(builtins, "__import__", mock_import)
        with pytest.raises(ImportError, match="opentelemetry-exporter-otlp"):
            configure_tracing(endpoint="http://localhost:6006/v1/traces")


class TestGetTracer:
    def test_tracer_exports_to_configured_exporter(self, mem_exporter):
        with get_tracer("test.component").start_as_current_span("probe"):
            pass
        assert [s.name for s in mem_exporter.get_finished_spans()] == ["probe"]


# ---------------------------------------------------------------------------
# traced_retrieval
# ---------------------------------------------------------------------------


class TestTracedRetrieval:
    @pytest.fixture()
    def fake_retrieve(self, sample_segments):
        def retrieve(query: str, question_type: QuestionType | None = None) -> list[Match]:
            return [Match(segment, 0.9 - i * 0.1) for i, segment in enumerate(sample_segments)]

        return retrieve

    def test_returns_same_matches(self, mem_exporter, fake_retrieve):
        wrapped = traced_retrieval(fake_retrieve, get_tracer("retrieval"))
        assert wrapped("receita", QuestionType.MONETARY) == fake_retrieve("receita")

    def test_span_records_query_count_and_top_score(self, mem_exporter, fake_retrieve):
        wrapped = traced_retrieval(fake_retrieve, get_tracer("retrieval"))
        wrapped("receita líquida", QuestionType.MONETARY)

        span = _span(mem_exporter, "retrieval")
        assert span.attributes.get(ATTR_INPUT_VALUE) == "receita líquida"
        assert span.attributes.get(ATTR_RETRIEVAL_DOCUMENTS) == 3
        assert span.attributes.get(ATTR_RETRIEVAL_TOP_SCORE) == pytest.approx(0.9)
        assert span.attributes.get(ATTR_QUESTION_TYPE) == "MONETARY"

    def test_empty_result_has_no_top_score(self, mem_exporter):
        wrapped = traced_retrieval(lambda query, question_type=None: [], get_tracer("retrieval"))
        assert wrapped("nada") == []
        span = _span(mem_exporter, "retrieval")
        assert span.attributes.get(ATTR_RETRIEVAL_DOCUMENTS) == 0
        assert ATTR_RETRIEVAL_TOP_SCORE not in span.attributes

    def test_span_status_error_on_exception(self, mem_exporter):
        def bad_retrieve(query, question_type=None):
            raise RuntimeError("index not built")

        wrapped = traced_retrieval(bad_retrieve, get_tracer("retrieval"))
        with pytest.raises(RuntimeError):
            wrapped("query")
        assert _span(mem_exporter, "retrieval").status.status_code == StatusCode.ERROR


# ---------------------------------------------------------------------------
# traced_generation
# ---------------------------------------------------------------------------


class TestTracedGeneration:
    def test_returns_same_answer(self, mem_exporter):
        wrapped = traced_generation(lambda prompt: "SIM", get_tracer("generation"))
        assert wrapped("prompt") == "SIM"

    def test_span_records_prompt_length_and_model(self, mem_exporter):
        wrapped = traced_generation(lambda prompt: "SIM", get_tracer("generation"), model_name="gpt-4.1-mini")
        wrapped("x" * 42)

        span = _span(mem_exporter, "generation")
        assert span.attributes.get(ATTR_PROMPT_LENGTH) == 42
        assert span.attributes.get(ATTR_LLM_MODEL_NAME) == "gpt-4.1-mini"

    def test_output_value_truncated_at_500_chars(self, mem_exporter):
        wrapped = traced_generation(lambda prompt: "x" * 1000, get_tracer("generation"))
        wrapped("q")
        assert len(_span(mem_exporter, "generation").attributes.get(ATTR_OUTPUT_VALUE)) == 500

    def test_none_reply_is_empty_output_not_error(self, mem_exporter):
        wrapped = traced_generation(lambda prompt: None, get_tracer("generation"))
        assert wrapped("q") is None
        span = _span(mem_exporter, "generation")
        assert span.attributes.get(ATTR_OUTPUT_VALUE) == ""
        assert span.status.status_code == StatusCode.OK

    def test_span_status_error_on_exception(self, mem_exporter):
        def broken(prompt):
            raise ValueError("model error")

        wrapped = traced_generation(broken, get_tracer("generation"))
        with pytest.raises(ValueError):
            wrapped("q")
        assert _span(mem_exporter, "generation").status.status_code == StatusCode.ERROR
