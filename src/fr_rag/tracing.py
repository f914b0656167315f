"""OpenTelemetry tracing for the question-answering loop.

Usage without a backend (development / testing):

    from fr_rag.tracing import configure_tracing, get_tracer

    configure_tracing()   # uses ConsoleSpanExporter by default
    pipeline = QuestionPipeline(retriever, generate, config, tracer=get_tracer("fr_rag"))

Usage with an OTLP collector (e.g. Arize Phoenix):

    configure_tracing(endpoint="http://localhost:6006/v1/traces", service_name="fr-rag")
"""
from __future__ import annotations

from typing import Callable

from opentelemetry import trace
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    ConsoleSpanExporter,
    SimpleSpanProcessor,
    SpanExporter,
)

from .schema import Match, QuestionType

# ---------------------------------------------------------------------------
# Attribute names (OpenInference conventions plus question metadata)
# ---------------------------------------------------------------------------

ATTR_INPUT_VALUE = "input.value"
ATTR_OUTPUT_VALUE = "output.value"
ATTR_LLM_MODEL_NAME = "llm.model_name"
ATTR_RETRIEVAL_DOCUMENTS = "retrieval.documents"
ATTR_RETRIEVAL_TOP_SCORE = "retrieval.top_score"
ATTR_PROMPT_LENGTH = "llm.prompt.length"
ATTR_QUESTION_NUMBER = "question.number"
ATTR_QUESTION_TYPE = "question.type"
ATTR_QUESTION_OUTCOME = "question.outcome"

_provider: TracerProvider | None = None


def configure_tracing(
    endpoint: str | None = None,
    service_name: str = "fr-rag",
    exporter: SpanExporter | None = None,
) -> TracerProvider:
    """Create and register a global TracerProvider.

    Args:
        endpoint: OTLP HTTP endpoint URL. When *None* and no *exporter* is
            given, spans are printed to stdout.
        service_name: Label identifying this application in the backend.
        exporter: Pre-built exporter (e.g. ``InMemorySpanExporter`` in tests);
            takes precedence over *endpoint*.

    Returns:
        The configured provider, also set as the global OTel provider.
    """
    global _provider

    resource = Resource(attributes={SERVICE_NAME: service_name})
    provider = TracerProvider(resource=resource)

    if exporter is not None:
        chosen_exporter: SpanExporter = exporter
    elif endpoint is not None:
        try:
            from opentelemetry.exporter.otlp.proto.http.trace_exporter import (
                OTLPSpanExporter,
            )
        except ImportError as exc:  # pragma: no cover
            raise ImportError(
                "opentelemetry-exporter-otlp-proto-http is required to export "
                "traces to an OTLP endpoint.  Install it with:\n"
                "  pip install opentelemetry-exporter-otlp-proto-http"
            ) from exc
        chosen_exporter = OTLPSpanExporter(endpoint=endpoint)
    else:
        chosen_exporter = ConsoleSpanExporter()

    # Synchronous export: one question at a time, spans readable right after.
    provider.add_span_processor(SimpleSpanProcessor(chosen_exporter))
    trace.set_tracer_provider(provider)
    _provider = provider
    return provider


def get_tracer(name: str) -> trace.Tracer:
    """Return a tracer from the provider set by `configure_tracing`, or the no-op global one."""
    if _provider is not None:
        return _provider.get_tracer(name)
    return trace.get_tracer(name)


def traced_retrieval(
    retrieve: Callable[[str, QuestionType | None], list[Match]],
    tracer: trace.Tracer,
) -> Callable[[str, QuestionType | None], list[Match]]:
    """Wrap a `(query, question_type) -> matches` callable in a ``retrieval`` span.

    Records the query, the number of matches and the best score; marks the
    span as ERROR and re-raises when retrieval fails.
    """

    def _wrapped(query: str, question_type: QuestionType | None = None) -> list[Match]:
        with tracer.start_as_current_span("retrieval") as span:
            span.set_attribute(ATTR_INPUT_VALUE, query)
            if question_type is not None:
                span.set_attribute(ATTR_QUESTION_TYPE, question_type.name)
            try:
                matches = retrieve(query, question_type)
            except Exception as exc:
                span.set_status(trace.StatusCode.ERROR, str(exc))
                span.record_exception(exc)
                raise
            span.set_attribute(ATTR_RETRIEVAL_DOCUMENTS, len(matches))
            if matches:
                span.set_attribute(ATTR_RETRIEVAL_TOP_SCORE, matches[0].score)
            span.set_status(trace.StatusCode.OK)
            return matches

    return _wrapped


def traced_generation(
    generate: Callable[[str], str | None],
    tracer: trace.Tracer,
    model_name: str = "",
) -> Callable[[str], str | None]:
    """Wrap a `prompt -> text | None` callable in a ``generation`` span.

    A `None` reply is recorded as an empty output, not as an error: the
    collaborator has already handled the failure.
    """

    def _wrapped(prompt: str) -> str | None:
        with tracer.start_as_current_span("generation") as span:
            span.set_attribute(ATTR_PROMPT_LENGTH, len(prompt))
            if model_name:
                span.set_attribute(ATTR_LLM_MODEL_NAME, model_name)
            try:
                answer = generate(prompt)
            except Exception as exc:
                span.set_status(trace.StatusCode.ERROR, str(exc))
                span.record_exception(exc)
                raise
            span.set_attribute(ATTR_OUTPUT_VALUE, (answer or "")[:500])
            span.set_status(trace.StatusCode.OK)
            return answer

    return _wrapped
