from __future__ import annotations

import logging
import time
from typing import Callable

from opentelemetry import trace

from . import dispatch
from .chunking import normalize_text, segment_text
from .embeddings import EmbedFn
from .prompts import build_context
from .qa import GenerateFn
from .retrieval import Retriever
from .schema import (
    ERROR_PREFIX,
    NOT_FOUND_ANSWER,
    Answer,
    AnswerError,
    AnswerOk,
    EntityAnswers,
    NotFound,
    Question,
    QuestionOutcome,
)
from .settings import PipelineConfig
from .tracing import (
    ATTR_QUESTION_NUMBER,
    ATTR_QUESTION_OUTCOME,
    ATTR_QUESTION_TYPE,
    get_tracer,
    traced_generation,
    traced_retrieval,
)
from .vector_store import PassageIndex

logger = logging.getLogger(__name__)

CheckpointFn = Callable[[EntityAnswers], None]


def index_document(
    text: str,
    embed_fn: EmbedFn,
    config: PipelineConfig,
    doc_id: str = "DOC",
) -> PassageIndex:
    """Normalize, segment and embed one document into a fresh, frozen index."""
    segments = segment_text(
        normalize_text(text),
        max_tokens=config.max_segment_tokens,
        overlap_tokens=config.segment_overlap_tokens,
        doc_id=doc_id,
    )
    index = PassageIndex()
    index.index(segments, embed_fn)
    return index


def outcome_text(outcome: QuestionOutcome) -> str:
    """Render an outcome as the string stored in the answer table."""
    if isinstance(outcome, AnswerOk):
        return outcome.answer.normalized_text
    if isinstance(outcome, NotFound):
        return NOT_FOUND_ANSWER
    if isinstance(outcome, AnswerError):
        return f"{ERROR_PREFIX}{outcome.message}"
    raise TypeError(f"unexpected outcome {outcome!r}")


class QuestionPipeline:
    """Answer catalog questions one at a time against a single document index.

    Args:
        retriever: Type-aware retriever over the document's passage index.
        generate: Language-model callable; returns `None` on failure.
        config: Pipeline configuration (rate-limit delay, checkpoint interval).
        tracer: Optional OTel tracer; the no-op global tracer is used otherwise.
        sleep: Delay function, replaceable in tests.
    """

    def __init__(
        self,
        retriever: Retriever,
        generate: GenerateFn,
        config: PipelineConfig,
        tracer: trace.Tracer | None = None,
        model_name: str = "",
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.config = config
        self.tracer = tracer or get_tracer(__name__)
        self._retrieve = traced_retrieval(retriever.retrieve, self.tracer)
        self._generate = traced_generation(generate, self.tracer, model_name=model_name)
        self._sleep = sleep

    def answer(self, question: Question) -> QuestionOutcome:
        """Enrich, retrieve, prompt, call the model and normalize. May raise."""
        query = dispatch.enrich(question)
        logger.debug("Question %s enriched query: %.100s", question.number, query)

        matches = self._retrieve(query, question.question_type)
        if not matches:
            return NotFound(question.number, reason="no passage above the score floor")

        prompt = dispatch.build_prompt(question, build_context(matches))
        raw = self._generate(prompt)
        if raw is None or not raw.strip():
            return NotFound(question.number, reason="no model answer")

        normalized = dispatch.normalize(raw, question)
        if not normalized or normalized == NOT_FOUND_ANSWER:
            return NotFound(question.number, reason="model reported no answer")
        return AnswerOk(Answer(question_number=question.number, raw_text=raw, normalized_text=normalized))

    def process(self, question: Question) -> QuestionOutcome:
        """Like `answer`, but any failure becomes an `AnswerError` for this question only."""
        with self.tracer.start_as_current_span("question") as span:
            span.set_attribute(ATTR_QUESTION_NUMBER, question.number)
            span.set_attribute(ATTR_QUESTION_TYPE, question.question_type.name)
            try:
                outcome = self.answer(question)
            except Exception as exc:
                logger.exception("Question %s failed", question.number)
                span.record_exception(exc)
                outcome = AnswerError(question.number, str(exc))
            span.set_attribute(ATTR_QUESTION_OUTCOME, type(outcome).__name__)

        logger.info("Question %s -> %.100s", question.number, outcome_text(outcome))
        return outcome

    def run(
        self,
        questions: list[Question],
        entity_name: str | None = None,
        checkpoint: CheckpointFn | None = None,
    ) -> EntityAnswers:
        """Process `questions` in order, pausing between them and checkpointing periodically.

        The checkpoint callable receives the accumulated answers every
        `checkpoint_interval` questions, and once more at the end unless the
        last periodic write already covered every question.
        """
        result = EntityAnswers(entity_name=entity_name)
        saved_at: int | None = None
        for position, question in enumerate(questions, start=1):
            result.answers[question.number] = outcome_text(self.process(question))

            if checkpoint is not None and position % self.config.checkpoint_interval == 0:
                logger.info("Checkpoint after %d/%d questions", position, len(questions))
                try:
                    checkpoint(result)
                    saved_at = position
                except OSError:
                    logger.exception("Checkpoint write failed; continuing")

            if position < len(questions) and self.config.request_delay_seconds > 0:
                self._sleep(self.config.request_delay_seconds)

        if checkpoint is not None and saved_at != len(questions):
            checkpoint(result)
        return result
