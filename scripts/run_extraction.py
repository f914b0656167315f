import argparse
import logging
from pathlib import Path

from fr_rag.catalog import load_catalog
from fr_rag.embeddings import make_local_embedder, make_openai_embedder
from fr_rag.extraction import extract_text
from fr_rag.io_utils import write_answer_table
from fr_rag.pipeline import QuestionPipeline, index_document
from fr_rag.qa import make_generator
from fr_rag.retrieval import Retriever
from fr_rag.settings import load_settings
from fr_rag.tracing import configure_tracing, get_tracer

logger = logging.getLogger("fr_rag.run_extraction")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Answer a question catalog against one Formulário de Referência."
    )
    parser.add_argument("--document", required=True, help="PDF or UTF-8 text file of the filing.")
    parser.add_argument("--catalog", help="Question catalog CSV (defaults to <data_dir>/<catalog_file>).")
    parser.add_argument("--entity", help="Company name written in the answer table.")
    parser.add_argument("--output", help="Answer table CSV (defaults to <output_dir>/<answers_file>).")
    parser.add_argument("--limit", type=int, help="Only answer the first N questions.")
    parser.add_argument("--trace-endpoint", help="OTLP HTTP endpoint for spans.")
    parser.add_argument("--log-level", default="INFO")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Run the full extraction for one document and write the answer table."""
    args = parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    settings, config, paths = load_settings()

    catalog_path = Path(args.catalog or Path(paths.data_dir) / paths.catalog_file)
    output_path = Path(args.output or Path(paths.output_dir) / paths.answers_file)

    questions = load_catalog(catalog_path)
    if args.limit is not None:
        questions = questions[: args.limit]
    logger.info("Loaded %d questions from %s", len(questions), catalog_path)

    if settings.embedding_backend == "local":
        embed_fn = make_local_embedder(settings.local_embedding_model)
    else:
        embed_fn = make_openai_embedder(settings.embedding_model)

    document_path = Path(args.document)
    index = index_document(extract_text(document_path), embed_fn, config, doc_id=document_path.stem)

    tracer = None
    if args.trace_endpoint:
        configure_tracing(endpoint=args.trace_endpoint)
        tracer = get_tracer("fr_rag")

    pipeline = QuestionPipeline(
        Retriever(index, embed_fn, config),
        make_generator(settings.chat_model),
        config,
        tracer=tracer,
        model_name=settings.chat_model,
    )
    numbers = [question.number for question in questions]
    pipeline.run(
        questions,
        entity_name=args.entity,
        checkpoint=lambda record: write_answer_table([record], output_path, numbers),
    )
    print(f"Wrote {output_path}")


if __name__ == "__main__":
    main()
