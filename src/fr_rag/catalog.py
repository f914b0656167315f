"""Reader for the `;`-separated question catalog ("Guia de Coleta").

Quoted fields may span physical lines. A record continues while the running
count of quote characters is odd, toggled line by line.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from .schema import Question, QuestionType

logger = logging.getLogger(__name__)

FIELD_SEPARATOR = ";"
QUOTE = '"'
REQUIRED_FIELDS = 7

_TYPE_ALIASES = {
    "MONETARY": QuestionType.MONETARY,
    "YES_NO": QuestionType.YES_NO,
    "YESNO": QuestionType.YES_NO,
    "COUNTING": QuestionType.COUNTING,
    "SPECIFIC_TEXT": QuestionType.SPECIFIC_TEXT,
    "SPECIFICTEXT": QuestionType.SPECIFIC_TEXT,
    "MULTIPLE_CHOICE": QuestionType.MULTIPLE_CHOICE,
    "MULTIPLECHOICE": QuestionType.MULTIPLE_CHOICE,
}


@dataclass(slots=True)
class CatalogParseResult:
    questions: list[Question] = field(default_factory=list)
    skipped_rows: int = 0


def parse_question_type(value: str) -> QuestionType:
    """Map a catalog type cell to a `QuestionType`, defaulting to specific text."""
    key = value.strip().upper().replace(" ", "_")
    if not key:
        return QuestionType.SPECIFIC_TEXT
    try:
        return QuestionType(key)
    except ValueError:
        pass
    if key in _TYPE_ALIASES:
        return _TYPE_ALIASES[key]
    logger.warning("Unknown question type %r, using %s", value, QuestionType.SPECIFIC_TEXT.name)
    return QuestionType.SPECIFIC_TEXT


def split_catalog_line(record: str) -> list[str]:
    """Split one logical record on `;` outside quotes; `""` inside quotes is a literal quote."""
    fields: list[str] = []
    current: list[str] = []
    inside_quotes = False
    index = 0
    while index < len(record):
        char = record[index]
        if char == QUOTE:
            if inside_quotes and record[index + 1 : index + 2] == QUOTE:
                current.append(QUOTE)
                index += 1
            else:
                inside_quotes = not inside_quotes
        elif char == FIELD_SEPARATOR and not inside_quotes:
            fields.append("".join(current))
            current = []
        else:
            current.append(char)
        index += 1
    fields.append("".join(current))
    return fields


def _parse_number(value: str) -> int:
    try:
        return int(value.strip())
    except ValueError:
        return 0


def _record_to_question(record: str) -> Question | None:
    fields = [value.strip() for value in split_catalog_line(record)]
    if len(fields) < REQUIRED_FIELDS:
        logger.warning("Skipping catalog row with %d fields: %.50s", len(fields), record)
        return None
    return Question(
        number=_parse_number(fields[0]),
        difficulty=fields[1],
        text=fields[2],
        location_hint=fields[3],
        filling_instructions=fields[4],
        observations=fields[5],
        question_type=parse_question_type(fields[6]),
        rag_keywords=fields[7] if len(fields) > REQUIRED_FIELDS else "",
    )


def iter_records(lines: list[str]) -> tuple[list[str], str | None]:
    """Group physical lines into logical records.

    Returns:
        The complete records and any unterminated trailing record.
    """
    records: list[str] = []
    pending: list[str] = []
    inside_quotes = False
    for line in lines:
        pending.append(line)
        if line.count(QUOTE) % 2 != 0:
            inside_quotes = not inside_quotes
        if not inside_quotes:
            records.append("\n".join(pending))
            pending = []
    return records, ("\n".join(pending) if pending else None)


def parse_catalog(text: str, has_header: bool = True) -> CatalogParseResult:
    """Parse catalog text into questions, skipping and counting malformed rows."""
    lines = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    if has_header and lines:
        lines = lines[1:]

    records, unterminated = iter_records(lines)
    result = CatalogParseResult()
    for record in records:
        if not record.strip():
            continue
        question = _record_to_question(record)
        if question is None:
            result.skipped_rows += 1
        else:
            result.questions.append(question)

    if unterminated is not None:
        logger.warning("Dropping unterminated quoted catalog row: %.50s", unterminated)
        result.skipped_rows += 1
    if result.skipped_rows:
        logger.warning("Skipped %d malformed catalog rows", result.skipped_rows)
    logger.info("Loaded %d questions from catalog", len(result.questions))
    return result


def load_catalog(path: str | Path) -> list[Question]:
    text = Path(path).read_text(encoding="utf-8-sig")
    return parse_catalog(text).questions


def find_question(questions: list[Question], number: int) -> Question | None:
    return next((question for question in questions if question.number == number), None)
