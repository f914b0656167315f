from __future__ import annotations

import csv
import logging
from pathlib import Path

from .schema import MISSING_ENTITY_NAME, EntityAnswers

logger = logging.getLogger(__name__)

ENTITY_COLUMN = "Nome_Empresa"
ANSWER_TABLE_DELIMITER = ";"
# Written with a leading BOM.
ANSWER_TABLE_ENCODING = "utf-8-sig"


def answer_table_header(question_numbers: list[int]) -> list[str]:
    header = [ENTITY_COLUMN]
    for number in question_numbers:
        header.extend((f"{number}_RAG", f"{number}_Manual"))
    return header


def answer_table_rows(
    records: list[EntityAnswers], question_numbers: list[int] | None = None
) -> list[list[str]]:
    """Lay out one row per entity with a `<N>_RAG`/`<N>_Manual` column pair per question.

    Args:
        records: Answers per entity.
        question_numbers: Column order; defaults to every answered number, ascending.

    Returns:
        Header row followed by one row per record.
    """
    if question_numbers is None:
        question_numbers = sorted({number for record in records for number in record.answers})

    rows = [answer_table_header(question_numbers)]
    for record in records:
        row = [record.entity_name or MISSING_ENTITY_NAME]
        for number in question_numbers:
            row.extend((record.answers.get(number) or "", ""))
        rows.append(row)
    return rows


def write_answer_table(
    records: list[EntityAnswers],
    path: str | Path,
    question_numbers: list[int] | None = None,
) -> Path:
    destination = Path(path)
    destination.parent.mkdir(parents=True, exist_ok=True)

    with destination.open("w", encoding=ANSWER_TABLE_ENCODING, newline="") as file_handle:
        writer = csv.writer(file_handle, delimiter=ANSWER_TABLE_DELIMITER, lineterminator="\n")
        writer.writerows(answer_table_rows(records, question_numbers))
    logger.info("Wrote answer table for %d entities to %s", len(records), destination)
    return destination


def read_document_text(path: str | Path) -> str:
    return Path(path).read_text(encoding="utf-8")
