"""Tests for io_utils.py: answer table layout and writing."""
from __future__ import annotations

import csv

from fr_rag.io_utils import (
    ENTITY_COLUMN,
    answer_table_header,
    answer_table_rows,
    read_document_text,
    write_answer_table,
)
from fr_rag.schema import EntityAnswers


class TestAnswerTableHeader:
    def test_pairs_per_question(self):
        assert answer_table_header([1, 2]) == [ENTITY_COLUMN, "1_RAG", "1_Manual", "2_RAG", "2_Manual"]


class TestAnswerTableRows:
    def test_one_row_per_entity(self):
        records = [
            EntityAnswers("ACME S.A.", {1: "SIM", 2: "R$ 1.000"}),
            EntityAnswers("Beta S.A.", {1: "NÃO", 2: "R$ 2.000"}),
        ]
        rows = answer_table_rows(records)
        assert rows[1] == ["ACME S.A.", "SIM", "", "R$ 1.000", ""]
        assert rows[2] == ["Beta S.A.", "NÃO", "", "R$ 2.000", ""]

    def test_missing_entity_name_is_sentinel(self):
        rows = answer_table_rows([EntityAnswers(None, {1: "SIM"})])
        assert rows[1][0] == "N/A"

    def test_missing_answers_are_empty(self):
        rows = answer_table_rows([EntityAnswers("A", {1: "SIM"})], question_numbers=[1, 2])
        assert rows[1] == ["A", "SIM", "", "", ""]

    def test_default_columns_sorted_union(self):
        rows = answer_table_rows([EntityAnswers("A", {3: "x"}), EntityAnswers("B", {1: "y"})])
        assert rows[0] == [ENTITY_COLUMN, "1_RAG", "1_Manual", "3_RAG", "3_Manual"]

    def test_manual_columns_always_empty(self):
        rows = answer_table_rows([EntityAnswers("A", {1: "SIM", 2: "0"})])
        assert rows[1][2] == ""
        assert rows[1][4] == ""


class TestWriteAnswerTable:
    def test_writes_bom_and_semicolons(self, tmp_path):
        path = write_answer_table([EntityAnswers("Ação S.A.", {1: "NÃO"})], tmp_path / "out" / "respostas.csv")
        raw = path.read_bytes()
        assert raw.startswith(b"\xef\xbb\xbf")
        lines = raw.decode("utf-8-sig").splitlines()
        assert lines[0] == "Nome_Empresa;1_RAG;1_Manual"
        assert lines[1] == "Ação S.A.;NÃO;"

    def test_quotes_fields_with_separator(self, tmp_path):
        path = write_answer_table([EntityAnswers("A", {1: "3 (Ana; Bia)"})], tmp_path / "r.csv")
        with path.open(encoding="utf-8-sig", newline="") as handle:
            rows = list(csv.reader(handle, delimiter=";"))
        assert rows[1] == ["A", "3 (Ana; Bia)", ""]

    def test_overwrites_previous_checkpoint(self, tmp_path):
        path = tmp_path / "r.csv"
        write_answer_table([EntityAnswers("A", {1: "SIM"})], path, [1, 2])
        write_answer_table([EntityAnswers("A", {1: "SIM", 2: "0"})], path, [1, 2])
        assert path.read_text(encoding="utf-8-sig").splitlines()[1] == "A;SIM;;0;"


class TestReadDocumentText:
    def test_reads_utf8(self, tmp_path):
        path = tmp_path / "fr.txt"
        path.write_text("Conselho de Administração", encoding="utf-8")
        assert read_document_text(path) == "Conselho de Administração"
