"""Search-query enrichment for catalog questions.

The enriched query is a bag of terms in priority order: question text,
location hint and its expansions, quoted terms and expansions from the filling
instructions, type vocabulary, then quoted terms and expansions from the
observations. Every rule is a table entry so it can be tested on its own.
"""
from __future__ import annotations

import re
from dataclasses import dataclass

from .schema import Question

QUOTED_TERM = re.compile(r'"([^"]*)"')


@dataclass(frozen=True, slots=True)
class TermRule:
    """Append `terms` when any trigger occurs in the inspected text.

    `requires`, when set, is a second trigger group that must also match.
    """

    triggers: tuple[str, ...]
    terms: str
    requires: tuple[str, ...] = ()
    case_sensitive: bool = False

    def applies(self, text: str) -> bool:
        haystack = text if self.case_sensitive else text.lower()

        def hit(group: tuple[str, ...]) -> bool:
            needles = group if self.case_sensitive else tuple(n.lower() for n in group)
            return any(needle in haystack for needle in needles)

        return hit(self.triggers) and (not self.requires or hit(self.requires))


@dataclass(frozen=True, slots=True)
class TypeVocabulary:
    """Terms a question type always contributes, plus question-text triggered clusters."""

    base_terms: tuple[str, ...] = ()
    conditional: tuple[TermRule, ...] = ()


LOCATION_RULES: tuple[TermRule, ...] = (
    TermRule(("2.1",), "Condições financeiras patrimoniais", case_sensitive=True),
    TermRule(("FR",), "Formulário Referência", case_sensitive=True),
)

INSTRUCTION_RULES: tuple[TermRule, ...] = (
    TermRule(("Receita",), "Receita líquida operacional demonstração resultado", case_sensitive=True),
    TermRule(("Lucro",), "Lucro líquido resultado exercício prejuízo tabela", case_sensitive=True),
    TermRule(("auditoria", "Auditor"), "auditoria independente auditor responsável firma", case_sensitive=True),
    TermRule(("honorários", "gastos"), "honorários remuneração valores pagos custos", case_sensitive=True),
    TermRule(("mil", "milhão"), "R$ mil milhão valores monetários tabela", case_sensitive=True),
)

OBSERVATION_RULES: tuple[TermRule, ...] = (
    TermRule(("banco",), "banco instituição financeira"),
    TermRule(("df",), "demonstrações financeiras balanço"),
)

_BOARD = ("conselho", "conselheiro")

COUNTING_VOCABULARY = TypeVocabulary(
    base_terms=(
        "tabela lista composição membros",
        "efetivos titulares quantidade número",
    ),
    conditional=(
        TermRule(
            _BOARD,
            "conselheiros administração independente externo executivo "
            "CPF Passaporte Experiência Profissional formado graduado "
            "Nome CPF Nacionalidade Profissão Data Nascimento "
            "Órgão da Administração Data da Eleição Prazo do mandato "
            "Cargo eletivo ocupado Descrição de outro cargo função "
            "Data de posse Foi eleito pelo controlador primeiro mandato "
            "Conselho de Adm. Independente (Efetivo) "
            "Conselho de Administração (Efetivo) "
            "Presidente do Conselho de Administração "
            "Conselheiro(Efetivo) e Dir. Presidente "
            "seção 7.3 item 7.3",
        ),
        TermRule(("independente",), "Independente (Efetivo) cargo Adm.", requires=_BOARD),
        TermRule(("externo",), "NÃO Independente NÃO Diretor apenas Conselho", requires=_BOARD),
        TermRule(("executivo",), "Diretoria e Conselho Diretor Presidente ambos", requires=_BOARD),
        TermRule(("mulher",), "mulheres feminino gênero"),
        TermRule(
            ("comitê",),
            "comitê auditoria sustentabilidade risco "
            "Comitês Tipo comitê Tipo auditoria Cargo ocupado "
            "Data posse Prazo mandato Descrição outros comitês "
            "cargo função Coordenador membro reconhecida experiência "
            "Estatuário Resolução CVM seção 7.4",
        ),
    ),
)

YES_NO_VOCABULARY = TypeVocabulary(base_terms=("possui tem divulga afirma menciona",))

MONETARY_VOCABULARY = TypeVocabulary(
    base_terms=("R$ mil milhão valores monetários tabela demonstração financeira",)
)

SPECIFIC_TEXT_VOCABULARY = TypeVocabulary(
    conditional=(
        TermRule(
            ("auditoria", "auditor"),
            "firma auditoria independente responsável "
            "BDO KPMG EY PwC Deloitte Grant Thornton "
            "seção 9.1 auditor último exercício nome",
        ),
        TermRule(
            ("política",),
            "política regras procedimentos norma partes relacionadas transações divulgação",
        ),
    )
)

MULTIPLE_CHOICE_VOCABULARY = TypeVocabulary(base_terms=("seguro reembolso D&O responsabilidade civil",))

GENERIC_VOCABULARY = TypeVocabulary()


def extract_quoted_terms(text: str) -> list[str]:
    """Return the non-empty substrings enclosed in double quotes, in order."""
    return [term for term in QUOTED_TERM.findall(text or "") if term]


def apply_rules(text: str, rules: tuple[TermRule, ...]) -> list[str]:
    if not text:
        return []
    return [rule.terms for rule in rules if rule.applies(text)]


def vocabulary_terms(question: Question, vocabulary: TypeVocabulary) -> list[str]:
    """Type vocabulary for `question`: base terms, then clusters triggered by its text."""
    return [*vocabulary.base_terms, *apply_rules(question.text, vocabulary.conditional)]


def compose_query(question: Question, type_terms: list[str]) -> str:
    """Assemble the enriched search string for `question`.

    Pure function of the question and the type terms supplied by the dispatch table.
    """
    parts: list[str] = [question.text]

    if question.location_hint:
        parts.append(question.location_hint)
        parts.extend(apply_rules(question.location_hint, LOCATION_RULES))

    parts.extend(extract_quoted_terms(question.filling_instructions))
    parts.extend(apply_rules(question.filling_instructions, INSTRUCTION_RULES))

    parts.extend(type_terms)
    if question.rag_keywords:
        parts.append(question.rag_keywords)

    parts.extend(extract_quoted_terms(question.observations))
    parts.extend(apply_rules(question.observations, OBSERVATION_RULES))

    return " ".join(part.strip() for part in parts if part and part.strip()).strip()
