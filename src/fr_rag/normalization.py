"""Deterministic post-processing of model replies into canonical answers."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from .schema import NOT_FOUND_ANSWER, Question

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Monetary
# ---------------------------------------------------------------------------

WELL_FORMED_CURRENCY = re.compile(r"^-?R\$ \d{1,3}(?:\.\d{3})*(?:,\d+)?$")
MONETARY_VALUE = re.compile(
    r"(?P<number>\d[\d.,]*)"
    r"\s*\(?\s*(?:(?:em|in)\s+)?(?:R\$\s*)?"
    r"(?P<unit>milhões|milhoes|milhão|milhao|millions|million|milhares|thousands|thousand|mil)?\b\)?",
    re.IGNORECASE,
)
NEGATIVE_PREFIX = re.compile(r"[-−–]\s*(?:R\$\s*)?$")

UNIT_MULTIPLIERS: tuple[tuple[tuple[str, ...], int], ...] = (
    (("milhões", "milhoes", "milhão", "milhao", "millions", "million"), 1_000_000),
    (("milhares", "mil", "thousands", "thousand"), 1_000),
)


def _unit_multiplier(unit: str | None) -> int:
    if not unit:
        return 1
    unit = unit.lower()
    for names, multiplier in UNIT_MULTIPLIERS:
        if unit in names:
            return multiplier
    return 1


def format_currency(value: int) -> str:
    """Format an integer amount as `R$ 1.234.567`, with a leading `-` for losses."""
    grouped = f"{abs(value):,}".replace(",", ".")
    return f"-R$ {grouped}" if value < 0 else f"R$ {grouped}"


def normalize_monetary(raw: str, question: Question | None = None) -> str:
    answer = raw.strip()
    if WELL_FORMED_CURRENCY.match(answer):
        return answer

    found = MONETARY_VALUE.search(answer)
    if found is None:
        return answer

    number = found.group("number").rstrip(".,")
    try:
        amount = Decimal(number.replace(".", "").replace(",", "."))
    except InvalidOperation:
        logger.warning("Could not parse monetary value %r", number)
        return answer

    amount *= _unit_multiplier(found.group("unit"))
    value = int(amount.quantize(Decimal(1), rounding=ROUND_HALF_UP))
    if NEGATIVE_PREFIX.search(answer[: found.start()]):
        value = -value
    return format_currency(value)


# ---------------------------------------------------------------------------
# Yes / No
# ---------------------------------------------------------------------------

YES = "SIM"
NO = "NÃO"
NOT_DISCLOSED = "NÃO DIVULGADO"
NOT_APPLICABLE = "NÃO APLICADO"

YES_NO_PUNCTUATION = re.compile(r"[.!?;,]")

# Checked in order; the first matching pattern decides.
EXPLICIT_PHRASES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"N[ÃA]O\s+DIVULGAD[OA]S?\b"), NOT_DISCLOSED),
    (re.compile(r"N[ÃA]O\s+(?:SE\s+)?APLIC(?:ADO|ADA|A|ÁVEL|AVEL)\b"), NOT_APPLICABLE),
)
LEADING_ANSWER = re.compile(r"^(SIM|N[ÃA]O)(?:$|[\s=\-:])")
NEGATIVE_KEYWORDS = ("NÃO POSSUI", "NÃO DIVULGA", "NÃO INSTALADO", "NÃO ADEQUADO", "NÃO TEM", "NÃO HÁ")
AFFIRMATIVE_KEYWORDS = ("POSSUI", "DIVULGA", "INSTALADO", "ADEQUADO")


def normalize_yes_no(raw: str, question: Question | None = None) -> str:
    answer = YES_NO_PUNCTUATION.sub("", raw.upper()).strip()
    answer = answer.replace("NAO ", "NÃO ")

    for pattern, canonical in EXPLICIT_PHRASES:
        if pattern.search(answer):
            return canonical

    leading = LEADING_ANSWER.match(answer)
    if leading:
        return YES if leading.group(1) == YES else NO

    if any(keyword in answer for keyword in NEGATIVE_KEYWORDS):
        return NO
    if any(keyword in answer for keyword in AFFIRMATIVE_KEYWORDS):
        return YES
    return NOT_FOUND_ANSWER


# ---------------------------------------------------------------------------
# Counting
# ---------------------------------------------------------------------------

COUNT_WITH_NAMES = re.compile(r"^(\d+)\s*\(([^)]+)\)")
FIRST_INTEGER = re.compile(r"\d+")
ZERO_PHRASES = ("NENHUM", "NENHUMA", "ZERO", "NÃO HÁ", "NAO HA", "NÃO EXISTE", "NAO EXISTE")
NOT_FOUND_VARIANTS = ("INFORMAÇÃO NÃO ENCONTRADA", "INFORMACAO NAO ENCONTRADA")


def normalize_counting(raw: str, question: Question | None = None) -> str:
    answer = raw.strip()
    upper = answer.upper()
    if any(variant in upper for variant in NOT_FOUND_VARIANTS):
        return NOT_FOUND_ANSWER

    answer = answer.removesuffix(".").strip()
    shaped = COUNT_WITH_NAMES.match(answer)
    if shaped:
        return f"{shaped.group(1)} ({shaped.group(2).strip()})"

    number = FIRST_INTEGER.search(answer)
    if number:
        return number.group()

    if any(phrase in upper for phrase in ZERO_PHRASES):
        return "0"
    return NOT_FOUND_ANSWER


# ---------------------------------------------------------------------------
# Specific text
# ---------------------------------------------------------------------------

WRAPPING_QUOTES = re.compile(r'^["“”\']+|["“”\']+$')
ARTIFACT_MARKERS = ("política de", "código de", "regimento interno")
TITLE_CAP = 150
VERBOSE_THRESHOLD = 200
TITLE_TERMINATORS = re.compile(r"[.,]")


def _artifact_title(text: str) -> str | None:
    lowered = text.lower()
    positions = [lowered.find(marker) for marker in ARTIFACT_MARKERS]
    positions = [position for position in positions if position != -1]
    if not positions:
        return None
    title = text[min(positions) :]
    terminator = TITLE_TERMINATORS.search(title)
    end = terminator.start() if terminator else len(title)
    return title[: min(end, TITLE_CAP)].strip()


def normalize_specific_text(raw: str, question: Question | None = None) -> str:
    unquoted = WRAPPING_QUOTES.sub("", raw.strip())
    lines = [" ".join(line.split()) for line in unquoted.splitlines() if line.strip()]
    text = " ".join(lines)

    title = _artifact_title(text)
    if title:
        text = title

    if len(text) > VERBOSE_THRESHOLD:
        if lines and len(lines[0]) < TITLE_CAP:
            text = lines[0]
        else:
            first_sentence = text.split(".", 1)[0]
            if len(first_sentence) < TITLE_CAP:
                text = first_sentence
    return text.strip()


# ---------------------------------------------------------------------------
# Multiple choice
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class OptionRule:
    """Map a reply to `label` when it contains one of `substrings` (or equals one, if `exact`)."""

    label: str
    substrings: tuple[str, ...]
    exact: bool = False

    def matches(self, upper_answer: str) -> bool:
        if self.exact:
            return upper_answer in self.substrings
        return any(substring in upper_answer for substring in self.substrings)


@dataclass(frozen=True, slots=True)
class OptionSet:
    """Fixed option list recognised by a marker in the question's instructions or text."""

    marker: str
    options: tuple[OptionRule, ...]

    def applies_to(self, question: Question) -> bool:
        haystack = f"{question.text} {question.filling_instructions}".upper()
        return self.marker.upper() in haystack


NEGATED_COVERAGE = tuple(
    f"{negation} {verb}"
    for negation in ("NÃO", "NAO")
    for verb in ("POSSUI", "CONTRATA", "OFERECE", "TEM", "HÁ", "HA")
)

OPTION_SETS: tuple[OptionSet, ...] = (
    OptionSet(
        marker="D&O",
        options=(
            OptionRule("Não", NEGATED_COVERAGE),
            OptionRule("Seguro D&O", ("SEGURO D&O", "D&O")),
            OptionRule("Outra forma de reembolso", ("OUTRA FORMA", "REEMBOLSO")),
            OptionRule("Não Divulgado", ("NÃO DIVULGADO", "NAO DIVULGADO")),
            OptionRule("Não", ("NÃO", "NAO"), exact=True),
        ),
    ),
)


def normalize_multiple_choice(raw: str, question: Question | None = None) -> str:
    answer = raw.strip()
    if question is None:
        return answer
    upper = answer.upper().rstrip(".").strip()
    for option_set in OPTION_SETS:
        if not option_set.applies_to(question):
            continue
        for option in option_set.options:
            if option.matches(upper):
                return option.label
    return answer


# ---------------------------------------------------------------------------
# Generic
# ---------------------------------------------------------------------------


def normalize_generic(raw: str, question: Question | None = None) -> str:
    answer = " ".join(raw.split())
    if answer.endswith(".") and ". " not in answer:
        answer = answer[:-1]
    return answer
