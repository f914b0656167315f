"""Structure-aware segmentation of a long reference-form document.

Segments are always contiguous slices of the (normalized) source text, so
`Segment.start`/`Segment.end` point back into it and the overlap carried from
one segment into the next is literally the tail of the previous one.
"""
from __future__ import annotations

import re
from dataclasses import dataclass

from .schema import Segment

CHARS_PER_TOKEN = 4

BLOCK_RECORD = "record"
BLOCK_OTHER = "other"


@dataclass(frozen=True, slots=True)
class BlockRules:
    """Markers that delimit semantic blocks.

    A record block runs from a `record_start` match to the next
    `record_start`, `page_marker` or `section_header`, whichever comes first.
    Page markers and section headers also split the text between records.
    """

    record_start: re.Pattern[str] = re.compile(r"^[ \t]*Nome:?[ \t]+\S", re.MULTILINE)
    page_marker: re.Pattern[str] = re.compile(r"PÁGINA:\s*\d+\s*de\s*\d+")
    section_header: re.Pattern[str] = re.compile(r"^[ \t]*\d+\.\d+[ \t]+[^\n]{10,80}$", re.MULTILINE)


@dataclass(frozen=True, slots=True)
class SplitBoundaries:
    """Separators for the oversized-block cascade, coarsest first."""

    paragraph: re.Pattern[str] = re.compile(r"\n[ \t]*\n\s*")
    sentence: re.Pattern[str] = re.compile(r"(?<=[.!?;:])\s+(?=[A-ZÀ-ÖØ-Þ0-9\"“(•-])")
    word: re.Pattern[str] = re.compile(r"\s+")

    def cascade(self) -> tuple[re.Pattern[str], ...]:
        return (self.paragraph, self.sentence, self.word)


DEFAULT_BLOCK_RULES = BlockRules()
DEFAULT_BOUNDARIES = SplitBoundaries()


@dataclass(frozen=True, slots=True)
class Block:
    start: int
    end: int
    kind: str


def estimate_tokens(text: str) -> int:
    """Cheap token estimate: one token per four characters."""
    return len(text) // CHARS_PER_TOKEN


def normalize_text(text: str) -> str:
    """Normalize extracted text: unix newlines, no trailing spaces, at most one blank line."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = re.sub(r"[ \t]+\n", "\n", text)
    return re.sub(r"\n{3,}", "\n\n", text)


def _boundary_after(text: str, position: int, rules: BlockRules) -> int:
    candidates = [len(text)]
    for pattern in (rules.record_start, rules.page_marker, rules.section_header):
        found = pattern.search(text, position)
        if found is not None:
            candidates.append(found.start())
    return min(candidates)


def identify_blocks(text: str, rules: BlockRules = DEFAULT_BLOCK_RULES) -> list[Block]:
    """Partition `text` into consecutive record and other blocks covering it entirely."""
    cuts = {0, len(text)}
    for pattern in (rules.page_marker, rules.section_header):
        cuts.update(found.start() for found in pattern.finditer(text))

    record_spans: list[tuple[int, int]] = []
    for found in rules.record_start.finditer(text):
        if record_spans and found.start() < record_spans[-1][1]:
            continue
        end = _boundary_after(text, found.end(), rules)
        record_spans.append((found.start(), end))
        cuts.update((found.start(), end))

    record_starts = {start for start, _ in record_spans}
    ordered = sorted(cuts)
    blocks: list[Block] = []
    for start, end in zip(ordered, ordered[1:]):
        if start == end:
            continue
        kind = BLOCK_RECORD if start in record_starts else BLOCK_OTHER
        blocks.append(Block(start=start, end=end, kind=kind))
    return blocks


def overlap_start(text: str, start: int, end: int, overlap_tokens: int) -> int:
    """Return where the overlap tail of `text[start:end]` begins.

    The tail holds at most `overlap_tokens` worth of characters and begins on a
    whitespace boundary; `end` (an empty tail) is returned when no such
    boundary exists inside the budget.
    """
    if overlap_tokens <= 0 or end <= start:
        return end
    if estimate_tokens(text[start:end]) <= overlap_tokens:
        return start
    cursor = max(start, end - overlap_tokens * CHARS_PER_TOKEN)
    while cursor < end and not text[cursor - 1].isspace():
        cursor += 1
    return cursor


def _spans_between(text: str, start: int, end: int, separator: re.Pattern[str]) -> list[tuple[int, int]]:
    spans: list[tuple[int, int]] = []
    cursor = start
    for found in separator.finditer(text, start, end):
        if found.start() > cursor:
            spans.append((cursor, found.start()))
        cursor = max(cursor, found.end())
    if cursor < end:
        spans.append((cursor, end))
    return spans


def _split_oversized(
    text: str,
    start: int,
    end: int,
    max_tokens: int,
    cascade: tuple[re.Pattern[str], ...],
    level: int = 0,
) -> list[tuple[int, int]]:
    """Pack paragraph, then sentence, then word spans under `max_tokens`.

    Past the last separator level the span is sliced every `max_tokens`
    worth of characters, so no piece can ever exceed the bound.
    """
    if estimate_tokens(text[start:end]) <= max_tokens:
        return [(start, end)]
    if level >= len(cascade):
        width = max_tokens * CHARS_PER_TOKEN
        return [(cut, min(cut + width, end)) for cut in range(start, end, width)]

    pieces: list[tuple[int, int]] = []
    current: tuple[int, int] | None = None
    for span_start, span_end in _spans_between(text, start, end, cascade[level]):
        if estimate_tokens(text[span_start:span_end]) > max_tokens:
            if current is not None:
                pieces.append(current)
                current = None
            pieces.extend(_split_oversized(text, span_start, span_end, max_tokens, cascade, level + 1))
        elif current is None:
            current = (span_start, span_end)
        elif estimate_tokens(text[current[0] : span_end]) <= max_tokens:
            current = (current[0], span_end)
        else:
            pieces.append(current)
            current = (span_start, span_end)
    if current is not None:
        pieces.append(current)
    return pieces


def _make_segment(text: str, start: int, end: int, index: int, doc_id: str, strategy: str) -> Segment | None:
    raw = text[start:end]
    stripped = raw.strip()
    if not stripped:
        return None
    lead = len(raw) - len(raw.lstrip())
    seg_start = start + lead
    return Segment(
        segment_id=f"{doc_id}-SEG-{index:04d}",
        text=stripped,
        approx_tokens=estimate_tokens(stripped),
        start=seg_start,
        end=seg_start + len(stripped),
        strategy=strategy,
    )


def segment_text(
    text: str,
    max_tokens: int,
    overlap_tokens: int,
    doc_id: str = "DOC",
    rules: BlockRules = DEFAULT_BLOCK_RULES,
    boundaries: SplitBoundaries = DEFAULT_BOUNDARIES,
) -> list[Segment]:
    """Split document text into bounded, overlapping segments.

    Args:
        text: Normalized document text.
        max_tokens: Upper bound on the estimated token count of a segment.
        overlap_tokens: Size of the tail carried from a closed segment into the next.
        doc_id: Prefix for generated segment ids.
        rules: Markers used to find semantic blocks.
        boundaries: Separators for splitting blocks larger than `max_tokens`.

    Returns:
        Segments in document order, trimmed, never empty.
    """
    if max_tokens <= 0:
        raise ValueError("max_tokens must be positive")

    spans: list[tuple[int, int, str]] = []
    chunk: tuple[int, int] | None = None
    for block in identify_blocks(text, rules):
        block_tokens = estimate_tokens(text[block.start : block.end])

        if block_tokens > max_tokens:
            if chunk is not None:
                spans.append((*chunk, "semantic"))
                chunk = None
            for piece in _split_oversized(text, block.start, block.end, max_tokens, boundaries.cascade()):
                spans.append((*piece, "fallback"))
            continue

        if chunk is None:
            chunk = (block.start, block.end)
        elif estimate_tokens(text[chunk[0] : block.end]) <= max_tokens:
            chunk = (chunk[0], block.end)
        else:
            spans.append((*chunk, "semantic"))
            # -1 absorbs the rounding of the integer estimate on concatenation.
            budget = min(overlap_tokens, max_tokens - block_tokens - 1)
            chunk = (overlap_start(text, chunk[0], chunk[1], budget), block.end)
    if chunk is not None:
        spans.append((*chunk, "semantic"))

    segments: list[Segment] = []
    for start, end, strategy in spans:
        segment = _make_segment(text, start, end, len(segments), doc_id, strategy)
        if segment is not None:
            segments.append(segment)
    return segments
