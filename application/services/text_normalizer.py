"""Deterministic cleanup pipeline for OCR output and transcripts.

Stages run in a fixed order: whitespace collapse, hyphen join, line-break
repair, structural normalization, format standardization and an
unconditional final cleanup. Every stage except the last is toggled by
``NormalizationOptions``. The whole sequence is repeated until the text
stops changing, so feeding the output back in with the same options is a
no-op.
"""
from __future__ import annotations

import re

from domain.entities import NormalizationOptions, TextStructure

# Upper bound on pipeline passes; real inputs settle after one or two.
MAX_PASSES = 5

_HORIZONTAL_SPACE = re.compile(r"[ \t]+")
_SPACE_AROUND_BREAK = re.compile(r"[ \t]*\n[ \t]*")
_HYPHENATED_BREAK = re.compile(r"(\w)-\n(\w)")
_EXCESS_BREAKS = re.compile(r"\n{3,}")
_SENTENCE_BREAK = re.compile(r"([.!?])\n(?=[A-Z])")
_WRAPPED_BREAK = re.compile(r"([a-z])\n(?=[A-Z])")
_BLANK_RUN = re.compile(r"\n{2,}")
_DOUBLE_QUOTES = re.compile(r"[“”„«»]")
_SINGLE_QUOTES = re.compile(r"[‘’‚`]")
_DASHES = re.compile(r"[–—−]")
_ELLIPSIS = re.compile(r"…|\.{4,}")
_DISALLOWED = re.compile(r"[^\w\s.,!?;:()\-'\"]")
_SPACE_BEFORE_PUNCT = re.compile(r"\s+([.,!?;:])")
_MISSING_SPACE = re.compile(r"([.!?])(?=[A-Z])")
_SENTENCE_SPLIT = re.compile(r"[.!?]+")
_PARAGRAPH_SPLIT = re.compile(r"\n\s*\n")


def collapse_whitespace(text: str) -> str:
    text = _HORIZONTAL_SPACE.sub(" ", text)
    text = _SPACE_AROUND_BREAK.sub("\n", text)
    return text.strip()


def join_hyphenated_words(text: str) -> str:
    return _HYPHENATED_BREAK.sub(r"\1\2", text)


def repair_line_breaks(text: str) -> str:
    """Collapse break runs, promote sentence ends to paragraphs and join wrapped lines."""

    text = _EXCESS_BREAKS.sub("\n\n", text)
    text = _SENTENCE_BREAK.sub(r"\1\n\n", text)
    return _WRAPPED_BREAK.sub(r"\1 ", text)


def normalize_structure(text: str) -> str:
    text = "\n".join(line.strip() for line in text.split("\n"))
    return _BLANK_RUN.sub("\n\n", text)


def standardize_format(text: str) -> str:
    text = _DOUBLE_QUOTES.sub('"', text)
    text = _SINGLE_QUOTES.sub("'", text)
    text = _DASHES.sub("-", text)
    return _ELLIPSIS.sub("...", text)


def final_cleanup(text: str) -> str:
    text = _DISALLOWED.sub("", text)
    text = _SPACE_BEFORE_PUNCT.sub(r"\1", text)
    text = _MISSING_SPACE.sub(r"\1 ", text)
    return text.strip()


def _run_stages(text: str, options: NormalizationOptions) -> str:
    if options.remove_extra_spaces:
        text = collapse_whitespace(text)
    if options.join_hyphenated_words:
        text = join_hyphenated_words(text)
    if options.fix_line_breaks:
        text = repair_line_breaks(text)
    if options.preserve_structure:
        text = normalize_structure(text)
    if options.standardize_format:
        text = standardize_format(text)
    return final_cleanup(text)


def process_text(text: str, options: NormalizationOptions | None = None) -> str:
    """Normalize noisy extracted text into a canonical, display-ready form."""

    opts = options or NormalizationOptions()
    current = (text or "").replace("\r\n", "\n").replace("\r", "\n")
    for _ in range(MAX_PASSES):
        cleaned = _run_stages(current, opts)
        if cleaned == current:
            break
        current = cleaned
    return current


def extract_text_structure(text: str) -> TextStructure:
    paragraphs = [part for part in _PARAGRAPH_SPLIT.split(text) if part.strip()]
    sentences = [part for part in _SENTENCE_SPLIT.split(text) if part.strip()]
    word_count = len(text.split())

    avg_words_per_sentence = word_count / max(len(sentences), 1)
    avg_sentences_per_paragraph = len(sentences) / max(len(paragraphs), 1)

    confidence = 0.5
    if 5 < avg_words_per_sentence < 25:
        confidence += 0.2
    if 1 < avg_sentences_per_paragraph < 10:
        confidence += 0.2
    if word_count > 50:
        confidence += 0.1

    return TextStructure(
        paragraphs=paragraphs,
        sentences=sentences,
        word_count=word_count,
        confidence=min(round(confidence, 2), 1.0),
    )


def estimate_ocr_confidence(text: str) -> int:
    """Heuristic 0-100 score of how plausible a piece of OCR output looks."""

    if not text:
        return 0

    score = 50
    if len(text) > 100:
        score += 20
    elif len(text) > 50:
        score += 10

    words = text.split()
    if len(words) > 20:
        score += 15
    elif len(words) > 10:
        score += 10

    if len(set(text.lower())) > 20:
        score += 10

    special = len(re.findall(r"[^a-zA-Z0-9\s.,!?;:()\-'\"]", text))
    if special > len(text) * 0.1:
        score -= 20

    return max(0, min(100, score))


__all__ = [
    "process_text",
    "collapse_whitespace",
    "join_hyphenated_words",
    "repair_line_breaks",
    "normalize_structure",
    "standardize_format",
    "final_cleanup",
    "extract_text_structure",
    "estimate_ocr_confidence",
]
