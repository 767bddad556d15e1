"""Use case that asks a completion engine to tidy up extracted text."""
from __future__ import annotations

from domain.entities import ChatMessage, CompletionResult, GenerationParams
from domain.interfaces import CompletionEngine

MIN_CONTENT_LENGTH = 10

SYSTEM_PROMPT = (
    "You clean up text produced by OCR or speech transcription. Fix recognition "
    "errors, restore punctuation and paragraph breaks, and keep the original "
    "wording and language. Return only the corrected text."
)


async def enhance_content(
    text: str,
    *,
    engine: CompletionEngine,
    params: GenerationParams | None = None,
    instructions: str | None = None,
) -> CompletionResult:
    if len(text.strip()) < MIN_CONTENT_LENGTH:
        return CompletionResult(error="Content too short for processing")

    prompt = text if not instructions else f"{instructions}\n\n{text}"
    messages = [
        ChatMessage(role="system", content=SYSTEM_PROMPT),
        ChatMessage(role="user", content=prompt),
    ]
    return await engine.complete(messages, params or GenerationParams())


__all__ = ["enhance_content", "MIN_CONTENT_LENGTH"]
