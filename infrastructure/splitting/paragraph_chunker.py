"""Chunk splitter that packs paragraphs, then sentences, up to a size limit."""
from __future__ import annotations

from domain.entities import Chunk
from domain.interfaces import ChunkSplitter


class ParagraphChunker(ChunkSplitter):
    """Split note content on blank lines, falling back to sentences for long paragraphs."""

    def __init__(self, max_chunk_size: int = 1000) -> None:
        self.max_chunk_size = max_chunk_size

    def split(self, note_id: str, content: str) -> list[Chunk]:
        return [
            Chunk(note_id=note_id, index=index, text=text)
            for index, text in enumerate(self._pack(content or ""))
        ]

    def _pack(self, content: str) -> list[str]:
        if len(content) <= self.max_chunk_size:
            return [content]

        chunks: list[str] = []
        current = ""
        for paragraph in content.split("\n\n"):
            if len(current) + len(paragraph) <= self.max_chunk_size:
                current = f"{current}\n\n{paragraph}" if current else paragraph
                continue
            if current:
                chunks.append(current)
                current = ""
            if len(paragraph) <= self.max_chunk_size:
                current = paragraph
                continue
            for sentence in paragraph.split(". "):
                if len(current) + len(sentence) <= self.max_chunk_size:
                    current = f"{current}. {sentence}" if current else sentence
                else:
                    if current:
                        chunks.append(current)
                    current = sentence
        if current:
            chunks.append(current)
        return chunks or [content]


__all__ = ["ParagraphChunker"]
