"""Vector engine that keeps note embeddings in process memory."""
from __future__ import annotations

import logging
from typing import Sequence

import numpy as np

from application.services.snippets import generate_snippet
from domain.entities import CandidateDocument, IndexEntry, Query, ScoredResult, SourceType
from domain.interfaces import ChunkSplitter, Embedder, VectorEngine
from infrastructure.splitting.paragraph_chunker import ParagraphChunker

logger = logging.getLogger(__name__)


class InMemoryVectorEngine(VectorEngine):
    """Embeds note chunks locally and ranks them by brute-force cosine similarity.

    A note is represented by its best matching chunk. Re-indexing an id
    replaces every chunk stored for it.
    """

    def __init__(
        self,
        embedder: Embedder,
        *,
        chunker: ChunkSplitter | None = None,
        top_k: int = 12,
    ) -> None:
        self._embedder = embedder
        self._chunker = chunker or ParagraphChunker()
        self._top_k = top_k
        self._entries: dict[str, IndexEntry] = {}
        self._vectors: dict[str, np.ndarray] = {}

    @property
    def entries(self) -> dict[str, IndexEntry]:
        return dict(self._entries)

    async def index_note(
        self, note_id: str, title: str, content: str, source_type: SourceType
    ) -> bool:
        chunks = self._chunker.split(note_id, content)
        texts = [f"{title}\n\n{chunk.text}" if title else chunk.text for chunk in chunks]
        matrix = np.asarray(self._embedder.embed_texts(texts), dtype=np.float32)
        self._entries[note_id] = IndexEntry(
            note_id=note_id,
            title=title,
            content=content,
            source_type=source_type,
            chunks=chunks,
        )
        self._vectors[note_id] = self._normalize(matrix)
        logger.debug("Stored %d chunks for note %s", len(chunks), note_id)
        return True

    async def remove_note_index(self, note_id: str) -> bool:
        self._entries.pop(note_id, None)
        self._vectors.pop(note_id, None)
        return True

    async def search_notes(
        self, candidates: Sequence[CandidateDocument], query: str
    ) -> list[ScoredResult]:
        if not self._entries:
            return []
        by_id = {candidate.id: candidate for candidate in candidates}
        query_vector = self._normalize(
            np.asarray([self._embedder.embed_query(Query(text=query))], dtype=np.float32)
        )[0]

        scored: list[ScoredResult] = []
        for note_id, entry in self._entries.items():
            if by_id and note_id not in by_id:
                continue
            similarities = self._vectors[note_id] @ query_vector
            best = int(np.argmax(similarities))
            relevance = float(np.clip(similarities[best], 0.0, 1.0))
            scored.append(self._to_result(entry, by_id.get(note_id), best, relevance, query))

        scored.sort(key=lambda result: result.relevance, reverse=True)
        return scored[: self._top_k]

    @staticmethod
    def _normalize(matrix: np.ndarray) -> np.ndarray:
        norms = np.linalg.norm(matrix, axis=1, keepdims=True)
        norms[norms == 0] = 1.0
        return matrix / norms

    @staticmethod
    def _to_result(
        entry: IndexEntry,
        candidate: CandidateDocument | None,
        chunk_index: int,
        relevance: float,
        query: str,
    ) -> ScoredResult:
        chunk_text = entry.chunks[chunk_index].text if entry.chunks else entry.content
        metadata = dict(candidate.metadata) if candidate else {}
        metadata.setdefault("is_transcription", entry.source_type == "video")
        metadata["similarity"] = relevance
        metadata["chunk_index"] = chunk_index
        return ScoredResult(
            id=entry.note_id,
            title=candidate.title if candidate else entry.title,
            content=candidate.content if candidate and candidate.content is not None else entry.content,
            relevance=relevance,
            snippet=generate_snippet(chunk_text, query),
            source_type=candidate.source_type if candidate else entry.source_type,
            metadata=metadata,
        )


__all__ = ["InMemoryVectorEngine"]
