"""Client for a remote vector gateway (embedding generation plus a hosted index)."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Sequence

import requests

from application.services.snippets import generate_snippet
from domain.entities import CandidateDocument, ScoredResult, SourceType
from domain.interfaces import ChunkSplitter, VectorEngine
from infrastructure.splitting.paragraph_chunker import ParagraphChunker

logger = logging.getLogger(__name__)

DEFAULT_GATEWAY_URL = "http://localhost:54321/functions/v1/pinecone-operations"


@dataclass(slots=True)
class RemoteEngineConfig:
    base_url: str = DEFAULT_GATEWAY_URL
    api_key: str | None = None
    top_k: int = 12
    timeout: float = 30.0
    max_chunk_size: int = 1000
    max_listed_chunks: int = 1000


class RemoteEngineError(RuntimeError):
    """Raised when the gateway answers with an error payload."""


class RemoteVectorEngine(VectorEngine):
    """Talks to a gateway exposing ``generate-embedding``, ``pinecone-upsert``,
    ``pinecone-query`` and ``pinecone-delete`` operations.

    Requests are blocking and are pushed to a worker thread.
    """

    def __init__(
        self,
        config: RemoteEngineConfig | None = None,
        *,
        session: requests.Session | None = None,
        chunker: ChunkSplitter | None = None,
    ) -> None:
        self._config = config or RemoteEngineConfig()
        self._session = session or requests.Session()
        self._chunker = chunker or ParagraphChunker(self._config.max_chunk_size)

    async def search_notes(
        self, candidates: Sequence[CandidateDocument], query: str
    ) -> list[ScoredResult]:
        return await asyncio.to_thread(self._search, list(candidates), query)

    async def index_note(
        self, note_id: str, title: str, content: str, source_type: SourceType
    ) -> bool:
        return await asyncio.to_thread(self._upsert, note_id, title, content, source_type)

    async def remove_note_index(self, note_id: str) -> bool:
        return await asyncio.to_thread(self._delete, note_id)

    def _post(self, operation: str, payload: dict[str, Any]) -> dict[str, Any]:
        headers = {"Content-Type": "application/json"}
        if self._config.api_key:
            headers["Authorization"] = f"Bearer {self._config.api_key}"
        response = self._session.post(
            f"{self._config.base_url.rstrip('/')}/{operation}",
            json=payload,
            headers=headers,
            timeout=self._config.timeout,
        )
        response.raise_for_status()
        data = response.json()
        if isinstance(data, dict) and data.get("error"):
            raise RemoteEngineError(f"{operation}: {data['error']}")
        return data

    def _embed(self, text: str) -> list[float]:
        data = self._post("generate-embedding", {"text": text})
        embedding = data.get("embedding")
        if not embedding:
            raise RemoteEngineError("generate-embedding returned no embedding")
        return embedding

    def _search(self, candidates: list[CandidateDocument], query: str) -> list[ScoredResult]:
        vector = self._embed(query)
        data = self._post(
            "pinecone-query",
            {"vector": vector, "topK": self._config.top_k, "includeMetadata": True},
        )
        by_id = {candidate.id: candidate for candidate in candidates}

        best: dict[str, ScoredResult] = {}
        for match in data["matches"]:
            metadata = match.get("metadata") or {}
            note_id = str(metadata["noteId"])
            score = float(match["score"])
            if note_id in best and best[note_id].relevance >= score:
                continue
            candidate = by_id.get(note_id)
            chunk_text = metadata.get("content") or ""
            best[note_id] = ScoredResult(
                id=note_id,
                title=candidate.title if candidate else metadata.get("title", ""),
                content=candidate.content if candidate and candidate.content is not None else chunk_text,
                relevance=score,
                snippet=generate_snippet(chunk_text, query),
                source_type=metadata.get("sourceType", "note"),
                metadata={
                    **(candidate.metadata if candidate else {}),
                    "created_at": metadata.get("createdAt"),
                    "is_transcription": metadata.get("sourceType") == "video",
                    "similarity": score,
                },
            )
        return sorted(best.values(), key=lambda result: result.relevance, reverse=True)

    def _upsert(self, note_id: str, title: str, content: str, source_type: SourceType) -> bool:
        chunks = self._chunker.split(note_id, content)
        vectors = [
            {
                "id": f"{note_id}_chunk_{chunk.index}",
                "values": self._embed(f"{title}\n\n{chunk.text}"),
                "metadata": {
                    "noteId": note_id,
                    "title": title,
                    "content": chunk.text,
                    "sourceType": source_type,
                    "chunkIndex": chunk.index,
                    "totalChunks": len(chunks),
                },
            }
            for chunk in chunks
        ]
        # Chunk ids are positional, so the upsert overwrites chunks 0..n-1 in place and
        # only ids past the new chunk count are left to prune. A failed upsert deletes nothing.
        self._post("pinecone-upsert", {"vectors": vectors})
        stale = self._stale_chunk_ids(note_id, vectors[0]["values"], {vector["id"] for vector in vectors})
        if stale:
            self._post("pinecone-delete", {"ids": stale})
        logger.info("Upserted %d vectors for note %s, pruned %d stale", len(vectors), note_id, len(stale))
        return True

    def _stale_chunk_ids(self, note_id: str, vector: list[float], current: set[str]) -> list[str]:
        data = self._post(
            "pinecone-query",
            {
                "vector": vector,
                "topK": self._config.max_listed_chunks,
                "includeMetadata": False,
                "filter": {"noteId": {"$eq": note_id}},
            },
        )
        return sorted(str(match["id"]) for match in data.get("matches", []) if str(match["id"]) not in current)

    def _delete(self, note_id: str) -> bool:
        self._post("pinecone-delete", {"noteId": note_id})
        return True


__all__ = ["RemoteVectorEngine", "RemoteEngineConfig", "RemoteEngineError", "DEFAULT_GATEWAY_URL"]
