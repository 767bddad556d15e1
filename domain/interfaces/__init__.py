"""Abstract interfaces for the notescope system."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from domain.entities import (
    CandidateDocument,
    ChatMessage,
    Chunk,
    CompletionResult,
    GenerationParams,
    OcrResult,
    Query,
    ScoredResult,
    SourceType,
)


class ChunkSplitter(ABC):
    """Splits note content into pieces that are embedded separately."""

    @abstractmethod
    def split(self, note_id: str, content: str) -> list[Chunk]:
        """Return chunks for the provided content."""


class Embedder(ABC):
    """Turns text (documents or queries) into vector embeddings."""

    @property
    @abstractmethod
    def model_id(self) -> str:
        """Return the stable identifier for this embedding model."""

    @property
    @abstractmethod
    def dimension(self) -> int:
        """Return the embedding dimension for this model."""

    @abstractmethod
    def embed_texts(self, texts: Sequence[str]) -> list[list[float]]:
        """Embed an iterable of texts into dense vectors."""

    @abstractmethod
    def embed_query(self, query: Query) -> list[float]:
        """Embed a user query for retrieval."""


class VectorEngine(ABC):
    """External embedding/vector engine that owns the persisted index.

    Any method may raise; callers are expected to absorb the failure.
    """

    @abstractmethod
    async def search_notes(
        self, candidates: Sequence[CandidateDocument], query: str
    ) -> Sequence[ScoredResult]:
        """Return relevance-scored matches for ``query``."""

    @abstractmethod
    async def index_note(
        self, note_id: str, title: str, content: str, source_type: SourceType
    ) -> bool:
        """Create or replace the index entry for ``note_id``."""

    @abstractmethod
    async def remove_note_index(self, note_id: str) -> bool:
        """Delete the index entry for ``note_id``."""


class OcrEngine(ABC):
    """Turns a binary file into raw text."""

    @abstractmethod
    async def extract(
        self, data: bytes, file_name: str, content_type: str, language: str = "eng"
    ) -> OcrResult:
        """Return extracted text, or an error payload on failure."""


class CompletionEngine(ABC):
    """Generates text from role-tagged chat messages."""

    @abstractmethod
    async def complete(
        self, messages: Sequence[ChatMessage], params: GenerationParams
    ) -> CompletionResult:
        """Return generated text, or an error payload on failure."""


__all__ = [
    "ChunkSplitter",
    "Embedder",
    "VectorEngine",
    "OcrEngine",
    "CompletionEngine",
]
