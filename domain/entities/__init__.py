"""Domain entities for the notescope system."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, Literal, Mapping, TypeVar, get_args

SourceType = Literal["note", "video"]
SOURCE_TYPES: tuple[str, ...] = get_args(SourceType)

# Metadata keys understood by the search layer; anything else is carried through untouched.
METADATA_KEYS = ("source_url", "created_at", "is_transcription", "channel_name", "video_id")

T = TypeVar("T")


def _pick(record: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in record and record[key] is not None:
            return record[key]
    return default


@dataclass(slots=True)
class NormalizationOptions:
    """Independent switches for the text cleanup pipeline."""

    remove_extra_spaces: bool = True
    fix_line_breaks: bool = True
    preserve_structure: bool = True
    join_hyphenated_words: bool = False
    standardize_format: bool = False


@dataclass(slots=True)
class CandidateDocument:
    """A note or video transcript that may be returned by a search."""

    id: str
    title: str
    content: str | None = None
    source_type: SourceType = "note"
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, record: Mapping[str, Any]) -> "CandidateDocument":
        """Coerce a loosely shaped note record (API payload, database row)."""

        if not isinstance(record, Mapping):
            raise ValueError(f"Candidate must be a mapping, got {type(record).__name__}")
        note_id = _pick(record, "id", "note_id", "noteId")
        if note_id is None or str(note_id) == "":
            raise ValueError("Candidate is missing an id")

        raw_metadata = record.get("metadata") or {}
        if not isinstance(raw_metadata, Mapping):
            raise ValueError(f"Metadata of candidate {note_id} must be a mapping, got {type(raw_metadata).__name__}")
        metadata = dict(raw_metadata)
        for key in METADATA_KEYS:
            if key in record and key not in metadata:
                metadata[key] = record[key]

        source_type = _pick(record, "source_type", "sourceType")
        if source_type is None:
            source_type = "video" if metadata.get("is_transcription") else "note"
        if source_type not in SOURCE_TYPES:
            raise ValueError(f"Unknown source type '{source_type}' for candidate {note_id}")

        content = record.get("content")
        return cls(
            id=str(note_id),
            title=str(record.get("title") or ""),
            content=None if content is None else str(content),
            source_type=source_type,
            metadata=metadata,
        )


@dataclass(slots=True)
class Query:
    """A user query issued to the system."""

    text: str
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class SearchOptions:
    """Relevance threshold and result cap applied after engine scoring."""

    min_similarity: float = 0.7
    max_results: int = 8


@dataclass(slots=True)
class ScoredResult:
    """A match as reported by an embedding/vector engine."""

    id: str
    title: str
    content: str | None
    relevance: float
    snippet: str = ""
    source_type: SourceType = "note"
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, record: Mapping[str, Any]) -> "ScoredResult":
        """Build a result from an engine payload, raising ``ValueError`` when it is malformed."""

        if not isinstance(record, Mapping):
            raise ValueError(f"Scored result must be a mapping, got {type(record).__name__}")
        note_id = _pick(record, "id", "note_id", "noteId")
        if note_id is None:
            raise ValueError("Scored result is missing an id")
        raw_relevance = _pick(record, "relevance", "similarity", "score")
        if isinstance(raw_relevance, bool) or not isinstance(raw_relevance, (int, float)):
            raise ValueError(f"Scored result {note_id} has no numeric relevance")
        source_type = _pick(record, "source_type", "sourceType", default="note")
        if source_type not in SOURCE_TYPES:
            raise ValueError(f"Unknown source type '{source_type}' for result {note_id}")
        return cls(
            id=str(note_id),
            title=str(record.get("title") or ""),
            content=record.get("content"),
            relevance=float(raw_relevance),
            snippet=str(record.get("snippet") or ""),
            source_type=source_type,
            metadata=dict(record.get("metadata") or {}),
        )


@dataclass(slots=True)
class SearchResult:
    """Result handed back to callers of the search service."""

    id: str
    title: str
    content: str | None
    relevance: float
    snippet: str
    source_type: SourceType
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class Chunk:
    """A slice of a note's content that is embedded on its own."""

    note_id: str
    index: int
    text: str


@dataclass(slots=True)
class IndexEntry:
    """Engine-side representation of an indexed note."""

    note_id: str
    title: str
    content: str
    source_type: SourceType
    chunks: list[Chunk] = field(default_factory=list)


class FailureReason(str, Enum):
    ENGINE_ERROR = "engine_error"
    MALFORMED_RESPONSE = "malformed_response"
    TIMEOUT = "timeout"
    REJECTED = "rejected"


@dataclass(slots=True)
class EngineOutcome(Generic[T]):
    """Either the value an engine call produced or the reason it failed."""

    ok: bool
    value: T | None = None
    reason: FailureReason | None = None
    detail: str = ""
    error: BaseException | None = None

    @classmethod
    def success(cls, value: T) -> "EngineOutcome[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(
        cls, reason: FailureReason, detail: str = "", error: BaseException | None = None
    ) -> "EngineOutcome[T]":
        return cls(ok=False, reason=reason, detail=detail, error=error)


@dataclass(slots=True)
class TextStructure:
    paragraphs: list[str]
    sentences: list[str]
    word_count: int
    confidence: float


@dataclass(slots=True)
class OcrResult:
    """Outcome of an OCR request; failures carry ``error`` instead of raising."""

    success: bool
    text: str = ""
    confidence: int = 0
    error: str | None = None
    file_name: str | None = None
    content_type: str | None = None
    size: int | None = None


@dataclass(slots=True)
class ChatMessage:
    role: Literal["system", "user", "assistant"]
    content: str


@dataclass(slots=True)
class GenerationParams:
    temperature: float = 0.2
    max_tokens: int = 4000
    top_p: float = 0.9


@dataclass(slots=True)
class CompletionResult:
    """Generated text, or the error reported by the completion engine."""

    text: str | None = None
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.error is None and self.text is not None


__all__ = [
    "SourceType",
    "SOURCE_TYPES",
    "METADATA_KEYS",
    "NormalizationOptions",
    "CandidateDocument",
    "Query",
    "SearchOptions",
    "ScoredResult",
    "SearchResult",
    "Chunk",
    "IndexEntry",
    "FailureReason",
    "EngineOutcome",
    "TextStructure",
    "OcrResult",
    "ChatMessage",
    "GenerationParams",
    "CompletionResult",
]
