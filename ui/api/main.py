"""FastAPI layer that exposes normalize/search/index operations."""
from __future__ import annotations

from typing import Any, Literal

from fastapi import FastAPI
from pydantic import BaseModel, Field

from application.services.text_normalizer import process_text
from domain.entities import CandidateDocument, NormalizationOptions
from infrastructure.config import Container, ContainerConfig, build_default_container
from ui.logging_utils import setup_logging


class NormalizeRequest(BaseModel):
    text: str
    remove_extra_spaces: bool = True
    fix_line_breaks: bool = True
    preserve_structure: bool = True
    join_hyphenated_words: bool = False
    standardize_format: bool = False


class NormalizeResponse(BaseModel):
    text: str


class CandidatePayload(BaseModel):
    id: str
    title: str = ""
    content: str | None = None
    source_type: Literal["note", "video"] = "note"
    metadata: dict[str, Any] = Field(default_factory=dict)


class SearchRequest(BaseModel):
    query: str
    candidates: list[CandidatePayload] = Field(default_factory=list)
    min_similarity: float | None = None
    max_results: int | None = None


class SearchResultPayload(BaseModel):
    id: str
    title: str
    content: str | None
    relevance: float
    snippet: str
    source_type: str
    metadata: dict[str, Any]


class SearchResponse(BaseModel):
    query: str
    results: list[SearchResultPayload]


class IndexRequest(BaseModel):
    title: str = ""
    content: str | None = None
    source_type: Literal["note", "video"] = "note"
    normalize: bool = True


class IndexResponse(BaseModel):
    id: str
    success: bool


def create_app(container: Container | None = None) -> FastAPI:
    setup_logging()
    deps = container or build_default_container(ContainerConfig.from_env())
    service = deps.search_service
    app = FastAPI(title="notescope API")

    @app.post("/normalize", response_model=NormalizeResponse)
    def normalize_endpoint(payload: NormalizeRequest) -> NormalizeResponse:
        options = NormalizationOptions(
            remove_extra_spaces=payload.remove_extra_spaces,
            fix_line_breaks=payload.fix_line_breaks,
            preserve_structure=payload.preserve_structure,
            join_hyphenated_words=payload.join_hyphenated_words,
            standardize_format=payload.standardize_format,
        )
        return NormalizeResponse(text=process_text(payload.text, options))

    @app.post("/search", response_model=SearchResponse)
    async def search_endpoint(payload: SearchRequest) -> SearchResponse:
        candidates = [CandidateDocument(**candidate.model_dump()) for candidate in payload.candidates]
        results = await service.search(
            candidates,
            payload.query,
            min_similarity=payload.min_similarity,
            max_results=payload.max_results,
        )
        return SearchResponse(
            query=payload.query,
            results=[
                SearchResultPayload(
                    id=result.id,
                    title=result.title,
                    content=result.content,
                    relevance=result.relevance,
                    snippet=result.snippet,
                    source_type=result.source_type,
                    metadata=result.metadata,
                )
                for result in results
            ],
        )

    @app.put("/index/{note_id}", response_model=IndexResponse)
    async def index_endpoint(note_id: str, payload: IndexRequest) -> IndexResponse:
        content = process_text(payload.content or "") if payload.normalize else payload.content
        ok = await service.index_note(note_id, payload.title, content, payload.source_type)
        return IndexResponse(id=note_id, success=ok)

    @app.delete("/index/{note_id}", response_model=IndexResponse)
    async def remove_index_endpoint(note_id: str) -> IndexResponse:
        ok = await service.remove_index(note_id)
        return IndexResponse(id=note_id, success=ok)

    return app


app = create_app()
