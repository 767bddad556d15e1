"""Dependency wiring for the notescope application."""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Callable, Literal, Mapping

from application.services.semantic_search import SemanticSearchService
from domain.entities import SearchOptions
from domain.interfaces import CompletionEngine, Embedder, OcrEngine, VectorEngine
from infrastructure.completion.http_completion_engine import CompletionConfig, HttpCompletionEngine
from infrastructure.embedding.hashed_bow_embedder import HashedBagOfWordsEmbedder
from infrastructure.engines.in_memory_engine import InMemoryVectorEngine
from infrastructure.engines.keyword_engine import KeywordSearchEngine
from infrastructure.engines.remote_engine import DEFAULT_GATEWAY_URL, RemoteEngineConfig, RemoteVectorEngine
from infrastructure.ocr.http_ocr_engine import DEFAULT_OCR_URL, HttpOcrEngine, OcrConfig
from infrastructure.splitting.paragraph_chunker import ParagraphChunker

EngineName = Literal["memory", "keyword", "remote"]
EmbedderName = Literal["hashed", "sentence-transformers"]

ENV_PREFIX = "NOTESCOPE_"


@dataclass(slots=True)
class Container:
    """Simple container bundling concrete infrastructure implementations."""

    engine: VectorEngine
    search_service: SemanticSearchService
    ocr_engine: OcrEngine
    completion_engine: CompletionEngine


@dataclass(slots=True)
class ContainerConfig:
    """Configuration for selecting the vector engine and its collaborators."""

    engine: EngineName = "memory"
    embedder: EmbedderName = "hashed"
    embedder_model: str = "sentence-transformers/all-MiniLM-L6-v2"
    min_similarity: float = 0.7
    max_results: int = 8
    search_timeout: float | None = None
    max_chunk_size: int = 1000
    remote_url: str = DEFAULT_GATEWAY_URL
    remote_api_key: str | None = None
    ocr_url: str = DEFAULT_OCR_URL
    completion_provider: str = "mistral"
    completion_model: str = "mistral-large-latest"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ContainerConfig":
        """Read ``NOTESCOPE_*`` variables, keeping defaults for anything unset."""

        env = os.environ if environ is None else environ

        def get(name: str) -> str | None:
            value = env.get(f"{ENV_PREFIX}{name}")
            return value if value not in (None, "") else None

        defaults = cls()
        timeout = get("SEARCH_TIMEOUT")
        return cls(
            engine=get("ENGINE") or defaults.engine,
            embedder=get("EMBEDDER") or defaults.embedder,
            embedder_model=get("EMBEDDER_MODEL") or defaults.embedder_model,
            min_similarity=float(get("MIN_SIMILARITY") or defaults.min_similarity),
            max_results=int(get("MAX_RESULTS") or defaults.max_results),
            search_timeout=float(timeout) if timeout else None,
            max_chunk_size=int(get("MAX_CHUNK_SIZE") or defaults.max_chunk_size),
            remote_url=get("REMOTE_URL") or defaults.remote_url,
            remote_api_key=get("REMOTE_API_KEY"),
            ocr_url=get("OCR_URL") or defaults.ocr_url,
            completion_provider=get("COMPLETION_PROVIDER") or defaults.completion_provider,
            completion_model=get("COMPLETION_MODEL") or defaults.completion_model,
        )


def _sentence_transformers(cfg: ContainerConfig) -> Embedder:
    from infrastructure.embedding.sentence_transformers_embedder import (  # noqa: PLC0415
        SentenceTransformersConfig,
        SentenceTransformersEmbedder,
    )

    return SentenceTransformersEmbedder(SentenceTransformersConfig(model_name=cfg.embedder_model))


_EMBEDDER_FACTORIES: dict[EmbedderName, Callable[[ContainerConfig], Embedder]] = {
    "hashed": lambda cfg: HashedBagOfWordsEmbedder(),
    "sentence-transformers": _sentence_transformers,
}

_ENGINE_FACTORIES: dict[EngineName, Callable[[ContainerConfig], VectorEngine]] = {
    "memory": lambda cfg: InMemoryVectorEngine(
        build_embedder(cfg),
        chunker=ParagraphChunker(cfg.max_chunk_size),
    ),
    "keyword": lambda cfg: KeywordSearchEngine(),
    "remote": lambda cfg: RemoteVectorEngine(
        RemoteEngineConfig(
            base_url=cfg.remote_url,
            api_key=cfg.remote_api_key,
            max_chunk_size=cfg.max_chunk_size,
        )
    ),
}


def build_embedder(cfg: ContainerConfig) -> Embedder:
    try:
        factory = _EMBEDDER_FACTORIES[cfg.embedder]
    except KeyError as exc:
        raise ValueError(f"Unknown embedder '{cfg.embedder}'") from exc
    return factory(cfg)


def build_engine(cfg: ContainerConfig) -> VectorEngine:
    try:
        factory = _ENGINE_FACTORIES[cfg.engine]
    except KeyError as exc:
        raise ValueError(f"Unknown engine '{cfg.engine}'") from exc
    return factory(cfg)


def build_default_container(config: ContainerConfig | None = None) -> Container:
    """Instantiate the default infrastructure stack."""

    cfg = config or ContainerConfig()
    engine = build_engine(cfg)
    search_service = SemanticSearchService(
        engine,
        options=SearchOptions(min_similarity=cfg.min_similarity, max_results=cfg.max_results),
        timeout=cfg.search_timeout,
    )
    ocr_engine = HttpOcrEngine(OcrConfig(url=cfg.ocr_url))
    completion_engine = HttpCompletionEngine(
        CompletionConfig(provider=cfg.completion_provider, model=cfg.completion_model)
    )

    return Container(
        engine=engine,
        search_service=search_service,
        ocr_engine=ocr_engine,
        completion_engine=completion_engine,
    )


__all__ = [
    "Container",
    "ContainerConfig",
    "build_default_container",
    "build_embedder",
    "build_engine",
]
