"""Relevance-filtered semantic search over notes and video transcripts.

The service is fail-closed: whatever goes wrong inside the vector engine,
``search`` returns an empty list and ``index_note`` / ``remove_index``
return ``False``. Failures are only visible through the log.
"""
from __future__ import annotations

import asyncio
import inspect
import logging
import math
import time
from collections.abc import Iterable, Mapping
from dataclasses import replace
from typing import Any, Awaitable, Callable, Sequence, TypeVar

from application.services.snippets import generate_snippet
from domain.entities import (
    SOURCE_TYPES,
    CandidateDocument,
    EngineOutcome,
    FailureReason,
    ScoredResult,
    SearchOptions,
    SearchResult,
    SourceType,
)
from domain.interfaces import VectorEngine

logger = logging.getLogger(__name__)

T = TypeVar("T")


def coerce_candidates(candidates: Iterable[CandidateDocument | Mapping[str, Any]]) -> list[CandidateDocument]:
    """Validate the candidate pool, skipping records that cannot be coerced."""

    pool: list[CandidateDocument] = []
    for candidate in candidates:
        if isinstance(candidate, CandidateDocument):
            pool.append(candidate)
            continue
        try:
            pool.append(CandidateDocument.from_mapping(candidate))
        except ValueError as exc:
            logger.warning("Skipping search candidate: %s", exc)
    return pool


def _coerce_scored(item: ScoredResult | Mapping[str, Any]) -> ScoredResult:
    result = item if isinstance(item, ScoredResult) else ScoredResult.from_mapping(item)
    if not isinstance(result.relevance, (int, float)) or math.isnan(result.relevance):
        raise ValueError(f"Scored result {result.id} has an invalid relevance")
    if result.source_type not in SOURCE_TYPES:
        raise ValueError(f"Scored result {result.id} has an unknown source type '{result.source_type}'")
    return result


def rank_results(
    scored: Sequence[ScoredResult],
    candidates: Sequence[CandidateDocument],
    options: SearchOptions,
) -> list[ScoredResult]:
    """Apply the relevance threshold, order by relevance and cap the result count.

    Ties keep the order of the candidate pool; ids the pool does not know go
    last, in the order the engine reported them.
    """

    if options.max_results <= 0:
        return []
    positions = {candidate.id: index for index, candidate in enumerate(candidates)}
    unknown = len(positions)
    kept = [
        (index, result)
        for index, result in enumerate(scored)
        if result.relevance >= options.min_similarity
    ]
    kept.sort(key=lambda pair: (-pair[1].relevance, positions.get(pair[1].id, unknown), pair[0]))
    return [result for _, result in kept[: options.max_results]]


class SemanticSearchService:
    """Stateless front for a ``VectorEngine``; holds no cache between calls."""

    def __init__(
        self,
        engine: VectorEngine,
        *,
        options: SearchOptions | None = None,
        timeout: float | None = None,
    ) -> None:
        self._engine = engine
        self._options = options or SearchOptions()
        self._timeout = timeout

    @property
    def options(self) -> SearchOptions:
        return self._options

    async def search(
        self,
        candidates: Iterable[CandidateDocument | Mapping[str, Any]],
        query: str,
        options: SearchOptions | None = None,
        *,
        min_similarity: float | None = None,
        max_results: int | None = None,
    ) -> list[SearchResult]:
        """Rank ``candidates`` against ``query``; never raises on engine failure."""

        if not query or not query.strip():
            return []

        opts = options or self._options
        if min_similarity is not None:
            opts = replace(opts, min_similarity=min_similarity)
        if max_results is not None:
            opts = replace(opts, max_results=max_results)

        pool = coerce_candidates(candidates)
        started = time.perf_counter()
        outcome = await self._score(pool, query)
        elapsed_ms = (time.perf_counter() - started) * 1000

        if not outcome.ok:
            logger.error(
                "Semantic search for %r failed after %.1f ms (%s): %s",
                query,
                elapsed_ms,
                outcome.reason.value if outcome.reason else "unknown",
                outcome.detail,
                exc_info=outcome.error,
            )
            return []

        ranked = rank_results(outcome.value or [], pool, opts)
        logger.info("Semantic search for %r finished in %.1f ms: %d results", query, elapsed_ms, len(ranked))
        return [self._to_search_result(result, query) for result in ranked]

    async def index_note(
        self,
        note_id: str,
        title: str,
        content: str | None,
        source_type: SourceType,
    ) -> bool:
        outcome = await self._acknowledged(
            lambda: self._engine.index_note(note_id, title, content or "", source_type)
        )
        if not outcome.ok:
            logger.error(
                "Indexing note %s failed (%s): %s",
                note_id,
                outcome.reason.value,
                outcome.detail,
                exc_info=outcome.error,
            )
            return False
        logger.debug("Indexed note %s", note_id)
        return True

    async def remove_index(self, note_id: str) -> bool:
        outcome = await self._acknowledged(lambda: self._engine.remove_note_index(note_id))
        if not outcome.ok:
            logger.error(
                "Removing index for note %s failed (%s): %s",
                note_id,
                outcome.reason.value,
                outcome.detail,
                exc_info=outcome.error,
            )
            return False
        logger.debug("Removed index for note %s", note_id)
        return True

    async def _score(
        self, pool: list[CandidateDocument], query: str
    ) -> EngineOutcome[list[ScoredResult]]:
        outcome = await self._call(lambda: self._engine.search_notes(pool, query))
        if not outcome.ok:
            return outcome
        raw = outcome.value
        if raw is None or isinstance(raw, (str, bytes, Mapping)) or not isinstance(raw, Iterable):
            return EngineOutcome.failure(
                FailureReason.MALFORMED_RESPONSE, f"expected a sequence of results, got {type(raw).__name__}"
            )
        try:
            return EngineOutcome.success([_coerce_scored(item) for item in raw])
        except Exception as exc:
            return EngineOutcome.failure(FailureReason.MALFORMED_RESPONSE, f"{type(exc).__name__}: {exc}", exc)

    async def _acknowledged(self, call: Callable[[], Awaitable[bool] | bool]) -> EngineOutcome[bool]:
        outcome = await self._call(call)
        if outcome.ok and outcome.value is not True:
            return EngineOutcome.failure(FailureReason.REJECTED, f"engine answered {outcome.value!r}")
        return outcome

    async def _call(self, call: Callable[[], Awaitable[T] | T]) -> EngineOutcome[T]:
        # CancelledError is a BaseException and propagates to the caller.
        try:
            pending = call()
            if not inspect.isawaitable(pending):
                return EngineOutcome.success(pending)
            if self._timeout is None:
                value = await pending
            else:
                value = await asyncio.wait_for(pending, timeout=self._timeout)
        except asyncio.TimeoutError:
            return EngineOutcome.failure(FailureReason.TIMEOUT, f"no answer within {self._timeout}s")
        except Exception as exc:
            return EngineOutcome.failure(FailureReason.ENGINE_ERROR, f"{type(exc).__name__}: {exc}", exc)
        return EngineOutcome.success(value)

    @staticmethod
    def _to_search_result(result: ScoredResult, query: str) -> SearchResult:
        return SearchResult(
            id=result.id,
            title=result.title,
            content=result.content,
            relevance=result.relevance,
            snippet=result.snippet or generate_snippet(result.content, query),
            source_type=result.source_type,
            metadata=dict(result.metadata),
        )


__all__ = ["SemanticSearchService", "coerce_candidates", "rank_results"]
