"""Stateless engine that scores the candidate pool by keyword overlap."""
from __future__ import annotations

from typing import Sequence

from application.services.snippets import generate_snippet
from domain.entities import CandidateDocument, ScoredResult, SourceType
from domain.interfaces import VectorEngine

TITLE_PHRASE_WEIGHT = 0.9
TITLE_WORD_WEIGHT = 0.4
CONTENT_WORD_WEIGHT = 0.15
MIN_SCORE = 0.2


class KeywordSearchEngine(VectorEngine):
    """Rank candidates by phrase and word hits in their title and content.

    Used when no embedding backend is reachable. There is no index: every
    search scans the pool it is given, so index commands are accepted
    without doing anything.
    """

    def __init__(self, max_results: int = 6) -> None:
        self._max_results = max_results

    async def search_notes(
        self, candidates: Sequence[CandidateDocument], query: str
    ) -> list[ScoredResult]:
        phrase = query.strip().lower()
        words = [word for word in phrase.split() if len(word) > 2]

        scored: list[ScoredResult] = []
        for candidate in candidates:
            title = candidate.title.lower()
            content = (candidate.content or "").lower()
            if not any(word in title or word in content for word in words):
                continue

            score = TITLE_PHRASE_WEIGHT if phrase and phrase in title else 0.0
            for word in words:
                if word in title:
                    score += TITLE_WORD_WEIGHT
                if word in content:
                    score += CONTENT_WORD_WEIGHT
            if score < MIN_SCORE:
                continue

            scored.append(
                ScoredResult(
                    id=candidate.id,
                    title=candidate.title,
                    content=candidate.content,
                    relevance=min(round(score, 4), 1.0),
                    snippet=generate_snippet(candidate.content or candidate.title, query),
                    source_type=candidate.source_type,
                    metadata=dict(candidate.metadata),
                )
            )

        scored.sort(key=lambda result: result.relevance, reverse=True)
        return scored[: self._max_results]

    async def index_note(
        self, note_id: str, title: str, content: str, source_type: SourceType
    ) -> bool:
        return True

    async def remove_note_index(self, note_id: str) -> bool:
        return True


__all__ = ["KeywordSearchEngine"]
