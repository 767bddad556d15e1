"""Use case that normalizes notes and pushes them into the semantic index."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable, Mapping

from application.services.semantic_search import SemanticSearchService
from application.services.text_normalizer import process_text
from domain.entities import CandidateDocument, NormalizationOptions

logger = logging.getLogger(__name__)


async def ingest_notes(
    documents: Iterable[CandidateDocument | Mapping[str, Any]],
    *,
    service: SemanticSearchService,
    options: NormalizationOptions | None = None,
) -> dict[str, bool]:
    """Index each document's normalized content; returns success per note id."""

    notes = [
        document if isinstance(document, CandidateDocument) else CandidateDocument.from_mapping(document)
        for document in documents
    ]
    outcomes = await asyncio.gather(
        *(
            service.index_note(note.id, note.title, process_text(note.content or "", options), note.source_type)
            for note in notes
        )
    )
    results = {note.id: ok for note, ok in zip(notes, outcomes)}
    failed = sum(1 for ok in results.values() if not ok)
    if failed:
        logger.warning("Indexed %d notes, %d failed", len(results) - failed, failed)
    else:
        logger.info("Indexed %d notes", len(results))
    return results


__all__ = ["ingest_notes"]
