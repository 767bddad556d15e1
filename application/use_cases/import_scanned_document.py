"""Use case that turns a scanned image or PDF into clean note text."""
from __future__ import annotations

import logging
import time

from application.services.text_normalizer import estimate_ocr_confidence, process_text
from domain.entities import NormalizationOptions, OcrResult
from domain.interfaces import OcrEngine

logger = logging.getLogger(__name__)

SUPPORTED_CONTENT_TYPES = frozenset(
    {
        "image/jpeg",
        "image/jpg",
        "image/png",
        "image/gif",
        "image/bmp",
        "image/tiff",
        "application/pdf",
    }
)
MAX_FILE_SIZE = 10 * 1024 * 1024


async def import_scanned_document(
    data: bytes,
    file_name: str,
    content_type: str,
    *,
    ocr_engine: OcrEngine,
    language: str = "eng",
    options: NormalizationOptions | None = None,
) -> OcrResult:
    """Run OCR on a file and normalize the text it yields.

    Validation problems and OCR failures are reported through
    ``OcrResult.error``; nothing is raised.
    """

    if content_type not in SUPPORTED_CONTENT_TYPES:
        return OcrResult(
            success=False,
            error=f"Unsupported file type: {content_type}. Supported formats: JPG, PNG, GIF, BMP, TIFF, PDF",
            file_name=file_name,
            content_type=content_type,
            size=len(data),
        )
    if len(data) > MAX_FILE_SIZE:
        return OcrResult(
            success=False,
            error=f"File too large. Maximum size is {MAX_FILE_SIZE // (1024 * 1024)}MB",
            file_name=file_name,
            content_type=content_type,
            size=len(data),
        )

    started = time.perf_counter()
    result = await ocr_engine.extract(data, file_name, content_type, language)
    if not result.success:
        logger.warning("OCR failed for %s: %s", file_name, result.error)
        return result

    text = process_text(result.text, options or NormalizationOptions())
    confidence = estimate_ocr_confidence(text)
    logger.info(
        "OCR for %s finished in %.0f ms: %d characters, %d%% confidence",
        file_name,
        (time.perf_counter() - started) * 1000,
        len(text),
        confidence,
    )
    return OcrResult(
        success=True,
        text=text,
        confidence=confidence,
        file_name=file_name,
        content_type=content_type,
        size=len(data),
    )


__all__ = ["import_scanned_document", "SUPPORTED_CONTENT_TYPES", "MAX_FILE_SIZE"]
