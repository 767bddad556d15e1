"""OCR engine client that uploads files to an HTTP extraction endpoint."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

import requests

from domain.entities import OcrResult
from domain.interfaces import OcrEngine

logger = logging.getLogger(__name__)

DEFAULT_OCR_URL = "http://localhost:54321/functions/v1/ocr-text-extraction"


@dataclass(slots=True)
class OcrConfig:
    url: str = DEFAULT_OCR_URL
    api_key: str | None = None
    timeout: float = 120.0


def _parse_confidence(value: object) -> int:
    if isinstance(value, str):
        value = value.strip().rstrip("%")
    try:
        return max(0, min(100, int(float(value))))
    except (TypeError, ValueError):
        return 0


class HttpOcrEngine(OcrEngine):
    """Post ``file`` and ``language`` as multipart form data and read back ``{success, text, confidence}``."""

    def __init__(self, config: OcrConfig | None = None, *, session: requests.Session | None = None) -> None:
        self._config = config or OcrConfig()
        self._session = session or requests.Session()

    async def extract(
        self, data: bytes, file_name: str, content_type: str, language: str = "eng"
    ) -> OcrResult:
        try:
            payload = await asyncio.to_thread(self._request, data, file_name, content_type, language)
        except Exception as exc:
            logger.exception("OCR request for %s failed.", file_name)
            return OcrResult(success=False, error=f"OCR service error: {exc}", file_name=file_name)

        if not payload.get("success") or not payload.get("text"):
            return OcrResult(
                success=False,
                error=payload.get("error") or "OCR returned no text",
                file_name=file_name,
            )
        return OcrResult(
            success=True,
            text=payload["text"],
            confidence=_parse_confidence(payload.get("confidence")),
            file_name=file_name,
            content_type=content_type,
            size=len(data),
        )

    def _request(self, data: bytes, file_name: str, content_type: str, language: str) -> dict:
        headers = {}
        if self._config.api_key:
            headers["Authorization"] = f"Bearer {self._config.api_key}"
        response = self._session.post(
            self._config.url,
            files={"file": (file_name, data, content_type)},
            data={"language": language},
            headers=headers,
            timeout=self._config.timeout,
        )
        response.raise_for_status()
        return response.json()


__all__ = ["HttpOcrEngine", "OcrConfig", "DEFAULT_OCR_URL"]
