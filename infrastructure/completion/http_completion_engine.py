"""Completion engine that calls a hosted or local chat model over HTTP."""
from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass
from typing import Any, Literal, Sequence

import requests

from domain.entities import ChatMessage, CompletionResult, GenerationParams
from domain.interfaces import CompletionEngine

logger = logging.getLogger(__name__)

Provider = Literal["openai", "mistral", "ollama"]

_CHAT_URLS: dict[str, str] = {
    "openai": "https://api.openai.com/v1/chat/completions",
    "mistral": "https://api.mistral.ai/v1/chat/completions",
}
_API_KEY_VARS: dict[str, str] = {
    "openai": "OPENAI_API_KEY",
    "mistral": "MISTRAL_API_KEY",
}


@dataclass(slots=True)
class CompletionConfig:
    provider: Provider = "mistral"
    model: str = "mistral-large-latest"
    api_key: str | None = None
    url: str | None = None
    ollama_url: str = "http://localhost:11434"
    timeout: float = 60.0


class HttpCompletionEngine(CompletionEngine):
    """Send chat messages to OpenAI-compatible endpoints or a local Ollama server.

    Transport and API errors come back as ``CompletionResult.error``.
    """

    def __init__(self, config: CompletionConfig | None = None, *, session: requests.Session | None = None) -> None:
        self._config = config or CompletionConfig()
        self._session = session or requests.Session()

    async def complete(
        self, messages: Sequence[ChatMessage], params: GenerationParams
    ) -> CompletionResult:
        try:
            text = await asyncio.to_thread(self._request, list(messages), params)
        except Exception as exc:
            logger.exception("Completion request to %s failed.", self._config.provider)
            return CompletionResult(error=f"{type(exc).__name__}: {exc}")
        return CompletionResult(text=text)

    def _request(self, messages: list[ChatMessage], params: GenerationParams) -> str:
        payload_messages = [{"role": message.role, "content": message.content} for message in messages]
        if self._config.provider == "ollama":
            return self._call_ollama(payload_messages, params)
        return self._call_chat_api(payload_messages, params)

    def _call_ollama(self, messages: list[dict[str, Any]], params: GenerationParams) -> str:
        response = self._session.post(
            f"{self._config.ollama_url}/api/chat",
            json={
                "model": self._config.model,
                "messages": messages,
                "stream": False,
                "options": {
                    "temperature": params.temperature,
                    "top_p": params.top_p,
                    "num_predict": params.max_tokens,
                },
            },
            timeout=self._config.timeout,
        )
        response.raise_for_status()
        payload = response.json()
        return payload["message"]["content"]

    def _call_chat_api(self, messages: list[dict[str, Any]], params: GenerationParams) -> str:
        provider = self._config.provider
        api_key = self._config.api_key or os.getenv(_API_KEY_VARS[provider])
        if not api_key:
            raise RuntimeError(f"Missing {provider} API key.")
        response = self._session.post(
            self._config.url or _CHAT_URLS[provider],
            headers={"Authorization": f"Bearer {api_key}"},
            json={
                "model": self._config.model,
                "messages": messages,
                "temperature": params.temperature,
                "max_tokens": params.max_tokens,
                "top_p": params.top_p,
            },
            timeout=self._config.timeout,
        )
        response.raise_for_status()
        payload = response.json()
        return payload["choices"][0]["message"]["content"]


__all__ = ["HttpCompletionEngine", "CompletionConfig"]
