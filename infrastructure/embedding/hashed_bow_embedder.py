"""Embedder that averages hashed word vectors; deterministic and download-free."""
from __future__ import annotations

import hashlib
import re
from collections import Counter
from typing import Sequence

import numpy as np

from domain.entities import Query
from domain.interfaces import Embedder

_TOKEN = re.compile(r"\w+")


class HashedBagOfWordsEmbedder(Embedder):
    """Produces vectors by hashing individual lowercased words into signed buckets.

    Texts that share words end up close under cosine similarity, which makes
    the embedder good enough for local search and tests.
    """

    def __init__(self, dimension: int = 256) -> None:
        self._dimension = dimension
        self._model_id = f"hashed-bow-{dimension}"

    @property
    def model_id(self) -> str:
        return self._model_id

    @property
    def dimension(self) -> int:
        return self._dimension

    def _word_vector(self, word: str) -> np.ndarray:
        digest = hashlib.md5(word.encode("utf-8")).digest()
        vector = np.zeros(self._dimension, dtype=np.float32)
        for offset in range(0, len(digest), 4):
            bucket = int.from_bytes(digest[offset : offset + 2], "little") % self._dimension
            sign = 1.0 if digest[offset + 2] % 2 == 0 else -1.0
            vector[bucket] += sign
        return vector

    def _combine(self, text: str) -> list[float]:
        counts = Counter(token.lower() for token in _TOKEN.findall(text))
        vector = np.zeros(self._dimension, dtype=np.float32)
        for word, count in counts.items():
            vector += self._word_vector(word) * count
        norm = float(np.linalg.norm(vector))
        if norm:
            vector /= norm
        return vector.tolist()

    def embed_texts(self, texts: Sequence[str]) -> list[list[float]]:
        return [self._combine(text) for text in texts]

    def embed_query(self, query: Query) -> list[float]:
        return self._combine(query.text)


__all__ = ["HashedBagOfWordsEmbedder"]
