"""
Embedding function used identically at archive-write and archive-query time.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from langchain_openai import OpenAIEmbeddings

from stock_analyst.core.protocol import ConfigurationError

_MAX_EMBED_CHARS = 8000   # token limit safety


class EmbeddingFunction(ABC):
    @abstractmethod
    async def embed(self, text: str) -> List[float]:
        """Return the embedding vector for *text*."""


class OpenAIEmbeddingFunction(EmbeddingFunction):
    """Embeddings from OpenAI through ``langchain_openai.OpenAIEmbeddings``."""

    def __init__(self, model: str, api_key: Optional[str], embeddings: Optional[OpenAIEmbeddings] = None) -> None:
        if embeddings is None:
            if not api_key:
                raise ConfigurationError("OPENAI_API_KEY is not set.")
            embeddings = OpenAIEmbeddings(model=model, api_key=api_key)
        self.model = model
        self._embeddings = embeddings

    async def embed(self, text: str) -> List[float]:
        text = text.strip()[:_MAX_EMBED_CHARS]
        return await self._embeddings.aembed_query(text)
