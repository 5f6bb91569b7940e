"""
Embedding provider used for vibe-based semantic search over the block library.
"""
from typing import List, Optional, Protocol

import httpx

from config import settings
from logging_config import logger


Embedding = List[float]


class EmbeddingProvider(Protocol):
    async def embed(self, text: str) -> Optional[Embedding]:
        """Vector for ``text``, or None when it could not be computed"""
        ...


class OpenAIEmbeddingProvider:
    """Embeddings from an OpenAI-compatible endpoint; never raises"""

    def __init__(
        self,
        api_key: str,
        model: str = "text-embedding-ada-002",
        base_url: str = "https://api.openai.com/v1",
        timeout: float = 30.0
    ):
        self.api_key = api_key
        self.model = model
        self.url = f"{base_url.rstrip('/')}/embeddings"
        self.timeout = timeout

    async def embed(self, text: str) -> Optional[Embedding]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    self.url,
                    headers={
                        "Authorization": f"Bearer {self.api_key}",
                        "Content-Type": "application/json"
                    },
                    json={"model": self.model, "input": text}
                )

            if response.status_code != 200:
                logger.warning(
                    "Embedding API error",
                    status_code=response.status_code,
                    body=response.text[:300]
                )
                return None

            data = response.json().get("data") or []
            if not data:
                logger.warning("Embedding API returned no vectors")
                return None
            return [float(v) for v in data[0]["embedding"]]

        except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
            logger.warning("Failed to generate embedding", error=str(e))
            return None


def format_vector_literal(embedding: Optional[Embedding]) -> Optional[str]:
    """pgvector text literal, e.g. ``[0.1,0.2]``"""
    if embedding is None:
        return None
    return "[" + ",".join(str(v) for v in embedding) + "]"


def get_embedding_provider() -> EmbeddingProvider:
    return OpenAIEmbeddingProvider(
        api_key=settings.OPENAI_API_KEY,
        model=settings.EMBEDDING_MODEL,
        base_url=settings.OPENAI_BASE_URL,
        timeout=settings.EMBEDDING_TIMEOUT
    )
