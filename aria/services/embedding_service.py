import logging
import numbers
import time
from typing import List, Optional

import numpy as np
import requests

from aria.core.config import settings, EmbeddingSettings
from aria.core.exceptions import ParseError, UpstreamError

logger = logging.getLogger(__name__)


class EmbeddingClient:
    """
    Thin client for an OpenAI-compatible embeddings endpoint.

    One text per call. Callers that embed many chunks loop over ``embed``
    sequentially so the provider sees one request at a time.
    """

    def __init__(self, config: Optional[EmbeddingSettings] = None):
        self.config = config or settings.embeddings

    def embed(self, text: str) -> List[float]:
        """
        Return the embedding vector for ``text``.

        Raises:
            UpstreamError: the provider is unreachable, unconfigured, or answered non-2xx
            ParseError: the provider answered with an unexpected payload
        """
        if not self.config.openai_api_key:
            logger.error("OpenAI API key missing; cannot create embeddings.")
            raise UpstreamError("Embedding service is not configured.")

        payload = {
            "model": self.config.model,
            "input": text[: self.config.max_chars],
        }
        headers = {
            "Authorization": f"Bearer {self.config.openai_api_key}",
            "Content-Type": "application/json",
        }

        start = time.time()
        try:
            response = requests.post(
                self.config.api_url, json=payload, headers=headers, timeout=self.config.timeout
            )
            response.raise_for_status()
        except requests.exceptions.Timeout:
            logger.error("Embedding service timeout.")
            raise UpstreamError("Embedding service reached timeout limit.")
        except requests.exceptions.HTTPError as e:
            body = e.response.text[:200] if e.response is not None else ""
            logger.error(f"Embedding service HTTP error: {e} {body}")
            raise UpstreamError("Embedding service request failed.")
        except requests.exceptions.RequestException as e:
            logger.error(f"Embedding service connection error: {e}")
            raise UpstreamError("Embedding service request failed.")

        try:
            data = response.json()
        except ValueError:
            logger.error(f"Embedding response is not JSON: {response.text[:200]!r}")
            raise ParseError("Malformed embedding response.", raw=response.text)

        vector = _vector_from_payload(data)
        logger.debug(f"Embedded {len(payload['input'])} chars in {time.time() - start:.2f}s")
        return vector

    def embed_or_none(self, text: str) -> Optional[List[float]]:
        """Best-effort variant: a failed embedding must not block the caller."""
        try:
            return self.embed(text)
        except (UpstreamError, ParseError) as e:
            logger.warning(f"Embedding unavailable, returning null vector: {e.message}")
            return None


def _vector_from_payload(data) -> List[float]:
    try:
        vector = data["data"][0]["embedding"]
    except (KeyError, IndexError, TypeError):
        logger.error(f"Embedding payload missing data[0].embedding: {str(data)[:200]}")
        raise ParseError("Malformed embedding response.", raw=str(data))

    if (
        not isinstance(vector, list)
        or not vector
        or not all(isinstance(v, numbers.Real) and not isinstance(v, bool) for v in vector)
    ):
        raise ParseError("Embedding vector is empty or non-numeric.", raw=str(vector)[:200])
    return [float(v) for v in vector]


def cosine_similarity(vec1: List[float], vec2: List[float]) -> float:
    """Calculate cosine similarity between two vectors."""
    vec1 = np.asarray(vec1, dtype=float)
    vec2 = np.asarray(vec2, dtype=float)
    if vec1.shape != vec2.shape:
        return 0.0
    norm1 = np.linalg.norm(vec1)
    norm2 = np.linalg.norm(vec2)
    if norm1 == 0 or norm2 == 0:
        return 0.0
    return float(np.dot(vec1, vec2) / (norm1 * norm2))


def get_embedding_client() -> EmbeddingClient:
    """FastAPI dependency; overridden in tests."""
    return EmbeddingClient()
