"""
Generic HTTP embeddings client.

For self-hosted embedding services that accept ``{model, input: [...]}``
and answer ``{data: [[...], ...], dim}`` with vectors in request order.

Dependencies: httpx, pydantic
System role: Local or custom embedding provider
"""

import logging
from typing import Sequence

from pydantic import ValidationError as PydanticValidationError

from kb_retrieval.boundary.embeddings.base import (
    BaseHttpEmbeddingsClient,
    validate_text,
    validate_texts,
)
from kb_retrieval.boundary.embeddings.schemas import PlainEmbedRequest, PlainEmbedResponse
from kb_retrieval.core.exceptions import PermanentProviderError

logger = logging.getLogger(__name__)


class HttpEmbeddingsClient(BaseHttpEmbeddingsClient):
    """Embedding provider for positional-response HTTP services."""

    def embed_one(self, text: str) -> list[float]:
        validate_text(text)
        return self.embed_many([text])[0]

    def embed_many(self, texts: Sequence[str]) -> list[list[float]]:
        validate_texts(texts)
        body = PlainEmbedRequest(model=self._model, input=list(texts)).model_dump()
        raw = self._post("embed_many", body)
        try:
            response = PlainEmbedResponse.model_validate(raw)
        except PydanticValidationError as exc:
            raise PermanentProviderError(f"Malformed embedding response: {exc}") from exc

        logger.debug(
            f"{__name__}:embed_many - Received {len(response.data)} embeddings (dim={response.dim})"
        )
        return self._check_vectors(response.data, requested=len(texts))
