"""
OpenAI Embeddings API client.

Talks to any OpenAI-compatible ``/v1/embeddings`` endpoint. Results are
tagged with the index of their input text and may arrive in any order;
they are re-sorted by that index before being returned.

Supported models:
- text-embedding-3-large (3072 dimensions)
- text-embedding-3-small (1536 dimensions)
- text-embedding-ada-002 (1536 dimensions, legacy, no ``dimensions`` parameter)

Dependencies: httpx, pydantic
System role: Production embedding provider
"""

import logging
from typing import Any, Sequence

from pydantic import ValidationError as PydanticValidationError

from kb_retrieval.boundary.embeddings.base import (
    BaseHttpEmbeddingsClient,
    validate_text,
    validate_texts,
)
from kb_retrieval.boundary.embeddings.schemas import EmbeddingsRequest, EmbeddingsResponse
from kb_retrieval.core.exceptions import PermanentProviderError

logger = logging.getLogger(__name__)


class OpenAIEmbeddingsClient(BaseHttpEmbeddingsClient):
    """Embedding provider for the OpenAI Embeddings API."""

    def _supports_dimensions(self) -> bool:
        return self._model.startswith("text-embedding-3")

    def _request_body(self, text_input: str | list[str]) -> dict[str, Any]:
        request = EmbeddingsRequest(
            model=self._model,
            input=text_input,
            dimensions=self._dimensions if self._supports_dimensions() else None,
        )
        return request.model_dump(exclude_none=True)

    def _parse(self, raw: dict[str, Any]) -> EmbeddingsResponse:
        try:
            response = EmbeddingsResponse.model_validate(raw)
        except PydanticValidationError as exc:
            raise PermanentProviderError(f"Malformed embedding response: {exc}") from exc
        if response.usage is not None:
            logger.debug(
                f"{__name__}:_parse - Embeddings generated, tokens used: {response.usage.total_tokens}"
            )
        return response

    def embed_one(self, text: str) -> list[float]:
        """
        Embed a single text.

        Args:
            text: Non-blank text

        Returns:
            list[float]: Embedding vector

        Raises:
            ValidationError: Text is empty or blank (no request is sent)
            CardinalityError: Backend returned other than one embedding
            TransientProviderError: Retries exhausted
            PermanentProviderError: 4xx or malformed response
        """
        validate_text(text)
        logger.debug(
            f"{__name__}:embed_one - Embedding {len(text)} characters with model {self._model}"
        )
        response = self._parse(self._post("embed_one", self._request_body(text)))
        vectors = self._check_vectors([item.embedding for item in response.data], requested=1)
        return vectors[0]

    def embed_many(self, texts: Sequence[str]) -> list[list[float]]:
        """
        Embed a batch of texts, preserving input order.

        Args:
            texts: Non-empty sequence of non-blank texts

        Returns:
            list[list[float]]: Element i is the embedding of texts[i]

        Raises:
            ValidationError: Empty batch or a blank element (no request is sent)
            CardinalityError: Backend returned a different number of embeddings
            TransientProviderError: Retries exhausted
            PermanentProviderError: 4xx or malformed response
        """
        validate_texts(texts)
        logger.debug(
            f"{__name__}:embed_many - Embedding {len(texts)} texts with model {self._model}"
        )
        response = self._parse(self._post("embed_many", self._request_body(list(texts))))

        ordered = sorted(response.data, key=lambda item: item.index)
        vectors = self._check_vectors([item.embedding for item in ordered], requested=len(texts))
        if [item.index for item in ordered] != list(range(len(texts))):
            raise PermanentProviderError(
                "Embedding response indices do not cover the request",
                details={"indices": [item.index for item in ordered]},
            )
        return vectors
