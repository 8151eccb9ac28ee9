"""
Embedding provider contract and shared HTTP plumbing.

EmbeddingProvider is the capability set every provider satisfies.
BaseHttpEmbeddingsClient owns the httpx client, input validation, error
classification of responses and the retry loop; subclasses only build
request bodies and parse response bodies for their wire dialect.

Dependencies: httpx, pydantic, kb_retrieval.boundary.embeddings.retry
System role: Embedding boundary foundation
"""

import logging
from typing import Any, Protocol, Sequence, runtime_checkable

import httpx
from pydantic import ValidationError as PydanticValidationError

from kb_retrieval.boundary.embeddings.retry import (
    RetryPolicy,
    call_with_retry,
    classify_transport_error,
    is_retryable_status,
)
from kb_retrieval.boundary.embeddings.schemas import ErrorResponse
from kb_retrieval.core.exceptions import (
    CardinalityError,
    PermanentProviderError,
    TransientProviderError,
    ValidationError,
)

logger = logging.getLogger(__name__)

EMBEDDINGS_PATH = "/v1/embeddings"


@runtime_checkable
class EmbeddingProvider(Protocol):
    """Turns text into fixed-dimension float vectors."""

    def model(self) -> str:
        """Embedding model identifier stored alongside vectors."""
        ...

    def dimension(self) -> int | None:
        """Vector dimension produced, when known."""
        ...

    def embed_one(self, text: str) -> list[float]:
        ...

    def embed_many(self, texts: Sequence[str]) -> list[list[float]]:
        ...


def validate_text(text: str, field: str = "text") -> None:
    """Reject non-string, empty or whitespace-only input."""
    if not isinstance(text, str) or not text.strip():
        raise ValidationError("Text to embed must not be empty or blank", field=field)


def validate_texts(texts: Sequence[str]) -> None:
    """Reject an empty batch or any blank element."""
    if not texts:
        raise ValidationError("List of texts to embed must not be empty", field="texts")
    for position, text in enumerate(texts):
        validate_text(text, field=f"texts[{position}]")


class BaseHttpEmbeddingsClient:
    """
    Shared machinery for HTTP embedding backends.

    Stateless between calls apart from configuration and the pooled
    httpx client, so one instance may serve concurrent callers.
    """

    def __init__(
        self,
        model: str,
        base_url: str,
        dimensions: int | None = None,
        api_key: str | None = None,
        timeout_seconds: float = 30.0,
        retry_policy: RetryPolicy | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            model: Embedding model identifier
            base_url: Backend base URL ('/v1/embeddings' is appended)
            dimensions: Expected vector dimension; None skips the check
            api_key: Bearer token, sent when present
            timeout_seconds: Per-attempt timeout
            retry_policy: Attempt and backoff bounds
            client: Pre-built httpx client (tests pass one with a MockTransport)

        Raises:
            ValueError: When model is empty
        """
        if not model:
            raise ValueError("model cannot be empty")

        self._model = model
        self._dimensions = dimensions
        self._retry_policy = retry_policy or RetryPolicy()

        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"

        if client is None:
            client = httpx.Client(
                base_url=base_url,
                timeout=httpx.Timeout(timeout_seconds),
                headers=headers,
            )
        else:
            client.headers.update(headers)
        self._client = client

    def model(self) -> str:
        return self._model

    def dimension(self) -> int | None:
        return self._dimensions

    def close(self) -> None:
        """Release pooled connections."""
        self._client.close()

    def __enter__(self) -> "BaseHttpEmbeddingsClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _post_once(self, body: dict[str, Any]) -> dict[str, Any]:
        """
        Send one request and classify the outcome.

        Raises:
            TransientProviderError: Timeout, connection failure or 5xx
            PermanentProviderError: 4xx, unsendable request or non-JSON body
        """
        try:
            response = self._client.post(EMBEDDINGS_PATH, json=body)
        except httpx.HTTPError as exc:
            raise classify_transport_error(exc) from exc

        if response.status_code >= 400:
            raise self._error_from_response(response)

        try:
            return response.json()
        except ValueError as exc:
            raise PermanentProviderError(
                "Embedding response is not valid JSON",
                status_code=response.status_code,
            ) from exc

    def _error_from_response(self, response: httpx.Response) -> Exception:
        message = response.reason_phrase or "embedding request failed"
        error_type = None
        error_code = None
        try:
            detail = ErrorResponse.model_validate(response.json()).error
            message = detail.message or message
            error_type = detail.type
            error_code = None if detail.code is None else str(detail.code)
        except (ValueError, PydanticValidationError):
            pass

        logger.error(
            f"{__name__}:_error_from_response - Embedding API error "
            f"{response.status_code} ({error_code}): {message}"
        )
        if is_retryable_status(response.status_code):
            return TransientProviderError(
                f"Embedding API server error: {message}",
                status_code=response.status_code,
            )
        return PermanentProviderError(
            f"Embedding API error: {message}",
            status_code=response.status_code,
            error_type=error_type,
            error_code=error_code,
        )

    def _post(self, operation: str, body: dict[str, Any]) -> dict[str, Any]:
        """Send a request under the retry policy."""
        return call_with_retry(operation, lambda: self._post_once(body), self._retry_policy)

    def _check_vectors(self, vectors: list[list[float]], requested: int) -> list[list[float]]:
        """Enforce response cardinality and the configured dimension."""
        if len(vectors) != requested:
            raise CardinalityError(requested=requested, returned=len(vectors))
        if self._dimensions is not None:
            for position, vector in enumerate(vectors):
                if len(vector) != self._dimensions:
                    raise PermanentProviderError(
                        f"Embedding {position} has dimension {len(vector)}, "
                        f"expected {self._dimensions}",
                        details={"model": self._model},
                    )
        return vectors
