"""
Embedding boundary layer.

Provides embedding providers with bounded retry semantics.
- OpenAIEmbeddingsClient: OpenAI-compatible /v1/embeddings (indexed results)
- HttpEmbeddingsClient: Generic self-hosted service (positional results)

Dependencies: httpx, tenacity
System role: Text-to-vector adapter for ingestion and search
"""

from kb_retrieval.boundary.embeddings.base import (
    BaseHttpEmbeddingsClient,
    EmbeddingProvider,
    validate_text,
    validate_texts,
)
from kb_retrieval.boundary.embeddings.factory import get_embedding_provider
from kb_retrieval.boundary.embeddings.http_client import HttpEmbeddingsClient
from kb_retrieval.boundary.embeddings.openai_client import OpenAIEmbeddingsClient
from kb_retrieval.boundary.embeddings.retry import (
    RetryPolicy,
    call_with_retry,
    classify_transport_error,
    is_retryable_provider_error,
    is_retryable_status,
)

__all__ = [
    "BaseHttpEmbeddingsClient",
    "EmbeddingProvider",
    "HttpEmbeddingsClient",
    "OpenAIEmbeddingsClient",
    "RetryPolicy",
    "call_with_retry",
    "classify_transport_error",
    "get_embedding_provider",
    "is_retryable_provider_error",
    "is_retryable_status",
    "validate_text",
    "validate_texts",
]
