"""
Embedding provider factory.

Builds the provider selected by EMBEDDINGS_PROVIDER.

Dependencies: kb_retrieval.configs, kb_retrieval.boundary.embeddings
System role: Embedding provider instantiation and selection
"""

import logging

from kb_retrieval.boundary.embeddings.base import BaseHttpEmbeddingsClient
from kb_retrieval.boundary.embeddings.http_client import HttpEmbeddingsClient
from kb_retrieval.boundary.embeddings.openai_client import OpenAIEmbeddingsClient
from kb_retrieval.boundary.embeddings.retry import RetryPolicy
from kb_retrieval.configs import get_settings
from kb_retrieval.configs.embeddings import EmbeddingSettings

logger = logging.getLogger(__name__)


def get_embedding_provider(settings: EmbeddingSettings | None = None) -> BaseHttpEmbeddingsClient:
    """
    Factory function to get the embedding provider from configuration.

    Args:
        settings: Embedding settings; defaults to the application settings

    Returns:
        OpenAIEmbeddingsClient or HttpEmbeddingsClient

    Raises:
        ValueError: If the provider name is invalid
    """
    settings = settings or get_settings().embeddings
    policy = RetryPolicy(
        max_attempts=settings.max_attempts,
        min_backoff_seconds=settings.min_backoff_seconds,
        max_backoff_seconds=settings.max_backoff_seconds,
    )
    kwargs = dict(
        model=settings.model,
        base_url=settings.base_url,
        dimensions=settings.dimensions,
        api_key=settings.api_key,
        timeout_seconds=settings.timeout_seconds,
        retry_policy=policy,
    )

    if settings.provider == "openai":
        logger.info(f"{__name__}:get_embedding_provider - Creating OpenAI embeddings client ({settings.model})")
        return OpenAIEmbeddingsClient(**kwargs)

    elif settings.provider == "http":
        logger.info(f"{__name__}:get_embedding_provider - Creating HTTP embeddings client ({settings.model})")
        return HttpEmbeddingsClient(**kwargs)

    else:
        raise ValueError(
            f"Invalid EMBEDDINGS_PROVIDER: {settings.provider}. Must be 'openai' or 'http'."
        )
