"""
Test suite for OpenAIEmbeddingsClient.

Uses httpx.MockTransport in place of the network: realignment of
shuffled responses, validation without requests, retry behaviour per
status class and cardinality checks.

System role: Verification of the OpenAI embedding wire adapter
"""

import json
import random

import httpx
import pytest

from kb_retrieval.boundary.embeddings.openai_client import OpenAIEmbeddingsClient
from kb_retrieval.boundary.embeddings.retry import RetryPolicy
from kb_retrieval.core.exceptions import (
    CardinalityError,
    PermanentProviderError,
    TransientProviderError,
    ValidationError,
)

NO_WAIT = RetryPolicy(max_attempts=3, min_backoff_seconds=0.0, max_backoff_seconds=0.0)


def make_client(handler, dimensions: int | None = None, model: str = "text-embedding-3-small"):
    transport = httpx.MockTransport(handler)
    http = httpx.Client(transport=transport, base_url="http://embed.test")
    return OpenAIEmbeddingsClient(
        model=model,
        base_url="http://embed.test",
        dimensions=dimensions,
        api_key="sk-test",
        retry_policy=NO_WAIT,
        client=http,
    )


def vector_for(text: str) -> list[float]:
    return [float(len(text)), float(ord(text[0]))]


def shuffled_handler(requests: list[httpx.Request]):
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        body = json.loads(request.content)
        texts = body["input"] if isinstance(body["input"], list) else [body["input"]]
        data = [
            {"object": "embedding", "index": i, "embedding": vector_for(t)}
            for i, t in enumerate(texts)
        ]
        random.Random(7).shuffle(data)
        return httpx.Response(
            200,
            json={"data": data, "model": body["model"], "usage": {"prompt_tokens": 3, "total_tokens": 3}},
        )

    return handler


class TestOrderPreservation:
    """Test suite for result realignment by index."""

    def test_embed_many_realigns_shuffled_results(self) -> None:
        """Test element i of the result is the embedding of texts[i]."""
        # Arrange
        texts = ["alpha", "b", "gamma ray", "dd", "epsilon", "f" * 11]
        client = make_client(shuffled_handler([]))

        # Act
        vectors = client.embed_many(texts)

        # Assert
        assert vectors == [vector_for(t) for t in texts]

    def test_request_carries_auth_model_and_dimensions(self) -> None:
        requests: list[httpx.Request] = []
        client = make_client(shuffled_handler(requests), dimensions=2)

        client.embed_one("hello")

        body = json.loads(requests[0].content)
        assert requests[0].url.path == "/v1/embeddings"
        assert requests[0].headers["Authorization"] == "Bearer sk-test"
        assert body == {
            "model": "text-embedding-3-small",
            "input": "hello",
            "dimensions": 2,
            "encoding_format": "float",
        }

    def test_legacy_model_does_not_send_dimensions(self) -> None:
        requests: list[httpx.Request] = []
        client = make_client(shuffled_handler(requests), model="text-embedding-ada-002")

        client.embed_many(["a", "b"])

        assert "dimensions" not in json.loads(requests[0].content)


class TestValidation:
    """Test suite for input validation before any request."""

    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    def test_blank_text_fails_without_network(self, text: str) -> None:
        requests: list[httpx.Request] = []
        client = make_client(shuffled_handler(requests))

        with pytest.raises(ValidationError):
            client.embed_one(text)

        assert requests == []

    def test_empty_batch_fails_without_network(self) -> None:
        requests: list[httpx.Request] = []
        client = make_client(shuffled_handler(requests))

        with pytest.raises(ValidationError):
            client.embed_many([])

        assert requests == []

    def test_blank_element_fails_without_network(self) -> None:
        requests: list[httpx.Request] = []
        client = make_client(shuffled_handler(requests))

        with pytest.raises(ValidationError):
            client.embed_many(["ok", " "])

        assert requests == []


class TestErrorHandling:
    """Test suite for status classification and retries."""

    def test_client_error_is_not_retried(self) -> None:
        """Test a 400 surfaces immediately as PermanentProviderError."""
        # Arrange
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(
                400,
                json={"error": {"message": "bad input", "type": "invalid_request_error", "code": "bad"}},
            )

        client = make_client(handler)

        # Act
        with pytest.raises(PermanentProviderError) as exc_info:
            client.embed_one("hello")

        # Assert
        assert len(calls) == 1
        assert exc_info.value.status_code == 400
        assert exc_info.value.error_type == "invalid_request_error"
        assert exc_info.value.error_code == "bad"

    def test_rate_limit_is_not_retried(self) -> None:
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(429, json={"error": {"message": "slow down"}})

        with pytest.raises(PermanentProviderError):
            make_client(handler).embed_one("hello")

        assert len(calls) == 1

    def test_server_error_is_retried_then_surfaced(self) -> None:
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(503, json={"error": {"message": "overloaded"}})

        with pytest.raises(TransientProviderError) as exc_info:
            make_client(handler).embed_one("hello")

        assert len(calls) == 3
        assert exc_info.value.attempts == 3

    def test_server_error_then_success_recovers(self) -> None:
        responses = iter(
            [
                httpx.Response(502),
                httpx.Response(200, json={"data": [{"index": 0, "embedding": [1.0, 2.0]}]}),
            ]
        )

        vector = make_client(lambda request: next(responses)).embed_one("hello")

        assert vector == [1.0, 2.0]

    def test_connection_error_is_retried(self) -> None:
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            raise httpx.ConnectError("connection reset", request=request)

        with pytest.raises(TransientProviderError):
            make_client(handler).embed_many(["a"])

        assert len(calls) == 3

    def test_cardinality_mismatch_fails_fast(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"data": [{"index": 0, "embedding": [1.0]}]})

        with pytest.raises(CardinalityError) as exc_info:
            make_client(handler).embed_many(["a", "b"])

        assert exc_info.value.requested == 2
        assert exc_info.value.returned == 1

    def test_unexpected_dimension_is_permanent(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"data": [{"index": 0, "embedding": [1.0, 2.0, 3.0]}]})

        with pytest.raises(PermanentProviderError):
            make_client(handler, dimensions=2).embed_one("hello")

    def test_malformed_body_is_permanent(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"unexpected": True})

        with pytest.raises(PermanentProviderError):
            make_client(handler).embed_one("hello")
