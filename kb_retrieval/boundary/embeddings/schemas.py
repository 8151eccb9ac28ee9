"""
Embedding wire schemas.

Pydantic models for the request and response bodies exchanged with
embedding backends. Unknown response fields are ignored.

Dependencies: pydantic
System role: Type definitions for the embedding wire contract
"""

from pydantic import BaseModel, ConfigDict, Field


class EmbeddingsRequest(BaseModel):
    """OpenAI-style request body; ``input`` is one text or a list of texts."""

    model: str
    input: str | list[str]
    dimensions: int | None = None
    encoding_format: str = "float"


class EmbeddingData(BaseModel):
    """One embedding tagged with the position of its input text."""

    model_config = ConfigDict(extra="ignore")

    embedding: list[float]
    index: int = Field(ge=0)


class Usage(BaseModel):
    """Token accounting reported by the backend."""

    model_config = ConfigDict(extra="ignore")

    prompt_tokens: int = 0
    total_tokens: int = 0


class EmbeddingsResponse(BaseModel):
    """OpenAI-style response body."""

    model_config = ConfigDict(extra="ignore")

    data: list[EmbeddingData]
    model: str | None = None
    usage: Usage | None = None


class ErrorDetail(BaseModel):
    """Error payload carried by non-2xx responses."""

    model_config = ConfigDict(extra="ignore")

    message: str = ""
    type: str | None = None
    code: str | int | None = None


class ErrorResponse(BaseModel):
    """Envelope of ``ErrorDetail``."""

    model_config = ConfigDict(extra="ignore")

    error: ErrorDetail


class PlainEmbedRequest(BaseModel):
    """Request body of the generic HTTP embedding service."""

    model: str
    input: list[str]


class PlainEmbedResponse(BaseModel):
    """Positional response of the generic HTTP embedding service."""

    model_config = ConfigDict(extra="ignore")

    data: list[list[float]]
    dim: int | None = None
