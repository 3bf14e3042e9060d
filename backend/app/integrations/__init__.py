"""Integrations layer - External service clients.

Integrations handle communication with external APIs and services.
They abstract the details of external service protocols.
"""

from app.integrations.openai import (
    CompletionClient,
    CompletionResult,
    ImageClient,
    ImageResult,
    close_openai,
    get_completion_client,
    get_image_client,
    init_openai,
)
from app.integrations.s3 import (
    S3AuthError,
    S3Client,
    S3ConflictError,
    S3ConnectionError,
    S3Error,
    close_s3,
    get_s3,
    init_s3,
)

__all__ = [
    # OpenAI
    "CompletionClient",
    "CompletionResult",
    "ImageClient",
    "ImageResult",
    "close_openai",
    "get_completion_client",
    "get_image_client",
    "init_openai",
    # S3
    "S3AuthError",
    "S3Client",
    "S3ConflictError",
    "S3ConnectionError",
    "S3Error",
    "close_s3",
    "get_s3",
    "init_s3",
]
