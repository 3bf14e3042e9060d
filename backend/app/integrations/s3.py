"""Object storage for generated brand assets.

Works against AWS S3 or any S3-compatible endpoint (LocalStack, R2, MinIO)
through S3_ENDPOINT_URL. boto3 is synchronous, so each call runs in the
default executor. There is one attempt per call: botocore's own retries
are switched off and every failure is raised as an S3Error, which the
pipeline treats like any other upstream failure.

Credentials come from settings only and never appear in logs.
"""

import asyncio
import time
from collections.abc import Callable
from io import BytesIO
from typing import Any

import boto3
from botocore.config import Config as BotoConfig  # type: ignore[import-not-found]
from botocore.exceptions import (  # type: ignore[import-not-found]
    BotoCoreError,
    ClientError,
    ConnectionError,
    EndpointConnectionError,
)

from app.core.config import get_settings
from app.core.errors import UpstreamError
from app.core.logging import get_logger

logger = get_logger(__name__)

_AUTH_ERROR_CODES = frozenset({"AccessDenied", "InvalidAccessKeyId", "SignatureDoesNotMatch"})
_MISSING_KEY_CODES = frozenset({"404", "NoSuchKey", "NotFound"})


class S3Error(UpstreamError):
    """A storage call failed."""

    def __init__(self, message: str, operation: str | None = None, key: str | None = None) -> None:
        super().__init__(message, service="s3")
        self.operation = operation
        self.key = key


class S3ConnectionError(S3Error):
    """The storage endpoint could not be reached."""


class S3AuthError(S3Error):
    """The storage credentials were rejected."""


class S3ConflictError(S3Error):
    """Upload without upsert hit an existing key."""


def _error_code(error: ClientError) -> str:
    return str(error.response.get("Error", {}).get("Code", "Unknown"))


def _error_message(error: ClientError) -> str:
    return str(error.response.get("Error", {}).get("Message", error))


class S3Client:
    """Upload and public URL resolution for a single bucket.

    Arguments left as None fall back to the S3_* settings.
    """

    def __init__(
        self,
        bucket: str | None = None,
        endpoint_url: str | None = None,
        access_key: str | None = None,
        secret_key: str | None = None,
        region: str | None = None,
        timeout: float | None = None,
        public_base_url: str | None = None,
    ) -> None:
        settings = get_settings()
        self._bucket = bucket or settings.s3_bucket
        self._endpoint_url = endpoint_url or settings.s3_endpoint_url
        self._access_key = access_key or settings.s3_access_key
        self._secret_key = secret_key or settings.s3_secret_key
        self._region = region or settings.s3_region
        self._timeout = timeout or settings.s3_timeout
        self._public_base_url = public_base_url or settings.s3_public_base_url

        self._client: Any = None
        self._available = bool(self._bucket and self._access_key and self._secret_key)

    @property
    def available(self) -> bool:
        return self._available

    @property
    def bucket(self) -> str | None:
        return self._bucket

    def _boto_client(self) -> Any:
        if self._client is not None:
            return self._client

        options: dict[str, Any] = {
            "aws_access_key_id": self._access_key,
            "aws_secret_access_key": self._secret_key,
            "region_name": self._region,
            "config": BotoConfig(
                connect_timeout=self._timeout,
                read_timeout=self._timeout,
                retries={"max_attempts": 0},
            ),
        }
        if self._endpoint_url:
            options["endpoint_url"] = self._endpoint_url

        self._client = boto3.client("s3", **options)
        return self._client

    def _translate(self, error: Exception, operation: str, key: str | None) -> S3Error:
        """Map a botocore exception onto the S3Error hierarchy."""
        if isinstance(error, ClientError):
            code = _error_code(error)
            message = _error_message(error)
            if code in _AUTH_ERROR_CODES:
                return S3AuthError(f"Authentication failed: {message}", operation, key)
            if code == "NoSuchBucket":
                return S3Error(f"Bucket not found: {self._bucket}", operation, key)
            return S3Error(f"S3 error ({code}): {message}", operation, key)
        if isinstance(error, (EndpointConnectionError, ConnectionError)):
            return S3ConnectionError(f"Connection failed: {error}", operation, key)
        return S3Error(f"S3 error: {error}", operation, key)

    async def _run(self, operation: str, call: Callable[[], Any], key: str | None = None) -> Any:
        """Run a blocking boto3 call off the event loop, logging its outcome."""
        if not self._available:
            raise S3Error(
                "S3 not configured (missing bucket, access_key, or secret_key)",
                operation=operation,
                key=key,
            )

        log_extra: dict[str, Any] = {
            "s3_operation": operation,
            "s3_key": key,
            "s3_bucket": self._bucket,
        }
        start_time = time.monotonic()
        try:
            result = await asyncio.get_running_loop().run_in_executor(None, call)
        except (ClientError, BotoCoreError) as e:
            error = self._translate(e, operation, key)
            logger.error(
                f"S3 {operation} failed: {error.message}",
                extra={
                    **log_extra,
                    "duration_ms": round((time.monotonic() - start_time) * 1000, 2),
                    "error_type": type(error).__name__,
                },
            )
            raise error from e

        logger.info(
            f"S3 {operation} completed",
            extra={**log_extra, "duration_ms": round((time.monotonic() - start_time) * 1000, 2)},
        )
        return result

    async def file_exists(self, key: str) -> bool:
        client = self._boto_client()

        def head() -> bool:
            try:
                client.head_object(Bucket=self._bucket, Key=key)
            except ClientError as e:
                if _error_code(e) in _MISSING_KEY_CODES:
                    return False
                raise
            return True

        return bool(await self._run("file_exists", head, key))

    async def upload_file(
        self,
        key: str,
        data: bytes,
        content_type: str = "application/octet-stream",
        upsert: bool = True,
    ) -> str:
        """Store bytes under key and return the key.

        With upsert=False an existing object raises S3ConflictError and
        nothing is written.
        """
        if not upsert and await self.file_exists(key):
            raise S3ConflictError(f"Object already exists: {key}", "upload_file", key)

        client = self._boto_client()
        await self._run(
            "upload_file",
            lambda: client.upload_fileobj(
                BytesIO(data), self._bucket, key, ExtraArgs={"ContentType": content_type}
            ),
            key,
        )
        return key

    def get_public_url(self, key: str) -> str:
        """Public URL of a stored object.

        S3_PUBLIC_BASE_URL wins, then a path-style URL on the custom
        endpoint, then the AWS virtual-hosted form.
        """
        if not self._bucket:
            raise S3Error("S3 bucket not configured", "get_public_url", key)

        key = key.lstrip("/")
        if self._public_base_url:
            return f"{self._public_base_url.rstrip('/')}/{key}"
        if self._endpoint_url:
            return f"{self._endpoint_url.rstrip('/')}/{self._bucket}/{key}"
        return f"https://{self._bucket}.s3.{self._region}.amazonaws.com/{key}"


s3_client: S3Client | None = None


async def init_s3() -> S3Client:
    """Build the process-wide client from settings."""
    global s3_client
    if s3_client is None:
        s3_client = S3Client()
        logger.info(
            "S3 client initialized" if s3_client.available else "S3 not configured",
            extra={"s3_bucket": s3_client.bucket},
        )
    return s3_client


async def close_s3() -> None:
    global s3_client
    s3_client = None


async def get_s3() -> S3Client:
    """FastAPI dependency for the storage client."""
    if s3_client is None:
        return await init_s3()
    return s3_client
