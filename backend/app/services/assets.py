"""Asset relocation from provider URLs to object storage.

Generated image URLs are short-lived, so each one is downloaded right
away and re-uploaded under a durable key:

    <folder>/<brand slug>-<kind>-<unix ms>.png

The public URL of the stored object is what gets persisted.
"""

import re
import time

import httpx

from app.core.config import get_settings
from app.core.errors import UpstreamError
from app.core.logging import get_logger
from app.integrations.s3 import S3Client

logger = get_logger(__name__)

IMAGE_CONTENT_TYPE = "image/png"

HERO_FOLDER = "hero-images"
LOGO_FOLDER = "logos"
MOCKUP_FOLDER = "mockups"


def slugify(name: str) -> str:
    """Lowercase a name and replace every character outside [a-z0-9] with '-'."""
    return re.sub(r"[^a-z0-9]", "-", name.lower())


def asset_key(folder: str, brand_name: str, kind: str, timestamp_ms: int | None = None) -> str:
    """Build the storage key for one generated asset."""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"{folder}/{slugify(brand_name)}-{kind}-{timestamp_ms}.png"


class AssetRelocator:
    """Downloads generated images and stores them durably."""

    def __init__(
        self,
        s3: S3Client,
        download_timeout: float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.s3 = s3
        self.download_timeout = download_timeout or get_settings().asset_download_timeout
        self._http_client = http_client

    async def download(self, url: str) -> bytes:
        """Fetch image bytes from a provider URL.

        Raises:
            UpstreamError: On transport failure, non-2xx status or empty body
        """
        start_time = time.monotonic()
        try:
            if self._http_client is not None:
                response = await self._http_client.get(url)
            else:
                async with httpx.AsyncClient(
                    timeout=httpx.Timeout(self.download_timeout),
                    follow_redirects=True,
                ) as client:
                    response = await client.get(url)
        except httpx.HTTPError as e:
            logger.error(
                "Asset download failed",
                extra={"error": str(e), "error_type": type(e).__name__},
            )
            raise UpstreamError(f"Failed to download image: {e}", service="asset_download") from e

        duration_ms = (time.monotonic() - start_time) * 1000
        if response.status_code >= 400:
            logger.error(
                "Asset download returned an error status",
                extra={"status_code": response.status_code, "duration_ms": round(duration_ms, 2)},
            )
            raise UpstreamError(
                f"Failed to download image ({response.status_code})",
                service="asset_download",
                status_code=response.status_code,
            )
        if not response.content:
            raise UpstreamError("Downloaded image is empty", service="asset_download")

        logger.debug(
            "Asset downloaded",
            extra={"bytes": len(response.content), "duration_ms": round(duration_ms, 2)},
        )
        return response.content

    async def relocate(self, source_url: str, brand_name: str, folder: str, kind: str) -> str:
        """Copy a generated image into storage and return its public URL.

        Raises:
            UpstreamError: If download, upload or URL resolution fails
        """
        data = await self.download(source_url)
        key = asset_key(folder, brand_name, kind)
        await self.s3.upload_file(key, data, content_type=IMAGE_CONTENT_TYPE, upsert=True)
        public_url = self.s3.get_public_url(key)

        logger.info(
            "Asset stored",
            extra={"s3_key": key, "kind": kind, "bytes": len(data)},
        )
        return public_url
