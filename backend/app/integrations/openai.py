"""OpenAI integration clients for chat completion and image generation.

Features:
- Async HTTP client using httpx (direct API calls, no SDK)
- One attempt per call: any failure surfaces as UpstreamError
- Request/response logging per requirements
- Handles timeouts and auth failures (401/403)
- Token usage logging for quota tracking

ERROR LOGGING REQUIREMENTS:
- Log all outbound API calls with endpoint, model, timing
- Log request/response bodies at DEBUG level (truncate large responses)
- Log and handle: timeouts, auth failures (401/403)
- Never log or expose the API key
"""

import time
from dataclasses import dataclass
from typing import Any

import httpx

from app.core.config import get_settings
from app.core.errors import UpstreamError
from app.core.logging import get_logger, openai_logger

logger = get_logger(__name__)

CHAT_COMPLETIONS_PATH = "/v1/chat/completions"
IMAGE_GENERATIONS_PATH = "/v1/images/generations"


@dataclass
class CompletionResult:
    """Result of a chat completion request."""

    text: str
    finish_reason: str | None = None
    prompt_tokens: int | None = None
    completion_tokens: int | None = None
    duration_ms: float = 0.0
    request_id: str | None = None


@dataclass
class ImageResult:
    """Result of an image generation request.

    The URL is hosted by the provider and expires; callers must download
    it within the same request.
    """

    url: str
    revised_prompt: str | None = None
    duration_ms: float = 0.0


class OpenAIHTTPClient:
    """Shared httpx plumbing for the OpenAI endpoints."""

    service_name = "openai"

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
    ) -> None:
        settings = get_settings()

        self._api_key = api_key or settings.openai_api_key
        self._base_url = base_url or settings.openai_base_url
        self._timeout = timeout or settings.openai_timeout
        self._client: httpx.AsyncClient | None = None

    @property
    def available(self) -> bool:
        """Check if the API key is configured."""
        return bool(self._api_key)

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            headers: dict[str, str] = {
                "Content-Type": "application/json",
                "Accept": "application/json",
            }
            if self._api_key:
                headers["Authorization"] = f"Bearer {self._api_key}"

            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                headers=headers,
                timeout=httpx.Timeout(self._timeout),
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _post(
        self, path: str, model: str, body: dict[str, Any]
    ) -> tuple[dict[str, Any], float, str | None]:
        """POST once to an OpenAI endpoint.

        Returns:
            Tuple of (response JSON, duration_ms, request_id)

        Raises:
            UpstreamError: On missing key, transport failure or non-2xx status
        """
        if not self.available:
            raise UpstreamError(
                "OpenAI not configured (missing API key)",
                service=self.service_name,
            )

        client = await self._get_client()
        start_time = time.monotonic()

        try:
            response = await client.post(path, json=body)
        except httpx.TimeoutException as e:
            duration_ms = (time.monotonic() - start_time) * 1000
            openai_logger.call_failed(
                path, model, duration_ms, "Request timed out", "TimeoutError"
            )
            raise UpstreamError(
                f"Request timed out after {self._timeout}s",
                service=self.service_name,
            ) from e
        except httpx.RequestError as e:
            duration_ms = (time.monotonic() - start_time) * 1000
            openai_logger.call_failed(path, model, duration_ms, str(e), type(e).__name__)
            raise UpstreamError(
                f"Request failed: {e}", service=self.service_name
            ) from e

        duration_ms = (time.monotonic() - start_time) * 1000
        request_id = response.headers.get("x-request-id")

        if response.status_code in (401, 403):
            openai_logger.call_failed(
                path,
                model,
                duration_ms,
                "Authentication failed",
                "AuthError",
                status_code=response.status_code,
                request_id=request_id,
            )
            raise UpstreamError(
                f"Authentication failed ({response.status_code})",
                service=self.service_name,
                status_code=response.status_code,
            )

        if response.status_code >= 400:
            error_msg = _error_message(response)
            openai_logger.call_failed(
                path,
                model,
                duration_ms,
                error_msg,
                "ServerError" if response.status_code >= 500 else "ClientError",
                status_code=response.status_code,
                request_id=request_id,
            )
            raise UpstreamError(
                f"OpenAI error ({response.status_code}): {error_msg}",
                service=self.service_name,
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError(
                "OpenAI returned a non-JSON response",
                service=self.service_name,
                status_code=response.status_code,
            ) from e

        openai_logger.call_succeeded(path, model, duration_ms, request_id=request_id)
        return data, duration_ms, request_id


def _error_message(response: httpx.Response) -> str:
    """Pull the provider's error message out of an error response."""
    if not response.content:
        return "Empty error response"
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        return str(body["error"].get("message", body["error"]))
    return str(body)[:200]


class CompletionClient(OpenAIHTTPClient):
    """Chat completion client with a fixed model and temperature."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        temperature: float | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
    ) -> None:
        super().__init__(api_key=api_key, base_url=base_url, timeout=timeout)
        settings = get_settings()
        self._model = model or settings.completion_model
        self._temperature = (
            temperature if temperature is not None else settings.completion_temperature
        )

    @property
    def model(self) -> str:
        """Get the model being used."""
        return self._model

    async def complete(self, messages: list[dict[str, str]]) -> CompletionResult:
        """Send one chat completion request.

        Args:
            messages: Sequence of {"role", "content"} pairs

        Returns:
            CompletionResult with the first choice's text

        Raises:
            UpstreamError: If the call fails or the first choice has no content
        """
        prompt_length = sum(len(m.get("content", "")) for m in messages)
        openai_logger.call_started(
            CHAT_COMPLETIONS_PATH, self._model, prompt_length, messages=messages
        )

        data, duration_ms, request_id = await self._post(
            CHAT_COMPLETIONS_PATH,
            self._model,
            {
                "model": self._model,
                "messages": messages,
                "temperature": self._temperature,
            },
        )

        choices = data.get("choices") or []
        # A filtered reply can carry a null choice or a null message
        choice = choices[0] if choices and isinstance(choices[0], dict) else {}
        message = choice.get("message") if isinstance(choice.get("message"), dict) else {}
        text = message.get("content") or ""
        finish_reason = choice.get("finish_reason")

        if not text.strip():
            logger.warning(
                "Completion returned no content",
                extra={
                    "model": self._model,
                    "finish_reason": finish_reason,
                    "request_id": request_id,
                },
            )
            raise UpstreamError("No response from OpenAI", service=self.service_name)

        usage = data.get("usage") or {}
        openai_logger.completion_reply(self._model, text, finish_reason, usage)

        return CompletionResult(
            text=text,
            finish_reason=finish_reason,
            prompt_tokens=usage.get("prompt_tokens"),
            completion_tokens=usage.get("completion_tokens"),
            duration_ms=duration_ms,
            request_id=request_id,
        )


class ImageClient(OpenAIHTTPClient):
    """Image generation client with fixed quality and style."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        quality: str | None = None,
        style: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
    ) -> None:
        super().__init__(api_key=api_key, base_url=base_url, timeout=timeout)
        settings = get_settings()
        self._model = model or settings.image_model
        self._quality = quality or settings.image_quality
        self._style = style or settings.image_style

    @property
    def model(self) -> str:
        """Get the model being used."""
        return self._model

    async def generate(self, prompt: str, size: str = "1024x1024") -> ImageResult:
        """Request one image for a prompt.

        Raises:
            UpstreamError: If the call fails or no image URL is returned
        """
        openai_logger.call_started(IMAGE_GENERATIONS_PATH, self._model, len(prompt))
        start_time = time.monotonic()

        try:
            data, _, _ = await self._post(
                IMAGE_GENERATIONS_PATH,
                self._model,
                {
                    "model": self._model,
                    "prompt": prompt,
                    "n": 1,
                    "size": size,
                    "quality": self._quality,
                    "style": self._style,
                    "response_format": "url",
                },
            )
        except UpstreamError:
            openai_logger.image_finished(
                self._model, size, (time.monotonic() - start_time) * 1000, success=False
            )
            raise

        duration_ms = (time.monotonic() - start_time) * 1000
        images = data.get("data") or []
        image = images[0] if images and isinstance(images[0], dict) else {}
        url = image.get("url")

        if not url:
            openai_logger.image_finished(
                self._model, size, duration_ms, success=False
            )
            raise UpstreamError("No image URL returned", service=self.service_name)

        openai_logger.image_finished(self._model, size, duration_ms, success=True)
        return ImageResult(
            url=url,
            revised_prompt=image.get("revised_prompt"),
            duration_ms=duration_ms,
        )


# Global client instances
completion_client: CompletionClient | None = None
image_client: ImageClient | None = None


async def init_openai() -> tuple[CompletionClient, ImageClient]:
    """Initialize the global completion and image clients."""
    global completion_client, image_client
    if completion_client is None:
        completion_client = CompletionClient()
    if image_client is None:
        image_client = ImageClient()

    if completion_client.available:
        logger.info(
            "OpenAI clients initialized",
            extra={
                "completion_model": completion_client.model,
                "image_model": image_client.model,
            },
        )
    else:
        logger.info("OpenAI not configured (missing API key)")
    return completion_client, image_client


async def close_openai() -> None:
    """Close the global completion and image clients."""
    global completion_client, image_client
    if completion_client:
        await completion_client.close()
        completion_client = None
    if image_client:
        await image_client.close()
        image_client = None
    logger.info("OpenAI clients closed")


async def get_completion_client() -> CompletionClient:
    """Dependency for getting the completion client.

    Usage:
        @router.post("/test-completion")
        async def test_completion(
            completion: CompletionClient = Depends(get_completion_client)
        ):
            result = await completion.complete(messages)
            ...
    """
    if completion_client is None:
        await init_openai()
    return completion_client  # type: ignore[return-value]


async def get_image_client() -> ImageClient:
    """Dependency for getting the image client."""
    if image_client is None:
        await init_openai()
    return image_client  # type: ignore[return-value]
