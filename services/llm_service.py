"""Text-generation backends (OpenAI / Azure / local-compatible / Gemini).

Each backend exposes the same narrow capability (prompt in, completion text
out) and translates its SDK's failures into ``ModelError``.  SDK clients are
built on first use, so missing credentials surface as ``ModelError`` from
``generate`` rather than at construction time.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Protocol

from openai import AsyncAzureOpenAI, AsyncOpenAI, OpenAIError

from config import Settings
from engine.errors import ModelError

logger = logging.getLogger("digest.llm")


class TextGenerator(Protocol):
    """Given a text prompt, return a text completion."""

    model: str

    async def generate(self, prompt: str) -> str: ...

    async def aclose(self) -> None: ...


class OpenAITextGenerator:
    """Chat-completions backend for any OpenAI-compatible endpoint."""

    def __init__(
        self,
        client_factory: Callable[[], AsyncOpenAI],
        model: str,
        *,
        temperature: float,
    ) -> None:
        self._client_factory = client_factory
        self._client: AsyncOpenAI | None = None
        self.model = model
        self._temperature = temperature

    def _ensure_client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = self._client_factory()
        return self._client

    async def generate(self, prompt: str) -> str:
        kwargs: dict[str, Any] = {
            "model": self.model,
            "temperature": self._temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        try:
            client = self._ensure_client()
            response = await client.chat.completions.create(**kwargs)
        except OpenAIError as exc:
            logger.warning("LLM call failed: %s", exc)
            raise ModelError(f"The language model request failed: {exc}", cause=exc) from exc

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as exc:
            raise ModelError("The language model returned a malformed response.", cause=exc) from exc
        if not content or not content.strip():
            raise ModelError("The language model returned empty content.")
        return content

    async def aclose(self) -> None:
        if self._client is not None:
            client, self._client = self._client, None
            await client.close()


class GeminiTextGenerator:
    """Google Gemini backend on the ``google.ai.generativelanguage`` client.

    The API key is bound to this instance's client; nothing is configured
    process-wide.
    """

    def __init__(
        self,
        client_factory: Callable[[], Any],
        model: str,
        *,
        temperature: float,
        timeout: float,
    ) -> None:
        self._client_factory = client_factory
        self._client: Any = None
        self.model = model
        self._temperature = temperature
        self._timeout = timeout

    def _request(self, prompt: str) -> Any:
        from google.ai import generativelanguage as glm

        name = self.model if self.model.startswith("models/") else f"models/{self.model}"
        return glm.GenerateContentRequest(
            model=name,
            contents=[glm.Content(role="user", parts=[glm.Part(text=prompt)])],
            generation_config=glm.GenerationConfig(temperature=self._temperature),
        )

    async def generate(self, prompt: str) -> str:
        from google.api_core.exceptions import GoogleAPIError
        from google.auth.exceptions import GoogleAuthError

        try:
            if self._client is None:
                self._client = self._client_factory()
            response = await self._client.generate_content(
                request=self._request(prompt), timeout=self._timeout
            )
        except (GoogleAPIError, GoogleAuthError) as exc:
            logger.warning("Gemini call failed: %s", exc)
            raise ModelError(f"The language model request failed: {exc}", cause=exc) from exc

        # No candidates means the prompt or the reply was blocked.
        candidates = list(getattr(response, "candidates", None) or [])
        if not candidates:
            raise ModelError("The language model returned no usable text.")
        try:
            content = "".join(part.text for part in candidates[0].content.parts)
        except (AttributeError, TypeError) as exc:
            raise ModelError("The language model returned a malformed response.", cause=exc) from exc

        if not content.strip():
            raise ModelError("The language model returned empty content.")
        return content

    async def aclose(self) -> None:
        if self._client is not None:
            client, self._client = self._client, None
            await client.transport.close()


def _gemini_client_factory(api_key: str) -> Callable[[], Any]:
    def factory() -> Any:
        from google.ai import generativelanguage as glm

        return glm.GenerativeServiceAsyncClient(client_options={"api_key": api_key or None})

    return factory


def build_text_generator(settings: Settings) -> TextGenerator:
    """Return the backend selected by ``settings.llm_provider``."""
    provider = settings.llm_provider.lower()
    temperature = settings.llm_temperature
    timeout = settings.llm_timeout

    if provider == "azure":
        return OpenAITextGenerator(
            lambda: AsyncAzureOpenAI(
                azure_endpoint=settings.azure_openai_endpoint,
                api_key=settings.azure_openai_api_key or None,
                api_version="2024-12-01-preview",
                timeout=timeout,
                max_retries=0,
            ),
            settings.azure_openai_deployment,
            temperature=temperature,
        )
    if provider == "local":
        return OpenAITextGenerator(
            lambda: AsyncOpenAI(
                base_url=settings.local_llm_base_url,
                api_key="not-needed",
                timeout=timeout,
                max_retries=0,
            ),
            settings.local_llm_model,
            temperature=temperature,
        )
    if provider == "gemini":
        return GeminiTextGenerator(
            _gemini_client_factory(settings.gemini_api_key),
            settings.gemini_model,
            temperature=temperature,
            timeout=timeout,
        )
    if provider != "openai":
        raise ValueError(f"Unknown LLM provider: {settings.llm_provider!r}")

    return OpenAITextGenerator(
        lambda: AsyncOpenAI(
            api_key=settings.openai_api_key or None,
            timeout=timeout,
            max_retries=0,
        ),
        settings.openai_model,
        temperature=temperature,
    )
