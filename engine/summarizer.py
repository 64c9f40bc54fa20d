"""Stage 4 — Send the prompt to the text-generation backend."""

from __future__ import annotations

import logging
import time

from engine.errors import ModelError
from services.llm_service import TextGenerator

logger = logging.getLogger("digest.engine.summarizer")


class SummarizerClient:
    """Single-attempt call to a ``TextGenerator``; returns its raw text."""

    def __init__(self, generator: TextGenerator) -> None:
        self._generator = generator

    async def summarize(self, prompt: str) -> str:
        logger.info("Sending %d-char prompt to %s", len(prompt), self._generator.model)
        t0 = time.perf_counter()
        text = await self._generator.generate(prompt)
        if not isinstance(text, str):
            raise ModelError("The language model returned a non-text completion.")
        logger.info("Model replied in %.2fs — %d chars", time.perf_counter() - t0, len(text))
        return text

    async def aclose(self) -> None:
        await self._generator.aclose()
