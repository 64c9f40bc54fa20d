"""Pipeline orchestrator — fetch → extract → prompt → model → normalize."""

from __future__ import annotations

import logging
import time

from config import Settings
from engine.extractor import Extractor
from engine.fetcher import Fetcher
from engine.normalizer import ResponseNormalizer
from engine.summarizer import SummarizerClient
from prompts.summary_prompt import build_prompt
from schemas.response import ArticleSummary
from services.llm_service import build_text_generator

logger = logging.getLogger("digest.pipeline")


class SummaryPipeline:
    """One linear run per URL.  Any stage failure propagates unchanged.

    Parameters
    ----------
    fetcher, extractor, summarizer, normalizer
        The stage components, already configured.
    max_prompt_chars : int
        Character budget for the article text embedded in the prompt.
    """

    def __init__(
        self,
        *,
        fetcher: Fetcher,
        extractor: Extractor,
        summarizer: SummarizerClient,
        normalizer: ResponseNormalizer,
        max_prompt_chars: int,
    ) -> None:
        self.fetcher = fetcher
        self.extractor = extractor
        self.summarizer = summarizer
        self.normalizer = normalizer
        self.max_prompt_chars = max_prompt_chars

    async def run(self, url: str) -> ArticleSummary:
        t0 = time.perf_counter()

        html = await self.fetcher.fetch(url)
        article = self.extractor.extract(html, url)

        prompt = build_prompt(article.text_content, max_chars=self.max_prompt_chars)
        if len(article.text_content) > self.max_prompt_chars:
            logger.info(
                "Article text truncated from %d to %d chars",
                len(article.text_content), self.max_prompt_chars,
            )

        raw = await self.summarizer.summarize(prompt)
        summary = self.normalizer.normalize(raw)

        logger.info(
            "Pipeline complete in %.2fs — %r, %d bullet points",
            time.perf_counter() - t0, summary.heading, len(summary.bullet_points),
        )
        return summary

    async def aclose(self) -> None:
        """Release the model backend's client."""
        await self.summarizer.aclose()


def build_pipeline(settings: Settings) -> SummaryPipeline:
    """Construct a fresh pipeline from *settings*."""
    return SummaryPipeline(
        fetcher=Fetcher(settings),
        extractor=Extractor(settings),
        summarizer=SummarizerClient(build_text_generator(settings)),
        normalizer=ResponseNormalizer(
            fence=settings.response_fence,
            languages=settings.response_fence_languages,
        ),
        max_prompt_chars=settings.max_prompt_chars,
    )
