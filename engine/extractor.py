"""Stage 2 — Isolate the main article text from page chrome.

The heavy lifting is delegated to a ``ContentExtractor`` capability; the
default one runs readability-lxml (text density / link density / tag
semantics scoring) and flattens the winning block with BeautifulSoup.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Protocol

from bs4 import BeautifulSoup
from readability import Document
from readability.readability import Unparseable

from config import Settings
from engine.errors import ExtractionError

logger = logging.getLogger("digest.engine.extractor")

_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class ExtractedArticle:
    text_content: str
    title: str = ""
    source_url: str = ""


@dataclass(frozen=True)
class ExtractedContent:
    """Raw output of a ``ContentExtractor``: plain text plus page title."""

    text: str
    title: str = ""


class ContentExtractor(Protocol):
    """HTML + base URL → main-content plain text.

    Implementations raise ``ExtractionError`` when the markup can't be parsed.
    """

    def extract(self, html: str, url: str) -> ExtractedContent: ...


def _collapse(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


class ReadabilityExtractor:
    """``ContentExtractor`` backed by readability-lxml."""

    def extract(self, html: str, url: str) -> ExtractedContent:
        try:
            doc = Document(html, url=url)
            summary_html = doc.summary(html_partial=True)
            title = doc.short_title() or ""
        except Unparseable as exc:
            raise ExtractionError(
                "Could not parse the page markup.", cause=exc
            ) from exc

        soup = BeautifulSoup(summary_html, "html.parser")
        for tag in soup(["script", "style", "noscript"]):
            tag.decompose()
        text = _collapse(soup.get_text(separator=" "))
        return ExtractedContent(text=text, title=_collapse(title))


class Extractor:
    """Runs the capability and enforces the "substantive content" contract."""

    def __init__(
        self,
        settings: Settings,
        *,
        backend: ContentExtractor | None = None,
    ) -> None:
        self._min_chars = settings.min_article_chars
        self._backend = backend or ReadabilityExtractor()

    def extract(self, raw_html: str, source_url: str) -> ExtractedArticle:
        if not raw_html or not raw_html.strip():
            raise ExtractionError("The page returned an empty document.")

        content = self._backend.extract(raw_html, source_url)
        text = content.text.strip()

        if not text:
            raise ExtractionError("Could not parse the article content to summarize.")
        if len(text) < self._min_chars:
            logger.info(
                "Extracted only %d chars from %s (minimum %d)",
                len(text), source_url, self._min_chars,
            )
            raise ExtractionError(
                "Could not find substantive article content on the page."
            )

        logger.info("Extracted %d chars from %s", len(text), source_url)
        return ExtractedArticle(text_content=text, title=content.title, source_url=source_url)
