"""Request schemas for the digest API."""

from __future__ import annotations

from pydantic import BaseModel, Field


class SummarizeRequest(BaseModel):
    """Payload sent by the web client."""

    article_url: str = Field(
        ...,
        alias="articleUrl",
        min_length=1,
        description="URL of the article to summarize.",
    )

    model_config = {"populate_by_name": True, "str_strip_whitespace": True}
