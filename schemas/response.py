"""Response schemas for the digest API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator


class ArticleSummary(BaseModel):
    """Validated model output.  Frozen: built once by the normalizer, never mutated."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    heading: StrictStr = Field(min_length=1, description="Short, catchy title.")
    descriptive_paragraph: StrictStr = Field(min_length=1, description="Single synopsis paragraph.")
    bullet_points: tuple[StrictStr, ...] = Field(
        min_length=1,
        description="Key takeaways; the prompt asks for 3 to 5.",
    )
    neutral_opinion: StrictStr = Field(min_length=1, description="One-sentence neutral closing thought.")

    @field_validator("heading", "descriptive_paragraph", "neutral_opinion")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    llm_provider: str
