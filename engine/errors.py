"""Typed failures, one per pipeline stage.

Every stage fails fast with one of these; the transport layer turns any of
them into a single human-readable message.
"""

from __future__ import annotations


class PipelineError(Exception):
    """Base class for all pipeline stage failures."""

    stage = "pipeline"

    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


class FetchError(PipelineError):
    """URL unreachable, timed out, or answered with a non-2xx status."""

    stage = "fetch"

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, cause=cause)
        self.status = status


class ExtractionError(PipelineError):
    """Page fetched but no substantive article content could be isolated."""

    stage = "extract"


class ModelError(PipelineError):
    """The text-generation backend failed (auth, quota, network, envelope)."""

    stage = "model"


class SchemaError(PipelineError):
    """Model text was not valid JSON or did not match the summary shape."""

    stage = "normalize"

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, cause=cause)
        self.field = field
