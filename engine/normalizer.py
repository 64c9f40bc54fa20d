"""Stage 5 — Turn the model's raw reply into a validated ``ArticleSummary``."""

from __future__ import annotations

import json
import logging
from typing import Sequence

from pydantic import ValidationError

from engine.errors import SchemaError
from schemas.response import ArticleSummary

logger = logging.getLogger("digest.engine.normalizer")

DEFAULT_FENCE = "```"
DEFAULT_FENCE_LANGUAGES: tuple[str, ...] = ("json",)


class ResponseNormalizer:
    """Strips code-fence wrapping, parses JSON and validates the summary shape.

    Only a leading fence (optionally followed by a recognised language tag)
    and a trailing fence are removed.  Anything else, including prose before
    the JSON, is left in place and will fail to parse.
    """

    def __init__(
        self,
        *,
        fence: str = DEFAULT_FENCE,
        languages: Sequence[str] = DEFAULT_FENCE_LANGUAGES,
    ) -> None:
        self._fence = fence
        # longest first so "jsonc" wins over "json"
        self._languages = sorted((lang.lower() for lang in languages), key=len, reverse=True)

    def strip_wrappers(self, text: str) -> str:
        cleaned = text.strip()
        if not self._fence:
            return cleaned

        if cleaned.startswith(self._fence):
            cleaned = cleaned[len(self._fence):]
            for lang in self._languages:
                if cleaned[: len(lang)].lower() == lang:
                    cleaned = cleaned[len(lang):]
                    break
            cleaned = cleaned.strip()

        if cleaned.endswith(self._fence):
            cleaned = cleaned[: -len(self._fence)].strip()

        return cleaned

    def normalize(self, raw_model_text: str) -> ArticleSummary:
        cleaned = self.strip_wrappers(raw_model_text)

        try:
            data = json.loads(cleaned)
        except (json.JSONDecodeError, RecursionError) as exc:
            logger.warning("Model output is not valid JSON: %s | raw: %s", exc, raw_model_text[:500])
            raise SchemaError(f"The model returned invalid JSON: {exc}", cause=exc) from exc

        if not isinstance(data, dict):
            raise SchemaError(
                f"The model returned a JSON {type(data).__name__}, expected an object."
            )

        try:
            return ArticleSummary.model_validate(data)
        except ValidationError as exc:
            errors = exc.errors()
            fields = [".".join(str(part) for part in err["loc"]) for err in errors]
            first = errors[0]
            field = str(first["loc"][0]) if first["loc"] else None
            logger.warning("Model output failed schema validation: %s", fields)
            raise SchemaError(
                f"The model output is missing or has an invalid field "
                f"'{field}' ({first['msg']}); problems in: {', '.join(fields)}",
                field=field,
                cause=exc,
            ) from exc
