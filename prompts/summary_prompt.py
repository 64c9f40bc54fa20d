"""Prompt contract for the article summary.

The template is fixed; only the (truncated) article text varies.  The model
is asked for a bare JSON object so the normalizer can parse it directly.
"""

from __future__ import annotations

DEFAULT_MAX_PROMPT_CHARS = 10_000

SUMMARY_PROMPT = """
You are an expert content summarizer. Based on the following article text, generate a concise summary in a structured JSON format.
The JSON object MUST have the following keys and data types:
- "heading": A short, catchy title for the summary (string).
- "descriptive_paragraph": A single, descriptive paragraph summarizing the main points (string).
- "bullet_points": An array of 3 to 5 key takeaways or important facts (array of strings).
- "neutral_opinion": A brief, neutral concluding thought or the core thesis of the article in one sentence (string).

Do not include any introductory text like "Here is the JSON summary" and do not wrap the output in code fences. Only output the raw JSON object.

Article Text:
---
{article_text}
"""


def truncate(text: str, max_chars: int = DEFAULT_MAX_PROMPT_CHARS) -> str:
    """Prefix-cut *text* to at most *max_chars* characters.

    No attempt is made to stop on a sentence boundary; the last sentence may
    be cut mid-word.
    """
    return text[:max_chars]


def build_prompt(text: str, *, max_chars: int = DEFAULT_MAX_PROMPT_CHARS) -> str:
    """Render the summary prompt around the first *max_chars* of *text*."""
    return SUMMARY_PROMPT.replace("{article_text}", truncate(text, max_chars))
