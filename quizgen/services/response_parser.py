"""
Turns raw model text into a validated ``QuizIn``.

Models like to wrap JSON in a ```json fence and sprinkle newlines through
it. Cleaning removes every backtick and every line break, so JSON string
values spanning several lines are not supported.
"""

import json
import logging
import re

from pydantic import ValidationError

from ..core.errors import InvalidModelResponseError, QuizParseError
from ..schemas.quiz_schemas import QuizIn

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^```[\w-]*\s*|\s*```$")
_NEWLINE_RE = re.compile(r"\r\n|\n|\r")

_SNIPPET_LEN = 200


def clean_model_output(raw: str) -> str:
    text = _FENCE_RE.sub("", raw.strip())
    text = text.replace("`", "")
    text = _NEWLINE_RE.sub("", text)
    return text.strip()


def parse_quiz(raw: str) -> QuizIn:
    cleaned = clean_model_output(raw)

    if not cleaned.startswith("{") or not cleaned.endswith("}"):
        logger.error("Invalid JSON format detected: %s", cleaned)
        raise InvalidModelResponseError(
            f"Response is not valid JSON format: {cleaned[:_SNIPPET_LEN]!r}",
            text=cleaned,
        )

    logger.debug("Cleaned JSON response: %s", cleaned)

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise QuizParseError(f"Could not parse quiz JSON: {e}") from e

    try:
        return QuizIn.model_validate(data)
    except ValidationError as e:
        raise QuizParseError(f"Quiz JSON does not match the expected schema: {e}") from e
