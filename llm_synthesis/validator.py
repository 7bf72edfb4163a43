"""Validation layer for raw LLM insight output.

Parses and validates JSON strings against the InsightPayload schema.
Nothing returned by the model is trusted until every step has passed.
"""

import json
import re
from typing import Any, Iterator, List

from pydantic import ValidationError

from llm_synthesis.errors import LLMOutputValidationError
from llm_synthesis.schema import InsightPayload

DEFAULT_MAX_RESPONSE_CHARS = 100_000

# HTML/XML tags and script URLs.
_UNSAFE_CONTENT = re.compile(
    r"<\s*/?\s*[a-zA-Z!][^>]*>|javascript\s*:",
    re.IGNORECASE,
)


def _strip_markdown_fences(text: str) -> str:
    """Remove optional markdown code fences wrapping JSON.

    LLMs sometimes wrap output in ```json ... ``` despite instructions.
    This strips that wrapper so the inner JSON can be parsed.

    Args:
        text: Raw LLM response string.

    Returns:
        The text with leading/trailing code fences removed, if present.
    """
    stripped = text.strip()
    match = re.match(
        r"^```(?:json)?\s*\n?(.*?)\n?\s*```$",
        stripped,
        re.DOTALL,
    )
    if match:
        return match.group(1).strip()
    return stripped


def _iter_strings(value: Any, path: str = "$") -> Iterator[tuple]:
    if isinstance(value, str):
        yield path, value
    elif isinstance(value, dict):
        for key, item in value.items():
            yield from _iter_strings(item, f"{path}.{key}")
    elif isinstance(value, list):
        for index, item in enumerate(value):
            yield from _iter_strings(item, f"{path}[{index}]")


def _find_unsafe_content(data: Any) -> List[str]:
    return [
        f"{path}: markup or script content is not allowed"
        for path, text in _iter_strings(data)
        if _UNSAFE_CONTENT.search(text)
    ]


def validate_llm_output(
    raw_response: str,
    max_chars: int = DEFAULT_MAX_RESPONSE_CHARS,
) -> InsightPayload:
    """Parse and validate a raw LLM response string.

    Steps:
        1. Reject empty or oversized responses.
        2. Strip optional markdown fences.
        3. Parse as JSON and require an object.
        4. Reject markup or script content in any string value.
        5. Validate against the InsightPayload Pydantic model.

    Args:
        raw_response: The raw string returned by the LLM adapter.
        max_chars: Upper bound on the response length.

    Returns:
        A validated InsightPayload instance.

    Raises:
        LLMOutputValidationError: If any step fails.
    """
    if raw_response is None or not raw_response.strip():
        raise LLMOutputValidationError(
            stage="size",
            errors=["response is empty"],
            raw_response=raw_response or "",
        )
    if len(raw_response) > max_chars:
        raise LLMOutputValidationError(
            stage="size",
            errors=[f"response length {len(raw_response)} exceeds {max_chars} characters"],
            raw_response=raw_response[:max_chars],
        )

    cleaned = _strip_markdown_fences(raw_response)

    try:
        data = json.loads(cleaned)
    except (json.JSONDecodeError, TypeError) as exc:
        raise LLMOutputValidationError(
            stage="json_parse",
            errors=[str(exc)],
            raw_response=raw_response,
        ) from exc

    if not isinstance(data, dict):
        raise LLMOutputValidationError(
            stage="schema",
            errors=["top-level JSON must be an object"],
            raw_response=raw_response,
        )

    unsafe = _find_unsafe_content(data)
    if unsafe:
        raise LLMOutputValidationError(
            stage="safety",
            errors=unsafe,
            raw_response=raw_response,
        )

    try:
        return InsightPayload.model_validate(data)
    except ValidationError as exc:
        errors = [
            f"{'.'.join(str(loc) for loc in e['loc'])}: {e['msg']}"
            for e in exc.errors()
        ]
        raise LLMOutputValidationError(
            stage="schema",
            errors=errors,
            raw_response=raw_response,
        ) from exc
