"""Ordered recovery strategies for JSON returned by an LLM.

Each strategy takes the output of the previous one; after every step the
text is parsed again and the first JSON object wins.
"""

import json
import re
from collections.abc import Callable
from typing import Any

from ingest.extraction.exceptions import ExtractionResponseError

_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*|\s*```$")
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f\x7f]")
_BARE_UNDEFINED_RE = re.compile(r"(?<=[:\[,\s])undefined(?=\s*[,}\]])")


def strip_code_fences(text: str) -> str:
    return _FENCE_RE.sub("", text.strip())


def cut_to_braces(text: str) -> str:
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return text
    return text[start : end + 1]


def strip_control_chars(text: str) -> str:
    return _CONTROL_CHARS_RE.sub(" ", text)


def replace_undefined(text: str) -> str:
    return _BARE_UNDEFINED_RE.sub("null", text)


RECOVERY_STEPS: tuple[Callable[[str], str], ...] = (
    strip_code_fences,
    cut_to_braces,
    strip_control_chars,
    replace_undefined,
)


def recover_json(raw: str) -> dict[str, Any]:
    """Parse an LLM response into a dict, repairing common defects.

    Raises:
        ExtractionResponseError: if no step yields a JSON object.
    """
    candidate = raw
    parsed = _try_parse(candidate)
    for step in RECOVERY_STEPS:
        if isinstance(parsed, dict):
            return parsed
        candidate = step(candidate)
        parsed = _try_parse(candidate)
    if isinstance(parsed, dict):
        return parsed
    preview = raw[:80].replace("\n", " ")
    raise ExtractionResponseError(f"Unrecoverable JSON response: {preview!r}")


def _try_parse(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return None
