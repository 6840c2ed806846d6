from __future__ import annotations
import json
import re
from typing import Any, Dict, Optional
from unbind.utils.logger import logger

_FENCE_OPEN_RE = re.compile(r"^```(?:json)?", re.I)
_FENCE_CLOSE_RE = re.compile(r"```$")


def strip_code_fence(text: str) -> str:
    cleaned = _FENCE_OPEN_RE.sub("", text.strip())
    cleaned = _FENCE_CLOSE_RE.sub("", cleaned)
    return cleaned.strip()


def try_parse_json_object(text: Optional[str]) -> Optional[Dict[str, Any]]:
    """Parse a model reply as a single JSON object, tolerating Markdown fences.

    Returns None for anything that is not a JSON object.
    """
    if not text:
        return None
    cleaned = strip_code_fence(text)
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.warning("JSON decode error: %s | raw response: %.200s", e, cleaned)
        return None
    if not isinstance(parsed, dict):
        logger.warning("Expected a JSON object, got %s", type(parsed).__name__)
        return None
    return parsed
