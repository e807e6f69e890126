from __future__ import annotations

import json
import re
from typing import Any, Dict, Optional

from ..exceptions import ModelOutputParseError

PARSE_ERROR_RESPONSE = {"error": "Could not parse response"}

_OBJECT_SPAN = re.compile(r"\{.*\}", re.S)


def extract_json(text: str) -> Optional[str]:
    """Return the span from the first '{' to the last '}', if any."""
    m = _OBJECT_SPAN.search(text or "")
    return m.group(0).strip() if m else None


def parse_model_json(text: Optional[str]) -> Dict[str, Any]:
    """
    Recover a JSON object from free-form model output.

    Tries the whole text first, then the outermost brace span. Models are told to
    answer with bare JSON but sometimes wrap it in prose or code fences.
    """
    if not text or not text.strip():
        raise ModelOutputParseError("empty model output")

    try:
        data = json.loads(text)
    except ValueError:
        span = extract_json(text)
        if span is None:
            raise ModelOutputParseError("no JSON object found in model output")
        try:
            data = json.loads(span)
        except ValueError as e:
            raise ModelOutputParseError(f"extracted span is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ModelOutputParseError(f"expected a JSON object, got {type(data).__name__}")
    return data


def parse_model_json_or_error(text: Optional[str]) -> Dict[str, Any]:
    try:
        return parse_model_json(text)
    except ModelOutputParseError:
        return dict(PARSE_ERROR_RESPONSE)
