# backend/app/normalizer.py

import json
import math
import re
from typing import Any, Dict, List

from .errors import MalformedResponse

_FENCE_OPEN = re.compile(r"```json\s*")
_FENCE_CLOSE = re.compile(r"```\s*$")


def extract_json(text: str) -> str:
    """
    Pull the JSON object out of a model reply that may be wrapped in
    markdown fences or surrounded by prose.

    Heuristic only: slices from the first "{" to the last "}". Returns "{}"
    when there is no such pair.
    """
    if not text:
        return "{}"
    clean = _FENCE_OPEN.sub("", text)
    clean = _FENCE_CLOSE.sub("", clean)
    first = clean.find("{")
    last = clean.rfind("}")
    if first == -1 or last == -1 or last < first:
        return "{}"
    return clean[first : last + 1]


def parse_json(text: str) -> Dict[str, Any]:
    """Extract and decode a JSON object; raises MalformedResponse otherwise."""
    snippet = extract_json(text)
    try:
        data = json.loads(snippet)
    except json.JSONDecodeError as e:
        raise MalformedResponse(f"Model did not return valid JSON ({e}); got: {(text or '')[:500]}")
    if not isinstance(data, dict):
        raise MalformedResponse(f"Model returned {type(data).__name__}, expected a JSON object")
    return data


# --- default-on-absence accessors ---

def first_present(doc: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = doc.get(key)
        if value is not None:
            return value
    return None


def get_float(doc: Dict[str, Any], *keys: str, default: float = 0.0) -> float:
    """Numeric field or `default`; NaN and infinities count as absent."""
    value = first_present(doc, *keys)
    if isinstance(value, bool):
        return default
    if isinstance(value, str):
        try:
            value = float(value.strip().rstrip("%"))
        except ValueError:
            return default
    if isinstance(value, (int, float)) and math.isfinite(value):
        return float(value)
    return default


def get_str(doc: Dict[str, Any], *keys: str, default: str = "") -> str:
    value = first_present(doc, *keys)
    if value is None:
        return default
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value).strip()


def get_list(doc: Dict[str, Any], *keys: str) -> List[Any]:
    value = first_present(doc, *keys)
    return value if isinstance(value, list) else []


def get_str_list(doc: Dict[str, Any], *keys: str) -> List[str]:
    return [str(x).strip() for x in get_list(doc, *keys) if str(x).strip()]
