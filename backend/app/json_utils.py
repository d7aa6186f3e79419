from __future__ import annotations

import json
from typing import Any


def extract_json_list(raw: str | bytes) -> list[Any]:
    """
    Decode a JSON array from an upstream reply body.

    The stop-ordering backend answers with the route as text; some builds
    encode it twice (a JSON string holding the array), so one level of
    string nesting is unwrapped.
    """
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    if not isinstance(raw, str):
        raise ValueError("payload must be a string")
    text = raw.strip()
    if not text:
        raise ValueError("payload is empty")

    try:
        obj = json.loads(text)
        if isinstance(obj, str):
            obj = json.loads(obj)
    except json.JSONDecodeError as exc:
        raise ValueError(f"payload is not valid JSON: {exc.msg}") from exc

    if not isinstance(obj, list):
        raise ValueError("JSON root must be an array")
    return obj
