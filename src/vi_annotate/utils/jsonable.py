from __future__ import annotations

from typing import Any


def to_jsonable(value: Any) -> Any:
    """Render proto-plus messages (or plain payloads) as JSON-compatible data."""
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    to_dict = getattr(type(value), "to_dict", None)
    if to_dict is not None:
        return to_dict(value)
    if isinstance(value, dict):
        return {k: to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return str(value)
