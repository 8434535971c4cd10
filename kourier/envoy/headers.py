"""Header manipulation entries for Envoy routes and clusters."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional


def headers_to_add(headers: Optional[Mapping[str, str]]) -> list[dict[str, Any]]:
    """Turn a header map into Envoy ``HeaderValueOption`` entries.

    Headers replace any existing value instead of being appended.
    An empty or missing map gives an empty list.
    """
    if not headers:
        return []
    return [
        {"header": {"key": name, "value": value}, "append": False}
        for name, value in headers.items()
    ]