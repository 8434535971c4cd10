"""Weighted cluster entries for Envoy routes."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

from .headers import headers_to_add


def new_weighted_cluster(
    name: str, traffic_perc: int, headers: Optional[Mapping[str, str]]
) -> dict[str, Any]:
    """Build a ``ClusterWeight`` sending ``traffic_perc`` of traffic to ``name``."""
    weighted: dict[str, Any] = {"name": name, "weight": traffic_perc}
    to_add = headers_to_add(headers)
    if to_add:
        weighted["requestHeadersToAdd"] = to_add
    return weighted