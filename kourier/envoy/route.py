"""Envoy route entries."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import timedelta
from typing import Any, Optional, Union

from ..ext_authz import HTTP_EXTERNAL_AUTHORIZATION
from .cluster import _duration
from .headers import headers_to_add

EXT_AUTHZ_PER_ROUTE_TYPE_URL = (
    "type.googleapis.com/envoy.extensions.filters.http.ext_authz.v3.ExtAuthzPerRoute"
)


def _match(headers_match: Optional[Iterable[dict[str, Any]]], path: str) -> dict[str, Any]:
    match: dict[str, Any] = {"prefix": path}
    matchers = list(headers_match or [])
    if matchers:
        match["headers"] = matchers
    return match


def new_route(
    name: str,
    headers_match: Optional[Iterable[dict[str, Any]]],
    path: str,
    wrs: Optional[Iterable[dict[str, Any]]],
    route_timeout: Union[timedelta, float, int],
    headers: Optional[Mapping[str, str]],
    host_rewrite: str,
) -> dict[str, Any]:
    """Build a route splitting traffic over weighted clusters."""
    action: dict[str, Any] = {
        "weightedClusters": {"clusters": list(wrs or [])},
        "timeout": _duration(route_timeout),
        "upgradeConfigs": [{"upgradeType": "websocket", "enabled": True}],
    }
    if host_rewrite:
        action["hostRewriteLiteral"] = host_rewrite

    route: dict[str, Any] = {
        "name": name,
        "match": _match(headers_match, path),
        "route": action,
    }
    to_add = headers_to_add(headers)
    if to_add:
        route["requestHeadersToAdd"] = to_add
    return route


def new_redirect_route(
    name: str, headers_match: Optional[Iterable[dict[str, Any]]], path: str
) -> dict[str, Any]:
    """Build a route redirecting matching requests to HTTPS."""
    return {
        "name": name,
        "match": _match(headers_match, path),
        "redirect": {"httpsRedirect": True},
    }


def new_route_ext_authz_disabled(
    name: str,
    headers_match: Optional[Iterable[dict[str, Any]]],
    path: str,
    wrs: Optional[Iterable[dict[str, Any]]],
    route_timeout: Union[timedelta, float, int],
    headers: Optional[Mapping[str, str]],
    host_rewrite: str,
) -> dict[str, Any]:
    """Build a route like :func:`new_route` with external authorization turned off."""
    route = new_route(name, headers_match, path, wrs, route_timeout, headers, host_rewrite)
    route["typedPerFilterConfig"] = {
        HTTP_EXTERNAL_AUTHORIZATION: {
            "@type": EXT_AUTHZ_PER_ROUTE_TYPE_URL,
            "disabled": True,
        }
    }
    return route