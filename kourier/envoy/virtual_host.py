"""Envoy virtual hosts."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Optional

from ..ext_authz import HTTP_EXTERNAL_AUTHORIZATION
from .route import EXT_AUTHZ_PER_ROUTE_TYPE_URL


def new_virtual_host(
    name: str, domains: Iterable[str], routes: Iterable[dict[str, Any]]
) -> dict[str, Any]:
    """Build a virtual host serving ``domains`` with ``routes``."""
    return {"name": name, "domains": list(domains), "routes": list(routes)}


def new_virtual_host_with_ext_authz(
    name: str,
    context_extensions: Optional[Mapping[str, str]],
    domains: Iterable[str],
    routes: Iterable[dict[str, Any]],
) -> dict[str, Any]:
    """Build a virtual host that passes context extensions to external authorization."""
    check_settings: dict[str, Any] = {}
    if context_extensions:
        check_settings["contextExtensions"] = dict(context_extensions)
    host = new_virtual_host(name, domains, routes)
    host["typedPerFilterConfig"] = {
        HTTP_EXTERNAL_AUTHORIZATION: {
            "@type": EXT_AUTHZ_PER_ROUTE_TYPE_URL,
            "checkSettings": check_settings,
        }
    }
    return host