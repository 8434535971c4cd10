"""HTTP connection managers and route configurations."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from ..ext_authz import external_authz

ROUTER_FILTER = "envoy.filters.http.router"
FILE_ACCESS_LOG_TYPE_URL = (
    "type.googleapis.com/envoy.extensions.access_loggers.file.v3.FileAccessLog"
)


def new_http_connection_manager(
    route_config_name: str, enable_access_log: bool, enable_proxy_protocol: bool
) -> dict[str, Any]:
    """Build a connection manager that fetches ``route_config_name`` over ADS."""
    filters: list[dict[str, Any]] = []
    authz = external_authz()
    if authz.enabled and authz.http_filter is not None:
        filters.append(authz.http_filter)
    # The router filter has to come last.
    filters.append({"name": ROUTER_FILTER})

    manager: dict[str, Any] = {
        "codecType": "AUTO",
        "statPrefix": "ingress_http",
        "httpFilters": filters,
        "rds": {
            "configSource": {
                "resourceApiVersion": "V3",
                "ads": {},
                "initialFetchTimeout": "10s",
            },
            "routeConfigName": route_config_name,
        },
    }

    if enable_proxy_protocol:
        # Use the real remote address of the client connection.
        manager["useRemoteAddress"] = True

    if enable_access_log:
        manager["accessLog"] = [
            {
                "name": "envoy.file_access_log",
                "typedConfig": {"@type": FILE_ACCESS_LOG_TYPE_URL, "path": "/dev/stdout"},
            }
        ]

    return manager


def new_route_config(name: str, virtual_hosts: Iterable[dict[str, Any]]) -> dict[str, Any]:
    """Build a route configuration that rejects routes to unknown clusters."""
    return {
        "name": name,
        "virtualHosts": list(virtual_hosts),
        "validateClusters": True,
    }