"""Envoy cluster resources."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import timedelta
from enum import Enum
from typing import Any, Optional, Union

from ..ext_authz import HTTP_PROTOCOL_OPTIONS_KEY, HTTP_PROTOCOL_OPTIONS_TYPE_URL

_NANOS_PER_SECOND = 10**9


class DiscoveryType(str, Enum):
    """How Envoy discovers the members of a cluster."""

    STATIC = "STATIC"
    STRICT_DNS = "STRICT_DNS"
    LOGICAL_DNS = "LOGICAL_DNS"
    EDS = "EDS"
    ORIGINAL_DST = "ORIGINAL_DST"


def _duration(value: Union[timedelta, float, int]) -> str:
    """Render a duration (a timedelta or seconds) in protobuf JSON form."""
    if isinstance(value, timedelta):
        nanos = (value // timedelta(microseconds=1)) * 1000
    else:
        nanos = round(value * _NANOS_PER_SECOND)
    sign = "-" if nanos < 0 else ""
    seconds, rest = divmod(abs(nanos), _NANOS_PER_SECOND)
    if rest == 0:
        fraction = ""
    elif rest % 1_000_000 == 0:
        fraction = f".{rest // 1_000_000:03d}"
    elif rest % 1000 == 0:
        fraction = f".{rest // 1000:06d}"
    else:
        fraction = f".{rest:09d}"
    return f"{sign}{seconds}{fraction}s"


def new_cluster(
    name: str,
    connect_timeout: Union[timedelta, float, int],
    endpoints: Iterable[dict[str, Any]],
    is_http2: bool,
    transport_socket: Optional[dict[str, Any]],
    discovery_type: Union[DiscoveryType, str],
) -> dict[str, Any]:
    """Build a cluster with the given endpoints and settings."""
    cluster: dict[str, Any] = {
        "name": name,
        "type": DiscoveryType(discovery_type).value,
        "connectTimeout": _duration(connect_timeout),
        "loadAssignment": {
            "clusterName": name,
            "endpoints": [{"lbEndpoints": list(endpoints)}],
        },
    }
    if transport_socket is not None:
        cluster["transportSocket"] = transport_socket

    if is_http2:
        cluster["typedExtensionProtocolOptions"] = {
            HTTP_PROTOCOL_OPTIONS_KEY: {
                "@type": HTTP_PROTOCOL_OPTIONS_TYPE_URL,
                "explicitHttpConfig": {"http2ProtocolOptions": {}},
            }
        }
    return cluster