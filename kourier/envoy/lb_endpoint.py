"""Load-balancer endpoints for Envoy clusters."""

from __future__ import annotations

from typing import Any


def new_lb_endpoint(ip: str, port: int) -> dict[str, Any]:
    """Build an ``LbEndpoint`` pointing at ``ip:port`` over TCP."""
    return {
        "endpoint": {
            "address": {
                "socketAddress": {
                    "protocol": "TCP",
                    "address": ip,
                    "portValue": port,
                    "ipv4Compat": True,
                }
            }
        }
    }