"""Controller settings: names, ports, namespaces and the config-kourier map."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

CONTROLLER_NAME = "net-kourier-controller"

INTERNAL_SERVICE_NAME = "kourier-internal"
EXTERNAL_SERVICE_NAME = "kourier"

HTTP_PORT_EXTERNAL = 8080
HTTP_PORT_INTERNAL = 8081
HTTPS_PORT_INTERNAL = 8444
HTTPS_PORT_EXTERNAL = 8443
HTTP_PORT_PROB = 8090
HTTPS_PORT_PROB = 9443

INTERNAL_KOURIER_DOMAIN = "internalkourier"

GATEWAY_NAMESPACE_ENV = "KOURIER_GATEWAY_NAMESPACE"
SYSTEM_NAMESPACE_ENV = "SYSTEM_NAMESPACE"
CLUSTER_DOMAIN_ENV = "CLUSTER_DOMAIN"
DEFAULT_CLUSTER_DOMAIN = "cluster.local"

KOURIER_INGRESS_CLASS_NAME = "kourier.ingress.networking.knative.dev"

DISABLE_HTTP2_ANNOTATION_KEY = "kourier.knative.dev/disable-http2"

CONFIG_NAME = "config-kourier"
ENABLE_SERVICE_ACCESS_LOGGING_KEY = "enable-service-access-logging"
ENABLE_PROXY_PROTOCOL_KEY = "enable-proxy-protocol"
CLUSTER_CERT_KEY = "cluster-cert-secret"

_RESOLV_CONF = Path("/etc/resolv.conf")

_TRUE_WORDS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_WORDS = frozenset({"0", "f", "F", "FALSE", "false", "False"})


class ConfigError(ValueError):
    """Raised when configuration is missing or cannot be parsed."""


@dataclass
class Kourier:
    """Settings read from the config-kourier config map."""

    enable_service_access_logging: bool = True
    enable_proxy_protocol: bool = False
    cluster_cert_secret: str = ""


def default_config() -> Kourier:
    """Return the configuration used when the config map sets nothing."""
    # Access logging defaults to on for backwards compatibility.
    return Kourier(
        enable_service_access_logging=True,
        enable_proxy_protocol=False,
        cluster_cert_secret="",
    )


def _parse_bool(key: str, raw: str) -> bool:
    if raw in _TRUE_WORDS:
        return True
    if raw in _FALSE_WORDS:
        return False
    raise ConfigError(f"failed to parse {key!r}: invalid boolean {raw!r}")


def new_config_from_map(config_map: Optional[Mapping[str, str]]) -> Kourier:
    """Build a Kourier configuration from the data of a config map."""
    data = config_map or {}
    config = default_config()
    if ENABLE_SERVICE_ACCESS_LOGGING_KEY in data:
        config.enable_service_access_logging = _parse_bool(
            ENABLE_SERVICE_ACCESS_LOGGING_KEY, data[ENABLE_SERVICE_ACCESS_LOGGING_KEY]
        )
    if ENABLE_PROXY_PROTOCOL_KEY in data:
        config.enable_proxy_protocol = _parse_bool(
            ENABLE_PROXY_PROTOCOL_KEY, data[ENABLE_PROXY_PROTOCOL_KEY]
        )
    if CLUSTER_CERT_KEY in data:
        config.cluster_cert_secret = data[CLUSTER_CERT_KEY]
    return config


def new_config_from_config_map(config_map: Any) -> Kourier:
    """Build a Kourier configuration from a config map.

    The config map is either a mapping with a ``data`` entry or an object
    with a ``data`` attribute.
    """
    if isinstance(config_map, Mapping):
        data = config_map.get("data")
    else:
        data = getattr(config_map, "data", None)
    return new_config_from_map(data)


def _cluster_domain() -> str:
    domain = os.environ.get(CLUSTER_DOMAIN_ENV)
    if domain:
        return domain
    try:
        lines = _RESOLV_CONF.read_text().splitlines()
    except OSError:
        return DEFAULT_CLUSTER_DOMAIN
    for line in lines:
        fields = line.split()
        if not fields or fields[0] != "search":
            continue
        for entry in fields[1:]:
            if entry.startswith("svc."):
                return entry[len("svc."):]
            if ".svc." in entry:
                return entry.split(".svc.", 1)[1]
    return DEFAULT_CLUSTER_DOMAIN


def _service_hostname(name: str, namespace: str) -> str:
    return f"{name}.{namespace}.svc.{_cluster_domain()}"


def service_hostnames() -> tuple[str, str]:
    """Return the hostnames of the external and the internal service."""
    namespace = gateway_namespace()
    return (
        _service_hostname(EXTERNAL_SERVICE_NAME, namespace),
        _service_hostname(INTERNAL_SERVICE_NAME, namespace),
    )


def gateway_namespace() -> str:
    """Return the namespace the gateway is deployed in."""
    namespace = os.environ.get(GATEWAY_NAMESPACE_ENV, "")
    if namespace:
        return namespace
    system_namespace = os.environ.get(SYSTEM_NAMESPACE_ENV, "")
    if not system_namespace:
        raise ConfigError(
            f"neither {GATEWAY_NAMESPACE_ENV} nor {SYSTEM_NAMESPACE_ENV} is set"
        )
    return system_namespace


def get_disable_http2(annotations: Optional[Mapping[str, str]]) -> str:
    """Return the value of the disable-http2 annotation, or an empty string."""
    if not annotations:
        return ""
    return annotations.get(DISABLE_HTTP2_ANNOTATION_KEY, "")