"""External authorization settings and the Envoy resources built from them."""

from __future__ import annotations

import functools
import os
import re
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from .config import ConfigError

EXT_AUTHZ_CLUSTER_NAME = "extAuthz"
UNIX_MAX_PORT = 65535
ENV_PREFIX = "KOURIER_EXTAUTHZ"

HTTP_EXTERNAL_AUTHORIZATION = "envoy.filters.http.ext_authz"
HTTP_PROTOCOL_OPTIONS_KEY = "envoy.extensions.upstreams.http.v3.HttpProtocolOptions"

_TYPE_URL_PREFIX = "type.googleapis.com/"
HTTP_PROTOCOL_OPTIONS_TYPE_URL = _TYPE_URL_PREFIX + HTTP_PROTOCOL_OPTIONS_KEY
EXT_AUTHZ_TYPE_URL = _TYPE_URL_PREFIX + "envoy.extensions.filters.http.ext_authz.v3.ExtAuthz"

_TRUE_WORDS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_WORDS = frozenset({"0", "f", "F", "FALSE", "false", "False"})
_DECIMAL = re.compile(r"[+-]?[0-9]+")


class ExtAuthzProtocol(str, Enum):
    """Protocols the external authorization service can speak."""

    GRPC = "grpc"
    HTTP = "http"
    HTTPS = "https"


def is_valid_ext_authz_protocol(protocol: Any) -> bool:
    """Tell whether ``protocol`` names a supported protocol."""
    try:
        ExtAuthzProtocol(protocol)
    except ValueError:
        return False
    return True


def _parse_bool(name: str, raw: str) -> bool:
    if raw in _TRUE_WORDS:
        return True
    if raw in _FALSE_WORDS:
        return False
    raise ConfigError(f"{name}: invalid boolean {raw!r}")


def _parse_int(name: str, raw: str, *, bits: int, signed: bool) -> int:
    text = raw
    negative = False
    if signed and text[:1] in ("+", "-"):
        negative = text[0] == "-"
        text = text[1:]
    try:
        if text[:2].lower() in ("0x", "0o", "0b"):
            value = int(text, 0)
        elif len(text) > 1 and text.startswith("0") and text.isdigit():
            value = int(text[1:], 8)
        elif text.isdigit() and text.isascii():
            value = int(text, 10)
        else:
            raise ValueError(text)
    except ValueError:
        raise ConfigError(f"{name}: invalid integer {raw!r}") from None
    if negative:
        value = -value
    low, high = (-(1 << (bits - 1)), (1 << (bits - 1)) - 1) if signed else (0, (1 << bits) - 1)
    if not low <= value <= high:
        raise ConfigError(f"{name}: value {raw!r} out of range")
    return value


@dataclass
class ExtAuthzSettings:
    """Settings of the external authorization service."""

    host: str = ""
    failure_mode_allow: bool = False
    max_request_bytes: int = 8192
    timeout: int = 2000
    protocol: str = ExtAuthzProtocol.GRPC.value
    path_prefix: str = ""
    allowed_header: str = ""

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ExtAuthzSettings":
        """Read the settings from KOURIER_EXTAUTHZ_* environment variables."""
        env = os.environ if environ is None else environ

        def lookup(suffix: str) -> tuple[str, Optional[str]]:
            name = f"{ENV_PREFIX}_{suffix}"
            return name, env.get(name)

        settings = cls()
        name, raw = lookup("HOST")
        if raw is not None:
            settings.host = raw
        name, raw = lookup("FAILUREMODEALLOW")
        if raw is not None:
            settings.failure_mode_allow = _parse_bool(name, raw)
        name, raw = lookup("MAXREQUESTBYTES")
        if raw is not None:
            settings.max_request_bytes = _parse_int(name, raw, bits=32, signed=False)
        name, raw = lookup("TIMEOUT")
        if raw is not None:
            settings.timeout = _parse_int(name, raw, bits=64, signed=True)
        name, raw = lookup("PROTOCOL")
        if raw is not None:
            settings.protocol = raw
        name, raw = lookup("PATHPREFIX")
        if raw is not None:
            settings.path_prefix = raw
        name, raw = lookup("ALLOWEDHEADER")
        if raw is not None:
            settings.allowed_header = raw
        return settings


@dataclass
class ExternalAuthzConfig:
    """External authorization as the gateway is configured with it."""

    enabled: bool = False
    cluster: Optional[dict[str, Any]] = None
    http_filter: Optional[dict[str, Any]] = None


def _duration(milliseconds: int) -> str:
    sign = "-" if milliseconds < 0 else ""
    seconds, rest = divmod(abs(milliseconds), 1000)
    fraction = f".{rest:03d}" if rest else ""
    return f"{sign}{seconds}{fraction}s"


def ext_authz_cluster(host: str, port: int, protocol: Any) -> dict[str, Any]:
    """Build the cluster pointing at the external authorization service."""
    try:
        proto = ExtAuthzProtocol(protocol)
    except ValueError:
        raise ConfigError(f"protocol {protocol} is invalid") from None

    if proto is ExtAuthzProtocol.GRPC:
        protocol_config = {"http2ProtocolOptions": {}}
    else:
        protocol_config = {"httpProtocolOptions": {}}

    options = {
        "@type": HTTP_PROTOCOL_OPTIONS_TYPE_URL,
        "explicitHttpConfig": protocol_config,
    }

    return {
        "name": EXT_AUTHZ_CLUSTER_NAME,
        "type": "STRICT_DNS",
        "typedExtensionProtocolOptions": {HTTP_PROTOCOL_OPTIONS_KEY: options},
        "connectTimeout": "5s",
        "loadAssignment": {
            "clusterName": EXT_AUTHZ_CLUSTER_NAME,
            "endpoints": [
                {
                    "lbEndpoints": [
                        {
                            "endpoint": {
                                "address": {
                                    "socketAddress": {
                                        "protocol": "TCP",
                                        "address": host,
                                        "portValue": port,
                                        "ipv4Compat": True,
                                    }
                                }
                            }
                        }
                    ]
                }
            ],
        },
    }


def external_authz_filter(conf: ExtAuthzSettings) -> dict[str, Any]:
    """Build the HTTP filter that calls the external authorization service."""
    try:
        proto = ExtAuthzProtocol(conf.protocol)
    except ValueError:
        raise ConfigError(f"protocol {conf.protocol} is invalid") from None

    timeout = _duration(conf.timeout)
    headers = [{"key": "client", "value": "kourier"}]

    typed_config: dict[str, Any] = {
        "@type": EXT_AUTHZ_TYPE_URL,
        "transportApiVersion": "V3",
        "failureModeAllow": conf.failure_mode_allow,
        "withRequestBody": {
            "maxRequestBytes": conf.max_request_bytes,
            "allowPartialMessage": True,
        },
        "clearRouteCache": False,
    }

    if proto is ExtAuthzProtocol.GRPC:
        typed_config["grpcService"] = {
            "envoyGrpc": {"clusterName": EXT_AUTHZ_CLUSTER_NAME},
            "timeout": timeout,
            "initialMetadata": headers,
        }
    else:
        authorization_request: dict[str, Any] = {}
        if conf.allowed_header:
            authorization_request["allowedHeaders"] = {
                "patterns": [{"prefix": conf.allowed_header}]
            }
        authorization_request["headersToAdd"] = headers
        typed_config["httpService"] = {
            "serverUri": {
                "uri": f"{proto.value}://{conf.host}",
                "cluster": EXT_AUTHZ_CLUSTER_NAME,
                "timeout": timeout,
            },
            "pathPrefix": conf.path_prefix,
            "authorizationRequest": authorization_request,
        }

    return {"name": HTTP_EXTERNAL_AUTHORIZATION, "typedConfig": typed_config}


def _split_host_port(hostport: str) -> tuple[str, str]:
    if hostport.startswith("["):
        end = hostport.find("]")
        if end < 0:
            raise ConfigError(f"address {hostport}: missing ']' in address")
        rest = hostport[end + 1:]
        if not rest:
            raise ConfigError(f"address {hostport}: missing port in address")
        if not rest.startswith(":") or ":" in rest[1:]:
            raise ConfigError(f"address {hostport}: too many colons in address")
        return hostport[1:end], rest[1:]
    host, sep, port = hostport.rpartition(":")
    if not sep:
        raise ConfigError(f"address {hostport}: missing port in address")
    if ":" in host:
        raise ConfigError(f"address {hostport}: too many colons in address")
    if "[" in host or "]" in host:
        raise ConfigError(f"address {hostport}: unexpected bracket in address")
    return host, port


def load_external_authz(environ: Optional[Mapping[str, str]] = None) -> ExternalAuthzConfig:
    """Build the external authorization config from the environment.

    It is disabled when KOURIER_EXTAUTHZ_HOST is unset or empty.
    """
    env = os.environ if environ is None else environ
    if not env.get(f"{ENV_PREFIX}_HOST"):
        return ExternalAuthzConfig(enabled=False)

    settings = ExtAuthzSettings.from_env(env)
    if not is_valid_ext_authz_protocol(settings.protocol):
        allowed = ", ".join(p.value for p in ExtAuthzProtocol)
        raise ConfigError(f"protocol {settings.protocol} is invalid, must be in [{allowed}]")

    host, port_text = _split_host_port(settings.host)
    if not _DECIMAL.fullmatch(port_text):
        raise ConfigError(f"invalid port {port_text!r}")
    port = int(port_text)
    if port > UNIX_MAX_PORT:
        raise ConfigError(f"port {port} bigger than {UNIX_MAX_PORT}")
    if port < 0:
        raise ConfigError(f"port {port} is negative")

    return ExternalAuthzConfig(
        enabled=True,
        cluster=ext_authz_cluster(host, port, settings.protocol),
        http_filter=external_authz_filter(settings),
    )


@functools.lru_cache(maxsize=None)
def external_authz() -> ExternalAuthzConfig:
    """Return the process-wide external authorization config."""
    return load_external_authz()