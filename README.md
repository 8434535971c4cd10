# kourier

Building blocks for the Kourier ingress gateway:

- `kourier.config` – gateway names, ports and namespaces, and parsing of the
  `config-kourier` config map;
- `kourier.ext_authz` – external authorization settings read from the
  environment, and the Envoy cluster and HTTP filter built from them;
- `kourier.envoy` – builders for the Envoy v3 resources the gateway serves:
  clusters, load-balancer endpoints, weighted clusters, routes, virtual hosts,
  HTTP connection managers and route configurations;
- `kourier.health` – a gRPC health probe, also available as the `kourier`
  command.

The builders return plain dictionaries in Envoy's JSON form (camel-case field
names, durations as strings such as `"5s"`, typed configs carrying an `"@type"`
URL), ready to be serialized or handed to an xDS server.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Health probe

The `kourier` command checks the standard gRPC health service at the given
address:

```
kourier --probe-addr localhost:18000
```

`-probe-addr` is accepted as well; the option is required. The probe waits at
most 0.1 seconds for the connection and for the `grpc.health.v1.Health/Check`
call (made with an empty service name), logs the outcome and exits with:

| Exit code | Meaning                                          |
|-----------|--------------------------------------------------|
| 0         | the service reported `SERVING`                   |
| 2         | the connection could not be established          |
| 3         | the health call failed                           |
| 4         | the call succeeded but the service is not serving |

The same check is available from Python, with an optional timeout in seconds:

```python
from kourier.health import check, ServingStatus

exit_code = check("localhost:18000", timeout=0.5)
```

`ServingStatus` lists the status values a health response can carry.

## Gateway configuration

`kourier.config` reads the data of the `config-kourier` config map:

```python
from kourier.config import new_config_from_map, ConfigError

try:
    cfg = new_config_from_map({
        "enable-service-access-logging": "false",
        "enable-proxy-protocol": "true",
        "cluster-cert-secret": "my-cert",
    })
except ConfigError as err:
    print("bad configuration:", err)
```

The result is a `Kourier` dataclass with `enable_service_access_logging`,
`enable_proxy_protocol` and `cluster_cert_secret`. Keys that are absent keep
the values of `default_config()`: access logging on, proxy protocol off, no
cluster certificate secret. Booleans accept `1`, `t`, `T`, `true`, `TRUE`,
`True` and their false counterparts; anything else raises `ConfigError`.
`new_config_from_config_map()` does the same for a whole config map, given as
a mapping with a `data` entry or an object with a `data` attribute.

Other helpers:

- `gateway_namespace()` returns `KOURIER_GATEWAY_NAMESPACE`, falling back to
  `SYSTEM_NAMESPACE`; it raises `ConfigError` when neither is set.
- `service_hostnames()` returns the host names of the external (`kourier`)
  and internal (`kourier-internal`) services in that namespace, such as
  `kourier.kourier-system.svc.cluster.local`. The cluster domain comes from
  `CLUSTER_DOMAIN`, else from the search list in `/etc/resolv.conf`, else
  `cluster.local`.
- `get_disable_http2(annotations)` returns the value of the
  `kourier.knative.dev/disable-http2` annotation, or an empty string.

## External authorization

External authorization is switched on by setting `KOURIER_EXTAUTHZ_HOST` to a
`host:port` pair. Further settings come from the environment:

| Variable                             | Default |
|--------------------------------------|---------|
| `KOURIER_EXTAUTHZ_PROTOCOL`          | `grpc` (also `http`, `https`) |
| `KOURIER_EXTAUTHZ_TIMEOUT`           | `2000` milliseconds |
| `KOURIER_EXTAUTHZ_MAXREQUESTBYTES`   | `8192` |
| `KOURIER_EXTAUTHZ_FAILUREMODEALLOW`  | `false` |
| `KOURIER_EXTAUTHZ_PATHPREFIX`        | empty |
| `KOURIER_EXTAUTHZ_ALLOWEDHEADER`     | empty |

```python
from kourier.ext_authz import load_external_authz

authz = load_external_authz({"KOURIER_EXTAUTHZ_HOST": "authz.example.com:6000"})
print(authz.enabled, authz.cluster["name"], authz.http_filter["name"])
```

`load_external_authz()` reads `os.environ` when given no mapping. It returns an
`ExternalAuthzConfig` that is disabled when the host is unset or empty, and
otherwise holds the `extAuthz` cluster and the `envoy.filters.http.ext_authz`
filter. An unknown protocol, a malformed address or a port outside 0–65535
raises `ConfigError`.

The pieces are usable on their own: `ExtAuthzSettings.from_env()`,
`is_valid_ext_authz_protocol()`, `ext_authz_cluster(host, port, protocol)` and
`external_authz_filter(settings)`. With the `http` and `https` protocols an
`allowed_header` setting restricts the headers sent to the service to those
with that prefix.

`external_authz()` loads the configuration from the process environment once
and caches it; when it is enabled, its filter is placed in front of the router
filter of every connection manager built by `new_http_connection_manager`.

## Envoy resource builders

```python
from datetime import timedelta

from kourier.envoy.cluster import DiscoveryType, new_cluster
from kourier.envoy.lb_endpoint import new_lb_endpoint
from kourier.envoy.weighted_cluster import new_weighted_cluster
from kourier.envoy.route import new_route
from kourier.envoy.virtual_host import new_virtual_host
from kourier.envoy.http_connection_manager import (
    new_http_connection_manager,
    new_route_config,
)

endpoints = [new_lb_endpoint("10.0.0.1", 8080), new_lb_endpoint("10.0.0.2", 8080)]
cluster = new_cluster("default/hello", timedelta(seconds=5), endpoints,
                      True, None, DiscoveryType.STATIC)

split = new_weighted_cluster("default/hello", 100, {"K-Network-Hash": "abc"})
route = new_route("hello", [], "/", [split], timedelta(seconds=30), {}, "")
vhost = new_virtual_host("hello", ["hello.example.com"], [route])

routes = new_route_config("external_services", [vhost])
manager = new_http_connection_manager("external_services", True, False)
```

Notes:

- Timeouts are a `timedelta` or a number of seconds.
- `new_cluster` with `is_http2` set adds upstream HTTP/2 protocol options.
- Request headers given to routes and weighted clusters replace any existing
  value rather than being appended (`headers_to_add` in
  `kourier.envoy.headers`).
- Routes match on a path prefix, allow websocket upgrades, and rewrite the
  host when `host_rewrite` is non-empty.
- `new_redirect_route` builds an HTTPS redirect, `new_route_ext_authz_disabled`
  a route that bypasses external authorization, and
  `new_virtual_host_with_ext_authz` a virtual host that passes context
  extensions to the authorization service.
- `new_http_connection_manager` fetches its routes over ADS, logs access to
  `/dev/stdout` when asked, and uses the client's real remote address when
  proxy protocol is enabled. `new_route_config` sets `validateClusters`.

## What this package does not do

It does not watch ingresses or reconcile them into Envoy configuration, and it
does not run an xDS management server: it builds the resources and reads the
configuration, and the `kourier` command only runs the health probe.