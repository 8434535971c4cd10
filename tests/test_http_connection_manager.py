import pytest

from kourier.envoy.http_connection_manager import (
    new_http_connection_manager,
    new_route_config,
)
from kourier.envoy.virtual_host import new_virtual_host
from kourier.ext_authz import external_authz

EXT_AUTHZ_VARS = [
    "KOURIER_EXTAUTHZ_HOST",
    "KOURIER_EXTAUTHZ_PROTOCOL",
    "KOURIER_EXTAUTHZ_TIMEOUT",
]


@pytest.fixture(autouse=True)
def clean_ext_authz(monkeypatch):
    for name in EXT_AUTHZ_VARS:
        monkeypatch.delenv(name, raising=False)
    external_authz.cache_clear()
    yield
    external_authz.cache_clear()


def test_without_access_log_without_proxy_protocol():
    manager = new_http_connection_manager("test", False, False)
    assert "accessLog" not in manager
    assert "useRemoteAddress" not in manager


def test_with_access_log_without_proxy_protocol():
    manager = new_http_connection_manager("test", True, False)
    assert "useRemoteAddress" not in manager
    assert manager["accessLog"][0]["typedConfig"]["path"] == "/dev/stdout"


def test_without_access_log_with_proxy_protocol():
    manager = new_http_connection_manager("test", False, True)
    assert "accessLog" not in manager
    assert manager["useRemoteAddress"] is True


def test_with_access_log_with_proxy_protocol():
    manager = new_http_connection_manager("test", True, True)
    assert manager["useRemoteAddress"] is True
    assert manager["accessLog"][0]["typedConfig"]["path"] == "/dev/stdout"


def test_rds_and_filters_without_ext_authz():
    manager = new_http_connection_manager("my-routes", False, False)
    assert manager["rds"]["routeConfigName"] == "my-routes"
    assert manager["rds"]["configSource"]["initialFetchTimeout"] == "10s"
    assert manager["httpFilters"] == [{"name": "envoy.filters.http.router"}]
    assert manager["statPrefix"] == "ingress_http"


def test_ext_authz_filter_precedes_router(monkeypatch):
    monkeypatch.setenv("KOURIER_EXTAUTHZ_HOST", "example.com:50051")
    external_authz.cache_clear()
    manager = new_http_connection_manager("test", False, False)
    names = [f["name"] for f in manager["httpFilters"]]
    assert names == ["envoy.filters.http.ext_authz", "envoy.filters.http.router"]


def test_new_route_config():
    vhost = new_virtual_host("test", ["foo", "bar"], [{"name": "baz"}])
    got = new_route_config("test", [vhost])
    assert got == {"name": "test", "virtualHosts": [vhost], "validateClusters": True}