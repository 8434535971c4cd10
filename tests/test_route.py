from datetime import timedelta

from kourier.envoy.route import (
    new_redirect_route,
    new_route,
    new_route_ext_authz_disabled,
)
from kourier.envoy.weighted_cluster import new_weighted_cluster

EXT_AUTHZ = "envoy.filters.http.ext_authz"
HEADER_MATCH = [{"name": "myHeader", "exactMatch": "strict"}]


def test_new_route_header_match():
    r = new_route("testRoute_12345", HEADER_MATCH, "/my_route", None, 0, None, "")
    assert r["match"]["headers"][0]["name"] == "myHeader"
    assert r["match"]["headers"][0]["exactMatch"] == "strict"
    assert r["match"]["prefix"] == "/my_route"


def test_new_route_host_rewrite():
    r = new_route("testRoute_12345", None, "/my_route", None, 0, None, "test.host")
    assert r["route"]["hostRewriteLiteral"] == "test.host"


def test_new_route_without_host_rewrite():
    r = new_route("testRoute_12345", None, "/my_route", None, 0, None, "")
    assert "hostRewriteLiteral" not in r["route"]


def test_new_route_action_contents():
    clusters = [new_weighted_cluster("a", 100, None)]
    r = new_route("r", None, "/", clusters, timedelta(seconds=30), {"k": "v"}, "")
    assert r["route"]["weightedClusters"] == {"clusters": [{"name": "a", "weight": 100}]}
    assert r["route"]["timeout"] == "30s"
    assert r["route"]["upgradeConfigs"] == [{"upgradeType": "websocket", "enabled": True}]
    assert r["requestHeadersToAdd"] == [
        {"header": {"key": "k", "value": "v"}, "append": False}
    ]


def test_new_route_ext_authz_disabled():
    path = "/.well-known/acme-challenge/-VwB1vAXWaN6mVl3-6JVFTEvf7acguaFDUxsP9UzRkE"
    r = new_route_ext_authz_disabled(
        "testRoute_HTTP01_challenge", HEADER_MATCH, path, None, 0, None, ""
    )
    assert r["match"]["headers"][0]["name"] == "myHeader"
    assert len(r["typedPerFilterConfig"]) != 0
    assert r["typedPerFilterConfig"][EXT_AUTHZ]["disabled"] is True


def test_new_redirect_route():
    r = new_redirect_route("redirect", HEADER_MATCH, "/")
    assert r["redirect"] == {"httpsRedirect": True}
    assert r["match"] == {"prefix": "/", "headers": HEADER_MATCH}
    assert "route" not in r