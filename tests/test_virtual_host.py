from kourier.envoy.virtual_host import new_virtual_host, new_virtual_host_with_ext_authz

EXT_AUTHZ = "envoy.filters.http.ext_authz"


def test_virtual_host():
    got = new_virtual_host("test", ["foo", "bar"], [{"name": "baz"}])
    assert got == {"name": "test", "domains": ["foo", "bar"], "routes": [{"name": "baz"}]}


def test_virtual_host_with_ext_authz():
    got = new_virtual_host_with_ext_authz("test", None, ["foo", "bar"], [{"name": "baz"}])
    assert got["name"] == "test"
    assert got["domains"] == ["foo", "bar"]
    assert got["routes"] == [{"name": "baz"}]
    assert got["typedPerFilterConfig"][EXT_AUTHZ]["checkSettings"] == {}


def test_virtual_host_with_ext_authz_context_extensions():
    got = new_virtual_host_with_ext_authz("test", {"client": "a"}, ["foo"], [])
    settings = got["typedPerFilterConfig"][EXT_AUTHZ]["checkSettings"]
    assert settings == {"contextExtensions": {"client": "a"}}