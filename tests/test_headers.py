import pytest

from kourier.envoy.headers import headers_to_add


@pytest.mark.parametrize("given", [None, {}])
def test_headers_to_add_empty(given):
    assert headers_to_add(given) == []


def test_headers_to_add_some():
    got = headers_to_add({"foo": "bar", "baz": "lol"})
    want = [
        {"header": {"key": "foo", "value": "bar"}, "append": False},
        {"header": {"key": "baz", "value": "lol"}, "append": False},
    ]

    def by_key(entry):
        return entry["header"]["key"]

    assert sorted(got, key=by_key) == sorted(want, key=by_key)


def test_headers_are_never_appended():
    got = headers_to_add({"a": "1", "b": "2", "c": "3"})
    assert len(got) == 3
    assert all(entry["append"] is False for entry in got)