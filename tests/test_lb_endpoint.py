from kourier.envoy.lb_endpoint import new_lb_endpoint


def test_new_lb_endpoint():
    endpoint = new_lb_endpoint("127.0.0.1", 8080)
    socket_address = endpoint["endpoint"]["address"]["socketAddress"]
    assert socket_address["address"] == "127.0.0.1"
    assert socket_address["portValue"] == 8080


def test_new_lb_endpoint_is_tcp_and_ipv4_compatible():
    socket_address = new_lb_endpoint("10.0.0.1", 1234)["endpoint"]["address"]["socketAddress"]
    assert socket_address["protocol"] == "TCP"
    assert socket_address["ipv4Compat"] is True