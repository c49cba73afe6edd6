import pytest

from frpc_gui.models import ProxyItem
from frpc_gui.validation import (
    FieldErrors, ValidationError, hints_from_errors, is_valid_port, merge_hints,
    validate_config_fields, validate_proxies_for_start, validate_start_input,
)


@pytest.mark.parametrize("port", ["1", "80", "7000", "65535"])
def test_valid_ports(port):
    assert is_valid_port(port)


@pytest.mark.parametrize("port", ["", "0", "65536", "-1", "80a", " 80", "80\n", "1.5", "99999999"])
def test_invalid_ports(port):
    assert not is_valid_port(port)


def test_tcp_requires_remote_port(tcp_proxy):
    tcp_proxy.remote_port = ""
    errors = validate_proxies_for_start([tcp_proxy])
    assert [(e.index, e.field) for e in errors] == [(0, "remote_port")]
    assert errors[0].message == "Tunnel ssh: remote_port is invalid"


def test_udp_rejects_out_of_range_ports():
    proxy = ProxyItem(id="u", name="", type="udp", local_port="70000", remote_port="0")
    errors = validate_proxies_for_start([proxy])
    assert [e.field for e in errors] == ["local_port", "remote_port"]
    # unnamed tunnels are referred to by position
    assert errors[0].message.startswith("Tunnel 1:")


def test_http_requires_domain(http_proxy):
    http_proxy.custom_domains = "   "
    errors = validate_proxies_for_start([http_proxy])
    assert [(e.index, e.field) for e in errors] == [(0, "custom_domains")]


def test_https_without_remote_port_is_fine(http_proxy):
    http_proxy.type = "https"
    assert validate_proxies_for_start([http_proxy]) == []


def test_start_input_server_checks():
    errors = validate_start_input("", "7000", [])
    assert errors == [ValidationError(-1, "server_addr", "Server address is required")]

    errors = validate_start_input("frp.example.com", "abc", [])
    assert [e.field for e in errors] == ["server_port"]


def test_start_input_server_errors_come_first(tcp_proxy):
    tcp_proxy.local_port = "x"
    errors = validate_start_input("  ", "0", [tcp_proxy])
    assert [e.field for e in errors] == ["server_addr", "server_port", "local_port"]


def test_valid_start_input(tcp_proxy, http_proxy):
    assert validate_start_input("1.2.3.4", "7000", [tcp_proxy, http_proxy]) == []


def test_live_hints_ignore_empty_fields():
    fresh = ProxyItem(id="n", name="service_1", type="tcp", local_port="", remote_port="")
    errors = validate_config_fields("127.0.0.1", "", [fresh])
    assert not errors
    assert errors.server == {}
    assert errors.proxies == {}


def test_live_hints_flag_malformed_ports(tcp_proxy):
    tcp_proxy.local_port = "99999"
    tcp_proxy.remote_port = "6x"
    errors = validate_config_fields("", "70000", [tcp_proxy])
    assert errors.server == {"serverAddr": "err_required", "serverPort": "err_invalid_port"}
    assert errors.proxies == {0: {"local_port": "err_invalid_port", "remote_port": "err_invalid_port"}}


def test_live_domain_hint_needs_touched_domain_and_local_port():
    untouched = ProxyItem(id="1", name="a", type="http", local_port="80", custom_domains=None)
    no_port = ProxyItem(id="2", name="b", type="http", local_port="", custom_domains="")
    cleared = ProxyItem(id="3", name="c", type="https", local_port="443", custom_domains="")
    errors = validate_config_fields("host", "7000", [untouched, no_port, cleared])
    assert errors.proxies == {2: {"custom_domains": "err_domain_required"}}


def test_live_hints_do_not_check_remote_port_for_http():
    proxy = ProxyItem(id="1", name="a", type="http", local_port="80",
                      remote_port="bogus", custom_domains="a.example.com")
    assert validate_config_fields("host", "7000", [proxy]).proxies == {}


def test_hints_from_submit_errors():
    errors = [
        ValidationError(-1, "server_addr", "Server address is required"),
        ValidationError(1, "custom_domains", "Tunnel web: custom domain is required"),
    ]
    hints = hints_from_errors(errors)
    assert hints.server == {"serverAddr": "err_required"}
    assert hints.proxies == {1: {"custom_domains": "err_domain_required"}}


def test_merge_prefers_live_hints():
    live = FieldErrors(server={"serverPort": "err_invalid_port"}, proxies={0: {"local_port": "err_invalid_port"}})
    submitted = FieldErrors(server={"serverAddr": "err_required"},
                            proxies={0: {"remote_port": "err_invalid_port"}, 2: {"local_port": "err_invalid_port"}})
    merged = merge_hints(live, submitted)
    assert merged.server == {"serverAddr": "err_required", "serverPort": "err_invalid_port"}
    assert merged.proxies[0] == {"remote_port": "err_invalid_port", "local_port": "err_invalid_port"}
    assert merged.proxies[2] == {"local_port": "err_invalid_port"}
