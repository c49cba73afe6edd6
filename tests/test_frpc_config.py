import configparser

import yaml

from frpc_gui.frpc_config import ConfigManager, section_names
from frpc_gui.models import AppConfig, ProxyItem


def parse(text):
    parser = configparser.ConfigParser(interpolation=None)
    parser.read_string(text)
    return parser


def test_common_section(tcp_proxy):
    text = ConfigManager.build_ini("frp.example.com", "7000", "s3cret%", [tcp_proxy])
    parser = parse(text)
    assert parser.sections()[0] == "common"
    assert dict(parser["common"]) == {
        "server_addr": "frp.example.com",
        "server_port": "7000",
        "token": "s3cret%",
        "login_fail_exit": "false",
    }
    assert "server_addr=frp.example.com" in text


def test_token_omitted_when_blank():
    parser = parse(ConfigManager.build_ini("1.2.3.4", "7000", "  ", []))
    assert "token" not in parser["common"]
    assert parser.sections() == ["common"]


def test_tunnel_sections(tcp_proxy, http_proxy):
    parser = parse(ConfigManager.build_ini("1.2.3.4", "7000", "", [tcp_proxy, http_proxy]))
    assert parser.sections() == ["common", "ssh", "web"]
    assert dict(parser["ssh"]) == {
        "type": "tcp", "local_ip": "127.0.0.1", "local_port": "22", "remote_port": "6000",
    }
    assert dict(parser["web"]) == {
        "type": "http", "local_ip": "127.0.0.1", "local_port": "8080",
        "custom_domains": "example.com",
    }


def test_section_name_is_trimmed():
    proxy = ProxyItem(id="x", name="  db  ", local_port="5432", remote_port="15432")
    assert section_names([proxy]) == ["db"]


def test_blank_name_falls_back_to_id():
    proxy = ProxyItem(id="abc", name="   ", local_port="1", remote_port="2")
    assert section_names([proxy]) == ["service_abc"]


def test_duplicate_names_get_distinct_sections():
    first = ProxyItem(id="111", name="web", local_port="80", remote_port="8080")
    second = ProxyItem(id="222", name=" web ", local_port="81", remote_port="8081")
    names = section_names([first, second])
    assert names == ["web_111", "web_222"]

    parser = parse(ConfigManager.build_ini("h", "7000", "", [first, second]))
    assert parser["web_111"]["local_port"] == "80"
    assert parser["web_222"]["local_port"] == "81"


def test_reserved_section_names_do_not_clobber_common():
    proxy = ProxyItem(id="9", name="common", local_port="80", remote_port="8080")
    parser = parse(ConfigManager.build_ini("h", "7000", "", [proxy]))
    assert parser["common"]["server_addr"] == "h"
    assert parser["common_9"]["remote_port"] == "8080"


def test_newlines_in_values_are_flattened():
    proxy = ProxyItem(id="1", name="x", type="http", local_port="80", custom_domains="a.com\nb.com")
    parser = parse(ConfigManager.build_ini("h", "7000", "", [proxy]))
    assert parser["x"]["custom_domains"] == "a.com b.com"


def test_profile_export_import(tmp_path, tcp_proxy, http_proxy):
    config = AppConfig(language="en", server_addr="frp.example.com", server_port="7001",
                       token="t", proxies=[tcp_proxy, http_proxy])
    path = tmp_path / "profiles" / "home.yaml"
    ConfigManager.export_profile(config, path)

    with open(path, encoding="utf-8") as f:
        raw = yaml.safe_load(f)
    assert raw["serverAddr"] == "frp.example.com"
    assert "custom_domains" not in raw["proxies"][0]

    assert ConfigManager.import_profile(path) == config


def test_import_rejects_bad_files(tmp_path):
    assert ConfigManager.import_profile(tmp_path / "missing.yaml") is None

    broken = tmp_path / "broken.yaml"
    broken.write_text("serverAddr: [unclosed", encoding="utf-8")
    assert ConfigManager.import_profile(broken) is None

    scalar = tmp_path / "scalar.yaml"
    scalar.write_text("just text", encoding="utf-8")
    assert ConfigManager.import_profile(scalar) is None


def test_names_cannot_inject_sections_or_keys():
    proxy = ProxyItem(id="1", name="web\nserver_addr=evil\n[common", local_port="80", remote_port="8080")
    parser = parse(ConfigManager.build_ini("h", "7000", "", [proxy]))
    assert parser.sections() == ["common", "web server_addr=evil common"]
    assert parser["common"]["server_addr"] == "h"


def test_bracketed_name_clashing_with_common():
    proxy = ProxyItem(id="7", name="[common]", local_port="80", remote_port="8080")
    assert section_names([proxy]) == ["common_7"]


def test_empty_ids_still_give_distinct_sections():
    first = ProxyItem(id="", name="web", local_port="80", remote_port="8080")
    second = ProxyItem(id="", name="web", local_port="81", remote_port="8081")
    assert section_names([first, second]) == ["web_", "web__2"]
