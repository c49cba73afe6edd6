"""
Serialization of the panel state: the INI file handed to frpc and the YAML
tunnel profiles users import and export.
"""

import io
import logging
import configparser
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .exceptions import ProfileError
from .models import AppConfig, ProxyItem

logger = logging.getLogger(__name__)

COMMON_SECTION = "common"
RESERVED_SECTIONS = {COMMON_SECTION, configparser.DEFAULTSECT}


def section_names(proxies: List[ProxyItem]) -> List[str]:
    """One unique INI section name per tunnel, in list order.

    The tunnel name is flattened to one line without brackets. Blank names
    become service_<id>; names shared by several tunnels, or clashing with a
    reserved section, become <name>_<id> for every tunnel involved.
    """
    trimmed = [_section_part(p.name) for p in proxies]
    counts: Dict[str, int] = {}
    for name in trimmed:
        if name:
            counts[name] = counts.get(name, 0) + 1

    names = []
    used = set(RESERVED_SECTIONS)
    for proxy, name in zip(proxies, trimmed):
        suffix = _section_part(proxy.id)
        if not name:
            name = f"service_{suffix}"
        elif counts[name] > 1 or name in RESERVED_SECTIONS:
            name = f"{name}_{suffix}"
        base, n = name, 2
        while name in used:
            name = f"{base}_{n}"
            n += 1
        used.add(name)
        names.append(name)
    return names


def _clean(value: Optional[str]) -> str:
    return (value or "").replace("\r", " ").replace("\n", " ").strip()


def _section_part(value: Optional[str]) -> str:
    return _clean(value).replace("[", "").replace("]", "").strip()


class ConfigManager:
    """Builds the frpc config and reads/writes tunnel profiles."""

    @staticmethod
    def build_sections(server_addr: str, server_port: str, token: str,
                       proxies: List[ProxyItem]) -> Dict[str, Dict[str, str]]:
        common = {
            "server_addr": _clean(server_addr),
            "server_port": _clean(server_port),
        }
        if _clean(token):
            common["token"] = _clean(token)
        common["login_fail_exit"] = "false"

        sections = {COMMON_SECTION: common}
        for name, proxy in zip(section_names(proxies), proxies):
            section = {
                "type": proxy.type,
                "local_ip": _clean(proxy.local_ip),
                "local_port": _clean(proxy.local_port),
            }
            if _clean(proxy.remote_port):
                section["remote_port"] = _clean(proxy.remote_port)
            if _clean(proxy.custom_domains):
                section["custom_domains"] = _clean(proxy.custom_domains)
            sections[name] = section
        return sections

    @staticmethod
    def build_ini(server_addr: str, server_port: str, token: str,
                  proxies: List[ProxyItem]) -> str:
        parser = configparser.ConfigParser(interpolation=None)
        parser.read_dict(ConfigManager.build_sections(server_addr, server_port, token, proxies))

        buf = io.StringIO()
        parser.write(buf, space_around_delimiters=False)
        return buf.getvalue()

    @staticmethod
    def save_text(text: str, path: Path):
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(text)

    @staticmethod
    def export_profile(config: AppConfig, path: Path):
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, 'w', encoding='utf-8') as f:
                yaml.safe_dump(config.to_dict(), f, default_flow_style=False,
                               sort_keys=False, allow_unicode=True)
        except OSError as e:
            raise ProfileError(f"Cannot write profile {path}: {e}") from e

    @staticmethod
    def import_profile(path: Path) -> Optional[AppConfig]:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data: Any = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Cannot read profile %s: %s", path, e)
            return None

        if not isinstance(data, dict):
            logger.warning("Profile %s is not a mapping", path)
            return None
        return AppConfig.from_dict(data)
