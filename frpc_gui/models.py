"""Data models for the frpc control panel."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

PROXY_TYPES = ["tcp", "udp", "http", "https"]
PORT_TYPES = ("tcp", "udp")
DOMAIN_TYPES = ("http", "https")
LANGUAGES = ("en", "zh")


def _text(data: Dict[str, Any], key: str, default: str) -> str:
    """String value of a stored field; missing and null both mean default."""
    value = data.get(key)
    return default if value is None else str(value)


class AppStatus(Enum):
    """frpc service status"""
    STOPPED = "stopped"
    CONNECTING = "connecting"
    RUNNING = "running"


@dataclass
class ProxyItem:
    """One tunnel definition"""
    id: str
    name: str
    type: str = "tcp"
    local_ip: str = "127.0.0.1"
    local_port: str = ""
    remote_port: Optional[str] = None
    custom_domains: Optional[str] = None

    @property
    def uses_domain(self) -> bool:
        return self.type in DOMAIN_TYPES

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "local_ip": self.local_ip,
            "local_port": self.local_port,
        }
        if self.remote_port is not None:
            data["remote_port"] = self.remote_port
        if self.custom_domains is not None:
            data["custom_domains"] = self.custom_domains
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProxyItem":
        proxy_type = _text(data, "type", "tcp")
        if proxy_type not in PROXY_TYPES:
            proxy_type = "tcp"

        remote_port = data.get("remote_port")
        custom_domains = data.get("custom_domains")
        return cls(
            id=generate_proxy_id() if data.get("id") is None else str(data["id"]),
            name=_text(data, "name", ""),
            type=proxy_type,
            local_ip=_text(data, "local_ip", "127.0.0.1"),
            local_port=_text(data, "local_port", ""),
            remote_port=None if remote_port is None else str(remote_port),
            custom_domains=None if custom_domains is None else str(custom_domains),
        )


@dataclass
class AppConfig:
    """Everything the panel persists between sessions"""
    language: str = "zh"
    server_addr: str = "127.0.0.1"
    server_port: str = "7000"
    token: str = ""
    proxies: List[ProxyItem] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "language": self.language,
            "serverAddr": self.server_addr,
            "serverPort": self.server_port,
            "token": self.token,
            "proxies": [p.to_dict() for p in self.proxies],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AppConfig":
        default = cls()
        language = data.get("language", default.language)
        if language not in LANGUAGES:
            language = default.language

        proxies = data.get("proxies") or []
        return cls(
            language=language,
            server_addr=_text(data, "serverAddr", default.server_addr),
            server_port=_text(data, "serverPort", default.server_port),
            token=_text(data, "token", default.token),
            proxies=[ProxyItem.from_dict(p) for p in proxies if isinstance(p, dict)],
        )

    def copy(self) -> "AppConfig":
        return AppConfig.from_dict(self.to_dict())


@dataclass
class LogEntry:
    """A single line shown in the log viewer"""
    msg: str
    level: str = "info"
    timestamp: str = field(default_factory=lambda: datetime.now().strftime("%H:%M:%S"))


def generate_proxy_id() -> str:
    return uuid.uuid4().hex


def new_proxy(existing: List[ProxyItem]) -> ProxyItem:
    """Default tunnel created by the "add tunnel" action."""
    return ProxyItem(
        id=generate_proxy_id(),
        name=f"service_{len(existing) + 1}",
        type="tcp",
        local_ip="127.0.0.1",
        local_port="80",
        remote_port="",
    )


def remote_address(proxy: ProxyItem, server_addr: str) -> str:
    """Public address of a tunnel, as copied to the clipboard."""
    if proxy.uses_domain:
        return proxy.custom_domains or ""
    return f"{server_addr}:{proxy.remote_port or ''}"
