"""
Field checks for the server settings and tunnel list.

Two flavours live here: the strict checks that gate a start, and the lenient
live-edit checks that only drive inline hints in the editor.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List

from .models import DOMAIN_TYPES, PORT_TYPES, ProxyItem

_DIGITS = re.compile(r"[0-9]+")


@dataclass
class ValidationError:
    """A start-blocking problem. index is -1 for server fields."""
    index: int
    field: str
    message: str


@dataclass
class FieldErrors:
    server: Dict[str, str] = field(default_factory=dict)
    proxies: Dict[int, Dict[str, str]] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return bool(self.server or self.proxies)


def is_valid_port(port: str) -> bool:
    if not port or not _DIGITS.fullmatch(port):
        return False
    return 1 <= int(port) <= 65535


def _label(proxy: ProxyItem, index: int) -> str:
    return proxy.name or str(index + 1)


def validate_proxies_for_start(proxies: List[ProxyItem]) -> List[ValidationError]:
    errors = []

    for index, proxy in enumerate(proxies):
        label = _label(proxy, index)
        if not is_valid_port(proxy.local_port):
            errors.append(ValidationError(index, "local_port",
                                          f"Tunnel {label}: local_port is invalid"))

        if proxy.type in PORT_TYPES:
            if not proxy.remote_port or not is_valid_port(proxy.remote_port):
                errors.append(ValidationError(index, "remote_port",
                                              f"Tunnel {label}: remote_port is invalid"))

        if proxy.type in DOMAIN_TYPES and not (proxy.custom_domains or "").strip():
            errors.append(ValidationError(index, "custom_domains",
                                          f"Tunnel {label}: custom domain is required"))

    return errors


def validate_start_input(server_addr: str, server_port: str,
                         proxies: List[ProxyItem]) -> List[ValidationError]:
    errors = []

    if not server_addr.strip():
        errors.append(ValidationError(-1, "server_addr", "Server address is required"))

    if not is_valid_port(server_port):
        errors.append(ValidationError(-1, "server_port",
                                      "Server port is invalid (must be 1-65535)"))

    return errors + validate_proxies_for_start(proxies)


def validate_config_fields(server_addr: str, server_port: str,
                           proxies: List[ProxyItem]) -> FieldErrors:
    """Inline hints while editing. Values are i18n keys."""
    result = FieldErrors()

    if not server_addr.strip():
        result.server["serverAddr"] = "err_required"

    if server_port.strip() and not is_valid_port(server_port):
        result.server["serverPort"] = "err_invalid_port"

    for index, proxy in enumerate(proxies):
        entry = {}

        if proxy.local_port.strip() and not is_valid_port(proxy.local_port):
            entry["local_port"] = "err_invalid_port"

        if proxy.type in PORT_TYPES:
            if proxy.remote_port and proxy.remote_port.strip() and not is_valid_port(proxy.remote_port):
                entry["remote_port"] = "err_invalid_port"

        # An untouched domain field (None) stays quiet on a fresh tunnel
        if (proxy.type in DOMAIN_TYPES
                and proxy.custom_domains is not None
                and not proxy.custom_domains.strip()
                and proxy.local_port.strip()):
            entry["custom_domains"] = "err_domain_required"

        if entry:
            result.proxies[index] = entry

    return result


SUBMIT_HINTS = {
    "server_addr": ("serverAddr", "err_required"),
    "server_port": ("serverPort", "err_invalid_port"),
    "local_port": ("local_port", "err_invalid_port"),
    "remote_port": ("remote_port", "err_invalid_port"),
    "custom_domains": ("custom_domains", "err_domain_required"),
}


def hints_from_errors(errors: List[ValidationError]) -> FieldErrors:
    """Inline hints for the fields a rejected start complained about."""
    result = FieldErrors()
    for err in errors:
        key, hint = SUBMIT_HINTS.get(err.field, (err.field, "err_required"))
        if err.index < 0:
            result.server[key] = hint
        else:
            result.proxies.setdefault(err.index, {})[key] = hint
    return result


def merge_hints(live: FieldErrors, submitted: FieldErrors) -> FieldErrors:
    merged = FieldErrors(server={**submitted.server, **live.server})
    for index in set(live.proxies) | set(submitted.proxies):
        merged.proxies[index] = {**submitted.proxies.get(index, {}), **live.proxies.get(index, {})}
    return merged
