"""
frpc GUI - a desktop control panel for the frpc reverse-tunnel client.
"""

from .settings import APP_NAME, APP_VERSION

__all__ = ["APP_NAME", "APP_VERSION"]
