"""Custom exceptions for the frpc control panel."""


class FrpcGuiError(Exception):
    """Base exception for the control panel."""
    pass


class ProcessLaunchError(FrpcGuiError):
    """Raised when the frpc process cannot be launched"""
    pass


class ProfileError(FrpcGuiError):
    """Raised when a tunnel profile cannot be written"""
    pass
