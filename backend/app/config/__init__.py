"""Config package exporting loader helpers."""

from .loader import LoggingConfig, RpcConfig, Settings, load_settings

__all__ = ["LoggingConfig", "RpcConfig", "Settings", "load_settings"]
