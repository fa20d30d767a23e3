"""Configuration management package for the login gateway"""

from .loader import ConfigLoader, get_config_loader, load_redirect_allowlist
from .gateway import GatewayConfig

__all__ = [
    "ConfigLoader",
    "GatewayConfig",
    "get_config_loader",
    "load_redirect_allowlist",
]
