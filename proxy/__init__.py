"""
GitHub App login gateway - HTTP surface package.

This package provides the FastAPI application with the GitHub App login
endpoints and the generic reverse proxy endpoint.
"""
from .app import create_app
from .forwarder import ReverseProxyForwarder
from .server import GatewayServer

__version__ = "1.0.0"

__all__ = [
    'GatewayServer',
    'ReverseProxyForwarder',
    'create_app',
]
