"""
Endpoint handlers for the gateway.
"""
from .health import router as health_router
from .github_oauth import router as github_oauth_router
from .reverse_proxy import router as reverse_proxy_router

__all__ = [
    'health_router',
    'github_oauth_router',
    'reverse_proxy_router',
]
