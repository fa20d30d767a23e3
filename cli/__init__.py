"""CLI package for the GitHub App login gateway

This package provides the command-line interface for running the gateway
and for operator tasks such as generating secrets and inspecting state tokens.
"""

from cli.main import main

__all__ = [
    "main",
]
