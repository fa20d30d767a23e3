"""Configuration display for the CLI"""

from rich.console import Console
from rich.table import Table

import settings
from config import load_redirect_allowlist


def _is_set(value: str) -> str:
    return "[green]set[/green]" if value else "[red]missing[/red]"


def show_config(console: Console):
    """Display the effective configuration without revealing secrets"""
    table = Table(title="Gateway Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    table.add_row("Bind Address", f"{settings.BIND_ADDRESS}:{settings.PORT}")
    table.add_row("OAuth Path Prefix", settings.OAUTH_PATH_PREFIX or "/")
    table.add_row("GitHub Client ID", settings.GITHUB_CLIENT_ID or "[red]missing[/red]")
    table.add_row("GitHub Client Secret", _is_set(settings.GITHUB_CLIENT_SECRET))
    table.add_row("Encryption Secret", _is_set(settings.ENCRYPTION_SECRET))
    table.add_row("GitHub App Slug", settings.GITHUB_APP_SLUG)
    table.add_row("Credential Delivery", settings.CREDENTIAL_DELIVERY)
    table.add_row("State TTL", f"{settings.STATE_TTL_SECONDS}s")
    table.add_row("Session TTL", f"{settings.SESSION_TTL_SECONDS}s")

    allowlist = settings.REDIRECT_ALLOWLIST or load_redirect_allowlist(settings.REDIRECT_ALLOWLIST_FILE or None)
    table.add_row("Redirect Allowlist", "\n".join(allowlist) if allowlist else "[red]empty[/red]")

    console.print(table)
