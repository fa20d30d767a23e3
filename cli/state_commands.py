"""Operator commands for minting and inspecting state tokens"""

from datetime import datetime

from rich.console import Console

import settings
from oauth import StateCodec, StateError


def _codec(console: Console):
    if not settings.ENCRYPTION_SECRET:
        console.print("[red]ERROR:[/red] ENCRYPTION_SECRET is not set")
        return None
    return StateCodec(settings.ENCRYPTION_SECRET)


def encode_state_command(console: Console, payload: str, ttl_seconds: int = 0) -> int:
    """Print a state token for ``payload``; returns the process exit code"""
    codec = _codec(console)
    if codec is None:
        return 1
    console.print(codec.encode_for(payload, ttl_seconds), soft_wrap=True)
    if ttl_seconds > 0:
        expires = datetime.fromtimestamp(datetime.now().timestamp() + ttl_seconds)
        console.print(f"[dim]Expires {expires.isoformat(timespec='seconds')}[/dim]")
    return 0


def decode_state_command(console: Console, token: str) -> int:
    """Print the payload of ``token`` or the reason it was rejected"""
    codec = _codec(console)
    if codec is None:
        return 1
    try:
        payload = codec.decode(token)
    except StateError as e:
        console.print(f"[red]{e.kind.value}:[/red] {e.message}")
        return 2
    console.print(payload, soft_wrap=True, markup=False)
    return 0
