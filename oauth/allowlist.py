"""Redirect and origin allowlist"""

from typing import Iterable, List, Tuple
from urllib.parse import urlsplit


class RedirectAllowlist:
    """Ordered, non-empty set of URL prefixes loaded once at start

    Membership is a case-sensitive ``str.startswith`` test, not an origin
    parse: ``https://a.example`` also admits ``https://a.example.evil.com``.
    Add a trailing slash to a prefix to pin it to a single host.
    """

    def __init__(self, prefixes: Iterable[str]):
        self._prefixes: Tuple[str, ...] = tuple(p for p in prefixes if p)
        if not self._prefixes:
            raise ValueError("Redirect allowlist must contain at least one URL prefix")

    @property
    def prefixes(self) -> Tuple[str, ...]:
        return self._prefixes

    def is_allowed(self, url: str) -> bool:
        if not url:
            return False
        return any(url.startswith(prefix) for prefix in self._prefixes)

    def cors_origins(self) -> List[str]:
        """Origins (scheme://host[:port]) of the configured prefixes, in order"""
        origins = []
        for prefix in self._prefixes:
            parts = urlsplit(prefix)
            origin = f"{parts.scheme}://{parts.netloc}" if parts.scheme and parts.netloc else prefix
            if origin not in origins:
                origins.append(origin)
        return origins

    def __len__(self) -> int:
        return len(self._prefixes)

    def __repr__(self) -> str:
        return f"RedirectAllowlist({list(self._prefixes)!r})"
