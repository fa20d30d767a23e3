"""
Logging utilities for proxy request debugging and tracing.
"""
import logging
from typing import Iterable, Tuple
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)

REDACTED_HEADERS = ('authorization', 'cookie', 'set-cookie', 'proxy-authorization', 'x-api-key')


def describe_target(target_url: str) -> str:
    """Scheme, host and path of a target, without the query string"""
    parts = urlsplit(target_url)
    return f"{parts.scheme}://{parts.netloc}{parts.path}"


def log_proxy_request(request_id: str, method: str, target_url: str, headers: Iterable[Tuple[str, str]], has_body: bool):
    """Log a forwarded request at debug level with credentials redacted"""
    if not logger.isEnabledFor(logging.DEBUG):
        return
    logger.debug(f"[{request_id}] {method} -> {describe_target(target_url)} (body: {'yes' if has_body else 'no'})")
    for header_name, header_value in headers:
        if header_name.lower() in REDACTED_HEADERS:
            logger.debug(f"[{request_id}] {header_name}: [REDACTED]")
        else:
            logger.debug(f"[{request_id}] {header_name}: {header_value}")
