"""
Cross-origin policy: which sites may call the gateway from a browser.
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from oauth import RedirectAllowlist

ALLOWED_METHODS = [
    "GET",
    "POST",
    "PUT",
    "DELETE",
    "PATCH",
    "OPTIONS",
    "HEAD",
    # WebDAV
    "PROPFIND",
    "PROPPATCH",
    "MKCOL",
    "COPY",
    "MOVE",
    "LOCK",
    "UNLOCK",
    "REPORT",
    "SEARCH",
    "ACL",
    # CalDAV
    "MKCALENDAR",
    "TRACE",
    "CONNECT",
]

ALLOWED_HEADERS = [
    "Content-Type",
    "Authorization",
    "X-Requested-With",
    # WebDAV
    "Depth",
    "Destination",
    "If",
    "Accept-Encoding",
]

PREFLIGHT_MAX_AGE = 86400  # 24 hours


def install_cors(app: FastAPI, allowlist: RedirectAllowlist):
    """Allow cross-origin calls from the origins of the allowlisted prefixes"""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowlist.cors_origins(),
        allow_methods=ALLOWED_METHODS,
        allow_headers=ALLOWED_HEADERS,
        max_age=PREFLIGHT_MAX_AGE,
    )
