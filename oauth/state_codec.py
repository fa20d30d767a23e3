"""Encrypted, self-contained state tokens

A token is ``base64url(version || nonce || AES-GCM(ciphertext + tag))`` with the
padding stripped. The plaintext is a compact JSON object holding the payload
and an optional absolute expiry (epoch seconds). The AES key is derived once
per codec from the shared secret with HKDF-SHA256.
"""

import base64
import binascii
import json
import logging
import secrets
import time
from typing import Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from .errors import ErrorKind, StateError

logger = logging.getLogger(__name__)

TOKEN_VERSION = 1
NONCE_SIZE = 12
TAG_SIZE = 16
KEY_INFO = b"github-login-gateway/state-token/v1"


def _b64encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def _b64decode(token: str) -> bytes:
    padded = token + "=" * (-len(token) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii"))


class StateCodec:
    """Encrypts and decrypts opaque string payloads under one shared secret"""

    def __init__(self, secret: str):
        if not secret:
            raise ValueError("State encryption secret must not be empty")
        key = HKDF(
            algorithm=hashes.SHA256(),
            length=32,
            salt=None,
            info=KEY_INFO,
        ).derive(secret.encode("utf-8"))
        self._aesgcm = AESGCM(key)

    def encode(self, payload: str, expires_at: Optional[float] = None) -> str:
        """Encrypt ``payload`` into a URL-safe token

        Args:
            payload: Arbitrary UTF-8 string (return URL, bearer credential, ...)
            expires_at: Optional absolute expiry as epoch seconds

        Returns:
            Token string; identical payloads yield different tokens
        """
        plaintext = json.dumps(
            {"p": payload, "e": expires_at},
            separators=(",", ":"),
            ensure_ascii=False,
        ).encode("utf-8")
        nonce = secrets.token_bytes(NONCE_SIZE)
        header = bytes([TOKEN_VERSION])
        ciphertext = self._aesgcm.encrypt(nonce, plaintext, header)
        return _b64encode(header + nonce + ciphertext)

    def encode_for(self, payload: str, ttl_seconds: int, now: Optional[float] = None) -> str:
        """Encrypt ``payload`` valid for ``ttl_seconds``; a ttl of 0 or less means no expiry"""
        if ttl_seconds <= 0:
            return self.encode(payload)
        now = time.time() if now is None else now
        return self.encode(payload, expires_at=now + ttl_seconds)

    def decode(self, token: str, now: Optional[float] = None) -> str:
        """Decrypt a token produced by encode

        Raises:
            StateError: kind STATE_MALFORMED for structurally invalid tokens,
                STATE_TAMPERED when authentication fails (corruption or a
                different secret), STATE_EXPIRED once ``now`` is past expiry.
        """
        if not token or not isinstance(token, str):
            raise StateError("State token is empty.", ErrorKind.STATE_MALFORMED)

        try:
            raw = _b64decode(token)
        except (binascii.Error, ValueError, UnicodeEncodeError):
            raise StateError("State token is not valid base64.", ErrorKind.STATE_MALFORMED)

        if len(raw) < 1 + NONCE_SIZE + TAG_SIZE:
            raise StateError("State token is truncated.", ErrorKind.STATE_MALFORMED)
        if raw[0] != TOKEN_VERSION:
            raise StateError("State token version is not supported.", ErrorKind.STATE_MALFORMED)

        header, nonce, ciphertext = raw[:1], raw[1:1 + NONCE_SIZE], raw[1 + NONCE_SIZE:]
        try:
            plaintext = self._aesgcm.decrypt(nonce, ciphertext, header)
        except InvalidTag:
            raise StateError("State token failed integrity check.", ErrorKind.STATE_TAMPERED)

        try:
            data = json.loads(plaintext.decode("utf-8"))
            payload = data["p"]
            expires_at = data.get("e")
        except (UnicodeDecodeError, json.JSONDecodeError, KeyError, TypeError, AttributeError):
            raise StateError("State token payload is malformed.", ErrorKind.STATE_MALFORMED)
        if not isinstance(payload, str):
            raise StateError("State token payload is malformed.", ErrorKind.STATE_MALFORMED)

        if expires_at is not None:
            now = time.time() if now is None else now
            if now > expires_at:
                logger.debug("Rejected expired state token")
                raise StateError("State token has expired.", ErrorKind.STATE_EXPIRED)

        return payload
