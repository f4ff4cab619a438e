"""DingTalk robot request signing."""

from __future__ import annotations

import base64
import hashlib
import hmac
import time


def now_ms() -> int:
    """Current wall-clock time in milliseconds, at second resolution."""
    return int(time.time()) * 1000


def sign(secret: str, timestamp_ms: int) -> str:
    """Base64 HMAC-SHA256 of ``"<timestamp>\\n<secret>"`` keyed by the secret."""
    payload = f"{timestamp_ms}\n{secret}".encode("utf-8")
    digest = hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def build_query(access_token: str, secret: str, timestamp_ms: int) -> dict[str, str]:
    """Query parameters for one robot call.

    ``timestamp`` and ``sign`` are only attached when a secret is configured.
    """
    params = {"access_token": access_token}
    if secret:
        params["timestamp"] = str(timestamp_ms)
        params["sign"] = sign(secret, timestamp_ms)
    return params
