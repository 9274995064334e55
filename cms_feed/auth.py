"""
cms-feed — Bearer token check.
"""

from __future__ import annotations

import hmac
import logging
from typing import Mapping, Optional

logger = logging.getLogger("cms_feed.auth")

BEARER_PREFIX = "Bearer "


def extract_bearer_token(headers: Mapping[str, str]) -> Optional[str]:
    """Return the token from an ``Authorization: Bearer <token>`` header."""
    auth_header = headers.get("authorization") or headers.get("Authorization") or ""
    if not auth_header.startswith(BEARER_PREFIX):
        return None
    return auth_header[len(BEARER_PREFIX):] or None


def authenticate(headers: Mapping[str, str], secret: str) -> bool:
    """True when the bearer token equals *secret*. An unset secret admits nobody."""
    token = extract_bearer_token(headers)
    if not token or not secret:
        return False
    return hmac.compare_digest(token.encode(), secret.encode())
