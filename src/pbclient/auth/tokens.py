"""Bearer token inspection."""

from __future__ import annotations

import base64
import json
import math
from typing import Optional


def decode_token_expiry(token: str) -> Optional[int]:
    """Return the ``exp`` claim of a JWT-shaped token in epoch milliseconds.

    The payload is the second dot-delimited segment, base64 (standard or
    URL-safe alphabet, padding optional) encoded JSON. Anything malformed or
    missing yields ``None``, meaning the token is treated as non-expiring.
    """
    parts = token.split(".")
    if len(parts) < 2:
        return None

    segment = parts[1].replace("+", "-").replace("/", "_")
    segment += "=" * (-len(segment) % 4)
    try:
        payload = json.loads(base64.urlsafe_b64decode(segment).decode("utf-8"))
    except ValueError:
        return None

    if not isinstance(payload, dict):
        return None
    exp = payload.get("exp")
    if isinstance(exp, bool) or not isinstance(exp, (int, float)) or not math.isfinite(exp):
        return None
    return int(exp * 1000)
