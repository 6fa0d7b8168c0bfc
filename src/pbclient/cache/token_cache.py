"""Login token cache over an injected scratch store.

The cache does not own its storage. Callers hand in any
:class:`~collections.abc.MutableMapping` -- a plain ``dict`` for one process,
or a :class:`diskcache.Cache` when tokens should survive between CLI runs --
and the cache only reads and writes its own namespaced keys
(``pbclient:token:<mode>:<base_url>``), never assuming it owns the rest.

Entries are stored as plain JSON-compatible dicts so that any backing store
can hold them. There is no locking: concurrent logins for the same key are
tolerated and the last write wins, since every successfully issued token is
valid.

See Also:
    :class:`~pbclient.auth.providers.PasswordLoginProvider` -- the only writer.
"""

from __future__ import annotations

import time
from collections.abc import Callable, MutableMapping
from pathlib import Path
from typing import Any, Optional

import diskcache

from pbclient.models import CachedToken, TokenCacheConfig
from pbclient.urls import normalize_base

KEY_PREFIX = "pbclient:token"

EXPIRY_MARGIN_MILLIS = 30_000
"""Tokens expiring within this window are treated as already expired."""


def _now_millis() -> int:
    return int(time.time() * 1000)


class TokenCache:
    """Keyed ``{token, expires_at_millis}`` store with an expiry check.

    Args:
        store: The scratch mapping backing the cache. A fresh ``dict`` is
            used when omitted.
        clock: Returns the current time in epoch milliseconds.

    Example::

        cache = TokenCache({})
        key = cache.key_for("admin", "http://127.0.0.1:8090/")
        cache.put(key, "eyJ...", expires_at_millis=1_900_000_000_000)
        cached = cache.get(key)
        assert cached is not None and cache.is_valid(cached)
    """

    def __init__(
        self,
        store: Optional[MutableMapping[str, Any]] = None,
        clock: Callable[[], int] = _now_millis,
    ) -> None:
        self._store: MutableMapping[str, Any] = store if store is not None else {}
        self._clock = clock

    @property
    def store(self) -> MutableMapping[str, Any]:
        """The backing scratch store."""
        return self._store

    @staticmethod
    def key_for(mode: str, base_url: str) -> str:
        """Build the namespaced key for a credential mode and base URL."""
        return f"{KEY_PREFIX}:{mode}:{normalize_base(base_url)}"

    def get(self, key: str) -> Optional[CachedToken]:
        """Return the cached token for *key*, or ``None`` if absent or unreadable."""
        entry = self._store.get(key)
        if not isinstance(entry, dict) or not entry.get("token"):
            return None
        expires_at = entry.get("expires_at_millis")
        if not isinstance(expires_at, int) or isinstance(expires_at, bool):
            expires_at = None
        return CachedToken(token=entry["token"], expires_at_millis=expires_at)

    def put(self, key: str, token: str, expires_at_millis: Optional[int] = None) -> None:
        """Store *token* under *key*, superseding any previous entry."""
        self._store[key] = {"token": token, "expires_at_millis": expires_at_millis}

    def is_valid(self, cached: CachedToken) -> bool:
        """Return ``True`` if *cached* has no expiry or expires more than 30 s from now."""
        if cached.expires_at_millis is None:
            return True
        return self._clock() < cached.expires_at_millis - EXPIRY_MARGIN_MILLIS


def open_scratch_store(
    config: TokenCacheConfig,
    cache_dir: str | Path,
) -> MutableMapping[str, Any]:
    """Return the scratch store a profile asks for.

    Args:
        config: The profile's token cache settings.
        cache_dir: Root cache directory; a ``tokens/`` subdirectory is used
            for the disk store.

    Returns:
        A new ``dict``, or a :class:`diskcache.Cache` when ``persist`` is set.
        The caller owns the store and must close a disk store when done.
    """
    if not config.persist:
        return {}
    return diskcache.Cache(str(Path(cache_dir) / "tokens"))
