"""Token caching for pbclient.

This package provides :class:`TokenCache`, the access contract over a
caller-supplied scratch store (any mutable mapping) in which login tokens are
kept per ``(auth mode, base URL)`` pair, and :func:`open_scratch_store`,
which picks an in-memory dict or a :mod:`diskcache` store according to the
profile's :class:`~pbclient.models.TokenCacheConfig`.
"""

from pbclient.cache.token_cache import (
    EXPIRY_MARGIN_MILLIS,
    TokenCache,
    open_scratch_store,
)

__all__ = ["EXPIRY_MARGIN_MILLIS", "TokenCache", "open_scratch_store"]
