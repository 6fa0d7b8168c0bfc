"""Token providers, one per credential variant.

- :class:`NoAuthProvider` -- ``none``: no token at all.
- :class:`StaticTokenProvider` -- ``token``: the configured API token.
- :class:`AdminPasswordProvider` -- ``admin``: superuser login, probing the
  current ``_superusers`` endpoint first and the legacy ``/api/admins``
  endpoint only when the first one is absent (404/405/410).
- :class:`CollectionPasswordProvider` -- ``collection``: identity/password
  login against one auth collection, with no fallback.

Password providers share :class:`PasswordLoginProvider`, which consults the
:class:`~pbclient.cache.TokenCache`, walks the provider's
:class:`~pbclient.auth.base.LoginAttempt` table, and caches the token with
the expiry decoded from its payload.
"""

from __future__ import annotations

import logging
from abc import abstractmethod
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, Optional
from urllib.parse import quote

from pbclient.auth.base import LoginAttempt, ResolutionState, TokenProvider, TokenResolution
from pbclient.auth.tokens import decode_token_expiry
from pbclient.cache.token_cache import TokenCache
from pbclient.client.errors import get_status_code, normalize_error
from pbclient.exceptions import AuthError, ConfigError, ProtocolError
from pbclient.models import AdminPassword, CollectionPassword, StaticToken
from pbclient.urls import compose, normalize_base

if TYPE_CHECKING:
    from pbclient.client.transport import Transport

logger = logging.getLogger(__name__)

ENDPOINT_ABSENT_STATUSES = frozenset({404, 405, 410})

SUPERUSER_AUTH_ENDPOINT = "/api/collections/_superusers/auth-with-password"
LEGACY_ADMIN_AUTH_ENDPOINT = "/api/admins/auth-with-password"

ADMIN_LOGIN_ATTEMPTS: tuple[LoginAttempt, ...] = (
    LoginAttempt(
        endpoint=SUPERUSER_AUTH_ENDPOINT,
        build_body=lambda c: {"identity": c.email, "password": c.password},
        fallthrough_statuses=ENDPOINT_ABSENT_STATUSES,
    ),
    LoginAttempt(
        endpoint=LEGACY_ADMIN_AUTH_ENDPOINT,
        build_body=lambda c: {"email": c.email, "password": c.password},
    ),
)


def collection_auth_endpoint(collection: str) -> str:
    """Return the password-auth endpoint of an auth collection."""
    return f"/api/collections/{quote(collection, safe='')}/auth-with-password"


class NoAuthProvider(TokenProvider):
    """Requests are sent without credentials."""

    @property
    def mode(self) -> str:
        return "none"

    async def resolve(self, credential: Any, base_url: str) -> TokenResolution:
        return TokenResolution(ResolutionState.NO_AUTH_NEEDED)


class StaticTokenProvider(TokenProvider):
    """Returns the configured API token without any network call."""

    @property
    def mode(self) -> str:
        return "token"

    async def resolve(self, credential: StaticToken, base_url: str) -> TokenResolution:
        if not credential.token:
            raise ConfigError("API token is missing in credentials.")
        return TokenResolution(ResolutionState.STATIC_TOKEN_RETURNED, credential.token)


class PasswordLoginProvider(TokenProvider):
    """Shared login flow for password-based credential modes.

    Args:
        transport: Used for the login POSTs.
        token_cache: Where issued tokens are kept, keyed by mode and base URL.
    """

    def __init__(self, transport: Transport, token_cache: TokenCache) -> None:
        self._transport = transport
        self._token_cache = token_cache

    @abstractmethod
    def attempts(self, credential: Any) -> Sequence[LoginAttempt]:
        """Return the ordered login strategy table for *credential*."""
        ...

    @abstractmethod
    def validate(self, credential: Any) -> None:
        """Raise :class:`~pbclient.exceptions.ConfigError` for missing fields."""
        ...

    async def resolve(self, credential: Any, base_url: str) -> TokenResolution:
        self.validate(credential)
        base = normalize_base(base_url)
        key = self._token_cache.key_for(self.mode, base)

        cached = self._token_cache.get(key)
        if cached is not None and self._token_cache.is_valid(cached):
            return TokenResolution(ResolutionState.CACHE_HIT, cached.token)

        response = await self._login(credential, base)
        token = response.get("token") if isinstance(response, Mapping) else None
        if not isinstance(token, str) or not token:
            raise ProtocolError("authentication response did not include a token", raw=response)

        self._token_cache.put(key, token, decode_token_expiry(token))
        return TokenResolution(ResolutionState.RESOLVED, token)

    async def _login(self, credential: Any, base: str) -> Any:
        attempts = list(self.attempts(credential))
        for index, attempt in enumerate(attempts):
            state = ResolutionState.LOGIN_ATTEMPT if index == 0 else ResolutionState.FALLBACK_ATTEMPT
            logger.debug("%s: POST %s", state.value, attempt.endpoint)
            try:
                return await self._transport.send(
                    "POST",
                    compose(base, attempt.endpoint),
                    headers={},
                    body=attempt.build_body(credential),
                )
            except Exception as exc:
                status = get_status_code(exc)
                if index + 1 < len(attempts) and status in attempt.fallthrough_statuses:
                    logger.debug("%s answered %s, trying next endpoint", attempt.endpoint, status)
                    continue
                raise _auth_error(exc, status) from exc
        raise ConfigError(f"No login endpoints configured for mode '{self.mode}'")


class AdminPasswordProvider(PasswordLoginProvider):
    """Superuser login with the legacy admin endpoint as fallback."""

    @property
    def mode(self) -> str:
        return "admin"

    def attempts(self, credential: AdminPassword) -> Sequence[LoginAttempt]:
        return ADMIN_LOGIN_ATTEMPTS

    def validate(self, credential: AdminPassword) -> None:
        if not credential.email:
            raise ConfigError("Admin email is missing in credentials.")
        if not credential.password:
            raise ConfigError("Admin password is missing in credentials.")


class CollectionPasswordProvider(PasswordLoginProvider):
    """Identity/password login against a single auth collection."""

    @property
    def mode(self) -> str:
        return "collection"

    def attempts(self, credential: CollectionPassword) -> Sequence[LoginAttempt]:
        return (
            LoginAttempt(
                endpoint=collection_auth_endpoint(credential.collection),
                build_body=lambda c: {"identity": c.identity, "password": c.password},
            ),
        )

    def validate(self, credential: CollectionPassword) -> None:
        if not credential.collection:
            raise ConfigError("Auth collection is missing in credentials.")
        if not credential.identity:
            raise ConfigError("Identity is missing in credentials.")
        if not credential.password:
            raise ConfigError("Password is missing in credentials.")


def _auth_error(exc: Exception, status: Optional[int]) -> AuthError:
    info = normalize_error(exc)
    status = status if status is not None else info.status_code
    prefix = f"Authentication failed (status {status})" if status else "Authentication failed"
    return AuthError(f"{prefix}: {info.message}", status_code=status, raw=info.raw)
