"""Auth resolver -- registry and dispatcher for token providers.

The :class:`AuthResolver` maps each credential ``mode`` to exactly one
:class:`~pbclient.auth.base.TokenProvider` and exposes
:meth:`~AuthResolver.resolve` / :meth:`~AuthResolver.resolve_token`, which
the request dispatcher calls before every authenticated request.

For most use cases, call :func:`create_default_resolver` to get a resolver
with a provider registered for every credential variant.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from pbclient.auth.base import ResolutionState, TokenProvider, TokenResolution
from pbclient.auth.providers import (
    AdminPasswordProvider,
    CollectionPasswordProvider,
    NoAuthProvider,
    StaticTokenProvider,
)
from pbclient.cache.token_cache import TokenCache
from pbclient.exceptions import ConfigError, PbclientError
from pbclient.models import CredentialConfig

if TYPE_CHECKING:
    from pbclient.client.transport import Transport

logger = logging.getLogger(__name__)


class AuthResolver:
    """Registry and dispatcher for token providers.

    Example::

        resolver = create_default_resolver(transport, TokenCache({}))
        token = await resolver.resolve_token(credentials)
    """

    def __init__(self) -> None:
        self._providers: dict[str, TokenProvider] = {}

    def register(self, provider: TokenProvider) -> None:
        """Register *provider* for its :attr:`~TokenProvider.mode`, replacing any previous one."""
        self._providers[provider.mode] = provider

    def get_provider(self, mode: str) -> TokenProvider:
        """Return the provider for *mode*.

        Raises:
            ConfigError: If no provider handles *mode*.
        """
        provider = self._providers.get(mode)
        if provider is None:
            available = ", ".join(sorted(self._providers)) or "(none)"
            raise ConfigError(
                f"No token provider registered for auth mode '{mode}'. "
                f"Available modes: {available}"
            )
        return provider

    def list_modes(self) -> list[str]:
        """Return the sorted credential modes this resolver handles."""
        return sorted(self._providers)

    async def resolve(self, credentials: CredentialConfig) -> TokenResolution:
        """Resolve a bearer token for *credentials*.

        Raises:
            ConfigError: Missing credential field or unknown mode.
            AuthError: The login call failed.
            ProtocolError: The login response carried no token.
        """
        mode = credentials.auth.mode
        provider = self.get_provider(mode)
        try:
            resolution = await provider.resolve(credentials.auth, credentials.base_url)
        except PbclientError as exc:
            logger.debug("%s (%s): %s", ResolutionState.FAILED.value, mode, exc)
            raise
        logger.debug("%s (%s)", resolution.state.value, mode)
        return resolution

    async def resolve_token(self, credentials: CredentialConfig) -> Optional[str]:
        """Return the bearer token for *credentials*, or ``None`` when no auth is needed."""
        resolution = await self.resolve(credentials)
        return resolution.token


def create_default_resolver(
    transport: Transport,
    token_cache: Optional[TokenCache] = None,
) -> AuthResolver:
    """Create an :class:`AuthResolver` with a provider for every credential variant.

    Args:
        transport: Used by the password providers for login calls.
        token_cache: Shared token cache; an isolated in-memory cache is
            created when omitted.
    """
    cache = token_cache if token_cache is not None else TokenCache()
    resolver = AuthResolver()
    resolver.register(NoAuthProvider())
    resolver.register(StaticTokenProvider())
    resolver.register(AdminPasswordProvider(transport, cache))
    resolver.register(CollectionPasswordProvider(transport, cache))
    return resolver
