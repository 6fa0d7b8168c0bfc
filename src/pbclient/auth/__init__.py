"""Token resolution for pbclient.

The main entry points are:

- :class:`AuthResolver` -- maps credential modes to token providers and
  resolves a bearer token for a :class:`~pbclient.models.CredentialConfig`.
- :func:`create_default_resolver` -- a resolver with every built-in provider.
- :class:`TokenProvider` -- abstract base class for a credential mode.
- :func:`decode_token_expiry` -- reads the ``exp`` claim of a token.

Typical usage::

    from pbclient.auth import create_default_resolver

    resolver = create_default_resolver(transport)
    token = await resolver.resolve_token(credentials)
"""

from pbclient.auth.base import LoginAttempt, ResolutionState, TokenProvider, TokenResolution
from pbclient.auth.resolver import AuthResolver, create_default_resolver
from pbclient.auth.tokens import decode_token_expiry

__all__ = [
    "AuthResolver",
    "LoginAttempt",
    "ResolutionState",
    "TokenProvider",
    "TokenResolution",
    "create_default_resolver",
    "decode_token_expiry",
]
