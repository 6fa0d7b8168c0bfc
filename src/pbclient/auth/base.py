"""Foundational types of the auth subsystem.

- :class:`ResolutionState` -- where a token resolution ended up.
- :class:`TokenResolution` -- the token (if any) plus that final state.
- :class:`LoginAttempt` -- one row of a provider's login strategy table.
- :class:`TokenProvider` -- the abstract base class every credential mode
  implements.

To support a new credential mode, add a variant to
:data:`pbclient.models.Credential`, subclass :class:`TokenProvider` with a
matching :attr:`~TokenProvider.mode`, and register it with
:class:`~pbclient.auth.resolver.AuthResolver`.
"""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Optional

from pydantic import BaseModel


class ResolutionState(str, enum.Enum):
    """States a single token resolution moves through."""

    NO_AUTH_NEEDED = "no_auth_needed"
    STATIC_TOKEN_RETURNED = "static_token_returned"
    CACHE_HIT = "cache_hit"
    LOGIN_ATTEMPT = "login_attempt"
    FALLBACK_ATTEMPT = "fallback_attempt"
    RESOLVED = "resolved"
    FAILED = "failed"


@dataclass(frozen=True)
class TokenResolution:
    """Outcome of :meth:`~pbclient.auth.resolver.AuthResolver.resolve`.

    Attributes:
        state: The terminal state (``NO_AUTH_NEEDED``,
            ``STATIC_TOKEN_RETURNED``, ``CACHE_HIT`` or ``RESOLVED``).
        token: The bearer token, or ``None`` when no auth is needed.
    """

    state: ResolutionState
    token: Optional[str] = None


@dataclass(frozen=True)
class LoginAttempt:
    """One login endpoint shape in a provider's ordered strategy table.

    Attributes:
        endpoint: Path of the password-auth endpoint.
        build_body: Builds the JSON login body from the credential variant.
        fallthrough_statuses: Statuses meaning "this endpoint does not exist
            here"; a failure with one of them moves on to the next attempt.
            Any other failure is fatal.
    """

    endpoint: str
    build_body: Callable[[Any], dict[str, Any]]
    fallthrough_statuses: frozenset[int] = field(default_factory=frozenset)


class TokenProvider(ABC):
    """Abstract base class for credential-mode token providers.

    Every concrete provider must supply:

    1. A :attr:`mode` property returning the credential variant's ``mode``
       tag (``"none"``, ``"token"``, ``"admin"``, ``"collection"``).
    2. An async :meth:`resolve` that returns a :class:`TokenResolution`.
    """

    @property
    @abstractmethod
    def mode(self) -> str:
        """Return the credential mode this provider handles."""
        ...

    @abstractmethod
    async def resolve(self, credential: BaseModel, base_url: str) -> TokenResolution:
        """Resolve a bearer token for *credential* against *base_url*.

        Raises:
            ConfigError: A required credential field is missing.
            AuthError: The login call failed.
            ProtocolError: The login response carried no token.
        """
        ...
