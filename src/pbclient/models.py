"""Canonical Pydantic models shared across all pbclient modules.

This is the single source of truth for data shapes in the project. The models
fall into two groups:

**Runtime models** -- built per call and consumed by the client core:
    :class:`CredentialConfig` and its credential variants (:class:`NoAuth`,
    :class:`StaticToken`, :class:`AdminPassword`, :class:`CollectionPassword`),
    :class:`CachedToken`, :class:`Attachment`, :class:`RequestSpec`, and
    :class:`DebugInfo`.

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`AuthProfile`, :class:`RequestConfig`, :class:`TokenCacheConfig`,
    :class:`OutputConfig`, :class:`GlobalConfig`, and :class:`Profile`.

All models use Pydantic v2. Credential variants form a closed union
discriminated on ``mode`` so that every resolver path is exhaustive.
"""

from __future__ import annotations

import enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# --- Credentials ---


class AuthMode(str, enum.Enum):
    """Credential modes understood by the auth resolver."""

    NONE = "none"
    TOKEN = "token"
    ADMIN = "admin"
    COLLECTION = "collection"


class NoAuth(BaseModel):
    """No authentication: requests go out without an ``Authorization`` header."""

    model_config = ConfigDict(frozen=True)

    mode: Literal["none"] = "none"


class StaticToken(BaseModel):
    """A pre-issued API token used verbatim as the bearer token."""

    model_config = ConfigDict(frozen=True)

    mode: Literal["token"] = "token"
    token: Optional[str] = None


class AdminPassword(BaseModel):
    """Superuser (admin) email/password login."""

    model_config = ConfigDict(frozen=True)

    mode: Literal["admin"] = "admin"
    email: Optional[str] = None
    password: Optional[str] = None


class CollectionPassword(BaseModel):
    """Identity/password login against an auth collection (``users`` by default)."""

    model_config = ConfigDict(frozen=True)

    mode: Literal["collection"] = "collection"
    collection: str = "users"
    identity: Optional[str] = None
    password: Optional[str] = None


Credential = Annotated[
    Union[NoAuth, StaticToken, AdminPassword, CollectionPassword],
    Field(discriminator="mode"),
]


class CredentialConfig(BaseModel):
    """A snapshot of the credentials for one backend.

    Supplied by the caller (or built from a :class:`Profile` by
    :func:`~pbclient.config.build_credentials`) and never mutated by the core.

    Example::

        CredentialConfig(
            base_url="http://127.0.0.1:8090",
            auth=CollectionPassword(identity="ana@example.com", password="pw"),
        )
    """

    model_config = ConfigDict(frozen=True)

    base_url: str
    auth: Credential = Field(default_factory=NoAuth)


class CachedToken(BaseModel):
    """A bearer token held by :class:`~pbclient.cache.TokenCache`.

    ``expires_at_millis`` is ``None`` for tokens whose expiry could not be
    decoded; such tokens are treated as always valid.
    """

    token: str
    expires_at_millis: Optional[int] = None


# --- Requests ---


class Attachment(BaseModel):
    """A pre-resolved binary file for a multipart record field."""

    field: str
    filename: str = "file"
    content: bytes
    content_type: Optional[str] = None


class RequestSpec(BaseModel):
    """Everything the dispatcher needs to send one request.

    ``body`` and ``form_data``/``files`` are mutually exclusive transport
    shapes; when either multipart part is present the JSON body is ignored.
    """

    method: str
    endpoint: str
    body: Any = None
    query: Optional[dict[str, Any]] = None
    headers: Optional[dict[str, str]] = None
    form_data: Optional[dict[str, str]] = None
    files: list[Attachment] = Field(default_factory=list)
    skip_auth: bool = False


class DebugInfo(BaseModel):
    """A redacted, replayable snapshot of a request for diagnostics."""

    method: str
    url: str
    query: dict[str, Any] = Field(default_factory=dict)
    body: Any = Field(default_factory=dict)
    headers: dict[str, Any] = Field(default_factory=dict)


# --- Configuration ---


class AuthProfile(BaseModel):
    """Authentication section of a :class:`Profile`.

    Secrets are never stored inline; ``*_source`` fields hold a credential
    source descriptor resolved by :func:`~pbclient.config.resolve_credential`
    (``env:VAR``, ``file:/path``, ``prompt``, or ``value:literal``).

    Example::

        AuthProfile(mode="admin", email="admin@example.com", password_source="env:PB_PASSWORD")
    """

    mode: AuthMode = AuthMode.NONE
    email: Optional[str] = Field(default=None, description="Admin email (admin mode)")
    identity: Optional[str] = Field(
        default=None, description="Email or username (collection mode)"
    )
    collection: str = Field(default="users", description="Auth collection (collection mode)")
    password_source: Optional[str] = Field(
        default=None, description="Credential source for the password"
    )
    token_source: Optional[str] = Field(
        default=None, description="Credential source for a static API token"
    )


class RequestConfig(BaseModel):
    """Default HTTP request settings applied to every call made with a profile."""

    timeout: float = Field(default=30, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")


class TokenCacheConfig(BaseModel):
    """Where login tokens are kept between requests.

    By default tokens live in memory for one CLI invocation. With ``persist``
    enabled they are kept in a :mod:`diskcache` store under the cache
    directory and reused across invocations until they expire.
    """

    persist: bool = Field(default=False, description="Keep tokens on disk between runs")


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/pbclient/config.json``."""

    default_profile: Optional[str] = None
    auto_select_single_profile: bool = True
    output: OutputConfig = Field(default_factory=OutputConfig)


class Profile(BaseModel):
    """One backend target stored as JSON under the ``profiles/`` config directory.

    See Also:
        :func:`~pbclient.config.load_profile`: Deserialise a profile by name.
        :func:`~pbclient.config.build_credentials`: Turn it into a
        :class:`CredentialConfig`.
    """

    model_config = ConfigDict(extra="allow")

    name: str
    base_url: str = Field(default="http://127.0.0.1:8090", description="Backend base URL")
    auth: AuthProfile = Field(default_factory=AuthProfile)
    request: RequestConfig = Field(default_factory=RequestConfig)
    token_cache: TokenCacheConfig = Field(default_factory=TokenCacheConfig)
