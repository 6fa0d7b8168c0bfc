"""Request dispatcher -- the top-level entry point of the client core.

:class:`RequestDispatcher` turns a method, an endpoint and optional
body/query/multipart parts into a fully formed request:

1. the base URL is normalised and the endpoint composed with the ``/api``
   prefix (:mod:`pbclient.urls`);
2. unless ``skip_auth`` is set, a bearer token is resolved through the
   :class:`~pbclient.auth.resolver.AuthResolver` and injected as
   ``Authorization`` (a caller-supplied ``Authorization`` header wins);
3. the query is attached only when non-empty, and the JSON body only when
   no multipart form data or files are present;
4. the request goes out through the injected transport, and any failure is
   normalised into a :class:`~pbclient.exceptions.RequestError`.

Each call is independent: the only shared state is the token cache behind
the resolver, which tolerates concurrent logins.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from pbclient.auth.resolver import AuthResolver, create_default_resolver
from pbclient.cache.token_cache import TokenCache
from pbclient.client.errors import normalize_error
from pbclient.client.transport import Transport
from pbclient.exceptions import PbclientError
from pbclient.models import Attachment, CredentialConfig, DebugInfo, RequestSpec
from pbclient.redaction import build_debug_info
from pbclient.urls import compose, normalize_base

logger = logging.getLogger(__name__)


class RequestDispatcher:
    """Authenticated request dispatcher for one backend.

    Args:
        credentials: Credential snapshot, including the base URL.
        transport: Sends the HTTP requests (see
            :class:`~pbclient.client.transport.Transport`).
        resolver: Token resolver. Defaults to
            :func:`~pbclient.auth.resolver.create_default_resolver` over
            *transport* and *token_cache*.
        token_cache: Token cache for the default resolver. Pass one backed
            by a shared scratch store to reuse tokens across dispatchers.

    Example::

        dispatcher = RequestDispatcher(credentials, transport)
        record = await dispatcher.dispatch(
            "POST", "/collections/posts/records", body={"title": "Hello"},
        )
    """

    def __init__(
        self,
        credentials: CredentialConfig,
        transport: Transport,
        resolver: Optional[AuthResolver] = None,
        token_cache: Optional[TokenCache] = None,
    ) -> None:
        self._credentials = credentials
        self._transport = transport
        self._resolver = resolver or create_default_resolver(transport, token_cache)

    @property
    def credentials(self) -> CredentialConfig:
        return self._credentials

    @property
    def base_url(self) -> str:
        """The normalised base URL of the backend."""
        return normalize_base(self._credentials.base_url)

    async def resolve_token(self) -> Optional[str]:
        """Resolve the bearer token for this dispatcher's credentials."""
        return await self._resolver.resolve_token(self._credentials)

    async def dispatch(
        self,
        method: str,
        endpoint: str,
        body: Any = None,
        query: Optional[dict[str, Any]] = None,
        *,
        skip_auth: bool = False,
        headers: Optional[dict[str, str]] = None,
        form_data: Optional[dict[str, str]] = None,
        files: Optional[list[Attachment]] = None,
    ) -> Any:
        """Send a request and return the decoded JSON response.

        Args:
            method: HTTP method (GET, POST, PATCH, PUT, DELETE).
            endpoint: Path relative to the base URL (``/api`` is added when
                missing) or an absolute URL.
            body: JSON body; ignored when *form_data* or *files* is given.
            query: Query parameters; omitted when empty.
            skip_auth: Do not resolve or inject a bearer token.
            headers: Extra headers, merged with the injected ones.
            form_data: Multipart string fields (see
                :func:`~pbclient.coercion.to_form_fields`).
            files: Binary attachments for the multipart request.

        Raises:
            RequestError: The transport failed for any reason.
            ConfigError: Credentials are incomplete.
            AuthError: Login failed.
            ProtocolError: The login response carried no token.
        """
        return await self.send(
            RequestSpec(
                method=method,
                endpoint=endpoint,
                body=body,
                query=query,
                headers=headers,
                form_data=form_data,
                files=list(files or []),
                skip_auth=skip_auth,
            )
        )

    async def send(self, request: RequestSpec) -> Any:
        """Send a prepared :class:`~pbclient.models.RequestSpec`."""
        url = compose(self.base_url, request.endpoint)
        headers = await self._build_headers(request)

        multipart = request.form_data is not None or bool(request.files)
        kwargs: dict[str, Any] = {"headers": headers}
        if request.query:
            kwargs["query"] = request.query
        if multipart:
            kwargs["form_data"] = request.form_data or {}
            if request.files:
                kwargs["files"] = request.files
        elif request.body is not None:
            kwargs["body"] = request.body

        method = request.method.upper()
        logger.debug("%s %s", method, url)
        try:
            return await self._transport.send(method, url, **kwargs)
        except PbclientError:
            raise
        except Exception as exc:
            error = normalize_error(exc)
            logger.debug("%s %s failed: %s", method, url, error)
            raise error from exc

    def build_debug_info(self, request: RequestSpec) -> DebugInfo:
        """Redacted snapshot of *request* with its fully composed URL."""
        return build_debug_info(request, base_url=self.base_url)

    async def _build_headers(self, request: RequestSpec) -> dict[str, str]:
        headers = dict(request.headers or {})
        if request.skip_auth or any(name.lower() == "authorization" for name in headers):
            return headers

        token = await self._resolver.resolve_token(self._credentials)
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers
