"""Auth commands -- test credentials, log in and refresh tokens.

Provides the ``pbclient auth`` sub-command group. Every command works on
the active profile (``--profile`` or the configuration chain).

Typical workflow::

    pbclient auth test                      # verify the profile's credentials
    pbclient auth login-admin --email a@b.c # explicit admin login
    pbclient auth refresh --kind admin      # refresh the resolved token
"""

from __future__ import annotations

from typing import Any, Optional

import typer

from pbclient.commands.common import active_profile, reported_errors, run_with_dispatcher
from pbclient.output import emit, get_output, info, success


auth_app = typer.Typer(no_args_is_help=True)


def _show(response: Any, show_token: bool) -> None:
    from pbclient.redaction import redact

    emit(response if show_token else redact(response))


@auth_app.command("test")
def auth_test(ctx: typer.Context) -> None:
    """Check that the active profile's credentials work.

    Password modes log in (or reuse a cached token), token profiles list
    collections, and unauthenticated profiles call the health endpoint.

    Example::

        pbclient --profile local auth test
    """
    from pbclient.resources import check_connection

    with reported_errors():
        profile = active_profile(ctx)
        info(f"Testing {profile.auth.mode.value} credentials against {profile.base_url}")
        message = run_with_dispatcher(ctx, check_connection)
    success(f"Connection OK: {message}")


@auth_app.command("status")
def auth_status(ctx: typer.Context) -> None:
    """Show the active profile's auth settings and cached token state."""
    from pbclient.cache.token_cache import TokenCache, open_scratch_store
    from pbclient.config import get_cache_dir

    with reported_errors():
        profile = active_profile(ctx)

    auth = profile.auth
    rows = [
        ["Profile", profile.name],
        ["Base URL", profile.base_url],
        ["Mode", auth.mode.value],
    ]
    if auth.email:
        rows.append(["Email", auth.email])
    if auth.identity:
        rows.append(["Identity", auth.identity])
        rows.append(["Collection", auth.collection])
    if auth.password_source:
        rows.append(["Password Source", auth.password_source])
    if auth.token_source:
        rows.append(["Token Source", auth.token_source])

    if not profile.token_cache.persist:
        rows.append(["Cached Token", "not persisted"])
    else:
        store = open_scratch_store(profile.token_cache, get_cache_dir())
        try:
            cache = TokenCache(store)
            cached = cache.get(TokenCache.key_for(auth.mode.value, profile.base_url))
        finally:
            store.close()
        if cached is None:
            rows.append(["Cached Token", "none"])
        else:
            rows.append(["Cached Token", "valid" if cache.is_valid(cached) else "expired"])

    get_output().table(["Field", "Value"], rows, title="Auth Status")


@auth_app.command("login-admin")
def auth_login_admin(
    ctx: typer.Context,
    email: str = typer.Option(..., "--email", help="Admin email."),
    password_source: str = typer.Option(
        "prompt", "--password-source", help="Password source: env:VAR, file:/path, prompt."
    ),
    show_token: bool = typer.Option(False, "--show-token", help="Print the issued token."),
) -> None:
    """Log in through the admin endpoint and print the auth response."""
    from pbclient.config import resolve_credential
    from pbclient.resources import AuthResource

    with reported_errors():
        password = resolve_credential(password_source)
        response = run_with_dispatcher(
            ctx, lambda dispatcher: AuthResource(dispatcher).admin_login(email, password)
        )
    _show(response, show_token)


@auth_app.command("login-collection")
def auth_login_collection(
    ctx: typer.Context,
    identity: str = typer.Option(..., "--identity", help="Email or username."),
    collection: str = typer.Option("users", "--collection", "-c", help="Auth collection."),
    password_source: str = typer.Option(
        "prompt", "--password-source", help="Password source: env:VAR, file:/path, prompt."
    ),
    show_token: bool = typer.Option(False, "--show-token", help="Print the issued token."),
) -> None:
    """Log in as a record of an auth collection and print the auth response."""
    from pbclient.config import resolve_credential
    from pbclient.resources import AuthResource

    with reported_errors():
        password = resolve_credential(password_source)
        response = run_with_dispatcher(
            ctx,
            lambda dispatcher: AuthResource(dispatcher).collection_login(
                collection, identity, password
            ),
        )
    _show(response, show_token)


@auth_app.command("refresh")
def auth_refresh(
    ctx: typer.Context,
    kind: str = typer.Option("admin", "--kind", "-k", help="Token kind: admin or collection."),
    collection: Optional[str] = typer.Option(
        None, "--collection", "-c", help="Auth collection (collection kind)."
    ),
    token: Optional[str] = typer.Option(
        None, "--token", help="Token to refresh (defaults to the profile's resolved token)."
    ),
    show_token: bool = typer.Option(False, "--show-token", help="Print the refreshed token."),
) -> None:
    """Refresh an auth token.

    Example::

        pbclient auth refresh --kind collection --collection users
    """
    from pbclient.exceptions import InvalidUsageError
    from pbclient.resources import AuthResource

    with reported_errors():
        if kind not in ("admin", "collection"):
            raise InvalidUsageError(f"--kind must be 'admin' or 'collection', got: {kind}")
        response = run_with_dispatcher(
            ctx,
            lambda dispatcher: AuthResource(dispatcher).refresh(
                kind, collection=collection, token=token
            ),
        )
    _show(response, show_token)
