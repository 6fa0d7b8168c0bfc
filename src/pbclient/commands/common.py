"""Shared plumbing for commands that talk to the backend.

:func:`run_with_dispatcher` resolves the active profile, opens the
profile's token scratch store and an :class:`~pbclient.client.HttpxTransport`,
builds a :class:`~pbclient.client.RequestDispatcher`, and drives one
coroutine with :func:`asyncio.run`. Commands wrap their bodies in
:func:`reported_errors` so library errors are reported on stderr and turned
into the matching exit code.

Tests replace :func:`create_transport` to route traffic through an
:class:`httpx.MockTransport`.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any, NoReturn, Optional, TypeVar

import diskcache
import typer

from pbclient.cache.token_cache import TokenCache, open_scratch_store
from pbclient.client.dispatcher import RequestDispatcher
from pbclient.client.transport import HttpxTransport
from pbclient.exceptions import InvalidUsageError, PbclientError
from pbclient.models import Profile, RequestConfig
from pbclient.output import error, suggest

T = TypeVar("T")


def create_transport(config: RequestConfig) -> HttpxTransport:
    """Build the transport for one invocation."""
    return HttpxTransport(config)


def active_profile(ctx: typer.Context) -> Profile:
    """Resolve the profile selected by ``--profile``/``--base-url`` and the config chain.

    Raises:
        InvalidUsageError: No profile could be resolved.
    """
    from pbclient.config import resolve_config

    obj = ctx.obj or {}
    _, profile = resolve_config(
        cli_profile=obj.get("profile"),
        cli_base_url=obj.get("base_url"),
    )
    if profile is None:
        raise InvalidUsageError(
            "No profile configured. Create one with: pbclient config add <name> --base-url <url>"
        )
    return profile


async def _run(profile: Profile, operation: Callable[[RequestDispatcher], Awaitable[T]]) -> T:
    from pbclient.config import build_credentials, get_cache_dir

    credentials = build_credentials(profile)
    store = open_scratch_store(profile.token_cache, get_cache_dir())
    try:
        async with create_transport(profile.request) as transport:
            dispatcher = RequestDispatcher(credentials, transport, token_cache=TokenCache(store))
            return await operation(dispatcher)
    finally:
        if isinstance(store, diskcache.Cache):
            store.close()


def run_with_dispatcher(
    ctx: typer.Context,
    operation: Callable[[RequestDispatcher], Awaitable[T]],
) -> T:
    """Run *operation* against the active profile and return its result."""
    profile = active_profile(ctx)
    return asyncio.run(_run(profile, operation))


@contextmanager
def reported_errors() -> Iterator[None]:
    """Report library errors on stderr and exit with their code."""
    try:
        yield
    except PbclientError as exc:
        fail(exc)


def fail(exc: PbclientError) -> NoReturn:
    """Report *exc* on stderr and exit with its code."""
    error(str(exc))
    if isinstance(exc, InvalidUsageError) and "No profile" in exc.message:
        suggest("pbclient config add local --base-url http://127.0.0.1:8090")
    raise typer.Exit(code=exc.exit_code)


def parse_pairs(pairs: Optional[list[str]], option: str) -> dict[str, str]:
    """Parse repeated ``key=value`` options.

    Raises:
        InvalidUsageError: An entry has no ``=`` or an empty key.
    """
    parsed: dict[str, str] = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise InvalidUsageError(f"{option} expects key=value, got: {pair}")
        parsed[key.strip()] = value
    return parsed


def parse_json_option(text: Optional[str], option: str) -> Any:
    """Decode a JSON option value; ``@path`` reads the JSON from a file.

    Raises:
        InvalidUsageError: The value is not valid JSON or the file is missing.
    """
    if text is None:
        return None
    if text.startswith("@"):
        path = Path(text[1:]).expanduser()
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise InvalidUsageError(f"Cannot read {option} file {path}: {exc}") from exc
    try:
        return json.loads(text)
    except ValueError as exc:
        raise InvalidUsageError(f"{option} is not valid JSON: {exc}") from exc
