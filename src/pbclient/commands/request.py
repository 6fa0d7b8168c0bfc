"""Request command -- send an arbitrary request to the backend."""

from __future__ import annotations

from typing import Optional

import typer

from pbclient.commands.common import (
    parse_json_option,
    parse_pairs,
    reported_errors,
    run_with_dispatcher,
)
from pbclient.output import emit


def request_command(
    ctx: typer.Context,
    method: str = typer.Argument(help="HTTP method: GET, POST, PATCH, PUT, DELETE."),
    endpoint: str = typer.Argument(help="Endpoint path, e.g. /settings or /api/health."),
    query: Optional[list[str]] = typer.Option(None, "--query", "-Q", help="Query as key=value."),
    body: Optional[str] = typer.Option(None, "--body", "-d", help="JSON body or @file.json."),
    no_auth: bool = typer.Option(False, "--no-auth", help="Send without a bearer token."),
    include_raw: bool = typer.Option(False, "--include-raw", help="Attach the raw response."),
    include_debug: bool = typer.Option(
        False, "--include-debug", help="Attach redacted request details."
    ),
) -> None:
    """Send a custom request. GET and DELETE never carry a body.

    Example::

        pbclient request GET /collections -Q perPage=5
        pbclient request POST /collections/posts/records -d '{"title": "Hi"}'
    """
    from pbclient.resources import custom_request

    with reported_errors():
        parsed_body = parse_json_option(body, "--body")
        parsed_query = parse_pairs(query, "--query") or None
        items = run_with_dispatcher(
            ctx,
            lambda dispatcher: custom_request(
                dispatcher,
                method,
                endpoint,
                query=parsed_query,
                body=parsed_body,
                include_raw=include_raw,
                include_debug=include_debug,
                skip_auth=no_auth,
            ),
        )
    emit(items if len(items) != 1 else items[0])
