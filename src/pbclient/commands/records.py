"""Records commands -- list, get, create, update and delete records.

Field input for ``create`` and ``update`` comes from ``--data`` (a JSON
object, or ``@file.json``) overlaid with repeated ``--field key=value``
options. String values are coerced to numbers, booleans and JSON unless
``--no-coerce`` is given. ``--file field=path[:filename]`` attaches files
and switches the request to multipart.

``--batch FILE`` reads one JSON object per line and runs the operation once
per line; ``--continue-on-fail`` records failing lines as error items
instead of stopping.
"""

from __future__ import annotations

import json
import mimetypes
from pathlib import Path
from typing import Any, Optional

import typer

from pbclient.commands.common import (
    parse_json_option,
    parse_pairs,
    reported_errors,
    run_with_dispatcher,
)
from pbclient.exceptions import InvalidUsageError
from pbclient.models import Attachment
from pbclient.output import emit, info


records_app = typer.Typer(no_args_is_help=True)

_INCLUDE_RAW = typer.Option(False, "--include-raw", help="Attach the raw response as __raw.")
_INCLUDE_DEBUG = typer.Option(
    False, "--include-debug", help="Attach redacted request details as __debug."
)


def _record_options(coerce: bool, include_raw: bool, include_debug: bool):  # noqa: ANN202
    from pbclient.resources import RecordOptions

    return RecordOptions(coerce=coerce, include_raw=include_raw, include_debug=include_debug)


def _fields(data: Optional[str], pairs: Optional[list[str]]) -> dict[str, Any]:
    fields = parse_json_option(data, "--data")
    if fields is None:
        fields = {}
    if not isinstance(fields, dict):
        raise InvalidUsageError("--data must be a JSON object.")
    fields.update(parse_pairs(pairs, "--field"))
    return fields


def _attachments(specs: Optional[list[str]]) -> list[Attachment]:
    attachments: list[Attachment] = []
    for spec in specs or []:
        field, sep, rest = spec.partition("=")
        if not sep or not field or not rest:
            raise InvalidUsageError(f"--file expects field=path[:filename], got: {spec}")
        path_text, _, filename = rest.partition(":")
        path = Path(path_text).expanduser()
        try:
            content = path.read_bytes()
        except OSError as exc:
            raise InvalidUsageError(f"Cannot read attachment {path}: {exc}") from exc
        filename = filename or path.name
        content_type, _ = mimetypes.guess_type(filename)
        attachments.append(
            Attachment(field=field, filename=filename, content=content, content_type=content_type)
        )
    return attachments


def _batch_lines(path: str) -> list[dict[str, Any]]:
    try:
        text = Path(path).expanduser().read_text(encoding="utf-8")
    except OSError as exc:
        raise InvalidUsageError(f"Cannot read batch file {path}: {exc}") from exc
    lines: list[dict[str, Any]] = []
    for number, line in enumerate(text.splitlines(), 1):
        if not line.strip():
            continue
        try:
            item = json.loads(line)
        except ValueError as exc:
            raise InvalidUsageError(f"{path}:{number}: invalid JSON: {exc}") from exc
        if not isinstance(item, dict):
            raise InvalidUsageError(f"{path}:{number}: expected a JSON object.")
        lines.append(item)
    return lines


@records_app.command("list")
def records_list(
    ctx: typer.Context,
    collection: str = typer.Argument(help="Collection name or id."),
    filter: Optional[str] = typer.Option(None, "--filter", help="Filter expression."),
    sort: Optional[str] = typer.Option(None, "--sort", help="Sort fields, e.g. -created,title."),
    expand: Optional[str] = typer.Option(None, "--expand", help="Relations to expand."),
    fields: Optional[str] = typer.Option(None, "--fields", help="Fields to return."),
    skip_total: bool = typer.Option(False, "--skip-total", help="Skip the total count query."),
    per_page: int = typer.Option(50, "--per-page", min=1, help="Records per page."),
    limit: int = typer.Option(50, "--limit", "-l", min=1, help="Maximum records to return."),
    return_all: bool = typer.Option(False, "--all", "-a", help="Return every record."),
    include_raw: bool = _INCLUDE_RAW,
    include_debug: bool = _INCLUDE_DEBUG,
) -> None:
    """List records of a collection.

    Example::

        pbclient records list posts --filter 'published=true' --sort -created --limit 10
    """
    from pbclient.resources import ListOptions, RecordsResource

    with reported_errors():
        options = ListOptions(
            filter=filter,
            sort=sort,
            expand=expand,
            fields=fields,
            skip_total=skip_total,
            per_page=per_page,
        )
        result = run_with_dispatcher(
            ctx,
            lambda dispatcher: RecordsResource(dispatcher).list(
                collection,
                options,
                limit=None if return_all else limit,
                record_options=_record_options(True, include_raw, include_debug),
            ),
        )
    info(f"{len(result.items)} record(s)")
    emit(result.items)


@records_app.command("get")
def records_get(
    ctx: typer.Context,
    collection: str = typer.Argument(help="Collection name or id."),
    record_id: str = typer.Argument(help="Record id."),
    expand: Optional[str] = typer.Option(None, "--expand", help="Relations to expand."),
    include_raw: bool = _INCLUDE_RAW,
    include_debug: bool = _INCLUDE_DEBUG,
) -> None:
    """Fetch one record."""
    from pbclient.resources import RecordsResource

    with reported_errors():
        record = run_with_dispatcher(
            ctx,
            lambda dispatcher: RecordsResource(dispatcher).get(
                collection,
                record_id,
                _record_options(True, include_raw, include_debug),
                expand=expand,
            ),
        )
    emit(record)


@records_app.command("create")
def records_create(
    ctx: typer.Context,
    collection: str = typer.Argument(help="Collection name or id."),
    data: Optional[str] = typer.Option(None, "--data", "-d", help="JSON object or @file.json."),
    field: Optional[list[str]] = typer.Option(None, "--field", "-F", help="Field as key=value."),
    file: Optional[list[str]] = typer.Option(
        None, "--file", help="Attachment as field=path[:filename]."
    ),
    no_coerce: bool = typer.Option(False, "--no-coerce", help="Send string values as-is."),
    batch: Optional[str] = typer.Option(None, "--batch", help="JSON Lines file, one record per line."),
    continue_on_fail: bool = typer.Option(
        False, "--continue-on-fail", help="Record failing batch lines as errors and go on."
    ),
    include_raw: bool = _INCLUDE_RAW,
    include_debug: bool = _INCLUDE_DEBUG,
) -> None:
    """Create one record, or one per line of a batch file.

    Example::

        pbclient records create posts -F title=Hello -F views=3 --file cover=./cover.png
        pbclient records create posts --batch posts.jsonl --continue-on-fail
    """
    from pbclient.resources import RecordsResource, run_batch

    with reported_errors():
        options = _record_options(not no_coerce, include_raw, include_debug)
        attachments = _attachments(file)
        base = _fields(data, field)
        items = [{**line, **base} for line in _batch_lines(batch)] if batch else [base]

        async def _create_all(dispatcher):  # noqa: ANN001, ANN202
            records = RecordsResource(dispatcher)
            return await run_batch(
                items,
                lambda fields: records.create(collection, fields, attachments, options),
                continue_on_fail=continue_on_fail,
            )

        results = run_with_dispatcher(ctx, _create_all)
    emit(results if batch else results[0])


@records_app.command("update")
def records_update(
    ctx: typer.Context,
    collection: str = typer.Argument(help="Collection name or id."),
    record_id: Optional[str] = typer.Argument(None, help="Record id (omit with --batch)."),
    data: Optional[str] = typer.Option(None, "--data", "-d", help="JSON object or @file.json."),
    field: Optional[list[str]] = typer.Option(None, "--field", "-F", help="Field as key=value."),
    file: Optional[list[str]] = typer.Option(
        None, "--file", help="Attachment as field=path[:filename]."
    ),
    no_coerce: bool = typer.Option(False, "--no-coerce", help="Send string values as-is."),
    batch: Optional[str] = typer.Option(
        None, "--batch", help="JSON Lines file; each line needs an \"id\"."
    ),
    continue_on_fail: bool = typer.Option(
        False, "--continue-on-fail", help="Record failing batch lines as errors and go on."
    ),
    include_raw: bool = _INCLUDE_RAW,
    include_debug: bool = _INCLUDE_DEBUG,
) -> None:
    """Update one record, or one per line of a batch file."""
    from pbclient.resources import RecordsResource, run_batch

    with reported_errors():
        options = _record_options(not no_coerce, include_raw, include_debug)
        attachments = _attachments(file)
        base = _fields(data, field)
        if batch:
            items = []
            for line in _batch_lines(batch):
                line = {**line, **base}
                line_id = line.pop("id", None)
                if not line_id:
                    raise InvalidUsageError(f"Every line of {batch} needs an \"id\".")
                items.append((str(line_id), line))
        elif record_id:
            items = [(record_id, base)]
        else:
            raise InvalidUsageError("Give a record id or --batch.")

        async def _update_all(dispatcher):  # noqa: ANN001, ANN202
            records = RecordsResource(dispatcher)
            return await run_batch(
                items,
                lambda item: records.update(collection, item[0], item[1], attachments, options),
                continue_on_fail=continue_on_fail,
            )

        results = run_with_dispatcher(ctx, _update_all)
    emit(results if batch else results[0])


@records_app.command("delete")
def records_delete(
    ctx: typer.Context,
    collection: str = typer.Argument(help="Collection name or id."),
    record_ids: list[str] = typer.Argument(help="One or more record ids."),
    continue_on_fail: bool = typer.Option(
        False, "--continue-on-fail", help="Record failing deletes as errors and go on."
    ),
    include_raw: bool = _INCLUDE_RAW,
    include_debug: bool = _INCLUDE_DEBUG,
) -> None:
    """Delete one or more records."""
    from pbclient.resources import RecordsResource, run_batch

    options = _record_options(True, include_raw, include_debug)

    async def _delete_all(dispatcher):  # noqa: ANN001, ANN202
        records = RecordsResource(dispatcher)
        return await run_batch(
            record_ids,
            lambda record_id: records.delete(collection, record_id, options),
            continue_on_fail=continue_on_fail,
        )

    with reported_errors():
        results = run_with_dispatcher(ctx, _delete_all)
    emit(results if len(results) > 1 else results[0])
