"""Record operations on a collection: list, get, create, update, delete.

Create and update bodies go through :func:`~pbclient.coercion.normalize_fields`
first. When attachments are present the request switches to multipart, with
the coerced fields re-encoded by :func:`~pbclient.coercion.to_form_fields`.
Every operation can attach the raw response (``__raw``) and a redacted
request snapshot (``__debug``) to its result.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Optional
from urllib.parse import quote

from pydantic import BaseModel, Field

from pbclient.client.dispatcher import RequestDispatcher
from pbclient.coercion import normalize_fields, to_form_fields
from pbclient.models import Attachment, RequestSpec
from pbclient.redaction import attach_meta

logger = logging.getLogger(__name__)

DEFAULT_PER_PAGE = 50


def records_endpoint(collection: str, record_id: Optional[str] = None) -> str:
    """Return the records endpoint of *collection*, or of one record in it."""
    path = f"/api/collections/{quote(collection, safe='')}/records"
    if record_id is not None:
        path += f"/{quote(record_id, safe='')}"
    return path


class RecordOptions(BaseModel):
    """Per-call options shared by the record operations."""

    coerce: bool = Field(default=True, description="Coerce string field values to JSON types")
    include_raw: bool = Field(default=False, description="Attach the raw response as __raw")
    include_debug: bool = Field(default=False, description="Attach request details as __debug")


class ListOptions(BaseModel):
    """Filtering and paging options for :meth:`RecordsResource.list`."""

    filter: Optional[str] = None
    sort: Optional[str] = None
    expand: Optional[str] = None
    fields: Optional[str] = None
    skip_total: bool = False
    per_page: int = Field(default=DEFAULT_PER_PAGE, ge=1)
    page: int = Field(default=1, ge=1)

    def base_query(self) -> dict[str, Any]:
        """Query parameters common to every page request."""
        query: dict[str, Any] = {}
        if self.filter:
            query["filter"] = self.filter
        if self.sort:
            query["sort"] = self.sort
        if self.expand:
            query["expand"] = self.expand
        if self.fields:
            query["fields"] = self.fields
        if self.skip_total:
            query["skipTotal"] = True
        return query


@dataclass
class RecordList:
    """Items collected by :meth:`RecordsResource.list` plus last-page metadata."""

    items: list[dict[str, Any]] = field(default_factory=list)
    meta: dict[str, Any] = field(default_factory=dict)


def _as_record(response: Any) -> dict[str, Any]:
    if isinstance(response, Mapping):
        return dict(response)
    return {"result": response}


class RecordsResource:
    """Record CRUD bound to a :class:`~pbclient.client.dispatcher.RequestDispatcher`.

    Example::

        records = RecordsResource(dispatcher)
        created = await records.create("posts", {"title": "Hello", "draft": "false"})
        page = await records.list("posts", ListOptions(filter="draft=false"), limit=10)
    """

    def __init__(self, dispatcher: RequestDispatcher) -> None:
        self._dispatcher = dispatcher

    async def list(
        self,
        collection: str,
        options: Optional[ListOptions] = None,
        limit: Optional[int] = None,
        record_options: Optional[RecordOptions] = None,
    ) -> RecordList:
        """Collect records page by page.

        Paging stops once *limit* items are collected (``None`` means all) or
        a page comes back shorter than ``per_page``.
        """
        options = options or ListOptions()
        record_options = record_options or RecordOptions()
        endpoint = records_endpoint(collection)
        base_query = options.base_query()

        collected: list[dict[str, Any]] = []
        last: Any = None
        page = options.page
        while limit is None or len(collected) < limit:
            query = {**base_query, "page": page, "perPage": options.per_page}
            last = await self._dispatcher.dispatch("GET", endpoint, query=query)
            items = last.get("items") if isinstance(last, Mapping) else None
            items = items or []
            logger.debug("page %s of %s: %d items", page, collection, len(items))
            for item in items:
                collected.append(item)
                if limit is not None and len(collected) >= limit:
                    break
            if len(items) < options.per_page:
                break
            page += 1

        meta: dict[str, Any] = {}
        if isinstance(last, Mapping):
            meta = {key: last.get(key) for key in ("page", "perPage", "totalItems", "totalPages")}

        debug_info = None
        if record_options.include_debug:
            debug_info = self._dispatcher.build_debug_info(
                RequestSpec(
                    method="GET",
                    endpoint=endpoint,
                    query={**base_query, "page": options.page, "perPage": options.per_page},
                )
            )
        items_out = [
            attach_meta(
                item,
                include_raw=record_options.include_raw,
                include_debug=record_options.include_debug,
                raw_response=meta,
                debug_info=debug_info,
            )
            for item in collected
        ]
        return RecordList(items=items_out, meta=meta)

    async def get(
        self,
        collection: str,
        record_id: str,
        options: Optional[RecordOptions] = None,
        expand: Optional[str] = None,
    ) -> dict[str, Any]:
        """Fetch one record by id."""
        endpoint = records_endpoint(collection, record_id)
        query = {"expand": expand} if expand else None
        response = await self._dispatcher.dispatch("GET", endpoint, query=query)
        return self._finish(
            _as_record(response), response, RequestSpec(method="GET", endpoint=endpoint, query=query), options
        )

    async def create(
        self,
        collection: str,
        fields: Mapping[str, Any],
        attachments: Sequence[Attachment] = (),
        options: Optional[RecordOptions] = None,
    ) -> dict[str, Any]:
        """Create a record; switches to multipart when *attachments* are given."""
        return await self._write("POST", records_endpoint(collection), fields, attachments, options)

    async def update(
        self,
        collection: str,
        record_id: str,
        fields: Mapping[str, Any],
        attachments: Sequence[Attachment] = (),
        options: Optional[RecordOptions] = None,
    ) -> dict[str, Any]:
        """Patch a record; switches to multipart when *attachments* are given."""
        return await self._write(
            "PATCH", records_endpoint(collection, record_id), fields, attachments, options
        )

    async def delete(
        self,
        collection: str,
        record_id: str,
        options: Optional[RecordOptions] = None,
    ) -> dict[str, Any]:
        """Delete a record and return ``{"id": ..., "deleted": True}``."""
        endpoint = records_endpoint(collection, record_id)
        await self._dispatcher.dispatch("DELETE", endpoint)
        output = {"id": record_id, "deleted": True}
        return self._finish(output, output, RequestSpec(method="DELETE", endpoint=endpoint), options)

    async def _write(
        self,
        method: str,
        endpoint: str,
        fields: Mapping[str, Any],
        attachments: Sequence[Attachment],
        options: Optional[RecordOptions],
    ) -> dict[str, Any]:
        options = options or RecordOptions()
        body = normalize_fields(fields, options.coerce)
        if attachments:
            response = await self._dispatcher.dispatch(
                method, endpoint, form_data=to_form_fields(body), files=list(attachments)
            )
        else:
            response = await self._dispatcher.dispatch(method, endpoint, body=body)
        return self._finish(
            _as_record(response), response, RequestSpec(method=method, endpoint=endpoint, body=body), options
        )

    def _finish(
        self,
        data: dict[str, Any],
        raw: Any,
        request: RequestSpec,
        options: Optional[RecordOptions],
    ) -> dict[str, Any]:
        options = options or RecordOptions()
        debug_info = self._dispatcher.build_debug_info(request) if options.include_debug else None
        return attach_meta(
            data,
            include_raw=options.include_raw,
            include_debug=options.include_debug,
            raw_response=raw,
            debug_info=debug_info,
        )

