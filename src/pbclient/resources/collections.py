"""Collection discovery."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Optional

from pbclient.client.dispatcher import RequestDispatcher

COLLECTIONS_PER_PAGE = 200
MAX_COLLECTION_PAGES = 20


@dataclass(frozen=True)
class CollectionRef:
    """Name and id of one collection."""

    name: str
    id: Optional[str] = None

    @property
    def label(self) -> str:
        return f"{self.name} ({self.id})" if self.id else self.name


class CollectionsResource:
    """Lists the collections visible to the configured credentials."""

    def __init__(self, dispatcher: RequestDispatcher) -> None:
        self._dispatcher = dispatcher

    async def list(self) -> list[CollectionRef]:
        """Return every collection, paging 200 at a time (at most 20 pages)."""
        refs: list[CollectionRef] = []
        for page in range(1, MAX_COLLECTION_PAGES + 1):
            response = await self._dispatcher.dispatch(
                "GET",
                "/api/collections",
                query={"page": page, "perPage": COLLECTIONS_PER_PAGE},
            )
            items = response.get("items") if isinstance(response, Mapping) else None
            items = items or []
            for item in items:
                name = item.get("name") or item.get("id")
                if name:
                    refs.append(CollectionRef(name=name, id=item.get("id")))
            if len(items) < COLLECTIONS_PER_PAGE:
                break
        return refs

    async def names(self) -> list[str]:
        """Return the sorted collection names."""
        return sorted(ref.name for ref in await self.list())
