"""Per-item batch execution with optional continue-on-failure."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import Any, TypeVar

from pbclient.client.errors import normalize_error
from pbclient.exceptions import PbclientError, RequestError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def run_batch(
    items: Iterable[T],
    operation: Callable[[T], Awaitable[Any]],
    continue_on_fail: bool = False,
) -> list[Any]:
    """Run *operation* for each item in order and collect the results.

    With *continue_on_fail*, a failing item is recorded as an error item
    (``error``, ``code``, ``statusCode``, ``fieldErrors``, ``raw``) and the
    batch goes on; otherwise the first error propagates.
    """
    results: list[Any] = []
    for index, item in enumerate(items):
        try:
            results.append(await operation(item))
        except PbclientError as exc:
            if not continue_on_fail:
                raise
            logger.debug("item %d failed: %s", index, exc)
            error = exc if isinstance(exc, RequestError) else normalize_error(exc)
            results.append(error.to_item())
    return results
