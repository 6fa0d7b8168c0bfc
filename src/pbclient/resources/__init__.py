"""Backend operations built on the request dispatcher.

- :class:`RecordsResource` -- list/get/create/update/delete records.
- :class:`AuthResource` -- explicit logins and token refresh.
- :class:`CollectionsResource` -- collection discovery.
- :func:`custom_request` / :func:`check_connection` -- free-form calls.
- :func:`run_batch` -- per-item execution with continue-on-failure.
"""

from pbclient.resources.auth import AuthResource
from pbclient.resources.batch import run_batch
from pbclient.resources.collections import CollectionRef, CollectionsResource
from pbclient.resources.custom import check_connection, custom_request
from pbclient.resources.records import (
    ListOptions,
    RecordList,
    RecordOptions,
    RecordsResource,
    records_endpoint,
)

__all__ = [
    "AuthResource",
    "CollectionRef",
    "CollectionsResource",
    "ListOptions",
    "RecordList",
    "RecordOptions",
    "RecordsResource",
    "check_connection",
    "custom_request",
    "records_endpoint",
    "run_batch",
]
