from __future__ import annotations
"""Prefix listings: one browsing page, or every key under a prefix."""
from datetime import datetime
import logging
from typing import Iterator, Optional

from .errors import StoreOperationError
from .gateway import ObjectGateway
from .models import ObjectEntry
from .utils import ensure_folder_prefix, is_folder_key, last_segment

LOGGER = logging.getLogger(__name__)


class PrefixEnumerator:
    """Lists keys under a prefix through an :class:`ObjectGateway`."""

    def __init__(self, gateway: ObjectGateway):
        self._gateway = gateway

    def list(self, prefix: str = "") -> list[ObjectEntry]:
        """Return the folders and files directly under ``prefix``.

        Folders come from the common prefixes of a single delimited listing.
        Folder markers are not reported as files.
        """

        response = self._gateway.list_page(prefix=prefix, delimiter="/")
        entries: list[ObjectEntry] = []
        for common in response.get("CommonPrefixes", []):
            folder_key = common.get("Prefix")
            if not folder_key:
                continue
            entries.append(
                ObjectEntry(key=folder_key, name=last_segment(folder_key), is_folder=True)
            )
        for obj in response.get("Contents", []):
            key = obj.get("Key")
            if not key or is_folder_key(key):
                continue
            entries.append(
                ObjectEntry(
                    key=key,
                    name=key.rsplit("/", 1)[-1],
                    size=int(obj.get("Size", 0)),
                    last_modified=obj.get("LastModified"),
                )
            )
        LOGGER.debug("Listed %d entries under '%s'", len(entries), prefix)
        return entries

    def iter_objects(self, prefix: str) -> Iterator[dict]:
        """Yield every object record under ``prefix``, page after page."""

        continuation: str | None = None
        page_number = 0
        while True:
            response = self._gateway.list_page(prefix=prefix, continuation_token=continuation)
            page_number += 1
            yield from response.get("Contents", [])
            if not response.get("IsTruncated"):
                break
            continuation = response.get("NextContinuationToken")
            if not continuation:
                raise StoreOperationError(
                    f"Failed to list objects: truncated page {page_number} under '{prefix}' "
                    "has no continuation token",
                    operation="list objects",
                )
        LOGGER.debug("Enumerated %d page(s) under '%s'", page_number, prefix)

    def list_all(self, prefix: str) -> list[str]:
        """Return every key under ``prefix``, folder markers included.

        Keys keep the provider's order. A failing page raises, so a returned
        list is always complete.
        """

        return [obj["Key"] for obj in self.iter_objects(prefix) if obj.get("Key")]

    def latest_modified(self, folder_key: str) -> Optional[datetime]:
        latest: Optional[datetime] = None
        for obj in self.iter_objects(ensure_folder_prefix(folder_key)):
            modified = obj.get("LastModified")
            if modified and (latest is None or modified > latest):
                latest = modified
        return latest
