from __future__ import annotations
"""Copy-then-delete moves and prefix deletion."""
from dataclasses import dataclass
import logging
from typing import Callable, Optional

from .batch import CANCELLED_MESSAGE, DEFAULT_MAX_WORKERS, run_batch
from .errors import InvalidInputError, NotFoundError, S3FoldersError
from .gateway import ObjectGateway
from .listing import PrefixEnumerator
from .models import DeleteOutcome, RenameOutcome
from .utils import content_type_for_key, ensure_folder_prefix, last_segment

LOGGER = logging.getLogger(__name__)


@dataclass
class _KeyResult:
    source: str
    destination: str = ""
    error: Optional[str] = None


def check_move_prefixes(old_prefix: str, new_prefix: str) -> tuple[str, str]:
    """Normalize both folder prefixes; equal or nested prefixes are rejected."""

    old_prefix = ensure_folder_prefix(old_prefix)
    new_prefix = ensure_folder_prefix(new_prefix)
    if old_prefix == new_prefix:
        raise InvalidInputError("New name must be different from the current name")
    if new_prefix.startswith(old_prefix) or old_prefix.startswith(new_prefix):
        raise InvalidInputError("Cannot move a folder into itself or into one of its parents")
    return old_prefix, new_prefix


class BulkMover:
    """Renames objects and folders on a store that has no rename primitive."""

    def __init__(
        self,
        gateway: ObjectGateway,
        *,
        enumerator: PrefixEnumerator | None = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
        cancel_requested: Optional[Callable[[], bool]] = None,
    ):
        self._gateway = gateway
        self._enumerator = enumerator or PrefixEnumerator(gateway)
        self._max_workers = max_workers
        self._cancel_requested = cancel_requested

    def move(self, old_prefix: str, new_prefix: str) -> RenameOutcome:
        """Move every object under ``old_prefix`` to ``new_prefix``.

        Raises:
            InvalidInputError: when the prefixes are equal or nested.
            NotFoundError: when nothing exists under ``old_prefix``.
            StoreOperationError: when the enumeration itself fails.
        """

        old_prefix, new_prefix = check_move_prefixes(old_prefix, new_prefix)
        keys = self._enumerator.list_all(old_prefix)
        if not keys:
            raise NotFoundError("Folder not found or is empty")

        LOGGER.debug("Moving %d object(s) from '%s' to '%s'", len(keys), old_prefix, new_prefix)
        outcome = self._move_all(keys, old_prefix, new_prefix)

        old_name = last_segment(old_prefix)
        new_name = last_segment(new_prefix)
        if outcome.failed:
            outcome.message = (
                f"Folder partially renamed from '{old_name}' to '{new_name}'. "
                f"Moved {outcome.total_moved} files, {outcome.failed_count} failed."
            )
        else:
            outcome.message = (
                f"Folder renamed from '{old_name}' to '{new_name}'. Moved {outcome.total_moved} files."
            )
        LOGGER.debug("%s", outcome.message)
        return outcome

    def move_keys(self, keys: list[str], old_prefix: str, new_prefix: str) -> RenameOutcome:
        """Move an explicit set of keys, e.g. the failures of an earlier :meth:`move`.

        Keys outside ``old_prefix`` are ignored.
        """

        old_prefix, new_prefix = check_move_prefixes(old_prefix, new_prefix)
        outcome = self._move_all(
            [key for key in keys if key.startswith(old_prefix)], old_prefix, new_prefix
        )
        outcome.message = f"Moved {outcome.total_moved} files, {outcome.failed_count} failed."
        return outcome

    def _move_all(self, keys: list[str], old_prefix: str, new_prefix: str) -> RenameOutcome:
        plan = [(key, new_prefix + key[len(old_prefix):]) for key in keys]
        results, cancelled = run_batch(
            plan,
            self._move_one,
            lambda pair: _KeyResult(source=pair[0], destination=pair[1], error=CANCELLED_MESSAGE),
            max_workers=self._max_workers,
            cancel_requested=self._cancel_requested,
        )
        outcome = RenameOutcome(
            old_key=old_prefix.rstrip("/"),
            new_key=new_prefix.rstrip("/"),
            is_folder=True,
            aborted_reason=CANCELLED_MESSAGE if cancelled else None,
        )
        for result in results:
            if result.error is None:
                outcome.moved.append(f"{result.source} -> {result.destination}")
            else:
                outcome.failed.append(result.source)
        return outcome

    def _move_one(self, pair: tuple[str, str]) -> _KeyResult:
        source, destination = pair
        try:
            self._gateway.copy(source, destination, content_type_for_key(destination))
        except S3FoldersError as exc:
            LOGGER.warning("Failed to copy object %s: %s", source, exc)
            return _KeyResult(source=source, destination=destination, error=str(exc))
        try:
            self._gateway.delete(source)
        except S3FoldersError as exc:
            LOGGER.warning("Failed to delete original object %s: %s", source, exc)
            return _KeyResult(source=source, destination=destination, error=str(exc))
        return _KeyResult(source=source, destination=destination)

    def move_object(self, old_key: str, new_key: str) -> RenameOutcome:
        """Rename a single object; any failure propagates."""

        self._gateway.head(old_key)
        self._gateway.copy(old_key, new_key, content_type_for_key(new_key))
        self._gateway.delete(old_key)
        old_name = old_key.rsplit("/", 1)[-1]
        new_name = new_key.rsplit("/", 1)[-1]
        return RenameOutcome(
            old_key=old_key,
            new_key=new_key,
            message=f"File renamed from '{old_name}' to '{new_name}'",
            moved=[f"{old_key} -> {new_key}"],
        )

    def delete_prefix(self, prefix: str) -> DeleteOutcome:
        """Delete every object under ``prefix``, folder markers included."""

        keys = self._enumerator.list_all(prefix)
        LOGGER.debug("Deleting %d object(s) under '%s'", len(keys), prefix)
        results, _ = run_batch(
            keys,
            self._delete_one,
            lambda key: _KeyResult(source=key, error=CANCELLED_MESSAGE),
            max_workers=self._max_workers,
            cancel_requested=self._cancel_requested,
        )
        failed = [result.source for result in results if result.error is not None]
        count = len(results) - len(failed)
        if failed:
            message = f"Deleted folder and {count} objects, {len(failed)} failed"
        else:
            message = f"Deleted folder and {count} objects"
        return DeleteOutcome(key=prefix, message=message, count=count, failed=failed)

    def _delete_one(self, key: str) -> _KeyResult:
        try:
            self._gateway.delete(key)
        except S3FoldersError as exc:
            LOGGER.warning("Failed to delete object %s: %s", key, exc)
            return _KeyResult(source=key, error=str(exc))
        return _KeyResult(source=key)
