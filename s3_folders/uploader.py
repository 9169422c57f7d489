from __future__ import annotations
"""Recursive upload of local files and directory trees."""
from dataclasses import dataclass
import logging
import os
from typing import Callable, Iterable, Iterator, Optional

from .batch import CANCELLED_MESSAGE, DEFAULT_MAX_WORKERS, run_batch
from .errors import InvalidInputError, LocalIOError, S3FoldersError
from .gateway import ObjectGateway
from .keys import KeyResolver
from .models import BulkResult, TransferOutcome
from .utils import content_type_for_key

LOGGER = logging.getLogger(__name__)

MISSING_FILE_MESSAGE = "File does not exist"
NOT_REGULAR_FILE_MESSAGE = "Not a regular file or directory"


@dataclass
class WalkItem:
    """A regular file to upload, or a path that could not be walked."""

    path: str
    error: Optional[str] = None


def _sorted_entries(directory: str) -> list[os.DirEntry]:
    with os.scandir(directory) as entries:
        return sorted(entries, key=lambda entry: entry.name)


def walk_files(paths: Iterable[str]) -> Iterator[WalkItem]:
    """Expand ``paths`` into the regular files beneath them, depth first.

    Missing inputs, special files (FIFOs, devices) and unreadable directories
    are yielded as items carrying an error so callers can account for them
    without stopping the walk.
    """

    for path in paths:
        if not os.path.exists(path):
            yield WalkItem(path=path, error=MISSING_FILE_MESSAGE)
        elif os.path.isdir(path):
            yield from _walk_directory(path)
        elif os.path.isfile(path):
            yield WalkItem(path=path)
        else:
            yield WalkItem(path=path, error=NOT_REGULAR_FILE_MESSAGE)


def _walk_directory(root: str) -> Iterator[WalkItem]:
    try:
        stack = [iter(_sorted_entries(root))]
    except OSError as exc:
        yield WalkItem(path=root, error=f"Failed to process directory: {exc}")
        return
    visited = {os.path.realpath(root)}

    while stack:
        entry = next(stack[-1], None)
        if entry is None:
            stack.pop()
            continue
        if entry.is_file():
            yield WalkItem(path=entry.path)
        elif entry.is_dir():
            real = os.path.realpath(entry.path)
            if real in visited:
                continue
            visited.add(real)
            try:
                stack.append(iter(_sorted_entries(entry.path)))
            except OSError as exc:
                yield WalkItem(path=entry.path, error=f"Failed to process subdirectory: {exc}")


class BulkUploader:
    """Uploads files and directory trees, one outcome per file."""

    def __init__(
        self,
        gateway: ObjectGateway,
        *,
        resolver: KeyResolver | None = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
        cancel_requested: Optional[Callable[[], bool]] = None,
    ):
        self._gateway = gateway
        self._resolver = resolver or KeyResolver()
        self._max_workers = max_workers
        self._cancel_requested = cancel_requested

    def upload(self, files: Iterable[str], base_path: str = "", current_prefix: str = "") -> BulkResult:
        result = BulkResult()
        uploads: list[WalkItem] = []
        for item in walk_files(files):
            if item.error is None:
                uploads.append(item)
            else:
                LOGGER.warning("Skipping %s: %s", item.path, item.error)
                result.add(TransferOutcome.failed(item.path, item.error))

        def upload_one(item: WalkItem) -> TransferOutcome:
            return self._upload_file(item.path, base_path, current_prefix)

        outcomes, cancelled = run_batch(
            uploads,
            upload_one,
            lambda item: TransferOutcome.failed(item.path, CANCELLED_MESSAGE),
            max_workers=self._max_workers,
            cancel_requested=self._cancel_requested,
        )
        for outcome in outcomes:
            result.add(outcome)
        if cancelled:
            result.aborted_reason = CANCELLED_MESSAGE

        LOGGER.debug(
            "Upload finished: %d succeeded, %d failed", result.succeeded, result.failed_count
        )
        return result

    def _upload_file(self, path: str, base_path: str, current_prefix: str) -> TransferOutcome:
        try:
            key = self._resolver.resolve(base_path, current_prefix, path)
        except InvalidInputError as exc:
            return TransferOutcome.failed(path, str(exc))
        try:
            with open(path, "rb") as handle:
                body = handle.read()
        except OSError as exc:
            error = LocalIOError(f"Cannot read file {path}: {exc}")
            LOGGER.warning("%s", error)
            return TransferOutcome.failed(key, str(error))
        try:
            self._gateway.put(key, body, content_type_for_key(key))
        except S3FoldersError as exc:
            LOGGER.warning("Failed to upload %s to %s: %s", path, key, exc)
            return TransferOutcome.failed(key, str(exc))
        return TransferOutcome.completed(key, len(body))

    @staticmethod
    def count_files(files: Iterable[str]) -> int:
        """Count the regular files :meth:`upload` would attempt."""

        return sum(1 for item in walk_files(files) if item.error is None)
