from __future__ import annotations
"""Mapping of local file paths onto destination object keys."""
from pathlib import PurePath
from typing import Iterable

from .errors import InvalidInputError
from .utils import ensure_folder_prefix

DEFAULT_ANCHOR_DIRECTORIES = ("Documents", "Desktop", "Downloads")
DEFAULT_FALLBACK_DEPTH = 2


class KeyResolver:
    """Resolves the destination key of a local file.

    With a base path the file keeps its path relative to that base. Without
    one (files dropped from anywhere on disk) the key is guessed from the
    path itself: everything after the first anchor directory, or else the
    last ``fallback_depth`` segments.
    """

    def __init__(
        self,
        anchor_directories: Iterable[str] = DEFAULT_ANCHOR_DIRECTORIES,
        fallback_depth: int = DEFAULT_FALLBACK_DEPTH,
    ):
        self._anchors = tuple(anchor_directories)
        self._fallback_depth = max(int(fallback_depth), 1)

    @property
    def anchor_directories(self) -> tuple[str, ...]:
        return self._anchors

    @property
    def fallback_depth(self) -> int:
        return self._fallback_depth

    def resolve(self, base_path: str, current_prefix: str, local_path: str) -> str:
        file_name = PurePath(local_path).name
        if not file_name:
            raise InvalidInputError(f"Invalid path: {local_path}")

        key = ensure_folder_prefix(current_prefix or "")

        if base_path:
            relative = self._relative_to_base(base_path, local_path)
            if relative:
                return key + relative
        else:
            relative = self._guess_relative(local_path)
            if relative:
                return key + relative

        return key + file_name

    def _relative_to_base(self, base_path: str, local_path: str) -> str | None:
        try:
            relative = PurePath(local_path).relative_to(PurePath(base_path))
        except ValueError:
            return None
        if not relative.parts:
            return None
        return relative.as_posix()

    def _guess_relative(self, local_path: str) -> str | None:
        segments = local_path.split("/")
        if len(segments) <= 1:
            return None

        start = 0
        for index, segment in enumerate(segments):
            if segment in self._anchors:
                start = index + 1
                break

        if start == 0 and len(segments) > self._fallback_depth:
            start = len(segments) - self._fallback_depth

        if start < len(segments):
            return "/".join(segments[start:])
        return None
