from __future__ import annotations
"""Application settings persistence helpers."""

from dataclasses import dataclass, field
import json
import logging
from pathlib import Path

from .batch import DEFAULT_MAX_WORKERS
from .errors import ConfigurationError
from .keys import DEFAULT_ANCHOR_DIRECTORIES, DEFAULT_FALLBACK_DEPTH, KeyResolver

LOGGER = logging.getLogger(__name__)
MAX_WORKERS_LIMIT = 32


@dataclass
class AppSettings:
    """Tunables for bulk operations and key resolution."""

    max_workers: int = DEFAULT_MAX_WORKERS
    anchor_directories: tuple[str, ...] = field(default=DEFAULT_ANCHOR_DIRECTORIES)
    fallback_depth: int = DEFAULT_FALLBACK_DEPTH

    def key_resolver(self) -> KeyResolver:
        return KeyResolver(self.anchor_directories, self.fallback_depth)


def _positive_int(value: object, default: int, upper: int | None = None) -> int:
    if isinstance(value, bool):
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    if number <= 0:
        return default
    if upper is not None:
        number = min(number, upper)
    return number


def default_settings_path() -> Path:
    try:
        home = Path.home()
    except RuntimeError as exc:
        raise ConfigurationError("Could not find home directory") from exc
    return home / ".s3folders" / "settings.json"


class SettingsStorage:
    """JSON-backed persistence for :class:`AppSettings`."""

    def __init__(self, storage_path: str | Path | None = None):
        if storage_path is None:
            storage_path = default_settings_path()
        self._path = Path(storage_path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> AppSettings:
        if not self._path.exists():
            return AppSettings()
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            LOGGER.warning("Ignoring unreadable settings file %s", self._path)
            return AppSettings()
        if not isinstance(data, dict):
            return AppSettings()

        anchors = data.get("anchor_directories")
        if isinstance(anchors, list) and all(isinstance(name, str) and name for name in anchors):
            anchor_value = tuple(anchors)
        else:
            anchor_value = DEFAULT_ANCHOR_DIRECTORIES

        return AppSettings(
            max_workers=_positive_int(data.get("max_workers"), DEFAULT_MAX_WORKERS, MAX_WORKERS_LIMIT),
            anchor_directories=anchor_value,
            fallback_depth=_positive_int(data.get("fallback_depth"), DEFAULT_FALLBACK_DEPTH),
        )

    def save(self, settings: AppSettings) -> None:
        payload = {
            "max_workers": min(max(int(settings.max_workers), 1), MAX_WORKERS_LIMIT),
            "anchor_directories": list(settings.anchor_directories),
            "fallback_depth": max(int(settings.fallback_depth), 1),
        }
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError:
            # Persist best-effort; ignore filesystem issues.
            LOGGER.warning("Could not write settings file %s", self._path)
            return
