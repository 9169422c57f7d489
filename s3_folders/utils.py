from __future__ import annotations
"""Helpers for key names, sizes and content types."""
import mimetypes

SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")
DEFAULT_CONTENT_TYPE = "application/octet-stream"
SOURCE_MAP_CONTENT_TYPE = "application/json"
INVALID_NAME_CHARS = frozenset('<>:"|?*\0')
RESERVED_NAMES = frozenset(
    ["CON", "PRN", "AUX", "NUL"]
    + [f"COM{index}" for index in range(1, 10)]
    + [f"LPT{index}" for index in range(1, 10)]
)


def format_size(size: int | None) -> str:
    if size is None:
        return "-"
    value = float(max(size, 0))
    for suffix in SIZE_UNITS:
        if value < 1024 or suffix == SIZE_UNITS[-1]:
            return f"{value:.1f} {suffix}" if suffix != "B" else f"{int(value)} {suffix}"
        value /= 1024
    return f"{size} B"


def content_type_for_key(key: str) -> str:
    """Infer the content type of an object from its key's extension.

    Source maps are always served as JSON, whatever the extension table says.
    """

    if key.lower().endswith(".map"):
        return SOURCE_MAP_CONTENT_TYPE
    content_type, _ = mimetypes.guess_type(key, strict=False)
    return content_type or DEFAULT_CONTENT_TYPE


def validate_filename(filename: str) -> bool:
    if not filename:
        return False
    if any(char in INVALID_NAME_CHARS for char in filename):
        return False
    if any(ord(char) < 0x20 for char in filename):
        return False
    stem = filename.split(".", 1)[0].upper()
    if stem in RESERVED_NAMES:
        return False
    if filename.startswith(" ") or filename.endswith(" ") or filename.startswith("."):
        return False
    return True


def ensure_folder_prefix(prefix: str) -> str:
    if prefix and not prefix.endswith("/"):
        return f"{prefix}/"
    return prefix


def is_folder_key(key: str) -> bool:
    return key.endswith("/")


def last_segment(key: str) -> str:
    cleaned = key.rstrip("/")
    return cleaned.rsplit("/", 1)[-1] or cleaned
