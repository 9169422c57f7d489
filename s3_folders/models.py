from __future__ import annotations
"""Data models for bucket configuration, listings and bulk results."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Union

STATUS_COMPLETED = "completed"
STATUS_FAILED = "failed"


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class BucketConfig:
    """A saved bucket connection."""

    id: str
    name: str
    display_name: str = ""
    region: str = "us-east-1"
    access_key: str = ""
    secret_key: str = ""
    endpoint: Optional[str] = None
    aws_profile: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "BucketConfig":
        return cls(
            id=data.get("id") or "",
            name=data["name"],
            display_name=data.get("displayName") or data["name"],
            region=data.get("region") or "us-east-1",
            access_key=data.get("accessKey") or "",
            secret_key=data.get("secretKey") or "",
            endpoint=data.get("endpoint") or None,
            aws_profile=data.get("awsProfile") or None,
        )

    def to_dict(self, *, include_secret: bool = True) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "displayName": self.display_name,
            "region": self.region,
            "accessKey": self.access_key,
            "endpoint": self.endpoint,
            "awsProfile": self.aws_profile,
        }
        if include_secret:
            data["secretKey"] = self.secret_key
        return data


@dataclass
class ObjectEntry:
    """A listed file or synthetic folder."""

    key: str
    name: str
    size: int = 0
    is_folder: bool = False
    last_modified: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "name": self.name,
            "size": self.size,
            "isFolder": self.is_folder,
            "lastModified": _isoformat(self.last_modified),
        }


@dataclass
class ObjectMetadata:
    """Metadata about a single object."""

    key: str
    content_length: int = 0
    size_formatted: str = "0 B"
    content_type: Optional[str] = None
    last_modified: Optional[datetime] = None
    etag: Optional[str] = None
    storage_class: Optional[str] = None
    metadata: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "contentType": self.content_type,
            "contentLength": self.content_length,
            "lastModified": _isoformat(self.last_modified),
            "etag": self.etag,
            "storageClass": self.storage_class,
            "sizeFormatted": self.size_formatted,
            "metadata": dict(self.metadata),
        }


@dataclass(frozen=True)
class Complete:
    """Every item of a batch succeeded."""

    succeeded: int


@dataclass(frozen=True)
class Partial:
    """At least one item failed; ``succeeded`` may be zero."""

    succeeded: int
    failed: int


@dataclass(frozen=True)
class Aborted:
    """The batch stopped before every item was attempted."""

    reason: str
    succeeded: int = 0
    failed: int = 0


Outcome = Union[Complete, Partial, Aborted]


def summarize(succeeded: int, failed: int, aborted_reason: str | None = None) -> Outcome:
    if aborted_reason:
        return Aborted(reason=aborted_reason, succeeded=succeeded, failed=failed)
    if failed:
        return Partial(succeeded=succeeded, failed=failed)
    return Complete(succeeded=succeeded)


@dataclass
class TransferOutcome:
    """Result of uploading or moving one item."""

    key: str
    size: int = 0
    status: str = STATUS_COMPLETED
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == STATUS_COMPLETED

    @classmethod
    def completed(cls, key: str, size: int) -> "TransferOutcome":
        return cls(key=key, size=size, status=STATUS_COMPLETED)

    @classmethod
    def failed(cls, key: str, error: str) -> "TransferOutcome":
        return cls(key=key, size=0, status=STATUS_FAILED, error=error)

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "size": self.size,
            "status": self.status,
            "error": self.error,
        }


@dataclass
class BulkResult:
    """Aggregated result of a bulk upload."""

    uploaded: list[TransferOutcome] = field(default_factory=list)
    failed: list[TransferOutcome] = field(default_factory=list)
    aborted_reason: Optional[str] = None

    @property
    def total(self) -> int:
        return len(self.uploaded) + len(self.failed)

    @property
    def succeeded(self) -> int:
        return len(self.uploaded)

    @property
    def failed_count(self) -> int:
        return len(self.failed)

    @property
    def outcome(self) -> Outcome:
        return summarize(self.succeeded, self.failed_count, self.aborted_reason)

    def add(self, outcome: TransferOutcome) -> None:
        if outcome.ok:
            self.uploaded.append(outcome)
        else:
            self.failed.append(outcome)

    @property
    def message(self) -> str:
        if not self.failed:
            return f"Successfully uploaded {self.succeeded} file(s)"
        if not self.uploaded:
            return f"Failed to upload all {self.failed_count} file(s)"
        return f"Uploaded {self.succeeded} file(s), {self.failed_count} failed"

    def to_dict(self) -> dict:
        return {
            "message": self.message,
            "uploadedFiles": [item.to_dict() for item in self.uploaded],
            "failedFiles": [item.to_dict() for item in self.failed],
            "totalFiles": self.total,
        }


@dataclass
class RenameOutcome:
    """Result of renaming a file or a folder."""

    old_key: str
    new_key: str
    message: str = ""
    moved: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    is_folder: bool = False
    aborted_reason: Optional[str] = None

    @property
    def total_moved(self) -> int:
        return len(self.moved)

    @property
    def failed_count(self) -> int:
        return len(self.failed)

    @property
    def outcome(self) -> Outcome:
        return summarize(self.total_moved, self.failed_count, self.aborted_reason)

    def to_dict(self) -> dict:
        data = {
            "message": self.message,
            "oldKey": self.old_key,
            "newKey": self.new_key,
            "movedFiles": None,
            "totalMoved": None,
        }
        if self.is_folder:
            data["movedFiles"] = list(self.moved)
            data["totalMoved"] = self.total_moved
            data["failedFiles"] = list(self.failed)
            data["failedCount"] = self.failed_count
        return data


@dataclass
class DeleteOutcome:
    """Result of deleting an object or every object under a folder."""

    key: str
    message: str
    count: Optional[int] = None
    failed: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        data: dict = {"message": self.message, "key": self.key}
        if self.count is not None:
            data["count"] = self.count
            data["failedKeys"] = list(self.failed)
        return data


@dataclass
class ProfileBucket:
    """A bucket visible to a named AWS profile."""

    name: str
    region: str
    creation_date: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "region": self.region,
            "creationDate": _isoformat(self.creation_date),
        }


PROFILE_VALID = "valid"
PROFILE_EXPIRED = "expired"
PROFILE_INVALID = "invalid"
PROFILE_UNKNOWN = "unknown"


@dataclass
class AwsProfile:
    """A named profile from the shared AWS configuration."""

    name: str
    region: Optional[str] = None
    status: str = PROFILE_UNKNOWN

    def to_dict(self) -> dict:
        return {"name": self.name, "region": self.region, "status": self.status}
