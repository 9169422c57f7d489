from __future__ import annotations
"""Operations exposed to a shell: one gateway per call, built from the profile store."""

import logging
from datetime import datetime
from typing import Callable, Optional

from .aws_profiles import AwsProfileManager
from .errors import InvalidInputError
from .gateway import ObjectGateway
from .listing import PrefixEnumerator
from .models import (
    AwsProfile,
    BucketConfig,
    BulkResult,
    DeleteOutcome,
    ObjectEntry,
    ObjectMetadata,
    ProfileBucket,
    RenameOutcome,
)
from .mover import BulkMover, check_move_prefixes
from .profiles import BucketProfileStore
from .settings import AppSettings, SettingsStorage
from .uploader import BulkUploader
from .utils import ensure_folder_prefix, is_folder_key, validate_filename

LOGGER = logging.getLogger(__name__)


def _new_name(new_key: str) -> str:
    stripped = new_key.rstrip("/")
    return stripped.rsplit("/", 1)[-1] if stripped else new_key


class S3FoldersController:
    """Coordinates the profile store with the bulk object-operation engine."""

    def __init__(
        self,
        storage: BucketProfileStore | None = None,
        settings_storage: SettingsStorage | None = None,
        *,
        client_factory: Callable[..., object] | None = None,
        profile_manager: AwsProfileManager | None = None,
    ):
        self._storage = storage or BucketProfileStore()
        self._settings_storage = settings_storage or SettingsStorage()
        self._client_factory = client_factory
        self._profile_manager = profile_manager or AwsProfileManager(client_factory=client_factory)

    @property
    def settings(self) -> AppSettings:
        return self._settings_storage.load()

    # Bucket configuration
    def get_buckets(self) -> list[BucketConfig]:
        return self._storage.load()

    def get_bucket(self, bucket_id: str) -> BucketConfig:
        return self._storage.get(bucket_id)

    def add_bucket(self, bucket: BucketConfig) -> list[BucketConfig]:
        if not bucket.name:
            raise InvalidInputError("Bucket name is required")
        return self._storage.add(bucket)

    def update_bucket(self, bucket: BucketConfig) -> list[BucketConfig]:
        return self._storage.update(bucket)

    def delete_bucket_config(self, bucket_id: str) -> list[BucketConfig]:
        return self._storage.delete(bucket_id)

    # Object operations
    def _gateway(self, bucket_id: str) -> ObjectGateway:
        return ObjectGateway(self._storage.get(bucket_id), client_factory=self._client_factory)

    def list_objects(self, bucket_id: str, prefix: str | None = None) -> list[ObjectEntry]:
        return PrefixEnumerator(self._gateway(bucket_id)).list(prefix or "")

    def delete_object(
        self,
        bucket_id: str,
        key: str,
        *,
        cancel_requested: Optional[Callable[[], bool]] = None,
    ) -> DeleteOutcome:
        gateway = self._gateway(bucket_id)
        if is_folder_key(key):
            mover = BulkMover(
                gateway,
                max_workers=self.settings.max_workers,
                cancel_requested=cancel_requested,
            )
            outcome = mover.delete_prefix(key)
            LOGGER.debug("Deleted %d object(s) under '%s'", outcome.count, key)
            return outcome
        gateway.delete(key)
        return DeleteOutcome(key=key, message="Object deleted successfully")

    def get_object_metadata(self, bucket_id: str, key: str) -> ObjectMetadata:
        return self._gateway(bucket_id).head(key)

    def upload_files(
        self,
        *,
        bucket_id: str,
        files: list[str],
        base_path: str = "",
        current_path: str = "",
        cancel_requested: Optional[Callable[[], bool]] = None,
    ) -> BulkResult:
        settings = self.settings
        uploader = BulkUploader(
            self._gateway(bucket_id),
            resolver=settings.key_resolver(),
            max_workers=settings.max_workers,
            cancel_requested=cancel_requested,
        )
        LOGGER.debug("Uploading %d path(s) to '%s'", len(files), current_path)
        return uploader.upload(files, base_path, current_path)

    def count_files(self, files: list[str]) -> int:
        return BulkUploader.count_files(files)

    def rename_object(
        self,
        *,
        bucket_id: str,
        old_key: str,
        new_key: str,
        is_folder: bool,
        cancel_requested: Optional[Callable[[], bool]] = None,
    ) -> RenameOutcome:
        if not validate_filename(_new_name(new_key)):
            raise InvalidInputError("Invalid filename: contains invalid characters or reserved names")
        if is_folder:
            check_move_prefixes(old_key, new_key)
        elif old_key == new_key:
            raise InvalidInputError("New name must be different from the current name")

        mover = BulkMover(
            self._gateway(bucket_id),
            max_workers=self.settings.max_workers,
            cancel_requested=cancel_requested,
        )
        if is_folder:
            return mover.move(old_key, new_key)
        return mover.move_object(old_key, new_key)

    def create_folder(self, bucket_id: str, folder_path: str) -> str:
        folder_key = ensure_folder_prefix(folder_path.strip().lstrip("/"))
        if not folder_key or not validate_filename(_new_name(folder_key)):
            raise InvalidInputError("Invalid folder name")
        self._gateway(bucket_id).put(folder_key, b"", "application/x-directory")
        return folder_key

    def get_folder_latest_modified(self, bucket_id: str, folder_key: str) -> Optional[datetime]:
        return PrefixEnumerator(self._gateway(bucket_id)).latest_modified(folder_key)

    # AWS named profiles
    def list_aws_profiles(self) -> list[AwsProfile]:
        return self._profile_manager.list_profiles()

    def validate_aws_profile(self, profile_name: str) -> str:
        return self._profile_manager.validate_profile(profile_name)

    def get_buckets_for_profile(self, profile_name: str) -> list[ProfileBucket]:
        return self._profile_manager.buckets_for_profile(profile_name)
