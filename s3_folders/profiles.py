from __future__ import annotations
"""Bucket connection profiles and their persistence."""
import json
import logging
from pathlib import Path
import uuid

import keyring
from keyring.errors import KeyringError

from .errors import ConfigurationError, NotFoundError, SerializationError
from .models import BucketConfig

LOGGER = logging.getLogger(__name__)


class KeychainStore:
    """Encapsulates OS keychain access for secrets."""

    def __init__(self, service_name: str = "s3folders"):
        self._service_name = service_name

    def get_secret(self, bucket_id: str) -> str:
        if not bucket_id:
            return ""
        try:
            return keyring.get_password(self._service_name, bucket_id) or ""
        except KeyringError:
            LOGGER.debug("Keychain lookup failed for bucket '%s'", bucket_id)
            return ""

    def set_secret(self, bucket_id: str, secret_key: str) -> None:
        if not bucket_id:
            return
        if not secret_key:
            self.delete_secret(bucket_id)
            return
        try:
            keyring.set_password(self._service_name, bucket_id, secret_key)
        except KeyringError:
            LOGGER.warning("Could not store secret for bucket '%s' in the keychain", bucket_id)

    def delete_secret(self, bucket_id: str) -> None:
        if not bucket_id:
            return
        try:
            keyring.delete_password(self._service_name, bucket_id)
        except KeyringError:
            return


def default_config_path() -> Path:
    try:
        home = Path.home()
    except RuntimeError as exc:
        raise ConfigurationError("Could not find home directory") from exc
    return home / ".s3folders" / "config.json"


class BucketProfileStore:
    """JSON-backed store of :class:`BucketConfig` entries keyed by id.

    Secrets live in the OS keychain; a plaintext ``secretKey`` found in the
    file is moved there on first load.
    """

    def __init__(self, storage_path: str | Path | None = None, keychain: KeychainStore | None = None):
        self._path = Path(storage_path) if storage_path is not None else default_config_path()
        self._keychain = keychain or KeychainStore()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> list[BucketConfig]:
        if not self._path.exists():
            return []
        try:
            text = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigurationError(f"Cannot read {self._path}: {exc}") from exc
        try:
            data = json.loads(text)
            entries = data.get("buckets", []) if isinstance(data, dict) else data
            if not isinstance(entries, list):
                raise TypeError("'buckets' must be a list")
        except (json.JSONDecodeError, TypeError) as exc:
            raise SerializationError(f"Invalid bucket configuration in {self._path}: {exc}") from exc

        buckets: list[BucketConfig] = []
        saw_plaintext = False
        for entry in entries:
            try:
                bucket = BucketConfig.from_dict(entry)
            except (KeyError, TypeError, AttributeError):
                LOGGER.warning("Skipping malformed bucket entry in %s", self._path)
                continue
            if bucket.secret_key:
                saw_plaintext = True
                self._keychain.set_secret(bucket.id, bucket.secret_key)
            else:
                bucket.secret_key = self._keychain.get_secret(bucket.id)
            buckets.append(bucket)
        if saw_plaintext:
            self._write_data(buckets)
        return buckets

    def save(self, buckets: list[BucketConfig]) -> None:
        existing_ids = {bucket.id for bucket in self._read_without_secrets()}
        for bucket in buckets:
            self._keychain.set_secret(bucket.id, bucket.secret_key)
        for stale_id in existing_ids - {bucket.id for bucket in buckets}:
            self._keychain.delete_secret(stale_id)
        self._write_data(buckets)

    def get(self, bucket_id: str) -> BucketConfig:
        for bucket in self.load():
            if bucket.id == bucket_id:
                return bucket
        raise NotFoundError(f"Bucket not found: {bucket_id}")

    def add(self, bucket: BucketConfig) -> list[BucketConfig]:
        buckets = self.load()
        if not bucket.id:
            bucket.id = str(uuid.uuid4())
        if not bucket.display_name:
            bucket.display_name = bucket.name
        buckets.append(bucket)
        self.save(buckets)
        return buckets

    def update(self, bucket: BucketConfig) -> list[BucketConfig]:
        buckets = self.load()
        for index, existing in enumerate(buckets):
            if existing.id == bucket.id:
                buckets[index] = bucket
                break
        else:
            raise NotFoundError(f"Bucket not found: {bucket.id}")
        self.save(buckets)
        return buckets

    def delete(self, bucket_id: str) -> list[BucketConfig]:
        buckets = self.load()
        remaining = [bucket for bucket in buckets if bucket.id != bucket_id]
        if len(remaining) == len(buckets):
            raise NotFoundError(f"Bucket not found: {bucket_id}")
        self.save(remaining)
        return remaining

    def _read_without_secrets(self) -> list[BucketConfig]:
        if not self._path.exists():
            return []
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            return []
        entries = data.get("buckets", []) if isinstance(data, dict) else []
        buckets = []
        for entry in entries:
            try:
                buckets.append(BucketConfig.from_dict(entry))
            except (KeyError, TypeError, AttributeError):
                continue
        return buckets

    def _write_data(self, buckets: list[BucketConfig]) -> None:
        payload = {"buckets": [bucket.to_dict(include_secret=False) for bucket in buckets]}
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as exc:
            raise ConfigurationError(f"Cannot write {self._path}: {exc}") from exc
