from __future__ import annotations
"""Named AWS profiles from the shared configuration files."""
import logging
from typing import Callable

import botocore.session
from botocore.exceptions import ConfigNotFound

from .errors import (
    KIND_ACCESS_DENIED,
    KIND_EXPIRED,
    KIND_INVALID,
    S3FoldersError,
    StoreOperationError,
)
from .gateway import DEFAULT_REGION, ObjectGateway
from .models import (
    PROFILE_EXPIRED,
    PROFILE_INVALID,
    PROFILE_UNKNOWN,
    PROFILE_VALID,
    AwsProfile,
    BucketConfig,
    ProfileBucket,
)

LOGGER = logging.getLogger(__name__)


class AwsProfileManager:
    """Discovers profiles and the buckets each profile can see."""

    def __init__(
        self,
        client_factory: Callable[..., object] | None = None,
        config_loader: Callable[[], dict] | None = None,
    ):
        self._client_factory = client_factory
        self._config_loader = config_loader or self._load_full_config

    @staticmethod
    def _load_full_config() -> dict:
        session = botocore.session.get_session()
        try:
            return session.full_config
        except ConfigNotFound:
            return {}

    def _gateway(self, profile_name: str) -> ObjectGateway:
        config = BucketConfig(id="", name="", region="", aws_profile=profile_name)
        return ObjectGateway(config, client_factory=self._client_factory)

    def list_profiles(self) -> list[AwsProfile]:
        profiles = self._config_loader().get("profiles", {})
        result = []
        for name, values in profiles.items():
            region = values.get("region") if isinstance(values, dict) else None
            result.append(AwsProfile(name=name, region=region))
        return result

    def validate_profile(self, profile_name: str) -> str:
        """Return the credential status of ``profile_name`` by listing buckets."""

        try:
            gateway = self._gateway(profile_name)
        except S3FoldersError:
            return PROFILE_INVALID
        try:
            gateway.list_buckets()
        except StoreOperationError as exc:
            LOGGER.debug("Profile '%s' failed validation: %s", profile_name, exc)
            if exc.kind == KIND_EXPIRED:
                return PROFILE_EXPIRED
            if exc.kind in (KIND_INVALID, KIND_ACCESS_DENIED):
                return PROFILE_INVALID
            return PROFILE_UNKNOWN
        return PROFILE_VALID

    def buckets_for_profile(self, profile_name: str) -> list[ProfileBucket]:
        gateway = self._gateway(profile_name)
        buckets = []
        for bucket in gateway.list_buckets():
            name = bucket.get("Name")
            if not name:
                continue
            try:
                region = gateway.bucket_region(name)
            except S3FoldersError:
                region = DEFAULT_REGION
            buckets.append(
                ProfileBucket(name=name, region=region, creation_date=bucket.get("CreationDate"))
            )
        buckets.sort(key=lambda item: item.name)
        LOGGER.debug("Profile '%s' sees %d bucket(s)", profile_name, len(buckets))
        return buckets
