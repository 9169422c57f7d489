from __future__ import annotations
"""Thin adapter binding one bucket configuration to the S3 client."""
import logging
from typing import Callable

import boto3
from botocore.client import Config

from .errors import PROVIDER_ERRORS, translate_error
from .models import BucketConfig, ObjectMetadata
from .utils import format_size

LOGGER = logging.getLogger(__name__)

DEFAULT_REGION = "us-east-1"
LIST_PAGE_SIZE = 1000


def _default_client_factory(service_name: str, *, profile_name: str | None = None, **kwargs):
    session = boto3.session.Session(profile_name=profile_name)
    return session.client(service_name, **kwargs)


class ObjectGateway:
    """Maps each store primitive 1:1 onto a provider call for one bucket.

    Provider exceptions never leave this class untranslated: every call
    raises :class:`~s3_folders.errors.StoreOperationError` or
    :class:`~s3_folders.errors.NotFoundError` instead.
    """

    def __init__(
        self,
        config: BucketConfig,
        client_factory: Callable[..., object] | None = None,
    ):
        self._config = config
        self._client_factory = client_factory or _default_client_factory
        self._client = self._invoke("create the S3 client", self._create_client)

    @property
    def bucket_name(self) -> str:
        return self._config.name

    @property
    def config(self) -> BucketConfig:
        return self._config

    def _create_client(self):
        options = {"signature_version": "s3v4"}
        kwargs: dict[str, object] = {}
        if self._config.region:
            kwargs["region_name"] = self._config.region
        elif not self._config.aws_profile:
            kwargs["region_name"] = DEFAULT_REGION
        if self._config.endpoint:
            kwargs["endpoint_url"] = self._config.endpoint
            options["s3"] = {"addressing_style": "path"}
        if self._config.access_key and self._config.secret_key:
            kwargs["aws_access_key_id"] = self._config.access_key
            kwargs["aws_secret_access_key"] = self._config.secret_key
        elif self._config.aws_profile:
            kwargs["profile_name"] = self._config.aws_profile
        kwargs["config"] = Config(**options)
        return self._client_factory("s3", **kwargs)

    def _invoke(self, operation: str, func: Callable, **kwargs):
        try:
            return func(**kwargs)
        except PROVIDER_ERRORS as exc:
            LOGGER.debug("Provider call failed (%s) for bucket '%s': %s", operation, self._config.name, exc)
            raise translate_error(exc, operation=operation, profile=self._config.aws_profile) from exc

    def list_page(
        self,
        *,
        prefix: str = "",
        delimiter: str | None = None,
        continuation_token: str | None = None,
        max_keys: int = LIST_PAGE_SIZE,
    ) -> dict:
        """Issue one ``ListObjectsV2`` call and return the raw response."""

        params: dict[str, object] = {"Bucket": self._config.name, "MaxKeys": max_keys}
        if prefix:
            params["Prefix"] = prefix
        if delimiter:
            params["Delimiter"] = delimiter
        if continuation_token:
            params["ContinuationToken"] = continuation_token
        return self._invoke("list objects", self._client.list_objects_v2, **params)

    def head(self, key: str) -> ObjectMetadata:
        response = self._invoke(
            "get object metadata",
            self._client.head_object,
            Bucket=self._config.name,
            Key=key,
        )
        content_length = int(response.get("ContentLength") or 0)
        return ObjectMetadata(
            key=key,
            content_length=content_length,
            size_formatted=format_size(content_length),
            content_type=response.get("ContentType"),
            last_modified=response.get("LastModified"),
            etag=response.get("ETag"),
            storage_class=response.get("StorageClass"),
            metadata=dict(response.get("Metadata") or {}),
        )

    def put(self, key: str, body: bytes, content_type: str) -> None:
        self._invoke(
            "upload file",
            self._client.put_object,
            Bucket=self._config.name,
            Key=key,
            Body=body,
            ContentType=content_type,
        )

    def copy(self, source_key: str, destination_key: str, content_type: str) -> None:
        """Server-side copy that replaces metadata with ``content_type``."""

        self._invoke(
            "copy object",
            self._client.copy_object,
            Bucket=self._config.name,
            Key=destination_key,
            CopySource={"Bucket": self._config.name, "Key": source_key},
            ContentType=content_type,
            MetadataDirective="REPLACE",
        )

    def delete(self, key: str) -> None:
        self._invoke(
            "delete object",
            self._client.delete_object,
            Bucket=self._config.name,
            Key=key,
        )

    def list_buckets(self) -> list[dict]:
        response = self._invoke("list buckets", self._client.list_buckets)
        return list(response.get("Buckets", []))

    def bucket_region(self, bucket_name: str | None = None) -> str:
        """Return the bucket's region, falling back to ``us-east-1``."""

        response = self._invoke(
            "get bucket location",
            self._client.get_bucket_location,
            Bucket=bucket_name or self._config.name,
        )
        return response.get("LocationConstraint") or DEFAULT_REGION
