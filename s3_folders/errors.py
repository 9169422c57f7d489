from __future__ import annotations
"""Error taxonomy and translation of object-store failures."""
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectTimeoutError,
    EndpointConnectionError,
    NoCredentialsError,
    NoRegionError,
    ProfileNotFound,
    ReadTimeoutError,
)

KIND_EXPIRED = "expired"
KIND_INVALID = "invalid"
KIND_ACCESS_DENIED = "access_denied"
KIND_NO_CREDENTIALS = "no_credentials"
KIND_PROFILE_NOT_FOUND = "profile_not_found"
KIND_NETWORK = "network"
KIND_REGION = "region"
KIND_NOT_FOUND = "not_found"
KIND_UNKNOWN = "unknown"

_CODE_KINDS = {
    "ExpiredToken": KIND_EXPIRED,
    "ExpiredTokenException": KIND_EXPIRED,
    "RequestExpired": KIND_EXPIRED,
    "TokenRefreshRequired": KIND_EXPIRED,
    "InvalidAccessKeyId": KIND_INVALID,
    "InvalidToken": KIND_INVALID,
    "SignatureDoesNotMatch": KIND_INVALID,
    "InvalidClientTokenId": KIND_INVALID,
    "AccessDenied": KIND_ACCESS_DENIED,
    "AllAccessDisabled": KIND_ACCESS_DENIED,
    "Forbidden": KIND_ACCESS_DENIED,
    "403": KIND_ACCESS_DENIED,
    "NoSuchKey": KIND_NOT_FOUND,
    "NoSuchBucket": KIND_NOT_FOUND,
    "NotFound": KIND_NOT_FOUND,
    "404": KIND_NOT_FOUND,
    "AuthorizationHeaderMalformed": KIND_REGION,
    "PermanentRedirect": KIND_REGION,
    "IllegalLocationConstraintException": KIND_REGION,
}

# Checked in order; the first matching marker wins.
_MESSAGE_MARKERS = (
    ("expired", KIND_EXPIRED),
    ("access denied", KIND_ACCESS_DENIED),
    ("forbidden", KIND_ACCESS_DENIED),
    ("invalid", KIND_INVALID),
    ("no credentials", KIND_NO_CREDENTIALS),
    ("unable to locate credentials", KIND_NO_CREDENTIALS),
    ("credential", KIND_NO_CREDENTIALS),
    ("network", KIND_NETWORK),
    ("connection", KIND_NETWORK),
    ("timeout", KIND_NETWORK),
    ("timed out", KIND_NETWORK),
    ("region", KIND_REGION),
)


class S3FoldersError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(S3FoldersError):
    """The bucket profile store cannot be located or read."""


class StoreOperationError(S3FoldersError):
    """An object-store call failed."""

    def __init__(self, message: str, *, kind: str = KIND_UNKNOWN, operation: str | None = None):
        super().__init__(message)
        self.kind = kind
        self.operation = operation


class LocalIOError(S3FoldersError):
    """A local file or directory could not be read."""


class SerializationError(S3FoldersError):
    """Persisted state could not be decoded or encoded."""


class NotFoundError(S3FoldersError):
    """A bucket configuration, object or folder does not exist."""


class InvalidInputError(S3FoldersError):
    """The caller supplied an illegal name or a no-op request."""


def error_code(exc: BaseException) -> str | None:
    if isinstance(exc, ClientError):
        error = exc.response.get("Error") or {}
        code = error.get("Code")
        if code:
            return str(code)
        status = (exc.response.get("ResponseMetadata") or {}).get("HTTPStatusCode")
        if status:
            return str(status)
    return None


def classify_error(exc: BaseException) -> str:
    """Return the failure kind of a provider exception.

    Structured information (exception type, service error code) is used
    first; the lower-cased message text is only consulted when neither
    identifies the failure.
    """
    if isinstance(exc, NoCredentialsError):
        return KIND_NO_CREDENTIALS
    if isinstance(exc, ProfileNotFound):
        return KIND_PROFILE_NOT_FOUND
    if isinstance(exc, NoRegionError):
        return KIND_REGION
    if isinstance(exc, (EndpointConnectionError, ConnectTimeoutError, ReadTimeoutError)):
        return KIND_NETWORK
    code = error_code(exc)
    if code in _CODE_KINDS:
        return _CODE_KINDS[code]
    text = f"{type(exc).__name__}: {exc}".lower()
    for marker, kind in _MESSAGE_MARKERS:
        if marker in text:
            return kind
    return KIND_UNKNOWN


def describe_error(exc: BaseException, *, profile: str | None = None, action: str = "access the bucket") -> str:
    """Build an actionable message for ``exc``, naming ``profile`` when known."""

    kind = classify_error(exc)
    subject = f"Profile '{profile}'" if profile else "The configured"
    if kind == KIND_EXPIRED:
        if profile:
            return (
                f"{subject} credentials have expired. "
                "Please run 'aws sso login' or refresh your credentials."
            )
        return "The configured credentials have expired. Please refresh your credentials."
    if kind in (KIND_INVALID, KIND_ACCESS_DENIED):
        return f"{subject} credentials are invalid or access is denied. Please check your AWS permissions."
    if kind == KIND_NO_CREDENTIALS:
        target = f" for profile '{profile}'" if profile else ""
        return f"No valid credentials found{target}. Please configure your AWS credentials."
    if kind == KIND_PROFILE_NOT_FOUND:
        return f"AWS profile '{profile}' not found. Please check your AWS configuration."
    if kind == KIND_NETWORK:
        target = f" with profile '{profile}'" if profile else ""
        return f"Network error when connecting{target}. Please check your internet connection."
    if kind == KIND_REGION:
        target = f" for profile '{profile}'" if profile else ""
        return f"Invalid or missing region{target}. Please check your AWS configuration."
    return f"Failed to {action}: {exc}"


def translate_error(
    exc: BaseException,
    *,
    operation: str,
    profile: str | None = None,
) -> S3FoldersError:
    """Map a botocore exception to the package taxonomy."""

    kind = classify_error(exc)
    if kind == KIND_NOT_FOUND:
        return NotFoundError(f"Failed to {operation}: {exc}")
    if kind == KIND_UNKNOWN:
        message = f"Failed to {operation}: {exc}"
    else:
        message = describe_error(exc, profile=profile, action=operation)
    return StoreOperationError(message, kind=kind, operation=operation)


PROVIDER_ERRORS = (BotoCoreError, ClientError)
