"""Error taxonomy shared by the client, retry executor, report workflow and tools.

Every failure that leaves the ``amazon_ads`` package is an ``AmazonAdsError``
subclass. ``kind`` is the fine-grained classification used for retry
decisions; ``category`` is the stable three-way split (validation, upstream,
timeout) the protocol layer exposes to callers.
"""
from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    VALIDATION = "VALIDATION"
    CREDENTIALS = "CREDENTIALS"
    AUTH = "AUTH"
    FORBIDDEN = "FORBIDDEN"
    RATE_LIMITED = "RATE_LIMITED"
    UPSTREAM_SERVER = "UPSTREAM_SERVER"
    UPSTREAM_APPLICATION = "UPSTREAM_APPLICATION"
    TRANSPORT = "TRANSPORT"
    UPSTREAM = "UPSTREAM"
    TIMEOUT = "TIMEOUT"


class ErrorCategory(str, Enum):
    VALIDATION = "VALIDATION"
    UPSTREAM = "UPSTREAM"
    TIMEOUT = "TIMEOUT"


_CATEGORY_BY_KIND = {
    ErrorKind.VALIDATION: ErrorCategory.VALIDATION,
    ErrorKind.CREDENTIALS: ErrorCategory.VALIDATION,
    ErrorKind.TIMEOUT: ErrorCategory.TIMEOUT,
}

# Kinds the general backoff policy may retry.
TRANSIENT_KINDS = frozenset({ErrorKind.UPSTREAM_SERVER, ErrorKind.TRANSPORT})


class AmazonAdsError(Exception):
    """Base class for all classified errors."""

    kind = ErrorKind.UPSTREAM

    def __init__(
        self,
        message: str,
        http_status: Optional[int] = None,
        code: Optional[str] = None,
        details: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.http_status = http_status
        self.code = code
        self.details = details

    @property
    def category(self) -> ErrorCategory:
        return _CATEGORY_BY_KIND.get(self.kind, ErrorCategory.UPSTREAM)

    @property
    def retryable(self) -> bool:
        return self.kind in TRANSIENT_KINDS

    def to_payload(self) -> Dict[str, Any]:
        return {
            "type": self.category.value,
            "kind": self.kind.value,
            "message": self.message,
            "upstream_code": self.http_status,
            "code": self.code,
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.value}, status={self.http_status}, message={self.message!r})"


class ValidationError(AmazonAdsError):
    """Caller input is missing or malformed; raised before any network call."""

    kind = ErrorKind.VALIDATION


class CredentialError(AmazonAdsError):
    """Session-token exchange could not produce usable credentials."""

    kind = ErrorKind.CREDENTIALS


class AuthError(AmazonAdsError):
    kind = ErrorKind.AUTH


class ForbiddenError(AmazonAdsError):
    kind = ErrorKind.FORBIDDEN


class RateLimitedError(AmazonAdsError):
    """HTTP 429. ``retry_after`` is the server's Retry-After in seconds, if it sent one."""

    kind = ErrorKind.RATE_LIMITED
    DEFAULT_RETRY_AFTER = 60.0

    def __init__(self, retry_after: Optional[float] = None, http_status: int = 429):
        self.retry_after = retry_after
        super().__init__(
            f"Rate limit exceeded. Retry after {self.retry_after_seconds:g} seconds",
            http_status=http_status,
        )

    @property
    def retry_after_seconds(self) -> float:
        return self.retry_after if self.retry_after is not None else self.DEFAULT_RETRY_AFTER


class UpstreamServerError(AmazonAdsError):
    kind = ErrorKind.UPSTREAM_SERVER


class UpstreamApplicationError(AmazonAdsError):
    """Error response whose body carried an application error code."""

    kind = ErrorKind.UPSTREAM_APPLICATION

    def __init__(self, code: str, details: Optional[str] = None, http_status: Optional[int] = None):
        super().__init__(
            f"Amazon API error: {code} - {details or 'Unknown error'}",
            http_status=http_status,
            code=code,
            details=details,
        )


class TransportError(AmazonAdsError):
    """Network-level failure (connection refused, DNS, read timeout...)."""

    kind = ErrorKind.TRANSPORT


class ReportFailedError(AmazonAdsError):
    """The report job reached the FAILURE state upstream."""

    def __init__(self, report_id: str, status_details: Optional[str] = None):
        self.report_id = report_id
        self.status_details = status_details
        super().__init__(
            f"Report generation failed: {status_details or 'Unknown error'}",
            details=status_details,
        )


class UpstreamContractError(AmazonAdsError):
    """The upstream answered in a shape the workflow cannot act on."""


class ReportTimeoutError(AmazonAdsError):
    """The local polling budget ran out while the job was still in progress."""

    kind = ErrorKind.TIMEOUT

    def __init__(self, report_id: str, attempts: int):
        self.report_id = report_id
        self.attempts = attempts
        super().__init__(f"Report generation timeout after {attempts} attempts")
