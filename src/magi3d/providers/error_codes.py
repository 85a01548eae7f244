"""Vendor error vocabularies mapped onto the shared error codes.

Lookups never raise: unknown vendor codes fall back to a derived code so the
caller always receives something machine-checkable.
"""

from __future__ import annotations

TRIPO_ERROR_CODE_MAP: dict[int, str] = {
    # Request errors
    1000: "SERVER_ERROR",
    1001: "FATAL_SERVER_ERROR",
    1004: "INVALID_PARAMETER",
    1005: "ACCESS_DENIED",
    # Task errors
    2000: "RATE_LIMIT_EXCEEDED",
    2001: "TASK_NOT_FOUND",
    2002: "UNSUPPORTED_TASK_TYPE",
    2003: "INPUT_FILE_EMPTY",
    2004: "UNSUPPORTED_FILE_TYPE",
    2006: "INVALID_ORIGINAL_TASK",
    2007: "ORIGINAL_TASK_NOT_SUCCESS",
    2008: "CONTENT_POLICY_VIOLATION",
    2010: "INSUFFICIENT_CREDITS",
    2014: "AUDIT_SERVICE_ERROR",
    2015: "DEPRECATED_VERSION",
    2016: "DEPRECATED_TASK_TYPE",
    2017: "INVALID_MODEL_VERSION",
    2018: "MODEL_TOO_COMPLEX",
    2019: "FILE_NOT_FOUND",
}

HUNYUAN_ERROR_CODE_MAP: dict[str, str] = {
    "AuthFailure.InvalidAuthorization": "INVALID_AUTHORIZATION",
    "AuthFailure.InvalidSecretId": "INVALID_SECRET_ID",
    "AuthFailure.SecretIdNotFound": "SECRET_ID_NOT_FOUND",
    "AuthFailure.SignatureExpire": "SIGNATURE_EXPIRED",
    "AuthFailure.SignatureFailure": "SIGNATURE_FAILURE",
    "AuthFailure.TokenFailure": "TOKEN_FAILURE",
    "AuthFailure.MFAFailure": "MFA_FAILURE",
    "AuthFailure.UnauthorizedOperation": "UNAUTHORIZED_OPERATION",
    "InvalidParameter": "INVALID_PARAMETER",
    "InvalidParameterValue": "INVALID_PARAMETER_VALUE",
    "MissingParameter": "MISSING_PARAMETER",
    "UnknownParameter": "UNKNOWN_PARAMETER",
    "RequestLimitExceeded": "RATE_LIMIT_EXCEEDED",
    "RequestLimitExceeded.IPLimitExceeded": "IP_RATE_LIMIT_EXCEEDED",
    "RequestLimitExceeded.UinLimitExceeded": "ACCOUNT_RATE_LIMIT_EXCEEDED",
    "ResourceNotFound": "RESOURCE_NOT_FOUND",
    "ResourceInUse": "RESOURCE_IN_USE",
    "ResourceInsufficient": "RESOURCE_INSUFFICIENT",
    "ResourceUnavailable": "RESOURCE_UNAVAILABLE",
    "FailedOperation": "OPERATION_FAILED",
    "InvalidAction": "INVALID_ACTION",
    "UnsupportedOperation": "UNSUPPORTED_OPERATION",
    "UnauthorizedOperation": "UNAUTHORIZED_OPERATION",
    "InternalError": "INTERNAL_ERROR",
    "ServiceUnavailable": "SERVICE_UNAVAILABLE",
    "ActionOffline": "ACTION_OFFLINE",
    "InvalidRequest": "INVALID_REQUEST",
    "RequestSizeLimitExceeded": "REQUEST_SIZE_EXCEEDED",
    "ResponseSizeLimitExceeded": "RESPONSE_SIZE_EXCEEDED",
    "UnsupportedProtocol": "UNSUPPORTED_PROTOCOL",
    "UnsupportedRegion": "UNSUPPORTED_REGION",
    "IpInBlacklist": "IP_BLACKLISTED",
    "IpNotInWhitelist": "IP_NOT_WHITELISTED",
    "LimitExceeded": "LIMIT_EXCEEDED",
    "NoSuchProduct": "NO_SUCH_PRODUCT",
    "NoSuchVersion": "NO_SUCH_VERSION",
    "DryRunOperation": "DRY_RUN_OPERATION",
}

UNKNOWN_ERROR = "UNKNOWN_ERROR"

# (code, message) used when a failed Tripo task carries no error_code.
TRIPO_STATUS_FALLBACKS: dict[str, tuple[str, str]] = {
    "failed": ("GENERATION_FAILED", "Model generation failed"),
    "banned": ("CONTENT_POLICY_VIOLATION", "Task rejected due to content policy violation"),
    "expired": ("TASK_EXPIRED", "Task expired after timeout period"),
    "cancelled": ("TASK_CANCELED", "Task was cancelled"),
    "unknown": (UNKNOWN_ERROR, "Task status is unknown"),
}
TRIPO_DEFAULT_FALLBACK = ("GENERATION_FAILED", "Task failed")

HUNYUAN_FAIL_FALLBACK = ("GENERATION_FAILED", "Model generation failed")


def normalize_tripo_code(code: int | None) -> str:
    if code is None:
        return UNKNOWN_ERROR
    try:
        numeric = int(code)
    except (TypeError, ValueError):
        return f"TRIPO_ERROR_{code}"
    return TRIPO_ERROR_CODE_MAP.get(numeric, f"TRIPO_ERROR_{numeric}")


def normalize_hunyuan_code(code: str | None) -> str:
    """Exact match, then the ``Category`` prefix, then the original code."""

    if not code:
        return UNKNOWN_ERROR
    mapped = HUNYUAN_ERROR_CODE_MAP.get(code)
    if mapped is not None:
        return mapped
    prefix = code.split(".", 1)[0]
    return HUNYUAN_ERROR_CODE_MAP.get(prefix, code)


def tripo_status_fallback(status: str | None) -> tuple[str, str]:
    return TRIPO_STATUS_FALLBACKS.get(status or "", TRIPO_DEFAULT_FALLBACK)


__all__ = [
    "TRIPO_ERROR_CODE_MAP",
    "HUNYUAN_ERROR_CODE_MAP",
    "TRIPO_STATUS_FALLBACKS",
    "HUNYUAN_FAIL_FALLBACK",
    "UNKNOWN_ERROR",
    "normalize_tripo_code",
    "normalize_hunyuan_code",
    "tripo_status_fallback",
]
