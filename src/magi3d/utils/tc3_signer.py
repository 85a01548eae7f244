"""TC3-HMAC-SHA256 request signing for Tencent Cloud APIs.

Implements signature v3 as documented at
https://cloud.tencent.com/document/api/213/30654. The output is fully
determined by the inputs when ``timestamp`` is supplied.
"""

from __future__ import annotations

import hashlib
import hmac
import time
from datetime import datetime, timezone

ALGORITHM = "TC3-HMAC-SHA256"
CONTENT_TYPE = "application/json; charset=utf-8"
SIGNED_HEADERS = "content-type;host;x-tc-action"


def _sha256_hex(message: str) -> str:
    return hashlib.sha256(message.encode("utf-8")).hexdigest()


def _hmac_sha256(key: bytes, message: str) -> bytes:
    return hmac.new(key, message.encode("utf-8"), hashlib.sha256).digest()


def _utc_date(timestamp: int) -> str:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime("%Y-%m-%d")


def sign(
    *,
    secret_id: str,
    secret_key: str,
    service: str,
    host: str,
    region: str,
    action: str,
    version: str,
    payload: str,
    timestamp: int | None = None,
) -> dict[str, str]:
    """Return the header set authenticating one POST request."""

    if timestamp is None:
        timestamp = int(time.time())
    date = _utc_date(timestamp)

    canonical_headers = (
        f"content-type:{CONTENT_TYPE}\n"
        f"host:{host}\n"
        f"x-tc-action:{action.lower()}\n"
    )
    canonical_request = "\n".join(
        [
            "POST",
            "/",
            "",
            canonical_headers,
            SIGNED_HEADERS,
            _sha256_hex(payload),
        ]
    )

    credential_scope = f"{date}/{service}/tc3_request"
    string_to_sign = "\n".join(
        [
            ALGORITHM,
            str(timestamp),
            credential_scope,
            _sha256_hex(canonical_request),
        ]
    )

    k_date = _hmac_sha256(f"TC3{secret_key}".encode("utf-8"), date)
    k_service = _hmac_sha256(k_date, service)
    k_signing = _hmac_sha256(k_service, "tc3_request")
    signature = hmac.new(
        k_signing, string_to_sign.encode("utf-8"), hashlib.sha256
    ).hexdigest()

    authorization = (
        f"{ALGORITHM} "
        f"Credential={secret_id}/{credential_scope}, "
        f"SignedHeaders={SIGNED_HEADERS}, "
        f"Signature={signature}"
    )

    return {
        "Content-Type": CONTENT_TYPE,
        "Host": host,
        "X-TC-Action": action,
        "X-TC-Version": version,
        "X-TC-Timestamp": str(timestamp),
        "X-TC-Region": region,
        "Authorization": authorization,
    }


__all__ = ["sign", "ALGORITHM", "SIGNED_HEADERS"]
