from __future__ import annotations

import hashlib
import hmac

import pytest

from magi3d.utils.tc3_signer import sign

BASE_ARGS = dict(
    secret_id="AKIDEXAMPLE",
    secret_key="secretEXAMPLE",
    service="ai3d",
    host="ai3d.ap-guangzhou.tencentcloudapi.com",
    region="ap-guangzhou",
    action="SubmitHunyuanTo3DProJob",
    version="2025-05-13",
    payload='{"Prompt":"a cat"}',
    timestamp=1551113065,
)


def _expected_signature(args: dict) -> str:
    def digest(key: bytes, msg: str) -> bytes:
        return hmac.new(key, msg.encode(), hashlib.sha256).digest()

    canonical = (
        "POST\n/\n\n"
        "content-type:application/json; charset=utf-8\n"
        f"host:{args['host']}\n"
        f"x-tc-action:{args['action'].lower()}\n\n"
        "content-type;host;x-tc-action\n"
        + hashlib.sha256(args["payload"].encode()).hexdigest()
    )
    string_to_sign = (
        "TC3-HMAC-SHA256\n"
        f"{args['timestamp']}\n"
        f"2019-02-25/{args['service']}/tc3_request\n"
        + hashlib.sha256(canonical.encode()).hexdigest()
    )
    k_date = digest(("TC3" + args["secret_key"]).encode(), "2019-02-25")
    k_service = digest(k_date, args["service"])
    k_signing = digest(k_service, "tc3_request")
    return hmac.new(k_signing, string_to_sign.encode(), hashlib.sha256).hexdigest()


def test_sign_produces_documented_header_set() -> None:
    headers = sign(**BASE_ARGS)

    assert headers["Content-Type"] == "application/json; charset=utf-8"
    assert headers["Host"] == BASE_ARGS["host"]
    assert headers["X-TC-Action"] == "SubmitHunyuanTo3DProJob"
    assert headers["X-TC-Version"] == "2025-05-13"
    assert headers["X-TC-Timestamp"] == "1551113065"
    assert headers["X-TC-Region"] == "ap-guangzhou"
    assert headers["Authorization"] == (
        "TC3-HMAC-SHA256 Credential=AKIDEXAMPLE/2019-02-25/ai3d/tc3_request, "
        "SignedHeaders=content-type;host;x-tc-action, "
        f"Signature={_expected_signature(BASE_ARGS)}"
    )


def test_sign_is_deterministic_for_fixed_timestamp() -> None:
    assert sign(**BASE_ARGS) == sign(**BASE_ARGS)


@pytest.mark.parametrize(
    "field,value",
    [
        ("secret_key", "other-secret"),
        ("service", "hunyuan"),
        ("host", "ai3d.ap-shanghai.tencentcloudapi.com"),
        ("action", "QueryHunyuanTo3DProJob"),
        ("payload", '{"Prompt":"a dog"}'),
        ("timestamp", 1551113066),
    ],
)
def test_any_signed_input_changes_signature(field: str, value: object) -> None:
    original = sign(**BASE_ARGS)["Authorization"].rsplit("Signature=", 1)[1]
    changed = sign(**{**BASE_ARGS, field: value})["Authorization"].rsplit("Signature=", 1)[1]

    assert changed != original


def test_credential_scope_uses_utc_date() -> None:
    # 2019-02-24T23:59:59Z
    headers = sign(**{**BASE_ARGS, "timestamp": 1551052799})

    assert "Credential=AKIDEXAMPLE/2019-02-24/ai3d/tc3_request" in headers["Authorization"]


def test_sign_defaults_timestamp_to_now(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("magi3d.utils.tc3_signer.time.time", lambda: 1700000000.7)
    args = {key: value for key, value in BASE_ARGS.items() if key != "timestamp"}

    headers = sign(**args)

    assert headers["X-TC-Timestamp"] == "1700000000"
