from __future__ import annotations

import pytest

from magi3d.providers.error_codes import (
    HUNYUAN_ERROR_CODE_MAP,
    TRIPO_ERROR_CODE_MAP,
    normalize_hunyuan_code,
    normalize_tripo_code,
    tripo_status_fallback,
)


@pytest.mark.parametrize("code,expected", sorted(TRIPO_ERROR_CODE_MAP.items()))
def test_tripo_codes_map_to_table(code: int, expected: str) -> None:
    assert normalize_tripo_code(code) == expected


def test_tripo_well_known_codes() -> None:
    assert normalize_tripo_code(2010) == "INSUFFICIENT_CREDITS"
    assert normalize_tripo_code(2008) == "CONTENT_POLICY_VIOLATION"


def test_tripo_unknown_code_falls_back() -> None:
    assert normalize_tripo_code(9999) == "TRIPO_ERROR_9999"
    assert normalize_tripo_code(None) == "UNKNOWN_ERROR"


@pytest.mark.parametrize("code,expected", sorted(HUNYUAN_ERROR_CODE_MAP.items()))
def test_hunyuan_codes_map_to_table(code: str, expected: str) -> None:
    assert normalize_hunyuan_code(code) == expected


@pytest.mark.parametrize(
    "code,expected",
    [
        ("ResourceNotFound.TaskNotExist", "RESOURCE_NOT_FOUND"),
        ("FailedOperation.InnerError", "OPERATION_FAILED"),
        ("RequestLimitExceeded.Other", "RATE_LIMIT_EXCEEDED"),
        ("AuthFailure.Unlisted", "AuthFailure.Unlisted"),
        ("Totally.Unknown", "Totally.Unknown"),
        ("", "UNKNOWN_ERROR"),
        (None, "UNKNOWN_ERROR"),
    ],
)
def test_hunyuan_prefix_and_passthrough(code: str | None, expected: str) -> None:
    assert normalize_hunyuan_code(code) == expected


@pytest.mark.parametrize(
    "status,expected",
    [
        ("failed", ("GENERATION_FAILED", "Model generation failed")),
        ("banned", ("CONTENT_POLICY_VIOLATION", "Task rejected due to content policy violation")),
        ("expired", ("TASK_EXPIRED", "Task expired after timeout period")),
        ("cancelled", ("TASK_CANCELED", "Task was cancelled")),
        ("unknown", ("UNKNOWN_ERROR", "Task status is unknown")),
        ("something-else", ("GENERATION_FAILED", "Task failed")),
        (None, ("GENERATION_FAILED", "Task failed")),
    ],
)
def test_tripo_status_fallbacks(status: str | None, expected: tuple[str, str]) -> None:
    assert tripo_status_fallback(status) == expected
