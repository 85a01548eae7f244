"""Classification of caller-supplied image references.

Image inputs arrive either as a public HTTP(S) URL or as base64 image data,
with or without a ``data:image/...;base64,`` header. Local files must be
uploaded (or inlined) by the caller before they reach an adapter.
"""

from __future__ import annotations

import re
from enum import Enum
from urllib.parse import urlparse

from ..exceptions import InvalidInputError

MIN_RAW_BASE64_LENGTH = 100

_URL_RE = re.compile(r"^https?://", re.IGNORECASE)
_DATA_URI_RE = re.compile(r"^data:image/[a-zA-Z0-9.+-]+;base64,", re.IGNORECASE)
_RAW_BASE64_RE = re.compile(r"^[A-Za-z0-9+/]+=*$")
_LOCALHOST_RE = re.compile(
    r"^https?://(localhost|127\.0\.0\.1|0\.0\.0\.0|\[::1\])(:\d+)?", re.IGNORECASE
)
_DATA_EXT_RE = re.compile(r"^data:(?:image|model|application)/([a-zA-Z0-9.+-]+);")


class InputType(str, Enum):
    URL = "URL"
    BASE64 = "BASE64"
    UNKNOWN = "UNKNOWN"


def classify(raw: object) -> InputType:
    """Detect whether ``raw`` is a URL, base64 data or something unsupported."""

    if not isinstance(raw, str) or not raw:
        return InputType.UNKNOWN
    if _URL_RE.match(raw):
        return InputType.URL
    if _DATA_URI_RE.match(raw):
        return InputType.BASE64
    if len(raw) >= MIN_RAW_BASE64_LENGTH and _RAW_BASE64_RE.match(raw):
        return InputType.BASE64
    return InputType.UNKNOWN


def is_url(raw: object) -> bool:
    return classify(raw) is InputType.URL


def is_base64(raw: object) -> bool:
    return classify(raw) is InputType.BASE64


def validate(raw: object) -> InputType:
    """Return the input type, raising :class:`InvalidInputError` for unsupported input."""

    input_type = classify(raw)
    if input_type is InputType.UNKNOWN:
        raise InvalidInputError(
            "Invalid image input. Expected a URL (https://...) or base64-encoded image data. "
            "For local files, upload to cloud storage first and provide the URL."
        )
    return input_type


def extract_payload(raw: str) -> str:
    """Strip a ``data:image/...;base64,`` header; bare payloads are returned unchanged."""

    return _DATA_URI_RE.sub("", raw, count=1)


def is_local_input(raw: str) -> bool:
    """Return ``True`` for references a remote service cannot download itself."""

    if _LOCALHOST_RE.match(raw):
        return True
    if raw.startswith(("file://", "/", "./", "../", "data:")):
        return True
    return len(raw) >= MIN_RAW_BASE64_LENGTH and bool(_RAW_BASE64_RE.match(raw))


def detect_file_ext(raw: str, default: str = "jpg") -> str:
    """Guess a file extension from a data URI, URL or path."""

    match = _DATA_EXT_RE.match(raw)
    if match:
        ext = match.group(1).lower()
        return "jpg" if ext == "jpeg" else ext

    path = urlparse(raw).path if _URL_RE.match(raw) else raw.split("?", 1)[0]
    name = path.rsplit("/", 1)[-1]
    if "." in name:
        ext = name.rsplit(".", 1)[-1].lower()
        if 0 < len(ext) <= 5:
            return "jpg" if ext == "jpeg" else ext
    return default


__all__ = [
    "InputType",
    "MIN_RAW_BASE64_LENGTH",
    "classify",
    "detect_file_ext",
    "extract_payload",
    "is_base64",
    "is_local_input",
    "is_url",
    "validate",
]
