"""Figma URL 驗證：file / proto / design 三種路徑形狀."""

import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

_PATTERNS = {
    "file": re.compile(r"^https://(www\.)?figma\.com/file/([a-zA-Z0-9]+)(/[^?]*)?(\?.*)?$"),
    "proto": re.compile(r"^https://(www\.)?figma\.com/proto/([a-zA-Z0-9]+)(/[^?]*)?(\?.*)?$"),
    "design": re.compile(r"^https://(www\.)?figma\.com/design/([a-zA-Z0-9]+)(/[^?]*)?(\?.*)?$"),
}


@dataclass(frozen=True)
class FigmaUrlValidation:
    is_valid: bool
    file_id: Optional[str] = None
    url_type: Optional[str] = None
    error: Optional[str] = None


def validate_figma_url(url) -> FigmaUrlValidation:
    if not url or not isinstance(url, str):
        return FigmaUrlValidation(False, error="URL is required")

    clean_url = url.strip()
    parsed = urlparse(clean_url)
    if not parsed.scheme or not parsed.netloc:
        return FigmaUrlValidation(False, error="Invalid URL format")

    if "figma.com" not in clean_url:
        return FigmaUrlValidation(False, error="URL must be from figma.com")

    for url_type, pattern in _PATTERNS.items():
        m = pattern.match(clean_url)
        if m and m.group(2):
            return FigmaUrlValidation(True, file_id=m.group(2), url_type=url_type)

    return FigmaUrlValidation(
        False,
        error="Invalid Figma URL format. Please use a valid Figma file, prototype, or design URL.",
    )
