"""
Header consistency checks.

Each check returns the diagnostic message to report, or None when the headers
are fine; the pipeline decides when to report.
"""

from __future__ import annotations

from typing import Mapping, Optional

from .codecs import is_gzip
from .messages import VARY_MESSAGE, content_encoding_message, disallowed_compression_message
from .utils import get_header_value_normalized, get_header_values

__all__ = [
    "ALLOWED_ENCODINGS",
    "check_vary",
    "check_content_encoding_header",
    "find_disallowed_encodings",
]

ALLOWED_ENCODINGS = ("gzip", "br")


def check_vary(headers: Mapping[str, str]) -> Optional[str]:
    """
    Require ``Vary: Accept-Encoding`` unless ``Cache-Control`` says the
    response is private.
    """
    vary = get_header_values(headers, "Vary")
    cache_control = get_header_values(headers, "Cache-Control")

    if "private" not in cache_control and "accept-encoding" not in vary:
        return VARY_MESSAGE
    return None


def check_content_encoding_header(declared: Optional[str], expected: str) -> Optional[str]:
    """Mismatch message when the declared coding is not the detected one."""
    if (declared or "").strip().lower() != expected:
        return content_encoding_message(expected)
    return None


def find_disallowed_encodings(headers: Mapping[str, str], raw_response: bytes) -> list[str]:
    """
    Messages for every content coding other than gzip and br.

    ``x-gzip`` is a deprecated alias user agents still accept, so it is not
    flagged when the body really is gzip (the gzip checks will ask for the
    proper header). A non-empty ``Get-Dictionary`` header means the server
    negotiated SDCH, which is always flagged.
    """
    messages: list[str] = []

    for encoding in get_header_values(headers, "Content-Encoding"):
        if encoding in ALLOWED_ENCODINGS:
            continue
        if encoding == "x-gzip" and is_gzip(raw_response):
            continue
        messages.append(disallowed_compression_message(encoding))

    if get_header_value_normalized(headers, "Get-Dictionary"):
        messages.append(disallowed_compression_message("sdch"))

    return messages
