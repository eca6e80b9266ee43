from __future__ import annotations
from typing import Mapping, Optional
import gzip, zlib
import mimetypes
import posixpath
import brotli
import httpx

from .exceptions import DecompressionError, PayloadSizeLimitError

__all__ = [
    "normalize_string",
    "normalize_content_type",
    "extract_charset",
    "guess_media_type",
    "get_header_value_normalized",
    "get_header_values",
    "get_file_extension",
    "is_regular_protocol",
    "is_http",
    "decode_content",
]

REGULAR_PROTOCOLS = ("http", "https")


def normalize_string(value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip().lower()

def normalize_content_type(hdrs: Mapping[str, str]) -> Optional[str]:
        ct = hdrs.get("Content-Type")
        return ct.split(";")[0].strip().lower() if ct else None

def extract_charset(hdrs: Mapping[str, str]) -> Optional[str]:
        ct = hdrs.get("Content-Type", "")
        parts = ct.split(";")
        for p in parts[1:]:
            p = p.strip()
            if p.lower().startswith("charset="):
                return p.split("=", 1)[1].strip().strip('"')
        return None

def guess_media_type(hdrs: Mapping[str, str], url: str) -> Optional[str]:
        """Content-Type first; fall back to the URL's file extension."""
        ct = normalize_content_type(hdrs)
        if ct:
            return ct
        guessed, _ = mimetypes.guess_type(httpx.URL(url).path)
        return guessed.lower() if guessed else None

def get_header_value_normalized(hdrs: Mapping[str, str], name: str) -> Optional[str]:
        """Lowercased, trimmed header value; None when missing or blank."""
        return normalize_string(hdrs.get(name)) or None

def get_header_values(hdrs: Mapping[str, str], name: str) -> list[str]:
        """Comma-split, normalized header tokens (empty list when absent)."""
        value = get_header_value_normalized(hdrs, name) or ""
        return [token.strip() for token in value.split(",") if token.strip()]

def get_file_extension(url: str) -> str:
        path = httpx.URL(url).path
        _, ext = posixpath.splitext(posixpath.basename(path))
        return ext[1:].lower()

def is_regular_protocol(url: str) -> bool:
        try:
            return httpx.URL(url).scheme in REGULAR_PROTOCOLS
        except httpx.InvalidURL:
            return False

def is_http(url: str) -> bool:
        return httpx.URL(url).scheme == "http"

def _inflate(body: bytes) -> Optional[bytes]:
        try:
            return zlib.decompress(body)
        except zlib.error:
            pass
        try:
            # raw deflate without the zlib wrapper
            return zlib.decompress(body, -zlib.MAX_WBITS)
        except zlib.error:
            return None

def decode_content(
        body: bytes,
        content_encoding: Optional[str],
        max_bytes: Optional[int] = None,
        url: Optional[str] = None,
) -> bytes:
        """
        Undo content codings so callers always see the decoded payload.

        gzip is recognised by its magic number whatever the header says and
        must decode completely. ``br`` and ``deflate`` follow the header; a
        body that does not decode under them was never encoded that way and
        is returned unchanged, as are codings that cannot be undone.

        Raises:
            DecompressionError: gzip signature present but the stream is truncated or corrupt
            PayloadSizeLimitError: Decoded payload larger than ``max_bytes``
        """
        if not body:
            return body

        enc = (content_encoding or "").lower()
        if len(body) >= 2 and body[0] == 0x1F and body[1] == 0x8B:
            try:
                data = gzip.decompress(body)
            except (OSError, EOFError, zlib.error) as exc:
                raise DecompressionError(url=url, encoding="gzip", cause=exc) from exc
        elif "br" in enc:
            try:
                data = brotli.decompress(body)
            except brotli.error:
                return body
        elif "deflate" in enc:
            inflated = _inflate(body)
            if inflated is None:
                return body
            data = inflated
        else:
            return body

        if max_bytes is not None and len(data) > max_bytes:
            raise PayloadSizeLimitError(url=url, actual_size=len(data), max_size=max_bytes)
        return data
