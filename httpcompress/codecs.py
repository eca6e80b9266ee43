"""
Codec detection by byte inspection.

Response headers cannot be trusted to describe the bytes on the wire, so the
checker classifies bodies itself:

- gzip has a reliable magic number (RFC 1952: ``1f 8b``).
- brotli has no magic number at all, so detection is a trial decompression.
  Garbage that happens to decode is a possible false positive; bodies cut
  short by the transport are a possible false negative.
- Zopfli output is valid gzip and cannot be told apart by format. Zopfli
  always writes FLG=0, MTIME=0, XFL=2 and OS=3, so its members start with
  ``1f 8b 08 00 00 00 00 00 02 03``. Regular gzip rarely does: servers do not
  default to the maximum level (XFL=2) and most tools write a non-zero
  MTIME. Absence of that header is therefore a good sign Zopfli was not used;
  presence proves nothing.
"""

from __future__ import annotations

from typing import Optional, Sequence

import brotli

__all__ = [
    "GZIP_MAGIC",
    "ZOPFLI_HEADER",
    "is_gzip",
    "is_brotli",
    "is_suspected_zopfli",
    "is_response_compressed",
    "detect_codec",
]

GZIP_MAGIC = (0x1F, 0x8B)

# ID1 ID2 CM FLG MTIME(4) XFL OS as written by Zopfli
ZOPFLI_HEADER = (0x1F, 0x8B, 0x08, 0x00, 0x00, 0x00, 0x00, 0x00, 0x02, 0x03)


def _starts_with(data: Optional[bytes], magic: Sequence[int]) -> bool:
    if not data or len(data) < len(magic):
        return False
    return all(data[i] == b for i, b in enumerate(magic))


def is_gzip(data: Optional[bytes]) -> bool:
    """True iff the buffer starts with the gzip magic number."""
    return _starts_with(data, GZIP_MAGIC)


def is_brotli(data: Optional[bytes]) -> bool:
    """
    True when ``data`` decodes as a brotli stream.

    A decoder error is the expected answer for anything that is not brotli
    and is reported as False, as is an empty result from a non-empty input.
    """
    if data is None:
        return False
    try:
        decoded = brotli.decompress(data)
    except brotli.error:
        return False
    if not decoded and data:
        return False
    return True


def is_suspected_zopfli(data: Optional[bytes]) -> bool:
    """
    True when the buffer does NOT start with the Zopfli gzip header.

    Note the inversion: a True result reliably means "not Zopfli"; a False
    result means "maybe Zopfli, maybe gzip at maximum compression".
    """
    return not _starts_with(data, ZOPFLI_HEADER)


def is_response_compressed(raw_response: Optional[bytes], content_encoding: Optional[str]) -> bool:
    """
    True when the body is gzip or brotli by its bytes, or the response
    declares a content coding other than ``identity``.

    Codecs we cannot verify (deflate, compress, ...) are only visible through
    the header.
    """
    if is_gzip(raw_response) or is_brotli(raw_response):
        return True

    # identity should never appear in Content-Encoding; if it does, treat
    # it as no coding at all
    encoding = (content_encoding or "").strip().lower()
    return bool(encoding) and encoding != "identity"


def detect_codec(data: Optional[bytes]) -> Optional[str]:
    """Return ``"gzip"``, ``"br"`` or None for logging purposes."""
    if is_gzip(data):
        return "gzip"
    if is_brotli(data):
        return "br"
    return None
