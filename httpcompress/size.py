"""Compressed vs. decoded size comparison."""

from __future__ import annotations

from typing import Optional

from .messages import size_message

__all__ = ["should_flag_as_no_benefit", "gzip_family_label", "no_benefit_message"]


def should_flag_as_no_benefit(
    compressed_len: int,
    uncompressed_len: int,
    declared_encoding: Optional[str],
    expected_encoding: str,
) -> bool:
    """
    True when the response declares ``expected_encoding`` yet the bytes on
    the wire are not smaller than the decoded payload.
    """
    if (declared_encoding or "").strip().lower() != expected_encoding:
        return False
    return uncompressed_len <= compressed_len


def gzip_family_label(suspected_not_zopfli: bool) -> str:
    # zopfli signature present: the regression is zopfli's
    return "gzip" if suspected_not_zopfli else "Zopfli"


def no_benefit_message(codec_label: str, compressed_len: int, uncompressed_len: int) -> str:
    return size_message(codec_label, compressed_len - uncompressed_len)
