"""Builders for the user-facing diagnostic messages."""

from __future__ import annotations

from typing import Optional

VARY_MESSAGE = "Should be served with the 'Vary' header containing 'Accept-Encoding' value."


def disallowed_compression_message(encoding: str) -> str:
    return f"Disallowed compression method: '{encoding}'."


def content_encoding_message(encoding: str = "", not_required: bool = False, suffix: Optional[str] = None) -> str:
    header = f"content-encoding: {encoding}" if encoding else "content-encoding"
    negation = " not" if not_required else ""
    tail = f" {suffix}" if suffix else ""
    return f"Should{negation} be served with the '{header}' header{tail}."


def compression_message(encoding: str = "", not_required: bool = False, suffix: Optional[str] = None) -> str:
    codec = f" with {encoding}" if encoding else ""
    negation = " not" if not_required else ""
    tail = f" {suffix}" if suffix else ""
    return f"Should{negation} be served compressed{codec}{tail}."


def size_message(encoding: str, size_difference: int) -> str:
    comparison = "bigger than" if size_difference > 0 else "the same size as"
    return (
        f"Should not be served compressed with {encoding} as the compressed "
        f"size is {comparison} the uncompressed one."
    )
