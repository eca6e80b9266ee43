"""
Media-type compressibility classification.

The hardcoded lists cover types that are both very common and either
miscategorized by the registry or not worth a registry lookup; the static
registry handles the long tail.
"""

from __future__ import annotations

import re
from typing import Optional

from .mime_registry import lookup_compressible

__all__ = [
    "COMMON_MEDIA_TYPES_THAT_SHOULD_BE_COMPRESSED",
    "COMMON_MEDIA_TYPES_THAT_SHOULD_NOT_BE_COMPRESSED",
    "normalize_media_type",
    "is_text_media_type",
    "is_compressible",
]

COMMON_MEDIA_TYPES_THAT_SHOULD_BE_COMPRESSED = frozenset({
    "image/x-icon",
    "image/bmp",
})

COMMON_MEDIA_TYPES_THAT_SHOULD_NOT_BE_COMPRESSED = frozenset({
    "image/jpeg",
    "image/png",
    "image/gif",
    "font/woff2",
    "font/woff",
    "font/otf",
    "font/ttf",
})

_TEXT_MEDIA_TYPES = (
    re.compile(r"^application/(?:javascript|json|x-javascript|xml)$"),
    re.compile(r"^application/.+\+(?:json|xml)$"),
    re.compile(r"^image/svg\+xml$"),
    re.compile(r"^text/.+$"),
)


def normalize_media_type(media_type: Optional[str]) -> str:
    """Strip parameters and lowercase (``Text/HTML; charset=x`` -> ``text/html``)."""
    if not media_type:
        return ""
    return media_type.split(";")[0].strip().lower()


def is_text_media_type(media_type: Optional[str]) -> bool:
    mt = normalize_media_type(media_type)
    return any(pattern.match(mt) for pattern in _TEXT_MEDIA_TYPES)


def is_compressible(media_type: Optional[str]) -> bool:
    """Decide whether content of ``media_type`` is expected to be served compressed."""
    mt = normalize_media_type(media_type)
    if not mt:
        return False

    if is_text_media_type(mt) or mt in COMMON_MEDIA_TYPES_THAT_SHOULD_BE_COMPRESSED:
        return True

    if mt in COMMON_MEDIA_TYPES_THAT_SHOULD_NOT_BE_COMPRESSED:
        return False

    return bool(lookup_compressible(mt))
