from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional

import httpx


@dataclass(frozen=True)
class FetchedResource:
    """
    Immutable snapshot of one HTTP exchange.

    ``raw_response`` is always the body exactly as it arrived on the wire;
    ``raw_content`` is always the fully decoded payload, whatever the
    Content-Encoding header claims.
    """

    url: str
    status_code: int = 200
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    media_type: Optional[str] = None
    raw_response: bytes = b""
    raw_content: bytes = b""
    charset: Optional[str] = None
    duration_ms: int = 0
    redirect_chain: tuple[str, ...] = ()

    @property
    def scheme(self) -> str:
        return httpx.URL(self.url).scheme

    @property
    def content_encoding(self) -> Optional[str]:
        """Normalized Content-Encoding value, None when absent or blank."""
        value = self.headers.get("Content-Encoding")
        if value is None:
            return None
        return value.strip().lower() or None


@dataclass(frozen=True)
class ProbeRequest:
    """A re-fetch of ``url`` under controlled request headers."""

    url: str
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def accept_encoding(self) -> Optional[str]:
        return self.headers.get("Accept-Encoding")
