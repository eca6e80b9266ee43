"""
Exceptions raised by the compression checker.

Findings about a resource are reported as diagnostics, never raised. The
classes below cover the cases where a check cannot be carried out at all: a
probe that cannot be fetched or decoded, or malformed rule options.

    CompressionCheckError
    ├── ValidationError
    │   ├── InvalidURLError
    │   ├── InvalidOptionsError
    │   └── PayloadSizeLimitError
    ├── DecompressionError
    ├── NetworkError
    │   ├── ConnectionError
    │   ├── TimeoutError
    │   └── DNSResolutionError
    ├── RateLimitError
    └── RedirectError
        ├── TooManyRedirectsError
        └── RedirectLoopError
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Dict, Optional

import httpx

__all__ = [
    "CompressionCheckError",
    "ValidationError",
    "InvalidURLError",
    "InvalidOptionsError",
    "PayloadSizeLimitError",
    "DecompressionError",
    "NetworkError",
    "ConnectionError",
    "TimeoutError",
    "DNSResolutionError",
    "RateLimitError",
    "RedirectError",
    "TooManyRedirectsError",
    "RedirectLoopError",
    "retry_after_from_response",
]

DEFAULT_RETRY_AFTER_SECONDS = 60


@dataclass(slots=True)
class CompressionCheckError(Exception):
    """
    Base class. An empty ``message`` is replaced by the subclass default;
    ``cause`` becomes ``__cause__``.
    """

    message: str = ""
    url: Optional[str] = None
    cause: Optional[BaseException] = None
    context: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.message:
            self.message = self._default_message()
        Exception.__init__(self, self.message)
        if self.cause is not None:
            self.__cause__ = self.cause

    def _default_message(self) -> str:
        return self.__class__.__name__

    def __str__(self) -> str:
        parts = [self.message]
        if self.url:
            parts.append(f"url={self.url}")
        if self.context:
            parts.append("context=(" + ", ".join(f"{k}={v}" for k, v in self.context.items()) + ")")
        return " | ".join(parts)


@dataclass(slots=True)
class ValidationError(CompressionCheckError):
    """Input rejected before any check ran."""


@dataclass(slots=True)
class InvalidURLError(ValidationError):
    def _default_message(self) -> str:
        return f"Invalid or empty URL: {self.url!r}"


@dataclass(slots=True)
class InvalidOptionsError(ValidationError):
    """Rule options do not match the option schema. Raised at load time."""

    option_path: Optional[str] = None
    option_value: Optional[Any] = None

    def _default_message(self) -> str:
        return f"Invalid option {self.option_path}={self.option_value!r}"


@dataclass(slots=True)
class PayloadSizeLimitError(ValidationError):
    """Decoded body larger than ``FetchSettings.max_decompressed_size_mb``."""

    actual_size: int = 0
    max_size: int = 0

    def _default_message(self) -> str:
        return f"Decoded payload of {self.actual_size:,} bytes exceeds the {self.max_size:,} byte limit"


@dataclass(slots=True)
class DecompressionError(CompressionCheckError):
    """Body carries a codec's signature but does not decode (truncated or corrupt)."""

    encoding: Optional[str] = None

    def _default_message(self) -> str:
        return f"Could not decode {self.encoding or 'encoded'} body"


@dataclass(slots=True)
class NetworkError(CompressionCheckError):
    """Transport-level failure of a probe."""


@dataclass(slots=True)
class ConnectionError(NetworkError):
    host: Optional[str] = None
    port: Optional[int] = None

    def _default_message(self) -> str:
        return f"Failed to connect to {self.host}:{self.port}"


@dataclass(slots=True)
class TimeoutError(NetworkError):
    timeout_type: Optional[str] = None  # connect, read, write or pool
    timeout_seconds: Optional[float] = None

    def _default_message(self) -> str:
        return f"Request timed out ({self.timeout_type}: {self.timeout_seconds}s)"


@dataclass(slots=True)
class DNSResolutionError(NetworkError):
    hostname: Optional[str] = None

    def _default_message(self) -> str:
        return f"DNS resolution failed for {self.hostname}"


@dataclass(slots=True)
class RateLimitError(CompressionCheckError):
    """The server kept answering 429/503 with Retry-After through every attempt."""

    status_code: int = 429
    retry_after: float = DEFAULT_RETRY_AFTER_SECONDS

    def _default_message(self) -> str:
        return f"Rate limited (HTTP {self.status_code}). Retry after {self.retry_after}s"


@dataclass(slots=True)
class RedirectError(CompressionCheckError):
    redirect_chain: list[str] = field(default_factory=list)


@dataclass(slots=True)
class TooManyRedirectsError(RedirectError):
    max_redirects: int = 0

    def _default_message(self) -> str:
        return f"{len(self.redirect_chain)} redirects exceed the limit of {self.max_redirects}"


@dataclass(slots=True)
class RedirectLoopError(RedirectError):
    loop_url: Optional[str] = None

    def _default_message(self) -> str:
        return f"Redirect loop detected at URL: {self.loop_url}"


def retry_after_from_response(response: Optional[httpx.Response]) -> float:
    """
    Seconds to wait according to ``Retry-After`` (delta-seconds or HTTP-date).

    Missing or unparsable values give DEFAULT_RETRY_AFTER_SECONDS; dates in
    the past give 0.
    """
    header = response.headers.get("Retry-After", "").strip() if response is not None else ""
    if not header:
        return float(DEFAULT_RETRY_AFTER_SECONDS)
    if header.isdigit():
        return float(header)

    try:
        retry_at = parsedate_to_datetime(header)
    except (TypeError, ValueError):
        return float(DEFAULT_RETRY_AFTER_SECONDS)
    if retry_at is None:
        return float(DEFAULT_RETRY_AFTER_SECONDS)
    if retry_at.tzinfo is None:
        retry_at = retry_at.replace(tzinfo=timezone.utc)
    return max((retry_at - datetime.now(timezone.utc)).total_seconds(), 0.0)
