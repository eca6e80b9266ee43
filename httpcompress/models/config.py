from __future__ import annotations
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ..logging import CheckerLoggerAdapter

DEFAULT_UA = "httpcompress/0.1"

# Desktop browser User-Agent used by the user-agent sniffing probes.
DESKTOP_BROWSER_UA = "Mozilla/5.0 Gecko"

# Event names of the subscription surface
FETCH_END = "fetch::end"
MANIFEST_FETCH_END = "manifestfetch::end"
TARGET_FETCH_END = "targetfetch::end"


@dataclass(frozen=True)
class CompressionPolicy:
    """Codecs a class of fetched resources is required to be served with."""

    gzip: bool = True
    zopfli: bool = True
    brotli: bool = True

    @property
    def requires_gzip_family(self) -> bool:
        return self.gzip or self.zopfli


@dataclass(frozen=True)
class CompressionCheckOptions:
    """The two named policies: subsidiary resources and the target document."""

    resource: CompressionPolicy = field(default_factory=CompressionPolicy)
    target: CompressionPolicy = field(default_factory=CompressionPolicy)

    def policy_for(self, event_name: str) -> CompressionPolicy:
        if event_name == TARGET_FETCH_END:
            return self.target
        if event_name in (FETCH_END, MANIFEST_FETCH_END):
            return self.resource
        raise KeyError(event_name)


@dataclass
class RetryPolicy:
    attempts: int = 2
    base_delay_ms: int = 250          # jittered backoff base
    respect_retry_after: bool = True  # honor 429/503 Retry-After
    max_retry_after_s: float = 30.0   # never sleep longer than this on Retry-After


@dataclass
class Timeouts:
    connect: float = 5.0
    read: float = 30.0
    write: float = 10.0
    pool: float = 5.0


@dataclass
class FetchSettings:
    user_agent: str = DEFAULT_UA

    # Throughput controls
    max_concurrency_per_host: int = 4

    # HTTP behavior
    http2: bool = True
    follow_redirects: bool = True
    max_redirects: int = 10
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    timeouts: Timeouts = field(default_factory=Timeouts)

    # Default headers (probes override Accept-Encoding / User-Agent per request)
    accept: str = "*/*"
    accept_encoding: str = "gzip, deflate, br"

    # Connection pooling
    max_connections: int = 50
    max_keepalive_connections: int = 10

    # Safety
    max_decompressed_size_mb: int = 100   # decoded bodies above this raise PayloadSizeLimitError

    # Logging
    logger: Optional["CheckerLoggerAdapter"] = None
