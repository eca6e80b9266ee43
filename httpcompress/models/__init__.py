from .resource import (
    FetchedResource,
    ProbeRequest,
)

from .diagnostics import (
    Diagnostic,
    FetchEnd,
)

from .results import BatchCheckResult

from .config import (
    CompressionPolicy,
    CompressionCheckOptions,
    FetchSettings,
    RetryPolicy,
    Timeouts,
)

__all__ = [
    # Resource Models
    "FetchedResource",
    "ProbeRequest",

    # Diagnostics
    "Diagnostic",
    "FetchEnd",
    "BatchCheckResult",

    # Config Models
    "CompressionPolicy",
    "CompressionCheckOptions",
    "FetchSettings",
    "RetryPolicy",
    "Timeouts",
]
