from .clients import (
    BaseFetcher,
    ProbeClient,
)
from .models import (
    FetchedResource,
    ProbeRequest,
    Diagnostic,
    FetchEnd,
    BatchCheckResult,
    CompressionPolicy,
    CompressionCheckOptions,
    FetchSettings,
    RetryPolicy,
    Timeouts,
)
from .exceptions import (
    # Base exceptions
    CompressionCheckError,
    # Validation errors
    ValidationError,
    InvalidURLError,
    InvalidOptionsError,
    # Network errors
    NetworkError,
    ConnectionError,
    TimeoutError,
    DNSResolutionError,
    PayloadSizeLimitError,
    DecompressionError,
    RateLimitError,
    # Redirect errors
    RedirectError,
    TooManyRedirectsError,
    RedirectLoopError,
)
from .codecs import (
    is_gzip,
    is_brotli,
    is_suspected_zopfli,
    is_response_compressed,
    detect_codec,
)
from .media_types import is_compressible, is_text_media_type
from .headers import check_vary, check_content_encoding_header, find_disallowed_encodings
from .size import should_flag_as_no_benefit
from .config import load_options
from .pipeline import CompressionValidator, StepOutcome, ValidationContext
from .reporting import BaseReporter, DiagnosticCollector, LoggingReporter
from .rule import RULE_META, create_rule
from .batch import check_urls


__all__ = [
    # Entry points
    "create_rule",
    "check_urls",
    "CompressionValidator",
    "StepOutcome",
    "ValidationContext",
    "RULE_META",

    # Fetch clients
    "BaseFetcher",
    "ProbeClient",

    # Configuration
    "load_options",
    "CompressionPolicy",
    "CompressionCheckOptions",
    "FetchSettings",
    "RetryPolicy",
    "Timeouts",

    # Models
    "FetchedResource",
    "ProbeRequest",
    "Diagnostic",
    "FetchEnd",
    "BatchCheckResult",

    # Report sinks
    "BaseReporter",
    "DiagnosticCollector",
    "LoggingReporter",

    # Detection and checks
    "is_gzip",
    "is_brotli",
    "is_suspected_zopfli",
    "is_response_compressed",
    "detect_codec",
    "is_compressible",
    "is_text_media_type",
    "check_vary",
    "check_content_encoding_header",
    "find_disallowed_encodings",
    "should_flag_as_no_benefit",

    # Base exceptions
    "CompressionCheckError",
    # Validation errors
    "ValidationError",
    "InvalidURLError",
    "InvalidOptionsError",
    # Network errors
    "NetworkError",
    "ConnectionError",
    "TimeoutError",
    "DNSResolutionError",
    "PayloadSizeLimitError",
    "DecompressionError",
    "RateLimitError",
    # Redirect errors
    "RedirectError",
    "TooManyRedirectsError",
    "RedirectLoopError",
]
