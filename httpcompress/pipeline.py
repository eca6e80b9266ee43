"""
Compression compliance pipeline.

One validation run per fetched resource. The run is an ordered list of named
steps; each step returns CONTINUE or STOP:

    filter             non-200 responses and non-HTTP(S) resources are skipped
    special_case       SVGZ: gzip bytes must carry Content-Encoding: gzip
    compressibility    non-compressible types must not be compressed at all
    disallowed_codecs  only gzip and br are acceptable content codings
    identity_probe     Accept-Encoding: identity must get an unencoded body
    gzip_zopfli        required gzip/Zopfli, headers, user-agent sniffing
    brotli             required brotli over HTTPS, never over plain HTTP

Steps after ``compressibility`` issue probes: extra fetches of the same
resource under controlled request headers. Probe failures propagate so the
run aborts instead of reporting on a question it could not answer.
Diagnostics are appended to the report sink and never read back.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, Optional

from .codecs import is_brotli, is_gzip, is_response_compressed, is_suspected_zopfli
from .headers import check_content_encoding_header, check_vary, find_disallowed_encodings
from .logging import CheckerLoggerAdapter, get_checker_logger, log_timing
from .media_types import is_compressible, normalize_media_type
from .messages import compression_message, content_encoding_message
from .models.config import CompressionPolicy, DESKTOP_BROWSER_UA
from .models.diagnostics import FetchEnd
from .models.resource import FetchedResource
from .size import gzip_family_label, no_benefit_message, should_flag_as_no_benefit
from .utils import get_file_extension, is_http, is_regular_protocol

__all__ = [
    "StepOutcome",
    "ValidationContext",
    "CompressionValidator",
    "FetchFunc",
    "ReportFunc",
]

FetchFunc = Callable[[str, Mapping[str, str]], Awaitable[FetchedResource]]
ReportFunc = Callable[[str, Optional[Any], str], Awaitable[None]]

IDENTITY_SUFFIX = "for requests made with 'Accept-Encoding: identity'"


class StepOutcome(enum.Enum):
    CONTINUE = "continue"
    STOP = "stop"


@dataclass(frozen=True)
class ValidationContext:
    """Per-run locals shared by the steps of one validation."""

    resource: str
    response: FetchedResource
    policy: CompressionPolicy
    element: Optional[Any] = None

    @property
    def content_encoding(self) -> Optional[str]:
        return self.response.content_encoding


class CompressionValidator:
    """
    Runs the compliance pipeline for one policy.

    Args:
        policy: Codecs required for the resources this validator handles
        fetch: ``async (url, request_headers) -> FetchedResource`` used for probes
        report: ``async (resource_url, element, message)`` report sink
        logger: Optional logger (defaults to a module logger)

    Example:
        async with ProbeClient() as client:
            sink = DiagnosticCollector()
            validator = CompressionValidator(CompressionPolicy(), client.fetch, sink)
            resource = await client.fetch(url)
            await validator.validate(FetchEnd(resource=url, response=resource))
    """

    def __init__(
        self,
        policy: CompressionPolicy,
        fetch: FetchFunc,
        report: ReportFunc,
        logger: Optional[CheckerLoggerAdapter] = None,
    ):
        self.policy = policy
        self._fetch = fetch
        self._report_sink = report
        self._logger = logger or get_checker_logger(__name__)
        self.steps: tuple[tuple[str, Callable[[ValidationContext], Awaitable[StepOutcome]]], ...] = (
            ("filter", self.filter_response),
            ("special_case", self.check_special_case),
            ("compressibility", self.check_compressibility),
            ("disallowed_codecs", self.check_disallowed_encodings),
            ("identity_probe", self.check_uncompressed),
            ("gzip_zopfli", self.check_gzip_zopfli),
            ("brotli", self.check_brotli),
        )

    async def validate(self, event: FetchEnd) -> None:
        """Entry point bound to the fetch-completion events."""
        ctx = ValidationContext(
            resource=event.resource,
            response=event.response,
            policy=self.policy,
            element=event.element,
        )
        with log_timing(self._logger, "validation", url=ctx.resource):
            await self.run(ctx)

    async def run(self, ctx: ValidationContext) -> Optional[str]:
        """Run the steps in order; return the name of the step that stopped, if any."""
        for name, step in self.steps:
            outcome = await step(ctx)
            if outcome is StepOutcome.STOP:
                self._logger.debug("validation.stopped", url=ctx.resource, step=name)
                return name
        return None

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    async def _report(self, ctx: ValidationContext, message: str) -> None:
        await self._report_sink(ctx.resource, ctx.element, message)

    async def _probe(self, ctx: ValidationContext, headers: Mapping[str, str]) -> FetchedResource:
        probe = await self._fetch(ctx.resource, dict(headers))
        self._logger.debug(
            "probe.checked",
            url=ctx.resource,
            accept_encoding=headers.get("Accept-Encoding"),
            user_agent=headers.get("User-Agent"),
            content_encoding=probe.content_encoding,
        )
        return probe

    # ------------------------------------------------------------------
    # steps
    # ------------------------------------------------------------------

    async def filter_response(self, ctx: ValidationContext) -> StepOutcome:
        # only 200 responses fetched over http(s)
        if ctx.response.status_code != 200:
            return StepOutcome.STOP
        if not is_regular_protocol(ctx.resource):
            return StepOutcome.STOP
        return StepOutcome.CONTINUE

    async def check_special_case(self, ctx: ValidationContext) -> StepOutcome:
        """
        SVGZ files are gzip by definition; without ``Content-Encoding: gzip``
        browsers cannot render them. None of the generic checks apply.
        """
        is_svg = (
            normalize_media_type(ctx.response.media_type) == "image/svg+xml"
            or get_file_extension(ctx.resource) == "svgz"
        )
        if not (is_svg and is_gzip(ctx.response.raw_response)):
            return StepOutcome.CONTINUE

        if ctx.content_encoding != "gzip":
            await self._report(ctx, content_encoding_message("gzip"))
        return StepOutcome.STOP

    async def check_compressibility(self, ctx: ValidationContext) -> StepOutcome:
        if is_compressible(ctx.response.media_type):
            return StepOutcome.CONTINUE

        if is_response_compressed(ctx.response.raw_response, ctx.content_encoding):
            await self._report(ctx, compression_message(not_required=True))

        if ctx.content_encoding:
            await self._report(ctx, content_encoding_message(not_required=True))

        return StepOutcome.STOP

    async def check_disallowed_encodings(self, ctx: ValidationContext) -> StepOutcome:
        for message in find_disallowed_encodings(ctx.response.headers, ctx.response.raw_response):
            await self._report(ctx, message)
        return StepOutcome.CONTINUE

    async def check_uncompressed(self, ctx: ValidationContext) -> StepOutcome:
        """A server must honor a request for no content coding."""
        probe = await self._probe(ctx, {"Accept-Encoding": "identity"})

        if is_response_compressed(probe.raw_response, probe.content_encoding):
            await self._report(ctx, compression_message(not_required=True, suffix=IDENTITY_SUFFIX))

        if probe.content_encoding:
            await self._report(ctx, content_encoding_message(not_required=True, suffix=IDENTITY_SUFFIX))

        return StepOutcome.CONTINUE

    async def check_gzip_zopfli(self, ctx: ValidationContext) -> StepOutcome:
        policy = ctx.policy
        if not policy.requires_gzip_family:
            return StepOutcome.CONTINUE

        probe = await self._probe(ctx, {"Accept-Encoding": "gzip"})
        compressed_with_gzip = is_gzip(probe.raw_response)
        not_zopfli = is_suspected_zopfli(probe.raw_response)
        compressed_len = len(probe.raw_response)
        uncompressed_len = len(probe.raw_content)

        if compressed_with_gzip and should_flag_as_no_benefit(
            compressed_len, uncompressed_len, probe.content_encoding, "gzip"
        ):
            await self._report(
                ctx, no_benefit_message(gzip_family_label(not_zopfli), compressed_len, uncompressed_len)
            )
            return StepOutcome.CONTINUE

        if not compressed_with_gzip and policy.gzip:
            await self._report(ctx, compression_message("gzip"))
            return StepOutcome.CONTINUE

        if not_zopfli and policy.zopfli:
            await self._report(ctx, compression_message("Zopfli"))

        vary_message = check_vary(probe.headers)
        if vary_message:
            await self._report(ctx, vary_message)

        encoding_message = check_content_encoding_header(probe.content_encoding, "gzip")
        if encoding_message:
            await self._report(ctx, encoding_message)

        ua_probe = await self._probe(
            ctx, {"Accept-Encoding": "gzip", "User-Agent": DESKTOP_BROWSER_UA}
        )

        if not is_gzip(ua_probe.raw_response) and policy.gzip:
            await self._report(ctx, compression_message("gzip", suffix="regardless of the user agent"))
            return StepOutcome.CONTINUE

        if is_suspected_zopfli(ua_probe.raw_response) and not not_zopfli and policy.zopfli:
            await self._report(ctx, compression_message("Zopfli", suffix="regardless of the user agent"))

        return StepOutcome.CONTINUE

    async def check_brotli(self, ctx: ValidationContext) -> StepOutcome:
        if not ctx.policy.brotli:
            return StepOutcome.CONTINUE

        probe = await self._probe(ctx, {"Accept-Encoding": "br"})
        compressed_with_brotli = is_brotli(probe.raw_response)

        # Browsers only advertise br over HTTPS
        if is_http(ctx.resource):
            if compressed_with_brotli:
                await self._report(ctx, compression_message("Brotli", not_required=True, suffix="over HTTP"))
            return StepOutcome.CONTINUE

        compressed_len = len(probe.raw_response)
        uncompressed_len = len(probe.raw_content)

        if compressed_with_brotli and should_flag_as_no_benefit(
            compressed_len, uncompressed_len, probe.content_encoding, "br"
        ):
            await self._report(ctx, no_benefit_message("Brotli", compressed_len, uncompressed_len))
            return StepOutcome.CONTINUE

        if not compressed_with_brotli:
            await self._report(ctx, compression_message("Brotli", suffix="over HTTPS"))
            return StepOutcome.CONTINUE

        vary_message = check_vary(probe.headers)
        if vary_message:
            await self._report(ctx, vary_message)

        encoding_message = check_content_encoding_header(probe.content_encoding, "br")
        if encoding_message:
            await self._report(ctx, encoding_message)

        ua_probe = await self._probe(
            ctx, {"Accept-Encoding": "br", "User-Agent": DESKTOP_BROWSER_UA}
        )

        if not is_brotli(ua_probe.raw_response):
            await self._report(
                ctx, compression_message("Brotli", suffix="over HTTPS regardless of the user agent")
            )

        return StepOutcome.CONTINUE
