from __future__ import annotations
import contextlib
import time
from typing import Mapping, Optional

import httpx

from .base import BaseFetcher
from ..codecs import detect_codec
from ..exceptions import DecompressionError, InvalidURLError, PayloadSizeLimitError
from ..logging import log_exception, log_probe
from ..models.resource import FetchedResource, ProbeRequest
from ..utils import decode_content, extract_charset, guess_media_type


class ProbeClient(BaseFetcher):
    """
    Async fetch client that keeps the wire bytes.

    httpx transparently decodes content codings, which would hide exactly
    what the checker needs to see. ProbeClient reads the undecoded stream
    (``aiter_raw``) into ``raw_response`` and decodes it separately into
    ``raw_content``.

    Example:
        async with ProbeClient() as client:
            resource = await client.fetch(
                "https://example.com/app.js",
                {"Accept-Encoding": "br"},
            )
            print(len(resource.raw_response), len(resource.raw_content))
    """

    async def fetch(self, url: str, request_headers: Optional[Mapping[str, str]] = None) -> FetchedResource:
        """
        GET ``url`` with ``request_headers`` layered over the client defaults.

        Raises:
            InvalidURLError: When URL is empty or not absolute
            NetworkError: For connection/timeout/DNS failures
            RateLimitError: When every attempt is answered with 429/503
            DecompressionError: When a gzip body is truncated or corrupt
            PayloadSizeLimitError: When the decoded body exceeds max_decompressed_size_mb
        """
        if not url or not url.strip():
            self._logger.error("fetch.invalid_url", url=url)
            raise InvalidURLError(message="URL cannot be empty", url=url)

        try:
            parsed = httpx.URL(url)
        except httpx.InvalidURL as exc:
            raise InvalidURLError(message=f"Malformed URL: {exc}", url=url, cause=exc) from exc
        if not parsed.is_absolute_url:
            raise InvalidURLError(message="URL must be absolute", url=url)

        headers = dict(request_headers or {})
        sem = self._sem_for_host(parsed.host)
        start = time.perf_counter()

        async with sem:
            resp, redirect_chain = await self._do_request_with_retry("GET", url, headers)
            try:
                raw = b"".join([chunk async for chunk in resp.aiter_raw()])
            finally:
                with contextlib.suppress(Exception):
                    await resp.aclose()

        duration_ms = int((time.perf_counter() - start) * 1000)
        return self._to_resource(resp, raw, redirect_chain, duration_ms, headers)

    async def probe(self, request: ProbeRequest) -> FetchedResource:
        return await self.fetch(request.url, request.headers)

    def _to_resource(
        self,
        resp: httpx.Response,
        raw: bytes,
        redirect_chain: list[str],
        duration_ms: int,
        request_headers: Mapping[str, str],
    ) -> FetchedResource:
        final_url = str(resp.request.url)
        content_encoding = resp.headers.get("Content-Encoding")
        max_bytes = self.settings.max_decompressed_size_mb * 1024 * 1024
        try:
            content = decode_content(raw, content_encoding, max_bytes=max_bytes, url=final_url)
        except (DecompressionError, PayloadSizeLimitError) as exc:
            log_exception(self._logger, exc, "probe.decode_failed", url=final_url, content_encoding=content_encoding)
            raise

        log_probe(
            self._logger,
            url=final_url,
            request_headers=request_headers,
            codec=detect_codec(raw),
            content_encoding=content_encoding,
            size_bytes=len(raw),
            decoded_size_bytes=len(content),
            status_code=resp.status_code,
            duration_ms=duration_ms,
        )

        return FetchedResource(
            url=final_url,
            status_code=resp.status_code,
            headers=httpx.Headers(resp.headers),
            media_type=guess_media_type(resp.headers, final_url),
            raw_response=raw,
            raw_content=content,
            charset=extract_charset(resp.headers),
            duration_ms=duration_ms,
            redirect_chain=tuple(redirect_chain),
        )
