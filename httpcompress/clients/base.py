from __future__ import annotations
import asyncio
import random
import time
from abc import ABC, abstractmethod
from typing import Mapping, Optional

import httpx

from ..models.config import FetchSettings
from ..exceptions import (
    RateLimitError,
    TooManyRedirectsError,
    RedirectLoopError,
    retry_after_from_response,
    NetworkError,
    TimeoutError as ProbeTimeoutError,
    ConnectionError as ProbeConnectionError,
    DNSResolutionError,
)
from ..logging import get_checker_logger, log_retry, log_redirect

REDIRECT_STATUSES = (301, 302, 303, 307, 308)

_TIMEOUT_KINDS = (
    (httpx.ConnectTimeout, "connect"),
    (httpx.ReadTimeout, "read"),
    (httpx.WriteTimeout, "write"),
    (httpx.PoolTimeout, "pool"),
)

_DNS_FAILURE_MARKERS = ("Name or service not known", "getaddrinfo failed", "nodename nor servname")


class BaseFetcher(ABC):
    """
    Shared machinery of the fetch clients.

    Owns the ``httpx.AsyncClient``, one semaphore per host, retries with
    jittered backoff and manual redirect following. Responses come back in
    streaming mode so subclasses read the body exactly as it was sent.
    """

    def __init__(self, settings: Optional[FetchSettings] = None):
        self.settings = settings or FetchSettings()
        self._client: Optional[httpx.AsyncClient] = None
        self._host_semaphores: dict[str, asyncio.Semaphore] = {}
        self._logger = self.settings.logger or get_checker_logger(__name__)

    def _build_client(self) -> httpx.AsyncClient:
        timeouts = self.settings.timeouts
        return httpx.AsyncClient(
            headers={
                "User-Agent": self.settings.user_agent,
                "Accept": self.settings.accept,
                "Accept-Encoding": self.settings.accept_encoding,
            },
            timeout=httpx.Timeout(
                connect=timeouts.connect, read=timeouts.read, write=timeouts.write, pool=timeouts.pool
            ),
            http2=self.settings.http2,
            limits=httpx.Limits(
                max_keepalive_connections=self.settings.max_keepalive_connections,
                max_connections=self.settings.max_connections,
            ),
        )

    async def __aenter__(self) -> "BaseFetcher":
        self._client = self._build_client()
        self._logger.debug("client.initialized", http2=self.settings.http2)
        return self

    async def __aexit__(self, *exc) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _sem_for_host(self, host: str) -> asyncio.Semaphore:
        sem = self._host_semaphores.get(host)
        if sem is None:
            sem = self._host_semaphores[host] = asyncio.Semaphore(self.settings.max_concurrency_per_host)
        return sem

    @abstractmethod
    async def fetch(self, url: str, request_headers: Optional[Mapping[str, str]] = None):
        raise NotImplementedError

    async def _do_request_with_retry(
        self, method: str, url: str, headers: Optional[Mapping[str, str]] = None
    ) -> tuple[httpx.Response, list[str]]:
        """
        Send a request, retrying transport errors, 429/503 and 5xx.

        After the last attempt a 5xx response is returned like any other
        status; callers decide what a non-200 means. The response is still
        streaming and the caller closes it.

        Returns:
            Tuple of (httpx.Response, redirect chain)

        Raises:
            NetworkError: Connection, timeout or DNS failure on every attempt
            RateLimitError: 429/503 with Retry-After on every attempt
            TooManyRedirectsError, RedirectLoopError: Not retried
        """
        assert self._client is not None, "Use async context manager: `async with ProbeClient()`"
        rp = self.settings.retry
        total_attempts = rp.attempts + 1
        started = time.perf_counter()
        attempt = 0

        while True:
            last = attempt == rp.attempts
            try:
                resp, redirect_chain = await self._follow_redirects(method, url, headers)
            except httpx.HTTPError as exc:
                reason, error = self._network_error(url, exc, total_attempts)
                if last:
                    self._logger.error("request.failed", url=url, reason=reason, attempts=total_attempts, exc_info=exc)
                    raise error from exc
                delay_ms = await self._backoff(attempt)
                log_retry(self._logger, attempt, rp.attempts, delay_ms, reason, url=url)
                attempt += 1
                continue

            status = resp.status_code

            if status in (429, 503) and rp.respect_retry_after:
                delay = min(retry_after_from_response(resp), rp.max_retry_after_s)
                await resp.aclose()
                if last:
                    self._logger.error("request.failed", url=url, reason="rate_limit", status_code=status)
                    raise RateLimitError(url=url, status_code=status, retry_after=delay)
                log_retry(self._logger, attempt, rp.attempts, delay * 1000, f"rate_limit_{status}", url=url)
                if delay > 0:
                    await asyncio.sleep(delay)
                attempt += 1
                continue

            if status >= 500 and not last:
                await resp.aclose()
                delay_ms = await self._backoff(attempt)
                log_retry(self._logger, attempt, rp.attempts, delay_ms, f"server_error_{status}", url=url)
                attempt += 1
                continue

            self._logger.debug(
                "request.completed",
                url=url,
                status_code=status,
                attempts=attempt + 1,
                redirect_count=len(redirect_chain),
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            return resp, redirect_chain

    def _network_error(self, url: str, exc: httpx.HTTPError, attempts: int) -> tuple[str, NetworkError]:
        """Map an httpx transport error to a retry reason and the error raised once retries run out."""
        parsed = httpx.URL(url)
        text = str(exc)
        if any(marker in text for marker in _DNS_FAILURE_MARKERS):
            return "dns_error", DNSResolutionError(url=url, hostname=parsed.host, cause=exc)
        if isinstance(exc, httpx.TimeoutException):
            kind = next((name for cls, name in _TIMEOUT_KINDS if isinstance(exc, cls)), "unknown")
            return "timeout", ProbeTimeoutError(
                message=f"Request timed out after {attempts} attempts",
                url=url,
                timeout_type=kind,
                timeout_seconds=getattr(self.settings.timeouts, kind, None),
                cause=exc,
            )
        if isinstance(exc, httpx.ConnectError):
            return "connection_error", ProbeConnectionError(
                message=f"Connection failed after {attempts} attempts",
                url=url,
                host=parsed.host,
                port=parsed.port,
                cause=exc,
            )
        return "network_error", NetworkError(message=f"Request failed after {attempts} attempts: {exc}", url=url, cause=exc)

    async def _backoff(self, attempt: int) -> float:
        """Sleep a linearly growing, +/-30% jittered delay; return it in ms."""
        delay = self.settings.retry.base_delay_ms / 1000.0 * (attempt + 1)
        delay = max(0.05, delay * (1 + 0.3 * (2 * random.random() - 1)))
        await asyncio.sleep(delay)
        return delay * 1000

    async def _send(self, method: str, url: str, headers: Optional[Mapping[str, str]]) -> httpx.Response:
        assert self._client is not None
        request = self._client.build_request(method, url, headers=headers)
        return await self._client.send(request, stream=True, follow_redirects=False)

    async def _follow_redirects(
        self, method: str, url: str, headers: Optional[Mapping[str, str]] = None
    ) -> tuple[httpx.Response, list[str]]:
        """
        Follow redirects by hand so every hop carries the same probe headers.

        Raises:
            TooManyRedirectsError: More than ``max_redirects`` hops
            RedirectLoopError: A URL comes up twice
        """
        if not self.settings.follow_redirects:
            return await self._send(method, url, headers), []

        chain: list[str] = []
        current = url
        while True:
            resp = await self._send(method, current, headers)
            location = resp.headers.get("Location")
            if resp.status_code not in REDIRECT_STATUSES or not location:
                return resp, chain
            await resp.aclose()

            target = str(httpx.URL(current).join(location))
            if target == url or target in chain:
                self._logger.error("redirect.loop_detected", url=url, loop_url=target, redirect_chain=chain)
                raise RedirectLoopError(url=url, loop_url=target, redirect_chain=chain + [target])

            chain.append(target)
            if len(chain) > self.settings.max_redirects:
                self._logger.error("redirect.too_many", url=url, redirect_chain=chain)
                raise TooManyRedirectsError(url=url, max_redirects=self.settings.max_redirects, redirect_chain=chain)

            log_redirect(self._logger, current, target, resp.status_code, redirect_count=len(chain))
            if resp.status_code == 303:
                method = "GET"
            current = target
