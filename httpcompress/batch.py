"""
Concurrent compression checks for a list of target documents.

Each URL is fetched once as a target document and run through the
``targetfetch::end`` handler, which issues its own probes. URLs are
independent units of work; all diagnostics go to one collector.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, List, Mapping, Optional, Union

from .clients.probe import ProbeClient
from .logging import get_checker_logger, log_exception
from .models.config import CompressionCheckOptions, FetchSettings, TARGET_FETCH_END
from .models.diagnostics import FetchEnd
from .models.results import BatchCheckResult
from .reporting import DiagnosticCollector
from .rule import create_rule

__all__ = ["check_urls"]

_logger = get_checker_logger(__name__)


async def check_urls(
    urls: List[str],
    options: Union[CompressionCheckOptions, Mapping[str, Any], None] = None,
    settings: Optional[FetchSettings] = None,
    max_concurrent: int = 5,
    on_error: Optional[Callable[[str, Exception], Awaitable[None]]] = None,
    return_exceptions: bool = True,
) -> BatchCheckResult:
    """
    Check several target documents concurrently.

    Args:
        urls: Target document URLs
        options: Rule options (validated up front, before any fetch)
        settings: Fetch settings shared by all probes
        max_concurrent: Maximum URLs validated at the same time
        on_error: Optional callback for URLs whose validation aborted
        return_exceptions: If True, failures are collected; if False, the first one is raised

    Returns:
        BatchCheckResult with checked/failed URLs and every diagnostic

    Example:
        result = await check_urls(
            ["https://example.com/", "https://example.org/"],
            options={"target": {"zopfli": False}},
        )
        for diagnostic in result.diagnostics:
            print(diagnostic.resource_url, diagnostic.message)
    """
    collector = DiagnosticCollector()
    semaphore = asyncio.Semaphore(max_concurrent)
    checked: List[str] = []
    failed: List[tuple[str, Exception]] = []

    async with ProbeClient(settings) as client:
        handlers = create_rule(options, client.fetch, collector)
        validate_target = handlers[TARGET_FETCH_END]

        async def check_one(url: str) -> None:
            async with semaphore:
                try:
                    response = await client.fetch(url)
                    await validate_target(FetchEnd(resource=url, response=response))
                    checked.append(url)
                except Exception as exc:
                    failed.append((url, exc))
                    log_exception(_logger, exc, "batch.url_failed", url=url)
                    if on_error:
                        await on_error(url, exc)
                    if not return_exceptions:
                        raise

        tasks = [check_one(url) for url in urls]
        await asyncio.gather(*tasks, return_exceptions=return_exceptions)

    _logger.info(
        "batch.completed",
        total=len(urls),
        checked=len(checked),
        failed=len(failed),
        diagnostics=len(collector),
    )

    return BatchCheckResult(
        checked=checked,
        failed=failed,
        total=len(urls),
        diagnostics=collector.diagnostics,
    )
