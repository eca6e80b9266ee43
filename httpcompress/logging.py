"""
Structured logging for httpcompress.

Every log call names an event (``probe.completed``, ``request.retry``,
``diagnostic.reported`` ...) and passes its data as keyword arguments. The
events go to a ``logging.LoggerAdapter`` produced by a factory; the default
factory wraps the standard library logger of the module. A host crawler can
route the events into its own logging with ``configure_logging``:

    from httpcompress.logging import configure_logging

    configure_logging(lambda name, **context: my_adapter_for(name, context))
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from logging import LoggerAdapter
from typing import Any, Callable, Dict, Iterator, Mapping, Optional

LoggerFactory = Callable[..., LoggerAdapter]

_logger_factory: Optional[LoggerFactory] = None


class CheckerLoggerAdapter:
    """Event-style front end over a LoggerAdapter, with bound context."""

    def __init__(self, logger: LoggerAdapter, context: Optional[Dict[str, Any]] = None):
        self._logger = logger
        self._context = context or {}

    def _extra(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        return {**self._context, **fields}

    def debug(self, event: str, **fields: Any) -> None:
        self._logger.debug(event, extra=self._extra(fields))

    def info(self, event: str, **fields: Any) -> None:
        self._logger.info(event, extra=self._extra(fields))

    def warning(self, event: str, **fields: Any) -> None:
        self._logger.warning(event, extra=self._extra(fields))

    def error(self, event: str, exc_info: Optional[BaseException] = None, **fields: Any) -> None:
        self._logger.error(event, extra=self._extra(fields), exc_info=exc_info)


def _stdlib_factory(name: str, **context: Any) -> LoggerAdapter:
    return logging.LoggerAdapter(logging.getLogger(name), {"extra": context})


def configure_logging(logger_factory: Optional[LoggerFactory]) -> None:
    """Install ``(name, **context) -> LoggerAdapter``; None restores the default."""
    global _logger_factory
    _logger_factory = logger_factory


def get_checker_logger(name: str, url: Optional[str] = None, **context: Any) -> CheckerLoggerAdapter:
    if url is not None:
        context["url"] = url
    factory = _logger_factory or _stdlib_factory
    return CheckerLoggerAdapter(factory(name, **context), context)


@contextmanager
def log_timing(logger: CheckerLoggerAdapter, event_prefix: str, **context: Any) -> Iterator[None]:
    """Emit ``<prefix>.started`` then ``<prefix>.completed`` or ``<prefix>.failed``."""
    start = time.perf_counter()
    logger.debug(f"{event_prefix}.started", **context)
    try:
        yield
    except BaseException as exc:
        logger.error(
            f"{event_prefix}.failed",
            exc_info=exc,
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
            **context,
        )
        raise
    logger.info(
        f"{event_prefix}.completed",
        duration_ms=round((time.perf_counter() - start) * 1000, 2),
        **context,
    )


def log_exception(logger: CheckerLoggerAdapter, exc: BaseException, event: str, **context: Any) -> None:
    logger.error(
        event,
        exc_info=exc,
        error_type=type(exc).__name__,
        error_message=str(exc),
        **context,
    )


def log_retry(
    logger: CheckerLoggerAdapter,
    attempt: int,
    max_attempts: int,
    delay_ms: float,
    reason: str,
    **context: Any,
) -> None:
    logger.warning(
        "request.retry",
        attempt=attempt,
        max_attempts=max_attempts,
        delay_ms=round(delay_ms, 2),
        reason=reason,
        **context,
    )


def log_redirect(logger: CheckerLoggerAdapter, from_url: str, to_url: str, status_code: int, **context: Any) -> None:
    logger.debug("request.redirect", from_url=from_url, to_url=to_url, status_code=status_code, **context)


def log_probe(
    logger: CheckerLoggerAdapter,
    url: str,
    request_headers: Mapping[str, str],
    codec: Optional[str] = None,
    content_encoding: Optional[str] = None,
    size_bytes: Optional[int] = None,
    **context: Any,
) -> None:
    """One ``probe.completed`` event per fetch: what was asked for and what came back."""
    logger.debug(
        "probe.completed",
        url=url,
        accept_encoding=request_headers.get("Accept-Encoding"),
        user_agent=request_headers.get("User-Agent"),
        codec=codec,
        content_encoding=content_encoding,
        size_bytes=size_bytes,
        **context,
    )


def log_diagnostic(logger: CheckerLoggerAdapter, resource_url: str, message: str, **context: Any) -> None:
    logger.info("diagnostic.reported", resource_url=resource_url, diagnostic=message, **context)
