"""
Report sinks for diagnostics.

The pipeline only ever appends. Sinks must tolerate concurrent writers since
several resources of one crawl may be validated at the same time.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import Any, List, Optional

from .logging import CheckerLoggerAdapter, get_checker_logger, log_diagnostic
from .models.diagnostics import Diagnostic

__all__ = ["BaseReporter", "DiagnosticCollector", "LoggingReporter"]


class BaseReporter(ABC):
    """Append-only diagnostic sink."""

    @abstractmethod
    async def report(self, resource_url: str, element: Optional[Any], message: str) -> None:
        raise NotImplementedError

    async def __call__(self, resource_url: str, element: Optional[Any], message: str) -> None:
        await self.report(resource_url, element, message)


class DiagnosticCollector(BaseReporter):
    """Thread-safe in-memory sink; one logical diagnostic stream per crawl."""

    def __init__(self, logger: Optional[CheckerLoggerAdapter] = None):
        self._lock = threading.Lock()
        self._diagnostics: List[Diagnostic] = []
        self._logger = logger or get_checker_logger(__name__)

    async def report(self, resource_url: str, element: Optional[Any], message: str) -> None:
        with self._lock:
            self._diagnostics.append(
                Diagnostic(resource_url=resource_url, message=message, element=element)
            )
        log_diagnostic(self._logger, resource_url, message)

    @property
    def diagnostics(self) -> List[Diagnostic]:
        with self._lock:
            return list(self._diagnostics)

    def for_resource(self, resource_url: str) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.resource_url == resource_url]

    def messages(self, resource_url: Optional[str] = None) -> List[str]:
        diagnostics = self.diagnostics if resource_url is None else self.for_resource(resource_url)
        return [d.message for d in diagnostics]

    def clear(self) -> None:
        with self._lock:
            self._diagnostics.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._diagnostics)


class LoggingReporter(BaseReporter):
    """Sink that only emits ``diagnostic.reported`` log events."""

    def __init__(self, logger: Optional[CheckerLoggerAdapter] = None):
        self._logger = logger or get_checker_logger(__name__)

    async def report(self, resource_url: str, element: Optional[Any], message: str) -> None:
        log_diagnostic(self._logger, resource_url, message)
