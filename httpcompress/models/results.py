from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from .diagnostics import Diagnostic


@dataclass
class BatchCheckResult:
    """Result of checking several target URLs."""

    checked: List[str]
    failed: List[tuple[str, Exception]]
    total: int
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def success_rate(self) -> float:
        """Percentage of URLs whose validation ran to completion."""
        if self.total == 0:
            return 0.0
        return (len(self.checked) / self.total) * 100

    def diagnostics_for(self, url: str) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.resource_url == url]
