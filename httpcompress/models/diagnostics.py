from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Diagnostic:
    """A single compliance finding for a resource."""

    resource_url: str
    message: str
    element: Optional[Any] = None   # DOM context from the host, opaque here


@dataclass(frozen=True)
class FetchEnd:
    """Payload of the fetch-completion events the rule subscribes to."""

    resource: str
    response: Any                   # FetchedResource
    element: Optional[Any] = None
