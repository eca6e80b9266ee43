"""
Event subscription surface.

The host crawler dispatches fetch-completion events by name. Subsidiary
resources and web app manifests are held to the ``resource`` policy, the
top-level document to the ``target`` policy.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Union

from .config import RuleOptions, load_options
from .logging import CheckerLoggerAdapter, get_checker_logger
from .models.config import (
    CompressionCheckOptions,
    FETCH_END,
    MANIFEST_FETCH_END,
    TARGET_FETCH_END,
)
from .models.diagnostics import FetchEnd
from .pipeline import CompressionValidator, FetchFunc, ReportFunc

__all__ = ["RULE_META", "EventHandler", "create_rule"]

EventHandler = Callable[[FetchEnd], Awaitable[None]]

RULE_META: Dict[str, Any] = {
    "docs": {
        "category": "performance",
        "description": "Require resources to be served compressed",
    },
    "recommended": True,
    "schema": RuleOptions.model_json_schema(),
    "works_with_local_files": False,
}


def create_rule(
    options: Union[CompressionCheckOptions, Mapping[str, Any], None],
    fetch: FetchFunc,
    report: ReportFunc,
    logger: Optional[CheckerLoggerAdapter] = None,
) -> Dict[str, EventHandler]:
    """
    Build the event handlers of the compression rule.

    Args:
        options: Loaded options, or a raw mapping validated with load_options
        fetch: Probe fetcher, ``async (url, request_headers) -> FetchedResource``
        report: Report sink, ``async (resource_url, element, message)``
        logger: Optional logger shared by both validators

    Returns:
        Mapping of event name to async handler

    Raises:
        InvalidOptionsError: When a raw options mapping is malformed
    """
    if not isinstance(options, CompressionCheckOptions):
        options = load_options(options)

    logger = logger or get_checker_logger(__name__)
    resource_validator = CompressionValidator(options.resource, fetch, report, logger=logger)
    target_validator = CompressionValidator(options.target, fetch, report, logger=logger)

    logger.debug(
        "rule.created",
        events=[FETCH_END, MANIFEST_FETCH_END, TARGET_FETCH_END],
    )

    return {
        FETCH_END: resource_validator.validate,
        MANIFEST_FETCH_END: resource_validator.validate,
        TARGET_FETCH_END: target_validator.validate,
    }
