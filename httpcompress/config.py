"""
Rule option loading.

Options arrive as a plain mapping (parsed from the host's configuration
file)::

    {
        "resource": {"gzip": True, "zopfli": False, "brotli": True},
        "target": {"brotli": False},
    }

The schema is the pydantic model RuleOptions. Both sub-objects are
optional; a present one needs at least one key, only ``gzip``/``zopfli``/
``brotli`` are accepted and values must be real booleans. Missing keys
default to True. Violations raise InvalidOptionsError before a single
resource is checked.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, StrictBool, ValidationError, model_validator

from .exceptions import InvalidOptionsError
from .logging import get_checker_logger
from .models.config import CompressionCheckOptions, CompressionPolicy

__all__ = ["PolicyOptions", "RuleOptions", "load_policy", "load_options"]

_logger = get_checker_logger(__name__)


class PolicyOptions(BaseModel):
    """Codec requirements for one class of resources."""

    model_config = ConfigDict(extra="forbid", json_schema_extra={"minProperties": 1})

    gzip: StrictBool = True
    zopfli: StrictBool = True
    brotli: StrictBool = True

    @model_validator(mode="before")
    @classmethod
    def _require_one_key(cls, data: Any) -> Any:
        if isinstance(data, Mapping) and not data:
            raise ValueError("must set at least one of gzip, zopfli, brotli")
        return data

    def to_policy(self) -> CompressionPolicy:
        return CompressionPolicy(gzip=self.gzip, zopfli=self.zopfli, brotli=self.brotli)


class RuleOptions(BaseModel):
    """Top-level rule options."""

    model_config = ConfigDict(extra="forbid")

    resource: Optional[PolicyOptions] = None
    target: Optional[PolicyOptions] = None


def _invalid(exc: ValidationError, raw: Any, prefix: tuple[str, ...] = ()) -> InvalidOptionsError:
    error = exc.errors()[0]
    path = ".".join(str(part) for part in prefix + tuple(error["loc"]))
    return InvalidOptionsError(
        message=f"Invalid option '{path}': {error['msg']}",
        option_path=path,
        option_value=error.get("input", raw),
        cause=exc,
    )


def _as_input(raw: Any) -> Any:
    return dict(raw) if isinstance(raw, Mapping) else raw


def load_policy(raw: Optional[Mapping[str, Any]], name: str = "policy") -> CompressionPolicy:
    """Validate one policy sub-object and apply defaults."""
    if raw is None:
        return CompressionPolicy()
    try:
        return PolicyOptions.model_validate(_as_input(raw)).to_policy()
    except ValidationError as exc:
        raise _invalid(exc, raw, (name,)) from exc


def load_options(raw: Optional[Mapping[str, Any]] = None) -> CompressionCheckOptions:
    """
    Validate rule options and build the resource/target policies.

    Raises:
        InvalidOptionsError: When the mapping does not match the option schema
    """
    try:
        parsed = RuleOptions.model_validate(_as_input(raw if raw is not None else {}))
    except ValidationError as exc:
        raise _invalid(exc, raw) from exc

    options = CompressionCheckOptions(
        resource=parsed.resource.to_policy() if parsed.resource is not None else CompressionPolicy(),
        target=parsed.target.to_policy() if parsed.target is not None else CompressionPolicy(),
    )
    _logger.debug("options.loaded", resource=options.resource, target=options.target)
    return options
