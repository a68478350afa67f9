"""Validation options: process-wide defaults merged with per-call overrides."""

import ipaddress
import os
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from safeurl.cidr import parse_cidr
from safeurl.dns import DNSResolver, SystemResolver
from safeurl.exceptions import ConfigurationError

OPTION_KEYS = (
    "schemes",
    "block_reserved",
    "blocklist",
    "allowlist",
    "dns_module",
    "detailed_error",
)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}

default_resolver = SystemResolver()


def library_defaults() -> dict[str, Any]:
    """Hardcoded defaults used when neither the call nor the config sets a key."""
    return {
        "schemes": ["http", "https"],
        "block_reserved": True,
        "blocklist": [],
        "allowlist": [],
        "dns_module": default_resolver,
        "detailed_error": True,
    }


def _check_resolver(v: object) -> object:
    if not isinstance(v, DNSResolver):
        raise ValueError("dns_module must provide a resolve(hostname) method")
    return v


def _split_list(raw: str) -> list[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(name, f"expected a boolean, got '{raw}'")


class SafeURLConfig(BaseModel):
    """Process-wide default options.

    Every field is optional. Only fields that were explicitly set take part
    in option resolution, so ``SafeURLConfig(allowlist=[])`` really means
    "no allowlist" rather than "not configured".
    """

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    schemes: list[str] | None = None
    block_reserved: bool | None = None
    blocklist: list[str] | None = None
    allowlist: list[str] | None = None
    dns_module: Any = None
    detailed_error: bool | None = None

    @field_validator("blocklist", "allowlist")
    @classmethod
    def validate_ranges(cls, v: list[str] | None) -> list[str] | None:
        """Reject malformed CIDR ranges when the config is loaded."""
        if v is not None:
            for cidr in v:
                parse_cidr(cidr)
        return v

    @field_validator("dns_module")
    @classmethod
    def validate_dns_module(cls, v: object) -> object:
        if v is None:
            return v
        return _check_resolver(v)

    def is_set(self, key: str) -> bool:
        return key in self.model_fields_set and getattr(self, key) is not None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "SafeURLConfig":
        """Build a config from ``SAFEURL_*`` environment variables.

        Lists are comma-separated. Unset variables are left unset.
        """
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}

        for key in ("schemes", "blocklist", "allowlist"):
            raw = env.get(f"SAFEURL_{key.upper()}")
            if raw is not None:
                values[key] = _split_list(raw)

        for key in ("block_reserved", "detailed_error"):
            name = f"SAFEURL_{key.upper()}"
            raw = env.get(name)
            if raw is not None:
                values[key] = _parse_bool(name, raw)

        raw_timeout = env.get("SAFEURL_DNS_TIMEOUT")
        if raw_timeout is not None:
            try:
                timeout = float(raw_timeout)
            except ValueError:
                raise ConfigurationError(
                    "SAFEURL_DNS_TIMEOUT", f"expected seconds, got '{raw_timeout}'"
                ) from None
            if timeout <= 0:
                raise ConfigurationError("SAFEURL_DNS_TIMEOUT", "must be positive")
            values["dns_module"] = SystemResolver(timeout=timeout)

        return cls(**values)


class ValidationOptions(BaseModel):
    """Effective options for a single validation call."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    schemes: frozenset[str]
    block_reserved: bool
    blocklist: tuple[ipaddress.IPv4Network | ipaddress.IPv6Network, ...]
    allowlist: tuple[ipaddress.IPv4Network | ipaddress.IPv6Network, ...]
    dns_module: Any
    detailed_error: bool

    @field_validator("schemes", mode="before")
    @classmethod
    def normalize_schemes(cls, v: object) -> object:
        if isinstance(v, str):
            v = [v]
        if isinstance(v, (list, tuple, set, frozenset)):
            return frozenset(str(s).lower() for s in v)
        return v

    @field_validator("blocklist", "allowlist", mode="before")
    @classmethod
    def parse_ranges(cls, v: object) -> object:
        if isinstance(v, str):
            v = [v]
        if isinstance(v, (list, tuple)):
            return tuple(parse_cidr(c) if isinstance(c, str) else c for c in v)
        return v

    @field_validator("dns_module")
    @classmethod
    def validate_dns_module(cls, v: object) -> object:
        return _check_resolver(v)


def resolve_options(
    overrides: Mapping[str, Any] | None = None,
    config: SafeURLConfig | None = None,
) -> ValidationOptions:
    """Merge per-call overrides, process defaults and library defaults.

    Each key is resolved on its own: an override wins if given (empty and
    false values included), then an explicitly set config value, then the
    library default. A None override counts as not given.
    """
    overrides = overrides or {}
    for key in overrides:
        if key not in OPTION_KEYS:
            raise ConfigurationError(key, "unknown option")

    defaults = library_defaults()
    values: dict[str, Any] = {}
    for key in OPTION_KEYS:
        if overrides.get(key) is not None:
            values[key] = overrides[key]
        elif config is not None and config.is_set(key):
            values[key] = getattr(config, key)
        else:
            values[key] = defaults[key]

    return ValidationOptions(**values)
