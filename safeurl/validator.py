"""SSRF decision engine.

Checks a URL's scheme and the resolved address of its host against the
configured allowlist, blocklist and the built-in reserved ranges.

Precedence, first match wins:

1. scheme not accepted -> ``unsafe_scheme``
2. allowlist configured -> success only if the address is inside it,
   otherwise ``unsafe_allowlist``; nothing else is checked
3. address inside the blocklist -> ``unsafe_blocklist``
4. ``block_reserved`` and address in a reserved range -> ``unsafe_reserved``
5. success

With ``detailed_error=False`` any failure is reported as ``restricted``.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any
from urllib.parse import urlsplit

from safeurl.address import resolve_address
from safeurl.cidr import RESERVED_NETWORKS, IPAddress, ip_in_ranges
from safeurl.options import SafeURLConfig, ValidationOptions, resolve_options

logger = logging.getLogger(__name__)


class FailureReason(str, Enum):
    """Why a URL was rejected."""

    UNSAFE_SCHEME = "unsafe_scheme"
    UNSAFE_ALLOWLIST = "unsafe_allowlist"
    UNSAFE_BLOCKLIST = "unsafe_blocklist"
    UNSAFE_RESERVED = "unsafe_reserved"
    RESTRICTED = "restricted"


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a single validation. Truthy when the URL is allowed."""

    reason: FailureReason | None = None
    address: IPAddress | None = None

    @property
    def ok(self) -> bool:
        return self.reason is None

    def __bool__(self) -> bool:
        return self.ok


def _split_url(url: str) -> tuple[str, str | None]:
    try:
        parts = urlsplit(url)
        hostname = parts.hostname
    except ValueError:
        # malformed netloc, e.g. an unbalanced "[" in the host
        return "", None
    return parts.scheme.lower(), hostname


def decide(scheme: str, address: IPAddress | None, options: ValidationOptions) -> FailureReason | None:
    """Apply the precedence rules to an already resolved address."""
    if scheme not in options.schemes:
        return FailureReason.UNSAFE_SCHEME

    if options.allowlist:
        if ip_in_ranges(address, options.allowlist):
            return None
        return FailureReason.UNSAFE_ALLOWLIST

    if options.blocklist and ip_in_ranges(address, options.blocklist):
        return FailureReason.UNSAFE_BLOCKLIST

    if options.block_reserved and ip_in_ranges(address, RESERVED_NETWORKS):
        return FailureReason.UNSAFE_RESERVED

    return None


class Validator:
    """Validates URLs against an injected set of process-wide defaults.

    Per-call keyword overrides take precedence over ``config``, which takes
    precedence over the library defaults. A validator holds no mutable state
    and can be shared between threads.
    """

    def __init__(self, config: SafeURLConfig | None = None) -> None:
        self.config = config or SafeURLConfig()

    @classmethod
    def from_env(cls) -> "Validator":
        return cls(SafeURLConfig.from_env())

    def options(self, **overrides: Any) -> ValidationOptions:
        """Return the effective options for the given overrides."""
        return resolve_options(overrides, self.config)

    def validate(self, url: str, **overrides: Any) -> ValidationResult:
        """Validate ``url``, returning a result instead of raising.

        Only configuration problems (unknown option, malformed CIDR) raise.
        """
        options = self.options(**overrides)
        scheme, host = _split_url(url)

        address = None
        if scheme in options.schemes:
            address = resolve_address(host, options.dns_module)
            if address is None and host:
                logger.debug(f"No usable address for {host}")

        reason = decide(scheme, address, options)
        if reason is None:
            logger.debug(f"Allowed {url} (address: {address})")
            return ValidationResult(address=address)

        logger.debug(f"Rejected {url}: {reason.value} (address: {address})")
        if not options.detailed_error:
            reason = FailureReason.RESTRICTED
        return ValidationResult(reason=reason, address=address)

    def allowed(self, url: str, **overrides: Any) -> bool:
        """Return True if ``url`` passes validation."""
        return self.validate(url, **overrides).ok


_default_validator = Validator()


def validate(url: str, **overrides: Any) -> ValidationResult:
    """Validate ``url`` using library defaults plus ``overrides``.

    >>> validate("http://127.0.0.1/").reason
    <FailureReason.UNSAFE_RESERVED: 'unsafe_reserved'>
    """
    return _default_validator.validate(url, **overrides)


def allowed(url: str, **overrides: Any) -> bool:
    """Return True if ``url`` passes validation with library defaults."""
    return _default_validator.allowed(url, **overrides)
