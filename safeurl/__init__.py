"""SSRF protection: decide whether a URL is safe to request."""

from safeurl.cidr import RESERVED_RANGES, parse_cidr
from safeurl.dns import DNSResolver, StaticResolver, SystemResolver
from safeurl.exceptions import (
    ConfigurationError,
    DNSResolutionError,
    InvalidCIDRError,
    SafeURLError,
    UnsafeURLError,
)
from safeurl.options import SafeURLConfig, ValidationOptions
from safeurl.validator import (
    FailureReason,
    ValidationResult,
    Validator,
    allowed,
    validate,
)

__version__ = "1.0.0"

__all__ = [
    "RESERVED_RANGES",
    "ConfigurationError",
    "DNSResolutionError",
    "DNSResolver",
    "FailureReason",
    "InvalidCIDRError",
    "SafeURLConfig",
    "SafeURLError",
    "StaticResolver",
    "SystemResolver",
    "UnsafeURLError",
    "ValidationOptions",
    "ValidationResult",
    "Validator",
    "allowed",
    "parse_cidr",
    "validate",
]
