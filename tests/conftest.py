"""
Shared pytest fixtures and configuration for all tests.
"""

import pytest

from safeurl.dns import StaticResolver
from safeurl.options import SafeURLConfig
from safeurl.validator import Validator


@pytest.fixture
def resolver() -> StaticResolver:
    """Deterministic resolver covering public, private and metadata hosts."""
    return StaticResolver(
        {
            "example.com": "93.184.216.34",
            "google.com": ["142.250.74.46", "142.250.74.78"],
            "includesecurity.com": "104.21.32.1",
            "internal.example": "10.1.2.3",
            "public.example": "8.8.8.8",
            "app.service": "170.0.0.5",
            "metadata.internal": "169.254.169.254",
            "localhost": "127.0.0.1",
        }
    )


@pytest.fixture
def validator(resolver: StaticResolver) -> Validator:
    """Validator using library defaults except for the static resolver."""
    return Validator(SafeURLConfig(dns_module=resolver))
