"""Host to IP address resolution."""

import ipaddress
import logging

from safeurl.cidr import IPAddress
from safeurl.dns import DNSResolver

logger = logging.getLogger(__name__)


def _unwrap(address: IPAddress) -> IPAddress:
    # ::ffff:a.b.c.d reaches the IPv4 host a.b.c.d
    if isinstance(address, ipaddress.IPv6Address) and address.ipv4_mapped is not None:
        return address.ipv4_mapped
    return address


def parse_ip_literal(host: str) -> IPAddress | None:
    """Return the address if ``host`` is an IP literal, else None.

    IPv4-mapped IPv6 literals (``::ffff:127.0.0.1``) come back as the IPv4
    address they map to.
    """
    try:
        return _unwrap(ipaddress.ip_address(host.strip("[]")))
    except ValueError:
        return None


def resolve_address(host: str | None, dns_module: DNSResolver) -> IPAddress | None:
    """Resolve ``host`` to a single address.

    IP literals are returned without a lookup. Hostnames go through
    ``dns_module`` and the first returned address is used; round-robin or
    multi-address records are not inspected further. IPv4-mapped IPv6
    addresses are unwrapped to IPv4 in both cases.

    Returns None when the host is missing or cannot be resolved. Callers treat
    None as matching no range at all.
    """
    if not host:
        return None

    literal = parse_ip_literal(host)
    if literal is not None:
        return literal

    try:
        addresses = dns_module.resolve(host)
    except Exception as e:
        logger.warning(f"DNS resolution failed for {host}: {e}")
        return None

    if not addresses:
        logger.warning(f"DNS resolution returned no addresses for {host}")
        return None

    first = addresses[0]
    if isinstance(first, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        return _unwrap(first)
    try:
        return _unwrap(ipaddress.ip_address(first))
    except ValueError:
        logger.warning(f"Resolver returned invalid address {first!r} for {host}")
        return None
