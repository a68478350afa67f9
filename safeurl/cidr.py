"""CIDR parsing and range membership."""

import ipaddress
from collections.abc import Iterable

from safeurl.exceptions import InvalidCIDRError

IPAddress = ipaddress.IPv4Address | ipaddress.IPv6Address
IPNetwork = ipaddress.IPv4Network | ipaddress.IPv6Network

# Reserved/private IPv4 ranges, blocked unless block_reserved is disabled
RESERVED_RANGES = (
    "0.0.0.0/8",  # "this" network
    "10.0.0.0/8",
    "100.64.0.0/10",  # carrier-grade NAT
    "127.0.0.0/8",
    "169.254.0.0/16",  # link-local / cloud metadata
    "172.16.0.0/12",
    "192.0.0.0/29",
    "192.0.2.0/24",  # TEST-NET-1
    "192.88.99.0/24",  # 6to4 relay anycast
    "192.168.0.0/16",
    "198.18.0.0/15",  # benchmarking
    "198.51.100.0/24",  # TEST-NET-2
    "203.0.113.0/24",  # TEST-NET-3
    "224.0.0.0/4",  # multicast
    "240.0.0.0/4",
)


def parse_cidr(value: str) -> IPNetwork:
    """Parse a CIDR string such as ``10.0.0.0/8``.

    A bare address is read as a single-host range. Host bits set below the
    prefix (``10.0.0.1/8``) are rejected rather than silently masked.
    """
    if not isinstance(value, str):
        raise InvalidCIDRError(repr(value), "expected a string")
    text = value.strip()
    if not text:
        raise InvalidCIDRError(value, "empty range")
    try:
        return ipaddress.ip_network(text, strict=True)
    except ValueError as e:
        raise InvalidCIDRError(value, str(e)) from e


def contains(network: IPNetwork, address: IPAddress | None) -> bool:
    """Check whether ``address`` falls inside ``network``.

    ``None`` and addresses of the other family never match.
    """
    if address is None or address.version != network.version:
        return False
    return address in network


def ip_in_ranges(address: IPAddress | None, ranges: Iterable[str | IPNetwork]) -> bool:
    """Return True if any of ``ranges`` contains ``address``."""
    if address is None:
        return False
    for cidr in ranges:
        network = parse_cidr(cidr) if isinstance(cidr, str) else cidr
        if contains(network, address):
            return True
    return False


RESERVED_NETWORKS: tuple[IPNetwork, ...] = tuple(parse_cidr(r) for r in RESERVED_RANGES)
