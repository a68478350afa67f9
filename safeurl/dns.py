"""Pluggable DNS resolution.

Any object with a ``resolve(hostname)`` method returning a list of addresses
(and raising ``DNSResolutionError`` on failure) can be handed to the validator
as ``dns_module``.
"""

import ipaddress
import logging
import socket
from collections.abc import Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Protocol, runtime_checkable

from safeurl.cidr import IPAddress
from safeurl.exceptions import DNSResolutionError

logger = logging.getLogger(__name__)

DEFAULT_DNS_TIMEOUT = 5.0  # seconds

# getaddrinfo() cannot be cancelled, so lookups run here and are abandoned on timeout
_lookup_pool = ThreadPoolExecutor(max_workers=8, thread_name_prefix="safeurl-dns")


@runtime_checkable
class DNSResolver(Protocol):
    """Resolves a hostname to one or more IP addresses."""

    def resolve(self, hostname: str) -> list[IPAddress]: ...


class SystemResolver:
    """Resolver backed by the operating system's ``getaddrinfo``.

    Only IPv4 (A record) results are returned by default. Pass
    ``family=socket.AF_UNSPEC`` to include IPv6 addresses.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_DNS_TIMEOUT,
        family: int = socket.AF_INET,
    ) -> None:
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        self.timeout = timeout
        self.family = family

    def __repr__(self) -> str:
        return f"SystemResolver(timeout={self.timeout}, family={self.family!r})"

    def resolve(self, hostname: str) -> list[IPAddress]:
        future = _lookup_pool.submit(
            socket.getaddrinfo, hostname, None, self.family, socket.SOCK_STREAM
        )
        try:
            infos = future.result(timeout=self.timeout)
        except FutureTimeoutError:
            future.cancel()
            raise DNSResolutionError(hostname, f"timed out after {self.timeout}s")
        except (socket.gaierror, UnicodeError) as e:
            raise DNSResolutionError(hostname, str(e)) from e

        addresses: list[IPAddress] = []
        for _family, _type, _proto, _canonname, sockaddr in infos:
            # IPv6 sockaddr may carry a zone suffix ("fe80::1%eth0")
            addr = ipaddress.ip_address(sockaddr[0].split("%", 1)[0])
            if addr not in addresses:
                addresses.append(addr)

        if not addresses:
            raise DNSResolutionError(hostname, "no addresses returned")
        logger.debug(f"Resolved {hostname} to {[str(a) for a in addresses]}")
        return addresses


class StaticResolver:
    """Resolver answering from a fixed hostname table.

    Useful for pinning internal names and as a deterministic stand-in for DNS
    in tests. Hostnames are matched case-insensitively.
    """

    def __init__(self, records: Mapping[str, str | Iterable[str]]) -> None:
        self.records: dict[str, list[IPAddress]] = {}
        for host, value in records.items():
            values = [value] if isinstance(value, str) else list(value)
            self.records[host.lower()] = [ipaddress.ip_address(v) for v in values]

    def __repr__(self) -> str:
        return f"StaticResolver({sorted(self.records)})"

    def resolve(self, hostname: str) -> list[IPAddress]:
        addresses = self.records.get(hostname.lower())
        if addresses is None:
            raise DNSResolutionError(hostname, "no static record")
        return list(addresses)
