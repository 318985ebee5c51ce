"""Resolve an IPv4 address to the most specific configured network locality."""

from __future__ import annotations

import ipaddress
from collections.abc import Iterable
from dataclasses import dataclass, field


@dataclass
class NetworkLocality:
    id: str
    name: str
    type: str  # internal | external | dmz | cloud | partner | guest
    cidr_blocks: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class LocalityMatch:
    id: str
    name: str
    type: str
    cidr: str


def _parse_ipv4(ip: str) -> ipaddress.IPv4Address | None:
    try:
        return ipaddress.IPv4Address((ip or "").strip())
    except ValueError:
        return None


def _parse_cidr(cidr: str) -> ipaddress.IPv4Network | None:
    # strict=False: host bits in the base address are masked, not rejected
    if "/" not in (cidr or ""):
        return None
    try:
        return ipaddress.IPv4Network((cidr or "").strip(), strict=False)
    except ValueError:
        return None


def match_locality_by_ip(ip: str, localities: Iterable[NetworkLocality]) -> LocalityMatch | None:
    """Longest-prefix match; on ties the first block encountered wins."""
    address = _parse_ipv4(ip)
    if address is None:
        return None

    best: LocalityMatch | None = None
    best_prefix = -1
    for locality in localities:
        for cidr in locality.cidr_blocks:
            network = _parse_cidr(cidr)
            if network is None or address not in network:
                continue
            if network.prefixlen > best_prefix:
                best_prefix = network.prefixlen
                best = LocalityMatch(id=locality.id, name=locality.name, type=locality.type, cidr=cidr)
    return best
