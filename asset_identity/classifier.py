"""Map free-text operational labels and scores onto canonical enumerations.

Each classifier is an ordered rule table of ``(needles, result)`` pairs.
The first rule with a needle contained in the normalised label wins, so
rule order matters: e.g. ``"firewall"`` has its own rule after
``switch``/``router`` and is never absorbed by an earlier catch-all.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from asset_identity.models import AssetRole, AssetStatus, AssetType, Criticality, Locality

Rule = tuple[tuple[str, ...], str]

DEVICE_TYPE_RULES: Sequence[Rule] = (
    (("server",), "server"),
    (("laptop", "workstation"), "workstation"),
    (("switch", "router"), "network_device"),
    (("firewall",), "network_device"),
    (("mobile", "phone"), "mobile"),
)

ROLE_RULES: Sequence[Rule] = (
    (("domain controller",), "domain_controller"),
    (("database",), "database_server"),
    (("web",), "web_server"),
    (("mail",), "mail_server"),
    (("file",), "file_server"),
    (("proxy",), "proxy_server"),
    (("firewall",), "firewall"),
    (("router",), "router"),
    (("switch",), "switch"),
    (("scanner",), "scanner"),
    (("endpoint", "workstation"), "endpoint"),
)

LOCALITY_RULES: Sequence[Rule] = (
    (("dmz", "perimeter"), "dmz"),
    (("external",), "external"),
    (("cloud",), "cloud"),
)

# (lower bound inclusive, band), highest first
CRITICALITY_BANDS: Sequence[tuple[float, Criticality]] = (
    (80, "critical"),
    (60, "high"),
    (40, "medium"),
)

PRIVATE_RANGES: Sequence[tuple[int, int, int]] = (
    # (first octet, second octet min, second octet max)
    (10, 0, 255),
    (172, 16, 31),
    (192, 168, 168),
)


def normalize(value: str | None) -> str:
    """Trim and lower-case a label for comparison."""
    return (value or "").strip().lower()


def apply_rules(label: str | None, rules: Sequence[Rule], default: str) -> str:
    """Return the result of the first rule whose needle occurs in *label*."""
    normalised = normalize(label)
    for needles, result in rules:
        if any(needle in normalised for needle in needles):
            return result
    return default


def classify_device_type(label: str | None) -> AssetType:
    return apply_rules(label, DEVICE_TYPE_RULES, "unknown")  # type: ignore[return-value]


def classify_role(label: str | None) -> AssetRole:
    return apply_rules(label, ROLE_RULES, "other")  # type: ignore[return-value]


def classify_locality(label: str | None) -> Locality:
    """Unknown networks are treated as internal."""
    return apply_rules(label, LOCALITY_RULES, "internal")  # type: ignore[return-value]


def classify_criticality(score: float) -> Criticality:
    """Band a 0-100 score; boundary values belong to the higher band."""
    for lower, band in CRITICALITY_BANDS:
        if score >= lower:
            return band
    return "low"


def is_private_address(ip: str | None) -> bool:
    """True iff *ip* is a well-formed dotted quad in an RFC 1918 range.

    Anything that does not parse to exactly four 0-255 octets is reported
    as not private.
    """
    parts = (ip or "").split(".")
    if len(parts) != 4:
        return False
    octets: list[int] = []
    for part in parts:
        if not (part.isascii() and part.isdigit()):
            return False
        octet = int(part)
        if octet > 255:
            return False
        octets.append(octet)

    first, second = octets[0], octets[1]
    return any(first == f and lo <= second <= hi for f, lo, hi in PRIVATE_RANGES)


# ------------------------------------------------------------------
# Canonical label helpers
# ------------------------------------------------------------------


def title_case(value: str) -> str:
    """``network_device`` -> ``Network Device``."""
    parts = [p for p in re.split(r"[_\s-]+", value or "") if p]
    return " ".join(p[:1].upper() + p[1:] for p in parts)


def status_from_lifecycle(status: AssetStatus | str) -> str:
    if status == "active":
        return "online"
    if status in ("stale", "decommissioned"):
        return "offline"
    return "unknown"


def normalize_timestamp(value: str) -> str:
    """``2024-01-15T10:30:00Z`` -> ``2024-01-15 10:30:00``."""
    return (value or "").replace("T", " ", 1).replace("Z", "", 1)
