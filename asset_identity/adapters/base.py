"""Base types for catalog payload adapters."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


class CatalogError(ValueError):
    """Raised when a catalog payload is structurally invalid."""


@dataclass
class CatalogResult:
    """Return value from any adapter parse operation."""

    success: bool
    records: list[Any] = field(default_factory=list)
    error: str = ""
    raw_count: int = 0
