"""Catalog payload adapters.

Adapters only decode data handed to them by callers (API request bodies,
exports from the telemetry and governance subsystems); they never fetch
catalogs themselves.
"""

from __future__ import annotations

from asset_identity.adapters.base import CatalogError, CatalogResult
from asset_identity.adapters.json_catalog import JsonCatalogAdapter

__all__ = [
    "CatalogError",
    "CatalogResult",
    "JsonCatalogAdapter",
]
