"""Flat tax definitions: storage, versioned cache and invalidation."""

from __future__ import annotations

from pricewise.taxes.invalidation import CacheInvalidationController
from pricewise.taxes.registry import TaxRegistry
from pricewise.taxes.store import (
    InMemoryTaxDefinitionStore,
    SqlTaxDefinitionStore,
    TaxDefinitionStore,
)

__all__ = [
    "CacheInvalidationController",
    "InMemoryTaxDefinitionStore",
    "SqlTaxDefinitionStore",
    "TaxDefinitionStore",
    "TaxRegistry",
]
