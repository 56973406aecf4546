"""Read-only tax definition stores consumed by the registry."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from pricewise.pricing.types import TaxDefinition

if TYPE_CHECKING:
    from pricewise.adapters.db.facade import DB


@runtime_checkable
class TaxDefinitionStore(Protocol):
    """Source of truth for flat tax definitions.

    Implementations may perform I/O; callers await every read.
    """

    async def get(self, tax_id: int) -> TaxDefinition | None:
        """Return the current definition, or None if it does not exist."""
        ...

    async def list_all(self) -> list[TaxDefinition]:
        """Return every definition ordered by id."""
        ...


class InMemoryTaxDefinitionStore:
    """Dictionary-backed store for tests and fixtures."""

    def __init__(self, definitions: list[TaxDefinition] | None = None) -> None:
        self._definitions: dict[int, TaxDefinition] = {
            d.id: d for d in definitions or []
        }
        self.reads = 0

    def put(self, definition: TaxDefinition) -> None:
        self._definitions[definition.id] = definition

    async def get(self, tax_id: int) -> TaxDefinition | None:
        self.reads += 1
        return self._definitions.get(tax_id)

    async def list_all(self) -> list[TaxDefinition]:
        return [self._definitions[k] for k in sorted(self._definitions)]


class SqlTaxDefinitionStore:
    """Store backed by the ``flat_taxes`` table.

    The DB facade is synchronous, so reads run in a worker thread.
    """

    def __init__(self, db: DB) -> None:
        self._db = db

    async def get(self, tax_id: int) -> TaxDefinition | None:
        return await asyncio.to_thread(self._db.get_tax_definition, tax_id)

    async def list_all(self) -> list[TaxDefinition]:
        return await asyncio.to_thread(self._db.list_tax_definitions)
