"""Versioned read-through cache of flat tax definitions."""

from __future__ import annotations

from dataclasses import dataclass

from pricewise.pricing.types import TaxDefinition
from pricewise.taxes.logger import TaxRegistryLogger
from pricewise.taxes.store import TaxDefinitionStore


@dataclass(frozen=True, slots=True)
class _CacheEntry:
    definition: TaxDefinition
    generation: int


class TaxRegistry:
    """Caches tax definitions per cache generation.

    Entries are stamped with the generation they were loaded under and are
    only served while that generation is current, so ``invalidate()`` makes
    every earlier read unreachable even if a slow store read lands after it.

    No locking: a reader racing an invalidation may see either generation.
    """

    def __init__(
        self,
        store: TaxDefinitionStore,
        registry_logger: TaxRegistryLogger | None = None,
    ) -> None:
        self._store = store
        self._logger = registry_logger or TaxRegistryLogger()
        self._entries: dict[int, _CacheEntry] = {}
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    def __len__(self) -> int:
        current = self._generation
        return sum(1 for e in self._entries.values() if e.generation == current)

    async def get_current(self, tax_id: int) -> TaxDefinition | None:
        """Return the current definition for ``tax_id``, or None if unknown."""
        generation = self._generation
        entry = self._entries.get(tax_id)
        if entry is not None and entry.generation == generation:
            return entry.definition

        self._logger.cache_miss(tax_id, generation)
        definition = await self._store.get(tax_id)
        if definition is None:
            self._logger.definition_missing(tax_id)
            return None

        # Skip caching when an invalidation happened during the read.
        if generation == self._generation:
            self._entries[tax_id] = _CacheEntry(definition, generation)
        return definition

    async def amount_for(self, tax_id: int) -> int:
        """Current per-unit amount in micros; 0 when the definition is missing."""
        definition = await self.get_current(tax_id)
        return definition.amount_micros if definition is not None else 0

    async def warm(self) -> int:
        """Load every definition from the store into the current generation."""
        generation = self._generation
        definitions = await self._store.list_all()
        if generation != self._generation:
            return 0
        for definition in definitions:
            self._entries[definition.id] = _CacheEntry(definition, generation)
        self._logger.warmed(len(definitions), generation)
        return len(definitions)

    def invalidate(self) -> int:
        """Drop all entries and start a new generation.

        Returns:
            Number of entries dropped.
        """
        cleared = len(self)
        self._entries = {}
        self._generation += 1
        self._logger.invalidated(cleared, self._generation)
        return cleared
