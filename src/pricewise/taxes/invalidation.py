"""Cache busting for tax-definition writes."""

from __future__ import annotations

from pricewise.core.config import DEFAULT_FINALIZED_STATUSES
from pricewise.taxes.registry import TaxRegistry


class CacheInvalidationController:
    """Bumps the cache version and clears the registry on every tax write.

    Also decides whether a stored per-line flat tax may be trusted when an
    existing order is recalculated: only finalized orders keep theirs.
    """

    def __init__(
        self,
        registry: TaxRegistry,
        finalized_statuses: frozenset[str] = DEFAULT_FINALIZED_STATUSES,
    ) -> None:
        self._registry = registry
        self._finalized_statuses = frozenset(s.lower() for s in finalized_statuses)
        self._version = 0
        self._last_written_tax_id: int | None = None

    @property
    def version(self) -> int:
        return self._version

    @property
    def last_written_tax_id(self) -> int | None:
        return self._last_written_tax_id

    def on_tax_definition_written(self, tax_id: int) -> int:
        """Record a write to ``tax_id`` and clear the registry.

        Returns:
            The new cache version.
        """
        self._version += 1
        self._last_written_tax_id = tax_id
        self._registry.invalidate()
        return self._version

    def is_finalized(self, order_status: str | None) -> bool:
        if not order_status:
            return False
        return order_status.strip().lower() in self._finalized_statuses

    def should_ignore_stored_flat_tax(self, order_status: str | None) -> bool:
        """True unless the order is completed/finalized."""
        return not self.is_finalized(order_status)
