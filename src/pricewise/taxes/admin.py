"""Admin write path for flat tax definitions."""

from __future__ import annotations

from collections.abc import Iterable

from pricewise.adapters.db.facade import DB
from pricewise.core.money import Number, format_micros, to_micros
from pricewise.pricing.errors import TaxDefinitionNotFoundError
from pricewise.pricing.types import TaxDefinition
from pricewise.taxes.invalidation import CacheInvalidationController
from pricewise.taxes.logger import TaxRegistryLogger


class TaxAdminService:
    """Persists tax definition changes and busts the cache after each write.

    Every mutating method notifies the invalidation controller only after
    the database write succeeded.
    """

    def __init__(
        self,
        *,
        db: DB,
        invalidation: CacheInvalidationController,
        tax_logger: TaxRegistryLogger | None = None,
    ) -> None:
        self._db = db
        self._invalidation = invalidation
        self._logger = tax_logger or TaxRegistryLogger()

    def create(
        self,
        *,
        name: str,
        amount: Number,
        description: str | None = None,
        tax_type: str | None = None,
        customer_tiers: Iterable[int] = (),
    ) -> TaxDefinition:
        amount_micros = _positive_micros(amount)
        definition = self._db.insert_tax_definition(
            name=name,
            amount_micros=amount_micros,
            description=description,
            tax_type=tax_type,
            customer_tiers=customer_tiers,
        )
        return self._written(definition)

    def update_amount(self, tax_id: int, amount: Number) -> TaxDefinition:
        """Change a definition's per-unit amount.

        Raises:
            TaxDefinitionNotFoundError: Unknown tax_id.
            ValueError: Amount is not positive.
        """
        amount_micros = _positive_micros(amount)
        definition = self._db.update_tax_definition(
            tax_id, amount_micros=amount_micros
        )
        if definition is None:
            raise TaxDefinitionNotFoundError(tax_id)
        return self._written(definition)

    def set_active(self, tax_id: int, *, active: bool) -> TaxDefinition:
        definition = self._db.update_tax_definition(tax_id, is_active=active)
        if definition is None:
            raise TaxDefinitionNotFoundError(tax_id)
        return self._written(definition)

    def deactivate(self, tax_id: int) -> TaxDefinition:
        return self.set_active(tax_id, active=False)

    def delete(self, tax_id: int) -> None:
        if not self._db.delete_tax_definition(tax_id):
            raise TaxDefinitionNotFoundError(tax_id)
        self._invalidation.on_tax_definition_written(tax_id)

    def verify(self) -> list[TaxDefinition]:
        """Return every stored definition for inspection."""
        return self._db.list_tax_definitions()

    def _written(self, definition: TaxDefinition) -> TaxDefinition:
        self._logger.definition_written(
            definition.id, definition.version, format_micros(definition.amount_micros)
        )
        self._invalidation.on_tax_definition_written(definition.id)
        return definition


def _positive_micros(amount: Number) -> int:
    amount_micros = to_micros(amount)
    if amount_micros <= 0:
        raise ValueError("Flat tax amount must be greater than 0")
    return amount_micros
