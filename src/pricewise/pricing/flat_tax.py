"""Flat (fixed per-unit) tax lines.

There is no percentage tax path: B2B orders only carry flat excise taxes.
"""

from __future__ import annotations

from decimal import Decimal

from pricewise.core.config import DEFAULT_FLAT_TAX_LABEL, MissingTaxPolicy
from pricewise.core.money import cents_for, from_micros, to_decimal
from pricewise.pricing.errors import MissingTaxDefinitionError
from pricewise.pricing.logger import CalculationLogger
from pricewise.pricing.types import (
    AppliedTax,
    Customer,
    FlatTaxLine,
    FlatTaxOutcome,
    OrderInputItem,
    TaxSource,
)
from pricewise.taxes.registry import TaxRegistry


class FlatTaxCalculator:
    """Builds flat tax lines from current tax definitions.

    A line is emitted only when the customer pays flat tax, the item is
    flagged for it, and the resolved per-unit amount is positive.
    """

    def __init__(
        self,
        registry: TaxRegistry,
        *,
        default_label: str = DEFAULT_FLAT_TAX_LABEL,
        missing_policy: MissingTaxPolicy = "flag",
        calc_logger: CalculationLogger | None = None,
    ) -> None:
        self._registry = registry
        self._default_label = default_label
        self._missing_policy = missing_policy
        self._logger = calc_logger or CalculationLogger()

    async def calculate(
        self, items: tuple[OrderInputItem, ...], customer: Customer
    ) -> FlatTaxOutcome:
        """Resolve flat tax lines for ``items`` in input order.

        Raises:
            MissingTaxDefinitionError: A referenced definition does not exist
                and the missing-tax policy is ``error``.
        """
        if not customer.has_flat_tax:
            return FlatTaxOutcome()

        lines: list[FlatTaxLine] = []
        applied: dict[int, AppliedTax] = {}
        missing: list[int] = []

        for item in items:
            if not item.has_flat_tax:
                continue

            if item.flat_tax_id is not None:
                definition = await self._registry.get_current(item.flat_tax_id)
                if definition is None:
                    if self._missing_policy == "error":
                        raise MissingTaxDefinitionError(item.flat_tax_id, item.name)
                    self._logger.missing_tax_definition(item.flat_tax_id, item.name)
                    if item.flat_tax_id not in missing:
                        missing.append(item.flat_tax_id)
                    continue
                if not definition.is_active:
                    self._logger.tax_not_applicable(
                        definition.id, item.name, "inactive"
                    )
                    continue
                if not definition.applies_to_tier(customer.tier):
                    self._logger.tax_not_applicable(
                        definition.id, item.name, f"tier {customer.tier} not covered"
                    )
                    continue
                per_unit = from_micros(definition.amount_micros)
                label = item.flat_tax_label or definition.name or self._default_label
                source = TaxSource.DEFINITION
                applied[definition.id] = AppliedTax(
                    tax_id=definition.id,
                    amount_micros=definition.amount_micros,
                    version=definition.version,
                )
            else:
                if item.flat_tax_per_item is None:
                    continue
                per_unit = to_decimal(item.flat_tax_per_item)
                label = item.flat_tax_label or self._default_label
                source = (
                    TaxSource.STORED_RECORD if item.stored_flat_tax else TaxSource.ITEM
                )

            if per_unit <= Decimal("0"):
                continue

            lines.append(
                FlatTaxLine(
                    label=label,
                    amount_cents=cents_for(per_unit, item.qty),
                    item_name=item.name,
                    tax_id=item.flat_tax_id,
                    source=source,
                )
            )

        return FlatTaxOutcome(
            lines=tuple(lines),
            applied=tuple(applied.values()),
            missing_tax_ids=tuple(missing),
        )
