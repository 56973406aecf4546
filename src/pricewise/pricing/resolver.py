"""Tier-based unit price resolution."""

from __future__ import annotations

from decimal import Decimal

from pricewise.core.money import cents_for, to_decimal
from pricewise.pricing.logger import CalculationLogger
from pricewise.pricing.types import ItemLine, OrderInputItem


class PricingResolver:
    """Resolves unit prices and item lines for a customer tier."""

    def __init__(self, calc_logger: CalculationLogger | None = None) -> None:
        self._logger = calc_logger or CalculationLogger()

    def resolve_price(self, item: OrderInputItem, tier: int) -> Decimal:
        """Return ``item.tier_prices[tier]``, or 0 when the tier has no price."""
        price = item.tier_prices.get(tier)
        if price is None:
            self._logger.tier_price_missing(item.name, tier)
            return Decimal("0")
        return to_decimal(price)

    def item_line(self, item: OrderInputItem, tier: int) -> ItemLine:
        unit_price = self.resolve_price(item, tier)
        return ItemLine(
            name=item.name,
            qty=item.qty,
            unit_price=unit_price,
            line_total_cents=cents_for(unit_price, item.qty),
            category=item.category,
        )

    def item_lines(
        self, items: tuple[OrderInputItem, ...], tier: int
    ) -> tuple[ItemLine, ...]:
        """Build item lines in input order."""
        return tuple(self.item_line(item, tier) for item in items)
