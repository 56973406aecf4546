"""Persisted order records consumed when recalculating existing orders."""

from __future__ import annotations

from dataclasses import dataclass

from pricewise.core.money import Number
from pricewise.pricing.types import OrderInput, OrderInputItem

CUSTOMER_TIERS = (1, 2, 3, 4, 5)


@dataclass(frozen=True, slots=True)
class HistoricalOrderItem:
    """One stored order line, read-only."""

    quantity: Number
    price: Number
    product_name: str | None = None
    is_tobacco: bool = False
    flat_tax_ids: tuple[int, ...] = ()
    stored_flat_tax_per_item: Number | None = None


@dataclass(frozen=True, slots=True)
class HistoricalOrderRecord:
    status: str
    items: tuple[HistoricalOrderItem, ...] = ()
    order_type: str = "pickup"
    delivery_fee: Number = 0
    loyalty_points_redeemed: int = 0


def to_order_input(
    record: HistoricalOrderRecord, *, trust_stored_tax: bool
) -> OrderInput:
    """Rebuild an ``OrderInput`` from a stored order.

    The stored price was already tier-resolved, so it is used for every tier.
    Stored flat tax amounts are carried over only when ``trust_stored_tax``;
    otherwise the item keeps its first tax id and is re-resolved.
    """
    items: list[OrderInputItem] = []
    for stored in record.items:
        has_flat_tax = bool(stored.flat_tax_ids)
        use_stored = (
            trust_stored_tax
            and has_flat_tax
            and stored.stored_flat_tax_per_item is not None
        )
        items.append(
            OrderInputItem(
                name=stored.product_name or "Unknown Product",
                qty=stored.quantity,
                tier_prices={tier: stored.price for tier in CUSTOMER_TIERS},
                category="tobacco" if stored.is_tobacco else "other",
                has_flat_tax=has_flat_tax,
                flat_tax_per_item=(
                    stored.stored_flat_tax_per_item if use_stored else None
                ),
                flat_tax_id=(
                    stored.flat_tax_ids[0] if has_flat_tax and not use_stored else None
                ),
                stored_flat_tax=use_stored,
            )
        )

    return OrderInput(
        items=tuple(items),
        is_delivery=record.order_type.lower() == "delivery",
        delivery_fee=record.delivery_fee,
        redeem_points=record.loyalty_points_redeemed,
    )
