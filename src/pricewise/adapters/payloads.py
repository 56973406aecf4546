"""JSON boundary: camelCase request/response models.

Monetary input arrives as decimal currency; ``to_domain`` hands it to the
engine unchanged and the engine converts to cents. Output models convert
cents back to decimal currency.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from pricewise.pricing.types import (
    CalcLine,
    Customer,
    DeliveryLine,
    FlatTaxLine,
    ItemLine,
    LoyaltyProfile,
    LoyaltyRedeemLine,
    OrderInput,
    OrderInputItem,
    OrderResult,
)


class PayloadModel(BaseModel):
    """Shared base: camelCase aliases, snake_case accepted too."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @classmethod
    def parse(cls, data: Any) -> Self:
        return cls.model_validate(data)


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class OrderItemPayload(PayloadModel):
    name: str
    qty: Decimal
    tier_prices: dict[int, Decimal] = Field(default_factory=dict)
    category: str = "other"
    has_flat_tax: bool = False
    flat_tax_per_item: Decimal | None = None
    flat_tax_label: str | None = None
    flat_tax_id: int | None = None

    def to_domain(self) -> OrderInputItem:
        return OrderInputItem(
            name=self.name,
            qty=_normalize_qty(self.qty),
            tier_prices=dict(self.tier_prices),
            category=self.category,
            has_flat_tax=self.has_flat_tax,
            flat_tax_per_item=self.flat_tax_per_item,
            flat_tax_label=self.flat_tax_label,
            flat_tax_id=self.flat_tax_id,
        )


class OrderInputPayload(PayloadModel):
    items: list[OrderItemPayload]
    is_delivery: bool = False
    delivery_fee: Decimal | None = None
    redeem_points: int | None = None

    def to_domain(self) -> OrderInput:
        return OrderInput(
            items=tuple(item.to_domain() for item in self.items),
            is_delivery=self.is_delivery,
            delivery_fee=self.delivery_fee or Decimal("0"),
            redeem_points=self.redeem_points,
        )


class LoyaltyPayload(PayloadModel):
    available_points: int = 0
    earn_rate_per_dollar: Decimal = Decimal("0")
    redeem_value_per_point: Decimal = Decimal("0.01")
    max_redeem_percent: Decimal | None = None


class CustomerPayload(PayloadModel):
    tier: int = Field(..., ge=1, le=5)
    has_flat_tax: bool
    loyalty: LoyaltyPayload = Field(default_factory=LoyaltyPayload)

    def to_domain(self) -> Customer:
        return Customer(
            tier=self.tier,
            has_flat_tax=self.has_flat_tax,
            loyalty=LoyaltyProfile(
                available_points=self.loyalty.available_points,
                earn_rate_per_dollar=self.loyalty.earn_rate_per_dollar,
                redeem_value_per_point=self.loyalty.redeem_value_per_point,
                max_redeem_percent=self.loyalty.max_redeem_percent,
            ),
        )


def _normalize_qty(qty: Decimal) -> int | Decimal:
    """Whole quantities become ints so lines echo ``2`` rather than ``2.0``."""
    return int(qty) if qty == qty.to_integral_value() else qty


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class CalcLinePayload(PayloadModel):
    kind: str
    name: str | None = None
    label: str | None = None
    qty: float | None = None
    unit_price: float | None = None
    line_total: float | None = None
    amount: float | None = None
    points_used: int | None = None
    tax_id: int | None = None

    @classmethod
    def from_line(cls, line: CalcLine) -> CalcLinePayload:
        match line:
            case ItemLine():
                return cls(
                    kind=line.kind.value,
                    name=line.name,
                    qty=float(line.qty),
                    unit_price=float(line.unit_price),
                    line_total=float(line.line_total),
                )
            case FlatTaxLine():
                return cls(
                    kind=line.kind.value,
                    name=line.item_name,
                    label=line.label,
                    amount=float(line.amount),
                    tax_id=line.tax_id,
                )
            case DeliveryLine():
                return cls(
                    kind=line.kind.value, label=line.label, amount=float(line.amount)
                )
            case LoyaltyRedeemLine():
                return cls(
                    kind=line.kind.value,
                    points_used=line.points_used,
                    amount=float(line.amount),
                )
        raise TypeError(f"Unknown line type: {type(line).__name__}")


class OrderResultPayload(PayloadModel):
    lines: list[CalcLinePayload]
    items_subtotal: float
    flat_tax_total: float
    subtotal_before_delivery: float
    delivery_fee: float
    subtotal_before_redemption: float
    loyalty_eligible_subtotal: float
    points_earned: int
    points_redeemed: int
    loyalty_redeem_value: float
    total: float
    cache_version: int
    missing_tax_ids: list[int] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: OrderResult) -> OrderResultPayload:
        return cls(
            lines=[CalcLinePayload.from_line(line) for line in result.lines],
            items_subtotal=float(result.items_subtotal),
            flat_tax_total=float(result.flat_tax_total),
            subtotal_before_delivery=float(result.subtotal_before_delivery),
            delivery_fee=float(result.delivery_fee),
            subtotal_before_redemption=float(result.subtotal_before_redemption),
            loyalty_eligible_subtotal=float(result.loyalty_eligible_subtotal),
            points_earned=result.points_earned,
            points_redeemed=result.points_redeemed,
            loyalty_redeem_value=float(result.loyalty_redeem_value),
            total=float(result.total),
            cache_version=result.cache_version,
            missing_tax_ids=list(result.missing_tax_ids),
        )

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
