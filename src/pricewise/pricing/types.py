"""Input, line, and result types for order calculation."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
import enum

from pricewise.core.money import Number, from_cents, from_micros

# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class OrderInputItem:
    """One cart line as supplied by the caller.

    ``tier_prices`` maps customer tier (1-5) to a decimal unit price.
    ``flat_tax_id`` points at a ``TaxDefinition``; when set, the current
    definition wins over ``flat_tax_per_item``. ``stored_flat_tax`` marks a
    ``flat_tax_per_item`` copied from a persisted order record.
    """

    name: str
    qty: Number
    tier_prices: Mapping[int, Number]
    category: str = "other"
    has_flat_tax: bool = False
    flat_tax_per_item: Number | None = None
    flat_tax_label: str | None = None
    flat_tax_id: int | None = None
    stored_flat_tax: bool = False


@dataclass(frozen=True, slots=True)
class OrderInput:
    items: tuple[OrderInputItem, ...]
    is_delivery: bool = False
    delivery_fee: Number = 0
    redeem_points: int | None = None


@dataclass(frozen=True, slots=True)
class LoyaltyProfile:
    available_points: int = 0
    earn_rate_per_dollar: Number = Decimal("0")
    redeem_value_per_point: Number = Decimal("0.01")
    max_redeem_percent: Number | None = None


@dataclass(frozen=True, slots=True)
class Customer:
    """Commercial terms for the ordering customer."""

    tier: int
    has_flat_tax: bool
    loyalty: LoyaltyProfile = field(default_factory=LoyaltyProfile)


@dataclass(frozen=True, slots=True)
class TaxDefinition:
    """Admin-managed flat tax, per-unit amount stored in micros."""

    id: int
    name: str
    amount_micros: int
    version: int = 1
    updated_at: datetime | None = None
    is_active: bool = True
    customer_tiers: frozenset[int] = frozenset()

    @property
    def amount(self) -> Decimal:
        return from_micros(self.amount_micros)

    def applies_to_tier(self, tier: int) -> bool:
        """Empty ``customer_tiers`` means every tier."""
        return not self.customer_tiers or tier in self.customer_tiers


# ---------------------------------------------------------------------------
# Lines
# ---------------------------------------------------------------------------


class LineKind(enum.Enum):
    ITEM = "item"
    FLAT_TAX = "flatTax"
    DELIVERY = "delivery"
    LOYALTY_REDEEM = "loyaltyRedeem"


class TaxSource(enum.Enum):
    """Where a flat tax line's per-unit amount came from."""

    DEFINITION = "definition"
    ITEM = "item"
    STORED_RECORD = "storedRecord"


@dataclass(frozen=True, slots=True)
class ItemLine:
    name: str
    qty: Number
    unit_price: Decimal
    line_total_cents: int
    category: str

    @property
    def kind(self) -> LineKind:
        return LineKind.ITEM

    @property
    def line_total(self) -> Decimal:
        return from_cents(self.line_total_cents)


@dataclass(frozen=True, slots=True)
class FlatTaxLine:
    label: str
    amount_cents: int
    item_name: str
    tax_id: int | None = None
    source: TaxSource = TaxSource.ITEM

    @property
    def kind(self) -> LineKind:
        return LineKind.FLAT_TAX

    @property
    def amount(self) -> Decimal:
        return from_cents(self.amount_cents)


@dataclass(frozen=True, slots=True)
class DeliveryLine:
    amount_cents: int
    label: str = "Delivery"

    @property
    def kind(self) -> LineKind:
        return LineKind.DELIVERY

    @property
    def amount(self) -> Decimal:
        return from_cents(self.amount_cents)


@dataclass(frozen=True, slots=True)
class LoyaltyRedeemLine:
    points_used: int
    amount_cents: int

    @property
    def kind(self) -> LineKind:
        return LineKind.LOYALTY_REDEEM

    @property
    def amount(self) -> Decimal:
        return from_cents(self.amount_cents)


CalcLine = ItemLine | FlatTaxLine | DeliveryLine | LoyaltyRedeemLine


# ---------------------------------------------------------------------------
# Intermediate results
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class AppliedTax:
    """A tax definition value used by a calculation, kept for audit."""

    tax_id: int
    amount_micros: int
    version: int


@dataclass(frozen=True, slots=True)
class FlatTaxOutcome:
    lines: tuple[FlatTaxLine, ...] = ()
    applied: tuple[AppliedTax, ...] = ()
    missing_tax_ids: tuple[int, ...] = ()

    @property
    def total_cents(self) -> int:
        return sum(line.amount_cents for line in self.lines)


@dataclass(frozen=True, slots=True)
class RedeemResolution:
    """Resolved redemption plus the bounds it was clamped against."""

    points_used: int
    redeem_value_cents: int
    requested_points: int
    available_points: int
    cap_by_percent: int | None
    cap_by_subtotal: int


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class OrderResult:
    """Final order breakdown. Money fields are cents; properties give decimals."""

    lines: tuple[CalcLine, ...]
    items_subtotal_cents: int
    flat_tax_total_cents: int
    subtotal_before_delivery_cents: int
    delivery_fee_cents: int
    subtotal_before_redemption_cents: int
    loyalty_eligible_subtotal_cents: int
    points_earned: int
    points_redeemed: int
    loyalty_redeem_value_cents: int
    total_cents: int
    cache_version: int = 0
    applied_taxes: tuple[AppliedTax, ...] = ()
    missing_tax_ids: tuple[int, ...] = ()
    finalized: bool = False

    @property
    def items_subtotal(self) -> Decimal:
        return from_cents(self.items_subtotal_cents)

    @property
    def flat_tax_total(self) -> Decimal:
        return from_cents(self.flat_tax_total_cents)

    @property
    def subtotal_before_delivery(self) -> Decimal:
        return from_cents(self.subtotal_before_delivery_cents)

    @property
    def delivery_fee(self) -> Decimal:
        return from_cents(self.delivery_fee_cents)

    @property
    def subtotal_before_redemption(self) -> Decimal:
        return from_cents(self.subtotal_before_redemption_cents)

    @property
    def loyalty_eligible_subtotal(self) -> Decimal:
        return from_cents(self.loyalty_eligible_subtotal_cents)

    @property
    def loyalty_redeem_value(self) -> Decimal:
        return from_cents(self.loyalty_redeem_value_cents)

    @property
    def total(self) -> Decimal:
        return from_cents(self.total_cents)

    @property
    def flat_tax_lines(self) -> tuple[FlatTaxLine, ...]:
        return tuple(line for line in self.lines if isinstance(line, FlatTaxLine))

    @property
    def item_lines(self) -> tuple[ItemLine, ...]:
        return tuple(line for line in self.lines if isinstance(line, ItemLine))

    @classmethod
    def empty(cls) -> OrderResult:
        return cls(
            lines=(),
            items_subtotal_cents=0,
            flat_tax_total_cents=0,
            subtotal_before_delivery_cents=0,
            delivery_fee_cents=0,
            subtotal_before_redemption_cents=0,
            loyalty_eligible_subtotal_cents=0,
            points_earned=0,
            points_redeemed=0,
            loyalty_redeem_value_cents=0,
            total_cents=0,
        )
