"""Loyalty point accrual and capped redemption."""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from pricewise.core.config import DEFAULT_EXCLUDED_CATEGORIES
from pricewise.core.money import Number, floor_int, round_half_up, to_decimal
from pricewise.pricing.types import ItemLine, RedeemResolution

_HUNDRED = Decimal("100")


class LoyaltyEngine:
    """Computes points earned and resolves redemption requests.

    Never mutates a customer's balance; the order commit owns that and must
    re-check the balance it commits against.
    """

    def __init__(
        self, excluded_categories: Iterable[str] = DEFAULT_EXCLUDED_CATEGORIES
    ) -> None:
        self._excluded = frozenset(c.lower() for c in excluded_categories)

    def is_excluded(self, category: str) -> bool:
        return category.lower() in self._excluded

    def eligible_subtotal_cents(self, item_lines: Iterable[ItemLine]) -> int:
        """Sum of item line totals outside the excluded categories.

        Taxes and delivery never count since only item lines are summed.
        """
        return sum(
            line.line_total_cents
            for line in item_lines
            if not self.is_excluded(line.category)
        )

    def points_earned(self, eligible_cents: int, earn_rate_per_dollar: Number) -> int:
        """``floor(eligible_dollars * earn_rate_per_dollar)``, never negative."""
        points = floor_int(
            Decimal(eligible_cents) * to_decimal(earn_rate_per_dollar) / _HUNDRED
        )
        return max(0, points)

    def resolve_redeem(
        self,
        requested: int | None,
        available: int,
        redeem_value_per_point: Number,
        max_percent: Number | None,
        subtotal_before_redemption_cents: int,
    ) -> RedeemResolution:
        """Clamp a redemption request to balance, percent cap and subtotal.

        Args:
            requested: Points the customer asked to redeem (None means 0)
            available: Points in the customer's balance
            redeem_value_per_point: Decimal currency value of one point
            max_percent: Optional cap as a percentage of the subtotal
            subtotal_before_redemption_cents: Items + flat tax + delivery

        Returns:
            RedeemResolution whose value never exceeds the subtotal.
        """
        requested_points = requested or 0
        subtotal = max(0, subtotal_before_redemption_cents)
        value_cents_per_point = to_decimal(redeem_value_per_point) * _HUNDRED

        if value_cents_per_point <= 0:
            return RedeemResolution(
                points_used=0,
                redeem_value_cents=0,
                requested_points=requested_points,
                available_points=available,
                cap_by_percent=None,
                cap_by_subtotal=0,
            )

        points = min(requested_points, available)

        cap_by_percent: int | None = None
        if max_percent is not None and to_decimal(max_percent) > 0:
            percent = to_decimal(max_percent)
            cap_cents = floor_int(Decimal(subtotal) * percent / _HUNDRED)
            cap_by_percent = floor_int(Decimal(cap_cents) / value_cents_per_point)
            points = min(points, cap_by_percent)

        cap_by_subtotal = floor_int(Decimal(subtotal) / value_cents_per_point)
        points = max(0, min(points, cap_by_subtotal))

        return RedeemResolution(
            points_used=points,
            redeem_value_cents=round_half_up(Decimal(points) * value_cents_per_point),
            requested_points=requested_points,
            available_points=available,
            cap_by_percent=cap_by_percent,
            cap_by_subtotal=cap_by_subtotal,
        )
