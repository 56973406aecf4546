from __future__ import annotations

from decimal import Decimal

from pricewise.pricing.loyalty import LoyaltyEngine
from pricewise.pricing.types import ItemLine


def create_line(category: str, cents: int) -> ItemLine:
    return ItemLine(
        name=category,
        qty=1,
        unit_price=Decimal(cents) / 100,
        line_total_cents=cents,
        category=category,
    )


class TestEligibleSubtotal:
    def test_excludes_tobacco_by_default(self) -> None:
        engine = LoyaltyEngine()
        lines = [create_line("snacks", 3000), create_line("tobacco", 1000)]

        assert engine.eligible_subtotal_cents(lines) == 3000

    def test_exclusion_is_case_insensitive(self) -> None:
        engine = LoyaltyEngine({"Vape"})

        assert engine.is_excluded("vape")
        assert engine.is_excluded("VAPE")
        assert not engine.is_excluded("tobacco")


class TestPointsEarned:
    def test_floors_points(self) -> None:
        engine = LoyaltyEngine()

        # $99.99 at 2 points per $100
        assert engine.points_earned(9999, Decimal("0.02")) == 1

    def test_zero_rate_earns_nothing(self) -> None:
        assert LoyaltyEngine().points_earned(50000, 0) == 0

    def test_never_negative(self) -> None:
        assert LoyaltyEngine().points_earned(-500, Decimal("1")) == 0


class TestResolveRedeem:
    def test_clamped_to_available(self) -> None:
        # Act
        resolution = LoyaltyEngine().resolve_redeem(
            requested=500,
            available=200,
            redeem_value_per_point=Decimal("0.01"),
            max_percent=None,
            subtotal_before_redemption_cents=10000,
        )

        # Assert
        assert resolution.points_used == 200
        assert resolution.redeem_value_cents == 200
        assert resolution.cap_by_percent is None
        assert resolution.cap_by_subtotal == 10000

    def test_percent_cap(self) -> None:
        # Input - 10% of $50.00 is $5.00, i.e. 500 points at 1 cent
        resolution = LoyaltyEngine().resolve_redeem(
            requested=1000,
            available=1000,
            redeem_value_per_point=Decimal("0.01"),
            max_percent=Decimal("10"),
            subtotal_before_redemption_cents=5000,
        )

        assert resolution.cap_by_percent == 500
        assert resolution.points_used == 500
        assert resolution.redeem_value_cents == 500

    def test_subtotal_cap(self) -> None:
        resolution = LoyaltyEngine().resolve_redeem(
            requested=10000,
            available=10000,
            redeem_value_per_point=Decimal("0.01"),
            max_percent=None,
            subtotal_before_redemption_cents=800,
        )

        assert resolution.points_used == 800
        assert resolution.redeem_value_cents == 800

    def test_no_request_redeems_nothing(self) -> None:
        resolution = LoyaltyEngine().resolve_redeem(
            requested=None,
            available=1000,
            redeem_value_per_point=Decimal("0.01"),
            max_percent=None,
            subtotal_before_redemption_cents=5000,
        )

        assert resolution.points_used == 0
        assert resolution.redeem_value_cents == 0
        assert resolution.requested_points == 0

    def test_non_positive_point_value_redeems_nothing(self) -> None:
        resolution = LoyaltyEngine().resolve_redeem(
            requested=100,
            available=100,
            redeem_value_per_point=0,
            max_percent=None,
            subtotal_before_redemption_cents=5000,
        )

        assert resolution.points_used == 0
        assert resolution.cap_by_subtotal == 0

    def test_fractional_point_value(self) -> None:
        # 0.5 cents per point: 3 points are worth 1.5 cents, rounded half up
        resolution = LoyaltyEngine().resolve_redeem(
            requested=3,
            available=3,
            redeem_value_per_point=Decimal("0.005"),
            max_percent=None,
            subtotal_before_redemption_cents=5000,
        )

        assert resolution.points_used == 3
        assert resolution.redeem_value_cents == 2
