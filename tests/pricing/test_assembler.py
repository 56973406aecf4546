from __future__ import annotations

from dataclasses import replace
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from pricewise.pricing.assembler import OrderTotalAssembler, check_invariants
from pricewise.pricing.errors import InvariantViolationError
from pricewise.pricing.logger import CalculationLogger
from pricewise.pricing.types import (
    DeliveryLine,
    FlatTaxLine,
    FlatTaxOutcome,
    ItemLine,
    LineKind,
    LoyaltyRedeemLine,
    OrderResult,
    RedeemResolution,
    TaxSource,
)


def create_item_line(name: str, cents: int, category: str = "other") -> ItemLine:
    return ItemLine(
        name=name,
        qty=1,
        unit_price=Decimal(cents) / 100,
        line_total_cents=cents,
        category=category,
    )


def create_redemption(points: int = 0, value_cents: int = 0) -> RedeemResolution:
    return RedeemResolution(
        points_used=points,
        redeem_value_cents=value_cents,
        requested_points=points,
        available_points=points,
        cap_by_percent=None,
        cap_by_subtotal=100000,
    )


class TestOrderTotalAssembler:
    def test_line_order_and_totals(self) -> None:
        # Input
        items = (create_item_line("Chips", 2000), create_item_line("Cigars", 1000))
        flat_tax = FlatTaxOutcome(
            lines=(FlatTaxLine(label="Tobacco Tax", amount_cents=60, item_name="C"),)
        )

        # Setup
        assembler = OrderTotalAssembler(MagicMock(spec=CalculationLogger))

        # Act
        result = assembler.assemble(
            item_lines=items,
            flat_tax=flat_tax,
            delivery_fee_cents=500,
            redemption=create_redemption(points=100, value_cents=100),
            loyalty_eligible_cents=2000,
            points_earned=0,
            cache_version=3,
        )

        # Assert
        assert [line.kind for line in result.lines] == [
            LineKind.ITEM,
            LineKind.ITEM,
            LineKind.FLAT_TAX,
            LineKind.DELIVERY,
            LineKind.LOYALTY_REDEEM,
        ]
        assert result.items_subtotal_cents == 3000
        assert result.flat_tax_total_cents == 60
        assert result.subtotal_before_delivery_cents == 3060
        assert result.subtotal_before_redemption_cents == 3560
        assert result.total_cents == 3460
        assert result.points_redeemed == 100
        assert result.cache_version == 3
        assert result.total == Decimal("34.60")

    def test_zero_delivery_and_redemption_emit_no_lines(self) -> None:
        assembler = OrderTotalAssembler(MagicMock(spec=CalculationLogger))

        result = assembler.assemble(
            item_lines=(create_item_line("Chips", 2000),),
            flat_tax=FlatTaxOutcome(),
            delivery_fee_cents=0,
            redemption=create_redemption(),
            loyalty_eligible_cents=2000,
            points_earned=0,
        )

        assert not any(
            isinstance(line, DeliveryLine | LoyaltyRedeemLine) for line in result.lines
        )

    def test_stored_tax_on_open_order_raises(self) -> None:
        # Input
        flat_tax = FlatTaxOutcome(
            lines=(
                FlatTaxLine(
                    label="Tobacco Tax",
                    amount_cents=60,
                    item_name="Cigars",
                    source=TaxSource.STORED_RECORD,
                ),
            )
        )

        # Setup
        mock_logger = MagicMock(spec=CalculationLogger)
        assembler = OrderTotalAssembler(mock_logger)

        # Act
        with pytest.raises(InvariantViolationError) as exc_info:
            assembler.assemble(
                item_lines=(create_item_line("Cigars", 1000),),
                flat_tax=flat_tax,
                delivery_fee_cents=0,
                redemption=create_redemption(),
                loyalty_eligible_cents=0,
                points_earned=0,
                finalized=False,
            )

        # Assert
        names = [v.name for v in exc_info.value.violations]
        assert names == ["stored_flat_tax_on_open_order"]
        mock_logger.invariants_failed.assert_called_once()

    def test_stored_tax_on_finalized_order_is_allowed(self) -> None:
        flat_tax = FlatTaxOutcome(
            lines=(
                FlatTaxLine(
                    label="Tobacco Tax",
                    amount_cents=60,
                    item_name="Cigars",
                    source=TaxSource.STORED_RECORD,
                ),
            )
        )
        assembler = OrderTotalAssembler(MagicMock(spec=CalculationLogger))

        result = assembler.assemble(
            item_lines=(create_item_line("Cigars", 1000),),
            flat_tax=flat_tax,
            delivery_fee_cents=0,
            redemption=create_redemption(),
            loyalty_eligible_cents=0,
            points_earned=0,
            finalized=True,
        )

        assert result.finalized is True
        assert result.total_cents == 1060


class TestCheckInvariants:
    def _valid_result(self) -> OrderResult:
        assembler = OrderTotalAssembler(MagicMock(spec=CalculationLogger))
        return assembler.assemble(
            item_lines=(create_item_line("Chips", 2000),),
            flat_tax=FlatTaxOutcome(),
            delivery_fee_cents=500,
            redemption=create_redemption(points=100, value_cents=100),
            loyalty_eligible_cents=2000,
            points_earned=0,
        )

    def test_valid_result_has_no_violations(self) -> None:
        result = self._valid_result()

        assert check_invariants(result, create_redemption(100, 100)) == []

    def test_detects_total_mismatch(self) -> None:
        # Input
        result = replace(self._valid_result(), total_cents=9999)

        # Act
        violations = check_invariants(result, create_redemption(100, 100))

        # Assert
        assert [v.name for v in violations] == ["total"]
        assert violations[0].expected == 2400
        assert violations[0].actual == 9999

    def test_detects_subtotal_mismatch(self) -> None:
        result = replace(self._valid_result(), items_subtotal_cents=1)

        names = [v.name for v in check_invariants(result, create_redemption(100, 100))]

        assert "items_subtotal" in names
        assert "subtotal_before_delivery" in names

    def test_detects_non_integer_cents(self) -> None:
        result = replace(
            self._valid_result(),
            delivery_fee_cents=5.0,  # type: ignore[arg-type]
        )

        names = [v.name for v in check_invariants(result, create_redemption(100, 100))]

        assert "integer_cents" in names

    def test_detects_over_redemption(self) -> None:
        result = replace(self._valid_result(), points_redeemed=150)

        violations = check_invariants(result, create_redemption(100, 100))

        assert [v.name for v in violations] == ["points_redeemed_bound"]

    def test_detects_negative_total(self) -> None:
        result = replace(
            self._valid_result(),
            items_subtotal_cents=-3000,
            lines=(create_item_line("Refund", -3000),),
            subtotal_before_delivery_cents=-3000,
            total_cents=-2600,
        )

        names = [v.name for v in check_invariants(result, create_redemption(100, 100))]

        assert "total_non_negative" in names
