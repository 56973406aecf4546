"""Final order breakdown assembly and invariant checks."""

from __future__ import annotations

from dataclasses import fields

from pricewise.pricing.errors import InvariantViolation, InvariantViolationError
from pricewise.pricing.logger import CalculationLogger
from pricewise.pricing.types import (
    CalcLine,
    DeliveryLine,
    FlatTaxOutcome,
    ItemLine,
    LoyaltyRedeemLine,
    OrderResult,
    RedeemResolution,
    TaxSource,
)


class OrderTotalAssembler:
    """Combines lines into an ``OrderResult`` and refuses inconsistent ones.

    Line order is fixed: items, flat taxes, delivery, loyalty redemption.
    """

    def __init__(self, calc_logger: CalculationLogger | None = None) -> None:
        self._logger = calc_logger or CalculationLogger()

    def assemble(
        self,
        *,
        item_lines: tuple[ItemLine, ...],
        flat_tax: FlatTaxOutcome,
        delivery_fee_cents: int,
        redemption: RedeemResolution,
        loyalty_eligible_cents: int,
        points_earned: int,
        cache_version: int = 0,
        finalized: bool = False,
    ) -> OrderResult:
        """Build the final breakdown.

        Raises:
            InvariantViolationError: Any cross-field check failed.
        """
        lines: list[CalcLine] = [*item_lines, *flat_tax.lines]
        if delivery_fee_cents > 0:
            lines.append(DeliveryLine(amount_cents=delivery_fee_cents))
        if redemption.redeem_value_cents > 0:
            lines.append(
                LoyaltyRedeemLine(
                    points_used=redemption.points_used,
                    amount_cents=redemption.redeem_value_cents,
                )
            )

        items_subtotal = sum(line.line_total_cents for line in item_lines)
        flat_tax_total = flat_tax.total_cents
        subtotal_before_delivery = items_subtotal + flat_tax_total
        subtotal_before_redemption = subtotal_before_delivery + delivery_fee_cents

        result = OrderResult(
            lines=tuple(lines),
            items_subtotal_cents=items_subtotal,
            flat_tax_total_cents=flat_tax_total,
            subtotal_before_delivery_cents=subtotal_before_delivery,
            delivery_fee_cents=delivery_fee_cents,
            subtotal_before_redemption_cents=subtotal_before_redemption,
            loyalty_eligible_subtotal_cents=loyalty_eligible_cents,
            points_earned=points_earned,
            points_redeemed=redemption.points_used,
            loyalty_redeem_value_cents=redemption.redeem_value_cents,
            total_cents=subtotal_before_redemption - redemption.redeem_value_cents,
            cache_version=cache_version,
            applied_taxes=flat_tax.applied,
            missing_tax_ids=flat_tax.missing_tax_ids,
            finalized=finalized,
        )

        violations = check_invariants(result, redemption)
        if violations:
            self._logger.invariants_failed(violations)
            raise InvariantViolationError(violations, result)
        return result


def check_invariants(
    result: OrderResult, redemption: RedeemResolution
) -> list[InvariantViolation]:
    """Run every cross-field check and return the failures."""
    violations: list[InvariantViolation] = []

    def expect(name: str, expected: int, actual: int) -> None:
        if expected != actual:
            violations.append(InvariantViolation(name, expected, actual))

    non_integer = [
        f.name
        for f in fields(result)
        if f.name.endswith("_cents") and type(getattr(result, f.name)) is not int
    ]
    expect("integer_cents", 0, len(non_integer))

    expect(
        "items_subtotal",
        sum(line.line_total_cents for line in result.item_lines),
        result.items_subtotal_cents,
    )
    expect(
        "flat_tax_total",
        sum(line.amount_cents for line in result.flat_tax_lines),
        result.flat_tax_total_cents,
    )
    expect(
        "subtotal_before_delivery",
        result.items_subtotal_cents + result.flat_tax_total_cents,
        result.subtotal_before_delivery_cents,
    )
    expect(
        "total",
        result.subtotal_before_delivery_cents
        + result.delivery_fee_cents
        - result.loyalty_redeem_value_cents,
        result.total_cents,
    )
    if result.total_cents < 0:
        violations.append(
            InvariantViolation("total_non_negative", 0, result.total_cents)
        )

    redeem_bound = min(
        max(0, redemption.requested_points),
        max(0, redemption.available_points),
        redemption.cap_by_subtotal,
    )
    if redemption.cap_by_percent is not None:
        redeem_bound = min(redeem_bound, redemption.cap_by_percent)
    if not 0 <= result.points_redeemed <= max(0, redeem_bound):
        violations.append(
            InvariantViolation(
                "points_redeemed_bound", redeem_bound, result.points_redeemed
            )
        )
    if result.loyalty_redeem_value_cents > result.subtotal_before_redemption_cents:
        violations.append(
            InvariantViolation(
                "redeem_within_subtotal",
                result.subtotal_before_redemption_cents,
                result.loyalty_redeem_value_cents,
            )
        )

    if not result.finalized:
        stored = sum(
            1
            for line in result.flat_tax_lines
            if line.source is TaxSource.STORED_RECORD
        )
        expect("stored_flat_tax_on_open_order", 0, stored)

    return violations
