"""Logging for order calculation.

Keeps log formatting out of the calculation code.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import loguru
from loguru import logger

if TYPE_CHECKING:
    from pricewise.pricing.errors import InvariantViolation
    from pricewise.pricing.types import OrderResult


class CalculationLogger:
    """Handles all logging for order calculation."""

    def __init__(self, logger_instance: loguru.Logger = logger) -> None:
        """Initialize logger.

        Args:
            logger_instance: Logger instance to use (defaults to loguru.logger)
        """
        self._logger = logger_instance

    def tier_price_missing(self, item_name: str, tier: int) -> None:
        """Log a tier price falling back to zero."""
        self._logger.bind(item=item_name, tier=tier).debug(
            "No tier {} price for '{}', using 0", tier, item_name
        )

    def missing_tax_definition(self, tax_id: int, item_name: str) -> None:
        """Log an item whose flat tax could not be resolved."""
        self._logger.bind(tax_id=tax_id, item=item_name).warning(
            "Flat tax {} for '{}' not found; item left untaxed", tax_id, item_name
        )

    def tax_not_applicable(self, tax_id: int, item_name: str, reason: str) -> None:
        """Log a definition skipped because it is inactive or tier-restricted."""
        self._logger.bind(tax_id=tax_id, item=item_name).debug(
            "Flat tax {} skipped for '{}': {}", tax_id, item_name, reason
        )

    def invariants_failed(self, violations: list[InvariantViolation]) -> None:
        """Log invariant failures before they are raised."""
        for violation in violations:
            self._logger.bind(
                invariant=violation.name,
                expected=violation.expected,
                actual=violation.actual,
            ).error(
                "Invariant {} failed: expected={}, actual={}",
                violation.name,
                violation.expected,
                violation.actual,
            )

    def calculated(self, result: OrderResult) -> None:
        """Log a successful calculation summary."""
        self._logger.bind(
            total_cents=result.total_cents,
            cache_version=result.cache_version,
            lines=len(result.lines),
        ).info(
            "Order calculated: {} lines, total {} cents (points +{} / -{})",
            len(result.lines),
            result.total_cents,
            result.points_earned,
            result.points_redeemed,
        )

    def recalculating(self, status: str, trust_stored_tax: bool) -> None:
        """Log the start of a historical order recalculation."""
        self._logger.bind(status=status, trust_stored_tax=trust_stored_tax).info(
            "Recalculating {} order ({} stored flat tax)",
            status,
            "trusting" if trust_stored_tax else "ignoring",
        )
