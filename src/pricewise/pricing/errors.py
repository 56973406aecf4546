"""Calculation engine exceptions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pricewise.pricing.types import OrderResult


class PricingError(Exception):
    """Base error for order calculation."""


@dataclass(frozen=True, slots=True)
class InvariantViolation:
    """A single failed cross-field check."""

    name: str
    expected: int
    actual: int

    def __str__(self) -> str:
        return f"{self.name}: expected={self.expected}, actual={self.actual}"


class InvariantViolationError(PricingError):
    """The assembled breakdown failed one or more invariant checks.

    ``result`` is the rejected breakdown, kept for diagnostics only. It must
    not be displayed or persisted.
    """

    def __init__(
        self, violations: list[InvariantViolation], result: OrderResult
    ) -> None:
        self.violations = tuple(violations)
        self.result = result
        details = "; ".join(str(v) for v in violations)
        super().__init__(f"Order invariants violated: {details}")


class MissingTaxDefinitionError(PricingError):
    """A referenced flat tax has no definition in the store."""

    def __init__(self, tax_id: int, item_name: str) -> None:
        self.tax_id = tax_id
        self.item_name = item_name
        super().__init__(
            f"Flat tax {tax_id} referenced by '{item_name}' has no definition"
        )


class TaxDefinitionNotFoundError(PricingError):
    """Admin write targeted an unknown tax definition."""

    def __init__(self, tax_id: int) -> None:
        self.tax_id = tax_id
        super().__init__(f"Tax definition {tax_id} not found")
