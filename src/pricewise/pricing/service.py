"""Order calculation service: the engine's single entry point."""

from __future__ import annotations

from pricewise.core.config import EngineConfig
from pricewise.core.money import to_cents
from pricewise.pricing.assembler import OrderTotalAssembler
from pricewise.pricing.flat_tax import FlatTaxCalculator
from pricewise.pricing.history import HistoricalOrderRecord, to_order_input
from pricewise.pricing.logger import CalculationLogger
from pricewise.pricing.loyalty import LoyaltyEngine
from pricewise.pricing.resolver import PricingResolver
from pricewise.pricing.types import Customer, OrderInput, OrderResult
from pricewise.taxes.invalidation import CacheInvalidationController
from pricewise.taxes.registry import TaxRegistry
from pricewise.taxes.store import TaxDefinitionStore


class OrderCalculationService:
    """Turns an order and a customer's terms into an ``OrderResult``.

    Callers (route handlers) construct one service per process with the
    shared tax registry, then call ``calculate`` per request. The service
    holds no per-order state.
    """

    def __init__(
        self,
        *,
        registry: TaxRegistry,
        invalidation: CacheInvalidationController,
        config: EngineConfig | None = None,
        calc_logger: CalculationLogger | None = None,
    ) -> None:
        self._config = config or EngineConfig()
        self._logger = calc_logger or CalculationLogger()
        self._registry = registry
        self._invalidation = invalidation
        self._resolver = PricingResolver(self._logger)
        self._flat_tax = FlatTaxCalculator(
            registry,
            default_label=self._config.default_flat_tax_label,
            missing_policy=self._config.missing_tax_policy,
            calc_logger=self._logger,
        )
        self._loyalty = LoyaltyEngine(self._config.excluded_categories)
        self._assembler = OrderTotalAssembler(self._logger)

    @classmethod
    def for_store(
        cls,
        store: TaxDefinitionStore,
        config: EngineConfig | None = None,
        calc_logger: CalculationLogger | None = None,
    ) -> OrderCalculationService:
        """Build a service with its own registry and invalidation controller."""
        config = config or EngineConfig()
        registry = TaxRegistry(store)
        invalidation = CacheInvalidationController(
            registry, finalized_statuses=config.finalized_statuses
        )
        return cls(
            registry=registry,
            invalidation=invalidation,
            config=config,
            calc_logger=calc_logger,
        )

    @property
    def registry(self) -> TaxRegistry:
        return self._registry

    @property
    def invalidation(self) -> CacheInvalidationController:
        return self._invalidation

    async def warm_tax_cache(self) -> int:
        """Preload every tax definition so the first orders skip the store."""
        return await self._registry.warm()

    async def calculate(
        self,
        order: OrderInput,
        customer: Customer,
        *,
        finalized: bool = False,
    ) -> OrderResult:
        """Price, tax and apply loyalty to an order.

        Args:
            order: Items, delivery choice and redemption request
            customer: Tier, flat tax flag and loyalty profile
            finalized: Whether the order is already finalized; only then may
                stored flat tax amounts appear in the result

        Raises:
            InvariantViolationError: The breakdown failed its own checks.
            MissingTaxDefinitionError: A tax id is unknown under the
                ``error`` missing-tax policy.
        """
        cache_version = self._registry.generation
        item_lines = self._resolver.item_lines(order.items, customer.tier)
        flat_tax = await self._flat_tax.calculate(order.items, customer)

        delivery_fee_cents = 0
        if order.is_delivery:
            delivery_fee_cents = max(0, to_cents(order.delivery_fee))
        subtotal_before_redemption = (
            sum(line.line_total_cents for line in item_lines)
            + flat_tax.total_cents
            + delivery_fee_cents
        )

        eligible_cents = self._loyalty.eligible_subtotal_cents(item_lines)
        loyalty = customer.loyalty
        redemption = self._loyalty.resolve_redeem(
            requested=order.redeem_points,
            available=loyalty.available_points,
            redeem_value_per_point=loyalty.redeem_value_per_point,
            max_percent=loyalty.max_redeem_percent,
            subtotal_before_redemption_cents=subtotal_before_redemption,
        )

        result = self._assembler.assemble(
            item_lines=item_lines,
            flat_tax=flat_tax,
            delivery_fee_cents=delivery_fee_cents,
            redemption=redemption,
            loyalty_eligible_cents=eligible_cents,
            points_earned=self._loyalty.points_earned(
                eligible_cents, loyalty.earn_rate_per_dollar
            ),
            cache_version=cache_version,
            finalized=finalized,
        )
        self._logger.calculated(result)
        return result

    async def recalculate_existing_order(
        self, record: HistoricalOrderRecord, customer: Customer
    ) -> OrderResult:
        """Recalculate a stored order from current definitions.

        Stored per-line flat tax amounts are used only for finalized orders.
        """
        if not record.items:
            return OrderResult.empty()

        trust_stored_tax = not self._invalidation.should_ignore_stored_flat_tax(
            record.status
        )
        self._logger.recalculating(record.status, trust_stored_tax)
        order = to_order_input(record, trust_stored_tax=trust_stored_tax)
        return await self.calculate(order, customer, finalized=trust_stored_tax)
