from __future__ import annotations

import asyncio
from decimal import Decimal
from unittest.mock import MagicMock

from pydantic import ValidationError
import pytest

from pricewise.adapters.payloads import (
    CustomerPayload,
    OrderInputPayload,
    OrderResultPayload,
)
from pricewise.pricing.logger import CalculationLogger
from pricewise.pricing.service import OrderCalculationService
from pricewise.taxes.store import InMemoryTaxDefinitionStore

ORDER_JSON = {
    "items": [
        {
            "name": "Cigarillos",
            "qty": 10,
            "tierPrices": {"1": 4.0, "2": "3.50"},
            "category": "tobacco",
            "hasFlatTax": True,
            "flatTaxPerItem": 0.6,
        },
        {"name": "Chips", "qty": 2, "tierPrices": {"1": "12.50"}},
    ],
    "isDelivery": True,
    "deliveryFee": 5,
    "redeemPoints": 100,
}

CUSTOMER_JSON = {
    "tier": 1,
    "hasFlatTax": True,
    "loyalty": {
        "availablePoints": 500,
        "earnRatePerDollar": 0.02,
        "redeemValuePerPoint": 0.01,
    },
}


class TestOrderInputPayload:
    def test_parses_camel_case(self) -> None:
        # Act
        order = OrderInputPayload.parse(ORDER_JSON).to_domain()

        # Assert
        first = order.items[0]
        assert first.qty == 10
        assert isinstance(first.qty, int)
        assert first.tier_prices == {1: Decimal("4.0"), 2: Decimal("3.50")}
        assert first.flat_tax_per_item == Decimal("0.6")
        assert first.has_flat_tax is True
        assert order.items[1].category == "other"
        assert order.is_delivery is True
        assert order.delivery_fee == Decimal("5")
        assert order.redeem_points == 100

    def test_fractional_quantity_kept(self) -> None:
        payload = OrderInputPayload.parse(
            {"items": [{"name": "Deli", "qty": "1.5", "tierPrices": {"1": 2}}]}
        )

        assert payload.to_domain().items[0].qty == Decimal("1.5")

    def test_missing_items_rejected(self) -> None:
        with pytest.raises(ValidationError):
            OrderInputPayload.parse({"isDelivery": False})


class TestCustomerPayload:
    def test_parses_loyalty(self) -> None:
        customer = CustomerPayload.parse(CUSTOMER_JSON).to_domain()

        assert customer.tier == 1
        assert customer.loyalty.available_points == 500
        assert customer.loyalty.earn_rate_per_dollar == Decimal("0.02")
        assert customer.loyalty.max_redeem_percent is None

    @pytest.mark.parametrize("tier", [0, 6])
    def test_tier_out_of_range_rejected(self, tier: int) -> None:
        with pytest.raises(ValidationError):
            CustomerPayload.parse({"tier": tier, "hasFlatTax": False})


class TestOrderResultPayload:
    def test_renders_decimal_camel_case(self) -> None:
        # Setup
        service = OrderCalculationService.for_store(
            InMemoryTaxDefinitionStore(),
            calc_logger=MagicMock(spec=CalculationLogger),
        )
        order = OrderInputPayload.parse(ORDER_JSON).to_domain()
        customer = CustomerPayload.parse(CUSTOMER_JSON).to_domain()
        result = asyncio.run(service.calculate(order, customer))

        # Act
        payload = OrderResultPayload.from_result(result).to_json_dict()

        # Assert
        assert payload["itemsSubtotal"] == 65.0
        assert payload["flatTaxTotal"] == 6.0
        assert payload["subtotalBeforeDelivery"] == 71.0
        assert payload["deliveryFee"] == 5.0
        assert payload["loyaltyRedeemValue"] == 1.0
        assert payload["total"] == 75.0
        assert payload["pointsEarned"] == 0
        assert payload["missingTaxIds"] == []
        kinds = [line["kind"] for line in payload["lines"]]
        assert kinds == ["item", "item", "flatTax", "delivery", "loyaltyRedeem"]
        assert payload["lines"][0] == {
            "kind": "item",
            "name": "Cigarillos",
            "qty": 10.0,
            "unitPrice": 4.0,
            "lineTotal": 40.0,
        }
        assert payload["lines"][2]["label"] == "Tobacco Tax"
