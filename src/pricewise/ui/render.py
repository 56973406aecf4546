"""Rich console rendering for order breakdowns and tax definitions."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from pricewise.core.money import format_cents, format_micros
from pricewise.pricing.types import (
    DeliveryLine,
    FlatTaxLine,
    ItemLine,
    LoyaltyRedeemLine,
    OrderResult,
    TaxDefinition,
)


def render_breakdown(result: OrderResult, console: Console) -> None:
    """Print the order lines followed by the derived totals."""
    table = Table(title="Order Breakdown", show_lines=False)
    table.add_column("Kind")
    table.add_column("Description")
    table.add_column("Qty", justify="right")
    table.add_column("Unit", justify="right")
    table.add_column("Amount", justify="right")

    for line in result.lines:
        match line:
            case ItemLine():
                table.add_row(
                    "item",
                    line.name,
                    str(line.qty),
                    f"${line.unit_price:,.2f}",
                    format_cents(line.line_total_cents),
                )
            case FlatTaxLine():
                table.add_row(
                    "flat tax",
                    f"{line.label} ({line.item_name})",
                    "",
                    "",
                    format_cents(line.amount_cents),
                )
            case DeliveryLine():
                table.add_row(
                    "delivery", line.label, "", "", format_cents(line.amount_cents)
                )
            case LoyaltyRedeemLine():
                table.add_row(
                    "loyalty",
                    f"{line.points_used} points redeemed",
                    "",
                    "",
                    format_cents(-line.amount_cents),
                )

    console.print(table)

    totals = Table(show_header=False, box=None)
    totals.add_column("Field")
    totals.add_column("Value", justify="right")
    totals.add_row("Items subtotal", format_cents(result.items_subtotal_cents))
    totals.add_row("Flat tax", format_cents(result.flat_tax_total_cents))
    rows = [
        ("Subtotal before delivery", result.subtotal_before_delivery_cents),
        ("Delivery", result.delivery_fee_cents),
        ("Loyalty redemption", -result.loyalty_redeem_value_cents),
    ]
    for label, cents in rows:
        totals.add_row(label, format_cents(cents))
    total = format_cents(result.total_cents)
    totals.add_row("[bold]Total[/bold]", f"[bold]{total}[/bold]")
    totals.add_row(
        "Loyalty-eligible subtotal",
        format_cents(result.loyalty_eligible_subtotal_cents),
    )
    totals.add_row("Points earned", str(result.points_earned))
    console.print(totals)

    if result.missing_tax_ids:
        ids = ", ".join(str(i) for i in result.missing_tax_ids)
        console.print(f"[yellow]Untaxed: missing flat tax definitions {ids}[/yellow]")


def render_tax_definitions(definitions: list[TaxDefinition], console: Console) -> None:
    table = Table(title="Flat Taxes")
    table.add_column("ID", justify="right")
    table.add_column("Name")
    table.add_column("Amount", justify="right")
    table.add_column("Tiers")
    table.add_column("Active")
    table.add_column("Version", justify="right")

    for definition in definitions:
        tiers = ", ".join(str(t) for t in sorted(definition.customer_tiers)) or "all"
        table.add_row(
            str(definition.id),
            definition.name,
            format_micros(definition.amount_micros),
            tiers,
            "yes" if definition.is_active else "no",
            str(definition.version),
        )
    console.print(table)
