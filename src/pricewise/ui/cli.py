from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import ValidationError
from rich.console import Console
import typer

from pricewise.adapters.db.facade import DB
from pricewise.adapters.payloads import (
    CustomerPayload,
    OrderInputPayload,
    OrderResultPayload,
)
from pricewise.core.config import EngineConfig, load_engine_config_from_env
from pricewise.core.money import format_micros
from pricewise.pricing.errors import PricingError
from pricewise.pricing.service import OrderCalculationService
from pricewise.pricing.types import Customer, OrderInput, OrderResult
from pricewise.taxes.admin import TaxAdminService
from pricewise.taxes.store import SqlTaxDefinitionStore
from pricewise.ui.render import render_breakdown, render_tax_definitions

# Load environment variables from .env
load_dotenv()

app = typer.Typer(
    help="Pricewise: B2B order pricing, flat tax and loyalty calculator.",
    no_args_is_help=True,
)

taxes_app = typer.Typer(help="Manage flat tax definitions.")
app.add_typer(taxes_app, name="taxes")

console = Console()


def _load_config() -> EngineConfig:
    try:
        return load_engine_config_from_env()
    except ValueError as e:
        typer.echo(f"Invalid configuration: {e}", err=True)
        raise typer.Exit(1) from None


def _open_db(config: EngineConfig) -> DB:
    db = DB(config.database_url)
    db.create_schema()
    return db


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        typer.echo(f"Could not read {path}: {e}", err=True)
        raise typer.Exit(1) from None


def _admin_service(config: EngineConfig) -> TaxAdminService:
    db = _open_db(config)
    service = OrderCalculationService.for_store(SqlTaxDefinitionStore(db), config)
    return TaxAdminService(db=db, invalidation=service.invalidation)


async def _warm_and_calculate(
    service: OrderCalculationService, order: OrderInput, customer: Customer
) -> OrderResult:
    await service.warm_tax_cache()
    return await service.calculate(order, customer)


@app.command("quote")
def quote(
    order_path: Path = typer.Argument(..., help="Order input JSON file"),
    customer_path: Path = typer.Argument(..., help="Customer profile JSON file"),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON"),
) -> None:
    """Calculate the full breakdown for an order."""
    config = _load_config()
    try:
        order = OrderInputPayload.parse(_read_json(order_path)).to_domain()
        customer = CustomerPayload.parse(_read_json(customer_path)).to_domain()
    except ValidationError as e:
        typer.echo(f"Invalid input: {e}", err=True)
        raise typer.Exit(1) from None

    db = _open_db(config)
    service = OrderCalculationService.for_store(SqlTaxDefinitionStore(db), config)
    try:
        result = asyncio.run(_warm_and_calculate(service, order, customer))
    except PricingError as e:
        typer.echo(f"Calculation failed: {e}", err=True)
        raise typer.Exit(1) from None

    if as_json:
        payload = OrderResultPayload.from_result(result).to_json_dict()
        typer.echo(json.dumps(payload, indent=2))
    else:
        render_breakdown(result, console)


@app.command("init-db")
def init_db() -> None:
    """Create the flat tax tables."""
    config = _load_config()
    _open_db(config)
    typer.echo(f"Schema ready at {config.database_url}")


@taxes_app.command("list")
def taxes_list() -> None:
    """List every flat tax definition."""
    admin = _admin_service(_load_config())
    definitions = admin.verify()
    if not definitions:
        typer.echo("No flat taxes defined.")
        return
    render_tax_definitions(definitions, console)


@taxes_app.command("add")
def taxes_add(
    name: str = typer.Argument(..., help="Display label, e.g. 'Cook County 60ct'"),
    amount: str = typer.Argument(..., help="Per-unit amount, e.g. 0.60"),
    tier: list[int] | None = typer.Option(  # noqa: B008
        None, "--tier", help="Restrict to customer tier (repeatable)"
    ),
    tax_type: str | None = typer.Option(None, help="tobacco, county, state, ..."),
) -> None:
    """Create a flat tax definition."""
    admin = _admin_service(_load_config())
    try:
        definition = admin.create(
            name=name, amount=amount, tax_type=tax_type, customer_tiers=tier or []
        )
    except ValueError as e:
        typer.echo(f"Invalid amount: {e}", err=True)
        raise typer.Exit(1) from None
    typer.echo(f"Created flat tax {definition.id}: {definition.name}")


@taxes_app.command("set")
def taxes_set(
    tax_id: int = typer.Argument(..., help="Flat tax ID"),
    amount: str = typer.Argument(..., help="New per-unit amount"),
) -> None:
    """Change a flat tax amount (busts the tax cache)."""
    admin = _admin_service(_load_config())
    try:
        definition = admin.update_amount(tax_id, amount)
    except (PricingError, ValueError) as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(1) from None
    amount_text = format_micros(definition.amount_micros)
    typer.echo(
        f"Flat tax {definition.id} now {amount_text} per unit "
        f"(version {definition.version})"
    )


@taxes_app.command("deactivate")
def taxes_deactivate(tax_id: int = typer.Argument(..., help="Flat tax ID")) -> None:
    """Stop applying a flat tax without deleting it."""
    admin = _admin_service(_load_config())
    try:
        admin.deactivate(tax_id)
    except PricingError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(1) from None
    typer.echo(f"Flat tax {tax_id} deactivated")


def main() -> None:
    app()
