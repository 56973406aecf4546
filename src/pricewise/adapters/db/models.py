from __future__ import annotations

from datetime import datetime
import json

from sqlalchemy import (
    TIMESTAMP,
    Boolean,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
)

from pricewise.pricing.types import TaxDefinition


class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""

    pass


class FlatTax(Base):
    """Flat tax definition managed by admins."""

    __tablename__ = "flat_taxes"

    flat_tax_id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    amount_micros: Mapped[int] = mapped_column(Integer, nullable=False)
    tax_type: Mapped[str | None] = mapped_column(
        String, nullable=True
    )  # tobacco, county, state, federal
    customer_tiers: Mapped[str] = mapped_column(
        Text, nullable=False, server_default=text("'[]'")
    )  # JSON array stored as TEXT
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("TRUE")
    )
    version: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default=text("1")
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP, nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP, nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )

    def to_definition(self) -> TaxDefinition:
        """Convert to the engine's detached value type."""
        return TaxDefinition(
            id=self.flat_tax_id,
            name=self.name,
            amount_micros=self.amount_micros,
            version=self.version,
            updated_at=self.updated_at,
            is_active=self.is_active,
            customer_tiers=decode_customer_tiers(self.customer_tiers),
        )


def encode_customer_tiers(tiers: frozenset[int] | set[int] | list[int]) -> str:
    return json.dumps(sorted(int(t) for t in tiers))


def decode_customer_tiers(raw: str | None) -> frozenset[int]:
    if not raw:
        return frozenset()
    return frozenset(int(t) for t in json.loads(raw))
