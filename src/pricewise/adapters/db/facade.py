from __future__ import annotations

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from datetime import UTC, datetime

from sqlalchemy import create_engine
from sqlalchemy.orm import (
    Session,
    sessionmaker,
)

from pricewise.adapters.db.models import Base, FlatTax, encode_customer_tiers
from pricewise.pricing.types import TaxDefinition


class DB:
    """Database service layer for flat tax definitions."""

    def __init__(self, url: str) -> None:
        """Initialize database connection.

        Args:
            url: Database URL (e.g., "sqlite:///pricewise.db")
        """
        self._url = url
        self._engine = create_engine(url, echo=False)
        self._session_factory = sessionmaker(bind=self._engine, class_=Session)

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Context manager for database sessions."""
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def create_schema(self) -> None:
        """Create all tables that do not exist yet."""
        Base.metadata.create_all(self._engine)

    def get_tax_definition(self, tax_id: int) -> TaxDefinition | None:
        """Get flat tax definition by ID.

        Args:
            tax_id: Flat tax ID

        Returns:
            TaxDefinition or None if not found
        """
        with self.session() as session:  # type: Session
            flat_tax = session.get(FlatTax, tax_id)
            return flat_tax.to_definition() if flat_tax else None

    def list_tax_definitions(self) -> list[TaxDefinition]:
        """Return all flat tax definitions ordered by ID."""
        with self.session() as session:  # type: Session
            rows = session.query(FlatTax).order_by(FlatTax.flat_tax_id).all()
            return [row.to_definition() for row in rows]

    def insert_tax_definition(
        self,
        *,
        name: str,
        amount_micros: int,
        description: str | None = None,
        tax_type: str | None = None,
        customer_tiers: Iterable[int] = (),
        is_active: bool = True,
    ) -> TaxDefinition:
        """Insert a new flat tax definition at version 1.

        Returns:
            Created TaxDefinition
        """
        with self.session() as session:  # type: Session
            flat_tax = FlatTax(
                name=name,
                description=description,
                amount_micros=amount_micros,
                tax_type=tax_type,
                customer_tiers=encode_customer_tiers(list(customer_tiers)),
                is_active=is_active,
                version=1,
            )
            session.add(flat_tax)
            session.flush()
            session.refresh(flat_tax)
            return flat_tax.to_definition()

    def update_tax_definition(
        self,
        tax_id: int,
        *,
        amount_micros: int | None = None,
        name: str | None = None,
        is_active: bool | None = None,
        customer_tiers: Iterable[int] | None = None,
    ) -> TaxDefinition | None:
        """Update a flat tax definition and bump its version.

        Only the provided fields change. ``updated_at`` is always refreshed.

        Returns:
            Updated TaxDefinition, or None if the ID does not exist
        """
        with self.session() as session:  # type: Session
            flat_tax = session.get(FlatTax, tax_id)
            if flat_tax is None:
                return None
            if amount_micros is not None:
                flat_tax.amount_micros = amount_micros
            if name is not None:
                flat_tax.name = name
            if is_active is not None:
                flat_tax.is_active = is_active
            if customer_tiers is not None:
                flat_tax.customer_tiers = encode_customer_tiers(list(customer_tiers))
            flat_tax.version = flat_tax.version + 1
            flat_tax.updated_at = datetime.now(UTC).replace(tzinfo=None)
            session.flush()
            session.refresh(flat_tax)
            return flat_tax.to_definition()

    def delete_tax_definition(self, tax_id: int) -> bool:
        """Delete a flat tax definition.

        Returns:
            True if a row was deleted
        """
        with self.session() as session:  # type: Session
            flat_tax = session.get(FlatTax, tax_id)
            if flat_tax is None:
                return False
            session.delete(flat_tax)
            return True
