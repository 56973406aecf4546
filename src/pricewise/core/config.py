from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Literal

MissingTaxPolicy = Literal["flag", "error"]

DEFAULT_DATABASE_URL = "sqlite:///pricewise.db"
DEFAULT_FLAT_TAX_LABEL = "Tobacco Tax"
DEFAULT_EXCLUDED_CATEGORIES: frozenset[str] = frozenset({"tobacco"})
DEFAULT_FINALIZED_STATUSES: frozenset[str] = frozenset({"completed", "finalized"})


@dataclass(frozen=True, slots=True)
class EngineConfig:
    """Calculation engine settings loaded at process startup."""

    database_url: str = DEFAULT_DATABASE_URL
    excluded_categories: frozenset[str] = DEFAULT_EXCLUDED_CATEGORIES
    default_flat_tax_label: str = DEFAULT_FLAT_TAX_LABEL
    missing_tax_policy: MissingTaxPolicy = "flag"
    finalized_statuses: frozenset[str] = DEFAULT_FINALIZED_STATUSES


def _split_csv(raw: str) -> frozenset[str]:
    return frozenset(part.strip().lower() for part in raw.split(",") if part.strip())


def load_engine_config_from_env() -> EngineConfig:
    """Load engine config from env and validate it."""
    database_url = os.environ.get(
        "PRICEWISE_DATABASE_URL", DEFAULT_DATABASE_URL
    ).strip()
    if not database_url:
        raise ValueError("PRICEWISE_DATABASE_URL must not be empty")

    excluded_categories = _split_csv(
        os.environ.get("PRICEWISE_EXCLUDED_CATEGORIES", "tobacco")
    )

    default_label = os.environ.get(
        "PRICEWISE_DEFAULT_FLAT_TAX_LABEL", DEFAULT_FLAT_TAX_LABEL
    ).strip()
    if not default_label:
        raise ValueError("PRICEWISE_DEFAULT_FLAT_TAX_LABEL must not be empty")

    policy_value = (
        os.environ.get("PRICEWISE_MISSING_TAX_POLICY", "flag").strip().lower()
    )
    if policy_value not in {"flag", "error"}:
        raise ValueError("PRICEWISE_MISSING_TAX_POLICY must be one of: flag, error")
    policy: MissingTaxPolicy = policy_value  # type: ignore[assignment]

    finalized_statuses = _split_csv(
        os.environ.get("PRICEWISE_FINALIZED_STATUSES", "completed,finalized")
    )
    if not finalized_statuses:
        raise ValueError("PRICEWISE_FINALIZED_STATUSES must name at least one status")

    return EngineConfig(
        database_url=database_url,
        excluded_categories=excluded_categories,
        default_flat_tax_label=default_label,
        missing_tax_policy=policy,
        finalized_statuses=finalized_statuses,
    )
