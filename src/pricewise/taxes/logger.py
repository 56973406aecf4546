"""Logging for the tax-definition cache and admin writes."""

from __future__ import annotations

import loguru
from loguru import logger


class TaxRegistryLogger:
    """Handles all logging for tax definition caching."""

    def __init__(self, logger_instance: loguru.Logger = logger) -> None:
        self._logger = logger_instance

    def cache_miss(self, tax_id: int, generation: int) -> None:
        self._logger.bind(tax_id=tax_id, cache_version=generation).debug(
            "Flat tax {} not cached (generation {}), reading store", tax_id, generation
        )

    def definition_missing(self, tax_id: int) -> None:
        self._logger.bind(tax_id=tax_id).warning(
            "Flat tax {} not found in store", tax_id
        )

    def invalidated(self, cleared: int, generation: int) -> None:
        self._logger.bind(cleared=cleared, cache_version=generation).info(
            "Flat tax cache cleared: {} entries dropped, now generation {}",
            cleared,
            generation,
        )

    def warmed(self, count: int, generation: int) -> None:
        self._logger.bind(count=count, cache_version=generation).info(
            "Loaded {} flat tax definitions into cache", count
        )

    def definition_written(self, tax_id: int, version: int, amount: str) -> None:
        self._logger.bind(tax_id=tax_id, version=version).info(
            "Flat tax {} written: {} per unit (version {})", tax_id, amount, version
        )
