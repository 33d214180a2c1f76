"""Configuration Loader for the recommendation catalog.

The hardcoded tables in logic/catalog.py are the baseline. A YAML file named by
BUDOWNICZY_CATALOG_PATH may override or extend them; it is validated with
pydantic and merged entry-by-entry so defaults are never lost.

Example override file:

    products:
      tapeta:
        basic: "Tapeta Erismann Basic"
        optimal: "Tapeta Rasch Vintage"
        premium: "Tapeta Arte Flamant"
    price_ranges:
      "do 1000zł": {low: "20-30"}
    advice:
      maintenance:
        Łazienka: "Czyść fugi raz w miesiącu"
"""

import logging
import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from budowniczy.logic.catalog import (
    ADVICE,
    DEFAULT_PRICE_RANGE,
    DEFAULT_TOTAL_COST,
    PRICE_RANGES,
    PRODUCTS,
    TOTAL_COSTS,
    Catalog,
    Phase,
    Tier,
)

logger = logging.getLogger(__name__)

CATALOG_PATH_ENV = "BUDOWNICZY_CATALOG_PATH"


# =============================================================================
# PYDANTIC MODELS FOR CONFIGURATION VALIDATION
# =============================================================================

def _check_tier_table(value: dict[str, dict[str, str]]) -> dict[str, dict[str, str]]:
    for key, row in value.items():
        for tier, text in row.items():
            if Tier.parse(tier) is None:
                raise ValueError(f"unknown tier '{tier}' under '{key}'")
            if not str(text).strip():
                raise ValueError(f"empty value for '{key}'/{tier}")
    return value


class CatalogConfig(BaseModel):
    """Validated catalog override file."""
    products: dict[str, dict[str, str]] = Field(default_factory=dict)
    price_ranges: dict[str, dict[str, str]] = Field(default_factory=dict)
    total_costs: dict[str, dict[str, str]] = Field(default_factory=dict)
    advice: dict[str, dict[str, str]] = Field(default_factory=dict)
    default_price_range: Optional[str] = None
    default_total_cost: Optional[str] = None

    @field_validator("products", "price_ranges", "total_costs")
    @classmethod
    def _tiers_known(cls, value):
        return _check_tier_table(value)

    @field_validator("advice")
    @classmethod
    def _phases_known(cls, value):
        valid = {p.value for p in Phase}
        for phase, rooms in value.items():
            if phase not in valid:
                raise ValueError(f"unknown phase '{phase}'")
            if any(not str(text).strip() for text in rooms.values()):
                raise ValueError(f"empty advice under '{phase}'")
        return value

    @field_validator("default_price_range", "default_total_cost")
    @classmethod
    def _non_empty(cls, value):
        if value is not None and not value.strip():
            raise ValueError("default range must not be empty")
        return value


# =============================================================================
# LOADING
# =============================================================================

def load_catalog_config(config_path: Optional[str] = None) -> Optional[CatalogConfig]:
    """Load and validate a catalog override file.

    Returns None when no path is configured or the file is unusable; the
    caller then keeps the hardcoded tables.
    """
    config_path = config_path or os.getenv(CATALOG_PATH_ENV)
    if not config_path:
        return None

    path = Path(config_path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        logger.warning(f"Catalog override {path} could not be read, using built-in tables: {e}")
        return None

    if not raw:
        return CatalogConfig()

    try:
        return CatalogConfig(**raw)
    except (ValidationError, TypeError) as e:
        logger.warning(f"Catalog override {path} is invalid, using built-in tables: {e}")
        return None


def _merge_tier_table(base: dict[str, dict[Tier, str]], override: dict[str, dict[str, str]]) -> dict[str, dict[Tier, str]]:
    merged = {key: dict(row) for key, row in base.items()}
    for key, row in override.items():
        target = merged.setdefault(key, {})
        for tier, text in row.items():
            target[Tier.parse(tier)] = text
    return merged


def build_catalog(config: Optional[CatalogConfig] = None) -> Catalog:
    """Build a Catalog from the hardcoded tables plus optional overrides."""
    if config is None:
        return Catalog()

    advice = {phase: dict(rooms) for phase, rooms in ADVICE.items()}
    for phase, rooms in config.advice.items():
        advice[Phase(phase)].update(rooms)

    return Catalog(
        products=_merge_tier_table(PRODUCTS, config.products),
        price_ranges=_merge_tier_table(PRICE_RANGES, config.price_ranges),
        total_costs=_merge_tier_table(TOTAL_COSTS, config.total_costs),
        advice=advice,
        default_price_range=config.default_price_range or DEFAULT_PRICE_RANGE,
        default_total_cost=config.default_total_cost or DEFAULT_TOTAL_COST,
    )


def load_catalog(config_path: Optional[str] = None) -> Catalog:
    """Load the process catalog (built-in tables + optional YAML overrides)."""
    config = load_catalog_config(config_path)
    catalog = build_catalog(config)
    if config is not None:
        logger.info(
            f"Catalog loaded with overrides: {len(catalog.products)} categories, "
            f"{len(catalog.price_ranges)} budget brackets"
        )
    return catalog
