"""Single source of truth for the recommendation lookup tables.

Hardcoded tables back the offline generator. A YAML override file can replace
or extend entries at process start (see config_loader.load_catalog_config),
but every lookup keeps a defined default so resolution never fails.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


# =============================================================================
# ENUMERATIONS
# =============================================================================

class Tier(str, Enum):
    """Recommendation tier. Price tables historically use low/mid/high."""
    BASIC = "basic"
    OPTIMAL = "optimal"
    PREMIUM = "premium"

    @classmethod
    def parse(cls, value) -> Optional["Tier"]:
        if isinstance(value, Tier):
            return value
        key = str(value or "").strip().lower()
        return _TIER_ALIASES.get(key)


_TIER_ALIASES = {
    "basic": Tier.BASIC, "low": Tier.BASIC,
    "optimal": Tier.OPTIMAL, "mid": Tier.OPTIMAL,
    "premium": Tier.PREMIUM, "high": Tier.PREMIUM,
}


class RoomType(str, Enum):
    LAZIENKA = "Łazienka"
    KUCHNIA = "Kuchnia"
    SALON = "Salon"
    SYPIALNIA = "Sypialnia"
    INNE = "Inne"


class BudgetRange(str, Enum):
    DO_1000 = "do 1000zł"
    OD_1000_DO_5000 = "1000-5000zł"
    OD_5000_DO_10000 = "5000-10000zł"
    POWYZEJ_10000 = "powyżej 10000zł"
    NIE_WIEM = "nie wiem"


class QualityLevel(str, Enum):
    PODSTAWOWA = "Podstawowa"
    DOBRA = "Dobra"
    PREMIUM = "Premium"


class Phase(str, Enum):
    PREPARATION = "preparation"
    INSTALLATION = "installation"
    MAINTENANCE = "maintenance"


class ProductCategory(str, Enum):
    """Query keywords, in match order. PLYTKI is the default category."""
    PLYTKI = "płytki"
    FARBA = "farba"
    PANELE = "panele"


# =============================================================================
# HARDCODED TABLES
# =============================================================================

DEFAULT_CATEGORY = ProductCategory.PLYTKI.value
DEFAULT_ROOM = RoomType.INNE.value
DEFAULT_PRICE_RANGE = "40-60"
DEFAULT_TOTAL_COST = "2000-4000"

PRODUCTS: dict[str, dict[Tier, str]] = {
    ProductCategory.PLYTKI.value: {
        Tier.BASIC: "Ceramika Paradyż Basic",
        Tier.OPTIMAL: "Ceramika Tubądzin Royal",
        Tier.PREMIUM: "Ceramika Marazzi Grande",
    },
    ProductCategory.FARBA.value: {
        Tier.BASIC: "Farba Magnat Style",
        Tier.OPTIMAL: "Farba Dulux EasyCare",
        Tier.PREMIUM: "Farba Benjamin Moore Advance",
    },
    ProductCategory.PANELE.value: {
        Tier.BASIC: "Panele Kronopol Basic",
        Tier.OPTIMAL: "Panele Quick-Step Impressive",
        Tier.PREMIUM: "Panele Pergo Extreme",
    },
}

# Price per m² (zł), keyed by budget bracket
PRICE_RANGES: dict[str, dict[Tier, str]] = {
    BudgetRange.DO_1000.value: {Tier.BASIC: "25-35", Tier.OPTIMAL: "40-55", Tier.PREMIUM: "60-80"},
    BudgetRange.OD_1000_DO_5000.value: {Tier.BASIC: "35-45", Tier.OPTIMAL: "50-70", Tier.PREMIUM: "80-120"},
    BudgetRange.OD_5000_DO_10000.value: {Tier.BASIC: "45-60", Tier.OPTIMAL: "70-90", Tier.PREMIUM: "120-180"},
    BudgetRange.POWYZEJ_10000.value: {Tier.BASIC: "60-80", Tier.OPTIMAL: "90-130", Tier.PREMIUM: "180-250"},
    BudgetRange.NIE_WIEM.value: {Tier.BASIC: "30-40", Tier.OPTIMAL: "50-70", Tier.PREMIUM: "80-120"},
}

# Total project cost (zł), keyed by budget bracket
TOTAL_COSTS: dict[str, dict[Tier, str]] = {
    BudgetRange.DO_1000.value: {Tier.BASIC: "800-1200", Tier.OPTIMAL: "1200-1800", Tier.PREMIUM: "1800-2500"},
    BudgetRange.OD_1000_DO_5000.value: {Tier.BASIC: "1500-2500", Tier.OPTIMAL: "2500-4000", Tier.PREMIUM: "4000-6000"},
    BudgetRange.OD_5000_DO_10000.value: {Tier.BASIC: "4000-6000", Tier.OPTIMAL: "6000-8500", Tier.PREMIUM: "8500-12000"},
    BudgetRange.POWYZEJ_10000.value: {Tier.BASIC: "8000-12000", Tier.OPTIMAL: "12000-18000", Tier.PREMIUM: "18000-25000"},
    BudgetRange.NIE_WIEM.value: {Tier.BASIC: "2000-3000", Tier.OPTIMAL: "3000-5000", Tier.PREMIUM: "5000-8000"},
}

ADVICE: dict[Phase, dict[str, str]] = {
    Phase.PREPARATION: {
        RoomType.LAZIENKA.value: "Sprawdź szczelność instalacji wodnej i wykonaj hydroizolację",
        RoomType.KUCHNIA.value: "Zabezpiecz instalację elektryczną i zaplanuj miejsca pod AGD",
        RoomType.SALON.value: "Wyrównaj podłoże i sprawdź poziom podłogi",
        RoomType.SYPIALNIA.value: "Zapewnij odpowiednią wentylację i izolację akustyczną",
        RoomType.INNE.value: "Przygotuj podłoże zgodnie z wymaganiami producenta",
    },
    Phase.INSTALLATION: {
        RoomType.LAZIENKA.value: "Użyj wodoodpornych klejów i fug, zachowaj dylatacje",
        RoomType.KUCHNIA.value: "Zastosuj kleje odporne na tłuszcze i wysokie temperatury",
        RoomType.SALON.value: "Rozpocznij montaż od środka pomieszczenia",
        RoomType.SYPIALNIA.value: "Zachowaj ciszę podczas prac, pracuj etapami",
        RoomType.INNE.value: "Przestrzegaj instrukcji producenta i norm bezpieczeństwa",
    },
    Phase.MAINTENANCE: {
        RoomType.LAZIENKA.value: "Regularnie wietrz pomieszczenie i czyść fugi",
        RoomType.KUCHNIA.value: "Chroń przed tłuszczami i używaj odpowiednich środków",
        RoomType.SALON.value: "Regularne odkurzanie i ochrona przed zarysowaniami",
        RoomType.SYPIALNIA.value: "Utrzymuj odpowiednią wilgotność powietrza",
        RoomType.INNE.value: "Regularna konserwacja zgodnie z zaleceniami producenta",
    },
}


# =============================================================================
# CATALOG
# =============================================================================

@dataclass(frozen=True)
class Catalog:
    """Immutable lookup tables. All resolve_* methods are total."""
    products: dict[str, dict[Tier, str]] = field(default_factory=lambda: PRODUCTS)
    price_ranges: dict[str, dict[Tier, str]] = field(default_factory=lambda: PRICE_RANGES)
    total_costs: dict[str, dict[Tier, str]] = field(default_factory=lambda: TOTAL_COSTS)
    advice: dict[Phase, dict[str, str]] = field(default_factory=lambda: ADVICE)
    default_price_range: str = DEFAULT_PRICE_RANGE
    default_total_cost: str = DEFAULT_TOTAL_COST

    def resolve_product(self, query_text: str, tier) -> str:
        """First keyword contained in query_text (case-insensitive) wins."""
        parsed = Tier.parse(tier) or Tier.OPTIMAL
        query = (query_text or "").lower()
        keyword = next(
            (k for k in self.products if k.lower() in query and parsed in self.products[k]),
            DEFAULT_CATEGORY,
        )
        return self.products[keyword][parsed]

    def resolve_price_range(self, budget_bracket: str, tier) -> str:
        return _lookup(self.price_ranges, budget_bracket, tier, self.default_price_range)

    def resolve_total_cost(self, budget_bracket: str, tier) -> str:
        return _lookup(self.total_costs, budget_bracket, tier, self.default_total_cost)

    def resolve_advice(self, room_type: str, phase) -> str:
        try:
            phase = Phase(phase)
        except ValueError:
            phase = Phase.PREPARATION
        tips = self.advice[phase]
        room = str(room_type or "").strip()
        return tips.get(room) or tips[DEFAULT_ROOM]


def _lookup(table: dict[str, dict[Tier, str]], bracket: str, tier, default: str) -> str:
    parsed = Tier.parse(tier)
    if parsed is None:
        return default
    return table.get(bracket, {}).get(parsed) or default


# =============================================================================
# PROCESS CATALOG (loaded once at start)
# =============================================================================

_catalog: Optional[Catalog] = None


def get_catalog() -> Catalog:
    """Get the process catalog, loading YAML overrides on first use."""
    global _catalog
    if _catalog is None:
        from budowniczy.config_loader import load_catalog
        _catalog = load_catalog()
    return _catalog


def reset_catalog(catalog: Optional[Catalog] = None) -> None:
    """Replace the process catalog (None forces a reload on next use)."""
    global _catalog
    _catalog = catalog


def resolve_product(query_text: str, tier) -> str:
    return get_catalog().resolve_product(query_text, tier)


def resolve_price_range(budget_bracket: str, tier) -> str:
    return get_catalog().resolve_price_range(budget_bracket, tier)


def resolve_total_cost(budget_bracket: str, tier) -> str:
    return get_catalog().resolve_total_cost(budget_bracket, tier)


def resolve_advice(room_type: str, phase) -> str:
    return get_catalog().resolve_advice(room_type, phase)
