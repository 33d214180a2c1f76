"""Offline recommendation document.

Used whenever remote generation is unavailable. Built only from catalog lookups
and the survey's own values, so identical answers give byte-identical output.
"""

from .catalog import Phase, Tier, get_catalog
from .survey import SurveyAnswers

OFFLINE_HEADING = "ANALIZA POTRZEB (TRYB OFFLINE)"

# (tier, heading, store, description)
TIER_SECTIONS = (
    (Tier.BASIC, "🥉 OPCJA EKONOMICZNA", "Castorama",
     "Solidna jakość w przystępnej cenie, idealna dla osób o ograniczonym budżecie."),
    (Tier.OPTIMAL, "🥈 OPCJA OPTYMALNA (POLECANA)", "Leroy Merlin",
     "Najlepszy stosunek jakości do ceny. Trwałość i estetyka w rozsądnej cenie."),
    (Tier.PREMIUM, "🥇 OPCJA PREMIUM", "OBI",
     "Najwyższa jakość, długotrwałość i wyjątkowy design."),
)

PHASE_LABELS = (
    (Phase.PREPARATION, "Przygotowanie"),
    (Phase.INSTALLATION, "Montaż"),
    (Phase.MAINTENANCE, "Konserwacja"),
)

COST_LABELS = (
    (Tier.BASIC, "Opcja ekonomiczna"),
    (Tier.OPTIMAL, "Opcja optymalna"),
    (Tier.PREMIUM, "Opcja premium"),
)

SETUP_FOOTER = """## 🔧 JAK SKONFIGUROWAĆ PRAWDZIWE AI?

1. **Sprawdź plik .env** - czy zawiera BUDOWNICZY_GENERATION_URL i BUDOWNICZY_GENERATION_KEY
2. **Uruchom usługę generowania** - endpoint `/functions/v1/analyze-needs` musi być dostępny
3. **Dodaj klucz OpenAI** - zmienna OPENAI_API_KEY po stronie usługi generowania
4. **Przetestuj połączenie** - sprawdź logi usługi generowania

Szczegółowe instrukcje znajdziesz w pliku `README.md`."""


def generate_offline_document(answers: SurveyAnswers) -> str:
    """Compose the fixed-section offline recommendation document."""
    catalog = get_catalog()
    lines = [
        f"## 🔍 {OFFLINE_HEADING}",
        "",
        "⚠️ **Uwaga**: Obecnie używamy trybu offline. Aby uzyskać prawdziwe rekomendacje AI, "
        "skonfiguruj usługę generowania.",
        "",
        f"Szukasz **{answers.what_looking_for}** do **{answers.room_type.lower()}i** "
        f"z budżetem **{answers.budget_range}** w jakości **{answers.quality_level.lower()}**.",
        "",
        "## 💡 REKOMENDOWANE OPCJE",
    ]

    for tier, heading, store, description in TIER_SECTIONS:
        lines += [
            "",
            f"### {heading}",
            f"**Produkt:** {catalog.resolve_product(answers.what_looking_for, tier)}",
            f"**Cena:** {catalog.resolve_price_range(answers.budget_range, tier)} zł/m²",
            f"**Sklep:** {store}",
            f"**Opis:** {description}",
        ]

    lines += ["", "## 🛠️ PRAKTYCZNE PORADY", ""]
    for phase, label in PHASE_LABELS:
        lines.append(f"- **{label}:** {catalog.resolve_advice(answers.room_type, phase)}")

    lines += ["", "## 💰 SZACUNKOWY KOSZT CAŁKOWITY", ""]
    for tier, label in COST_LABELS:
        lines.append(f"- **{label}:** {catalog.resolve_total_cost(answers.budget_range, tier)} zł")

    lines += [
        "",
        "*Ceny zawierają materiały główne i pomocnicze. "
        "Koszt pracy może wynosić dodatkowo 30-50% wartości materiałów.*",
        "",
        "---",
        "",
        SETUP_FOOTER,
    ]
    return "\n".join(lines)
