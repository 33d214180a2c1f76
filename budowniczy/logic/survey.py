"""Survey answers and form validation.

Validation never raises: it returns a field → message map, empty when the
form may leave the Draft state.
"""

from dataclasses import dataclass, asdict
from typing import Any, Mapping

from .catalog import BudgetRange, QualityLevel, RoomType

REQUIRED_MESSAGES = {
    "what_looking_for": "To pole jest wymagane",
    "room_type": "Wybierz pomieszczenie",
    "budget_range": "Wybierz budżet",
    "quality_level": "Wybierz poziom jakości",
}

_ENUMERATED = {
    "room_type": RoomType,
    "budget_range": BudgetRange,
    "quality_level": QualityLevel,
}


@dataclass(frozen=True)
class SurveyAnswers:
    """The five questionnaire fields, as sent to the generation service."""
    what_looking_for: str
    room_type: str
    budget_range: str
    quality_level: str
    additional_info: str = ""

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SurveyAnswers":
        return cls(
            what_looking_for=_text(data.get("what_looking_for")),
            room_type=_text(data.get("room_type")).strip(),
            budget_range=_text(data.get("budget_range")).strip(),
            quality_level=_text(data.get("quality_level")).strip(),
            additional_info=_text(data.get("additional_info")),
        )


def _text(value) -> str:
    return "" if value is None else str(value)


def validate_answers(form: Mapping[str, Any]) -> dict[str, str]:
    """Return per-field validation errors for a submitted form."""
    errors: dict[str, str] = {}
    for name, message in REQUIRED_MESSAGES.items():
        value = _text(form.get(name)).strip()
        if not value:
            errors[name] = message
            continue
        enum_cls = _ENUMERATED.get(name)
        if enum_cls is not None and value not in {e.value for e in enum_cls}:
            errors[name] = message
    return errors
