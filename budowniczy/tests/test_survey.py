"""Survey answers and form validation."""

import pytest

from budowniczy.logic.survey import REQUIRED_MESSAGES, SurveyAnswers, validate_answers


class TestValidateAnswers:
    def test_valid_form_has_no_errors(self, valid_form):
        assert validate_answers(valid_form) == {}

    def test_additional_info_is_optional(self, valid_form):
        del valid_form["additional_info"]
        assert validate_answers(valid_form) == {}

    def test_empty_query_is_the_only_error(self, valid_form):
        valid_form["what_looking_for"] = ""
        assert validate_answers(valid_form) == {"what_looking_for": "To pole jest wymagane"}

    def test_whitespace_counts_as_empty(self, valid_form):
        valid_form["what_looking_for"] = "   "
        assert list(validate_answers(valid_form)) == ["what_looking_for"]

    def test_empty_form_flags_all_required(self):
        assert validate_answers({}) == REQUIRED_MESSAGES

    @pytest.mark.parametrize("field,value", [
        ("room_type", "Garaż"),
        ("budget_range", "milion"),
        ("quality_level", "Luksusowa"),
    ])
    def test_value_outside_enumeration(self, valid_form, field, value):
        valid_form[field] = value
        assert validate_answers(valid_form) == {field: REQUIRED_MESSAGES[field]}


class TestSurveyAnswers:
    def test_from_dict_trims_enumerated_fields(self):
        answers = SurveyAnswers.from_dict({
            "what_looking_for": "farba",
            "room_type": " Salon ",
            "budget_range": "nie wiem",
            "quality_level": "Premium\n",
            "additional_info": None,
        })
        assert answers.room_type == "Salon"
        assert answers.quality_level == "Premium"
        assert answers.additional_info == ""

    def test_to_dict_uses_wire_field_names(self, answers):
        assert set(answers.to_dict()) == {
            "what_looking_for", "room_type", "budget_range", "quality_level", "additional_info",
        }
