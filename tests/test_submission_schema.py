"""Tests for submission validation generated from field lists."""

import pytest

from formforge.fields import (
    SubmissionValidationError,
    build_submission_model,
    default_values,
    parse_fields,
    submission_json_schema,
    validate_submission,
)


def _errors(raw_fields, data):
    with pytest.raises(SubmissionValidationError) as exc_info:
        validate_submission(parse_fields(raw_fields), data)
    return exc_info.value.errors


class TestRequired:
    def test_missing_required_field(self):
        errors = _errors([{"id": "name", "type": "text", "required": True}], {})
        assert errors == {"name": "This field is required"}

    @pytest.mark.parametrize("blank", ["", None])
    def test_blank_counts_as_missing(self, blank):
        errors = _errors([{"id": "name", "type": "text", "required": True}], {"name": blank})
        assert errors == {"name": "This field is required"}

    def test_required_checkbox_message(self):
        errors = _errors([{"id": "c", "type": "checkbox", "required": True}], {"c": []})
        assert errors == {"c": "Please select at least one option"}

    def test_optional_blank_fields_omitted(self):
        fields = parse_fields([
            {"id": "name", "type": "text"},
            {"id": "age", "type": "number"},
            {"id": "c", "type": "checkbox"},
        ])
        assert validate_submission(fields, {"name": "", "age": "", "c": []}) == {}

    def test_unknown_keys_dropped(self):
        fields = parse_fields([{"id": "name", "type": "text"}])
        assert validate_submission(fields, {"name": "Ada", "extra": 1}) == {"name": "Ada"}

    def test_reports_every_failing_field(self):
        errors = _errors(
            [
                {"id": "a", "type": "text", "required": True},
                {"id": "b", "type": "email", "required": True},
            ],
            {},
        )
        assert set(errors) == {"a", "b"}


class TestText:
    def test_min_length(self):
        errors = _errors([{"id": "t", "type": "text", "settings": {"minLength": 3}}], {"t": "ab"})
        assert errors == {"t": "Must be at least 3 characters"}

    def test_max_length(self):
        errors = _errors([{"id": "t", "type": "textarea", "settings": {"maxLength": 5}}], {"t": "toolong"})
        assert errors == {"t": "Must be at most 5 characters"}

    def test_pattern_uses_search(self):
        fields = parse_fields([{"id": "zip", "type": "text", "settings": {"pattern": "[0-9]{5}"}}])
        assert validate_submission(fields, {"zip": "ZIP 12345"}) == {"zip": "ZIP 12345"}

    def test_pattern_mismatch(self):
        errors = _errors([{"id": "zip", "type": "text", "settings": {"pattern": "^[0-9]{5}$"}}], {"zip": "abc"})
        assert errors == {"zip": "Does not match the required format"}

    def test_non_string_rejected(self):
        errors = _errors([{"id": "t", "type": "text"}], {"t": 42})
        assert errors == {"t": "Must be text"}

    def test_length_checked_before_pattern(self):
        errors = _errors(
            [{"id": "t", "type": "text", "settings": {"minLength": 4, "pattern": "^x+$"}}],
            {"t": "ab"},
        )
        assert errors == {"t": "Must be at least 4 characters"}


class TestNumber:
    def test_numeric_string_coerced(self):
        fields = parse_fields([{"id": "age", "type": "number"}])
        assert validate_submission(fields, {"age": "42"}) == {"age": 42.0}

    def test_not_a_number(self):
        errors = _errors([{"id": "age", "type": "number"}], {"age": "forty"})
        assert errors == {"age": "Must be a number"}

    def test_inclusive_bounds(self):
        fields = parse_fields([{"id": "n", "type": "number", "settings": {"min": 1, "max": 10}}])
        assert validate_submission(fields, {"n": 1}) == {"n": 1.0}
        assert validate_submission(fields, {"n": 10}) == {"n": 10.0}

    def test_below_min(self):
        errors = _errors([{"id": "n", "type": "number", "settings": {"min": 18}}], {"n": 17})
        assert errors == {"n": "Must be at least 18"}

    def test_above_max_keeps_fraction(self):
        errors = _errors([{"id": "n", "type": "number", "settings": {"max": 2.5}}], {"n": 3})
        assert errors == {"n": "Must be at most 2.5"}

    def test_step_not_enforced(self):
        fields = parse_fields([{"id": "n", "type": "number", "settings": {"step": 5}}])
        assert validate_submission(fields, {"n": 3}) == {"n": 3.0}


class TestEmail:
    def test_valid_address(self):
        fields = parse_fields([{"id": "e", "type": "email"}])
        assert validate_submission(fields, {"e": "ada@acme.io"}) == {"e": "ada@acme.io"}

    def test_invalid_address(self):
        errors = _errors([{"id": "e", "type": "email"}], {"e": "not-an-email"})
        assert errors == {"e": "Please enter a valid email address"}

    def test_allowed_domain_case_insensitive(self):
        fields = parse_fields([{"id": "e", "type": "email", "settings": {"allowedDomains": ["acme.io"]}}])
        assert validate_submission(fields, {"e": "ada@ACME.io"})["e"].lower() == "ada@acme.io"

    def test_disallowed_domain(self):
        errors = _errors(
            [{"id": "e", "type": "email", "settings": {"allowedDomains": ["acme.io", "globex.io"]}}],
            {"e": "ada@initech.io"},
        )
        assert errors == {"e": "Email domain must be one of: acme.io, globex.io"}


class TestChoices:
    def test_radio_accepts_option(self):
        fields = parse_fields([{"id": "plan", "type": "radio", "options": ["Free", "Pro"]}])
        assert validate_submission(fields, {"plan": "Pro"}) == {"plan": "Pro"}

    def test_radio_rejects_unknown_option(self):
        errors = _errors([{"id": "plan", "type": "radio", "options": ["Free", "Pro"]}], {"plan": "Gold"})
        assert errors == {"plan": "Invalid option"}

    def test_checkbox_promotes_bare_string(self):
        fields = parse_fields([{"id": "c", "type": "checkbox", "options": ["a", "b"]}])
        assert validate_submission(fields, {"c": "a"}) == {"c": ["a"]}

    def test_checkbox_rejects_unknown_item(self):
        errors = _errors([{"id": "c", "type": "checkbox", "options": ["a", "b"]}], {"c": ["a", "z"]})
        assert errors == {"c": "Invalid option"}

    def test_checkbox_min_selections(self):
        errors = _errors(
            [{"id": "c", "type": "checkbox", "options": ["a", "b", "c"], "settings": {"minSelections": 2}}],
            {"c": ["a"]},
        )
        assert errors == {"c": "Select at least 2 options"}

    def test_checkbox_max_selections(self):
        errors = _errors(
            [{"id": "c", "type": "checkbox", "options": ["a", "b", "c"], "settings": {"maxSelections": 1}}],
            {"c": ["a", "b"]},
        )
        assert errors == {"c": "Select at most 1 options"}

    def test_default_options_accepted(self):
        fields = parse_fields([{"id": "r", "type": "radio"}])
        assert validate_submission(fields, {"r": "Option 2"}) == {"r": "Option 2"}


class TestGeneratedModel:
    def test_ids_that_are_not_identifiers(self):
        fields = parse_fields([{"id": "field-1", "type": "text"}, {"id": "q.2", "type": "number"}])
        assert validate_submission(fields, {"field-1": "x", "q.2": 2}) == {"field-1": "x", "q.2": 2.0}

    def test_missing_answers_reported_by_field_id(self):
        errors = _errors(
            [
                {"id": "first-name", "type": "text", "required": True},
                {"id": "email", "type": "email"},
                {"id": "q.2", "type": "number", "required": True},
            ],
            {"email": "ada@acme.io"},
        )
        assert errors == {"first-name": "This field is required", "q.2": "This field is required"}

    def test_ids_shaped_like_attribute_names(self):
        raw = [
            {"id": "field_1", "type": "number", "settings": {"min": 5}},
            {"id": "field_0", "type": "text", "required": True},
        ]
        assert _errors(raw, {"field_1": 2}) == {"field_1": "Must be at least 5", "field_0": "This field is required"}
        assert validate_submission(parse_fields(raw), {"field_1": 6, "field_0": "x"}) == {"field_1": 6.0, "field_0": "x"}

    def test_model_name(self):
        model = build_submission_model(parse_fields([{"id": "a", "type": "text"}]), model_name="Contact")
        assert model.__name__ == "Contact"

    def test_json_schema_keyed_by_field_id(self):
        fields = parse_fields([
            {"id": "name", "type": "text", "label": "Name", "settings": {"maxLength": 20}},
            {"id": "plan", "type": "radio", "options": ["Free", "Pro"]},
        ])
        schema = submission_json_schema(fields)
        assert set(schema["properties"]) == {"name", "plan"}
        assert schema["properties"]["name"]["title"] == "Name"
        assert {"type": "string", "maxLength": 20} in schema["properties"]["name"]["anyOf"]
        assert any(s.get("enum") == ["Free", "Pro"] for s in schema["properties"]["plan"]["anyOf"])

    def test_default_values(self):
        fields = parse_fields([
            {"id": "name", "type": "text"},
            {"id": "email", "type": "email"},
            {"id": "age", "type": "number"},
            {"id": "bio", "type": "textarea"},
            {"id": "plan", "type": "radio"},
            {"id": "topics", "type": "checkbox"},
        ])
        assert default_values(fields) == {
            "name": "",
            "email": "",
            "age": "",
            "bio": "",
            "plan": "",
            "topics": [],
        }
