"""Tests for template variable extraction and substitution."""

import pytest

from supportsignal.prompts.resolver import (
    VariableDefinition,
    analyze_template,
    extract_variables,
    get_nested_value,
    resolve_prompt,
    validate_and_convert_value,
    validate_template,
    validate_template_syntax,
)


class TestExtraction:
    """Tests for placeholder discovery and validation."""

    def test_extract_variables_unique_in_order(self):
        template = "{{b}} then {{a}} then {{b}} and {{incident.location}}"

        assert extract_variables(template) == ["b", "a", "incident.location"]

    def test_validate_template_reports_undefined_and_unused_required(self):
        definitions = [
            VariableDefinition("name", "Name", required=True),
            VariableDefinition("place", "Place", required=True),
        ]

        errors = validate_template("Hi {{name}} from {{other}}", definitions)

        assert "Template uses undefined variable: other" in errors
        assert 'Required variable "place" not found in template' in errors

    def test_syntax_errors(self):
        errors = validate_template_syntax("{{ok}} {{}} {{1bad}} {{open")

        assert "Unmatched braces: 4 opening, 3 closing" in errors
        assert "Empty variable placeholder found: {{}}" in errors
        assert "Invalid variable name format: 1bad" in errors

    def test_analyze_template(self):
        analysis = analyze_template("{{a}} {{b}}")

        assert analysis["variables"] == ["a", "b"]
        assert analysis["syntax_errors"] == []
        assert analysis["estimated_complexity"] == 3


class TestConversion:
    """Tests for typed value coercion."""

    @pytest.mark.parametrize(
        "value, expected",
        [("42", 42), ("2.5", 2.5), (7, 7)],
    )
    def test_number_conversion(self, value, expected):
        assert validate_and_convert_value(value, "number", "n") == (expected, None)

    def test_number_conversion_failure(self):
        value, error = validate_and_convert_value("abc", "number", "n")

        assert value is None
        assert error == 'Variable "n" cannot be converted to number: abc'

    @pytest.mark.parametrize("value, expected", [("yes", True), ("0", False), (True, True)])
    def test_boolean_conversion(self, value, expected):
        assert validate_and_convert_value(value, "boolean", "flag") == (expected, None)

    def test_boolean_conversion_failure(self):
        _, error = validate_and_convert_value("maybe", "boolean", "flag")

        assert "cannot be converted to boolean" in error

    def test_nested_lookup(self):
        data = {"incident": {"location": "Kitchen"}}

        assert get_nested_value(data, "incident.location") == "Kitchen"
        assert get_nested_value(data, "incident.missing.deeper") is None


class TestResolvePrompt:
    """Tests for full template resolution."""

    def test_substitutes_and_applies_defaults(self):
        definitions = [
            VariableDefinition("name", "Name", required=True),
            VariableDefinition("place", "Place", default_value="somewhere"),
        ]

        result = resolve_prompt("{{name}} at {{place}}", {"name": "Emma"}, definitions)

        assert result.resolved_prompt == "Emma at somewhere"
        assert result.variables_used == {"name": "Emma", "place": "somewhere"}
        assert result.errors == []

    def test_missing_required_variable_left_in_place(self):
        definitions = [VariableDefinition("name", "Name", required=True)]

        result = resolve_prompt("Hello {{name}}", {}, definitions)

        assert result.resolved_prompt == "Hello {{name}}"
        assert 'Required variable "name" is missing' in result.errors
        assert 'Variable "name" resolved to null/undefined' in result.errors

    def test_booleans_render_lowercase(self):
        definitions = [VariableDefinition("urgent", "Urgent", type="boolean")]

        result = resolve_prompt("urgent={{urgent}}", {"urgent": "on"}, definitions)

        assert result.resolved_prompt == "urgent=true"
