"""Unit tests for whole-form validation.

Tests cover:
- Schema aggregation with single rules and rule lists
- Field ordering and fields outside the schema
- Schema misuse in lenient and strict mode
- Deriving a form schema from a JSON Schema definition
"""

import logging

import pytest

from formstate.errors import SchemaError
from formstate.rules import (
    EMAIL_MESSAGE,
    NUMBER_MESSAGE,
    REQUIRED_MESSAGE,
    compose,
    email,
    min_length,
    required,
)
from formstate.validation import create_validator, schema_from_json_schema


class TestCreateValidator:
    """Test create_validator schema aggregation."""

    def test_reports_each_failing_field(self):
        """Should report one message per failing field."""
        validate = create_validator({"name": required, "email": compose(required, email)})
        assert validate({"name": "", "email": "x"}) == {
            "name": REQUIRED_MESSAGE,
            "email": EMAIL_MESSAGE,
        }

    def test_valid_values_produce_no_errors(self):
        """Should return no errors for valid values."""
        validate = create_validator({"name": required, "email": compose(required, email)})
        assert validate({"name": "Ada", "email": "ada@example.com"}) == {}

    def test_rule_list_short_circuits(self):
        """Should record only the first failing rule of a list."""
        validate = create_validator({"password": [required, min_length(8)]})
        assert validate({"password": ""}) == {"password": REQUIRED_MESSAGE}
        assert validate({"password": "short"}) == {"password": "Must be at least 8 characters"}
        assert validate({"password": "long enough"}) == {}

    def test_rule_tuple_is_accepted(self):
        """Should accept a tuple of rules."""
        validate = create_validator({"password": (required, min_length(8))})
        assert validate({"password": "short"}) == {"password": "Must be at least 8 characters"}

    def test_rule_list_stops_after_failure(self):
        """Should not evaluate rules after the first failure."""
        calls = []

        def spy(value):
            calls.append(value)
            return ""

        validate = create_validator({"name": [required, spy]})
        validate({"name": ""})
        assert calls == []

    def test_fields_outside_schema_are_ignored(self):
        """Should ignore values without a schema entry."""
        validate = create_validator({"name": required})
        assert validate({"name": "Ada", "nickname": ""}) == {}

    def test_missing_values_validated_as_none(self):
        """Should validate schema fields absent from the values as None."""
        validate = create_validator({"name": required, "email": email})
        assert validate({"email": "ada@example.com"}) == {"name": REQUIRED_MESSAGE}

    def test_errors_follow_schema_order(self):
        """Should report errors in schema order."""
        validate = create_validator({"c": required, "a": required, "b": required})
        assert list(validate({})) == ["c", "a", "b"]

    def test_idempotent(self):
        """Should produce identical errors for the same values."""
        validate = create_validator({"name": required, "email": email})
        values = {"name": "", "email": "bad"}
        assert validate(values) == validate(values)

    def test_empty_schema(self):
        """Should never report errors for an empty schema."""
        assert create_validator({})({"anything": ""}) == {}


class TestSchemaMisuse:
    """Test handling of malformed schema entries."""

    def test_invalid_entry_ignored_with_warning(self, caplog):
        """Should log a warning and never report errors for the entry."""
        with caplog.at_level(logging.WARNING, logger="formstate.validation"):
            validate = create_validator({"name": "required", "email": email})

        assert "name" in caplog.text
        assert validate({"name": "", "email": "bad"}) == {"email": EMAIL_MESSAGE}

    def test_list_with_non_callable_ignored(self, caplog):
        """Should ignore a rule list containing a non-callable."""
        with caplog.at_level(logging.WARNING, logger="formstate.validation"):
            validate = create_validator({"name": [required, 5]})

        assert validate({"name": ""}) == {}
        assert len(caplog.records) == 1

    def test_strict_mode_raises(self):
        """Should raise SchemaError naming the field in strict mode."""
        with pytest.raises(SchemaError) as exc_info:
            create_validator({"name": required, "age": 18}, strict=True)

        assert exc_info.value.field == "age"
        assert exc_info.value.entry == 18
        assert "age" in str(exc_info.value)

    def test_strict_mode_accepts_valid_schema(self):
        """Should validate normally in strict mode."""
        validate = create_validator({"name": [required]}, strict=True)
        assert validate({"name": ""}) == {"name": REQUIRED_MESSAGE}


class TestSchemaFromJsonSchema:
    """Test deriving a form schema from JSON Schema."""

    SCHEMA = {
        "type": "object",
        "properties": {
            "name": {"type": "string", "minLength": 2, "maxLength": 20},
            "email": {"type": "string", "format": "email"},
            "age": {"type": "integer", "minimum": 18, "maximum": 120},
            "move_in": {"type": "string", "format": "date"},
            "confirm": {"const": "yes"},
            "notes": {"type": "string"},
        },
        "required": ["name", "email", "age"],
    }

    def test_required_fields(self):
        """Should add required for every required property."""
        validate = create_validator(schema_from_json_schema(self.SCHEMA))
        errors = validate({})
        assert errors == {
            "name": REQUIRED_MESSAGE,
            "email": REQUIRED_MESSAGE,
            "age": REQUIRED_MESSAGE,
        }

    def test_keyword_rules(self):
        """Should map keywords to their rules."""
        validate = create_validator(schema_from_json_schema(self.SCHEMA))
        errors = validate({
            "name": "A",
            "email": "not-an-email",
            "age": "17",
            "move_in": "banana",
            "confirm": "no",
        })
        assert errors == {
            "name": "Must be at least 2 characters",
            "email": EMAIL_MESSAGE,
            "age": "Must be at least 18",
            "move_in": "Please enter a valid date",
            "confirm": "Must match 'yes'",
        }

    def test_number_checked_before_bounds(self):
        """Should check the number type before numeric bounds."""
        validate = create_validator(schema_from_json_schema(self.SCHEMA))
        assert validate({"name": "Ada", "email": "a@b.co", "age": "abc"}) == {"age": NUMBER_MESSAGE}

    def test_valid_submission(self):
        """Should accept values satisfying every keyword."""
        validate = create_validator(schema_from_json_schema(self.SCHEMA))
        values = {"name": "Ada", "email": "ada@example.com", "age": 36, "move_in": "2024-06-01"}
        assert validate(values) == {}

    def test_unconstrained_properties_omitted(self):
        """Should leave out properties without mapped keywords."""
        schema = schema_from_json_schema(self.SCHEMA)
        assert "notes" not in schema

    def test_required_without_property(self):
        """Should add required for names without a property."""
        schema = schema_from_json_schema({"type": "object", "required": ["token"]})
        assert create_validator(schema)({}) == {"token": REQUIRED_MESSAGE}

    def test_boolean_property_schemas(self):
        """Should skip boolean property schemas but keep them required."""
        schema = schema_from_json_schema({
            "type": "object",
            "properties": {"notes": True, "token": False, "email": {"format": "email"}},
            "required": ["token"],
        })
        assert "notes" not in schema
        assert create_validator(schema)({"email": "bad"}) == {
            "email": EMAIL_MESSAGE,
            "token": REQUIRED_MESSAGE,
        }

    def test_invalid_json_schema_raises(self):
        """Should raise SchemaError for a malformed JSON Schema."""
        with pytest.raises(SchemaError):
            schema_from_json_schema({"type": "nonsense"})
