"""Tests for the validation engine."""

import pytest

from envknobs import builder as env
from envknobs.exceptions import SchemaError, ValidationError
from envknobs.types import FieldSpec
from envknobs.validator import (
    CUSTOM_VALIDATION_FAILED,
    MISSING_REQUIRED,
    EnvValidator,
    resolve_field,
    validate,
)


def errors_for(schema, source):
    with pytest.raises(ValidationError) as exc_info:
        validate(schema, source)
    return list(exc_info.value.errors)


class TestResolveField:
    """Test single-field resolution."""

    def test_missing_required(self):
        resolution = resolve_field(env.string(required=True), None)
        assert not resolution.ok
        assert resolution.reason == MISSING_REQUIRED

    def test_missing_optional_is_none(self):
        resolution = resolve_field(env.string(), None)
        assert resolution.ok
        assert resolution.value is None

    def test_default_used_when_absent(self):
        resolution = resolve_field(env.number(required=True, default=3000), None)
        assert resolution.ok
        assert resolution.value == 3000

    def test_coercion_failure_reason(self):
        assert resolve_field(env.number(), "abc").reason == "Invalid number"

    def test_validator_not_called_after_coercion_failure(self):
        calls = []
        spec = env.number(validator=lambda v: calls.append(v) or True)
        resolve_field(spec, "abc")
        assert calls == []

    def test_validator_not_called_when_missing(self):
        calls = []
        spec = env.number(required=True, validator=lambda v: calls.append(v) or True)
        resolve_field(spec, None)
        assert calls == []

    def test_validator_runs_on_default(self):
        spec = env.number(default=500, validator=lambda p: 1000 <= p <= 9999)
        assert resolve_field(spec, None).reason == CUSTOM_VALIDATION_FAILED

    def test_raising_validator_counts_as_failure(self):
        def explode(value):
            raise RuntimeError("boom")

        assert resolve_field(env.string(validator=explode), "x").reason == CUSTOM_VALIDATION_FAILED

    def test_validator_on_absent_optional_receives_none(self):
        seen = []
        spec = env.string(validator=lambda v: seen.append(v) or True)
        assert resolve_field(spec, None).ok
        assert seen == [None]


class TestValidate:
    """Test whole-schema validation."""

    def test_valid_source(self, sample_schema, valid_source):
        result = validate(sample_schema, valid_source)
        assert result == {
            "APP_NAME": "demo",
            "PORT": 8080,
            "DEBUG": True,
            "API_URL": "https://api.example.com",
            "ADMIN_EMAIL": "admin@example.com",
            "FEATURES": {"beta": True},
        }

    def test_one_entry_per_field(self, sample_schema):
        result = validate(sample_schema, {"APP_NAME": "demo", "API_URL": "https://x.io"})
        assert list(result) == list(sample_schema)
        assert result["PORT"] == 3000
        assert result["DEBUG"] is False
        assert result["ADMIN_EMAIL"] is None
        assert result["FEATURES"] == {"beta": False}

    def test_missing_required_field(self, sample_schema, valid_source):
        del valid_source["API_URL"]
        assert errors_for(sample_schema, valid_source) == ["API_URL: Required value is missing"]

    def test_invalid_number(self):
        schema = {"PORT": env.number()}
        assert errors_for(schema, {"PORT": "abc"}) == ["PORT: Invalid number"]
        assert validate(schema, {"PORT": "3000"}) == {"PORT": 3000}

    def test_boolean_literals(self):
        schema = {"FLAG": env.boolean()}
        for raw in ("true", "TRUE", "1"):
            assert validate(schema, {"FLAG": raw}) == {"FLAG": True}
        for raw in ("false", "0"):
            assert validate(schema, {"FLAG": raw}) == {"FLAG": False}
        assert errors_for(schema, {"FLAG": "yes"}) == ["FLAG: Invalid boolean"]

    def test_json(self):
        schema = {"DATA": env.json()}
        assert validate(schema, {"DATA": '{"key":"value"}'}) == {"DATA": {"key": "value"}}
        assert errors_for(schema, {"DATA": "{bad json"}) == ["DATA: Invalid JSON"]

    def test_custom_validator(self):
        schema = {"PORT": env.number(validator=lambda p: 1000 <= p <= 9999)}
        assert errors_for(schema, {"PORT": "500"}) == ["PORT: Custom validation failed"]
        assert validate(schema, {"PORT": "3000"}) == {"PORT": 3000}

    def test_all_errors_reported_in_schema_order(self):
        schema = env.define_schema(
            C=env.string(required=True),
            A=env.string(required=True),
            B=env.string(required=True),
        )
        assert errors_for(schema, {}) == [
            "C: Required value is missing",
            "A: Required value is missing",
            "B: Required value is missing",
        ]

    def test_mixed_failures(self, sample_schema, valid_source):
        valid_source.update(PORT="500", DEBUG="maybe", ADMIN_EMAIL="nobody")
        del valid_source["APP_NAME"]

        with pytest.raises(ValidationError) as exc_info:
            validate(sample_schema, valid_source)

        error = exc_info.value
        assert error.message == "Environment validation failed"
        assert list(error.errors) == [
            "APP_NAME: Required value is missing",
            "PORT: Custom validation failed",
            "DEBUG: Invalid boolean",
            "ADMIN_EMAIL: Invalid email",
        ]
        assert error.field_errors[1] == ("PORT", "Custom validation failed")
        assert error.context["fields"] == ["APP_NAME", "PORT", "DEBUG", "ADMIN_EMAIL"]
        assert "DEBUG: Invalid boolean" in str(error)

    def test_idempotent(self, sample_schema, valid_source):
        assert validate(sample_schema, valid_source) == validate(sample_schema, valid_source)

    def test_source_not_mutated(self, sample_schema, valid_source):
        snapshot = dict(valid_source)
        validate(sample_schema, valid_source)
        assert valid_source == snapshot

    def test_defaults_to_process_environment(self, monkeypatch):
        monkeypatch.setenv("ENVKNOBS_TEST_PORT", "4321")
        assert validate({"ENVKNOBS_TEST_PORT": env.number()}) == {"ENVKNOBS_TEST_PORT": 4321}

    def test_empty_schema(self):
        assert validate({}, {"ANYTHING": "x"}) == {}

    def test_plain_dict_of_field_specs(self):
        schema = {"NAME": FieldSpec("string", default="svc")}
        assert validate(schema, {}) == {"NAME": "svc"}

    def test_plain_dict_entries_must_be_field_specs(self):
        with pytest.raises(SchemaError):
            validate({"NAME": "string"}, {})


class TestEnvValidator:
    """Test the EnvValidator entry points."""

    def test_check_does_not_raise(self, sample_schema):
        report = EnvValidator.check(sample_schema, {"PORT": "abc"})
        assert not report.ok
        assert report.errors == [
            "APP_NAME: Required value is missing",
            "PORT: Invalid number",
            "API_URL: Required value is missing",
        ]
        assert report.values["DEBUG"] is False
        assert "PORT" not in report.values

    def test_check_raise_for_errors(self):
        report = EnvValidator.check({"A": env.string(required=True)}, {})
        with pytest.raises(ValidationError):
            report.raise_for_errors()

    def test_validate_matches_module_function(self, sample_schema, valid_source):
        assert EnvValidator.validate(sample_schema, valid_source) == validate(
            sample_schema, valid_source
        )

    def test_validate_field(self):
        assert EnvValidator.validate_field("PORT", env.number(), "80") == 80
        with pytest.raises(ValidationError) as exc_info:
            EnvValidator.validate_field("PORT", env.number(), "eighty")
        assert exc_info.value.errors == ("PORT: Invalid number",)
