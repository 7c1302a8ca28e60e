"""Schema-driven validation of environment variables.

The validator resolves every field of a schema against a raw source mapping
and reports all problems at once. Field failures are collected in an
accumulator during a single ordered pass; the only exception raised is the
final aggregated ValidationError.

Example:
    ```python
    from envknobs import builder as env
    from envknobs.validator import validate

    schema = env.define_schema(
        PORT=env.number(default=3000, validator=lambda p: 1000 <= p <= 9999),
        DEBUG=env.boolean(default=False),
        API_URL=env.url(required=True),
    )

    config = validate(schema, {"API_URL": "https://api.example.com"})
    # {'PORT': 3000, 'DEBUG': False, 'API_URL': 'https://api.example.com'}
    ```
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Mapping

from .coercion import coerce
from .exceptions import CoercionError, ValidationError
from .schema import Schema
from .types import FieldSpec

logger = logging.getLogger(__name__)

MISSING_REQUIRED = "Required value is missing"
CUSTOM_VALIDATION_FAILED = "Custom validation failed"


@dataclass(frozen=True)
class FieldResolution:
    """Outcome of resolving one field: a value, or the reason it failed."""

    value: Any = None
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.reason is None


@dataclass
class ValidationReport:
    """Non-raising outcome of a whole-schema pass.

    Attributes:
        values: Typed values of every field that resolved
        field_errors: ``(field, reason)`` pairs in schema order
    """

    values: dict[str, Any] = field(default_factory=dict)
    field_errors: list[tuple[str, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.field_errors

    @property
    def errors(self) -> list[str]:
        return [f"{name}: {reason}" for name, reason in self.field_errors]

    def raise_for_errors(self) -> None:
        """Raise the aggregated ValidationError if any field failed."""
        if self.field_errors:
            raise ValidationError.from_field_errors(self.field_errors)


def resolve_field(spec: FieldSpec[Any], raw: str | None) -> FieldResolution:
    """Resolve one field specification against its raw value.

    Args:
        spec: Field specification
        raw: Raw string, or None when the variable is absent

    Returns:
        FieldResolution holding either the typed value or the failure reason
    """
    if raw is None:
        if spec.is_mandatory:
            return FieldResolution(reason=MISSING_REQUIRED)
        value = spec.default
    else:
        try:
            value = coerce(raw, spec.type)
        except CoercionError as e:
            return FieldResolution(reason=e.reason)

    # Validators also run on defaults
    if spec.validator is not None and not _passes(spec, value):
        return FieldResolution(reason=CUSTOM_VALIDATION_FAILED)

    return FieldResolution(value=value)


def _passes(spec: FieldSpec[Any], value: Any) -> bool:
    try:
        return bool(spec.validator(value))  # type: ignore[misc]
    except Exception as e:
        name = getattr(spec.validator, "__name__", repr(spec.validator))
        logger.warning(f"Validator {name} raised {type(e).__name__} on a {spec.type.value} value")
        return False


class EnvValidator:
    """Validates and transforms environment variables according to a schema.

    The validator keeps no state between calls; the class only groups the
    operations. Use the module-level :func:`validate` for the common case.
    """

    @staticmethod
    def check(
        schema: Mapping[str, FieldSpec[Any]],
        env: Mapping[str, str] | None = None,
    ) -> ValidationReport:
        """Validate every field and return a report instead of raising.

        Args:
            schema: Mapping of variable name to FieldSpec
            env: Raw source mapping (default: a snapshot of ``os.environ``)

        Returns:
            ValidationReport with values and per-field errors
        """
        schema = Schema.of(schema)
        source = dict(os.environ) if env is None else env
        report = ValidationReport()

        for name, spec in schema.items():
            resolution = resolve_field(spec, source.get(name))
            if resolution.ok:
                report.values[name] = resolution.value
                logger.debug(f"Resolved {name} ({spec.type.value})")
            else:
                report.field_errors.append((name, resolution.reason))  # type: ignore[arg-type]
                logger.debug(f"Rejected {name}: {resolution.reason}")

        logger.info(f"Validated {len(schema)} variables, {len(report.field_errors)} failed")
        return report

    @staticmethod
    def validate(
        schema: Mapping[str, FieldSpec[Any]],
        env: Mapping[str, str] | None = None,
    ) -> dict[str, Any]:
        """Validate environment variables against the provided schema.

        Args:
            schema: Mapping of variable name to FieldSpec
            env: Raw source mapping (default: a snapshot of ``os.environ``)

        Returns:
            Dictionary with one typed value per schema field

        Raises:
            ValidationError: If any field fails; lists every failing field
        """
        report = EnvValidator.check(schema, env)
        report.raise_for_errors()
        return report.values

    @staticmethod
    def validate_field(name: str, spec: FieldSpec[Any], raw: str | None) -> Any:
        """Validate a single variable.

        Raises:
            ValidationError: With a single ``"<name>: <reason>"`` entry
        """
        resolution = resolve_field(spec, raw)
        if not resolution.ok:
            raise ValidationError.from_field_errors([(name, resolution.reason)])  # type: ignore[list-item]
        return resolution.value


def validate(
    schema: Mapping[str, FieldSpec[Any]],
    env: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Validate ``env`` (default: the process environment) against ``schema``.

    See :meth:`EnvValidator.validate`.
    """
    return EnvValidator.validate(schema, env)
