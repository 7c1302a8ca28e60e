"""Exception hierarchy for the envknobs package.

Every envknobs error carries an optional context dictionary with structured
information about the failure (field names, file paths, type tags), so
callers can report problems without parsing message text.

Example:
    ```python
    from envknobs import ValidationError, validate

    try:
        config = validate(schema)
    except ValidationError as e:
        for line in e.errors:
            print(line)
    ```
"""

from typing import Any, Dict, Iterable, Sequence, Tuple


class EnvknobsError(Exception):
    """Base exception for all envknobs errors.

    ``context`` keys set by this package:

    - ``field``: variable name the error concerns (schema entries)
    - ``path``: schema file being loaded; the loader adds it to errors
      raised while reading an inherited file as well
    - ``type``: type tag involved (coercion and FieldSpec errors)

    Aggregated validation failures carry ``errors`` and ``fields`` instead.
    """

    def __init__(self, message: str, context: Dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = dict(context or {})


class ValidationError(EnvknobsError):
    """Raised when one or more environment variables fail validation.

    A single ValidationError reports every failing field of one validation
    pass, in schema order. Each entry of ``errors`` is formatted as
    ``"<field>: <reason>"``.

    Attributes:
        message: Summary message
        errors: Ordered per-field messages
        field_errors: Ordered ``(field, reason)`` pairs

    Example:
        ```python
        error = ValidationError.from_field_errors(
            [("PORT", "Invalid number"), ("API_URL", "Required value is missing")]
        )
        error.errors
        # ('PORT: Invalid number', 'API_URL: Required value is missing')
        ```
    """

    DEFAULT_MESSAGE = "Environment validation failed"

    def __init__(
        self,
        errors: Sequence[str],
        message: str = DEFAULT_MESSAGE,
        field_errors: Iterable[Tuple[str, str]] | None = None,
    ):
        self.message = message
        self.errors: Tuple[str, ...] = tuple(errors)
        self.field_errors: Tuple[Tuple[str, str], ...] = tuple(field_errors or ())
        super().__init__(
            message,
            context={
                "errors": list(self.errors),
                "fields": [name for name, _ in self.field_errors],
            },
        )

    @classmethod
    def from_field_errors(
        cls,
        field_errors: Iterable[Tuple[str, str]],
        message: str = DEFAULT_MESSAGE,
    ) -> "ValidationError":
        """Build an aggregated error from ``(field, reason)`` pairs."""
        pairs = list(field_errors)
        return cls(
            [f"{name}: {reason}" for name, reason in pairs],
            message=message,
            field_errors=pairs,
        )

    def __str__(self) -> str:
        if not self.errors:
            return self.message
        return self.message + "\n" + "\n".join(f"  {line}" for line in self.errors)


class SchemaError(EnvknobsError):
    """Raised when a schema definition is invalid.

    Covers unknown type tags, defaults that do not match their declared
    type, non-callable validators and malformed schema files.
    """

    pass


class CoercionError(EnvknobsError, ValueError):
    """Raised when a raw string cannot be converted to its declared type.

    Attributes:
        reason: Reason text reported for the field (e.g. ``"Invalid number"``)
    """

    def __init__(self, reason: str, type_tag: str):
        self.reason = reason
        super().__init__(reason, context={"type": type_tag})
