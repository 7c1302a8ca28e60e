"""Shorthand constructors for field specifications.

Example:
    ```python
    from envknobs import builder as env

    schema = env.define_schema(
        DATABASE_URL=env.url(required=True, description="Primary database"),
        PORT=env.number(default=3000),
        FEATURES=env.json(default={"beta": False}),
    )
    ```
"""

from typing import Any, Callable, Dict, Mapping

from .schema import Schema
from .types import EnvVarType, FieldSpec


def _field(
    type_tag: EnvVarType,
    required: bool,
    default: Any,
    validator: Callable[[Any], bool] | None,
    description: str | None,
) -> FieldSpec[Any]:
    return FieldSpec(
        type=type_tag,
        required=required,
        default=default,
        validator=validator,
        description=description,
    )


def string(
    required: bool = False,
    default: str | None = None,
    validator: Callable[[str], bool] | None = None,
    description: str | None = None,
) -> FieldSpec[str]:
    return _field(EnvVarType.STRING, required, default, validator, description)


def number(
    required: bool = False,
    default: int | float | None = None,
    validator: Callable[[int | float], bool] | None = None,
    description: str | None = None,
) -> FieldSpec[int | float]:
    return _field(EnvVarType.NUMBER, required, default, validator, description)


def boolean(
    required: bool = False,
    default: bool | None = None,
    validator: Callable[[bool], bool] | None = None,
    description: str | None = None,
) -> FieldSpec[bool]:
    return _field(EnvVarType.BOOLEAN, required, default, validator, description)


def url(
    required: bool = False,
    default: str | None = None,
    validator: Callable[[str], bool] | None = None,
    description: str | None = None,
) -> FieldSpec[str]:
    return _field(EnvVarType.URL, required, default, validator, description)


def email(
    required: bool = False,
    default: str | None = None,
    validator: Callable[[str], bool] | None = None,
    description: str | None = None,
) -> FieldSpec[str]:
    return _field(EnvVarType.EMAIL, required, default, validator, description)


def json(
    required: bool = False,
    default: Any = None,
    validator: Callable[[Any], bool] | None = None,
    description: str | None = None,
) -> FieldSpec[Any]:
    """JSON-valued variable; the typed value is whatever the JSON decodes to."""
    return _field(EnvVarType.JSON, required, default, validator, description)


def define_schema(
    fields: Mapping[str, FieldSpec[Any]] | None = None, **kwargs: FieldSpec[Any]
) -> Schema:
    """Build a Schema from a mapping and/or keyword arguments.

    Keyword arguments follow the mapping's entries in declaration order.
    """
    combined: Dict[str, FieldSpec[Any]] = dict(fields or {})
    combined.update(kwargs)
    return Schema(combined)
