"""Schema model types: type tags and field specifications."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, TypeVar

from .exceptions import SchemaError

T = TypeVar("T")


class EnvVarType(str, Enum):
    """Type tags supported for environment variables."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    URL = "url"
    EMAIL = "email"
    JSON = "json"

    def __str__(self) -> str:
        return self.value


# Python types accepted as a default for each tag; JSON accepts anything.
_DEFAULT_TYPES: dict[EnvVarType, tuple[type, ...]] = {
    EnvVarType.STRING: (str,),
    EnvVarType.NUMBER: (int, float),
    EnvVarType.BOOLEAN: (bool,),
    EnvVarType.URL: (str,),
    EnvVarType.EMAIL: (str,),
}


@dataclass(frozen=True)
class FieldSpec(Generic[T]):
    """Specification of a single environment variable.

    Attributes:
        type: Type tag driving coercion of the raw string
        required: Whether the variable must be supplied when there is no default
        default: Value used when the variable is absent (None means no default)
        validator: Predicate run on the typed value, including defaults
        description: Documentation text, used only when generating files
    """

    type: EnvVarType
    required: bool = False
    default: T | None = None
    validator: Callable[[T], bool] | None = None
    description: str | None = None

    def __post_init__(self) -> None:
        try:
            tag = EnvVarType(self.type)
        except ValueError:
            raise SchemaError(
                f"Unknown variable type: {self.type!r}",
                context={"type": self.type, "allowed": [t.value for t in EnvVarType]},
            ) from None
        object.__setattr__(self, "type", tag)

        if not isinstance(self.required, bool):
            raise SchemaError(
                f"required must be true or false, got {self.required!r}",
                context={"type": tag.value, "required": self.required},
            )

        if self.validator is not None and not callable(self.validator):
            raise SchemaError(
                "Validator must be callable",
                context={"type": tag.value, "validator": repr(self.validator)},
            )

        if self.default is not None and not _default_matches(tag, self.default):
            raise SchemaError(
                f"Default {self.default!r} does not match type {tag.value}",
                context={"type": tag.value, "default": self.default},
            )

    @property
    def is_mandatory(self) -> bool:
        """True when the source must supply a value for this field."""
        return self.required and self.default is None


def _default_matches(tag: EnvVarType, value: Any) -> bool:
    allowed = _DEFAULT_TYPES.get(tag)
    if allowed is None:
        return True
    # bool is an int subclass; keep booleans out of number fields
    if tag is EnvVarType.NUMBER and isinstance(value, bool):
        return False
    return isinstance(value, allowed)
