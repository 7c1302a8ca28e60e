"""Ordered, read-only collection of field specifications."""

from __future__ import annotations

from typing import Any, Iterator, Mapping

from .exceptions import SchemaError
from .types import FieldSpec


class Schema(Mapping[str, FieldSpec[Any]]):
    """Ordered mapping of variable name to FieldSpec.

    Declaration order is preserved and only affects the order in which
    results and errors are reported. A Schema is immutable and can be reused
    across any number of validation calls.

    Example:
        ```python
        schema = Schema({
            "PORT": FieldSpec("number", default=3000),
            "API_URL": FieldSpec("url", required=True),
        })
        list(schema)
        # ['PORT', 'API_URL']
        ```
    """

    def __init__(self, fields: Mapping[str, FieldSpec[Any]] | None = None, **kwargs: FieldSpec[Any]):
        self._fields: dict[str, FieldSpec[Any]] = {}
        for source in (fields or {}, kwargs):
            for name, spec in source.items():
                self._add(name, spec)

    def _add(self, name: str, spec: FieldSpec[Any]) -> None:
        if not isinstance(name, str) or not name:
            raise SchemaError(
                "Variable names must be non-empty strings", context={"field": name}
            )
        if not isinstance(spec, FieldSpec):
            raise SchemaError(
                f"Schema entry {name!r} is not a FieldSpec",
                context={"field": name, "value_type": type(spec).__name__},
            )
        self._fields[name] = spec

    def __getitem__(self, name: str) -> FieldSpec[Any]:
        return self._fields[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"Schema({list(self._fields)!r})"

    def merge(self, other: Mapping[str, FieldSpec[Any]]) -> "Schema":
        """Return a new schema with ``other``'s fields added or overriding."""
        merged = dict(self._fields)
        merged.update(other)
        return Schema(merged)

    @classmethod
    def of(cls, schema: Mapping[str, FieldSpec[Any]]) -> "Schema":
        """Coerce a plain mapping of FieldSpecs into a Schema."""
        if isinstance(schema, cls):
            return schema
        return cls(schema)
