"""Loading schemas from YAML or JSON files.

A schema file declares the expected variables under a ``variables`` key
(or at the top level). Each entry is either a mapping of field options or a
bare type name:

    ```yaml
    # env.schema.yaml
    extends: base.schema.yaml   # optional, relative to this file

    variables:
      DATABASE_URL:
        type: url
        required: true
        description: Primary database connection
      PORT:
        type: number
        default: 3000
        validator: myapp.checks.is_port   # dotted path to a callable
      LOG_LEVEL: string
    ```

Entries of an extending file replace same-named entries of its parent;
new entries are appended after the parent's.
"""

import importlib
import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict

import yaml

from .exceptions import SchemaError
from .schema import Schema
from .types import FieldSpec

logger = logging.getLogger(__name__)

FIELD_OPTIONS = frozenset({"type", "required", "default", "validator", "description"})
SCHEMA_SUFFIXES = (".yaml", ".yml", ".json")


def schema_from_dict(data: Dict[str, Any]) -> Schema:
    """Build a Schema from a parsed schema document.

    Args:
        data: Parsed document, with or without a top-level ``variables`` key

    Returns:
        Schema with one FieldSpec per declared variable

    Raises:
        SchemaError: If an entry is malformed
    """
    variables = data.get("variables", data) if isinstance(data, dict) else data
    if not isinstance(variables, dict):
        raise SchemaError("Schema variables must be a mapping")

    fields: Dict[str, FieldSpec[Any]] = {}
    for name, entry in variables.items():
        if name == "extends":
            continue
        fields[name] = _field_from_entry(name, entry)
    return Schema(fields)


def _field_from_entry(name: str, entry: Any) -> FieldSpec[Any]:
    if isinstance(entry, str):
        entry = {"type": entry}
    if not isinstance(entry, dict):
        raise SchemaError(
            f"Schema entry {name!r} must be a mapping or a type name",
            context={"field": name},
        )

    unknown = set(entry) - FIELD_OPTIONS
    if unknown:
        raise SchemaError(
            f"Unknown options for {name!r}: {', '.join(sorted(unknown))}",
            context={"field": name, "options": sorted(unknown)},
        )
    if "type" not in entry:
        raise SchemaError(f"Schema entry {name!r} has no type", context={"field": name})

    options = dict(entry)
    if options.get("validator") is not None:
        options["validator"] = load_callable(options["validator"])

    try:
        return FieldSpec(**options)
    except SchemaError as e:
        e.context.setdefault("field", name)
        raise


def load_callable(path: str) -> Callable[..., Any]:
    """Import a callable from a dotted path such as ``"pkg.module.func"``.

    Raises:
        SchemaError: If the path cannot be imported or is not callable
    """
    if not isinstance(path, str) or "." not in path:
        raise SchemaError(f"Invalid validator path: {path!r}", context={"validator": path})

    module_path, attr_name = path.rsplit(".", 1)
    try:
        module = importlib.import_module(module_path)
    except ImportError as e:
        raise SchemaError(
            f"Failed to import {module_path}: {e}", context={"validator": path}
        ) from e

    func = getattr(module, attr_name, None)
    if not callable(func):
        raise SchemaError(
            f"{attr_name} in {module_path} is not callable", context={"validator": path}
        )
    return func  # type: ignore[no-any-return]


def _read_document(path: Path) -> Dict[str, Any]:
    if path.suffix not in SCHEMA_SUFFIXES:
        raise SchemaError(
            f"Unsupported schema file type: {path.suffix or path.name}",
            context={"path": str(path)},
        )

    try:
        with open(path, encoding="utf-8") as f:
            if path.suffix in (".yaml", ".yml"):
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
    except FileNotFoundError as e:
        raise SchemaError(f"Schema file not found: {path}", context={"path": str(path)}) from e
    except yaml.YAMLError as e:
        raise SchemaError(f"Failed to parse YAML file {path}: {e}", context={"path": str(path)}) from e
    except json.JSONDecodeError as e:
        raise SchemaError(f"Failed to parse JSON file {path}: {e}", context={"path": str(path)}) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise SchemaError(
            f"Schema file must contain a mapping: {path}", context={"path": str(path)}
        )
    return data


def load_schema(path: str | Path) -> Schema:
    """Load a Schema from a YAML or JSON schema file.

    Args:
        path: Path to a ``.yaml``, ``.yml`` or ``.json`` file

    Returns:
        Schema, including fields inherited through ``extends``

    Raises:
        SchemaError: If the file is missing, malformed, or extends itself
    """
    return _load(Path(path), set())


def _load(path: Path, loading: set[Path]) -> Schema:
    resolved = path.resolve()
    if resolved in loading:
        raise SchemaError(
            f"Circular schema inheritance: {path}", context={"path": str(path)}
        )
    loading.add(resolved)

    try:
        data = _read_document(path)
        schema = schema_from_dict(data)

        parent = data.get("extends")
        if parent:
            logger.debug(f"Schema {path} extends {parent}")
            base = _load(path.parent / parent, loading)
            schema = base.merge(schema)
    except SchemaError as e:
        e.context.setdefault("path", str(path))
        raise
    finally:
        loading.discard(resolved)

    logger.debug(f"Loaded schema {path} with {len(schema)} variables")
    return schema
