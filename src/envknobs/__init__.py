"""envknobs

Typed, schema-driven validation of environment variables, with helpers for
generating, checking and synchronizing ``.env`` files.
"""

__version__ = "0.1.0"

from . import builder
from .builder import define_schema
from .coercion import coerce
from .exceptions import (
    CoercionError,
    EnvknobsError,
    SchemaError,
    ValidationError,
)
from .file_handler import EnvFileHandler, FileValidationResult, format_value
from .loader import load_schema, schema_from_dict
from .schema import Schema
from .types import EnvVarType, FieldSpec
from .validator import (
    EnvValidator,
    FieldResolution,
    ValidationReport,
    resolve_field,
    validate,
)

__all__ = [
    "__version__",
    # Schema model
    "EnvVarType",
    "FieldSpec",
    "Schema",
    "builder",
    "define_schema",
    # Validation
    "EnvValidator",
    "FieldResolution",
    "ValidationReport",
    "coerce",
    "resolve_field",
    "validate",
    # Files
    "EnvFileHandler",
    "FileValidationResult",
    "format_value",
    "load_schema",
    "schema_from_dict",
    # Exceptions
    "CoercionError",
    "EnvknobsError",
    "SchemaError",
    "ValidationError",
]
