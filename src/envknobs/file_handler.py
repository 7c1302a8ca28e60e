"""Reading, generating, checking and synchronizing ``.env`` files.

All file operations are coroutines backed by aiofiles. A missing env file
reads as an empty mapping; any other I/O error propagates to the caller.

Example:
    ```python
    import asyncio
    from envknobs import EnvFileHandler, load_schema

    schema = load_schema("env.schema.yaml")

    async def main():
        await EnvFileHandler.generate_example(schema, ".env.example")
        report = await EnvFileHandler.validate(schema, ".env")
        if report.missing or report.invalid:
            print("missing:", report.missing, "invalid:", report.invalid)
        config = await EnvFileHandler.load(schema, ".env", ".env.local")

    asyncio.run(main())
    ```
"""

from __future__ import annotations

import io
import json
import logging
import os
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Mapping

import aiofiles
from dotenv import dotenv_values

from .types import EnvVarType, FieldSpec
from .validator import resolve_field, validate as validate_env

logger = logging.getLogger(__name__)

PathLike = str | Path

# Values python-dotenv would alter if written bare: surrounding whitespace is
# stripped, a leading quote opens a quoted value, " #" starts a comment
UNSAFE_BARE_VALUE = re.compile(r"""^\s|\s$|^['"]|\s#|[\r\n]""")

DEFAULT_TARGETS = (".env.development", ".env.staging", ".env.production")

EXAMPLE_VALUES: dict[EnvVarType, str] = {
    EnvVarType.STRING: "example_value",
    EnvVarType.NUMBER: "3000",
    EnvVarType.BOOLEAN: "true",
    EnvVarType.URL: "https://example.com",
    EnvVarType.EMAIL: "user@example.com",
    EnvVarType.JSON: '{"key": "value"}',
}


@dataclass
class FileValidationResult:
    """Per-field classification of an env file against a schema.

    Attributes:
        missing: Required variables without default that are absent or empty
        invalid: Variables whose value fails type coercion or its validator
        valid: Variables whose value resolves cleanly
    """

    missing: list[str] = field(default_factory=list)
    invalid: list[str] = field(default_factory=list)
    valid: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.missing and not self.invalid


def format_value(value: Any, type_tag: EnvVarType | str | None = None) -> str:
    """Render a typed value as ``.env`` text that coerces back to it."""
    if type_tag is not None and EnvVarType(type_tag) is EnvVarType.JSON:
        return json.dumps(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def _quote(value: str) -> str:
    if not UNSAFE_BARE_VALUE.search(value):
        return value
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class EnvFileHandler:
    """Async helpers for ``.env`` files driven by a schema."""

    @staticmethod
    async def parse(file_path: PathLike) -> dict[str, str]:
        """Read and parse a ``.env`` file into key-value pairs.

        The text is read with aiofiles and parsed by python-dotenv without
        variable interpolation. Blank lines and ``#`` comments are skipped,
        surrounding quotes are removed and lines without ``=`` are dropped.
        Lines python-dotenv cannot parse (an unterminated quote, for
        instance) are skipped with a warning from the ``dotenv`` logger.

        Args:
            file_path: Path to the .env file

        Returns:
            Mapping of variable name to raw string; empty if the file is missing
        """
        try:
            async with aiofiles.open(file_path, mode="r", encoding="utf-8") as f:
                content = await f.read()
        except FileNotFoundError:
            logger.debug(f"Env file {file_path} not found, treating as empty")
            return {}

        values = dotenv_values(stream=io.StringIO(content), interpolate=False)
        # A bare KEY line parses to None
        env = {key: value for key, value in values.items() if value is not None}

        logger.debug(f"Parsed {len(env)} variables from {file_path}")
        return env

    @staticmethod
    def example_value(spec: FieldSpec[Any]) -> str:
        """Example value for a field: its default if set, else a per-type sample."""
        if spec.default is not None:
            return format_value(spec.default, spec.type)
        return EXAMPLE_VALUES[spec.type]

    @staticmethod
    async def generate_example(
        schema: Mapping[str, FieldSpec[Any]],
        output_path: PathLike = ".env.example",
    ) -> None:
        """Write a documented example env file for ``schema``.

        Each variable is preceded by comments giving its description, type,
        requiredness, default and whether it has a custom validator.
        """
        lines = [
            "# Generated Environment Variables",
            f"# Generated on {_timestamp()}",
            "",
        ]

        for key, spec in schema.items():
            if spec.description:
                lines.append(f"# {spec.description}")
            lines.append(f"# Type: {spec.type.value}")
            if spec.required:
                lines.append("# Required: true")
            if spec.default is not None:
                lines.append(f"# Default: {format_value(spec.default, spec.type)}")
            if spec.validator is not None:
                lines.append("# Note: Has custom validation")

            lines.append(f"{key}={_quote(EnvFileHandler.example_value(spec))}")
            lines.append("")

        await _write_lines(output_path, lines)
        logger.info(f"Wrote example env file {output_path} ({len(schema)} variables)")

    @staticmethod
    async def validate(
        schema: Mapping[str, FieldSpec[Any]],
        env_path: PathLike = ".env",
    ) -> FileValidationResult:
        """Classify each schema variable found in an env file.

        Variables that are absent or empty in the file are reported as
        missing only when required without a default; otherwise they are
        left out of the result.

        Returns:
            FileValidationResult with missing, invalid and valid names
        """
        content = await EnvFileHandler.parse(env_path)
        result = FileValidationResult()

        for key, spec in schema.items():
            raw = content.get(key)
            if not raw:
                if spec.is_mandatory:
                    result.missing.append(key)
                continue

            if resolve_field(spec, raw).ok:
                result.valid.append(key)
            else:
                result.invalid.append(key)

        return result

    @staticmethod
    async def sync(
        schema: Mapping[str, FieldSpec[Any]],
        source_env: PathLike = ".env",
        target_envs: Iterable[PathLike] = DEFAULT_TARGETS,
    ) -> None:
        """Synchronize schema variables across several env files.

        For every target and every variable the value written is the
        target's own value, else the source's value, else the example
        value. Variables not named by the schema are not carried over.
        """
        source_content = await EnvFileHandler.parse(source_env)

        for target_env in target_envs:
            target_content = await EnvFileHandler.parse(target_env)
            lines = [
                "# Environment Variables",
                f"# Synced from {source_env} on {_timestamp()}",
                "",
            ]

            for key, spec in schema.items():
                value = (
                    target_content.get(key)
                    or source_content.get(key)
                    or EnvFileHandler.example_value(spec)
                )
                lines.append(f"{key}={_quote(value)}")

            await _write_lines(target_env, lines)
            logger.info(f"Synced {target_env} from {source_env}")

    @staticmethod
    async def load(
        schema: Mapping[str, FieldSpec[Any]],
        *paths: PathLike,
        env: Mapping[str, str] | None = None,
        override: bool = False,
    ) -> dict[str, Any]:
        """Build a validated configuration from env files and the environment.

        Files are read in order, later files overriding earlier ones. The
        environment (default: ``os.environ``) takes precedence over file
        values unless ``override`` is set.

        Raises:
            ValidationError: If any variable fails validation
        """
        file_values: dict[str, str] = {}
        for path in paths:
            file_values.update(await EnvFileHandler.parse(path))

        environ = dict(os.environ) if env is None else dict(env)
        if override:
            source = {**environ, **file_values}
        else:
            source = {**file_values, **environ}

        return validate_env(schema, source)


async def _write_lines(path: PathLike, lines: list[str]) -> None:
    async with aiofiles.open(path, mode="w", encoding="utf-8") as f:
        await f.write("\n".join(lines))
