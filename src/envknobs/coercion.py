"""Conversion of raw environment strings into typed values.

Each supported type tag has one coercer. A coercer either returns the typed
value or raises CoercionError whose ``reason`` is the exact text reported
for the field:

==========  ==========================================  ===================
type        result                                      failure reason
==========  ==========================================  ===================
string      the raw string                              (never fails)
number      int for integral literals (incl. 0x/0o/0b), Invalid number
            float otherwise
boolean     true/1 -> True, false/0 -> False            Invalid boolean
url         the raw string, once it parses as a URL     Invalid URL
email       the raw string, once it looks like a@b.c    Invalid email
json        the parsed JSON value                       Invalid JSON
==========  ==========================================  ===================
"""

import json
import math
import re
from typing import Any, Callable, Dict
from urllib.parse import urlsplit

from .exceptions import CoercionError
from .types import EnvVarType

INVALID_NUMBER = "Invalid number"
INVALID_BOOLEAN = "Invalid boolean"
INVALID_URL = "Invalid URL"
INVALID_EMAIL = "Invalid email"
INVALID_JSON = "Invalid JSON"

TRUE_LITERALS = frozenset({"true", "1"})
FALSE_LITERALS = frozenset({"false", "0"})

EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")

# Unsigned hex, octal and binary integer literals
PREFIXED_INT_PATTERN = re.compile(r"0[xob][0-9a-f]+", re.IGNORECASE)

# Schemes that are meaningless without a host
_HOST_SCHEMES = frozenset({"http", "https", "ftp", "ws", "wss"})


def _to_string(raw: str) -> str:
    return raw


def _to_number(raw: str) -> int | float:
    text = raw.strip()
    if not text or "_" in text:
        raise CoercionError(INVALID_NUMBER, EnvVarType.NUMBER.value)

    if PREFIXED_INT_PATTERN.fullmatch(text):
        try:
            return int(text, 0)
        except ValueError:
            raise CoercionError(INVALID_NUMBER, EnvVarType.NUMBER.value) from None

    try:
        return int(text)
    except ValueError:
        pass

    try:
        value = float(text)
    except ValueError:
        raise CoercionError(INVALID_NUMBER, EnvVarType.NUMBER.value) from None

    if math.isnan(value):
        raise CoercionError(INVALID_NUMBER, EnvVarType.NUMBER.value)
    return value


def _to_boolean(raw: str) -> bool:
    literal = raw.lower()
    if literal in TRUE_LITERALS:
        return True
    if literal in FALSE_LITERALS:
        return False
    raise CoercionError(INVALID_BOOLEAN, EnvVarType.BOOLEAN.value)


def _to_url(raw: str) -> str:
    try:
        parts = urlsplit(raw.strip())
        # Accessing port validates it
        parts.port
    except ValueError:
        raise CoercionError(INVALID_URL, EnvVarType.URL.value) from None

    if not parts.scheme:
        raise CoercionError(INVALID_URL, EnvVarType.URL.value)
    if parts.scheme in _HOST_SCHEMES and not parts.hostname:
        raise CoercionError(INVALID_URL, EnvVarType.URL.value)
    if any(ch.isspace() for ch in parts.netloc):
        raise CoercionError(INVALID_URL, EnvVarType.URL.value)
    return raw


def _to_email(raw: str) -> str:
    if EMAIL_PATTERN.fullmatch(raw) is None:
        raise CoercionError(INVALID_EMAIL, EnvVarType.EMAIL.value)
    return raw


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Non-standard JSON constant: {name}")


def _to_json(raw: str) -> Any:
    try:
        return json.loads(raw, parse_constant=_reject_constant)
    except (ValueError, RecursionError):
        raise CoercionError(INVALID_JSON, EnvVarType.JSON.value) from None


COERCERS: Dict[EnvVarType, Callable[[str], Any]] = {
    EnvVarType.STRING: _to_string,
    EnvVarType.NUMBER: _to_number,
    EnvVarType.BOOLEAN: _to_boolean,
    EnvVarType.URL: _to_url,
    EnvVarType.EMAIL: _to_email,
    EnvVarType.JSON: _to_json,
}


def coerce(raw: str, type_tag: EnvVarType | str) -> Any:
    """Convert a raw string to the value type denoted by ``type_tag``.

    Args:
        raw: Raw string from the environment or an env file
        type_tag: Type tag (EnvVarType member or its string value)

    Returns:
        The typed value

    Raises:
        CoercionError: If the string is not a valid value of the type
        ValueError: If ``type_tag`` is not a known type tag
    """
    return COERCERS[EnvVarType(type_tag)](raw)
