"""Declarative request validation.

Each route lists ``FieldRule`` descriptors; one generic evaluator checks them
all against the parsed body, query string and path parameters, collects
every violation and either raises a single ``ValidationError`` or hands the
route a ``ValidatedRequest`` holding the normalized values of the declared
fields only.

Within one field, checks stop at the first failure (a missing value is not
also reported as too short); across fields nothing short-circuits.
"""

import re
import uuid
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import StrEnum
from typing import Any, Literal

import orjson
from fastapi import Request
from pydantic import EmailStr, HttpUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from mutuals.core.exceptions import FieldError, ValidationError

type Location = Literal["body", "query", "path"]
type FieldType = Literal["string", "integer", "boolean", "array", "object"]

_MISSING: Any = object()

ISO8601_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}")
BOOLEAN_STRINGS = {"true": True, "false": False, "1": True, "0": False}


class Format(StrEnum):
    """String formats a rule can require."""

    EMAIL = "email"
    URL = "url"
    UUID = "uuid"
    ISO8601 = "iso8601"


@dataclass(frozen=True, slots=True)
class FieldRule:
    """Validation and normalization rules for one request field.

    Args:
        field: Field name as sent on the wire.
        location: Where the field is read from.
        label: Human name used in default messages.
        required: Reject the request when the value is absent or blank.
        type: Expected JSON type; strings from the query or path are coerced.
        format: String format constraint.
        choices: Allowed values (enum membership).
        min_length: Minimum string length, after trimming.
        max_length: Maximum string length, after trimming.
        trim: Strip surrounding whitespace before checking.
        lowercase: Lowercase the value before checking.
        error: Message for every failed check not listed in ``messages``.
        messages: Per-check message overrides keyed by check name
            (``required``, ``type``, ``format``, ``choices``, ``min_length``,
            ``max_length``).
    """

    field: str
    location: Location = "body"
    label: str | None = None
    required: bool = False
    type: FieldType | None = None
    format: Format | None = None
    choices: tuple[str, ...] | None = None
    min_length: int | None = None
    max_length: int | None = None
    trim: bool = False
    lowercase: bool = False
    error: str | None = None
    messages: Mapping[str, str] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.label or self.field

    def message(self, check: str) -> str:
        """Message reported when ``check`` fails."""
        if check in self.messages:
            return self.messages[check]
        if self.error is not None:
            return self.error
        defaults = {
            "required": f"{self.name} is required",
            "type": f"{self.name} must be of type {self.type}",
            "format": f"{self.name} must be a valid {self.format}",
            "choices": f"Invalid {self.name}",
            "min_length": f"{self.name} must be at least {self.min_length} characters long",
            "max_length": f"{self.name} must not exceed {self.max_length} characters",
        }
        return defaults[check]


@dataclass(frozen=True, slots=True)
class ValidatedRequest:
    """Normalized values of the declared fields, per location."""

    body: dict[str, Any]
    query: dict[str, Any]
    path: dict[str, Any]


_EMAIL_ADAPTER = TypeAdapter(EmailStr)
_URL_ADAPTER = TypeAdapter(HttpUrl)
_UUID_ADAPTER = TypeAdapter(uuid.UUID)
_DATE_ADAPTER = TypeAdapter(datetime | date)


def _accepts(adapter: TypeAdapter[Any]) -> Callable[[str], bool]:
    def check(value: str) -> bool:
        try:
            adapter.validate_python(value)
        except PydanticValidationError:
            return False
        return True

    return check


_is_valid_date = _accepts(_DATE_ADAPTER)


def _is_valid_url(value: str) -> bool:
    # Hosts must carry a TLD, so ``http://localhost`` is rejected
    try:
        url = _URL_ADAPTER.validate_python(value)
    except PydanticValidationError:
        return False
    return url.host is not None and "." in url.host


def _is_valid_iso8601(value: str) -> bool:
    # pydantic also takes unix timestamps; only calendar dates are accepted here
    return bool(ISO8601_DATE_PATTERN.match(value)) and _is_valid_date(value)


FORMAT_CHECKS: dict[Format, Callable[[str], bool]] = {
    Format.EMAIL: _accepts(_EMAIL_ADAPTER),
    Format.URL: _is_valid_url,
    Format.UUID: _accepts(_UUID_ADAPTER),
    Format.ISO8601: _is_valid_iso8601,
}


def _coerce(rule: FieldRule, value: Any) -> tuple[bool, Any]:  # noqa: ANN401
    """Check ``value`` against ``rule.type``, coercing query/path strings."""
    from_text = rule.location != "body" and isinstance(value, str)
    match rule.type:
        case None:
            return True, value
        case "string":
            return isinstance(value, str), value
        case "integer":
            if from_text and re.fullmatch(r"[+-]?\d+", value.strip()):
                return True, int(value)
            return isinstance(value, int) and not isinstance(value, bool), value
        case "boolean":
            if isinstance(value, bool):
                return True, value
            if isinstance(value, str) and value.lower() in BOOLEAN_STRINGS:
                return True, BOOLEAN_STRINGS[value.lower()]
            return False, value
        case "array":
            return isinstance(value, list), value
        case "object":
            return isinstance(value, dict), value


def _evaluate_field(rule: FieldRule, raw: Any) -> tuple[Any, str | None]:  # noqa: ANN401
    """Normalize and check one value; returns (value, failed check)."""
    value = raw
    if isinstance(value, str):
        if rule.trim:
            value = value.strip()
        if rule.lowercase:
            value = value.lower()

    absent = value is _MISSING or value is None
    if absent or value == "":
        if rule.required:
            return value, "required"
        if absent:
            return _MISSING, None

    ok, value = _coerce(rule, value)
    if not ok:
        return value, "type"

    if isinstance(value, str):
        if rule.format and not FORMAT_CHECKS[rule.format](value):
            return value, "format"
        if rule.min_length is not None and len(value) < rule.min_length:
            return value, "min_length"
        if rule.max_length is not None and len(value) > rule.max_length:
            return value, "max_length"

    if rule.choices is not None and value not in rule.choices:
        return value, "choices"

    return value, None


def evaluate_rules(
    rules: tuple[FieldRule, ...],
    sources: Mapping[Location, Mapping[str, Any]],
) -> tuple[ValidatedRequest, list[FieldError]]:
    """Apply every rule and collect all violations.

    Args:
        rules: Rules in declaration order.
        sources: Parsed request data per location.

    Returns:
        The normalized declared fields and the list of violations.
    """
    values: dict[Location, dict[str, Any]] = {"body": {}, "query": {}, "path": {}}
    errors: list[FieldError] = []

    for rule in rules:
        raw = sources.get(rule.location, {}).get(rule.field, _MISSING)
        value, failed = _evaluate_field(rule, raw)
        if failed is not None:
            errors.append({"field": rule.field, "message": rule.message(failed)})
        elif value is not _MISSING:
            values[rule.location][rule.field] = value

    return ValidatedRequest(values["body"], values["query"], values["path"]), errors


async def _read_body(request: Request) -> dict[str, Any]:
    raw = await request.body()
    if not raw:
        return {}
    try:
        parsed = orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        raise ValidationError(
            [{"field": "body", "message": "Request body must be valid JSON"}], cause=e
        ) from e
    if not isinstance(parsed, dict):
        raise ValidationError(
            [{"field": "body", "message": "Request body must be a JSON object"}]
        )
    return parsed


def validate_request(
    *rules: FieldRule,
) -> Callable[[Request], Awaitable[ValidatedRequest]]:
    """Build a validation gate for a route.

    Args:
        *rules: Field rules evaluated against the request.

    Returns:
        A FastAPI dependency returning the ``ValidatedRequest``.
    """
    needs_body = any(rule.location == "body" for rule in rules)

    async def validate(request: Request) -> ValidatedRequest:
        sources: dict[Location, Mapping[str, Any]] = {
            "body": await _read_body(request) if needs_body else {},
            "query": request.query_params,
            "path": request.path_params,
        }
        validated, errors = evaluate_rules(rules, sources)
        if errors:
            raise ValidationError(errors, context={"fields": [e["field"] for e in errors]})
        return validated

    return validate
