"""
App input schema.

An App declares the parameters a Run must supply as an ordered list of
Input definitions. Each Input carries an InputType that knows how to
check a raw string value; the same checks validate default values.

Usage:
    email_type = InputType.email()
    status = InputType.radio([RadioOption("open"), RadioOption("closed")]).unwrap()

    inputs = [
        Input.create("email", email_type, required=True).unwrap(),
        Input.create("status", status, default_value="open").unwrap(),
    ]
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Iterable

from .errors import DomainError
from .result import Result

_EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
_INTEGER_PATTERN = re.compile(r"^[+-]?\d+$")
_CURRENCY_CODE_PATTERN = re.compile(r"^[A-Z]{3}$")

MAX_TEXT_LENGTH = 500


class InputKind(str, Enum):
    """Kinds of values an Input may accept."""

    EMAIL = "email"
    DATE = "date"
    TEXT = "text"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    CURRENCY = "currency"
    RADIO = "radio"
    MULTI_EMAIL = "multi_email"
    MULTI_DATE = "multi_date"
    MULTI_TEXT = "multi_text"
    MULTI_INTEGER = "multi_integer"


@dataclass(frozen=True, slots=True)
class RadioOption:
    value: str
    label: str | None = None


# =============================================================================
# Primitive parsers
# =============================================================================


def _parse_email(raw: str) -> str | None:
    if not raw or len(raw) > 254 or not _EMAIL_PATTERN.match(raw):
        return None
    return raw


def _parse_date(raw: str) -> date | None:
    try:
        return datetime.fromisoformat(raw.strip()).date()
    except (ValueError, AttributeError):
        return None


def _parse_integer(raw: str) -> int | None:
    if raw is None or not _INTEGER_PATTERN.match(raw.strip()):
        return None
    return int(raw)


def _parse_boolean(raw: str) -> bool | None:
    lowered = (raw or "").strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    return None


def _parse_currency(raw: str) -> Decimal | None:
    try:
        amount = Decimal((raw or "").strip().replace(",", ""))
    except InvalidOperation:
        return None
    if not amount.is_finite():
        return None
    return amount


# =============================================================================
# Input Type
# =============================================================================


@dataclass(frozen=True, slots=True)
class InputType:
    """
    Declared type of an Input.

    Only the attributes relevant to the kind are populated:
    - max_length: TEXT, MULTI_TEXT
    - currency: CURRENCY (ISO 4217 code)
    - options: RADIO
    - allowed: MULTI_* (allowed raw values)
    """

    kind: InputKind
    max_length: int | None = None
    currency: str | None = None
    options: tuple[RadioOption, ...] = ()
    allowed: tuple[str, ...] = ()

    # Factories

    @classmethod
    def email(cls) -> InputType:
        return cls(InputKind.EMAIL)

    @classmethod
    def date(cls) -> InputType:
        return cls(InputKind.DATE)

    @classmethod
    def integer(cls) -> InputType:
        return cls(InputKind.INTEGER)

    @classmethod
    def boolean(cls) -> InputType:
        return cls(InputKind.BOOLEAN)

    @classmethod
    def text(cls, max_length: int) -> Result[InputType]:
        if max_length <= 0 or max_length > MAX_TEXT_LENGTH:
            return Result.fail(
                DomainError.validation(
                    f"Text input max length must be between 1 and {MAX_TEXT_LENGTH} characters"
                )
            )
        return Result.ok(cls(InputKind.TEXT, max_length=max_length))

    @classmethod
    def currency_of(cls, code: str) -> Result[InputType]:
        normalized = (code or "").strip().upper()
        if not _CURRENCY_CODE_PATTERN.match(normalized):
            return Result.fail(DomainError.validation(f"Invalid currency code: {code}"))
        return Result.ok(cls(InputKind.CURRENCY, currency=normalized))

    @classmethod
    def radio(cls, options: Iterable[RadioOption]) -> Result[InputType]:
        options = tuple(options)
        if len(options) < 2:
            return Result.fail(DomainError.validation("Radio input must have at least 2 options"))
        values = [option.value for option in options]
        if any(not value or not value.strip() for value in values):
            return Result.fail(DomainError.validation("Radio option value cannot be empty"))
        if len(set(values)) != len(values):
            return Result.fail(DomainError.validation("Radio option values must be unique"))
        return Result.ok(cls(InputKind.RADIO, options=options))

    @classmethod
    def multi_email(cls, allowed: Iterable[str]) -> Result[InputType]:
        allowed = tuple(allowed)
        invalid = [value for value in allowed if _parse_email(value) is None]
        if invalid:
            return Result.fail(
                DomainError.validation(f"Invalid emails in allowed values: {', '.join(invalid)}")
            )
        return cls._multi(InputKind.MULTI_EMAIL, allowed)

    @classmethod
    def multi_date(cls, allowed: Iterable[str]) -> Result[InputType]:
        allowed = tuple(allowed)
        if any(_parse_date(value) is None for value in allowed):
            return Result.fail(DomainError.validation("Allowed dates must be valid dates"))
        return cls._multi(InputKind.MULTI_DATE, allowed)

    @classmethod
    def multi_text(cls, max_length: int, allowed: Iterable[str]) -> Result[InputType]:
        allowed = tuple(allowed)
        base = cls.text(max_length)
        if base.is_error:
            return base
        if any(len(value) > max_length for value in allowed):
            return Result.fail(
                DomainError.validation(f"Allowed values cannot exceed max length of {max_length}")
            )
        result = cls._multi(InputKind.MULTI_TEXT, allowed)
        return result.map(lambda input_type: _with_max_length(input_type, max_length))

    @classmethod
    def multi_integer(cls, allowed: Iterable[str | int]) -> Result[InputType]:
        allowed = tuple(str(value) for value in allowed)
        if any(_parse_integer(value) is None for value in allowed):
            return Result.fail(DomainError.validation("Allowed values must be valid integers"))
        return cls._multi(InputKind.MULTI_INTEGER, allowed)

    @classmethod
    def _multi(cls, kind: InputKind, allowed: tuple[str, ...]) -> Result[InputType]:
        if not allowed:
            return Result.fail(DomainError.validation("Multi input must have at least one choice"))
        return Result.ok(cls(kind, allowed=allowed))

    # Validation

    def validate_value(self, raw: str) -> Result[str]:
        """
        Check a raw string against this type.

        The raw value is returned unchanged on success so that template
        substitution sees exactly what the caller supplied.
        """
        kind = self.kind

        if kind == InputKind.EMAIL:
            if _parse_email(raw) is None:
                return _invalid("must be a valid email")
        elif kind == InputKind.DATE:
            if _parse_date(raw) is None:
                return _invalid("must be a valid date")
        elif kind == InputKind.TEXT:
            if len(raw) > (self.max_length or MAX_TEXT_LENGTH):
                return _invalid(f"exceeds max length of {self.max_length}")
        elif kind == InputKind.INTEGER:
            if _parse_integer(raw) is None:
                return _invalid("must be a valid integer")
        elif kind == InputKind.BOOLEAN:
            if _parse_boolean(raw) is None:
                return _invalid("must be 'true' or 'false'")
        elif kind == InputKind.CURRENCY:
            amount = _parse_currency(raw)
            if amount is None:
                return _invalid("must be a valid currency amount")
            if amount < 0:
                return _invalid("must be greater than or equal to 0")
            if amount.as_tuple().exponent < -2:
                return _invalid("must have at most 2 decimal places")
        elif kind == InputKind.RADIO:
            if raw not in {option.value for option in self.options}:
                return _invalid("must be one of the radio options")
        elif kind == InputKind.MULTI_EMAIL:
            if _parse_email(raw) is None:
                return _invalid("must be a valid email")
            if raw not in self.allowed:
                return _invalid("must be one of the allowed emails")
        elif kind == InputKind.MULTI_DATE:
            parsed = _parse_date(raw)
            if parsed is None:
                return _invalid("must be a valid date")
            if parsed not in {_parse_date(value) for value in self.allowed}:
                return _invalid("must be one of the allowed dates")
        elif kind == InputKind.MULTI_TEXT:
            if len(raw) > (self.max_length or MAX_TEXT_LENGTH):
                return _invalid(f"exceeds max length of {self.max_length}")
            if raw not in self.allowed:
                return _invalid("must be one of the allowed values")
        elif kind == InputKind.MULTI_INTEGER:
            parsed_int = _parse_integer(raw)
            if parsed_int is None:
                return _invalid("must be a valid integer")
            if parsed_int not in {int(value) for value in self.allowed}:
                return _invalid("must be one of the allowed integers")

        return Result.ok(raw)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"kind": self.kind.value}
        if self.max_length is not None:
            data["max_length"] = self.max_length
        if self.currency is not None:
            data["currency"] = self.currency
        if self.options:
            data["options"] = [
                {"value": option.value, "label": option.label} for option in self.options
            ]
        if self.allowed:
            data["allowed"] = list(self.allowed)
        return data

    def __str__(self) -> str:
        if self.kind in (InputKind.TEXT, InputKind.MULTI_TEXT):
            return f"{self.kind.value}({self.max_length})"
        if self.kind == InputKind.CURRENCY:
            return f"currency({self.currency})"
        return self.kind.value


def _with_max_length(input_type: InputType, max_length: int) -> InputType:
    return InputType(input_type.kind, max_length=max_length, allowed=input_type.allowed)


def _invalid(reason: str) -> Result[str]:
    return Result.fail(DomainError.validation(f"Value {reason}"))


# =============================================================================
# Input
# =============================================================================


@dataclass(frozen=True, slots=True)
class Input:
    """
    One Run-time parameter declared by an App.

    Attributes:
        title: Name used to match Run input values and {title} placeholders
        type: Declared InputType
        required: Whether every Run must supply a value
        description: Optional help text
        default_value: Optional default, validated against type
    """

    title: str
    type: InputType
    required: bool = False
    description: str | None = None
    default_value: str | None = None

    @classmethod
    def create(
        cls,
        title: str,
        input_type: InputType,
        *,
        required: bool = False,
        description: str | None = None,
        default_value: str | None = None,
    ) -> Result[Input]:
        if title is None or not title.strip():
            return Result.fail(DomainError.validation("Input title cannot be empty"))

        if default_value is not None:
            if required:
                return Result.fail(
                    DomainError.validation(
                        f"Input '{title.strip()}' cannot have a default value when required"
                    )
                )
            checked = input_type.validate_value(default_value)
            if checked.is_error:
                return Result.fail(
                    DomainError.validation(
                        f"Default value for input '{title.strip()}' is invalid: "
                        f"{checked.error.message}"
                    )
                )

        return Result.ok(
            cls(
                title=title.strip(),
                type=input_type,
                required=required,
                description=description,
                default_value=default_value,
            )
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "type": self.type.to_dict(),
            "required": self.required,
            "description": self.description,
            "default_value": self.default_value,
        }


def validate_inputs(inputs: Iterable[Input]) -> Result[tuple[Input, ...]]:
    """
    Re-validate a list of inputs and enforce unique titles.

    Inputs built through Input.create are already valid individually;
    this catches plain-constructed inputs and duplicate titles.
    """
    validated: list[Input] = []
    seen: set[str] = set()

    for item in inputs:
        result = Input.create(
            item.title,
            item.type,
            required=item.required,
            description=item.description,
            default_value=item.default_value,
        )
        if result.is_error:
            return Result.fail(result.error)

        title = result.value.title
        if title in seen:
            return Result.fail(DomainError.validation(f"Duplicate input title: {title}"))
        seen.add(title)
        validated.append(result.value)

    return Result.ok(tuple(validated))
