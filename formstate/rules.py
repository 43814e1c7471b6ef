"""Field validation rules for formstate.

Every rule is a pure function ``rule(value, message=DEFAULT) -> str`` returning
``""`` when the value is valid and a human-readable message otherwise. Rules
never raise: uncoercible numbers and unparsable dates are ordinary failures.

Apart from ``required``, every rule treats an empty value (``None``, ``""``,
``0``, ``False``, empty containers) as valid, so a field is optional unless
``required`` is also applied.

Parameterized rules are built by factories (``min_length(8)``,
``date_after(start, "the start date")``) that close over their bound.
``date_after``, ``date_before`` and ``matches`` capture the comparison value
when the rule is built. Pass a zero-argument callable instead of a value to
have the comparison value read on every validation:

    >>> password = {"value": "hunter22"}
    >>> confirm = matches(lambda: password["value"], "password")
    >>> confirm("hunter22")
    ''
    >>> password["value"] = "changed"
    >>> confirm("hunter22")
    'Must match password'

Rules are combined with ``compose``, which stops at the first failure:

    >>> compose(required, email)("")
    'This field is required'
    >>> compose(required, email)("not-an-email")
    'Please enter a valid email address'
"""

import math
import re
from datetime import date as date_type
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional, Union

from dateutil import parser as date_parser

from formstate.types import ValidationRule

REQUIRED_MESSAGE = "This field is required"
EMAIL_MESSAGE = "Please enter a valid email address"
PHONE_MESSAGE = "Please enter a valid phone number"
NUMBER_MESSAGE = "Please enter a valid number"
DATE_MESSAGE = "Please enter a valid date"
INVALID_DATE_FORMAT = "Invalid date format"

EMAIL_PATTERN = re.compile(r"[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}", re.IGNORECASE)
PHONE_PATTERN = re.compile(r"\+?[0-9]{10,15}")
PHONE_SEPARATORS = re.compile(r"[\s()-]")

_EPOCH = datetime(1970, 1, 1)

ComparisonValue = Union[Any, Callable[[], Any]]


def _resolve(other: ComparisonValue) -> Any:
    return other() if callable(other) else other


def _length(value: Any) -> int:
    try:
        return len(value)
    except TypeError:
        return len(str(value))


def to_number(value: Any) -> float:
    """Coerce a value to a float, returning NaN when it is not numeric.

    Strings may carry surrounding whitespace and ``0x``/``0o``/``0b``
    prefixes; a blank string is zero.

    Examples:
        >>> to_number(" 42 ")
        42.0
        >>> to_number("0x10")
        16.0
        >>> math.isnan(to_number("abc"))
        True
    """
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        if "_" in text:
            return math.nan
        try:
            return float(text)
        except ValueError:
            pass
        try:
            return float(int(text, 0))
        except ValueError:
            return math.nan
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan
    except OverflowError:
        return math.inf


def to_datetime(value: Any) -> Optional[datetime]:
    """Parse a value into a naive UTC datetime, or None when it is not a date.

    Accepts datetime and date objects, epoch milliseconds, and any string
    understood by ``dateutil``. Aware datetimes are converted to UTC.
    """
    try:
        if isinstance(value, datetime):
            result = value
        elif isinstance(value, date_type):
            result = datetime(value.year, value.month, value.day)
        elif isinstance(value, (int, float)):
            result = _EPOCH + timedelta(milliseconds=value)
        elif isinstance(value, str):
            result = date_parser.parse(value)
        else:
            return None
        if result.tzinfo is not None:
            result = result.astimezone(timezone.utc).replace(tzinfo=None)
    except (ValueError, OverflowError):
        return None
    return result


def required(value: Any, message: str = REQUIRED_MESSAGE) -> str:
    """Fail on None and the empty string. ``0`` and ``False`` are present."""
    if value is None or (isinstance(value, str) and value == ""):
        return message
    return ""


def email(value: Any, message: str = EMAIL_MESSAGE) -> str:
    if not value:
        return ""
    if not EMAIL_PATTERN.fullmatch(str(value)):
        return message
    return ""


def phone_number(value: Any, message: str = PHONE_MESSAGE) -> str:
    """Accept 10 to 15 digits with an optional leading "+".

    Whitespace, parentheses and hyphens are ignored.
    """
    if not value:
        return ""
    if not PHONE_PATTERN.fullmatch(PHONE_SEPARATORS.sub("", str(value))):
        return message
    return ""


def min_length(length: int) -> ValidationRule:
    def rule(value: Any, message: str = f"Must be at least {length} characters") -> str:
        if not value:
            return ""
        if _length(value) < length:
            return message
        return ""

    return rule


def max_length(length: int) -> ValidationRule:
    def rule(value: Any, message: str = f"Must be no more than {length} characters") -> str:
        if not value:
            return ""
        if _length(value) > length:
            return message
        return ""

    return rule


def number(value: Any, message: str = NUMBER_MESSAGE) -> str:
    if not value:
        return ""
    if not math.isfinite(to_number(value)):
        return message
    return ""


def min_value(bound: float) -> ValidationRule:
    """Fail when the numeric value is below ``bound``.

    Non-numeric values pass; combine with ``number`` to reject them.
    """
    def rule(value: Any, message: str = f"Must be at least {bound}") -> str:
        if not value:
            return ""
        if to_number(value) < bound:
            return message
        return ""

    return rule


def max_value(bound: float) -> ValidationRule:
    def rule(value: Any, message: str = f"Must be no more than {bound}") -> str:
        if not value:
            return ""
        if to_number(value) > bound:
            return message
        return ""

    return rule


def date(value: Any, message: str = DATE_MESSAGE) -> str:
    if not value:
        return ""
    if to_datetime(value) is None:
        return message
    return ""


def date_after(other: ComparisonValue, label: str = "the previous date") -> ValidationRule:
    """Require a date strictly later than ``other``.

    Args:
        other: Comparison date, or a zero-argument callable returning it
        label: Name of the compared field used in the default message
    """
    def rule(value: Any, message: str = f"Date must be after {label}") -> str:
        bound = _resolve(other)
        if not value or not bound:
            return ""
        value_date = to_datetime(value)
        bound_date = to_datetime(bound)
        if value_date is None or bound_date is None:
            return INVALID_DATE_FORMAT
        if value_date <= bound_date:
            return message
        return ""

    return rule


def date_before(other: ComparisonValue, label: str = "the next date") -> ValidationRule:
    """Require a date strictly earlier than ``other``."""
    def rule(value: Any, message: str = f"Date must be before {label}") -> str:
        bound = _resolve(other)
        if not value or not bound:
            return ""
        value_date = to_datetime(value)
        bound_date = to_datetime(bound)
        if value_date is None or bound_date is None:
            return INVALID_DATE_FORMAT
        if value_date >= bound_date:
            return message
        return ""

    return rule


def matches(other: ComparisonValue, label: str = "the other field") -> ValidationRule:
    """Require the value to equal ``other`` (e.g. a password confirmation)."""
    def rule(value: Any, message: str = f"Must match {label}") -> str:
        if not value:
            return ""
        if value != _resolve(other):
            return message
        return ""

    return rule


def compose(*rules: ValidationRule) -> ValidationRule:
    """Combine rules into one that returns the first failure message."""
    def composed(value: Any) -> str:
        for rule in rules:
            error = rule(value)
            if error:
                return error
        return ""

    return composed


__all__ = [
    "REQUIRED_MESSAGE",
    "EMAIL_MESSAGE",
    "PHONE_MESSAGE",
    "NUMBER_MESSAGE",
    "DATE_MESSAGE",
    "INVALID_DATE_FORMAT",
    "to_number",
    "to_datetime",
    "required",
    "email",
    "phone_number",
    "min_length",
    "max_length",
    "number",
    "min_value",
    "max_value",
    "date",
    "date_after",
    "date_before",
    "matches",
    "compose",
]
