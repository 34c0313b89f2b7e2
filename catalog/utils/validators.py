"""
Attribute value validation and coercion.

``coerce`` turns a caller-supplied value into the canonical value for an
attribute's data type. It never touches storage.
"""
import json
import math
import re
from typing import Any, Optional

from catalog.errors import ValidationError
from catalog.models.attribute import DataType

TRUE_STRINGS = {"true", "1", "yes", "y"}
FALSE_STRINGS = {"false", "0", "no", "n"}

NUMBER_RE = re.compile(r"[+\-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+\-]?[0-9]+)?")
ISO_DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
ISO_DATETIME_RE = re.compile(
    r"[0-9]{4}-[0-9]{2}-[0-9]{2}T[0-9]{2}:[0-9]{2}:[0-9]{2}(\.[0-9]+)?(Z|[+\-][0-9]{2}:?[0-9]{2})?"
)


def stringify(value: Any) -> str:
    """Render a value the way it is compared and stored as text"""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return str(int(value))
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=True)
    return str(value)


def is_iso_date(value: str) -> bool:
    return ISO_DATE_RE.fullmatch(value) is not None


def is_iso_datetime(value: str) -> bool:
    return ISO_DATETIME_RE.fullmatch(value) is not None


def validate_regex_pattern(pattern: Optional[str]) -> Optional[str]:
    """Validate that a validation_regex compiles"""
    if pattern is None:
        return None
    try:
        re.compile(pattern)
    except re.error as e:
        raise ValidationError(f"Invalid validation_regex '{pattern}': {e}") from e
    return pattern


def coerce_boolean(value: Any, attribute_name: str = "value") -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        lowered = value.lower()
        if lowered in TRUE_STRINGS:
            return True
        if lowered in FALSE_STRINGS:
            return False
    raise ValidationError(f"Invalid boolean value for '{attribute_name}': {value!r}")


def coerce_number(value: Any, attribute_name: str = "value"):
    """Parse a number; integral results are returned as int"""
    error = ValidationError(f"Attribute '{attribute_name}' must be a number")
    if isinstance(value, bool):
        raise error
    if isinstance(value, str):
        text = value.strip()
        if NUMBER_RE.fullmatch(text) is None:
            raise error
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            raise error from None
    elif isinstance(value, (int, float)):
        number = value
    else:
        raise error

    if isinstance(number, float):
        if not math.isfinite(number):
            raise error
        if number.is_integer():
            return int(number)
    return number


def _coerce_enum(attribute, value: Any) -> str:
    allowed = attribute.allowed_values
    if not allowed:
        raise ValidationError(f"Attribute '{attribute.name}' is ENUM but has no allowed_values")
    text = stringify(value)
    if text not in [stringify(v) for v in allowed]:
        options = ", ".join(stringify(v) for v in allowed)
        raise ValidationError(f"Attribute '{attribute.name}' must be one of: {options}")
    return text


def coerce(attribute, value: Any) -> Any:
    """
    Validate ``value`` against ``attribute`` and return its canonical form.

    TEXT -> str, NUMBER -> int/float, BOOLEAN -> bool, ENUM/DATE/DATETIME -> str.
    A validation_regex, when set, is searched in the canonical value's text.
    """
    name = attribute.name
    if value is None:
        raise ValidationError(f"Value for attribute '{name}' cannot be null")

    data_type = attribute.data_type
    if data_type == DataType.TEXT:
        result = stringify(value)
    elif data_type == DataType.NUMBER:
        result = coerce_number(value, name)
    elif data_type == DataType.BOOLEAN:
        result = coerce_boolean(value, name)
    elif data_type == DataType.ENUM:
        result = _coerce_enum(attribute, value)
    elif data_type == DataType.DATE:
        if not isinstance(value, str) or not is_iso_date(value):
            raise ValidationError(f"Attribute '{name}' must be an ISO date (YYYY-MM-DD)")
        result = value
    elif data_type == DataType.DATETIME:
        if not isinstance(value, str) or not is_iso_datetime(value):
            raise ValidationError(f"Attribute '{name}' must be an ISO datetime")
        result = value
    else:
        raise ValidationError(f"Unknown data type '{data_type}'")

    if attribute.validation_regex:
        try:
            matched = re.search(attribute.validation_regex, stringify(result))
        except re.error as e:
            raise ValidationError(f"Attribute '{name}' has an invalid validation_regex: {e}") from e
        if not matched:
            raise ValidationError(f"Attribute '{name}' failed validation_regex")

    return result
