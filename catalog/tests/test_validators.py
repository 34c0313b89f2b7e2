"""
Type validator/coercer tests - pure functions, no database.
"""
import pytest

from catalog.errors import ValidationError
from catalog.models.attribute import Attribute, DataType
from catalog.utils.validators import (
    coerce,
    coerce_boolean,
    is_iso_date,
    is_iso_datetime,
    stringify,
    validate_regex_pattern,
)


def make_attr(data_type, name="attr", allowed_values=None, validation_regex=None):
    return Attribute(
        name=name,
        data_type=data_type,
        allowed_values=allowed_values,
        validation_regex=validation_regex,
    )


# ===================== NULL =====================


@pytest.mark.parametrize("data_type", list(DataType))
def test_null_rejected_for_every_type(data_type):
    attr = make_attr(data_type, allowed_values=["a"])
    with pytest.raises(ValidationError, match="cannot be null"):
        coerce(attr, None)


# ===================== TEXT =====================


@pytest.mark.parametrize("value, expected", [
    ("Red", "Red"),
    (5, "5"),
    (2.5, "2.5"),
    (3.0, "3"),
    (True, "true"),
    ({"a": 1}, '{"a": 1}'),
])
def test_text_stringifies(value, expected):
    assert coerce(make_attr(DataType.TEXT), value) == expected


# ===================== NUMBER =====================


@pytest.mark.parametrize("value, expected", [
    ("9", 9),
    (" 42 ", 42),
    ("9.5", 9.5),
    ("+3", 3),
    (".5", 0.5),
    ("9.", 9),
    ("-0.25", -0.25),
    ("1e3", 1000),
    (7, 7),
    (2.0, 2),
    (1.5, 1.5),
])
def test_number_accepts_finite_numbers(value, expected):
    result = coerce(make_attr(DataType.NUMBER), value)
    assert result == expected
    assert type(result) is type(expected)


@pytest.mark.parametrize("value", [
    "abc", "", "   ", "nan", "NaN", "inf", "-Infinity", "9kg", "1_000", "\u0661\u0662", "\uff19", "1e", ".",
    True, [1], {"n": 1},
])
def test_number_rejects_non_numbers(value):
    with pytest.raises(ValidationError, match="must be a number"):
        coerce(make_attr(DataType.NUMBER), value)


def test_number_rejects_infinite_float():
    with pytest.raises(ValidationError):
        coerce(make_attr(DataType.NUMBER), float("inf"))


# ===================== BOOLEAN =====================


@pytest.mark.parametrize("value, expected", [
    (True, True),
    (False, False),
    (1, True),
    (0, False),
    (2.5, True),
    ("true", True),
    ("TRUE", True),
    ("Yes", True),
    ("y", True),
    ("1", True),
    ("false", False),
    ("No", False),
    ("n", False),
    ("0", False),
])
def test_boolean_forms(value, expected):
    assert coerce(make_attr(DataType.BOOLEAN), value) is expected


@pytest.mark.parametrize("value", ["maybe", "", "2", [], {}])
def test_boolean_rejects_other_forms(value):
    with pytest.raises(ValidationError, match="Invalid boolean"):
        coerce(make_attr(DataType.BOOLEAN), value)


def test_coerce_boolean_helper_names_attribute():
    with pytest.raises(ValidationError, match="'In Stock'"):
        coerce_boolean("perhaps", "In Stock")


# ===================== ENUM =====================


def test_enum_case_sensitive_membership():
    gender = make_attr(DataType.ENUM, name="Gender", allowed_values=["Men", "Women", "Unisex"])
    assert coerce(gender, "Men") == "Men"
    with pytest.raises(ValidationError, match="must be one of: Men, Women, Unisex"):
        coerce(gender, "men")


def test_enum_compares_string_forms():
    sizes = make_attr(DataType.ENUM, allowed_values=[36, 38, 40])
    assert coerce(sizes, "38") == "38"
    assert coerce(sizes, 40) == "40"
    with pytest.raises(ValidationError):
        coerce(sizes, 39)


def test_enum_boolean_domain():
    flag = make_attr(DataType.ENUM, allowed_values=[True, False])
    assert coerce(flag, True) == "true"
    assert coerce(flag, "false") == "false"


@pytest.mark.parametrize("allowed", [None, []])
def test_enum_without_allowed_values(allowed):
    with pytest.raises(ValidationError, match="no allowed_values"):
        coerce(make_attr(DataType.ENUM, allowed_values=allowed), "x")


# ===================== DATE / DATETIME =====================


@pytest.mark.parametrize("value, ok", [
    ("2024-01-31", True),
    ("1999-12-01", True),
    ("2024-1-31", False),
    ("2024-01-31T00:00:00", False),
    ("2024-01-31\n", False),
    ("31-01-2024", False),
])
def test_iso_date(value, ok):
    assert is_iso_date(value) is ok


def test_date_requires_string():
    attr = make_attr(DataType.DATE)
    assert coerce(attr, "2024-02-29") == "2024-02-29"
    with pytest.raises(ValidationError, match="ISO date"):
        coerce(attr, 20240229)


@pytest.mark.parametrize("value, ok", [
    ("2024-01-31T10:20:30", True),
    ("2024-01-31T10:20:30Z", True),
    ("2024-01-31T10:20:30.123", True),
    ("2024-01-31T10:20:30.5+05:30", True),
    ("2024-01-31T10:20:30-0800", True),
    ("2024-01-31 10:20:30", False),
    ("2024-01-31T10:20", False),
    ("2024-01-31", False),
    ("2024-01-31T10:20:30+5", False),
])
def test_iso_datetime(value, ok):
    assert is_iso_datetime(value) is ok


def test_datetime_coerce():
    attr = make_attr(DataType.DATETIME, name="Released")
    assert coerce(attr, "2024-01-31T10:20:30Z") == "2024-01-31T10:20:30Z"
    with pytest.raises(ValidationError, match="ISO datetime"):
        coerce(attr, "yesterday")


# ===================== REGEX =====================


def test_regex_applies_after_coercion():
    code = make_attr(DataType.TEXT, name="Code", validation_regex=r"^[A-Z]{3}-\d+$")
    assert coerce(code, "ABC-12") == "ABC-12"
    with pytest.raises(ValidationError, match="failed validation_regex"):
        coerce(code, "abc-12")


def test_regex_is_not_anchored_by_engine():
    attr = make_attr(DataType.TEXT, validation_regex=r"\d")
    assert coerce(attr, "a1b") == "a1b"


def test_regex_checks_canonical_number_text():
    whole = make_attr(DataType.NUMBER, validation_regex=r"^\d+$")
    assert coerce(whole, "9") == 9
    assert coerce(whole, 9.0) == 9
    with pytest.raises(ValidationError):
        coerce(whole, "9.5")


def test_invalid_regex_pattern():
    with pytest.raises(ValidationError, match="Invalid validation_regex"):
        validate_regex_pattern("(")
    assert validate_regex_pattern(None) is None


def test_stringify_forms():
    assert stringify(False) == "false"
    assert stringify(10.0) == "10"
    assert stringify([1, "a"]) == '[1, "a"]'
