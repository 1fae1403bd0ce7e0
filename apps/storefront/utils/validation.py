"""
Shared field validation for admin forms.

Every record type declares its fields once as a tuple of ``FieldRule`` and
both the create and update paths run ``validate_fields`` over it. Error
messages are Persian and rendered with Persian digits, matching the admin UI.
"""

import enum
import json
import math
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Sequence

from storefront.services.exceptions import FieldValidationError
from storefront.utils.slug import generate_slug

_PERSIAN_DIGITS = str.maketrans("0123456789", "۰۱۲۳۴۵۶۷۸۹")

SLUG_UNAVAILABLE_MESSAGE = "نمی‌توان از نام انتخابی slug مناسب ساخت"


class FieldKind(str, enum.Enum):
    """How a field's raw value is parsed."""

    TEXT = "text"
    POSITIVE_NUMBER = "positive_number"
    JSON_OBJECT = "json_object"
    REFERENCE = "reference"


@dataclass(frozen=True)
class FieldRule:
    """Validation rule for one form field."""

    name: str
    label: str
    kind: FieldKind = FieldKind.TEXT
    required: bool = False
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    required_message: Optional[str] = None


def to_persian_digits(value: Any) -> str:
    """Render a number with Persian digit glyphs (12 -> "۱۲")."""
    return str(value).translate(_PERSIAN_DIGITS)


def _clean_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        value = str(value)
    value = value.strip()
    return value or None


def _check_length(rule: FieldRule, value: str) -> None:
    if rule.min_length is not None and len(value) < rule.min_length:
        raise FieldValidationError(
            rule.name,
            f"{rule.label} باید حداقل {to_persian_digits(rule.min_length)} کاراکتر باشد",
        )
    if rule.max_length is not None and len(value) > rule.max_length:
        raise FieldValidationError(
            rule.name,
            f"{rule.label} نمی‌تواند بیشتر از {to_persian_digits(rule.max_length)} کاراکتر باشد",
        )


def _parse_positive_number(rule: FieldRule, value: str) -> float:
    message = f"{rule.label} باید یک عدد مثبت باشد"
    try:
        number = float(value)
    except ValueError:
        raise FieldValidationError(rule.name, message)
    if not math.isfinite(number) or number <= 0:
        raise FieldValidationError(rule.name, message)
    return number


def _parse_json_object(rule: FieldRule, value: str) -> Dict[str, Any]:
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError:
        raise FieldValidationError(rule.name, f"فرمت JSON {rule.label} معتبر نیست")
    if not isinstance(parsed, dict):
        raise FieldValidationError(rule.name, f"{rule.label} باید یک شیء JSON معتبر باشد")
    return parsed


def validate_field(rule: FieldRule, raw: Any) -> Any:
    """Validate and clean a single value. Returns None for empty optional fields."""
    if rule.kind == FieldKind.JSON_OBJECT and isinstance(raw, dict):
        return raw

    value = _clean_text(raw)

    if value is None:
        if not rule.required:
            return None
        if rule.required_message:
            raise FieldValidationError(rule.name, rule.required_message)
        # Empty input reports the same message as an invalid one
        if rule.kind == FieldKind.TEXT and rule.min_length:
            _check_length(rule, "")
        if rule.kind == FieldKind.POSITIVE_NUMBER:
            _parse_positive_number(rule, "")
        raise FieldValidationError(rule.name, f"{rule.label} الزامی است")

    if rule.kind == FieldKind.POSITIVE_NUMBER:
        return _parse_positive_number(rule, value)
    if rule.kind == FieldKind.JSON_OBJECT:
        return _parse_json_object(rule, value)

    _check_length(rule, value)
    return value


def validate_fields(rules: Sequence[FieldRule], values: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Validate submitted values against a rule set.

    Rules run in order and the first failure is raised.

    Args:
        rules: Field rules for the record type
        values: Raw submitted values keyed by field name

    Returns:
        Dict of cleaned values for every rule (None for empty optional fields)

    Raises:
        FieldValidationError: If any field fails its rule
    """
    return {rule.name: validate_field(rule, values.get(rule.name)) for rule in rules}


def require_slug(name: str) -> str:
    """Derive a slug from ``name`` or raise when nothing usable is left."""
    slug = generate_slug(name)
    if not slug:
        raise FieldValidationError("name", SLUG_UNAVAILABLE_MESSAGE)
    return slug


CATEGORY_RULES = (
    FieldRule("name", "نام دسته‌بندی", required=True, min_length=2, max_length=100),
    FieldRule("description", "توضیحات", max_length=500),
)

PRODUCT_RULES = (
    FieldRule("name", "نام محصول", required=True, min_length=2, max_length=200),
    FieldRule("price", "قیمت", FieldKind.POSITIVE_NUMBER, required=True),
    FieldRule(
        "category_id",
        "دسته‌بندی",
        FieldKind.REFERENCE,
        required=True,
        required_message="لطفاً یک دسته‌بندی انتخاب کنید",
    ),
    FieldRule("description", "توضیحات", max_length=1000),
    FieldRule("specs", "مشخصات", FieldKind.JSON_OBJECT),
)
