"""Form validation: composable rules, clean results.

Usage::

    from candlewax.validation import validate, required, email

    result = validate(post, {
        "title": [required("The post must have a title.")],
        "email": [required(), email()],
    })
    if not result:
        ...  # result.errors
"""

from collections.abc import Mapping

from candlewax.validation.result import ValidationResult
from candlewax.validation.rules import (
    Validator,
    alpha_num,
    email,
    integer,
    max_length,
    min_length,
    required,
    same_as,
)

__all__ = [
    "ValidationResult",
    "Validator",
    "alpha_num",
    "email",
    "integer",
    "max_length",
    "min_length",
    "required",
    "same_as",
    "validate",
]


def validate(
    data: Mapping[str, str],
    rules: Mapping[str, list[Validator]],
) -> ValidationResult:
    """Validate data against a set of rules.

    Fields without rules are dropped from ``.data``; a field missing
    from ``data`` is validated as the empty string. A failed presence
    check skips the field's remaining rules.
    """
    errors: dict[str, list[str]] = {}
    cleaned: dict[str, str] = {}

    for field_name, validators in rules.items():
        value = data.get(field_name) or ""

        field_errors: list[str] = []
        for validator in validators:
            error = validator(value)
            if error is not None:
                field_errors.append(error)
                if getattr(validator, "stops_on_failure", False):
                    break

        if field_errors:
            errors[field_name] = field_errors
        else:
            cleaned[field_name] = value

    return ValidationResult(data=cleaned, errors=errors)
