"""Built-in validation rules for site forms.

Each validator is a callable with the signature::

    def rule(value: str) -> str | None:
        '''Return an error message, or None if valid.'''

Every rule takes an optional ``message`` so forms can word their own
errors::

    "username": [alpha_num(message="Username must contain only letters and numbers.")]
"""

import re
from collections.abc import Callable

type Validator = Callable[[str], str | None]


def required(message: str = "This field is required") -> Validator:
    """Field must be present and non-empty."""

    def check(value: str) -> str | None:
        if not value or not value.strip():
            return message
        return None

    check.stops_on_failure = True  # type: ignore[attr-defined]
    return check


def min_length(n: int, message: str | None = None) -> Validator:
    """String must be at least *n* characters."""

    def check(value: str) -> str | None:
        if len(value) < n:
            return message or f"Must be at least {n} characters"
        return None

    return check


def max_length(n: int, message: str | None = None) -> Validator:
    """String must be at most *n* characters."""

    def check(value: str) -> str | None:
        if len(value) > n:
            return message or f"Must be at most {n} characters"
        return None

    return check


# Checks structure, not deliverability.
_EMAIL_RE = re.compile(r"^[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}$")


def email(message: str = "Must be a valid email address") -> Validator:
    def check(value: str) -> str | None:
        if not _EMAIL_RE.match(value):
            return message
        return None

    return check


def alpha_num(message: str = "Must contain only letters and numbers") -> Validator:
    """Value must be non-empty ASCII letters and digits."""

    def check(value: str) -> str | None:
        if not (value.isascii() and value.isalnum()):
            return message
        return None

    return check


def same_as(other: str, message: str = "The fields must match") -> Validator:
    """Value must equal *other* (password confirmation)."""

    def check(value: str) -> str | None:
        if value != other:
            return message
        return None

    return check


def integer(message: str = "Must be a whole number") -> Validator:
    def check(value: str) -> str | None:
        try:
            int(value)
        except ValueError:
            return message
        return None

    return check
