"""Built-in validators for onboarding form fields."""

from __future__ import annotations

import re
from datetime import date
from typing import Any

# Registry of validator functions: name -> callable(value, **params) -> str | None
# Returns an error message string on failure, None on success.
VALIDATORS: dict[str, Any] = {}

MAX_FILE_SIZE_MB = 5
MAX_FILE_SIZE = MAX_FILE_SIZE_MB * 1024 * 1024
ACCEPTED_IMAGE_TYPES = ("image/jpeg", "image/png", "image/jpg")
ACCEPTED_DOCUMENT_TYPES = ("application/pdf",)

PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 20
_PASSWORD_PATTERN = r"(?![0-9])(?=.*[0-9])(?=.*[@#$%!*&])\S+"
_URL_PATTERN = (
    r"(?:https?://)?(?:www\.)?"
    r"(?:[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?\.)+[A-Za-z]{2,}"
    r"(?::\d{1,5})?(?:/[^\s?#]*)*(?:[?#]\S*)?"
)


def register(name: str):
    """Decorator to register a validator function."""
    def decorator(fn):
        VALIDATORS[name] = fn
        return fn
    return decorator


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple)):
        return not any(not is_blank(v) for v in value)
    return False


@register("required")
def validate_required(value: Any, label: str | None = None, **_kwargs: Any) -> str | None:
    if is_blank(value):
        return f"{label} is required." if label else "This field is required."
    return None


@register("email")
def validate_email(value: Any, **_kwargs: Any) -> str | None:
    if value is None or not isinstance(value, str) or not value.strip():
        return None
    if not re.fullmatch(r"[^\s@]+@[^\s@]+\.[^\s@]+", value.strip()):
        return "Please enter a valid email address."
    return None


@register("phone")
def validate_phone(value: Any, label: str = "Phone number", **_kwargs: Any) -> str | None:
    if value is None or not isinstance(value, str) or not value.strip():
        return None
    digits = re.sub(r"[\s\-\(\)\+]", "", value)
    if not digits.isdigit() or len(digits) < 10:
        return f"Invalid {label.lower()}."
    return None


@register("postal_code")
def validate_postal_code(value: Any, **_kwargs: Any) -> str | None:
    if value is None or not isinstance(value, str) or not value.strip():
        return None
    if not re.fullmatch(r"\d{6}", value.strip()):
        return "Must be exactly 6 digits."
    return None


@register("month")
def validate_month(value: Any, **_kwargs: Any) -> str | None:
    if value is None or not isinstance(value, str) or not value.strip():
        return None
    if not re.fullmatch(r"\d{4}-(0[1-9]|1[0-2])", value.strip()):
        return "Please enter a valid month in YYYY-MM format."
    return None


@register("not_future_month")
def validate_not_future_month(
    value: Any, today: date | None = None, **_kwargs: Any
) -> str | None:
    if validate_month(value) is not None or is_blank(value):
        return None
    today = today or date.today()
    year, month = (int(p) for p in value.strip().split("-"))
    if (year, month) > (today.year, today.month):
        return "Established date cannot be in the future. Please select today or a past date."
    return None


@register("numeric")
def validate_numeric(
    value: Any, min_val: float | None = None, max_val: float | None = None, **_kwargs: Any
) -> str | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        num = float(value)
    except (TypeError, ValueError):
        return "Please enter a valid number."
    if min_val is not None and num < float(min_val):
        return f"Value must be at least {min_val}."
    if max_val is not None and num > float(max_val):
        return f"Value must be at most {max_val}."
    return None


@register("url")
def validate_url(value: Any, label: str = "", **_kwargs: Any) -> str | None:
    if value is None or not isinstance(value, str) or not value.strip():
        return None
    if not re.fullmatch(_URL_PATTERN, value.strip()):
        return f"Please enter a valid {label} URL." if label else "Please enter a valid URL."
    return None


@register("password")
def validate_password(value: Any, **_kwargs: Any) -> str | None:
    if value is None or not isinstance(value, str) or not value:
        return None
    if len(value) < PASSWORD_MIN_LENGTH:
        return f"Password must be at least {PASSWORD_MIN_LENGTH} characters."
    if len(value) > PASSWORD_MAX_LENGTH:
        return f"Password must be at most {PASSWORD_MAX_LENGTH} characters."
    if not re.fullmatch(_PASSWORD_PATTERN, value):
        return (
            "Password must start with a non-digit, include at least one number, "
            "one special character (@#$%!*&), and contain no whitespace."
        )
    return None


@register("choice")
def validate_choice(value: Any, options: str = "", **_kwargs: Any) -> str | None:
    if is_blank(value):
        return None
    allowed = options.split("|")
    if str(value) not in allowed:
        return f"Value must be one of: {', '.join(allowed)}."
    return None


@register("verified")
def validate_verified(value: Any, label: str = "Value", **_kwargs: Any) -> str | None:
    if value is not True:
        return f"{label} is not verified."
    return None


def _check_files(value: Any, accepted: tuple[str, ...], kinds: str) -> str | None:
    if not isinstance(value, list):
        return None
    for upload in value:
        content_type = getattr(upload, "content_type", None)
        content = getattr(upload, "content", b"")
        if content_type not in accepted:
            return f"Only {kinds} files are accepted."
        if len(content) > MAX_FILE_SIZE:
            return f"Max file size is {MAX_FILE_SIZE_MB}MB."
    return None


@register("image_files")
def validate_image_files(value: Any, **_kwargs: Any) -> str | None:
    return _check_files(value, ACCEPTED_IMAGE_TYPES, ".jpg and .png")


@register("pdf_files")
def validate_pdf_files(value: Any, **_kwargs: Any) -> str | None:
    return _check_files(value, ACCEPTED_DOCUMENT_TYPES, ".pdf")
