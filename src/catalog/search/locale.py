"""Supported content locales."""
from __future__ import annotations

from enum import Enum

from catalog.domain.exceptions import UnsupportedLocale


class Locale(str, Enum):
    EN = "en"
    ES = "es"


BASE_LOCALE = Locale.EN


def parse_locale(value: Locale | str | None) -> Locale:
    """Map a caller-supplied locale onto the closed enumeration.

    ``None`` selects the base locale. Anything else must match a member value
    exactly (after trimming and lowercasing); unknown strings are rejected.
    """
    if value is None:
        return BASE_LOCALE
    if isinstance(value, Locale):
        return value
    if not isinstance(value, str):
        raise UnsupportedLocale(f"Unsupported locale: {value!r}")
    try:
        return Locale(value.strip().lower())
    except ValueError:
        supported = ", ".join(loc.value for loc in Locale)
        raise UnsupportedLocale(
            f"Unsupported locale {value!r}; expected one of: {supported}"
        ) from None
