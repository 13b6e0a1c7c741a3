"""Supported locales and the single localized-string lookup rule."""

from __future__ import annotations

from enum import Enum
from typing import Mapping, TypeVar

T = TypeVar("T")


class Locale(str, Enum):
    """Locales every user-facing string table must cover."""

    EN_US = "en-US"
    HI_IN = "hi-IN"
    MR_IN = "mr-IN"


DEFAULT_LOCALE = Locale.EN_US


def coerce_locale(value: str | Locale | None) -> Locale:
    """Map a raw locale tag onto a supported locale, falling back to the default."""
    if isinstance(value, Locale):
        return value
    if not value:
        return DEFAULT_LOCALE
    try:
        return Locale(value)
    except ValueError:
        return DEFAULT_LOCALE


def localize(
    table: Mapping[str, T],
    locale: str | Locale | None,
    fallback: str | Locale = DEFAULT_LOCALE,
) -> T:
    """Return the entry for ``locale``, or the ``fallback`` entry when it is missing."""
    key = locale.value if isinstance(locale, Locale) else locale
    if key and key in table:
        return table[key]
    fallback_key = fallback.value if isinstance(fallback, Locale) else fallback
    if fallback_key in table:
        return table[fallback_key]
    raise KeyError(f"No entry for locale {key!r} or fallback {fallback_key!r}")
