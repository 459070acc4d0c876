"""Destination classification — best-effort substring heuristics.

Every place that needs to know "where is this destination" goes through this
module so the heuristics can later be swapped for a real geocoding lookup.
Ambiguous names (Georgia the country vs. the US state) are not disambiguated.
"""

import re

from app.data.destinations import (
    COST_TIERS,
    COUNTRY_ALIASES,
    DEFAULT_LOCALE,
    EQUIPMENT_ACTIVITIES,
    LOCALES,
    SOUTHERN_HEMISPHERE,
)


def _normalize(destination: str | None) -> str:
    return (destination or "").strip().lower()


def _first_match(text: str, table: tuple[tuple[str, tuple[str, ...]], ...]) -> str | None:
    if not text:
        return None
    for key, needles in table:
        if any(n in text for n in needles):
            return key
    return None


def classify_country(destination: str | None) -> str | None:
    """Return the country key for a destination, or None when unmatched."""
    return _first_match(_normalize(destination), COUNTRY_ALIASES)


def cost_tier(destination: str | None) -> str:
    """Return very_high/high/moderate/low. Unknown destinations are moderate."""
    return _first_match(_normalize(destination), COST_TIERS) or "moderate"


def locale_for(destination: str | None) -> str:
    return _first_match(_normalize(destination), LOCALES) or DEFAULT_LOCALE


def equipment_activity(*hints: str | None) -> tuple[str, float, str] | None:
    """Find an equipment-heavy activity in any of the hints.

    Returns (activity, per-traveler-per-day rate, description) or None.
    """
    text = " ".join(_normalize(h) for h in hints if h)
    if not text:
        return None
    for activity, needles, rate, description in EQUIPMENT_ACTIVITIES:
        # word-start match so "ski" does not hit "Helsinki"
        if any(re.search(rf"\b{re.escape(n)}", text) for n in (activity, *needles)):
            return activity, rate, description
    return None


def is_southern_hemisphere(destination: str | None) -> bool:
    text = _normalize(destination)
    return any(n in text for n in SOUTHERN_HEMISPHERE)
