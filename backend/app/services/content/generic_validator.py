"""Stage 5 — detect placeholder content that means the model did not do its job."""

import re

GENERIC_PATTERNS: tuple[re.Pattern, ...] = tuple(
    re.compile(rf"\b{phrase}\b", re.IGNORECASE)
    for phrase in (
        "Local Restaurant",
        "Historic Old Town",
        "Popular Attraction",
        "Traditional Market",
        "City Center",
        "Main Square",
    )
)


def detect_generic_content(text: str | None) -> list[str]:
    """Return the denylisted phrases found in text (empty list when clean)."""
    if not text:
        return []
    found = []
    for pattern in GENERIC_PATTERNS:
        match = pattern.search(text)
        if match:
            found.append(match.group(0))
    return found
