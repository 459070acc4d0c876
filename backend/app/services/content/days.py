"""Pad an itinerary with open-exploration day blocks when the model stopped early."""

import re
from datetime import date, timedelta

DAY_HEADING_RE = re.compile(r"^\s*(?:#{2,4}\s*|\*\*)\s*Day\s+\d+", re.IGNORECASE | re.MULTILINE)


def count_day_sections(markdown: str) -> int:
    return len(DAY_HEADING_RE.findall(markdown or ""))


def ensure_day_sections(markdown: str, days: int, start: date | None = None) -> str:
    """Append "Open Exploration" blocks until there is one per trip day."""
    existing = count_day_sections(markdown)
    if existing >= days:
        return markdown

    blocks = []
    for i in range(existing + 1, days + 1):
        when = f" ({(start + timedelta(days=i - 1)).isoformat()})" if start else ""
        blocks.append(
            f"### Day {i} — Open Exploration{when}\n"
            f"- **Morning:** Neighbourhood warm-up walk. [Map](map:day {i} walking loop)\n"
            f"- **Afternoon:** Market and museum time. [Reviews](reviews:day {i} market) · "
            f"[Tickets](tickets:day {i} museum)\n"
            f"- **Evening:** Sunset viewpoint and dinner. [Map](map:day {i} viewpoint) · "
            f"[Book](book:day {i} dinner)"
        )
    return (markdown or "").rstrip() + "\n\n" + "\n\n".join(blocks) + "\n"
