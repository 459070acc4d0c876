"""Booking advisor — holiday, event and crowd-pattern advisories.

Purely advisory and side-effect-free. Output is fed into the generation prompt
as extra context; it never blocks or fails a plan.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from app.data.destinations import CALENDARS, Observance
from app.services.destination_classifier import classify_country

logger = logging.getLogger(__name__)

MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

EXTREME_CROWDS = ("very_high", "extreme")

# Peak / optimal windows per activity category (local time, HH:MM-HH:MM)
CROWD_PATTERNS = {
    "museums": {
        "peak_hours": ("10:00-12:00", "14:00-16:00"),
        "best_times": ("08:00-10:00", "16:00-18:00"),
        "weekend_surge": 1.5,
    },
    "restaurants": {
        "peak_hours": ("12:00-14:00", "19:00-21:00"),
        "best_times": ("11:30-12:00", "18:30-19:00", "21:30-22:00"),
        "weekend_surge": 1.3,
    },
    "transport": {
        "peak_hours": ("07:00-09:00", "17:00-19:00"),
        "best_times": ("09:30-16:30", "19:30-22:00"),
        "weekend_surge": None,
    },
    "activities": {
        "peak_hours": (),
        "best_times": (),
        "weekend_surge": None,
    },
}

NAMED_SLOTS = {
    "morning": "09:00-12:00",
    "afternoon": "13:00-17:00",
    "evening": "18:00-21:00",
    "night": "21:00-23:30",
}

MAX_TRIP_ADVISORIES = 8


@dataclass
class BookingAdvisory:
    warnings: list[str] = field(default_factory=list)
    opportunities: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    priority: str = "low"
    urgency: str = "normal"

    def is_empty(self) -> bool:
        return not (self.warnings or self.opportunities or self.recommendations)

    def to_dict(self) -> dict:
        return {
            "warnings": list(self.warnings),
            "opportunities": list(self.opportunities),
            "recommendations": list(self.recommendations),
            "priority": self.priority,
            "urgency": self.urgency,
        }


# ─── Date helpers ───


def easter_sunday(year: int) -> date:
    """Gregorian Easter Sunday (anonymous Gregorian algorithm)."""
    a = year % 19
    b, c = divmod(year, 100)
    d, e = divmod(b, 4)
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i, k = divmod(c, 4)
    l = (32 + 2 * e + 2 * i - h - k) % 7
    m = (a + 11 * h + 22 * l) // 451
    month, day = divmod(h + l - 7 * m + 114, 31)
    return date(year, month, day + 1)


def _month_index(name: str) -> int | None:
    name = name.strip()[:3].title()
    return MONTHS.index(name) + 1 if name in MONTHS else None


def _matches_date_token(token: str, target: date) -> bool:
    token = token.strip().lower()
    if token.startswith("easter"):
        offset = token[len("easter"):] or "0"
        try:
            days = int(offset)
        except ValueError:
            return False
        return target == easter_sunday(target.year) + timedelta(days=days)
    return token == target.strftime("%m-%d")


def _parse_month_day(text: str, default_month: int | None = None) -> tuple[int, int] | None:
    parts = text.strip().split()
    try:
        if len(parts) == 2:
            month = _month_index(parts[0])
            return (month, int(parts[1])) if month else None
        if len(parts) == 1 and default_month:
            return default_month, int(parts[0])
    except ValueError:
        return None
    return None


def in_period(target: date, period: str | None) -> bool:
    """Check whether a date falls inside a human period description.

    Supported: "May", "Sep-Oct", "Nov-Jan" (wraps the year), "Apr 13-15",
    "Apr 29-May 5", "Dec 29-Jan 3" and "Easter Week".
    """
    if not period:
        return False
    period = period.strip()

    if period.lower() == "easter week":
        easter = easter_sunday(target.year)
        return easter - timedelta(days=7) <= target <= easter

    if "-" not in period:
        month = _month_index(period)
        return month == target.month if month and len(period.split()) == 1 else False

    start_text, end_text = (p.strip() for p in period.split("-", 1))

    # Month ranges like "Sep-Oct"
    if " " not in start_text and " " not in end_text:
        start_month, end_month = _month_index(start_text), _month_index(end_text)
        if start_month and end_month:
            if start_month <= end_month:
                return start_month <= target.month <= end_month
            return target.month >= start_month or target.month <= end_month

    # Day ranges like "Apr 13-15" / "Apr 29-May 5" / "Dec 29-Jan 3"
    start = _parse_month_day(start_text)
    if not start:
        return False
    end = _parse_month_day(end_text, default_month=start[0])
    if not end:
        return False
    key = (target.month, target.day)
    if start <= end:
        return start <= key <= end
    return key >= start or key <= end


# ─── Knowledge-table lookups ───


def matching_observances(destination: str, target: date) -> list[Observance]:
    """Holidays and events in the destination's country active on `target`."""
    country = classify_country(destination)
    calendar = CALENDARS.get(country) if country else None
    if not calendar:
        return []

    dest = (destination or "").lower()
    results: list[Observance] = []

    for holiday in calendar.holidays:
        if any(_matches_date_token(t, target) for t in holiday.dates):
            results.append(holiday)
        elif holiday.period and in_period(target, holiday.period):
            if not holiday.location or holiday.location.lower() in dest:
                results.append(holiday)

    for event in calendar.events:
        if event.year and event.year != target.year:
            continue
        matched = (
            any(_matches_date_token(t, target) for t in event.dates)
            or in_period(target, event.period)
        )
        if matched and (not event.location or event.location.lower() in dest):
            results.append(event)

    return results


# ─── Crowd and timing heuristics ───


def _parse_slot(time_slot: str | None) -> tuple[str, str] | None:
    slot = (time_slot or "").strip().lower()
    slot = NAMED_SLOTS.get(slot, slot)
    if not slot:
        return None
    if "-" in slot:
        start, end = (p.strip() for p in slot.split("-", 1))
    else:
        start = end = slot
    try:
        start = datetime.strptime(start, "%H:%M").strftime("%H:%M")
        end = datetime.strptime(end, "%H:%M").strftime("%H:%M")
    except ValueError:
        return None
    return start, end


def _window(window: str) -> tuple[str, str]:
    start, end = window.split("-")
    return start, end


def _overlaps(slot: tuple[str, str], window: str) -> bool:
    w_start, w_end = _window(window)
    s_start, s_end = slot
    if s_start == s_end:
        return w_start <= s_start < w_end
    return s_start < w_end and w_start < s_end


def _starts_in(slot: tuple[str, str], window: str) -> bool:
    w_start, w_end = _window(window)
    return w_start <= slot[0] <= w_end


def analyze_crowd_patterns(activity_type: str, target: date, time_slot: str | None) -> dict | None:
    pattern = CROWD_PATTERNS.get(activity_type)
    slot = _parse_slot(time_slot)
    if not pattern or not slot:
        return None

    is_weekend = target.weekday() >= 5
    surge = pattern.get("weekend_surge")

    if any(_overlaps(slot, peak) for peak in pattern["peak_hours"]):
        if is_weekend and surge:
            return {
                "peak": True,
                "weekend": True,
                "recommendation": (
                    f"Peak time + weekend: expect about {round((surge - 1) * 100)}% more crowds. "
                    "Consider booking early morning or late afternoon."
                ),
            }
        alternative = pattern["best_times"][0] if pattern["best_times"] else "earlier or later"
        return {
            "peak": True,
            "weekend": False,
            "recommendation": f"Peak visiting time. Book in advance or consider {alternative} for shorter waits.",
        }

    if any(_starts_in(slot, best) for best in pattern["best_times"]):
        return {
            "peak": False,
            "weekend": is_weekend,
            "recommendation": "Perfect timing! You've chosen an optimal time with typically shorter lines.",
        }

    return None


def analyze_group_size(activity_type: str, group_size: int) -> str | None:
    if group_size >= 8:
        return (
            f"Large group ({group_size}): call ahead for group rates and reservations. "
            "Many venues offer discounts for 8+ people."
        )
    if group_size >= 6 and activity_type == "restaurants":
        return f"Party of {group_size}: reservations highly recommended, ideally 2-3 days ahead."
    if group_size == 1 and activity_type == "activities":
        return "Solo traveler: some tours offer single-person discounts. Look at walking or photography tours."
    return None


def analyze_time_slot(activity_type: str, time_slot: str | None, target: date) -> str | None:
    slot = _parse_slot(time_slot)
    if not slot:
        return None
    hour = int(slot[0].split(":")[0])
    is_weekend = target.weekday() >= 5

    if activity_type == "restaurants":
        if 12 <= hour <= 14:
            return (
                f"Lunch time: consider booking ahead, especially on {'weekends' if is_weekend else 'weekdays'}. "
                "Prix fixe menus are often available."
            )
        if 19 <= hour <= 21:
            return "Prime dinner time: reservations essential. Book 24-48 hours ahead for popular restaurants."
    if activity_type == "museums" and hour < 10:
        return "Early bird advantage: first admission slots usually have shorter lines and better photos."
    if activity_type == "transport" and (7 <= hour <= 9 or 17 <= hour <= 19):
        return "Rush hour: public transport will be crowded. Shift by 30-60 minutes or use a taxi."
    return None


def _priority(warnings: list[str], opportunities: list[str]) -> str:
    if len(warnings) >= 2:
        return "high"
    if opportunities:
        return "medium"
    return "low"


def _coerce_date(value: date | datetime | str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


# ─── Public API ───


def advise(
    destination: str,
    activity_type: str,
    date_value: date | datetime | str,
    time_slot: str | None = None,
    group_size: int = 2,
) -> BookingAdvisory:
    """Build booking advisories for one destination/activity/date/slot."""
    target = _coerce_date(date_value)
    activity_type = (activity_type or "").strip().lower()
    advisory = BookingAdvisory()
    extreme = False

    for info in matching_observances(destination, target):
        if activity_type and activity_type in info.closures:
            advisory.warnings.append(f"{info.name}: many {activity_type} may be closed")
        if info.crowds in EXTREME_CROWDS:
            extreme = True
            note = f" ({info.note})" if info.note else ""
            advisory.warnings.append(f"{info.name}: expect huge crowds - book well in advance{note}")
        if info.events:
            advisory.opportunities.append(
                f"{info.name}: special events ({', '.join(info.events)}) - a unique experience"
            )
        elif info.impact == "hotel_surge" and info.crowds not in EXTREME_CROWDS:
            advisory.warnings.append(f"{info.name}: hotel prices usually surge - book early")

    crowd = analyze_crowd_patterns(activity_type, target, time_slot)
    if crowd:
        advisory.recommendations.append(crowd["recommendation"])

    group = analyze_group_size(activity_type, max(1, int(group_size or 1)))
    if group:
        advisory.recommendations.append(group)

    timing = analyze_time_slot(activity_type, time_slot, target)
    if timing:
        advisory.recommendations.append(timing)

    advisory.priority = _priority(advisory.warnings, advisory.opportunities)
    if extreme:
        advisory.urgency = "urgent"
    elif crowd and crowd["peak"] and crowd["weekend"]:
        advisory.urgency = "moderate"
    return advisory


def trip_advisories(
    destination: str,
    start: date | None,
    days: int,
    group_size: int = 2,
) -> list[str]:
    """Holiday/event notes across every day of a trip, for prompt context."""
    if not start:
        return []
    notes: list[str] = []
    seen: set[str] = set()
    for offset in range(max(1, days)):
        day = start + timedelta(days=offset)
        result = advise(destination, "museums", day, None, group_size)
        for text in result.warnings + result.opportunities:
            if text not in seen:
                seen.add(text)
                notes.append(f"{day.isoformat()}: {text}")
        if len(notes) >= MAX_TRIP_ADVISORIES:
            break
    if notes:
        logger.info(f"{len(notes)} booking advisories for {destination}")
    return notes[:MAX_TRIP_ADVISORIES]
