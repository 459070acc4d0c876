"""Deterministic offline itinerary.

Used whenever the LLM path fails. Produces markdown with every canonical
section plus link and image tokens, so the normal content pipeline renders it
exactly like model output. Pure: no network, no randomness, never raises on a
valid TripRequest.
"""

import logging
from datetime import timedelta

from app.data.destinations import CITY_GUIDES
from app.schemas.trip import TripRequest
from app.services.budget_engine import BudgetBreakdown, compute_budget
from app.services.content.sections import SECTIONS_BY_KEY

logger = logging.getLogger(__name__)

PREVIEW_DAYS = 2

GENERAL_GUIDE = {
    "highlights": "General suggestion: the best-reviewed landmarks and museums near where you stay",
    "cuisine": "General suggestion: neighbourhood eateries with recent reviews and a busy lunch trade",
    "transport": "General suggestion: a multi-day public transport pass plus walking between nearby sights",
    "culture": "General suggestion: a guided walking tour on day one to get oriented",
}

DAY_THEMES = (
    ("Arrival & Orientation", "Check in and take a slow first walk", "Orientation walking tour", "Welcome dinner near your stay"),
    ("Icons & Museums", "Headline landmark at opening time", "Flagship museum", "Sunset viewpoint"),
    ("Neighbourhoods", "Food hall or produce market breakfast", "Explore a residential quarter", "Live music or a show"),
    ("Day Trip", "Early train out of town", "Scenic countryside or coast", "Relaxed dinner back in town"),
    ("Hidden Corners", "Gardens or a riverside walk", "Small specialist museum", "Wine or cocktail bar crawl"),
    ("Hands-On", "Cooking class or workshop", "Shopping for local crafts", "Farewell tasting menu"),
    ("Slow Day", "Late breakfast and café hopping", "Park, spa or beach time", "Night market or evening stroll"),
)


def _guide(destination: str) -> tuple[dict, bool]:
    text = destination.lower()
    for city, guide in CITY_GUIDES.items():
        if city in text:
            return guide, True
    return GENERAL_GUIDE, False


def _heading(key: str) -> str:
    return f"## {SECTIONS_BY_KEY[key].heading}"


def _party(trip: TripRequest) -> str:
    party = f"{trip.adults} adult{'s' if trip.adults != 1 else ''}"
    if trip.children:
        party += f" and {trip.children} child{'ren' if trip.children != 1 else ''}"
    return party


def _overview(trip: TripRequest, guide: dict, mode: str, weather: dict | None, advisories: list[str]) -> list[str]:
    dest = trip.destination
    dates = ""
    if trip.start_date and trip.end_date:
        dates = f" ({trip.start_date.isoformat()} to {trip.end_date.isoformat()})"
    lines = [
        _heading("overview"),
        "",
        f"Your {trip.days}-day {trip.style} trip to {dest}{dates} for {_party(trip)}.",
        "",
        f"- **Highlights:** {guide['highlights']}",
        f"- **Culture:** {guide['culture']}",
        f"- **Purpose:** {trip.purpose}",
    ]
    if trip.activities:
        lines.append(f"- **Interests:** {trip.activities}")
    if weather and weather.get("summary"):
        lines.append(f"- **Weather:** {weather['summary']}")
    if advisories:
        lines += ["", "**Heads-up for your dates:**"]
        lines += [f"- {note}" for note in advisories]
    lines += ["", f"![{dest}](image:skyline)"]
    if mode == "preview":
        lines += ["", "_This is a preview. The full plan adds every day of the trip and more detail._"]
    return lines


def _budget(trip: TripRequest, budget: BudgetBreakdown) -> list[str]:
    cur = trip.currency
    rows = (
        ("🏨 Stay", "stay"),
        ("🍽️ Food (per person/day)", "food"),
        ("🎫 Activities", "activities"),
        ("🚇 Transit", "transit"),
        ("🎿 Equipment", "equipment"),
    )
    lines = [
        _heading("budget"),
        "",
        f"| Category | Per day ({cur}) | Trip total ({cur}) |",
        "|---|---:|---:|",
    ]
    for label, name in rows:
        amount = budget[name]
        if name == "equipment" and not amount.total:
            continue
        lines.append(f"| {label} | {amount.per_day:,} | {amount.total:,} |")
    lines.append(f"| **Total** | | **{budget.total:,}** |")
    lines.append("")
    if budget.derived:
        lines.append(f"_Estimated for a {budget.style} trip ({budget.cost_tier.replace('_', ' ')} cost destination)._")
    if budget.equipment_note:
        lines.append(f"_Includes {budget.equipment_note}._")
    return lines


def _getting_around(trip: TripRequest, guide: dict) -> list[str]:
    dest = trip.destination
    return [
        _heading("getting_around"),
        "",
        guide["transport"] + ".",
        "",
        "- Buy a multi-day transit pass on arrival",
        "- Save offline maps before you land",
        f"- Airport to hotel: compare transfers against public transport [Map](map:{dest} airport)",
        "",
        f"[Flights](flights:{dest}) · [Car hire](cars:{dest}) · [Transit map](map:{dest} metro map)",
    ]


def _accommodation(trip: TripRequest) -> list[str]:
    dest = trip.destination
    tiers = {
        "budget": "well-reviewed guesthouses and design hostels with private rooms",
        "mid": "boutique hotels within walking distance of the sights",
        "luxury": "five-star hotels and landmark properties",
    }
    return [
        _heading("accommodation"),
        "",
        f"Look for {tiers.get(trip.style, tiers['mid'])} close to a metro or tram stop.",
        "",
        "- Book early for peak dates and check the cancellation terms",
        "- Read reviews from the last three months",
        "",
        f"[Book](book:{dest} hotels) · [Reviews](reviews:{dest} hotels) · [Map](map:{dest} hotels)",
        "",
        f"![{dest} hotels](image:hotel)",
    ]


def _attractions(trip: TripRequest, guide: dict, curated: bool) -> list[str]:
    dest = trip.destination
    lines = [_heading("must_see"), ""]
    if curated:
        for name in [h.strip() for h in guide["highlights"].replace(" and ", ", ").split(",") if h.strip()]:
            lines.append(f"- **{name}** [Map](map:{name} {dest}) · [Tickets](tickets:{name} {dest})")
    else:
        lines.append(f"- {guide['highlights']} [Map](map:{dest} landmarks)")
        lines.append(f"- General suggestion: the top-rated guided tour [Tickets](tickets:{dest} tours)")
    lines += ["", f"![{dest} landmarks](image:landmarks)"]
    return lines


def _dining(trip: TripRequest, guide: dict) -> list[str]:
    dest = trip.destination
    lines = [
        _heading("dining"),
        "",
        guide["cuisine"] + ".",
        "",
        "- Reserve dinner a day or two ahead on weekends",
        "- Lunch menus are the best value for sit-down meals",
    ]
    if trip.dietary:
        lines.append(f"- Dietary needs ({', '.join(trip.dietary)}): confirm with the restaurant when booking")
    lines += ["", f"[Reviews](reviews:{dest} restaurants) · [Map](map:{dest} food market)"]
    return lines


def _daily(trip: TripRequest, mode: str) -> list[str]:
    dest = trip.destination
    shown = min(trip.days, PREVIEW_DAYS) if mode == "preview" else trip.days
    lines = [_heading("daily"), ""]
    for i in range(shown):
        title, morning, afternoon, evening = DAY_THEMES[i % len(DAY_THEMES)]
        when = ""
        if trip.start_date:
            when = f" ({(trip.start_date + timedelta(days=i)).isoformat()})"
        lines += [
            f"### Day {i + 1} — {title}{when}",
            f"- **Morning:** {morning} [Map](map:{dest} {morning})",
            f"- **Afternoon:** {afternoon} [Tickets](tickets:{dest} {afternoon})",
            f"- **Evening:** {evening} [Reviews](reviews:{dest} {evening})",
            "",
        ]
    if shown < trip.days:
        lines.append(f"_Days {shown + 1}-{trip.days} are in the full plan._")
    return lines


def _packing(trip: TripRequest) -> list[str]:
    items = [
        "Passport or ID, plus digital copies",
        "Travel insurance documents",
        "Cards and a little local currency",
        "Universal power adapter",
        "Comfortable walking shoes",
    ]
    if trip.children:
        items.append("Snacks and entertainment for the kids")
    return [_heading("packing"), ""] + [f"- ☐ {item}" for item in items] + [
        "",
        f"[Travel insurance](insurance:{trip.destination})",
    ]


def _tips(trip: TripRequest) -> list[str]:
    return [
        _heading("tips"),
        "",
        "- Keep valuables in a zipped inner pocket on busy transit lines",
        "- Many museums close one day a week; check before you go",
        "- Tipping customs vary; ask your host on day one",
        "- A local eSIM is usually cheaper than roaming",
    ]


def _apps(trip: TripRequest) -> list[str]:
    return [
        _heading("apps"),
        "",
        "- **Google Maps** with offline areas downloaded",
        "- **Citymapper** or the local transit app",
        "- **Google Translate** with the offline language pack",
        "- **XE Currency** for quick conversions",
    ]


def _emergency(trip: TripRequest) -> list[str]:
    return [
        _heading("emergency"),
        "",
        "- **Emergency:** 112 (EU) / 911 (US); check the local number on arrival",
        "- Save your embassy or consulate address",
        f"- Nearest hospitals [Map](map:{trip.destination} hospital)",
    ]


def synthesize_plan(
    trip: TripRequest,
    mode: str = "preview",
    *,
    budget: BudgetBreakdown | None = None,
    advisories: list[str] | None = None,
    weather: dict | None = None,
) -> str:
    """Build the offline plan markdown for a trip."""
    guide, curated = _guide(trip.destination)
    if budget is None:
        budget = compute_budget(
            trip.budget, trip.days, trip.style, trip.travelers,
            trip.destination, trip.purpose, trip.activities,
        )

    blocks = (
        _overview(trip, guide, mode, weather, advisories or []),
        _budget(trip, budget),
        _getting_around(trip, guide),
        _accommodation(trip),
        _attractions(trip, guide, curated),
        _dining(trip, guide),
        _daily(trip, mode),
        _packing(trip),
        _tips(trip),
        _apps(trip),
        _emergency(trip),
    )
    logger.info(f"Synthesized {mode} plan for {trip.destination} (curated={curated})")
    return "\n\n".join("\n".join(block).strip() for block in blocks) + "\n"
