"""Trip context — budget, advisories and weather gathered before generation."""

import logging
from dataclasses import dataclass, field

from app.schemas.trip import TripRequest
from app.services.booking_advisor import trip_advisories
from app.services.budget_engine import BudgetBreakdown, compute_budget
from app.services.content.sections import CANONICAL_SECTIONS
from app.services.fallback_synthesizer import PREVIEW_DAYS
from app.services.prompts import load_prompt
from app.services.weather_client import weather_client

logger = logging.getLogger(__name__)

_SYSTEM_TEMPLATE = load_prompt("itinerary_system.md")
_USER_TEMPLATE = load_prompt("itinerary_user.md")


@dataclass
class TripContext:
    trip: TripRequest
    budget: BudgetBreakdown
    advisories: list[str] = field(default_factory=list)
    weather: dict | None = None


def budget_for(trip: TripRequest) -> BudgetBreakdown:
    return compute_budget(
        trip.budget,
        trip.days,
        trip.style,
        trip.travelers,
        trip.destination,
        trip.purpose,
        trip.activities,
    )


async def assemble_context(trip: TripRequest, include_weather: bool = True) -> TripContext:
    """Budget and advisories are pure; weather is the only network call and never raises."""
    budget = budget_for(trip)
    advisories = trip_advisories(trip.destination, trip.start_date, trip.days, trip.travelers)
    weather = None
    if include_weather:
        weather = await weather_client.outlook(trip.destination, trip.start_date, trip.days)
    return TripContext(trip=trip, budget=budget, advisories=advisories, weather=weather)


def system_prompt() -> str:
    sections = "\n".join(
        f"{i}. ## {section.heading}" for i, section in enumerate(CANONICAL_SECTIONS, start=1)
    )
    return _SYSTEM_TEMPLATE.format(sections=sections)


def user_prompt(ctx: TripContext, mode: str) -> str:
    trip, budget = ctx.trip, ctx.budget
    party = f"{trip.adults} adult{'s' if trip.adults != 1 else ''}"
    if trip.children:
        party += f" and {trip.children} child{'ren' if trip.children != 1 else ''}"
    dates = "flexible dates"
    if trip.start_date and trip.end_date:
        dates = f"{trip.start_date.isoformat()} to {trip.end_date.isoformat()}"
    elif trip.start_date:
        dates = f"starting {trip.start_date.isoformat()}"

    budget_lines = [
        f"- {name}: {budget[name].total:,} total, {budget[name].per_day:,} per day"
        + (" per person" if name == "food" else "")
        for name in ("stay", "food", "activities", "transit", "equipment")
        if budget[name].total
    ]
    if budget.derived:
        budget_lines.append("- (No budget given; these figures are an estimate.)")

    context = []
    if ctx.weather and ctx.weather.get("summary"):
        context.append(f"Weather: {ctx.weather['summary']}")
    if ctx.advisories:
        context.append("Dates to plan around:\n" + "\n".join(f"- {note}" for note in ctx.advisories))

    if mode == "preview":
        instructions = (
            f"This is a PREVIEW: keep every section short and write only Day 1 to Day "
            f"{min(trip.days, PREVIEW_DAYS)} under Daily Itineraries."
        )
    else:
        instructions = f"Write the FULL plan with all {trip.days} days under Daily Itineraries."

    return _USER_TEMPLATE.format(
        days_label=f"{trip.days}-day",
        destination=trip.destination,
        party=party,
        dates=dates,
        style=trip.style,
        purpose=trip.purpose,
        interests=trip.activities or "general sightseeing",
        dietary=", ".join(trip.dietary) or "none",
        preferences=", ".join(trip.preferences) or "none",
        currency=trip.currency,
        budget_total=f"{budget.total:,}",
        budget_lines="\n".join(budget_lines),
        context="\n\n".join(context),
        mode_instructions=instructions,
    ).strip()
