"""Budget engine — deterministic per-category spend model for a trip.

Maps (total, days, style, travelers, destination, purpose) to a breakdown over
stay / food / activities / transit / equipment. When no total is supplied a
synthetic one is derived from per-day base rates, a destination cost tier and
the trip purpose. No randomness: identical inputs give identical output.
"""

import logging
import re
from dataclasses import asdict, dataclass

from app.data.destinations import COST_TIER_MULTIPLIERS, EQUIPMENT_MAX_DAYS
from app.services.destination_classifier import cost_tier, equipment_activity

logger = logging.getLogger(__name__)

CATEGORIES = ("stay", "food", "activities", "transit", "equipment")

# Per person, per day (USD) before tier/purpose multipliers
BASE_DAILY_RATES = {
    "budget": 85.0,
    "mid": 180.0,
    "luxury": 420.0,
}

PURPOSE_MULTIPLIERS = {
    "business": 1.25,
    "day_trip": 0.6,
}

# Category splits, each row sums to 1.0
SPLITS = {
    "budget": {"stay": 0.38, "food": 0.27, "activities": 0.20, "transit": 0.15, "equipment": 0.0},
    "mid": {"stay": 0.47, "food": 0.25, "activities": 0.18, "transit": 0.10, "equipment": 0.0},
    "luxury": {"stay": 0.55, "food": 0.22, "activities": 0.18, "transit": 0.05, "equipment": 0.0},
}

SPLITS_WITH_EQUIPMENT = {
    "budget": {"stay": 0.32, "food": 0.24, "activities": 0.16, "transit": 0.13, "equipment": 0.15},
    "mid": {"stay": 0.41, "food": 0.22, "activities": 0.15, "transit": 0.10, "equipment": 0.12},
    "luxury": {"stay": 0.50, "food": 0.20, "activities": 0.15, "transit": 0.05, "equipment": 0.10},
}


@dataclass(frozen=True)
class CategoryAmount:
    per_day: int
    total: int


@dataclass(frozen=True)
class EquipmentSurcharge:
    activity: str
    per_traveler_per_day: float
    days_charged: int
    amount: float
    description: str


@dataclass(frozen=True)
class BudgetBreakdown:
    total: int
    days: int
    travelers: int
    style: str
    cost_tier: str
    derived: bool
    split: dict[str, float]
    categories: dict[str, CategoryAmount]
    surcharge: EquipmentSurcharge | None = None

    def __getitem__(self, category: str) -> CategoryAmount:
        return self.categories[category]

    @property
    def equipment_note(self) -> str | None:
        if not self.surcharge:
            return None
        s = self.surcharge
        return (
            f"{s.description}: ~${s.per_traveler_per_day:.0f} per traveler per day "
            f"for {s.days_charged} day{'s' if s.days_charged != 1 else ''}"
        )

    def to_dict(self) -> dict:
        data = {
            "total": self.total,
            "days": self.days,
            "travelers": self.travelers,
            "style": self.style,
            "cost_tier": self.cost_tier,
            "derived": self.derived,
            "split": dict(self.split),
            "equipment_note": self.equipment_note,
            "surcharge": asdict(self.surcharge) if self.surcharge else None,
        }
        for name, amount in self.categories.items():
            data[name] = {"perDay": amount.per_day, "total": amount.total}
        return data


def normalize_budget(value) -> float:
    """Parse a user-entered budget such as "$2,500" or "1.200,50". Unparsable → 0."""
    if value is None:
        return 0.0
    if isinstance(value, (int, float)):
        return float(value) if value == value else 0.0  # NaN guard
    cleaned = re.sub(r"[^\d.,]", "", str(value))
    if "," in cleaned and "." in cleaned:
        # whichever separator comes last is the decimal point
        if cleaned.rfind(",") > cleaned.rfind("."):
            cleaned = cleaned.replace(".", "").replace(",", ".")
        else:
            cleaned = cleaned.replace(",", "")
    elif "," in cleaned:
        head, _, tail = cleaned.rpartition(",")
        if cleaned.count(",") == 1 and len(tail) in (1, 2):
            cleaned = f"{head}.{tail}"
        else:
            cleaned = cleaned.replace(",", "")
    elif cleaned.count(".") > 1:
        cleaned = cleaned.replace(".", "")
    try:
        return float(cleaned)
    except ValueError:
        return 0.0


def _normalize_style(style: str | None) -> str:
    s = (style or "mid").strip().lower()
    if s in ("moderate", "balanced", "standard"):
        return "mid"
    if s in ("premium",):
        return "luxury"
    return s if s in BASE_DAILY_RATES else "mid"


def _purpose_multiplier(purpose: str | None) -> float:
    p = (purpose or "").strip().lower().replace("-", "_").replace(" ", "_")
    if "business" in p or "work" in p:
        return PURPOSE_MULTIPLIERS["business"]
    if "day_trip" in p or p == "daytrip":
        return PURPOSE_MULTIPLIERS["day_trip"]
    return 1.0


def _surcharge(days: int, travelers: int, *hints: str | None) -> EquipmentSurcharge | None:
    match = equipment_activity(*hints)
    if not match:
        return None
    activity, rate, description = match
    days_charged = min(days, EQUIPMENT_MAX_DAYS)
    return EquipmentSurcharge(
        activity=activity,
        per_traveler_per_day=rate,
        days_charged=days_charged,
        amount=round(rate * travelers * days_charged, 2),
        description=description,
    )


def _allocate(total: int, split: dict[str, float]) -> dict[str, int]:
    """Round each share; the largest share absorbs the rounding remainder."""
    shares = {name: round(total * split[name]) for name in CATEGORIES}
    remainder = total - sum(shares.values())
    if remainder:
        largest = max(CATEGORIES, key=lambda n: split[n])
        shares[largest] += remainder
    return shares


def compute_budget(
    total: float = 0,
    days: int = 1,
    style: str = "mid",
    travelers: int = 2,
    destination: str = "",
    purpose: str | None = None,
    activities: str | None = None,
) -> BudgetBreakdown:
    """Compute a per-category budget breakdown.

    A non-positive `total` triggers a synthetic estimate; the derived total
    never decreases as `days` or `travelers` grow. `activities` only feeds the
    equipment surcharge detection.
    """
    days = max(1, int(days or 1))
    travelers = max(1, int(travelers or 1))
    style = _normalize_style(style)
    tier = cost_tier(destination)
    surcharge = _surcharge(days, travelers, destination, purpose, activities)

    provided = normalize_budget(total)
    derived = provided <= 0
    if derived:
        base = (
            BASE_DAILY_RATES[style]
            * COST_TIER_MULTIPLIERS[tier]
            * _purpose_multiplier(purpose)
            * days
            * travelers
        )
        provided = base + (surcharge.amount if surcharge else 0)
        logger.debug(
            f"Derived budget for {destination or 'unknown'}: {provided:.0f} "
            f"({style}, tier={tier}, {days}d x {travelers})"
        )

    resolved = max(1, round(provided))
    split = (SPLITS_WITH_EQUIPMENT if surcharge else SPLITS)[style]
    totals = _allocate(resolved, split)
    per_day_total = resolved / days

    categories = {}
    for name in CATEGORIES:
        per_day = per_day_total * split[name]
        if name == "food":
            per_day /= travelers
        categories[name] = CategoryAmount(per_day=round(per_day), total=totals[name])

    return BudgetBreakdown(
        total=resolved,
        days=days,
        travelers=travelers,
        style=style,
        cost_tier=tier,
        derived=derived,
        split=dict(split),
        categories=categories,
        surcharge=surcharge,
    )
