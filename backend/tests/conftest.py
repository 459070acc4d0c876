import asyncio
from datetime import date

import pytest

from app.config import settings
from app.schemas.trip import TripRequest


class FakeLLM:
    """Scripted stand-in for LLMClient.

    `script` items are returned in order (the last one repeats); exceptions
    are raised instead of returned.
    """

    configured = True

    def __init__(self, *script, delay: float = 0.0):
        self.script = list(script) or [""]
        self.delay = delay
        self.calls = 0
        self.prompts: list[tuple[str, str]] = []

    async def generate(self, system, user, *, max_tokens=1500, timeout=15.0, temperature=None):
        self.calls += 1
        self.prompts.append((system, user))
        if self.delay:
            await asyncio.sleep(self.delay)
        item = self.script[min(self.calls, len(self.script)) - 1]
        if isinstance(item, Exception):
            raise item
        return item


class FakeStore:
    def __init__(self):
        self.records: dict[str, dict] = {}
        self.last_id: str | None = None

    async def save(self, record: dict) -> str | None:
        plan_id = f"plan{len(self.records) + 1}"
        self.records[plan_id] = {**record, "id": plan_id}
        self.last_id = plan_id
        return plan_id

    async def get(self, plan_id: str) -> dict | None:
        return self.records.get(plan_id)

    async def latest(self) -> dict | None:
        return self.records.get(self.last_id) if self.last_id else None


CLEAN_PLAN = """## 🎯 Trip Overview
Five days between the Louvre, Montmartre and the Seine.

## 💰 Budget Breakdown
Stay in Le Marais and walk everywhere.

## 🗺️ Getting Around
Use Metro line 1 and a Navigo Easy card. [Map](map:Châtelet station)

## 🏨 Accommodation
Hôtel du Petit Moulin in Le Marais. [Book](book:Hôtel du Petit Moulin)

## 🎫 Must-See Attractions
- Louvre Museum [Tickets](tickets:Louvre Museum) [Map](map:Louvre Museum)
- Musée d'Orsay [Tickets](tickets:Musée d'Orsay)

## 🍽️ Dining Guide
Breizh Café for galettes. [Reviews](reviews:Breizh Café)

## 🎭 Daily Itineraries
### Day 1 — Arrival
- Morning: Jardin des Tuileries [Map](map:Jardin des Tuileries)
### Day 2 — Museums
- Morning: Louvre Museum

## 🧳 Don't Forget List
- Navigo Easy card

## 🛡️ Travel Tips
- Watch for pickpockets on line 1

## 📱 Useful Apps
- Bonjour RATP

## 🚨 Emergency Info
- 112
"""

GENERIC_PLAN = CLEAN_PLAN.replace("Breizh Café for galettes.", "Dinner at a Local Restaurant near the Main Square.")


@pytest.fixture(autouse=True)
def offline_settings(monkeypatch):
    monkeypatch.setattr(settings, "weather_enabled", False)
    monkeypatch.setattr(settings, "gyg_partner_id", "PUHVJ53")
    monkeypatch.setattr(settings, "images_enabled", True)


@pytest.fixture
def paris_trip() -> TripRequest:
    return TripRequest(
        destination="Paris, France",
        start_date=date(2025, 7, 12),
        end_date=date(2025, 7, 16),
        adults=2,
        style="mid",
        budget=0,
    )


@pytest.fixture
def unknown_trip() -> TripRequest:
    return TripRequest(destination="Atlantis", adults=1, style="budget", budget="$1,200")


@pytest.fixture
def make_llm():
    return FakeLLM


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def clean_plan() -> str:
    return CLEAN_PLAN


@pytest.fixture
def generic_plan() -> str:
    return GENERIC_PLAN
