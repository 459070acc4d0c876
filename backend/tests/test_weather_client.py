import asyncio
import time
from datetime import date, timedelta

from app.config import settings
from app.services.cache_service import cache_service
from app.services.weather_client import WeatherClient, season_for


def test_seasons_flip_south_of_the_equator():
    assert season_for("Paris", 7) == "summer"
    assert season_for("Sydney, Australia", 7) == "winter"
    assert season_for("Buenos Aires", 1) == "summer"


async def test_disabled_lookup_gives_seasonal_estimate():
    outlook = await WeatherClient().outlook("Paris", date(2025, 12, 20), 3)
    assert outlook["source"] == "seasonal"
    assert outlook["season"] == "winter"


async def test_failed_lookup_degrades_to_seasonal(monkeypatch):
    monkeypatch.setattr(settings, "weather_enabled", True)

    async def no_cache(*args):
        return None

    async def boom(self, destination, start, days):
        raise RuntimeError("network down")

    monkeypatch.setattr(cache_service, "get_weather", no_cache)
    monkeypatch.setattr(WeatherClient, "_lookup", boom)
    outlook = await WeatherClient().outlook("Paris", date.today() + timedelta(days=2), 3)
    assert outlook["source"] == "seasonal"


async def test_forecast_is_cached(monkeypatch):
    monkeypatch.setattr(settings, "weather_enabled", True)
    stored = {}

    async def get_weather(*args):
        return stored.get(args)

    async def set_weather(destination, start, days, data):
        stored[(destination, start, days)] = data

    async def lookup(self, destination, start, days):
        return {"source": "forecast", "summary": "Forecast 12-20°C, mostly dry.", "days": []}

    monkeypatch.setattr(cache_service, "get_weather", get_weather)
    monkeypatch.setattr(cache_service, "set_weather", set_weather)
    monkeypatch.setattr(WeatherClient, "_lookup", lookup)
    start = date.today() + timedelta(days=1)
    outlook = await WeatherClient().outlook("Lisbon", start, 2)
    assert outlook["source"] == "forecast"
    assert stored[("Lisbon", start.isoformat(), 2)] == outlook


async def test_hung_cache_counts_against_the_deadline(monkeypatch):
    monkeypatch.setattr(settings, "weather_enabled", True)
    monkeypatch.setattr(settings, "weather_timeout_s", 0.2)

    async def hung(*args):
        await asyncio.sleep(10)

    monkeypatch.setattr(cache_service, "get_weather", hung)
    started = time.monotonic()
    outlook = await WeatherClient().outlook("Paris", date.today() + timedelta(days=1), 2)
    assert outlook["source"] == "seasonal"
    assert time.monotonic() - started < 1.0
