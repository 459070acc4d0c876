"""Open-Meteo weather client — geocode + daily forecast with seasonal fallback."""

import asyncio
import logging
from datetime import date, timedelta

import httpx

from app.config import settings
from app.services.cache_service import cache_service
from app.services.destination_classifier import is_southern_hemisphere

logger = logging.getLogger(__name__)

FORECAST_HORIZON_DAYS = 16

# Northern-hemisphere season per month; shifted by 6 months south of the equator
SEASONS = {
    12: "winter", 1: "winter", 2: "winter",
    3: "spring", 4: "spring", 5: "spring",
    6: "summer", 7: "summer", 8: "summer",
    9: "autumn", 10: "autumn", 11: "autumn",
}

SEASON_NOTES = {
    "winter": "Cold, short days; pack warm layers and expect some closures for outdoor sights.",
    "spring": "Mild with changeable weather; bring a light rain jacket.",
    "summer": "Warm to hot and busy; plan outdoor sights for mornings and carry water.",
    "autumn": "Cooler with a chance of rain; layers and a compact umbrella work well.",
}


def season_for(destination: str | None, month: int) -> str:
    if is_southern_hemisphere(destination):
        month = (month + 5) % 12 + 1
    return SEASONS[month]


def seasonal_estimate(destination: str | None, start: date | None) -> dict:
    month = (start or date.today()).month
    season = season_for(destination, month)
    return {
        "source": "seasonal",
        "season": season,
        "summary": f"Typical {season} weather. {SEASON_NOTES[season]}",
        "days": [],
    }


class WeatherClient:
    """Adapter for the Open-Meteo geocoding and forecast APIs."""

    def __init__(self):
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=settings.weather_timeout_s)
        return self._client

    async def close(self):
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _geocode(self, destination: str) -> tuple[float, float] | None:
        client = await self._get_client()
        resp = await client.get(
            f"{settings.geocoding_base_url}/search",
            params={"name": destination.split(",")[0].strip(), "count": 1, "language": "en"},
        )
        resp.raise_for_status()
        results = resp.json().get("results") or []
        if not results:
            return None
        return results[0]["latitude"], results[0]["longitude"]

    async def _forecast(self, lat: float, lon: float, start: date, days: int) -> list[dict]:
        client = await self._get_client()
        end = start + timedelta(days=max(1, days) - 1)
        resp = await client.get(
            f"{settings.forecast_base_url}/forecast",
            params={
                "latitude": lat,
                "longitude": lon,
                "daily": "temperature_2m_max,temperature_2m_min,precipitation_probability_max",
                "timezone": "auto",
                "start_date": start.isoformat(),
                "end_date": end.isoformat(),
            },
        )
        resp.raise_for_status()
        daily = resp.json().get("daily") or {}
        return [
            {"date": d, "max_c": hi, "min_c": lo, "rain_pct": rain}
            for d, hi, lo, rain in zip(
                daily.get("time", []),
                daily.get("temperature_2m_max", []),
                daily.get("temperature_2m_min", []),
                daily.get("precipitation_probability_max", []),
            )
        ]

    async def _lookup(self, destination: str, start: date, days: int) -> dict | None:
        coords = await self._geocode(destination)
        if not coords:
            return None
        forecast = await self._forecast(coords[0], coords[1], start, days)
        if not forecast:
            return None
        highs = [d["max_c"] for d in forecast if d["max_c"] is not None]
        lows = [d["min_c"] for d in forecast if d["min_c"] is not None]
        rainy = sum(1 for d in forecast if (d["rain_pct"] or 0) >= 50)
        summary = "Forecast available."
        if highs and lows:
            summary = f"Forecast {min(lows):.0f}-{max(highs):.0f}°C"
            summary += f", {rainy} likely rainy day{'s' if rainy != 1 else ''}." if rainy else ", mostly dry."
        return {"source": "forecast", "summary": summary, "days": forecast}

    async def outlook(self, destination: str | None, start: date | None, days: int = 1) -> dict:
        """Weather outlook for the trip. Never raises; degrades to a seasonal estimate."""
        if not settings.weather_enabled or not destination or not start:
            return seasonal_estimate(destination, start)
        if not (0 <= (start - date.today()).days <= FORECAST_HORIZON_DAYS):
            return seasonal_estimate(destination, start)
        days = min(max(1, days), FORECAST_HORIZON_DAYS)

        try:
            result = await asyncio.wait_for(
                self._cached_lookup(destination, start, days),
                timeout=settings.weather_timeout_s,
            )
        except Exception as e:
            logger.warning(f"Weather lookup failed for {destination}, using seasonal estimate: {e}")
            return seasonal_estimate(destination, start)
        return result or seasonal_estimate(destination, start)

    async def _cached_lookup(self, destination: str, start: date, days: int) -> dict | None:
        # cache round-trips count against the same deadline as the API calls
        cached = await cache_service.get_weather(destination, start.isoformat(), days)
        if cached:
            return cached
        result = await self._lookup(destination, start, days)
        if result:
            await cache_service.set_weather(destination, start.isoformat(), days, result)
        return result


# Singleton
weather_client = WeatherClient()
