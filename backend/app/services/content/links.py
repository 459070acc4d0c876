"""Destination-aware link factory. Pure URL builders, no network calls."""

from dataclasses import dataclass
from urllib.parse import quote, quote_plus

from app.config import settings

MAPS_SEARCH_URL = "https://www.google.com/maps/search/?api=1&query="
IMAGE_SEARCH_URL = "https://source.unsplash.com/featured/800x600/?"
FALLBACK_IMAGE_URL = "https://images.unsplash.com/photo-1488646953014-85cb44e25828?w=800&h=600&fit=crop"


@dataclass(frozen=True)
class DestinationLinks:
    destination: str
    booking_aid: str = ""
    kayak_aid: str = ""
    gyg_partner_id: str = ""

    def _term(self, term: str | None) -> str:
        return quote_plus((term or self.destination or "").strip())

    def maps(self, term: str | None = None) -> str:
        return f"{MAPS_SEARCH_URL}{self._term(term)}"

    def hotels(self, term: str | None = None) -> str:
        aid = f"&aid={self.booking_aid}" if self.booking_aid else ""
        return f"https://www.booking.com/searchresults.html?ss={self._term(term)}{aid}"

    def activities(self, term: str | None = None) -> str:
        pid = f"&partner_id={self.gyg_partner_id}" if self.gyg_partner_id else ""
        return f"https://www.getyourguide.com/s/?q={self._term(term)}{pid}"

    def reviews(self, term: str | None = None) -> str:
        return f"https://www.tripadvisor.com/Search?q={self._term(term)}"

    def flights(self, term: str | None = None) -> str:
        aid = f"&aid={self.kayak_aid}" if self.kayak_aid else ""
        return f"https://www.kayak.com/flights?search={self._term(term)}{aid}"

    def cars(self, term: str | None = None) -> str:
        return f"https://www.rentalcars.com/SearchResults.do?destination={self._term(term)}"

    def insurance(self, term: str | None = None) -> str:
        return "https://www.worldnomads.com/"

    def image(self, term: str | None = None) -> str:
        """Image-search URL keyed by destination + query (same inputs, same URL)."""
        query = (term or "").strip()
        dest = (self.destination or "").strip()
        if dest and dest.lower() not in query.lower():
            query = f"{dest} {query}".strip()
        if not query:
            return FALLBACK_IMAGE_URL
        return f"{IMAGE_SEARCH_URL}{quote(query, safe='')}"


def links_for(destination: str | None) -> DestinationLinks:
    return DestinationLinks(
        destination=(destination or "").strip(),
        booking_aid=settings.booking_aid,
        kayak_aid=settings.kayak_aid,
        gyg_partner_id=settings.gyg_partner_id,
    )
