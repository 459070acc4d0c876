"""Static destination knowledge — countries, holidays, events, cost tiers, blurbs.

Loaded once at import and treated as read-only process-wide state. Bump
DATA_VERSION whenever an entry changes so cached plans can be invalidated.
"""

from dataclasses import dataclass
from types import MappingProxyType

DATA_VERSION = "2025.09.1"


@dataclass(frozen=True)
class Observance:
    """A holiday or event. Either `dates` (MM-DD / easter+N) or `period` is set."""
    name: str
    dates: tuple[str, ...] = ()
    period: str | None = None
    closures: tuple[str, ...] = ()
    crowds: str = "medium"
    events: tuple[str, ...] = ()
    location: str | None = None
    impact: str | None = None
    note: str | None = None
    year: int | None = None


@dataclass(frozen=True)
class CountryCalendar:
    holidays: tuple[Observance, ...] = ()
    events: tuple[Observance, ...] = ()


# Destination substrings → country key. Order matters: first match wins.
COUNTRY_ALIASES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("france", ("france", "paris", "lyon", "marseille", "cannes", "bordeaux")),
    ("italy", ("italy", "rome", "venice", "venezia", "florence", "milan", "naples", "amalfi")),
    ("spain", ("spain", "madrid", "barcelona", "seville", "valencia", "pamplona", "malaga")),
    ("germany", ("germany", "munich", "münchen", "berlin", "hamburg", "frankfurt", "cologne")),
    ("japan", ("japan", "tokyo", "kyoto", "osaka", "hokkaido")),
    ("thailand", ("thailand", "bangkok", "phuket", "chiang mai", "krabi")),
    ("portugal", ("portugal", "lisbon", "porto", "algarve")),
    ("united_kingdom", ("united kingdom", "england", "london", "edinburgh", "scotland")),
)

CALENDARS: MappingProxyType = MappingProxyType({
    "france": CountryCalendar(
        holidays=(
            Observance("Christmas", dates=("12-25",), closures=("museums", "shops"), crowds="low"),
            Observance("New Year", dates=("01-01",), closures=("museums", "government"), crowds="low"),
            Observance("Easter Monday", dates=("easter+1",), closures=("museums",), crowds="medium"),
            Observance("May Day", dates=("05-01",), closures=("shops", "museums"), crowds="low"),
            Observance("Bastille Day", dates=("07-14",), events=("fireworks", "parades"), crowds="very_high"),
            Observance("Assumption", dates=("08-15",), closures=("museums",), crowds="medium"),
        ),
        events=(
            Observance("Fashion Week", period="Sep-Oct", location="Paris", impact="hotel_surge", crowds="high"),
            Observance("Cannes Film Festival", period="May", location="Cannes", impact="hotel_surge", crowds="very_high"),
            Observance("Summer Olympics", period="Jul-Aug", year=2024, location="Paris", impact="transport_chaos", crowds="extreme"),
        ),
    ),
    "italy": CountryCalendar(
        holidays=(
            Observance("Ferragosto", dates=("08-15",), closures=("shops", "restaurants"), crowds="low", note="Many locals on vacation"),
            Observance("Christmas", dates=("12-25",), closures=("museums", "shops"), crowds="low"),
            Observance("Liberation Day", dates=("04-25",), closures=("museums",), crowds="medium"),
            Observance("Republic Day", dates=("06-02",), events=("parades",), crowds="medium"),
        ),
        events=(
            Observance("Venice Carnival", period="Feb-Mar", location="Venice", crowds="extreme", note="Book accommodation months ahead"),
            Observance("Rome Marathon", period="Mar", location="Rome", impact="transport_disruption", crowds="high"),
        ),
    ),
    "spain": CountryCalendar(
        holidays=(
            Observance("Three Kings Day", dates=("01-06",), closures=("shops",), crowds="medium"),
            Observance("Labor Day", dates=("05-01",), closures=("museums",), crowds="low"),
            Observance("National Day", dates=("10-12",), events=("parades",), crowds="medium"),
            Observance("All Saints Day", dates=("11-01",), closures=("shops",), crowds="low"),
        ),
        events=(
            Observance("Running of the Bulls", period="Jul 6-14", location="Pamplona", crowds="extreme", note="Dangerous event - book early"),
            Observance("La Tomatina", period="Aug", location="Valencia", crowds="very_high", note="Messy festival"),
            Observance("Semana Santa", period="Easter Week", location="Seville", crowds="extreme", impact="hotel_surge"),
        ),
    ),
    "germany": CountryCalendar(
        holidays=(
            Observance("Christmas Markets", period="Nov-Dec", crowds="very_high", note="Book early for December visits"),
            Observance("Oktoberfest", period="Sep-Oct", location="Munich", crowds="extreme", impact="hotel_surge"),
            Observance("Unity Day", dates=("10-03",), closures=("government",), crowds="medium"),
        ),
    ),
    "japan": CountryCalendar(
        holidays=(
            Observance("Cherry Blossom", period="Mar-May", crowds="extreme", note="Peak tourism season"),
            Observance("Golden Week", period="Apr 29-May 5", crowds="extreme", impact="transport_chaos"),
            Observance("Obon", period="Aug 13-16", crowds="high", note="Family holiday period"),
            Observance("New Year", period="Dec 29-Jan 3", closures=("shops", "restaurants"), crowds="low"),
        ),
    ),
    "thailand": CountryCalendar(
        holidays=(
            Observance("Songkran", period="Apr 13-15", crowds="very_high", note="Water festival - everything gets wet"),
            Observance("Loy Krathong", period="Nov", crowds="high", events=("lanterns", "water_ceremonies")),
            Observance("Chinese New Year", period="Jan-Feb", crowds="high", impact="shop_closures"),
        ),
    ),
    "portugal": CountryCalendar(
        holidays=(
            Observance("Freedom Day", dates=("04-25",), closures=("government",), crowds="medium"),
            Observance("Portugal Day", dates=("06-10",), events=("parades",), crowds="medium"),
            Observance("Christmas", dates=("12-25",), closures=("museums", "shops"), crowds="low"),
        ),
        events=(
            Observance("Santo António", period="Jun 12-13", location="Lisbon", events=("street parties",), crowds="very_high"),
            Observance("São João", period="Jun 23-24", location="Porto", events=("street parties",), crowds="very_high"),
        ),
    ),
    "united_kingdom": CountryCalendar(
        holidays=(
            Observance("Christmas Day", dates=("12-25",), closures=("museums", "shops", "transport"), crowds="low"),
            Observance("Boxing Day", dates=("12-26",), closures=("museums",), crowds="high", note="Big sales day"),
            Observance("Good Friday", dates=("easter-2",), closures=("government",), crowds="medium"),
        ),
        events=(
            Observance("Edinburgh Festival Fringe", period="Aug", location="Edinburgh", impact="hotel_surge", crowds="extreme"),
            Observance("Notting Hill Carnival", period="Aug 24-26", location="London", events=("parades",), crowds="very_high"),
        ),
    ),
})


# Destination cost tiers: substring heuristics, first match wins.
COST_TIERS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("very_high", (
        "switzerland", "zurich", "geneva", "iceland", "reykjavik", "norway", "oslo",
        "monaco", "maldives", "bora bora", "new york", "san francisco", "singapore",
    )),
    ("high", (
        "london", "paris", "tokyo", "copenhagen", "stockholm", "amsterdam", "sydney",
        "dubai", "hong kong", "los angeles", "munich", "venice", "boston", "dublin",
    )),
    ("moderate", (
        "rome", "barcelona", "madrid", "berlin", "lisbon", "prague", "athens", "seoul",
        "vienna", "florence", "toronto", "montreal", "kyoto", "porto",
    )),
    ("low", (
        "bangkok", "thailand", "vietnam", "hanoi", "bali", "indonesia", "india",
        "mexico", "peru", "cambodia", "budapest", "krakow", "morocco", "marrakech",
        "egypt", "cairo", "colombia", "nepal", "philippines",
    )),
)

COST_TIER_MULTIPLIERS: MappingProxyType = MappingProxyType({
    "very_high": 1.6,
    "high": 1.3,
    "moderate": 1.0,
    "low": 0.7,
})

# Equipment-heavy activities: keyword hints, per-traveler-per-day rate (USD)
EQUIPMENT_ACTIVITIES: tuple[tuple[str, tuple[str, ...], float, str], ...] = (
    ("skiing", ("ski", "snowboard", "zermatt", "whistler", "chamonix", "st. moritz", "aspen", "niseko"),
     65.0, "Ski/snowboard rental and lift-adjacent gear"),
    ("diving", ("diving", "scuba", "snorkel", "great barrier reef", "red sea", "maldives"),
     55.0, "Dive equipment rental and boat fees"),
    ("safari", ("safari", "serengeti", "masai mara", "kruger"),
     80.0, "Safari vehicle, park gear and guide equipment"),
    ("trekking", ("trek", "hiking", "kilimanjaro", "everest", "patagonia", "inca trail"),
     25.0, "Trekking poles, boots and camping gear hire"),
    ("watersports", ("surf", "kitesurf", "kayak", "paddleboard", "sailing", "watersport"),
     35.0, "Board, wetsuit and watersport gear rental"),
)
EQUIPMENT_MAX_DAYS = 7

# Locale codes used by the activities widget
LOCALES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("de-DE", ("germany", "münchen", "munich", "berlin")),
    ("de-AT", ("austria", "tyrol", "tirol", "innsbruck", "salzburg")),
    ("fr-FR", ("france", "paris", "lyon", "marseille")),
    ("it-IT", ("italy", "rome", "venice", "milan", "florence")),
    ("es-ES", ("spain", "madrid", "barcelona", "seville")),
    ("pt-PT", ("portugal", "lisbon", "porto")),
    ("nl-NL", ("netherlands", "amsterdam", "holland")),
    ("el-GR", ("greece", "athens", "santorini", "mykonos")),
    ("cs-CZ", ("czech", "prague", "brno")),
    ("pl-PL", ("poland", "warsaw", "krakow")),
    ("ja-JP", ("japan", "tokyo", "osaka", "kyoto")),
    ("zh-CN", ("china", "beijing", "shanghai")),
    ("ko-KR", ("korea", "seoul", "busan")),
    ("th-TH", ("thailand", "bangkok", "phuket")),
)
DEFAULT_LOCALE = "en-US"

# Southern-hemisphere hints for seasonal weather estimates
SOUTHERN_HEMISPHERE: tuple[str, ...] = (
    "australia", "sydney", "melbourne", "new zealand", "auckland", "queenstown",
    "argentina", "buenos aires", "patagonia", "chile", "santiago", "south africa",
    "cape town", "brazil", "rio de janeiro", "peru", "lima", "bali",
)

# Curated city blurbs for the offline plan
CITY_GUIDES: MappingProxyType = MappingProxyType({
    "munich": {
        "highlights": "Marienplatz, Nymphenburg Palace, the Englischer Garten and a day trip to Neuschwanstein Castle",
        "cuisine": "Bavarian beer halls, Weisswurst breakfasts, pretzels and Viktualienmarkt stalls",
        "transport": "Excellent S-Bahn and U-Bahn network; the Isarcard covers most city trips",
        "culture": "Bavarian traditions, beer gardens and Alpine day trips",
    },
    "paris": {
        "highlights": "Eiffel Tower, Louvre Museum, Musée d'Orsay, Montmartre and the Seine quays",
        "cuisine": "Neighbourhood bistros, patisseries, wine bars and the Marché des Enfants Rouges",
        "transport": "Metro and RER cover the city; central arrondissements are very walkable",
        "culture": "Art, fashion, café culture and world-class museums",
    },
    "berlin": {
        "highlights": "Brandenburg Gate, Museum Island, East Side Gallery and the Reichstag dome",
        "cuisine": "Currywurst, döner kebab, Markthalle Neun and a thriving craft beer scene",
        "transport": "Comprehensive U-Bahn and S-Bahn network; very bike-friendly",
        "culture": "Cold War history, street art and legendary nightlife",
    },
    "rome": {
        "highlights": "Colosseum, Roman Forum, Vatican Museums, Pantheon and Trastevere",
        "cuisine": "Cacio e pepe, supplì, Roman-style pizza al taglio and Testaccio Market",
        "transport": "Compact historic centre best on foot; Metro lines A and B for longer hops",
        "culture": "Ancient history, Baroque piazzas and long Roman dinners",
    },
    "barcelona": {
        "highlights": "Sagrada Família, Park Güell, the Gothic Quarter and Barceloneta beach",
        "cuisine": "Tapas bars, La Boqueria market, vermouth hour and Catalan seafood",
        "transport": "Efficient Metro plus the Hola Barcelona travel card",
        "culture": "Gaudí modernisme, late dinners and neighbourhood festes",
    },
    "tokyo": {
        "highlights": "Senso-ji, Meiji Jingu, Shibuya Crossing, teamLab and Tsukiji Outer Market",
        "cuisine": "Ramen counters, izakaya alleys, depachika food halls and sushi breakfasts",
        "transport": "JR Yamanote Line and Metro; load a Suica or Pasmo card",
        "culture": "Shrines next to neon, meticulous service and seasonal festivals",
    },
    "bangkok": {
        "highlights": "Grand Palace, Wat Pho, Wat Arun, Chatuchak Weekend Market and the Chao Phraya",
        "cuisine": "Street-food stalls in Yaowarat, boat noodles and mango sticky rice",
        "transport": "BTS Skytrain, MRT and Chao Phraya Express boats beat the traffic",
        "culture": "Temple etiquette, night markets and riverside life",
    },
    "lisbon": {
        "highlights": "Belém Tower, Jerónimos Monastery, Alfama, and the São Jorge Castle viewpoints",
        "cuisine": "Pastéis de nata, bifana sandwiches, Time Out Market and seafood tascas",
        "transport": "Trams 28 and 15, Metro and the Viva Viagem card; hills make good shoes essential",
        "culture": "Fado houses, azulejo tiles and miradouro sunsets",
    },
})
