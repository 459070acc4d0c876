"""Stage 1 — replace semantic link tokens with real URLs.

Generated text embeds tokens in link targets, e.g. `[Map](map:Louvre Museum)`
or `[Book](book:Le Marais hotels)`. Recognised kinds are resolved through the
destination link factory; anything else is left exactly as written.
"""

import re

from app.services.content.links import DestinationLinks, links_for

# `[label](kind:query)`, not preceded by "!" (images belong to stage 2)
TOKEN_RE = re.compile(r"(?<!!)\[([^\]]*)\]\(\s*([a-zA-Z_]+):(?!//)([^)]+?)\s*\)")

TOKEN_KINDS = {
    "map": "maps",
    "maps": "maps",
    "book": "hotels",
    "hotel": "hotels",
    "hotels": "hotels",
    "tickets": "activities",
    "activity": "activities",
    "activities": "activities",
    "reviews": "reviews",
    "review": "reviews",
    "flights": "flights",
    "flight": "flights",
    "cars": "cars",
    "car": "cars",
    "insurance": "insurance",
}


def resolve_token(kind: str, query: str, links: DestinationLinks) -> str | None:
    builder = TOKEN_KINDS.get(kind.lower())
    if not builder:
        return None
    return getattr(links, builder)(query.strip())


def linkify_tokens(markdown: str, destination: str | None) -> str:
    if not markdown:
        return markdown
    links = links_for(destination)

    def _replace(m: re.Match) -> str:
        label, kind, query = m.group(1), m.group(2), m.group(3)
        url = resolve_token(kind, query, links)
        if url is None:
            return m.group(0)
        return f"[{label}]({url})"

    return TOKEN_RE.sub(_replace, markdown)
