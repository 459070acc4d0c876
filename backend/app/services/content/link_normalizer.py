"""Stage 4 — normalize outbound links in the rendered document."""

import logging
from urllib.parse import parse_qs, quote_plus, urlparse

from bs4 import BeautifulSoup, Tag

from app.config import settings
from app.services.content.sections import WIDGET_ATTR, parse_html

logger = logging.getLogger(__name__)

MAP_PREVIEW_ATTR = "data-map-preview"
MAP_DIRECTIONS_URL = "https://www.google.com/maps/dir/"
MAX_PREVIEW_STOPS = 10

# (host needles, path needles, widget anchor id)
ANCHOR_RULES = (
    (("booking.com", "hotels.com", "agoda.com"), (), "hotel-widget"),
    (("rentalcars.com", "discovercars.com"), ("/car-rental",), "car-widget"),
    (("kiwitaxi", "transfers", "welcomepickups"), ("/transfer",), "transfer-widget"),
)


def _is_maps_search(url) -> bool:
    host = url.netloc.lower()
    return ("google." in host and url.path.startswith("/maps/search")) or host.startswith("maps.google.")


def _map_query(url) -> str | None:
    values = parse_qs(url.query).get("query") or parse_qs(url.query).get("q")
    return values[0].strip() if values and values[0].strip() else None


def _anchor_for(url, soup: BeautifulSoup) -> str | None:
    host, path = url.netloc.lower(), url.path.lower()
    for hosts, paths, anchor in ANCHOR_RULES:
        if any(h in host for h in hosts) or any(p in path for p in paths):
            return anchor if soup.find(id=anchor) is not None else None
    return None


def _with_partner_id(href: str, url) -> str | None:
    pid = settings.gyg_partner_id
    if not pid or "getyourguide." not in url.netloc.lower() or "partner_id" in parse_qs(url.query):
        return None
    sep = "&" if url.query else "?"
    return f"{href}{sep}partner_id={pid}"


def _set(tag: Tag, attr: str, value: str) -> bool:
    current = tag.get(attr)
    if isinstance(current, list):
        # multi-valued attributes (rel) come back as lists
        current = " ".join(current)
    if current == value:
        return False
    tag[attr] = value
    return True


def normalize_links(html_doc: str) -> str:
    """Rewrite links for on-page navigation and append one map preview.

    Returns the input unchanged when there is nothing left to rewrite.
    """
    if not html_doc:
        return html_doc
    soup = parse_html(html_doc)
    changed = False
    queries: list[str] = []

    for a in soup.find_all("a", href=True):
        if a.find_parent(attrs={WIDGET_ATTR: True}) or a.has_attr(MAP_PREVIEW_ATTR):
            continue
        href = a["href"].strip()
        try:
            url = urlparse(href)
        except ValueError:
            # malformed model output, e.g. an unclosed "[" host
            continue
        if not url.scheme.startswith("http"):
            continue

        if _is_maps_search(url):
            changed |= _set(a, "target", "_blank")
            changed |= _set(a, "rel", "noopener")
            query = _map_query(url)
            if query and query not in queries:
                queries.append(query)
            continue

        anchor = _anchor_for(url, soup)
        if anchor:
            a["data-original-href"] = href
            a["href"] = f"#{anchor}"
            a.attrs.pop("target", None)
            changed = True
            continue

        rewritten = _with_partner_id(href, url)
        if rewritten:
            a["href"] = rewritten
            changed = True

    if queries and soup.find(attrs={MAP_PREVIEW_ATTR: True}) is None:
        stops = "/".join(quote_plus(q) for q in queries[:MAX_PREVIEW_STOPS])
        preview = soup.new_tag(
            "a",
            href=f"{MAP_DIRECTIONS_URL}{stops}",
            target="_blank",
            rel="noopener",
            attrs={MAP_PREVIEW_ATTR: "true"},
        )
        preview.string = f"🗺️ Preview all {len(queries[:MAX_PREVIEW_STOPS])} places on one map"
        wrapper = soup.new_tag("p", attrs={"class": "map-preview"})
        wrapper.append(preview)
        soup.append("\n")
        soup.append(wrapper)
        changed = True

    if not changed:
        return html_doc
    logger.debug(f"Normalized links ({len(queries)} map queries)")
    return str(soup)
