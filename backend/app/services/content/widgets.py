"""Stage 3 — commerce widget injection.

Each widget targets one canonical section. Injection walks the section tree,
synthesizes a heading when the target section is missing, appends the widget
block after the section's last element and records its dedup key on the
section. A final pass keeps only the first instance of every dedup key, which
also cleans up widgets the model pasted into its own output.

Running `inject_widgets` on its own output returns the input unchanged.
"""

import html
import logging
import re
from dataclasses import dataclass
from urllib.parse import quote_plus

from bs4 import BeautifulSoup, Tag

from app.config import settings
from app.services.content.sections import (
    SECTION_ATTR,
    WIDGET_ATTR,
    build_section_tree,
    find_section,
    parse_html,
    synthesize_section,
)
from app.services.destination_classifier import locale_for

logger = logging.getLogger(__name__)

TP_WIDGET_URL = "https://tpwdgt.com/content"
GYG_FRAME_URL = "https://widget.getyourguide.com/default/activities.frame"
GYG_LOADER_URL = "https://widget.getyourguide.com/dist/pa.umd.production.min.js"

# Travelpayouts promo id -> dedup key, so raw scripts in model output dedup too
PROMO_KEYS = {
    "7879": "flights",
    "7873": "hotels",
    "4480": "car_rentals",
    "8951": "transfers",
    "8588": "esim",
}

_PROMO_RE = re.compile(r"promo_id=(\d+)")


@dataclass(frozen=True)
class WidgetDescriptor:
    id: str
    target_section: str
    dedup_key: str
    title: str
    description: str
    render_fragment: str


def _tp_script(promo_id: str, campaign_id: str, extra: str = "") -> str:
    params = (
        f"trs={settings.widget_trs}&amp;shmarker={settings.widget_marker}&amp;locale=en"
        f"&amp;powered_by=false{extra}&amp;promo_id={promo_id}&amp;campaign_id={campaign_id}"
    )
    return f'<script async src="{TP_WIDGET_URL}?{params}" charset="utf-8"></script>'


def _gyg_fragment(destination: str) -> str:
    pid = settings.gyg_partner_id
    locale = locale_for(destination)
    query = quote_plus(destination)
    return (
        f'<div data-gyg-href="{GYG_FRAME_URL}?q={query}&amp;locale={locale}" '
        f'data-gyg-locale-code="{locale}" data-gyg-widget="activities" '
        f'data-gyg-number-of-items="3" data-gyg-partner-id="{pid}">'
        f'<span>Powered by <a target="_blank" rel="sponsored" '
        f'href="https://www.getyourguide.com/">GetYourGuide</a></span></div>'
        f'<script async defer src="{GYG_LOADER_URL}" data-gyg-partner-id="{pid}"></script>'
    )


def widget_catalog(destination: str | None) -> tuple[WidgetDescriptor, ...]:
    """The widgets for one destination, in injection order."""
    dest = (destination or "").strip()
    name = html.escape(dest or "your destination")
    return (
        WidgetDescriptor(
            id="flight-widget",
            target_section="getting_around",
            dedup_key="flights",
            title=f"✈️ Flights to {name}",
            description="Compare fares across airlines.",
            render_fragment=_tp_script("7879", "100", "&amp;currency=usd&amp;show_hotels=true"),
        ),
        WidgetDescriptor(
            id="car-widget",
            target_section="getting_around",
            dedup_key="car_rentals",
            title="🚗 Car Rentals",
            description="Pick-up and drop-off options near your stay.",
            render_fragment=_tp_script("4480", "10"),
        ),
        WidgetDescriptor(
            id="transfer-widget",
            target_section="getting_around",
            dedup_key="transfers",
            title="🚕 Airport Transfers",
            description="Pre-book a ride from the airport.",
            render_fragment=_tp_script("8951", "627", "&amp;show_header=true"),
        ),
        WidgetDescriptor(
            id="hotel-widget",
            target_section="accommodation",
            dedup_key="hotels",
            title=f"🏨 Hotels in {name}",
            description="Live prices and availability.",
            render_fragment=_tp_script("7873", "101", "&amp;currency=usd&amp;show_hotels=true"),
        ),
        WidgetDescriptor(
            id="activities-widget",
            target_section="must_see",
            dedup_key="activities",
            title=f"🎫 Tours &amp; Tickets in {name}",
            description="Skip-the-line tickets and guided tours.",
            render_fragment=_gyg_fragment(dest),
        ),
        WidgetDescriptor(
            id="esim-widget",
            target_section="tips",
            dedup_key="esim",
            title="📶 Stay Connected",
            description="Travel eSIM data plans.",
            render_fragment=_tp_script("8588", "541"),
        ),
    )


def render_widget(widget: WidgetDescriptor) -> Tag:
    markup = (
        f'<div class="section-widget" id="{widget.id}" {WIDGET_ATTR}="{widget.dedup_key}" '
        f'{SECTION_ATTR}="{widget.target_section}">'
        f'<h4 class="widget-title">{widget.title}</h4>'
        f'<p class="widget-description">{widget.description}</p>'
        f"{widget.render_fragment}</div>"
    )
    return BeautifulSoup(markup, "html.parser").div.extract()


def dedup_key_of(tag: Tag) -> str | None:
    """Dedup key of a widget root, or None for anything else."""
    if tag.has_attr(WIDGET_ATTR):
        return tag[WIDGET_ATTR]
    if tag.find_parent(attrs={WIDGET_ATTR: True}) is not None:
        return None
    if tag.has_attr("data-gyg-widget"):
        return "activities"
    if tag.name == "script":
        src = tag.get("src", "")
        if GYG_LOADER_URL in src:
            return "gyg-loader"
        if TP_WIDGET_URL in src:
            m = _PROMO_RE.search(src)
            return PROMO_KEYS.get(m.group(1), f"tp-{m.group(1)}") if m else None
    return None


def _widget_roots(soup: BeautifulSoup) -> list[Tag]:
    return soup.find_all(lambda t: dedup_key_of(t) is not None)


def dedupe_widgets(soup: BeautifulSoup) -> bool:
    """Keep the first instance of each dedup key. Returns True when anything was removed."""
    seen: set[str] = set()
    removed = False
    for tag in _widget_roots(soup):
        if tag.decomposed:
            continue
        key = dedup_key_of(tag)
        if key in seen:
            tag.decompose()
            removed = True
        else:
            seen.add(key)
    return removed


def inject_widgets(
    html_doc: str,
    destination: str | None,
    catalog: tuple[WidgetDescriptor, ...] | None = None,
) -> str:
    soup = parse_html(html_doc)
    sections = build_section_tree(soup)
    present = {dedup_key_of(tag) for tag in _widget_roots(soup)}
    changed = False

    for widget in catalog if catalog is not None else widget_catalog(destination):
        if widget.dedup_key in present:
            continue
        section = find_section(sections, widget.target_section)
        if section is None:
            section = synthesize_section(soup, sections, widget.target_section)
        block = render_widget(widget)
        section.last_block().insert_after(block)
        block.insert_before("\n")
        section.nodes.append(block)
        section.widgets.add(widget.dedup_key)
        present.add(widget.dedup_key)
        changed = True

    if dedupe_widgets(soup):
        changed = True
    if not changed:
        return html_doc
    logger.debug(f"Injected widgets for {destination!r}: {sorted(k for k in present if k)}")
    return str(soup)
