"""Typed section tree over rendered plan HTML.

A plan is a flat run of block elements; every canonical heading (h1-h3 whose
text matches a known label) or any h2 starts a new section. Widget blocks
carry a `data-widget` marker, so "already injected" is a property of the
section rather than something re-discovered by scanning text.
"""

import re
from dataclasses import dataclass, field

from bs4 import BeautifulSoup, NavigableString, Tag

WIDGET_ATTR = "data-widget"
SECTION_ATTR = "data-widget-section"


@dataclass(frozen=True)
class CanonicalSection:
    key: str
    label: str
    icon: str
    aliases: tuple[str, ...] = ()

    @property
    def heading(self) -> str:
        return f"{self.icon} {self.label}"


CANONICAL_SECTIONS: tuple[CanonicalSection, ...] = (
    CanonicalSection("overview", "Trip Overview", "🎯", ("overview", "trip summary")),
    CanonicalSection("budget", "Budget Breakdown", "💰", ("budget", "cost breakdown")),
    CanonicalSection("getting_around", "Getting Around", "🗺️", ("transportation", "transport")),
    CanonicalSection("accommodation", "Accommodation", "🏨", ("where to stay", "lodging", "hotels")),
    CanonicalSection("must_see", "Must-See Attractions", "🎫", ("attractions", "top sights", "must see")),
    CanonicalSection("dining", "Dining Guide", "🍽️", ("dining", "where to eat", "food")),
    CanonicalSection("daily", "Daily Itineraries", "🎭", ("itinerary", "itineraries", "day by day")),
    CanonicalSection("packing", "Don't Forget List", "🧳", ("packing", "don't forget", "dont forget")),
    CanonicalSection("tips", "Travel Tips", "🛡️", ("tips",)),
    CanonicalSection("apps", "Useful Apps", "📱", ("apps",)),
    CanonicalSection("emergency", "Emergency Info", "🚨", ("emergency",)),
)

SECTIONS_BY_KEY = {s.key: s for s in CANONICAL_SECTIONS}

_NON_WORD_RE = re.compile(r"[^a-z0-9' -]+")
_DAY_RE = re.compile(r"^\W*day\s*\d", re.IGNORECASE)


def _clean(text: str) -> str:
    text = _NON_WORD_RE.sub(" ", text.lower().replace("’", "'"))
    return " ".join(text.split())


def match_canonical(heading_text: str) -> CanonicalSection | None:
    """Map heading text (emoji and punctuation ignored) to a canonical section."""
    text = _clean(heading_text)
    if not text:
        return None
    for section in CANONICAL_SECTIONS:
        if _clean(section.label) in text:
            return section
    for section in CANONICAL_SECTIONS:
        if any(alias in text for alias in section.aliases):
            return section
    return None


@dataclass
class Section:
    key: str | None
    heading: Tag | None
    nodes: list = field(default_factory=list)
    widgets: set[str] = field(default_factory=set)

    def last_block(self) -> Tag | None:
        for node in reversed(self.nodes):
            if isinstance(node, Tag):
                return node
        return self.heading


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html or "", "html.parser")


def _is_boundary(node) -> tuple[bool, CanonicalSection | None]:
    if not isinstance(node, Tag) or node.name not in ("h1", "h2", "h3"):
        return False, None
    text = node.get_text(" ", strip=True)
    if _DAY_RE.match(text):
        # "### Day 1" lives inside Daily Itineraries
        return False, None
    canonical = match_canonical(text)
    if canonical and node.name in ("h2", "h3"):
        return True, canonical
    return node.name == "h2", None


def _widget_keys(node) -> set[str]:
    if not isinstance(node, Tag):
        return set()
    keys = set()
    if node.has_attr(WIDGET_ATTR):
        keys.add(node[WIDGET_ATTR])
    for tag in node.find_all(attrs={WIDGET_ATTR: True}):
        keys.add(tag[WIDGET_ATTR])
    return keys


def build_section_tree(soup: BeautifulSoup) -> list[Section]:
    """Split top-level nodes into sections. The first section may be a headless preamble."""
    sections: list[Section] = [Section(key=None, heading=None)]
    for node in list(soup.contents):
        boundary, canonical = _is_boundary(node)
        if boundary:
            sections.append(Section(key=canonical.key if canonical else None, heading=node))
            continue
        current = sections[-1]
        current.nodes.append(node)
        current.widgets |= _widget_keys(node)
    if not sections[0].nodes:
        sections.pop(0)
    return sections


def find_section(sections: list[Section], key: str) -> Section | None:
    for section in sections:
        if section.key == key:
            return section
    return None


def synthesize_section(soup: BeautifulSoup, sections: list[Section], key: str) -> Section:
    """Append a canonical heading for a missing section and return it."""
    canonical = SECTIONS_BY_KEY[key]
    heading = soup.new_tag("h2")
    heading.string = canonical.heading
    if soup.contents and not (isinstance(soup.contents[-1], NavigableString) and soup.contents[-1].endswith("\n")):
        soup.append("\n")
    soup.append(heading)
    soup.append("\n")
    section = Section(key=key, heading=heading)
    sections.append(section)
    return section


def section_outline(html: str) -> list[dict]:
    """Plain-text outline ({title, key, paragraphs}) used by the exporters."""
    soup = parse_html(html)
    outline = []
    for section in build_section_tree(soup):
        lines = []
        for node in section.nodes:
            if not isinstance(node, Tag) or node.has_attr(WIDGET_ATTR) or node.name == "script":
                continue
            if node.name in ("ul", "ol"):
                lines.extend(f"• {li.get_text(' ', strip=True)}" for li in node.find_all("li"))
            elif node.name == "table":
                for row in node.find_all("tr"):
                    cells = [c.get_text(" ", strip=True) for c in row.find_all(["th", "td"])]
                    lines.append(" | ".join(cells))
            else:
                text = node.get_text(" ", strip=True)
                if text:
                    lines.append(text)
        outline.append({
            "title": section.heading.get_text(" ", strip=True) if section.heading else "",
            "key": section.key,
            "paragraphs": lines,
        })
    return outline
