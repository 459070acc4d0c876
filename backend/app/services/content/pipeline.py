"""Compose the content stages into one document transform."""

import logging
from dataclasses import dataclass, field
from datetime import date

import markdown as md

from app.config import settings
from app.services.content.days import ensure_day_sections
from app.services.content.generic_validator import detect_generic_content
from app.services.content.images import resolve_image_tokens
from app.services.content.link_normalizer import normalize_links
from app.services.content.linkify import linkify_tokens
from app.services.content.widgets import inject_widgets

logger = logging.getLogger(__name__)

MARKDOWN_EXTENSIONS = ["tables", "sane_lists"]


@dataclass
class PipelineResult:
    html: str
    markdown: str
    generic_matches: list[str] = field(default_factory=list)

    @property
    def is_generic(self) -> bool:
        return bool(self.generic_matches)


def render_markdown(text: str) -> str:
    return md.markdown(text or "", extensions=MARKDOWN_EXTENSIONS, output_format="html")


def run_pipeline(
    text: str,
    destination: str | None,
    *,
    days: int | None = None,
    start: date | None = None,
    validate: bool = True,
    images_enabled: bool | None = None,
) -> PipelineResult:
    """markdown → final HTML document.

    `days` pads the itinerary with open-exploration blocks first. Validation
    only reports matches; deciding what to do with them is the caller's job.
    """
    if images_enabled is None:
        images_enabled = settings.images_enabled

    if days:
        text = ensure_day_sections(text, days, start)
    source = text
    matches = detect_generic_content(text) if validate else []

    text = linkify_tokens(text, destination)
    text = resolve_image_tokens(text, destination, enabled=images_enabled)
    document = render_markdown(text)
    document = inject_widgets(document, destination)
    document = normalize_links(document)

    if matches:
        logger.warning(f"Generic content in output for {destination!r}: {matches}")
    return PipelineResult(html=document, markdown=source, generic_matches=matches)
