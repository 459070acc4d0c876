"""Export service — PDF and iCalendar exports of a stored plan."""

import html
import io
import logging
import re
from datetime import date, datetime, time, timedelta

from ics import Calendar, Event
from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from app.services.budget_engine import CATEGORIES
from app.services.content.days import DAY_HEADING_RE
from app.services.content.sections import section_outline

logger = logging.getLogger(__name__)

_LINK_RE = re.compile(r"!?\[([^\]]*)\]\([^)]*\)")
_PUNCT = str.maketrans({"—": "-", "–": "-", "•": "-", "☐": "[ ]", "’": "'", "“": '"', "”": '"'})

DAY_START = time(9, 0)
DAY_LENGTH = timedelta(hours=10)


def _pdf_text(text: str) -> str:
    """Escape for reportlab markup; the base fonts only cover Latin-1."""
    text = (text or "").translate(_PUNCT)
    text = text.encode("latin-1", "ignore").decode("latin-1").strip()
    return html.escape(text, quote=False)


def _plain(markdown: str) -> str:
    text = _LINK_RE.sub(lambda m: m.group(1), markdown or "")
    return re.sub(r"[*_#`]", "", text).strip()


def day_blocks(markdown: str) -> list[tuple[str, str]]:
    """Split itinerary markdown into (heading, body) per "Day N" heading."""
    matches = list(DAY_HEADING_RE.finditer(markdown or ""))
    blocks = []
    for i, m in enumerate(matches):
        end = matches[i + 1].start() if i + 1 < len(matches) else len(markdown)
        chunk = markdown[m.start():end].strip()
        heading, _, body = chunk.partition("\n")
        # stop at the next second-level section
        body = re.split(r"^\s*##\s", body, maxsplit=1, flags=re.MULTILINE)[0]
        blocks.append((_plain(heading), _plain(body)))
    return blocks


class ExportService:
    """Generates PDF and ICS exports."""

    def plan_pdf(self, record: dict) -> bytes:
        """Render a stored plan record as a PDF."""
        buf = io.BytesIO()
        doc = SimpleDocTemplate(buf, pagesize=letter, topMargin=0.5 * inch)
        styles = getSampleStyleSheet()
        elements = []

        request = record.get("request") or {}
        destination = record.get("destination") or request.get("destination") or "Your trip"
        elements.append(Paragraph(_pdf_text(f"{destination} Travel Plan"), styles["Title"]))
        info = [
            f"<b>Dates:</b> {_pdf_text(str(request.get('start_date') or 'flexible'))}"
            f" to {_pdf_text(str(request.get('end_date') or '-'))}",
            f"<b>Travelers:</b> {request.get('adults', 0)} adults, {request.get('children', 0)} children",
            f"<b>Plan:</b> {_pdf_text(record.get('mode', ''))} ({_pdf_text(record.get('provenance', ''))})",
            f"<b>Generated:</b> {date.today().isoformat()}",
        ]
        for line in info:
            elements.append(Paragraph(line, styles["Normal"]))
        elements.append(Spacer(1, 12))

        budget = record.get("budget") or {}
        if budget:
            elements.append(Paragraph("<b>Budget</b>", styles["Heading2"]))
            data = [["Category", "Per day", "Total"]]
            for name in CATEGORIES:
                amount = budget.get(name) or {}
                if amount.get("total"):
                    data.append([name.capitalize(), f"{amount['perDay']:,}", f"{amount['total']:,}"])
            data.append(["Total", "", f"{budget.get('total', 0):,}"])
            table = Table(data, colWidths=[2.5 * inch, 1.5 * inch, 1.5 * inch])
            table.setStyle(TableStyle([
                ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#4F46E5")),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
                ("FONTSIZE", (0, 0), (-1, -1), 9),
                ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
                ("ALIGN", (1, 1), (-1, -1), "RIGHT"),
            ]))
            elements.append(table)
            elements.append(Spacer(1, 12))

        for section in section_outline(record.get("html") or ""):
            title = _pdf_text(section["title"])
            if title:
                elements.append(Paragraph(title, styles["Heading2"]))
            for line in section["paragraphs"]:
                text = _pdf_text(line)
                if text:
                    elements.append(Paragraph(text, styles["Normal"]))
            elements.append(Spacer(1, 8))

        doc.build(elements)
        return buf.getvalue()

    def plan_ics(self, record: dict) -> str:
        """One all-day-ish calendar event per itinerary day."""
        request = record.get("request") or {}
        destination = record.get("destination") or request.get("destination") or "Trip"
        start = request.get("start_date")
        first_day = date.fromisoformat(start) if start else date.today() + timedelta(days=1)

        blocks = day_blocks(record.get("markdown") or "")
        if not blocks:
            days = max(1, int(request.get("days") or 1))
            blocks = [(f"Day {i + 1}", "") for i in range(days)]

        cal = Calendar()
        for i, (heading, body) in enumerate(blocks):
            event = Event()
            event.name = f"{destination}: {heading}"
            event.begin = datetime.combine(first_day + timedelta(days=i), DAY_START)
            event.duration = DAY_LENGTH
            event.description = body
            event.location = destination
            cal.events.add(event)
        logger.info(f"Exported {len(blocks)} calendar events for {destination}")
        return cal.serialize()


export_service = ExportService()
