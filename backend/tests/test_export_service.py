from app.services.export_service import day_blocks, export_service

RECORD = {
    "destination": "Lisbon",
    "mode": "full",
    "provenance": "fallback",
    "request": {"destination": "Lisbon", "start_date": "2025-05-02", "end_date": "2025-05-03", "adults": 2, "days": 2},
    "html": "<h2>🎯 Trip Overview</h2>\n<p>Trams and tiles — “saudade”.</p>\n<ul><li>Alfama</li></ul>",
    "markdown": (
        "## 🎭 Daily Itineraries\n"
        "### Day 1 — Alfama\n- Morning: [Castelo de São Jorge](https://example.com)\n"
        "### Day 2 — Belém\n- Morning: Jerónimos Monastery\n\n"
        "## 🧳 Don't Forget List\n- Shoes\n"
    ),
    "budget": {"total": 1200, "stay": {"perDay": 246, "total": 492}, "food": {"perDay": 66, "total": 264}},
}


def test_day_blocks_split_on_day_headings():
    blocks = day_blocks(RECORD["markdown"])
    assert [heading for heading, _ in blocks] == ["Day 1 — Alfama", "Day 2 — Belém"]
    assert "Castelo de São Jorge" in blocks[0][1]
    assert "https://" not in blocks[0][1]
    assert "Shoes" not in blocks[1][1]


def test_pdf_renders_non_latin_text():
    pdf = export_service.plan_pdf(RECORD)
    assert pdf.startswith(b"%PDF")


def test_ics_has_one_event_per_day():
    text = export_service.plan_ics(RECORD)
    assert text.count("BEGIN:VEVENT") == 2
    assert "DTSTART:20250502T090000" in text
    assert "Lisbon: Day 2" in text


def test_ics_without_day_headings_uses_trip_length():
    text = export_service.plan_ics({**RECORD, "markdown": ""})
    assert text.count("BEGIN:VEVENT") == 2
