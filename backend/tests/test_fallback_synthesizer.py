import pytest

from app.services.content.days import count_day_sections
from app.services.content.generic_validator import detect_generic_content
from app.services.content.pipeline import run_pipeline
from app.services.content.sections import CANONICAL_SECTIONS
from app.services.fallback_synthesizer import synthesize_plan


@pytest.mark.parametrize("trip_fixture", ["paris_trip", "unknown_trip"])
def test_every_canonical_section_is_present(trip_fixture, request):
    trip = request.getfixturevalue(trip_fixture)
    text = synthesize_plan(trip, "full")
    for section in CANONICAL_SECTIONS:
        assert f"## {section.heading}" in text


def test_full_plan_has_one_day_per_trip_day(paris_trip):
    text = synthesize_plan(paris_trip, "full")
    assert paris_trip.days == 5
    assert count_day_sections(text) == 5
    assert "### Day 1 — Arrival & Orientation (2025-07-12)" in text
    assert "### Day 5 — Hidden Corners (2025-07-16)" in text


def test_preview_is_capped(paris_trip):
    text = synthesize_plan(paris_trip, "preview")
    assert count_day_sections(text) == 2
    assert "_Days 3-5 are in the full plan._" in text
    assert "This is a preview" in text


def test_fallback_never_uses_placeholder_phrases(paris_trip, unknown_trip):
    assert detect_generic_content(synthesize_plan(paris_trip, "full")) == []
    assert detect_generic_content(synthesize_plan(unknown_trip, "full")) == []


def test_unknown_destination_is_labelled_as_general(unknown_trip):
    text = synthesize_plan(unknown_trip, "full")
    assert "General suggestion" in text
    assert "for 1 adult." in text
    assert "budget trip to Atlantis" in text


def test_curated_destination_names_real_places(paris_trip):
    text = synthesize_plan(paris_trip, "full")
    assert "General suggestion" not in text


def test_advisories_and_weather_are_included(paris_trip):
    text = synthesize_plan(
        paris_trip, "full",
        advisories=["Bastille Day: expect fireworks"],
        weather={"summary": "Typical summer weather."},
    )
    assert "- Bastille Day: expect fireworks" in text
    assert "**Weather:** Typical summer weather." in text


def test_synthesis_is_deterministic(paris_trip):
    assert synthesize_plan(paris_trip, "full") == synthesize_plan(paris_trip, "full")


def test_rendered_fallback_has_no_unresolved_tokens(paris_trip):
    result = run_pipeline(synthesize_plan(paris_trip, "full"), paris_trip.destination, validate=False)
    assert 'href="map:' not in result.html
    assert 'href="tickets:' not in result.html
    assert "image:" not in result.html
    assert 'id="hotel-widget"' in result.html
    assert "<table>" in result.html
