from datetime import date

import pytest

from app.services.booking_advisor import advise, easter_sunday, in_period, matching_observances, trip_advisories


def test_paris_on_bastille_day():
    advisory = advise("Paris, France", "museums", date(2025, 7, 14), "10:00-12:00", 2)
    assert any("Bastille Day" in w for w in advisory.warnings)
    assert any("fireworks" in o for o in advisory.opportunities)
    assert advisory.priority == "medium"
    assert advisory.urgency == "urgent"
    assert not advisory.is_empty()


def test_destination_without_table_entry_is_empty():
    advisory = advise("Atlantis", "activities", "2025-07-14", "10:00-12:00", 2)
    assert advisory.warnings == []
    assert advisory.opportunities == []
    assert advisory.recommendations == []
    assert advisory.priority == "low"
    assert advisory.urgency == "normal"


def test_extreme_crowds_make_urgency_urgent():
    advisory = advise("Munich", "museums", date(2025, 10, 3))
    assert any("Oktoberfest" in w for w in advisory.warnings)
    assert advisory.urgency == "urgent"


def test_closure_is_reported_for_matching_activity():
    advisory = advise("Rome", "museums", date(2025, 4, 25))
    assert any("Liberation Day" in w and "closed" in w for w in advisory.warnings)
    assert advise("Rome", "restaurants", date(2025, 4, 25)).warnings == []


def test_two_warnings_give_high_priority():
    # Golden Week + Cherry Blossom overlap on May 1st in Japan
    advisory = advise("Tokyo", "museums", date(2025, 5, 1))
    assert len(advisory.warnings) >= 2
    assert advisory.priority == "high"


def test_weekend_peak_sets_moderate_urgency():
    saturday = date(2025, 3, 15)
    advisory = advise("Atlantis", "museums", saturday, "10:00-12:00")
    assert any("50% more crowds" in r for r in advisory.recommendations)
    assert advisory.urgency == "moderate"
    assert advisory.priority == "low"


def test_optimal_slot_is_praised():
    advisory = advise("Atlantis", "museums", date(2025, 3, 12), "08:30")
    assert any("optimal time" in r for r in advisory.recommendations)
    assert any("Early bird" in r for r in advisory.recommendations)


@pytest.mark.parametrize("slot", ["night", "19:30", "19:00-20:30"])
def test_dinner_slot_formats(slot):
    advisory = advise("Atlantis", "restaurants", date(2025, 3, 12), slot)
    assert any("dinner" in r.lower() for r in advisory.recommendations)


def test_group_size_recommendations():
    assert any("Large group" in r for r in advise("Atlantis", "museums", date(2025, 3, 12), None, 10).recommendations)
    assert any("Party of 6" in r for r in advise("Atlantis", "restaurants", date(2025, 3, 12), None, 6).recommendations)
    assert any("Solo" in r for r in advise("Atlantis", "activities", date(2025, 3, 12), None, 1).recommendations)


@pytest.mark.parametrize("period,day,expected", [
    ("Sep-Oct", date(2025, 9, 20), True),
    ("Sep-Oct", date(2025, 11, 1), False),
    ("Nov-Jan", date(2026, 1, 10), True),
    ("May", date(2025, 5, 31), True),
    ("Apr 13-15", date(2025, 4, 14), True),
    ("Apr 13-15", date(2025, 4, 16), False),
    ("Apr 29-May 5", date(2025, 5, 2), True),
    ("Dec 29-Jan 3", date(2026, 1, 2), True),
    ("Dec 29-Jan 3", date(2025, 12, 28), False),
    ("Easter Week", date(2025, 4, 18), True),
    ("Easter Week", date(2025, 4, 21), False),
])
def test_in_period(period, day, expected):
    assert in_period(day, period) is expected


def test_easter_dates():
    assert easter_sunday(2024) == date(2024, 3, 31)
    assert easter_sunday(2025) == date(2025, 4, 20)


def test_year_bound_event_only_matches_its_year():
    names_2024 = {o.name for o in matching_observances("Paris", date(2024, 7, 30))}
    names_2025 = {o.name for o in matching_observances("Paris", date(2025, 7, 30))}
    assert "Summer Olympics" in names_2024
    assert "Summer Olympics" not in names_2025


def test_location_bound_event_needs_location():
    assert any(o.name == "Semana Santa" for o in matching_observances("Seville, Spain", date(2025, 4, 17)))
    assert not any(o.name == "Semana Santa" for o in matching_observances("Madrid", date(2025, 4, 17)))


def test_trip_advisories_cover_the_trip_dates():
    notes = trip_advisories("Paris", date(2025, 7, 12), 5)
    assert notes
    assert all(note.startswith("2025-07-1") for note in notes)
    assert any("Bastille Day" in note for note in notes)
    assert trip_advisories("Paris", None, 5) == []
