"""Tests for event normalization, ordering and deduplication."""

import pytest

from econ_timeline.ingestion.preprocessors.event_normalizer import (
    EventNormalizer,
    classify_category,
    deduplicate_events,
    sort_events,
)


@pytest.fixture(scope="module")
def normalizer():
    return EventNormalizer()


class TestClassifyCategory:
    @pytest.mark.parametrize(
        "title,expected",
        [
            ("Thanksgiving Day (Market Closed)", "holiday"),
            ("BoE Interest Rate Decision", "central_bank"),
            ("ADP Employment Change", "employment"),
            ("German Flash CPI", "inflation"),
            ("Pending Home Sales m/m", "housing"),
            ("Chicago PMI", "other"),
        ],
    )
    def test_keywords(self, title, expected):
        assert classify_category(title) == expected


class TestNormalizeEvent:
    """Test per-event normalization."""

    def test_attaches_catalog_metadata(self, normalizer, make_event):
        event = normalizer.normalize_event(make_event(title="CPI m/m", category=None))

        assert event.indicator_id == "us_cpi_mom"
        assert event.category == "inflation"
        assert event.description
        assert event.typical_reaction
        assert event.related_assets

    def test_provider_fields_win(self, normalizer, make_event):
        event = normalizer.normalize_event(
            make_event(title="CPI m/m", category="growth", description="Provider text")
        )
        assert event.category == "growth"
        assert event.description == "Provider text"

    def test_unknown_title_uses_keywords(self, normalizer, make_event):
        event = normalizer.normalize_event(make_event(title="Chicago PMI Manufacturing", category=None))

        assert event.indicator_id is None
        assert event.category == "manufacturing"
        assert event.frequency == "Variable"
        assert event.related_assets == []

    def test_invalid_impact_and_time(self, normalizer, make_event):
        event = normalizer.normalize_event(make_event(impact="critical", time="8:30am"))
        assert event.impact == "low"
        assert event.time == "Tentative"

    def test_sentinel_time_kept(self, normalizer, make_event):
        assert normalizer.normalize_event(make_event(time="All Day")).time == "All Day"

    def test_source_defaulted(self, normalizer, make_event):
        assert normalizer.normalize_event(make_event(source=None), source="treasury").source == "treasury"
        assert normalizer.normalize_event(make_event(source=None)).source == "unknown"

    def test_title_whitespace_collapsed(self, normalizer, make_event):
        assert normalizer.normalize_event(make_event(title="  CPI   m/m ")).title == "CPI m/m"

    def test_metadata_containers_are_copies(self, normalizer, make_event):
        first = normalizer.normalize_event(make_event())
        first.related_assets.append("XYZ")
        second = normalizer.normalize_event(make_event())
        assert "XYZ" not in second.related_assets


class TestNormalize:
    def test_drops_invalid(self, normalizer, make_event):
        events = [make_event(), make_event(day="2025-02-30"), make_event(title="   ")]
        assert len(normalizer.normalize(events)) == 1

    def test_coerced_events_pass_validation(self, normalizer, make_event):
        events = [make_event(impact="critical", time="8:30am", source=None), make_event(title=None)]

        normalized = normalizer.normalize(events, source="treasury")

        assert [(e.impact, e.time, e.source) for e in normalized] == [("low", "Tentative", "treasury")]


class TestOrderingAndDedup:
    """Test sort and first-wins deduplication."""

    def test_sort_by_date_then_time(self, make_event):
        events = [
            make_event(title="B", day="2025-06-12", time="12:30"),
            make_event(title="A", day="2025-06-11", time="14:00"),
            make_event(title="C", day="2025-06-11", time="12:30"),
        ]
        assert [e.title for e in sort_events(events)] == ["C", "A", "B"]

    def test_sort_is_stable(self, make_event):
        events = [make_event(title="first"), make_event(title="second")]
        assert [e.title for e in sort_events(events)] == ["first", "second"]

    def test_first_copy_wins(self, make_event):
        events = [make_event(source="fred"), make_event(source="other"), make_event(title="PPI m/m")]
        unique = deduplicate_events(events)

        assert [(e.title, e.source) for e in unique] == [("CPI m/m", "fred"), ("PPI m/m", "fred")]

    def test_dedup_idempotent(self, make_event):
        events = [make_event(), make_event(), make_event(day="2025-07-15")]
        once = deduplicate_events(events)
        assert deduplicate_events(once) == once
